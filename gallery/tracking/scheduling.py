"""
Timers, page hooks and executors used by the dwell trackers.
"""

import logging
import threading
from concurrent.futures import Future

logger = logging.getLogger(__name__)

# Page hook names sent by the browser
HIDDEN = 'hidden'
BEFORE_UNLOAD = 'beforeunload'
PAGE_EVENTS = (HIDDEN, BEFORE_UNLOAD)


class RepeatingTimer:
    """Calls ``callback`` every ``interval`` seconds on a daemon thread."""

    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self._stopped = threading.Event()
        self._thread = None

    def start(self):
        self._thread = threading.Thread(target=self._run, daemon=True,
                                        name='dwell-timer')
        self._thread.start()

    def _run(self):
        while not self._stopped.wait(self.interval):
            try:
                self.callback()
            except Exception:
                logger.exception('Timer callback failed')

    def cancel(self):
        self._stopped.set()


class PageEvents:
    """Named hooks for one tracked page ("hidden", "beforeunload")."""

    def __init__(self):
        self._listeners = {}

    def add_listener(self, event, callback):
        self._listeners.setdefault(event, []).append(callback)

    def remove_listener(self, event, callback):
        callbacks = self._listeners.get(event, [])
        if callback in callbacks:
            callbacks.remove(callback)

    def listeners(self, event):
        return list(self._listeners.get(event, []))

    def emit(self, event):
        if event not in PAGE_EVENTS:
            raise ValueError(f'Unknown page event {event!r}')
        for callback in self.listeners(event):
            callback()


class InlineExecutor:
    """Executor stand-in that runs work immediately in the caller's thread."""

    def submit(self, fn, *args, **kwargs):
        future = Future()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def shutdown(self, wait=True):
        pass
