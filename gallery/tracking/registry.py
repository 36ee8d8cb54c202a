"""
Tracking Registry

Holds the live trackers of every tab this process serves, keyed by session
id (site visits) and view id (artwork views), and builds new ones with the
application's store, geolocator, executor and timer settings.
"""

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from gallery.datastore import datastore
from gallery.services.geolocation import Geolocator
from gallery.tracking.scheduling import BEFORE_UNLOAD, InlineExecutor, RepeatingTimer
from gallery.tracking.session import get_or_create_session_id, get_session_id
from gallery.tracking.store import TrackingStore
from gallery.tracking.tracker import ObraViewTracker, SiteVisitTracker, TrackingContext

logger = logging.getLogger(__name__)

HEARTBEAT = 'heartbeat'


class UnknownTracker(LookupError):
    """Raised when a beacon names a tracker that is not live."""


class TrackingRegistry:

    def __init__(self, store, geolocator, executor=None, timer_factory=RepeatingTimer,
                 interval=30, idle_timeout=300, clock=time.monotonic):
        self.store = store
        self.geolocator = geolocator
        self.executor = executor if executor is not None else InlineExecutor()
        self.timer_factory = timer_factory
        self.interval = interval
        self.idle_timeout = idle_timeout
        self.clock = clock
        self._contexts = {}
        self._visits = {}
        self._views = {}
        self._lock = threading.Lock()

    @classmethod
    def from_app(cls, app):
        config = app.config
        if config['TRACKING_INLINE']:
            executor = InlineExecutor()
        else:
            executor = ThreadPoolExecutor(max_workers=config['TRACKING_WORKERS'],
                                          thread_name_prefix='tracking')
        return cls(
            store=TrackingStore(datastore),
            geolocator=Geolocator.from_config(config),
            executor=executor,
            interval=config['TRACKING_UPDATE_INTERVAL'],
            idle_timeout=config['TRACKING_IDLE_TIMEOUT'],
        )

    def _tracker_kwargs(self, remote_addr):
        return {
            'remote_addr': remote_addr,
            'clock': self.clock,
            'timer_factory': self.timer_factory,
            'executor': self.executor,
            'interval': self.interval,
        }

    def _context_for(self, session_id, storage):
        context = self._contexts.get(session_id)
        if context is None:
            context = TrackingContext(storage)
            self._contexts[session_id] = context
        # The Flask session proxy is per request; keep the latest one
        context.storage = storage
        return context

    # -- site visits ---------------------------------------------------------

    def start_site_visit(self, storage, remote_addr=None):
        session_id = get_or_create_session_id(storage)
        with self._lock:
            tracker = self._visits.get(session_id)
            if tracker is None:
                context = self._context_for(session_id, storage)
                # A torn-down tracker must be replaced by a fresh one
                context.site_visit_started = False
                tracker = SiteVisitTracker(context, self.store, self.geolocator,
                                           **self._tracker_kwargs(remote_addr))
                self._visits[session_id] = tracker
        tracker.initialize()
        tracker.touch()
        return tracker

    def site_visit(self, session_id):
        tracker = self._visits.get(session_id)
        if tracker is None:
            raise UnknownTracker(f'No live visit tracker for session {session_id}')
        return tracker

    # -- artwork views -------------------------------------------------------

    def start_obra_view(self, storage, obra_id, remote_addr=None):
        session_id = get_session_id(storage)
        with self._lock:
            # Only a live visit owns a context; views never add one
            context = self._contexts.get(session_id) if session_id else None
        if context is None:
            context = TrackingContext(storage)
        tracker = ObraViewTracker(context, obra_id, self.store, self.geolocator,
                                  **self._tracker_kwargs(remote_addr))
        tracker.initialize()
        if tracker.view_id is not None:
            with self._lock:
                self._views[tracker.view_id] = tracker
        return tracker

    def obra_view(self, view_id):
        tracker = self._views.get(view_id)
        if tracker is None:
            raise UnknownTracker(f'No live view tracker {view_id}')
        return tracker

    # -- beacons -------------------------------------------------------------

    def dispatch(self, tracker, event):
        """Apply a browser beacon to ``tracker``.

        "beforeunload" fires the hook and then tears the tracker down.
        """
        tracker.touch()
        if event == HEARTBEAT:
            return None
        tracker.events.emit(event)
        if event == BEFORE_UNLOAD:
            self.release(tracker)
        return tracker.elapsed_seconds()

    def release(self, tracker):
        with self._lock:
            if isinstance(tracker, SiteVisitTracker):
                self._visits.pop(tracker.session_id, None)
                self._contexts.pop(tracker.session_id, None)
            else:
                self._views.pop(tracker.view_id, None)
        return tracker.teardown()

    def sweep(self):
        """Tear down trackers whose tab stopped sending beacons."""
        with self._lock:
            stale = [t for t in list(self._visits.values()) + list(self._views.values())
                     if t.idle_for() > self.idle_timeout]
        for tracker in stale:
            logger.info('Releasing idle tracker %r', tracker)
            self.release(tracker)
        return len(stale)

    def shutdown(self):
        with self._lock:
            trackers = list(self._visits.values()) + list(self._views.values())
        for tracker in trackers:
            self.release(tracker)
        self.executor.shutdown(wait=True)
