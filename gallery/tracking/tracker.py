"""
Dwell Trackers

A tracker records one entity (the whole-site visit or a single artwork
view), then reports how long the tab has spent on it: every
``interval`` seconds, when the page is hidden, before it unloads, and once
more on teardown. Each report overwrites the stored duration with the
absolute elapsed time, so repeated or interleaved reports are harmless.

Reporting is best-effort. Failures are logged and dropped; the next
interval reports again.
"""

import enum
import logging
import time
from gallery.services.geolocation import unknown_location
from gallery.tracking.scheduling import (
    BEFORE_UNLOAD, HIDDEN, InlineExecutor, PageEvents, RepeatingTimer,
)
from gallery.tracking.session import get_or_create_session_id, get_session_id, visit_recorded_key

logger = logging.getLogger(__name__)

UPDATE_INTERVAL = 30


class TrackerState(enum.Enum):
    UNINITIALIZED = 'uninitialized'
    RECORDING = 'recording'
    TORN_DOWN = 'torn_down'


class TrackingContext:
    """State shared by the trackers of one browser tab."""

    def __init__(self, storage):
        self.storage = storage
        self.site_visit_started = False


class DwellTracker:
    """Timer, hooks and duration reporting shared by both trackers."""

    def __init__(self, context, store, geolocator, remote_addr=None, events=None,
                 clock=time.monotonic, timer_factory=RepeatingTimer,
                 executor=None, interval=UPDATE_INTERVAL):
        self.context = context
        self.store = store
        self.geolocator = geolocator
        self.remote_addr = remote_addr
        self.events = events if events is not None else PageEvents()
        self.clock = clock
        self.timer_factory = timer_factory
        self.executor = executor if executor is not None else InlineExecutor()
        self.interval = interval
        self.state = TrackerState.UNINITIALIZED
        self.started_at = clock()
        self.last_seen = self.started_at
        self._timer = None

    def elapsed_seconds(self):
        return max(0, int(self.clock() - self.started_at))

    def touch(self):
        self.last_seen = self.clock()

    def idle_for(self):
        return self.clock() - self.last_seen

    @property
    def is_recording(self):
        return self.state is TrackerState.RECORDING

    def _has_target(self):
        raise NotImplementedError

    def _write_duration(self, seconds):
        raise NotImplementedError

    def _safe_write(self, seconds):
        try:
            self._write_duration(seconds)
        except Exception as e:
            logger.warning('Duration report failed for %r: %s', self, e)

    def report_duration(self):
        """Write the absolute elapsed time; returns the reported seconds."""
        if not self._has_target():
            return None
        seconds = self.elapsed_seconds()
        self._safe_write(seconds)
        return seconds

    def _start_recording(self):
        self._timer = self.timer_factory(self.interval, self.report_duration)
        self._timer.start()
        self.events.add_listener(HIDDEN, self.report_duration)
        self.events.add_listener(BEFORE_UNLOAD, self.report_duration)
        self.state = TrackerState.RECORDING

    def teardown(self):
        """Stop the timer, drop the hooks and fire one final report.

        The final write is handed to the executor and not awaited; it can
        be lost if the process dies first.
        """
        if self.state is TrackerState.TORN_DOWN:
            return None
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None
        self.events.remove_listener(HIDDEN, self.report_duration)
        self.events.remove_listener(BEFORE_UNLOAD, self.report_duration)
        self.state = TrackerState.TORN_DOWN

        if not self._has_target():
            return None
        seconds = self.elapsed_seconds()
        self.executor.submit(self._safe_write, seconds)
        return seconds


class SiteVisitTracker(DwellTracker):
    """Tracks the whole-site visit of one tab session."""

    def __init__(self, context, store, geolocator, **kwargs):
        super().__init__(context, store, geolocator, **kwargs)
        self.session_id = None

    def __repr__(self):
        return f'<SiteVisitTracker {self.session_id} {self.state.value}>'

    def _has_target(self):
        return self.session_id is not None

    def _write_duration(self, seconds):
        self.store.update_visit_duration(self.session_id, seconds)

    def initialize(self):
        """Start tracking once per tab; later calls just return the session id."""
        if self.context.site_visit_started:
            return get_or_create_session_id(self.context.storage)

        storage = self.context.storage
        self.session_id = get_or_create_session_id(storage)

        marker = visit_recorded_key(self.session_id)
        if not storage.get(marker):
            # Marked before the lookup finishes: at most one creation attempt
            storage[marker] = True
            self.executor.submit(self._record_visit, self.session_id)

        self.context.site_visit_started = True
        self._start_recording()
        return self.session_id

    def _record_visit(self, session_id):
        try:
            geo = self.geolocator.locate(self.remote_addr)
        except Exception as e:
            logger.warning('Geolocation failed, recording visit without geo: %s', e)
            geo = unknown_location()
        try:
            self.store.record_site_visit(session_id, geo)
        except Exception as e:
            logger.warning('Could not record site visit for %s: %s', session_id, e)


class ObraViewTracker(DwellTracker):
    """Tracks one mount of an artwork detail page.

    Every call to initialize() creates a new view record, including
    repeated mounts within the same session.
    """

    def __init__(self, context, obra_id, store, geolocator, **kwargs):
        super().__init__(context, store, geolocator, **kwargs)
        self.obra_id = obra_id
        self.session_id = None
        self.view_id = None
        self.view_count = 0

    def __repr__(self):
        return f'<ObraViewTracker obra:{self.obra_id} view:{self.view_id} {self.state.value}>'

    @property
    def is_tracking(self):
        return self.is_recording

    def _has_target(self):
        return self.view_id is not None

    def _write_duration(self, seconds):
        self.store.update_obra_view_duration(self.view_id, seconds)

    def initialize(self):
        if self.obra_id is None or self.state is not TrackerState.UNINITIALIZED:
            return self.is_tracking

        session_id = get_session_id(self.context.storage)
        if not session_id:
            logger.warning('No session id found; artwork view tracking not started for %s',
                           self.obra_id)
            return False
        self.session_id = session_id

        try:
            geo = self.geolocator.locate(self.remote_addr)
        except Exception as e:
            logger.warning('Geolocation failed for artwork view: %s', e)
            geo = unknown_location()

        try:
            self.view_id = self.store.record_obra_view(self.obra_id, session_id, geo)
        except Exception as e:
            logger.warning('Could not record view of artwork %s: %s', self.obra_id, e)

        if self.view_id is not None:
            self._start_recording()

        try:
            self.view_count = self.store.count_obra_views(self.obra_id)
        except Exception as e:
            logger.warning('Could not count views of artwork %s: %s', self.obra_id, e)

        return self.is_tracking

    def snapshot(self):
        return {
            'view_id': self.view_id,
            'view_count': self.view_count,
            'is_tracking': self.is_tracking,
        }
