"""
Tracking Routes

The browser reports page lifecycle beacons here; the trackers themselves run
server-side in the TrackingRegistry. Each page sends the tab id it keeps in
sessionStorage, as the X-Tab-Id header or a ``tab_id`` body field (beacons
sent with navigator.sendBeacon cannot set headers).
"""

from flask import current_app, jsonify, request, session
from gallery.tracking import tracking_bp
from gallery.tracking.registry import HEARTBEAT, UnknownTracker
from gallery.tracking.scheduling import PAGE_EVENTS
from gallery.tracking.session import (
    TAB_ID_HEADER, TabStorage, clean_tab_id, get_session_id, new_tab_id,
)

BEACON_EVENTS = PAGE_EVENTS + (HEARTBEAT,)


def _registry():
    return current_app.extensions['tracking']


def _payload():
    return request.get_json(silent=True) or {}


def _tab_id():
    return clean_tab_id(request.headers.get(TAB_ID_HEADER)
                        or _payload().get('tab_id')
                        or request.values.get('tab_id'))


def _tab_storage():
    """Storage of the calling tab; empty when the page sent no tab id."""
    tab_id = _tab_id()
    if tab_id is None:
        return {}
    return TabStorage(session, tab_id)


def _beacon_event():
    event = _payload().get('event') or request.form.get('event')
    if event not in BEACON_EVENTS:
        return None
    return event


@tracking_bp.before_request
def release_idle_trackers():
    _registry().sweep()


@tracking_bp.route('/visit', methods=['POST'])
def start_visit():
    """Start (or resume) the site visit of this tab.

    A page without a tab id is given a new one to keep and send back.
    """
    tab_id = _tab_id() or new_tab_id()
    tracker = _registry().start_site_visit(TabStorage(session, tab_id),
                                           remote_addr=request.remote_addr)
    return jsonify({'tab_id': tab_id, 'session_id': tracker.session_id})


@tracking_bp.route('/session')
def current_session():
    return jsonify({'session_id': get_session_id(_tab_storage())})


@tracking_bp.route('/visit/events', methods=['POST'])
def visit_event():
    event = _beacon_event()
    if event is None:
        return jsonify({'error': 'Unknown event'}), 400

    registry = _registry()
    try:
        tracker = registry.site_visit(get_session_id(_tab_storage()))
    except UnknownTracker:
        return jsonify({'error': 'No active visit'}), 404

    elapsed = registry.dispatch(tracker, event)
    return jsonify({'session_id': tracker.session_id, 'event': event, 'elapsed': elapsed})


@tracking_bp.route('/obras/<int:obra_id>/views', methods=['POST'])
def start_obra_view(obra_id):
    """Record a new view of an artwork and return its view count."""
    tracker = _registry().start_obra_view(_tab_storage(), obra_id,
                                          remote_addr=request.remote_addr)
    return jsonify(tracker.snapshot())


@tracking_bp.route('/views/<int:view_id>/events', methods=['POST'])
def obra_view_event(view_id):
    event = _beacon_event()
    if event is None:
        return jsonify({'error': 'Unknown event'}), 400

    registry = _registry()
    try:
        tracker = registry.obra_view(view_id)
    except UnknownTracker:
        return jsonify({'error': 'No active view'}), 404
    if tracker.session_id != get_session_id(_tab_storage()):
        return jsonify({'error': 'No active view'}), 404

    elapsed = registry.dispatch(tracker, event)
    return jsonify({'view_id': view_id, 'event': event, 'elapsed': elapsed})
