"""
Global Gate Check

Runs before every request so client-side navigations that skip a fresh
per-route guard are still caught. The approval flag is fetched once per
session and cached there.
"""

import logging
from flask import flash, redirect, request, session, url_for
from flask_login import current_user
from gallery.datastore import DataStoreError
from gallery.gate.decorators import ACCESS_CHECK_FAILED
from gallery.gate.policy import is_route_allowed, select_blocked_message
from gallery.services.accounts import fetch_blocked_flag

logger = logging.getLogger(__name__)

BLOCKED_CACHE_KEY = 'account_blocked'

# Requests the global check never redirects
EXEMPT_ENDPOINTS = ('static',)
EXEMPT_PREFIXES = ('/api/tracking',)
AUTH_BLUEPRINT = 'auth'


def forget_approval_state():
    session.pop(BLOCKED_CACHE_KEY, None)


def cached_blocked_flag():
    """Return the account's approval flag, fetching it on first use."""
    blocked = session.get(BLOCKED_CACHE_KEY)
    if blocked is None:
        blocked = fetch_blocked_flag(current_user.id)
        session[BLOCKED_CACHE_KEY] = blocked
    return blocked


def enforce_approval():
    if request.endpoint in EXEMPT_ENDPOINTS:
        return None
    if any(request.path.startswith(prefix) for prefix in EXEMPT_PREFIXES):
        return None
    if not getattr(current_user, 'is_authenticated', False):
        return None

    try:
        blocked = cached_blocked_flag()
    except DataStoreError:
        logger.exception('Could not read approval state for account %s', current_user.get_id())
        # The auth page itself must stay reachable or the redirect would loop
        if request.blueprint == AUTH_BLUEPRINT:
            return None
        flash(ACCESS_CHECK_FAILED, 'danger')
        return redirect(url_for('auth.login'))

    if blocked and not is_route_allowed(request.path):
        flash(select_blocked_message(request.path), 'warning')
        return redirect(url_for('public.welcome'))
    return None


def init_gate(app):
    app.before_request(enforce_approval)
