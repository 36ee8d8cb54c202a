"""
Gate Decorators

Per-route guards for protected screens.
"""

from functools import wraps
from flask import abort, flash, redirect, request, url_for
from flask_login import current_user
from gallery.gate.policy import GateOutcome, decide_access, select_blocked_message
from gallery.services.accounts import fetch_blocked_flag

ACCESS_CHECK_FAILED = 'We could not verify your access. Please sign in again.'


def _current_identity():
    if getattr(current_user, 'is_authenticated', False):
        return current_user
    return None


def _fetch_blocked(identity):
    return fetch_blocked_flag(identity.id)


def guard_route(require_unblocked=False):
    """Require a signed-in account, and optionally an approved one.

    Unauthenticated requests and failed checks go to the auth page; accounts
    pending approval go to the holding page with an explanation.
    """
    def decorator(f):
        @wraps(f)
        def wrapper(*args, **kwargs):
            decision = decide_access(_current_identity, _fetch_blocked, require_unblocked)
            if decision.outcome is GateOutcome.AUTH_REDIRECT:
                if decision.error is not None:
                    flash(ACCESS_CHECK_FAILED, 'danger')
                return redirect(url_for('auth.login'))
            if decision.outcome is GateOutcome.HOLDING_REDIRECT:
                flash(select_blocked_message(request.path), 'warning')
                return redirect(url_for('public.welcome'))
            return f(*args, **kwargs)
        return wrapper
    return decorator


def admin_required(f):
    """Decorator to ensure the request is from a signed-in administrator."""
    @wraps(f)
    def wrapper(*args, **kwargs):
        if not getattr(current_user, 'is_authenticated', False):
            return redirect(url_for('auth.login'))
        if not current_user.is_admin:
            abort(403)
        return f(*args, **kwargs)
    return wrapper
