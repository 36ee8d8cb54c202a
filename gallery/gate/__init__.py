"""
Access Gate

Keeps accounts pending approval on an allow-list of pages.
"""

from gallery.gate.policy import (
    AccessDecision, GateOutcome, BLOCKED_USER_MESSAGES, decide_access,
    is_route_allowed, select_blocked_message,
)
from gallery.gate.decorators import guard_route, admin_required
from gallery.gate.hooks import init_gate

__all__ = [
    'AccessDecision',
    'GateOutcome',
    'BLOCKED_USER_MESSAGES',
    'decide_access',
    'is_route_allowed',
    'select_blocked_message',
    'guard_route',
    'admin_required',
    'init_gate',
]
