"""
Gate Policy

Pure route classification and the per-navigation access decision.
"""

import enum
import logging
from collections import namedtuple

logger = logging.getLogger(__name__)

HOME_PAGE = '/'
HOLDING_PAGE = '/welcome'
AUTH_PAGE = '/auth'

# Exact paths, and prefixes whose sub-paths are also allowed
ALLOWED_EXACT = (HOME_PAGE,)
ALLOWED_PREFIXES = (HOLDING_PAGE, AUTH_PAGE, '/obras', '/artist')

BLOCKED_USER_MESSAGES = {
    'general_access': 'Your account is awaiting approval. Contact an administrator to unlock it.',
    'my_gallery': 'To create and manage your artworks, ask for your account to be approved first.',
    'profile': 'Editing your profile is available once your account has been approved.',
    'add_artwork': 'Adding artworks requires an account approved by an administrator.',
    'edit_artwork': 'Editing artworks is available once your account has been approved.',
    'analytics': 'Analytics become available after your account is approved.',
    'admin_area': 'The administration area requires an approved account.',
}

# Longest matching prefix wins
MESSAGE_PREFIXES = (
    ('/my-gallery', 'my_gallery'),
    ('/profile', 'profile'),
    ('/admin/new-obra', 'add_artwork'),
    ('/admin/edit-obra', 'edit_artwork'),
    ('/admin/analytics', 'analytics'),
    ('/admin', 'admin_area'),
)


def _matches_prefix(path, prefix):
    return path == prefix or path.startswith(prefix.rstrip('/') + '/')


def is_route_allowed(path):
    """Whether an account pending approval may view ``path``."""
    path = path or HOME_PAGE
    if path in ALLOWED_EXACT:
        return True
    return any(_matches_prefix(path, prefix) for prefix in ALLOWED_PREFIXES)


def select_blocked_message(path):
    """Explain why navigation to ``path`` was blocked."""
    path = path or ''
    best = None
    for prefix, key in MESSAGE_PREFIXES:
        if path.startswith(prefix) and (best is None or len(prefix) > len(best[0])):
            best = (prefix, key)
    if best is None:
        return BLOCKED_USER_MESSAGES['general_access']
    return BLOCKED_USER_MESSAGES[best[1]]


class GateOutcome(enum.Enum):
    ALLOW = 'allow'
    AUTH_REDIRECT = 'auth_redirect'
    HOLDING_REDIRECT = 'holding_redirect'


AccessDecision = namedtuple('AccessDecision', ['outcome', 'error'])


def decide_access(resolve_identity, fetch_blocked, require_unblocked=False):
    """Decide one navigation attempt.

    ``resolve_identity()`` returns the signed-in identity or None and
    ``fetch_blocked(identity)`` returns its approval flag. Any error from
    either is logged and denies access.
    """
    try:
        identity = resolve_identity()
        if identity is None:
            return AccessDecision(GateOutcome.AUTH_REDIRECT, None)
        if not require_unblocked:
            return AccessDecision(GateOutcome.ALLOW, None)
        if fetch_blocked(identity):
            logger.info('Access denied for %r: account pending approval', identity)
            return AccessDecision(GateOutcome.HOLDING_REDIRECT, None)
        return AccessDecision(GateOutcome.ALLOW, None)
    except Exception as e:
        logger.exception('Could not verify access')
        return AccessDecision(GateOutcome.AUTH_REDIRECT, e)
