import pytest

from gallery.datastore import DataStoreError
from gallery.gate.policy import (
    BLOCKED_USER_MESSAGES, GateOutcome, decide_access, is_route_allowed, select_blocked_message,
)


@pytest.mark.parametrize('path, allowed', [
    ('/', True),
    ('/welcome', True),
    ('/auth', True),
    ('/auth/logout', True),
    ('/obras/42', True),
    ('/artist/7', True),
    ('/my-gallery', False),
    ('/profile', False),
    ('/admin/users', False),
    ('/admin/new-obra', False),
    ('/authors', False),
])
def test_route_allow_list(path, allowed):
    assert is_route_allowed(path) is allowed


@pytest.mark.parametrize('path, key', [
    ('/admin/new-obra', 'add_artwork'),
    ('/admin/edit-obra/5', 'edit_artwork'),
    ('/admin/analytics', 'analytics'),
    ('/admin/users', 'admin_area'),
    ('/my-gallery', 'my_gallery'),
    ('/profile', 'profile'),
    ('/unknown/path', 'general_access'),
])
def test_blocked_message_by_longest_prefix(path, key):
    assert select_blocked_message(path) == BLOCKED_USER_MESSAGES[key]


def test_no_identity_redirects_to_auth_regardless_of_approval_requirement():
    for require_unblocked in (True, False):
        decision = decide_access(lambda: None, lambda identity: False, require_unblocked)
        assert decision.outcome is GateOutcome.AUTH_REDIRECT
        assert decision.error is None


def test_blocked_identity_goes_to_holding_page():
    decision = decide_access(lambda: 'artist', lambda identity: True, require_unblocked=True)
    assert decision.outcome is GateOutcome.HOLDING_REDIRECT


def test_approved_identity_is_allowed():
    decision = decide_access(lambda: 'artist', lambda identity: False, require_unblocked=True)
    assert decision.outcome is GateOutcome.ALLOW


def test_approval_not_checked_when_not_required():
    def fetch(identity):
        raise AssertionError('approval flag should not be fetched')

    decision = decide_access(lambda: 'artist', fetch, require_unblocked=False)
    assert decision.outcome is GateOutcome.ALLOW


def test_fetch_failure_fails_closed():
    def fetch(identity):
        raise DataStoreError('connection lost')

    decision = decide_access(lambda: 'artist', fetch, require_unblocked=True)
    assert decision.outcome is GateOutcome.AUTH_REDIRECT
    assert isinstance(decision.error, DataStoreError)


def test_identity_failure_fails_closed():
    def resolve():
        raise RuntimeError('auth provider unavailable')

    decision = decide_access(resolve, lambda identity: False, require_unblocked=False)
    assert decision.outcome is GateOutcome.AUTH_REDIRECT
