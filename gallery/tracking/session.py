"""
Tab Session Identity

The session id lives in tab-scoped storage: any MutableMapping. In the web
layer that is a TabStorage, one tab's slice of the Flask session selected by
the tab id the page keeps in its sessionStorage and sends with every beacon.
"""

import re
import time
import uuid
from collections.abc import MutableMapping

SESSION_ID_KEY = 'gallery_session_id'
VISIT_RECORDED_PREFIX = 'visit_recorded_'

TAB_ID_HEADER = 'X-Tab-Id'
TABS_KEY = 'gallery_tabs'
# Oldest tabs are dropped beyond this to keep the session cookie small
MAX_TABS = 16

_TAB_ID_RE = re.compile(r'[A-Za-z0-9_-]{1,64}')
_SEEN_KEY = '_seen'


def get_or_create_session_id(storage):
    """Return the stored session id, creating and storing one if absent."""
    session_id = storage.get(SESSION_ID_KEY)
    if not session_id:
        session_id = str(uuid.uuid4())
        storage[SESSION_ID_KEY] = session_id
    return session_id


def get_session_id(storage):
    return storage.get(SESSION_ID_KEY)


def visit_recorded_key(session_id):
    return f'{VISIT_RECORDED_PREFIX}{session_id}'


def clean_tab_id(value):
    """Return ``value`` if it is a usable tab id, else None."""
    if isinstance(value, str) and _TAB_ID_RE.fullmatch(value):
        return value
    return None


def new_tab_id():
    return uuid.uuid4().hex


class TabStorage(MutableMapping):
    """The keys one browser tab owns inside a shared session mapping."""

    def __init__(self, session, tab_id, clock=time.time):
        self.session = session
        self.tab_id = tab_id
        self.clock = clock

    def __repr__(self):
        return f'<TabStorage {self.tab_id}>'

    def _data(self):
        return self.session.get(TABS_KEY, {}).get(self.tab_id, {})

    def _save(self, data):
        tabs = dict(self.session.get(TABS_KEY, {}))
        data[_SEEN_KEY] = self.clock()
        tabs[self.tab_id] = data
        while len(tabs) > MAX_TABS:
            oldest = min(tabs, key=lambda tab: tabs[tab].get(_SEEN_KEY, 0))
            del tabs[oldest]
        # Reassigning marks a cookie session as modified
        self.session[TABS_KEY] = tabs

    def __getitem__(self, key):
        if key == _SEEN_KEY:
            raise KeyError(key)
        return self._data()[key]

    def __setitem__(self, key, value):
        data = dict(self._data())
        data[key] = value
        self._save(data)

    def __delitem__(self, key):
        data = dict(self._data())
        del data[key]
        self._save(data)

    def __iter__(self):
        return (key for key in self._data() if key != _SEEN_KEY)

    def __len__(self):
        return sum(1 for _ in self)
