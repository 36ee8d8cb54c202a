from collections import defaultdict

import pytest
from werkzeug.security import generate_password_hash

from gallery import create_app
from gallery.config import TestConfig
from gallery.datastore import DataStoreError
from gallery.extensions import db
from gallery.models import User


class FakeClock:
    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FakeTimer:
    def __init__(self, interval, callback):
        self.interval = interval
        self.callback = callback
        self.started = False
        self.cancelled = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def fire(self):
        if self.started and not self.cancelled:
            self.callback()


class FakeStore:
    def __init__(self):
        self.visits = []
        self.visit_durations = defaultdict(list)
        self.views = []
        self.view_durations = defaultdict(list)
        self.fail_records = False
        self.fail_updates = False

    def record_site_visit(self, session_id, geo):
        if self.fail_records:
            raise DataStoreError('insert failed')
        self.visits.append((session_id, geo))

    def update_visit_duration(self, session_id, seconds):
        if self.fail_updates:
            raise DataStoreError('update failed')
        self.visit_durations[session_id].append(seconds)

    def record_obra_view(self, obra_id, session_id, geo):
        if self.fail_records:
            raise DataStoreError('insert failed')
        self.views.append((obra_id, session_id, geo))
        return len(self.views)

    def update_obra_view_duration(self, view_id, seconds):
        if self.fail_updates:
            raise DataStoreError('update failed')
        self.view_durations[view_id].append(seconds)

    def count_obra_views(self, obra_id):
        return sum(1 for view in self.views if view[0] == obra_id)


class FakeGeolocator:
    def __init__(self, location=None, fail=False):
        self.location = location or {'ip': '203.0.113.7', 'country': 'Portugal', 'city': 'Lisbon'}
        self.fail = fail
        self.calls = []

    def locate(self, remote_addr=None):
        self.calls.append(remote_addr)
        if self.fail:
            raise RuntimeError('lookup service down')
        return dict(self.location)


@pytest.fixture()
def clock():
    return FakeClock()


@pytest.fixture()
def timers():
    return []


@pytest.fixture()
def timer_factory(timers):
    def factory(interval, callback):
        timer = FakeTimer(interval, callback)
        timers.append(timer)
        return timer
    return factory


@pytest.fixture()
def store():
    return FakeStore()


@pytest.fixture()
def geolocator():
    return FakeGeolocator()


@pytest.fixture()
def app(timer_factory):
    app = create_app(TestConfig)
    registry = app.extensions['tracking']
    registry.timer_factory = timer_factory
    registry.geolocator = FakeGeolocator()
    yield app
    registry.shutdown()
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    def _make_user(email, password='secret-pass', blocked=True, is_admin=False, name=None):
        with app.app_context():
            user = User(email=email, password_hash=generate_password_hash(password),
                        blocked=blocked, is_admin=is_admin, name=name)
            db.session.add(user)
            db.session.commit()
            return user.id
    return _make_user


@pytest.fixture()
def login(client):
    def _login(email, password='secret-pass'):
        return client.post('/auth', data={'email': email, 'password': password})
    return _login


@pytest.fixture()
def failing_geolocator():
    return FakeGeolocator(fail=True)
