import pytest

from gallery.datastore import DataStoreError, datastore
from gallery.models import SiteVisit


def test_table_operations(app):
    with app.app_context():
        row = datastore.insert('site_visits', {'session_id': 'tab-9', 'ip_address': '203.0.113.5'})
        assert row['id'] is not None
        assert row['duration_seconds'] == 0

        assert datastore.count('site_visits', session_id='tab-9') == 1
        assert datastore.update('site_visits', {'country': 'Kenya'}, session_id='tab-9') == 1
        assert datastore.select('site_visits', session_id='tab-9')[0]['country'] == 'Kenya'
        assert datastore.select('site_visits', SiteVisit.duration_seconds > 10) == []

        assert datastore.delete('site_visits', session_id='tab-9') == 1
        assert datastore.count('site_visits') == 0


def test_unknown_table_is_an_error(app):
    with app.app_context():
        with pytest.raises(DataStoreError):
            datastore.select('galleries')


def test_database_failures_are_wrapped(app):
    with app.app_context():
        with pytest.raises(DataStoreError):
            datastore.insert('site_visits', {'session_id': None})
