from datetime import date

from gallery.datastore import DataStoreError
from gallery.extensions import db
from gallery.gate.policy import BLOCKED_USER_MESSAGES
from gallery.models import Obra, ObraView, SiteVisit, User


def messages_text(response):
    return ' '.join(message for _, message in response.get_json()['messages'])


def test_unauthenticated_redirects_to_auth(client):
    r = client.get('/my-gallery')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/auth')

    r = client.get('/admin/users')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/auth')


def test_public_pages_are_open(app, client):
    with app.app_context():
        obra = Obra(title='Blue Hour', created_on=date(2024, 5, 1))
        db.session.add(obra)
        db.session.commit()
        obra_id = obra.id

    r = client.get('/')
    assert r.status_code == 200
    assert [o['title'] for o in r.get_json()['obras']] == ['Blue Hour']

    r = client.get(f'/obras/{obra_id}')
    assert r.status_code == 200
    assert r.get_json()['view_count'] == 0

    assert client.get('/obras/999').status_code == 404


def test_register_creates_pending_account(app, client):
    r = client.post('/auth/register', data={'email': 'New@Example.com', 'password': 'secret-pass'})
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/welcome')

    with app.app_context():
        user = User.query.filter_by(email='new@example.com').first()
        assert user is not None
        assert user.blocked is True

    r = client.post('/auth/register', data={'email': 'new@example.com', 'password': 'secret-pass'})
    assert r.status_code == 400


def test_invalid_login_is_rejected(client, make_user):
    make_user('artist@example.com')
    r = client.post('/auth', data={'email': 'artist@example.com', 'password': 'wrong'})
    assert r.status_code == 401


def test_global_check_sends_blocked_account_to_holding_page(client, make_user, login):
    make_user('pending@example.com', blocked=True)
    login('pending@example.com')

    r = client.post('/admin/new-obra', json={'title': 'Sneaky'})
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/welcome')

    r = client.get('/welcome')
    assert r.status_code == 200
    body = r.get_json()
    assert body['blocked'] is True
    assert BLOCKED_USER_MESSAGES['add_artwork'] in messages_text(r)

    # Allow-listed pages stay reachable
    assert client.get('/').status_code == 200
    assert client.get('/artist/1').status_code == 200


def test_route_guard_rechecks_approval(client, make_user, login):
    make_user('pending@example.com', blocked=True)
    login('pending@example.com')
    # A stale cached flag lets the request past the global check
    with client.session_transaction() as sess:
        sess['account_blocked'] = False

    r = client.get('/my-gallery')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/welcome')

    r = client.get('/welcome')
    assert BLOCKED_USER_MESSAGES['my_gallery'] in messages_text(r)


def test_approved_account_reaches_protected_pages(client, make_user, login):
    make_user('artist@example.com', blocked=False, name='Ana')
    login('artist@example.com')

    r = client.get('/my-gallery')
    assert r.status_code == 200
    assert r.get_json() == {'obras': []}

    r = client.post('/admin/new-obra', json={'title': 'Dunes', 'created_on': '2024-02-03'})
    assert r.status_code == 201
    obra = r.get_json()
    assert obra['owner_name'] == 'Ana'

    r = client.post(f"/admin/edit-obra/{obra['id']}", json={'title': 'Dunes II'})
    assert r.status_code == 200
    assert r.get_json()['title'] == 'Dunes II'

    r = client.post('/profile', json={'description': 'Painter'})
    assert r.status_code == 200
    assert r.get_json()['description'] == 'Painter'


def test_artist_cannot_edit_someone_elses_artwork(app, client, make_user, login):
    owner_id = make_user('owner@example.com', blocked=False)
    make_user('other@example.com', blocked=False)
    with app.app_context():
        obra = Obra(title='Mine', user_id=owner_id)
        db.session.add(obra)
        db.session.commit()
        obra_id = obra.id

    login('other@example.com')
    r = client.post(f'/admin/edit-obra/{obra_id}', json={'title': 'Yours'})
    assert r.status_code == 403


def test_approval_fetch_failure_fails_closed(client, make_user, login, monkeypatch):
    make_user('artist@example.com', blocked=False)
    login('artist@example.com')
    with client.session_transaction() as sess:
        sess['account_blocked'] = False

    def broken_fetch(user_id):
        raise DataStoreError('database unavailable')

    monkeypatch.setattr('gallery.gate.decorators.fetch_blocked_flag', broken_fetch)

    r = client.get('/my-gallery')
    assert r.status_code == 302
    assert r.headers['Location'].endswith('/auth')


def test_global_check_fetch_failure_redirects_to_auth(app, client, make_user, login, monkeypatch):
    make_user('pending@example.com', blocked=True)
    with app.app_context():
        obra = Obra(title='Open Window')
        db.session.add(obra)
        db.session.commit()
        obra_id = obra.id
    login('pending@example.com')

    def broken_fetch(user_id):
        raise DataStoreError('database unavailable')

    monkeypatch.setattr('gallery.gate.hooks.fetch_blocked_flag', broken_fetch)

    # Allow-listed pages are not exempt from the failed check
    for path in (f'/obras/{obra_id}', '/welcome', '/my-gallery'):
        r = client.get(path)
        assert r.status_code == 302
        assert r.headers['Location'].endswith('/auth')

    r = client.get('/auth')
    assert r.status_code == 200
    assert 'could not verify your access' in messages_text(r)


def test_remember_me_is_parsed_from_the_form(client, make_user):
    make_user('artist@example.com')

    r = client.post('/auth', data={'email': 'artist@example.com', 'password': 'secret-pass',
                                     'remember': 'false'})
    assert 'remember_token' not in ' '.join(r.headers.getlist('Set-Cookie'))
    client.get('/auth/logout')

    r = client.post('/auth', data={'email': 'artist@example.com', 'password': 'secret-pass',
                                     'remember': 'on'})
    assert 'remember_token' in ' '.join(r.headers.getlist('Set-Cookie'))


def test_admin_approves_pending_account(app, client, make_user, login):
    pending_id = make_user('pending@example.com', blocked=True)
    make_user('admin@example.com', blocked=False, is_admin=True)
    login('admin@example.com')

    r = client.get('/admin/users')
    assert r.status_code == 200
    assert r.get_json()['users'][0]['email'] == 'pending@example.com'

    r = client.post(f'/admin/users/{pending_id}/approve')
    assert r.status_code == 200
    assert r.get_json() == {'id': pending_id, 'blocked': False}

    with app.app_context():
        assert db.session.get(User, pending_id).blocked is False

    assert client.post('/admin/users/999/approve').status_code == 404


def test_approved_account_is_released_after_visiting_holding_page(client, make_user, login, app):
    user_id = make_user('pending@example.com', blocked=True)
    login('pending@example.com')
    assert client.get('/my-gallery').status_code == 302

    with app.app_context():
        db.session.get(User, user_id).blocked = False
        db.session.commit()

    assert client.get('/welcome').get_json()['blocked'] is False
    assert client.get('/my-gallery').status_code == 200


def test_non_admin_is_forbidden(client, make_user, login):
    make_user('artist@example.com', blocked=False)
    login('artist@example.com')
    assert client.get('/admin/users').status_code == 403
    assert client.post('/admin/users/1/block').status_code == 403


def test_analytics_summary(app, client, make_user, login):
    make_user('admin@example.com', blocked=False, is_admin=True)
    with app.app_context():
        popular = Obra(title='Popular')
        quiet = Obra(title='Quiet')
        db.session.add_all([popular, quiet])
        db.session.commit()
        db.session.add_all([
            SiteVisit(session_id='a', ip_address='203.0.113.1', country='Brazil', duration_seconds=30),
            SiteVisit(session_id='b', ip_address='203.0.113.1', country='Brazil', duration_seconds=90),
            SiteVisit(session_id='c', ip_address='203.0.113.2', country=None, duration_seconds=60),
            ObraView(obra_id=popular.id, session_id='a'),
            ObraView(obra_id=popular.id, session_id='b'),
            ObraView(obra_id=quiet.id, session_id='c'),
        ])
        db.session.commit()

    login('admin@example.com')
    stats = client.get('/admin/analytics').get_json()

    assert stats['total_visits'] == 3
    assert stats['unique_visitors'] == 2
    assert stats['total_obra_views'] == 3
    assert stats['avg_duration'] == 60
    assert stats['avg_duration_display'] == '1m 0s'
    assert stats['top_obras'][0]['obra']['title'] == 'Popular'
    assert stats['top_obras'][0]['views'] == 2
    assert stats['top_countries'] == [{'country': 'Brazil', 'visits': 2}]
