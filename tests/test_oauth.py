import json
from http import HTTPStatus
from http.cookies import SimpleCookie
from urllib.parse import parse_qs, urlsplit

import pytest

from vending_admin.application.auth.oauth_bridge import GoogleOAuthBridge
from vending_admin.config import get_settings
from vending_admin.domain.admins.entities import AdminIdentity
from vending_admin.interfaces.api.dependencies import get_google_oauth_client
from vending_admin.infrastructure.oauth.google import GoogleIdentity, GoogleOAuthClient
from vending_admin.shared.errors import Unauthorized

from conftest import run

SETTINGS = get_settings()


def _start(client):
    response = client.get('/admin/auth/google', follow_redirects=False)
    assert response.status_code == HTTPStatus.FOUND
    return response


def _callback(client, **params):
    return client.get('/admin/auth/google/callback', params=params, follow_redirects=False)


def _rejection(response):
    location = urlsplit(response.headers['location'])
    assert location.path == SETTINGS.ADMIN_LOGIN_URL
    query = parse_qs(location.query)
    return query['error'][0], query['message'][0]


def _session_cookies(response):
    return [
        header
        for header in response.headers.get_list('set-cookie')
        if header.split('=', 1)[0] in (SETTINGS.ADMIN_TOKEN_COOKIE, SETTINGS.ADMIN_REFRESH_COOKIE, SETTINGS.ADMIN_USER_COOKIE)
        and 'max-age=0' not in header.lower()
    ]


def test_start_redirects_to_google_with_state_cookie(client):
    response = _start(client)

    location = urlsplit(response.headers['location'])
    query = parse_qs(location.query)
    assert f'{location.scheme}://{location.netloc}{location.path}' == SETTINGS.GOOGLE_AUTH_URL
    assert query['client_id'] == [SETTINGS.GOOGLE_CLIENT_ID]
    assert query['access_type'] == ['offline']
    assert query['prompt'] == ['consent']
    assert 'openid' in query['scope'][0].split()
    assert response.cookies[SETTINGS.ADMIN_OAUTH_STATE_COOKIE] == query['state'][0]


def test_start_without_configuration_redirects_with_init_failure(app, client):
    unconfigured = SETTINGS.model_copy(update={'GOOGLE_CLIENT_ID': ''})

    def override():
        return GoogleOAuthClient(unconfigured, None)

    app.dependency_overrides[get_google_oauth_client] = override

    response = _start(client)

    assert _rejection(response) == ('oauth_init_failed', 'Failed to initialize Google sign-in')


def test_callback_authorizes_known_admin(client, create_admin, google):
    admin = create_admin('owner@ampvending.test', name='Owner', role='super_admin', password=None)
    google.identity('Owner@AmpVending.test', sub='google-sub-42')
    state = parse_qs(urlsplit(_start(client).headers['location']).query)['state'][0]

    response = _callback(client, code='auth-code', state=state)

    assert response.status_code == HTTPStatus.FOUND
    assert response.headers['location'] == SETTINGS.ADMIN_HOME_URL
    assert len(_session_cookies(response)) == 3
    assert google.verified_tokens == ['google-id-token']

    user_header = next(h for h in response.headers.get_list('set-cookie') if h.startswith(f'{SETTINGS.ADMIN_USER_COOKIE}='))
    assert 'httponly' not in user_header.lower()
    user = json.loads(SimpleCookie(user_header)[SETTINGS.ADMIN_USER_COOKIE].value)
    assert user == {
        'name': 'Owner',
        'email': 'owner@ampvending.test',
        'avatar': 'https://lh3.googleusercontent.com/avatar.png',
        'role': 'super_admin',
    }

    verify = client.get('/admin/auth/verify')
    assert verify.status_code == HTTPStatus.OK
    assert verify.json()['user']['id'] == str(admin.id)


def test_callback_rejects_unknown_email(client, google):
    google.identity('stranger@example.com')
    state = parse_qs(urlsplit(_start(client).headers['location']).query)['state'][0]

    response = _callback(client, code='auth-code', state=state)

    assert _rejection(response) == ('unauthorized', 'Your Google account is not authorized for admin access')
    assert _session_cookies(response) == []


def test_callback_rejects_inactive_admin(client, create_admin, google):
    create_admin('former@ampvending.test', is_active=False)
    google.identity('former@ampvending.test')
    state = parse_qs(urlsplit(_start(client).headers['location']).query)['state'][0]

    response = _callback(client, code='auth-code', state=state)

    assert _rejection(response)[0] == 'unauthorized'


def test_callback_rejects_different_google_subject(client, create_admin, google):
    create_admin('bound@ampvending.test', oauth_provider='google', oauth_id='original-sub')
    google.identity('bound@ampvending.test', sub='another-sub')
    state = parse_qs(urlsplit(_start(client).headers['location']).query)['state'][0]

    response = _callback(client, code='auth-code', state=state)

    assert _rejection(response)[0] == 'unauthorized'


def test_callback_with_error_is_denied(client):
    _start(client)

    response = _callback(client, error='access_denied')

    assert _rejection(response) == ('oauth_denied', 'Google sign-in was cancelled or denied')


def test_callback_without_code(client):
    state = parse_qs(urlsplit(_start(client).headers['location']).query)['state'][0]

    response = _callback(client, state=state)

    assert _rejection(response) == ('no_code', 'No authorization code received from Google')


def test_callback_with_state_mismatch(client, create_admin, google):
    create_admin('owner@ampvending.test')
    google.identity('owner@ampvending.test')
    _start(client)

    response = _callback(client, code='auth-code', state='forged-state')

    assert _rejection(response)[0] == 'auth_failed'
    assert _session_cookies(response) == []


@pytest.mark.parametrize(
    'setup',
    [
        lambda google: setattr(google, 'token_status', 400),
        lambda google: setattr(google, 'id_token', ''),
        lambda google: google.identity('owner@ampvending.test', aud='someone-else'),
        lambda google: google.identity('owner@ampvending.test', iss='https://evil.example.com'),
        lambda google: google.identity('owner@ampvending.test', verified='false'),
    ],
)
def test_callback_rejects_failed_token_steps(client, create_admin, google, setup):
    create_admin('owner@ampvending.test')
    google.identity('owner@ampvending.test')
    setup(google)
    state = parse_qs(urlsplit(_start(client).headers['location']).query)['state'][0]

    response = _callback(client, code='auth-code', state=state)

    assert _rejection(response) == ('auth_failed', 'Authentication failed. Please try again.')


class StubAdmins:
    def __init__(self, identity):
        self.identity = identity
        self.bound = []

    async def get_by_email(self, email):
        return self.identity

    async def bind_oauth_identity(self, admin_id, *, provider, subject, avatar_url, at):
        self.bound.append((admin_id, provider, subject))
        return self.identity


@pytest.mark.parametrize(
    'identity',
    [
        None,
        AdminIdentity(id='a1', email='former@ampvending.test', name='Former', role='admin', is_active=False),
        AdminIdentity(id='a2', email='bound@ampvending.test', name='Bound', role='admin', oauth_provider='google', oauth_id='original-sub'),
    ],
)
def test_authorize_raises_unauthorized_without_an_active_matching_account(identity):
    admins = StubAdmins(identity)
    bridge = GoogleOAuthBridge(client=None, admins=admins, auth_service=None, activity=None)

    with pytest.raises(Unauthorized) as failure:
        run(bridge.authorize(GoogleIdentity(subject='another-sub', email='someone@ampvending.test')))

    assert failure.value.status_code == HTTPStatus.FORBIDDEN
    assert failure.value.message == 'Your Google account is not authorized for admin access'
    assert admins.bound == []


def test_authorize_binds_the_google_subject():
    admins = StubAdmins(AdminIdentity(id='a3', email='owner@ampvending.test', name='Owner', role='admin'))
    bridge = GoogleOAuthBridge(client=None, admins=admins, auth_service=None, activity=None)

    identity = run(bridge.authorize(GoogleIdentity(subject='google-sub-7', email='owner@ampvending.test')))

    assert identity.id == 'a3'
    assert admins.bound == [('a3', 'google', 'google-sub-7')]
