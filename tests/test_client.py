from urllib.parse import urlsplit

import pytest
import requests
from requests.adapters import BaseAdapter
from requests.structures import CaseInsensitiveDict

from portfolio.client import ApiError, PortfolioClient, StateStore
from portfolio.routes import crud

BASE_URL = 'http://testserver'


class FlaskAdapter(BaseAdapter):
    """Transport adapter that hands requests to a Flask test client."""

    def __init__(self, test_client):
        super().__init__()
        self.test_client = test_client
        self.sent = []

    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):
        url = urlsplit(request.url)
        self.sent.append((request.method, url.path))
        headers = {key: value for key, value in request.headers.items() if key.lower() != 'content-length'}
        result = self.test_client.open(
            url.path, method=request.method, query_string=url.query, data=request.body, headers=headers
        )

        response = requests.Response()
        response.status_code = result.status_code
        response.reason = result.status.partition(' ')[2]
        response.headers = CaseInsensitiveDict(dict(result.headers))
        response._content = result.get_data()
        response.encoding = 'utf-8'
        response.url = request.url
        response.request = request
        return response

    def close(self):
        pass


class OfflineAdapter(BaseAdapter):
    def send(self, request, **kwargs):
        raise requests.exceptions.ConnectionError('network unreachable')

    def close(self):
        pass


@pytest.fixture
def adapter(client):
    return FlaskAdapter(client)


@pytest.fixture
def session(adapter):
    session = requests.Session()
    session.mount(BASE_URL, adapter)
    return session


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / 'app-state.json'


@pytest.fixture
def api(session, state_path):
    return PortfolioClient(BASE_URL, store=StateStore(state_path), session=session)


@pytest.fixture
def signed_in(api):
    api.register('ada@example.com', 'secret1', 'Ada Lovelace')
    return api


def gets(adapter, path):
    return [sent for sent in adapter.sent if sent == ('GET', path)]


def test_health(api):
    assert api.health()['status'] == 'ok'


def test_register_signs_in_and_persists(api, state_path):
    user = api.register('ada@example.com', 'secret1', 'Ada Lovelace')

    assert user['email'] == 'ada@example.com'
    assert api.store.state.is_authenticated is True
    assert api.store.state.is_loading is False
    assert StateStore(state_path).state.auth_token == api.store.state.auth_token


def test_failed_login(api):
    with pytest.raises(ApiError) as excinfo:
        api.login('nobody@example.com', 'secret1')

    assert excinfo.value.status == 401
    assert excinfo.value.error_code == 'INVALID_CREDENTIALS'
    assert api.store.state.error_message == 'Invalid email or password'
    assert api.store.state.is_authenticated is False


def test_initialize_auth_restores_a_saved_session(signed_in, session, state_path):
    restarted = PortfolioClient(BASE_URL, store=StateStore(state_path), session=session)

    assert restarted.initialize_auth() is True
    assert restarted.store.state.current_user['name'] == 'Ada Lovelace'


def test_initialize_auth_forgets_a_rejected_token(signed_in, session, state_path):
    signed_in.store.login_succeeded(signed_in.store.state.current_user, 'garbage')
    restarted = PortfolioClient(BASE_URL, store=StateStore(state_path), session=session)

    assert restarted.initialize_auth() is False
    assert restarted.store.state.auth_token is None
    assert StateStore(state_path).state.is_authenticated is False


def test_initialize_auth_without_token(api):
    assert api.initialize_auth() is False


def test_lists_are_cached_until_a_mutation(signed_in, adapter):
    signed_in.create('skills', {'category': 'Languages', 'name': 'Python'})

    first = signed_in.list('skills', sort_by='name')
    second = signed_in.list('skills', sort_by='name')
    assert first == second
    assert len(gets(adapter, '/api/skills')) == 1

    signed_in.create('skills', {'category': 'Languages', 'name': 'Rust'})
    third = signed_in.list('skills', sort_by='name')

    assert len(gets(adapter, '/api/skills')) == 2
    assert [skill['name'] for skill in third['skills']] == ['Python', 'Rust']


def test_errors_carry_the_envelope(api):
    with pytest.raises(ApiError) as excinfo:
        api.get('skills', 'skill_missing')

    assert excinfo.value.status == 404
    assert excinfo.value.error_code == 'SKILL_NOT_FOUND'
    assert excinfo.value.message == 'Skill not found'


def test_validation_details_are_exposed(signed_in):
    with pytest.raises(ApiError) as excinfo:
        signed_in.create('skills', {'name': 'Python'})

    assert excinfo.value.status == 400
    assert [error['field'] for error in excinfo.value.details] == ['category']


def test_update_and_delete(signed_in):
    skill = signed_in.create('skills', {'category': 'Languages', 'name': 'Python'})

    updated = signed_in.update('skills', skill['skill_id'], {'name': 'Python 3'})
    signed_in.delete('skills', skill['skill_id'])

    assert updated['name'] == 'Python 3'
    with pytest.raises(ApiError):
        signed_in.get('skills', skill['skill_id'])


def test_profile_and_portfolio(signed_in):
    user_id = signed_in.store.state.current_user['user_id']

    updated = signed_in.update_profile(tagline='Hello there')

    assert updated['tagline'] == 'Hello there'
    assert signed_in.store.state.current_user['tagline'] == 'Hello there'
    assert signed_in.get_profile()['user']['tagline'] == 'Hello there'
    assert signed_in.get_portfolio(user_id)['user']['user_id'] == user_id


def test_contact_form_status(signed_in):
    user_id = signed_in.store.state.current_user['user_id']

    signed_in.submit_contact_message({'user_id': user_id, 'name': 'V', 'email': 'v@example.com', 'message': 'Hi'})

    status = signed_in.store.state.contact_form_status
    assert status['is_submitting'] is False
    assert status['success_message']
    assert status['error_message'] is None


def test_contact_form_error(api):
    with pytest.raises(ApiError):
        api.submit_contact_message({'name': 'V', 'email': 'broken', 'message': 'Hi'})

    status = api.store.state.contact_form_status
    assert status['is_submitting'] is False
    assert status['error_message'] == 'Validation failed'


def test_page_visits_can_be_recorded_anonymously(api):
    visit = api.record_page_visit('/projects')

    assert visit['page_path'] == '/projects'
    assert visit['visit_id'].startswith('visit_')


def test_latest_resume_download(signed_in, monkeypatch):
    user_id = signed_in.store.state.current_user['user_id']
    for stamp, url in (('2024-01-01', 'https://cdn.example.com/old.pdf'), ('2024-05-01', 'https://cdn.example.com/new.pdf')):
        monkeypatch.setattr(crud, 'now_iso', lambda stamp=stamp: f'{stamp}T00:00:00+00:00')
        signed_in.create('resume-downloads', {'download_url': url, 'file_format': 'pdf'})

    latest = signed_in.latest_resume_download(user_id)

    assert latest['download_url'] == 'https://cdn.example.com/new.pdf'


def test_logout_clears_state_and_cache(signed_in):
    signed_in.list('skills')

    signed_in.logout()

    assert signed_in.store.state.auth_token is None
    assert len(signed_in.cache) == 0


def test_network_failure(state_path):
    session = requests.Session()
    session.mount(BASE_URL, OfflineAdapter())
    api = PortfolioClient(BASE_URL, store=StateStore(state_path), session=session)

    with pytest.raises(ApiError) as excinfo:
        api.health()

    assert excinfo.value.status is None
    assert excinfo.value.error_code == 'NETWORK_ERROR'
