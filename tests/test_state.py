import json

import pytest

from portfolio.client.state import AppState, PERSISTED_FIELDS, StateStore


@pytest.fixture
def state_path(tmp_path):
    return tmp_path / 'state' / 'app-state.json'


def test_defaults():
    state = AppState()

    assert state.theme_mode == 'light'
    assert state.font_scale == 1.0
    assert state.active_tab == 'home'
    assert state.is_authenticated is False


def test_only_the_persisted_subset_is_written(state_path):
    store = StateStore(state_path)
    store.auth_started()
    store.login_succeeded({'user_id': 'user_1', 'name': 'Ada'}, 'token-123')
    store.set_contact_form_status(is_submitting=True)

    saved = json.loads(state_path.read_text())

    assert set(saved) == set(PERSISTED_FIELDS)
    assert saved['auth_token'] == 'token-123'
    assert saved['is_authenticated'] is True
    assert 'is_loading' not in saved
    assert 'error_message' not in saved


def test_state_survives_a_restart(state_path):
    store = StateStore(state_path)
    store.login_succeeded({'user_id': 'user_1'}, 'token-123')
    store.set_theme_mode('dark')
    store.set_font_scale(1.25)
    store.set_active_tab('projects')

    reloaded = StateStore(state_path).state

    assert reloaded.auth_token == 'token-123'
    assert reloaded.current_user == {'user_id': 'user_1'}
    assert reloaded.theme_mode == 'dark'
    assert reloaded.font_scale == 1.25
    assert reloaded.active_tab == 'projects'
    assert reloaded.is_loading is False
    assert reloaded.error_message is None


def test_transient_changes_do_not_touch_the_file(state_path):
    store = StateStore(state_path)
    store.toggle_mobile_menu()
    store.set_contact_form_status(success_message='Sent')

    assert not state_path.exists()


def test_logout_clears_auth(state_path):
    store = StateStore(state_path)
    store.login_succeeded({'user_id': 'user_1'}, 'token-123')

    store.logout()

    reloaded = StateStore(state_path).state
    assert reloaded.auth_token is None
    assert reloaded.current_user is None
    assert reloaded.is_authenticated is False


def test_failed_login_records_the_message():
    store = StateStore()
    store.auth_started()

    state = store.login_failed('Invalid email or password')

    assert state.is_loading is False
    assert state.error_message == 'Invalid email or password'
    assert state.is_authenticated is False


def test_preferences_are_validated():
    store = StateStore()

    with pytest.raises(ValueError):
        store.set_theme_mode('sepia')
    with pytest.raises(ValueError):
        store.set_font_scale(2.5)
    assert store.toggle_theme_mode().theme_mode == 'dark'


def test_unreadable_file_starts_fresh(state_path):
    state_path.parent.mkdir(parents=True)
    state_path.write_text('{broken')

    assert StateStore(state_path).state == AppState()


@pytest.mark.parametrize('content', ['[1, 2]', '"token"', 'null', '42'])
def test_state_file_that_is_not_an_object_starts_fresh(state_path, content):
    state_path.parent.mkdir(parents=True)
    state_path.write_text(content)

    assert StateStore(state_path).state == AppState()


def test_loaded_values_are_sanitised(state_path):
    state_path.parent.mkdir(parents=True)
    state_path.write_text(json.dumps({
        'theme_mode': 'neon', 'font_scale': 9, 'is_authenticated': True, 'current_user': {'user_id': 'u'},
        'is_loading': True,
    }))

    state = StateStore(state_path).state

    assert state.theme_mode == 'light'
    assert state.font_scale == 1.0
    assert state.is_authenticated is False
    assert state.current_user is None
    assert state.is_loading is False
