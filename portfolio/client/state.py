"""
Application state shared by the frontend data layer.

``AppState`` is the single shape of UI and auth state. ``StateStore`` owns one
instance: it is read from disk once when the store is created and written
back after every mutation. Only ``PERSISTED_FIELDS`` ever reach the file;
loading flags and error messages live for the session only.
"""
import json
import os
import tempfile
import threading
from dataclasses import asdict, dataclass, field, fields
from typing import Any, Dict, Optional

from portfolio.utils.logger import get_logger

logger = get_logger(__name__)

PERSISTED_FIELDS = ('current_user', 'auth_token', 'is_authenticated', 'theme_mode', 'font_scale', 'active_tab')
THEME_MODES = ('light', 'dark')
MIN_FONT_SCALE = 0.5
MAX_FONT_SCALE = 2.0


def _empty_contact_status():
    return {'is_submitting': False, 'success_message': None, 'error_message': None}


@dataclass
class AppState:
    current_user: Optional[Dict[str, Any]] = None
    auth_token: Optional[str] = None
    is_authenticated: bool = False
    theme_mode: str = 'light'
    font_scale: float = 1.0
    active_tab: str = 'home'
    active_nav_section: str = 'home'
    is_mobile_menu_open: bool = False
    # transient
    is_loading: bool = False
    error_message: Optional[str] = None
    contact_form_status: Dict[str, Any] = field(default_factory=_empty_contact_status)

    def persisted(self):
        return {name: getattr(self, name) for name in PERSISTED_FIELDS}

    @classmethod
    def from_persisted(cls, data):
        known = {f.name for f in fields(cls)}
        values = {key: value for key, value in (data or {}).items() if key in PERSISTED_FIELDS and key in known}
        state = cls(**values)
        if state.theme_mode not in THEME_MODES:
            state.theme_mode = 'light'
        if not isinstance(state.font_scale, (int, float)) or not MIN_FONT_SCALE <= state.font_scale <= MAX_FONT_SCALE:
            state.font_scale = 1.0
        if not state.auth_token:
            state.current_user = None
            state.is_authenticated = False
        return state


class StateStore:
    """Owns the ``AppState``; ``path=None`` keeps it in memory only."""

    def __init__(self, path=None):
        self.path = path
        self._lock = threading.RLock()
        self._state = self._load()

    @property
    def state(self):
        return self._state

    def snapshot(self):
        with self._lock:
            return asdict(self._state)

    # --- Persistence ---
    def _load(self):
        if not self.path or not os.path.exists(self.path):
            return AppState()
        try:
            with open(self.path, encoding='utf-8') as fh:
                data = json.load(fh)
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable state file %s: %s", self.path, exc)
            return AppState()
        if not isinstance(data, dict):
            logger.warning("Ignoring state file %s: expected an object, got %s", self.path, type(data).__name__)
            return AppState()
        return AppState.from_persisted(data)

    def _save(self):
        if not self.path:
            return
        directory = os.path.dirname(os.path.abspath(self.path))
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=directory, prefix='.state-', suffix='.json')
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as fh:
                json.dump(self._state.persisted(), fh)
            os.replace(tmp_path, self.path)
        except OSError:
            os.unlink(tmp_path)
            raise

    def _mutate(self, **changes):
        with self._lock:
            for name, value in changes.items():
                setattr(self._state, name, value)
            if any(name in PERSISTED_FIELDS for name in changes):
                self._save()
            return self._state

    # --- Auth ---
    def auth_started(self):
        return self._mutate(is_loading=True, error_message=None)

    def login_succeeded(self, user, token):
        return self._mutate(
            current_user=user, auth_token=token, is_authenticated=True, is_loading=False, error_message=None
        )

    def login_failed(self, message):
        return self._mutate(
            current_user=None, auth_token=None, is_authenticated=False, is_loading=False, error_message=message
        )

    def update_current_user(self, user):
        return self._mutate(current_user=user)

    def logout(self):
        return self._mutate(
            current_user=None, auth_token=None, is_authenticated=False, is_loading=False, error_message=None
        )

    def clear_error(self):
        return self._mutate(error_message=None)

    # --- Preferences ---
    def set_theme_mode(self, mode):
        if mode not in THEME_MODES:
            raise ValueError(f'theme_mode must be one of {THEME_MODES}')
        return self._mutate(theme_mode=mode)

    def toggle_theme_mode(self):
        return self.set_theme_mode('dark' if self._state.theme_mode == 'light' else 'light')

    def set_font_scale(self, scale):
        if not MIN_FONT_SCALE <= scale <= MAX_FONT_SCALE:
            raise ValueError(f'font_scale must be between {MIN_FONT_SCALE} and {MAX_FONT_SCALE}')
        return self._mutate(font_scale=float(scale))

    # --- Navigation ---
    def set_active_tab(self, tab):
        return self._mutate(active_tab=tab)

    def set_active_nav_section(self, section):
        return self._mutate(active_nav_section=section)

    def toggle_mobile_menu(self):
        return self._mutate(is_mobile_menu_open=not self._state.is_mobile_menu_open)

    def close_mobile_menu(self):
        return self._mutate(is_mobile_menu_open=False)

    # --- Contact form ---
    def set_contact_form_status(self, **changes):
        status = {**self._state.contact_form_status, **changes}
        return self._mutate(contact_form_status=status)
