# portfolio/client/api.py

from typing import Any, Dict, Optional

import requests

from portfolio.client.cache import QueryCache
from portfolio.client.state import StateStore
from portfolio.utils.logger import get_logger

logger = get_logger(__name__)

# cached reads that embed other resources and go stale on any write
AGGREGATES = ('users', 'portfolio')


class ApiError(Exception):
    """An error response (or no response at all) from the portfolio API."""

    def __init__(self, status: Optional[int], message: str, error_code: Optional[str] = None, details: Any = None):
        super().__init__(message)
        self.status = status
        self.message = message
        self.error_code = error_code
        self.details = details

    def __repr__(self):
        return f"ApiError({self.status}, {self.message!r}, {self.error_code!r})"


class PortfolioClient:
    """
    Data layer used by the frontend.

    Reads go through the ``QueryCache``; writes go straight to the API and then
    invalidate the cached reads of the resource they touched. The bearer token
    comes from the ``StateStore``.
    """

    def __init__(self, base_url: str, store: Optional[StateStore] = None, cache: Optional[QueryCache] = None,
                 session: Optional[requests.Session] = None, timeout: int = 30):
        self.base_url = base_url.rstrip('/')
        self.store = store or StateStore()
        self.cache = cache or QueryCache()
        self.session = session or requests.Session()
        self.timeout = timeout

    def _request(self, method: str, path: str, json_data: Optional[Dict[str, Any]] = None,
                 params: Optional[Dict[str, Any]] = None) -> Any:
        url = f"{self.base_url}/api{path}"
        headers = {"Accept": "application/json"}
        token = self.store.state.auth_token
        if token:
            headers["Authorization"] = f"Bearer {token}"

        try:
            response = self.session.request(
                method, url, json=json_data, params=params, headers=headers, timeout=self.timeout
            )
        except requests.exceptions.Timeout as exc:
            logger.error("Request to %s timed out", url)
            raise ApiError(None, "The request timed out. Please try again later.", "TIMEOUT") from exc
        except requests.exceptions.ConnectionError as exc:
            logger.error("Could not connect to %s", url)
            raise ApiError(None, "Could not connect to the server.", "NETWORK_ERROR") from exc

        if response.status_code == 204:
            return None
        if not response.ok:
            raise self._error_from(response)
        return response.json()

    @staticmethod
    def _error_from(response) -> ApiError:
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            return ApiError(response.status_code, response.text or response.reason or "Request failed")
        logger.warning("API error %s %s: %s", response.status_code, body.get("error_code"), body.get("message"))
        return ApiError(
            response.status_code,
            body.get("message") or "Request failed",
            body.get("error_code"),
            body.get("details"),
        )

    def _invalidate(self, resource: str) -> None:
        self.cache.invalidate(resource)
        for aggregate in AGGREGATES:
            self.cache.invalidate(aggregate)

    def _current_user_id(self) -> str:
        user = self.store.state.current_user
        if not user:
            raise ApiError(401, "Not signed in", "AUTH_TOKEN_MISSING")
        return user["user_id"]

    # --- Auth ---
    def _authenticate(self, path: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        self.store.auth_started()
        try:
            data = self._request("POST", path, payload)
        except ApiError as exc:
            self.store.login_failed(exc.message)
            raise
        self.cache.clear()
        self.store.login_succeeded(data["user"], data["token"])
        return data["user"]

    def register(self, email: str, password: str, name: str, **profile) -> Dict[str, Any]:
        return self._authenticate("/auth/register", {"email": email, "password": password, "name": name, **profile})

    def login(self, email: str, password: str) -> Dict[str, Any]:
        return self._authenticate("/auth/login", {"email": email, "password": password})

    def logout(self) -> None:
        self.store.logout()
        self.cache.clear()

    def initialize_auth(self) -> bool:
        """Check a persisted token against the API; forget it if the API refuses it."""
        if not self.store.state.auth_token:
            self.store.logout()
            return False
        self.store.auth_started()
        try:
            me = self._request("GET", "/auth/me")
            profile = self._request("GET", f"/users/{me['user_id']}")
        except ApiError as exc:
            logger.info("Stored session rejected: %s", exc.message)
            self.logout()
            return False
        self.store.login_succeeded(profile["user"], self.store.state.auth_token)
        return True

    # --- Profile ---
    def get_profile(self, user_id: Optional[str] = None) -> Dict[str, Any]:
        user_id = user_id or self._current_user_id()
        key = QueryCache.make_key("users", user_id)
        return self.cache.get(key, lambda: self._request("GET", f"/users/{user_id}"))

    def get_portfolio(self, user_id: str) -> Dict[str, Any]:
        key = QueryCache.make_key("portfolio", user_id)
        return self.cache.get(key, lambda: self._request("GET", f"/portfolio/{user_id}"))

    def update_profile(self, user_id: Optional[str] = None, **changes) -> Dict[str, Any]:
        user_id = user_id or self._current_user_id()
        user = self._request("PATCH", f"/users/{user_id}", changes)
        self._invalidate("users")
        current = self.store.state.current_user
        if current and current.get("user_id") == user_id:
            self.store.update_current_user(user)
        return user

    # --- Resources ---
    def list(self, resource: str, **params) -> Dict[str, Any]:
        key = QueryCache.make_key(resource, params.get("user_id"), params)
        return self.cache.get(key, lambda: self._request("GET", f"/{resource}", params=params))

    def get(self, resource: str, item_id: str) -> Dict[str, Any]:
        key = QueryCache.make_key(resource, None, {"id": item_id})
        return self.cache.get(key, lambda: self._request("GET", f"/{resource}/{item_id}"))

    def create(self, resource: str, data: Dict[str, Any]) -> Dict[str, Any]:
        created = self._request("POST", f"/{resource}", data)
        self._invalidate(resource)
        return created

    def update(self, resource: str, item_id: str, data: Dict[str, Any]) -> Dict[str, Any]:
        updated = self._request("PATCH", f"/{resource}/{item_id}", data)
        self._invalidate(resource)
        return updated

    def delete(self, resource: str, item_id: str) -> None:
        self._request("DELETE", f"/{resource}/{item_id}")
        self._invalidate(resource)

    # --- Visitor actions ---
    def submit_contact_message(self, data: Dict[str, Any]) -> Dict[str, Any]:
        self.store.set_contact_form_status(is_submitting=True, success_message=None, error_message=None)
        try:
            message = self.create("contact-messages", data)
        except ApiError as exc:
            self.store.set_contact_form_status(is_submitting=False, error_message=exc.message)
            raise
        self.store.set_contact_form_status(
            is_submitting=False, success_message="Thank you for your message! I'll get back to you soon."
        )
        return message

    def record_page_visit(self, page_path: str, user_id: Optional[str] = None,
                          referrer: Optional[str] = None) -> Dict[str, Any]:
        return self.create("page-visits", {"page_path": page_path, "user_id": user_id, "referrer": referrer})

    def latest_resume_download(self, user_id: str) -> Optional[Dict[str, Any]]:
        result = self.list("resume-downloads", user_id=user_id, limit=1, sort_by="created_at", sort_order="desc")
        downloads = result.get("resume_downloads", [])
        return downloads[0] if downloads else None

    def health(self) -> Dict[str, Any]:
        return self._request("GET", "/health")
