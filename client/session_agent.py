"""
Consumer-side session handling for the Secure Auth API.

A SessionAgent holds the current access token in memory and lets its HTTP
transport (a requests.Session by default) keep the refresh cookie. Calls made
through request() get one refresh-and-replay on a 401, never more.
"""
from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import requests

logger = logging.getLogger(__name__)


class ReauthenticationRequired(Exception):
    """The refresh token was rejected; the user has to sign in again."""


class AuthRequestFailed(Exception):
    def __init__(self, status_code: int, payload: Any = None):
        self.status_code = status_code
        self.payload = payload
        message = payload.get("message") if isinstance(payload, dict) else None
        super().__init__(f"{status_code}: {message or 'request failed'}")


def _json(response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


class SessionAgent:
    def __init__(self, base_url: str, http=None,
                 on_reauthenticate: Optional[Callable[[], None]] = None):
        self.base_url = base_url.rstrip("/")
        self.http = http if http is not None else requests.Session()
        self.on_reauthenticate = on_reauthenticate
        self.access_token: Optional[str] = None

    def set_token(self, token: str) -> None:
        self.access_token = token

    def clear_token(self) -> None:
        self.access_token = None

    def _send(self, method: str, path: str, headers: Optional[dict] = None, **kwargs):
        headers = dict(headers or {})
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        return self.http.request(method, f"{self.base_url}{path}", headers=headers, **kwargs)

    def _auth_call(self, path: str, body: Optional[dict] = None) -> Any:
        response = self.http.request("POST", f"{self.base_url}{path}", json=body or {})
        payload = _json(response)
        if not 200 <= response.status_code < 300:
            raise AuthRequestFailed(response.status_code, payload)
        return payload

    def request(self, method: str, path: str, **kwargs):
        """
        Send an authenticated call. A 401 triggers a single refresh; when that
        succeeds the call is replayed once and its response returned as is.
        """
        response = self._send(method, path, **kwargs)
        if response.status_code != 401:
            return response

        try:
            self.refresh()
        except (AuthRequestFailed, requests.RequestException) as exc:
            logger.info("Refresh failed, re-authentication required: %s", exc)
            self.clear_token()
            if self.on_reauthenticate is not None:
                self.on_reauthenticate()
            raise ReauthenticationRequired() from exc

        return self._send(method, path, **kwargs)

    def get(self, path: str, **kwargs):
        return self.request("GET", path, **kwargs)

    def post(self, path: str, **kwargs):
        return self.request("POST", path, **kwargs)

    def put(self, path: str, **kwargs):
        return self.request("PUT", path, **kwargs)

    def register(self, email: str, password: str, name: str) -> dict:
        payload = self._auth_call("/auth/register", {"email": email, "password": password, "name": name})
        self.set_token(payload["accessToken"])
        return payload

    def login(self, email: str, password: str) -> dict:
        payload = self._auth_call("/auth/login", {"email": email, "password": password})
        self.set_token(payload["accessToken"])
        return payload

    def refresh(self) -> str:
        payload = self._auth_call("/auth/refresh")
        token = (payload or {}).get("accessToken")
        if not token:
            raise AuthRequestFailed(200, payload)
        self.set_token(token)
        return token

    def logout(self) -> None:
        try:
            self._auth_call("/auth/logout")
        finally:
            self.clear_token()

    def logout_all(self) -> None:
        response = self.post("/auth/logout-all")
        if response.status_code != 200:
            raise AuthRequestFailed(response.status_code, _json(response))
        self.clear_token()

    def profile(self) -> dict:
        response = self.get("/user/profile")
        if response.status_code != 200:
            raise AuthRequestFailed(response.status_code, _json(response))
        return response.json()["user"]

    def oauth_url(self, provider: str) -> str:
        return f"{self.base_url}/auth/{provider}"

    def accept_oauth_token(self, token: str) -> None:
        """Adopt the access token delivered on the frontend's /oauth/callback?token=..."""
        self.set_token(token)
