from __future__ import annotations

from urllib.parse import parse_qs, urlparse

import pytest
import requests

from services.errors import OAuthError
from services.oauth import OAuthProvider


class FakeResponse:
    def __init__(self, payload, status_code: int = 200):
        self._payload = payload
        self.status_code = status_code

    def json(self):
        return self._payload

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")


class FakeHttp:
    """Answers by URL; records every call."""

    def __init__(self, routes: dict):
        self.routes = routes
        self.calls = []

    def _answer(self, method, url, **kwargs):
        self.calls.append((method, url, kwargs))
        return self.routes[url]

    def get(self, url, **kwargs):
        return self._answer("GET", url, **kwargs)

    def post(self, url, **kwargs):
        return self._answer("POST", url, **kwargs)


TOKEN = {"access_token": "provider-token"}


def _provider(name: str, routes: dict) -> OAuthProvider:
    return OAuthProvider(name, "cid", "csecret", f"http://api.test/api/auth/{name}/callback", http=FakeHttp(routes))


def test_authorization_url() -> None:
    url = urlparse(_provider("github", {}).authorization_url("xyz"))
    query = parse_qs(url.query)
    assert url.netloc == "github.com"
    assert query["state"] == ["xyz"]
    assert query["client_id"] == ["cid"]
    assert query["scope"] == ["read:user user:email"]


def test_google_profile() -> None:
    provider = _provider("google", {
        "https://oauth2.googleapis.com/token": FakeResponse(TOKEN),
        "https://www.googleapis.com/oauth2/v2/userinfo": FakeResponse(
            {"id": "123", "email": "g@x.com", "name": "G", "picture": "https://img/g.png"}
        ),
    })
    profile = provider.fetch_profile("code-1")
    assert (profile.provider, profile.external_id, profile.email) == ("google", "123", "g@x.com")
    assert profile.avatar == "https://img/g.png"

    method, _, kwargs = provider.http.calls[0]
    assert method == "POST"
    assert kwargs["data"]["code"] == "code-1"
    assert kwargs["data"]["grant_type"] == "authorization_code"
    assert provider.http.calls[1][2]["headers"]["Authorization"] == "Bearer provider-token"


def test_github_private_email_uses_primary_verified_address() -> None:
    provider = _provider("github", {
        "https://github.com/login/oauth/access_token": FakeResponse(TOKEN),
        "https://api.github.com/user": FakeResponse({"id": 42, "login": "octo", "email": None, "avatar_url": None}),
        "https://api.github.com/user/emails": FakeResponse([
            {"email": "old@x.com", "primary": False, "verified": True},
            {"email": "octo@x.com", "primary": True, "verified": True},
        ]),
    })
    profile = provider.fetch_profile("code")
    assert profile.external_id == "42"
    assert profile.email == "octo@x.com"
    assert profile.name == "octo"


def test_github_without_any_email_falls_back_to_login() -> None:
    provider = _provider("github", {
        "https://github.com/login/oauth/access_token": FakeResponse(TOKEN),
        "https://api.github.com/user": FakeResponse({"id": 42, "login": "octo", "name": "Octo Cat"}),
        "https://api.github.com/user/emails": FakeResponse({"message": "forbidden"}, status_code=403),
    })
    profile = provider.fetch_profile("code")
    assert profile.email == "octo@github.local"
    assert profile.name == "Octo Cat"


def test_github_unexpected_emails_body_falls_back_to_login() -> None:
    provider = _provider("github", {
        "https://github.com/login/oauth/access_token": FakeResponse(TOKEN),
        "https://api.github.com/user": FakeResponse({"id": 42, "login": "octo"}),
        "https://api.github.com/user/emails": FakeResponse({"message": "Requires authentication"}),
    })
    assert provider.fetch_profile("code").email == "octo@github.local"


def test_non_object_profile_is_an_oauth_error() -> None:
    provider = _provider("google", {
        "https://oauth2.googleapis.com/token": FakeResponse(TOKEN),
        "https://www.googleapis.com/oauth2/v2/userinfo": FakeResponse(["unexpected"]),
    })
    with pytest.raises(OAuthError):
        provider.fetch_profile("code")


def test_missing_access_token_is_an_oauth_error() -> None:
    provider = _provider("google", {
        "https://oauth2.googleapis.com/token": FakeResponse({"error": "bad_verification_code"}),
    })
    with pytest.raises(OAuthError):
        provider.fetch_profile("code")


def test_http_failure_is_an_oauth_error() -> None:
    provider = _provider("google", {
        "https://oauth2.googleapis.com/token": FakeResponse(TOKEN),
        "https://www.googleapis.com/oauth2/v2/userinfo": FakeResponse({}, status_code=500),
    })
    with pytest.raises(OAuthError):
        provider.fetch_profile("code")


def test_unknown_provider() -> None:
    with pytest.raises(ValueError):
        OAuthProvider("myspace", "cid", "secret", "http://api.test/cb")
