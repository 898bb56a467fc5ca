"""
Google and GitHub authorization-code clients.

Only the pieces the login flow needs: build the consent URL, exchange the
returned code, and normalize the provider's user info into an ExternalProfile.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional
from urllib.parse import urlencode

import requests

from services.errors import OAuthError

logger = logging.getLogger(__name__)

HTTP_TIMEOUT = 10

OAUTH_PROVIDERS = {
    "google": {
        "auth_url": "https://accounts.google.com/o/oauth2/v2/auth",
        "token_url": "https://oauth2.googleapis.com/token",
        "userinfo_url": "https://www.googleapis.com/oauth2/v2/userinfo",
        "scope": "openid email profile",
    },
    "github": {
        "auth_url": "https://github.com/login/oauth/authorize",
        "token_url": "https://github.com/login/oauth/access_token",
        "userinfo_url": "https://api.github.com/user",
        "emails_url": "https://api.github.com/user/emails",
        "scope": "read:user user:email",
    },
}


@dataclass(frozen=True)
class ExternalProfile:
    provider: str
    external_id: str
    email: str
    name: Optional[str] = None
    avatar: Optional[str] = None


class OAuthProvider:
    def __init__(self, name: str, client_id: str, client_secret: str, redirect_uri: str, http=None):
        if name not in OAUTH_PROVIDERS:
            raise ValueError(f"Unsupported provider: {name}")
        self.name = name
        self.client_id = client_id
        self.client_secret = client_secret
        self.redirect_uri = redirect_uri
        self.http = http or requests
        self.endpoints = OAUTH_PROVIDERS[name]

    @property
    def configured(self) -> bool:
        return bool(self.client_id and self.client_secret)

    def authorization_url(self, state: str) -> str:
        params = {
            "client_id": self.client_id,
            "redirect_uri": self.redirect_uri,
            "response_type": "code",
            "scope": self.endpoints["scope"],
            "state": state,
        }
        return f"{self.endpoints['auth_url']}?{urlencode(params)}"

    def fetch_profile(self, code: str) -> ExternalProfile:
        try:
            access_token = self._exchange_code(code)
            headers = {"Authorization": f"Bearer {access_token}", "Accept": "application/json"}
            if self.name == "github":
                headers["Accept"] = "application/vnd.github+json"
            resp = self.http.get(self.endpoints["userinfo_url"], headers=headers, timeout=HTTP_TIMEOUT)
            resp.raise_for_status()
            userinfo = resp.json()
            if not isinstance(userinfo, dict):
                raise OAuthError("Provider returned an unexpected profile")
            if self.name == "google":
                return self._google_profile(userinfo)
            return self._github_profile(userinfo, headers)
        except requests.RequestException as exc:
            logger.warning("%s OAuth request failed: %s", self.name, exc)
            raise OAuthError() from exc

    def _exchange_code(self, code: str) -> str:
        resp = self.http.post(
            self.endpoints["token_url"],
            data={
                "client_id": self.client_id,
                "client_secret": self.client_secret,
                "code": code,
                "grant_type": "authorization_code",
                "redirect_uri": self.redirect_uri,
            },
            headers={"Accept": "application/json"},
            timeout=HTTP_TIMEOUT,
        )
        resp.raise_for_status()
        payload = resp.json()
        token = payload.get("access_token") if isinstance(payload, dict) else None
        if not token:
            raise OAuthError("Provider returned no access token")
        return token

    def _google_profile(self, userinfo: dict) -> ExternalProfile:
        if not userinfo.get("id") or not userinfo.get("email"):
            raise OAuthError("Google profile is missing id or email")
        return ExternalProfile(
            provider="google",
            external_id=str(userinfo["id"]),
            email=userinfo["email"],
            name=userinfo.get("name"),
            avatar=userinfo.get("picture"),
        )

    def _github_profile(self, userinfo: dict, headers: dict) -> ExternalProfile:
        if not userinfo.get("id"):
            raise OAuthError("GitHub profile is missing id")
        login = userinfo.get("login") or str(userinfo["id"])
        email = userinfo.get("email") or self._github_primary_email(headers) or f"{login}@github.local"
        return ExternalProfile(
            provider="github",
            external_id=str(userinfo["id"]),
            email=email,
            name=userinfo.get("name") or login,
            avatar=userinfo.get("avatar_url"),
        )

    def _github_primary_email(self, headers: dict) -> Optional[str]:
        resp = self.http.get(self.endpoints["emails_url"], headers=headers, timeout=HTTP_TIMEOUT)
        if resp.status_code != 200:
            return None
        emails = resp.json()
        if not isinstance(emails, list):
            return None
        return next(
            (
                e.get("email")
                for e in emails
                if isinstance(e, dict) and e.get("primary") and e.get("verified")
            ),
            None,
        )


def provider_from_config(name: str, config, http=None) -> OAuthProvider:
    key = name.upper()
    base = config["OAUTH_REDIRECT_BASE"].rstrip("/")
    return OAuthProvider(
        name,
        client_id=config.get(f"{key}_CLIENT_ID"),
        client_secret=config.get(f"{key}_CLIENT_SECRET"),
        redirect_uri=f"{base}/api/auth/{name}/callback",
        http=http,
    )
