"""
Session issuance: turns a successful authentication event into an access
token plus a stored refresh token, and serves refresh / logout requests.

Refresh tokens are not rotated on use: the same token keeps minting access
tokens until it is deleted or its 7 days run out.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass

from flask import current_app

from models.user import User
from services.errors import InvalidRefreshToken, InvalidToken, RefreshTokenNotFound
from services.identity import IdentityResolver
from services.token_store import RefreshTokenStore
from utils.security import AccessTokenCodec, RefreshTokenCodec

logger = logging.getLogger(__name__)


@dataclass
class IssuedSession:
    user: User
    access_token: str
    # handed to the transport as a cookie, never serialized into a body
    refresh_token: str


class SessionIssuer:
    def __init__(self, access_codec: AccessTokenCodec, refresh_codec: RefreshTokenCodec,
                 store: RefreshTokenStore, resolver: IdentityResolver):
        self.access_codec = access_codec
        self.refresh_codec = refresh_codec
        self.store = store
        self.resolver = resolver

    def _issue(self, user: User) -> IssuedSession:
        access_token = self.access_codec.issue(user.id, user.email)
        refresh_token = self.refresh_codec.issue(user.id)
        self.store.save(user.id, refresh_token)
        return IssuedSession(user=user, access_token=access_token, refresh_token=refresh_token)

    def register(self, email: str, password: str, name: str) -> IssuedSession:
        user = self.resolver.register_local(email, password, name)
        return self._issue(user)

    def login(self, email: str, password: str) -> IssuedSession:
        user = self.resolver.resolve_local(email, password)
        logger.info("Local login for user %s", user.id)
        return self._issue(user)

    def login_external(self, profile) -> IssuedSession:
        """`profile` is an ExternalProfile from services.oauth."""
        user = self.resolver.resolve_external(
            profile.provider, profile.external_id, profile.email, profile.name, profile.avatar
        )
        logger.info("%s login for user %s", profile.provider, user.id)
        return self._issue(user)

    def refresh(self, token: str) -> str:
        try:
            claims = self.refresh_codec.verify(token)
        except InvalidToken as exc:
            raise InvalidRefreshToken() from exc

        record = self.store.find(token)
        if record is None:
            raise RefreshTokenNotFound()
        if claims.get("userId") != record.user_id:
            raise InvalidRefreshToken()

        user = self.resolver.get_user(record.user_id)
        if user is None:
            raise RefreshTokenNotFound()
        return self.access_codec.issue(user.id, user.email)

    def logout(self, token: str) -> None:
        self.store.delete_by_token(token)

    def logout_all(self, user_id: str) -> int:
        return self.store.delete_all_for_user(user_id)

    def authenticate(self, access_token: str) -> User:
        """Verify a bearer access token and return its user."""
        claims = self.access_codec.verify(access_token)
        user_id = claims.get("userId")
        user = self.resolver.get_user(user_id) if user_id else None
        if user is None:
            raise InvalidToken("User not found")
        return user


def build_session_issuer(config, storage) -> SessionIssuer:
    return SessionIssuer(
        AccessTokenCodec(config["ACCESS_TOKEN_SECRET"]),
        RefreshTokenCodec(config["REFRESH_TOKEN_SECRET"]),
        RefreshTokenStore(storage),
        IdentityResolver(storage),
    )


def current_issuer() -> SessionIssuer:
    return current_app.extensions["session_issuer"]
