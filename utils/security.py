"""
security helpers:
- Argon2 password hashing via argon2-cffi
- JWT signing/verification via PyJWT
- Two independently keyed codecs: access tokens and refresh tokens
"""
from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, NewType

import jwt
from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError

from services.errors import InvalidToken

ALGORITHM = "HS256"
ISSUER = "secure-auth-app"
AUDIENCE = "secure-auth-client"
ACCESS_TOKEN_TTL = timedelta(minutes=15)
REFRESH_TOKEN_TTL = timedelta(days=7)

AccessSecret = NewType("AccessSecret", str)
RefreshSecret = NewType("RefreshSecret", str)


class Argon2Hasher:
    """Password hashing collaborator: hash(password) / verify(password, digest)."""

    def __init__(self, hasher: PasswordHasher | None = None):
        self._ph = hasher or PasswordHasher()

    def hash(self, password: str) -> str:
        return self._ph.hash(password)

    def verify(self, password: str, digest: str) -> bool:
        try:
            return self._ph.verify(digest, password)
        except (VerificationError, InvalidHashError):
            return False


def generate_jti() -> str:
    """Generate a unique JTI (JWT ID)."""
    return str(uuid.uuid4())


def _now() -> datetime:
    return datetime.now(timezone.utc)


def sign_token(claims: Dict[str, Any], secret: str, ttl: timedelta,
               issuer: str = ISSUER, audience: str = AUDIENCE) -> str:
    """Sign `claims` with `secret`, expiring `ttl` from now."""
    now = _now()
    payload = dict(claims)
    payload.update({
        "iss": issuer,
        "aud": audience,
        "iat": int(now.timestamp()),
        "exp": int((now + ttl).timestamp()),
        "jti": generate_jti(),
    })
    return jwt.encode(payload, secret, algorithm=ALGORITHM)


def verify_token(token: str, secret: str,
                 issuer: str = ISSUER, audience: str = AUDIENCE) -> Dict[str, Any]:
    """
    Decode and validate a JWT. Raises InvalidToken on a bad signature,
    malformed input, expiry, or an issuer/audience mismatch.
    """
    try:
        return jwt.decode(
            token,
            secret,
            algorithms=[ALGORITHM],
            issuer=issuer,
            audience=audience,
            options={"require": ["exp", "iss", "aud"]},
        )
    except jwt.ExpiredSignatureError:
        raise InvalidToken("Token expired")
    except jwt.InvalidTokenError as exc:
        raise InvalidToken(f"Invalid token: {exc}")


class TokenCodec:
    ttl: timedelta

    def __init__(self, secret: str):
        if not secret:
            raise ValueError("token secret must not be empty")
        self._secret = secret

    def sign(self, claims: Dict[str, Any]) -> str:
        return sign_token(claims, self._secret, self.ttl)

    def verify(self, token: str) -> Dict[str, Any]:
        return verify_token(token, self._secret)


class AccessTokenCodec(TokenCodec):
    ttl = ACCESS_TOKEN_TTL

    def __init__(self, secret: AccessSecret):
        super().__init__(secret)

    def issue(self, user_id: str, email: str) -> str:
        return self.sign({"userId": user_id, "email": email})


class RefreshTokenCodec(TokenCodec):
    ttl = REFRESH_TOKEN_TTL

    def __init__(self, secret: RefreshSecret):
        super().__init__(secret)

    def issue(self, user_id: str) -> str:
        return self.sign({"userId": user_id})
