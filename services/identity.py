"""
Identity resolution: local credentials or an external provider profile in,
one canonical User out. Email is the join key across every provider.
"""
from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError

from models.base_model import utcnow
from models.schemas.common import normalize_email
from models.user import PROVIDER_ID_FIELDS, User
from services.errors import DuplicateAccount, InvalidCredentials
from utils.security import Argon2Hasher

logger = logging.getLogger(__name__)


class IdentityResolver:
    def __init__(self, storage, hasher=None):
        self.storage = storage
        self.hasher = hasher or Argon2Hasher()

    def get_user(self, user_id: str) -> Optional[User]:
        return self.storage.get(User, user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        session = self.storage.get_session()
        return session.query(User).filter(User.email == normalize_email(email)).first()

    def register_local(self, email: str, password: str, name: str) -> User:
        """Create a verified local account; DuplicateAccount if the email is taken."""
        email = normalize_email(email)
        if self.get_user_by_email(email):
            raise DuplicateAccount()

        user = User(
            email=email,
            name=name,
            provider="local",
            password_hash=self.hasher.hash(password),
            # no email verification step exists yet
            is_verified=True,
        )
        self.storage.new(user)
        try:
            self.storage.save()
        except IntegrityError:
            # lost a race against a concurrent registration
            raise DuplicateAccount()
        logger.info("Registered local user %s", user.id)
        return user

    def resolve_local(self, email: str, password: str) -> User:
        user = self.get_user_by_email(email)
        if not user or not user.has_password:
            raise InvalidCredentials()
        if not self.hasher.verify(password, user.password_hash):
            raise InvalidCredentials()
        return user

    def resolve_external(self, provider: str, external_id: str, email: str,
                         name: str | None = None, avatar: str | None = None) -> User:
        """
        Find the account owning `email` or create it for `provider`.

        An existing account gets `updated_at` refreshed and this provider's id and
        the avatar backfilled when supplied. Its original `provider`, its `name`
        and other providers' ids are left alone.
        """
        id_field = PROVIDER_ID_FIELDS.get(provider)
        if id_field is None:
            raise ValueError(f"Unsupported provider: {provider}")

        email = normalize_email(email)
        user = self.get_user_by_email(email)
        if user is None:
            user = User(
                email=email,
                name=name,
                avatar=avatar,
                provider=provider,
                is_verified=False,
            )
            setattr(user, id_field, external_id)
            self.storage.new(user)
            try:
                self.storage.save()
            except IntegrityError:
                # created by a concurrent callback; merge into that row instead
                user = self.get_user_by_email(email)
                if user is None:
                    raise
                return self._link(user, id_field, external_id, avatar)
            logger.info("Created %s user %s", provider, user.id)
            return user

        return self._link(user, id_field, external_id, avatar)

    def _link(self, user: User, id_field: str, external_id: str, avatar: str | None) -> User:
        if external_id:
            setattr(user, id_field, external_id)
        if avatar:
            user.avatar = avatar
        user.updated_at = utcnow()
        self.storage.new(user)
        self.storage.save()
        return user

    def update_profile(self, user: User, name: str | None = None, avatar: str | None = None) -> User:
        if name is not None:
            user.name = name
        if avatar is not None:
            user.avatar = avatar
        user.updated_at = utcnow()
        self.storage.new(user)
        self.storage.save()
        return user
