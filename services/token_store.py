"""
Refresh token persistence.

Rows are keyed by the raw signed token. Expired rows are not purged here;
find() simply treats them as absent.
"""
from __future__ import annotations

import logging
from typing import Optional

from models.base_model import utcnow
from models.refresh_token import RefreshToken
from utils.security import REFRESH_TOKEN_TTL

logger = logging.getLogger(__name__)


class RefreshTokenStore:
    def __init__(self, storage):
        self.storage = storage

    def _query(self):
        return self.storage.get_session().query(RefreshToken)

    def save(self, user_id: str, token: str) -> RefreshToken:
        now = utcnow()
        record = RefreshToken(
            user_id=user_id,
            token=token,
            created_at=now,
            updated_at=now,
            expires_at=now + REFRESH_TOKEN_TTL,
        )
        self.storage.new(record)
        self.storage.save()
        return record

    def find(self, token: str) -> Optional[RefreshToken]:
        return (
            self._query()
            .filter(RefreshToken.token == token, RefreshToken.expires_at > utcnow())
            .first()
        )

    def delete_by_token(self, token: str) -> None:
        self._query().filter(RefreshToken.token == token).delete(synchronize_session=False)
        self.storage.save()

    def delete_all_for_user(self, user_id: str) -> int:
        removed = self._query().filter(RefreshToken.user_id == user_id).delete(synchronize_session=False)
        self.storage.save()
        logger.info("Revoked %d refresh token(s) for user %s", removed, user_id)
        return removed
