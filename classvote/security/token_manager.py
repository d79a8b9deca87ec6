# classvote/security/token_manager.py

import logging
import secrets
from datetime import datetime, timedelta, timezone
from enum import Enum

from classvote.errors import TokenNotFound

logger = logging.getLogger(__name__)


class TokenKind(Enum):
    REGISTRATION = "registration-token"
    VOTING = "voting-token"


def parse_timestamp(value: str) -> datetime:
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def is_expired(token: dict, now: datetime) -> bool:
    """Expiry is computed on read; nothing ever sweeps expired tokens."""
    return now > parse_timestamp(token["expires_at"])


# Expiring, single-use tokens persisted in the key-value store
class TokenStore:
    def __init__(self, store):
        self.store = store

    def _now(self):
        # extracted for easier monkeypatching in tests
        return datetime.now(timezone.utc)

    @staticmethod
    def _key(kind: TokenKind, token_id: str) -> str:
        return f"{kind.value}:{token_id}"

    def issue(self, kind: TokenKind, payload: dict, ttl: timedelta) -> str:
        token_id = secrets.token_urlsafe(32)
        record = dict(payload)
        record["expires_at"] = (self._now() + ttl).isoformat()
        self.store.set(self._key(kind, token_id), record)
        logger.info("Issued %s expiring at %s", kind.value, record["expires_at"])
        return token_id

    def resolve(self, kind: TokenKind, token_id: str) -> dict:
        """Return the stored payload (with ``expires_at``). Expiry is not checked."""
        if not isinstance(token_id, str) or not token_id:
            raise TokenNotFound()
        record = self.store.get(self._key(kind, token_id))
        if record is None:
            raise TokenNotFound()
        return record

    def consume(self, kind: TokenKind, token_id: str) -> None:
        if not isinstance(token_id, str) or not token_id:
            return
        self.store.delete(self._key(kind, token_id))

    def is_expired(self, token: dict) -> bool:
        return is_expired(token, self._now())
