"""
Server-side admin sessions.

The browser only holds an opaque token in a cookie; the session itself lives
in process memory or in Redis when one is configured.
"""

from __future__ import annotations

import json
import logging
import secrets
import threading
import time
from dataclasses import asdict, dataclass, field
from typing import Optional, Protocol

import redis
from redis import exceptions as redis_exceptions

from portfolio_api.errors import BackendError

logger = logging.getLogger(__name__)


@dataclass
class SessionRecord:
    token: str
    user_id: int
    username: str
    created_at: float
    expires_at: float

    def as_dict(self) -> dict:
        return asdict(self)


class SessionStore(Protocol):
    """Minimal interface the session gate needs."""

    def create(self, user_id: int, username: str) -> SessionRecord:
        ...

    def get(self, token: str) -> Optional[SessionRecord]:
        ...

    def destroy(self, token: str) -> None:
        ...


def _new_record(user_id: int, username: str, ttl_seconds: int) -> SessionRecord:
    now = time.time()
    return SessionRecord(
        token=secrets.token_urlsafe(32),
        user_id=user_id,
        username=username,
        created_at=now,
        expires_at=now + ttl_seconds,
    )


@dataclass
class InMemorySessionStore:
    """Process-local sessions for development and tests."""

    ttl_seconds: int = 24 * 60 * 60
    sessions: dict[str, SessionRecord] = field(default_factory=dict)

    def __post_init__(self):
        self._lock = threading.Lock()

    def create(self, user_id: int, username: str) -> SessionRecord:
        record = _new_record(user_id, username, self.ttl_seconds)
        with self._lock:
            self._drop_expired(record.created_at)
            self.sessions[record.token] = record
        return record

    def _drop_expired(self, now: float) -> None:
        expired = [
            token for token, record in self.sessions.items() if record.expires_at <= now
        ]
        for token in expired:
            del self.sessions[token]

    def get(self, token: str) -> Optional[SessionRecord]:
        with self._lock:
            record = self.sessions.get(token)
            if record and record.expires_at <= time.time():
                del self.sessions[token]
                return None
            return record

    def destroy(self, token: str) -> None:
        with self._lock:
            self.sessions.pop(token, None)


@dataclass
class RedisSessionStore:
    """Redis-backed sessions; expiry is delegated to key TTLs."""

    url: str
    ttl_seconds: int = 24 * 60 * 60
    key_prefix: str = "portfolio"

    def __post_init__(self):
        self.client = redis.Redis.from_url(self.url)

    def _key(self, token: str) -> str:
        return f"{self.key_prefix}:session:{token}"

    def create(self, user_id: int, username: str) -> SessionRecord:
        record = _new_record(user_id, username, self.ttl_seconds)
        try:
            self.client.setex(
                self._key(record.token), self.ttl_seconds, json.dumps(record.as_dict())
            )
        except redis_exceptions.ConnectionError as exc:
            self.client = redis.Redis.from_url(self.url)
            raise BackendError("Session store unavailable") from exc
        return record

    def get(self, token: str) -> Optional[SessionRecord]:
        try:
            raw = self.client.get(self._key(token))
        except redis_exceptions.ConnectionError:
            # Treat as anonymous; the next request gets a fresh connection.
            logger.warning("Session lookup failed, Redis connection reset")
            self.client = redis.Redis.from_url(self.url)
            return None
        if raw is None:
            return None
        return SessionRecord(**json.loads(raw))

    def destroy(self, token: str) -> None:
        try:
            self.client.delete(self._key(token))
        except redis_exceptions.ConnectionError:
            logger.warning("Session delete failed, Redis connection reset")
            self.client = redis.Redis.from_url(self.url)
