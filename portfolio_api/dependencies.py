"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import logging

from portfolio_api.config import get_settings
from portfolio_api.db import DbClient, InMemoryDbClient, PostgresDbClient
from portfolio_api.notifier import SocialMediaNotifier
from portfolio_api.sessions import InMemorySessionStore, RedisSessionStore, SessionStore
from portfolio_api.throttle import AttemptLimiter

logger = logging.getLogger(__name__)

_db_client: DbClient | None = None
_session_store: SessionStore | None = None
_login_limiter: AttemptLimiter | None = None
_submission_limiter: AttemptLimiter | None = None
_notifier: SocialMediaNotifier | None = None


def get_db_client() -> DbClient:
    """
    Return a singleton DB client so content persists across requests.
    """
    global _db_client
    if _db_client:
        return _db_client

    settings = get_settings()
    if settings.use_in_memory_backends or not settings.database_url:
        logger.info("Using in-memory storage")
        _db_client = InMemoryDbClient()
    else:
        logger.info("Using SQL storage")
        _db_client = PostgresDbClient(settings.database_url)
    return _db_client


def get_session_store() -> SessionStore:
    global _session_store
    if _session_store:
        return _session_store

    settings = get_settings()
    if settings.redis_url:
        _session_store = RedisSessionStore(
            url=settings.redis_url,
            ttl_seconds=settings.session_ttl_seconds,
            key_prefix=settings.redis_key_prefix,
        )
    else:
        _session_store = InMemorySessionStore(ttl_seconds=settings.session_ttl_seconds)
    return _session_store


def _build_limiter(name: str, max_attempts: int, window_seconds: int) -> AttemptLimiter:
    settings = get_settings()
    return AttemptLimiter(
        max_attempts=max_attempts,
        window_seconds=window_seconds,
        storage_uri=settings.redis_url or "memory://",
        namespace=f"{settings.redis_key_prefix}:{name}",
    )


def get_login_limiter() -> AttemptLimiter:
    """Failed-login counter per client address."""
    global _login_limiter
    if _login_limiter:
        return _login_limiter

    settings = get_settings()
    _login_limiter = _build_limiter(
        "login", settings.login_max_attempts, settings.login_window_seconds
    )
    return _login_limiter


def get_submission_limiter() -> AttemptLimiter:
    """Public testimonial submissions per client address."""
    global _submission_limiter
    if _submission_limiter:
        return _submission_limiter

    settings = get_settings()
    _submission_limiter = _build_limiter(
        "testimonials",
        settings.testimonial_max_submissions,
        settings.testimonial_window_seconds,
    )
    return _submission_limiter


def get_notifier() -> SocialMediaNotifier:
    global _notifier
    if _notifier:
        return _notifier

    _notifier = SocialMediaNotifier.from_settings(get_settings())
    return _notifier
