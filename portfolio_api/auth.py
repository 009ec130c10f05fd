"""Authentication utilities: password hashing, admin seeding and the session gate."""

from __future__ import annotations

import logging
from typing import Optional

import bcrypt
from fastapi import Depends, Request

from portfolio_api.config import Settings, get_settings
from portfolio_api.db import DbClient
from portfolio_api.dependencies import get_session_store
from portfolio_api.errors import AuthError
from portfolio_api.records import User
from portfolio_api.sessions import SessionRecord, SessionStore

logger = logging.getLogger(__name__)


# ---------- Password helpers ----------

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Over-long input or a malformed stored hash.
        return False


# ---------- Users ----------

def authenticate_user(db: DbClient, username: str, password: str) -> Optional[User]:
    user = db.get_user_by_username(username)
    if not user or not verify_password(password, user.password_hash):
        return None
    return user


def ensure_admin_user(db: DbClient, username: str, password: str) -> User:
    """Create the admin account if it does not exist yet."""
    user = db.get_user_by_username(username)
    if user:
        return user
    user = db.users.create(
        {"username": username, "password_hash": hash_password(password)}
    )
    logger.info("Created admin user %s", username)
    return user


def set_user_password(db: DbClient, username: str, password: str) -> User:
    """Create the user or replace its password hash."""
    user = db.get_user_by_username(username)
    if not user:
        return ensure_admin_user(db, username, password)
    logger.info("Resetting password for %s", username)
    return db.users.update(user.id, {"password_hash": hash_password(password)})


def client_address(request: Request) -> str:
    return request.client.host if request.client else "unknown"


# ---------- FastAPI dependencies ----------

def get_current_session(
    request: Request,
    sessions: SessionStore = Depends(get_session_store),
    settings: Settings = Depends(get_settings),
) -> Optional[SessionRecord]:
    token = request.cookies.get(settings.session_cookie_name)
    if not token:
        return None
    return sessions.get(token)


def require_admin(
    request: Request,
    session: Optional[SessionRecord] = Depends(get_current_session),
) -> SessionRecord:
    if session is None:
        logger.warning("Rejected anonymous request to %s", request.url.path)
        raise AuthError("Not authenticated")
    return session
