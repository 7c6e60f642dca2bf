"""Password hashing and session-backed identity."""
from __future__ import annotations

import hashlib
import hmac
import secrets
from typing import Optional

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from travel_companion.db import get_db
from travel_companion.errors import AuthenticationError, AuthorizationError
from travel_companion.log import get_logger
from travel_companion.models import User

logger = get_logger(__name__)

SCRYPT_N = 16384
SCRYPT_R = 8
SCRYPT_P = 1
KEY_LENGTH = 64


def _derive(password: str, salt: str) -> bytes:
    return hashlib.scrypt(
        password.encode("utf-8"),
        salt=salt.encode("utf-8"),
        n=SCRYPT_N,
        r=SCRYPT_R,
        p=SCRYPT_P,
        dklen=KEY_LENGTH,
    )


def hash_password(password: str) -> str:
    """Return ``"<key-hex>.<salt-hex>"``."""
    salt = secrets.token_hex(16)
    return f"{_derive(password, salt).hex()}.{salt}"


def verify_password(supplied: str, stored: str) -> bool:
    hashed, sep, salt = (stored or "").partition(".")
    if not sep or not hashed or not salt:
        return False
    try:
        expected = bytes.fromhex(hashed)
    except ValueError:
        return False
    return hmac.compare_digest(expected, _derive(supplied, salt))


def is_admin(user: User, admin_usernames) -> bool:
    return bool(user.is_admin) or user.username in set(admin_usernames or ())


def log_in(request: Request, user: User) -> None:
    """Start a fresh session for ``user``; nothing from a previous login carries over."""
    settings = request.app.state.settings
    request.app.state.services.chat_sessions.discard(request.session.get("sid"))
    request.session.clear()
    request.session["user_id"] = user.id
    request.session["is_admin"] = is_admin(user, settings.admin_usernames)


def log_out(request: Request) -> None:
    request.app.state.services.chat_sessions.discard(request.session.get("sid"))
    request.session.clear()


def current_user(request: Request, db: Session = Depends(get_db)) -> Optional[User]:
    """The session's user, re-read from the store on every request."""
    user_id = request.session.get("user_id")
    if user_id is None:
        return None
    user = db.get(User, user_id)
    if user is None:
        logger.info("Session referenced missing user %s; clearing", user_id)
        request.session.clear()
    return user


def require_user(user: Optional[User] = Depends(current_user)) -> User:
    if user is None:
        raise AuthenticationError("Not authenticated")
    return user


def require_admin(request: Request, user: Optional[User] = Depends(current_user)) -> User:
    if user is None:
        raise AuthenticationError("Not authenticated")
    if not request.session.get("is_admin"):
        raise AuthorizationError("Admin access required")
    return user
