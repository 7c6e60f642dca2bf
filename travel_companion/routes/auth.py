from __future__ import annotations

from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from travel_companion.auth import current_user, hash_password, log_in, log_out, verify_password
from travel_companion.db import get_db
from travel_companion.errors import AuthenticationError, ValidationFailed
from travel_companion.log import get_logger
from travel_companion.models import User
from travel_companion.schemas import Credentials, UserOut, dump

logger = get_logger(__name__)

router = APIRouter(tags=["auth"])

BAD_CREDENTIALS = "Incorrect username or password."


def _summary(user: User) -> Dict[str, Any]:
    return {"id": user.id, "username": user.username}


@router.post("/register", status_code=201)
def register(payload: Credentials, request: Request, db: Session = Depends(get_db)) -> Dict[str, Any]:
    logger.info("Registration attempt: %s", payload.username)
    # fast path for the common case; the unique constraint below is authoritative
    existing = db.scalar(select(User).where(User.username == payload.username))
    if existing is not None:
        raise ValidationFailed("Username already exists")

    user = User(username=payload.username, password=hash_password(payload.password))
    db.add(user)
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.info("Registration lost a race for username %s", payload.username)
        raise ValidationFailed("Username already exists") from exc
    db.refresh(user)

    log_in(request, user)
    logger.info("User registered: %s", user.username)
    return {"message": "Registration successful", "user": _summary(user)}


@router.post("/login")
def login(payload: Credentials, request: Request, db: Session = Depends(get_db)) -> Dict[str, Any]:
    user = db.scalar(select(User).where(User.username == payload.username))
    if user is None or not verify_password(payload.password, user.password):
        logger.info("Login failed for %s", payload.username)
        raise ValidationFailed(BAD_CREDENTIALS)

    log_in(request, user)
    logger.info("Login successful: %s", user.username)
    return {"message": "Login successful", "user": _summary(user)}


@router.post("/logout")
def logout(request: Request) -> Dict[str, str]:
    log_out(request)
    return {"message": "Logout successful"}


@router.get("/user")
def session_user(request: Request, user: Optional[User] = Depends(current_user)) -> Dict[str, Any]:
    if user is None:
        raise AuthenticationError("Not logged in")
    data = dump(UserOut, user)
    data["isAdmin"] = bool(request.session.get("is_admin"))
    return data
