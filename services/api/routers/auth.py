# services/api/routers/auth.py
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.db import get_session
from core.security import (
    clear_auth_cookie,
    create_token,
    get_current_user,
    hash_password,
    set_auth_cookie,
    verify_password,
)
from models import User
from models.converters import user_to_api
from schemas import LoginIn, SignupIn, TokenOut, UserOut

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"])

Db = Annotated[Session, Depends(get_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]


def _normalize_email(email: str | None) -> str:
    return (email or "").strip().lower()


@router.post("/signup", status_code=status.HTTP_201_CREATED)
def signup(body: SignupIn, db: Db):
    """
    Create an account from email + password.

    - 400 when email or password is missing
    - 409 when the email is already registered
    """
    email = _normalize_email(body.email)
    logger.info(f"Signup attempt for {email or '<empty>'}")

    if not email or not body.password:
        raise HTTPException(status_code=400, detail="MISSING_FIELDS")

    exists = db.query(User).filter(User.email == email).first()
    if exists:
        raise HTTPException(status_code=409, detail="USER_EXISTS")

    user = User(
        email=email,
        password_hash=hash_password(body.password),
        name=(body.name or "").strip() or None,
    )
    db.add(user)
    try:
        db.flush()
    except IntegrityError:
        # concurrent signup with the same email
        db.rollback()
        raise HTTPException(status_code=409, detail="USER_EXISTS")

    return {"id": user.id, "email": user.email}


@router.post("/login", response_model=TokenOut)
def login(body: LoginIn, response: Response, db: Db):
    email = _normalize_email(body.email)
    user = db.query(User).filter(User.email == email).first()
    if not user or not verify_password(body.password, user.password_hash):
        logger.info(f"Failed login for {email}")
        raise HTTPException(status_code=401, detail="INVALID_CREDENTIALS")

    token = create_token(user.id)
    set_auth_cookie(response, token)
    return {"access_token": token, "token_type": "bearer", "user": user_to_api(user)}


@router.post("/logout")
async def logout(response: Response):
    clear_auth_cookie(response)
    return {"ok": True}


@router.get("/me", response_model=UserOut)
async def me(user: CurrentUser):
    return user_to_api(user)
