# services/api/core/security.py
from __future__ import annotations

import base64
import hashlib
import logging
import time
from typing import Optional

import bcrypt
from fastapi import Depends, HTTPException, Request, Response, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import JWTError, jwt
from sqlalchemy.orm import Session

from core.db import get_session
from models import User
from settings import get_settings

logger = logging.getLogger(__name__)

JWT_ALG = "HS256"

bearer = HTTPBearer(auto_error=False)


def _pw_prehash(pw: str) -> bytes:
    # bcrypt ignores input past 72 bytes; SHA-256 first so long passwords still count in full
    return base64.b64encode(hashlib.sha256(pw.encode("utf-8")).digest())


def hash_password(pw: str) -> str:
    salt = bcrypt.gensalt(rounds=get_settings().bcrypt_rounds)
    return bcrypt.hashpw(_pw_prehash(pw), salt).decode("utf-8")


def verify_password(pw: str, pw_hash: str) -> bool:
    """
    Compare a plain password with a stored bcrypt hash.
    Malformed hashes count as a mismatch.
    """
    try:
        return bcrypt.checkpw(_pw_prehash(pw), pw_hash.encode("utf-8"))
    except (ValueError, TypeError):
        logger.warning("Stored password hash is not a valid bcrypt hash")
        return False


def create_token(user_id: str, ttl_seconds: Optional[int] = None) -> str:
    settings = get_settings()
    ttl = settings.jwt_ttl_seconds if ttl_seconds is None else ttl_seconds
    exp = int(time.time()) + ttl
    return jwt.encode({"sub": user_id, "exp": exp}, settings.jwt_secret, algorithm=JWT_ALG)


def decode_token(token: str) -> Optional[str]:
    """Return the user id carried by a session token, or None if invalid/expired."""
    try:
        payload = jwt.decode(token, get_settings().jwt_secret, algorithms=[JWT_ALG])
    except JWTError:
        return None
    uid = payload.get("sub")
    return uid or None


def set_auth_cookie(resp: Response, token: str) -> None:
    settings = get_settings()
    resp.set_cookie(
        key=settings.auth_cookie,
        value=token,
        max_age=settings.jwt_ttl_seconds,
        httponly=True,
        samesite="lax",
        secure=settings.auth_cookie_secure,
        path="/",
    )


def clear_auth_cookie(resp: Response) -> None:
    resp.delete_cookie(key=get_settings().auth_cookie, path="/")


def _token_from_request(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials],
) -> Optional[str]:
    if creds and creds.credentials:
        return creds.credentials
    return request.cookies.get(get_settings().auth_cookie)


def get_current_user(
    request: Request,
    creds: Optional[HTTPAuthorizationCredentials] = Depends(bearer),
    db: Session = Depends(get_session),
) -> User:
    """
    Resolve the signed-in user from `Authorization: Bearer` or the auth cookie.
    """
    token = _token_from_request(request, creds)
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="NOT_AUTHENTICATED")

    uid = decode_token(token)
    if not uid:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="INVALID_TOKEN")

    user = db.query(User).filter(User.id == uid).first()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="INVALID_TOKEN")
    return user
