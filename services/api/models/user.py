# services/api/models/user.py
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, String

from core.db import Base


def _gen_id() -> str:
    return uuid4().hex


class User(Base):
    """
    Account row. Passwords are only ever stored as bcrypt hashes.
    """
    __tablename__ = "users"

    id = Column(String, primary_key=True, default=_gen_id)
    email = Column(String, nullable=False, unique=True, index=True)
    password_hash = Column(String, nullable=False)
    name = Column(String, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
