# services/api/models/user_note.py
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text

from core.db import Base


def _gen_id() -> str:
    return uuid4().hex


DEFAULT_FONT_SIZE = 16


class NoteFolder(Base):
    __tablename__ = "note_folders"

    id = Column(String, primary_key=True, default=_gen_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    position = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)


class UserNote(Base):
    """
    Personal rich-text note.

    `content` is the editor's HTML as-is (inline images reference
    /api/notes/images?path=...). `folder_id` NULL means "uncategorized".
    """
    __tablename__ = "user_notes"

    id = Column(String, primary_key=True, default=_gen_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    folder_id = Column(String, ForeignKey("note_folders.id", ondelete="SET NULL"), nullable=True, index=True)

    title = Column(String, nullable=False)
    content = Column(Text, nullable=False, default="")
    font_size = Column(Integer, nullable=False, default=DEFAULT_FONT_SIZE)
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)
