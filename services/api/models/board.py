# services/api/models/board.py
from __future__ import annotations

from datetime import datetime
from uuid import uuid4

from sqlalchemy import (
    JSON,
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
)
from sqlalchemy.orm import relationship

from core.db import Base


def _gen_id() -> str:
    return uuid4().hex


class Board(Base):
    """
    A user's task board. Every user gets a "General" board on first visit.
    """
    __tablename__ = "boards"

    id = Column(String, primary_key=True, default=_gen_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False, default="General")
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    cards = relationship(
        "Card",
        back_populates="board",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )


class Card(Base):
    """
    A project card on a board.

    - `tags` is a free-text list kept as a JSON array
    - `position` drives manual ordering (renumbered as idx * 10 on reorder)
    """
    __tablename__ = "cards"

    id = Column(String, primary_key=True, default=_gen_id)
    user_id = Column(String, ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
    board_id = Column(String, ForeignKey("boards.id", ondelete="CASCADE"), nullable=False, index=True)

    title = Column(String, nullable=False)
    summary = Column(Text, nullable=True)
    tags = Column(JSON, nullable=False, default=list)
    position = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    board = relationship("Board", back_populates="cards")
    notes = relationship(
        "ChecklistNote",
        back_populates="card",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ChecklistNote.created_at",
    )
    attachments = relationship(
        "Attachment",
        back_populates="card",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Attachment.created_at.desc()",
    )


class ChecklistNote(Base):
    """One checklist line inside a card."""
    __tablename__ = "card_notes"

    id = Column(String, primary_key=True, default=_gen_id)
    card_id = Column(String, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    text = Column(Text, nullable=False)
    done = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    card = relationship("Card", back_populates="notes")


class Attachment(Base):
    """
    File attached to a card.

    NOTE: `url` holds the object-storage PATH, not a public URL.
    Clients ask for a short-lived signed URL when they want to open it.
    """
    __tablename__ = "attachments"

    id = Column(String, primary_key=True, default=_gen_id)
    card_id = Column(String, ForeignKey("cards.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String, nullable=False)
    url = Column(String, nullable=False)
    mime = Column(String, nullable=False, default="application/octet-stream")
    size = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    card = relationship("Card", back_populates="attachments")
