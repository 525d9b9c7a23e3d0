# services/api/core/ordering.py
from __future__ import annotations

import logging
from typing import List, Optional, Sequence, TypeVar

from fastapi import HTTPException
from sqlalchemy import func
from sqlalchemy.orm import Session

from models import Card, NoteFolder, UserNote

logger = logging.getLogger(__name__)

CARD_POSITION_STEP = 10

T = TypeVar("T")


def renumber(items: Sequence[T], step: int = 1) -> Sequence[T]:
    """Assign position = idx * step following list order."""
    for idx, item in enumerate(items):
        item.position = idx * step
    return items


def apply_order(items: Sequence[T], ordered_ids: List[str], *, what: str) -> List[T]:
    """
    Return `items` rearranged so that `ordered_ids` come first, in that order.
    Items not mentioned keep their relative order after the listed ones.

    Raises:
        HTTPException: 400 if an id is not in `items` (unknown or not owned)
    """
    by_id = {item.id: item for item in items}
    unknown = [i for i in ordered_ids if i not in by_id]
    if unknown:
        raise HTTPException(
            status_code=400,
            detail=f"Unknown {what} ids: {unknown}",
        )

    listed = [by_id[i] for i in ordered_ids]
    listed_ids = set(ordered_ids)
    rest = [item for item in items if item.id not in listed_ids]
    return listed + rest


# ---------- cards ----------

def ordered_cards(db: Session, user_id: str, board_id: str) -> List[Card]:
    return (
        db.query(Card)
        .filter(Card.user_id == user_id, Card.board_id == board_id)
        .order_by(Card.position.asc(), Card.created_at.desc())
        .all()
    )


def reorder_cards(db: Session, user_id: str, board_id: str, ordered_ids: List[str]) -> List[Card]:
    """
    Persist a drag-and-drop result: positions become 0, 10, 20, ...
    Runs inside the caller's transaction.
    """
    cards = apply_order(ordered_cards(db, user_id, board_id), ordered_ids, what="card")
    renumber(cards, CARD_POSITION_STEP)
    db.flush()
    logger.info(f"Reordered {len(cards)} cards on board {board_id}")
    return cards


# ---------- notes workspace ----------

def _folder_filter(folder_id: Optional[str]):
    if folder_id is None:
        return UserNote.folder_id.is_(None)
    return UserNote.folder_id == folder_id


def notes_in_folder(db: Session, user_id: str, folder_id: Optional[str]) -> List[UserNote]:
    return (
        db.query(UserNote)
        .filter(UserNote.user_id == user_id, _folder_filter(folder_id))
        .order_by(UserNote.position.asc(), UserNote.created_at.asc())
        .all()
    )


def reindex_folder(db: Session, user_id: str, folder_id: Optional[str]) -> List[UserNote]:
    """Make positions in one folder (or uncategorized) contiguous: 0..n-1."""
    db.flush()
    notes = notes_in_folder(db, user_id, folder_id)
    renumber(notes)
    db.flush()
    return notes


def next_note_position(db: Session, user_id: str, folder_id: Optional[str]) -> int:
    db.flush()
    current = (
        db.query(func.max(UserNote.position))
        .filter(UserNote.user_id == user_id, _folder_filter(folder_id))
        .scalar()
    )
    return 0 if current is None else current + 1


def ordered_folders(db: Session, user_id: str) -> List[NoteFolder]:
    return (
        db.query(NoteFolder)
        .filter(NoteFolder.user_id == user_id)
        .order_by(NoteFolder.position.asc(), NoteFolder.created_at.asc())
        .all()
    )


def next_folder_position(db: Session, user_id: str) -> int:
    db.flush()
    current = (
        db.query(func.max(NoteFolder.position))
        .filter(NoteFolder.user_id == user_id)
        .scalar()
    )
    return 0 if current is None else current + 1
