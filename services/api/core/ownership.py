# services/api/core/ownership.py
"""
Ownership guards shared by every router.

Each helper loads one row and checks it belongs to the signed-in user.
Rows that are missing and rows owned by someone else both raise 404, so a
caller cannot probe for other users' ids.
"""
from __future__ import annotations

from typing import Optional

from fastapi import HTTPException, status
from sqlalchemy.orm import Session

from core.validation import DEFAULT_BOARD_NAME
from models import Attachment, Board, Card, ChecklistNote, NoteFolder, User, UserNote


def _not_found(code: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=code)


def require_board(db: Session, user: User, board_id: str) -> Board:
    board = db.get(Board, board_id)
    if not board or board.user_id != user.id:
        raise _not_found("BOARD_NOT_FOUND")
    return board


def require_card(db: Session, user: User, card_id: str) -> Card:
    card = db.get(Card, card_id)
    if not card or card.user_id != user.id:
        raise _not_found("CARD_NOT_FOUND")
    return card


def require_checklist_note(db: Session, user: User, note_id: str) -> ChecklistNote:
    note = db.get(ChecklistNote, note_id)
    if not note or note.card is None or note.card.user_id != user.id:
        raise _not_found("NOTE_NOT_FOUND")
    return note


def require_attachment(db: Session, user: User, attachment_id: str) -> Attachment:
    att = db.get(Attachment, attachment_id)
    if not att or att.card is None or att.card.user_id != user.id:
        raise _not_found("ATTACHMENT_NOT_FOUND")
    return att


def require_folder(db: Session, user: User, folder_id: str) -> NoteFolder:
    folder = db.get(NoteFolder, folder_id)
    if not folder or folder.user_id != user.id:
        raise _not_found("FOLDER_NOT_FOUND")
    return folder


def require_optional_folder(db: Session, user: User, folder_id: Optional[str]) -> Optional[NoteFolder]:
    """None means the uncategorized bucket, which always exists."""
    if folder_id is None:
        return None
    return require_folder(db, user, folder_id)


def require_user_note(db: Session, user: User, note_id: str) -> UserNote:
    note = db.get(UserNote, note_id)
    if not note or note.user_id != user.id:
        raise _not_found("NOTE_NOT_FOUND")
    return note


def first_board(db: Session, user: User) -> Board:
    """The user's oldest board; a "General" board is created if there is none."""
    board = (
        db.query(Board)
        .filter(Board.user_id == user.id)
        .order_by(Board.created_at.asc())
        .first()
    )
    if board is None:
        board = Board(user_id=user.id, name=DEFAULT_BOARD_NAME)
        db.add(board)
        db.flush()
    return board
