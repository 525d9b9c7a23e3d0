# services/api/routers/boards.py
from __future__ import annotations

import logging
from typing import Annotated, Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session, selectinload

from core.db import get_session
from core.ownership import first_board, require_board
from core.security import get_current_user
from core.storage import remove_objects_best_effort
from core.validation import DEFAULT_BOARD_NAME, require_text, text_or_default
from models import Attachment, Board, Card, User
from models.converters import board_to_api, card_to_api
from schemas import BoardCreate, BoardRename

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["boards"])

Db = Annotated[Session, Depends(get_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]


def _user_boards(db: Session, user: User) -> List[Board]:
    return (
        db.query(Board)
        .filter(Board.user_id == user.id)
        .order_by(Board.created_at.asc())
        .all()
    )


def load_board_cards(db: Session, user: User, board_id: str) -> List[Card]:
    """
    Cards of one board in display order: position asc, newest first on ties.
    Checklist items and attachments are loaded eagerly.
    """
    return (
        db.query(Card)
        .options(selectinload(Card.notes), selectinload(Card.attachments))
        .filter(Card.user_id == user.id, Card.board_id == board_id)
        .order_by(Card.position.asc(), Card.created_at.desc())
        .all()
    )


@router.get("/tasks")
async def tasks_entry(db: Db, user: CurrentUser):
    """
    Entry point of the task board: returns the user's first board,
    creating a "General" board on first visit.
    """
    board = first_board(db, user)
    return {"board_id": board.id, "board": board_to_api(board)}


@router.get("/boards")
async def list_boards(db: Db, user: CurrentUser):
    return [board_to_api(b) for b in _user_boards(db, user)]


@router.post("/boards", status_code=status.HTTP_201_CREATED)
async def create_board(body: BoardCreate, db: Db, user: CurrentUser):
    board = Board(user_id=user.id, name=text_or_default(body.name, DEFAULT_BOARD_NAME))
    db.add(board)
    db.flush()
    logger.info(f"Board {board.id} created for user {user.id}")
    return board_to_api(board)


@router.get("/boards/{board_id}")
async def get_board(board_id: str, db: Db, user: CurrentUser) -> Dict[str, Any]:
    """
    Board view: the board, the list of the user's boards (for switching)
    and the board's cards with checklist, tags, summary and attachments.
    """
    board = require_board(db, user, board_id)
    cards = load_board_cards(db, user, board.id)
    return {
        "board": board_to_api(board),
        "boards": [board_to_api(b) for b in _user_boards(db, user)],
        "cards": [card_to_api(c) for c in cards],
    }


@router.patch("/boards/{board_id}")
async def rename_board(board_id: str, body: BoardRename, db: Db, user: CurrentUser):
    board = require_board(db, user, board_id)
    board.name = require_text(body.name, "name")
    db.flush()
    return board_to_api(board)


@router.delete("/boards/{board_id}")
async def delete_board(board_id: str, db: Db, user: CurrentUser):
    """
    Delete a board with its cards. Attachment objects are removed from
    storage best-effort; leftover objects are only logged.
    """
    board = require_board(db, user, board_id)

    paths = [
        url
        for (url,) in db.query(Attachment.url)
        .join(Card, Attachment.card_id == Card.id)
        .filter(Card.board_id == board.id)
        .all()
    ]

    db.delete(board)
    db.flush()

    leftovers = remove_objects_best_effort(paths)
    if leftovers:
        logger.warning(f"Board {board_id} deleted; {len(leftovers)} attachment objects left in storage")

    return {"deleted": True, "removed_objects": len(paths) - len(leftovers)}
