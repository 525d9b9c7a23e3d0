"""
Card, tag and card-reorder endpoints.
"""
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.db import get_session
from core.ordering import reorder_cards
from core.ownership import first_board, require_board, require_card
from core.security import get_current_user
from core.storage import remove_objects_best_effort
from core.validation import (
    DEFAULT_CARD_TITLE,
    ensure_unique_ids,
    normalize_tags,
    require_text,
    text_or_default,
)
from models import Card, User
from models.converters import card_to_api
from schemas import CardCreate, CardPatch, CardReorder, TagIn

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/cards", tags=["cards"])

Db = Annotated[Session, Depends(get_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_card(body: CardCreate, db: Db, user: CurrentUser):
    """
    Create a card with an empty checklist.
    Without `board_id` the card lands on the user's first board.
    """
    if body.board_id:
        board = require_board(db, user, body.board_id)
    else:
        board = first_board(db, user)

    card = Card(
        user_id=user.id,
        board_id=board.id,
        title=text_or_default(body.title, DEFAULT_CARD_TITLE),
        tags=[],
        position=0,
    )
    db.add(card)
    db.flush()
    logger.info(f"Card {card.id} created on board {board.id}")
    return card_to_api(card)


@router.post("/reorder")
async def reorder(body: CardReorder, db: Db, user: CurrentUser):
    """
    Persist a drag-and-drop result.

    Positions become idx * 10 in one transaction; ids that are unknown,
    foreign or on another board reject the whole request.
    """
    ordered = ensure_unique_ids(body.ordered_ids)
    board = require_board(db, user, body.board_id) if body.board_id else first_board(db, user)
    cards = reorder_cards(db, user.id, board.id, ordered)
    return {"ok": True, "positions": {c.id: c.position for c in cards}}


@router.patch("/{card_id}")
async def update_card(card_id: str, body: CardPatch, db: Db, user: CurrentUser):
    """
    Partial update of title / summary / tags.
    Only fields present in the payload are touched.
    """
    card = require_card(db, user, card_id)
    updates = body.model_dump(exclude_unset=True)

    if "title" in updates:
        card.title = require_text(updates["title"], "title")
    if "summary" in updates:
        card.summary = updates["summary"]
    if "tags" in updates:
        card.tags = normalize_tags(updates["tags"] or [])

    db.flush()
    return card_to_api(card)


@router.delete("/{card_id}")
async def delete_card(card_id: str, db: Db, user: CurrentUser):
    card = require_card(db, user, card_id)
    paths = [a.url for a in card.attachments]

    db.delete(card)
    db.flush()

    leftovers = remove_objects_best_effort(paths)
    if leftovers:
        logger.warning(f"Card {card_id} deleted; {len(leftovers)} attachment objects left in storage")
    return {"deleted": True}


# ---------- Tags ----------

@router.post("/{card_id}/tags")
async def add_tag(card_id: str, body: TagIn, db: Db, user: CurrentUser):
    card = require_card(db, user, card_id)
    tag = require_text(body.tag, "tag")

    tags = list(card.tags or [])
    if tag not in tags:
        # reassign so the JSON column is marked dirty
        card.tags = tags + [tag]
        db.flush()
    return {"id": card.id, "tags": list(card.tags)}


# tags are free text and may contain "/"
@router.delete("/{card_id}/tags/{tag:path}")
async def remove_tag(card_id: str, tag: str, db: Db, user: CurrentUser):
    card = require_card(db, user, card_id)
    card.tags = [t for t in (card.tags or []) if t != tag]
    db.flush()
    return {"id": card.id, "tags": list(card.tags)}
