# services/api/routers/checklist.py
from __future__ import annotations

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.db import get_session
from core.ownership import require_card, require_checklist_note
from core.security import get_current_user
from core.validation import require_text
from models import ChecklistNote, User
from models.converters import checklist_note_to_api
from schemas import ChecklistNoteCreate, ChecklistNoteEdit

router = APIRouter(prefix="/api", tags=["checklist"])

Db = Annotated[Session, Depends(get_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]


@router.post("/cards/{card_id}/notes", status_code=status.HTTP_201_CREATED)
async def add_note(card_id: str, body: ChecklistNoteCreate, db: Db, user: CurrentUser):
    """Append a checklist item (not done) to a card."""
    card = require_card(db, user, card_id)
    note = ChecklistNote(card_id=card.id, text=require_text(body.text, "text"), done=False)
    db.add(note)
    db.flush()
    return checklist_note_to_api(note)


@router.post("/checklist/{note_id}/toggle")
async def toggle_note(note_id: str, db: Db, user: CurrentUser):
    note = require_checklist_note(db, user, note_id)
    note.done = not note.done
    db.flush()
    return checklist_note_to_api(note)


@router.patch("/checklist/{note_id}")
async def edit_note(note_id: str, body: ChecklistNoteEdit, db: Db, user: CurrentUser):
    note = require_checklist_note(db, user, note_id)
    note.text = require_text(body.text, "text")
    db.flush()
    return checklist_note_to_api(note)


@router.delete("/checklist/{note_id}")
async def remove_note(note_id: str, db: Db, user: CurrentUser):
    note = require_checklist_note(db, user, note_id)
    db.delete(note)
    db.flush()
    return {"deleted": True}
