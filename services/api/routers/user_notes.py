"""
Personal rich-text notes: workspace load, create, edit, move, reorder, delete.
"""
from __future__ import annotations

import logging
from typing import Annotated, Any, Dict

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.db import get_session
from core.ordering import (
    apply_order,
    next_note_position,
    notes_in_folder,
    ordered_folders,
    reindex_folder,
    renumber,
)
from core.ownership import require_optional_folder, require_user_note
from core.security import get_current_user
from core.validation import (
    DEFAULT_NOTE_TITLE,
    DEFAULT_WORKSPACE_FOLDER_NAME,
    clamp_font_size,
    ensure_unique_ids,
    text_or_default,
)
from models import DEFAULT_FONT_SIZE, NoteFolder, User, UserNote
from models.converters import folder_to_api, user_note_to_api
from schemas import UserNoteCreate, UserNoteMove, UserNotePatch, UserNoteReorder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes", tags=["notes"])

Db = Annotated[Session, Depends(get_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]


def _all_notes(db: Session, user: User):
    # NULL folder ids sort first on SQLite and last on Postgres; both are fine for the UI
    return (
        db.query(UserNote)
        .filter(UserNote.user_id == user.id)
        .order_by(UserNote.folder_id.asc(), UserNote.position.asc(), UserNote.created_at.asc())
        .all()
    )


@router.get("/workspace")
async def load_workspace(db: Db, user: CurrentUser) -> Dict[str, Any]:
    """
    Everything the notes screen needs in one call.

    First visit seeds an empty uncategorized note and a "General" folder.
    """
    notes = _all_notes(db, user)
    if not notes:
        initial = UserNote(
            user_id=user.id,
            folder_id=None,
            title=DEFAULT_NOTE_TITLE,
            content="",
            font_size=DEFAULT_FONT_SIZE,
            position=0,
        )
        db.add(initial)
        db.flush()
        notes = [initial]

    folders = ordered_folders(db, user.id)
    if not folders:
        default_folder = NoteFolder(user_id=user.id, name=DEFAULT_WORKSPACE_FOLDER_NAME, position=0)
        db.add(default_folder)
        db.flush()
        folders = [default_folder]

    return {
        "folders": [folder_to_api(f) for f in folders],
        "notes": [user_note_to_api(n) for n in notes],
    }


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_note(body: UserNoteCreate, db: Db, user: CurrentUser):
    folder = require_optional_folder(db, user, body.folder_id)
    folder_id = folder.id if folder else None

    note = UserNote(
        user_id=user.id,
        folder_id=folder_id,
        title=DEFAULT_NOTE_TITLE,
        content="",
        font_size=DEFAULT_FONT_SIZE,
        position=next_note_position(db, user.id, folder_id),
    )
    db.add(note)
    db.flush()
    return user_note_to_api(note)


@router.post("/reorder")
async def reorder_notes(body: UserNoteReorder, db: Db, user: CurrentUser):
    """Reorder notes inside one folder; positions become 0..n-1."""
    ordered = ensure_unique_ids(body.ordered_ids)
    folder = require_optional_folder(db, user, body.folder_id)
    folder_id = folder.id if folder else None

    notes = apply_order(notes_in_folder(db, user.id, folder_id), ordered, what="note")
    renumber(notes)
    db.flush()
    return [user_note_to_api(n) for n in notes]


@router.get("/{note_id}")
async def get_note(note_id: str, db: Db, user: CurrentUser):
    return user_note_to_api(require_user_note(db, user, note_id))


@router.patch("/{note_id}")
async def update_note(note_id: str, body: UserNotePatch, db: Db, user: CurrentUser):
    """
    Autosave from the editor. Title falls back to the default, font size is
    rounded and clamped, content is stored as-is.
    """
    note = require_user_note(db, user, note_id)
    updates = body.model_dump(exclude_unset=True)

    if "title" in updates:
        note.title = text_or_default(updates["title"], DEFAULT_NOTE_TITLE)
    if "content" in updates:
        note.content = updates["content"] or ""
    if "font_size" in updates and updates["font_size"] is not None:
        note.font_size = clamp_font_size(updates["font_size"])

    db.flush()
    return user_note_to_api(note)


@router.post("/{note_id}/move")
async def move_note(note_id: str, body: UserNoteMove, db: Db, user: CurrentUser):
    """
    Move a note to the end of another folder (null = uncategorized).
    Both the source and the target folder are reindexed.
    """
    note = require_user_note(db, user, note_id)
    target = require_optional_folder(db, user, body.folder_id)
    target_id = target.id if target else None

    source_id = note.folder_id
    if source_id == target_id:
        return user_note_to_api(note)

    note.position = next_note_position(db, user.id, target_id)
    note.folder_id = target_id
    db.flush()

    reindex_folder(db, user.id, source_id)
    reindex_folder(db, user.id, target_id)
    return user_note_to_api(note)


@router.delete("/{note_id}")
async def delete_note(note_id: str, db: Db, user: CurrentUser):
    note = require_user_note(db, user, note_id)
    folder_id = note.folder_id

    db.delete(note)
    reindex_folder(db, user.id, folder_id)
    return {"deleted": True}
