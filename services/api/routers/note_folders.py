# services/api/routers/note_folders.py
from __future__ import annotations

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from core.db import get_session
from core.ordering import (
    apply_order,
    next_folder_position,
    next_note_position,
    notes_in_folder,
    ordered_folders,
    reindex_folder,
    renumber,
)
from core.ownership import require_folder
from core.security import get_current_user
from core.validation import DEFAULT_FOLDER_NAME, ensure_unique_ids, require_text, text_or_default
from models import NoteFolder, User
from models.converters import folder_to_api
from schemas import FolderCreate, FolderRename, FolderReorder

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes/folders", tags=["notes"])

Db = Annotated[Session, Depends(get_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]


@router.get("")
async def list_folders(db: Db, user: CurrentUser):
    return [folder_to_api(f) for f in ordered_folders(db, user.id)]


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_folder(body: FolderCreate, db: Db, user: CurrentUser):
    folder = NoteFolder(
        user_id=user.id,
        name=text_or_default(body.name, DEFAULT_FOLDER_NAME),
        position=next_folder_position(db, user.id),
    )
    db.add(folder)
    db.flush()
    return folder_to_api(folder)


@router.post("/reorder")
async def reorder_folders(body: FolderReorder, db: Db, user: CurrentUser):
    ordered = ensure_unique_ids(body.ordered_ids)
    folders = apply_order(ordered_folders(db, user.id), ordered, what="folder")
    renumber(folders)
    db.flush()
    return [folder_to_api(f) for f in folders]


@router.patch("/{folder_id}")
async def rename_folder(folder_id: str, body: FolderRename, db: Db, user: CurrentUser):
    folder = require_folder(db, user, folder_id)
    folder.name = require_text(body.name, "name")
    db.flush()
    return folder_to_api(folder)


@router.delete("/{folder_id}")
async def delete_folder(folder_id: str, db: Db, user: CurrentUser):
    """
    Delete a folder. Its notes are kept and moved to "uncategorized",
    after the notes already there.
    """
    folder = require_folder(db, user, folder_id)

    moving = notes_in_folder(db, user.id, folder.id)
    base = next_note_position(db, user.id, None)
    for i, note in enumerate(moving):
        note.folder_id = None
        note.position = base + i

    db.flush()
    db.delete(folder)
    reindex_folder(db, user.id, None)

    logger.info(f"Folder {folder_id} deleted; {len(moving)} notes moved to uncategorized")
    return {"deleted": True, "moved_notes": len(moving)}
