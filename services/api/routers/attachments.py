"""
Card attachment endpoints: upload, list, signed URL, delete.

Files live in the private object-storage bucket; the DB row keeps the
object PATH in `url`, and clients open files through short-lived signed URLs.
"""
from __future__ import annotations

import logging
import uuid
from typing import Annotated, List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from sqlalchemy.orm import Session

from adapters.base import StorageError
from core.db import get_session
from core.ownership import require_attachment, require_card
from core.security import get_current_user
from core.storage import forget_signed_url, get_object_storage, remove_objects_best_effort, signed_url_for, storage_metrics
from core.validation import safe_filename
from models import Attachment, User
from models.converters import attachment_to_api
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["attachments"])

Db = Annotated[Session, Depends(get_session)]
CurrentUser = Annotated[User, Depends(get_current_user)]

DEFAULT_MIME = "application/octet-stream"


def attachment_path(card_id: str, filename: str) -> str:
    return f"cards/{card_id}/{uuid.uuid4()}-{safe_filename(filename)}"


@router.post("/attachments/upload")
async def upload_attachments(
    db: Db,
    user: CurrentUser,
    card_id: Optional[str] = Form(default=None),
    files: Optional[List[UploadFile]] = File(default=None),
):
    """
    Upload one or more files to a card.

    - 400 when card_id or files are missing
    - 413 when any file exceeds the size limit (nothing is stored)
    - 500 when the storage backend fails
    """
    if not card_id:
        raise HTTPException(status_code=400, detail="CARD_ID_REQUIRED")
    if not files:
        raise HTTPException(status_code=400, detail="NO_FILES")

    card = require_card(db, user, card_id)
    max_bytes = get_settings().max_attachment_bytes

    # Read and size-check everything before touching storage
    payloads = []
    for f in files:
        data = await f.read(max_bytes + 1)
        if len(data) > max_bytes:
            raise HTTPException(
                status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
                detail=f"FILE_TOO_LARGE: {f.filename} exceeds {max_bytes // (1024 * 1024)}MB",
            )
        payloads.append((f.filename or "file", f.content_type or DEFAULT_MIME, data))

    storage = get_object_storage()
    stored_paths: List[str] = []
    uploaded = []
    for name, mime, data in payloads:
        path = attachment_path(card.id, name)
        try:
            storage.upload(path, data, mime)
        except StorageError as e:
            logger.error(f"Attachment upload failed for {name} on card {card.id}: {e}")
            remove_objects_best_effort(stored_paths)
            raise HTTPException(status_code=500, detail=f"UPLOAD_FAILED: {name}")
        stored_paths.append(path)
        storage_metrics["uploads"] += 1

        att = Attachment(card_id=card.id, name=name, url=path, mime=mime, size=len(data))
        db.add(att)
        db.flush()
        uploaded.append(
            {"id": att.id, "name": att.name, "mime": att.mime, "size": att.size}
        )

    logger.info(f"Uploaded {len(uploaded)} attachments to card {card.id}")
    return {"ok": True, "attachments": uploaded}


@router.get("/cards/{card_id}/attachments")
async def list_attachments(card_id: str, db: Db, user: CurrentUser):
    card = require_card(db, user, card_id)
    return [attachment_to_api(a) for a in card.attachments]


@router.get("/attachments/{attachment_id}/signed")
async def signed_attachment_url(attachment_id: str, db: Db, user: CurrentUser):
    att = require_attachment(db, user, attachment_id)
    try:
        url = signed_url_for(att.url)
    except StorageError as e:
        logger.error(f"signedUrl error: {e} path: {att.url}")
        raise HTTPException(status_code=500, detail="SIGN_FAILED")

    return {
        "ok": True,
        "signed_url": url,
        "meta": {"url": att.url, "name": att.name, "mime": att.mime, "size": att.size},
    }


@router.delete("/attachments/{attachment_id}")
async def delete_attachment(attachment_id: str, db: Db, user: CurrentUser):
    """
    Remove the object first; the row is only deleted once storage agreed,
    so a storage failure never leaves a row pointing at nothing.
    """
    att = require_attachment(db, user, attachment_id)
    try:
        get_object_storage().remove([att.url])
    except StorageError as e:
        logger.error(f"Storage delete failed for attachment {attachment_id}: {e}")
        raise HTTPException(status_code=500, detail="STORAGE_DELETE_FAILED")

    forget_signed_url(att.url)
    storage_metrics["removes"] += 1
    db.delete(att)
    db.flush()
    return {"ok": True}
