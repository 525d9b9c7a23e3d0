# services/api/routers/note_images.py
"""
Inline images pasted into personal notes.

Images are stored under notes/<user_id>/ and served back through the API
(never through public bucket URLs), so only their owner can read them.
"""
from __future__ import annotations

import logging
import urllib.parse
import uuid
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile, status
from fastapi.responses import Response

from adapters.base import ObjectNotFound, StorageError
from core.security import get_current_user
from core.storage import get_object_storage, storage_metrics
from models import User
from settings import get_settings

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/notes/images", tags=["notes"])

CurrentUser = Annotated[User, Depends(get_current_user)]

ALLOWED_IMAGE_TYPES = {
    "image/jpeg": "jpg",
    "image/png": "png",
    "image/webp": "webp",
    "image/gif": "gif",
    "image/svg+xml": "svg",
}


def ext_from_mime(mime: str) -> str:
    return ALLOWED_IMAGE_TYPES.get(mime, "bin")


def user_image_prefix(user_id: str) -> str:
    return f"notes/{user_id}/"


@router.post("/upload")
async def upload_note_image(user: CurrentUser, file: Optional[UploadFile] = File(default=None)):
    """
    Store a pasted image and return the URL the editor should embed.

    - 400 no file
    - 415 type not in ALLOWED_IMAGE_TYPES
    - 413 larger than max_note_image_bytes
    """
    if file is None:
        raise HTTPException(status_code=400, detail="FILE_REQUIRED")

    mime = file.content_type or ""
    if mime not in ALLOWED_IMAGE_TYPES:
        raise HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail="UNSUPPORTED_IMAGE_TYPE")

    max_bytes = get_settings().max_note_image_bytes
    data = await file.read(max_bytes + 1)
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"FILE_TOO_LARGE: image exceeds {max_bytes // (1024 * 1024)}MB",
        )

    path = f"{user_image_prefix(user.id)}{uuid.uuid4()}.{ext_from_mime(mime)}"
    try:
        get_object_storage().upload(path, data, mime)
    except StorageError as e:
        logger.error(f"[notes-image-upload] storage error: {e}")
        raise HTTPException(status_code=500, detail="UPLOAD_FAILED")
    storage_metrics["uploads"] += 1

    url = f"/api/notes/images?path={urllib.parse.quote(path, safe='')}"
    return {"ok": True, "url": url, "path": path}


@router.get("")
async def get_note_image(user: CurrentUser, path: str = Query(default="")):
    if not path:
        raise HTTPException(status_code=400, detail="PATH_REQUIRED")

    if not path.startswith(user_image_prefix(user.id)) or ".." in path.split("/"):
        raise HTTPException(status_code=403, detail="FORBIDDEN")

    try:
        obj = get_object_storage().download(path)
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail="IMAGE_NOT_FOUND")
    except StorageError as e:
        logger.error(f"[notes-image-get] storage error: {e}")
        raise HTTPException(status_code=404, detail="IMAGE_NOT_FOUND")

    return Response(
        content=obj.data,
        media_type=obj.content_type or "application/octet-stream",
        headers={"cache-control": "private, max-age=31536000, immutable"},
    )
