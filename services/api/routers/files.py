# services/api/routers/files.py
from __future__ import annotations

import logging

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from adapters.base import ObjectNotFound, StorageError
from core.storage import get_object_storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/files", tags=["files"])


@router.get("/{token}")
async def download_signed(token: str):
    """
    Serve an object behind a signed URL issued by the local storage backend.
    Remote backends (Supabase) sign their own URLs, so this route 404s there.
    """
    storage = get_object_storage()
    resolve = getattr(storage, "resolve_signed_token", None)
    if resolve is None:
        raise HTTPException(status_code=404, detail="NOT_FOUND")

    path = resolve(token)
    if not path:
        raise HTTPException(status_code=403, detail="INVALID_OR_EXPIRED_SIGNATURE")

    try:
        obj = storage.download(path)
    except ObjectNotFound:
        raise HTTPException(status_code=404, detail="OBJECT_NOT_FOUND")
    except StorageError as e:
        logger.error(f"Signed download failed for {path}: {e}")
        raise HTTPException(status_code=500, detail="DOWNLOAD_FAILED")

    filename = path.rsplit("/", 1)[-1]
    return Response(
        content=obj.data,
        media_type=obj.content_type,
        headers={
            "Content-Disposition": f'inline; filename="{filename}"',
            "Cache-Control": "private, no-store",
        },
    )
