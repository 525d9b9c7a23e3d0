# services/api/adapters/local_fs/__init__.py
from __future__ import annotations

import json
import logging
import os
import time
from dataclasses import dataclass
from pathlib import Path, PurePosixPath
from typing import List, Optional

from jose import JWTError, jwt

from adapters.base import ObjectNotFound, StorageError, StoredObject

logger = logging.getLogger(__name__)

SIGN_ALG = "HS256"
SIGN_PURPOSE = "object-download"
_META_SUFFIX = ".meta.json"


def _ensure_dir(path: Path):
    if not path.is_dir():
        path.mkdir(parents=True, exist_ok=True)


def _clean_path(path: str) -> str:
    """
    Reject absolute paths and '..' segments so every object stays
    under the bucket directory.
    """
    p = PurePosixPath(path)
    if not path or p.is_absolute() or any(part in ("..", "") for part in p.parts):
        raise StorageError(f"INVALID_OBJECT_PATH: {path!r}")
    if path.endswith(_META_SUFFIX):
        raise StorageError(f"INVALID_OBJECT_PATH: {path!r}")
    return str(p)


# ---- Adapter implementation --------------------------------------------------

@dataclass(frozen=True)
class LocalObjectStorage:
    """
    Filesystem-backed bucket for local dev and tests.

    Layout: <root>/<bucket>/<path> with a "<path>.meta.json" sidecar holding
    the content type. Signed URLs are short-lived JWTs served by /files/{token}.
    """
    root: Path
    bucket: str
    secret: str
    public_prefix: str = "/files"

    @classmethod
    def from_dir(cls, root: str, bucket: str, secret: str) -> "LocalObjectStorage":
        base = Path(root).resolve()
        _ensure_dir(base / bucket)
        return cls(root=base, bucket=bucket, secret=secret)

    def _file(self, path: str) -> Path:
        return self.root / self.bucket / _clean_path(path)

    def _meta(self, file: Path) -> Path:
        return file.with_name(file.name + _META_SUFFIX)

    def exists(self, path: str) -> bool:
        return self._file(path).is_file()

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        target = self._file(path)
        if target.exists():
            raise StorageError(f"OBJECT_EXISTS: {path}")
        try:
            _ensure_dir(target.parent)
            with open(target, "xb") as fh:
                fh.write(data)
            self._meta(target).write_text(json.dumps({"content_type": content_type}))
        except FileExistsError as e:
            raise StorageError(f"OBJECT_EXISTS: {path}") from e
        except OSError as e:
            logger.error(f"Local upload failed for {path}: {e}")
            raise StorageError(f"UPLOAD_FAILED: {path}") from e

    def download(self, path: str) -> StoredObject:
        target = self._file(path)
        if not target.is_file():
            raise ObjectNotFound(path)

        content_type = "application/octet-stream"
        meta = self._meta(target)
        if meta.is_file():
            try:
                content_type = json.loads(meta.read_text()).get("content_type") or content_type
            except (OSError, ValueError):
                logger.warning(f"Unreadable metadata for {path}, using octet-stream")

        return StoredObject(data=target.read_bytes(), content_type=content_type)

    def remove(self, paths: List[str]) -> None:
        for path in paths:
            target = self._file(path)
            try:
                if target.exists():
                    os.remove(target)
                meta = self._meta(target)
                if meta.exists():
                    os.remove(meta)
            except OSError as e:
                logger.error(f"Local remove failed for {path}: {e}")
                raise StorageError(f"REMOVE_FAILED: {path}") from e

    # ---- signed URLs ----

    def create_signed_url(self, path: str, expires_in: int) -> str:
        _clean_path(path)
        token = jwt.encode(
            {
                "path": path,
                "bucket": self.bucket,
                "purpose": SIGN_PURPOSE,
                "exp": int(time.time()) + int(expires_in),
            },
            self.secret,
            algorithm=SIGN_ALG,
        )
        return f"{self.public_prefix}/{token}"

    def resolve_signed_token(self, token: str) -> Optional[str]:
        """Return the object path a signed token grants, or None if invalid/expired."""
        try:
            payload = jwt.decode(token, self.secret, algorithms=[SIGN_ALG])
        except JWTError:
            return None
        if payload.get("purpose") != SIGN_PURPOSE or payload.get("bucket") != self.bucket:
            return None
        return payload.get("path") or None
