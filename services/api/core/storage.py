# services/api/core/storage.py
from __future__ import annotations

import logging
import threading
from typing import Iterable, List, Optional

from cachetools import TTLCache

from adapters.base import ObjectStorage, StorageError
from settings import get_settings

logger = logging.getLogger(__name__)

_object_storage: Optional[ObjectStorage] = None

# Signed URLs are re-used for half their lifetime so a card with many
# previews does not hit the storage API on every click.
_signed_cache: Optional[TTLCache] = None
_signed_lock = threading.Lock()

storage_metrics = {
    "signed_cache_hits": 0,
    "signed_cache_misses": 0,
    "uploads": 0,
    "removes": 0,
}


def build_object_storage(backend: str) -> ObjectStorage:
    settings = get_settings()
    backend = (backend or "").strip().lower()

    if backend == "local":
        from adapters.local_fs import LocalObjectStorage

        return LocalObjectStorage.from_dir(
            root=settings.local_storage_dir,
            bucket=settings.storage_bucket,
            secret=settings.jwt_secret,
        )

    if backend == "supabase":
        from adapters.supabase_storage import SupabaseObjectStorage

        return SupabaseObjectStorage(
            url=settings.supabase_url,
            service_key=settings.supabase_service_role,
            bucket=settings.storage_bucket,
        )

    raise ValueError(f"Unknown OBJECT_STORAGE_BACKEND: {backend}")


def get_object_storage() -> ObjectStorage:
    """
    Lazily construct and cache the configured object-storage adapter.
    """
    global _object_storage
    if _object_storage is None:
        backend = get_settings().object_storage_backend
        _object_storage = build_object_storage(backend)
        logger.info(f"Initialized object storage backend: {backend.upper()}")
    return _object_storage


def set_object_storage(storage: Optional[ObjectStorage]) -> None:
    """Swap the adapter (tests) or drop it so the next call rebuilds from settings."""
    global _object_storage
    _object_storage = storage
    clear_signed_url_cache()


def _cache() -> TTLCache:
    global _signed_cache
    if _signed_cache is None:
        ttl = max(1, get_settings().signed_url_ttl_seconds // 2)
        _signed_cache = TTLCache(maxsize=512, ttl=ttl)
    return _signed_cache


def clear_signed_url_cache() -> None:
    global _signed_cache
    with _signed_lock:
        _signed_cache = None


def signed_url_for(path: str) -> str:
    """
    Return a signed URL for `path`, reusing a cached one while it is still
    comfortably inside its validity window.
    """
    with _signed_lock:
        cached = _cache().get(path)
    if cached:
        storage_metrics["signed_cache_hits"] += 1
        return cached

    storage_metrics["signed_cache_misses"] += 1
    url = get_object_storage().create_signed_url(path, get_settings().signed_url_ttl_seconds)
    with _signed_lock:
        _cache()[path] = url
    return url


def forget_signed_url(path: str) -> None:
    with _signed_lock:
        _cache().pop(path, None)


def remove_objects_best_effort(paths: Iterable[str]) -> List[str]:
    """
    Remove objects left behind by a card/board delete.
    Failures are logged, never raised; returns the paths that could not be removed.
    """
    paths = [p for p in paths if p]
    if not paths:
        return []
    try:
        get_object_storage().remove(paths)
        storage_metrics["removes"] += len(paths)
    except StorageError as e:
        logger.warning(f"Could not remove {len(paths)} objects from storage: {e}")
        return paths
    for p in paths:
        forget_signed_url(p)
    return []
