# services/api/adapters/supabase_storage/__init__.py
"""
Supabase Storage adapter.

Thin httpx client over the Storage REST API, authenticated with the
service-role key. Only the four calls the app needs are wrapped:
upload, remove, createSignedUrl and download.
"""
from __future__ import annotations

import logging
import urllib.parse
from typing import List, Optional

import httpx

from adapters.base import ObjectNotFound, StorageError, StoredObject

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class SupabaseObjectStorage:
    """
    Supabase Storage bucket accessed with the service role.

    The bucket is expected to be private; reads from browsers go through
    signed URLs or through the API.
    """

    def __init__(
        self,
        url: str,
        service_key: str,
        bucket: str,
        client: Optional[httpx.Client] = None,
    ):
        if not url:
            raise ValueError("SUPABASE_URL not configured")
        if not service_key:
            raise ValueError("SUPABASE_SERVICE_ROLE not configured")

        self.base_url = url.rstrip("/")
        self.bucket = bucket
        self._client = client or httpx.Client(timeout=DEFAULT_TIMEOUT)
        self._headers = {
            "Authorization": f"Bearer {service_key}",
            "apikey": service_key,
        }

    # ---- helpers ----

    def _object_url(self, *segments: str) -> str:
        quoted = [urllib.parse.quote(s, safe="/") for s in segments]
        return f"{self.base_url}/storage/v1/" + "/".join(quoted)

    def _request(self, method: str, url: str, **kwargs) -> httpx.Response:
        headers = dict(self._headers)
        headers.update(kwargs.pop("headers", {}) or {})
        try:
            return self._client.request(method, url, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.error(f"Supabase storage timeout: {method} {url}")
            raise StorageError("STORAGE_TIMEOUT") from e
        except httpx.RequestError as e:
            logger.error(f"Supabase storage request error: {method} {url}: {e}")
            raise StorageError("STORAGE_UNREACHABLE") from e

    @staticmethod
    def _is_not_found(resp: httpx.Response) -> bool:
        if resp.status_code == 404:
            return True
        # Storage API reports missing objects as 400 with a nested statusCode
        if resp.status_code == 400:
            try:
                body = resp.json()
            except ValueError:
                return False
            return str(body.get("statusCode")) == "404" or body.get("error") == "not_found"
        return False

    # ---- ObjectStorage ----

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        resp = self._request(
            "POST",
            self._object_url("object", self.bucket, path),
            content=data,
            headers={
                "content-type": content_type or "application/octet-stream",
                "x-upsert": "false",
            },
        )
        if resp.status_code >= 400:
            logger.error(f"[supabase-upload] {resp.status_code} {resp.text[:300]} path={path}")
            raise StorageError(f"UPLOAD_FAILED: {path}")

    def download(self, path: str) -> StoredObject:
        resp = self._request("GET", self._object_url("object", self.bucket, path))
        if self._is_not_found(resp):
            raise ObjectNotFound(path)
        if resp.status_code >= 400:
            logger.error(f"[supabase-download] {resp.status_code} {resp.text[:300]} path={path}")
            raise StorageError(f"DOWNLOAD_FAILED: {path}")
        return StoredObject(
            data=resp.content,
            content_type=resp.headers.get("content-type") or "application/octet-stream",
        )

    def remove(self, paths: List[str]) -> None:
        if not paths:
            return
        resp = self._request(
            "DELETE",
            self._object_url("object", self.bucket),
            json={"prefixes": list(paths)},
        )
        if resp.status_code >= 400:
            logger.error(f"[supabase-remove] {resp.status_code} {resp.text[:300]} paths={paths}")
            raise StorageError("REMOVE_FAILED")

    def create_signed_url(self, path: str, expires_in: int) -> str:
        resp = self._request(
            "POST",
            self._object_url("object", "sign", self.bucket, path),
            json={"expiresIn": int(expires_in)},
        )
        if resp.status_code >= 400:
            logger.error(f"[supabase-sign] {resp.status_code} {resp.text[:300]} path={path}")
            raise StorageError(f"SIGN_FAILED: {path}")

        body = resp.json() or {}
        signed = body.get("signedURL") or body.get("signedUrl")
        if not signed:
            raise StorageError(f"SIGN_FAILED: {path}")
        if signed.startswith("http"):
            return signed
        return f"{self.base_url}/storage/v1{signed}"

    def exists(self, path: str) -> bool:
        resp = self._request("HEAD", self._object_url("object", self.bucket, path))
        return resp.status_code == 200
