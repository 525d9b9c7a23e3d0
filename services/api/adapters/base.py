"""
Object storage adapter interface for the checklist board.
Defines the contract that all object-storage backends must implement.
"""

from dataclasses import dataclass
from typing import List, Protocol


class StorageError(Exception):
    """Raised by adapters when the backend rejects or fails an operation."""


class ObjectNotFound(StorageError):
    """The requested path does not exist in the bucket."""


@dataclass
class StoredObject:
    data: bytes
    content_type: str = "application/octet-stream"


class ObjectStorage(Protocol):
    """
    Protocol defining the interface for all object-storage adapters.

    This allows swapping between the local filesystem and Supabase Storage
    without changing the router code.

    NOTE:
    - Paths are bucket-relative, e.g. "cards/<card_id>/<uuid>-report.pdf".
    - Uploads never overwrite: an existing path is an error.
    """

    bucket: str

    def upload(self, path: str, data: bytes, content_type: str) -> None:
        """
        Store `data` at `path`.

        Raises:
            StorageError: path already exists or backend failure
        """
        ...

    def download(self, path: str) -> StoredObject:
        """
        Read an object back.

        Raises:
            ObjectNotFound: nothing stored at `path`
            StorageError: backend failure
        """
        ...

    def remove(self, paths: List[str]) -> None:
        """
        Delete objects. Missing paths are ignored.

        Raises:
            StorageError: backend failure
        """
        ...

    def create_signed_url(self, path: str, expires_in: int) -> str:
        """
        Return a URL that grants read access to `path` for `expires_in` seconds.
        """
        ...

    def exists(self, path: str) -> bool:
        ...
