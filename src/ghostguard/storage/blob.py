"""Blob storage for ban evidence images.

Two backends share one interface:
- LocalBlobStore writes under a directory the app serves at ``/blobs``
- SupabaseBlobStore uses Supabase Storage through the supabase client
"""

import asyncio
from pathlib import Path
from typing import Any
from urllib.parse import quote

from supabase import Client, create_client

from ghostguard.common.config import GhostGuardSettings
from ghostguard.common.logging import get_logger

logger = get_logger("storage")


class BlobStoreError(Exception):
    """Raised when an object could not be stored."""


class BlobStore:
    """Interface: ``upload`` raises BlobStoreError, ``public_url`` may return None."""

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        raise NotImplementedError

    def public_url(self, bucket: str, path: str) -> str | None:
        raise NotImplementedError

    async def close(self) -> None:
        return None


def _safe_relative(path: str) -> Path:
    rel = Path(path)
    if rel.is_absolute() or ".." in rel.parts:
        raise BlobStoreError(f"refusing object path {path!r}")
    return rel


class LocalBlobStore(BlobStore):
    def __init__(self, root: str | Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def _target(self, bucket: str, path: str) -> Path:
        return self.root / _safe_relative(bucket) / _safe_relative(path)

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        target = self._target(bucket, path)

        def _write() -> None:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(data)

        try:
            await asyncio.to_thread(_write)
        except OSError as exc:
            raise BlobStoreError(str(exc)) from exc

    def public_url(self, bucket: str, path: str) -> str | None:
        return f"{self.public_base_url}/{quote(bucket)}/{quote(path)}"


class SupabaseBlobStore(BlobStore):
    """Evidence bucket in Supabase Storage.

    The supabase client is synchronous, so uploads run in a worker thread.
    """

    def __init__(self, url: str, service_key: str, client: Any = None):
        self.url = url.rstrip("/")
        self.service_key = service_key
        self._client: Client | None = client

    def _get_client(self) -> Client:
        """Lazy-init the supabase client."""
        if self._client is None:
            if not self.url or not self.service_key:
                raise BlobStoreError("Supabase storage is not configured")
            self._client = create_client(self.url, self.service_key)
        return self._client

    async def upload(self, bucket: str, path: str, data: bytes, content_type: str) -> None:
        def _upload() -> None:
            self._get_client().storage.from_(bucket).upload(
                path,
                data,
                {"content-type": content_type, "upsert": "true"},
            )

        try:
            await asyncio.to_thread(_upload)
        except BlobStoreError:
            raise
        except Exception as exc:
            raise BlobStoreError(f"{type(exc).__name__}: {exc}") from exc

    def public_url(self, bucket: str, path: str) -> str | None:
        if not self.url:
            return None
        try:
            url = self._get_client().storage.from_(bucket).get_public_url(path)
        except Exception as exc:
            logger.warning("public url lookup failed for %s/%s: %s", bucket, path, exc)
            return None
        return url.rstrip("?") or None


def create_blob_store(settings: GhostGuardSettings) -> BlobStore:
    if settings.blob_backend == "supabase":
        return SupabaseBlobStore(settings.supabase_url, settings.supabase_service_key)
    if settings.blob_backend != "local":
        logger.warning("unknown blob backend %r, using local", settings.blob_backend)
    return LocalBlobStore(settings.blob_root, settings.blob_public_base_url)
