"""Signed-URL cache with a write-time buffer and a read-time freshness margin."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import Callable, Optional

from mediasign.models import CacheEntry, CacheKey, SignResult
from mediasign.signer import SigningError, StorageSigner
from mediasign.validators import is_absolute_url

logger = logging.getLogger(__name__)

REQUEST_TTL_SECONDS = 60
WRITE_BUFFER_SECONDS = 5
READ_MARGIN_SECONDS = 2
DEFAULT_TIMEOUT_SECONDS = 10.0

ErrorCallback = Callable[[CacheKey, SigningError], None]


class CacheConfigError(ValueError):
    """Cache constructed with unusable parameters."""


class SignedUrlCache:
    """Per-bucket cache of signed URLs.

    A URL signed for ``ttl_seconds`` is stored as good for
    ``ttl_seconds - write_buffer`` and served only while more than
    ``read_margin`` seconds of that window remain, so a returned URL stays
    fetchable for at least ``ttl_seconds - write_buffer - read_margin``.

    Entries are never evicted, only overwritten by a later successful
    signing call for the same key.
    """

    def __init__(
        self,
        bucket: str,
        signer: StorageSigner,
        *,
        ttl_seconds: int = REQUEST_TTL_SECONDS,
        write_buffer: float = WRITE_BUFFER_SECONDS,
        read_margin: float = READ_MARGIN_SECONDS,
        timeout: Optional[float] = DEFAULT_TIMEOUT_SECONDS,
        coalesce: bool = False,
        on_error: Optional[ErrorCallback] = None,
        entries: Optional[dict[CacheKey, CacheEntry]] = None,
    ) -> None:
        if not bucket:
            raise CacheConfigError("bucket must be a non-empty string")
        if ttl_seconds <= write_buffer + read_margin:
            raise CacheConfigError(
                f"ttl_seconds ({ttl_seconds}) must exceed write_buffer + read_margin "
                f"({write_buffer + read_margin})"
            )
        self._bucket = bucket
        self._signer = signer
        self._ttl = ttl_seconds
        self._write_buffer = write_buffer
        self._read_margin = read_margin
        self._timeout = timeout
        self._coalesce = coalesce
        self._on_error = on_error
        self._entries: dict[CacheKey, CacheEntry] = entries if entries is not None else {}
        self._inflight: dict[CacheKey, asyncio.Task[str]] = {}

    @property
    def bucket(self) -> str:
        return self._bucket

    async def resolve(self, path: Optional[str]) -> str:
        """Return a displayable URL for *path*, or "" if none can be issued.

        Empty paths yield "" and absolute http(s) URLs are returned unchanged,
        both without touching the cache or the signing service. Signing
        failures and timeouts yield "" and leave the cache untouched.
        """
        if not path:
            return ""
        if is_absolute_url(path):
            return path

        key = CacheKey(self._bucket, path)
        now = time.monotonic()
        entry = self._entries.get(key)
        if entry is not None and entry.expires_at > now + self._read_margin:
            logger.debug("Signed URL cache hit for %s:%s", key.bucket, key.path)
            return entry.url

        logger.debug("Signed URL cache miss for %s:%s", key.bucket, key.path)
        if not self._coalesce:
            return await self._refresh(key)

        task = self._inflight.get(key)
        if task is None:
            task = asyncio.ensure_future(self._refresh(key))
            self._inflight[key] = task
            task.add_done_callback(lambda _t, k=key: self._inflight.pop(k, None))
        return await asyncio.shield(task)

    async def _refresh(self, key: CacheKey) -> str:
        now = time.monotonic()
        try:
            result = await self._sign(key)
        except SigningError as exc:
            result = SignResult(error=exc)

        if result.error is not None:
            self._report(key, result.error)
            return ""

        url = result.url or ""
        self._entries[key] = CacheEntry(
            url=url,
            expires_at=now + self._ttl - self._write_buffer,
        )
        return url

    async def _sign(self, key: CacheKey) -> SignResult:
        call = self._signer.create_signed_url(key.bucket, key.path, self._ttl)
        if self._timeout is None:
            return await call
        try:
            return await asyncio.wait_for(call, timeout=self._timeout)
        except asyncio.TimeoutError as exc:
            raise SigningError(f"Signing timed out after {self._timeout}s") from exc

    def _report(self, key: CacheKey, error: SigningError) -> None:
        logger.warning(
            "Failed to create signed URL for %s:%s: %s", key.bucket, key.path, error
        )
        if self._on_error is not None:
            self._on_error(key, error)

    def invalidate(self, path: str) -> None:
        """Drop the cached URL for *path*, if any."""
        self._entries.pop(CacheKey(self._bucket, path), None)

    def __len__(self) -> int:
        return sum(1 for key in self._entries if key.bucket == self._bucket)
