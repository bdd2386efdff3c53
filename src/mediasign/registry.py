"""Process-wide registry of signed-URL caches, one per bucket."""

from __future__ import annotations

import logging
from typing import Any, Optional

from mediasign.cache import SignedUrlCache
from mediasign.config import load_cache_options
from mediasign.models import CacheEntry, CacheKey
from mediasign.signer import StorageSigner, SupabaseStorageSigner

logger = logging.getLogger(__name__)


class CacheRegistry:
    """Hands out one SignedUrlCache per bucket, all sharing a single entry map.

    Keyword arguments are default SignedUrlCache options; per-bucket
    environment overrides (see ``config.load_cache_options``) win over them.
    """

    def __init__(self, signer: StorageSigner, **defaults: Any) -> None:
        self._signer = signer
        self._defaults = defaults
        self._entries: dict[CacheKey, CacheEntry] = {}
        self._caches: dict[str, SignedUrlCache] = {}

    @property
    def signer(self) -> StorageSigner:
        return self._signer

    def cache_for(self, bucket: str) -> SignedUrlCache:
        """Return the cache serving *bucket*, creating it on first use."""
        cache = self._caches.get(bucket)
        if cache is None:
            opts = {**self._defaults, **load_cache_options(bucket)}
            cache = SignedUrlCache(bucket, self._signer, entries=self._entries, **opts)
            self._caches[bucket] = cache
            logger.debug("Created signed URL cache for bucket %s with %s", bucket, opts)
        return cache

    async def resolve(self, bucket: str, path: Optional[str]) -> str:
        """Shortcut for ``cache_for(bucket).resolve(path)``."""
        return await self.cache_for(bucket).resolve(path)

    def __len__(self) -> int:
        return len(self._entries)


def build_registry(**defaults: Any) -> CacheRegistry:
    """Registry backed by the Supabase signer configured in the environment.

    Raises:
        ConfigError: If storage is not configured.
    """
    return CacheRegistry(SupabaseStorageSigner.from_env(), **defaults)
