"""Object storage signing service: interface and Supabase Storage adapter."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Optional
from urllib.parse import quote

import httpx

from mediasign.config import ConfigError, load_storage_config
from mediasign.models import SignResult

logger = logging.getLogger(__name__)

DEFAULT_HTTP_TIMEOUT = 10.0


class SigningError(Exception):
    """The signing service refused or failed to issue a URL."""

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class StorageSigner(ABC):
    """Issues time-limited URLs for objects in private buckets."""

    @abstractmethod
    async def create_signed_url(self, bucket: str, path: str, ttl_seconds: int) -> SignResult:
        """Sign *path* in *bucket* for *ttl_seconds*.

        Failures are reported through ``SignResult.error``, not raised.
        """
        ...

    def public_url(self, bucket: str, path: str) -> str:
        """Unsigned URL for a public bucket, or "" when the backend has none."""
        return ""


def _object_path(bucket: str, path: str) -> str:
    return f"{quote(bucket, safe='')}/{quote(path.lstrip('/'), safe='/')}"


def _error_message(resp: httpx.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text.strip() or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        return str(body.get("message") or body.get("error") or f"HTTP {resp.status_code}")
    return f"HTTP {resp.status_code}"


class SupabaseStorageSigner(StorageSigner):
    """Signs objects through the Supabase Storage REST API.

    Args:
        base_url: Project URL, e.g. ``https://abc.supabase.co``.
        api_key: Service or anon key sent as ``apikey`` and bearer token.
        client: Optional shared ``httpx.AsyncClient``; when omitted a client
                is opened per request.
        timeout: Per-request HTTP timeout in seconds.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str,
        *,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = DEFAULT_HTTP_TIMEOUT,
    ) -> None:
        self._storage_url = f"{base_url.rstrip('/')}/storage/v1"
        self._headers = {
            "apikey": api_key,
            "Authorization": f"Bearer {api_key}",
        }
        self._client = client
        self._timeout = timeout

    @classmethod
    def from_env(cls, client: Optional[httpx.AsyncClient] = None) -> "SupabaseStorageSigner":
        """Build a signer from MEDIASIGN_SUPABASE_URL / MEDIASIGN_SUPABASE_KEY.

        Raises:
            ConfigError: If storage is not configured.
        """
        config = load_storage_config()
        if config is None:
            raise ConfigError(
                "Storage not configured: MEDIASIGN_SUPABASE_URL and MEDIASIGN_SUPABASE_KEY must be set"
            )
        return cls(config.url, config.key, client=client)

    async def create_signed_url(self, bucket: str, path: str, ttl_seconds: int) -> SignResult:
        if self._client is not None:
            return await self._sign(self._client, bucket, path, ttl_seconds)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._sign(client, bucket, path, ttl_seconds)

    async def _sign(
        self, client: httpx.AsyncClient, bucket: str, path: str, ttl_seconds: int
    ) -> SignResult:
        endpoint = f"{self._storage_url}/object/sign/{_object_path(bucket, path)}"
        logger.debug("Requesting %ss signed URL for %s:%s", ttl_seconds, bucket, path)
        try:
            resp = await client.post(
                endpoint,
                json={"expiresIn": ttl_seconds},
                headers=self._headers,
            )
        except httpx.HTTPError as exc:
            return SignResult(error=SigningError(f"Signing request failed: {exc}"))

        if resp.status_code >= 400:
            return SignResult(error=SigningError(_error_message(resp), resp.status_code))

        try:
            body = resp.json()
        except ValueError:
            return SignResult(
                error=SigningError("Signing service returned invalid JSON", resp.status_code)
            )

        signed = body.get("signedURL") if isinstance(body, dict) else None
        if not signed:
            return SignResult(url="")
        return SignResult(url=f"{self._storage_url}{signed}")

    def public_url(self, bucket: str, path: str) -> str:
        return f"{self._storage_url}/object/public/{_object_path(bucket, path)}"
