"""Configuration loader: reads storage and cache settings from environment variables.

Supports per-bucket overrides with global fallback:
    MEDIASIGN_{BUCKET}_{SUFFIX} → MEDIASIGN_{SUFFIX} → default
"""

from __future__ import annotations

import logging
import os
import re
from dataclasses import dataclass
from typing import Optional

from mediasign.models import OperatorBuckets

logger = logging.getLogger(__name__)

DEFAULT_OPERATOR_ASSETS_BUCKET = "op_assets"

_TRUE_VALUES = {"1", "true", "yes", "on"}
_FALSE_VALUES = {"0", "false", "no", "off"}


class ConfigError(Exception):
    """Environment configuration is present but unusable."""


@dataclass(frozen=True)
class StorageConfig:
    url: str
    key: str


def bucket_env_key(bucket: str) -> str:
    """Map a bucket name to its env-var infix, e.g. "op-assets" → "OP_ASSETS"."""
    return re.sub(r"[^A-Z0-9]", "_", bucket.strip().upper())


def _env(key: str, bucket: Optional[str] = None) -> str:
    """Resolve an env var with optional bucket-specific override.

    Checks MEDIASIGN_{BUCKET}_{SUFFIX} first, then MEDIASIGN_{SUFFIX}.
    """
    if bucket:
        val = os.environ.get(f"MEDIASIGN_{bucket_env_key(bucket)}_{key}", "").strip()
        if val:
            return val
    return os.environ.get(f"MEDIASIGN_{key}", "").strip()


def load_storage_config(log_missing: bool = True) -> Optional[StorageConfig]:
    """Return the storage endpoint and key, or None when either is missing."""
    url = _env("SUPABASE_URL")
    key = _env("SUPABASE_KEY")
    if not url or not key:
        if log_missing:
            logger.error(
                "Storage client not configured: "
                "MEDIASIGN_SUPABASE_URL and MEDIASIGN_SUPABASE_KEY must be set"
            )
        return None
    return StorageConfig(url=url, key=key)


def _parse_number(name: str, raw: str, cast):
    try:
        value = cast(raw)
    except ValueError as exc:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from exc
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def _parse_flag(name: str, raw: str) -> bool:
    lower = raw.lower()
    if lower in _TRUE_VALUES:
        return True
    if lower in _FALSE_VALUES:
        return False
    raise ConfigError(f"{name} must be a boolean, got {raw!r}")


def load_cache_options(bucket: Optional[str] = None) -> dict:
    """Build SignedUrlCache keyword overrides from environment variables.

    Args:
        bucket: Optional bucket name. When set, bucket-specific env vars
                take priority over global ones.

    Environment variables (global):
        MEDIASIGN_TTL     : requested signed-URL validity in seconds
        MEDIASIGN_TIMEOUT : bound on a single signing call in seconds
        MEDIASIGN_COALESCE: share one in-flight signing call per key

    Bucket-specific (e.g. for bucket "documents"):
        MEDIASIGN_DOCUMENTS_TTL
        MEDIASIGN_DOCUMENTS_TIMEOUT
        MEDIASIGN_DOCUMENTS_COALESCE

    Only non-empty values are included in the returned dict.

    Raises:
        ConfigError: If a value is set but cannot be parsed.
    """
    opts: dict = {}

    ttl = _env("TTL", bucket)
    if ttl:
        opts["ttl_seconds"] = _parse_number("TTL", ttl, int)

    timeout = _env("TIMEOUT", bucket)
    if timeout:
        opts["timeout"] = _parse_number("TIMEOUT", timeout, float)

    coalesce = _env("COALESCE", bucket)
    if coalesce:
        opts["coalesce"] = _parse_flag("COALESCE", coalesce)

    return opts


def load_operator_buckets() -> OperatorBuckets:
    """Return operator bucket names.

    Environment variables:
        MEDIASIGN_OPERATOR_ASSETS_BUCKET   : default "op_assets"
        MEDIASIGN_OPERATOR_DOCUMENTS_BUCKET: defaults to the assets bucket
        MEDIASIGN_OPERATOR_LOGO_BUCKET     : defaults to the assets bucket
    """
    assets = _env("OPERATOR_ASSETS_BUCKET") or DEFAULT_OPERATOR_ASSETS_BUCKET
    return OperatorBuckets(
        assets=assets,
        documents=_env("OPERATOR_DOCUMENTS_BUCKET") or assets,
        logo=_env("OPERATOR_LOGO_BUCKET") or assets,
    )


OPERATOR_BUCKET_ALIASES = {
    "@operator-assets": "assets",
    "@operator-documents": "documents",
    "@operator-logo": "logo",
}


def resolve_bucket_alias(bucket: str) -> str:
    """Expand an operator bucket alias such as "@operator-logo" to its bucket name.

    Any other value is returned unchanged.
    """
    field = OPERATOR_BUCKET_ALIASES.get(bucket.strip().lower()) if bucket else None
    if field is None:
        return bucket
    return getattr(load_operator_buckets(), field)
