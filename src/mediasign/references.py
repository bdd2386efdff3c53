"""Storage reference normalization: raw strings to (bucket, path) pairs."""

from __future__ import annotations

import re
from typing import Optional

from mediasign.models import StorageReference
from mediasign.registry import CacheRegistry
from mediasign.validators import is_absolute_url

STORAGE_URL_PATTERN: re.Pattern[str] = re.compile(
    r"^https?://[^/]+/storage/v1/object/(?:public|sign)/(?P<bucket>[^/]+)/(?P<path>[^?#]+)",
    re.IGNORECASE,
)
STORAGE_PATH_PATTERN: re.Pattern[str] = re.compile(
    r"^/?storage/v1/object/(?:public|sign)/(?P<bucket>[^/]+)/(?P<path>[^?#]+)",
    re.IGNORECASE,
)
_BUCKET_PREFIX_PATTERN: re.Pattern[str] = re.compile(r"^(?P<bucket>[^/]+)/(?P<path>.+)$")


def _clean_bucket(value: str) -> str:
    return value.strip("/") if value else ""


def parse_storage_reference(
    raw: Optional[str], default_bucket: str = ""
) -> Optional[StorageReference]:
    """Normalize a stored media reference.

    Accepts bare object paths, bucket-prefixed paths, Supabase storage URLs
    (``/storage/v1/object/public|sign/<bucket>/<path>``, with or without
    scheme and host) and external http(s) URLs.

    Returns:
        A StorageReference, with ``external=True`` for URLs outside storage,
        or None when no bucket and path can be determined.
    """
    if not isinstance(raw, str) or not raw.strip():
        return None
    value = raw.strip()

    match = STORAGE_URL_PATTERN.match(value) or STORAGE_PATH_PATTERN.match(value)
    if match is None and is_absolute_url(value):
        return StorageReference(bucket="", path=value, external=True)

    bucket = _clean_bucket(default_bucket)
    path = value.lstrip("/")

    if match is not None:
        bucket = _clean_bucket(match.group("bucket"))
        path = match.group("path").lstrip("/")
    elif bucket and path.startswith(f"{bucket}/"):
        path = path[len(bucket) + 1:]

    if not bucket:
        prefixed = _BUCKET_PREFIX_PATTERN.match(path)
        if prefixed:
            bucket = _clean_bucket(prefixed.group("bucket"))
            path = prefixed.group("path").lstrip("/")

    if not bucket or not path:
        return None
    return StorageReference(bucket=bucket, path=path)


async def resolve_reference(
    registry: CacheRegistry,
    raw: Optional[str],
    default_bucket: str = "",
    public_fallback: bool = False,
) -> str:
    """Resolve a raw media reference to a displayable URL, or "".

    With *public_fallback*, a failed signing attempt falls back to the
    object's unsigned public URL.
    """
    ref = parse_storage_reference(raw, default_bucket)
    if ref is None:
        return ""
    if ref.external:
        return ref.path

    url = await registry.resolve(ref.bucket, ref.path)
    if not url and public_fallback:
        url = registry.signer.public_url(ref.bucket, ref.path)
    return url
