"""mediasign MCP server: signed URLs for private storage objects."""

from __future__ import annotations

import dataclasses
import json
from typing import Optional

from mcp.server.fastmcp import FastMCP

from mediasign.cache import CacheConfigError
from mediasign.config import ConfigError, resolve_bucket_alias
from mediasign.health import check_health
from mediasign.references import parse_storage_reference, resolve_reference
from mediasign.registry import CacheRegistry, build_registry

mcp = FastMCP("mediasign")

_registry: Optional[CacheRegistry] = None


def _get_registry() -> CacheRegistry:
    global _registry
    if _registry is None:
        _registry = build_registry()
    return _registry


@mcp.tool()
async def resolve_signed_url(bucket: str, path: str) -> str:
    """Return a short-lived signed URL for an object in a private bucket.

    Args:
        bucket: Storage bucket name, or an operator alias
                (@operator-assets, @operator-documents, @operator-logo).
        path: Object path within the bucket. Absolute http(s) URLs are
              returned unchanged.

    Returns:
        JSON string with the URL (empty when signing failed) or error details.
    """
    try:
        bucket = resolve_bucket_alias(bucket)
        url = await _get_registry().resolve(bucket, path)
        return json.dumps({"bucket": bucket, "path": path, "url": url})
    except (ConfigError, CacheConfigError) as exc:
        return json.dumps({"error": "ConfigError", "message": str(exc)})
    except Exception as exc:
        return json.dumps({"error": "UnexpectedError", "message": str(exc)})


@mcp.tool()
async def resolve_storage_reference(reference: str, default_bucket: str = "") -> str:
    """Resolve a stored media reference to a displayable URL.

    Args:
        reference: Object path, bucket-prefixed path, Supabase storage URL,
                   or external URL.
        default_bucket: Bucket used when the reference does not name one.

    Returns:
        JSON string with the normalized reference and URL, or error details.
    """
    default_bucket = resolve_bucket_alias(default_bucket)
    ref = parse_storage_reference(reference, default_bucket)
    if ref is None:
        return json.dumps({"error": "InvalidReference", "message": f"Cannot resolve {reference!r}"})
    try:
        url = await resolve_reference(_get_registry(), reference, default_bucket)
        return json.dumps({**ref.to_dict(), "url": url})
    except (ConfigError, CacheConfigError) as exc:
        return json.dumps({"error": "ConfigError", "message": str(exc)})
    except Exception as exc:
        return json.dumps({"error": "UnexpectedError", "message": str(exc)})


@mcp.tool()
async def health_check() -> str:
    """Check mediasign environment health (storage configuration, HTTP client).

    Returns:
        JSON string with health status details.
    """
    return json.dumps(dataclasses.asdict(check_health()), indent=2)


if __name__ == "__main__":
    mcp.run()
