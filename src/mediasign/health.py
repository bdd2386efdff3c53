"""Environment health checks for storage configuration and HTTP client availability."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from mediasign.config import load_storage_config


@dataclass(frozen=True)
class HealthStatus:
    storage_configured: bool
    storage_url: Optional[str]
    httpx_version: Optional[str]
    message: str


def check_health() -> HealthStatus:
    """Check environment health. Never raises."""
    # httpx
    httpx_version: Optional[str] = None
    try:
        import httpx
        httpx_version = getattr(httpx, "__version__", None)
    except ImportError:
        pass

    # storage
    config = load_storage_config(log_missing=False)

    if config is not None:
        message = "Storage is configured"
    else:
        message = (
            "Storage not configured. Set MEDIASIGN_SUPABASE_URL and "
            "MEDIASIGN_SUPABASE_KEY to the project URL and API key."
        )

    return HealthStatus(
        storage_configured=config is not None,
        storage_url=config.url if config is not None else None,
        httpx_version=httpx_version,
        message=message,
    )
