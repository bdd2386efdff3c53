"""URL classification for storage paths."""

from __future__ import annotations

import re

ABSOLUTE_URL_PATTERN: re.Pattern[str] = re.compile(r"^https?://", re.IGNORECASE)


def is_absolute_url(value: str) -> bool:
    """Return True if *value* already is an http(s) URL rather than a storage key."""
    if not isinstance(value, str):
        return False
    return ABSOLUTE_URL_PATTERN.match(value) is not None
