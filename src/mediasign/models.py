"""Immutable data structures for signed-URL caching."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import TYPE_CHECKING, NamedTuple, Optional

if TYPE_CHECKING:
    from mediasign.signer import SigningError


class CacheKey(NamedTuple):
    """Identity of a cached signed URL."""

    bucket: str
    path: str


@dataclass(frozen=True)
class CacheEntry:
    """Signed URL with the monotonic instant after which it must not be served."""

    url: str
    expires_at: float


@dataclass(frozen=True)
class SignResult:
    """Outcome of a single signing-service call."""

    url: str = ""
    error: Optional[SigningError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass(frozen=True)
class StorageReference:
    """Normalized pointer to a storage object, or an external URL."""

    bucket: str
    path: str
    external: bool = False

    def to_dict(self) -> dict:
        """Convert to plain dictionary."""
        return dataclasses.asdict(self)


@dataclass(frozen=True)
class OperatorBuckets:
    """Bucket names used for operator uploads."""

    assets: str
    documents: str
    logo: str

    def to_dict(self) -> dict:
        """Convert to plain dictionary."""
        return dataclasses.asdict(self)
