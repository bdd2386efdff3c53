"""Shared fixtures: a scripted in-memory signing service."""

from __future__ import annotations

import asyncio

import pytest

from mediasign.models import SignResult
from mediasign.signer import StorageSigner


class StubSigner(StorageSigner):
    """Records calls and replays scripted responses.

    Each entry of ``responses`` is a SignResult to return or an exception to
    raise. When the script runs out, a URL carrying the call number is
    issued: ``https://cdn.example/<bucket>/<path>?sig=<n>``.
    """

    def __init__(self) -> None:
        self.calls: list[tuple[str, str, int]] = []
        self.responses: list = []
        self.delay = 0.0

    async def create_signed_url(self, bucket: str, path: str, ttl_seconds: int) -> SignResult:
        self.calls.append((bucket, path, ttl_seconds))
        n = len(self.calls)
        await asyncio.sleep(self.delay)
        if self.responses:
            response = self.responses.pop(0)
            if isinstance(response, Exception):
                raise response
            return response
        return SignResult(url=f"https://cdn.example/{bucket}/{path}?sig={n}")

    def public_url(self, bucket: str, path: str) -> str:
        return f"https://cdn.example/public/{bucket}/{path}"


@pytest.fixture
def signer() -> StubSigner:
    return StubSigner()
