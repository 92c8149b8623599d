"""MD5 content digests of single resources."""

from __future__ import annotations

import asyncio
import hashlib

from .transport import ResourceIdentifier, Transport, TransportRouter

DIGEST_LENGTH = 32


def compute_digest(data: bytes, *, uppercase: bool = False) -> str:
    """Return the 32 character MD5 hex digest of ``data``."""

    digest = hashlib.md5(data).hexdigest()
    return digest.upper() if uppercase else digest


async def digest_of(
    identifier: ResourceIdentifier,
    transport: Transport | None = None,
    *,
    uppercase: bool = False,
) -> str:
    """Read one resource through ``transport`` and hash its bytes.

    Transport failures propagate as raised. When no transport is given a
    temporary router is created and closed afterwards.
    """

    if transport is not None:
        data = await transport.aread_bytes(identifier)
        return compute_digest(data, uppercase=uppercase)
    router = TransportRouter()
    try:
        data = await router.aread_bytes(identifier)
    finally:
        await router.aclose()
    return compute_digest(data, uppercase=uppercase)


def digest_of_blocking(
    identifier: ResourceIdentifier,
    transport: Transport | None = None,
    *,
    uppercase: bool = False,
) -> str:
    return asyncio.run(digest_of(identifier, transport, uppercase=uppercase))


__all__ = ["DIGEST_LENGTH", "compute_digest", "digest_of", "digest_of_blocking"]
