"""Byte transports: the "read all bytes of a resource" collaborators."""

from __future__ import annotations

import asyncio
import re
from pathlib import Path
from typing import Protocol, Union, runtime_checkable
from urllib.parse import unquote, urlparse

import httpx
import structlog

from ..config import TransportSettings
from ..errors import InvalidArgumentError, TransportError

ResourceIdentifier = Union[str, Path]

HTTP_SCHEMES = frozenset({"http", "https"})
_WINDOWS_DRIVE = re.compile(r"^[a-zA-Z]:[\\/]")


def normalise_identifier(identifier: ResourceIdentifier) -> str:
    """Return the identifier as a string, rejecting blank input.

    Surrounding whitespace is kept: it can be part of a file name.
    """

    if isinstance(identifier, Path):
        return str(identifier)
    if not isinstance(identifier, str):
        raise InvalidArgumentError(
            f"Resource identifier must be str or Path, got {type(identifier).__name__}"
        )
    if not identifier.strip():
        raise InvalidArgumentError("Resource identifier cannot be empty")
    return identifier


def scheme_of(identifier: ResourceIdentifier) -> str:
    """Return the lowercase URI scheme, or ``""`` for plain filesystem paths."""

    text = normalise_identifier(identifier).strip()
    if isinstance(identifier, Path) or _WINDOWS_DRIVE.match(text):
        return ""
    return urlparse(text).scheme.lower()


@runtime_checkable
class Transport(Protocol):
    """Given an identifier, produce its raw bytes or raise ``TransportError``."""

    def read_bytes(self, identifier: ResourceIdentifier) -> bytes: ...

    async def aread_bytes(self, identifier: ResourceIdentifier) -> bytes: ...

    def close(self) -> None: ...

    async def aclose(self) -> None: ...


class HttpTransport:
    """HTTP(S) GET through httpx; clients are created on first use."""

    def __init__(
        self,
        settings: TransportSettings | None = None,
        *,
        transport: httpx.BaseTransport | None = None,
        async_transport: httpx.AsyncBaseTransport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.settings = settings or TransportSettings()
        self.logger = logger or structlog.get_logger("throttled_fetch.transport")
        self._transport = transport
        self._async_transport = async_transport
        self._client: httpx.Client | None = None
        self._async_client: httpx.AsyncClient | None = None

    def _client_kwargs(self) -> dict:
        return {
            "follow_redirects": self.settings.follow_redirects,
            "timeout": self.settings.timeout,
            "headers": self.settings.request_headers(),
        }

    @property
    def client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(transport=self._transport, **self._client_kwargs())
        return self._client

    @property
    def async_client(self) -> httpx.AsyncClient:
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(
                transport=self._async_transport, **self._client_kwargs()
            )
        return self._async_client

    def read_bytes(self, identifier: ResourceIdentifier) -> bytes:
        url = normalise_identifier(identifier).strip()
        try:
            response = self.client.get(url)
        except httpx.InvalidURL as exc:
            raise InvalidArgumentError(f"Malformed URL: {url}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(url, f"Request failed ({exc.__class__.__name__})") from exc
        return self._content_of(url, response)

    async def aread_bytes(self, identifier: ResourceIdentifier) -> bytes:
        url = normalise_identifier(identifier).strip()
        try:
            response = await self.async_client.get(url)
        except httpx.InvalidURL as exc:
            raise InvalidArgumentError(f"Malformed URL: {url}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(url, f"Request failed ({exc.__class__.__name__})") from exc
        return self._content_of(url, response)

    def _content_of(self, url: str, response: httpx.Response) -> bytes:
        try:
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            raise TransportError(
                url, f"Unexpected status {response.status_code}", status_code=response.status_code
            ) from exc
        self.logger.debug("http_read", url=url, status=response.status_code, size=len(response.content))
        return response.content

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        self.close()
        if self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None


class FileTransport:
    """Read local files addressed by plain path or ``file://`` URI."""

    @staticmethod
    def path_of(identifier: ResourceIdentifier) -> Path:
        if isinstance(identifier, Path):
            return identifier
        text = normalise_identifier(identifier)
        if scheme_of(text) == "file":
            parsed = urlparse(text.strip())
            path = unquote(parsed.path)
            # file:///C:/dir/x arrives as "/C:/dir/x"
            if re.match(r"^/[a-zA-Z]:/", path):
                path = path[1:]
            if parsed.netloc and parsed.netloc != "localhost":
                path = f"//{parsed.netloc}{path}"
            return Path(path)
        return Path(text)

    def read_bytes(self, identifier: ResourceIdentifier) -> bytes:
        path = self.path_of(identifier)
        try:
            return path.read_bytes()
        except FileNotFoundError as exc:
            raise TransportError(str(identifier), "File not found") from exc
        except OSError as exc:
            raise TransportError(str(identifier), f"Cannot read file ({exc.strerror})") from exc

    async def aread_bytes(self, identifier: ResourceIdentifier) -> bytes:
        return await asyncio.to_thread(self.read_bytes, identifier)

    def close(self) -> None:
        return

    async def aclose(self) -> None:
        return


class TransportRouter:
    """Dispatch identifiers to the HTTP or file transport by scheme."""

    def __init__(
        self,
        http: Transport | None = None,
        file: Transport | None = None,
        settings: TransportSettings | None = None,
    ) -> None:
        self.http = http or HttpTransport(settings)
        self.file = file or FileTransport()

    def route(self, identifier: ResourceIdentifier) -> Transport:
        scheme = scheme_of(identifier)
        if scheme in HTTP_SCHEMES:
            return self.http
        if scheme in ("", "file"):
            return self.file
        raise InvalidArgumentError(f"Unsupported scheme '{scheme}' in identifier: {identifier}")

    def read_bytes(self, identifier: ResourceIdentifier) -> bytes:
        return self.route(identifier).read_bytes(identifier)

    async def aread_bytes(self, identifier: ResourceIdentifier) -> bytes:
        return await self.route(identifier).aread_bytes(identifier)

    def close(self) -> None:
        self.http.close()
        self.file.close()

    async def aclose(self) -> None:
        await self.http.aclose()
        await self.file.aclose()


__all__ = [
    "FileTransport",
    "HttpTransport",
    "ResourceIdentifier",
    "Transport",
    "TransportRouter",
    "normalise_identifier",
    "scheme_of",
]
