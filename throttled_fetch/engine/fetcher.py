"""Sequential and bounded-concurrency retrieval of many resources."""

from __future__ import annotations

import asyncio
import time
from typing import Iterable, Iterator, Sequence, Union

import structlog

from ..config import DrainPolicy, FetchSettings
from ..errors import AggregateFetchError, TransportError
from .digest import digest_of as _digest_of
from .throttle import run_bounded, validate_budget, validate_policy
from .transport import ResourceIdentifier, Transport, TransportRouter, normalise_identifier

_default_logger = structlog.get_logger("throttled_fetch.fetcher")

Content = Union[str, bytes]


def _finish(data: bytes, encoding: str, raw: bool) -> Content:
    return data if raw else data.decode(encoding, errors="replace")


def _prepare(identifiers: Iterable[ResourceIdentifier], transport: Transport) -> list[ResourceIdentifier]:
    """Materialise identifiers and reject malformed ones before anything is sent."""

    prepared = list(identifiers)
    for identifier in prepared:
        normalise_identifier(identifier)
        if isinstance(transport, TransportRouter):
            transport.route(identifier)
    return prepared


def iter_content(
    identifiers: Iterable[ResourceIdentifier],
    transport: Transport,
    *,
    encoding: str = "utf-8",
    raw: bool = False,
) -> Iterator[Content]:
    """Lazily read each resource in order, one at a time.

    Content is decoded with ``encoding`` unless ``raw`` asks for the bytes.
    """

    for identifier in identifiers:
        yield _finish(transport.read_bytes(identifier), encoding, raw)


def fetch_all_sync(
    identifiers: Iterable[ResourceIdentifier],
    transport: Transport | None = None,
    *,
    encoding: str = "utf-8",
    raw: bool = False,
    logger: structlog.BoundLogger | None = None,
) -> list[Content]:
    """Fetch every resource sequentially; the baseline for bounded fetching.

    The first transport failure propagates and no partial list is returned.
    """

    log = logger or _default_logger
    owned = transport is None
    active = transport or TransportRouter()
    try:
        prepared = _prepare(identifiers, active)
        started = time.perf_counter()
        log.info("batch_started", mode="sync", count=len(prepared))
        try:
            results = list(iter_content(prepared, active, encoding=encoding, raw=raw))
        except TransportError as exc:
            log.warning("fetch_failed", mode="sync", identifier=exc.identifier, error=str(exc))
            raise
        log.info(
            "batch_finished",
            mode="sync",
            count=len(results),
            elapsed=round(time.perf_counter() - started, 4),
        )
        return results
    finally:
        if owned:
            active.close()


async def fetch_all_bounded(
    identifiers: Iterable[ResourceIdentifier],
    concurrency_budget: int,
    transport: Transport | None = None,
    *,
    policy: DrainPolicy = DrainPolicy.WINDOW,
    encoding: str = "utf-8",
    raw: bool = False,
    logger: structlog.BoundLogger | None = None,
) -> list[Content]:
    """Fetch every resource with at most ``concurrency_budget`` reads in flight.

    Results are aligned with ``identifiers`` whatever the completion order.
    Any failure stops further dispatch; once in-flight reads settle an
    ``AggregateFetchError`` listing every observed failure is raised.
    """

    budget = validate_budget(concurrency_budget)
    policy = validate_policy(policy)
    log = logger or _default_logger
    owned = transport is None
    active = transport or TransportRouter()
    try:
        prepared = _prepare(identifiers, active)
        if not prepared:
            return []
        started = time.perf_counter()
        log.info(
            "batch_started",
            mode="bounded",
            policy=policy.value,
            budget=budget,
            count=len(prepared),
        )

        def _operation(identifier: ResourceIdentifier):
            async def _read() -> Content:
                return _finish(await active.aread_bytes(identifier), encoding, raw)

            return _read

        outcomes = await run_bounded(
            [_operation(identifier) for identifier in prepared], budget, policy, log
        )
        failures = _collect_failures(outcomes)
        if failures:
            for position, error in failures:
                log.warning(
                    "fetch_failed",
                    mode="bounded",
                    position=position,
                    identifier=error.identifier,
                    error=str(error),
                )
            raise AggregateFetchError(failures)
        log.info(
            "batch_finished",
            mode="bounded",
            count=len(outcomes),
            elapsed=round(time.perf_counter() - started, 4),
        )
        return list(outcomes)  # type: ignore[arg-type]
    finally:
        if owned:
            await active.aclose()


def _collect_failures(outcomes: Sequence[object]) -> list[tuple[int, TransportError]]:
    failures: list[tuple[int, TransportError]] = []
    for position, outcome in enumerate(outcomes):
        if isinstance(outcome, TransportError):
            failures.append((position, outcome))
        elif isinstance(outcome, asyncio.CancelledError):
            continue
        elif isinstance(outcome, BaseException):
            # not a transport failure: surface it unchanged
            raise outcome
    return failures


def fetch_all_bounded_blocking(
    identifiers: Iterable[ResourceIdentifier],
    concurrency_budget: int,
    transport: Transport | None = None,
    **kwargs,
) -> list[Content]:
    return asyncio.run(fetch_all_bounded(identifiers, concurrency_budget, transport, **kwargs))


class BoundedFetcher:
    """Bundle a transport with settings for repeated fetch and digest calls."""

    def __init__(
        self,
        settings: FetchSettings | None = None,
        transport: Transport | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.settings = settings or FetchSettings()
        self.transport = transport or TransportRouter(settings=self.settings.transport)
        self.logger = logger or _default_logger

    def fetch_all_sync(
        self, identifiers: Iterable[ResourceIdentifier], *, raw: bool = False
    ) -> list[Content]:
        return fetch_all_sync(
            identifiers,
            self.transport,
            encoding=self.settings.encoding,
            raw=raw,
            logger=self.logger,
        )

    async def fetch_all_bounded(
        self,
        identifiers: Iterable[ResourceIdentifier],
        concurrency_budget: int | None = None,
        policy: DrainPolicy | None = None,
        *,
        raw: bool = False,
    ) -> list[Content]:
        return await fetch_all_bounded(
            identifiers,
            self.settings.concurrency_budget if concurrency_budget is None else concurrency_budget,
            self.transport,
            policy=policy or self.settings.drain_policy,
            encoding=self.settings.encoding,
            raw=raw,
            logger=self.logger,
        )

    async def digest_of(self, identifier: ResourceIdentifier) -> str:
        return await _digest_of(
            identifier, self.transport, uppercase=self.settings.digest_uppercase
        )

    def close(self) -> None:
        self.transport.close()

    async def aclose(self) -> None:
        await self.transport.aclose()

    def __enter__(self) -> "BoundedFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    async def __aenter__(self) -> "BoundedFetcher":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()


__all__ = [
    "BoundedFetcher",
    "fetch_all_bounded",
    "fetch_all_bounded_blocking",
    "fetch_all_sync",
    "iter_content",
]
