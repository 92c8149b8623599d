"""Exception hierarchy shared by transports, the fetcher and the CLI."""

from __future__ import annotations

from typing import Sequence


class FetchError(Exception):
    """Base class for every error raised by throttled-fetch."""


class InvalidArgumentError(FetchError, ValueError):
    """Raised for malformed identifiers or an unusable concurrency budget."""


class TransportError(FetchError):
    """A single resource could not be read."""

    def __init__(self, identifier: str, message: str, status_code: int | None = None) -> None:
        super().__init__(f"{message}: {identifier}")
        self.identifier = identifier
        self.status_code = status_code


class AggregateFetchError(FetchError):
    """One or more fetches of a bounded batch failed.

    ``failures`` holds ``(position, error)`` pairs sorted by input position,
    so ``first`` is the failure closest to the start of the batch.
    """

    def __init__(self, failures: Sequence[tuple[int, TransportError]]) -> None:
        if not failures:
            raise ValueError("AggregateFetchError requires at least one failure")
        self.failures = sorted(failures, key=lambda item: item[0])
        first = self.failures[0][1]
        extra = len(self.failures) - 1
        suffix = f" (+{extra} more)" if extra else ""
        super().__init__(f"Batch fetch failed: {first}{suffix}")

    @property
    def first(self) -> TransportError:
        return self.failures[0][1]

    @property
    def identifiers(self) -> list[str]:
        return [error.identifier for _, error in self.failures]


__all__ = ["AggregateFetchError", "FetchError", "InvalidArgumentError", "TransportError"]
