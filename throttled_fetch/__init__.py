"""Bounded-concurrency resource fetching and MD5 content digests."""

from .config import DrainPolicy, FetchSettings, TransportSettings
from .engine import (
    BoundedFetcher,
    FileTransport,
    HttpTransport,
    Transport,
    TransportRouter,
    compute_digest,
    digest_of,
    fetch_all_bounded,
    fetch_all_sync,
)
from .errors import AggregateFetchError, FetchError, InvalidArgumentError, TransportError

__version__ = "0.1.0"

__all__ = [
    "AggregateFetchError",
    "BoundedFetcher",
    "DrainPolicy",
    "FetchError",
    "FetchSettings",
    "FileTransport",
    "HttpTransport",
    "InvalidArgumentError",
    "Transport",
    "TransportError",
    "TransportRouter",
    "TransportSettings",
    "compute_digest",
    "digest_of",
    "fetch_all_bounded",
    "fetch_all_sync",
]
