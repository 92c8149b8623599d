"""Engine components: transports, drain policies, fetching and digests."""

from .digest import compute_digest, digest_of, digest_of_blocking
from .fetcher import (
    BoundedFetcher,
    fetch_all_bounded,
    fetch_all_bounded_blocking,
    fetch_all_sync,
    iter_content,
)
from .throttle import run_bounded, run_rolling, run_windowed, validate_budget, validate_policy
from .transport import FileTransport, HttpTransport, Transport, TransportRouter

__all__ = [
    "BoundedFetcher",
    "FileTransport",
    "HttpTransport",
    "Transport",
    "TransportRouter",
    "compute_digest",
    "digest_of",
    "digest_of_blocking",
    "fetch_all_bounded",
    "fetch_all_bounded_blocking",
    "fetch_all_sync",
    "iter_content",
    "run_bounded",
    "run_rolling",
    "run_windowed",
    "validate_budget",
    "validate_policy",
]
