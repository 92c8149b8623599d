"""Get-or-build lookup over any mutable mapping."""

from __future__ import annotations

from contextlib import nullcontext
from threading import Lock
from typing import Callable, MutableMapping, TypeVar

K = TypeVar("K")
V = TypeVar("V")


def get_or_build_value(
    mapping: MutableMapping[K, V],
    key: K,
    builder: Callable[[], V],
    lock: Lock | None = None,
) -> V:
    """Return ``mapping[key]``, building and storing it first when missing.

    Without ``lock`` this is not safe to share between threads; with one the
    check and the insert happen atomically and ``builder`` runs at most once
    per missing key.
    """

    with lock if lock is not None else nullcontext():
        if key not in mapping:
            mapping[key] = builder()
        return mapping[key]


__all__ = ["get_or_build_value"]
