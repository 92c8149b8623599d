"""Sequence generators and a simple word tokenizer."""

from __future__ import annotations

import re
from itertools import combinations
from typing import Sequence, TextIO, TypeVar

T = TypeVar("T")

_DELIMITERS = re.compile(r"[, .\t\n]+")


def fibonacci(count: int) -> list[int]:
    """Return the first ``count`` Fibonacci numbers: 1, 1, 2, 3, 5, ..."""

    if count < 0:
        raise ValueError(f"count must be >= 0, got {count}")
    sequence: list[int] = []
    previous, current = 0, 1
    for _ in range(count):
        previous, current = current, previous + current
        sequence.append(previous)
    return sequence


def tokenize(reader: TextIO) -> list[str]:
    """Split a text stream into words, closing the stream afterwards."""

    if reader is None:
        raise TypeError("reader is None")
    words: list[str] = []
    with reader:
        for line in reader:
            words.extend(token for token in _DELIMITERS.split(line) if token)
    return words


def generate_all_permutations(source: Sequence[T], count: int) -> list[list[T]]:
    """Return every order-preserving selection of ``count`` items from ``source``.

    [1, 2, 3, 4], 2 -> [1, 2], [1, 3], [1, 4], [2, 3], [2, 4], [3, 4]
    """

    if count < 0 or count > len(source):
        raise ValueError(f"count must be within 0..{len(source)}, got {count}")
    return [list(selection) for selection in combinations(source, count)]


__all__ = ["fibonacci", "generate_all_permutations", "tokenize"]
