"""Depth-first and breadth-first traversal of n-ary trees."""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass
class TreeNode(Generic[T]):
    data: T
    children: list["TreeNode[T]"] = field(default_factory=list)


def depth_traversal(root: TreeNode[T]) -> list[T]:
    """Pre-order traversal, visiting children left to right."""

    if root is None:
        raise TypeError("root is None")
    visited: list[T] = []
    stack = [root]
    while stack:
        node = stack.pop()
        visited.append(node.data)
        # reversed so the leftmost child is popped first
        stack.extend(reversed(node.children or []))
    return visited


def width_traversal(root: TreeNode[T]) -> list[T]:
    """Level-order traversal."""

    if root is None:
        raise TypeError("root is None")
    visited: list[T] = []
    queue = deque([root])
    while queue:
        node = queue.popleft()
        visited.append(node.data)
        queue.extend(node.children or [])
    return visited


__all__ = ["TreeNode", "depth_traversal", "width_traversal"]
