"""Standalone algorithm exercises shipped alongside the fetcher."""

from .cache import get_or_build_value
from .sequences import fibonacci, generate_all_permutations, tokenize
from .trees import TreeNode, depth_traversal, width_traversal

__all__ = [
    "TreeNode",
    "depth_traversal",
    "fibonacci",
    "generate_all_permutations",
    "get_or_build_value",
    "tokenize",
    "width_traversal",
]
