from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Lock

import pytest

from throttled_fetch.katas import TreeNode, depth_traversal, get_or_build_value, width_traversal


def _node(data, *children):
    return TreeNode(data, list(children))


def test_depth_traversal() -> None:
    root = _node(1, _node(2, _node(3), _node(4, _node(5))), _node(6), _node(7, _node(8)))
    assert depth_traversal(root) == [1, 2, 3, 4, 5, 6, 7, 8]


def test_width_traversal() -> None:
    root = _node(1, _node(2, _node(5), _node(6, _node(8))), _node(3), _node(4, _node(7)))
    assert width_traversal(root) == [1, 2, 3, 4, 5, 6, 7, 8]


def test_single_node_and_none_children() -> None:
    leaf = TreeNode("only", None)
    assert depth_traversal(leaf) == ["only"]
    assert width_traversal(leaf) == ["only"]


@pytest.mark.parametrize("traversal", [depth_traversal, width_traversal])
def test_traversal_rejects_none(traversal) -> None:
    with pytest.raises(TypeError):
        traversal(None)


def test_get_or_build_value_builds_once() -> None:
    cache: dict[int, str] = {}
    calls: list[int] = []

    def build() -> str:
        calls.append(10)
        return "person-10"

    assert get_or_build_value(cache, 10, build) == "person-10"
    assert get_or_build_value(cache, 10, build) == "person-10"
    assert calls == [10]
    assert cache == {10: "person-10"}


def test_get_or_build_value_with_lock_is_atomic() -> None:
    cache: dict[str, object] = {}
    lock = Lock()
    built: list[object] = []

    def build() -> object:
        value = object()
        built.append(value)
        return value

    with ThreadPoolExecutor(max_workers=8) as pool:
        results = list(pool.map(lambda _: get_or_build_value(cache, "k", build, lock), range(64)))

    assert len(built) == 1
    assert all(result is built[0] for result in results)
