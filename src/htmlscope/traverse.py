"""Depth-first open/close traversal over a node subtree."""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any, Literal


class Edge:
    """One step of a depth-first walk: entering (OPEN) or leaving (CLOSE) a node."""

    __slots__ = ("kind", "node")

    OPEN: Literal[0] = 0
    CLOSE: Literal[1] = 1

    kind: int
    node: Any

    def __init__(self, kind: int, node: Any) -> None:
        self.kind = kind
        self.node = node

    def __repr__(self) -> str:
        label = "Open" if self.kind == Edge.OPEN else "Close"
        return f"Edge.{label}({self.node!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Edge):
            return NotImplemented
        return self.kind == other.kind and self.node is other.node

    def __hash__(self) -> int:
        return hash((self.kind, id(self.node)))


class Traverse:
    """Lazy pre-order walk of ``root`` and its subtree.

    Yields ``Edge(OPEN, root)`` first and ``Edge(CLOSE, root)`` last. Once the
    walk is finished every further ``next()`` raises StopIteration.
    """

    __slots__ = ("_pending", "_stack", "root")

    root: Any
    _pending: Any | None
    _stack: list[tuple[Any, Iterator[Any]]]

    def __init__(self, root: Any) -> None:
        self.root = root
        self._pending = root
        self._stack = []

    def __iter__(self) -> Traverse:
        return self

    def __next__(self) -> Edge:
        if self._pending is not None:
            node = self._pending
            self._pending = None
            self._stack.append((node, iter(node.children)))
            return Edge(Edge.OPEN, node)

        if not self._stack:
            raise StopIteration

        node, children = self._stack[-1]
        child = next(children, None)
        if child is not None:
            self._stack.append((child, iter(child.children)))
            return Edge(Edge.OPEN, child)

        self._stack.pop()
        return Edge(Edge.CLOSE, node)


def descendants(node: Any) -> Iterator[Any]:
    """Yield ``node`` and every node below it in document order."""
    for edge in Traverse(node):
        if edge.kind == Edge.OPEN:
            yield edge.node
