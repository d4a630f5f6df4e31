"""Element views and the lazy queries that start from them."""

from __future__ import annotations

import io
from collections.abc import Iterator
from typing import Any

from .errors import AttrNotFoundError, ElementNotFoundError, TextNotFoundError
from .fallible import TryNextError
from .node import ElementNode
from .selector import Selector
from .serialize import SerializeOpts, TraversalScope, serialize
from .traverse import Edge, Traverse, descendants


class ElementRef:
    """A borrowed view of an element node.

    Build one with :meth:`wrap`, which refuses non-element nodes. Views are
    cheap to copy around; two views are equal when they point at the same node.
    """

    __slots__ = ("node",)

    node: Any

    def __init__(self, node: Any) -> None:
        self.node = node

    @classmethod
    def wrap(cls, node: Any) -> ElementRef | None:
        """Return a view of ``node`` if it is an element, otherwise None."""
        if node.is_element():
            return cls(node)
        return None

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ElementRef):
            return NotImplemented
        return self.node is other.node

    def __hash__(self) -> int:
        return id(self.node)

    def __repr__(self) -> str:
        return f"ElementRef(<{self.node.name}>)"

    @property
    def value(self) -> ElementNode:
        """The element payload."""
        element = self.node.as_element()
        if element is None:
            raise AssertionError(f"ElementRef wraps a non-element node: {self.node!r}")
        return element

    @property
    def name(self) -> str:
        return self.value.name

    @property
    def parent(self) -> Any | None:
        return self.node.parent

    @property
    def children(self) -> list[Any]:
        return self.node.children

    def parent_element(self) -> ElementRef | None:
        parent = self.node.parent
        if parent is None:
            return None
        return ElementRef.wrap(parent)

    def descendants(self) -> Iterator[Any]:
        """Yield this node and every node below it, elements or not."""
        return descendants(self.node)

    def attr(self, attr: str) -> str | None:
        """Return the value of an attribute, or None."""
        return self.value.attr(attr)

    def try_attr(self, attr: str) -> str:
        """Return the value of an attribute.

        Raises:
            AttrNotFoundError: If the element has no such attribute
        """
        value = self.attr(attr)
        if value is None:
            raise AttrNotFoundError(self, attr)
        return value

    def query(self, selector: Selector | str) -> Select:
        """Return a lazy iterator over descendant elements matching ``selector``.

        ``:scope`` in the selector refers to this element, and this element is
        never part of the result.
        """
        if isinstance(selector, str):
            selector = Selector.parse(selector)
        return Select(self, selector)

    def text(self) -> Text:
        """Return a lazy iterator over the text nodes below this element."""
        return Text(self.node)

    def child_elements(self) -> Iterator[ElementRef]:
        """
        Yield the direct children that are elements.

        Example:
            >>> fragment = Html.parse_fragment("foo<span>bar</span><a>baz</a>qux")
            >>> [e.name for e in fragment.root_element().child_elements()]
            ['span', 'a']
        """
        for child in self.node.children:
            element = ElementRef.wrap(child)
            if element is not None:
                yield element

    def descendant_elements(self) -> Iterator[ElementRef]:
        """
        Yield this element and every element below it, in document order.

        Example:
            >>> fragment = Html.parse_fragment("foo<span><b>bar</b></span><a><i>baz</i></a>qux")
            >>> [e.name for e in fragment.root_element().descendant_elements()]
            ['html', 'span', 'b', 'a', 'i']
        """
        for node in descendants(self.node):
            element = ElementRef.wrap(node)
            if element is not None:
                yield element

    def _serialize(self, traversal_scope: TraversalScope) -> str:
        opts = SerializeOpts(
            scripting_enabled=False,
            traversal_scope=traversal_scope,
            create_missing_parent=False,
        )
        buf = io.StringIO()
        serialize(buf, self.node, opts)
        return buf.getvalue()

    def outer_html(self) -> str:
        """Return the HTML of this element, its own tags included."""
        return self._serialize(TraversalScope.INCLUDE_NODE)

    def inner_html(self) -> str:
        """Return the HTML of this element's children."""
        return self._serialize(TraversalScope.CHILDREN_ONLY)


class Select(TryNextError[ElementRef]):
    """Iterator over descendant elements matching a selector."""

    __slots__ = ("index", "inner", "scope", "selector")

    scope: ElementRef
    inner: Traverse
    selector: Selector
    index: int

    def __init__(self, scope: ElementRef, selector: Selector) -> None:
        self.scope = scope
        self.selector = selector
        self.inner = Traverse(scope.node)
        next(self.inner)  # Skip Edge.OPEN for the scope itself.
        self.index = 0

    def __next__(self) -> ElementRef:
        scope_node = self.scope.node
        for edge in self.inner:
            if edge.kind != Edge.OPEN:
                continue
            element = ElementRef.wrap(edge.node)
            if element is not None and self.selector.matches(element.node, scope_node):
                self.index += 1
                return element
        raise StopIteration

    def try_next_err(self) -> ElementNotFoundError:
        return ElementNotFoundError(self.scope, self.selector, self.index)


class Text(TryNextError[str]):
    """Iterator over descendant text nodes."""

    __slots__ = ("index", "inner")

    inner: Traverse
    index: int

    def __init__(self, root: Any) -> None:
        self.inner = Traverse(root)
        self.index = 0

    def __next__(self) -> str:
        for edge in self.inner:
            if edge.kind != Edge.OPEN:
                continue
            text = edge.node.as_text()
            if text is not None:
                self.index += 1
                return text
        raise StopIteration

    def try_next_err(self) -> TextNotFoundError:
        return TextNotFoundError(self.inner.root, self.index)
