from __future__ import annotations

import enum
from typing import Any

from .traverse import descendants


class NodeKind(enum.Enum):
    DOCUMENT = "document"
    FRAGMENT = "fragment"
    ELEMENT = "element"
    TEXT = "text"
    COMMENT = "comment"
    DOCTYPE = "doctype"
    PROCESSING_INSTRUCTION = "processing-instruction"


_KIND_BY_NAME: dict[str, NodeKind] = {
    "#document": NodeKind.DOCUMENT,
    "#document-fragment": NodeKind.FRAGMENT,
    "#comment": NodeKind.COMMENT,
    "!doctype": NodeKind.DOCTYPE,
    "#processing-instruction": NodeKind.PROCESSING_INSTRUCTION,
}


class Doctype:
    __slots__ = ("name", "public_id", "system_id")

    name: str | None
    public_id: str | None
    system_id: str | None

    def __init__(
        self,
        name: str | None = None,
        public_id: str | None = None,
        system_id: str | None = None,
    ) -> None:
        self.name = name
        self.public_id = public_id
        self.system_id = system_id


class ProcessingInstruction:
    __slots__ = ("data", "target")

    target: str
    data: str

    def __init__(self, target: str, data: str = "") -> None:
        self.target = target
        self.data = data


class SimpleDomNode:
    """A non-element, non-text node: document, fragment, comment, doctype or PI.

    The node kind is derived from ``name``. Leaf kinds (comment, doctype,
    processing instruction) have no children.
    """

    __slots__ = ("children", "data", "kind", "name", "parent")

    name: str
    kind: NodeKind
    parent: SimpleDomNode | ElementNode | None
    children: list[Any]
    data: str | Doctype | ProcessingInstruction | None

    def __init__(self, name: str, data: str | Doctype | ProcessingInstruction | None = None) -> None:
        try:
            self.kind = _KIND_BY_NAME[name]
        except KeyError:
            raise ValueError(f"Unknown node name: {name!r}") from None
        self.name = name
        self.parent = None
        self.data = data
        self.children = []

    def __repr__(self) -> str:
        if self.kind is NodeKind.COMMENT:
            return f"<SimpleDomNode #comment {self.data!r}>"
        return f"<SimpleDomNode {self.name}>"

    def append_child(self, node: Any) -> None:
        if self.kind in (NodeKind.COMMENT, NodeKind.DOCTYPE, NodeKind.PROCESSING_INSTRUCTION):
            raise ValueError(f"Node {self.name} cannot have children")
        self.children.append(node)
        node.parent = self

    def has_child_nodes(self) -> bool:
        """Return True if this node has children."""
        return bool(self.children)

    def is_element(self) -> bool:
        return False

    def is_text(self) -> bool:
        return False

    def as_element(self) -> ElementNode | None:
        return None

    def as_text(self) -> str | None:
        return None

    def to_text(self, separator: str = "", strip: bool = False) -> str:
        """Return the concatenated text of this node's descendants."""
        return _join_text(self, separator, strip)


class ElementNode:
    """An element: tag name, ordered attributes and namespace."""

    __slots__ = ("attrs", "children", "name", "namespace", "parent")

    kind: NodeKind = NodeKind.ELEMENT

    name: str
    parent: SimpleDomNode | ElementNode | None
    attrs: dict[str, str]
    children: list[Any]
    namespace: str

    def __init__(self, name: str, attrs: dict[str, str] | None = None, namespace: str | None = None) -> None:
        self.name = name
        self.parent = None
        self.attrs = attrs if attrs is not None else {}
        self.namespace = namespace or "html"
        self.children = []

    def __repr__(self) -> str:
        return f"<ElementNode {self.name}>"

    def append_child(self, node: Any) -> None:
        self.children.append(node)
        node.parent = self

    def has_child_nodes(self) -> bool:
        """Return True if this node has children."""
        return bool(self.children)

    def is_element(self) -> bool:
        return True

    def is_text(self) -> bool:
        return False

    def as_element(self) -> ElementNode:
        return self

    def as_text(self) -> str | None:
        return None

    def attr(self, name: str) -> str | None:
        """Return the value of attribute ``name``, or None when absent."""
        return self.attrs.get(name)

    @property
    def id(self) -> str | None:
        return self.attrs.get("id")

    @property
    def classes(self) -> list[str]:
        class_attr = self.attrs.get("class")
        return class_attr.split() if class_attr else []

    def has_class(self, name: str, case_sensitive: bool = True) -> bool:
        if case_sensitive:
            return name in self.classes
        name = name.lower()
        return any(c.lower() == name for c in self.classes)

    def to_text(self, separator: str = "", strip: bool = False) -> str:
        """Return the concatenated text of this node's descendants."""
        return _join_text(self, separator, strip)


class TextNode:
    __slots__ = ("data", "name", "parent")

    kind: NodeKind = NodeKind.TEXT

    data: str
    name: str
    parent: SimpleDomNode | ElementNode | None

    def __init__(self, data: str) -> None:
        self.data = data
        self.parent = None
        self.name = "#text"

    def __repr__(self) -> str:
        return f"<TextNode {self.data!r}>"

    @property
    def children(self) -> list[Any]:
        """Return empty list for TextNode (leaf node)."""
        return []

    def has_child_nodes(self) -> bool:
        """Return False for TextNode."""
        return False

    def is_element(self) -> bool:
        return False

    def is_text(self) -> bool:
        return True

    def as_element(self) -> ElementNode | None:
        return None

    def as_text(self) -> str:
        return self.data

    def to_text(self, separator: str = "", strip: bool = False) -> str:  # noqa: ARG002
        return self.data.strip() if strip else self.data


# Type alias for any node type
Node = SimpleDomNode | ElementNode | TextNode


def _join_text(node: Any, separator: str, strip: bool) -> str:
    parts: list[str] = []
    for descendant in descendants(node):
        data = descendant.as_text()
        if data is None:
            continue
        if strip:
            data = data.strip()
            if not data:
                continue
        parts.append(data)
    return separator.join(parts)
