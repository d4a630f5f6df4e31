"""HTML serialization for htmlscope trees.

Output follows the HTML fragment serialization algorithm, so a serialized
subtree parses back into the same tree.
"""

from __future__ import annotations

import enum
from typing import Any, Protocol

from .node import NodeKind

VOID_ELEMENTS: frozenset[str] = frozenset(
    {
        "area",
        "base",
        "basefont",
        "bgsound",
        "br",
        "col",
        "embed",
        "frame",
        "hr",
        "img",
        "input",
        "keygen",
        "link",
        "meta",
        "param",
        "source",
        "track",
        "wbr",
    }
)

# Children of these elements are written without escaping.
RAW_TEXT_ELEMENTS: frozenset[str] = frozenset(
    {"style", "script", "xmp", "iframe", "noembed", "noframes", "plaintext"}
)


class Writer(Protocol):
    def write(self, s: str, /) -> Any: ...


class TraversalScope(enum.Enum):
    INCLUDE_NODE = "include-node"
    CHILDREN_ONLY = "children-only"


class SerializeOpts:
    __slots__ = ("create_missing_parent", "scripting_enabled", "traversal_scope")

    scripting_enabled: bool
    traversal_scope: TraversalScope
    create_missing_parent: bool

    def __init__(
        self,
        scripting_enabled: bool = False,
        traversal_scope: TraversalScope = TraversalScope.INCLUDE_NODE,
        create_missing_parent: bool = False,
    ) -> None:
        # scripting_enabled: serialize <noscript> children raw, as a browser with scripting would.
        self.scripting_enabled = bool(scripting_enabled)
        self.traversal_scope = traversal_scope
        # create_missing_parent: wrap children-only output of a non-element in <html>.
        self.create_missing_parent = bool(create_missing_parent)


def _escape_text(text: str) -> str:
    return text.replace("&", "&amp;").replace("\xa0", "&nbsp;").replace("<", "&lt;").replace(">", "&gt;")


def _escape_attr_value(value: str) -> str:
    return value.replace("&", "&amp;").replace("\xa0", "&nbsp;").replace('"', "&quot;")


def serialize_start_tag(name: str, attrs: dict[str, str] | None) -> str:
    parts: list[str] = ["<", name]
    for key, value in (attrs or {}).items():
        parts.extend([" ", key, '="', _escape_attr_value(value or ""), '"'])
    parts.append(">")
    return "".join(parts)


def serialize_end_tag(name: str) -> str:
    return f"</{name}>"


def serialize(writer: Writer, node: Any, opts: SerializeOpts | None = None) -> None:
    """Write ``node`` as HTML to ``writer``.

    With ``TraversalScope.CHILDREN_ONLY`` only the node's children are written.
    """
    opts = opts or SerializeOpts()

    if opts.traversal_scope is TraversalScope.INCLUDE_NODE:
        _write_node(writer, node, opts, raw_text=False)
        return

    if node.kind is NodeKind.ELEMENT:
        raw_text = _is_raw_text_parent(node, opts)
        for child in node.children:
            _write_node(writer, child, opts, raw_text)
        return

    if opts.create_missing_parent:
        writer.write(serialize_start_tag("html", None))
    for child in node.children:
        _write_node(writer, child, opts, raw_text=False)
    if opts.create_missing_parent:
        writer.write(serialize_end_tag("html"))


def _is_raw_text_parent(element: Any, opts: SerializeOpts) -> bool:
    if element.namespace != "html":
        return False
    if element.name == "noscript":
        return opts.scripting_enabled
    return element.name in RAW_TEXT_ELEMENTS


def _write_node(writer: Writer, node: Any, opts: SerializeOpts, raw_text: bool) -> None:
    # Iterative pre-order walk: ("open", node, raw) or ("close", name).
    stack: list[tuple[str, Any, bool]] = [("open", node, raw_text)]
    while stack:
        action, current, raw = stack.pop()
        if action == "close":
            writer.write(serialize_end_tag(current))
            continue

        kind = current.kind
        if kind is NodeKind.TEXT:
            writer.write(current.data if raw else _escape_text(current.data))
        elif kind is NodeKind.ELEMENT:
            writer.write(serialize_start_tag(current.name, current.attrs))
            if current.name in VOID_ELEMENTS and current.namespace == "html":
                continue
            stack.append(("close", current.name, False))
            child_raw = _is_raw_text_parent(current, opts)
            for child in reversed(current.children):
                stack.append(("open", child, child_raw))
        elif kind is NodeKind.COMMENT:
            writer.write(f"<!--{current.data or ''}-->")
        elif kind is NodeKind.DOCTYPE:
            writer.write(f"<!DOCTYPE {current.data.name or ''}>")
        elif kind is NodeKind.PROCESSING_INSTRUCTION:
            pi = current.data
            writer.write(f"<?{pi.target} {pi.data}>")
        else:
            # Document and fragment containers contribute their children only.
            for child in reversed(current.children):
                stack.append(("open", child, False))
