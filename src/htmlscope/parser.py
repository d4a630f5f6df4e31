"""Build htmlscope trees from HTML text.

Tokenizing is done by the standard library's ``html.parser``; ``TreeBuilder``
turns its callbacks into nodes. This is not an HTML5 tree constructor: end
tags are never implied, so markup like ``<p>a<p>b`` nests.
"""

from __future__ import annotations

import io
from html.parser import HTMLParser
from typing import Any

from .element_ref import ElementRef
from .errors import ElementNotFoundError, ParseError
from .fallible import FallibleIterator
from .node import Doctype, ElementNode, NodeKind, ProcessingInstruction, SimpleDomNode, TextNode
from .selector import Selector
from .serialize import VOID_ELEMENTS, SerializeOpts, TraversalScope, serialize
from .traverse import descendants


class StrictModeError(SyntaxError):
    """Raised when strict mode encounters a parse error."""

    error: ParseError

    def __init__(self, error: ParseError) -> None:
        self.error = error
        super().__init__(error.message)
        self.lineno = error.line
        self.offset = error.column


class _PlainTextStarted(Exception):
    def __init__(self, offset: int) -> None:
        super().__init__(offset)
        self.offset = offset


class TreeBuilder(HTMLParser):
    # Content of these is text up to the matching end tag. <noscript> is
    # parsed as markup, as with scripting disabled.
    CDATA_CONTENT_ELEMENTS = ("script", "style", "xmp", "iframe", "noembed", "noframes")

    root: SimpleDomNode
    open_elements: list[Any]
    errors: list[ParseError]
    source: str
    plaintext: ElementNode | None

    def __init__(self, root: SimpleDomNode) -> None:
        super().__init__(convert_charrefs=True)
        self.root = root
        self.open_elements = [root]
        self.errors = []
        self.source = ""
        self.plaintext = None

    def feed(self, data: str) -> None:
        # After <plaintext> everything up to EOF is text, end tags included.
        if self.plaintext is not None:
            self.handle_data(data)
            return
        self.source += data
        try:
            super().feed(data)
        except _PlainTextStarted as e:
            self.handle_data(self.source[e.offset :])

    def _offset(self) -> int:
        line, column = self.getpos()
        offset = 0
        for _ in range(line - 1):
            offset = self.source.index("\n", offset) + 1
        return offset + column

    @property
    def current(self) -> Any:
        return self.open_elements[-1]

    def _error(self, code: str, tag_name: str | None = None) -> None:
        line, column = self.getpos()
        self.errors.append(ParseError(code, line=line, column=column, tag_name=tag_name))

    def _create_element(self, tag: str, attrs: list[tuple[str, str | None]]) -> ElementNode:
        attributes: dict[str, str] = {}
        for name, value in attrs:
            if name in attributes:
                self._error("duplicate-attribute", tag)
                continue
            attributes[name] = value if value is not None else ""
        element = ElementNode(tag, attributes)
        self.current.append_child(element)
        return element

    def handle_starttag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        element = self._create_element(tag, attrs)
        if tag not in VOID_ELEMENTS:
            self.open_elements.append(element)
        if tag == "plaintext":
            self.plaintext = element
            raise _PlainTextStarted(self._offset() + len(self.get_starttag_text() or ""))

    def handle_startendtag(self, tag: str, attrs: list[tuple[str, str | None]]) -> None:
        if tag not in VOID_ELEMENTS:
            # HTML ignores the trailing slash on non-void elements.
            self._error("non-void-html-element-start-tag-with-trailing-solidus", tag)
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag: str) -> None:
        for i in range(len(self.open_elements) - 1, 0, -1):
            if self.open_elements[i].name == tag:
                if i != len(self.open_elements) - 1:
                    self._error("end-tag-too-early", tag)
                del self.open_elements[i:]
                return
        if tag not in VOID_ELEMENTS:
            self._error("unexpected-end-tag", tag)

    def handle_data(self, data: str) -> None:
        if not data:
            return
        parent = self.current
        if parent.children and parent.children[-1].is_text():
            parent.children[-1].data += data
            return
        parent.append_child(TextNode(data))

    def handle_comment(self, data: str) -> None:
        if not self.source.startswith("<!--", self._offset()):
            self._error("cdata-in-html-content" if data.startswith("[CDATA[") else "incorrectly-opened-comment")
        self.current.append_child(SimpleDomNode("#comment", data))

    def handle_decl(self, decl: str) -> None:
        keyword, _, rest = decl.partition(" ")
        if keyword.lower() != "doctype":
            self.current.append_child(SimpleDomNode("#comment", decl))
            return
        name = rest.split(None, 1)[0].lower() if rest.strip() else None
        self.current.append_child(SimpleDomNode("!doctype", Doctype(name)))

    def unknown_decl(self, data: str) -> None:
        # Marked sections such as <![CDATA[x]]> are bogus comments in HTML content.
        self.handle_comment(f"[{data}]]" if data.startswith("CDATA[") else f"[{data}]")

    def handle_pi(self, data: str) -> None:
        # html.parser passes everything between "<?" and ">".
        target, _, rest = data.partition(" ")
        self.current.append_child(SimpleDomNode("#processing-instruction", ProcessingInstruction(target, rest)))

    def finish(self) -> SimpleDomNode:
        if self.plaintext is None:
            self.close()
        for element in self.open_elements[1:]:
            if element is self.plaintext:
                continue
            self._error("expected-closing-tag-but-got-eof", element.name)
        self.open_elements = [self.root]
        return self.root


class Html:
    """A parsed HTML document or fragment.

    Use :meth:`parse_document` or :meth:`parse_fragment` rather than the
    constructor.
    """

    __slots__ = ("errors", "tree")

    tree: SimpleDomNode
    errors: list[ParseError]

    def __init__(self, tree: SimpleDomNode, errors: list[ParseError] | None = None) -> None:
        self.tree = tree
        self.errors = errors if errors is not None else []

    @classmethod
    def parse_document(cls, html: str, *, collect_errors: bool = False, strict: bool = False) -> Html:
        """Parse a whole document.

        Content outside a top-level ``<html>`` element is moved into one, so the
        document always has an ``html`` root element.
        """
        document = SimpleDomNode("#document")
        errors = _build(document, html, collect_errors or strict, strict)

        elements = [child for child in document.children if child.is_element()]
        if len(elements) != 1 or elements[0].name != "html":
            root = ElementNode("html")
            kept: list[Any] = []
            for child in document.children:
                if child.kind is NodeKind.DOCTYPE:
                    kept.append(child)
                else:
                    root.append_child(child)
            document.children = kept
            document.append_child(root)
        return cls(document, errors)

    @classmethod
    def parse_fragment(cls, html: str, *, collect_errors: bool = False, strict: bool = False) -> Html:
        """Parse a fragment. Its content ends up below an ``html`` root element."""
        fragment = SimpleDomNode("#document-fragment")
        root = ElementNode("html")
        fragment.append_child(root)
        errors = _build(root, html, collect_errors or strict, strict)
        return cls(fragment, errors)

    def root_element(self) -> ElementRef:
        """Return the ``html`` element at the top of the tree."""
        for child in self.tree.children:
            element = ElementRef.wrap(child)
            if element is not None:
                return element
        raise AssertionError("parsed tree has no root element")

    def query(self, selector: Selector | str) -> FallibleIterator[ElementRef]:
        """Return a lazy iterator over elements matching ``selector``.

        Unlike :meth:`ElementRef.query` the root element itself is a candidate,
        and ``:scope`` means ``:root``.
        """
        if isinstance(selector, str):
            selector = Selector.parse(selector)
        compiled = selector
        matches = (
            element
            for element in map(ElementRef.wrap, descendants(self.tree))
            if element is not None and compiled.matches(element.node)
        )
        return FallibleIterator(
            matches,
            lambda it: ElementNotFoundError(self.root_element(), compiled, it.index),
        )

    def html(self) -> str:
        """Serialize the whole tree."""
        buf = io.StringIO()
        serialize(buf, self.tree, SerializeOpts(traversal_scope=TraversalScope.CHILDREN_ONLY))
        return buf.getvalue()


def _build(root: Any, html: str, collect_errors: bool, strict: bool) -> list[ParseError]:
    builder = TreeBuilder(root)
    builder.feed(html)
    builder.finish()
    if strict and builder.errors:
        raise StrictModeError(builder.errors[0])
    return builder.errors if collect_errors else []
