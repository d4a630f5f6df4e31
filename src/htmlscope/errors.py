"""Error types raised by htmlscope, plus parse error messages.

Lookups and queries report absence with ``None`` or ``StopIteration``. The
exceptions below are raised only by the ``try_*`` entry points, which promise
either a value or an explanation of why there is none.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .element_ref import ElementRef
    from .selector import Selector


class AttrNotFoundError(LookupError):
    """An element has no attribute with the requested name."""

    element: ElementRef
    attr: str

    def __init__(self, element: ElementRef, attr: str) -> None:
        self.element = element
        self.attr = attr
        super().__init__(f"<{element.name}> has no attribute {attr!r}")


class ElementNotFoundError(LookupError):
    """A scoped selector query ran out of matches.

    ``index`` is the number of elements the query had already produced.
    """

    scope: ElementRef
    selector: Selector
    index: int

    def __init__(self, scope: ElementRef, selector: Selector, index: int) -> None:
        self.scope = scope
        self.selector = selector
        self.index = index
        super().__init__(f"No element matching {str(selector)!r} in <{scope.name}> after {index} match(es)")


class TextNotFoundError(LookupError):
    """A text query ran out of text nodes."""

    root: Any
    index: int

    def __init__(self, root: Any, index: int) -> None:
        self.root = root
        self.index = index
        super().__init__(f"No text node in {_describe(root)} after {index} fragment(s)")


class ItemNotFoundError(LookupError):
    """Generic exhaustion error for wrapped iterators without a custom describer."""

    index: int

    def __init__(self, index: int) -> None:
        self.index = index
        super().__init__(f"Iterator exhausted after {index} item(s)")


def _describe(node: Any) -> str:
    if node.is_element():
        return f"<{node.name}>"
    return node.name


class ParseError:
    """A problem found while building a tree. Parsing continues past it."""

    __slots__ = ("code", "column", "line", "tag_name")

    code: str
    line: int | None
    column: int | None
    tag_name: str | None

    def __init__(
        self,
        code: str,
        line: int | None = None,
        column: int | None = None,
        tag_name: str | None = None,
    ) -> None:
        self.code = code
        self.line = line
        self.column = column
        self.tag_name = tag_name

    @property
    def message(self) -> str:
        return generate_error_message(self.code, self.tag_name)

    def __repr__(self) -> str:
        return f"ParseError({self.code!r}, line={self.line}, column={self.column})"

    def __str__(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.line}:{self.column}: {self.message}"


def generate_error_message(code: str, tag_name: str | None = None) -> str:
    """Generate human-readable error message from error code.

    Args:
        code: The error code string (kebab-case format)
        tag_name: Optional tag name to include in the message for context

    Returns:
        Human-readable error message string
    """
    messages = {
        "unexpected-end-tag": f"Unexpected </{tag_name}> end tag",
        "expected-closing-tag-but-got-eof": f"Expected </{tag_name}> closing tag but reached end of file",
        "end-tag-too-early": f"</{tag_name}> end tag closed early (unclosed children)",
        "non-void-html-element-start-tag-with-trailing-solidus": f"<{tag_name}/> self-closing syntax on non-void element",
        "duplicate-attribute": f"Duplicate attribute on <{tag_name}>",
        "cdata-in-html-content": "CDATA section outside foreign content, kept as a comment",
        "incorrectly-opened-comment": "Incorrectly opened comment, kept as a comment",
    }

    # Return message or fall back to the code itself if not found
    return messages.get(code, code)
