# CSS selector compiler and matcher for htmlscope trees.
# Supports the subset of CSS selectors needed for scoped queries, including :scope.

from __future__ import annotations

from typing import Any


class SelectorError(ValueError):
    """Raised when a CSS selector is invalid."""


_WHITESPACE = " \t\n\r\f"


class TokenType:
    TAG: str = "TAG"  # div, span, also attribute and pseudo-class names
    ID: str = "ID"  # #foo
    CLASS: str = "CLASS"  # .bar
    UNIVERSAL: str = "UNIVERSAL"  # *
    ATTR: str = "ATTR"  # [name op value]
    PSEUDO: str = "PSEUDO"  # :name or :name(arg)
    COMBINATOR: str = "COMBINATOR"  # >, +, ~, or whitespace (descendant)
    COMMA: str = "COMMA"  # ,
    EOF: str = "EOF"


class Token:
    __slots__ = ("arg", "operator", "type", "value")

    type: str
    value: str | None
    operator: str | None
    arg: str | None

    def __init__(
        self,
        token_type: str,
        value: str | None = None,
        operator: str | None = None,
        arg: str | None = None,
    ) -> None:
        self.type = token_type
        self.value = value
        self.operator = operator
        self.arg = arg

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value!r})"


class SelectorTokenizer:
    """Splits a selector string into tokens.

    Attribute selectors and pseudo-classes are read whole, so the parser only
    sees one token for ``[href^="http"]`` or ``:nth-child(2n+1)``.
    """

    __slots__ = ("length", "pos", "selector")

    selector: str
    pos: int
    length: int

    def __init__(self, selector: str) -> None:
        self.selector = selector
        self.pos = 0
        self.length = len(selector)

    def _peek(self) -> str:
        if self.pos < self.length:
            return self.selector[self.pos]
        return ""

    def _skip_whitespace(self) -> None:
        while self.pos < self.length and self.selector[self.pos] in _WHITESPACE:
            self.pos += 1

    @staticmethod
    def _is_name_char(ch: str) -> bool:
        return ch.isalnum() or ch in "_-" or ord(ch) > 127

    def _read_name(self, what: str) -> str:
        start = self.pos
        while self.pos < self.length and self._is_name_char(self.selector[self.pos]):
            self.pos += 1
        if start == self.pos:
            raise SelectorError(f"Expected {what} at position {self.pos} in {self.selector!r}")
        return self.selector[start : self.pos]

    def _read_string(self, quote: str) -> str:
        self.pos += 1  # opening quote
        parts: list[str] = []
        while self.pos < self.length:
            ch = self.selector[self.pos]
            self.pos += 1
            if ch == quote:
                return "".join(parts)
            if ch == "\\" and self.pos < self.length:
                ch = self.selector[self.pos]
                self.pos += 1
            parts.append(ch)
        raise SelectorError(f"Unterminated string in selector: {self.selector!r}")

    def _read_attribute(self) -> Token:
        self.pos += 1  # [
        self._skip_whitespace()
        name = self._read_name("attribute name").lower()
        self._skip_whitespace()

        ch = self._peek()
        if ch == "]":
            self.pos += 1
            return Token(TokenType.ATTR, name)

        if ch == "=":
            operator = "="
            self.pos += 1
        elif ch and ch in "~|^$*" and self.selector[self.pos + 1 : self.pos + 2] == "=":
            operator = ch + "="
            self.pos += 2
        else:
            raise SelectorError(f"Unexpected character in attribute selector: {ch!r}")

        self._skip_whitespace()
        ch = self._peek()
        if ch in ("'", '"'):
            value = self._read_string(ch)
        else:
            start = self.pos
            while self.pos < self.length and self.selector[self.pos] not in _WHITESPACE + "]":
                self.pos += 1
            value = self.selector[start : self.pos]

        self._skip_whitespace()
        if self._peek() != "]":
            raise SelectorError(f"Expected ] at position {self.pos}")
        self.pos += 1
        return Token(TokenType.ATTR, name, operator=operator, arg=value)

    def _read_pseudo(self) -> Token:
        self.pos += 1  # :
        name = self._read_name("pseudo-class name").lower()
        if self._peek() != "(":
            return Token(TokenType.PSEUDO, name)

        self.pos += 1
        depth = 1
        start = self.pos
        while self.pos < self.length:
            ch = self.selector[self.pos]
            if ch == "(":
                depth += 1
            elif ch == ")":
                depth -= 1
                if depth == 0:
                    break
            self.pos += 1
        if self._peek() != ")":
            raise SelectorError(f"Expected ) at position {self.pos}")
        arg = self.selector[start : self.pos].strip()
        self.pos += 1
        return Token(TokenType.PSEUDO, name, arg=arg or None)

    def tokenize(self) -> list[Token]:
        tokens: list[Token] = []
        pending_whitespace = False

        while self.pos < self.length:
            ch = self.selector[self.pos]

            if ch in _WHITESPACE:
                pending_whitespace = True
                self._skip_whitespace()
                continue

            if ch in ">+~":
                pending_whitespace = False
                self.pos += 1
                self._skip_whitespace()
                tokens.append(Token(TokenType.COMBINATOR, ch))
                continue

            if ch == ",":
                pending_whitespace = False
                self.pos += 1
                self._skip_whitespace()
                tokens.append(Token(TokenType.COMMA))
                continue

            # Whitespace between two compounds is the descendant combinator.
            if pending_whitespace and tokens and tokens[-1].type not in (TokenType.COMBINATOR, TokenType.COMMA):
                tokens.append(Token(TokenType.COMBINATOR, " "))
            pending_whitespace = False

            if ch == "*":
                self.pos += 1
                tokens.append(Token(TokenType.UNIVERSAL))
            elif ch == "#":
                self.pos += 1
                tokens.append(Token(TokenType.ID, self._read_name("identifier after #")))
            elif ch == ".":
                self.pos += 1
                tokens.append(Token(TokenType.CLASS, self._read_name("identifier after .")))
            elif ch == "[":
                tokens.append(self._read_attribute())
            elif ch == ":":
                tokens.append(self._read_pseudo())
            elif self._is_name_char(ch) and not ch.isdigit():
                tokens.append(Token(TokenType.TAG, self._read_name("tag name").lower()))
            else:
                raise SelectorError(f"Unexpected character {ch!r} at position {self.pos}")

        tokens.append(Token(TokenType.EOF))
        return tokens


# AST


class SimpleSelector:
    """A single simple selector (tag, id, class, attribute, or pseudo-class)."""

    __slots__ = ("arg", "name", "operator", "type")

    TYPE_TAG: str = "tag"
    TYPE_ID: str = "id"
    TYPE_CLASS: str = "class"
    TYPE_UNIVERSAL: str = "universal"
    TYPE_ATTR: str = "attr"
    TYPE_PSEUDO: str = "pseudo"

    type: str
    name: str | None
    operator: str | None
    arg: str | None

    def __init__(
        self,
        selector_type: str,
        name: str | None = None,
        operator: str | None = None,
        arg: str | None = None,
    ) -> None:
        self.type = selector_type
        self.name = name
        self.operator = operator
        self.arg = arg  # attribute value, or the argument of :not() / :nth-*()

    def __repr__(self) -> str:
        return f"SimpleSelector({self.type!r}, name={self.name!r}, op={self.operator!r}, arg={self.arg!r})"


# A compound is a list of simple selectors that must all match (e.g. div.foo#bar).
Compound = list[SimpleSelector]

# A complex selector is a chain of (combinator, compound) pairs, left to right.
# The first pair has combinator None.
Complex = list[tuple[str | None, Compound]]

_TOKEN_TO_SIMPLE: dict[str, str] = {
    TokenType.TAG: SimpleSelector.TYPE_TAG,
    TokenType.ID: SimpleSelector.TYPE_ID,
    TokenType.CLASS: SimpleSelector.TYPE_CLASS,
    TokenType.UNIVERSAL: SimpleSelector.TYPE_UNIVERSAL,
    TokenType.ATTR: SimpleSelector.TYPE_ATTR,
    TokenType.PSEUDO: SimpleSelector.TYPE_PSEUDO,
}

_NTH_PSEUDOS = frozenset({"nth-child", "nth-of-type"})
_SIMPLE_PSEUDOS = frozenset(
    {
        "first-child",
        "last-child",
        "only-child",
        "first-of-type",
        "last-of-type",
        "only-of-type",
        "empty",
        "root",
        "scope",
    }
)


def _parse_tokens(tokens: list[Token]) -> list[Complex]:
    """Turn a token list into a selector list (one Complex per comma-separated part)."""
    selectors: list[Complex] = []
    complex_sel: Complex = []
    compound: Compound = []
    combinator: str | None = None

    def close_compound(after: str) -> None:
        nonlocal compound
        if not compound:
            raise SelectorError(f"Expected selector before {after}")
        complex_sel.append((combinator, compound))
        compound = []

    for token in tokens:
        if token.type == TokenType.COMBINATOR:
            close_compound(repr(token.value))
            combinator = token.value
        elif token.type in (TokenType.COMMA, TokenType.EOF):
            close_compound("','" if token.type == TokenType.COMMA else "end of selector")
            selectors.append(complex_sel)
            complex_sel = []
            combinator = None
        else:
            simple = SimpleSelector(_TOKEN_TO_SIMPLE[token.type], token.value, token.operator, token.arg)
            if simple.type == SimpleSelector.TYPE_PSEUDO:
                _validate_pseudo(simple)
            compound.append(simple)

    return selectors


def _validate_pseudo(simple: SimpleSelector) -> None:
    name = simple.name or ""
    if name in _SIMPLE_PSEUDOS:
        if simple.arg is not None:
            raise SelectorError(f"Pseudo-class :{name} takes no argument")
        return
    if name in _NTH_PSEUDOS:
        if _parse_nth_expression(simple.arg) is None:
            raise SelectorError(f"Invalid argument for :{name}(): {simple.arg!r}")
        return
    if name == "not":
        if simple.arg is None:
            raise SelectorError("Pseudo-class :not() requires an argument")
        parse_selector(simple.arg)
        return
    raise SelectorError(f"Unsupported pseudo-class: :{name}")


def _parse_nth_expression(expr: str | None) -> tuple[int, int] | None:
    """Parse an An+B expression like '2n+1', 'odd', 'even', '3'."""
    if not expr:
        return None

    expr = expr.strip().lower().replace(" ", "")
    if expr == "odd":
        return (2, 1)
    if expr == "even":
        return (2, 0)

    try:
        if "n" not in expr:
            return (0, int(expr))
        a_part, _, b_part = expr.partition("n")
        if a_part in ("", "+"):
            a = 1
        elif a_part == "-":
            a = -1
        else:
            a = int(a_part)
        b = int(b_part) if b_part else 0
    except ValueError:
        return None
    return (a, b)


def _matches_nth(index: int, a: int, b: int) -> bool:
    """Check if 1-based index matches An+B formula."""
    if a == 0:
        return index == b
    diff = index - b
    if a > 0:
        return diff >= 0 and diff % a == 0
    return diff <= 0 and diff % a == 0


def parse_selector(selector_string: str) -> list[Complex]:
    """Parse a CSS selector string into a selector list."""
    if not selector_string or not selector_string.strip():
        raise SelectorError("Empty selector")
    tokens = SelectorTokenizer(selector_string.strip()).tokenize()
    return _parse_tokens(tokens)


class SelectorMatcher:
    """Matches parsed selectors against element nodes.

    ``scope`` is the element that ``:scope`` refers to. Without one, ``:scope``
    falls back to ``:root``.
    """

    __slots__ = ()

    def matches(self, node: Any, selectors: list[Complex], scope: Any | None = None) -> bool:
        if not node.is_element():
            return False
        return any(self._matches_complex(node, complex_sel, scope) for complex_sel in selectors)

    def _matches_complex(self, node: Any, complex_sel: Complex, scope: Any | None) -> bool:
        # Right to left; each step moves `current` to the node that satisfied it.
        _, compound = complex_sel[-1]
        if not self._matches_compound(node, compound, scope):
            return False
        return self._matches_chain(node, complex_sel, len(complex_sel) - 1, scope)

    def _matches_chain(self, current: Any, complex_sel: Complex, i: int, scope: Any | None) -> bool:
        if i == 0:
            return True
        combinator, _ = complex_sel[i]
        prev_compound = complex_sel[i - 1][1]

        if combinator == ">":
            parent = _parent_element(current)
            return (
                parent is not None
                and self._matches_compound(parent, prev_compound, scope)
                and self._matches_chain(parent, complex_sel, i - 1, scope)
            )

        if combinator == "+":
            sibling = _previous_element_sibling(current)
            return (
                sibling is not None
                and self._matches_compound(sibling, prev_compound, scope)
                and self._matches_chain(sibling, complex_sel, i - 1, scope)
            )

        # Descendant (" ") walks ancestors, general sibling ("~") walks earlier siblings.
        step = _parent_element if combinator == " " else _previous_element_sibling
        candidate = step(current)
        while candidate is not None:
            if self._matches_compound(candidate, prev_compound, scope) and self._matches_chain(
                candidate, complex_sel, i - 1, scope
            ):
                return True
            candidate = step(candidate)
        return False

    def _matches_compound(self, node: Any, compound: Compound, scope: Any | None) -> bool:
        return all(self._matches_simple(node, simple, scope) for simple in compound)

    def _matches_simple(self, node: Any, selector: SimpleSelector, scope: Any | None) -> bool:
        sel_type = selector.type

        if sel_type == SimpleSelector.TYPE_UNIVERSAL:
            return True

        if sel_type == SimpleSelector.TYPE_TAG:
            # HTML tag names are case-insensitive
            return bool(node.name.lower() == selector.name)

        if sel_type == SimpleSelector.TYPE_ID:
            return bool(node.id == selector.name)

        if sel_type == SimpleSelector.TYPE_CLASS:
            return bool(node.has_class(selector.name))

        if sel_type == SimpleSelector.TYPE_ATTR:
            return self._matches_attribute(node, selector)

        return self._matches_pseudo(node, selector, scope)

    def _matches_attribute(self, node: Any, selector: SimpleSelector) -> bool:
        attr_value: str | None = None
        for name, value in node.attrs.items():
            if name.lower() == selector.name:
                attr_value = value
                break

        if attr_value is None:
            return False

        op = selector.operator
        if op is None:
            return True

        value = selector.arg or ""
        if op == "=":
            return attr_value == value
        if op == "~=":
            return value in attr_value.split()
        if op == "|=":
            return attr_value == value or attr_value.startswith(value + "-")
        # Empty values never match the substring operators.
        if not value:
            return False
        if op == "^=":
            return attr_value.startswith(value)
        if op == "$=":
            return attr_value.endswith(value)
        return value in attr_value  # *=

    def _matches_pseudo(self, node: Any, selector: SimpleSelector, scope: Any | None) -> bool:
        name = selector.name

        if name == "scope":
            if scope is None:
                return _is_root(node)
            return node is scope

        if name == "root":
            return _is_root(node)

        if name == "not":
            return not self.matches(node, parse_selector(selector.arg or ""), scope)

        if name == "empty":
            for child in node.children:
                if child.is_element():
                    return False
                text = child.as_text()
                if text:
                    return False
            return True

        siblings = _element_siblings(node)
        if not siblings:
            return False

        if name == "first-child":
            return siblings[0] is node
        if name == "last-child":
            return siblings[-1] is node
        if name == "only-child":
            return len(siblings) == 1

        same_type = [s for s in siblings if s.name == node.name]
        if name == "first-of-type":
            return same_type[0] is node
        if name == "last-of-type":
            return same_type[-1] is node
        if name == "only-of-type":
            return len(same_type) == 1

        a, b = _parse_nth_expression(selector.arg) or (0, 0)
        pool = siblings if name == "nth-child" else same_type
        for index, sibling in enumerate(pool, start=1):
            if sibling is node:
                return _matches_nth(index, a, b)
        return False


def _parent_element(node: Any) -> Any | None:
    parent = node.parent
    if parent is not None and parent.is_element():
        return parent
    return None


def _element_siblings(node: Any) -> list[Any]:
    parent = node.parent
    if parent is None:
        return []
    return [child for child in parent.children if child.is_element()]


def _previous_element_sibling(node: Any) -> Any | None:
    prev: Any | None = None
    for sibling in _element_siblings(node):
        if sibling is node:
            return prev
        prev = sibling
    return None


def _is_root(node: Any) -> bool:
    # The root element is the one directly below the document or fragment node.
    parent = node.parent
    return parent is not None and not parent.is_element()


# Global matcher instance
_matcher: SelectorMatcher = SelectorMatcher()


class Selector:
    """A compiled CSS selector.

    Parse once with :meth:`Selector.parse`, then test nodes with
    :meth:`matches`. Two selectors are equal when they were parsed from the
    same text.
    """

    __slots__ = ("_selectors", "source")

    source: str
    _selectors: list[Complex]

    def __init__(self, source: str, selectors: list[Complex]) -> None:
        self.source = source
        self._selectors = selectors

    @classmethod
    def parse(cls, selector_string: str) -> Selector:
        """
        Compile a CSS selector string.

        Raises:
            SelectorError: If the selector is invalid
        """
        return cls(selector_string, parse_selector(selector_string))

    def matches(self, node: Any, scope: Any | None = None) -> bool:
        """Return True if ``node`` is an element matching this selector.

        ``scope`` anchors ``:scope``; pass the element a query starts from.
        """
        return _matcher.matches(node, self._selectors, scope)

    def __str__(self) -> str:
        return self.source

    def __repr__(self) -> str:
        return f"Selector({self.source!r})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Selector):
            return NotImplemented
        return self.source == other.source

    def __hash__(self) -> int:
        return hash(self.source)
