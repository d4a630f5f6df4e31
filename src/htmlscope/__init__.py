from .element_ref import ElementRef, Select, Text
from .errors import (
    AttrNotFoundError,
    ElementNotFoundError,
    ItemNotFoundError,
    ParseError,
    TextNotFoundError,
)
from .fallible import FallibleIterator, TryNextError
from .node import Doctype, ElementNode, NodeKind, ProcessingInstruction, SimpleDomNode, TextNode
from .parser import Html, StrictModeError
from .selector import Selector, SelectorError
from .serialize import SerializeOpts, TraversalScope, serialize
from .traverse import Edge, Traverse, descendants

__all__ = [
    "AttrNotFoundError",
    "Doctype",
    "Edge",
    "ElementNode",
    "ElementNotFoundError",
    "ElementRef",
    "FallibleIterator",
    "Html",
    "ItemNotFoundError",
    "NodeKind",
    "ParseError",
    "ProcessingInstruction",
    "Select",
    "Selector",
    "SelectorError",
    "SerializeOpts",
    "SimpleDomNode",
    "StrictModeError",
    "Text",
    "TextNode",
    "TextNotFoundError",
    "Traverse",
    "TraversalScope",
    "TryNextError",
    "descendants",
    "serialize",
]
