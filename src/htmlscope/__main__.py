#!/usr/bin/env python3
"""Command-line interface for htmlscope."""

from __future__ import annotations

import argparse
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path
from typing import NoReturn

from .element_ref import ElementRef
from .errors import AttrNotFoundError, ElementNotFoundError
from .fallible import FallibleIterator
from .parser import Html
from .selector import Selector, SelectorError


def _get_version() -> str:
    try:
        return version("htmlscope")
    except PackageNotFoundError:  # pragma: no cover
        return "dev"


def _parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="htmlscope",
        description="Parse HTML and print the elements matching a CSS selector.",
        epilog=(
            "Examples:\n"
            "  htmlscope page.html\n"
            "  curl -s https://example.com | htmlscope - --selector 'a' --format attr --attr href\n"
            "  htmlscope page.html --selector 'main p' --format text\n"
            "  htmlscope snippet.html --fragment --selector 'ul > li' --first\n"
            "\n"
            "If you don't have the 'htmlscope' command available, use:\n"
            "  python -m htmlscope ...\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "path",
        nargs="?",
        help="HTML file to parse, or '-' to read from stdin",
    )
    parser.add_argument(
        "--selector",
        help="CSS selector for choosing elements (defaults to the root element)",
    )
    parser.add_argument(
        "--format",
        choices=["html", "inner", "text", "attr"],
        default="html",
        help="Output format (default: html)",
    )
    parser.add_argument(
        "--attr",
        help="Attribute to print with --format attr",
    )
    parser.add_argument(
        "--first",
        action="store_true",
        help="Only output the first matching element; fail if there is none",
    )
    parser.add_argument(
        "--fragment",
        action="store_true",
        help="Parse the input as a fragment instead of a document",
    )
    parser.add_argument(
        "--separator",
        default="",
        help="Text-only: join string between text nodes (default: empty)",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"htmlscope {_get_version()}",
    )

    args = parser.parse_args(argv)

    if not args.path:
        parser.print_help(sys.stderr)
        raise SystemExit(1)

    if args.format == "attr" and not args.attr:
        parser.error("--format attr requires --attr")

    return args


def _read_html(path: str) -> str:
    if path == "-":
        return sys.stdin.read()

    return Path(path).read_text()


def _render(element: ElementRef, args: argparse.Namespace) -> str:
    if args.format == "html":
        return element.outer_html()
    if args.format == "inner":
        return element.inner_html()
    if args.format == "text":
        return args.separator.join(element.text())
    return element.try_attr(args.attr)


def _fail(error: Exception, status: int) -> NoReturn:
    print(str(error), file=sys.stderr)
    raise SystemExit(status) from error


def main(argv: list[str] | None = None) -> NoReturn | None:
    args = _parse_args(sys.argv[1:] if argv is None else argv)
    html = _read_html(args.path)
    doc = Html.parse_fragment(html) if args.fragment else Html.parse_document(html)

    if args.selector:
        try:
            selector = Selector.parse(args.selector)
        except SelectorError as e:
            _fail(e, 2)
        matches = doc.query(selector)
    else:
        matches = FallibleIterator([doc.root_element()])

    if args.first:
        try:
            elements = [matches.try_next()]
        except ElementNotFoundError as e:
            _fail(e, 1)
    else:
        elements = list(matches)

    if not elements:
        raise SystemExit(1)

    try:
        outputs = [_render(element, args) for element in elements]
    except AttrNotFoundError as e:
        _fail(e, 1)

    sys.stdout.write("\n".join(outputs))
    sys.stdout.write("\n")
    return None


if __name__ == "__main__":
    main()
