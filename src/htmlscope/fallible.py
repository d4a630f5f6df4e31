"""Bridge between plain iteration and "next item or a reason why not".

Ordinary iteration treats exhaustion as the end of the sequence. ``try_next()``
is for callers that need one more item: when the iterator is empty it raises
the context-carrying error supplied by ``try_next_err()``.
"""

from __future__ import annotations

import abc
from collections.abc import Callable, Iterable, Iterator
from typing import Any, TypeVar

from .errors import ItemNotFoundError

T = TypeVar("T")

_MISSING: Any = object()


class TryNextError(Iterator[T]):
    """Base for iterators that can explain why they found nothing.

    Subclasses implement ``__next__`` and ``try_next_err``; a subclass missing
    either cannot be instantiated.
    """

    __slots__ = ()

    @abc.abstractmethod
    def try_next_err(self) -> Exception:
        """Return the error describing why there is no next item."""

    def try_next(self) -> T:
        """Return the next item, or raise the error from ``try_next_err()``."""
        item = next(self, _MISSING)
        if item is _MISSING:
            raise self.try_next_err()
        return item


class FallibleIterator(TryNextError[T]):
    """Wrap any iterable and a describer into a ``try_next()``-capable iterator.

    ``describe`` receives the wrapper, so it can read ``index`` (items yielded so
    far). Without one, exhaustion is reported as ItemNotFoundError.
    """

    __slots__ = ("_describe", "_done", "_inner", "index")

    index: int

    def __init__(
        self,
        iterable: Iterable[T],
        describe: Callable[[FallibleIterator[T]], Exception] | None = None,
    ) -> None:
        self._inner: Iterator[T] = iter(iterable)
        self._describe = describe
        self._done = False
        self.index = 0

    def __next__(self) -> T:
        # Some iterators resume after StopIteration; the wrapper never does.
        if self._done:
            raise StopIteration
        item = next(self._inner, _MISSING)
        if item is _MISSING:
            self._done = True
            raise StopIteration
        self.index += 1
        return item

    def try_next_err(self) -> Exception:
        if self._describe is None:
            return ItemNotFoundError(self.index)
        return self._describe(self)
