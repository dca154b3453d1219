"""Input that pulls tokens lazily from an iterator."""

from __future__ import annotations

from collections.abc import Sized
from itertools import islice
from typing import Any, Generic, Iterable, Iterator, Optional, TypeVar

from tokweave.span import SimpleSpan

T = TypeVar("T")

_BATCH_SIZE = 500


def _bounds(span: Any) -> tuple[Any, Any]:
    if isinstance(span, range):
        return span.start, span.stop
    return span.start, span.end


class Stream(Generic[T]):
    """An input that pulls tokens from an iterator in batches as they are needed."""

    def __init__(
        self,
        iterator: Iterator[T],
        size: Optional[int] = None,
        buffer: Optional[list[T]] = None,
    ) -> None:
        self._iterator = iterator
        self._size = size
        self._buffer: list[T] = [] if buffer is None else buffer

    @classmethod
    def from_iter(cls, iterable: Iterable[T]) -> "Stream[T]":
        """Create a stream from any iterable; sized iterables give a known length."""
        size = len(iterable) if isinstance(iterable, Sized) else None
        return cls(iter(iterable), size)

    def boxed(self) -> "Stream[T]":
        """Return a stream sharing this one's tokens, for use as a uniform input type."""
        return Stream(self._iterator, self._size, self._buffer)

    def start(self) -> int:
        """Return the offset of the first token."""
        return 0

    def next(self, offset: int) -> tuple[int, Optional[T]]:
        """Return the offset after the token at ``offset`` and the token, or ``None`` at the end."""
        if offset < 0:
            raise ValueError(f"offset must not be negative, got {offset}")
        if len(self._buffer) <= offset:
            self._buffer.extend(islice(self._iterator, _BATCH_SIZE))
        if offset < len(self._buffer):
            return offset + 1, self._buffer[offset]
        return offset, None

    def span(self, start: int, end: int) -> SimpleSpan[int]:
        """Return the span covering the given offsets."""
        return SimpleSpan(start, end)

    def span_from(self, start: int) -> SimpleSpan[int]:
        """Return the span from ``start`` to the end of the stream."""
        if self._size is None:
            raise TypeError("stream length is not known")
        return SimpleSpan(start, self._size)

    @staticmethod
    def prev(offset: int) -> int:
        """Return the offset before ``offset``, never below zero."""
        return max(offset - 1, 0)

    def spanned(self, eoi: Any) -> "SpannedStream[T]":
        """Treat each item as a ``(token, span)`` pair, with ``eoi`` as the end-of-input span."""
        return SpannedStream(self, eoi)


class SpannedStream(Generic[T]):
    """A stream of ``(token, span)`` pairs yielding tokens and reporting their own spans."""

    def __init__(self, inner: Stream[Any], eoi: Any) -> None:
        self._inner = inner
        start, end = _bounds(eoi)
        self._eoi = SimpleSpan(start, end)

    @property
    def eoi(self) -> SimpleSpan[Any]:
        """The span used for the end of input."""
        return self._eoi

    def start(self) -> int:
        """Return the offset of the first token."""
        return self._inner.start()

    def next(self, offset: int) -> tuple[int, Optional[T]]:
        """Return the offset after the token at ``offset`` and the token, or ``None`` at the end."""
        new_offset, item = self._inner.next(offset)
        if item is None:
            return offset, None
        token, _ = item
        return new_offset, token

    def _token_span(self, offset: int) -> Optional[tuple[Any, Any]]:
        _, item = self._inner.next(offset)
        if item is None:
            return None
        return _bounds(item[1])

    def span(self, start: int, end: int) -> SimpleSpan[Any]:
        """Return the span from the token at ``start`` to the token before ``end``."""
        first = self._token_span(start)
        begin = first[0] if first is not None else self._eoi.start
        if end <= start:
            return SimpleSpan.splat(begin)
        last = self._token_span(end - 1)
        finish = last[1] if last is not None else self._eoi.end
        return SimpleSpan(begin, finish)

    @staticmethod
    def prev(offset: int) -> int:
        """Return the offset before ``offset``, never below zero."""
        return Stream.prev(offset)