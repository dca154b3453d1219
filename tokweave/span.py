"""Spans describing ranges of input offsets."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Generic, Iterator, TypeVar

T = TypeVar("T")


@dataclass(frozen=True, repr=False)
class SimpleSpan(Generic[T]):
    """A start/end offset pair with an optional context; ``end`` is exclusive."""

    start: T
    end: T
    context: Any = None

    @classmethod
    def splat(cls, offset: T) -> "SimpleSpan[T]":
        """Create an empty span at a single offset, e.g. for the end of input."""
        return cls(offset, offset)

    @classmethod
    def from_range(cls, offsets: range) -> "SimpleSpan[int]":
        """Create a span covering the offsets of a ``range``."""
        return cls(offsets.start, offsets.stop)

    def into_range(self) -> range:
        """Return the offsets of this span as a ``range``."""
        return range(self.start, self.end)

    def __iter__(self) -> Iterator[T]:
        return iter(self.into_range())

    def __str__(self) -> str:
        return f"{self.start}..{self.end}"

    def __repr__(self) -> str:
        return f"{self.start!r}..{self.end!r}"


@dataclass(frozen=True)
class ContextSpan(Generic[T]):
    """A span paired with a context such as the name of a source file."""

    context: Any
    span: SimpleSpan[T]

    @classmethod
    def new(cls, context: Any, start: T, end: T) -> "ContextSpan[T]":
        """Create a span from a context and an offset range."""
        return cls(context, SimpleSpan(start, end))

    def start(self) -> T:
        """Return the start offset of the span."""
        return self.span.start

    def end(self) -> T:
        """Return the end offset of the span."""
        return self.span.end