"""Small helpers shared across the package."""

from __future__ import annotations

import copy
from functools import total_ordering
from typing import Any, Generic, TypeVar

T = TypeVar("T")


@total_ordering
class Maybe(Generic[T]):
    """A value that is either borrowed (shared) or owned.

    Comparison, hashing and representation all act on the wrapped value.
    """

    __slots__ = ("_value", "_is_ref")

    def __init__(self, value: T, is_ref: bool = False) -> None:
        self._value = value
        self._is_ref = is_ref

    @classmethod
    def ref(cls, value: T) -> "Maybe[T]":
        """Wrap a shared value that must not be taken over."""
        return cls(value, is_ref=True)

    @classmethod
    def val(cls, value: T) -> "Maybe[T]":
        """Wrap an owned value."""
        return cls(value, is_ref=False)

    @property
    def value(self) -> T:
        """The wrapped value."""
        return self._value

    @property
    def is_ref(self) -> bool:
        """Whether the wrapped value is shared rather than owned."""
        return self._is_ref

    def into_inner(self) -> T:
        """Return the value, copying it first if it is shared."""
        if self._is_ref:
            return copy.copy(self._value)
        return self._value

    def into_owned(self) -> "Maybe[T]":
        """Return an owned version of this value."""
        return Maybe.val(self.into_inner())

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Maybe):
            return NotImplemented
        return self._value == other._value

    def __lt__(self, other: Any) -> bool:
        if not isinstance(other, Maybe):
            return NotImplemented
        return self._value < other._value

    def __hash__(self) -> int:
        return hash(self._value)

    def __repr__(self) -> str:
        return repr(self._value)