"""A parser that matches input against a regular expression."""

from __future__ import annotations

import re
from typing import Any

from tokweave.parser import Backtrack, InputRef, Parser


class Regex(Parser):
    """Match a regular expression at the current position of str or bytes input."""

    def __init__(self, pattern: str) -> None:
        self.pattern = pattern
        self._text = re.compile(pattern)
        self._bytes = re.compile(pattern.encode("utf-8"))

    def go(self, inp: InputRef) -> Any:
        source = inp.source
        if isinstance(source, str):
            compiled = self._text
        elif isinstance(source, (bytes, bytearray)):
            compiled = self._bytes
        else:
            raise TypeError("regex parsers need str or bytes input")
        before = inp.offset
        found = compiled.match(source, before)
        if found is None:
            inp.add_alt(before, (), None, inp.span_since(before))
            raise Backtrack
        inp.offset = found.end()
        return inp.slice(before, inp.offset)


def regex(pattern: str) -> Regex:
    """Match input against ``pattern``, returning the matched slice."""
    return Regex(pattern)