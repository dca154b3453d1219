"""Strategies for recovering from parse errors."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Iterable

from tokweave.parser import (
    Backtrack,
    InputRef,
    Parser,
    any_token,
    just,
    none_of,
    recursive,
)


def _matches(parser: Parser, inp: InputRef) -> bool:
    try:
        parser.go(inp)
    except Backtrack:
        return False
    return True


@dataclass(frozen=True)
class ViaParser:
    """Recover by running another parser in place of the failed one."""

    parser: Parser

    def recover(self, inp: InputRef, parser: Parser) -> Any:
        alt = inp.take_alt()
        try:
            output = self.parser.go(inp)
        except Backtrack:
            inp.alt = alt
            raise
        inp.emit(alt)
        return output


@dataclass(frozen=True)
class SkipThenRetryUntil:
    """Skip input and retry the failed parser, giving up when ``until`` matches."""

    skip: Parser
    until: Parser

    def recover(self, inp: InputRef, parser: Parser) -> Any:
        alt = inp.take_alt()
        while True:
            before = inp.save()
            if _matches(self.until, inp):
                inp.alt = alt
                inp.rewind(before)
                raise Backtrack
            inp.rewind(before)

            try:
                self.skip.go(inp)
            except Backtrack:
                inp.alt = alt
                raise

            before = inp.save()
            try:
                output = parser.go(inp)
            except Backtrack:
                pass
            else:
                if not inp.errors_since(before):
                    inp.emit(alt)
                    return output
            inp.alt = None
            inp.rewind(before)


@dataclass(frozen=True)
class SkipUntil:
    """Skip input until ``until`` matches, then produce a fallback output."""

    skip: Parser
    until: Parser
    fallback: Callable[[], Any]

    def recover(self, inp: InputRef, parser: Parser) -> Any:
        alt = inp.take_alt()
        while True:
            before = inp.save()
            if _matches(self.until, inp):
                inp.emit(alt)
                return self.fallback()
            inp.rewind(before)

            try:
                self.skip.go(inp)
            except Backtrack:
                inp.alt = alt
                raise


def via_parser(parser: Parser) -> ViaParser:
    """Recover via the given recovery parser."""
    return ViaParser(parser)


def skip_then_retry_until(skip: Parser, until: Parser) -> SkipThenRetryUntil:
    """Skip with ``skip`` and retry until ``until`` matches."""
    return SkipThenRetryUntil(skip, until)


def skip_until(skip: Parser, until: Parser, fallback: Callable[[], Any]) -> SkipUntil:
    """Skip input until ``until`` matches; best used as a last resort."""
    return SkipUntil(skip, until, fallback)


def nested_delimiters(
    start: Any,
    end: Any,
    others: Iterable[tuple[Any, Any]],
    fallback: Callable[[Any], Any],
) -> Parser:
    """Match a delimited block, respecting nesting, and replace it with ``fallback(span)``.

    ``others`` lists further delimiter pairs that may nest inside the block.
    """
    pairs = list(others)
    skip = [start, end, *(token for pair in pairs for token in pair)]

    def build(block: Parser) -> Parser:
        many_block = block.delimited_by(just(start), just(end))
        for open_token, close_token in pairs:
            many_block = many_block.or_(block.delimited_by(just(open_token), just(close_token)))
        return many_block.or_(any_token().and_is(none_of(skip)).ignored()).repeated()

    return (
        recursive(build)
        .delimited_by(just(start), just(end))
        .map_with_span(lambda _, span: fallback(span))
    )