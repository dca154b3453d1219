"""Parser combinators over text, byte strings, token sequences and streams."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Collection, Sequence
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, NamedTuple, Optional

from tokweave.span import SimpleSpan
from tokweave.stream import Stream

_BYTE_WHITESPACE = frozenset(b" \t\n\x0c\r")
_NOT_UNICODE_WHITESPACE = frozenset("\x1c\x1d\x1e\x1f")


def _is_whitespace(token: Any) -> bool:
    if isinstance(token, str):
        return token.isspace() and token not in _NOT_UNICODE_WHITESPACE
    if isinstance(token, int):
        return token in _BYTE_WHITESPACE
    return False


def _unique(items: Iterable[Any]) -> tuple[Any, ...]:
    seen: list[Any] = []
    for item in items:
        if item not in seen:
            seen.append(item)
    return tuple(seen)


def _describe_token(token: Any) -> str:
    return "end of input" if token is None else repr(token)


class ParseError(Exception):
    """An error found while parsing: what was expected, what was found, and where.

    ``None`` stands for the end of input, both in ``expected`` and as ``found``.
    """

    def __init__(
        self,
        span: Any,
        expected: Optional[Iterable[Any]] = (),
        found: Any = None,
        message: Optional[str] = None,
    ) -> None:
        self.span = span
        self.expected = _unique(expected or ())
        self.found = found
        self.message = message
        self._at: Optional[int] = None
        super().__init__(self._describe())

    @classmethod
    def expected_found(
        cls, expected: Optional[Iterable[Any]], found: Any, span: Any
    ) -> "ParseError":
        """Create an error from the expected tokens and the token found."""
        return cls(span, expected, found)

    def _describe(self) -> str:
        if self.message:
            return f"{self.message} at {self.span}"
        text = f"found {_describe_token(self.found)} at {self.span}"
        if self.expected:
            wanted = ", ".join(_describe_token(e) for e in self.expected)
            text += f", expected {wanted}"
        return text

    def merge(self, other: "ParseError") -> "ParseError":
        """Combine the expectations of two errors found at the same place."""
        return ParseError(
            self.span,
            (*self.expected, *other.expected),
            self.found,
            self.message or other.message,
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, ParseError):
            return NotImplemented
        return (self.span, self.expected, self.found, self.message) == (
            other.span,
            other.expected,
            other.found,
            other.message,
        )

    def __hash__(self) -> int:
        return hash((type(self), self.message))


class Backtrack(Exception):
    """Raised by a parser that did not match; the reason is kept on the input."""


@dataclass
class ParseResult:
    """The output of a parse, if any, and the errors found along the way."""

    output: Any
    errors: list[ParseError] = field(default_factory=list)

    def has_errors(self) -> bool:
        """Whether any error was found."""
        return bool(self.errors)

    def into_result(self) -> Any:
        """Return the output, or raise the first error if there were any."""
        if self.errors:
            raise self.errors[0]
        return self.output


class Marker(NamedTuple):
    """A saved position of an input, as returned by ``InputRef.save``."""

    offset: int
    err_count: int


class InputRef:
    """The position within an input along with the errors collected so far."""

    def __init__(self, source: Any) -> None:
        self._sequence = isinstance(source, Sequence)
        if not self._sequence and not callable(getattr(source, "next", None)):
            source = Stream.from_iter(source)
        self.source = source
        self.offset: int = 0 if self._sequence else source.start()
        self.alt: Optional[ParseError] = None
        self._errors: list[ParseError] = []

    @property
    def errors(self) -> list[ParseError]:
        """The secondary (emitted) errors so far."""
        return list(self._errors)

    def save(self) -> Marker:
        """Remember the current position."""
        return Marker(self.offset, len(self._errors))

    def rewind(self, marker: Marker) -> None:
        """Go back to a saved position, dropping errors emitted since."""
        self.offset = marker.offset
        del self._errors[marker.err_count:]

    def errors_since(self, marker: Marker) -> list[ParseError]:
        """Return the errors emitted since a saved position."""
        return self._errors[marker.err_count:]

    def emit(self, error: ParseError) -> None:
        """Record an error that parsing recovered from."""
        self._errors.append(error)

    def add_alt(self, at: int, expected: Iterable[Any], found: Any, span: Any) -> None:
        """Record a failure at an offset, keeping the one furthest into the input."""
        self.add_alt_err(at, ParseError(span, expected, found))

    def add_alt_err(self, at: int, error: ParseError) -> None:
        """Record an existing error as a failure at an offset."""
        current = self.alt
        if current is None or current._at is None or at > current._at:
            error._at = at
            self.alt = error
        elif at == current._at:
            merged = current.merge(error)
            merged._at = at
            self.alt = merged

    def take_alt(self) -> ParseError:
        """Remove and return the current failure."""
        if self.alt is None:
            raise RuntimeError("error but no alt?")
        alt, self.alt = self.alt, None
        return alt

    def next_token(self) -> Any:
        """Return the next token and move past it, or ``None`` at the end of input."""
        if self._sequence:
            if self.offset < len(self.source):
                token = self.source[self.offset]
                self.offset += 1
                return token
            return None
        self.offset, token = self.source.next(self.offset)
        return token

    def skip_while(self, predicate: Callable[[Any], bool]) -> None:
        """Move past tokens for as long as they satisfy the predicate."""
        while True:
            before = self.offset
            token = self.next_token()
            if token is None:
                return
            if not predicate(token):
                self.offset = before
                return

    def slice(self, start: int, end: int) -> Any:
        """Return the input between two offsets."""
        if self._sequence:
            return self.source[start:end]
        return [self.source.next(offset)[1] for offset in range(start, end)]

    def span_since(self, start: int) -> Any:
        """Return the span from an offset to the current position."""
        if self._sequence:
            return SimpleSpan(start, self.offset)
        return self.source.span(start, self.offset)


class Parser(ABC):
    """Base class of every parser; combinators are built with its methods."""

    @abstractmethod
    def go(self, inp: InputRef) -> Any:
        """Parse from ``inp``, returning the output or raising ``Backtrack``."""

    def parse(self, source: Any) -> ParseResult:
        """Parse the whole of ``source``."""
        inp = InputRef(source)
        try:
            output = self.go(inp)
            before = inp.offset
            token = inp.next_token()
            if token is not None:
                inp.add_alt(before, (None,), token, inp.span_since(before))
                raise Backtrack
        except Backtrack:
            errors = inp.errors
            if inp.alt is not None:
                errors.append(inp.alt)
            return ParseResult(None, errors)
        return ParseResult(output, inp.errors)

    def map(self, func: Callable[[Any], Any]) -> "Parser":
        return _Map(self, func)

    def map_with_span(self, func: Callable[[Any, Any], Any]) -> "Parser":
        return _MapWithSpan(self, func)

    def then(self, other: "Parser") -> "Parser":
        return _Then(self, other)

    def ignore_then(self, other: "Parser") -> "Parser":
        return _Then(self, other).map(lambda pair: pair[1])

    def then_ignore(self, other: "Parser") -> "Parser":
        return _Then(self, other).map(lambda pair: pair[0])

    def or_(self, other: "Parser") -> "Parser":
        return _Or(self, other)

    def or_not(self) -> "Parser":
        return _OrNot(self)

    def ignored(self) -> "Parser":
        return _Map(self, lambda _: None)

    def filter(self, predicate: Callable[[Any], bool]) -> "Parser":
        return _Filter(self, predicate)

    def try_map(self, func: Callable[[Any, Any], Any]) -> "Parser":
        """Map the output with ``func(output, span)``, which may raise ``ParseError``."""
        return _TryMap(self, func)

    def slice(self) -> "Parser":
        return _Slice(self)

    def delimited_by(self, start: "Parser", end: "Parser") -> "Parser":
        return start.ignore_then(self).then_ignore(end)

    def padded(self) -> "Parser":
        return _Padded(self)

    def lazy(self) -> "Parser":
        return _Lazy(self)

    def and_is(self, other: "Parser") -> "Parser":
        return _AndIs(self, other)

    def repeated(self) -> "Repeated":
        return Repeated(self)

    def recover_with(self, strategy: Any) -> "Parser":
        return RecoverWith(self, strategy)


class _Map(Parser):
    def __init__(self, parser: Parser, func: Callable[[Any], Any]) -> None:
        self._parser = parser
        self._func = func

    def go(self, inp: InputRef) -> Any:
        return self._func(self._parser.go(inp))


class _MapWithSpan(Parser):
    def __init__(self, parser: Parser, func: Callable[[Any, Any], Any]) -> None:
        self._parser = parser
        self._func = func

    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        output = self._parser.go(inp)
        return self._func(output, inp.span_since(before))


class _Then(Parser):
    def __init__(self, first: Parser, second: Parser) -> None:
        self._first = first
        self._second = second

    def go(self, inp: InputRef) -> Any:
        a = self._first.go(inp)
        b = self._second.go(inp)
        return a, b


class _Or(Parser):
    def __init__(self, first: Parser, second: Parser) -> None:
        self._first = first
        self._second = second

    def go(self, inp: InputRef) -> Any:
        before = inp.save()
        try:
            return self._first.go(inp)
        except Backtrack:
            inp.rewind(before)
        return self._second.go(inp)


class _OrNot(Parser):
    def __init__(self, parser: Parser) -> None:
        self._parser = parser

    def go(self, inp: InputRef) -> Any:
        before = inp.save()
        try:
            return self._parser.go(inp)
        except Backtrack:
            inp.rewind(before)
            return None


class _Filter(Parser):
    def __init__(self, parser: Parser, predicate: Callable[[Any], bool]) -> None:
        self._parser = parser
        self._predicate = predicate

    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        output = self._parser.go(inp)
        if not self._predicate(output):
            inp.add_alt(before, (), output, inp.span_since(before))
            raise Backtrack
        return output


class _TryMap(Parser):
    def __init__(self, parser: Parser, func: Callable[[Any, Any], Any]) -> None:
        self._parser = parser
        self._func = func

    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        output = self._parser.go(inp)
        try:
            return self._func(output, inp.span_since(before))
        except ParseError as error:
            inp.add_alt_err(before, error)
            raise Backtrack from None


class _Slice(Parser):
    def __init__(self, parser: Parser) -> None:
        self._parser = parser

    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        self._parser.go(inp)
        return inp.slice(before, inp.offset)


class _Padded(Parser):
    def __init__(self, parser: Parser) -> None:
        self._parser = parser

    def go(self, inp: InputRef) -> Any:
        inp.skip_while(_is_whitespace)
        output = self._parser.go(inp)
        inp.skip_while(_is_whitespace)
        return output


class _Lazy(Parser):
    def __init__(self, parser: Parser) -> None:
        self._parser = parser

    def go(self, inp: InputRef) -> Any:
        output = self._parser.go(inp)
        inp.skip_while(lambda _: True)
        return output


class _AndIs(Parser):
    def __init__(self, parser: Parser, other: Parser) -> None:
        self._parser = parser
        self._other = other

    def go(self, inp: InputRef) -> Any:
        before = inp.save()
        output = self._parser.go(inp)
        after = inp.save()
        inp.rewind(before)
        self._other.go(inp)
        inp.rewind(after)
        return output


class Repeated(Parser):
    """A parser run as many times as it matches; the output is a list."""

    def __init__(self, parser: Parser, minimum: int = 0, maximum: Optional[int] = None) -> None:
        self._parser = parser
        self._min = minimum
        self._max = maximum

    def at_least(self, count: int) -> "Repeated":
        """Require at least ``count`` repetitions."""
        return Repeated(self._parser, count, self._max)

    def at_most(self, count: int) -> "Repeated":
        """Stop after ``count`` repetitions."""
        return Repeated(self._parser, self._min, count)

    def exactly(self, count: int) -> "Repeated":
        """Require exactly ``count`` repetitions."""
        return Repeated(self._parser, count, count)

    def go(self, inp: InputRef) -> list[Any]:
        outputs: list[Any] = []
        while self._max is None or len(outputs) < self._max:
            before = inp.save()
            try:
                output = self._parser.go(inp)
            except Backtrack:
                inp.rewind(before)
                break
            outputs.append(output)
            if inp.offset == before.offset and len(outputs) >= self._min:
                break
        if len(outputs) < self._min:
            raise Backtrack
        return outputs


class RecoverWith(Parser):
    """A parser that falls back on a recovery strategy when it fails."""

    def __init__(self, parser: Parser, strategy: Any) -> None:
        self._parser = parser
        self._strategy = strategy

    def go(self, inp: InputRef) -> Any:
        before = inp.save()
        try:
            return self._parser.go(inp)
        except Backtrack:
            inp.rewind(before)
        try:
            return self._strategy.recover(inp, self._parser)
        except Backtrack:
            inp.rewind(before)
            raise


class Recursive(Parser):
    """A parser that is declared first and defined later, so it can refer to itself."""

    def __init__(self) -> None:
        self._inner: Optional[Parser] = None

    @classmethod
    def declare(cls) -> "Recursive":
        """Declare a parser to be defined exactly once later."""
        return cls()

    def define(self, parser: Parser) -> None:
        """Give the declared parser its definition."""
        if self._inner is not None:
            raise RuntimeError("recursive parsers can only be defined once")
        self._inner = parser

    def go(self, inp: InputRef) -> Any:
        if self._inner is None:
            raise RuntimeError("Recursive parser used before being defined")
        return self._inner.go(inp)


def _expect_token(inp: InputRef, expected: Any) -> Any:
    before = inp.offset
    token = inp.next_token()
    if token is None or token != expected:
        inp.add_alt(before, (expected,), token, inp.span_since(before))
        raise Backtrack
    return token


class _Just(Parser):
    def __init__(self, expected: Any) -> None:
        self._expected = expected

    def _sequence(self, inp: InputRef) -> Optional[Iterable[Any]]:
        expected = self._expected
        if isinstance(expected, (list, tuple)):
            return expected
        if isinstance(expected, str) and isinstance(inp.source, str):
            return expected
        if isinstance(expected, (bytes, bytearray)) and isinstance(
            inp.source, (bytes, bytearray)
        ):
            return expected
        return None

    def go(self, inp: InputRef) -> Any:
        sequence = self._sequence(inp)
        if sequence is None:
            return _expect_token(inp, self._expected)
        for item in sequence:
            _expect_token(inp, item)
        return self._expected


class _AnyToken(Parser):
    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        token = inp.next_token()
        if token is None:
            inp.add_alt(before, (), None, inp.span_since(before))
            raise Backtrack
        return token


def _collect(items: Iterable[Any]) -> Collection[Any]:
    return items if isinstance(items, Collection) else tuple(items)


class _OneOf(Parser):
    def __init__(self, items: Iterable[Any]) -> None:
        self._items = _collect(items)

    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        token = inp.next_token()
        if token is None or token not in self._items:
            inp.add_alt(before, tuple(self._items), token, inp.span_since(before))
            raise Backtrack
        return token


class _NoneOf(Parser):
    def __init__(self, items: Iterable[Any]) -> None:
        self._items = _collect(items)

    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        token = inp.next_token()
        if token is None or token in self._items:
            inp.add_alt(before, (), token, inp.span_since(before))
            raise Backtrack
        return token


def just(expected: Any) -> Parser:
    """Match a token, or a sequence of tokens given as a list, tuple, or string matching its input type."""
    return _Just(expected)


def any_token() -> Parser:
    """Match any single token."""
    return _AnyToken()


def one_of(items: Iterable[Any]) -> Parser:
    """Match one token that is among ``items``."""
    return _OneOf(items)


def none_of(items: Iterable[Any]) -> Parser:
    """Match one token that is not among ``items``."""
    return _NoneOf(items)


def recursive(func: Callable[[Recursive], Parser]) -> Recursive:
    """Build a parser from ``func``, which receives the parser itself."""
    parser = Recursive.declare()
    parser.define(func(parser))
    return parser