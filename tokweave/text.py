"""Parsers and character tests for textual input.

Tokens may be characters (one-character ``str``, from ``str`` input) or bytes
(``int``, from ``bytes`` input); every parser here works with either.
"""

from __future__ import annotations

from typing import Any, Optional

from tokweave.parser import (
    Backtrack,
    InputRef,
    ParseError,
    Parser,
    Repeated,
    any_token,
)

_BYTE_WHITESPACE = frozenset(b" \t\n\x0c\r")
_NOT_UNICODE_WHITESPACE = frozenset("\x1c\x1d\x1e\x1f")
_NEWLINE_CHARS = frozenset("\r\x0b\x0c\x85\u2028\u2029")
_MAX_RADIX = 36


def _to_char(c: Any) -> Optional[str]:
    """Return a token as a one-character string, or ``None`` if it is not textual."""
    if isinstance(c, str):
        return c if len(c) == 1 else None
    if isinstance(c, int) and not isinstance(c, bool) and 0 <= c <= 0xFF:
        return chr(c)
    return None


def _is_ascii_alpha_or_underscore(c: Any) -> bool:
    ch = _to_char(c)
    return ch is not None and (ch == "_" or (ch.isascii() and ch.isalpha()))


def _is_ascii_alnum_or_underscore(c: Any) -> bool:
    ch = _to_char(c)
    return ch is not None and (ch == "_" or (ch.isascii() and ch.isalnum()))


def is_inline_whitespace(c: Any) -> bool:
    """Whether ``c`` is whitespace that does not break a line (space or tab)."""
    return _to_char(c) in (" ", "\t")


def is_whitespace(c: Any) -> bool:
    """Whether ``c`` is whitespace: Unicode whitespace for characters, ASCII for bytes."""
    if isinstance(c, int) and not isinstance(c, bool):
        return c in _BYTE_WHITESPACE
    ch = _to_char(c)
    return ch is not None and ch.isspace() and ch not in _NOT_UNICODE_WHITESPACE


def is_digit(c: Any, radix: int) -> bool:
    """Whether ``c`` is a digit in the given radix (2 to 36, ASCII digits and letters)."""
    if radix > _MAX_RADIX:
        raise ValueError(f"radix must be at most {_MAX_RADIX}, got {radix}")
    ch = _to_char(c)
    if ch is None:
        return False
    if "0" <= ch <= "9":
        value = ord(ch) - ord("0")
    elif ch.isascii() and ch.isalpha():
        value = ord(ch.lower()) - ord("a") + 10
    else:
        return False
    return value < radix


def is_ident_start(c: Any) -> bool:
    """Whether ``c`` may start a Unicode identifier (XID_Start)."""
    ch = _to_char(c)
    return ch is not None and ch != "_" and ch.isidentifier()


def is_ident_continue(c: Any) -> bool:
    """Whether ``c`` may continue a Unicode identifier (XID_Continue)."""
    ch = _to_char(c)
    return ch is not None and ("a" + ch).isidentifier()


class _Char(Parser):
    """Match one token equal to an ASCII character, whatever the token type."""

    def __init__(self, char: str) -> None:
        self._char = char

    def go(self, inp: InputRef) -> Any:
        before = inp.offset
        token = inp.next_token()
        if token is None or _to_char(token) != self._char:
            inp.add_alt(before, (self._char,), token, inp.span_since(before))
            raise Backtrack
        return token


def _check(predicate: Any) -> Any:
    """Build a ``try_map`` function that keeps tokens satisfying ``predicate``."""

    def check(c: Any, span: Any) -> Any:
        if predicate(c):
            return c
        raise ParseError.expected_found((), c, span)

    return check


def _same_text(found: Any, keyword: Any) -> bool:
    if isinstance(found, (bytes, bytearray)) and isinstance(keyword, str):
        return bytes(found) == keyword.encode("utf-8")
    if isinstance(found, str) and isinstance(keyword, (bytes, bytearray)):
        return found.encode("utf-8") == bytes(keyword)
    if isinstance(found, list):
        return [_to_char(c) for c in found] == [_to_char(c) for c in keyword]
    return found == keyword


def _keyword_chars(keyword: Any) -> list[Any]:
    chars = list(keyword)
    if not chars:
        raise ValueError("Keyword must have at least one character")
    return chars


def _keyword_parser(ident: Parser, keyword: Any) -> Parser:
    def check(found: Any, span: Any) -> None:
        if not _same_text(found, keyword):
            raise ParseError.expected_found(None, None, span)

    return ident.try_map(check).slice()


def whitespace() -> Repeated:
    """Accept and ignore any number of whitespace tokens."""
    return any_token().filter(is_whitespace).ignored().repeated()


def inline_whitespace() -> Repeated:
    """Accept and ignore any number of spaces and tabs."""
    return any_token().filter(is_inline_whitespace).ignored().repeated()


def newline() -> Parser:
    """Accept one newline: LF, CR, CRLF, VT, FF, NEL, LS or PS."""
    return (
        _Char("\r")
        .or_not()
        .ignore_then(_Char("\n"))
        .or_(any_token().filter(lambda c: _to_char(c) in _NEWLINE_CHARS))
        .ignored()
    )


def digits(radix: int) -> Repeated:
    """Accept one or more digits in the given radix; the output is the list of digits."""
    if radix > _MAX_RADIX:
        raise ValueError(f"radix must be at most {_MAX_RADIX}, got {radix}")
    return (
        any_token()
        .try_map(_check(lambda c: is_digit(c, radix)))
        .repeated()
        .at_least(1)
    )


def int_(radix: int) -> Parser:
    """Accept a non-negative integer with no leading zeroes; the output is the matched slice."""
    if radix > _MAX_RADIX:
        raise ValueError(f"radix must be at most {_MAX_RADIX}, got {radix}")
    first = any_token().try_map(
        _check(lambda c: is_digit(c, radix) and _to_char(c) != "0")
    )
    rest = any_token().filter(lambda c: is_digit(c, radix)).repeated()
    return first.then(rest).ignored().or_(_Char("0").ignored()).slice()


def ascii_ident() -> Parser:
    """Accept a C-style identifier, ``[a-zA-Z_][a-zA-Z0-9_]*``; the output is the slice."""
    return (
        any_token()
        .try_map(_check(_is_ascii_alpha_or_underscore))
        .then(any_token().filter(_is_ascii_alnum_or_underscore).repeated())
        .slice()
    )


def ascii_keyword(keyword: Any) -> Parser:
    """Accept exactly ``keyword`` as a whole ASCII identifier.

    Raises ``ValueError`` if ``keyword`` is not itself a valid ASCII identifier.
    """
    chars = _keyword_chars(keyword)
    if not _is_ascii_alpha_or_underscore(chars[0]):
        raise ValueError(
            "The first character of a keyword must be ASCII alphabetic or an "
            f"underscore, not {chars[0]!r}"
        )
    for c in chars[1:]:
        if not _is_ascii_alnum_or_underscore(c):
            raise ValueError(
                "Trailing characters of a keyword must be ASCII alphanumeric or an "
                f"underscore, not {c!r}"
            )
    return _keyword_parser(ascii_ident(), keyword)


def unicode_ident() -> Parser:
    """Accept a Unicode identifier (XID_Start then XID_Continue); the output is the slice."""
    return (
        any_token()
        .try_map(_check(is_ident_start))
        .then(any_token().filter(is_ident_continue).repeated())
        .slice()
    )


def unicode_keyword(keyword: Any) -> Parser:
    """Accept exactly ``keyword`` as a whole Unicode identifier.

    Raises ``ValueError`` if ``keyword`` is not itself a valid Unicode identifier.
    """
    chars = _keyword_chars(keyword)
    if not is_ident_start(chars[0]):
        raise ValueError(
            "The first character of a keyword must be a valid unicode XID_START, "
            f"not {chars[0]!r}"
        )
    for c in chars[1:]:
        if not is_ident_continue(c):
            raise ValueError(
                "Trailing characters of a keyword must be valid as unicode "
                f"XID_CONTINUE, not {c!r}"
            )
    return _keyword_parser(unicode_ident(), keyword)