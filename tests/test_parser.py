from dataclasses import dataclass
from string import ascii_letters
from typing import Union

import pytest

from tokweave.parser import (
    InputRef,
    ParseError,
    Recursive,
    any_token,
    just,
    none_of,
    one_of,
    recursive,
)
from tokweave.span import SimpleSpan
from tokweave.stream import Stream


def test_just_single_char():
    assert just("a").parse("a").into_result() == "a"


def test_just_string_sequence():
    assert just("null").parse("null").into_result() == "null"


def test_just_bytes_sequence():
    assert just(b"null").parse(b"null").into_result() == b"null"


def test_just_mismatch_reports_error():
    result = just("a").parse("b")
    assert result.has_errors()
    assert result.output is None
    error = result.errors[0]
    assert error.expected == ("a",)
    assert error.found == "b"
    with pytest.raises(ParseError):
        result.into_result()


def test_trailing_input_expects_end():
    result = just("a").parse("ab")
    assert result.errors[0].expected == (None,)
    assert result.errors[0].found == "b"


def test_lazy_ignores_trailing_input():
    assert just("a").lazy().parse("ab").into_result() == "a"


def test_then_variants():
    assert just("a").then(just("b")).parse("ab").into_result() == ("a", "b")
    assert just("a").ignore_then(just("b")).parse("ab").into_result() == "b"
    assert just("a").then_ignore(just("b")).parse("ab").into_result() == "a"


def test_or_merges_expectations_at_same_offset():
    parser = just("a").or_(just("b"))
    assert parser.parse("b").into_result() == "b"
    result = parser.parse("c")
    assert result.errors[0].expected == ("a", "b")


def test_or_not_yields_none():
    assert just("a").or_not().parse("").into_result() is None
    assert just("a").or_not().parse("a").into_result() == "a"


def test_map_with_span():
    parser = just("a").then(just("b")).map_with_span(lambda _, span: span)
    assert parser.parse("ab").into_result() == SimpleSpan(0, len("ab"))


def test_filter():
    parser = any_token().filter(str.isdigit)
    assert parser.parse("7").into_result() == "7"
    result = parser.parse("x")
    assert result.errors[0].found == "x"


def test_try_map_records_raised_error():
    def check(token, span):
        if token == "x":
            raise ParseError(span, message="bad token")
        return token.upper()

    parser = any_token().try_map(check)
    assert parser.parse("y").into_result() == "Y"
    result = parser.parse("x")
    assert result.errors[0].message == "bad token"


def test_slice_returns_input():
    parser = one_of("abc").repeated().slice()
    assert parser.parse("abcab").into_result() == "abcab"


def test_repeated_bounds():
    assert just("a").repeated().at_least(2).parse("a").has_errors()
    assert just("a").repeated().at_least(2).parse("aaa").into_result() == ["a", "a", "a"]
    assert just("a").repeated().exactly(2).parse("aa").into_result() == ["a", "a"]
    assert just("a").repeated().exactly(2).parse("aaa").has_errors()


def test_backtracking_repetitions():
    def block(count):
        return (
            just("!")
            .repeated()
            .then_ignore(just(";"))
            .repeated()
            .exactly(count)
            .then_ignore(just(";"))
        )

    xs = block(5).or_(block(4)).repeated()
    output = xs.parse("!!!!;!!!!;!!!!;!!!!;;" * 1000).into_result()
    assert len(output) == 1000


def test_alphabet_or_chain():
    parser = just("A")
    for letter in "BCDEFGHIJKLMNOPQRSTUVWXYZ":
        parser = parser.or_(just(letter))
    assert parser.parse("A").into_result() == "A"
    assert parser.parse("Z").into_result() == "Z"
    assert parser.parse("0").has_errors()


def test_alphabet_then_chain():
    parser = just("A").slice()
    for letter in "BCDEFGHIJKLMNOPQRSTUVWXYZ":
        parser = parser.then(just(letter)).slice()
    assert parser.parse("ABCDEFGHIJKLMNOPQRSTUVWXYZ").into_result() == "ABCDEFGHIJKLMNOPQRSTUVWXYZ"
    assert parser.parse("ABCDEFGHIJKLMNOPQRSTUVWXY0").has_errors()
    assert parser.parse("0").has_errors()


def test_padded_and_delimited():
    assert just("a").padded().parse("  a \n").into_result() == "a"
    parser = just("a").delimited_by(just("("), just(")"))
    assert parser.parse("(a)").into_result() == "a"
    assert parser.parse("(a").has_errors()


def test_and_is():
    parser = any_token().and_is(none_of("x"))
    assert parser.parse("y").into_result() == "y"
    assert parser.parse("x").has_errors()


@dataclass
class Link:
    char: str
    rest: Union["Link", "End"]


@dataclass
class End:
    pass


def test_declared_recursive_chain():
    chain = Recursive.declare()
    chain.define(
        just("+")
        .then(chain)
        .map(lambda pair: Link(pair[0], pair[1]))
        .or_not()
        .map(lambda link: link if link is not None else End())
    )
    assert chain.parse("").into_result() == End()
    assert chain.parse("++").into_result() == Link("+", Link("+", End()))


@dataclass
class Leaf:
    name: str


@dataclass
class Branch:
    items: list


def _tree_parser():
    def build(tree):
        ident = one_of(ascii_letters).repeated().at_least(1).slice()
        items = (
            tree.then(just(",").ignore_then(tree).repeated())
            .map(lambda pair: [pair[0], *pair[1]])
            .or_not()
            .map(lambda found: found or [])
        )
        branch = items.delimited_by(just("["), just("]")).map(Branch)
        return branch.or_(ident.map(Leaf)).padded()

    return recursive(build)


def test_recursive_tree():
    tree = _tree_parser()
    assert tree.parse("hello").into_result() == Leaf("hello")
    assert tree.parse("[a, b, c]").into_result() == Branch([Leaf("a"), Leaf("b"), Leaf("c")])
    assert tree.parse("[[a, b], c, [d, [e, f]]]").into_result() == Branch(
        [
            Branch([Leaf("a"), Leaf("b")]),
            Leaf("c"),
            Branch([Leaf("d"), Branch([Leaf("e"), Leaf("f")])]),
        ]
    )


def test_recursive_defined_twice_raises():
    parser = Recursive.declare()
    parser.define(just("a"))
    with pytest.raises(RuntimeError):
        parser.define(just("b"))


def test_recursive_used_before_definition_raises():
    with pytest.raises(RuntimeError):
        Recursive.declare().parse("a")


def test_stream_and_iterator_inputs():
    assert just("h").parse(Stream.from_iter("h")).into_result() == "h"
    assert any_token().repeated().parse(iter("abc")).into_result() == ["a", "b", "c"]


def test_input_ref_save_and_rewind():
    inp = InputRef("abc")
    marker = inp.save()
    assert inp.next_token() == "a"
    inp.emit(ParseError(SimpleSpan.splat(0), message="oops"))
    assert len(inp.errors_since(marker)) == 1
    inp.rewind(marker)
    assert inp.offset == marker.offset
    assert inp.errors == []


def test_input_ref_skip_slice_and_span():
    text = "abc"
    inp = InputRef(text)
    inp.skip_while(str.isalpha)
    assert inp.offset == len(text)
    assert inp.next_token() is None
    assert inp.slice(0, len(text)) == text
    assert inp.span_since(0) == SimpleSpan(0, len(text))


def test_take_alt_without_failure_raises():
    with pytest.raises(RuntimeError):
        InputRef("a").take_alt()