# tokweave

tokweave is a small parser-combinator library. You build a parser out of simple
pieces and then call `parse` on it. The input can be a `str`, a `bytes` object,
any other sequence of tokens, or a lazily read `Stream`.

## Installation

```
pip install tokweave
```

## Building blocks

### `tokweave.parser`

- Primitives: `just(expected)` matches one token. It also matches a whole
  sequence when `expected` is a list or tuple, or a `str`/`bytes` of the same
  type as the input. The other primitives are `any_token()`, `one_of(items)`
  and `none_of(items)`.
- Methods on every `Parser`: `map`, `map_with_span`, `then`, `ignore_then`,
  `then_ignore`, `or_`, `or_not`, `ignored`, `filter`, `try_map`, `slice`,
  `delimited_by`, `padded`, `lazy`, `and_is`, `repeated` and `recover_with`.
  - `repeated()` returns a `Repeated`, which has `at_least`, `at_most` and
    `exactly`.
  - `try_map(func)` calls `func(output, span)`. That function may raise
    `ParseError` to reject the output.
- `recursive(func)` builds a parser that can contain itself. You can do the
  same in two steps with `Recursive.declare()` and then `define(parser)`, which
  mutually recursive parsers need. Defining a parser twice raises
  `RuntimeError`, and so does using one before it is defined.
- `parse(source)` returns a `ParseResult`:
  - `output` holds the parsed value.
  - `errors` holds the errors found.
  - `has_errors()` tells you whether there were any errors.
  - `into_result()` returns the output, or raises the first `ParseError`.

  The whole input must be consumed. If tokens are left over, the result is an
  error that expects the end of input.
- `ParseError` carries `span`, `expected` and `found`. In both `expected` and
  `found`, `None` stands for the end of input.

### `tokweave.recovery`

These strategies are passed to `Parser.recover_with`:

- `via_parser(parser)`
- `skip_then_retry_until(skip, until)`
- `skip_until(skip, until, fallback)`

A recovered error is kept in `ParseResult.errors`, and the parse still produces
an output.

`nested_delimiters(start, end, others, fallback)` is different: it is a parser,
not a strategy. It matches a delimited block, respecting nesting, and returns
`fallback(span)`.

### `tokweave.regex_parser`

`regex(pattern)` matches a regular expression anchored at the current position
and returns the matched slice. It works on `str` and `bytes` input only; any
other input raises `TypeError`.

### `tokweave.text`

Tokens may be one-character strings (from `str` input) or byte values (from
`bytes` input).

- Parsers:
  - `whitespace()` and `inline_whitespace()`
  - `newline()`, which accepts LF, CR, CRLF, VT, FF, NEL, LS and PS
  - `digits(radix)`
  - `int_(radix)`, which allows no leading zeroes
  - `ascii_ident()` and `unicode_ident()`
  - `ascii_keyword(keyword)` and `unicode_keyword(keyword)`

  A keyword that is not itself a valid identifier raises `ValueError`.
- Character tests: `is_whitespace`, `is_inline_whitespace`, `is_digit`,
  `is_ident_start` and `is_ident_continue`.

### `tokweave.span`

- `SimpleSpan(start, end)` is a span with an exclusive end. Its `str()` and
  `repr()` give `start..end`, and iterating over it yields its offsets.
  `SimpleSpan.splat(offset)` makes an empty span, and `into_range()` gives a
  `range`.
- `ContextSpan.new(context, start, end)` pairs a span with a context, such as a
  file name.

### `tokweave.stream`

`Stream.from_iter(iterable)` pulls tokens from an iterator in batches as they
are needed. `span_from` works only when the iterable has a known length.

`stream.spanned(eoi)` treats each item as a `(token, span)` pair. Parsers then
see only the tokens, and spans are taken from the items. `eoi` is the span used
for the end of input.

### `tokweave.util`

`Maybe.ref(value)` and `Maybe.val(value)` wrap a shared or an owned value.
Comparison, hashing and `repr` all act on the wrapped value.

## Example

```python
from tokweave.parser import just, recursive
from tokweave.text import ascii_ident

tree = recursive(
    lambda tree: tree.then_ignore(just(",").or_not())
    .repeated()
    .delimited_by(just("["), just("]"))
    .or_(ascii_ident())
    .padded()
)

result = tree.parse("[a, [b, c], d]")
print(result.into_result())  # ['a', ['b', 'c'], 'd']
```

## What it does not do

tokweave is a library only. It has no command-line tool, and it does not keep
parse results between runs.

## Running the tests

```
pip install -e .[test]
pytest
```