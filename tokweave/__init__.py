"""Parser combinators with spans, token streams, recursion, error recovery and text helpers."""

__version__ = "0.1.0"

__all__ = ["span", "util", "stream", "parser", "recovery", "regex_parser", "text"]