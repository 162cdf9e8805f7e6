"""
Token classification helpers.

These are the small building blocks every parser (and every tag/block plugin)
uses to turn tokens into expressions and to report malformed syntax with a
message naming the offending token.
"""

from __future__ import annotations

from collections.abc import Iterator
from typing import Any

from ..errors import UnexpectedToken
from ..interpreter.expression import Expression
from ..interpreter.expression import Literal
from ..interpreter.expression import Variable
from ..types import Token
from ..types import TokenKind

VALUE_EXPECTED = "string | number | boolean | identifier"
LITERAL_EXPECTED = "string | number | boolean"

_LITERAL_KINDS = (
    TokenKind.STRING,
    TokenKind.INTEGER,
    TokenKind.FLOAT,
    TokenKind.BOOLEAN,
)


def unexpected_token_error(expected: str, actual: Token | str | None) -> UnexpectedToken:
    """
    Build the error for a token that does not fit the grammar.

    `actual` may be a token, a pre-rendered string, or None for exhausted input.
    """
    return UnexpectedToken(expected, None if actual is None else str(actual))


def literal_value(token: Token) -> Any:
    """Return the scalar carried by a literal token."""
    if token.kind in _LITERAL_KINDS:
        return token.value
    raise unexpected_token_error(LITERAL_EXPECTED, token)


def classify_value(token: Token) -> Expression:
    """
    Translate a value-shaped token into an expression.

    Literals become `Literal`s. Identifiers become variables; an identifier
    that encodes a dotted path (`post.title`) is split into a root and
    literal field accessors.
    """
    if token.kind in _LITERAL_KINDS:
        return Literal(token.value)
    if token.kind is TokenKind.IDENTIFIER:
        root, *fields = str(token.value).split(".")
        return Variable(root, tuple(Literal(name) for name in fields))
    raise unexpected_token_error(VALUE_EXPECTED, token)


def require_value(token: Token) -> Token:
    """Return `token` unchanged if it can represent a value."""
    if token.is_value:
        return token
    raise unexpected_token_error(VALUE_EXPECTED, token)


def consume_value_token(tokens: Iterator[Token]) -> Token:
    """Pull the next token from `tokens` and require it to be value-shaped."""
    token = next(tokens, None)
    if token is None:
        raise unexpected_token_error(VALUE_EXPECTED, None)
    return require_value(token)


def expect(tokens: Iterator[Token], expected: Token) -> Token:
    """
    Consume the next token, failing unless it equals `expected`.

    The iterator is advanced even when the check fails.
    """
    token = next(tokens, None)
    if token is not None and token == expected:
        return token
    raise unexpected_token_error(f"`{expected}`", token)
