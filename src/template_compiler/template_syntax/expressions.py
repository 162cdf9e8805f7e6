"""
Expression parsing: variable paths and filter chains.

Grammar handled here:

    output  := value indexes? ( "|" filter )*
    indexes := ( "." identifier | "[" ( string | integer | identifier ) "]" )*
    filter  := identifier ( ":" value ( "," value )* )?

Both parsers are strict left-to-right consumers; they never backtrack.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Sequence

from ..interpreter.expression import Expression
from ..interpreter.expression import Literal
from ..interpreter.expression import Variable
from ..interpreter.output import FilterCall
from ..interpreter.output import FilterChain
from ..types import CLOSE_SQUARE
from ..types import COLON
from ..types import COMMA
from ..types import PIPE
from ..types import Token
from ..types import TokenKind
from .classify import VALUE_EXPECTED
from .classify import classify_value
from .classify import expect
from .classify import unexpected_token_error

INDEX_EXPECTED = "string | whole number | identifier"


class TokenStream(Iterator[Token]):
    """A token iterator with one token of lookahead."""

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens = list(tokens)
        self._pos = 0

    def __next__(self) -> Token:
        if self._pos >= len(self._tokens):
            raise StopIteration
        token = self._tokens[self._pos]
        self._pos += 1
        return token

    def peek(self) -> Token | None:
        if self._pos >= len(self._tokens):
            return None
        return self._tokens[self._pos]

    def rest(self) -> list[Token]:
        return self._tokens[self._pos :]


def _at(tokens: Sequence[Token], pos: int) -> Token | None:
    return tokens[pos] if pos < len(tokens) else None


def parse_indexes(tokens: Sequence[Token]) -> list[Expression]:
    """
    Parse `.field` / `[index]` accessors from the front of `tokens`.

    Stops at the first token that starts neither accessor; callers pass only
    the slice meant to be consumed as accessors. Bracketed identifiers are
    variables resolved at render time (`post[key]`).
    """
    indexes: list[Expression] = []
    pos = 0

    while pos < len(tokens):
        token = tokens[pos]

        if token.kind is TokenKind.DOT:
            name = _at(tokens, pos + 1)
            if name is None or name.kind is not TokenKind.IDENTIFIER:
                raise unexpected_token_error("identifier", name)
            indexes.append(Literal(name.value))
            pos += 2
            continue

        if token.kind is TokenKind.OPEN_SQUARE:
            inner = _at(tokens, pos + 1)
            if inner is None:
                raise unexpected_token_error(INDEX_EXPECTED, None)
            if inner.kind in (TokenKind.STRING, TokenKind.INTEGER):
                index: Expression = Literal(inner.value)
            elif inner.kind is TokenKind.IDENTIFIER:
                index = Variable(str(inner.value))
            else:
                raise unexpected_token_error(INDEX_EXPECTED, inner)

            close = _at(tokens, pos + 2)
            if close != CLOSE_SQUARE:
                raise unexpected_token_error("`]`", close)
            indexes.append(index)
            pos += 3
            continue

        break

    return indexes


def _parse_entry(tokens: Sequence[Token]) -> Expression:
    # Anything after a literal, or after a variable's accessors, is ignored.
    entry = classify_value(tokens[0])
    if not isinstance(entry, Variable):
        return entry
    return entry.extend(parse_indexes(tokens[1:]))


def parse_output(tokens: Sequence[Token]) -> FilterChain:
    """
    Parse an output expression into a `FilterChain`.

    Everything before the first `|` is the entry; the remainder is a sequence
    of `| name` or `| name: arg, arg` filter calls.
    """
    if not tokens:
        raise unexpected_token_error("expression", None)

    first_pipe = next(
        (i for i, token in enumerate(tokens) if token == PIPE),
        len(tokens),
    )
    if first_pipe == 0:
        raise unexpected_token_error(VALUE_EXPECTED, tokens[0])
    entry = _parse_entry(tokens[:first_pipe])

    stream = TokenStream(tokens[first_pipe:])
    filters: list[FilterCall] = []

    while stream.peek() is not None:
        expect(stream, PIPE)

        name = next(stream, None)
        if name is None or name.kind is not TokenKind.IDENTIFIER:
            raise unexpected_token_error("identifier", name)

        if stream.peek() in (None, PIPE):
            filters.append(FilterCall(str(name.value)))
            continue

        expect(stream, COLON)

        arguments: list[Expression] = []
        while stream.peek() not in (None, PIPE):
            arguments.append(classify_value(next(stream)))

            separator = stream.peek()
            if separator == COMMA:
                next(stream)
                continue
            if separator is None or separator == PIPE:
                break
            raise unexpected_token_error("`,` | `|`", next(stream))

        filters.append(FilterCall(str(name.value), tuple(arguments)))

    return FilterChain(entry, tuple(filters))
