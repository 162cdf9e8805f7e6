"""
Lexical model shared by the parser and its plugins.

Two closed unions live here:
- `Token`: the smallest unit inside an expression or tag (`{{ ... }}`, `{% ... %}`)
- `Fragment`: a top-level unit of template structure (raw text, expression, tag)

Both are produced upstream (see `template_syntax.tokenization`) and consumed
read-only by `template_syntax.parsing`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from enum import auto
from typing import Union


class ComparisonOperator(Enum):
    """Comparison operators, valued by their display form."""

    EQUALS = "=="
    NOT_EQUALS = "!="
    LESS_THAN = "<"
    GREATER_THAN = ">"
    LESS_THAN_EQUALS = "<="
    GREATER_THAN_EQUALS = ">="
    CONTAINS = "contains"

    def __str__(self) -> str:
        return self.value


class TokenKind(Enum):
    PIPE = auto()
    DOT = auto()
    COLON = auto()
    COMMA = auto()
    OPEN_SQUARE = auto()
    CLOSE_SQUARE = auto()
    OPEN_ROUND = auto()
    CLOSE_ROUND = auto()
    QUESTION = auto()
    DASH = auto()
    ASSIGNMENT = auto()
    DOT_DOT = auto()
    COMPARISON = auto()
    AND = auto()
    OR = auto()
    IDENTIFIER = auto()
    STRING = auto()
    INTEGER = auto()
    FLOAT = auto()
    BOOLEAN = auto()


_PUNCTUATION_DISPLAY: dict[TokenKind, str] = {
    TokenKind.PIPE: "|",
    TokenKind.DOT: ".",
    TokenKind.COLON: ":",
    TokenKind.COMMA: ",",
    TokenKind.OPEN_SQUARE: "[",
    TokenKind.CLOSE_SQUARE: "]",
    TokenKind.OPEN_ROUND: "(",
    TokenKind.CLOSE_ROUND: ")",
    TokenKind.QUESTION: "?",
    TokenKind.DASH: "-",
    TokenKind.ASSIGNMENT: "=",
    TokenKind.DOT_DOT: "..",
    TokenKind.AND: "and",
    TokenKind.OR: "or",
}

VALUE_KINDS = frozenset(
    {
        TokenKind.IDENTIFIER,
        TokenKind.STRING,
        TokenKind.INTEGER,
        TokenKind.FLOAT,
        TokenKind.BOOLEAN,
    }
)


@dataclass(frozen=True, slots=True)
class Token:
    """
    A single lexical unit.

    Punctuation tokens carry no value. `COMPARISON` carries a
    `ComparisonOperator`; the value kinds carry the Python scalar.
    `str(token)` is the display form quoted in error messages.
    """

    kind: TokenKind
    value: str | int | float | bool | ComparisonOperator | None = None

    @classmethod
    def identifier(cls, name: str) -> Token:
        return cls(TokenKind.IDENTIFIER, name)

    @classmethod
    def string(cls, text: str) -> Token:
        return cls(TokenKind.STRING, text)

    @classmethod
    def integer(cls, number: int) -> Token:
        return cls(TokenKind.INTEGER, number)

    @classmethod
    def floating(cls, number: float) -> Token:
        return cls(TokenKind.FLOAT, number)

    @classmethod
    def boolean(cls, flag: bool) -> Token:
        return cls(TokenKind.BOOLEAN, flag)

    @classmethod
    def comparison(cls, op: ComparisonOperator) -> Token:
        return cls(TokenKind.COMPARISON, op)

    @property
    def is_value(self) -> bool:
        return self.kind in VALUE_KINDS

    def is_identifier(self, name: str | None = None) -> bool:
        if self.kind is not TokenKind.IDENTIFIER:
            return False
        return name is None or self.value == name

    def __str__(self) -> str:
        punctuation = _PUNCTUATION_DISPLAY.get(self.kind)
        if punctuation is not None:
            return punctuation
        if self.kind is TokenKind.BOOLEAN:
            return "true" if self.value else "false"
        return str(self.value)


PIPE = Token(TokenKind.PIPE)
DOT = Token(TokenKind.DOT)
COLON = Token(TokenKind.COLON)
COMMA = Token(TokenKind.COMMA)
OPEN_SQUARE = Token(TokenKind.OPEN_SQUARE)
CLOSE_SQUARE = Token(TokenKind.CLOSE_SQUARE)
OPEN_ROUND = Token(TokenKind.OPEN_ROUND)
CLOSE_ROUND = Token(TokenKind.CLOSE_ROUND)
QUESTION = Token(TokenKind.QUESTION)
DASH = Token(TokenKind.DASH)
ASSIGNMENT = Token(TokenKind.ASSIGNMENT)
DOT_DOT = Token(TokenKind.DOT_DOT)
AND = Token(TokenKind.AND)
OR = Token(TokenKind.OR)


# ---------------------------------------------------------------------------
# Top-level fragments
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RawFragment:
    """Literal template text, rendered verbatim."""

    text: str


@dataclass(frozen=True, slots=True)
class ExpressionFragment:
    """An output marker (`{{ ... }}`) and its original source text."""

    tokens: tuple[Token, ...]
    source: str = ""


@dataclass(frozen=True, slots=True)
class TagFragment:
    """A tag marker (`{% ... %}`) and its original source text."""

    tokens: tuple[Token, ...]
    source: str = ""

    @property
    def name(self) -> str | None:
        """Leading identifier, if the tag starts with one."""
        if self.tokens and self.tokens[0].kind is TokenKind.IDENTIFIER:
            return self.tokens[0].value  # type: ignore[return-value]
        return None


Fragment = Union[RawFragment, ExpressionFragment, TagFragment]
