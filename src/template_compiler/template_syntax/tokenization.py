"""
Reference lexer.

Splits template text into the fragment stream consumed by `parsing.parse()`.
Fragment boundaries (`{{ ... }}`, `{% ... %}`, `{# ... #}`, raw text) come
from Django's template lexer, which uses the same delimiters; the contents
of each marker are then granularized into `Token`s with a small regex
scanner.

Django's lexer treats `{% verbatim %}...{% endverbatim %}` itself: the two
tags come through as `TagFragment`s, but every marker between them arrives
as a `RawFragment` holding its literal text. A host `verbatim` block therefore
receives its body unparsed.

The parser does not depend on this module. Hosts with their own lexer only
need to produce `Fragment`s.
"""

from __future__ import annotations

import re

from django.template.base import DebugLexer
from django.template.base import TokenType

from ..errors import LexError
from ..types import ComparisonOperator
from ..types import ExpressionFragment
from ..types import Fragment
from ..types import RawFragment
from ..types import TagFragment
from ..types import Token
from ..types import TokenKind

_TOKEN_RE = re.compile(
    r"""
      (?P<space>\s+)
    | (?P<string>'[^']*'|"[^"]*")
    | (?P<float>-?\d+\.\d+)
    | (?P<integer>-?\d+)
    | (?P<range>\.\.)
    | (?P<comparison>==|!=|<>|<=|>=|<|>)
    | (?P<punct>[|.:,\[\]()?=-])
    | (?P<word>[A-Za-z_][\w-]*\??)
    """,
    re.VERBOSE,
)

_PUNCTUATION: dict[str, TokenKind] = {
    "|": TokenKind.PIPE,
    ".": TokenKind.DOT,
    ":": TokenKind.COLON,
    ",": TokenKind.COMMA,
    "[": TokenKind.OPEN_SQUARE,
    "]": TokenKind.CLOSE_SQUARE,
    "(": TokenKind.OPEN_ROUND,
    ")": TokenKind.CLOSE_ROUND,
    "?": TokenKind.QUESTION,
    "-": TokenKind.DASH,
    "=": TokenKind.ASSIGNMENT,
}

_KEYWORDS: dict[str, Token] = {
    "true": Token.boolean(True),
    "false": Token.boolean(False),
    "and": Token(TokenKind.AND),
    "or": Token(TokenKind.OR),
    "contains": Token.comparison(ComparisonOperator.CONTAINS),
}


def _comparison(text: str) -> Token:
    if text == "<>":
        return Token.comparison(ComparisonOperator.NOT_EQUALS)
    return Token.comparison(ComparisonOperator(text))


def granularize(text: str) -> list[Token]:
    """
    Split the contents of a `{{ }}` / `{% %}` marker into tokens.

    `abc | def:'1',2` -> [abc, |, def, :, '1', ',', 2]
    """
    tokens: list[Token] = []
    pos = 0

    while pos < len(text):
        match = _TOKEN_RE.match(text, pos)
        if match is None:
            raise LexError(f"Unexpected character `{text[pos]}`", expression=text)
        pos = match.end()

        kind = match.lastgroup
        value = match.group()
        if kind == "space":
            continue
        if kind == "string":
            tokens.append(Token.string(value[1:-1]))
        elif kind == "float":
            tokens.append(Token.floating(float(value)))
        elif kind == "integer":
            tokens.append(Token.integer(int(value)))
        elif kind == "range":
            tokens.append(Token(TokenKind.DOT_DOT))
        elif kind == "comparison":
            tokens.append(_comparison(value))
        elif kind == "punct":
            tokens.append(Token(_PUNCTUATION[value]))
        else:
            tokens.append(_KEYWORDS.get(value) or Token.identifier(value))

    return tokens


def tokenize(template: str) -> list[Fragment]:
    """
    Tokenize a template into fragments.

    Comments (`{# ... #}`) are dropped. Each marker keeps its delimited source
    text for diagnostics.
    """
    out: list[Fragment] = []

    for token in DebugLexer(template).tokenize():
        start, end = token.position
        source = template[start:end]

        if token.token_type == TokenType.TEXT:
            out.append(RawFragment(token.contents))
        elif token.token_type == TokenType.VAR:
            out.append(ExpressionFragment(tuple(granularize(token.contents)), source))
        elif token.token_type == TokenType.BLOCK:
            tokens = tuple(granularize(token.contents))
            if not tokens:
                raise LexError("Empty tag", tag=source, line=token.lineno)
            out.append(TagFragment(tokens, source))

    return out
