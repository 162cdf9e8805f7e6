"""
Template parsing.

These functions convert a fragment stream (see `tokenization.tokenize`) into
the renderable tree: raw text passes through, `{{ ... }}` expressions become
output nodes, and `{% ... %}` tags are dispatched to the parsers registered
in a `Registry`. Blocks collect their body up to the matching `end<name>`
tag, counting same-named blocks nested inside them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import cast

from ..errors import UnclosedBlock
from ..errors import UnsupportedTag
from ..interpreter.expression import Variable
from ..interpreter.nodes import Renderable
from ..interpreter.nodes import Text
from ..types import DOT
from ..types import OPEN_SQUARE
from ..types import ExpressionFragment
from ..types import Fragment
from ..types import RawFragment
from ..types import TagFragment
from ..types import Token
from ..types import TokenKind
from .classify import classify_value
from .classify import unexpected_token_error
from .expressions import parse_indexes
from .expressions import parse_output

if TYPE_CHECKING:
    from ..registry import Registry

logger = logging.getLogger(__name__)


class FragmentCursor(Iterator[Fragment]):
    """
    Forward-only reader over a fragment sequence.

    One cursor is shared between the top-level parse loop and block body
    collection, so collecting a body moves the loop past it.
    """

    def __init__(self, fragments: Iterable[Fragment]) -> None:
        self._fragments = tuple(fragments)
        self._pos = 0

    def __next__(self) -> Fragment:
        if self._pos >= len(self._fragments):
            raise StopIteration
        fragment = self._fragments[self._pos]
        self._pos += 1
        return fragment

    def peek(self) -> Fragment | None:
        if self._pos >= len(self._fragments):
            return None
        return self._fragments[self._pos]

    @property
    def position(self) -> int:
        return self._pos

    @property
    def exhausted(self) -> bool:
        return self._pos >= len(self._fragments)


def parse(fragments: Iterable[Fragment], registry: Registry) -> list[Renderable]:
    """
    Parse fragments into renderable nodes.

    Fails on the first error; no partial tree is returned.
    """
    cursor = FragmentCursor(fragments)
    nodes: list[Renderable] = []

    for fragment in cursor:
        if isinstance(fragment, RawFragment):
            nodes.append(Text(fragment.text))
        elif isinstance(fragment, ExpressionFragment):
            nodes.append(parse_expression(fragment.tokens, registry))
        elif isinstance(fragment, TagFragment):
            nodes.append(
                parse_tag(cursor, fragment.tokens, registry, source=fragment.source)
            )
        else:
            raise TypeError(f"Not a template fragment: {fragment!r}")

    return nodes


def parse_expression(tokens: Sequence[Token], registry: Registry) -> Renderable:
    """
    Parse the tokens of a `{{ ... }}` fragment.

    `name.field` / `name[index]` are parsed straight into a variable without
    going through filter-chain parsing. A leading registered tag name
    dispatches to that tag. Everything else is a filter chain.
    """
    if not tokens:
        raise unexpected_token_error("expression", None)

    head = tokens[0]
    if head.kind is TokenKind.IDENTIFIER:
        if len(tokens) > 1 and tokens[1] in (DOT, OPEN_SQUARE):
            variable = cast(Variable, classify_value(head))
            return variable.extend(parse_indexes(tokens[1:]))

        name = str(head.value)
        tag = registry.get_tag(name)
        if tag is not None:
            logger.debug("dispatching expression tag %r", name)
            return tag.parse(name, tokens[1:], registry)

    return parse_output(tokens)


def collect_block(cursor: FragmentCursor, name: str, *, source: str = "") -> list[Fragment]:
    """
    Advance `cursor` past the body of block `name` and return the body.

    The matching `end<name>` fragment is consumed but not returned. Nested
    blocks with the same name are kept whole inside the body.
    """
    end_name = f"end{name}"
    children: list[Fragment] = []
    depth = 0

    for fragment in cursor:
        if isinstance(fragment, TagFragment):
            leading = fragment.name
            if leading == name:
                depth += 1
            elif leading == end_name:
                if depth == 0:
                    return children
                depth -= 1
        children.append(fragment)

    raise UnclosedBlock(name, source)


def parse_tag(
    cursor: FragmentCursor,
    tokens: Sequence[Token],
    registry: Registry,
    *,
    source: str = "",
) -> Renderable:
    """
    Parse a `{% ... %}` fragment whose tokens are `tokens`.

    Registered tags are dispatched directly. Registered blocks first collect
    their body from `cursor`, then get dispatched with it.
    """
    head = tokens[0] if tokens else None
    name = str(head.value) if head is not None and head.kind is TokenKind.IDENTIFIER else None

    if name is not None:
        tag = registry.get_tag(name)
        if tag is not None:
            logger.debug("dispatching tag %r", name)
            return tag.parse(name, tokens[1:], registry)

        block = registry.get_block(name)
        if block is not None:
            children = collect_block(cursor, name, source=source)
            logger.debug("dispatching block %r with %d fragments", name, len(children))
            return block.parse(name, tokens[1:], children, registry)

    raise UnsupportedTag("" if head is None else str(head), source)


@dataclass(frozen=True, slots=True)
class BlockSplit:
    """
    The part of a block body from a top-level delimiter onwards.

    `args` are the tokens of the delimiter fragment (name included);
    `trailing` starts with the delimiter fragment itself.
    """

    delimiter: str
    args: tuple[Token, ...]
    trailing: tuple[Fragment, ...]


def split_block(
    fragments: Sequence[Fragment],
    delimiters: Iterable[str],
    registry: Registry,
) -> tuple[tuple[Fragment, ...], BlockSplit | None]:
    """
    Split a block body at its first top-level delimiter (e.g. `else`).

    Delimiters inside nested blocks are skipped. Any registered block opens a
    nesting level, not only blocks of the caller's kind, so the registry has
    to know every block that may appear in the body.
    """
    delims = frozenset(delimiters)
    stack: list[str] = []

    for i, fragment in enumerate(fragments):
        if not isinstance(fragment, TagFragment):
            continue
        name = fragment.name
        if name is None:
            continue

        if registry.has_block(name):
            stack.append(f"end{name}")
        elif stack and name == stack[-1]:
            stack.pop()
        elif not stack and name in delims:
            split = BlockSplit(
                delimiter=name,
                args=tuple(fragment.tokens),
                trailing=tuple(fragments[i:]),
            )
            return tuple(fragments[:i]), split

    return tuple(fragments), None
