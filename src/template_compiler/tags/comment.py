"""
`{% comment %}...{% endcomment %}`: a block whose body is never rendered.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING

from ..interpreter.nodes import Renderable
from ..types import Fragment
from ..types import Token

if TYPE_CHECKING:
    from ..interpreter.context import Context
    from ..registry import Registry


@dataclass(frozen=True, slots=True)
class Comment(Renderable):
    def render(self, context: Context) -> None:
        return None


def comment_block(
    block_name: str,
    arguments: Sequence[Token],
    children: Sequence[Fragment],
    registry: Registry,
) -> Renderable:
    return Comment()
