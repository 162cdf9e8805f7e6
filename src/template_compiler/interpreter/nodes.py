"""
Renderable nodes.

`parse()` produces a flat sequence of `Renderable`s; block implementations
produce nodes that own a nested sequence of their own. Nodes are immutable
once built and only read from while rendering.
"""

from __future__ import annotations

from abc import ABC
from abc import abstractmethod
from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .context import Context


class Renderable(ABC):
    """Something that can produce output against a context, or fail."""

    __slots__ = ()

    @abstractmethod
    def render(self, context: Context) -> str | None:
        """Return the rendered text, or None when the node writes nothing."""


@dataclass(frozen=True, slots=True)
class Text(Renderable):
    text: str

    def render(self, context: Context) -> str:
        return self.text


def render_nodes(nodes: Iterable[Renderable], context: Context) -> str:
    parts: list[str] = []
    for node in nodes:
        out = node.render(context)
        if out is not None:
            parts.append(out)
    return "".join(parts)


@dataclass(frozen=True, slots=True)
class Template(Renderable):
    """An ordered sequence of nodes rendered back to back."""

    nodes: tuple[Renderable, ...] = ()

    @classmethod
    def from_nodes(cls, nodes: Iterable[Renderable]) -> Template:
        return cls(tuple(nodes))

    def render(self, context: Context) -> str:
        return render_nodes(self.nodes, context)

    def __len__(self) -> int:
        return len(self.nodes)
