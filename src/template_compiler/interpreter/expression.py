"""
Expressions: literals and variable paths.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any
from typing import Union

from .context import to_display
from .nodes import Renderable

if TYPE_CHECKING:
    from .context import Context


@dataclass(frozen=True, slots=True)
class Literal:
    """A scalar written directly in the template (`'text'`, `2`, `true`)."""

    value: Any

    def evaluate(self, context: Context) -> Any:
        return self.value


@dataclass(frozen=True, slots=True)
class Variable(Renderable):
    """
    A path expression: a root name plus zero or more accessors.

    Each accessor is itself an expression, so `post[key]` looks up `key`
    first and indexes `post` with the result. A bare variable is also a
    renderable node (`{{ post.title }}` is parsed straight into one).
    """

    root: str
    indexes: tuple[Expression, ...] = ()

    def __post_init__(self) -> None:
        if not self.root:
            raise ValueError("a variable needs a root name")

    def extend(self, indexes: Iterable[Expression]) -> Variable:
        return Variable(self.root, self.indexes + tuple(indexes))

    def push_literal(self, value: Any) -> Variable:
        return self.extend([Literal(value)])

    def evaluate(self, context: Context) -> Any:
        path = [index.evaluate(context) for index in self.indexes]
        return context.get_value(self.root, path)

    def render(self, context: Context) -> str:
        return to_display(self.evaluate(context))


Expression = Union[Literal, Variable]
