"""
Filter chains: `entry | name: arg, arg | other`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING
from typing import Any

from ..errors import FilterError
from ..errors import UnsupportedFilter
from .context import to_display
from .expression import Expression
from .nodes import Renderable

if TYPE_CHECKING:
    from .context import Context

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FilterCall:
    name: str
    arguments: tuple[Expression, ...] = ()


@dataclass(frozen=True, slots=True)
class FilterChain(Renderable):
    """An entry expression threaded through filters, left to right."""

    entry: Expression
    filters: tuple[FilterCall, ...] = ()

    def evaluate(self, context: Context) -> Any:
        value = self.entry.evaluate(context)

        for call in self.filters:
            func = context.get_filter(call.name)
            if func is None:
                raise UnsupportedFilter(call.name)

            arguments = [argument.evaluate(context) for argument in call.arguments]
            try:
                value = func(value, *arguments)
            except Exception as exc:
                logger.debug("filter %r failed: %r", call.name, exc)
                raise FilterError(call.name) from exc

        return value

    def render(self, context: Context) -> str:
        return to_display(self.evaluate(context))
