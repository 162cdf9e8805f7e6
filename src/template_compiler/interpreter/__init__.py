"""
Render-time side of the compiler: nodes, expressions and the context they
are evaluated against.
"""

from __future__ import annotations

from .context import Context
from .context import to_display
from .expression import Expression
from .expression import Literal
from .expression import Variable
from .nodes import Renderable
from .nodes import Template
from .nodes import Text
from .output import FilterCall
from .output import FilterChain

__all__ = [
    "Context",
    "Expression",
    "FilterCall",
    "FilterChain",
    "Literal",
    "Renderable",
    "Template",
    "Text",
    "Variable",
    "to_display",
]
