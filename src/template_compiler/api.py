"""Entry points for compiling and rendering template source text."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from .interpreter.context import Context
from .interpreter.context import FilterFn
from .interpreter.nodes import Template
from .registry import Registry
from .registry import default_registry
from .template_syntax.parsing import parse
from .template_syntax.tokenization import tokenize


def compile_template(source: str, registry: Registry | None = None) -> Template:
    """Tokenize and parse `source` into a `Template`."""
    if registry is None:
        registry = default_registry()
    return Template.from_nodes(parse(tokenize(source), registry))


def render_template(
    source: str,
    variables: Mapping[str, Any] | None = None,
    filters: Mapping[str, FilterFn] | None = None,
    registry: Registry | None = None,
) -> str:
    """Compile `source` and render it once against a fresh context."""
    template = compile_template(source, registry)
    return template.render(Context(variables, filters))
