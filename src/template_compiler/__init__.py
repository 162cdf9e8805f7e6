"""
Template Compiler - the front end of a Liquid-style templating language.

Turns a stream of lexed template fragments into a tree of renderable nodes,
with tags and blocks supplied by host code through a registry, and evaluates
variable paths and filter chains against a context at render time.
"""

from __future__ import annotations

from .api import compile_template
from .api import render_template
from .errors import TemplateError
from .interpreter.context import Context
from .interpreter.nodes import Renderable
from .interpreter.nodes import Template
from .registry import BlockParser
from .registry import Registry
from .registry import TagParser
from .registry import default_registry
from .template_syntax.parsing import parse
from .template_syntax.parsing import split_block
from .template_syntax.tokenization import tokenize

__all__ = [
    "BlockParser",
    "Context",
    "Registry",
    "Renderable",
    "TagParser",
    "Template",
    "TemplateError",
    "compile_template",
    "default_registry",
    "parse",
    "render_template",
    "split_block",
    "tokenize",
]
