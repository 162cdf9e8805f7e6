from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field

import pytest

from template_compiler.interpreter.context import Context
from template_compiler.interpreter.nodes import Renderable
from template_compiler.interpreter.nodes import Template
from template_compiler.registry import BlockParser
from template_compiler.registry import Registry
from template_compiler.registry import TagParser
from template_compiler.template_syntax.classify import consume_value_token
from template_compiler.template_syntax.expressions import parse_output
from template_compiler.template_syntax.parsing import parse
from template_compiler.template_syntax.parsing import split_block
from template_compiler.types import Fragment
from template_compiler.types import Token


class NullBlock(Renderable):
    def render(self, context: Context) -> None:
        return None


def null_block(
    block_name: str,
    arguments: Sequence[Token],
    children: Sequence[Fragment],
    registry: Registry,
) -> Renderable:
    return NullBlock()


@dataclass
class RecordingBlock(BlockParser):
    """Block parser that remembers what it was called with."""

    calls: list[tuple[str, tuple[Token, ...], tuple[Fragment, ...]]] = field(
        default_factory=list
    )

    def parse(self, block_name, arguments, children, registry):
        self.calls.append((block_name, tuple(arguments), tuple(children)))
        return NullBlock()


@dataclass(frozen=True)
class IfDefined(Renderable):
    name: str
    then: Template
    otherwise: Template

    def render(self, context: Context) -> str:
        branch = self.then if context.has(self.name) else self.otherwise
        return branch.render(context)


def ifdef_block(block_name, arguments, children, registry) -> Renderable:
    """`{% ifdef name %}...{% else %}...{% endifdef %}`"""
    name = consume_value_token(iter(arguments))
    leading, split = split_block(children, ["else"], registry)
    then = Template.from_nodes(parse(leading, registry))
    otherwise = Template()
    if split is not None:
        otherwise = Template.from_nodes(parse(split.trailing[1:], registry))
    return IfDefined(str(name.value), then, otherwise)


class EchoTag(TagParser):
    """`{% echo value | filter %}` - parses its arguments as a filter chain."""

    def __init__(self) -> None:
        self.parsed = 0

    def parse(self, tag_name, arguments, registry):
        self.parsed += 1
        return parse_output(arguments)


@pytest.fixture
def registry() -> Registry:
    # Blocks known to the parser; `split_block` needs them to track nesting.
    reg = Registry()
    for name in ("comment", "for", "if"):
        reg.add_block(name, null_block)
    return reg


@pytest.fixture
def echo_tag() -> EchoTag:
    return EchoTag()


@pytest.fixture
def plugin_registry(echo_tag: EchoTag) -> Registry:
    reg = Registry()
    reg.add_block("ifdef", ifdef_block)
    reg.add_block("comment", null_block)
    reg.add_tag("echo", echo_tag)
    return reg


@pytest.fixture
def recorder() -> RecordingBlock:
    return RecordingBlock()
