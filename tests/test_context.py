"""Unit tests for runtime variable lookup and display."""

from __future__ import annotations

import pytest

from template_compiler.errors import UnknownVariable
from template_compiler.interpreter.context import Context
from template_compiler.interpreter.context import format_path
from template_compiler.interpreter.context import to_display
from template_compiler.interpreter.expression import Literal
from template_compiler.interpreter.expression import Variable
from template_compiler.interpreter.nodes import Template
from template_compiler.interpreter.nodes import Text


@pytest.fixture
def context() -> Context:
    return Context(
        {
            "post": {
                "title": "Hello",
                "tags": ["a", "b", "c"],
                "author": {"name": "Sam"},
            },
            "key": "title",
            "empty": [],
        }
    )


class TestGetValue:
    def test_root(self, context):
        assert context.get_value("key") == "title"

    @pytest.mark.parametrize(
        "path,expected",
        [
            (["title"], "Hello"),
            (["author", "name"], "Sam"),
            (["tags", 0], "a"),
            (["tags", -1], "c"),
            (["tags", "size"], 3),
            (["tags", "first"], "a"),
            (["tags", "last"], "c"),
            (["title", "size"], 5),
        ],
    )
    def test_paths(self, context, path, expected):
        assert context.get_value("post", path) == expected

    def test_unknown_root(self, context):
        with pytest.raises(UnknownVariable) as excinfo:
            context.get_value("missing")
        assert excinfo.value.path == "missing"

    @pytest.mark.parametrize(
        "path,reported",
        [
            (["nope"], "post.nope"),
            (["tags", 5], "post.tags[5]"),
            (["tags", 0, "x"], "post.tags[0].x"),
        ],
    )
    def test_unknown_path_reports_prefix(self, context, path, reported):
        with pytest.raises(UnknownVariable) as excinfo:
            context.get_value("post", path)
        assert excinfo.value.get_context("variable") == reported

    def test_first_of_empty_sequence(self, context):
        with pytest.raises(UnknownVariable):
            context.get_value("empty", ["first"])

    def test_variable_index_is_resolved_first(self, context):
        variable = Variable("post", (Variable("key"),))
        assert variable.evaluate(context) == "Hello"

    def test_unhashable_key_is_unknown_variable(self, context):
        context.set("keys", ["title"])
        variable = Variable("post", (Variable("keys"),))
        with pytest.raises(UnknownVariable) as excinfo:
            variable.evaluate(context)
        assert excinfo.value.path == "post.['title']"


class TestScopes:
    def test_scope_shadows_and_restores(self, context):
        with context.scope(key="inner") as inner:
            assert inner.get_value("key") == "inner"
            assert inner.has("post")
        assert context.get_value("key") == "title"

    def test_set_writes_innermost_scope(self, context):
        with context.scope():
            context.set("loop", 1)
            assert context.has("loop")
        assert not context.has("loop")

    def test_set_global_survives_scope(self, context):
        with context.scope():
            context.set_global("site", "blog")
        assert context.get_value("site") == "blog"

    def test_variables_are_copied(self):
        variables = {"a": 1}
        ctx = Context(variables)
        ctx.set("b", 2)
        assert variables == {"a": 1}


class TestFilters:
    def test_add_and_get(self):
        ctx = Context()
        assert ctx.get_filter("upcase") is None
        ctx.add_filter("upcase", str.upper)
        assert ctx.get_filter("upcase") is str.upper


class TestDisplay:
    @pytest.mark.parametrize(
        "value,text",
        [
            (None, ""),
            (True, "true"),
            (False, "false"),
            (2, "2"),
            (2.0, "2"),
            (2.5, "2.5"),
            ("text", "text"),
            (["a", 1, None], "a1"),
            ({"a": 1}, "a1"),
        ],
    )
    def test_to_display(self, value, text):
        assert to_display(value) == text

    def test_format_path(self):
        assert format_path("post", ["tags", 0, "name"]) == "post.tags[0].name"


class TestTemplate:
    def test_renders_nodes_in_order(self, context):
        template = Template.from_nodes(
            [Text("<"), Variable("post", (Literal("title"),)), Text(">")]
        )
        assert len(template) == 3
        assert template.render(context) == "<Hello>"

    def test_empty_root_is_rejected(self):
        with pytest.raises(ValueError):
            Variable("")
