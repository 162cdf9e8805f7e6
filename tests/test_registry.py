"""Unit tests for the extension registry and its loaders."""

from __future__ import annotations

import importlib
import textwrap
from dataclasses import dataclass
from pathlib import Path

import pytest

from template_compiler import registry as registry_module
from template_compiler.errors import ConfigError
from template_compiler.interpreter.context import Context
from template_compiler.interpreter.nodes import Text
from template_compiler.registry import FnBlockParser
from template_compiler.registry import FnTagParser
from template_compiler.registry import Registry
from template_compiler.registry import TagParser
from template_compiler.registry import default_registry
from template_compiler.registry import import_object
from template_compiler.registry import load_extensions
from template_compiler.registry import registry_from_config
from template_compiler.tags.comment import Comment

EXTENSION_SOURCE = """
from template_compiler.interpreter.nodes import Text
from template_compiler.registry import TagParser


def hello(tag_name, arguments, registry):
    return Text("hello")


def raw_block(block_name, arguments, children, registry):
    return Text("".join(getattr(child, "text", "") for child in children))


class Shout(TagParser):
    def parse(self, tag_name, arguments, registry):
        return Text("HEY")


NOT_A_PARSER = 3


def register_extensions(registry):
    registry.add_tag("hello", hello)
"""


@pytest.fixture
def make_module(tmp_path: Path, monkeypatch):
    monkeypatch.syspath_prepend(str(tmp_path))

    def make(name: str, source: str = EXTENSION_SOURCE) -> str:
        (tmp_path / f"{name}.py").write_text(textwrap.dedent(source), encoding="utf-8")
        importlib.invalidate_caches()
        return name

    return make


@pytest.fixture
def write_config(tmp_path: Path):
    def write(text: str) -> Path:
        path = tmp_path / "templates.toml"
        path.write_text(textwrap.dedent(text), encoding="utf-8")
        return path

    return write


def hello(tag_name, arguments, registry):
    return Text("hello")


class TestRegistry:
    def test_functions_are_wrapped(self):
        reg = Registry().add_tag("hello", hello)
        parser = reg.get_tag("hello")
        assert isinstance(parser, FnTagParser)
        assert parser.parse("hello", [], reg) == Text("hello")

    def test_parser_objects_are_kept(self):
        class Shout(TagParser):
            def parse(self, tag_name, arguments, registry):
                return Text("HEY")

        shout = Shout()
        assert Registry().add_tag("shout", shout).get_tag("shout") is shout

    def test_block_functions_are_wrapped(self):
        reg = Registry().add_block("raw", lambda name, args, children, reg: Text(""))
        assert isinstance(reg.get_block("raw"), FnBlockParser)
        assert reg.has_block("raw")
        assert not reg.has_tag("raw")

    def test_tags_and_blocks_are_separate_namespaces(self):
        reg = Registry().add_tag("x", hello)
        assert reg.get_block("x") is None

    def test_registering_twice_overwrites(self):
        reg = Registry().add_tag("x", hello)
        reg.add_tag("x", lambda name, args, registry: Text("other"))
        assert reg.get_tag("x").parse("x", [], reg) == Text("other")

    @pytest.mark.parametrize("method", ["add_tag", "add_block"])
    def test_rejects_non_callables(self, method):
        with pytest.raises(TypeError):
            getattr(Registry(), method)("x", 42)

    def test_copy_is_independent(self):
        reg = Registry().add_tag("x", hello)
        clone = reg.copy()
        clone.add_tag("y", hello)
        assert not reg.has_tag("y")
        assert clone.has_tag("x")

    def test_default_registry_has_comment(self):
        reg = default_registry()
        assert reg.has_block("comment")
        assert reg.get_block("comment").parse("comment", [], [], reg) == Comment()


class TestLoadExtensions:
    def test_loads_module(self, make_module):
        name = make_module("ext_loads_module")
        reg = Registry()

        warnings = load_extensions(reg, module_paths=[name], entry_point_group=None)

        assert warnings == ()
        assert reg.get_tag("hello").parse("hello", [], reg).render(Context()) == "hello"

    def test_missing_module_is_a_warning(self, make_module):
        ok = make_module("ext_after_missing")
        reg = Registry()

        warnings = load_extensions(
            reg, module_paths=["no_such_module_xyz", ok], entry_point_group=None
        )

        assert len(warnings) == 1
        assert "no_such_module_xyz" in warnings[0]
        assert reg.has_tag("hello")

    def test_module_without_register_function(self, make_module):
        name = make_module("ext_no_register", "VALUE = 1\n")
        warnings = load_extensions(Registry(), module_paths=[name], entry_point_group=None)
        assert "register_extensions" in warnings[0]

    def test_failure_is_logged(self, make_module, caplog):
        name = make_module(
            "ext_raises",
            """
            def register_extensions(registry):
                raise RuntimeError("nope")
            """,
        )
        warnings = load_extensions(Registry(), module_paths=[name], entry_point_group=None)
        assert warnings == (
            "warning: failed to load template extension 'ext_raises': nope",
        )
        assert "failed to load template extension" in caplog.text

    def test_entry_points(self, monkeypatch):
        @dataclass
        class FakeEntryPoint:
            name: str
            value: str
            target: object

            def load(self):
                return self.target

        def register(registry):
            registry.add_tag("hello", hello)

        seen = []

        def fake_entry_points(group):
            seen.append(group)
            return [
                FakeEntryPoint("good", "pkg:register", register),
                FakeEntryPoint("bad", "pkg:value", 42),
            ]

        monkeypatch.setattr(registry_module, "_entry_points_for_group", fake_entry_points)
        reg = Registry()

        warnings = load_extensions(reg)

        assert seen == ["template_compiler.extensions"]
        assert reg.has_tag("hello")
        assert len(warnings) == 1
        assert "bad (pkg:value)" in warnings[0]


class TestImportObject:
    def test_imports_attribute(self):
        assert import_object("template_compiler.registry:Registry") is Registry

    @pytest.mark.parametrize(
        "path",
        [
            "no_colon",
            ":Registry",
            "template_compiler.registry:",
            "no_such_module_xyz:thing",
            "template_compiler.registry:NoSuchThing",
        ],
    )
    def test_invalid_paths(self, path):
        with pytest.raises(ConfigError):
            import_object(path)


class TestRegistryFromConfig:
    def test_builds_registry(self, make_module, write_config):
        name = make_module("ext_config_full")
        path = write_config(
            f"""
            [extensions]
            modules = ["{name}"]

            [tags]
            shout = "{name}:Shout"

            [blocks]
            raw = "{name}:raw_block"
            """
        )

        reg = registry_from_config(path)

        assert reg.has_tag("hello")
        assert reg.get_tag("shout").parse("shout", [], reg) == Text("HEY")
        assert isinstance(reg.get_block("raw"), FnBlockParser)
        assert reg.has_block("comment")

    def test_base_registry_is_not_modified(self, make_module, write_config):
        name = make_module("ext_config_base")
        path = write_config(f'[tags]\nhello = "{name}:hello"\n')
        base = Registry()

        reg = registry_from_config(path, base=base)

        assert reg.has_tag("hello")
        assert not base.has_tag("hello")
        assert not reg.has_block("comment")

    def test_empty_config(self, write_config):
        reg = registry_from_config(write_config(""))
        assert reg == default_registry()

    @pytest.mark.parametrize(
        "text",
        [
            "[tags\n",
            'tags = "x"\n',
            "[tags]\nx = 1\n",
            '[tags]\nx = "no_colon"\n',
            'extensions = "x"\n',
            '[extensions]\nmodules = "x"\n',
            '[extensions]\nmodules = ["no_such_module_xyz"]\n',
        ],
    )
    def test_invalid_config(self, write_config, text):
        with pytest.raises(ConfigError):
            registry_from_config(write_config(text))

    def test_non_callable_target(self, make_module, write_config):
        name = make_module("ext_config_constant")
        path = write_config(f'[tags]\nx = "{name}:NOT_A_PARSER"\n')
        with pytest.raises(ConfigError) as excinfo:
            registry_from_config(path)
        assert isinstance(excinfo.value.__cause__, TypeError)

    def test_module_without_register_function(self, make_module, write_config):
        name = make_module("ext_config_no_register", "VALUE = 1\n")
        path = write_config(f'[extensions]\nmodules = ["{name}"]\n')
        with pytest.raises(ConfigError, match="register_extensions"):
            registry_from_config(path)

    def test_error_names_file(self, write_config):
        path = write_config("[tags\n")
        with pytest.raises(ConfigError) as excinfo:
            registry_from_config(path)
        assert excinfo.value.get_context("file") == str(path)

    def test_missing_file(self, tmp_path):
        path = tmp_path / "missing.toml"
        with pytest.raises(ConfigError) as excinfo:
            registry_from_config(path)
        assert excinfo.value.get_context("file") == str(path)
        assert isinstance(excinfo.value.__cause__, FileNotFoundError)

    def test_failing_register_hook(self, make_module, write_config):
        name = make_module(
            "ext_config_hook_raises",
            """
            def register_extensions(registry):
                raise RuntimeError("x")
            """,
        )
        path = write_config(f'[extensions]\nmodules = ["{name}"]\n')
        with pytest.raises(ConfigError, match="ext_config_hook_raises") as excinfo:
            registry_from_config(path)
        assert isinstance(excinfo.value.__cause__, RuntimeError)
