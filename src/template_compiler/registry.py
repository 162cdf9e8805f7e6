"""
Extension registry for tags and blocks.

Tags are single-fragment constructs (`{% include 'x' %}`); blocks collect a
body up to a matching `end<name>` fragment (`{% comment %}...{% endcomment %}`).
Host code registers parsers for both by name. A parser is either an object
implementing `TagParser` / `BlockParser`, or a plain function with the same
signature as `parse`; functions are wrapped in `FnTagParser` /
`FnBlockParser` so the parser never has to tell the two apart.

The registry is the configuration of a parse: build it up front, then pass it
to `parse()`. Parsing only reads from it, so one registry can be shared by any
number of independent parses.
"""

from __future__ import annotations

import importlib
import importlib.metadata
import logging
import tomllib
from abc import ABC
from abc import abstractmethod
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from dataclasses import field
from pathlib import Path
from types import ModuleType
from typing import Any

from .errors import ConfigError
from .interpreter.nodes import Renderable
from .tags.comment import comment_block
from .types import Fragment
from .types import Token

logger = logging.getLogger(__name__)

EXTENSION_ENTRY_POINT_GROUP = "template_compiler.extensions"
REGISTER_FUNCTION = "register_extensions"


class TagParser(ABC):
    @abstractmethod
    def parse(
        self,
        tag_name: str,
        arguments: Sequence[Token],
        registry: Registry,
    ) -> Renderable:
        """Build the node for a tag from its argument tokens."""


class BlockParser(ABC):
    @abstractmethod
    def parse(
        self,
        block_name: str,
        arguments: Sequence[Token],
        children: Sequence[Fragment],
        registry: Registry,
    ) -> Renderable:
        """
        Build the node for a block.

        `children` holds every fragment between the opening tag and its
        matching `end<name>` tag, excluding both. Implementations usually
        call `parse(children, registry)` and `split_block()` on it.
        """


TagFn = Callable[[str, Sequence[Token], "Registry"], Renderable]
BlockFn = Callable[[str, Sequence[Token], Sequence[Fragment], "Registry"], Renderable]


@dataclass(frozen=True)
class FnTagParser(TagParser):
    func: TagFn

    def parse(
        self,
        tag_name: str,
        arguments: Sequence[Token],
        registry: Registry,
    ) -> Renderable:
        return self.func(tag_name, arguments, registry)


@dataclass(frozen=True)
class FnBlockParser(BlockParser):
    func: BlockFn

    def parse(
        self,
        block_name: str,
        arguments: Sequence[Token],
        children: Sequence[Fragment],
        registry: Registry,
    ) -> Renderable:
        return self.func(block_name, arguments, children, registry)


@dataclass
class Registry:
    """Name-keyed tag and block parsers. Registering a name twice overwrites."""

    tags: dict[str, TagParser] = field(default_factory=dict)
    blocks: dict[str, BlockParser] = field(default_factory=dict)

    def add_tag(self, name: str, parser: TagParser | TagFn) -> Registry:
        if not isinstance(parser, TagParser):
            if not callable(parser):
                raise TypeError(f"tag parser for '{name}' must be callable")
            parser = FnTagParser(parser)
        self.tags[name] = parser
        return self

    def add_block(self, name: str, parser: BlockParser | BlockFn) -> Registry:
        if not isinstance(parser, BlockParser):
            if not callable(parser):
                raise TypeError(f"block parser for '{name}' must be callable")
            parser = FnBlockParser(parser)
        self.blocks[name] = parser
        return self

    def has_tag(self, name: str) -> bool:
        return name in self.tags

    def has_block(self, name: str) -> bool:
        return name in self.blocks

    def get_tag(self, name: str) -> TagParser | None:
        return self.tags.get(name)

    def get_block(self, name: str) -> BlockParser | None:
        return self.blocks.get(name)

    def copy(self) -> Registry:
        return Registry(tags=dict(self.tags), blocks=dict(self.blocks))


def default_registry() -> Registry:
    """A registry with the built-in blocks (currently only `comment`)."""
    return Registry().add_block("comment", comment_block)


# ---------------------------------------------------------------------------
# Extension modules and entry points
# ---------------------------------------------------------------------------


def _entry_points_for_group(group: str) -> list[importlib.metadata.EntryPoint]:
    return list(importlib.metadata.entry_points(group=group))


def _resolve_register_fn(loaded: Any) -> Callable[[Registry], Any]:
    if isinstance(loaded, ModuleType):
        register_fn = getattr(loaded, REGISTER_FUNCTION, None)
        if not callable(register_fn):
            raise ValueError(
                f"module '{loaded.__name__}' does not define {REGISTER_FUNCTION}(registry)."
            )
        return register_fn

    if callable(loaded):
        return loaded

    raise ValueError("extension must resolve to a module or callable.")


def _load_one(
    registry: Registry, loader: Callable[[], Any], *, source: str
) -> str | None:
    try:
        register_fn = _resolve_register_fn(loader())
        register_fn(registry)
    except Exception as exc:  # noqa: BLE001
        logger.warning("failed to load template extension %r: %s", source, exc)
        return f"warning: failed to load template extension '{source}': {exc}"
    logger.debug("loaded template extension %r", source)
    return None


def load_extensions(
    registry: Registry,
    *,
    module_paths: Iterable[str] = (),
    entry_point_group: str | None = EXTENSION_ENTRY_POINT_GROUP,
) -> tuple[str, ...]:
    """
    Let extension modules and entry points register their tags and blocks.

    Each module must expose `register_extensions(registry)`; an entry point may
    resolve to such a module or directly to the function. Failures do not stop
    the remaining extensions from loading; they are returned as warnings.
    """
    warnings: list[str] = []

    for module_path in module_paths:
        warning = _load_one(
            registry,
            lambda module_path=module_path: importlib.import_module(module_path),
            source=module_path,
        )
        if warning:
            warnings.append(warning)

    if entry_point_group:
        for entry_point in _entry_points_for_group(entry_point_group):
            warning = _load_one(
                registry,
                entry_point.load,
                source=f"{entry_point.name} ({entry_point.value})",
            )
            if warning:
                warnings.append(warning)

    return tuple(warnings)


# ---------------------------------------------------------------------------
# TOML configuration
# ---------------------------------------------------------------------------


def import_object(path: str) -> Any:
    """Import `package.module:attribute` (the attribute may be dotted)."""
    module_name, sep, attr = path.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigError(f"Invalid import path '{path}', expected 'module:attribute'")
    try:
        obj: Any = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigError(f"Cannot import module '{module_name}'") from exc
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as exc:
            raise ConfigError(f"Module '{module_name}' has no attribute '{attr}'") from exc
    return obj


def _string_table(data: dict[str, Any], key: str, path: Path) -> dict[str, str]:
    table = data.get(key, {})
    if not isinstance(table, dict):
        raise ConfigError(f"Invalid registry config: [{key}] must be a table", file=path)
    for name, target in table.items():
        if not isinstance(target, str):
            raise ConfigError(
                f"Invalid registry config: {key}.{name} must be a string", file=path
            )
    return table


def registry_from_config(path: Path, *, base: Registry | None = None) -> Registry:
    """
    Build a registry from a TOML file.

        [extensions]
        modules = ["myapp.template_tags"]
        entry_points = false

        [tags]
        include = "myapp.tags:parse_include"

        [blocks]
        raw = "myapp.tags:RawBlock"

    Tag/block targets are parser objects, parser classes (instantiated with no
    arguments) or plain functions. Unlike `load_extensions()`, any failure here
    raises `ConfigError`.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigError("Cannot read registry config", file=path) from exc
    try:
        data = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError("Invalid registry config", file=path) from exc

    registry = base.copy() if base is not None else default_registry()

    extensions = data.get("extensions", {})
    if not isinstance(extensions, dict):
        raise ConfigError("Invalid registry config: [extensions] must be a table", file=path)
    modules = extensions.get("modules", [])
    if not isinstance(modules, list) or not all(isinstance(m, str) for m in modules):
        raise ConfigError(
            "Invalid registry config: extensions.modules must be a list of strings",
            file=path,
        )
    for module_path in modules:
        try:
            module = importlib.import_module(module_path)
            _resolve_register_fn(module)(registry)
        except ImportError as exc:
            raise ConfigError(f"Cannot import module '{module_path}'", file=path) from exc
        except ValueError as exc:
            raise ConfigError(str(exc), file=path) from exc
        except Exception as exc:
            raise ConfigError(
                f"Extension module '{module_path}' failed to register", file=path
            ) from exc
    if extensions.get("entry_points", False):
        for warning in load_extensions(registry):
            logger.warning("%s", warning)

    try:
        for name, target in _string_table(data, "tags", path).items():
            registry.add_tag(name, _instantiate(import_object(target), TagParser))
        for name, target in _string_table(data, "blocks", path).items():
            registry.add_block(name, _instantiate(import_object(target), BlockParser))
    except TypeError as exc:
        raise ConfigError(str(exc), file=path) from exc

    logger.debug(
        "registry loaded from %s: %d tags, %d blocks",
        path,
        len(registry.tags),
        len(registry.blocks),
    )
    return registry


def _instantiate(obj: Any, parser_type: type) -> Any:
    if isinstance(obj, type) and issubclass(obj, parser_type):
        return obj()
    return obj
