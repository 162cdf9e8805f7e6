"""
Runtime context: variable scopes, the filter table and value display.

Values are plain Python objects. Mappings are indexed by key, sequences
(other than strings) by integer position; `size`, `first` and `last` are
available on sequences.
"""

from __future__ import annotations

from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from collections.abc import Sequence
from contextlib import contextmanager
from typing import Any
from typing import Callable

from ..errors import UnknownVariable

FilterFn = Callable[..., Any]

_MISSING = object()


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes))


def _index_value(value: Any, index: Any) -> Any:
    if isinstance(value, Mapping):
        try:
            return value.get(index, _MISSING)
        except TypeError:
            # unhashable key
            return _MISSING
    if _is_sequence(value):
        if isinstance(index, int) and not isinstance(index, bool):
            try:
                return value[index]
            except IndexError:
                return _MISSING
        if index == "size":
            return len(value)
        if index == "first":
            return value[0] if value else _MISSING
        if index == "last":
            return value[-1] if value else _MISSING
        return _MISSING
    if isinstance(value, str) and index == "size":
        return len(value)
    return _MISSING


def format_path(root: str, path: Iterable[Any]) -> str:
    """Render a resolved path the way it would be written, e.g. `post.tags[0]`."""
    out = [root]
    for index in path:
        if isinstance(index, int) and not isinstance(index, bool):
            out.append(f"[{index}]")
        else:
            out.append(f".{index}")
    return "".join(out)


def to_display(value: Any) -> str:
    """Convert an evaluated value to the text written into the output."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, str):
        return value
    if isinstance(value, Mapping):
        return "".join(to_display(k) + to_display(v) for k, v in value.items())
    if _is_sequence(value):
        return "".join(to_display(item) for item in value)
    return str(value)


class Context:
    """
    Variables and filters visible while rendering a template.

    Scopes form a stack: the bottom scope holds globals, block implementations
    push local scopes with `scope()`. Lookups search from the innermost scope
    outwards.
    """

    def __init__(
        self,
        variables: Mapping[str, Any] | None = None,
        filters: Mapping[str, FilterFn] | None = None,
    ) -> None:
        self._scopes: list[dict[str, Any]] = [dict(variables or {})]
        self._filters: dict[str, FilterFn] = dict(filters or {})

    def set_global(self, name: str, value: Any) -> None:
        self._scopes[0][name] = value

    def set(self, name: str, value: Any) -> None:
        self._scopes[-1][name] = value

    def has(self, name: str) -> bool:
        return any(name in scope for scope in self._scopes)

    @contextmanager
    def scope(self, **bindings: Any) -> Iterator[Context]:
        self._scopes.append(dict(bindings))
        try:
            yield self
        finally:
            self._scopes.pop()

    def get_value(self, root: str, path: Sequence[Any] = ()) -> Any:
        for scope in reversed(self._scopes):
            if root in scope:
                value = scope[root]
                break
        else:
            raise UnknownVariable(root)

        for depth, index in enumerate(path):
            value = _index_value(value, index)
            if value is _MISSING:
                raise UnknownVariable(format_path(root, path[: depth + 1]))
        return value

    def add_filter(self, name: str, func: FilterFn) -> None:
        self._filters[name] = func

    def get_filter(self, name: str) -> FilterFn | None:
        return self._filters.get(name)
