"""
Error types raised while parsing and rendering templates.

Every failure is a `TemplateError`. Errors carry a human-readable message plus
ordered `key=value` context pairs (e.g. `tag=comment`); wrapped failures keep
their cause on `__cause__` (`raise FilterError(...) from exc`).
"""

from __future__ import annotations

from typing import Any

NOTHING = "nothing"


class TemplateError(Exception):
    """Base class for all template parse/render failures."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context: list[tuple[str, str]] = [
            (key, str(value)) for key, value in context.items()
        ]

    def with_context(self, key: str, value: Any) -> TemplateError:
        self.context.append((key, str(value)))
        return self

    def get_context(self, key: str) -> str | None:
        for k, v in self.context:
            if k == key:
                return v
        return None

    def __str__(self) -> str:
        lines = [self.message]
        lines.extend(f"  {key}={value}" for key, value in self.context)
        return "\n".join(lines)


class UnexpectedToken(TemplateError):
    """Malformed syntax: a token other than the expected one was found."""

    def __init__(self, expected: str, actual: str | None) -> None:
        self.expected = expected
        self.actual = NOTHING if actual is None else actual
        super().__init__(f"Expected {expected}, found `{self.actual}`")


class LexError(TemplateError):
    """The reference lexer could not split a marker into tokens."""


class UnsupportedTag(TemplateError):
    def __init__(self, name: str, source: str = "") -> None:
        self.name = name
        self.source = source
        super().__init__("Tag is not supported", tag=name)


class UnclosedBlock(TemplateError):
    def __init__(self, name: str, source: str = "") -> None:
        self.name = name
        self.source = source
        super().__init__(f"Unclosed '{name}' block, expected 'end{name}'", block=name)


class UnsupportedFilter(TemplateError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__("Unsupported filter", filter=name)


class FilterError(TemplateError):
    """A filter's own logic failed; the original exception is the cause."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__("Filter error", filter=name)


class UnknownVariable(TemplateError):
    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__("Unknown variable", variable=path)


class ConfigError(TemplateError):
    """An extension registry could not be built from configuration."""
