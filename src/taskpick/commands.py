from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

_FIELD_ALIASES = {
    "name": ("command-name", "command_name", "name"),
    "command_line": ("command-line", "command_line", "commandLine"),
    "display": ("display",),
    "working_dir": ("working-dir", "working_dir", "workingDir"),
    "scope_name": ("scope-name", "scope_name", "scopeName"),
}


class ValidationError(ValueError):
    """Raised when a recipe draft cannot be normalized into a CommandSpec."""

    def __init__(self, message: str, *, draft: Any = None) -> None:
        super().__init__(f"{message}: {draft!r}")
        self.draft = draft


@dataclass(slots=True)
class CommandSpecDraft:
    name: Any = None
    command_line: Any = None
    display: Any = None
    working_dir: Any = None
    scope_name: Any = None
    raw: Any = field(default=None, repr=False, compare=False)

    @classmethod
    def from_record(cls, record: Any) -> CommandSpecDraft:
        if isinstance(record, CommandSpecDraft):
            return record
        if isinstance(record, CommandSpec):
            return cls(
                name=record.name,
                command_line=record.command_line,
                display=record.display,
                working_dir=record.working_dir,
                scope_name=record.scope_name,
                raw=record,
            )
        if not isinstance(record, Mapping):
            raise ValidationError("Recipe entry is not a mapping", draft=record)
        values: dict[str, Any] = {}
        for field_name, aliases in _FIELD_ALIASES.items():
            for alias in aliases:
                if alias in record:
                    values[field_name] = record[alias]
                    break
        return cls(**values, raw=record)

    @property
    def has_command_line(self) -> bool:
        return self.command_line is not None

    def source(self) -> Any:
        return self.raw if self.raw is not None else self


@dataclass(frozen=True, slots=True)
class CommandSpec:
    name: str
    command_line: str
    display: str
    working_dir: str
    scope_name: str

    @property
    def slot_key(self) -> str:
        return f"{self.name}[{self.scope_name}]"

    def with_command_line(self, command_line: str) -> CommandSpec:
        return replace(self, command_line=command_line)


def abbreviate(path: str | os.PathLike[str]) -> str:
    """Collapse the user's home directory prefix to ``~``."""
    text = os.fspath(path)
    home = str(Path.home())
    if not home or home == os.sep:
        return text
    if text == home:
        return "~"
    prefix = home.rstrip(os.sep) + os.sep
    if text.startswith(prefix):
        return "~" + os.sep + text[len(prefix) :]
    return text


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and value != ""


def normalize(draft: Any) -> CommandSpec:
    """Turn a provider record into a CommandSpec, filling in defaults.

    Accepts a ``CommandSpecDraft``, an existing ``CommandSpec`` or a mapping with
    either the ``command-name``/``command-line`` keys or their snake_case forms.
    """
    record = CommandSpecDraft.from_record(draft)
    if not _non_empty_str(record.name):
        raise ValidationError("Recipe entry has no command name", draft=record.source())
    if not _non_empty_str(record.command_line):
        raise ValidationError("Recipe entry has no command line", draft=record.source())

    display = record.display if _non_empty_str(record.display) else record.name
    working_dir = (
        os.fspath(record.working_dir) if record.working_dir else os.getcwd()
    )
    scope_name = record.scope_name if _non_empty_str(record.scope_name) else abbreviate(working_dir)
    return CommandSpec(
        name=record.name,
        command_line=record.command_line,
        display=str(display),
        working_dir=working_dir,
        scope_name=str(scope_name),
    )
