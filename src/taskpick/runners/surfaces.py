from __future__ import annotations

import re
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path
from typing import IO, Any

import click

from taskpick.commands import CommandSpec

SLUG_PATTERN = re.compile(r"[^A-Za-z0-9._-]+")
FULL_TERMINAL_RESET = "\x1bc"


def slot_slug(slot_key: str) -> str:
    return SLUG_PATTERN.sub("_", slot_key).strip("_") or "slot"


class OutputSurface(ABC):
    """Where a slot's process writes, and how it is presented to the user."""

    kind: str = "surface"

    def __init__(self, slot_key: str) -> None:
        self.slot_key = slot_key

    @abstractmethod
    def stream(self) -> IO[Any] | None:
        """Stream handed to the child as stdout/stderr; None inherits ours."""

    @abstractmethod
    def reset(self) -> None:
        """Discard output left by the previous run."""

    @abstractmethod
    def show(self, spec: CommandSpec) -> None:
        """Bring the surface to the user's attention."""

    def close(self) -> None:
        return None


class LogSurface(OutputSurface):
    kind = "log"

    def __init__(
        self,
        slot_key: str,
        log_dir: Path,
        echo: Callable[..., None] | None = None,
    ) -> None:
        super().__init__(slot_key)
        self.path = log_dir / f"{slot_slug(slot_key)}.log"
        self.echo = echo or click.echo
        self._handle: IO[Any] | None = None

    def stream(self) -> IO[Any]:
        if self._handle is None or self._handle.closed:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.path.open("ab")
        return self._handle

    def reset(self) -> None:
        self.close()
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = self.path.open("wb")

    def show(self, spec: CommandSpec) -> None:
        self.echo(f"[{self.slot_key}] {spec.command_line}")
        self.echo(f"Output: {self.path}")

    def close(self) -> None:
        if self._handle is not None and not self._handle.closed:
            self._handle.close()
        self._handle = None


class TerminalSurface(OutputSurface):
    kind = "terminal"

    def __init__(
        self,
        slot_key: str,
        echo: Callable[..., None] | None = None,
        clear: Callable[[], None] | None = None,
    ) -> None:
        super().__init__(slot_key)
        self.echo = echo or click.echo
        self.clear = clear or click.clear

    def stream(self) -> None:
        return None

    def reset(self) -> None:
        self.clear()

    def show(self, spec: CommandSpec) -> None:
        self.echo(
            click.style(f"[{self.slot_key}] ", bold=True)
            + f"{spec.command_line}  (in {spec.working_dir})"
        )


class RawTerminalSurface(TerminalSurface):
    kind = "raw-terminal"

    def reset(self) -> None:
        self.echo(FULL_TERMINAL_RESET, nl=False)
        self.clear()
