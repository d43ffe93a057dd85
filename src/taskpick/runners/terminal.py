from __future__ import annotations

from collections.abc import Callable
from typing import Any

from taskpick.commands import CommandSpec
from taskpick.runners.base import Runner
from taskpick.runners.slots import ProcessSlot, SlotRegistry
from taskpick.runners.surfaces import OutputSurface, RawTerminalSurface, TerminalSurface

KILL_PROMPT = "A process is running; kill it?"


class TerminalRunner(Runner):
    """Run attached to the user's terminal, asking before replacing a live process."""

    mode = "interactive-terminal"
    grace_seconds = 1.0
    surface_kind = TerminalSurface.kind

    def __init__(
        self,
        registry: SlotRegistry,
        *,
        confirm: Callable[[str], bool],
        **kwargs: Any,
    ) -> None:
        super().__init__(registry, **kwargs)
        self.confirm = confirm

    def make_surface(self, slot_key: str) -> OutputSurface:
        return TerminalSurface(slot_key)

    def run(self, spec: CommandSpec) -> ProcessSlot | None:
        slot = self.registry.get_or_create(spec.slot_key)
        if slot.alive:
            if not self.confirm(KILL_PROMPT):
                self._emit({"event": "slot_kill_declined", "slot": slot.key, "mode": self.mode})
                return None
            self._stop(slot)

        surface = self._surface_for(slot)
        surface.reset()
        process = self._spawn(spec, surface)
        slot.process = process
        slot.last_spec = spec
        slot.last_mode = self.mode
        surface.show(spec)
        return slot


class RawTerminalRunner(TerminalRunner):
    """Experimental variant that hands the command to a nested shell.

    The command line is embedded in a double-quoted ``<shell> -c "..."`` string,
    so a command that itself contains double quotes, ``$`` or backticks is
    expanded twice. Recipes used with this runner must quote accordingly.
    """

    mode = "raw-terminal"
    grace_seconds = 0.5
    surface_kind = RawTerminalSurface.kind

    def make_surface(self, slot_key: str) -> OutputSurface:
        return RawTerminalSurface(slot_key)

    def build_command(self, spec: CommandSpec) -> list[str]:
        return [self.shell, "-c", f'{self.shell} -c "{spec.command_line}"']
