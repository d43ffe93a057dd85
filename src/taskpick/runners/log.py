from __future__ import annotations

from pathlib import Path
from typing import Any

from taskpick.commands import CommandSpec
from taskpick.runners.base import Runner
from taskpick.runners.slots import ProcessSlot, SlotRegistry
from taskpick.runners.surfaces import LogSurface, OutputSurface


class CapturedLogRunner(Runner):
    """Run in the background with output captured to a per-slot log file.

    A new run on a busy slot restarts it in place without asking.
    """

    mode = "captured-log"
    surface_kind = LogSurface.kind

    def __init__(self, registry: SlotRegistry, *, log_dir: Path, **kwargs: Any) -> None:
        super().__init__(registry, **kwargs)
        self.log_dir = log_dir

    def make_surface(self, slot_key: str) -> OutputSurface:
        return LogSurface(slot_key, self.log_dir)

    def run(self, spec: CommandSpec) -> ProcessSlot:
        slot = self.registry.get_or_create(spec.slot_key)
        if slot.alive:
            self._emit({"event": "slot_restart", "slot": slot.key, "mode": self.mode})
            self._stop(slot)
        surface = self._surface_for(slot)
        surface.reset()
        slot.process = self._spawn(spec, surface)
        slot.last_spec = spec
        slot.last_mode = self.mode
        surface.show(spec)
        return slot
