from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Literal

from taskpick.commands import CommandSpec

if TYPE_CHECKING:
    from taskpick.runners.surfaces import OutputSurface

SlotState = Literal["empty", "running", "idle-with-output"]


@dataclass(slots=True)
class ProcessSlot:
    key: str
    surface: OutputSurface | None = None
    process: Any | None = None
    last_spec: CommandSpec | None = None
    last_mode: str | None = None

    @property
    def alive(self) -> bool:
        return self.process is not None and self.process.poll() is None

    @property
    def state(self) -> SlotState:
        if self.process is None:
            return "empty"
        if self.alive:
            return "running"
        return "idle-with-output"


class SlotRegistry:
    """Slots by key. Created on first use and kept for the life of the process."""

    def __init__(self) -> None:
        self._slots: dict[str, ProcessSlot] = {}
        self.last_key: str | None = None

    def get(self, key: str) -> ProcessSlot | None:
        return self._slots.get(key)

    def get_or_create(self, key: str) -> ProcessSlot:
        slot = self._slots.get(key)
        if slot is None:
            slot = ProcessSlot(key=key)
            self._slots[key] = slot
        return slot

    def live(self) -> list[ProcessSlot]:
        return [slot for slot in self._slots.values() if slot.alive]

    def __contains__(self, key: object) -> bool:
        return key in self._slots

    def __iter__(self) -> Iterator[ProcessSlot]:
        return iter(list(self._slots.values()))

    def __len__(self) -> int:
        return len(self._slots)
