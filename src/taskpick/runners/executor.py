from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from taskpick.commands import CommandSpec
from taskpick.config import ConfigurationError
from taskpick.experiments import RAW_TERMINAL_RUNNER, ExperimentGate
from taskpick.runners.base import Runner, RunnerEventHook, stop_process
from taskpick.runners.slots import ProcessSlot, SlotRegistry

EditPrompt = Callable[[str], str | None]


class Executor:
    """Dispatches a chosen command to a runner and remembers it for repeats."""

    def __init__(
        self,
        registry: SlotRegistry,
        runners: Mapping[str, Runner],
        gate: ExperimentGate,
        *,
        edit_prompt: EditPrompt | None = None,
        event_hook: RunnerEventHook | None = None,
    ) -> None:
        self.registry = registry
        self.runners = dict(runners)
        self.gate = gate
        self.edit_prompt = edit_prompt
        self.event_hook = event_hook

    def _emit(self, event: dict[str, Any]) -> None:
        if self.event_hook is not None:
            self.event_hook(event)

    def _edited(self, spec: CommandSpec) -> CommandSpec:
        if self.edit_prompt is None:
            return spec
        answer = self.edit_prompt(spec.command_line + " ")
        if answer is None or not answer.strip() or answer.strip() == spec.command_line.strip():
            return spec
        self._emit({"event": "command_edited", "slot": spec.slot_key})
        return spec.with_command_line(answer.strip())

    def select_mode(self, run_mode: str) -> str:
        if self.gate.is_enabled(RAW_TERMINAL_RUNNER):
            return "raw-terminal"
        return run_mode

    def run(self, spec: CommandSpec, run_mode: str, *, edit: bool = False) -> ProcessSlot | None:
        if edit:
            spec = self._edited(spec)
        mode = self.select_mode(run_mode)
        runner = self.runners.get(mode)
        if runner is None:
            raise ConfigurationError(f"unknown run mode: {mode}")
        self._emit({"event": "run_requested", "slot": spec.slot_key, "mode": mode})
        slot = runner.run(spec)
        if slot is not None:
            self.registry.last_key = slot.key
        return slot

    def repeat(self, slot_key: str | None = None) -> ProcessSlot | None:
        key = slot_key or self.registry.last_key
        slot = self.registry.get(key) if key else None
        if slot is None or slot.last_spec is None or slot.last_mode is None:
            return None
        return self.run(slot.last_spec, slot.last_mode)

    @staticmethod
    def wait(slot: ProcessSlot) -> int | None:
        if slot.process is None:
            return None
        return slot.process.wait()

    def shutdown(self, grace_seconds: float = 0.5) -> None:
        for slot in self.registry.live():
            self._emit({"event": "slot_shutdown", "slot": slot.key})
            for error in stop_process(slot.process, grace_seconds):
                self._emit({"event": "slot_kill_error", "slot": slot.key, "error": error})
