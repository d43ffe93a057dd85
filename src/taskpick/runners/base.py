from __future__ import annotations

import os
import signal
import subprocess
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import IO, Any

from taskpick.commands import CommandSpec
from taskpick.runners.slots import ProcessSlot, SlotRegistry
from taskpick.runners.surfaces import OutputSurface

Spawner = Callable[..., Any]
RunnerEventHook = Callable[[dict[str, Any]], None]


class RunnerError(RuntimeError):
    """Raised when a command process cannot be started."""

    def __init__(self, message: str, *, slot: str | None = None) -> None:
        super().__init__(message)
        self.slot = slot


def stop_process(
    process: Any,
    grace_seconds: float,
    sleep: Callable[[float], None] = time.sleep,
) -> list[str]:
    """Interrupt the process group, give it ``grace_seconds`` to exit, then kill it.

    Commands are spawned as session leaders, so the group id is the shell's pid
    and the signals reach everything the command line started. Failures are
    collected and returned instead of raised.
    """
    errors: list[str] = []
    try:
        os.killpg(process.pid, signal.SIGINT)
    except OSError as exc:
        errors.append(f"interrupt: {exc}")
    sleep(grace_seconds)
    # The shell may exit on SIGINT while children that ignore it keep the group alive.
    try:
        os.killpg(process.pid, signal.SIGKILL)
    except ProcessLookupError:
        pass
    except OSError as exc:
        errors.append(f"kill: {exc}")
        return errors
    try:
        process.wait()
    except (OSError, subprocess.SubprocessError) as exc:
        errors.append(f"wait: {exc}")
    return errors


class Runner(ABC):
    mode: str = "runner"
    grace_seconds: float = 1.0
    surface_kind: str = "surface"

    def __init__(
        self,
        registry: SlotRegistry,
        *,
        shell: str = "/bin/sh",
        grace_seconds: float | None = None,
        spawn: Spawner | None = None,
        sleep: Callable[[float], None] | None = None,
        event_hook: RunnerEventHook | None = None,
    ) -> None:
        self.registry = registry
        self.shell = shell
        if grace_seconds is not None:
            self.grace_seconds = grace_seconds
        self.spawn = spawn or subprocess.Popen
        self.sleep = sleep or time.sleep
        self.event_hook = event_hook

    def _emit(self, event: dict[str, Any]) -> None:
        if self.event_hook is not None:
            self.event_hook(event)

    def build_command(self, spec: CommandSpec) -> list[str]:
        # The command line is handed to the shell untouched; quoting is up to the recipe.
        return [self.shell, "-c", spec.command_line]

    @abstractmethod
    def make_surface(self, slot_key: str) -> OutputSurface:
        """Create the output surface used by this runner for ``slot_key``."""

    @abstractmethod
    def run(self, spec: CommandSpec) -> ProcessSlot | None:
        """Run ``spec`` in its slot; return None when the run was abandoned."""

    def _surface_for(self, slot: ProcessSlot) -> OutputSurface:
        if slot.surface is None or slot.surface.kind != self.surface_kind:
            if slot.surface is not None:
                slot.surface.close()
            slot.surface = self.make_surface(slot.key)
        return slot.surface

    def _stop(self, slot: ProcessSlot) -> None:
        process = slot.process
        self._emit({"event": "slot_interrupt", "slot": slot.key, "mode": self.mode})
        for error in stop_process(process, self.grace_seconds, self.sleep):
            self._emit({"event": "slot_kill_error", "slot": slot.key, "error": error})
        slot.process = None

    def _spawn(self, spec: CommandSpec, surface: OutputSurface) -> Any:
        stream: IO[Any] | None = surface.stream()
        command = self.build_command(spec)
        try:
            process = self.spawn(
                command,
                cwd=spec.working_dir,
                stdout=stream,
                stderr=subprocess.STDOUT if stream is not None else None,
                start_new_session=True,
            )
        except OSError as exc:
            raise RunnerError(
                f"Could not start {spec.name!r} in {spec.working_dir}: {exc}",
                slot=spec.slot_key,
            ) from exc
        self._emit(
            {
                "event": "slot_spawn",
                "slot": spec.slot_key,
                "mode": self.mode,
                "pid": getattr(process, "pid", None),
                "command": command,
            }
        )
        return process
