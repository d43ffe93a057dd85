from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from taskpick.config import ConfigurationError, TaskpickConfig
from taskpick.experiments import ExperimentGate, ExperimentSession
from taskpick.interaction import Interaction
from taskpick.pickers import Picker, candidate_groups, choose_picker, default_pickers
from taskpick.recipes import RecipeEngine, Resolution, build_providers
from taskpick.runners import (
    CapturedLogRunner,
    Executor,
    ProcessSlot,
    RawTerminalRunner,
    Runner,
    SlotRegistry,
    TerminalRunner,
)

SessionEventHook = Callable[[dict[str, Any]], None]


@dataclass(slots=True)
class Session:
    config: TaskpickConfig
    gate: ExperimentGate
    engine: RecipeEngine
    pickers: Mapping[str, Picker]
    executor: Executor
    interaction: Interaction
    event_hook: SessionEventHook | None = None

    def _emit(self, event: dict[str, Any]) -> None:
        if self.event_hook is not None:
            self.event_hook(event)

    def _preflight(self) -> None:
        self.gate.validate()
        if not self.config.recipes.enabled:
            raise ConfigurationError("no recipes configured")

    def _resolve(self) -> Resolution:
        providers = build_providers(self.config)
        resolution = self.engine.resolve_all(providers)
        for label, error in resolution.errors:
            self.interaction.warn(f"Skipping recipe {label}: {error}")
        return resolution

    def resolve(self) -> Resolution:
        """Validate experiments and recipes, then resolve every configured provider."""
        self._preflight()
        return self._resolve()

    def pick_and_run(
        self, run_mode: str | None = None, *, edit: bool = False
    ) -> ProcessSlot | None:
        self._preflight()
        method = self.config.validate_completion_method()
        mode = self.config.validate_run_mode(run_mode)
        picker = choose_picker(method, self.pickers, priority=self.config.picker.priority)

        groups = candidate_groups(self._resolve().groups)
        if not groups:
            self.interaction.info("No commands available here.")
            return None

        self._emit({"event": "picker_open", "picker": picker.name})
        selection = picker.select(groups)
        if selection is None:
            self._emit({"event": "picker_cancelled", "picker": picker.name})
            return None
        return self.executor.run(selection.spec, mode, edit=edit or selection.edit)

    def repeat(self, slot_key: str | None = None) -> ProcessSlot | None:
        key = slot_key or self.executor.registry.last_key
        slot = self.executor.registry.get(key) if key else None
        if slot is None or slot.last_spec is None:
            self.interaction.info("Nothing to repeat yet.")
            return None
        return self.executor.repeat(key)


def build_runners(
    config: TaskpickConfig,
    registry: SlotRegistry,
    interaction: Interaction,
    base_dir: Path,
    event_hook: SessionEventHook | None = None,
) -> dict[str, Runner]:
    shell = config.runner.resolved_shell()
    log_dir = Path(config.runner.log_dir)
    if not log_dir.is_absolute():
        log_dir = base_dir / log_dir
    return {
        "captured-log": CapturedLogRunner(
            registry,
            log_dir=log_dir,
            shell=shell,
            grace_seconds=config.runner.interactive_grace_seconds,
            event_hook=event_hook,
        ),
        "interactive-terminal": TerminalRunner(
            registry,
            confirm=interaction.confirm,
            shell=shell,
            grace_seconds=config.runner.interactive_grace_seconds,
            event_hook=event_hook,
        ),
        "raw-terminal": RawTerminalRunner(
            registry,
            confirm=interaction.confirm,
            shell=shell,
            grace_seconds=config.runner.raw_grace_seconds,
            event_hook=event_hook,
        ),
    }


def build_session(
    config: TaskpickConfig,
    *,
    base_dir: Path,
    interaction: Interaction | None = None,
    experiment_session: ExperimentSession | None = None,
    pickers: Mapping[str, Picker] | None = None,
    runners: Mapping[str, Runner] | None = None,
    registry: SlotRegistry | None = None,
    event_hook: SessionEventHook | None = None,
) -> Session:
    interaction = interaction or Interaction()
    if registry is None:
        registry = SlotRegistry()
    gate = ExperimentGate(
        config.experiments.enabled,
        experiment_session or ExperimentSession(),
        confirm=interaction.confirm,
        event_hook=event_hook,
    )
    executor = Executor(
        registry,
        runners or build_runners(config, registry, interaction, base_dir, event_hook),
        gate,
        edit_prompt=interaction.edit_command,
        event_hook=event_hook,
    )
    return Session(
        config=config,
        gate=gate,
        engine=RecipeEngine(gate, event_hook=event_hook),
        pickers=pickers or default_pickers(),
        executor=executor,
        interaction=interaction,
        event_hook=event_hook,
    )
