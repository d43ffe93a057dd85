from __future__ import annotations

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, Literal

from taskpick.config import ConfigurationError

ExperimentStatus = Literal["active", "deprecated", "retired", "unknown"]
GateEventHook = Callable[[dict[str, Any]], None]
ConfirmPrompt = Callable[[str], bool]

STATIC_RECIPES = "static-recipes"
RAW_TERMINAL_RUNNER = "raw-terminal-runner"

EXPERIMENT_REGISTRY: Mapping[str, ExperimentStatus] = {
    STATIC_RECIPES: "deprecated",
    RAW_TERMINAL_RUNNER: "active",
    "example-active": "active",
    "example-deprecated": "deprecated",
    "example-retired": "retired",
}


@dataclass(slots=True)
class ExperimentSession:
    """Per-process state shared by every gate check.

    Build one when the process starts; suppression lasts until it exits.
    """

    deprecation_warnings_suppressed: bool = False


class ExperimentGate:
    def __init__(
        self,
        enabled: Iterable[str],
        session: ExperimentSession,
        *,
        registry: Mapping[str, ExperimentStatus] = EXPERIMENT_REGISTRY,
        confirm: ConfirmPrompt | None = None,
        event_hook: GateEventHook | None = None,
    ) -> None:
        self.enabled = list(dict.fromkeys(enabled))
        self.session = session
        self.registry = registry
        self.confirm = confirm
        self.event_hook = event_hook

    def _emit(self, event: dict[str, Any]) -> None:
        if self.event_hook is not None:
            self.event_hook(event)

    def status(self, name: str) -> ExperimentStatus:
        return self.registry.get(name, "unknown")

    def validate(self) -> None:
        """Reject retired or unknown experiments before any recipe is resolved."""
        for name in self.enabled:
            status = self.status(name)
            if status == "retired":
                raise ConfigurationError(f"experiment {name} is retired")
            if status == "unknown":
                raise ConfigurationError(f"unknown experiment: {name}")

        deprecated = [name for name in self.enabled if self.status(name) == "deprecated"]
        if deprecated:
            self._warn_deprecated(deprecated)

    def _warn_deprecated(self, names: list[str]) -> None:
        if self.session.deprecation_warnings_suppressed:
            return
        self._emit({"event": "experiment_deprecated", "experiments": list(names)})
        if self.confirm is None:
            return
        message = (
            f"Deprecated experiments enabled: {', '.join(names)}. "
            "Suppress this warning for the rest of the session?"
        )
        if self.confirm(message):
            self.session.deprecation_warnings_suppressed = True
            self._emit({"event": "experiment_warning_suppressed"})

    def is_enabled(self, name: str) -> bool:
        return name in self.enabled and self.status(name) in {"active", "deprecated"}
