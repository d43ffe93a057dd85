from __future__ import annotations

import json
import os
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Literal

CompletionMethod = Literal["auto", "fzf", "filter", "prompt"]
RunMode = Literal["captured-log", "interactive-terminal", "raw-terminal"]

COMPLETION_METHODS: tuple[str, ...] = ("auto", "fzf", "filter", "prompt")
CONFIGURABLE_RUN_MODES: tuple[str, ...] = ("captured-log", "interactive-terminal")


class ConfigurationError(RuntimeError):
    """Raised when the configuration cannot drive a run."""


@dataclass(slots=True)
class PickerConfig:
    completion_method: str = "auto"
    priority: list[str] = field(default_factory=lambda: ["fzf", "filter"])


@dataclass(slots=True)
class RunnerConfig:
    run_mode: str = "captured-log"
    shell: str = ""
    log_dir: str = ".taskpick/logs"
    interactive_grace_seconds: float = 1.0
    raw_grace_seconds: float = 0.5

    def resolved_shell(self) -> str:
        return self.shell or os.environ.get("SHELL") or "/bin/sh"


@dataclass(slots=True)
class RecipesConfig:
    enabled: list[str] = field(default_factory=lambda: ["makefile", "package-json"])


@dataclass(slots=True)
class ExperimentsConfig:
    enabled: list[str] = field(default_factory=list)


@dataclass(slots=True)
class TaskpickConfig:
    picker: PickerConfig = field(default_factory=PickerConfig)
    runner: RunnerConfig = field(default_factory=RunnerConfig)
    recipes: RecipesConfig = field(default_factory=RecipesConfig)
    experiments: ExperimentsConfig = field(default_factory=ExperimentsConfig)
    static_recipes: dict[str, list[dict[str, Any]]] = field(default_factory=dict)

    @classmethod
    def default(cls) -> TaskpickConfig:
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> TaskpickConfig:
        static = data.get("static_recipes", {})
        return cls(
            picker=PickerConfig(**data.get("picker", {})),
            runner=RunnerConfig(**data.get("runner", {})),
            recipes=RecipesConfig(**data.get("recipes", {})),
            experiments=ExperimentsConfig(**data.get("experiments", {})),
            static_recipes={
                str(name): [dict(entry) for entry in entries]
                for name, entries in static.items()
            },
        )

    def to_dict(self) -> dict:
        return {
            "picker": {
                "completion_method": self.picker.completion_method,
                "priority": list(self.picker.priority),
            },
            "runner": {
                "run_mode": self.runner.run_mode,
                "shell": self.runner.shell,
                "log_dir": self.runner.log_dir,
                "interactive_grace_seconds": self.runner.interactive_grace_seconds,
                "raw_grace_seconds": self.runner.raw_grace_seconds,
            },
            "recipes": {
                "enabled": list(self.recipes.enabled),
            },
            "experiments": {
                "enabled": list(self.experiments.enabled),
            },
            "static_recipes": {
                name: [dict(entry) for entry in entries]
                for name, entries in self.static_recipes.items()
            },
        }

    def validate_completion_method(self) -> str:
        method = self.picker.completion_method
        if method not in COMPLETION_METHODS:
            raise ConfigurationError(f"unknown completion method: {method}")
        return method

    def validate_run_mode(self, run_mode: str | None = None) -> str:
        mode = run_mode or self.runner.run_mode
        if mode not in CONFIGURABLE_RUN_MODES:
            raise ConfigurationError(f"unknown run mode: {mode}")
        return mode


def _toml_value(value: object) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, int):
        return str(value)
    if isinstance(value, float):
        rendered = f"{value:.3f}".rstrip("0").rstrip(".")
        return rendered if rendered else "0"
    if isinstance(value, list):
        return "[" + ", ".join(_toml_value(item) for item in value) + "]"
    return json.dumps(str(value), ensure_ascii=False)


def _toml_key(key: str) -> str:
    if key and all(ch.isalnum() or ch in "-_" for ch in key):
        return key
    return json.dumps(key, ensure_ascii=False)


def dumps_toml(config: TaskpickConfig) -> str:
    data = config.to_dict()
    lines: list[str] = []
    section_order = ["picker", "runner", "recipes", "experiments"]
    for section in section_order:
        lines.append(f"[{section}]")
        for key, value in data[section].items():
            lines.append(f"{key} = {_toml_value(value)}")
        lines.append("")
    for name, entries in data["static_recipes"].items():
        for entry in entries:
            lines.append(f"[[static_recipes.{_toml_key(name)}]]")
            for key, value in entry.items():
                if value is None:
                    continue
                lines.append(f"{_toml_key(key)} = {_toml_value(value)}")
            lines.append("")
    return "\n".join(lines).strip() + "\n"


def load_config(path: Path) -> TaskpickConfig:
    if not path.exists():
        return TaskpickConfig.default()
    return TaskpickConfig.from_dict(tomllib.loads(path.read_text(encoding="utf-8")))


def save_config(path: Path, config: TaskpickConfig) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_toml(config), encoding="utf-8")
