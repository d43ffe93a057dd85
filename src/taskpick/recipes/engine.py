from __future__ import annotations

import importlib
from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from taskpick.commands import CommandSpec, CommandSpecDraft, ValidationError, normalize
from taskpick.config import ConfigurationError, TaskpickConfig
from taskpick.experiments import STATIC_RECIPES, ExperimentGate
from taskpick.recipes.base import InvocableRecipe, NamedRecipe, RecipeFunction, RecipeProvider
from taskpick.recipes.builtin import BUILTIN_RECIPES

RecipeEventHook = Callable[[dict[str, Any]], None]


@dataclass(slots=True)
class Resolution:
    groups: list[tuple[str, list[CommandSpec]]] = field(default_factory=list)
    errors: list[tuple[str, ValidationError]] = field(default_factory=list)

    @property
    def specs(self) -> list[CommandSpec]:
        return [spec for _, specs in self.groups for spec in specs]


class RecipeEngine:
    def __init__(self, gate: ExperimentGate, event_hook: RecipeEventHook | None = None) -> None:
        self.gate = gate
        self.event_hook = event_hook

    def _emit(self, event: dict[str, Any]) -> None:
        if self.event_hook is not None:
            self.event_hook(event)

    def _records(self, provider: RecipeProvider) -> Iterable[Any]:
        if isinstance(provider, InvocableRecipe):
            return provider.fn() or []
        if isinstance(provider, NamedRecipe):
            if not self.gate.is_enabled(STATIC_RECIPES):
                raise ConfigurationError(f"invalid recipe: {provider.label}")
            return provider.drafts
        raise ConfigurationError(f"invalid recipe: {provider!r}")

    def resolve(self, provider: RecipeProvider) -> list[CommandSpec]:
        specs: list[CommandSpec] = []
        for record in self._records(provider):
            draft = CommandSpecDraft.from_record(record)
            if not draft.has_command_line:
                self._emit(
                    {
                        "event": "recipe_draft_dropped",
                        "recipe": provider.label,
                        "draft": repr(draft.source()),
                    }
                )
                continue
            specs.append(normalize(draft))
        self._emit({"event": "recipe_resolved", "recipe": provider.label, "count": len(specs)})
        return specs

    def resolve_all(self, providers: Iterable[RecipeProvider]) -> Resolution:
        """Resolve every provider; a malformed draft only costs its own provider."""
        resolution = Resolution()
        for provider in providers:
            try:
                specs = self.resolve(provider)
            except ValidationError as exc:
                self._emit(
                    {
                        "event": "recipe_invalid",
                        "recipe": provider.label,
                        "error": str(exc),
                    }
                )
                resolution.errors.append((provider.label, exc))
                continue
            resolution.groups.append((provider.label, specs))
        return resolution


def _import_recipe(identifier: str) -> RecipeFunction:
    module_name, _, attribute = identifier.partition(":")
    try:
        module = importlib.import_module(module_name)
        target = getattr(module, attribute)
    except (ImportError, AttributeError) as exc:
        raise ConfigurationError(f"invalid recipe: {identifier}") from exc
    if not callable(target):
        raise ConfigurationError(f"invalid recipe: {identifier}")
    return target


def build_providers(
    config: TaskpickConfig,
    builtins: Mapping[str, RecipeFunction] = BUILTIN_RECIPES,
) -> list[RecipeProvider]:
    providers: list[RecipeProvider] = []
    for identifier in config.recipes.enabled:
        if identifier in config.static_recipes:
            providers.append(NamedRecipe(identifier, tuple(config.static_recipes[identifier])))
        elif identifier in builtins:
            providers.append(InvocableRecipe(identifier, builtins[identifier]))
        elif ":" in identifier:
            providers.append(InvocableRecipe(identifier, _import_recipe(identifier)))
        else:
            raise ConfigurationError(f"invalid recipe: {identifier}")
    return providers
