from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from typing import Any

RecipeFunction = Callable[[], Iterable[Any]]


@dataclass(frozen=True, slots=True)
class InvocableRecipe:
    """A provider computed on demand, typically from the current directory."""

    label: str
    fn: RecipeFunction


@dataclass(frozen=True, slots=True)
class NamedRecipe:
    """A fixed list of drafts declared in the config file."""

    label: str
    drafts: Sequence[Any] = field(default_factory=tuple)


RecipeProvider = InvocableRecipe | NamedRecipe
