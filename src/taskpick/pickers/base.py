from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from taskpick.commands import CommandSpec
from taskpick.config import COMPLETION_METHODS, ConfigurationError

Candidate = tuple[str, CommandSpec]
CandidateGroups = Sequence[tuple[str, Sequence[Candidate]]]


@dataclass(frozen=True, slots=True)
class Selection:
    spec: CommandSpec
    edit: bool = False


class Picker(ABC):
    name: str = "picker"

    def available(self) -> bool:
        return True

    @abstractmethod
    def select(self, groups: CandidateGroups) -> Selection | None:
        """Return the chosen candidate, or None when the user cancels."""


def display_label(provider_label: str, spec: CommandSpec) -> str:
    return f"{provider_label}/{spec.display}"


def candidate_groups(
    groups: Iterable[tuple[str, Sequence[CommandSpec]]],
) -> list[tuple[str, list[Candidate]]]:
    return [
        (label, [(display_label(label, spec), spec) for spec in specs])
        for label, specs in groups
        if specs
    ]


def flatten(groups: CandidateGroups) -> list[Candidate]:
    return [candidate for _, candidates in groups for candidate in candidates]


def choose_picker(
    method: str,
    pickers: Mapping[str, Picker],
    *,
    priority: Sequence[str] = ("fzf", "filter"),
    fallback: str = "prompt",
) -> Picker:
    """Map a completion method to a picker, walking ``priority`` for ``auto``."""
    if method not in COMPLETION_METHODS:
        raise ConfigurationError(f"unknown completion method: {method}")
    if method != "auto":
        picker = pickers.get(method)
        if picker is None:
            raise ConfigurationError(f"unknown completion method: {method}")
        return picker
    for name in priority:
        picker = pickers.get(name)
        if picker is not None and picker.available():
            return picker
    return pickers[fallback]
