from taskpick.pickers.base import (
    Candidate,
    CandidateGroups,
    Picker,
    Selection,
    candidate_groups,
    choose_picker,
    display_label,
)
from taskpick.pickers.fzf import FzfPicker
from taskpick.pickers.prompt import FilterPicker, PromptPicker


def default_pickers() -> dict[str, Picker]:
    pickers: list[Picker] = [FzfPicker(), FilterPicker(), PromptPicker()]
    return {picker.name: picker for picker in pickers}


__all__ = [
    "Candidate",
    "CandidateGroups",
    "FilterPicker",
    "FzfPicker",
    "Picker",
    "PromptPicker",
    "Selection",
    "candidate_groups",
    "choose_picker",
    "default_pickers",
    "display_label",
]
