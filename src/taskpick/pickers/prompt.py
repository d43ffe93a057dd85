from __future__ import annotations

import re
import sys
from collections.abc import Callable
from typing import Any

import click

from taskpick.pickers.base import Candidate, CandidateGroups, Picker, Selection, flatten

NUMBER_PATTERN = re.compile(r"^(\d+)(e?)$", re.IGNORECASE)
FILTER_EDIT_SUFFIX = "!"
FILTER_PAGE_SIZE = 20


class PromptPicker(Picker):
    """Numbered list read from plain text input. Always available."""

    name = "prompt"

    def __init__(
        self,
        prompt: Callable[..., Any] | None = None,
        echo: Callable[..., None] | None = None,
    ) -> None:
        self.prompt = prompt or click.prompt
        self.echo = echo or click.echo

    def _render(self, groups: CandidateGroups) -> None:
        number = 1
        for label, candidates in groups:
            self.echo(f"{label}:")
            for display, spec in candidates:
                self.echo(f"  {number:>3}. {display}  ({spec.command_line})")
                number += 1

    def select(self, groups: CandidateGroups) -> Selection | None:
        candidates = flatten(groups)
        if not candidates:
            return None
        self._render(groups)
        while True:
            try:
                answer = str(
                    self.prompt(
                        "Command number (suffix 'e' to edit, empty to cancel)",
                        default="",
                        show_default=False,
                    )
                ).strip()
            except click.Abort:
                return None
            if not answer:
                return None
            match = NUMBER_PATTERN.match(answer)
            if match and 1 <= int(match.group(1)) <= len(candidates):
                _, spec = candidates[int(match.group(1)) - 1]
                return Selection(spec=spec, edit=bool(match.group(2)))
            self.echo(f"Invalid choice: {answer}")


class FilterPicker(Picker):
    """Narrow the candidate list by substring until a single entry remains."""

    name = "filter"

    def __init__(
        self,
        prompt: Callable[..., Any] | None = None,
        echo: Callable[..., None] | None = None,
        is_tty: Callable[[], bool] | None = None,
    ) -> None:
        self.prompt = prompt or click.prompt
        self.echo = echo or click.echo
        self.is_tty = is_tty or sys.stdin.isatty

    def available(self) -> bool:
        return self.is_tty()

    @staticmethod
    def _matches(candidates: list[Candidate], query: str) -> list[Candidate]:
        terms = query.lower().split()
        return [
            (label, spec)
            for label, spec in candidates
            if all(term in f"{label} {spec.command_line}".lower() for term in terms)
        ]

    def _render(self, candidates: list[Candidate]) -> None:
        for number, (label, spec) in enumerate(candidates[:FILTER_PAGE_SIZE], start=1):
            self.echo(f"  {number:>3}. {label}  ({spec.command_line})")
        hidden = len(candidates) - FILTER_PAGE_SIZE
        if hidden > 0:
            self.echo(f"  ... {hidden} more")

    def select(self, groups: CandidateGroups) -> Selection | None:
        current = flatten(groups)
        if not current:
            return None
        while True:
            self._render(current)
            try:
                answer = str(
                    self.prompt(
                        f"Filter or number (suffix '{FILTER_EDIT_SUFFIX}' to edit, "
                        "empty to cancel)",
                        default="",
                        show_default=False,
                    )
                ).strip()
            except click.Abort:
                return None
            if not answer:
                return None
            edit = answer.endswith(FILTER_EDIT_SUFFIX)
            query = answer.removesuffix(FILTER_EDIT_SUFFIX).strip()
            if query.isdigit() and 1 <= int(query) <= min(len(current), FILTER_PAGE_SIZE):
                return Selection(spec=current[int(query) - 1][1], edit=edit)
            matches = self._matches(current, query)
            if len(matches) == 1:
                return Selection(spec=matches[0][1], edit=edit)
            if not matches:
                self.echo(f"No matches for: {query}")
                continue
            current = matches
