from __future__ import annotations

import shutil
import subprocess
from collections.abc import Callable
from typing import Any

from taskpick.pickers.base import CandidateGroups, Picker, Selection, flatten

EDIT_KEY = "ctrl-e"


class FzfPicker(Picker):
    name = "fzf"

    def __init__(
        self,
        binary: str = "fzf",
        runner: Callable[..., subprocess.CompletedProcess[str]] | None = None,
    ) -> None:
        self.binary = binary
        self.runner = runner or subprocess.run

    def available(self) -> bool:
        return shutil.which(self.binary) is not None

    def build_command(self) -> list[str]:
        return [
            self.binary,
            "--delimiter=\t",
            "--with-nth=2..",
            f"--expect={EDIT_KEY}",
            "--prompt=run> ",
            "--header=enter: run, ctrl-e: edit then run",
        ]

    def select(self, groups: CandidateGroups) -> Selection | None:
        candidates = flatten(groups)
        if not candidates:
            return None
        lines = [
            f"{index}\t{label}\t{spec.command_line}"
            for index, (label, spec) in enumerate(candidates)
        ]
        try:
            proc: Any = self.runner(
                self.build_command(),
                input="\n".join(lines) + "\n",
                stdout=subprocess.PIPE,
                text=True,
            )
        except FileNotFoundError:
            return None
        # 1: no match, 130: interrupted with esc/ctrl-c
        if proc.returncode != 0:
            return None
        output = proc.stdout.splitlines()
        if len(output) < 2:
            return None
        key, chosen = output[0].strip(), output[1]
        index_text, _, _ = chosen.partition("\t")
        try:
            _, spec = candidates[int(index_text)]
        except (ValueError, IndexError):
            return None
        return Selection(spec=spec, edit=key == EDIT_KEY)
