import os
from pathlib import Path

import pytest

from taskpick.commands import CommandSpec, CommandSpecDraft, ValidationError, abbreviate, normalize


def test_normalize_fills_defaults_from_working_directory(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(os, "getcwd", lambda: "/proj")

    spec = normalize({"command-name": "build", "command-line": "make"})

    assert spec.display == "build"
    assert spec.working_dir == "/proj"
    assert spec.scope_name == abbreviate("/proj")
    assert spec.slot_key == f"build[{abbreviate('/proj')}]"


def test_normalize_is_idempotent(tmp_path: Path) -> None:
    draft = CommandSpecDraft(name="test", command_line="pytest -q", working_dir=str(tmp_path))

    once = normalize(draft)

    assert normalize(once) == once


def test_explicit_scope_and_display_are_kept(tmp_path: Path) -> None:
    spec = normalize(
        {
            "command_name": "serve",
            "command_line": "npm start",
            "display": "Start dev server",
            "working_dir": tmp_path,
            "scope_name": "frontend",
        }
    )

    assert spec.display == "Start dev server"
    assert spec.working_dir == str(tmp_path)
    assert spec.scope_name == "frontend"
    assert spec.slot_key == "serve[frontend]"


@pytest.mark.parametrize(
    "record",
    [
        {"command-name": "", "command-line": "make"},
        {"command-name": "build", "command-line": ""},
        {"command-line": "make"},
    ],
)
def test_empty_name_or_command_line_is_rejected(record: dict) -> None:
    with pytest.raises(ValidationError) as excinfo:
        normalize(record)

    assert excinfo.value.draft == record
    assert repr(record) in str(excinfo.value)


def test_whitespace_name_and_command_line_are_non_empty(tmp_path: Path) -> None:
    spec = normalize({"command-name": " ", "command-line": "  ", "working-dir": str(tmp_path)})

    assert spec.name == " "
    assert spec.command_line == "  "
    assert spec.display == " "


def test_non_mapping_record_is_rejected() -> None:
    with pytest.raises(ValidationError):
        normalize(["build", "make"])


def test_abbreviate_collapses_home(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    home = tmp_path / "home" / "user"
    monkeypatch.setenv("HOME", str(home))

    assert abbreviate(home) == "~"
    assert abbreviate(home / "proj") == os.path.join("~", "proj")
    assert abbreviate("/srv/proj") == "/srv/proj"
    assert abbreviate(f"{home}extra") == f"{home}extra"


def test_with_command_line_keeps_slot_identity() -> None:
    spec = CommandSpec("build", "make", "build", "/proj", "/proj")

    edited = spec.with_command_line("make -j8")

    assert edited.command_line == "make -j8"
    assert edited.slot_key == spec.slot_key
    assert spec.command_line == "make"
