import json
import os
from pathlib import Path

import pytest

from taskpick.commands import ValidationError
from taskpick.config import ConfigurationError, TaskpickConfig
from taskpick.experiments import STATIC_RECIPES, ExperimentGate, ExperimentSession
from taskpick.recipes import (
    BUILTIN_RECIPES,
    InvocableRecipe,
    NamedRecipe,
    RecipeEngine,
    build_providers,
)
from taskpick.recipes.builtin import makefile_targets


def _engine(*experiments: str, events: list | None = None) -> RecipeEngine:
    gate = ExperimentGate(list(experiments), ExperimentSession())
    return RecipeEngine(gate, event_hook=events.append if events is not None else None)


def test_draft_without_command_line_is_dropped() -> None:
    events: list[dict] = []
    engine = _engine(events=events)

    provider = InvocableRecipe("t", lambda: [{"command-name": "t", "command-line": None}])

    specs = engine.resolve(provider)

    assert specs == []
    assert events[0]["event"] == "recipe_draft_dropped"


def test_invocable_recipe_keeps_provider_order(tmp_path: Path) -> None:
    engine = _engine()
    drafts = [
        {"command-name": "build", "command-line": "make", "working-dir": str(tmp_path)},
        {"command-name": "skip"},
        {"command-name": "test", "command-line": "make test", "working-dir": str(tmp_path)},
    ]

    specs = engine.resolve(InvocableRecipe("make", lambda: drafts))

    assert [spec.name for spec in specs] == ["build", "test"]


def test_invalid_draft_only_aborts_its_provider() -> None:
    engine = _engine()
    broken = InvocableRecipe("broken", lambda: [{"command-name": "x", "command-line": ""}])
    fine = InvocableRecipe("fine", lambda: [{"command-name": "ls", "command-line": "ls"}])

    resolution = engine.resolve_all([broken, fine])

    assert [label for label, _ in resolution.groups] == ["fine"]
    assert [spec.name for spec in resolution.specs] == ["ls"]
    label, error = resolution.errors[0]
    assert label == "broken"
    assert isinstance(error, ValidationError)
    assert error.draft == {"command-name": "x", "command-line": ""}


def test_named_recipe_requires_static_recipes_experiment() -> None:
    provider = NamedRecipe("deploy", ({"command_name": "deploy", "command_line": "./deploy.sh"},))

    with pytest.raises(ConfigurationError, match="invalid recipe"):
        _engine().resolve(provider)

    specs = _engine(STATIC_RECIPES).resolve(provider)
    assert [spec.command_line for spec in specs] == ["./deploy.sh"]


def test_build_providers_maps_identifiers() -> None:
    config = TaskpickConfig.default()
    config.recipes.enabled = ["makefile", "deploy", "os:getcwd"]
    config.static_recipes = {"deploy": [{"command_name": "deploy", "command_line": "./deploy.sh"}]}

    providers = build_providers(config)

    assert isinstance(providers[0], InvocableRecipe)
    assert providers[0].fn is BUILTIN_RECIPES["makefile"]
    assert isinstance(providers[1], NamedRecipe)
    assert isinstance(providers[2], InvocableRecipe)
    assert providers[2].fn is os.getcwd


@pytest.mark.parametrize("identifier", ["nonsense", "os.path:sep", "no_such_module_xyz:fn"])
def test_build_providers_rejects_unknown_identifiers(identifier: str) -> None:
    config = TaskpickConfig.default()
    config.recipes.enabled = [identifier]

    with pytest.raises(ConfigurationError, match="invalid recipe"):
        build_providers(config)


def test_makefile_targets_skip_special_and_pattern_rules() -> None:
    text = "\n".join(
        [
            ".PHONY: build test",
            "CC := gcc",
            "FLAGS = -O2",
            "build: deps",
            "\tgcc main.c",
            "test:",
            "%.o: %.c",
            "dist/app.tar.gz: build",
            "build: again",
        ]
    )

    assert makefile_targets(text) == ["build", "test", "dist/app.tar.gz"]


def test_makefile_recipe_reads_current_directory(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "Makefile").write_text("build:\n\tcc x.c\nclean:\n\trm -f x\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    drafts = BUILTIN_RECIPES["makefile"]()

    assert [draft["command-line"] for draft in drafts] == ["make build", "make clean"]
    assert all(draft["working-dir"] == str(tmp_path) for draft in drafts)


def test_package_json_recipe_prefers_lockfile_manager(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    (tmp_path / "package.json").write_text(
        json.dumps({"scripts": {"dev": "vite", "lint": "eslint ."}}), encoding="utf-8"
    )
    (tmp_path / "yarn.lock").write_text("", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    drafts = BUILTIN_RECIPES["package-json"]()

    assert [draft["command-line"] for draft in drafts] == ["yarn run dev", "yarn run lint"]
    assert drafts[0]["display"] == "dev: vite"


def test_builtin_recipes_are_empty_without_context(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.chdir(tmp_path)

    assert BUILTIN_RECIPES["makefile"]() == []
    assert BUILTIN_RECIPES["package-json"]() == []
    assert BUILTIN_RECIPES["executables"]() == []


def test_executables_recipe_lists_executable_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    script = tmp_path / "deploy.sh"
    script.write_text("#!/bin/sh\necho hi\n", encoding="utf-8")
    script.chmod(0o755)
    (tmp_path / "notes.txt").write_text("x", encoding="utf-8")
    monkeypatch.chdir(tmp_path)

    drafts = BUILTIN_RECIPES["executables"]()

    assert [draft["command-line"] for draft in drafts] == ["./deploy.sh"]
