from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import click

from taskpick.commands import ValidationError
from taskpick.config import (
    CONFIGURABLE_RUN_MODES,
    ConfigurationError,
    TaskpickConfig,
    load_config,
    save_config,
)
from taskpick.experiments import EXPERIMENT_REGISTRY
from taskpick.pickers import candidate_groups
from taskpick.runners import ProcessSlot, RunnerError
from taskpick.session import Session, build_session

USER_ERRORS = (ConfigurationError, ValidationError, RunnerError)
SESSION_ACTIONS = {"p": "pick", "e": "pick and edit", "r": "repeat", "q": "quit"}


def _resolve_config_path(repo_root: Path, config_value: str) -> Path:
    config_path = Path(config_value)
    if not config_path.is_absolute():
        config_path = repo_root / config_path
    return config_path.resolve()


def _echo_event(event: dict[str, Any]) -> None:
    click.echo(json.dumps(event, ensure_ascii=False, default=str), err=True)


def _load_session(config_value: str, verbose: bool) -> Session:
    repo_root = Path.cwd().resolve()
    config_path = _resolve_config_path(repo_root, config_value)
    config = load_config(config_path)
    return build_session(
        config,
        base_dir=config_path.parent,
        event_hook=_echo_event if verbose else None,
    )


def _wait_for(session: Session, slot: ProcessSlot) -> int:
    try:
        code = session.executor.wait(slot)
    except KeyboardInterrupt:
        session.executor.shutdown()
        raise click.Abort() from None
    return int(code or 0)


config_option = click.option(
    "--config", "config_value", default="taskpick.toml", show_default=True
)
verbose_option = click.option(
    "--verbose", is_flag=True, default=False, help="Print internal events to stderr."
)
mode_option = click.option(
    "--mode", "run_mode", type=click.Choice(list(CONFIGURABLE_RUN_MODES)), default=None
)


@click.group()
def cli() -> None:
    """Pick a command for the current directory and run it."""


@cli.command("init")
@click.option("--recipe", "recipes", multiple=True, help="Recipe provider to enable.")
@config_option
def init_command(recipes: tuple[str, ...], config_value: str) -> None:
    repo_root = Path.cwd().resolve()
    config_path = _resolve_config_path(repo_root, config_value)
    config = load_config(config_path) if config_path.exists() else TaskpickConfig.default()
    if recipes:
        config.recipes.enabled = list(recipes)
    save_config(config_path, config)
    click.echo(f"Config: {config_path}")
    click.echo(f"Recipes: {', '.join(config.recipes.enabled) or '(none)'}")


@cli.command("run")
@mode_option
@click.option("--edit", is_flag=True, default=False, help="Edit the command line before running.")
@click.option("--detach", is_flag=True, default=False, help="Do not wait for the command.")
@config_option
@verbose_option
def run_command(
    run_mode: str | None, edit: bool, detach: bool, config_value: str, verbose: bool
) -> None:
    session = _load_session(config_value, verbose)
    try:
        slot = session.pick_and_run(run_mode, edit=edit)
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc)) from exc
    if slot is None or slot.process is None or detach:
        return
    code = _wait_for(session, slot)
    if code != 0:
        click.echo(f"[{slot.key}] exited with status {code}", err=True)
        raise SystemExit(code)


@cli.command("session")
@mode_option
@config_option
@verbose_option
def session_command(run_mode: str | None, config_value: str, verbose: bool) -> None:
    session = _load_session(config_value, verbose)
    choices = click.Choice(list(SESSION_ACTIONS))
    hint = ", ".join(f"{key}={label}" for key, label in SESSION_ACTIONS.items())
    try:
        while True:
            try:
                action = click.prompt(f"Action ({hint})", type=choices, default="p")
            except click.Abort:
                break
            if action == "q":
                break
            try:
                if action == "r":
                    session.repeat()
                else:
                    session.pick_and_run(run_mode, edit=action == "e")
            except (ConfigurationError, ValidationError) as exc:
                raise click.ClickException(str(exc)) from exc
            except RunnerError as exc:
                click.secho(str(exc), fg="red", err=True)
    finally:
        session.executor.shutdown()


@cli.command("list")
@config_option
@verbose_option
def list_command(config_value: str, verbose: bool) -> None:
    session = _load_session(config_value, verbose)
    try:
        resolution = session.resolve()
    except USER_ERRORS as exc:
        raise click.ClickException(str(exc)) from exc
    groups = candidate_groups(resolution.groups)
    if not groups:
        click.echo("No commands available here.")
        return
    for _, candidates in groups:
        for label, spec in candidates:
            click.echo(f"{label}\t{spec.command_line}")


@cli.command("experiments")
@config_option
def experiments_command(config_value: str) -> None:
    repo_root = Path.cwd().resolve()
    config = load_config(_resolve_config_path(repo_root, config_value))
    enabled = set(config.experiments.enabled)
    for name, status in EXPERIMENT_REGISTRY.items():
        marker = "*" if name in enabled else " "
        click.echo(f"{marker} {name:<24} {status}")
    for name in sorted(enabled - set(EXPERIMENT_REGISTRY)):
        click.echo(f"* {name:<24} unknown")
