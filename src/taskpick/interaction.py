from __future__ import annotations

import click


class Interaction:
    """Blocking prompts shown to the user while picking and running commands."""

    def confirm(self, message: str) -> bool:
        try:
            return click.confirm(message, default=False)
        except click.Abort:
            return False

    def edit_command(self, prefilled: str) -> str | None:
        """Open ``prefilled`` in the user's editor; None when it was not saved."""
        edited = click.edit(prefilled, require_save=True, extension=".sh")
        if edited is None:
            return None
        return edited.strip()

    def warn(self, message: str) -> None:
        click.secho(message, fg="yellow", err=True)

    def info(self, message: str) -> None:
        click.echo(message)
