"""CLI entry point for aws-profile-selector.

Uses Typer for command routing with lazy loading: the selector and its
terminal machinery are only imported when a command needs them.
"""

from pathlib import Path
from typing import Optional

import typer

__all__ = ["app", "cli_main", "main"]

app = typer.Typer(
    name="aws-profile-selector",
    help="Pick an AWS profile with fuzzy search",
    no_args_is_help=False,
)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    pure: bool = typer.Option(
        False, "--pure", help="Print ONLY the selected profile name"
    ),
    out: Optional[Path] = typer.Option(
        None, "--out", help="Write the selected profile name to this file"
    ),
    page_size: Optional[int] = typer.Option(
        None, "--page-size", min=4, help="Table lines shown below the filter"
    ),
) -> None:
    """Launch the interactive selector if no command given."""
    if ctx.invoked_subcommand is None:
        from awsp.cli.commands import cmd_select

        cmd_select(pure=pure, out=out, page_size=page_size)


@app.command("list")
def list_profiles() -> None:
    """Print the profile table without prompting."""
    from awsp.cli.commands import cmd_list

    cmd_list()


@app.command()
def init(
    shell: Optional[str] = typer.Option(
        None, "--shell", "-s", help="bash, zsh or fish (default: detect from $SHELL)"
    ),
    apply: bool = typer.Option(
        False,
        "--apply",
        "-a",
        help="Append the helper to your rc file instead of printing it",
    ),
) -> None:
    """Install the awsp shell helper."""
    from awsp.cli.commands import cmd_init

    cmd_init(shell=shell, apply=apply)


# Debug subcommand group
debug_app = typer.Typer(help="Debug mode commands")
app.add_typer(debug_app, name="debug")


@debug_app.command("on")
def debug_on() -> None:
    """Enable debug logging."""
    from awsp.cli.commands import cmd_debug

    cmd_debug(True)


@debug_app.command("off")
def debug_off() -> None:
    """Disable debug logging."""
    from awsp.cli.commands import cmd_debug

    cmd_debug(False)


def cli_main() -> None:
    """Entry point for pyproject.toml scripts."""
    app()


if __name__ == "__main__":
    cli_main()
