"""CLI command handlers."""

import asyncio
import os
import sys
from pathlib import Path
from typing import NoReturn, Optional

from rich.markup import escape

from awsp.cli.ui import console, err_console
from awsp.utils.config import Config, get_awsp_dir
from awsp.utils.exceptions import AwspError, NoProfilesError


def _exit_with_error(error: object, category: str = "cli") -> NoReturn:
    """Report an error after the terminal is back to normal and exit 1."""
    from awsp.utils.debug import debug

    debug(category, "command failed", error=error)
    err_console.print(f"[red]{escape(str(error))}[/red]")
    raise SystemExit(1)


def _load(config: Config):
    """Load profiles, layout and searcher for the configured AWS config."""
    from awsp.core import FuzzySearcher, create_layout, load_profiles
    from awsp.utils.debug import debug_config

    path = config.get_aws_config_path()
    profiles = load_profiles(path, config.get_sso_cache_dir())
    debug_config("profiles loaded", path=path, count=len(profiles))
    if not profiles:
        raise NoProfilesError()
    return (
        profiles,
        create_layout(profiles),
        FuzzySearcher(profiles, threshold=config.fuzzy_threshold),
    )


def format_result(profile_name: str, pure: bool) -> str:
    """Shell-facing output for a selected profile."""
    return profile_name if pure else f"export AWS_PROFILE={profile_name}"


def cmd_select(
    pure: bool = False,
    out: Optional[Path] = None,
    page_size: Optional[int] = None,
) -> None:
    """Run the interactive selector and print or write the result."""
    from awsp.cli.ui import ProfileSelector
    from awsp.utils.debug import log_error

    config = Config(get_awsp_dir())

    try:
        _, layout, searcher = _load(config)
        selector = ProfileSelector(
            searcher,
            layout,
            page_size=page_size or config.page_size,
            current_profile=os.environ.get("AWS_PROFILE"),
        )
        picked = asyncio.run(selector.run())
    except AwspError as e:
        _exit_with_error(e)
    except OSError as e:
        log_error("cli", "terminal I/O failed", e)
        raise SystemExit(1)

    if picked is None:
        err_console.print("Cancelled.")
        return

    if out is not None:
        out.write_text(picked, encoding="utf-8")
    else:
        print(format_result(picked, pure))
        sys.stdout.flush()


def cmd_list() -> None:
    """Print the profile table."""
    config = Config(get_awsp_dir())
    try:
        profiles, layout, _ = _load(config)
    except AwspError as e:
        _exit_with_error(e)

    current = os.environ.get("AWS_PROFILE")
    lines = [layout.border_top, layout.header, layout.border_mid]
    lines.extend(
        layout.format_unselected_row(profile, profile.name == current)
        for profile in profiles
    )
    lines.append(layout.border_bottom)
    # rows are pre-rendered ANSI strings
    sys.stdout.write("\n".join(lines) + "\n")
    sys.stdout.flush()


def cmd_init(shell: Optional[str] = None, apply: bool = False) -> None:
    """Print or install the shell helper."""
    from awsp.cli.install import apply_snippet, detect_shell, get_snippet

    try:
        target_shell = detect_shell(shell)
    except ValueError as e:
        _exit_with_error(e, "install")

    snippet = get_snippet(target_shell)
    if not apply:
        console.print(
            f"[cyan]# --- Add the following to your {target_shell} rc ---[/cyan]\n"
        )
        console.print(snippet, markup=False)
        return

    try:
        written, path = apply_snippet(target_shell)
    except OSError as e:
        _exit_with_error(f"Failed to write rc: {e}", "install")

    if not written:
        console.print(f"[yellow]awsp helper already present in {path}[/yellow]")
        return

    console.print(f"[green]✓ Added awsp helper to {path}[/green]")
    console.print(
        f"[dim]Restart your shell or run 'source {path}' to apply changes.[/dim]"
    )


def cmd_debug(enabled: bool) -> None:
    """Enable or disable debug logging."""
    from awsp.utils.debug import reload_config

    config = Config(get_awsp_dir())
    config.set_debug(enabled)
    reload_config()
    state = "[green]on[/green]" if enabled else "[yellow]off[/yellow]"
    console.print(f"Debug logging: {state}")
    if enabled:
        console.print(f"[dim]Log: {config.awsp_dir / 'debug.log'}[/dim]")
