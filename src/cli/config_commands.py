"""`config` sub-commands: generate, view and load the configuration file."""

from __future__ import annotations

import shutil
from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from cli.context import fail, get_settings, get_state
from cli.ui_components import build_config_table
from core.config import generate_sample_config, get_user_config_file, load_settings
from core.domain.errors import ConfigurationError

app = typer.Typer(no_args_is_help=True, help="Generate, view and load the configuration file.")

_console = Console()


@app.command()
def generate(
    ctx: typer.Context,
    path: Path | None = typer.Option(
        None,
        "--path",
        "-p",
        help="Where to write the file (defaults to the per-user config file).",
    ),
    force: bool = typer.Option(False, "--force", "-f", help="Overwrite an existing file."),
) -> None:
    """Generate a sample configuration file."""

    target = path or get_user_config_file()
    debug = get_state(ctx).debug
    try:
        generate_sample_config(target, force=force)
    except ConfigurationError as exc:
        fail(exc, debug=debug)
    except OSError as exc:
        fail(ConfigurationError(f"could not write {target}: {exc}"), debug=debug)

    _console.print(f"[green]Sample config file generated at[/green] {escape(str(target))}")


@app.command()
def view(ctx: typer.Context) -> None:
    """Show the active configuration (API keys masked)."""

    settings = get_settings(ctx)
    _console.print(build_config_table(settings, source=get_state(ctx).config_path))


@app.command()
def load(
    ctx: typer.Context,
    file_path: Path = typer.Option(..., "--file", "-f", help="Configuration file to load."),
    install: bool = typer.Option(
        False,
        "--install",
        help="Copy the file to the per-user config location so it becomes the default.",
    ),
) -> None:
    """Load a configuration file from a given path."""

    state = get_state(ctx)
    try:
        settings = load_settings(file_path)
    except ConfigurationError as exc:
        fail(exc, debug=state.debug)

    _console.print(f"[green]Configuration loaded from[/green] {escape(str(file_path))}")
    _console.print(build_config_table(settings, source=file_path))

    if install:
        target = get_user_config_file()
        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            shutil.copyfile(file_path, target)
        except OSError as exc:
            fail(ConfigurationError(f"could not install config to {target}: {exc}"), debug=state.debug)
        _console.print(f"[green]Installed as default config:[/green] {escape(str(target))}")
