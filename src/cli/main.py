"""Command surface.

Commands:
- `chat <prompt>`: stream an answer (routed to Mistral or Codestral).
- `code <snippet>`: full Codestral analysis of a snippet.
- `test`: reachability check of both services.
- `config generate|view|load`: configuration file management.
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

import typer
from rich.console import Console

from adapters.code_analyst import analyze_code
from adapters.mistral_dispatcher import MistralDispatcher
from cli import config_commands
from cli.context import CliState, build_transport, err_console, fail, get_settings, get_state
from cli.ui_components import build_analysis_panel, build_reachability_table
from core.config import AppSettings
from core.domain.errors import MistralCliError
from core.log_setup import configure_logging
from core.services.chat_pipeline import check_reachability, run_chat

app = typer.Typer(
    no_args_is_help=True,
    help="Chat with the Mistral and Codestral APIs from the terminal.",
)
app.add_typer(config_commands.app, name="config")

_console = Console()


def build_dispatcher(settings: AppSettings) -> MistralDispatcher:
    return MistralDispatcher(settings, transport=build_transport())


class _FragmentWriter:
    """Echoes fragments as they arrive and remembers whether any were written."""

    def __init__(self) -> None:
        self.characters = 0

    def __call__(self, text: str) -> None:
        typer.echo(text, nl=False)
        self.characters += len(text)

    def end_line(self) -> None:
        if self.characters:
            typer.echo()


def _interrupted() -> typer.Exit:
    err_console.print("[yellow]Interrupted.[/yellow]")
    return typer.Exit(code=130)


@app.callback()
def main(
    ctx: typer.Context,
    debug: bool = typer.Option(False, "--debug", help="Enable debug logs (requests, raw error bodies)."),
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Configuration file to use (default: the per-user config file, with ./.env values taking priority).",
    ),
) -> None:
    """Chat with the Mistral and Codestral APIs from the terminal."""

    configure_logging(debug)
    ctx.obj = CliState(debug=debug, config_path=config)


@app.command()
def chat(
    ctx: typer.Context,
    prompt: str = typer.Argument(..., help="Prompt to send."),
) -> None:
    """Send a chat prompt and stream the answer."""

    settings = get_settings(ctx)
    state = get_state(ctx)
    writer = _FragmentWriter()
    try:
        asyncio.run(
            run_chat(
                prompt,
                settings=settings,
                dispatcher=build_dispatcher(settings),
                write=writer,
            )
        )
    except MistralCliError as exc:
        writer.end_line()
        fail(exc, debug=state.debug)
    except KeyboardInterrupt:
        writer.end_line()
        raise _interrupted()
    writer.end_line()


@app.command()
def code(
    ctx: typer.Context,
    snippet: str = typer.Argument(..., metavar="CODE", help="Code snippet to analyze."),
) -> None:
    """Analyze a code snippet with Codestral."""

    settings = get_settings(ctx)
    state = get_state(ctx)
    try:
        with _console.status("Waiting for Codestral...", spinner="dots"):
            analysis = asyncio.run(analyze_code(snippet, settings=settings, transport=build_transport()))
    except MistralCliError as exc:
        fail(exc, debug=state.debug)
    except KeyboardInterrupt:
        raise _interrupted()

    _console.print(build_analysis_panel(analysis))


@app.command(name="test")
def test_connection(ctx: typer.Context) -> None:
    """Test the connection to both APIs."""

    settings = get_settings(ctx)
    try:
        results = asyncio.run(check_reachability(settings=settings, dispatcher=build_dispatcher(settings)))
    except KeyboardInterrupt:
        raise _interrupted()

    _console.print(build_reachability_table(results))
    if not all(result.ok for result in results):
        raise typer.Exit(code=1)
    _console.print("[green]All services reachable.[/green]")


def run() -> None:
    # Windows terminals default to cp1252; model output is UTF-8.
    if sys.platform == "win32":
        sys.stdout.reconfigure(encoding="utf-8")
        sys.stderr.reconfigure(encoding="utf-8")
    app()
