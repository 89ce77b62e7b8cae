"""Shared CLI state and error reporting.

Lives apart from `cli.main` so that sub-apps (config) can use it without a
circular import.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import httpx
import typer
from rich.console import Console
from rich.markup import escape

from core.config import AppSettings, load_settings
from core.domain.errors import EndpointStatusError, MistralCliError
from core.log_setup import configure_logging

err_console = Console(stderr=True)


@dataclass
class CliState:
    """Global options, stored on the typer context object."""

    debug: bool = False
    config_path: Path | None = None
    settings: AppSettings | None = None


def get_state(ctx: typer.Context) -> CliState:
    state = ctx.find_root().obj
    if not isinstance(state, CliState):
        state = CliState()
        ctx.find_root().obj = state
    return state


def get_settings(ctx: typer.Context) -> AppSettings:
    """Loads the settings once per invocation.

    A `debug = true` setting turns on debug logging like `--debug` does.
    """

    state = get_state(ctx)
    if state.settings is None:
        try:
            state.settings = load_settings(state.config_path)
        except MistralCliError as exc:
            fail(exc, debug=state.debug)
        if state.settings.debug and not state.debug:
            state.debug = True
            configure_logging(True)
    return state.settings


def build_transport() -> httpx.AsyncBaseTransport | None:
    """Transport for outgoing requests (None means the network).

    Tests replace this with an `httpx.MockTransport`.
    """

    return None


def fail(exc: MistralCliError, *, debug: bool = False) -> NoReturn:
    """Prints the error on stderr and ends the command with exit code 1."""

    err_console.print(f"[bold red]Error:[/bold red] {escape(str(exc))}", soft_wrap=True)
    if debug and isinstance(exc, EndpointStatusError) and exc.body:
        err_console.print(escape(exc.body), style="dim", soft_wrap=True)
    raise typer.Exit(code=1)
