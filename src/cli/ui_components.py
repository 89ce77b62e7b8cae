"""CLI UI components (Rich).

Why separate components:
- Keeps command logic apart from visual details.
- Lets tables/panels be reused across commands.
"""

from __future__ import annotations

from pathlib import Path
from typing import Iterable

from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from core.config import AppSettings, mask_key
from core.domain.models import CodeAnalysis, ReachabilityResult


def build_reachability_table(results: Iterable[ReachabilityResult]) -> Table:
    table = Table(title="API connection test")
    table.add_column("Service", style="cyan", no_wrap=True)
    table.add_column("Status", no_wrap=True)
    table.add_column("Details", style="dim")
    for result in results:
        status = Text("OK", style="green") if result.ok else Text("FAIL", style="red")
        table.add_row(result.service.label(), status, result.detail)
    return table


def build_config_table(settings: AppSettings, *, source: Path | None = None) -> Table:
    """Current configuration with API keys masked."""

    title = "Current configuration" if source is None else f"Configuration ({source})"
    table = Table(title=title, show_header=False)
    table.add_column("Key", style="bright_green", no_wrap=True)
    table.add_column("Value", style="white")
    table.add_row("Mistral API key", mask_key(settings.mistral_api_key))
    table.add_row("Codestral API key", mask_key(settings.codestral_api_key))
    table.add_row("Mistral base URL", settings.mistral_base_url)
    table.add_row("Codestral base URL", settings.codestral_base_url)
    table.add_row("Mistral model", settings.mistral_model)
    table.add_row("Codestral model", settings.codestral_model)
    table.add_row("Debug mode", str(settings.debug).lower())
    return table


def build_analysis_panel(analysis: CodeAnalysis) -> Panel:
    """Panel for a Codestral code analysis."""

    body = Text(analysis.content.strip())
    if analysis.model:
        body.append(f"\n\nModel: {analysis.model}", style="dim")
    return Panel(body, title=Text("Code analysis", style="bold yellow"), border_style="yellow")
