"""The two completion services the CLI talks to.

Kept in the domain layer so routing, adapters and the CLI share one source
of truth without importing each other.
"""

from __future__ import annotations

from enum import Enum


class Service(str, Enum):
    """Remote completion services."""

    MISTRAL = "mistral"
    CODESTRAL = "codestral"

    def label(self) -> str:
        """Human readable label for output and logging."""

        return "Codestral" if self is Service.CODESTRAL else "Mistral"

    def env_var(self) -> str:
        return f"{self.name}_API_KEY"

    def status_hint(self, status_code: int) -> str | None:
        if status_code in (401, 403):
            return f"check your {self.label()} API key"
        if status_code == 429:
            return "rate limited by the server"
        return None
