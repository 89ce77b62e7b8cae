"""Error taxonomy.

Every error the CLI reports derives from `MistralCliError`. Only
`MalformedFragmentError` is recovered locally (inside the stream consumer);
the rest abort the current command.
"""

from __future__ import annotations

from core.domain.service import Service


class MistralCliError(Exception):
    """Base class for errors surfaced to the user."""


class ConfigurationError(MistralCliError):
    """Missing or unreadable configuration, raised before any network call."""


class MissingApiKeyError(ConfigurationError):
    def __init__(self, service: Service) -> None:
        self.service = service
        super().__init__(
            f"no API key configured for {service.label()} "
            f"(set {service.env_var()} or run `config generate`)"
        )


class DispatchError(MistralCliError):
    """A request to one of the endpoints failed."""

    def __init__(self, service: Service, message: str) -> None:
        self.service = service
        super().__init__(f"{service.label()} API: {message}")


class EndpointUnreachableError(DispatchError):
    """DNS/TCP/TLS failure or timeout. Never retried."""


class EndpointStatusError(DispatchError):
    def __init__(self, service: Service, status_code: int, body: str = "") -> None:
        self.status_code = status_code
        self.body = body
        message = f"request failed with HTTP {status_code}"
        hint = service.status_hint(status_code)
        if hint:
            message = f"{message} ({hint})"
        super().__init__(service, message)


class EmptyResponseError(DispatchError):
    def __init__(self, service: Service) -> None:
        super().__init__(service, "empty response received")


class MalformedFragmentError(MistralCliError):
    """A stream fragment that is valid bytes but not valid JSON."""

    def __init__(self, data: str) -> None:
        self.data = data
        super().__init__(f"malformed stream fragment: {data[:120]!r}")
