"""Endpoint routing.

The only branching logic of consequence in the tool: which service gets a
prompt, and which URL/model/key that service resolves to.
"""

from __future__ import annotations

from typing import Literal

from core.config import AppSettings
from core.domain.errors import MissingApiKeyError
from core.domain.models import Endpoint
from core.domain.service import Service

# Reachability (`test`) checks every service, so it never goes through `select_service`.
Mode = Literal["chat", "code"]

CODE_MARKER = "code"


def select_service(prompt: str, mode: Mode = "chat") -> Service:
    """Picks the service for a prompt.

    `code` mode always goes to Codestral. Otherwise a prompt mentioning
    "code" anywhere (any case) goes to Codestral and the rest to Mistral.
    Note that "decode" or "zip code" match too.
    """

    if mode == "code":
        return Service.CODESTRAL
    if CODE_MARKER in prompt.lower():
        return Service.CODESTRAL
    return Service.MISTRAL


def resolve_endpoint(settings: AppSettings, service: Service) -> Endpoint:
    """Builds the `Endpoint` for a service, failing early on a missing key."""

    if service is Service.CODESTRAL:
        base_url, model, api_key = settings.codestral_base_url, settings.codestral_model, settings.codestral_api_key
    else:
        base_url, model, api_key = settings.mistral_base_url, settings.mistral_model, settings.mistral_api_key

    api_key = (api_key or "").strip()
    if not api_key:
        raise MissingApiKeyError(service)

    return Endpoint(
        service=service,
        url=base_url.rstrip("/") + "/chat/completions",
        model=model,
        api_key=api_key,
    )
