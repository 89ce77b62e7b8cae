"""Chat and reachability orchestration.

The CLI delegates the request flow to these helpers, which keeps
side-effects (printing, tables) out of the core logic: output goes through
the `write` callback handed in by the caller.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Callable

from adapters.sse_stream import write_deltas
from core.config import AppSettings
from core.domain.errors import MissingApiKeyError
from core.domain.models import ChatRequest, ReachabilityResult
from core.domain.service import Service
from core.interfaces.dispatcher import ChatDispatcher
from core.services.routing import Mode, resolve_endpoint, select_service

logger = logging.getLogger(__name__)


@dataclass
class ChatResult:
    """Output of a chat invocation."""

    service: Service
    model: str
    characters: int


async def run_chat(
    prompt: str,
    *,
    settings: AppSettings,
    dispatcher: ChatDispatcher,
    write: Callable[[str], None],
    mode: Mode = "chat",
) -> ChatResult:
    """Routes the prompt, opens the stream and writes deltas as they arrive."""

    service = select_service(prompt, mode)
    endpoint = resolve_endpoint(settings, service)
    logger.debug("Routing %s prompt to %s (%s)", mode, service.label(), endpoint.model)

    request = ChatRequest.from_prompt(model=endpoint.model, prompt=prompt)
    async with dispatcher.open_stream(endpoint, request) as deltas:
        written = await write_deltas(deltas, write)

    logger.debug("Stream finished: %s characters", written)
    return ChatResult(service=service, model=endpoint.model, characters=written)


async def check_reachability(
    *,
    settings: AppSettings,
    dispatcher: ChatDispatcher,
) -> list[ReachabilityResult]:
    """Checks every service concurrently; one failure never hides another."""

    async def _check(service: Service) -> ReachabilityResult:
        try:
            endpoint = resolve_endpoint(settings, service)
        except MissingApiKeyError:
            return ReachabilityResult(service=service, ok=False, detail="missing API key")
        return await dispatcher.ping(endpoint)

    return list(await asyncio.gather(*(_check(service) for service in Service)))
