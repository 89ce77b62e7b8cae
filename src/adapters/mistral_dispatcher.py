"""HTTP dispatcher for the Mistral and Codestral chat endpoints.

Responsibility:
- Send a single POST (JSON body, bearer token) to the resolved endpoint.
- Hand the caller an open event stream, or fail fast with a typed error.
- Ping an endpoint with a minimal request for the reachability check.

No retries: a transport failure is reported once and the command ends.
"""

from __future__ import annotations

import json
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

import httpx

from adapters.http_client import build_async_client
from adapters.sse_stream import iter_deltas
from core.config import AppSettings
from core.domain.errors import EndpointStatusError, EndpointUnreachableError
from core.domain.models import ChatRequest, Endpoint, ReachabilityResult

logger = logging.getLogger(__name__)

PING_PROMPT = "Test"


def _describe_transport_error(exc: httpx.TransportError) -> str:
    text = str(exc).strip()
    return f"connection failed: {text}" if text else f"connection failed: {exc.__class__.__name__}"


class MistralDispatcher:
    """Sends chat requests and opens their response streams."""

    def __init__(
        self,
        settings: AppSettings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._settings = settings or AppSettings()
        self._transport = transport

    def _client(self, endpoint: Endpoint, *, streaming: bool) -> httpx.AsyncClient:
        extra = {"Accept": "text/event-stream"} if streaming else None
        return build_async_client(
            self._settings,
            api_key=endpoint.api_key,
            extra_headers=extra,
            transport=self._transport,
        )

    @asynccontextmanager
    async def open_stream(self, endpoint: Endpoint, request: ChatRequest) -> AsyncIterator[AsyncIterator[str]]:
        """Opens a streamed completion and yields its text deltas.

        Raises `EndpointUnreachableError` on transport failures (including a
        connection dropped mid-stream) and `EndpointStatusError` on any
        non-2xx status.
        """

        payload = request.to_payload()
        logger.debug("Sending streaming request to %s (%s)", endpoint.service.label(), endpoint.url)
        logger.debug("Request body: %s", json.dumps(payload, ensure_ascii=False))

        async with self._client(endpoint, streaming=True) as client:
            try:
                async with client.stream("POST", endpoint.url, json=payload) as response:
                    logger.debug("Response status: %s", response.status_code)
                    if not response.is_success:
                        body = (await response.aread()).decode("utf-8", errors="replace")
                        logger.debug("%s response body: %s", endpoint.service.label(), body)
                        raise EndpointStatusError(endpoint.service, response.status_code, body)
                    yield iter_deltas(response.aiter_lines())
            except httpx.TransportError as exc:
                raise EndpointUnreachableError(endpoint.service, _describe_transport_error(exc)) from exc

    async def ping(self, endpoint: Endpoint) -> ReachabilityResult:
        """Sends a one-token, non-streamed request and reports the outcome."""

        request = ChatRequest.from_prompt(model=endpoint.model, prompt=PING_PROMPT, stream=False, max_tokens=1)
        payload = request.to_payload()
        logger.debug("%s request body: %s", endpoint.service.label(), json.dumps(payload))

        try:
            async with self._client(endpoint, streaming=False) as client:
                response = await client.post(endpoint.url, json=payload)
        except httpx.TransportError as exc:
            logger.debug("%s unreachable: %r", endpoint.service.label(), exc)
            return ReachabilityResult(
                service=endpoint.service,
                ok=False,
                detail=_describe_transport_error(exc),
            )

        logger.debug("%s status: %s", endpoint.service.label(), response.status_code)
        if response.is_success:
            return ReachabilityResult(
                service=endpoint.service,
                ok=True,
                status_code=response.status_code,
                detail=f"HTTP {response.status_code}",
            )

        logger.debug("%s response body: %s", endpoint.service.label(), response.text)
        detail = f"HTTP {response.status_code}"
        hint = endpoint.service.status_hint(response.status_code)
        if hint:
            detail = f"{detail} ({hint})"
        return ReachabilityResult(
            service=endpoint.service,
            ok=False,
            status_code=response.status_code,
            detail=detail,
        )
