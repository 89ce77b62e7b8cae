"""Code analysis adapter (Codestral via the OpenAI SDK).

Responsibility:
- Send a code snippet to the Codestral chat endpoint as one user message.
- Wait for the complete (non-streamed) answer and normalize it as `CodeAnalysis`.
- Map SDK errors onto the CLI error taxonomy.
"""

from __future__ import annotations

import logging

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI

from adapters.http_client import build_async_client
from core.config import AppSettings
from core.domain.errors import EmptyResponseError, EndpointStatusError, EndpointUnreachableError
from core.domain.models import CodeAnalysis
from core.domain.service import Service
from core.services.routing import resolve_endpoint

logger = logging.getLogger(__name__)


def build_codestral_client(
    *,
    api_key: str,
    settings: AppSettings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AsyncOpenAI:
    return AsyncOpenAI(
        api_key=api_key,
        base_url=settings.codestral_base_url,
        timeout=settings.http_timeout_seconds,
        max_retries=0,
        http_client=build_async_client(settings, transport=transport),
    )


async def analyze_code(
    code: str,
    *,
    settings: AppSettings | None = None,
    transport: httpx.AsyncBaseTransport | None = None,
) -> CodeAnalysis:
    """Asks Codestral about a snippet and returns its full answer."""

    settings = settings or AppSettings()
    endpoint = resolve_endpoint(settings, Service.CODESTRAL)
    logger.debug("Sending code to %s (%s chars)", endpoint.url, len(code))

    async with build_codestral_client(api_key=endpoint.api_key, settings=settings, transport=transport) as client:
        try:
            response = await client.chat.completions.create(
                model=endpoint.model,
                messages=[{"role": "user", "content": code}],
            )
        except APIStatusError as exc:
            body = exc.response.text if exc.response is not None else ""
            logger.debug("Codestral response body: %s", body)
            raise EndpointStatusError(Service.CODESTRAL, exc.status_code, body) from exc
        except APIConnectionError as exc:
            # Also covers APITimeoutError.
            raise EndpointUnreachableError(Service.CODESTRAL, f"connection failed: {exc}") from exc

    if not response.choices:
        raise EmptyResponseError(Service.CODESTRAL)
    content = (response.choices[0].message.content or "").strip()
    if not content:
        raise EmptyResponseError(Service.CODESTRAL)

    return CodeAnalysis(content=content, model=response.model or endpoint.model)
