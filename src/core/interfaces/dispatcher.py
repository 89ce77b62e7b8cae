"""Dispatcher contract.

Why Protocol:
- Structural contract (duck typing) without rigid inheritance.
- The chat pipeline depends on this abstraction, so tests can hand it any
  object with the same shape.
"""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from typing import AsyncIterator, Protocol, runtime_checkable

from core.domain.models import ChatRequest, Endpoint, ReachabilityResult


@runtime_checkable
class ChatDispatcher(Protocol):
    """Minimal contract for sending prompts to a completion endpoint.

    Design rules:
    - `open_stream` yields the lazy sequence of text deltas; leaving the
      context closes the underlying response.
    - `ping` never raises for transport or status failures; it reports them.
    """

    def open_stream(
        self, endpoint: Endpoint, request: ChatRequest
    ) -> AbstractAsyncContextManager[AsyncIterator[str]]:
        ...

    async def ping(self, endpoint: Endpoint) -> ReachabilityResult:
        ...
