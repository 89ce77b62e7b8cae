"""Domain models (Pydantic v2).

Why Pydantic in the domain:
- Strict validation and self-documenting fields (Field) without coupling the
  core to I/O libraries.
- `model_dump` gives the exact JSON body the completion APIs expect.

These models describe *what* is exchanged, not *how* it is sent.
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field

from core.domain.service import Service


class ChatMessage(BaseModel):
    """One message of a conversation."""

    role: Literal["system", "user", "assistant"] = Field(
        default="user",
        description="Author of the message.",
    )
    content: str = Field(
        ...,
        description="Message text.",
    )


class ChatRequest(BaseModel):
    """Body of a chat completion request."""

    model: str = Field(
        ...,
        min_length=1,
        description="Model identifier (e.g. 'mistral-large-latest').",
    )
    messages: list[ChatMessage] = Field(
        default_factory=list,
        description="Conversation sent to the model.",
    )
    stream: bool = Field(
        default=True,
        description="Ask the server for an event stream instead of one JSON body.",
    )
    max_tokens: int | None = Field(
        default=None,
        ge=1,
        description="Upper bound on generated tokens (omitted when unset).",
    )

    @classmethod
    def from_prompt(cls, *, model: str, prompt: str, stream: bool = True, max_tokens: int | None = None) -> "ChatRequest":
        """Wraps a prompt as a single user message."""

        return cls(
            model=model,
            messages=[ChatMessage(role="user", content=prompt)],
            stream=stream,
            max_tokens=max_tokens,
        )

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_none=True)


class Endpoint(BaseModel):
    """A resolved target: where to send, which model, which key."""

    service: Service
    url: str = Field(..., min_length=8)
    model: str = Field(..., min_length=1)
    api_key: str = Field(..., min_length=1, repr=False)


class ReachabilityResult(BaseModel):
    """Outcome of a reachability check against one service."""

    service: Service
    ok: bool = False
    status_code: int | None = None
    detail: str = ""


class CodeAnalysis(BaseModel):
    """Non-streamed answer to a code snippet."""

    content: str = Field(..., min_length=1)
    model: str | None = Field(
        default=None,
        description="Model identifier reported by the server.",
    )
