from __future__ import annotations

import json
import os

import httpx
import pytest

from core.config import AppSettings


@pytest.fixture(autouse=True)
def isolated_env(monkeypatch, tmp_path):
    """Keep real keys and config files out of the tests."""

    for name in list(os.environ):
        upper = name.upper()
        if upper in ("MISTRAL_API_KEY", "CODESTRAL_API_KEY") or upper.startswith("MISTRAL_CLI_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("XDG_CONFIG_HOME", str(tmp_path / "xdg"))
    monkeypatch.chdir(tmp_path)


def make_settings(**overrides) -> AppSettings:
    values = {
        "MISTRAL_API_KEY": "mistral-secret",
        "CODESTRAL_API_KEY": "codestral-secret",
        "mistral_base_url": "https://mistral.test/v1",
        "codestral_base_url": "https://codestral.test/v1",
    }
    values.update(overrides)
    return AppSettings(_env_file=None, **values)


@pytest.fixture
def settings() -> AppSettings:
    return make_settings()


def sse_body(*deltas: str, done: bool = True, extra_lines: list[str] | None = None) -> bytes:
    """Event-stream body carrying the given deltas."""

    lines = [": keep-alive", ""]
    lines.append("data: " + json.dumps({"choices": [{"index": 0, "delta": {"role": "assistant"}}]}))
    lines.append("")
    for delta in deltas:
        lines.append("data: " + json.dumps({"choices": [{"index": 0, "delta": {"content": delta}}]}))
        lines.append("")
    for line in extra_lines or []:
        lines.append(line)
        lines.append("")
    if done:
        lines.append("data: [DONE]")
        lines.append("")
    return "\n".join(lines).encode("utf-8")


def completion_body(content: str, model: str = "codestral-latest") -> dict:
    return {
        "id": "cmpl-1",
        "object": "chat.completion",
        "created": 1700000000,
        "model": model,
        "choices": [
            {
                "index": 0,
                "message": {"role": "assistant", "content": content},
                "finish_reason": "stop",
            }
        ],
        "usage": {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5},
    }


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, handler):
        self.requests: list[httpx.Request] = []

        def _record(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return handler(request)

        super().__init__(_record)
