import httpx
import pytest
from typer.testing import CliRunner

import cli.main as cli_main
from cli.main import app
from conftest import completion_body, sse_body
from core.config import SAMPLE_VALUES, get_user_config_file, load_settings, write_env_file

runner = CliRunner()


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "test.env"
    write_env_file(
        path,
        {
            "MISTRAL_API_KEY": "mistral-secret",
            "CODESTRAL_API_KEY": "codestral-secret",
            "MISTRAL_CLI_MISTRAL_BASE_URL": "https://mistral.test/v1",
            "MISTRAL_CLI_CODESTRAL_BASE_URL": "https://codestral.test/v1",
        },
    )
    return path


@pytest.fixture
def use_transport(monkeypatch):
    def _install(handler):
        monkeypatch.setattr(cli_main, "build_transport", lambda: httpx.MockTransport(handler))

    return _install


def test_help_lists_commands():
    result = runner.invoke(app, ["--help"])

    assert result.exit_code == 0
    for name in ("chat", "code", "test", "config"):
        assert name in result.output


def test_chat_streams_concatenated_deltas(config_file, use_transport):
    use_transport(lambda request: httpx.Response(200, content=sse_body("Hello", ", ", "world")))

    result = runner.invoke(app, ["--config", str(config_file), "chat", "Say hello"])

    assert result.exit_code == 0
    assert "Hello, world" in result.output


def test_chat_skips_malformed_fragment_and_exits_zero(config_file, use_transport):
    body = sse_body("a", "b", done=False) + b"data: {oops\n\n" + sse_body("c")
    use_transport(lambda request: httpx.Response(200, content=body))

    result = runner.invoke(app, ["--config", str(config_file), "chat", "hi"])

    assert result.exit_code == 0
    assert "abc" in result.output


def test_chat_routes_code_prompts_to_codestral(config_file, use_transport):
    hosts = []

    def handler(request):
        hosts.append(request.url.host)
        return httpx.Response(200, content=sse_body("ok"))

    use_transport(handler)

    result = runner.invoke(app, ["--config", str(config_file), "chat", "Review my Code"])

    assert result.exit_code == 0
    assert hosts == ["codestral.test"]


def test_chat_unauthorized_exits_non_zero_and_names_endpoint(config_file, use_transport):
    use_transport(lambda request: httpx.Response(401, json={"message": "Unauthorized"}))

    result = runner.invoke(app, ["--config", str(config_file), "chat", "hello"])

    assert result.exit_code == 1
    assert "Mistral API" in result.output
    assert "401" in result.output


class _ResetAfterFirstDelta(httpx.AsyncByteStream):
    async def __aiter__(self):
        yield b'data: {"choices": [{"index": 0, "delta": {"content": "partial"}}]}\n\n'
        raise httpx.ReadError("connection reset")

    async def aclose(self):
        pass


def test_chat_connection_lost_mid_stream_keeps_written_text(config_file, use_transport):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, stream=_ResetAfterFirstDelta())

    use_transport(handler)

    result = runner.invoke(app, ["--config", str(config_file), "chat", "hello"])

    assert result.exit_code == 1
    assert len(calls) == 1
    error_at = result.output.index("Error: Mistral API: connection failed")
    assert result.output.index("partial") < error_at


def test_chat_interrupt_exits_130_and_keeps_written_text(config_file, monkeypatch):
    async def _interrupted_chat(prompt, *, write, **kwargs):
        write("partial")
        raise KeyboardInterrupt

    monkeypatch.setattr(cli_main, "run_chat", _interrupted_chat)

    result = runner.invoke(app, ["--config", str(config_file), "chat", "hello"])

    assert result.exit_code == 130
    assert "Interrupted." in result.output
    assert result.output.index("partial") < result.output.index("Interrupted.")


def test_chat_error_without_output_has_no_leading_blank_line(config_file, use_transport):
    use_transport(lambda request: httpx.Response(401, json={"message": "Unauthorized"}))

    result = runner.invoke(app, ["--config", str(config_file), "chat", "hello"])

    assert result.exit_code == 1
    assert result.output.startswith("Error:")


def test_chat_debug_shows_raw_error_body(config_file, use_transport):
    use_transport(lambda request: httpx.Response(401, text="invalid-key-body"))

    result = runner.invoke(app, ["--debug", "--config", str(config_file), "chat", "hello"])

    assert result.exit_code == 1
    assert "invalid-key-body" in result.output


def test_chat_without_key_fails_before_network(tmp_path, use_transport):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(200, content=sse_body("x"))

    use_transport(handler)
    path = tmp_path / "empty.env"
    write_env_file(path, {"CODESTRAL_API_KEY": "only-codestral"})

    result = runner.invoke(app, ["--config", str(path), "chat", "hello"])

    assert result.exit_code == 1
    assert "MISTRAL_API_KEY" in result.output
    assert calls == []


def test_missing_config_file_is_reported(tmp_path):
    result = runner.invoke(app, ["--config", str(tmp_path / "missing.env"), "chat", "hello"])

    assert result.exit_code == 1
    assert "config file not found" in result.output


def test_code_prints_analysis(config_file, use_transport):
    use_transport(lambda request: httpx.Response(200, json=completion_body("No bugs found.")))

    result = runner.invoke(app, ["--config", str(config_file), "code", "def f(): pass"])

    assert result.exit_code == 0
    assert "No bugs found." in result.output


def test_test_command_reports_both_services(config_file, use_transport):
    def handler(request):
        if request.url.host == "codestral.test":
            raise httpx.ConnectError("unreachable", request=request)
        return httpx.Response(200, json={"choices": []})

    use_transport(handler)

    result = runner.invoke(app, ["--config", str(config_file), "test"])

    assert result.exit_code == 1
    assert "Mistral" in result.output
    assert "Codestral" in result.output
    assert "OK" in result.output
    assert "FAIL" in result.output


def test_test_command_all_reachable(config_file, use_transport):
    use_transport(lambda request: httpx.Response(200, json={"choices": []}))

    result = runner.invoke(app, ["--config", str(config_file), "test"])

    assert result.exit_code == 0
    assert "FAIL" not in result.output


def test_config_generate_then_load_round_trip(tmp_path):
    path = tmp_path / "generated.env"

    generated = runner.invoke(app, ["config", "generate", "--path", str(path)])
    loaded = runner.invoke(app, ["config", "load", "--file", str(path)])

    assert generated.exit_code == 0
    assert loaded.exit_code == 0
    assert "Configuration loaded" in loaded.output
    settings = load_settings(path)
    assert settings.mistral_api_key == SAMPLE_VALUES["MISTRAL_API_KEY"]
    assert settings.codestral_api_key == SAMPLE_VALUES["CODESTRAL_API_KEY"]


def test_config_generate_does_not_overwrite(tmp_path):
    path = tmp_path / "generated.env"
    path.write_text("MISTRAL_API_KEY=keep-me\n", encoding="utf-8")

    result = runner.invoke(app, ["config", "generate", "--path", str(path)])

    assert result.exit_code == 1
    assert "keep-me" in path.read_text(encoding="utf-8")


def test_config_view_masks_keys(config_file):
    result = runner.invoke(app, ["--config", str(config_file), "config", "view"])

    assert result.exit_code == 0
    assert "mistr*" in result.output
    assert "mistral-secret" not in result.output


def test_config_load_install_sets_default(config_file):
    result = runner.invoke(app, ["config", "load", "--file", str(config_file), "--install"])

    assert result.exit_code == 0
    assert get_user_config_file().read_text(encoding="utf-8") == config_file.read_text(encoding="utf-8")
    assert load_settings().mistral_api_key == "mistral-secret"
