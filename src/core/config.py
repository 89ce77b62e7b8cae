"""Core configuration.

Why here:
- Centralizes environment variables and the config file (pydantic-settings)
  without leaking that logic into the CLI.
- Lets adapters (HTTP dispatcher, code analyst) read settings consistently.
"""

from __future__ import annotations

import os
import sys
from pathlib import Path

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from core.domain.errors import ConfigurationError

CONFIG_FILE_NAME = "config.env"

SAMPLE_VALUES: dict[str, str] = {
    "MISTRAL_API_KEY": "your_mistral_api_key",
    "CODESTRAL_API_KEY": "your_codestral_api_key",
    "MISTRAL_CLI_DEBUG": "false",
}


def get_user_config_dir() -> Path:
    """Per-user configuration directory (cross-platform, no extra dependencies)."""

    if sys.platform.startswith("win"):
        base = Path(os.environ.get("APPDATA", str(Path.home())))
        return base / "mistral-cli"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support" / "mistral-cli"

    xdg = os.environ.get("XDG_CONFIG_HOME")
    if xdg:
        return Path(xdg) / "mistral-cli"
    return Path.home() / ".config" / "mistral-cli"


def get_user_config_file() -> Path:
    return get_user_config_dir() / CONFIG_FILE_NAME


def parse_env_lines(text: str) -> dict[str, str]:
    data: dict[str, str] = {}
    for raw_line in text.splitlines():
        line = raw_line.strip()
        if not line or line.startswith("#"):
            continue
        if "=" not in line:
            continue
        key, value = line.split("=", 1)
        key = key.strip()
        value = value.strip().strip('"').strip("'")
        if key:
            data[key] = value
    return data


def write_env_file(path: Path, values: dict[str, str]) -> Path:
    """Writes KEY=VALUE pairs to a flat config file, replacing its contents."""

    path.parent.mkdir(parents=True, exist_ok=True)

    lines = ["# mistral-cli config"]
    for key in sorted(values.keys()):
        lines.append(f"{key}={values[key]}")
    path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return path


def generate_sample_config(path: Path, *, force: bool = False) -> Path:
    if path.exists() and not force:
        raise ConfigurationError(f"{path} already exists (use --force to overwrite)")
    return write_env_file(path, SAMPLE_VALUES)


def mask_key(key: str | None) -> str:
    """Keeps the first five characters of a key and hides the rest."""

    if not key:
        return "(not set)"
    if len(key) > 5:
        return key[:5] + "*" * (len(key) - 5)
    return key


class AppSettings(BaseSettings):
    """Central application settings.

    Why pydantic-settings:
    - Typed and validated at the edge (env vars, config file).
    - A single configuration contract for the CLI and the adapters.

    The two API keys use the vendor's usual variable names
    (`MISTRAL_API_KEY`, `CODESTRAL_API_KEY`); everything else is read from
    `MISTRAL_CLI_<FIELD>`.
    """

    model_config = SettingsConfigDict(
        env_prefix="MISTRAL_CLI_",
        extra="ignore",
        case_sensitive=False,
        # Later files win: the per-user file is the base, ./.env overrides it.
        # `load_settings` re-resolves the user path at call time.
        env_file=(str(get_user_config_file()), ".env"),
        env_file_encoding="utf-8",
        populate_by_name=True,
        frozen=True,
    )

    mistral_api_key: str | None = Field(
        default=None,
        validation_alias="MISTRAL_API_KEY",
        description="API key for the Mistral chat endpoint.",
    )
    codestral_api_key: str | None = Field(
        default=None,
        validation_alias="CODESTRAL_API_KEY",
        description="API key for the Codestral endpoint.",
    )
    mistral_base_url: str = Field(
        default="https://api.mistral.ai/v1",
        min_length=8,
        description="Base URL of the Mistral API.",
    )
    codestral_base_url: str = Field(
        default="https://codestral.mistral.ai/v1",
        min_length=8,
        description="Base URL of the Codestral API.",
    )
    mistral_model: str = Field(
        default="mistral-large-latest",
        min_length=1,
        description="Model used for general chat prompts.",
    )
    codestral_model: str = Field(
        default="codestral-latest",
        min_length=1,
        description="Model used for code prompts and analysis.",
    )
    http_timeout_seconds: float = Field(
        default=60.0,
        gt=0,
        description="Timeout per request (seconds).",
    )
    user_agent: str = Field(
        default="mistral-cli/0.1",
        min_length=1,
        description="User-Agent sent with every request.",
    )
    debug: bool = Field(
        default=False,
        description="Verbose logging, including raw error bodies.",
    )


def load_settings(config_path: Path | None = None) -> AppSettings:
    """Builds `AppSettings`, optionally from an explicit config file.

    Raises `ConfigurationError` when the file is missing or a value does not
    validate, so that nothing touches the network with a broken config.
    """

    try:
        if config_path is None:
            return AppSettings(_env_file=(get_user_config_file(), ".env"))
        if not config_path.is_file():
            raise ConfigurationError(f"config file not found: {config_path}")
        return AppSettings(_env_file=config_path)
    except ValidationError as exc:
        raise ConfigurationError(f"invalid configuration: {exc}") from exc
