"""Peniel configuration loading and validation.

Reads ``peniel.toml``, resolves ``${VAR}`` references against the
environment, and returns a validated PenielConfig dataclass. Every section
is optional; a missing file means defaults throughout.
"""

from __future__ import annotations

import os
import re
import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

DEFAULT_CONFIG_FILENAME = "peniel.toml"

# Default Gemini model for text generation unless overridden in peniel.toml.
DEFAULT_GENAI_MODEL = "gemini-3-flash-preview"
DEFAULT_GENAI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"
DEFAULT_TIMEZONE = "America/Sao_Paulo"

# Pattern matching ${VAR_NAME}; supports alphanumeric + underscore variable names.
_ENV_VAR_PATTERN = re.compile(r"\$\{([A-Za-z_][A-Za-z0-9_]*)\}")


class ConfigError(Exception):
    """Raised when configuration is missing, malformed, or invalid."""


@dataclass
class LoggingConfig:
    """Logging configuration from [peniel.logging] section."""

    level: str = "INFO"
    format: str = "text"  # "text" or "json"
    log_root: str | None = None


@dataclass
class ServerConfig:
    """HTTP server configuration from [peniel.server] section."""

    host: str = "127.0.0.1"
    port: int = 40300
    cors_origins: list[str] = field(default_factory=lambda: ["http://localhost:5173"])


@dataclass
class SessionsConfig:
    """Session retention from [peniel.sessions] section.

    Sessions idle longer than ``idle_timeout_s`` are discarded, and once
    ``max_sessions`` are open the least recently used one makes room.
    """

    max_sessions: int = 500
    idle_timeout_s: float = 3600.0


@dataclass
class CalendarConfig:
    """Display timezone from [peniel.calendar] section."""

    timezone: str = DEFAULT_TIMEZONE

    @property
    def tzinfo(self) -> ZoneInfo:
        return ZoneInfo(self.timezone)


@dataclass
class GenAIConfig:
    """Text-generation settings from [peniel.genai] section.

    The API key itself never lives in the file: ``api_key_env`` names the
    environment variable that holds it. A missing variable is not an error;
    generation then answers with its fallback texts.
    """

    model: str = DEFAULT_GENAI_MODEL
    api_key_env: str = "API_KEY"
    base_url: str = DEFAULT_GENAI_BASE_URL
    timeout_s: float = 30.0

    def api_key(self) -> str | None:
        value = os.environ.get(self.api_key_env, "").strip()
        return value or None


@dataclass
class PenielConfig:
    """Parsed and validated configuration."""

    name: str = "Peniel Church Brazil"
    seed_mock_data: bool = True
    server: ServerConfig = field(default_factory=ServerConfig)
    sessions: SessionsConfig = field(default_factory=SessionsConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    calendar: CalendarConfig = field(default_factory=CalendarConfig)
    genai: GenAIConfig = field(default_factory=GenAIConfig)


def resolve_env_vars(value: Any) -> Any:
    """Recursively resolve ``${VAR_NAME}`` references in config values.

    Walks dicts, lists, and strings. Non-string leaf values pass through.

    Raises
    ------
    ConfigError
        If a referenced environment variable is not set.
    """
    if isinstance(value, dict):
        return {k: resolve_env_vars(v) for k, v in value.items()}

    if isinstance(value, list):
        return [resolve_env_vars(item) for item in value]

    if isinstance(value, str):
        return _resolve_string(value)

    return value


def _resolve_string(s: str) -> str:
    """Replace all ``${VAR_NAME}`` occurrences in *s* with env var values.

    Collects all missing variable names and reports them in a single error.
    """
    missing: list[str] = []

    def _replace(match: re.Match) -> str:
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            missing.append(var_name)
            return match.group(0)
        return env_value

    result = _ENV_VAR_PATTERN.sub(_replace, s)

    if missing:
        vars_str = ", ".join(missing)
        raise ConfigError(
            f"Unresolved environment variable(s) in config value: {vars_str} (original: {s!r})"
        )

    return result


def _section(parent: dict[str, Any], key: str, path: str) -> dict[str, Any]:
    value = parent.get(key, {})
    if not isinstance(value, dict):
        raise ConfigError(f"{path} must be a TOML table")
    return value


def _parse_server(section: dict[str, Any]) -> ServerConfig:
    host = section.get("host", "127.0.0.1")
    if not isinstance(host, str) or not host.strip():
        raise ConfigError("peniel.server.host must be a non-empty string")

    try:
        port = int(section.get("port", 40300))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid peniel.server.port: {section.get('port')!r}") from exc
    if not 0 < port < 65536:
        raise ConfigError(f"Invalid peniel.server.port: {port!r}. Must be 1-65535.")

    origins = section.get("cors_origins", ["http://localhost:5173"])
    if not isinstance(origins, list) or not all(isinstance(o, str) for o in origins):
        raise ConfigError("peniel.server.cors_origins must be a list of strings")

    return ServerConfig(host=host.strip(), port=port, cors_origins=list(origins))


def _parse_sessions(section: dict[str, Any]) -> SessionsConfig:
    try:
        max_sessions = int(section.get("max_sessions", 500))
        idle_timeout_s = float(section.get("idle_timeout_s", 3600.0))
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"Invalid [peniel.sessions] value: {exc}") from exc
    if max_sessions < 1:
        raise ConfigError(f"Invalid peniel.sessions.max_sessions: {max_sessions!r}. Must be >= 1.")
    if idle_timeout_s <= 0:
        raise ConfigError(
            f"Invalid peniel.sessions.idle_timeout_s: {idle_timeout_s!r}. Must be positive."
        )
    return SessionsConfig(max_sessions=max_sessions, idle_timeout_s=idle_timeout_s)


def _parse_logging(section: dict[str, Any]) -> LoggingConfig:
    level = str(section.get("level", "INFO")).upper()
    fmt = str(section.get("format", "text")).lower()
    if fmt not in ("text", "json"):
        raise ConfigError(f"Invalid peniel.logging.format: {fmt!r}. Expected 'text' or 'json'.")
    return LoggingConfig(level=level, format=fmt, log_root=section.get("log_root"))


def _parse_calendar(section: dict[str, Any]) -> CalendarConfig:
    tz_name = str(section.get("timezone", DEFAULT_TIMEZONE)).strip()
    try:
        ZoneInfo(tz_name)
    except (ZoneInfoNotFoundError, ValueError) as exc:
        raise ConfigError(f"Unknown peniel.calendar.timezone: {tz_name!r}") from exc
    return CalendarConfig(timezone=tz_name)


def _parse_genai(section: dict[str, Any]) -> GenAIConfig:
    model = section.get("model")
    # Normalise empty/whitespace string → use default
    if not isinstance(model, str) or not model.strip():
        model = DEFAULT_GENAI_MODEL

    api_key_env = section.get("api_key_env", "API_KEY")
    if not isinstance(api_key_env, str) or not api_key_env.strip():
        raise ConfigError("peniel.genai.api_key_env must be a non-empty string")

    base_url = str(section.get("base_url", DEFAULT_GENAI_BASE_URL)).rstrip("/")

    try:
        timeout_s = float(section.get("timeout_s", 30.0))
    except (TypeError, ValueError) as exc:
        raise ConfigError(
            f"Invalid peniel.genai.timeout_s: {section.get('timeout_s')!r}"
        ) from exc
    if timeout_s <= 0:
        raise ConfigError(f"Invalid peniel.genai.timeout_s: {timeout_s!r}. Must be positive.")

    return GenAIConfig(
        model=model.strip(),
        api_key_env=api_key_env.strip(),
        base_url=base_url,
        timeout_s=timeout_s,
    )


def parse_config(data: dict[str, Any]) -> PenielConfig:
    """Validate an already-decoded TOML document."""
    data = resolve_env_vars(data)
    root = _section(data, "peniel", "[peniel]")

    name = root.get("name", "Peniel Church Brazil")
    if not isinstance(name, str) or not name.strip():
        raise ConfigError("peniel.name must be a non-empty string")

    seed = root.get("seed_mock_data", True)
    if not isinstance(seed, bool):
        raise ConfigError("peniel.seed_mock_data must be a boolean")

    return PenielConfig(
        name=name.strip(),
        seed_mock_data=seed,
        server=_parse_server(_section(root, "server", "[peniel.server]")),
        sessions=_parse_sessions(_section(root, "sessions", "[peniel.sessions]")),
        logging=_parse_logging(_section(root, "logging", "[peniel.logging]")),
        calendar=_parse_calendar(_section(root, "calendar", "[peniel.calendar]")),
        genai=_parse_genai(_section(root, "genai", "[peniel.genai]")),
    )


def load_config(path: Path | None = None) -> PenielConfig:
    """Load and validate configuration.

    Parameters
    ----------
    path:
        A ``peniel.toml`` file, or a directory containing one. ``None``
        returns the defaults.

    Raises
    ------
    ConfigError
        If the file is missing, contains invalid TOML, or has invalid values.
    """
    if path is None:
        return PenielConfig()

    toml_path = path / DEFAULT_CONFIG_FILENAME if path.is_dir() else path
    if not toml_path.exists():
        raise ConfigError(f"Config file not found: {toml_path}")

    try:
        data = tomllib.loads(toml_path.read_bytes().decode())
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"Invalid TOML in {toml_path}: {exc}") from exc

    return parse_config(data)
