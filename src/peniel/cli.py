"""CLI for Peniel: run and configure the church community API."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

import click

from peniel.config import DEFAULT_CONFIG_FILENAME, ConfigError, PenielConfig, load_config

logger = logging.getLogger(__name__)

STARTER_CONFIG = """[peniel]
name = "{name}"
seed_mock_data = true

[peniel.server]
host = "127.0.0.1"
port = {port}
cors_origins = ["http://localhost:5173"]

[peniel.sessions]
max_sessions = 500
idle_timeout_s = 3600

[peniel.logging]
level = "INFO"
format = "text"

[peniel.calendar]
timezone = "America/Sao_Paulo"

[peniel.genai]
model = "gemini-3-flash-preview"
api_key_env = "API_KEY"
timeout_s = 30.0
"""


@click.group()
@click.version_option(version="0.1.0")
def cli() -> None:
    """Peniel: church community events, members and birthdays."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s: %(name)s: %(message)s")


def _load_or_exit(config_path: Path | None) -> PenielConfig:
    try:
        return load_config(config_path)
    except ConfigError as exc:
        click.echo(f"Invalid configuration: {exc}")
        sys.exit(1)


@cli.command()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, path_type=Path),
    default=None,
    help="Path to peniel.toml (defaults are used when omitted)",
)
@click.option("--host", default=None, help="Override [peniel.server].host")
@click.option("--port", type=int, default=None, help="Override [peniel.server].port")
def serve(config_path: Path | None, host: str | None, port: int | None) -> None:
    """Run the HTTP API with uvicorn."""
    import uvicorn

    from peniel.api.app import create_app
    from peniel.core.logging import configure_logging

    config = _load_or_exit(config_path)
    log_root = Path(config.logging.log_root) if config.logging.log_root else None
    configure_logging(level=config.logging.level, fmt=config.logging.format, log_root=log_root)

    bind_host = host or config.server.host
    bind_port = port or config.server.port
    click.echo(f"Starting {config.name} API on http://{bind_host}:{bind_port}")
    uvicorn.run(create_app(config), host=bind_host, port=bind_port, log_config=None)


@cli.command("check-config")
@click.argument("config_path", type=click.Path(exists=True, path_type=Path))
def check_config(config_path: Path) -> None:
    """Validate a peniel.toml and print the effective settings."""
    config = _load_or_exit(config_path)
    click.echo(f"{'Name':<14} {config.name}")
    click.echo(f"{'Server':<14} {config.server.host}:{config.server.port}")
    click.echo(
        f"{'Sessions':<14} max {config.sessions.max_sessions}, "
        f"idle {config.sessions.idle_timeout_s:g}s"
    )
    click.echo(f"{'Logging':<14} {config.logging.level} ({config.logging.format})")
    click.echo(f"{'Timezone':<14} {config.calendar.timezone}")
    key_state = "set" if config.genai.api_key() else "missing"
    click.echo(f"{'AI model':<14} {config.genai.model} (${config.genai.api_key_env} {key_state})")
    click.echo(f"{'Mock data':<14} {'on' if config.seed_mock_data else 'off'}")


@cli.command()
@click.option("--name", default="Peniel Church Brazil", help="Community name")
@click.option("--port", type=int, default=40300, help="Port for the HTTP API")
@click.option(
    "--dir",
    "target_dir",
    type=click.Path(path_type=Path),
    default=Path("."),
    help="Directory to write peniel.toml into",
)
def init(name: str, port: int, target_dir: Path) -> None:
    """Write a starter peniel.toml."""
    target = target_dir / DEFAULT_CONFIG_FILENAME
    if target.exists():
        click.echo(f"File already exists: {target}")
        sys.exit(1)

    target_dir.mkdir(parents=True, exist_ok=True)
    target.write_text(STARTER_CONFIG.format(name=name, port=port))
    click.echo(f"Created {target}")
