"""Tests for the peniel CLI."""

from __future__ import annotations

from unittest.mock import patch

import pytest
from click.testing import CliRunner

from peniel.cli import cli
from peniel.config import load_config

pytestmark = pytest.mark.unit


class TestInit:
    def test_writes_loadable_config(self, tmp_path):
        result = CliRunner().invoke(
            cli, ["init", "--name", "Igreja Nova", "--port", "8123", "--dir", str(tmp_path)]
        )
        assert result.exit_code == 0, result.output
        config = load_config(tmp_path / "peniel.toml")
        assert config.name == "Igreja Nova"
        assert config.server.port == 8123
        assert config.sessions.max_sessions == 500

    def test_refuses_to_overwrite(self, tmp_path):
        (tmp_path / "peniel.toml").write_text("[peniel]\n")
        result = CliRunner().invoke(cli, ["init", "--dir", str(tmp_path)])
        assert result.exit_code == 1
        assert "already exists" in result.output


class TestCheckConfig:
    def test_valid(self, tmp_path, monkeypatch):
        monkeypatch.delenv("API_KEY", raising=False)
        path = tmp_path / "peniel.toml"
        path.write_text('[peniel]\nname = "Teste"\n')
        result = CliRunner().invoke(cli, ["check-config", str(path)])
        assert result.exit_code == 0
        assert "Teste" in result.output
        assert "$API_KEY missing" in result.output
        assert "max 500, idle 3600s" in result.output

    def test_invalid(self, tmp_path):
        path = tmp_path / "peniel.toml"
        path.write_text("[peniel.server]\nport = 0\n")
        result = CliRunner().invoke(cli, ["check-config", str(path)])
        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestServe:
    def test_runs_uvicorn_with_overrides(self, tmp_path):
        path = tmp_path / "peniel.toml"
        path.write_text("[peniel.server]\nport = 9000\n")
        with (
            patch("uvicorn.run") as run,
            patch("peniel.core.logging.configure_logging") as configure,
        ):
            result = CliRunner().invoke(
                cli, ["serve", "--config", str(path), "--host", "0.0.0.0"]
            )

        assert result.exit_code == 0, result.output
        configure.assert_called_once_with(level="INFO", fmt="text", log_root=None)
        kwargs = run.call_args.kwargs
        assert kwargs["host"] == "0.0.0.0"
        assert kwargs["port"] == 9000

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert "0.1.0" in result.output
