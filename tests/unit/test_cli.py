# SPDX-License-Identifier: MIT
"""Tests for the CLI module."""

import os
from unittest.mock import Mock, patch

import pytest
import yaml
from click.testing import CliRunner

from drivecache.cli import main
from drivecache.config import AppConfig, ConfigManager, set_config_manager


@pytest.fixture
def runner():
    """Create CLI test runner."""
    return CliRunner()


@pytest.fixture(autouse=True)
def mock_setup_logging():
    """Keep the CLI from creating log files in the working directory."""
    with patch(
        "drivecache.cli.setup_logging", return_value=(Mock(), Mock())
    ) as mock_setup:
        yield mock_setup


@pytest.fixture
def config_manager(tmp_path, monkeypatch):
    """Install a config manager backed by a file in tmp_path."""
    for key in list(os.environ):
        if key.startswith("DRIVECACHE_"):
            monkeypatch.delenv(key)
    config_path = tmp_path / "config.yaml"
    config_path.write_text("cache:\n  name: cli-cache\n", encoding="utf-8")
    manager = ConfigManager(config_path)
    set_config_manager(manager)
    return manager


class TestVersion:
    """Test cases for the --version option."""

    def test_version(self, runner):
        result = runner.invoke(main, ["--version"])

        assert result.exit_code == 0
        assert "drivecache version" in result.output


class TestConfigCommand:
    """Test cases for the config command."""

    def test_config_shows_effective_configuration(
        self, runner, config_manager, mock_setup_logging
    ):
        result = runner.invoke(main, ["config"])

        assert result.exit_code == 0
        parsed = yaml.safe_load(result.output)
        assert parsed["cache"]["name"] == "cli-cache"
        assert parsed["cache"]["write_lock_seconds"] == 0.1
        mock_setup_logging.assert_called_once()

    def test_config_invalid_file_exits_with_error(self, runner, tmp_path):
        config_path = tmp_path / "bad.yaml"
        config_path.write_text("cache:\n  write_lock_seconds: -5\n", encoding="utf-8")
        set_config_manager(ConfigManager(config_path))

        result = runner.invoke(main, ["config"])

        assert result.exit_code == 1


class TestInitConfigCommand:
    """Test cases for the init-config command."""

    def test_writes_default_config(self, runner, tmp_path, config_manager):
        output_path = tmp_path / "out" / "config.yaml"

        result = runner.invoke(main, ["init-config", str(output_path)])

        assert result.exit_code == 0
        with open(output_path, encoding="utf-8") as f:
            assert yaml.safe_load(f) == AppConfig().model_dump()

    def test_refuses_to_overwrite(self, runner, tmp_path, config_manager):
        output_path = tmp_path / "existing.yaml"
        output_path.write_text("keep: me\n", encoding="utf-8")

        result = runner.invoke(main, ["init-config", str(output_path)])

        assert result.exit_code == 1
        assert output_path.read_text(encoding="utf-8") == "keep: me\n"

    def test_force_overwrites(self, runner, tmp_path, config_manager):
        output_path = tmp_path / "existing.yaml"
        output_path.write_text("keep: me\n", encoding="utf-8")

        result = runner.invoke(main, ["init-config", str(output_path), "--force"])

        assert result.exit_code == 0
        with open(output_path, encoding="utf-8") as f:
            assert yaml.safe_load(f)["cache"]["name"] == "default"

    def test_write_error_exits_with_error(self, runner, tmp_path, config_manager):
        output_path = tmp_path / "config.yaml.new"

        with patch.object(
            ConfigManager,
            "create_default_config",
            side_effect=OSError("read-only file system"),
        ):
            result = runner.invoke(main, ["init-config", str(output_path)])

        assert result.exit_code == 1
        assert not output_path.exists()
