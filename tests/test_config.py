"""Tests for settings loading and logging setup."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from wavelet_ecs.config import ENV_VAR, Settings, load_settings, resolve_config_path
from wavelet_ecs.log import setup_logging, setup_logging_from_settings


@pytest.fixture(autouse=True)
def isolated(monkeypatch, tmp_path):
    """Run each test from an empty directory with no env override."""
    monkeypatch.delenv(ENV_VAR, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("HOME", str(tmp_path / "home"))
    return tmp_path


class TestSettings:
    """Settings model."""

    def test_defaults(self):
        """Built-in defaults."""
        settings = Settings()
        assert settings.wavelet == "db2"
        assert settings.levels == 3
        assert settings.arena_bytes == 64 << 20
        assert settings.log_level == "WARNING"
        assert settings.log_file is None

    def test_level_normalized(self):
        """Log levels are upper-cased."""
        assert Settings(log_level="debug").log_level == "DEBUG"

    def test_invalid_values(self):
        """Constraints are enforced."""
        with pytest.raises(ValidationError):
            Settings(levels=0)
        with pytest.raises(ValidationError):
            Settings(arena_bytes=0)
        with pytest.raises(ValidationError):
            Settings(log_level="chatty")


class TestLoadSettings:
    """TOML resolution and parsing."""

    def test_no_file_gives_defaults(self):
        """Without any config file, defaults are used."""
        assert resolve_config_path() is None
        assert load_settings() == Settings()

    def test_explicit_path(self, isolated):
        """An explicit file is parsed."""
        path = isolated / "custom.toml"
        path.write_text(
            '[dwt]\nwavelet = "db4"\nlevels = 5\n'
            "[world]\narena_bytes = 1048576\n"
            '[logging]\nlevel = "info"\nfile = "out.log"\n'
        )
        settings = load_settings(str(path))
        assert settings.wavelet == "db4"
        assert settings.levels == 5
        assert settings.arena_bytes == 1 << 20
        assert settings.log_level == "INFO"
        assert settings.log_file == "out.log"

    def test_partial_file(self, isolated):
        """Missing keys fall back to defaults."""
        path = isolated / "partial.toml"
        path.write_text("[dwt]\nlevels = 2\n")
        settings = load_settings(str(path))
        assert settings.levels == 2
        assert settings.wavelet == "db2"

    def test_env_var_wins(self, isolated, monkeypatch):
        """The environment variable takes precedence over the argument."""
        env_file = isolated / "env.toml"
        env_file.write_text('[dwt]\nwavelet = "db6"\n')
        arg_file = isolated / "arg.toml"
        arg_file.write_text('[dwt]\nwavelet = "db3"\n')
        monkeypatch.setenv(ENV_VAR, str(env_file))
        assert load_settings(str(arg_file)).wavelet == "db6"

    def test_working_directory_file(self, isolated):
        """./wavelet_ecs.toml is picked up."""
        (isolated / "wavelet_ecs.toml").write_text("[dwt]\nlevels = 4\n")
        assert load_settings().levels == 4

    def test_missing_explicit_file(self, isolated):
        """A missing explicit file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError, match="Config file not found"):
            load_settings(str(isolated / "absent.toml"))

    def test_invalid_value_in_file(self, isolated):
        """Bad values fail validation."""
        path = isolated / "bad.toml"
        path.write_text("[dwt]\nlevels = 0\n")
        with pytest.raises(ValidationError):
            load_settings(str(path))


class TestLogging:
    """setup_logging helper."""

    def test_console_only(self):
        """A single console handler at the requested level."""
        logger = setup_logging("DEBUG", name="wavelet_ecs.test_console")
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_repeated_setup_replaces_handlers(self):
        """Calling twice does not duplicate handlers."""
        setup_logging(logging.INFO, name="wavelet_ecs.test_repeat")
        logger = setup_logging(logging.INFO, name="wavelet_ecs.test_repeat")
        assert len(logger.handlers) == 1

    def test_file_handler(self, isolated):
        """Messages reach the log file."""
        log_file = isolated / "logs" / "run.log"
        logger = setup_logging("INFO", log_file=str(log_file), name="wavelet_ecs.test_file")
        logger.info("decomposed")
        for handler in logger.handlers:
            handler.flush()

        text = log_file.read_text()
        assert "decomposed" in text
        assert "| INFO     |" in text

    def test_custom_format(self, isolated):
        """format_string replaces the default layout."""
        log_file = isolated / "custom.log"
        logger = setup_logging(
            "WARNING",
            log_file=str(log_file),
            format_string="%(levelname)s:%(message)s",
            name="wavelet_ecs.test_format",
        )
        logger.warning("collapsed")
        for handler in logger.handlers:
            handler.flush()

        assert log_file.read_text() == "WARNING:collapsed\n"

    def test_from_settings(self):
        """Settings drive the package logger."""
        logger = setup_logging_from_settings(Settings(log_level="error"))
        assert logger.name == "wavelet_ecs"
        assert logger.level == logging.ERROR
