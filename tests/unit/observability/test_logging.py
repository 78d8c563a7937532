"""Unit tests for userdeck.observability.logging module."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from pydantic import ValidationError as PydanticValidationError
import pytest

from userdeck.observability.logging import (
    LoggingConfig,
    LogMode,
    bind_context,
    clear_context,
    configure_logging,
    get_logger,
    unbind_context,
)


class TestLoggingConfig:
    """Test the runtime LoggingConfig model."""

    def test_defaults(self) -> None:
        config = LoggingConfig()
        assert config.mode == LogMode.DEV
        assert config.log_level == "WARNING"
        assert config.enable_file_logging is False
        assert config.log_dir == Path.home() / ".userdeck" / "logs"

    def test_is_frozen(self) -> None:
        config = LoggingConfig()
        with pytest.raises(PydanticValidationError):
            config.mode = LogMode.PROD  # type: ignore[misc]

    def test_max_log_days_bounds(self) -> None:
        with pytest.raises(PydanticValidationError):
            LoggingConfig(max_log_days=0)
        with pytest.raises(PydanticValidationError):
            LoggingConfig(max_log_days=400)


class TestConfigureLogging:
    """Test configure_logging."""

    def test_mode_from_env(self, monkeypatch: pytest.MonkeyPatch, capsys: Any) -> None:
        """USERDECK_LOG_MODE=prod switches the default config to JSON output."""
        monkeypatch.setenv("USERDECK_LOG_MODE", "prod")
        configure_logging()
        get_logger().warning("session.fetch.failed", status_code=500)
        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["event"] == "session.fetch.failed"

    def test_invalid_env_mode_defaults_to_dev(
        self, monkeypatch: pytest.MonkeyPatch, capsys: Any
    ) -> None:
        monkeypatch.setenv("USERDECK_LOG_MODE", "verbose")
        configure_logging()
        get_logger().warning("session.fetch.failed")
        line = capsys.readouterr().err.strip().splitlines()[-1]
        assert "session.fetch.failed" in line
        assert not line.startswith("{")

    def test_get_logger_configures_on_first_use(self, capsys: Any) -> None:
        get_logger().warning("users.id_collision_possible")
        assert "users.id_collision_possible" in capsys.readouterr().err

    def test_level_filters_entries(self, capsys: Any) -> None:
        """Entries below the configured level are dropped."""
        configure_logging(LoggingConfig(log_level="WARNING"))
        log = get_logger()
        log.info("users.store.initialized")
        log.warning("users.id_collision_possible")
        err = capsys.readouterr().err
        assert "users.store.initialized" not in err
        assert "users.id_collision_possible" in err

    def test_prod_mode_renders_json(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="INFO"))
        get_logger().info("session.started", origin="cache", user_count=12)
        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["event"] == "session.started"
        assert entry["user_count"] == 12
        assert entry["level"] == "info"

    def test_file_logging_writes_json(self, tmp_path: Path, capsys: Any) -> None:
        log_dir = tmp_path / "nested" / "logs"
        configure_logging(
            LoggingConfig(log_dir=log_dir, log_level="INFO", enable_file_logging=True)
        )
        get_logger().info("remote.fetch.completed", user_count=12)

        lines = (log_dir / "userdeck.log").read_text().strip().splitlines()
        assert json.loads(lines[-1])["event"] == "remote.fetch.completed"


class TestMasking:
    """Test that secrets never reach log output."""

    def test_api_key_fields_redacted(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="INFO"))
        get_logger().info("remote.fetch.started", api_key="reqres-free-v1")
        err = capsys.readouterr().err
        assert "reqres-free-v1" not in err
        assert "<REDACTED>" in err

    def test_key_like_values_masked(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="INFO"))
        get_logger().info("remote.fetch.started", header="reqres-free-v1")
        err = capsys.readouterr().err
        assert "reqres-free-v1" not in err
        assert "reqres-...e-v1" in err

    def test_nested_dicts_sanitized(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="INFO"))
        get_logger().info("config.loaded", remote={"x-api-key": "abc", "pages": [1, 2]})
        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["remote"] == {"x-api-key": "<REDACTED>", "pages": [1, 2]}

    def test_storage_key_not_masked(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="INFO"))
        get_logger().info("persistence.origin.saved", storage_key="originalUsers")
        assert "originalUsers" in capsys.readouterr().err


class TestContext:
    """Test context binding helpers."""

    def test_bind_and_unbind(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="INFO"))
        log = get_logger()

        bind_context(session_id="s-1", page=2)
        unbind_context("page")
        log.info("session.started")
        entry = json.loads(capsys.readouterr().err.strip().splitlines()[-1])
        assert entry["session_id"] == "s-1"
        assert "page" not in entry

    def test_clear_context(self, capsys: Any) -> None:
        configure_logging(LoggingConfig(mode=LogMode.PROD, log_level="INFO"))
        bind_context(session_id="s-1")
        clear_context()
        get_logger().info("session.started")
        assert "s-1" not in capsys.readouterr().err
