"""
Configuration Tests
===================

Tests for YAML loading and environment overrides.
"""

import pytest

from replay_stats.config import Settings, load_config
from replay_stats.stats import DEFAULT_COMPUTERS


ENV_VARS = [
    "REPLAY_STATS_STREAM_URL",
    "REPLAY_STATS_STREAM_ENABLED",
    "REPLAY_STATS_RECONNECT_BACKOFF_MS",
    "REPLAY_STATS_COMPUTERS",
    "REPLAY_STATS_PORT",
    "REPLAY_STATS_LOG_LEVEL",
    "PORT",
]


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def config_file(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "stream:\n"
        "  url: ws://streamer:9000/ws/events\n"
        "  enabled: true\n"
        "stats:\n"
        "  computers: [stocks, conversions]\n"
        "  punish_reset_frames: 30\n"
        "server:\n"
        "  port: 9100\n"
    )
    return path


class TestDefaults:
    """Tests for default values."""

    def test_settings_defaults(self):
        settings = Settings()

        assert settings.service.name == "replay-stats"
        assert settings.stream.enabled is False
        assert settings.stream.reconnect_backoff_ms == 500
        assert settings.stats.computers == DEFAULT_COMPUTERS
        assert settings.stats.punish_reset_frames == 45
        assert settings.stats.combo_string_reset_frames == 45
        assert settings.server.port == 8002

    def test_computers_default_is_a_copy(self):
        Settings().stats.computers.append("extra")

        assert Settings().stats.computers == DEFAULT_COMPUTERS


class TestLoadConfig:
    """Tests for load_config."""

    def test_yaml_values(self, config_file):
        settings = load_config(str(config_file))

        assert settings.stream.url == "ws://streamer:9000/ws/events"
        assert settings.stream.enabled is True
        assert settings.stats.computers == ["stocks", "conversions"]
        assert settings.stats.punish_reset_frames == 30
        assert settings.stats.combo_string_reset_frames == 45
        assert settings.server.port == 9100

    def test_missing_file_uses_defaults(self, tmp_path):
        settings = load_config(str(tmp_path / "absent.yaml"))

        assert settings.server.port == 8002
        assert settings.stream.enabled is False

    def test_empty_file(self, tmp_path):
        path = tmp_path / "config.yaml"
        path.write_text("")

        assert load_config(str(path)).service.name == "replay-stats"

    def test_env_overrides_yaml(self, config_file, monkeypatch):
        monkeypatch.setenv("REPLAY_STATS_STREAM_URL", "ws://other/ws")
        monkeypatch.setenv("REPLAY_STATS_STREAM_ENABLED", "false")
        monkeypatch.setenv("REPLAY_STATS_RECONNECT_BACKOFF_MS", "1500")
        monkeypatch.setenv("REPLAY_STATS_COMPUTERS", "inputs, stocks ,")
        monkeypatch.setenv("REPLAY_STATS_LOG_LEVEL", "DEBUG")

        settings = load_config(str(config_file))

        assert settings.stream.url == "ws://other/ws"
        assert settings.stream.enabled is False
        assert settings.stream.reconnect_backoff_ms == 1500
        assert settings.stats.computers == ["inputs", "stocks"]
        assert settings.logging.level == "DEBUG"

    def test_port_precedence(self, config_file, monkeypatch):
        monkeypatch.setenv("REPLAY_STATS_PORT", "9200")
        assert load_config(str(config_file)).server.port == 9200

        monkeypatch.setenv("PORT", "9300")
        assert load_config(str(config_file)).server.port == 9300

    def test_invalid_backoff_rejected(self, tmp_path):
        from pydantic import ValidationError

        path = tmp_path / "config.yaml"
        path.write_text("stream:\n  reconnect_backoff_ms: 10\n")

        with pytest.raises(ValidationError):
            load_config(str(path))
