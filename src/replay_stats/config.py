"""
replay-stats Configuration
==========================

This module handles configuration loading for the replay stats service.

Configuration Sources (in order of precedence):
    1. Environment variables (highest priority)
    2. config.yaml file
    3. Default values (lowest priority)

Environment Variable Mapping:
    REPLAY_STATS_STREAM_URL            -> stream.url
    REPLAY_STATS_STREAM_ENABLED        -> stream.enabled
    REPLAY_STATS_RECONNECT_BACKOFF_MS  -> stream.reconnect_backoff_ms
    REPLAY_STATS_COMPUTERS             -> stats.computers (comma separated)
    REPLAY_STATS_PORT                  -> server.port
    REPLAY_STATS_LOG_LEVEL             -> logging.level
    PORT                               -> server.port (Cloud Run)

Example:
    from replay_stats.config import settings

    print(settings.service.name)
    print(settings.stream.url)
    print(settings.stats.computers)
"""

import os
import logging
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field

from replay_stats.stats.orchestrator import DEFAULT_COMPUTERS


logger = logging.getLogger(__name__)


# =============================================================================
# Configuration Models
# =============================================================================

class ServiceConfig(BaseModel):
    """Service identification configuration."""

    name: str = Field(default="replay-stats", description="Service name")
    version: str = Field(default="v0.1.0", description="Protocol version")


class StreamConfig(BaseModel):
    """Upstream replay event stream configuration."""

    url: str = Field(
        default="ws://localhost:8000/ws/events",
        description="WebSocket URL of the replay event streamer",
    )
    enabled: bool = Field(
        default=False,
        description="Start the WebSocket consumer on service startup",
    )
    reconnect_backoff_ms: int = Field(
        default=500,
        ge=100,
        description="Backoff in milliseconds between reconnect attempts",
    )
    max_reconnect_attempts: int = Field(
        default=0,
        ge=0,
        description="Maximum reconnection attempts (0 = unlimited)",
    )


class StatsConfig(BaseModel):
    """Stat computer selection and timing thresholds."""

    computers: List[str] = Field(
        default_factory=lambda: list(DEFAULT_COMPUTERS),
        description="Stat computers to register, in dispatch order",
    )
    punish_reset_frames: int = Field(
        default=45,
        ge=1,
        description="Frames in control before a conversion ends",
    )
    combo_string_reset_frames: int = Field(
        default=45,
        ge=1,
        description="Frames out of stun before a combo ends",
    )


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = Field(default="0.0.0.0", description="Bind host")
    port: int = Field(default=8002, ge=1, le=65535, description="Bind port")


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    format: str = Field(default="json", description="Log format: json or text")


class Settings(BaseModel):
    """
    Main settings class for replay-stats.

    Loads configuration from YAML file and environment variables.
    Environment variables take precedence over file values.
    """

    service: ServiceConfig = Field(default_factory=ServiceConfig)
    stream: StreamConfig = Field(default_factory=StreamConfig)
    stats: StatsConfig = Field(default_factory=StatsConfig)
    server: ServerConfig = Field(default_factory=ServerConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


# =============================================================================
# Configuration Loading
# =============================================================================

def load_config(config_path: Optional[str] = None) -> Settings:
    """
    Load configuration from YAML file and environment variables.

    Priority (highest to lowest):
        1. Environment variables
        2. YAML config file
        3. Default values

    Args:
        config_path: Path to config.yaml. If None, searches common locations.

    Returns:
        Settings: Loaded configuration
    """
    if config_path is None:
        search_paths = [
            Path("config.yaml"),
            Path("config.yml"),
            Path(__file__).parent.parent.parent / "config.yaml",
        ]
        for path in search_paths:
            if path.exists():
                config_path = str(path)
                break

    config_data = {}
    if config_path and Path(config_path).exists():
        logger.info(f"Loading config from: {config_path}")
        with open(config_path, "r") as f:
            config_data = yaml.safe_load(f) or {}
    else:
        logger.warning("No config file found, using defaults and environment variables")

    _apply_env_overrides(config_data)

    return Settings.model_validate(config_data)


def _apply_env_overrides(config_data: dict) -> None:
    """Apply environment variable overrides to config data."""

    # Stream settings
    if env_url := os.environ.get("REPLAY_STATS_STREAM_URL"):
        config_data.setdefault("stream", {})["url"] = env_url
    if env_enabled := os.environ.get("REPLAY_STATS_STREAM_ENABLED"):
        config_data.setdefault("stream", {})["enabled"] = env_enabled.lower() in ("1", "true", "yes")
    if env_backoff := os.environ.get("REPLAY_STATS_RECONNECT_BACKOFF_MS"):
        config_data.setdefault("stream", {})["reconnect_backoff_ms"] = int(env_backoff)

    # Stat computers
    if env_computers := os.environ.get("REPLAY_STATS_COMPUTERS"):
        config_data.setdefault("stats", {})["computers"] = [
            name.strip() for name in env_computers.split(",") if name.strip()
        ]

    # Server settings (Cloud Run uses PORT env var)
    if env_port := os.environ.get("PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)
    elif env_port := os.environ.get("REPLAY_STATS_PORT"):
        config_data.setdefault("server", {})["port"] = int(env_port)

    # Logging settings
    if env_log := os.environ.get("REPLAY_STATS_LOG_LEVEL"):
        config_data.setdefault("logging", {})["level"] = env_log


def setup_logging(settings: Settings) -> None:
    """Configure logging based on settings."""
    log_level = getattr(logging, settings.logging.level.upper(), logging.INFO)

    if settings.logging.format == "json":
        log_format = '{"time": "%(asctime)s", "level": "%(levelname)s", "module": "%(name)s", "message": "%(message)s"}'
    else:
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    logging.basicConfig(
        level=log_level,
        format=log_format,
        datefmt="%Y-%m-%dT%H:%M:%S",
    )


# =============================================================================
# Global Settings Instance
# =============================================================================

# Global settings instance - loaded on import
settings = load_config()
setup_logging(settings)
