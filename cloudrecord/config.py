"""Configuration loading for cloudrecord."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class ServerConfig:
    app_id: str = ""
    app_key: str = ""
    server_url: str = "https://api.leancloud.cn"
    api_version: str = "1.1"

    @property
    def base_url(self) -> str:
        return f"{self.server_url.rstrip('/')}/{self.api_version}"


@dataclass
class ClientConfig:
    """Settings for the HTTP client that flushes records."""

    timeout: float = 30.0
    max_retries: int = 3
    retry_backoff_seconds: float = 1.0


@dataclass
class LoggingConfig:
    level: str = "info"  # "warning", "info" or "debug"
    json: bool = False


@dataclass
class Config:
    server: ServerConfig = field(default_factory=ServerConfig)
    client: ClientConfig = field(default_factory=ClientConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _get_env(key: str, default: Any = None) -> Any:
    """Get environment variable with CLOUDRECORD_ prefix."""
    return os.environ.get(f"CLOUDRECORD_{key}", default)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides to config."""
    # Server overrides
    if app_id := _get_env("APP_ID"):
        config.server.app_id = app_id
    if app_key := _get_env("APP_KEY"):
        config.server.app_key = app_key
    if server_url := _get_env("SERVER_URL"):
        config.server.server_url = server_url

    # Client overrides
    if timeout := _get_env("TIMEOUT"):
        config.client.timeout = float(timeout)
    if max_retries := _get_env("MAX_RETRIES"):
        config.client.max_retries = int(max_retries)

    # Logging overrides
    if level := _get_env("LOG_LEVEL"):
        config.logging.level = level.lower()
    if json_logs := _get_env("LOG_JSON"):
        config.logging.json = json_logs.lower() in ("true", "1", "yes")

    return config


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file with environment variable overrides.

    Args:
        config_path: Path to YAML config file. If None, uses default config.

    Returns:
        Loaded Config object.
    """
    config = Config()

    if config_path:
        path = Path(config_path)
        if path.exists():
            with open(path) as f:
                data = yaml.safe_load(f) or {}

            # Parse server config
            if "server" in data:
                server_data = data["server"]
                config.server = ServerConfig(
                    app_id=server_data.get("app_id", config.server.app_id),
                    app_key=server_data.get("app_key", config.server.app_key),
                    server_url=server_data.get("server_url", config.server.server_url),
                    api_version=str(
                        server_data.get("api_version", config.server.api_version)
                    ),
                )

            # Parse client config
            if "client" in data:
                client_data = data["client"]
                config.client = ClientConfig(
                    timeout=client_data.get("timeout", config.client.timeout),
                    max_retries=client_data.get(
                        "max_retries", config.client.max_retries
                    ),
                    retry_backoff_seconds=client_data.get(
                        "retry_backoff_seconds", config.client.retry_backoff_seconds
                    ),
                )

            # Parse logging config
            if "logging" in data:
                logging_data = data["logging"]
                config.logging = LoggingConfig(
                    level=logging_data.get("level", config.logging.level),
                    json=logging_data.get("json", config.logging.json),
                )

    return _apply_env_overrides(config)
