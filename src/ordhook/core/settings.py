"""
Centralized configuration management using Pydantic Settings.

Configuration is read once at startup from environment variables, an
optional .env file or a YAML/JSON config file, and the resulting
``Settings`` object is handed to the components that need it.
"""

import json
from pathlib import Path
from typing import Optional

import yaml
from pydantic import Field, field_validator
from pydantic.types import SecretStr
from pydantic_settings import BaseSettings

from ordhook.exceptions import ConfigurationException


class WebhookSettings(BaseSettings):
    """Webhook server configuration."""

    # Server settings
    host: str = Field("0.0.0.0", description="Webhook server host")
    port: int = Field(3010, description="Webhook server port")
    path: str = Field("/webhook", description="Route the webhook is served on")

    # Authentication
    secret_key: Optional[SecretStr] = Field(None, description="Shared HMAC signing secret")
    signature_header: str = Field("ordinals-sig", description="Header carrying the signature")

    # Shutdown
    shutdown_grace_seconds: float = Field(
        30.0, description="Time in-flight pipelines get to finish on shutdown"
    )

    class Config:
        env_prefix = "ORDHOOK_WEBHOOK_"
        extra = "ignore"

    @field_validator("path")
    @classmethod
    def validate_path(cls, v):
        """Routes must be absolute."""
        if not v.startswith("/"):
            return "/" + v
        return v


class WalletSettings(BaseSettings):
    """ord wallet invocation settings."""

    ord_binary: str = Field("~/bin/ord", description="Path to the ord executable")
    wallet_name: str = Field("ilyaFriends", description="Wallet passed via --wallet")
    command_timeout_seconds: Optional[float] = Field(
        None, description="Kill a wallet command after this long (unbounded if unset)"
    )

    class Config:
        env_prefix = "ORDHOOK_WALLET_"
        extra = "ignore"


class DownloadSettings(BaseSettings):
    """Settings for fetching the files to inscribe."""

    download_dir: Path = Field(Path("image-folder"), description="Where downloads are stored")
    chunk_size: int = Field(64 * 1024, description="Streaming chunk size in bytes")
    timeout_seconds: Optional[float] = Field(
        None, description="HTTP timeout for downloads (unbounded if unset)"
    )
    follow_redirects: bool = Field(True, description="Follow HTTP redirects")

    class Config:
        env_prefix = "ORDHOOK_DOWNLOAD_"
        extra = "ignore"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    # Log levels
    log_level: str = Field("INFO", description="Default log level")
    console_log_level: str = Field("INFO", description="Console log level")
    file_log_level: str = Field("DEBUG", description="File log level")

    # Log format
    log_format: str = Field("text", description="Log format: text, structured, json")
    log_dir: Optional[Path] = Field(None, description="Log directory (no file logging if unset)")
    log_file_name: str = Field("ordhook.log", description="Log file name")

    # Log rotation
    max_log_size_mb: int = Field(100, description="Max log file size in MB")
    backup_count: int = Field(5, description="Number of backup files to keep")

    class Config:
        env_prefix = "ORDHOOK_LOG_"
        extra = "ignore"


class Settings(BaseSettings):
    """Main settings class combining all configuration sections."""

    debug: bool = Field(False, description="Debug mode")

    # Sub-configurations
    webhook: WebhookSettings = Field(default_factory=WebhookSettings)
    wallet: WalletSettings = Field(default_factory=WalletSettings)
    download: DownloadSettings = Field(default_factory=DownloadSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        env_prefix = "ORDHOOK_"
        extra = "ignore"  # Ignore extra environment variables

    @classmethod
    def from_file(cls, file_path: Path) -> "Settings":
        """Load settings from a YAML or JSON file."""
        if file_path.suffix in [".yaml", ".yml"]:
            with open(file_path, "r") as f:
                data = yaml.safe_load(f) or {}
        elif file_path.suffix == ".json":
            with open(file_path, "r") as f:
                data = json.load(f)
        else:
            raise ConfigurationException(f"Unsupported config file format: {file_path.suffix}")

        if not isinstance(data, dict):
            raise ConfigurationException(f"Config file {file_path} must contain a mapping")

        return cls(**data)


def load_settings(file_path: Optional[Path] = None) -> Settings:
    """Load settings from file or environment."""
    if file_path:
        return Settings.from_file(file_path)

    # Check for config file in standard locations
    config_locations = [
        Path(".ordhook.yaml"),
        Path(".ordhook.yml"),
        Path("config/ordhook.yaml"),
        Path("config/ordhook.yml"),
    ]

    for config_path in config_locations:
        if config_path.exists():
            return Settings.from_file(config_path)

    # No config file found, use defaults and env vars
    return Settings()
