"""
Configuration management with Pydantic validation.

Loads settings from YAML config file and environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings


class TokenConfig(BaseModel):
    """Token identity used when a new ledger is created."""

    name: str = "Mintable"
    minter: str = ""
    balance_bits: int = Field(default=128, ge=8, le=256)

    @field_validator("name")
    @classmethod
    def name_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("token name must not be blank")
        return value


class StorageConfig(BaseModel):
    """Data storage paths."""

    ledger_path: str = "./data/ledger"
    logs_path: str = "./logs"


class MonitoringConfig(BaseModel):
    """Monitoring configuration."""

    metrics_enabled: bool = True
    metrics_port: int = Field(default=9090, ge=1024, le=65535)
    api_host: str = "127.0.0.1"
    api_port: int = Field(default=8000, ge=1024, le=65535)
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    error_log_max_bytes: int = Field(default=5_000_000, ge=100_000, le=50_000_000)
    error_log_backup_count: int = Field(default=3, ge=1, le=20)


class Settings(BaseSettings):
    """Main application settings."""

    token: TokenConfig = Field(default_factory=TokenConfig)
    storage: StorageConfig = Field(default_factory=StorageConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "env_prefix": "MINTABLE_",
        "extra": "ignore",
        "env_nested_delimiter": "__",
        "populate_by_name": True,
    }

    def validate_for_init(self) -> list[str]:
        """Validate settings are suitable for creating a new ledger. Returns list of errors."""
        errors = []
        if not self.token.minter:
            errors.append("token.minter not set")
        return errors


_ENV_OVERRIDES = {
    "MINTABLE_MINTER": ("token", "minter"),
    "MINTABLE_LEDGER_PATH": ("storage", "ledger_path"),
    "MINTABLE_LOG_LEVEL": ("monitoring", "log_level"),
}


def load_settings(config_path: str | Path | None = None) -> Settings:
    """
    Load settings from YAML config file and environment variables.

    Priority (highest to lowest):
    1. Override variables (MINTABLE_MINTER, MINTABLE_LEDGER_PATH, MINTABLE_LOG_LEVEL)
    2. Config file values
    3. Nested environment variables (e.g. MINTABLE_TOKEN__NAME) and .env
    4. Default values
    """
    config_data = {}

    # Try to load from config file
    if config_path is None:
        config_path = os.environ.get("CONFIG_PATH", "config.yaml")

    config_file = Path(config_path)
    if config_file.exists():
        with open(config_file) as f:
            config_data = yaml.safe_load(f) or {}

    for env_name, (section, key) in _ENV_OVERRIDES.items():
        value = os.environ.get(env_name)
        if value is not None:
            config_data.setdefault(section, {})[key] = value

    # Build settings with config data as defaults
    env_path = config_file.parent / ".env"
    settings = Settings(**config_data, _env_file=env_path)

    return settings


def create_default_config(path: str | Path = "config.yaml", minter: str = "") -> None:
    """Create a default configuration file."""
    default_config = {
        "token": {
            "name": "Mintable",
            "minter": minter,
            "balance_bits": 128,
        },
        "storage": {
            "ledger_path": "./data/ledger",
            "logs_path": "./logs",
        },
        "monitoring": {
            "metrics_enabled": True,
            "metrics_port": 9090,
            "api_host": "127.0.0.1",
            "api_port": 8000,
            "log_level": "INFO",
            "error_log_max_bytes": 5000000,
            "error_log_backup_count": 3,
        },
    }

    with open(path, "w") as f:
        yaml.dump(default_config, f, default_flow_style=False, sort_keys=False)
