"""Confluent Cloud configuration management."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from confluent_ops.integrations.confluent.exceptions import ConfigError

DEFAULT_API_URL = "https://confluent.cloud"


class ConfluentConfig(BaseModel):
    """Credentials and transport settings for the Confluent Cloud APIs."""

    model_config = ConfigDict(extra="forbid")

    email: str = Field(..., description="Login email")
    password: SecretStr = Field(..., description="Login password")
    api_url: str = Field(default=DEFAULT_API_URL, description="Control plane base URL")
    timeout: float = Field(default=30.0, description="Per-request timeout in seconds")
    verify_ssl: bool = True
    retry_max_attempts: int = Field(default=4, description="Attempts for mutating calls")
    retry_backoff_min: float = 1.0
    retry_backoff_max: float = 30.0
    topic_create_max_attempts: int = Field(
        default=10, description="Attempts for topic creation while a cluster warms up"
    )
    replication_factor: int = 3

    @field_validator("api_url")
    @classmethod
    def validate_api_url(cls, v: str) -> str:
        """Validate base URL format."""
        if not v.startswith(("http://", "https://")):
            raise ValueError("api_url must start with http:// or https://")
        return v.rstrip("/")

    @field_validator("timeout")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError("timeout must be positive")
        return v

    @field_validator("retry_max_attempts", "topic_create_max_attempts")
    @classmethod
    def validate_attempts(cls, v: int) -> int:
        """At least one attempt is always made."""
        if v < 1:
            raise ValueError("attempt counts must be at least 1")
        return v

    @classmethod
    def get_config_path(cls) -> Path:
        """Get the config file path.

        Returns:
            Path to the config file (~/.config/confluent-ops/config.yaml).
        """
        return Path.home() / ".config" / "confluent-ops" / "config.yaml"

    @classmethod
    def load(cls, path: Path | None = None) -> ConfluentConfig:
        """Load configuration from file and environment.

        Environment variables (CONFLUENT_EMAIL, CONFLUENT_PASSWORD,
        CONFLUENT_API_URL) take precedence over values in the YAML file.

        Args:
            path: Config file to read. Defaults to ``get_config_path()``.

        Returns:
            Loaded configuration.

        Raises:
            ConfigError: If credentials are missing or the file is invalid.
        """
        config_path = path or cls.get_config_path()
        data: dict[str, Any] = {}

        if config_path.exists():
            try:
                with config_path.open() as f:
                    data = yaml.safe_load(f) or {}
            except yaml.YAMLError as e:
                raise ConfigError("Invalid config file format", details=str(e)) from e
            if not isinstance(data, dict):
                raise ConfigError(
                    "Invalid config file format",
                    details=f"Expected a mapping in {config_path}",
                )

        if email := os.environ.get("CONFLUENT_EMAIL"):
            data["email"] = email
        if password := os.environ.get("CONFLUENT_PASSWORD"):
            data["password"] = password
        if api_url := os.environ.get("CONFLUENT_API_URL"):
            data["api_url"] = api_url

        missing = [key for key in ("email", "password") if not data.get(key)]
        if missing:
            raise ConfigError(
                "Confluent credentials not configured",
                details=(
                    f"Missing {', '.join(missing)}. Set CONFLUENT_EMAIL/CONFLUENT_PASSWORD "
                    f"or add them to {config_path}"
                ),
            )

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise ConfigError("Invalid Confluent configuration", details=str(e)) from e
