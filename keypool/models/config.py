"""
Configuration models for keypool.

Supports configuration via YAML file, environment variables, or programmatic setup.
"""

from __future__ import annotations

from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_POOL_PATH = Path.home() / ".gemini-cli-plus" / "api-keys.json"
DEFAULT_ENV_VAR = "GEMINI_API_KEY"

# Threshold rule defaults
DEFAULT_CHECK_INTERVAL = 10
DEFAULT_HIGH_USAGE_THRESHOLD = 50
DEFAULT_LOW_USAGE_THRESHOLD = 10


class PoolConfig(BaseModel):
    """Credential snapshot location and ambient environment mirroring."""

    path: str = Field(
        default=str(DEFAULT_POOL_PATH),
        description="Path of the persisted pool snapshot"
    )
    env_var: str | None = Field(
        default=DEFAULT_ENV_VAR,
        description="Environment variable mirrored with the active credential (empty = off)"
    )

    def get_path(self) -> Path:
        """Get the snapshot path with ``~`` expanded."""
        return Path(self.path).expanduser()

    def get_env_var(self) -> str | None:
        """Get the mirrored environment variable, or None when disabled."""
        return self.env_var or None


class RotationConfig(BaseModel):
    """
    Rotation policy configuration.

    The threshold rule runs every ``check_interval`` requests: the active
    credential is rotated away from once its usage reaches
    ``high_usage_threshold`` and some other credential is still below
    ``low_usage_threshold``.
    """

    check_interval: int = Field(
        default=DEFAULT_CHECK_INTERVAL,
        ge=1,
        description="Requests between threshold rule evaluations"
    )
    high_usage_threshold: int = Field(
        default=DEFAULT_HIGH_USAGE_THRESHOLD,
        ge=0,
        description="Usage at which the active credential becomes a rotation candidate"
    )
    low_usage_threshold: int = Field(
        default=DEFAULT_LOW_USAGE_THRESHOLD,
        ge=0,
        description="Usage below which another credential is an eligible target"
    )
    rotation_keywords: list[str] = Field(
        default_factory=lambda: ["quota", "rate limit"],
        description="Error message fragments that trigger an immediate rotation"
    )
    rotation_status_codes: list[int] = Field(
        default_factory=lambda: [429],
        description="HTTP status codes that trigger an immediate rotation"
    )


class LLMConfig(BaseModel):
    """Outbound LLM request configuration."""

    model: str = Field(
        default="gemini/gemini-1.5-flash",
        description="LiteLLM model string"
    )
    temperature: float = Field(
        default=0.2,
        ge=0.0,
        le=2.0,
        description="Sampling temperature (0.0-2.0)"
    )
    max_tokens: int = Field(
        default=4096,
        ge=1,
        le=128000,
        description="Maximum tokens in response"
    )
    timeout: int = Field(
        default=120,
        ge=1,
        description="Request timeout in seconds"
    )
    max_attempts: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts per request when a quota error rotates the credential"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level"
    )
    file: str | None = Field(
        default=None,
        description="Log file path (None = console only)"
    )
    json_format: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )


class KeyPoolConfig(BaseSettings):
    """
    Main keypool configuration.

    Configuration can be loaded from:
    1. YAML file (keypool.yaml or config.yaml)
    2. Environment variables (KEYPOOL_* prefix)
    3. Programmatic setup
    """

    model_config = SettingsConfigDict(
        env_prefix="KEYPOOL_",
        env_nested_delimiter="__",
        case_sensitive=False,
    )

    pool: PoolConfig = Field(default_factory=PoolConfig)
    rotation: RotationConfig = Field(default_factory=RotationConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def load(cls, config_path: str | Path | None = None) -> "KeyPoolConfig":
        """
        Load configuration from file and environment.

        Priority (highest to lowest):
        1. Environment variables
        2. Specified config file
        3. Default config files (keypool.yaml, config.yaml)
        4. Default values
        """
        config_data: dict = {}

        if config_path:
            config_file = Path(config_path)
            if config_file.exists():
                config_data = cls._load_yaml(config_file)
        else:
            for filename in ["keypool.yaml", "config.yaml", "keypool.yml", "config.yml"]:
                config_file = Path(filename)
                if config_file.exists():
                    config_data = cls._load_yaml(config_file)
                    break

        # Init kwargs take priority over env in pydantic-settings, so merge
        # the file data under whatever the environment provides.
        env_config = cls()
        merged = _deep_merge(config_data, _explicit_env_fields(env_config))
        return cls.model_validate(merged)

    @staticmethod
    def _load_yaml(path: Path) -> dict:
        """Load YAML configuration file."""
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f)
            return data if isinstance(data, dict) else {}

    def save(self, path: str | Path) -> None:
        """Save configuration to YAML file."""
        path = Path(path)
        path.parent.mkdir(parents=True, exist_ok=True)

        with open(path, "w", encoding="utf-8") as f:
            yaml.dump(
                self.model_dump(exclude_none=True),
                f,
                default_flow_style=False,
                sort_keys=False,
            )


def _explicit_env_fields(config: BaseModel) -> dict:
    """Return only the fields that were set explicitly (by the environment)."""
    result: dict = {}
    for name in config.model_fields_set:
        value = getattr(config, name)
        if isinstance(value, BaseModel):
            result[name] = _explicit_env_fields(value)
        else:
            result[name] = value
    return result


def _deep_merge(base: dict, override: dict) -> dict:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged
