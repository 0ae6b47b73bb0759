"""Configuration support for ipam-firewall-sync."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field, field_validator

from ipam_firewall_sync.models.integrator import SyncPriority


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = Field(default="INFO", description="Log level")
    structured: bool = Field(default=True, description="Append context fields to log lines")
    file: str | None = Field(default=None, description="Rotating log file path")


class SyncConfig(BaseModel):
    """Main configuration for ipam-firewall-sync."""

    ssi_name: str = Field(default="SSI_NAME_MISSING", description="Service name used in the User-Agent")
    priority: SyncPriority = Field(default=SyncPriority.LOW, description="Default sync priority")
    request_timeout: float = Field(default=10.0, description="Per-request timeout in seconds")

    nam_url: str | None = Field(default=None, description="NAM directory API base URL")
    nam_token: str | None = Field(default=None, description="NAM directory API token")
    test_integrator: str | None = Field(
        default=None, description="Integrator id processed alone in development mode"
    )

    environment: str = Field(default="production", description="Runtime environment")
    managed_comment: str = Field(
        default="Managed by NAM", description="Comment/description set on managed groups"
    )

    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("request_timeout")
    @classmethod
    def _positive_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout must be positive")
        return value

    @property
    def dev_mode(self) -> bool:
        """Whether the service runs in development mode."""
        return self.environment.lower() == "development"

    @property
    def verify_tls(self) -> bool:
        """TLS certificates are verified everywhere except development."""
        return not self.dev_mode

    @property
    def diagnostic_mode(self) -> bool:
        """Process only the designated test integrator."""
        return self.dev_mode and bool(self.test_integrator)

    @property
    def user_agent(self) -> str:
        from ipam_firewall_sync import __version__

        return f"{self.ssi_name}/{__version__}"


# Environment variable -> (config key, converter)
ENV_OVERRIDES: dict[str, tuple[str, Any]] = {
    "SSI_NAME": ("ssi_name", str),
    "SSI_PRIORITY": ("priority", str),
    "REQUEST_TIMEOUT": ("request_timeout", lambda v: int(v) / 1000),
    "NAM_URL": ("nam_url", str),
    "NAM_TOKEN": ("nam_token", str),
    "NAM_TEST_INT": ("test_integrator", str),
    "SSI_ENV": ("environment", str),
}


def _read_yaml(path: Path) -> dict[str, Any]:
    try:
        data = yaml.safe_load(path.read_text())
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in config file {path}: {e}")
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides(environ: dict[str, str]) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for env_name, (key, convert) in ENV_OVERRIDES.items():
        value = environ.get(env_name)
        if value:
            try:
                overrides[key] = convert(value)
            except ValueError as e:
                raise ValueError(f"Invalid value for {env_name}: {value!r}") from e

    logging_overrides = {}
    if environ.get("LOG_LEVEL"):
        logging_overrides["level"] = environ["LOG_LEVEL"]
    if environ.get("LOG_FILE"):
        logging_overrides["file"] = environ["LOG_FILE"]
    if logging_overrides:
        overrides["logging"] = logging_overrides
    return overrides


def _merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def load_config(
    config_path: Path | str | None = None,
    secrets_path: Path | str | None = None,
    environ: dict[str, str] | None = None,
) -> SyncConfig:
    """Load configuration from YAML files and the environment.

    Files named by CONFIG_PATH and SECRETS_PATH are used when no explicit
    paths are given. Secrets are merged over the config file, and
    environment variables take precedence over both.

    Args:
        config_path: Path to the YAML config file
        secrets_path: Path to the YAML secrets file
        environ: Environment mapping (defaults to os.environ)

    Returns:
        Loaded configuration
    """
    environ = dict(os.environ) if environ is None else environ
    config_path = config_path or environ.get("CONFIG_PATH")
    secrets_path = secrets_path or environ.get("SECRETS_PATH")

    data: dict[str, Any] = {}
    for candidate in (config_path, secrets_path):
        if candidate is None:
            continue
        path = Path(candidate)
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {candidate}")
        data = _merge(data, _read_yaml(path))

    data = _merge(data, _env_overrides(environ))
    return SyncConfig.model_validate(data)


# Global config instance
_config: SyncConfig | None = None


def get_config() -> SyncConfig:
    """Get the global configuration instance.

    Loads from files and environment on first call.

    Returns:
        Global configuration
    """
    global _config
    if _config is None:
        _config = load_config()
    return _config


def set_config(config: SyncConfig | None) -> None:
    """Set (or reset with None) the global configuration instance.

    Args:
        config: Configuration to set
    """
    global _config
    _config = config
