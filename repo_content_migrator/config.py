"""Configuration loading from environment variables and CLI overrides."""

import os
from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

# Config field -> environment variable
REQUIRED_SETTINGS = {
    "github_token": "GITHUB_TOKEN",
    "source_owner": "SOURCE_OWNER",
    "source_repo": "SOURCE_REPO",
    "target_owner": "TARGET_OWNER",
    "target_repo": "TARGET_REPO",
}

# Config field -> (environment variable, default, minimum)
NUMERIC_SETTINGS = {
    "batch_size": ("MIGRATION_BATCH_SIZE", 50, 1),
    "delay_ms": ("MIGRATION_DELAY_MS", 1000, 0),
    "max_requests_per_hour": ("RATE_LIMIT_PER_HOUR", 5000, 1),
    "min_delay_ms": ("RATE_LIMIT_MIN_DELAY_MS", 100, 0),
}


class ConfigurationError(Exception):
    """Raised when required settings are missing or invalid."""

    def __init__(self, message: str, missing: Optional[List[str]] = None):
        super().__init__(message)
        self.missing = missing or []


@dataclass(frozen=True)
class MigrationConfig:
    """Settings for one repository content migration."""
    github_token: str
    source_owner: str
    source_repo: str
    target_owner: str
    target_repo: str
    batch_size: int = 50
    delay_ms: int = 1000
    max_requests_per_hour: int = 5000
    min_delay_ms: int = 100
    log_level: str = "INFO"

    @property
    def source(self) -> str:
        return f"{self.source_owner}/{self.source_repo}"

    @property
    def target(self) -> str:
        return f"{self.target_owner}/{self.target_repo}"


def _resolve(overrides: Mapping[str, Any], environ: Mapping[str, str],
             key: str, env_key: str) -> Optional[Any]:
    """Pick a value with precedence: CLI > ENV. Blank strings count as unset."""
    for value in (overrides.get(key), environ.get(env_key)):
        if value is None:
            continue
        if isinstance(value, str):
            value = value.strip()
            if value == "":
                continue
        return value
    return None


def load_config(environ: Optional[Mapping[str, str]] = None,
                overrides: Optional[Mapping[str, Any]] = None) -> MigrationConfig:
    """Build a MigrationConfig from the environment, applying CLI overrides."""
    environ = os.environ if environ is None else environ
    overrides = overrides or {}
    values: Dict[str, Any] = {}

    missing = []
    for key, env_key in REQUIRED_SETTINGS.items():
        value = _resolve(overrides, environ, key, env_key)
        if value is None:
            missing.append(env_key)
        else:
            values[key] = value

    if missing:
        raise ConfigurationError(
            f"Missing required configuration: {', '.join(missing)}",
            missing=missing
        )

    for key, (env_key, default, minimum) in NUMERIC_SETTINGS.items():
        value = _resolve(overrides, environ, key, env_key)
        if value is None:
            values[key] = default
            continue
        try:
            number = int(value)
        except (TypeError, ValueError):
            raise ConfigurationError(f"{env_key} must be an integer, got {value!r}")
        if number < minimum:
            raise ConfigurationError(f"{env_key} must be at least {minimum}, got {number}")
        values[key] = number

    log_level = str(_resolve(overrides, environ, "log_level", "LOG_LEVEL") or "INFO").upper()
    if log_level not in LOG_LEVELS:
        raise ConfigurationError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}, got {log_level!r}")
    values["log_level"] = log_level

    return MigrationConfig(**values)
