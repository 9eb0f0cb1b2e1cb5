"""Environment configuration - Selects the target environment and its settings.

Built-in presets cover local, development, staging and production. The
ENVIRONMENT, BASE_URL and LOG_LEVEL environment variables select and
override them; a YAML file can override any field, with ${ENV_VAR}
substitution.
"""

from __future__ import annotations

import os
import re
from pathlib import Path
from typing import Any, Iterable, Mapping

import yaml
from pydantic import ValidationError

from loadcheck.constants import ENV_BASE_URL, ENV_ENVIRONMENT, ENV_LOG_LEVEL
from loadcheck.models import (
    Environment,
    EnvironmentConfig,
    is_threshold_expression,
    parse_absolute_url,
)

__all__ = [
    "ConfigError",
    "Environment",
    "EnvironmentConfig",
    "PRESETS",
    "get_base_url",
    "get_current_environment",
    "get_environment_config",
    "is_development",
    "is_production",
    "is_valid_environment",
    "load_environment_config",
    "validate_thresholds",
    "validate_url",
]


class ConfigError(Exception):
    """Raised when configuration loading fails."""


PRESETS: dict[Environment, EnvironmentConfig] = {
    Environment.LOCAL: EnvironmentConfig(
        name=Environment.LOCAL,
        base_url="http://localhost:3000",
        retry_attempts=1,
        log_level="DEBUG",
    ),
    Environment.DEVELOPMENT: EnvironmentConfig(
        name=Environment.DEVELOPMENT,
        base_url="https://dev-api.example.com",
        retry_attempts=2,
        log_level="DEBUG",
    ),
    Environment.STAGING: EnvironmentConfig(
        name=Environment.STAGING,
        base_url="https://staging-api.example.com",
        retry_attempts=3,
        log_level="INFO",
    ),
    Environment.PRODUCTION: EnvironmentConfig(
        name=Environment.PRODUCTION,
        base_url="https://api.example.com",
        retry_attempts=3,
        log_level="WARN",
    ),
}


def validate_url(value: Any) -> bool:
    """True if value is an absolute URL."""
    return parse_absolute_url(value) is not None


def validate_thresholds(expressions: Iterable[str]) -> bool:
    """True if every expression is p(N)<M, rate<F or count[<>=]N."""
    return all(is_threshold_expression(expression) for expression in expressions)


def is_valid_environment(name: str) -> bool:
    return name in {env.value for env in Environment}


def get_current_environment(environ: Mapping[str, str] | None = None) -> Environment:
    """Read the ENVIRONMENT variable. Defaults to development when unset or empty."""
    env = os.environ if environ is None else environ
    name = env.get(ENV_ENVIRONMENT) or Environment.DEVELOPMENT.value
    if not is_valid_environment(name):
        valid = ", ".join(e.value for e in Environment)
        raise ConfigError(f"Unknown environment '{name}'. Valid options: {valid}")
    return Environment(name)


def get_environment_config(
    env: Environment | str | None = None,
    environ: Mapping[str, str] | None = None,
) -> EnvironmentConfig:
    """Get the configuration for env (or the current environment).

    BASE_URL and LOG_LEVEL override the preset. Returns a new object;
    PRESETS are never modified.
    """
    environ = os.environ if environ is None else environ

    if env is None:
        env = get_current_environment(environ)
    elif not isinstance(env, Environment):
        if not is_valid_environment(env):
            raise ConfigError(f"Unknown environment '{env}'")
        env = Environment(env)

    overrides: dict[str, Any] = {}
    if environ.get(ENV_BASE_URL):
        overrides["base_url"] = environ[ENV_BASE_URL]
    if environ.get(ENV_LOG_LEVEL):
        overrides["log_level"] = environ[ENV_LOG_LEVEL]

    return _apply_overrides(PRESETS[env], overrides)


def get_base_url(environ: Mapping[str, str] | None = None) -> str:
    return get_environment_config(environ=environ).base_url


def is_production(environ: Mapping[str, str] | None = None) -> bool:
    return get_current_environment(environ) == Environment.PRODUCTION


def is_development(environ: Mapping[str, str] | None = None) -> bool:
    return get_current_environment(environ) == Environment.DEVELOPMENT


def load_environment_config(
    config_path: Path,
    environ: Mapping[str, str] | None = None,
) -> EnvironmentConfig:
    """Load an environment config from YAML with ${ENV_VAR} substitution.

    The file names its base preset under "environment" (default: the current
    environment). Every other top-level key overrides that preset's field.

    Example:
        environment: staging
        base_url: ${STAGING_URL}
        custom_headers:
          X-Api-Key: ${API_KEY}
    """
    environ = os.environ if environ is None else environ

    if not config_path.exists():
        raise ConfigError(f"Config file not found: {config_path}")

    try:
        with open(config_path, "r", encoding="utf-8") as f:
            raw_config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in config file: {e}") from e

    if raw_config is None:
        raw_config = {}
    if not isinstance(raw_config, dict):
        raise ConfigError("Config file must be a YAML mapping")

    raw_config = _substitute_env_vars(raw_config, environ)

    env_name = raw_config.pop("environment", None)
    if env_name is None:
        env = get_current_environment(environ)
    elif is_valid_environment(env_name):
        env = Environment(env_name)
    else:
        raise ConfigError(f"Unknown environment '{env_name}' in {config_path}")

    if "name" in raw_config:
        raise ConfigError("Use 'environment' rather than 'name' to select the preset")

    return _apply_overrides(PRESETS[env], raw_config)


def _apply_overrides(base: EnvironmentConfig, overrides: dict[str, Any]) -> EnvironmentConfig:
    """Merge overrides over base and re-validate."""
    merged = base.model_dump()
    merged.update(overrides)
    try:
        return EnvironmentConfig.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(f"Invalid config structure: {e}") from e


def _substitute_env_vars(data: Any, environ: Mapping[str, str]) -> Any:
    """Recursively substitute ${ENV_VAR} patterns in strings within data."""
    if isinstance(data, str):
        return _substitute_string(data, environ)
    elif isinstance(data, dict):
        return {k: _substitute_env_vars(v, environ) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars(item, environ) for item in data]
    return data


_ENV_VAR_PATTERN = re.compile(r"\$\{([^}]+)\}")


def _substitute_string(s: str, environ: Mapping[str, str]) -> str:
    """Substitute ${ENV_VAR} patterns. Raises ConfigError if env var is not set."""

    def replacer(match: re.Match) -> str:
        var_name = match.group(1)
        value = environ.get(var_name)
        if value is None:
            raise ConfigError(f"Environment variable '{var_name}' is not set")
        return value

    return _ENV_VAR_PATTERN.sub(replacer, s)
