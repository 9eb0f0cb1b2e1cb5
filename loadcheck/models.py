"""Data models for loadcheck.

All models use Pydantic v2. Validation results are frozen value objects:
they are built once per check and never mutated afterwards.
"""

from __future__ import annotations

import re
from enum import Enum
from typing import Any, Self

import httpx
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from loadcheck.constants import DEFAULT_REQUEST_TIMEOUT_MS, DEFAULT_THRESHOLDS


# Accepted threshold expressions: p(95)<500, rate<0.01, count>10
_THRESHOLD_PATTERNS = (
    re.compile(r"^p\(\d+(\.\d+)?\)\s*<\s*\d+(\.\d+)?$"),
    re.compile(r"^rate\s*<\s*\d*\.?\d+$"),
    re.compile(r"^count\s*[<>=]\s*\d+$"),
)


def parse_absolute_url(value: Any) -> httpx.URL | None:
    """Parse value as an absolute URL (scheme and host present).

    Returns:
        The parsed URL, or None if value is not a string, does not parse,
        or is relative.
    """
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        url = httpx.URL(value)
    except (httpx.InvalidURL, TypeError, ValueError):
        return None
    if not url.is_absolute_url:
        return None
    return url


def is_threshold_expression(expression: str) -> bool:
    """True if expression uses one of the accepted threshold forms."""
    if not isinstance(expression, str):
        return False
    stripped = expression.strip()
    return any(pattern.match(stripped) for pattern in _THRESHOLD_PATTERNS)


# =============================================================================
# Validation Results
# =============================================================================


class ValidationResult(BaseModel):
    """Outcome of a composite validation.

    valid is True iff every checked condition held. details enumerates why
    a check failed (missing fields, mismatched types, error strings).
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    valid: bool = Field(description="Whether every checked condition held")
    message: str | None = Field(default=None, description="Human-readable summary")
    details: dict[str, Any] | None = Field(
        default=None, description="Structured reasons for the outcome"
    )


class FieldValidationResult(BaseModel):
    """Outcome of a required-field presence check."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    valid: bool = Field(description="True iff no field is missing")
    missing: list[str] = Field(
        default_factory=list, description="Missing field names, in request order"
    )


class FieldTypeMismatch(BaseModel):
    """A field whose runtime type did not match the expected type name."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    field: str = Field(description="Field name")
    expected: str = Field(description="Expected type name")
    actual: str = Field(description="Observed type name, or 'missing'")


# =============================================================================
# Response Snapshot
# =============================================================================


class ResponseSnapshot(BaseModel):
    """One HTTP response reduced to what the validators consume.

    Header keys are lowercase. Header values are arrays for repeated headers.
    """

    model_config = ConfigDict(extra="forbid")

    status_code: int = Field(description="HTTP status code")
    headers: dict[str, list[str]] = Field(
        default_factory=dict, description="Response headers (lowercase keys, array values)"
    )
    body: Any = Field(default=None, description="Body as JSON value or text if decodable")
    body_base64: str | None = Field(default=None, description="Body as base64 if binary")
    elapsed_ms: float | None = Field(default=None, description="Response time in milliseconds")

    @model_validator(mode="after")
    def check_body_exclusivity(self) -> Self:
        if self.body is not None and self.body_base64 is not None:
            raise ValueError("body and body_base64 are mutually exclusive")
        return self


# =============================================================================
# Environment Configuration
# =============================================================================


class Environment(str, Enum):
    """Deployment stages a test run can target."""

    LOCAL = "local"
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class EnvironmentConfig(BaseModel):
    """Settings for one environment: where to send requests and how to judge them."""

    model_config = ConfigDict(extra="forbid")

    name: Environment = Field(description="Environment this config belongs to")
    base_url: str = Field(description="Absolute base URL for all requests")
    timeout_ms: int = Field(
        default=DEFAULT_REQUEST_TIMEOUT_MS, gt=0, description="Request timeout in milliseconds"
    )
    retry_attempts: int = Field(default=1, ge=0, description="Retries the runtime may apply")
    log_level: str = Field(default="INFO", description="Log level name")
    enable_metrics: bool = Field(default=True, description="Whether the runtime records metrics")
    api_key: str | None = Field(default=None, description="Optional API key")
    custom_headers: dict[str, str] = Field(
        default_factory=dict, description="Extra headers for every request"
    )
    thresholds: dict[str, list[str]] = Field(
        default_factory=lambda: {k: list(v) for k, v in DEFAULT_THRESHOLDS.items()},
        description="Metric name -> threshold expressions",
    )

    @field_validator("base_url")
    @classmethod
    def validate_base_url(cls, v: str) -> str:
        if parse_absolute_url(v) is None:
            raise ValueError(f"base_url must be an absolute URL, got '{v}'")
        return v

    @field_validator("log_level")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @field_validator("thresholds")
    @classmethod
    def validate_threshold_expressions(cls, v: dict[str, list[str]]) -> dict[str, list[str]]:
        for metric, expressions in v.items():
            for expression in expressions:
                if not is_threshold_expression(expression):
                    raise ValueError(
                        f"invalid threshold '{expression}' for metric '{metric}'"
                    )
        return v
