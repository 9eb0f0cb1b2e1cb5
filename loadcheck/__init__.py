"""loadcheck - request building and response validation for HTTP load tests."""

from loadcheck.models import FieldValidationResult, ResponseSnapshot, ValidationResult
from loadcheck.request_builder import (
    InvalidEndpoint,
    InvalidHeaderKey,
    InvalidHeaderValue,
    InvalidMethod,
    RequestBuilder,
    RequestBuilderError,
    SerializationError,
)

__version__ = "0.1.0"

__all__ = [
    "FieldValidationResult",
    "InvalidEndpoint",
    "InvalidHeaderKey",
    "InvalidHeaderValue",
    "InvalidMethod",
    "RequestBuilder",
    "RequestBuilderError",
    "ResponseSnapshot",
    "SerializationError",
    "ValidationResult",
    "__version__",
]
