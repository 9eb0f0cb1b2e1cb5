"""Shared constants for loadcheck.

Status code ranges, content types, default thresholds and the diagnostic
messages used by the request builder and response validator.
"""

from __future__ import annotations

from enum import Enum, IntEnum


# =============================================================================
# HTTP Status
# =============================================================================

SUCCESS_MIN = 200
SUCCESS_MAX = 299
CLIENT_ERROR_MIN = 400
CLIENT_ERROR_MAX = 499
SERVER_ERROR_MIN = 500
SERVER_ERROR_MAX = 599


class HttpStatusCode(IntEnum):
    """Status codes that scenario scripts check for by name."""

    OK = 200
    CREATED = 201
    NO_CONTENT = 204
    BAD_REQUEST = 400
    UNAUTHORIZED = 401
    FORBIDDEN = 403
    NOT_FOUND = 404
    INTERNAL_SERVER_ERROR = 500
    BAD_GATEWAY = 502
    SERVICE_UNAVAILABLE = 503


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    PATCH = "PATCH"
    DELETE = "DELETE"
    HEAD = "HEAD"
    OPTIONS = "OPTIONS"


class ContentType(str, Enum):
    JSON = "application/json"
    XML = "application/xml"
    FORM_DATA = "multipart/form-data"
    URL_ENCODED = "application/x-www-form-urlencoded"
    TEXT = "text/plain"


# Headers every builder starts with (and returns to after clear_headers)
DEFAULT_HEADERS: dict[str, str] = {
    "Content-Type": ContentType.JSON.value,
    "Accept": ContentType.JSON.value,
}


# =============================================================================
# Performance
# =============================================================================


class PerformanceThreshold(IntEnum):
    """Response time presets in milliseconds."""

    FAST = 100
    NORMAL = 500
    SLOW = 1000
    VERY_SLOW = 2000


DEFAULT_THRESHOLDS: dict[str, list[str]] = {
    "http_req_duration": ["p(95)<500", "p(99)<1000"],
    "http_req_failed": ["rate<0.01"],
}

DEFAULT_REQUEST_TIMEOUT_MS = 30000


# =============================================================================
# Messages
# =============================================================================

MSG_INVALID_URL = "Invalid URL format provided"
MSG_INVALID_STATUS_CODE = "Invalid HTTP status code"
MSG_MISSING_REQUIRED_FIELD = "Required field is missing"
MSG_INVALID_JSON = "Invalid JSON format"
MSG_THRESHOLD_EXCEEDED = "Performance threshold exceeded"
MSG_EMPTY_RESPONSE = "Response body is empty"

MSG_FIELDS_VALID = "All required fields present and valid"
MSG_SCHEMA_PASSED = "Schema validation passed"
MSG_SCHEMA_FAILED = "Schema validation failed"
MSG_RESPONSE_PASSED = "Response validation passed"
MSG_RESPONSE_FAILED = "Response validation failed"


# =============================================================================
# Environment Variables
# =============================================================================

ENV_BASE_URL = "BASE_URL"
ENV_ENVIRONMENT = "ENVIRONMENT"
ENV_LOG_LEVEL = "LOG_LEVEL"
