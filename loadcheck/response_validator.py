"""Response Validator - Checks HTTP outcomes against expectations.

Every function here is pure and never raises on well-typed input. A failed
check is an ordinary result (False or ValidationResult(valid=False)), with a
diagnostic written to the module logger so the failing field or threshold
can be root-caused from the run log.

Usage:
    snapshot = snapshot_response(http_response, elapsed_ms=elapsed)
    result = validate_snapshot(snapshot, required_fields=["id", "title"])
    if not result.valid:
        for error in result.details["errors"]:
            ...
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Iterable, Mapping, Sequence, Sized

import httpx
from jsonschema import SchemaError, ValidationError
from jsonschema.validators import Draft202012Validator, validator_for

from loadcheck.constants import (
    CLIENT_ERROR_MAX,
    CLIENT_ERROR_MIN,
    MSG_EMPTY_RESPONSE,
    MSG_FIELDS_VALID,
    MSG_INVALID_JSON,
    MSG_MISSING_REQUIRED_FIELD,
    MSG_RESPONSE_FAILED,
    MSG_RESPONSE_PASSED,
    MSG_SCHEMA_FAILED,
    MSG_SCHEMA_PASSED,
    MSG_THRESHOLD_EXCEEDED,
    SERVER_ERROR_MAX,
    SERVER_ERROR_MIN,
    SUCCESS_MAX,
    SUCCESS_MIN,
)
from loadcheck.models import (
    FieldTypeMismatch,
    FieldValidationResult,
    ResponseSnapshot,
    ValidationResult,
)

logger = logging.getLogger(__name__)


class _Missing:
    """Sentinel for "no value", distinct from a parsed JSON null."""

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()


# =============================================================================
# Status Classification
# =============================================================================


def _is_status_in(status_code: Any, low: int, high: int) -> bool:
    if isinstance(status_code, bool) or not isinstance(status_code, int):
        return False
    return low <= status_code <= high


def is_successful(status_code: int) -> bool:
    """True for 2xx status codes."""
    return _is_status_in(status_code, SUCCESS_MIN, SUCCESS_MAX)


def is_client_error(status_code: int) -> bool:
    """True for 4xx status codes."""
    return _is_status_in(status_code, CLIENT_ERROR_MIN, CLIENT_ERROR_MAX)


def is_server_error(status_code: int) -> bool:
    """True for 5xx status codes."""
    return _is_status_in(status_code, SERVER_ERROR_MIN, SERVER_ERROR_MAX)


def has_expected_status(status_code: int, expected: int) -> bool:
    return status_code == expected


# =============================================================================
# Body and JSON
# =============================================================================


def _reject_constant(name: str) -> Any:
    # NaN, Infinity and -Infinity are not JSON
    raise ValueError(f"invalid JSON constant: {name}")


def is_valid_json(text: str | bytes | None) -> bool:
    """True if text is non-blank and parses as strict JSON."""
    if not isinstance(text, (str, bytes, bytearray)) or not text.strip():
        logger.warning(MSG_EMPTY_RESPONSE)
        return False

    try:
        json.loads(text, parse_constant=_reject_constant)
    except (ValueError, RecursionError) as e:
        logger.warning("%s: %s", MSG_INVALID_JSON, e)
        return False
    return True


def parse_json_safely(text: str | bytes | None) -> Any:
    """Parse JSON, returning MISSING instead of raising on failure.

    A literal "null" parses to None, which is why failure uses a sentinel.
    """
    try:
        return json.loads(text, parse_constant=_reject_constant)
    except (ValueError, TypeError, RecursionError) as e:
        logger.error("Failed to parse JSON: %s", e)
        return MISSING


def has_response_body(body: Any) -> bool:
    """False for None, blank text, and empty containers."""
    if body is None:
        return False
    if isinstance(body, (str, bytes, bytearray)):
        return bool(body.strip())
    if isinstance(body, Sized):
        return len(body) > 0
    return True


# =============================================================================
# Fields and Schema
# =============================================================================


def has_required_fields(body: Any, field_names: Sequence[str]) -> FieldValidationResult:
    """Check that every field name is a key of body.

    A body that is not a mapping reports every field as missing.
    """
    if not isinstance(body, Mapping):
        logger.warning("%s: body is %s, not an object", MSG_INVALID_JSON, json_type_name(body))
        return FieldValidationResult(valid=False, missing=list(field_names))

    missing = [name for name in field_names if name not in body]
    if missing:
        logger.warning("%s: %s", MSG_MISSING_REQUIRED_FIELD, ", ".join(missing))

    return FieldValidationResult(valid=not missing, missing=missing)


# Deprecated alias kept for older scenario scripts
has_request_fields = has_required_fields


def validate_required_fields(body: Any, field_names: Sequence[str]) -> ValidationResult:
    """Stricter presence check: a field whose value is None also fails.

    details separates absent keys ("missing_fields") from keys present with a
    None value ("null_fields").
    """
    if not isinstance(body, Mapping):
        return ValidationResult(
            valid=False,
            message=MSG_INVALID_JSON,
            details={"expected_fields": list(field_names)},
        )

    missing_fields: list[str] = []
    null_fields: list[str] = []
    for name in field_names:
        if name not in body:
            missing_fields.append(name)
        elif body[name] is None:
            null_fields.append(name)

    valid = not missing_fields and not null_fields
    return ValidationResult(
        valid=valid,
        message=MSG_FIELDS_VALID if valid else MSG_MISSING_REQUIRED_FIELD,
        details={"missing_fields": missing_fields, "null_fields": null_fields},
    )


def json_type_name(value: Any) -> str:
    """Name the JSON type of a decoded value.

    Lists and tuples are "array", never "object". Values outside the JSON
    data model report their Python type name.
    """
    if value is None:
        return "null"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, (list, tuple)):
        return "array"
    if isinstance(value, Mapping):
        return "object"
    return type(value).__name__


def _type_mismatch(body: Any, field: str, expected_type: str) -> FieldTypeMismatch | None:
    if not isinstance(body, Mapping) or field not in body:
        return FieldTypeMismatch(field=field, expected=expected_type, actual="missing")

    actual = json_type_name(body[field])
    if actual != expected_type:
        return FieldTypeMismatch(field=field, expected=expected_type, actual=actual)
    return None


def has_expected_type(body: Any, field: str, expected_type: str) -> bool:
    """True if body[field] exists and its JSON type name equals expected_type."""
    mismatch = _type_mismatch(body, field, expected_type)
    if mismatch is None:
        return True

    if mismatch.actual == "missing":
        logger.warning("Field '%s' not found in response", field)
    else:
        logger.warning(
            "Type mismatch for field '%s': expected %s, got %s",
            field, mismatch.expected, mismatch.actual,
        )
    return False


def validate_schema(body: Any, schema: Mapping[str, str]) -> ValidationResult:
    """Check every (field, expected type name) pair in schema.

    details["errors"] has one line per failing field; details["mismatches"]
    has the expected and actual type for each.
    """
    errors: list[str] = []
    mismatches: list[dict[str, str]] = []

    for field, expected_type in schema.items():
        if not has_expected_type(body, field, expected_type):
            errors.append(f"Field '{field}' validation failed")
            mismatch = _type_mismatch(body, field, expected_type)
            mismatches.append(mismatch.model_dump())

    return ValidationResult(
        valid=not errors,
        message=MSG_SCHEMA_PASSED if not errors else MSG_SCHEMA_FAILED,
        details={"errors": errors, "mismatches": mismatches},
    )


def _error_path_to_jsonpath(path: Iterable[Any]) -> str:
    """Convert a jsonschema error path to JSONPath (e.g., "$.data.items[0].id")."""
    parts = ["$"]
    for segment in path:
        if isinstance(segment, int):
            parts.append(f"[{segment}]")
        else:
            parts.append(f".{segment}")
    return "".join(parts)


def _classify_validation_error(error: ValidationError) -> str:
    validator = error.validator

    if validator == "additionalProperties":
        return "extra_field"
    elif validator == "type":
        return "wrong_type"
    elif validator == "required":
        return "missing_required"
    elif validator == "enum":
        return "invalid_enum"
    elif validator in ("minimum", "maximum", "exclusiveMinimum", "exclusiveMaximum"):
        return "out_of_range"
    elif validator in ("minLength", "maxLength", "minItems", "maxItems"):
        return "invalid_length"
    elif validator == "pattern":
        return "pattern_mismatch"
    elif validator == "format":
        return "invalid_format"
    else:
        return "validation_error"


def validate_json_schema(body: Any, schema: Mapping[str, Any]) -> ValidationResult:
    """Validate body against a JSON Schema document.

    The draft is taken from the schema's "$schema" keyword, defaulting to
    2020-12. details["violations"] lists path, message and violation_type
    per error. An invalid schema is reported as a single "schema_error"
    violation rather than raised.
    """
    violations: list[dict[str, str]] = []

    try:
        validator_cls = validator_for(schema, default=Draft202012Validator)
        validator_cls.check_schema(schema)
        validator = validator_cls(schema)
        for error in validator.iter_errors(body):
            violations.append({
                "path": _error_path_to_jsonpath(error.absolute_path),
                "message": error.message,
                "violation_type": _classify_validation_error(error),
            })
    except SchemaError as e:
        logger.error("Invalid JSON Schema: %s", e.message)
        violations.append({
            "path": "$",
            "message": f"Invalid schema: {e.message}",
            "violation_type": "schema_error",
        })

    for violation in violations:
        logger.warning("Schema violation at %s: %s", violation["path"], violation["message"])

    return ValidationResult(
        valid=not violations,
        message=MSG_SCHEMA_PASSED if not violations else MSG_SCHEMA_FAILED,
        details={"violations": violations},
    )


def has_min_length(sequence: Any, min_length: int) -> bool:
    """True if sequence is a list or tuple with at least min_length items."""
    if not isinstance(sequence, (list, tuple)):
        logger.warning("Response is not an array")
        return False
    return len(sequence) >= min_length


# =============================================================================
# Performance
# =============================================================================


def meets_performance_thresholds(observed_ms: float, threshold_ms: float) -> bool:
    """True if observed_ms <= threshold_ms. Negative or NaN inputs never pass."""
    if observed_ms < 0 or threshold_ms < 0:
        logger.error(
            "Invalid response time or threshold values: observed=%s threshold=%s",
            observed_ms, threshold_ms,
        )
        return False

    if observed_ms <= threshold_ms:
        return True

    logger.warning(
        "%s: %sms > %sms (exceeded by %sms)",
        MSG_THRESHOLD_EXCEEDED, observed_ms, threshold_ms, observed_ms - threshold_ms,
    )
    return False


# =============================================================================
# Aggregate
# =============================================================================


def validate_response(
    status_code: int,
    body: Any,
    required_fields: Sequence[str] | None = None,
    max_duration_ms: float | None = None,
    *,
    duration_ms: float | None = None,
    expected_status: int | None = None,
) -> ValidationResult:
    """Run the standard checks and collect every failure.

    Checks a 2xx status, a non-empty body, the required fields (if any) and,
    when both duration_ms and max_duration_ms are given, the response time.
    max_duration_ms alone has nothing to compare against and is not checked.
    When expected_status is given, the status must equal it instead of being 2xx.

    Returns:
        ValidationResult with details["errors"] listing each failed check.
    """
    errors: list[str] = []

    if expected_status is not None:
        if not has_expected_status(status_code, expected_status):
            errors.append(f"Expected status {expected_status}, got {status_code}")
    elif not is_successful(status_code):
        errors.append(f"Invalid status code: {status_code}")

    if not has_response_body(body):
        errors.append(MSG_EMPTY_RESPONSE)

    if required_fields:
        field_check = has_required_fields(body, required_fields)
        if not field_check.valid:
            errors.append(f"Missing required fields: {', '.join(field_check.missing)}")

    if duration_ms is not None and max_duration_ms is not None:
        if not meets_performance_thresholds(duration_ms, max_duration_ms):
            errors.append(f"{MSG_THRESHOLD_EXCEEDED}: {duration_ms}ms > {max_duration_ms}ms")

    return ValidationResult(
        valid=not errors,
        message=MSG_RESPONSE_PASSED if not errors else MSG_RESPONSE_FAILED,
        details={"errors": errors},
    )


# =============================================================================
# httpx Responses
# =============================================================================


def snapshot_response(response: httpx.Response, elapsed_ms: float | None = None) -> ResponseSnapshot:
    """Reduce an httpx.Response to a ResponseSnapshot.

    Body decoding by content-type:
        JSON            -> parsed value (base64 if it does not parse)
        text/*          -> str
        everything else -> base64

    Args:
        response: A response whose content has been read.
        elapsed_ms: Measured duration. Falls back to response.elapsed when
                    the response has one.
    """
    headers: dict[str, list[str]] = {}
    for key, value in response.headers.multi_items():
        headers.setdefault(key.lower(), []).append(value)

    body: Any = None
    body_base64: str | None = None
    content_type = response.headers.get("content-type", "").lower()

    if response.content:
        if "json" in content_type:
            parsed = parse_json_safely(response.content)
            if parsed is MISSING:
                body_base64 = base64.b64encode(response.content).decode("ascii")
            else:
                body = parsed
        elif content_type.startswith("text/"):
            try:
                body = response.text
            except (UnicodeDecodeError, LookupError):
                body_base64 = base64.b64encode(response.content).decode("ascii")
        else:
            body_base64 = base64.b64encode(response.content).decode("ascii")

    if elapsed_ms is None:
        try:
            elapsed_ms = response.elapsed.total_seconds() * 1000
        except RuntimeError:
            # elapsed is only set once the response has been closed by a client
            elapsed_ms = None

    return ResponseSnapshot(
        status_code=response.status_code,
        headers=headers,
        body=body,
        body_base64=body_base64,
        elapsed_ms=elapsed_ms,
    )


def validate_snapshot(
    snapshot: ResponseSnapshot,
    required_fields: Sequence[str] | None = None,
    max_duration_ms: float | None = None,
    *,
    expected_status: int | None = None,
) -> ValidationResult:
    """validate_response over a snapshot, using its elapsed time as the duration.

    A binary body counts as present.
    """
    body = snapshot.body if snapshot.body is not None else snapshot.body_base64
    return validate_response(
        snapshot.status_code,
        body,
        required_fields,
        max_duration_ms,
        duration_ms=snapshot.elapsed_ms,
        expected_status=expected_status,
    )
