"""Tests for the response validator checks."""

import logging
import math

import pytest

from loadcheck.constants import (
    MSG_EMPTY_RESPONSE,
    MSG_FIELDS_VALID,
    MSG_INVALID_JSON,
    MSG_MISSING_REQUIRED_FIELD,
    MSG_RESPONSE_FAILED,
    MSG_RESPONSE_PASSED,
    MSG_SCHEMA_FAILED,
    MSG_SCHEMA_PASSED,
)
from loadcheck.fixtures import POST_REQUIRED_FIELDS, SAMPLE_POSTS
from loadcheck.response_validator import (
    MISSING,
    has_expected_status,
    has_expected_type,
    has_min_length,
    has_request_fields,
    has_required_fields,
    has_response_body,
    is_client_error,
    is_server_error,
    is_successful,
    is_valid_json,
    json_type_name,
    meets_performance_thresholds,
    parse_json_safely,
    validate_required_fields,
    validate_response,
    validate_schema,
)


class TestStatusClassification:
    @pytest.mark.parametrize("code", [200, 201, 204, 299])
    def test_successful(self, code):
        assert is_successful(code)
        assert not is_client_error(code)
        assert not is_server_error(code)

    @pytest.mark.parametrize("code", [400, 401, 404, 499])
    def test_client_error(self, code):
        assert is_client_error(code)
        assert not is_successful(code)
        assert not is_server_error(code)

    @pytest.mark.parametrize("code", [500, 502, 503, 599])
    def test_server_error(self, code):
        assert is_server_error(code)
        assert not is_successful(code)
        assert not is_client_error(code)

    @pytest.mark.parametrize("code", [100, 199, 300, 302, 399, 600])
    def test_other_codes_match_nothing(self, code):
        assert not is_successful(code)
        assert not is_client_error(code)
        assert not is_server_error(code)

    @pytest.mark.parametrize("code", [True, "200", 200.0, None])
    def test_non_integer_codes_match_nothing(self, code):
        assert not is_successful(code)
        assert not is_client_error(code)
        assert not is_server_error(code)

    def test_has_expected_status(self):
        assert has_expected_status(201, 201)
        assert not has_expected_status(200, 201)


class TestJson:
    @pytest.mark.parametrize("text", ['{"a":1}', "[1,2]", "null", "0", '"x"', b'{"a": 1}'])
    def test_valid_json(self, text):
        assert is_valid_json(text)

    @pytest.mark.parametrize("text", ["", "   ", None, "{invalid}", "{'a': 1}", "NaN", "[Infinity]"])
    def test_invalid_json(self, text):
        assert not is_valid_json(text)

    def test_invalid_json_logs_warning(self, caplog):
        with caplog.at_level(logging.WARNING, logger="loadcheck"):
            is_valid_json("{invalid}")
        assert MSG_INVALID_JSON in caplog.text

    def test_parse_json_safely(self):
        assert parse_json_safely('{"a":1}') == {"a": 1}

    def test_parse_null_is_not_missing(self):
        assert parse_json_safely("null") is None

    @pytest.mark.parametrize("text", ["{invalid}", "", None, "NaN"])
    def test_parse_failure_returns_missing(self, text):
        assert parse_json_safely(text) is MISSING

    def test_missing_is_falsy(self):
        assert not MISSING
        assert repr(MISSING) == "MISSING"


class TestResponseBody:
    @pytest.mark.parametrize("body", [None, "", "  \n", b"", {}, [], (), set(), frozenset()])
    def test_empty_bodies(self, body):
        assert not has_response_body(body)

    @pytest.mark.parametrize("body", ["x", b"x", {"a": 1}, [0], 0, False])
    def test_present_bodies(self, body):
        assert has_response_body(body)


class TestRequiredFields:
    def test_all_present(self):
        result = has_required_fields({"id": 1, "title": "x"}, ["id", "title"])
        assert result.valid
        assert result.missing == []

    def test_missing_in_order(self):
        result = has_required_fields({"id": 1}, ["title", "id", "body"])
        assert not result.valid
        assert result.missing == ["title", "body"]

    def test_null_value_counts_as_present(self):
        assert has_required_fields({"id": None}, ["id"]).valid

    def test_non_object_body_reports_everything_missing(self):
        result = has_required_fields([{"id": 1}], ["id"])
        assert not result.valid
        assert result.missing == ["id"]

    def test_sample_posts_have_required_fields(self):
        for post in SAMPLE_POSTS:
            assert has_required_fields(post, POST_REQUIRED_FIELDS).valid

    def test_alias(self):
        assert has_request_fields is has_required_fields


class TestValidateRequiredFields:
    def test_valid(self):
        result = validate_required_fields({"id": 1, "title": "x"}, ["id", "title"])
        assert result.valid
        assert result.message == MSG_FIELDS_VALID
        assert result.details == {"missing_fields": [], "null_fields": []}

    def test_missing_and_null_are_separated(self):
        result = validate_required_fields({"id": 1, "title": None}, ["id", "title", "body"])
        assert not result.valid
        assert result.message == MSG_MISSING_REQUIRED_FIELD
        assert result.details == {"missing_fields": ["body"], "null_fields": ["title"]}

    def test_non_object_body(self):
        result = validate_required_fields("text", ["id"])
        assert not result.valid
        assert result.message == MSG_INVALID_JSON
        assert result.details == {"expected_fields": ["id"]}


class TestTypes:
    @pytest.mark.parametrize(
        "value,name",
        [
            (None, "null"),
            (True, "boolean"),
            (1, "number"),
            (1.5, "number"),
            ("x", "string"),
            ([], "array"),
            ((1,), "array"),
            ({}, "object"),
            ({1, 2}, "set"),
        ],
    )
    def test_json_type_name(self, value, name):
        assert json_type_name(value) == name

    def test_expected_type(self):
        body = {"id": 1, "title": "x", "tags": [], "meta": {}}
        assert has_expected_type(body, "id", "number")
        assert has_expected_type(body, "title", "string")
        assert has_expected_type(body, "tags", "array")
        assert has_expected_type(body, "meta", "object")

    def test_array_is_not_object(self):
        assert not has_expected_type({"tags": []}, "tags", "object")

    def test_missing_field_logs(self, caplog):
        with caplog.at_level(logging.WARNING, logger="loadcheck"):
            assert not has_expected_type({}, "id", "number")
        assert "Field 'id' not found in response" in caplog.text

    def test_mismatch_logs(self, caplog):
        with caplog.at_level(logging.WARNING, logger="loadcheck"):
            assert not has_expected_type({"id": "1"}, "id", "number")
        assert "expected number, got string" in caplog.text


class TestValidateSchema:
    def test_passes(self):
        result = validate_schema({"id": 1, "title": "x"}, {"id": "number", "title": "string"})
        assert result.valid
        assert result.message == MSG_SCHEMA_PASSED
        assert result.details == {"errors": [], "mismatches": []}

    def test_reports_each_failing_field(self):
        result = validate_schema({"id": "1"}, {"id": "number", "title": "string"})
        assert not result.valid
        assert result.message == MSG_SCHEMA_FAILED
        assert result.details["errors"] == [
            "Field 'id' validation failed",
            "Field 'title' validation failed",
        ]
        assert result.details["mismatches"] == [
            {"field": "id", "expected": "number", "actual": "string"},
            {"field": "title", "expected": "string", "actual": "missing"},
        ]

    def test_empty_schema_passes(self):
        assert validate_schema({}, {}).valid


class TestMinLength:
    def test_lengths(self):
        assert has_min_length([1, 2, 3], 3)
        assert has_min_length((1,), 0)
        assert not has_min_length([1], 2)

    @pytest.mark.parametrize("value", ["abc", {"a": 1}, None])
    def test_non_array(self, value):
        assert not has_min_length(value, 0)


class TestPerformanceThresholds:
    def test_under_and_equal(self):
        assert meets_performance_thresholds(100, 500)
        assert meets_performance_thresholds(500, 500)

    def test_over(self, caplog):
        with caplog.at_level(logging.WARNING, logger="loadcheck"):
            assert not meets_performance_thresholds(501, 500)
        assert "exceeded by 1ms" in caplog.text

    @pytest.mark.parametrize(
        "observed,threshold", [(math.nan, 500), (100, math.nan), (math.nan, math.nan)]
    )
    def test_nan_never_passes(self, observed, threshold):
        assert meets_performance_thresholds(observed, threshold) is False

    @pytest.mark.parametrize("observed,threshold", [(-1, 500), (100, -1)])
    def test_negative_values_fail(self, observed, threshold, caplog):
        with caplog.at_level(logging.ERROR, logger="loadcheck"):
            assert not meets_performance_thresholds(observed, threshold)
        assert "Invalid response time or threshold values" in caplog.text


class TestValidateResponse:
    def test_passes(self):
        result = validate_response(200, {"id": 1, "title": "x"}, ["id", "title"])
        assert result.valid
        assert result.message == MSG_RESPONSE_PASSED
        assert result.details == {"errors": []}

    def test_collects_every_failure(self):
        result = validate_response(404, {}, ["id"])
        assert not result.valid
        assert result.message == MSG_RESPONSE_FAILED
        assert result.details["errors"] == [
            "Invalid status code: 404",
            MSG_EMPTY_RESPONSE,
            "Missing required fields: id",
        ]

    def test_no_required_fields(self):
        assert validate_response(204, "ok").valid

    def test_max_duration_alone_is_not_checked(self):
        assert validate_response(200, {"id": 1}, max_duration_ms=1).valid

    def test_duration_checked_when_both_given(self):
        result = validate_response(200, {"id": 1}, max_duration_ms=100, duration_ms=250)
        assert not result.valid
        assert result.details["errors"] == ["Performance threshold exceeded: 250ms > 100ms"]

    def test_duration_within_limit(self):
        assert validate_response(200, {"id": 1}, max_duration_ms=100, duration_ms=100).valid

    def test_nan_duration_fails(self):
        result = validate_response(200, {"id": 1}, None, 500, duration_ms=math.nan)
        assert not result.valid
        assert result.details["errors"] == ["Performance threshold exceeded: nanms > 500ms"]

    def test_expected_status_replaces_2xx_check(self):
        result = validate_response(404, {"error": "not found"}, expected_status=404)
        assert result.valid
        assert result.details == {"errors": []}

    def test_expected_status_mismatch(self):
        result = validate_response(200, {"id": 1}, expected_status=201)
        assert not result.valid
        assert result.details["errors"] == ["Expected status 201, got 200"]
