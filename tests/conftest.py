"""Pytest configuration and fixtures for loadcheck tests.

This file provides:
- make_snapshot: ResponseSnapshot factory with sensible defaults
- make_http_response: httpx.Response factory for snapshot and CLI tests
- Fixtures: a fresh RequestBuilder, a clean environment mapping, and
  logger and os.environ isolation
"""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx
import pytest

from loadcheck.models import ResponseSnapshot
from loadcheck.request_builder import RequestBuilder

BASE_URL = "https://api.example.com"


def make_snapshot(
    status_code: int = 200,
    headers: dict[str, list[str]] | None = None,
    body: Any = None,
    body_base64: str | None = None,
    elapsed_ms: float | None = 10.0,
) -> ResponseSnapshot:
    """Create a ResponseSnapshot for testing validation.

    Prefer this over constructing ResponseSnapshot directly - it provides
    sensible defaults and documents which fields are typically varied in tests.
    """
    return ResponseSnapshot(
        status_code=status_code,
        headers=headers or {},
        body=body,
        body_base64=body_base64,
        elapsed_ms=elapsed_ms,
    )


def make_http_response(
    status_code: int = 200,
    body: Any = None,
    content: bytes | None = None,
    content_type: str | None = "application/json",
    headers: dict[str, str] | None = None,
) -> httpx.Response:
    """Create an httpx.Response with its content already read.

    body is JSON-encoded unless raw content is given.
    """
    response_headers = dict(headers or {})
    if content_type is not None:
        response_headers["content-type"] = content_type
    if content is None:
        content = b"" if body is None else json.dumps(body).encode("utf-8")
    return httpx.Response(status_code, headers=response_headers, content=content)


@pytest.fixture
def builder() -> RequestBuilder:
    """A fresh builder against BASE_URL."""
    return RequestBuilder(BASE_URL)


@pytest.fixture
def environ() -> dict[str, str]:
    """An empty environment mapping (isolated from os.environ)."""
    return {}


@pytest.fixture
def restore_logger():
    """Restore the "loadcheck" logger's level and handlers after the test."""
    logger = logging.getLogger("loadcheck")
    level = logger.level
    handlers = list(logger.handlers)
    yield logger
    logger.setLevel(level)
    logger.handlers = handlers


@pytest.fixture
def clean_env(monkeypatch):
    """Unset the variables that select and override the environment."""
    for name in ("ENVIRONMENT", "BASE_URL", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
