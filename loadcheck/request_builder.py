"""Request Builder - Assembles URLs, headers and JSON payloads for test requests.

A RequestBuilder owns a base endpoint and a mutable header set. Scenario
scripts build one per virtual user (or clone() a configured one) and use it
to produce the URL and body handed to the HTTP client.
"""

from __future__ import annotations

import base64
import json
import logging
from typing import Any, Mapping
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from loadcheck.constants import DEFAULT_HEADERS, MSG_INVALID_URL, HttpMethod
from loadcheck.models import parse_absolute_url

logger = logging.getLogger(__name__)


class RequestBuilderError(Exception):
    """Base class for request builder errors."""


class InvalidEndpoint(RequestBuilderError):
    """Raised when the base endpoint is not an absolute URL."""


class InvalidHeaderKey(RequestBuilderError):
    """Raised when a header name is empty or blank."""


class InvalidHeaderValue(RequestBuilderError):
    """Raised when a header value is None."""


class InvalidMethod(RequestBuilderError):
    """Raised when build_request is given an unknown HTTP method."""


class SerializationError(RequestBuilderError):
    """Raised when a payload cannot be serialized to JSON.

    The underlying exception is kept on `cause` (and as __cause__).
    """

    def __init__(self, message: str, cause: BaseException) -> None:
        super().__init__(message)
        self.cause = cause


# Characters encodeURIComponent leaves unescaped, besides letters and digits
_QUERY_SAFE = "-_.!~*'()"


def _encode_component(value: Any) -> str:
    """Percent-encode a query key or value."""
    if isinstance(value, bool):
        value = "true" if value else "false"
    return quote(str(value), safe=_QUERY_SAFE)


class RequestBuilder:
    """Builds URLs, headers and payloads against one base endpoint.

    Header mutators return the builder so calls can be chained:

        builder = RequestBuilder("https://api.example.com")
        url = builder.set_bearer_token(token).build_url("/users", {"limit": "10"})

    A builder is not meant to be mutated from several threads at once. Give
    each virtual user its own instance via clone().
    """

    def __init__(self, base_endpoint: str) -> None:
        """Initialize the builder.

        Args:
            base_endpoint: Absolute URL shared by every request, e.g.
                           "https://api.example.com". A trailing slash is dropped.

        Raises:
            InvalidEndpoint: If base_endpoint is not an absolute URL.
        """
        if parse_absolute_url(base_endpoint) is None:
            logger.error("%s: %r", MSG_INVALID_URL, base_endpoint)
            raise InvalidEndpoint(f"{MSG_INVALID_URL}: {base_endpoint!r}")

        self._base_endpoint = base_endpoint[:-1] if base_endpoint.endswith("/") else base_endpoint
        self._headers: dict[str, str] = dict(DEFAULT_HEADERS)

    @property
    def base_url(self) -> str:
        return self._base_endpoint

    # -------------------------------------------------------------------------
    # Headers
    # -------------------------------------------------------------------------

    def set_header(self, key: str, value: str) -> RequestBuilder:
        """Insert or overwrite one header.

        Raises:
            InvalidHeaderKey: If key is not a string or is blank.
            InvalidHeaderValue: If value is None.
        """
        if not isinstance(key, str) or not key.strip():
            raise InvalidHeaderKey("Header key cannot be empty")
        if value is None:
            raise InvalidHeaderValue(f"Header value for '{key}' cannot be None")

        self._headers[key] = value
        logger.debug("Header set: %s", key)
        return self

    def set_headers(self, headers: Mapping[str, str]) -> RequestBuilder:
        """Set each header in iteration order.

        Stops at the first invalid entry; entries before it stay applied.
        """
        for key, value in headers.items():
            self.set_header(key, value)
        return self

    def set_content_type(self, content_type: str) -> RequestBuilder:
        return self.set_header("Content-Type", content_type)

    def set_bearer_token(self, token: str) -> RequestBuilder:
        return self.set_header("Authorization", f"Bearer {token}")

    def set_basic_auth(self, username: str, password: str) -> RequestBuilder:
        encoded = base64.b64encode(f"{username}:{password}".encode("utf-8")).decode("ascii")
        return self.set_header("Authorization", f"Basic {encoded}")

    def remove_header(self, key: str) -> RequestBuilder:
        """Remove a header. Absent keys are ignored."""
        self._headers.pop(key, None)
        logger.debug("Header removed: %s", key)
        return self

    def clear_headers(self) -> RequestBuilder:
        """Drop all custom headers, keeping only Content-Type and Accept defaults."""
        self._headers = dict(DEFAULT_HEADERS)
        return self

    def get_headers(self) -> dict[str, str]:
        """Return a copy of the current headers."""
        return dict(self._headers)

    # Backward-compatible alias
    get_request_headers = get_headers

    # -------------------------------------------------------------------------
    # URL and Payload
    # -------------------------------------------------------------------------

    def build_url(
        self,
        endpoint: str,
        query_params: Mapping[str, Any] | None = None,
    ) -> str:
        """Build a fully qualified URL.

        Parameters whose value is None or "" are dropped. The rest are
        percent-encoded and appended in insertion order.

        Args:
            endpoint: Path relative to the base endpoint, with or without
                      a leading slash (e.g., "/posts" or "posts"). An empty
                      endpoint yields the base endpoint itself.
            query_params: Optional query parameters.

        Returns:
            The URL, e.g. "https://api.example.com/posts?userId=1&limit=10".
        """
        if not endpoint:
            url = self._base_endpoint
        else:
            normalized = endpoint if endpoint.startswith("/") else f"/{endpoint}"
            url = f"{self._base_endpoint}{normalized}"

        if not query_params:
            return url

        pairs = [
            f"{_encode_component(key)}={_encode_component(value)}"
            for key, value in query_params.items()
            if value is not None and value != ""
        ]
        if not pairs:
            return url

        return f"{url}?{'&'.join(pairs)}"

    def build_payload(self, data: Any) -> str:
        """Serialize data to a compact JSON string.

        Key order is preserved. Pydantic models are dumped in JSON mode first.

        Raises:
            SerializationError: If data holds a cycle, a non-JSON type, or NaN/Infinity.
        """
        if isinstance(data, BaseModel):
            data = data.model_dump(mode="json")

        try:
            return json.dumps(data, separators=(",", ":"), ensure_ascii=False, allow_nan=False)
        except (TypeError, ValueError, RecursionError) as e:
            logger.error("Failed to build payload: %s", e)
            raise SerializationError(f"Failed to serialize data to JSON: {e}", e) from e

    def build_request(
        self,
        method: str,
        endpoint: str,
        query_params: Mapping[str, Any] | None = None,
        data: Any = None,
    ) -> httpx.Request:
        """Build an unsent httpx.Request from the current builder state.

        Args:
            method: HTTP method name (case-insensitive).
            endpoint: Path relative to the base endpoint.
            query_params: Optional query parameters (filtered as in build_url).
            data: Optional body, serialized with build_payload.

        Raises:
            InvalidMethod: If method is not a known HTTP method.
            SerializationError: If data cannot be serialized.
        """
        try:
            http_method = HttpMethod(str(method).upper())
        except ValueError as e:
            raise InvalidMethod(f"Unsupported HTTP method '{method}'") from e

        content = self.build_payload(data).encode("utf-8") if data is not None else None

        return httpx.Request(
            http_method.value,
            self.build_url(endpoint, query_params),
            headers=self.get_headers(),
            content=content,
        )

    def clone(self) -> RequestBuilder:
        """Return a new builder with the same base endpoint and a copy of the headers."""
        new_builder = RequestBuilder(self._base_endpoint)
        # Re-assign so a base that kept a slash (from "...//") is not stripped twice
        new_builder._base_endpoint = self._base_endpoint
        new_builder._headers = dict(self._headers)
        return new_builder

    def __repr__(self) -> str:
        return f"RequestBuilder({self._base_endpoint!r})"
