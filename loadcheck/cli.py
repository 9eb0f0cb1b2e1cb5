"""CLI entry point for loadcheck.

Subcommands:
    show-config  Print the resolved environment configuration as JSON.
    build-url    Print a URL built the way scenario scripts build them.
    probe        Send one GET request and validate the response.

probe is a single request for checking a target before a load run. It does
not generate load and does not retry.
"""

from __future__ import annotations

import argparse
import json
import sys
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import httpx
import yaml

from loadcheck.constants import MSG_RESPONSE_FAILED, MSG_RESPONSE_PASSED
from loadcheck.environment import (
    ConfigError,
    get_environment_config,
    is_valid_environment,
    load_environment_config,
)
from loadcheck.log import configure_logging
from loadcheck.models import EnvironmentConfig, ValidationResult
from loadcheck.request_builder import RequestBuilder, RequestBuilderError
from loadcheck.response_validator import (
    snapshot_response,
    validate_json_schema,
    validate_snapshot,
)


def positive_float(value: str) -> float:
    """Parse a positive float for argparse.

    Raises:
        argparse.ArgumentTypeError: If value is not a positive number.
    """
    try:
        result = float(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid number '{value}'.")
    if result <= 0:
        raise argparse.ArgumentTypeError(f"Value must be positive, got {result}.")
    return result


def environment_name(value: str) -> str:
    if not is_valid_environment(value):
        raise argparse.ArgumentTypeError(f"Unknown environment '{value}'.")
    return value


def parse_query_param(value: str) -> tuple[str, str]:
    """Parse KEY=VALUE. The value may be empty (it is then dropped from the URL)."""
    if "=" not in value:
        raise argparse.ArgumentTypeError(
            f"Invalid query parameter '{value}'. Expected KEY=VALUE."
        )
    key, _, param_value = value.partition("=")
    if not key:
        raise argparse.ArgumentTypeError(f"Query parameter '{value}' has an empty key.")
    return key, param_value


@dataclass
class ShowConfigArgs:
    """Parsed arguments for show-config mode."""

    environment: str | None
    config: Path | None


@dataclass
class BuildUrlArgs:
    """Parsed arguments for build-url mode."""

    endpoint: str
    base_url: str | None
    environment: str | None
    params: list[tuple[str, str]] = field(default_factory=list)


@dataclass
class ProbeArgs:
    """Parsed arguments for probe mode."""

    endpoint: str
    base_url: str | None
    environment: str | None
    config: Path | None
    params: list[tuple[str, str]]
    expect_status: int | None
    require: list[str]
    max_duration_ms: float | None
    schema: Path | None
    bearer_token: str | None
    log_level: str | None


def _add_target_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--environment",
        type=environment_name,
        default=None,
        help="Environment preset (default: $ENVIRONMENT or development)",
    )
    parser.add_argument(
        "--base-url",
        default=None,
        help="Base URL, overriding the environment's",
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser with show-config, build-url and probe subcommands."""
    parser = argparse.ArgumentParser(
        prog="loadcheck",
        description="Request building and response validation helpers for HTTP load tests.",
    )

    subparsers = parser.add_subparsers(dest="command", required=True, help="Mode")

    show_config_parser = subparsers.add_parser(
        "show-config",
        help="Print the resolved environment configuration as JSON",
    )
    show_config_parser.add_argument(
        "--environment",
        type=environment_name,
        default=None,
        help="Environment preset (default: $ENVIRONMENT or development)",
    )
    show_config_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file overriding preset fields",
    )

    build_url_parser = subparsers.add_parser(
        "build-url",
        help="Print the URL for an endpoint and query parameters",
    )
    build_url_parser.add_argument("endpoint", help="Endpoint path, e.g. /posts")
    _add_target_arguments(build_url_parser)
    build_url_parser.add_argument(
        "--param",
        type=parse_query_param,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        dest="params",
        help="Query parameter (can be repeated)",
    )

    probe_parser = subparsers.add_parser(
        "probe",
        help="Send one GET request and validate the response",
    )
    probe_parser.add_argument("endpoint", help="Endpoint path, e.g. /posts/1")
    _add_target_arguments(probe_parser)
    probe_parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="YAML file overriding preset fields",
    )
    probe_parser.add_argument(
        "--param",
        type=parse_query_param,
        action="append",
        default=[],
        metavar="KEY=VALUE",
        dest="params",
        help="Query parameter (can be repeated)",
    )
    probe_parser.add_argument(
        "--expect-status",
        type=int,
        default=None,
        help="Exact status code the response must have (replaces the 2xx check)",
    )
    probe_parser.add_argument(
        "--require",
        action="append",
        default=[],
        metavar="FIELD",
        help="Field the JSON body must contain (can be repeated)",
    )
    probe_parser.add_argument(
        "--max-duration-ms",
        type=positive_float,
        default=None,
        help="Maximum acceptable response time in milliseconds",
    )
    probe_parser.add_argument(
        "--schema",
        type=Path,
        default=None,
        help="JSON Schema file (JSON or YAML) the body must satisfy",
    )
    probe_parser.add_argument(
        "--bearer-token",
        default=None,
        help="Send 'Authorization: Bearer <token>'",
    )
    probe_parser.add_argument(
        "--log-level",
        default=None,
        help="Log level (default: the environment's)",
    )

    return parser


def parse_args(args: list[str] | None = None) -> ShowConfigArgs | BuildUrlArgs | ProbeArgs:
    """Parse command-line arguments and return typed args dataclass.

    Raises:
        SystemExit: If arguments are invalid (argparse behavior).
    """
    parser = build_parser()
    namespace = parser.parse_args(args)

    if namespace.command == "show-config":
        return ShowConfigArgs(environment=namespace.environment, config=namespace.config)
    elif namespace.command == "build-url":
        return BuildUrlArgs(
            endpoint=namespace.endpoint,
            base_url=namespace.base_url,
            environment=namespace.environment,
            params=namespace.params or [],
        )
    elif namespace.command == "probe":
        return ProbeArgs(
            endpoint=namespace.endpoint,
            base_url=namespace.base_url,
            environment=namespace.environment,
            config=namespace.config,
            params=namespace.params or [],
            expect_status=namespace.expect_status,
            require=namespace.require or [],
            max_duration_ms=namespace.max_duration_ms,
            schema=namespace.schema,
            bearer_token=namespace.bearer_token,
            log_level=namespace.log_level,
        )
    else:
        parser.error(f"Unknown command: {namespace.command}")


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    try:
        parsed = parse_args(argv)

        if isinstance(parsed, ShowConfigArgs):
            return run_show_config(parsed)
        elif isinstance(parsed, BuildUrlArgs):
            return run_build_url(parsed)
        else:
            return run_probe(parsed)

    except KeyboardInterrupt:
        print("\nInterrupted", file=sys.stderr)
        return 1


def _resolve_config(environment: str | None, config_path: Path | None) -> EnvironmentConfig:
    if config_path is not None:
        config = load_environment_config(config_path)
        if environment is not None and config.name.value != environment:
            raise ConfigError(
                f"--environment '{environment}' conflicts with '{config.name.value}' in {config_path}"
            )
        return config
    return get_environment_config(environment)


def run_show_config(args: ShowConfigArgs) -> int:
    """Run show-config mode."""
    try:
        config = _resolve_config(args.environment, args.config)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    print(json.dumps(config.model_dump(mode="json"), indent=2))
    return 0


def run_build_url(args: BuildUrlArgs) -> int:
    """Run build-url mode."""
    try:
        base_url = args.base_url or get_environment_config(args.environment).base_url
        builder = RequestBuilder(base_url)
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1
    except RequestBuilderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print(builder.build_url(args.endpoint, dict(args.params)))
    return 0


def _load_schema(schema_path: Path) -> Any:
    """Load a JSON Schema from a JSON or YAML file."""
    try:
        with open(schema_path, encoding="utf-8") as f:
            if schema_path.suffix.lower() in (".yaml", ".yml"):
                return yaml.safe_load(f)
            return json.load(f)
    except (OSError, ValueError, yaml.YAMLError) as e:
        raise ConfigError(f"Failed to load schema {schema_path}: {e}") from e


def run_probe(args: ProbeArgs) -> int:
    """Run probe mode.

    Returns 0 if every check passed, 1 on failed checks or errors.
    """
    try:
        config = _resolve_config(args.environment, args.config)
        schema = _load_schema(args.schema) if args.schema is not None else None
    except ConfigError as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        return 1

    try:
        configure_logging(args.log_level or config.log_level)
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        builder = RequestBuilder(args.base_url or config.base_url)
        builder.set_headers(config.custom_headers)
        if config.api_key:
            builder.set_header("X-API-Key", config.api_key)
        if args.bearer_token:
            builder.set_bearer_token(args.bearer_token)
        request = builder.build_request("GET", args.endpoint, dict(args.params))
    except RequestBuilderError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        with httpx.Client(timeout=config.timeout_ms / 1000) as client:
            start_time = time.perf_counter()
            response = client.send(request)
            elapsed_ms = (time.perf_counter() - start_time) * 1000
    except httpx.TimeoutException as e:
        print(f"Request timeout: {e}", file=sys.stderr)
        return 1
    except httpx.HTTPError as e:
        print(f"Request error: {e}", file=sys.stderr)
        return 1

    snapshot = snapshot_response(response, elapsed_ms=elapsed_ms)
    result = validate_snapshot(
        snapshot, args.require, args.max_duration_ms, expected_status=args.expect_status
    )

    errors = list(result.details["errors"])

    violations: list[dict[str, str]] = []
    if schema is not None:
        schema_result = validate_json_schema(snapshot.body, schema)
        violations = schema_result.details["violations"]
        if not schema_result.valid:
            errors.append(f"Schema violations: {len(violations)}")

    report = ValidationResult(
        valid=not errors,
        message=MSG_RESPONSE_PASSED if not errors else MSG_RESPONSE_FAILED,
        details={
            "url": str(request.url),
            "status_code": snapshot.status_code,
            "elapsed_ms": round(snapshot.elapsed_ms, 2) if snapshot.elapsed_ms is not None else None,
            "errors": errors,
            "violations": violations,
        },
    )
    print(json.dumps(report.model_dump(mode="json"), indent=2))
    return 0 if report.valid else 1


if __name__ == "__main__":
    sys.exit(main())
