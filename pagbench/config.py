"""
Configuration management for the aggregation gateway load generator.

This module handles loading, parsing, and validating generator configuration
from the environment, YAML files and command-line arguments. The only value
the generator cannot run without is the gateway base host; a missing host is
reported when the configuration is built, never on the first request.
"""

import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional

import yaml
from jsonschema import Draft7Validator

from .models import RoutingMode


HOST_ENV_VAR = "PAG_HOST"

DEFAULT_CONTENT_TYPE = "application/json"
DEFAULT_TIMEOUT_SECONDS = 10.0

# The gateway registers inserts for both methods
VALID_METHODS = ["POST", "PUT"]
VALID_ROUTING_MODES = [mode.value for mode in RoutingMode]


# JSON Schema for configuration file validation
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "properties": {
        "gateway": {
            "type": "object",
            "properties": {
                "host": {"type": "string"},
                "auth": {"type": "string", "pattern": "^[^=]+=[^=]*$"},
            },
            "additionalProperties": False,
        },
        "request": {
            "type": "object",
            "properties": {
                "mode": {"type": "string", "enum": VALID_ROUTING_MODES},
                "method": {"type": "string", "enum": VALID_METHODS},
                "content_type": {"type": "string", "minLength": 1},
                "headers": {
                    "type": "object",
                    "additionalProperties": {"type": "string"},
                },
                "timeout_seconds": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


class ConfigValidationError(Exception):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, errors: list[str] | None = None):
        super().__init__(message)
        self.errors = errors or []


def validate_config(data: dict[str, Any]) -> list[str]:
    """
    Validate configuration data against the schema.

    Args:
        data: Configuration dictionary to validate

    Returns:
        List of validation error messages (empty if valid)
    """
    validator = Draft7Validator(CONFIG_SCHEMA)
    errors = []
    for error in validator.iter_errors(data):
        path = ".".join(str(p) for p in error.path) if error.path else "root"
        errors.append(f"{path}: {error.message}")
    return errors


def expand_env_vars(value: Any) -> Any:
    """
    Expand environment variables in a string.

    Supports ${VAR_NAME} syntax. Non-string values are returned unchanged.
    """
    if not isinstance(value, str):
        return value

    def replace_env(match):
        return os.environ.get(match.group(1), "")

    return re.sub(r"\$\{([^}]+)\}", replace_env, value)


def parse_auth(auth: str) -> tuple[str, str]:
    """Split a "user=password" account string."""
    parts = auth.split("=")
    if len(parts) != 2 or not parts[0]:
        raise ConfigValidationError(
            "Invalid auth account: expected 'user=password'",
            errors=["gateway.auth: expected 'user=password'"],
        )
    return parts[0], parts[1]


def check_headers(headers: Mapping[str, str]) -> None:
    """Reject header names or values that cannot be sent as ASCII on one line."""
    errors = []
    for name, value in headers.items():
        for part in (name, value):
            try:
                part.encode("ascii")
            except UnicodeEncodeError:
                errors.append(f"headers.{name}: {part!r} is not ASCII")
                continue
            if "\r" in part or "\n" in part:
                errors.append(f"headers.{name}: {part!r} contains a line break")
    if errors:
        raise ConfigValidationError(
            f"Invalid request headers: {len(errors)} error(s)",
            errors=errors,
        )


@dataclass(frozen=True)
class GeneratorConfig:
    """
    Configuration for push iterations.

    Attributes:
        base_host: Base URL of the gateway under test
        routing_mode: Labeled or unlabeled push path
        method: HTTP method used for the push (POST or PUT)
        content_type: Value of the Content-Type header
        headers: Extra headers, applied over Content-Type; given as a
            mapping or as pairs, stored as a tuple of pairs
        auth: Optional basic auth account as "user=password"
        timeout_seconds: Request timeout
    """

    base_host: str
    routing_mode: RoutingMode = RoutingMode.LABELED
    method: str = "POST"
    content_type: str = DEFAULT_CONTENT_TYPE
    headers: tuple[tuple[str, str], ...] = ()
    auth: Optional[str] = None
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS

    def __post_init__(self):
        """Validate values after initialization."""
        if not self.base_host:
            raise ConfigValidationError(
                f"Gateway host is required (set {HOST_ENV_VAR} or pass --host)",
                errors=["gateway.host: must be a non-empty URL"],
            )
        if not self.base_host.startswith(("http://", "https://")):
            raise ConfigValidationError(
                f"Invalid gateway host: {self.base_host}",
                errors=["gateway.host: must start with http:// or https://"],
            )

        if not isinstance(self.routing_mode, RoutingMode):
            try:
                mode = RoutingMode(str(self.routing_mode).lower())
            except ValueError:
                raise ConfigValidationError(
                    f"Invalid routing mode: {self.routing_mode}. "
                    f"Must be one of {VALID_ROUTING_MODES}"
                ) from None
            object.__setattr__(self, "routing_mode", mode)

        method = self.method.upper()
        if method not in VALID_METHODS:
            raise ConfigValidationError(
                f"Invalid method: {self.method}. Must be one of {VALID_METHODS}"
            )
        object.__setattr__(self, "method", method)

        if not self.timeout_seconds > 0:
            raise ConfigValidationError(
                f"Timeout must be positive, got {self.timeout_seconds}"
            )

        headers = self.headers.items() if isinstance(self.headers, Mapping) else self.headers
        object.__setattr__(self, "headers", tuple((str(k), str(v)) for k, v in headers))
        check_headers(self.request_headers())

        if self.auth is not None:
            parse_auth(self.auth)

    @property
    def basic_auth(self) -> Optional[tuple[str, str]]:
        """Basic auth credentials, if configured."""
        if self.auth is None:
            return None
        return parse_auth(self.auth)

    def request_headers(self) -> dict[str, str]:
        """Headers sent with every push."""
        return {"Content-Type": self.content_type, **dict(self.headers)}

    @classmethod
    def from_env(cls, routing_mode: RoutingMode | str = RoutingMode.LABELED) -> "GeneratorConfig":
        """Create configuration from the PAG_HOST environment variable."""
        return cls(
            base_host=os.environ.get(HOST_ENV_VAR, ""),
            routing_mode=routing_mode,
        )

    @classmethod
    def from_yaml(cls, path: Path | str, validate: bool = True) -> "GeneratorConfig":
        """
        Load configuration from a YAML file.

        Args:
            path: Path to the YAML configuration file
            validate: Whether to validate the configuration against schema

        Returns:
            GeneratorConfig instance with loaded values

        Raises:
            FileNotFoundError: If the config file doesn't exist
            yaml.YAMLError: If the YAML is invalid
            ConfigValidationError: If validation fails
        """
        return cls.from_dict(read_config_file(path, validate=validate))

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "GeneratorConfig":
        """
        Create configuration from a dictionary.

        Args:
            data: Dictionary containing configuration values

        Returns:
            GeneratorConfig instance with loaded values
        """
        gateway = data.get("gateway", {})
        request = data.get("request", {})

        return cls(
            base_host=expand_env_vars(gateway.get("host", "")),
            routing_mode=request.get("mode", RoutingMode.LABELED.value),
            method=request.get("method", "POST"),
            content_type=request.get("content_type", DEFAULT_CONTENT_TYPE),
            headers={
                k: expand_env_vars(v) for k, v in request.get("headers", {}).items()
            },
            auth=expand_env_vars(gateway.get("auth")),
            timeout_seconds=float(request.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS)),
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary (credentials masked)."""
        return {
            "gateway": {
                "host": self.base_host,
                "auth": "***" if self.auth else None,
            },
            "request": {
                "mode": self.routing_mode.value,
                "method": self.method,
                "content_type": self.content_type,
                "headers": dict(self.headers),
                "timeout_seconds": self.timeout_seconds,
            },
        }

    def merge_cli_args(
        self,
        base_host: Optional[str] = None,
        routing_mode: Optional[str] = None,
        method: Optional[str] = None,
        content_type: Optional[str] = None,
        auth: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
    ) -> "GeneratorConfig":
        """
        Merge command-line arguments into the configuration.

        CLI arguments take precedence over file configuration. The merged
        configuration is validated again.
        """
        overrides = {
            "base_host": base_host,
            "routing_mode": routing_mode,
            "method": method,
            "content_type": content_type,
            "auth": auth,
            "timeout_seconds": timeout_seconds,
        }
        return replace(self, **{k: v for k, v in overrides.items() if v is not None})


def read_config_file(path: Path | str, validate: bool = True) -> dict[str, Any]:
    """Read and optionally schema-validate a YAML configuration file."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if validate:
        errors = validate_config(data)
        if errors:
            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s)",
                errors=errors,
            )

    return data


def load_config(
    config_path: Optional[Path | str] = None,
    base_host: Optional[str] = None,
    routing_mode: Optional[str] = None,
    method: Optional[str] = None,
    content_type: Optional[str] = None,
    auth: Optional[str] = None,
    timeout_seconds: Optional[float] = None,
    validate: bool = True,
) -> GeneratorConfig:
    """
    Load and merge configuration from file, environment and CLI arguments.

    Precedence, lowest first: configuration file, PAG_HOST environment
    variable (host only, when the file has none), CLI arguments.

    Raises:
        ConfigValidationError: If the merged configuration is invalid,
            including when no gateway host is available
    """
    data = read_config_file(config_path, validate=validate) if config_path else {}

    gateway = dict(data.get("gateway", {}))
    if base_host:
        gateway["host"] = base_host
    elif not gateway.get("host"):
        gateway["host"] = os.environ.get(HOST_ENV_VAR, "")

    config = GeneratorConfig.from_dict({**data, "gateway": gateway})

    return config.merge_cli_args(
        routing_mode=routing_mode,
        method=method,
        content_type=content_type,
        auth=auth,
        timeout_seconds=timeout_seconds,
    )
