"""JSON envelope formatter for the hostenv CLI.

Key guarantees:
- Canonical top-level key ordering, recursive key sorting below it
- data always present (defaults to {})
- timestamp only included when explicitly requested
- run_id is a full UUIDv4
- Single-line JSON output
"""

import json
import logging
import uuid
from datetime import datetime, timezone
from typing import Any

import click
from jsonschema import Draft7Validator

from hostenv.core.services.error_codes import ErrorCode
from hostenv.core.services.output_contracts import ENVELOPE_SCHEMA, OUTPUT_SCHEMA_VERSION

_ENVELOPE_KEY_ORDER = [
    "output_schema_version",
    "success",
    "command",
    "run_id",
    "timestamp",
    "data",
    "error",
]

_SCHEMA_VALIDATOR: Draft7Validator | None = None

logger = logging.getLogger(__name__)


def _get_schema_validator() -> Draft7Validator:
    global _SCHEMA_VALIDATOR
    if _SCHEMA_VALIDATOR is None:
        Draft7Validator.check_schema(ENVELOPE_SCHEMA)
        _SCHEMA_VALIDATOR = Draft7Validator(ENVELOPE_SCHEMA)
    return _SCHEMA_VALIDATOR


def _reset_schema_cache() -> None:
    """Reset the module-level schema validator cache (for testing only)."""
    global _SCHEMA_VALIDATOR
    _SCHEMA_VALIDATOR = None


def _validate_envelope(envelope: dict[str, Any]) -> None:
    errors = sorted(_get_schema_validator().iter_errors(envelope), key=str)
    if errors:
        messages = "; ".join(error.message for error in errors[:3])
        raise ValueError(f"output envelope failed schema validation: {messages}")


def _recursively_sort_keys(obj: Any) -> Any:
    """Recursively sort dictionary keys for deterministic output."""
    if isinstance(obj, dict):
        return {k: _recursively_sort_keys(v) for k, v in sorted(obj.items())}
    if isinstance(obj, (list, tuple)):
        return [_recursively_sort_keys(item) for item in obj]
    return obj


def generate_run_id() -> str:
    return str(uuid.uuid4())


def _normalize_run_id(run_id: str | None) -> str:
    """Validate or generate a UUIDv4 run_id."""
    if run_id is None:
        return generate_run_id()
    try:
        parsed = uuid.UUID(str(run_id))
    except (ValueError, AttributeError, TypeError):
        return generate_run_id()
    if parsed.version != 4:
        return generate_run_id()
    return str(parsed)


def format_envelope(
    *,
    command: str,
    success: bool,
    data: dict | None = None,
    error: dict | None = None,
    include_timestamp: bool = False,
    run_id: str | None = None,
) -> str:
    """Build a JSON envelope as a deterministic single-line string.

    Args:
        command: CLI subcommand name (e.g. "paths", "open").
        success: Whether the command completed without fatal error.
        data: Command-specific payload. Defaults to {}.
        error: Operational error object (code, message, optional details).
        include_timestamp: If True, include ISO 8601 UTC timestamp.
        run_id: Override run_id (must be a UUIDv4).

    Returns:
        A single-line JSON string with no trailing newline.
    """
    envelope: dict[str, Any] = {
        "output_schema_version": OUTPUT_SCHEMA_VERSION,
        "success": success,
        "command": command,
        "run_id": _normalize_run_id(run_id),
    }

    if include_timestamp:
        envelope["timestamp"] = (
            datetime.now(timezone.utc).isoformat().replace("+00:00", "Z")
        )

    envelope["data"] = _recursively_sort_keys(data if data is not None else {})

    if error is not None:
        envelope["error"] = _recursively_sort_keys(error)

    ordered = {key: envelope[key] for key in _ENVELOPE_KEY_ORDER if key in envelope}

    try:
        _validate_envelope(ordered)
    except ValueError as e:
        logger.exception("Envelope schema validation failed")
        click.echo(f"WARN: Envelope schema validation failed: {e}", err=True)

    return json.dumps(ordered, separators=(",", ":"), default=str)


def format_error_envelope(
    *,
    command: str,
    error_code: ErrorCode,
    message: str,
    details: dict | None = None,
    include_timestamp: bool = False,
    run_id: str | None = None,
) -> str:
    """Build an error envelope; convenience wrapper around format_envelope."""
    error_obj: dict[str, Any] = {"code": error_code.value, "message": message}
    if details is not None:
        error_obj["details"] = details

    return format_envelope(
        command=command,
        success=False,
        error=error_obj,
        include_timestamp=include_timestamp,
        run_id=run_id,
    )
