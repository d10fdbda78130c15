"""Output contract for hostenv JSON envelopes."""

OUTPUT_SCHEMA_VERSION = "1.0"

ENVELOPE_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "hostenv output envelope",
    "type": "object",
    "required": ["output_schema_version", "success", "command", "run_id", "data"],
    "additionalProperties": False,
    "properties": {
        "output_schema_version": {"const": OUTPUT_SCHEMA_VERSION},
        "success": {"type": "boolean"},
        "command": {"type": "string", "minLength": 1},
        "run_id": {
            "type": "string",
            "pattern": "^[0-9a-f]{8}-[0-9a-f]{4}-4[0-9a-f]{3}-[89ab][0-9a-f]{3}-[0-9a-f]{12}$",
        },
        "timestamp": {"type": "string"},
        "data": {"type": "object"},
        "error": {
            "type": "object",
            "required": ["code", "message"],
            "additionalProperties": False,
            "properties": {
                "code": {"type": "string"},
                "message": {"type": "string"},
                "details": {"type": "object"},
            },
        },
    },
}
