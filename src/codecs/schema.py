"""JSON Schema validation for request and response bodies."""

from typing import Any

from jsonschema import Draft202012Validator


def schema_errors(instance: Any, schema: dict[str, Any]) -> list[str]:
    """Validate an instance and describe every violation.

    Args:
        instance: Parsed JSON value to check.
        schema: JSON Schema (draft 2020-12).

    Returns:
        One ``"<json path>: <message>"`` line per violation, empty if valid.
    """
    validator = Draft202012Validator(schema)
    errors = sorted(validator.iter_errors(instance), key=lambda e: e.json_path)
    return [f"{error.json_path}: {error.message}" for error in errors]


def check_schema(schema: dict[str, Any]) -> dict[str, Any]:
    """Fail fast on a schema that is itself invalid.

    Args:
        schema: JSON Schema to check.

    Returns:
        The schema, unchanged.

    Raises:
        jsonschema.exceptions.SchemaError: If the schema is invalid.
    """
    Draft202012Validator.check_schema(schema)
    return schema
