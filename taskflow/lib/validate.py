"""
Schema validation for rule definitions.

Workflow and automation rules are written by operators, so every record is
checked against its JSON Schema before the engine acts on it. When a record
breaks several constraints at once, the most specific one is reported.
"""

import json
from pathlib import Path

import jsonschema
from jsonschema.exceptions import best_match


class ValidationError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


SCHEMA_NAMES = ("automation_rule", "workflow_rule")

# Compiled validators keyed by schema name
_validator_cache: dict[str, jsonschema.Draft7Validator] = {}


def _get_schemas_dir() -> Path:
    return Path(__file__).parent.parent / "schemas"


def _get_validator(schema_name: str) -> jsonschema.Draft7Validator:
    if schema_name not in _validator_cache:
        if schema_name not in SCHEMA_NAMES:
            raise ValidationError(schema_name, "Unknown schema")
        schema_path = _get_schemas_dir() / f"{schema_name}.schema.json"
        schema = json.loads(schema_path.read_text())
        jsonschema.Draft7Validator.check_schema(schema)
        _validator_cache[schema_name] = jsonschema.Draft7Validator(schema)
    return _validator_cache[schema_name]


def _format_path(error: jsonschema.ValidationError) -> str:
    # actions.0.config.status
    return ".".join(str(p) for p in error.absolute_path) or "(root)"


def validate(data: dict, schema_name: str) -> None:
    """
    Validate a rule record against its schema.

    Args:
        data: Record as stored (plain dicts and lists)
        schema_name: "automation_rule" or "workflow_rule"

    Raises:
        ValidationError: With the most relevant failure and where it occurred
    """
    error = best_match(_get_validator(schema_name).iter_errors(data))
    if error is not None:
        raise ValidationError(schema_name, error.message, _format_path(error))
