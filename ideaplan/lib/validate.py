"""
Schema validation for ideaplan.

Every generator payload is checked against a JSON Schema before any stage
consumes it. Fails hard with a clear path to the offending field.
"""

import json
from functools import lru_cache
from pathlib import Path
from typing import Any

import jsonschema

from ideaplan.errors import ValidationError
from ideaplan.lib.constants import IDEA_ID_PATTERN, MAX_IDEA_ID_LEN

SCHEMAS_DIR = Path(__file__).parent.parent / "schemas"


class SchemaError(Exception):
    """Schema validation failed."""

    def __init__(self, schema_name: str, message: str, path: str = None):
        self.schema_name = schema_name
        self.path = path
        super().__init__(f"[{schema_name}] {message}" + (f" at {path}" if path else ""))


@lru_cache(maxsize=16)
def _load_schema(schema_name: str) -> dict:
    """Load schema by name, with caching."""
    schema_path = SCHEMAS_DIR / f"{schema_name}.schema.json"
    if not schema_path.exists():
        raise SchemaError(schema_name, f"Schema file not found: {schema_path}")
    return json.loads(schema_path.read_text())


def validate(data: Any, schema_name: str) -> None:
    """
    Validate data against named schema.

    Args:
        data: Parsed JSON value to validate
        schema_name: Schema name (e.g., "questions", "idea_analysis", "tasks")

    Raises:
        SchemaError: If validation fails
    """
    schema = _load_schema(schema_name)

    try:
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        path = ".".join(str(p) for p in e.absolute_path) if e.absolute_path else "(root)"
        raise SchemaError(schema_name, e.message, path) from None


def is_valid_idea_id(idea_id) -> bool:
    """Check if an idea id is well-formed (also used as a file name)."""
    return (
        isinstance(idea_id, str)
        and bool(IDEA_ID_PATTERN.match(idea_id))
        and len(idea_id) <= MAX_IDEA_ID_LEN
    )


def require_idea_id(idea_id) -> str:
    """Raise ValidationError unless idea_id is well-formed."""
    if not is_valid_idea_id(idea_id):
        raise ValidationError(
            "idea_id",
            f"must be 1-{MAX_IDEA_ID_LEN} characters of letters, digits, '-' or '_'",
        )
    return idea_id


def require_text(field: str, value, max_length: int) -> str:
    """Raise ValidationError unless value is a non-blank string of at most max_length chars."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(field, "must not be empty")
    if len(value) > max_length:
        raise ValidationError(field, f"must be at most {max_length} characters (got {len(value)})")
    return value
