# filemanager/services/validator.py
from __future__ import annotations
from typing import Any, Dict, List
from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

# Envelope every model reply must carry. The action body itself is left to the
# file operations to police.
REPLY_SCHEMA: Dict[str, Any] = {
    "type": "object",
    "properties": {
        "type": {"type": "string", "minLength": 1},
        "message": {"type": "string", "minLength": 1},
        "action": {
            "type": ["object", "null"],
            "properties": {"operation": {"type": "string"}},
        },
    },
    "required": ["type", "message"],
}


class JsonValidatorService:
    """
    Validate decoded JSON against a JSON Schema (draft 2020-12).
    Returns a structured result with validity and error details.
    """

    def __init__(self, schema: Dict[str, Any] = REPLY_SCHEMA):
        Draft202012Validator.check_schema(schema)
        self._validator = Draft202012Validator(schema)

    def validate(self, instance: Any) -> Dict[str, Any]:
        errors: List[ValidationError] = sorted(
            self._validator.iter_errors(instance), key=lambda e: list(e.path)
        )
        if not errors:
            return {"valid": True, "errors": []}

        def to_path(err: ValidationError) -> str:
            # Convert deque/path into JSON Pointer-like string
            segments = [str(p) for p in err.path]
            return "/" + "/".join(segments) if segments else "/"

        return {
            "valid": False,
            "errors": [
                {"path": to_path(e), "keyword": e.validator, "message": e.message}
                for e in errors
            ],
        }
