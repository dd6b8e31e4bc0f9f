from flask import request
from marshmallow import Schema, ValidationError as MarshmallowValidationError

from ..errors import ValidationError, first_message


def json_object() -> dict:
    """Parsed JSON request body; a missing body reads as {}, anything but an object is rejected."""
    data = request.get_json(silent=True)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValidationError("JSON object expected")
    return data


def load_or_raise(schema: Schema, data) -> dict:
    """Run a marshmallow load, translating failures into our ValidationError."""
    try:
        return schema.load(data or {})
    except MarshmallowValidationError as exc:
        raise ValidationError(first_message(exc.messages), fields=exc.messages) from exc
