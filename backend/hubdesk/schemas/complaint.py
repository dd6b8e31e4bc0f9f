from collections.abc import Mapping

from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

from ..models.enums import COMPLAINT_CATEGORIES, COMPLAINT_PRIORITIES

_TEXT_FIELDS = ("title", "description", "category", "hub", "room", "priority")


class ComplaintDraftSchema(Schema):
    """Submission form constraints. Strings are trimmed before length checks."""

    class Meta:
        unknown = EXCLUDE

    title = fields.Str(
        required=True,
        validate=[
            validate.Length(min=5, error="Title must be at least 5 characters"),
            validate.Length(max=200, error="Title too long"),
        ],
    )
    description = fields.Str(
        required=True,
        validate=[
            validate.Length(min=20, error="Description must be at least 20 characters"),
            validate.Length(max=2000, error="Description too long"),
        ],
    )
    category = fields.Str(
        required=True,
        validate=validate.OneOf(COMPLAINT_CATEGORIES, error="Invalid category"),
    )
    hub = fields.Str(
        required=True,
        validate=[
            validate.Length(min=2, error="Hub is required"),
            validate.Length(max=100, error="Hub name too long"),
        ],
    )
    room = fields.Str(
        allow_none=True,
        load_default=None,
        validate=validate.Length(max=100, error="Room name too long"),
    )
    priority = fields.Str(
        load_default="medium",
        validate=validate.OneOf(COMPLAINT_PRIORITIES, error="Invalid priority"),
    )

    @pre_load
    def strip_strings(self, data, **kwargs):
        if not isinstance(data, Mapping):
            return data
        cleaned = dict(data)
        for key in _TEXT_FIELDS:
            if isinstance(cleaned.get(key), str):
                cleaned[key] = cleaned[key].strip()
        if not cleaned.get("room"):
            cleaned["room"] = None
        if not cleaned.get("priority"):
            cleaned.pop("priority", None)
        return cleaned
