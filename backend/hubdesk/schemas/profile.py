from collections.abc import Mapping

from marshmallow import EXCLUDE, Schema, fields, pre_load, validate

from ..models.enums import USER_ROLES


def _strip_all(data):
    if not isinstance(data, Mapping):
        return data
    return {k: (v.strip() if isinstance(v, str) else v) for k, v in data.items()}


class RegisterSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, error_messages={"invalid": "Valid email is required"})
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=8, error="Password must be at least 8 characters"),
    )
    name = fields.Str(required=True, validate=[validate.Length(min=1, error="Name is required"), validate.Length(max=120, error="Name too long")])
    role = fields.Str(load_default="student", validate=validate.OneOf(USER_ROLES, error="Invalid role"))
    hub = fields.Str(allow_none=True, load_default=None, validate=validate.Length(max=100))

    @pre_load
    def normalize(self, data, **kwargs):
        data = _strip_all(data)
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data["email"] = data["email"].lower()
        if isinstance(data, dict) and not data.get("hub"):
            data["hub"] = None
        return data


class LoginSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    email = fields.Email(required=True, error_messages={"invalid": "Valid email is required"})
    password = fields.Str(required=True, load_only=True, validate=validate.Length(min=1, error="Password is required"))

    @pre_load
    def normalize(self, data, **kwargs):
        data = _strip_all(data)
        if isinstance(data, dict) and isinstance(data.get("email"), str):
            data["email"] = data["email"].lower()
        return data


class ProfileUpdateSchema(Schema):
    """Fields a user may change on their own profile."""

    class Meta:
        unknown = EXCLUDE

    name = fields.Str(validate=[validate.Length(min=1, error="Name is required"), validate.Length(max=120, error="Name too long")])
    hub = fields.Str(allow_none=True, validate=validate.Length(max=100, error="Hub name too long"))
    phone = fields.Str(allow_none=True, validate=validate.Length(max=40, error="Phone number too long"))
    avatar_url = fields.Str(data_key="avatarUrl", allow_none=True, validate=validate.Length(max=512))

    @pre_load
    def normalize(self, data, **kwargs):
        data = _strip_all(data)
        if isinstance(data, dict):
            for key in ("hub", "phone", "avatarUrl"):
                if key in data and not data[key]:
                    data[key] = None
        return data


class AdminProfileUpdateSchema(Schema):
    class Meta:
        unknown = EXCLUDE

    role = fields.Str(validate=validate.OneOf(USER_ROLES, error="Invalid role"))
    is_verified = fields.Bool(data_key="isVerified")
