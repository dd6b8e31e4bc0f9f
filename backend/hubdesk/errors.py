"""Error taxonomy shared by services and the HTTP layer.

Services raise these; the application factory maps them onto JSON responses
of the form ``{"error": message}``.
"""
from __future__ import annotations

from typing import Any


class HubDeskError(Exception):
    status_code = 500

    def __init__(self, message: str, **payload: Any) -> None:
        super().__init__(message)
        self.message = message
        self.payload = payload

    def to_dict(self) -> dict:
        body: dict[str, Any] = {"error": self.message}
        body.update({k: v for k, v in self.payload.items() if v is not None})
        return body


class ValidationError(HubDeskError):
    """Field constraints violated before any store call."""

    status_code = 400

    def __init__(self, message: str, fields: dict | None = None) -> None:
        super().__init__(message, fields=fields)
        self.fields = fields or {}


class AuthenticationError(HubDeskError):
    status_code = 401


class AuthorizationError(HubDeskError):
    status_code = 403


class NotFoundError(HubDeskError):
    """Row absent, or hidden from the caller by policy."""

    status_code = 404


class ConflictError(HubDeskError):
    status_code = 409


class StorageError(HubDeskError):
    """Persistence or blob store failure."""

    status_code = 502


def first_message(messages: dict | list | str) -> str:
    """Pick a human readable message out of a marshmallow error structure."""
    if isinstance(messages, str):
        return messages
    if isinstance(messages, list):
        return first_message(messages[0]) if messages else "Invalid input"
    for value in messages.values():
        return first_message(value)
    return "Invalid input"
