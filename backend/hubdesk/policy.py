"""Authorization predicates.

Pure functions over the caller (id + role) and the ownership fields of the
row being accessed. Services evaluate them before touching the store; nothing
here queries the database.
"""
from __future__ import annotations

import uuid
from dataclasses import dataclass
from typing import Any, Optional

STAFF_ROLES = frozenset({"manager", "admin"})


@dataclass(frozen=True)
class Caller:
    id: Optional[uuid.UUID]
    role: str = "student"

    @property
    def is_staff(self) -> bool:
        return self.role in STAFF_ROLES

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @classmethod
    def from_profile(cls, profile: Any) -> "Caller":
        return cls(id=profile.id, role=str(profile.role or "student"))


def _owns(caller: Caller, owner_id: Optional[uuid.UUID]) -> bool:
    # An absent owner (anonymous row) never matches, not even an absent caller
    return caller.id is not None and owner_id is not None and caller.id == owner_id


def can_read_complaint(caller: Caller, row: Any) -> bool:
    return _owns(caller, row.user_id) or caller.is_staff


def can_write_complaint_status(caller: Caller) -> bool:
    return caller.is_staff


def can_assign_complaint(caller: Caller) -> bool:
    return caller.is_staff


def can_create_complaint(caller: Caller, row: Any) -> bool:
    return _owns(caller, row.user_id) or bool(row.is_anonymous)


def can_read_sub_resource(caller: Caller, parent_row: Any) -> bool:
    return can_read_complaint(caller, parent_row)


def can_post_internal_message(caller: Caller) -> bool:
    return caller.is_staff


def can_read_internal_messages(caller: Caller) -> bool:
    return caller.is_staff


def can_read_audit_log(caller: Caller) -> bool:
    return caller.is_admin


def can_manage_profiles(caller: Caller) -> bool:
    return caller.is_admin
