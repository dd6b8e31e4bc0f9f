"""
Complaint repository tests
==========================
"""
import uuid

import pytest

from hubdesk.errors import AuthorizationError, NotFoundError, ValidationError
from hubdesk.models.audit_log import AuditLog
from hubdesk.models.complaint import Complaint
from hubdesk.modules.complaints import service


@pytest.fixture
def people(make_profile):
    return {
        "a": make_profile("A", hub="Kochi Hub"),
        "b": make_profile("B", hub="Kochi Hub"),
        "m": make_profile("M", role="manager"),
        "admin": make_profile("Root", role="admin"),
    }


# =============================================================================
# Validation
# =============================================================================

@pytest.mark.parametrize(
    "field, value, ok",
    [
        ("title", "abcd", False),
        ("title", "abcde", True),
        ("title", "x" * 200, True),
        ("title", "x" * 201, False),
        ("description", "d" * 19, False),
        ("description", "d" * 20, True),
        ("description", "d" * 2000, True),
        ("description", "d" * 2001, False),
        ("hub", "   ", False),
        ("category", "plumbing", False),
        ("priority", "urgent", False),
    ],
)
def test_field_boundaries(people, caller_for, draft, field, value, ok):
    data = draft(**{field: value})
    if ok:
        complaint = service.create_complaint(data, caller_for(people["a"]))
        assert getattr(complaint, field) == value
    else:
        with pytest.raises(ValidationError):
            service.create_complaint(data, caller_for(people["a"]))
        assert Complaint.query.count() == 0


def test_strings_are_trimmed_and_priority_defaults(people, caller_for, draft):
    data = draft(title="   Leaking roof   ", room="  ")
    data.pop("priority")
    complaint = service.create_complaint(data, caller_for(people["a"]))
    assert complaint.title == "Leaking roof"
    assert complaint.room is None
    assert complaint.priority == "medium"
    assert complaint.status == "new"


def test_padded_title_counts_trimmed_length(people, caller_for, draft):
    with pytest.raises(ValidationError) as exc:
        service.create_complaint(draft(title="  abcd  "), caller_for(people["a"]))
    assert "title" in exc.value.fields


# =============================================================================
# Creation and anonymity
# =============================================================================

def test_non_anonymous_records_submitter(people, caller_for, draft):
    complaint = service.create_complaint(draft(), caller_for(people["a"]))
    assert complaint.user_id == people["a"].id
    assert complaint.is_anonymous is False


def test_anonymous_never_records_submitter(people, caller_for, draft):
    for who in ("a", "m", "admin"):
        complaint = service.create_complaint(draft(), caller_for(people[who]), anonymous=True)
        assert complaint.user_id is None
        assert complaint.is_anonymous is True
    assert Complaint.query.filter(Complaint.is_anonymous.is_(True), Complaint.user_id.isnot(None)).count() == 0


def test_resubmitting_creates_duplicates(people, caller_for, draft):
    service.create_complaint(draft(), caller_for(people["a"]))
    service.create_complaint(draft(), caller_for(people["a"]))
    assert Complaint.query.count() == 2


# =============================================================================
# Listing and reading
# =============================================================================

def test_students_list_only_their_own(people, caller_for, draft):
    mine = service.create_complaint(draft(), caller_for(people["a"]))
    service.create_complaint(draft(title="Broken chair"), caller_for(people["b"]))
    service.create_complaint(draft(title="Anonymous one"), caller_for(people["a"]), anonymous=True)

    listed = service.list_for_caller(caller_for(people["a"]))
    assert [c.id for c in listed] == [mine.id]


@pytest.mark.parametrize("role", ["m", "admin"])
def test_staff_list_everything_newest_first(people, caller_for, draft, role):
    first = service.create_complaint(draft(title="First one"), caller_for(people["a"]))
    second = service.create_complaint(draft(title="Second one", hub="Pune Hub"), caller_for(people["b"]))
    third = service.create_complaint(draft(title="Third one"), caller_for(people["a"]), anonymous=True)

    listed = service.list_for_caller(caller_for(people[role]))
    assert [c.id for c in listed] == [third.id, second.id, first.id]


def test_staff_filters(people, caller_for, draft):
    a = caller_for(people["a"])
    m = caller_for(people["m"])
    kochi = service.create_complaint(draft(title="Projector broken", category="equipment"), a)
    pune = service.create_complaint(draft(title="Dirty washroom", hub="Pune Hub", priority="low"), a)
    service.update_status(pune.id, "resolved", m)

    assert [c.id for c in service.list_for_caller(m, {"hub": "Pune Hub"})] == [pune.id]
    assert [c.id for c in service.list_for_caller(m, {"status": "resolved"})] == [pune.id]
    assert [c.id for c in service.list_for_caller(m, {"priority": "high"})] == [kochi.id]
    assert [c.id for c in service.list_for_caller(m, {"q": "PROJECTOR"})] == [kochi.id]
    assert [c.id for c in service.list_for_caller(m, {"q": "pune"})] == [pune.id]
    assert len(service.list_for_caller(m, {"status": "all", "hub": "all"})) == 2
    with pytest.raises(ValidationError):
        service.list_for_caller(m, {"status": "archived"})


def test_search_treats_wildcards_literally(people, caller_for, draft):
    a = caller_for(people["a"])
    m = caller_for(people["m"])
    service.create_complaint(draft(title="Projector 100 lumens"), a)
    noisy = service.create_complaint(draft(title="Fan at 100% noise"), a)
    service.create_complaint(draft(title="Lab A broken"), a)

    assert [c.id for c in service.list_for_caller(m, {"q": "100%"})] == [noisy.id]
    assert service.list_for_caller(m, {"q": "_"}) == []


def test_get_hides_foreign_and_missing_rows_alike(people, caller_for, draft):
    complaint = service.create_complaint(draft(), caller_for(people["a"]))
    assert service.get_complaint(complaint.id, caller_for(people["a"])).id == complaint.id
    assert service.get_complaint(complaint.id, caller_for(people["m"])).id == complaint.id
    with pytest.raises(NotFoundError):
        service.get_complaint(complaint.id, caller_for(people["b"]))
    with pytest.raises(NotFoundError):
        service.get_complaint(uuid.uuid4(), caller_for(people["m"]))


# =============================================================================
# Status and assignment
# =============================================================================

def test_students_cannot_change_status_or_assign(people, caller_for, draft):
    a = caller_for(people["a"])
    complaint = service.create_complaint(draft(), a)
    with pytest.raises(AuthorizationError):
        service.update_status(complaint.id, "resolved", a)
    with pytest.raises(AuthorizationError):
        service.assign(complaint.id, people["m"].id, a)
    assert service.get_complaint(complaint.id, a).status == "new"


def test_any_status_transition_is_allowed(people, caller_for, draft):
    m = caller_for(people["m"])
    complaint = service.create_complaint(draft(), caller_for(people["a"]))
    for status in ("closed", "new", "resolved", "acknowledged", "in_progress"):
        assert service.update_status(complaint.id, status, m).status == status
    with pytest.raises(ValidationError):
        service.update_status(complaint.id, "reopened", m)


def test_status_change_refreshes_updated_at_and_audits(people, caller_for, draft):
    m = caller_for(people["m"])
    complaint = service.create_complaint(draft(), caller_for(people["a"]))
    before = complaint.updated_at

    updated = service.update_status(complaint.id, "acknowledged", m)
    assert updated.status == "acknowledged"
    assert updated.updated_at > before

    entry = AuditLog.query.filter_by(action="complaint.status_changed").one()
    assert entry.actor_id == people["m"].id
    assert entry.details == {"complaintId": str(complaint.id), "from": "new", "to": "acknowledged"}


def test_assign_and_clear(people, caller_for, draft):
    m = caller_for(people["m"])
    complaint = service.create_complaint(draft(), caller_for(people["a"]))
    before = complaint.updated_at

    assert service.assign(complaint.id, people["m"].id, m).manager_id == people["m"].id
    assert complaint.updated_at > before
    assert service.assign(complaint.id, people["admin"].id, m).manager_id == people["admin"].id
    assert service.assign(complaint.id, None, m).manager_id is None
    assert AuditLog.query.filter_by(action="complaint.assigned").count() == 3


def test_assignee_must_be_staff(people, caller_for, draft):
    m = caller_for(people["m"])
    complaint = service.create_complaint(draft(), caller_for(people["a"]))
    with pytest.raises(ValidationError):
        service.assign(complaint.id, people["b"].id, m)
    with pytest.raises(ValidationError):
        service.assign(complaint.id, uuid.uuid4(), m)


# =============================================================================
# Dashboard helpers
# =============================================================================

def test_stats_and_hubs_follow_visibility(people, caller_for, draft):
    a = caller_for(people["a"])
    m = caller_for(people["m"])
    c1 = service.create_complaint(draft(), a)
    c2 = service.create_complaint(draft(hub="Pune Hub"), a)
    service.create_complaint(draft(hub="Delhi Hub"), caller_for(people["b"]))
    service.update_status(c1.id, "in_progress", m)
    service.update_status(c2.id, "closed", m)

    assert service.complaint_stats(a) == {"total": 2, "new": 0, "inProgress": 1, "resolved": 1}
    assert service.complaint_stats(m) == {"total": 3, "new": 1, "inProgress": 1, "resolved": 1}
    assert service.list_hubs(a) == ["Kochi Hub", "Pune Hub"]
    assert service.list_hubs(m) == ["Delhi Hub", "Kochi Hub", "Pune Hub"]
