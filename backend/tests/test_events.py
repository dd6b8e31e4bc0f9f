"""
Event bus tests
===============
"""
import uuid
from queue import Empty

import pytest

from hubdesk.modules.complaints import service as complaints
from hubdesk.modules.events import bus
from hubdesk.modules.messages import service as messages


@pytest.fixture
def subscription():
    opened = []

    def _open(profile_id):
        q = bus.subscribe(profile_id)
        opened.append((profile_id, q))
        return q

    yield _open
    for pid, q in opened:
        bus.unsubscribe(pid, q)


def _drain(q):
    events = []
    while True:
        try:
            events.append(q.get_nowait())
        except Empty:
            return events


def test_publish_without_subscribers_is_dropped():
    assert bus.publish(uuid.uuid4(), {"kind": "noop"}) == 0


def test_subscribers_receive_their_events_only(subscription):
    alice, bob = uuid.uuid4(), uuid.uuid4()
    qa = subscription(alice)
    qb = subscription(bob)
    assert bus.publish(alice, {"kind": "ping"}) == 1
    assert _drain(qa) == [{"kind": "ping"}]
    assert _drain(qb) == []


def test_complaint_events_reach_owner_and_manager_not_actor(subscription, make_profile, caller_for, draft):
    a = make_profile("A")
    m = make_profile("M", role="manager")
    admin = make_profile("Root", role="admin")
    complaint = complaints.create_complaint(draft(), caller_for(a))
    qa, qm, qadmin = subscription(a.id), subscription(m.id), subscription(admin.id)

    complaints.assign(complaint.id, m.id, caller_for(admin))
    complaints.update_status(complaint.id, "in_progress", caller_for(m))
    messages.post_message(complaint.id, caller_for(a), "Still broken")

    kinds_a = [e["kind"] for e in _drain(qa)]
    kinds_m = [e["kind"] for e in _drain(qm)]
    assert kinds_a == ["complaint.assigned", "complaint.status"]
    assert kinds_m == ["complaint.assigned", "message.created"]
    assert _drain(qadmin) == []


def test_internal_notes_do_not_publish(subscription, make_profile, caller_for, draft):
    a = make_profile("A")
    m = make_profile("M", role="manager")
    complaint = complaints.create_complaint(draft(), caller_for(a))
    qa = subscription(a.id)
    messages.post_message(complaint.id, caller_for(m), "Internal only", internal=True)
    assert _drain(qa) == []
