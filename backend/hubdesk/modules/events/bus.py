from __future__ import annotations

import logging
import uuid
from queue import Full, Queue
from threading import Lock
from typing import Any, Dict, Iterable, List, Optional

log = logging.getLogger(__name__)

# Simple in-memory pub/sub for SSE. Not suitable for multi-process deployments;
# clients there keep polling after each mutation.
_subs: dict[uuid.UUID, List[Queue]] = {}
_lock = Lock()

QUEUE_MAX = 100


def subscribe(profile_id: uuid.UUID) -> Queue:
    q: Queue = Queue(maxsize=QUEUE_MAX)
    with _lock:
        _subs.setdefault(profile_id, []).append(q)
    return q


def unsubscribe(profile_id: uuid.UUID, q: Queue) -> None:
    with _lock:
        arr = _subs.get(profile_id)
        if not arr:
            return
        try:
            arr.remove(q)
        except ValueError:
            pass
        if not arr:
            _subs.pop(profile_id, None)


def publish(profile_id: uuid.UUID, event: Dict[str, Any]) -> int:
    """Deliver an event to every open stream of a profile. Returns deliveries."""
    with _lock:
        arr = list(_subs.get(profile_id, []))
    delivered = 0
    for q in arr:
        try:
            q.put_nowait(event)
            delivered += 1
        except Full:
            log.warning("Dropping event for %s: subscriber queue full", profile_id)
    return delivered


def publish_complaint_event(
    complaint: Any,
    kind: str,
    actor_id: Optional[uuid.UUID],
    extra: Optional[Dict[str, Any]] = None,
) -> None:
    """Notify the complaint owner and assigned manager, skipping the actor."""
    event = {"kind": kind, "complaintId": str(complaint.id), "status": complaint.status}
    if extra:
        event.update(extra)
    for rid in _recipients((complaint.user_id, complaint.manager_id), actor_id):
        publish(rid, event)


def _recipients(candidates: Iterable[Optional[uuid.UUID]], actor_id: Optional[uuid.UUID]) -> list[uuid.UUID]:
    seen: list[uuid.UUID] = []
    for rid in candidates:
        if rid is None or rid == actor_id or rid in seen:
            continue
        seen.append(rid)
    return seen
