from __future__ import annotations

from flask import Blueprint, Response, stream_with_context
import json
import time
from queue import Empty

from ...security import require_caller
from .bus import subscribe, unsubscribe

bp = Blueprint("events", __name__, url_prefix="/events")

KEEPALIVE_SECONDS = 15


@bp.get("/stream")
def stream_events():
    """Server-Sent Events stream of complaint events for the caller.

    Events: complaint.status, complaint.assigned, message.created.
    """
    pid = require_caller().id
    q = subscribe(pid)

    def event_stream():
        try:
            # Initial comment to establish stream
            yield ": connected\n\n"
            while True:
                try:
                    # Keep below gunicorn's timeout to ensure periodic yields
                    evt = q.get(timeout=KEEPALIVE_SECONDS)
                except Empty:
                    yield "event: ping\n" + f"data: {json.dumps({'ts': int(time.time())})}\n\n"
                    continue
                yield f"event: {evt.get('kind', 'message')}\n" + f"data: {json.dumps(evt)}\n\n"
        finally:
            unsubscribe(pid, q)

    headers = {
        "Content-Type": "text/event-stream",
        "Cache-Control": "no-cache",
        "Connection": "keep-alive",
        "X-Accel-Buffering": "no",
    }
    return Response(stream_with_context(event_stream()), headers=headers)
