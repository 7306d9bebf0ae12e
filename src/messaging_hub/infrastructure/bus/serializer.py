"""Case event wire format: ``{"event": <type>, "data": {...}}``."""
from __future__ import annotations

import json
from datetime import datetime
from typing import Any
from uuid import UUID

from messaging_hub.application.dto.events import CaseEvent


class _Encoder(json.JSONEncoder):
    def default(self, o: object) -> Any:
        if isinstance(o, UUID):
            return str(o)
        if isinstance(o, datetime):
            return o.isoformat()
        return super().default(o)


def encode_case_event(event: CaseEvent) -> str:
    return json.dumps({"event": event.event_type, "data": event.data}, cls=_Encoder)


def decode_case_event(raw: str | bytes) -> CaseEvent:
    """Raises ValueError when the frame is not a case event."""
    body = json.loads(raw)
    if not isinstance(body, dict) or not isinstance(body.get("event"), str):
        raise ValueError("case event frame must carry an 'event' name")
    data = body.get("data") or {}
    if not isinstance(data, dict):
        raise ValueError(f"case event {body['event']} has non-object data")
    return CaseEvent(event_type=body["event"], data=data)
