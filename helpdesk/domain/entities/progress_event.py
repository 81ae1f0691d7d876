"""ProgressEvent — one entry of a ticket processing stream."""

import json
from dataclasses import dataclass, field
from datetime import datetime, timezone

from helpdesk.domain.value_objects.enums import EventType

TERMINAL_EVENT_TYPES = (EventType.COMPLETE, EventType.ERROR)


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


@dataclass(frozen=True)
class ProgressEvent:
    type: EventType
    data: dict
    agent: str | None = None
    phase: str | None = None
    timestamp: str = field(default_factory=_utc_now_iso)

    @property
    def is_terminal(self) -> bool:
        return self.type in TERMINAL_EVENT_TYPES

    def to_dict(self) -> dict:
        payload: dict = {"type": self.type.value}
        if self.agent is not None:
            payload["agent"] = self.agent
        if self.phase is not None:
            payload["phase"] = self.phase
        payload["data"] = self.data
        payload["timestamp"] = self.timestamp
        return payload

    def to_sse(self) -> str:
        """Render as a server-sent events frame: ``data: <json>\\n\\n``."""
        return f"data: {json.dumps(self.to_dict(), default=str)}\n\n"
