"""Audit entry recorded by the audit sink for every consumed event."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

from .proposal import utcnow


@dataclass
class AuditEntry:
    """One row per successfully consumed event. Duplicates are allowed."""

    event_id: str
    event_type: str
    proposal_id: int
    payload_json: str
    at: datetime
    id: Optional[int] = None
    recorded_at: datetime = field(default_factory=utcnow)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "event_id": self.event_id,
            "event_type": self.event_type,
            "proposal_id": self.proposal_id,
            "payload_json": self.payload_json,
            "at": self.at.isoformat(),
            "recorded_at": self.recorded_at.isoformat(),
        }
