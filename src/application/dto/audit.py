"""Data transfer objects for the audit read API."""

from dataclasses import dataclass
from typing import List


@dataclass(frozen=True)
class AuditEntryDTO:
    id: int
    event_id: str
    event_type: str
    proposal_id: int
    payload_json: str
    at: str

    @classmethod
    def from_entity(cls, entry) -> "AuditEntryDTO":
        return cls(
            id=entry.id,
            event_id=entry.event_id,
            event_type=entry.event_type,
            proposal_id=entry.proposal_id,
            payload_json=entry.payload_json,
            at=entry.at.isoformat(),
        )


@dataclass(frozen=True)
class AuditPage:
    """One page of audit entries."""

    items: List[AuditEntryDTO]
    page: int
    size: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.size - 1) // self.size if self.size else 0
