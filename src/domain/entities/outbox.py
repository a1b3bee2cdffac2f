"""OutboundEvent entity for the transactional outbox."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from .proposal import utcnow


class OutboxStatus(str, Enum):
    """Relay status of an outbox row."""

    PENDING = "pending"
    SENT = "sent"
    FAILED = "failed"


@dataclass
class OutboundEvent:
    """
    A domain event stored in the same transaction as the state change it
    describes, waiting to be relayed to the event channel.

    `body` holds the exact wire encoding so the relay republishes the same
    bytes that would have been sent directly.
    """

    event_id: str
    event_type: str
    proposal_id: int
    body: str
    id: UUID = field(default_factory=uuid4)
    status: OutboxStatus = OutboxStatus.PENDING
    attempts: int = 0
    last_attempt_at: Optional[datetime] = None
    last_error: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)

    def mark_sent(self) -> None:
        """Mark the event as relayed to the channel."""
        self.status = OutboxStatus.SENT
        self.attempts += 1
        self.last_attempt_at = utcnow()
        self.last_error = None

    def mark_attempt_failed(self, error: str, max_attempts: int) -> None:
        """Record a failed relay; give up once max_attempts is reached."""
        self.attempts += 1
        self.last_attempt_at = utcnow()
        self.last_error = error[:500]
        self.status = (
            OutboxStatus.FAILED if self.attempts >= max_attempts else OutboxStatus.PENDING
        )
