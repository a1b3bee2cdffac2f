"""Notification entities for the notification sink."""

from dataclasses import dataclass, field
from datetime import datetime

from .proposal import utcnow


@dataclass(frozen=True)
class Notification:
    """A message the notification sink would deliver for one event."""

    event_id: str
    event_type: str
    proposal_id: int
    recipient: str
    subject: str
    body: str


@dataclass
class NotificationReceipt:
    """Proof that the notification for an event was delivered."""

    event_id: str
    event_type: str
    proposal_id: int
    recipient: str
    channel: str
    sent_at: datetime = field(default_factory=utcnow)
