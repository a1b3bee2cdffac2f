"""
Domain Interfaces (Ports)
"""

from .repositories import (
    AuditRepository,
    NotificationReceiptRepository,
    OutboxRepository,
    ProposalRepository,
)
from .messaging import (
    ConsumedRecord,
    EventChannel,
    EventPublisher,
    Headers,
    MessageSource,
)
from .clients import NotificationGateway

__all__ = [
    "AuditRepository",
    "NotificationReceiptRepository",
    "OutboxRepository",
    "ProposalRepository",
    "ConsumedRecord",
    "EventChannel",
    "EventPublisher",
    "Headers",
    "MessageSource",
    "NotificationGateway",
]
