"""Repository implementations."""

from .proposal_repository import PostgresProposalRepository
from .outbox_repository import PostgresOutboxRepository
from .audit_repository import PostgresAuditRepository
from .notification_repository import PostgresNotificationReceiptRepository

__all__ = [
    "PostgresProposalRepository",
    "PostgresOutboxRepository",
    "PostgresAuditRepository",
    "PostgresNotificationReceiptRepository",
]
