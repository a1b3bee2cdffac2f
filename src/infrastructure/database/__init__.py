"""Database infrastructure."""

from .connection import get_db_session, DatabaseSessionManager, db_manager
from .models import (
    Base,
    ApprovalStepModel,
    AuditEntryModel,
    NotificationReceiptModel,
    OutboundEventModel,
    ProposalModel,
)

__all__ = [
    "get_db_session",
    "DatabaseSessionManager",
    "db_manager",
    "Base",
    "ApprovalStepModel",
    "AuditEntryModel",
    "NotificationReceiptModel",
    "OutboundEventModel",
    "ProposalModel",
]
