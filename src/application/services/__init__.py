"""Application services (use cases)."""

from .approval_workflow_service import ApprovalWorkflowService
from .audit_service import AuditService
from .event_emitter import DirectEventEmitter, EventEmitter, OutboxEventEmitter
from .notification_service import NotificationService, build_notification
from .outbox_relay import OutboxRelay
from .probe import ProposalEventProbe
from .proposal_service import ProposalService

__all__ = [
    "ApprovalWorkflowService",
    "AuditService",
    "DirectEventEmitter",
    "EventEmitter",
    "OutboxEventEmitter",
    "NotificationService",
    "build_notification",
    "OutboxRelay",
    "ProposalEventProbe",
    "ProposalService",
]
