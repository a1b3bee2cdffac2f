"""Domain Entities - Core business objects."""

from .proposal import (
    ApprovalStep,
    Proposal,
    ProposalStatus,
    StepDecision,
    utcnow,
)
from .event import (
    DecisionPayload,
    EventPayload,
    PAYLOAD_TYPES,
    ProposalEvent,
    ProposalEventType,
    RejectionPayload,
    StepApprovedPayload,
    SubmittedPayload,
)
from .outbox import OutboundEvent, OutboxStatus
from .audit import AuditEntry
from .notification import Notification, NotificationReceipt

__all__ = [
    "ApprovalStep",
    "Proposal",
    "ProposalStatus",
    "StepDecision",
    "utcnow",
    "DecisionPayload",
    "EventPayload",
    "PAYLOAD_TYPES",
    "ProposalEvent",
    "ProposalEventType",
    "RejectionPayload",
    "StepApprovedPayload",
    "SubmittedPayload",
    "OutboundEvent",
    "OutboxStatus",
    "AuditEntry",
    "Notification",
    "NotificationReceipt",
]
