"""Domain events emitted by the approval workflow."""

from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Union
from uuid import uuid4

from .proposal import utcnow


class ProposalEventType(str, Enum):
    """Types of proposal workflow events."""

    PROPOSAL_SUBMITTED = "PROPOSAL_SUBMITTED"
    STEP_APPROVED = "STEP_APPROVED"
    STEP_REJECTED = "STEP_REJECTED"
    PROPOSAL_APPROVED = "PROPOSAL_APPROVED"
    PROPOSAL_REJECTED = "PROPOSAL_REJECTED"


# -----------------------------------------------------------------------------
# Payload variants, one per event type. `extra` keeps wire keys this version
# does not know about so consumers never fail on newer producers.
# -----------------------------------------------------------------------------

@dataclass(frozen=True)
class SubmittedPayload:
    chain: List[str]
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class StepApprovedPayload:
    role: str
    approver: str
    next_step: int
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class DecisionPayload:
    """Final approval of the last step."""

    role: str
    approver: str
    extra: Dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class RejectionPayload:
    role: str
    approver: str
    reason: Optional[str] = None
    extra: Dict[str, Any] = field(default_factory=dict)


EventPayload = Union[SubmittedPayload, StepApprovedPayload, DecisionPayload, RejectionPayload]

PAYLOAD_TYPES: Dict[ProposalEventType, type] = {
    ProposalEventType.PROPOSAL_SUBMITTED: SubmittedPayload,
    ProposalEventType.STEP_APPROVED: StepApprovedPayload,
    ProposalEventType.STEP_REJECTED: RejectionPayload,
    ProposalEventType.PROPOSAL_APPROVED: DecisionPayload,
    ProposalEventType.PROPOSAL_REJECTED: RejectionPayload,
}


@dataclass(frozen=True)
class ProposalEvent:
    """
    Immutable record of a completed proposal state transition.

    Constructed once per transition by the workflow engine. The id and
    timestamp default to emission time when not supplied.
    """

    type: ProposalEventType
    proposal_id: int
    payload: EventPayload
    id: Optional[str] = None
    at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        expected = PAYLOAD_TYPES[self.type]
        if not isinstance(self.payload, expected):
            raise TypeError(
                f"{self.type.value} requires {expected.__name__}, "
                f"got {type(self.payload).__name__}"
            )

    def with_id(self) -> "ProposalEvent":
        """Return this event, assigning a fresh identifier if it has none."""
        if self.id:
            return self
        return replace(self, id=str(uuid4()))

    # Convenience constructors used by the workflow engine

    @classmethod
    def submitted(cls, proposal_id: int, chain: List[str]) -> "ProposalEvent":
        return cls(
            id=str(uuid4()),
            type=ProposalEventType.PROPOSAL_SUBMITTED,
            proposal_id=proposal_id,
            payload=SubmittedPayload(chain=list(chain)),
        )

    @classmethod
    def step_approved(
        cls, proposal_id: int, role: str, approver: str, next_step: int
    ) -> "ProposalEvent":
        return cls(
            id=str(uuid4()),
            type=ProposalEventType.STEP_APPROVED,
            proposal_id=proposal_id,
            payload=StepApprovedPayload(role=role, approver=approver, next_step=next_step),
        )

    @classmethod
    def proposal_approved(cls, proposal_id: int, role: str, approver: str) -> "ProposalEvent":
        return cls(
            id=str(uuid4()),
            type=ProposalEventType.PROPOSAL_APPROVED,
            proposal_id=proposal_id,
            payload=DecisionPayload(role=role, approver=approver),
        )

    @classmethod
    def proposal_rejected(
        cls, proposal_id: int, role: str, approver: str, reason: Optional[str]
    ) -> "ProposalEvent":
        return cls(
            id=str(uuid4()),
            type=ProposalEventType.PROPOSAL_REJECTED,
            proposal_id=proposal_id,
            payload=RejectionPayload(role=role, approver=approver, reason=reason),
        )
