"""Proposal aggregate and its ordered approval steps."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from decimal import Decimal
from enum import Enum
from typing import List, Optional

from src.domain.exceptions import InvalidProposalStateException


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ProposalStatus(str, Enum):
    """Lifecycle status of a proposal."""

    DRAFT = "DRAFT"
    UNDER_REVIEW = "UNDER_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"

    @property
    def is_terminal(self) -> bool:
        return self in (ProposalStatus.APPROVED, ProposalStatus.REJECTED)


class StepDecision(str, Enum):
    """Decision recorded on a single approval step."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


@dataclass
class ApprovalStep:
    """One role's stage within a proposal's approval chain."""

    step_order: int
    role: str
    decision: StepDecision = StepDecision.PENDING
    approver: Optional[str] = None
    comments: Optional[str] = None
    decided_at: Optional[datetime] = None
    id: Optional[int] = None

    @property
    def is_pending(self) -> bool:
        return self.decision == StepDecision.PENDING

    def record(
        self,
        decision: StepDecision,
        approver: str,
        comments: Optional[str],
        decided_at: datetime,
    ) -> None:
        self.decision = decision
        self.approver = approver
        self.comments = comments
        self.decided_at = decided_at

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "step_order": self.step_order,
            "role": self.role,
            "decision": self.decision.value,
            "approver": self.approver,
            "comments": self.comments,
            "decided_at": self.decided_at.isoformat() if self.decided_at else None,
        }


@dataclass
class Proposal:
    """
    Aggregate root for a monetary proposal moving through an approval chain.

    The proposal is mutated only through its transition methods, each of
    which checks every precondition before writing any field:

        DRAFT --submit--> UNDER_REVIEW --approve (last step)--> APPROVED
                                       --approve (other)--> UNDER_REVIEW (index + 1)
                                       --reject--> REJECTED

    Steps are decided strictly in order: only the step at
    current_step_index can take a decision.
    """

    title: str
    applicant_name: str
    amount: Decimal
    description: Optional[str] = None
    approval_chain: Optional[List[str]] = None
    status: ProposalStatus = ProposalStatus.DRAFT
    current_step_index: int = 0
    steps: List[ApprovalStep] = field(default_factory=list)
    id: Optional[int] = None
    version: int = 1
    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)
    submitted_at: Optional[datetime] = None

    @property
    def current_step(self) -> Optional[ApprovalStep]:
        if 0 <= self.current_step_index < len(self.steps):
            return self.steps[self.current_step_index]
        return None

    @property
    def is_last_step(self) -> bool:
        return self.current_step_index >= len(self.steps) - 1

    def submit(self, chain: List[str], now: Optional[datetime] = None) -> None:
        """
        Move a DRAFT proposal to UNDER_REVIEW with a fresh chain of PENDING steps.

        Args:
            chain: Resolved, trimmed role names in order (must be non-empty)
            now: Submission timestamp

        Raises:
            InvalidProposalStateException: If the proposal is not in DRAFT
        """
        if self.status != ProposalStatus.DRAFT:
            raise InvalidProposalStateException(
                f"Only DRAFT proposals can be submitted; status={self.status.value}",
                proposal_id=self.id,
            )
        if not chain:
            raise InvalidProposalStateException(
                "Approval chain must contain at least one role",
                proposal_id=self.id,
            )

        now = now or utcnow()
        self.steps = [
            ApprovalStep(step_order=i, role=role) for i, role in enumerate(chain)
        ]
        self.status = ProposalStatus.UNDER_REVIEW
        self.current_step_index = 0
        self.submitted_at = now
        self.updated_at = now

    def approve_current(
        self,
        approver: str,
        comments: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ApprovalStep:
        """
        Approve the current step, then advance or finalize.

        Returns:
            The step that was just decided
        """
        step = self._require_actionable_step()
        now = now or utcnow()
        step.record(StepDecision.APPROVED, approver, comments, now)

        if self.is_last_step:
            self.status = ProposalStatus.APPROVED
        else:
            self.current_step_index += 1

        self.updated_at = now
        return step

    def reject_current(
        self,
        approver: str,
        comments: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> ApprovalStep:
        """
        Reject the current step. REJECTED is terminal; later steps stay PENDING.

        Returns:
            The step that was just decided
        """
        step = self._require_actionable_step()
        now = now or utcnow()
        step.record(StepDecision.REJECTED, approver, comments, now)

        self.status = ProposalStatus.REJECTED
        self.updated_at = now
        return step

    def _require_actionable_step(self) -> ApprovalStep:
        if self.status != ProposalStatus.UNDER_REVIEW:
            raise InvalidProposalStateException(
                f"Proposal is not UNDER_REVIEW; status={self.status.value}",
                proposal_id=self.id,
            )
        if not self.steps:
            raise InvalidProposalStateException(
                "No approval steps configured",
                proposal_id=self.id,
            )

        step = self.current_step
        if step is None:
            raise InvalidProposalStateException(
                f"Invalid current step index={self.current_step_index}",
                proposal_id=self.id,
            )
        if not step.is_pending:
            raise InvalidProposalStateException(
                "Current step already decided",
                proposal_id=self.id,
            )
        return step

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "title": self.title,
            "applicant_name": self.applicant_name,
            "amount": str(self.amount),
            "description": self.description,
            "status": self.status.value,
            "current_step_index": self.current_step_index,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "submitted_at": self.submitted_at.isoformat() if self.submitted_at else None,
            "steps": [step.to_dict() for step in self.steps],
        }
