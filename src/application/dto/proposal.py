"""Data transfer objects for proposal workflow operations."""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional


@dataclass(frozen=True)
class CreateProposalRequest:
    """Input data for creating a DRAFT proposal."""

    title: str
    applicant_name: str
    amount: Decimal
    description: Optional[str] = None
    approval_chain: Optional[List[str]] = None


@dataclass(frozen=True)
class StepDecisionRequest:
    """Input data for approving or rejecting the current step."""

    approver: str
    comments: Optional[str] = None

    def validate(self) -> List[str]:
        errors = []

        if not self.approver or not self.approver.strip():
            errors.append("approver is required")

        return errors


@dataclass(frozen=True)
class ApprovalStepDTO:
    """Single step within a proposal response."""

    step_order: int
    role: str
    decision: str
    approver: Optional[str]
    comments: Optional[str]
    decided_at: Optional[str]


@dataclass(frozen=True)
class ProposalResponse:
    """Response data for a proposal with its approval steps."""

    id: int
    title: str
    applicant_name: str
    amount: Decimal
    description: Optional[str]
    status: str
    current_step_index: int
    created_at: str
    updated_at: str
    submitted_at: Optional[str]
    steps: List[ApprovalStepDTO] = field(default_factory=list)

    @classmethod
    def from_entity(cls, proposal) -> "ProposalResponse":
        steps = [
            ApprovalStepDTO(
                step_order=step.step_order,
                role=step.role,
                decision=step.decision.value,
                approver=step.approver,
                comments=step.comments,
                decided_at=step.decided_at.isoformat() if step.decided_at else None,
            )
            for step in proposal.steps
        ]

        return cls(
            id=proposal.id,
            title=proposal.title,
            applicant_name=proposal.applicant_name,
            amount=proposal.amount,
            description=proposal.description,
            status=proposal.status.value,
            current_step_index=proposal.current_step_index,
            created_at=proposal.created_at.isoformat(),
            updated_at=proposal.updated_at.isoformat(),
            submitted_at=proposal.submitted_at.isoformat() if proposal.submitted_at else None,
            steps=steps,
        )


@dataclass(frozen=True)
class ProposalPage:
    """One page of proposals."""

    items: List[ProposalResponse]
    page: int
    size: int
    total: int

    @property
    def pages(self) -> int:
        return (self.total + self.size - 1) // self.size if self.size else 0
