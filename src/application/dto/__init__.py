"""Data Transfer Objects for application layer."""

from .proposal import (
    ApprovalStepDTO,
    CreateProposalRequest,
    ProposalPage,
    ProposalResponse,
    StepDecisionRequest,
)
from .audit import AuditEntryDTO, AuditPage

__all__ = [
    "ApprovalStepDTO",
    "CreateProposalRequest",
    "ProposalPage",
    "ProposalResponse",
    "StepDecisionRequest",
    "AuditEntryDTO",
    "AuditPage",
]
