"""Pydantic schemas for API request/response validation."""

from .proposal import (
    ApprovalStepSchema,
    CreateProposalSchema,
    ProposalPageSchema,
    ProposalResponseSchema,
    StepDecisionSchema,
)
from .audit import AuditEntrySchema, AuditPageSchema
from .error import ErrorResponseSchema

__all__ = [
    "ApprovalStepSchema",
    "CreateProposalSchema",
    "ProposalPageSchema",
    "ProposalResponseSchema",
    "StepDecisionSchema",
    "AuditEntrySchema",
    "AuditPageSchema",
    "ErrorResponseSchema",
]
