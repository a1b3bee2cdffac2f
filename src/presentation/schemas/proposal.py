"""Proposal-related Pydantic schemas."""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class CreateProposalSchema(BaseModel):
    """Schema for POST /v1/proposals request body."""

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "title": "Bridge loan",
                    "applicant_name": "Acme Ltd",
                    "amount": "250000.00",
                    "description": "Six month bridge facility",
                    "approval_chain": ["PEER_REVIEW", "MANAGER_APPROVAL", "COMPLIANCE"],
                }
            ]
        }
    )
    title: str = Field(..., description="Short proposal title", examples=["Bridge loan"])
    applicant_name: str = Field(..., description="Who the proposal is for", examples=["Acme Ltd"])
    amount: Decimal = Field(
        ...,
        description="Requested amount, at most two decimal places",
        examples=["250000.00"],
    )
    description: Optional[str] = Field(None, description="Free-text details")
    approval_chain: Optional[list[str]] = Field(
        None,
        description="Ordered approver roles; the configured default is used when omitted",
    )


class StepDecisionSchema(BaseModel):
    """Schema for approve and reject request bodies."""

    approver: str = Field(..., description="Who is deciding the current step", examples=["alice"])
    comments: Optional[str] = Field(
        None,
        description="Comments; on reject these become the rejection reason",
    )


class ApprovalStepSchema(BaseModel):
    step_order: int = Field(..., ge=0)
    role: str
    decision: str = Field(..., examples=["PENDING"])
    approver: Optional[str] = None
    comments: Optional[str] = None
    decided_at: Optional[str] = Field(None, description="ISO 8601 timestamp of the decision")


class ProposalResponseSchema(BaseModel):
    """Schema for a proposal with its approval steps."""

    id: int
    title: str
    applicant_name: str
    amount: Decimal
    description: Optional[str] = None
    status: str = Field(..., examples=["UNDER_REVIEW"])
    current_step_index: int = Field(..., ge=0)
    created_at: str
    updated_at: str
    submitted_at: Optional[str] = None
    steps: list[ApprovalStepSchema] = Field(default_factory=list)

    @classmethod
    def from_dto(cls, response) -> "ProposalResponseSchema":
        return cls(
            id=response.id,
            title=response.title,
            applicant_name=response.applicant_name,
            amount=response.amount,
            description=response.description,
            status=response.status,
            current_step_index=response.current_step_index,
            created_at=response.created_at,
            updated_at=response.updated_at,
            submitted_at=response.submitted_at,
            steps=[
                ApprovalStepSchema(
                    step_order=s.step_order,
                    role=s.role,
                    decision=s.decision,
                    approver=s.approver,
                    comments=s.comments,
                    decided_at=s.decided_at,
                )
                for s in response.steps
            ],
        )


class ProposalPageSchema(BaseModel):
    """Schema for GET /v1/proposals response."""

    items: list[ProposalResponseSchema]
    page: int = Field(..., ge=1)
    size: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)
