"""Approval workflow API endpoints: submit, approve, reject."""

from typing import Annotated, Optional

from fastapi import APIRouter, Body, Depends, Path

from src.application.dto import ProposalResponse, StepDecisionRequest
from src.application.services import ApprovalWorkflowService
from src.core.dependencies import get_workflow_service
from src.presentation.schemas import (
    ErrorResponseSchema,
    ProposalResponseSchema,
    StepDecisionSchema,
)

approval_router = APIRouter(
    prefix="/proposals/{proposal_id}",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
        404: {"model": ErrorResponseSchema, "description": "Proposal not found"},
        409: {"model": ErrorResponseSchema, "description": "Illegal for the current state"},
        502: {
            "model": ErrorResponseSchema,
            "description": "State change saved but the event could not be published",
        },
    },
)

ProposalId = Annotated[int, Path(ge=1, description="Proposal identifier")]


@approval_router.post(
    "/submit",
    response_model=ProposalResponseSchema,
    summary="Submit Proposal",
    description="""
    Move a DRAFT proposal to UNDER_REVIEW.

    The body may carry an ordered list of roles overriding the chain
    given at creation and the configured default.
    """,
)
async def submit_proposal(
    proposal_id: ProposalId,
    workflow: Annotated[ApprovalWorkflowService, Depends(get_workflow_service)],
    chain: Annotated[Optional[list[str]], Body(description="Approval chain override")] = None,
) -> ProposalResponseSchema:
    proposal = await workflow.submit(proposal_id, chain)

    return ProposalResponseSchema.from_dto(ProposalResponse.from_entity(proposal))


@approval_router.post(
    "/approve",
    response_model=ProposalResponseSchema,
    summary="Approve Current Step",
)
async def approve_step(
    proposal_id: ProposalId,
    request: StepDecisionSchema,
    workflow: Annotated[ApprovalWorkflowService, Depends(get_workflow_service)],
) -> ProposalResponseSchema:
    """Approve the current step; the last approval finalizes the proposal."""
    dto = StepDecisionRequest(approver=request.approver, comments=request.comments)

    proposal = await workflow.approve(proposal_id, dto)

    return ProposalResponseSchema.from_dto(ProposalResponse.from_entity(proposal))


@approval_router.post(
    "/reject",
    response_model=ProposalResponseSchema,
    summary="Reject Current Step",
)
async def reject_step(
    proposal_id: ProposalId,
    request: StepDecisionSchema,
    workflow: Annotated[ApprovalWorkflowService, Depends(get_workflow_service)],
) -> ProposalResponseSchema:
    """Reject the current step; the proposal becomes REJECTED."""
    dto = StepDecisionRequest(approver=request.approver, comments=request.comments)

    proposal = await workflow.reject(proposal_id, dto)

    return ProposalResponseSchema.from_dto(ProposalResponse.from_entity(proposal))
