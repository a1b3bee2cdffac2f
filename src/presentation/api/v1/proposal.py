"""Proposal API endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Path, Query

from src.application.dto import CreateProposalRequest, ProposalResponse
from src.application.services import ApprovalWorkflowService, ProposalService
from src.core.dependencies import get_proposal_service, get_workflow_service
from src.domain.entities import ProposalStatus
from src.presentation.schemas import (
    CreateProposalSchema,
    ErrorResponseSchema,
    ProposalPageSchema,
    ProposalResponseSchema,
)

proposal_router = APIRouter(
    prefix="/proposals",
    responses={
        400: {"model": ErrorResponseSchema, "description": "Invalid request"},
    },
)


@proposal_router.post(
    "",
    response_model=ProposalResponseSchema,
    status_code=201,
    summary="Create Proposal",
    description="Create a proposal in DRAFT. No event is published.",
)
async def create_proposal(
    request: CreateProposalSchema,
    workflow: Annotated[ApprovalWorkflowService, Depends(get_workflow_service)],
) -> ProposalResponseSchema:
    dto = CreateProposalRequest(
        title=request.title,
        applicant_name=request.applicant_name,
        amount=request.amount,
        description=request.description,
        approval_chain=request.approval_chain,
    )

    proposal = await workflow.create_proposal(dto)

    return ProposalResponseSchema.from_dto(ProposalResponse.from_entity(proposal))


@proposal_router.get(
    "/{proposal_id}",
    response_model=ProposalResponseSchema,
    summary="Get Proposal",
    responses={
        404: {"model": ErrorResponseSchema, "description": "Proposal not found"},
    },
)
async def get_proposal(
    proposal_id: Annotated[int, Path(ge=1, description="Proposal identifier")],
    proposal_service: Annotated[ProposalService, Depends(get_proposal_service)],
) -> ProposalResponseSchema:
    """Get a proposal with its approval steps."""
    proposal = await proposal_service.get_proposal(proposal_id)

    return ProposalResponseSchema.from_dto(ProposalResponse.from_entity(proposal))


@proposal_router.get(
    "",
    response_model=ProposalPageSchema,
    summary="List Proposals",
    description="List proposals ordered by id, optionally filtered by status.",
)
async def list_proposals(
    proposal_service: Annotated[ProposalService, Depends(get_proposal_service)],
    status: Annotated[
        Optional[ProposalStatus],
        Query(description="Only proposals in this status"),
    ] = None,
    page: Annotated[int, Query(ge=1, description="1-based page number")] = 1,
    size: Annotated[int, Query(ge=1, le=100, description="Page size")] = 20,
) -> ProposalPageSchema:
    result = await proposal_service.list_proposals(status=status, page=page, size=size)

    return ProposalPageSchema(
        items=[ProposalResponseSchema.from_dto(item) for item in result.items],
        page=result.page,
        size=result.size,
        total=result.total,
        pages=result.pages,
    )
