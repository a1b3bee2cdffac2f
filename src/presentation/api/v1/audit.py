"""Audit API endpoints."""

from typing import Annotated, Optional

from fastapi import APIRouter, Depends, Query

from src.application.services import AuditService
from src.core.dependencies import get_audit_service
from src.presentation.schemas import AuditEntrySchema, AuditPageSchema

audit_router = APIRouter(prefix="/audit")


@audit_router.get(
    "",
    response_model=AuditPageSchema,
    summary="List Audit Entries",
    description="Audit rows recorded by the audit consumer, oldest first.",
)
async def list_audit_entries(
    audit_service: Annotated[AuditService, Depends(get_audit_service)],
    proposal_id: Annotated[
        Optional[int],
        Query(ge=1, description="Only entries for this proposal"),
    ] = None,
    page: Annotated[int, Query(ge=1)] = 1,
    size: Annotated[int, Query(ge=1, le=100)] = 20,
) -> AuditPageSchema:
    result = await audit_service.list_entries(proposal_id=proposal_id, page=page, size=size)

    return AuditPageSchema(
        items=[
            AuditEntrySchema(
                id=e.id,
                event_id=e.event_id,
                event_type=e.event_type,
                proposal_id=e.proposal_id,
                payload_json=e.payload_json,
                at=e.at,
            )
            for e in result.items
        ],
        page=result.page,
        size=result.size,
        total=result.total,
        pages=result.pages,
    )
