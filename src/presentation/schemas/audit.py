"""Audit-related Pydantic schemas."""

from pydantic import BaseModel, Field


class AuditEntrySchema(BaseModel):
    id: int
    event_id: str
    event_type: str = Field(..., examples=["STEP_APPROVED"])
    proposal_id: int
    payload_json: str = Field(..., description="Event payload as JSON text")
    at: str = Field(..., description="ISO 8601 timestamp of the event")


class AuditPageSchema(BaseModel):
    """Schema for GET /v1/audit response."""

    items: list[AuditEntrySchema]
    page: int = Field(..., ge=1)
    size: int = Field(..., ge=1)
    total: int = Field(..., ge=0)
    pages: int = Field(..., ge=0)
