"""Pydantic schema for API error responses."""

from pydantic import BaseModel, Field


class ErrorResponseSchema(BaseModel):
    """Standard error response format for all API errors."""
    error: str = Field(
        ...,
        description="Error code",
        examples=["INVALID_PROPOSAL_STATE"],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
        examples=["Proposal is not UNDER_REVIEW; status=APPROVED"],
    )
    request_id: str | None = Field(
        None,
        description="Request ID for tracing",
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "error": "PROPOSAL_NOT_FOUND",
                    "message": "Proposal not found: 42",
                    "request_id": "abc123",
                }
            ]
        }
    }
