"""Health check endpoint for service monitoring."""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from src import __version__
from src.core.dependencies import get_event_channel, get_outbox_enabled
from src.domain.interfaces import EventChannel

health_router = APIRouter()


class HealthResponse(BaseModel):
    status: str = "healthy"
    version: str
    event_channel: str = Field(
        ...,
        description="'connected' once the Kafka producer has started",
        examples=["connected"],
    )
    outbox_enabled: bool


@health_router.get(
    "/health",
    response_model=HealthResponse,
    summary="Health Check",
    description="""
    Liveness of the HTTP process plus the state of its event channel.

    A disconnected channel does not fail the check: in outbox mode
    transitions still succeed and are relayed later.
    """,
)
async def health_check(
    channel: Annotated[EventChannel, Depends(get_event_channel)],
    outbox_enabled: Annotated[bool, Depends(get_outbox_enabled)],
) -> HealthResponse:
    connected = getattr(channel, "started", True)
    return HealthResponse(
        status="healthy",
        version=__version__,
        event_channel="connected" if connected else "disconnected",
        outbox_enabled=outbox_enabled,
    )
