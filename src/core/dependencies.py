"""Dependency injection for FastAPI."""

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.services import (
    ApprovalWorkflowService,
    AuditService,
    DirectEventEmitter,
    EventEmitter,
    OutboxEventEmitter,
    OutboxRelay,
    ProposalService,
)
from src.core.config import settings
from src.domain.interfaces import EventChannel, EventPublisher
from src.infrastructure.database import get_db_session
from src.infrastructure.messaging import ChannelEventPublisher, KafkaEventChannel
from src.infrastructure.repositories import (
    PostgresAuditRepository,
    PostgresOutboxRepository,
    PostgresProposalRepository,
)
from src.service.workflow.settings import WorkflowSettings, get_workflow_settings

# One producer per process, started and stopped by the app lifespan
event_channel = KafkaEventChannel()


# Repository dependencies
async def get_proposal_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresProposalRepository:
    """Get a ProposalRepository instance."""
    return PostgresProposalRepository(session)


async def get_outbox_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresOutboxRepository:
    """Get an OutboxRepository instance."""
    return PostgresOutboxRepository(session)


async def get_audit_repository(
    session: Annotated[AsyncSession, Depends(get_db_session)],
) -> PostgresAuditRepository:
    """Get an AuditRepository instance."""
    return PostgresAuditRepository(session)


# Event channel dependencies
def get_event_channel() -> EventChannel:
    """Get the process-wide event channel."""
    return event_channel


def get_event_publisher(
    channel: Annotated[EventChannel, Depends(get_event_channel)],
) -> EventPublisher:
    """Get an EventPublisher writing to the events and audit-line topics."""
    return ChannelEventPublisher(channel)


def get_outbox_enabled() -> bool:
    return settings.outbox_enabled


async def get_event_emitter(
    outbox_repo: Annotated[PostgresOutboxRepository, Depends(get_outbox_repository)],
    publisher: Annotated[EventPublisher, Depends(get_event_publisher)],
    outbox_enabled: Annotated[bool, Depends(get_outbox_enabled)],
) -> EventEmitter:
    """Get the emitter for the configured publishing mode."""
    if outbox_enabled:
        return OutboxEventEmitter(outbox_repo, OutboxRelay(outbox_repo, publisher))
    return DirectEventEmitter(publisher)


# Service dependencies
async def get_workflow_service(
    proposal_repo: Annotated[PostgresProposalRepository, Depends(get_proposal_repository)],
    emitter: Annotated[EventEmitter, Depends(get_event_emitter)],
    workflow_settings: Annotated[WorkflowSettings, Depends(get_workflow_settings)],
) -> ApprovalWorkflowService:
    """Get an ApprovalWorkflowService instance with all dependencies."""
    return ApprovalWorkflowService(
        proposal_repository=proposal_repo,
        emitter=emitter,
        settings=workflow_settings,
    )


async def get_proposal_service(
    proposal_repo: Annotated[PostgresProposalRepository, Depends(get_proposal_repository)],
) -> ProposalService:
    """Get a ProposalService instance."""
    return ProposalService(proposal_repository=proposal_repo)


async def get_audit_service(
    audit_repo: Annotated[PostgresAuditRepository, Depends(get_audit_repository)],
) -> AuditService:
    """Get an AuditService instance."""
    return AuditService(audit_repository=audit_repo)
