"""PostgreSQL implementation of OutboxRepository."""

from typing import List
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import OutboundEvent, OutboxStatus
from src.domain.interfaces import OutboxRepository
from src.infrastructure.database.models import OutboundEventModel, as_utc


class PostgresOutboxRepository(OutboxRepository):
    """
    PostgreSQL implementation of the outbox.

    Uses SQLAlchemy async session for database operations.
    """

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, event: OutboundEvent) -> OutboundEvent:
        """Stage an outbox row in the current transaction."""
        model = OutboundEventModel(
            id=str(event.id),
            event_id=event.event_id,
            event_type=event.event_type,
            proposal_id=event.proposal_id,
            body=event.body,
            status=event.status.value,
            attempts=event.attempts,
            last_attempt_at=event.last_attempt_at,
            last_error=event.last_error,
            created_at=event.created_at,
        )

        self._session.add(model)
        await self._session.flush()

        return event

    async def update(self, event: OutboundEvent) -> OutboundEvent:
        """Update relay status of an existing row."""
        stmt = select(OutboundEventModel).where(OutboundEventModel.id == str(event.id))
        result = await self._session.execute(stmt)
        model = result.scalar_one_or_none()

        if model is None:
            raise ValueError(f"Outbound event {event.id} not found")

        model.status = event.status.value
        model.attempts = event.attempts
        model.last_attempt_at = event.last_attempt_at
        model.last_error = event.last_error

        await self._session.flush()

        return event

    async def get_pending(self, limit: int = 100) -> List[OutboundEvent]:
        """Retrieve pending rows, oldest first."""
        stmt = (
            select(OutboundEventModel)
            .where(OutboundEventModel.status == OutboxStatus.PENDING.value)
            .order_by(OutboundEventModel.created_at.asc())
            .limit(limit)
        )
        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def commit(self) -> None:
        await self._session.commit()

    def _to_entity(self, model: OutboundEventModel) -> OutboundEvent:
        """Convert database model to domain entity."""
        return OutboundEvent(
            id=UUID(model.id),
            event_id=model.event_id,
            event_type=model.event_type,
            proposal_id=model.proposal_id,
            body=model.body,
            status=OutboxStatus(model.status),
            attempts=model.attempts,
            last_attempt_at=as_utc(model.last_attempt_at),
            last_error=model.last_error,
            created_at=as_utc(model.created_at),
        )
