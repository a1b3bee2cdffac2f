"""PostgreSQL implementation of AuditRepository."""

from typing import List, Optional

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import AuditEntry
from src.domain.interfaces import AuditRepository
from src.infrastructure.database.models import AuditEntryModel, as_utc


class PostgresAuditRepository(AuditRepository):
    """PostgreSQL implementation of the audit store."""

    def __init__(self, session: AsyncSession):
        self._session = session

    async def save(self, entry: AuditEntry) -> AuditEntry:
        model = AuditEntryModel(
            event_id=entry.event_id,
            event_type=entry.event_type,
            proposal_id=entry.proposal_id,
            payload_json=entry.payload_json,
            at=entry.at,
            recorded_at=entry.recorded_at,
        )

        self._session.add(model)
        await self._session.flush()

        entry.id = model.id
        return entry

    async def list(
        self,
        proposal_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[AuditEntry]:
        stmt = select(AuditEntryModel)
        if proposal_id is not None:
            stmt = stmt.where(AuditEntryModel.proposal_id == proposal_id)
        stmt = stmt.order_by(AuditEntryModel.id.asc()).limit(limit).offset(offset)

        result = await self._session.execute(stmt)
        models = result.scalars().all()

        return [self._to_entity(model) for model in models]

    async def count(self, proposal_id: Optional[int] = None) -> int:
        stmt = select(func.count()).select_from(AuditEntryModel)
        if proposal_id is not None:
            stmt = stmt.where(AuditEntryModel.proposal_id == proposal_id)
        result = await self._session.execute(stmt)
        return int(result.scalar_one())

    def _to_entity(self, model: AuditEntryModel) -> AuditEntry:
        return AuditEntry(
            id=model.id,
            event_id=model.event_id,
            event_type=model.event_type,
            proposal_id=model.proposal_id,
            payload_json=model.payload_json,
            at=as_utc(model.at),
            recorded_at=as_utc(model.recorded_at),
        )
