"""PostgreSQL implementation of NotificationReceiptRepository."""

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.domain.entities import NotificationReceipt
from src.domain.interfaces import NotificationReceiptRepository
from src.infrastructure.database.models import NotificationReceiptModel


class PostgresNotificationReceiptRepository(NotificationReceiptRepository):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def exists(self, event_id: str) -> bool:
        stmt = select(NotificationReceiptModel.id).where(
            NotificationReceiptModel.event_id == event_id
        )
        result = await self._session.execute(stmt)
        return result.first() is not None

    async def save(self, receipt: NotificationReceipt) -> NotificationReceipt:
        model = NotificationReceiptModel(
            event_id=receipt.event_id,
            event_type=receipt.event_type,
            proposal_id=receipt.proposal_id,
            recipient=receipt.recipient,
            channel=receipt.channel,
            sent_at=receipt.sent_at,
        )

        self._session.add(model)
        await self._session.flush()

        return receipt
