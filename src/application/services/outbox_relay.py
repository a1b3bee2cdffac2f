"""Outbox relay - moves stored events from the outbox to the channel."""

import structlog

from src.core.config import settings
from src.core.metrics import record_outbox_pending
from src.domain.entities import OutboundEvent
from src.domain.exceptions import EventDecodeException, PublishException
from src.domain.interfaces import EventPublisher, OutboxRepository
from src.service.messaging import decode_event

logger = structlog.get_logger(__name__)


class OutboxRelay:
    """
    Publishes outbox rows and records the outcome on each row.

    A row is retried on later passes until it is sent or has failed
    max_attempts times.
    """

    def __init__(
        self,
        outbox_repository: OutboxRepository,
        publisher: EventPublisher,
        max_attempts: int | None = None,
        batch_size: int | None = None,
    ):
        self._outbox_repo = outbox_repository
        self._publisher = publisher
        self._max_attempts = max_attempts or settings.outbox_max_attempts
        self._batch_size = batch_size or settings.outbox_batch_size

    async def relay(self, outbound: OutboundEvent) -> bool:
        """
        Publish one row and persist its new status.

        Returns:
            True if the event reached the channel
        """
        log = logger.bind(
            outbox_id=str(outbound.id),
            event_id=outbound.event_id,
            event_type=outbound.event_type,
            proposal_id=outbound.proposal_id,
        )

        try:
            event = decode_event(outbound.body.encode("utf-8"))
            await self._publisher.publish(event)
        except (PublishException, EventDecodeException) as e:
            outbound.mark_attempt_failed(e.message, self._max_attempts)
            log.warning(
                "outbox_relay_failed",
                attempts=outbound.attempts,
                status=outbound.status.value,
                error=e.message,
            )
            sent = False
        else:
            outbound.mark_sent()
            log.info("outbox_event_relayed", attempts=outbound.attempts)
            sent = True

        await self._outbox_repo.update(outbound)
        await self._outbox_repo.commit()
        return sent

    async def relay_pending(self) -> int:
        """
        Relay one batch of pending rows.

        Returns:
            Number of rows sent
        """
        pending = await self._outbox_repo.get_pending(limit=self._batch_size)
        record_outbox_pending(len(pending))

        sent = 0
        for outbound in pending:
            if await self.relay(outbound):
                sent += 1

        if pending:
            logger.info("outbox_relay_pass", pending=len(pending), sent=sent)
        return sent
