"""
Event emission strategies for the workflow engine.

The engine calls stage() before it commits a transition and dispatch()
after the commit:

- DirectEventEmitter publishes in dispatch(). A channel failure raises
  PublishException to the caller; the state change is already durable.
- OutboxEventEmitter writes the encoded event to the outbox in stage(),
  inside the same transaction as the state change, and makes one relay
  attempt in dispatch(). Failed rows are picked up by the relay later.
"""

from abc import ABC, abstractmethod
from typing import Dict

import structlog

from src.domain.entities import OutboundEvent, ProposalEvent
from src.domain.interfaces import EventPublisher, OutboxRepository
from src.service.messaging import encode_event

from .outbox_relay import OutboxRelay

logger = structlog.get_logger(__name__)


class EventEmitter(ABC):
    @abstractmethod
    async def stage(self, event: ProposalEvent) -> ProposalEvent:
        """
        Prepare an event inside the open transaction.

        Returns:
            The event with its identifier assigned
        """
        ...

    @abstractmethod
    async def dispatch(self, event: ProposalEvent) -> None:
        """
        Deliver a staged event after the transaction committed.

        Raises:
            PublishException: If delivery failed and the caller must know
        """
        ...


class DirectEventEmitter(EventEmitter):
    """Publish straight to the channel once the transition is committed."""

    def __init__(self, publisher: EventPublisher):
        self._publisher = publisher

    async def stage(self, event: ProposalEvent) -> ProposalEvent:
        return event.with_id()

    async def dispatch(self, event: ProposalEvent) -> None:
        await self._publisher.publish(event)


class OutboxEventEmitter(EventEmitter):
    """Store the event with the transition; relay it after commit."""

    def __init__(self, outbox_repository: OutboxRepository, relay: OutboxRelay):
        self._outbox_repo = outbox_repository
        self._relay = relay
        self._staged: Dict[str, OutboundEvent] = {}

    async def stage(self, event: ProposalEvent) -> ProposalEvent:
        event = event.with_id()
        outbound = OutboundEvent(
            event_id=event.id,
            event_type=event.type.value,
            proposal_id=event.proposal_id,
            body=encode_event(event).decode("utf-8"),
        )
        await self._outbox_repo.save(outbound)
        self._staged[event.id] = outbound
        return event

    async def dispatch(self, event: ProposalEvent) -> None:
        outbound = self._staged.pop(event.id, None)
        if outbound is None:
            logger.warning("outbox_event_not_staged", event_id=event.id)
            return

        # A failed attempt stays pending for the relay; the caller is not told
        await self._relay.relay(outbound)
