"""EventPublisher writing to the structured and audit-line topics."""

from typing import List

import structlog

from src.core.config import settings
from src.core.metrics import record_publish_failure, track_publish_latency
from src.domain.entities import ProposalEvent
from src.domain.exceptions import PublishException
from src.domain.interfaces import EventChannel, EventPublisher
from src.service.messaging import audit_line, encode_event

logger = structlog.get_logger(__name__)


class ChannelEventPublisher(EventPublisher):
    """
    Publishes each event twice:

    - the JSON event to the events topic, keyed by proposal id so every
      event of one proposal lands on the same partition in order
    - a human-readable line to the audit-line topic, unkeyed

    Both writes are attempted. If either fails a single PublishException
    names every topic that failed.
    """

    def __init__(
        self,
        channel: EventChannel,
        events_topic: str | None = None,
        audit_topic: str | None = None,
    ):
        self._channel = channel
        self._events_topic = events_topic or settings.events_topic
        self._audit_topic = audit_topic or settings.audit_topic

    async def publish(self, event: ProposalEvent) -> ProposalEvent:
        event = event.with_id()
        log = logger.bind(
            event_id=event.id,
            event_type=event.type.value,
            proposal_id=event.proposal_id,
        )

        writes = [
            (self._events_topic, encode_event(event), str(event.proposal_id).encode()),
            (self._audit_topic, audit_line(event).encode("utf-8"), None),
        ]

        failed: List[str] = []
        errors: List[str] = []
        with track_publish_latency():
            for topic, value, key in writes:
                try:
                    await self._channel.send(topic, value, key=key)
                except PublishException as e:
                    failed.append(topic)
                    errors.append(e.message)
                    record_publish_failure(topic)
                    log.error("event_publish_failed", topic=topic, error=e.message)

        if failed:
            raise PublishException(
                f"Failed to publish {event.type.value} for proposal "
                f"{event.proposal_id}: {'; '.join(errors)}",
                topics=failed,
            )

        log.info("event_published")
        return event
