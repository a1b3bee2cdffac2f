"""Probe consumer - logs every event seen on the events topic."""

from collections import Counter

import structlog

from src.domain.entities import ProposalEvent
from src.service.messaging import payload_to_dict

logger = structlog.get_logger(__name__)


class ProposalEventProbe:
    """Observes the producer's own events. Has no side effects besides logging."""

    def __init__(self):
        self.seen: Counter = Counter()

    async def observe(self, event: ProposalEvent) -> None:
        self.seen[event.type.value] += 1
        logger.info(
            "proposal_event_observed",
            event_id=event.id,
            event_type=event.type.value,
            proposal_id=event.proposal_id,
            payload=payload_to_dict(event.payload),
        )
