"""
Unit tests for the two-topic event publisher.

These tests verify:
1. The JSON event goes to the events topic keyed by proposal id
2. The audit line goes to the audit topic unkeyed
3. A failed write raises one PublishException naming the failed topics
"""

import json

import pytest

from src.domain.entities import ProposalEvent
from src.domain.exceptions import PublishException
from src.infrastructure.messaging import ChannelEventPublisher
from tests.unit.conftest import RecordingChannel


@pytest.mark.asyncio
class TestChannelEventPublisher:

    async def test_writes_both_topics(self, channel):
        publisher = ChannelEventPublisher(channel, "proposal-events", "audit-logs")
        event = ProposalEvent.step_approved(42, "PEER_REVIEW", "alice", 1)

        published = await publisher.publish(event)

        events = channel.to("proposal-events")
        assert len(events) == 1
        assert events[0]["key"] == b"42"
        body = json.loads(events[0]["value"])
        assert body["id"] == published.id
        assert body["payload"] == {"role": "PEER_REVIEW", "approver": "alice", "nextStep": 1}

        lines = channel.to("audit-logs")
        assert len(lines) == 1
        assert lines[0]["key"] is None
        assert lines[0]["value"].decode().endswith(
            'STEP_APPROVED proposalId=42 payload={"approver": "alice", "nextStep": 1, "role": "PEER_REVIEW"}'
        )

    async def test_missing_id_is_assigned(self, channel):
        publisher = ChannelEventPublisher(channel, "proposal-events", "audit-logs")
        event = ProposalEvent.submitted(1, ["LEGAL"])
        event = ProposalEvent(type=event.type, proposal_id=1, payload=event.payload)

        published = await publisher.publish(event)

        assert published.id

    async def test_failure_names_failed_topics(self):
        channel = RecordingChannel(fail_topics={"audit-logs"})
        publisher = ChannelEventPublisher(channel, "proposal-events", "audit-logs")

        with pytest.raises(PublishException) as exc_info:
            await publisher.publish(ProposalEvent.submitted(1, ["LEGAL"]))

        assert exc_info.value.topics == ["audit-logs"]
        assert exc_info.value.code == "EVENT_PUBLISH_FAILED"
        # The other write was still attempted
        assert len(channel.to("proposal-events")) == 1
