"""
Unit tests for the audit and notification sinks.

These tests verify:
1. Audit rows are written for every delivery, duplicates included
2. Notifications are sent once per event id
3. A gateway failure propagates and leaves no receipt behind
4. The probe observes every event type
"""

import json

import pytest

from src.application.services import (
    AuditService,
    NotificationService,
    ProposalEventProbe,
    build_notification,
)
from src.consumers import build_probe_dispatcher
from src.domain.entities import ProposalEvent
from tests.unit.conftest import (
    InMemoryAuditRepository,
    InMemoryReceiptRepository,
    RecordingGateway,
)


@pytest.mark.asyncio
class TestAuditService:

    async def test_record_writes_payload_json(self):
        repo = InMemoryAuditRepository()
        service = AuditService(repo)
        event = ProposalEvent.proposal_rejected(5, "LEGAL", "dave", "non-compliant")

        entry = await service.record(event)

        assert entry.id == 1
        assert entry.event_id == event.id
        assert entry.event_type == "PROPOSAL_REJECTED"
        assert entry.proposal_id == 5
        assert json.loads(entry.payload_json) == {
            "role": "LEGAL",
            "approver": "dave",
            "reason": "non-compliant",
        }
        assert entry.at == event.at

    async def test_redelivery_is_tolerated(self):
        repo = InMemoryAuditRepository()
        service = AuditService(repo)
        event = ProposalEvent.submitted(5, ["LEGAL"])

        await service.record(event)
        await service.record(event)

        assert [e.event_id for e in repo.entries] == [event.id, event.id]

    async def test_list_entries_pages(self):
        repo = InMemoryAuditRepository()
        service = AuditService(repo)
        for pid in (1, 2, 1, 1):
            await service.record(ProposalEvent.submitted(pid, ["LEGAL"]))

        page = await service.list_entries(proposal_id=1, page=2, size=2)

        assert page.total == 3
        assert page.pages == 2
        assert len(page.items) == 1


@pytest.mark.asyncio
class TestNotificationService:

    async def test_notifies_once_per_event(self):
        receipts = InMemoryReceiptRepository()
        gateway = RecordingGateway()
        service = NotificationService(receipts, gateway)
        event = ProposalEvent.proposal_approved(9, "COMPLIANCE", "carol")

        first = await service.notify(event)
        second = await service.notify(event)

        assert first is not None
        assert first.channel == "test"
        assert second is None
        assert len(gateway.sent) == 1
        assert gateway.sent[0].recipient == "applicant:proposal:9"

    async def test_gateway_failure_propagates(self):
        receipts = InMemoryReceiptRepository()
        service = NotificationService(receipts, RecordingGateway(fail=True))

        with pytest.raises(ConnectionError):
            await service.notify(ProposalEvent.submitted(9, ["LEGAL"]))

        assert receipts.receipts == []


class TestBuildNotification:

    def test_submitted_goes_to_first_role(self):
        notification = build_notification(ProposalEvent.submitted(3, ["PEER_REVIEW", "CFO"]))

        assert notification.recipient == "role:PEER_REVIEW"
        assert "awaits PEER_REVIEW" in notification.subject

    def test_rejection_includes_reason(self):
        notification = build_notification(
            ProposalEvent.proposal_rejected(3, "LEGAL", "dave", "non-compliant")
        )

        assert notification.subject == "Proposal #3 rejected"
        assert notification.body.endswith("Reason: non-compliant")


@pytest.mark.asyncio
class TestProposalEventProbe:

    async def test_counts_events_by_type(self):
        probe = ProposalEventProbe()
        dispatcher = build_probe_dispatcher(probe)

        await dispatcher.dispatch(ProposalEvent.submitted(1, ["LEGAL"]))
        await dispatcher.dispatch(ProposalEvent.proposal_approved(1, "LEGAL", "erin"))
        await dispatcher.dispatch(ProposalEvent.submitted(2, ["LEGAL"]))

        assert probe.seen == {"PROPOSAL_SUBMITTED": 2, "PROPOSAL_APPROVED": 1}
