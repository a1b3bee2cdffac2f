"""
Fixtures for unit tests.

Provides in-memory fakes for every port so services and the consumer
runtime can be exercised without a database or a broker.
"""

import copy
from typing import Dict, List, Optional

import pytest

from src.domain.entities import (
    AuditEntry,
    Notification,
    NotificationReceipt,
    OutboundEvent,
    OutboxStatus,
    Proposal,
    ProposalEvent,
    ProposalStatus,
)
from src.domain.exceptions import ConcurrentModificationException, PublishException
from src.domain.interfaces import (
    AuditRepository,
    ConsumedRecord,
    EventChannel,
    EventPublisher,
    Headers,
    MessageSource,
    NotificationGateway,
    NotificationReceiptRepository,
    OutboxRepository,
    ProposalRepository,
)
from src.service.workflow import WorkflowSettings


# =============================================================================
# Repositories
# =============================================================================

class InMemoryProposalRepository(ProposalRepository):
    """Stores copies so callers only see state they wrote back."""

    def __init__(self, calls: Optional[list] = None):
        self._rows: Dict[int, Proposal] = {}
        self._next_id = 1
        self.calls = calls if calls is not None else []
        self.committed: Dict[int, Proposal] = {}

    async def add(self, proposal: Proposal) -> Proposal:
        proposal.id = self._next_id
        self._next_id += 1
        for i, step in enumerate(proposal.steps):
            step.id = i + 1
        self._rows[proposal.id] = copy.deepcopy(proposal)
        self.calls.append("add")
        return proposal

    async def get_by_id(self, proposal_id: int) -> Optional[Proposal]:
        row = self._rows.get(proposal_id)
        return copy.deepcopy(row) if row else None

    async def get_for_update(self, proposal_id: int) -> Optional[Proposal]:
        return await self.get_by_id(proposal_id)

    async def update(self, proposal: Proposal) -> Proposal:
        stored = self._rows[proposal.id]
        if stored.version != proposal.version:
            raise ConcurrentModificationException(proposal.id)
        proposal.version += 1
        for i, step in enumerate(proposal.steps):
            if step.id is None:
                step.id = i + 1
        self._rows[proposal.id] = copy.deepcopy(proposal)
        self.calls.append("update")
        return proposal

    async def list(
        self,
        status: Optional[ProposalStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Proposal]:
        rows = [p for _, p in sorted(self._rows.items()) if status is None or p.status == status]
        return [copy.deepcopy(p) for p in rows[offset:offset + limit]]

    async def count(self, status: Optional[ProposalStatus] = None) -> int:
        return len([p for p in self._rows.values() if status is None or p.status == status])

    async def commit(self) -> None:
        self.committed = copy.deepcopy(self._rows)
        self.calls.append("commit")


class InMemoryAuditRepository(AuditRepository):
    def __init__(self):
        self.entries: List[AuditEntry] = []

    async def save(self, entry: AuditEntry) -> AuditEntry:
        entry.id = len(self.entries) + 1
        self.entries.append(entry)
        return entry

    async def list(self, proposal_id=None, limit=20, offset=0) -> List[AuditEntry]:
        rows = [e for e in self.entries if proposal_id is None or e.proposal_id == proposal_id]
        return rows[offset:offset + limit]

    async def count(self, proposal_id=None) -> int:
        return len([e for e in self.entries if proposal_id is None or e.proposal_id == proposal_id])


class InMemoryReceiptRepository(NotificationReceiptRepository):
    def __init__(self):
        self.receipts: List[NotificationReceipt] = []

    async def exists(self, event_id: str) -> bool:
        return any(r.event_id == event_id for r in self.receipts)

    async def save(self, receipt: NotificationReceipt) -> NotificationReceipt:
        self.receipts.append(receipt)
        return receipt


class InMemoryOutboxRepository(OutboxRepository):
    def __init__(self, calls: Optional[list] = None):
        self.rows: Dict[str, OutboundEvent] = {}
        self.calls = calls if calls is not None else []

    async def save(self, event: OutboundEvent) -> OutboundEvent:
        self.rows[str(event.id)] = event
        self.calls.append("outbox_save")
        return event

    async def update(self, event: OutboundEvent) -> OutboundEvent:
        self.rows[str(event.id)] = event
        return event

    async def get_pending(self, limit: int = 100) -> List[OutboundEvent]:
        pending = [e for e in self.rows.values() if e.status == OutboxStatus.PENDING]
        return sorted(pending, key=lambda e: e.created_at)[:limit]

    async def commit(self) -> None:
        self.calls.append("outbox_commit")


# =============================================================================
# Messaging
# =============================================================================

class RecordingPublisher(EventPublisher):
    """Publisher that keeps every event, optionally failing on demand."""

    def __init__(self, calls: Optional[list] = None, fail: bool = False):
        self.events: List[ProposalEvent] = []
        self.calls = calls if calls is not None else []
        self.fail = fail

    async def publish(self, event: ProposalEvent) -> ProposalEvent:
        self.calls.append("publish")
        if self.fail:
            raise PublishException("broker unavailable", topics=["proposal-events"])
        event = event.with_id()
        self.events.append(event)
        return event


class RecordingChannel(EventChannel):
    """Channel that records sends; topics in fail_topics raise PublishException."""

    def __init__(self, fail_topics: Optional[set] = None):
        self.sent: List[dict] = []
        self.fail_topics = fail_topics or set()

    async def send(
        self,
        topic: str,
        value: bytes,
        key: Optional[bytes] = None,
        partition: Optional[int] = None,
        headers: Optional[Headers] = None,
    ) -> None:
        if topic in self.fail_topics:
            raise PublishException(f"write to {topic} timed out", topics=[topic])
        self.sent.append(
            {
                "topic": topic,
                "value": value,
                "key": key,
                "partition": partition,
                "headers": list(headers or []),
            }
        )

    def to(self, topic: str) -> List[dict]:
        return [s for s in self.sent if s["topic"] == topic]


class ScriptedMessageSource(MessageSource):
    """Hands out one batch of records, then empty fetches."""

    def __init__(self, records: List[ConsumedRecord], on_drained=None):
        self._pending = list(records)
        self._on_drained = on_drained
        self.committed: List[ConsumedRecord] = []
        self.started = False
        self.stopped = False

    async def start(self) -> None:
        self.started = True

    async def stop(self) -> None:
        self.stopped = True

    async def fetch(self, timeout_ms: int = 1000) -> List[ConsumedRecord]:
        if not self._pending:
            if self._on_drained:
                self._on_drained()
            return []
        batch, self._pending = self._pending, []
        return batch

    async def commit(self, record: ConsumedRecord) -> None:
        self.committed.append(record)


class RecordingGateway(NotificationGateway):
    channel = "test"

    def __init__(self, fail: bool = False):
        self.sent: List[Notification] = []
        self.fail = fail

    async def send(self, notification: Notification) -> None:
        if self.fail:
            raise ConnectionError("gateway down")
        self.sent.append(notification)


async def no_sleep(delay: float) -> None:
    return None


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def calls() -> list:
    """Shared call log for checking ordering across fakes."""
    return []


@pytest.fixture
def proposal_repo(calls) -> InMemoryProposalRepository:
    return InMemoryProposalRepository(calls)


@pytest.fixture
def publisher(calls) -> RecordingPublisher:
    return RecordingPublisher(calls)


@pytest.fixture
def failing_publisher(calls) -> RecordingPublisher:
    return RecordingPublisher(calls, fail=True)


@pytest.fixture
def channel() -> RecordingChannel:
    return RecordingChannel()


@pytest.fixture
def workflow_config() -> WorkflowSettings:
    return WorkflowSettings(default_approval_chain="PEER_REVIEW,MANAGER_APPROVAL,COMPLIANCE")
