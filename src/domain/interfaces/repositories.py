"""Repository interfaces for data persistence."""

from abc import ABC, abstractmethod
from typing import List, Optional

from src.domain.entities import (
    AuditEntry,
    NotificationReceipt,
    OutboundEvent,
    Proposal,
    ProposalStatus,
)


class ProposalRepository(ABC):
    """
    Abstract repository for Proposal aggregates (with their steps).

    Implementations must serialize concurrent writers on the same
    proposal: get_for_update locks the row for the rest of the
    transaction, and update rejects a stale version.
    """

    @abstractmethod
    async def add(self, proposal: Proposal) -> Proposal:
        """
        Persist a new proposal.

        Returns:
            The proposal with its generated id populated
        """
        ...

    @abstractmethod
    async def get_by_id(self, proposal_id: int) -> Optional[Proposal]:
        """
        Retrieve a proposal by ID.

        Returns:
            The proposal if found, None otherwise
        """
        ...

    @abstractmethod
    async def get_for_update(self, proposal_id: int) -> Optional[Proposal]:
        """
        Retrieve a proposal and lock it against concurrent writers.

        Returns:
            The proposal if found, None otherwise
        """
        ...

    @abstractmethod
    async def update(self, proposal: Proposal) -> Proposal:
        """
        Write back a mutated proposal, replacing its step sequence.

        Raises:
            ConcurrentModificationException: If the stored version moved on
        """
        ...

    @abstractmethod
    async def list(
        self,
        status: Optional[ProposalStatus] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[Proposal]:
        """
        Retrieve proposals, optionally filtered by status.

        Returns:
            Proposals ordered by id ascending
        """
        ...

    @abstractmethod
    async def count(self, status: Optional[ProposalStatus] = None) -> int:
        ...

    @abstractmethod
    async def commit(self) -> None:
        """Commit the current transaction, making the state change durable."""
        ...


class OutboxRepository(ABC):
    """
    Abstract repository for outbox rows.

    Rows are written in the same transaction as the proposal change they
    describe and read back by the relay.
    """

    @abstractmethod
    async def save(self, event: OutboundEvent) -> OutboundEvent:
        ...

    @abstractmethod
    async def update(self, event: OutboundEvent) -> OutboundEvent:
        ...

    @abstractmethod
    async def get_pending(self, limit: int = 100) -> List[OutboundEvent]:
        """
        Retrieve rows still waiting for relay.

        Returns:
            Pending rows, oldest first
        """
        ...

    @abstractmethod
    async def commit(self) -> None:
        ...


class AuditRepository(ABC):
    """Abstract repository for audit rows written by the audit sink."""

    @abstractmethod
    async def save(self, entry: AuditEntry) -> AuditEntry:
        ...

    @abstractmethod
    async def list(
        self,
        proposal_id: Optional[int] = None,
        limit: int = 20,
        offset: int = 0,
    ) -> List[AuditEntry]:
        """
        Retrieve audit rows, optionally for a single proposal.

        Returns:
            Rows ordered by id ascending
        """
        ...

    @abstractmethod
    async def count(self, proposal_id: Optional[int] = None) -> int:
        ...


class NotificationReceiptRepository(ABC):
    """Abstract repository used by the notification sink to deduplicate by event id."""

    @abstractmethod
    async def exists(self, event_id: str) -> bool:
        ...

    @abstractmethod
    async def save(self, receipt: NotificationReceipt) -> NotificationReceipt:
        ...
