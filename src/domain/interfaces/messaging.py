"""Event channel ports: producing, consuming and publishing domain events."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from src.domain.entities import ProposalEvent

Headers = List[Tuple[str, bytes]]


@dataclass(frozen=True)
class ConsumedRecord:
    """A raw message read from a topic partition."""

    topic: str
    partition: int
    offset: int
    value: bytes
    key: Optional[bytes] = None
    headers: Headers = field(default_factory=list)


class EventChannel(ABC):
    """
    Write side of the partitioned publish/subscribe transport.

    A send either completes or raises PublishException.
    """

    @abstractmethod
    async def send(
        self,
        topic: str,
        value: bytes,
        key: Optional[bytes] = None,
        partition: Optional[int] = None,
        headers: Optional[Headers] = None,
    ) -> None:
        """
        Write one message.

        Args:
            topic: Destination topic
            value: Message body
            key: Partitioning key; messages sharing a key share a partition
            partition: Explicit partition, overriding key-based routing
            headers: Optional message headers

        Raises:
            PublishException: If the write fails or times out
        """
        ...


class MessageSource(ABC):
    """
    Read side of the transport for one consumer-group member.

    Offsets are committed explicitly, one record at a time, only after
    the record reached a terminal state.
    """

    @abstractmethod
    async def start(self) -> None:
        ...

    @abstractmethod
    async def stop(self) -> None:
        ...

    @abstractmethod
    async def fetch(self, timeout_ms: int = 1000) -> List[ConsumedRecord]:
        """
        Fetch the next batch of records, in partition order.

        Returns:
            Possibly empty list of records
        """
        ...

    @abstractmethod
    async def commit(self, record: ConsumedRecord) -> None:
        """Advance the group's committed offset past this record."""
        ...


class EventPublisher(ABC):
    """Publishes domain events to the structured and audit-line topics."""

    @abstractmethod
    async def publish(self, event: ProposalEvent) -> ProposalEvent:
        """
        Publish one event.

        Returns:
            The event as published (with its identifier assigned)

        Raises:
            PublishException: If either channel write fails
        """
        ...
