"""Kafka implementation of EventChannel, plus topic bootstrap."""

import asyncio
from typing import Iterable, List, Optional

import structlog
from aiokafka import AIOKafkaProducer
from aiokafka.admin import AIOKafkaAdminClient, NewTopic
from aiokafka.errors import KafkaError, TopicAlreadyExistsError

from src.core.config import settings
from src.domain.exceptions import PublishException
from src.domain.interfaces import EventChannel, Headers
from src.service.messaging import consumer_settings

logger = structlog.get_logger(__name__)


class KafkaEventChannel(EventChannel):
    """
    Write side of the Kafka transport.

    One producer is shared by the whole process. Every send waits for
    the broker acknowledgement (acks=all) and is bounded by a timeout,
    so a send either completes or raises PublishException.
    """

    def __init__(
        self,
        bootstrap_servers: str | None = None,
        client_id: str | None = None,
        send_timeout: float | None = None,
    ):
        self._bootstrap_servers = bootstrap_servers or settings.kafka_bootstrap_servers
        self._client_id = client_id or settings.kafka_client_id
        self._send_timeout = send_timeout or settings.kafka_send_timeout_seconds
        self._producer: AIOKafkaProducer | None = None

    @property
    def started(self) -> bool:
        return self._producer is not None

    async def start(self) -> None:
        if self._producer is not None:
            return

        producer = AIOKafkaProducer(
            bootstrap_servers=self._bootstrap_servers,
            client_id=self._client_id,
            acks="all",
            enable_idempotence=True,
        )
        await producer.start()
        self._producer = producer
        logger.info("kafka_producer_started", bootstrap_servers=self._bootstrap_servers)

    async def stop(self) -> None:
        if self._producer is None:
            return

        producer, self._producer = self._producer, None
        await producer.stop()
        logger.info("kafka_producer_stopped")

    async def send(
        self,
        topic: str,
        value: bytes,
        key: Optional[bytes] = None,
        partition: Optional[int] = None,
        headers: Optional[Headers] = None,
    ) -> None:
        if self._producer is None:
            raise PublishException("Kafka producer is not started", topics=[topic])

        try:
            await asyncio.wait_for(
                self._producer.send_and_wait(
                    topic,
                    value=value,
                    key=key,
                    partition=partition,
                    headers=headers or None,
                ),
                timeout=self._send_timeout,
            )
        except asyncio.TimeoutError as e:
            raise PublishException(
                f"Timed out after {self._send_timeout}s writing to {topic}",
                topics=[topic],
            ) from e
        except KafkaError as e:
            raise PublishException(
                f"Failed writing to {topic}: {e}",
                topics=[topic],
            ) from e


def required_topics() -> List[NewTopic]:
    """Topics the service reads and writes, with their partition layout."""
    replication = settings.topic_replication_factor
    return [
        NewTopic(settings.events_topic, settings.events_topic_partitions, replication),
        NewTopic(
            f"{settings.events_topic}{consumer_settings.dead_letter_suffix}",
            settings.events_topic_partitions,
            replication,
        ),
        NewTopic(settings.audit_topic, settings.audit_topic_partitions, replication),
    ]


async def ensure_topics(
    topics: Iterable[NewTopic] | None = None,
    bootstrap_servers: str | None = None,
) -> List[str]:
    """
    Create any missing topics.

    The dead-letter topic gets the same partition count as its source so
    a record can be parked on the partition it was read from.

    Returns:
        Names of the topics that were created
    """
    topics = list(topics) if topics is not None else required_topics()
    admin = AIOKafkaAdminClient(
        bootstrap_servers=bootstrap_servers or settings.kafka_bootstrap_servers,
        client_id=f"{settings.kafka_client_id}-admin",
    )
    await admin.start()
    try:
        existing = set(await admin.list_topics())
        missing = [topic for topic in topics if topic.name not in existing]
        if missing:
            try:
                await admin.create_topics(missing)
            except TopicAlreadyExistsError:
                logger.info("kafka_topics_created_concurrently")
        created = [topic.name for topic in missing]
        logger.info("kafka_topics_ensured", created=created)
        return created
    finally:
        await admin.close()
