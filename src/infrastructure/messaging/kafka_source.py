"""Kafka implementation of MessageSource."""

from typing import List

import structlog
from aiokafka import AIOKafkaConsumer, TopicPartition

from src.core.config import settings
from src.domain.interfaces import ConsumedRecord, MessageSource

logger = structlog.get_logger(__name__)


class KafkaMessageSource(MessageSource):
    """
    One member of a Kafka consumer group.

    Auto-commit is off. Offsets move only through commit(), which the
    consumer runtime calls once a record is acknowledged or parked.
    """

    def __init__(
        self,
        topic: str,
        group_id: str,
        bootstrap_servers: str | None = None,
        client_id: str | None = None,
        auto_offset_reset: str = "earliest",
        max_records: int = 50,
    ):
        self._topic = topic
        self._group_id = group_id
        self._bootstrap_servers = bootstrap_servers or settings.kafka_bootstrap_servers
        self._client_id = client_id or f"{settings.kafka_client_id}-{group_id}"
        self._auto_offset_reset = auto_offset_reset
        self._max_records = max_records
        self._consumer: AIOKafkaConsumer | None = None

    async def start(self) -> None:
        consumer = AIOKafkaConsumer(
            self._topic,
            bootstrap_servers=self._bootstrap_servers,
            group_id=self._group_id,
            client_id=self._client_id,
            enable_auto_commit=False,
            auto_offset_reset=self._auto_offset_reset,
        )
        await consumer.start()
        self._consumer = consumer
        logger.info("kafka_consumer_started", topic=self._topic, group=self._group_id)

    async def stop(self) -> None:
        if self._consumer is None:
            return

        consumer, self._consumer = self._consumer, None
        await consumer.stop()
        logger.info("kafka_consumer_stopped", topic=self._topic, group=self._group_id)

    async def fetch(self, timeout_ms: int = 1000) -> List[ConsumedRecord]:
        if self._consumer is None:
            raise RuntimeError("Consumer not started. Call start() first.")

        batches = await self._consumer.getmany(
            timeout_ms=timeout_ms,
            max_records=self._max_records,
        )

        records: List[ConsumedRecord] = []
        for messages in batches.values():
            for message in messages:
                records.append(
                    ConsumedRecord(
                        topic=message.topic,
                        partition=message.partition,
                        offset=message.offset,
                        value=message.value,
                        key=message.key,
                        headers=list(message.headers or ()),
                    )
                )
        return records

    async def commit(self, record: ConsumedRecord) -> None:
        if self._consumer is None:
            raise RuntimeError("Consumer not started. Call start() first.")

        # Kafka stores the offset of the next record to read
        await self._consumer.commit(
            {TopicPartition(record.topic, record.partition): record.offset + 1}
        )
