"""
Consumer Group Runtime.

Drives one consumer group: N workers, each an independent member of the
group reading a disjoint set of partitions. Every record moves through

    RECEIVED -> HANDLING -> ACKNOWLEDGED
                         -> RETRY_SCHEDULED -> HANDLING ...
                         -> DEAD_LETTERED

Records are handled one at a time per worker, so the next record of a
partition is never touched before the current one is acknowledged or
dead-lettered. Handler errors never leave the runtime.
"""

import asyncio
from enum import Enum
from typing import Awaitable, Callable, Optional

import structlog

from src.core.metrics import (
    record_message_acknowledged,
    record_message_dead_lettered,
    record_message_retry,
    track_handler_latency,
)
from src.domain.entities import ProposalEvent
from src.domain.exceptions import HandlerException
from src.domain.interfaces import ConsumedRecord, EventChannel, Headers, MessageSource

from .codec import decode_event
from .retry import RetryPolicy

logger = structlog.get_logger(__name__)

EventHandler = Callable[[ProposalEvent], Awaitable[None]]
SourceFactory = Callable[[], MessageSource]
Sleeper = Callable[[float], Awaitable[None]]


class MessageState(str, Enum):
    RECEIVED = "received"
    HANDLING = "handling"
    RETRY_SCHEDULED = "retry_scheduled"
    ACKNOWLEDGED = "acknowledged"
    DEAD_LETTERED = "dead_lettered"


class ConsumerGroupRuntime:
    """
    Retry-then-dead-letter consumer loop for one named group.

    Args:
        group_id: Consumer group name, used for logs and metrics
        handler: Async callable invoked with each decoded event
        source_factory: Builds one MessageSource per worker
        dead_letter_channel: Channel used to park exhausted records
        policy: Retry and dead-letter configuration
        concurrency: Number of workers (group members) to run
        sleep: Awaitable used between attempts
    """

    def __init__(
        self,
        group_id: str,
        handler: EventHandler,
        source_factory: SourceFactory,
        dead_letter_channel: EventChannel,
        policy: Optional[RetryPolicy] = None,
        concurrency: int = 1,
        sleep: Sleeper = asyncio.sleep,
        poll_timeout_ms: int = 1000,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")

        self._group_id = group_id
        self._handler = handler
        self._source_factory = source_factory
        self._dead_letter_channel = dead_letter_channel
        self._policy = policy or RetryPolicy()
        self._concurrency = concurrency
        self._sleep = sleep
        self._poll_timeout_ms = poll_timeout_ms
        self._stopping = asyncio.Event()

    @property
    def group_id(self) -> str:
        return self._group_id

    @property
    def policy(self) -> RetryPolicy:
        return self._policy

    def stop(self) -> None:
        """Ask all workers to finish their current record and exit."""
        self._stopping.set()

    async def run(self) -> None:
        """Run all workers until stop() is called or one of them fails."""
        logger.info(
            "consumer_group_starting",
            group=self._group_id,
            concurrency=self._concurrency,
            max_attempts=self._policy.max_attempts,
        )
        try:
            # A failing worker sets the stop flag; wait for its siblings to
            # drain and stop their sources before surfacing the error.
            results = await asyncio.gather(
                *(self._run_worker(index) for index in range(self._concurrency)),
                return_exceptions=True,
            )
            for result in results:
                if isinstance(result, BaseException):
                    raise result
        finally:
            logger.info("consumer_group_stopped", group=self._group_id)

    async def _run_worker(self, index: int) -> None:
        source = self._source_factory()
        await source.start()
        log = logger.bind(group=self._group_id, worker=index)
        log.info("consumer_worker_started")

        try:
            while not self._stopping.is_set():
                records = await source.fetch(timeout_ms=self._poll_timeout_ms)
                for record in records:
                    await self.process(record)
                    await source.commit(record)
                    if self._stopping.is_set():
                        break
        except Exception as e:
            # Dead-letter publication failed or the source broke: the
            # current offset stays uncommitted and will be redelivered.
            log.error("consumer_worker_failed", error=str(e), error_type=type(e).__name__)
            self._stopping.set()
            raise
        finally:
            await source.stop()
            log.info("consumer_worker_stopped")

    async def process(self, record: ConsumedRecord) -> MessageState:
        """
        Take one record to a terminal state.

        Returns:
            ACKNOWLEDGED or DEAD_LETTERED; the caller commits the offset
            in both cases.

        Raises:
            PublishException: If the record could not be dead-lettered
        """
        log = logger.bind(
            group=self._group_id,
            topic=record.topic,
            partition=record.partition,
            offset=record.offset,
        )
        log.debug("message_received", state=MessageState.RECEIVED.value)

        last_error: Optional[HandlerException] = None

        for attempt in range(1, self._policy.max_attempts + 1):
            try:
                with track_handler_latency(self._group_id):
                    event = decode_event(record.value)
                    await self._handler(event)
            except Exception as e:
                last_error = self._as_handler_error(e)
                log.warning(
                    "message_handler_failed",
                    attempt=attempt,
                    max_attempts=self._policy.max_attempts,
                    error=last_error.message,
                    error_type=type(e).__name__,
                )
                if self._policy.should_retry(attempt):
                    delay = self._policy.delay_for(attempt)
                    record_message_retry(self._group_id)
                    log.info(
                        "message_retry_scheduled",
                        state=MessageState.RETRY_SCHEDULED.value,
                        attempt=attempt,
                        delay_seconds=delay,
                    )
                    await self._sleep(delay)
                continue

            record_message_acknowledged(self._group_id)
            log.info(
                "message_acknowledged",
                state=MessageState.ACKNOWLEDGED.value,
                event_id=event.id,
                event_type=event.type.value,
                attempt=attempt,
            )
            return MessageState.ACKNOWLEDGED

        await self._dead_letter(record, last_error, log)
        return MessageState.DEAD_LETTERED

    async def _dead_letter(
        self,
        record: ConsumedRecord,
        error: Optional[HandlerException],
        log,
    ) -> None:
        """Republish the original bytes to the DLT, same key and partition."""
        dlt_topic = self._policy.dead_letter_topic(record.topic)

        await self._dead_letter_channel.send(
            dlt_topic,
            value=record.value,
            key=record.key,
            partition=record.partition,
            headers=self._dead_letter_headers(record, error),
        )

        record_message_dead_lettered(self._group_id, dlt_topic)
        log.error(
            "message_dead_lettered",
            state=MessageState.DEAD_LETTERED.value,
            dead_letter_topic=dlt_topic,
            attempts=self._policy.max_attempts,
            error=error.message if error else None,
        )

    def _dead_letter_headers(
        self,
        record: ConsumedRecord,
        error: Optional[HandlerException],
    ) -> Headers:
        headers: Headers = list(record.headers)
        headers.extend(
            [
                ("dlt-original-topic", record.topic.encode()),
                ("dlt-original-partition", str(record.partition).encode()),
                ("dlt-original-offset", str(record.offset).encode()),
                ("dlt-consumer-group", self._group_id.encode()),
                ("dlt-attempts", str(self._policy.max_attempts).encode()),
            ]
        )
        if error is not None:
            headers.append(("dlt-exception-code", error.code.encode()))
            headers.append(("dlt-exception-message", error.message[:1000].encode()))
        return headers

    @staticmethod
    def _as_handler_error(error: Exception) -> HandlerException:
        if isinstance(error, HandlerException):
            return error
        return HandlerException(f"{type(error).__name__}: {error}")
