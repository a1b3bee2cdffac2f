"""
IPM Gateway - background workers.

Usage:
    python -m src.consumers audit
    python -m src.consumers notification
    python -m src.consumers probe
    python -m src.consumers relay [--interval 5] [--once]
    python -m src.consumers ensure-topics

Each consumer command runs one consumer group on the events topic with
the retry-then-dead-letter runtime. The relay command publishes pending
outbox rows when the service runs with OUTBOX_ENABLED=true.
"""

import argparse
import asyncio
import signal
from contextlib import AbstractAsyncContextManager
from typing import Callable, Dict

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from src.application.services import (
    AuditService,
    NotificationService,
    OutboxRelay,
    ProposalEventProbe,
)
from src.core.config import settings
from src.core.logging import setup_logging
from src.domain.entities import ProposalEvent
from src.domain.interfaces import NotificationGateway
from src.infrastructure.clients import build_notification_gateway
from src.infrastructure.database import db_manager
from src.infrastructure.messaging import (
    ChannelEventPublisher,
    KafkaEventChannel,
    KafkaMessageSource,
    ensure_topics,
)
from src.infrastructure.repositories import (
    PostgresAuditRepository,
    PostgresNotificationReceiptRepository,
    PostgresOutboxRepository,
)
from src.service.messaging import ConsumerGroupRuntime, EventDispatcher, consumer_settings

logger = structlog.get_logger(__name__)

SessionScope = Callable[[], AbstractAsyncContextManager[AsyncSession]]

# Command name -> consumer group id
GROUP_IDS: Dict[str, str] = {
    "audit": "audit-service",
    "notification": "notification-service",
    "probe": "proposal-service",
}


def build_audit_dispatcher(session_scope: SessionScope = db_manager.session) -> EventDispatcher:
    """Every event type becomes one audit row, written in its own transaction."""

    async def record_audit(event: ProposalEvent) -> None:
        async with session_scope() as session:
            await AuditService(PostgresAuditRepository(session)).record(event)

    dispatcher = EventDispatcher("audit")
    dispatcher.register_all(record_audit)
    return dispatcher


def build_notification_dispatcher(
    gateway: NotificationGateway,
    session_scope: SessionScope = db_manager.session,
) -> EventDispatcher:
    async def notify(event: ProposalEvent) -> None:
        async with session_scope() as session:
            service = NotificationService(PostgresNotificationReceiptRepository(session), gateway)
            await service.notify(event)

    dispatcher = EventDispatcher("notification")
    dispatcher.register_all(notify)
    return dispatcher


def build_probe_dispatcher(probe: ProposalEventProbe | None = None) -> EventDispatcher:
    probe = probe or ProposalEventProbe()
    dispatcher = EventDispatcher("probe")
    dispatcher.register_all(probe.observe)
    return dispatcher


def build_dispatcher(command: str) -> EventDispatcher:
    if command == "audit":
        return build_audit_dispatcher()
    if command == "notification":
        return build_notification_dispatcher(build_notification_gateway())
    if command == "probe":
        return build_probe_dispatcher()
    raise ValueError(f"unknown consumer: {command}")


def _install_signal_handlers(stop: Callable[[], None]) -> None:
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop)


async def run_consumer(command: str) -> None:
    """Run one consumer group until interrupted or a worker fails."""
    group_id = GROUP_IDS[command]
    db_manager.init()
    channel = KafkaEventChannel(client_id=f"{settings.kafka_client_id}-{group_id}-dlt")
    await channel.start()

    def source_factory() -> KafkaMessageSource:
        return KafkaMessageSource(
            settings.events_topic,
            group_id,
            auto_offset_reset=consumer_settings.auto_offset_reset,
        )

    runtime = ConsumerGroupRuntime(
        group_id=group_id,
        handler=build_dispatcher(command).dispatch,
        source_factory=source_factory,
        dead_letter_channel=channel,
        policy=consumer_settings.retry_policy(),
        concurrency=consumer_settings.concurrency,
        poll_timeout_ms=consumer_settings.poll_timeout_ms,
    )
    _install_signal_handlers(runtime.stop)

    try:
        await runtime.run()
    finally:
        await channel.stop()
        await db_manager.close()


async def run_relay(interval: float, once: bool) -> None:
    """Publish pending outbox rows, one batch per pass."""
    db_manager.init()
    channel = KafkaEventChannel(client_id=f"{settings.kafka_client_id}-relay")
    await channel.start()
    publisher = ChannelEventPublisher(channel)

    stopping = asyncio.Event()
    _install_signal_handlers(stopping.set)
    logger.info("outbox_relay_started", interval=interval, once=once)

    try:
        while not stopping.is_set():
            async with db_manager.session() as session:
                relay = OutboxRelay(PostgresOutboxRepository(session), publisher)
                await relay.relay_pending()
            if once:
                break
            try:
                await asyncio.wait_for(stopping.wait(), timeout=interval)
            except asyncio.TimeoutError:
                continue
    finally:
        await channel.stop()
        await db_manager.close()
        logger.info("outbox_relay_stopped")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Run an IPM Gateway background worker.")
    commands = parser.add_subparsers(dest="command", required=True)

    for command, group_id in GROUP_IDS.items():
        commands.add_parser(command, help=f"Consume proposal events as group '{group_id}'.")

    relay = commands.add_parser("relay", help="Publish pending outbox rows.")
    relay.add_argument(
        "--interval",
        type=float,
        default=5.0,
        help="Seconds between relay passes.",
    )
    relay.add_argument("--once", action="store_true", help="Run a single pass and exit.")

    commands.add_parser("ensure-topics", help="Create missing topics and exit.")

    args = parser.parse_args(argv)
    setup_logging()

    if args.command == "relay":
        asyncio.run(run_relay(args.interval, args.once))
    elif args.command == "ensure-topics":
        asyncio.run(ensure_topics())
    else:
        asyncio.run(run_consumer(args.command))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
