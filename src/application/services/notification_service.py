"""Notification service - the notification sink."""

from typing import Optional

import structlog

from src.domain.entities import (
    Notification,
    NotificationReceipt,
    ProposalEvent,
    ProposalEventType,
)
from src.domain.interfaces import NotificationGateway, NotificationReceiptRepository

logger = structlog.get_logger(__name__)


def build_notification(event: ProposalEvent) -> Notification:
    """Decide who hears about an event, and what they are told."""
    pid = event.proposal_id
    payload = event.payload

    if event.type == ProposalEventType.PROPOSAL_SUBMITTED:
        first = payload.chain[0] if payload.chain else "reviewers"
        recipient = f"role:{first}"
        subject = f"Proposal #{pid} awaits {first} review"
        body = f"Proposal #{pid} was submitted for approval by: {', '.join(payload.chain)}."
    elif event.type == ProposalEventType.STEP_APPROVED:
        recipient = f"proposal:{pid}:step:{payload.next_step}"
        subject = f"Proposal #{pid} is ready for step {payload.next_step}"
        body = f"{payload.approver} approved the {payload.role} step of proposal #{pid}."
    elif event.type == ProposalEventType.PROPOSAL_APPROVED:
        recipient = f"applicant:proposal:{pid}"
        subject = f"Proposal #{pid} approved"
        body = f"Proposal #{pid} received final approval from {payload.approver} ({payload.role})."
    else:
        recipient = f"applicant:proposal:{pid}"
        subject = f"Proposal #{pid} rejected"
        body = f"Proposal #{pid} was rejected by {payload.approver} ({payload.role})."
        if payload.reason:
            body += f" Reason: {payload.reason}"

    return Notification(
        event_id=dedupe_key(event),
        event_type=event.type.value,
        proposal_id=pid,
        recipient=recipient,
        subject=subject,
        body=body,
    )


def dedupe_key(event: ProposalEvent) -> str:
    if event.id:
        return event.id
    return f"{event.type.value}:{event.proposal_id}:{event.at.isoformat()}"


class NotificationService:
    """
    Sends at most one notification per event id.

    Redelivered events whose notification already went out are skipped.
    A gateway failure propagates so the event is retried.
    """

    def __init__(
        self,
        receipt_repository: NotificationReceiptRepository,
        gateway: NotificationGateway,
    ):
        self._receipt_repo = receipt_repository
        self._gateway = gateway

    async def notify(self, event: ProposalEvent) -> Optional[NotificationReceipt]:
        key = dedupe_key(event)
        log = logger.bind(event_id=key, event_type=event.type.value, proposal_id=event.proposal_id)

        if await self._receipt_repo.exists(key):
            log.info("notification_already_sent")
            return None

        notification = build_notification(event)
        await self._gateway.send(notification)

        receipt = NotificationReceipt(
            event_id=key,
            event_type=notification.event_type,
            proposal_id=notification.proposal_id,
            recipient=notification.recipient,
            channel=self._gateway.channel,
        )
        await self._receipt_repo.save(receipt)

        log.info("notification_delivered", recipient=receipt.recipient, channel=receipt.channel)
        return receipt
