"""NotificationGateway implementations."""

import httpx
import structlog

from src.core.config import settings
from src.domain.entities import Notification
from src.domain.interfaces import NotificationGateway

logger = structlog.get_logger(__name__)


class LoggingNotificationGateway(NotificationGateway):
    """Default gateway: records the notification in the service log."""

    channel = "log"

    async def send(self, notification: Notification) -> None:
        logger.info(
            "notification_sent",
            channel=self.channel,
            event_id=notification.event_id,
            event_type=notification.event_type,
            proposal_id=notification.proposal_id,
            recipient=notification.recipient,
            subject=notification.subject,
        )


class HttpNotificationGateway(NotificationGateway):
    """
    HTTP client for an outbound notification webhook.

    Sends one POST per notification. Retries are not done here: a
    failure raises and the consumer runtime retries the whole event,
    then dead-letters it.
    """

    channel = "webhook"

    def __init__(
        self,
        url: str | None = None,
        timeout: float | None = None,
    ):
        self._url = url or settings.notification_webhook_url
        self._timeout = timeout or settings.notification_webhook_timeout

        if not self._url:
            raise ValueError("notification webhook URL is not configured")

    async def send(self, notification: Notification) -> None:
        payload = {
            "event": "proposal_notification",
            "event_id": notification.event_id,
            "event_type": notification.event_type,
            "proposal_id": notification.proposal_id,
            "recipient": notification.recipient,
            "subject": notification.subject,
            "body": notification.body,
        }

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.post(
                    self._url,
                    json=payload,
                    headers={"Content-Type": "application/json"},
                )
        except httpx.TimeoutException:
            logger.warning(
                "notification_webhook_timeout",
                event_id=notification.event_id,
            )
            raise

        if response.status_code >= 400:
            logger.warning(
                "notification_webhook_failed",
                event_id=notification.event_id,
                status_code=response.status_code,
                response=response.text[:200],
            )
            response.raise_for_status()

        logger.info(
            "notification_webhook_sent",
            event_id=notification.event_id,
            status_code=response.status_code,
        )


def build_notification_gateway() -> NotificationGateway:
    """Pick the gateway from configuration."""
    if settings.notification_webhook_url:
        return HttpNotificationGateway()
    return LoggingNotificationGateway()
