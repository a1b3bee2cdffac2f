"""External client interfaces."""

from abc import ABC, abstractmethod

from src.domain.entities import Notification


class NotificationGateway(ABC):
    """
    Abstract delivery channel for the notification sink.

    Delivers a single notification. Implementations raise on failure so
    the consumer runtime can retry and eventually dead-letter the event.
    """

    channel: str = "unknown"

    @abstractmethod
    async def send(self, notification: Notification) -> None:
        """
        Deliver a notification.

        Raises:
            Exception: Any delivery failure
        """
        ...
