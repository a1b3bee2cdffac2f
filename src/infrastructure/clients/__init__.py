"""External client implementations."""

from .notification_client import (
    HttpNotificationGateway,
    LoggingNotificationGateway,
    build_notification_gateway,
)

__all__ = [
    "HttpNotificationGateway",
    "LoggingNotificationGateway",
    "build_notification_gateway",
]
