"""Event channel and consumer-side domain exceptions."""

from .base import DomainException


class PublishException(DomainException):
    """Raised when a write to the event channel fails or times out."""

    def __init__(self, message: str, topics: list[str] | None = None):
        super().__init__(
            message=message,
            code="EVENT_PUBLISH_FAILED",
        )
        self.topics = topics or []


class HandlerException(DomainException):
    """
    Raised when a consumer fails to process a message.

    Contained within the consumer runtime: it is retried and then
    dead-lettered, and never propagates to the producer.
    """

    def __init__(self, message: str, code: str = "HANDLER_ERROR"):
        super().__init__(message=message, code=code)


class EventDecodeException(HandlerException):
    """Raised when a consumed payload cannot be decoded into a ProposalEvent."""

    def __init__(self, message: str):
        super().__init__(
            message=message,
            code="EVENT_DECODE_ERROR",
        )
