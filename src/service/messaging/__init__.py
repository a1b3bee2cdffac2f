"""
Messaging Module - wire codec, handler dispatch and the consumer group runtime.
"""

from .codec import (
    audit_line,
    decode_event,
    encode_event,
    event_to_dict,
    payload_from_dict,
    payload_to_dict,
)
from .dispatcher import EventDispatcher, EventHandler
from .retry import (
    DEAD_LETTER_SUFFIX,
    BackoffFunction,
    RetryPolicy,
    exponential_backoff,
    fixed_backoff,
)
from .runtime import ConsumerGroupRuntime, MessageState
from .settings import ConsumerSettings, consumer_settings

__all__ = [
    # Codec
    "audit_line",
    "decode_event",
    "encode_event",
    "event_to_dict",
    "payload_from_dict",
    "payload_to_dict",
    # Dispatch
    "EventDispatcher",
    "EventHandler",
    # Retry
    "DEAD_LETTER_SUFFIX",
    "BackoffFunction",
    "RetryPolicy",
    "exponential_backoff",
    "fixed_backoff",
    # Runtime
    "ConsumerGroupRuntime",
    "MessageState",
    # Settings
    "ConsumerSettings",
    "consumer_settings",
]
