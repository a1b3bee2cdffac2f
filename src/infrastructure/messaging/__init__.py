"""Event channel implementations."""

from .kafka_channel import KafkaEventChannel, ensure_topics, required_topics
from .kafka_source import KafkaMessageSource
from .publisher import ChannelEventPublisher

__all__ = [
    "KafkaEventChannel",
    "ensure_topics",
    "required_topics",
    "KafkaMessageSource",
    "ChannelEventPublisher",
]
