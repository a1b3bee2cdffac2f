"""
Consumer Settings for the consumer group runtime.

Environment variables use the CONSUMER_ prefix:
    CONSUMER_MAX_ATTEMPTS=3
    CONSUMER_BACKOFF_SECONDS=1.0
    CONSUMER_BACKOFF_STRATEGY=fixed
    CONSUMER_CONCURRENCY=2

Usage:
    from src.service.messaging.settings import consumer_settings

    policy = consumer_settings.retry_policy()
"""

from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .retry import DEAD_LETTER_SUFFIX, RetryPolicy, exponential_backoff, fixed_backoff


class ConsumerSettings(BaseSettings):
    """Retry, dead-letter and concurrency configuration shared by all consumer groups."""

    model_config = SettingsConfigDict(
        env_prefix="CONSUMER_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    max_attempts: int = Field(
        default=3,
        ge=1,
        description="Handler invocations per message before dead-lettering",
    )
    backoff_strategy: Literal["fixed", "exponential"] = Field(
        default="fixed",
        description="Delay shape between attempts",
    )
    backoff_seconds: float = Field(
        default=1.0,
        ge=0.0,
        description="Fixed delay, or base delay for exponential backoff",
    )
    backoff_multiplier: float = Field(
        default=2.0,
        ge=1.0,
        description="Growth factor for exponential backoff",
    )
    backoff_max_seconds: float = Field(
        default=30.0,
        ge=0.0,
        description="Upper bound for exponential backoff",
    )
    dead_letter_suffix: str = Field(
        default=DEAD_LETTER_SUFFIX,
        min_length=1,
        description="Suffix appended to a topic name to form its dead-letter topic",
    )
    concurrency: int = Field(
        default=2,
        ge=1,
        description="Workers (group members) per consumer group process",
    )
    poll_timeout_ms: int = Field(
        default=1000,
        ge=1,
        description="Maximum wait for a fetch to return records",
    )
    auto_offset_reset: Literal["earliest", "latest"] = Field(
        default="earliest",
        description="Where a new group starts reading",
    )

    def retry_policy(self) -> RetryPolicy:
        """Build the RetryPolicy described by these settings."""
        if self.backoff_strategy == "exponential":
            backoff = exponential_backoff(
                self.backoff_seconds,
                multiplier=self.backoff_multiplier,
                max_seconds=self.backoff_max_seconds,
            )
        else:
            backoff = fixed_backoff(self.backoff_seconds)

        return RetryPolicy(
            max_attempts=self.max_attempts,
            backoff=backoff,
            dead_letter_suffix=self.dead_letter_suffix,
        )


@lru_cache
def get_consumer_settings() -> ConsumerSettings:
    """Get cached consumer settings instance."""
    return ConsumerSettings()


consumer_settings = get_consumer_settings()
