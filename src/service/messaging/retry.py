"""
Retry and dead-letter policy for consumer groups.

The policy is plain configuration handed to ConsumerGroupRuntime:
how many times a handler is invoked for one message, how long to wait
between invocations, and where exhausted messages are parked.
"""

from dataclasses import dataclass, field
from typing import Callable

BackoffFunction = Callable[[int], float]

DEAD_LETTER_SUFFIX = ".DLT"


def fixed_backoff(delay_seconds: float) -> BackoffFunction:
    """Same delay before every retry."""

    def backoff(attempt: int) -> float:
        return delay_seconds

    return backoff


def exponential_backoff(
    base_seconds: float,
    multiplier: float = 2.0,
    max_seconds: float = 30.0,
) -> BackoffFunction:
    """Delay of base * multiplier^(attempt-1), capped at max_seconds."""

    def backoff(attempt: int) -> float:
        return min(base_seconds * multiplier ** (attempt - 1), max_seconds)

    return backoff


@dataclass(frozen=True)
class RetryPolicy:
    """
    Attributes:
        max_attempts: Total handler invocations per message, first try included
        backoff: Delay in seconds before retry number `attempt` (1-based:
            attempt=1 is the wait after the first failure)
        dead_letter_suffix: Appended to the source topic to name its DLT
    """

    max_attempts: int = 3
    backoff: BackoffFunction = field(default_factory=lambda: fixed_backoff(1.0))
    dead_letter_suffix: str = DEAD_LETTER_SUFFIX

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    def dead_letter_topic(self, topic: str) -> str:
        return f"{topic}{self.dead_letter_suffix}"

    def delay_for(self, attempt: int) -> float:
        """Seconds to wait after failed attempt number `attempt`."""
        return max(0.0, self.backoff(attempt))

    def should_retry(self, attempt: int) -> bool:
        return attempt < self.max_attempts
