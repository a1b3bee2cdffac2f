"""Unit tests for retry/dead-letter configuration."""

import pytest

from src.service.messaging import (
    ConsumerSettings,
    RetryPolicy,
    exponential_backoff,
    fixed_backoff,
)


class TestRetryPolicy:

    def test_defaults_allow_three_attempts(self):
        policy = RetryPolicy()

        assert policy.max_attempts == 3
        assert policy.should_retry(1)
        assert policy.should_retry(2)
        assert not policy.should_retry(3)

    def test_dead_letter_topic_name(self):
        assert RetryPolicy().dead_letter_topic("proposal-events") == "proposal-events.DLT"

    def test_custom_suffix(self):
        policy = RetryPolicy(dead_letter_suffix="-parked")

        assert policy.dead_letter_topic("proposal-events") == "proposal-events-parked"

    def test_zero_attempts_is_rejected(self):
        with pytest.raises(ValueError):
            RetryPolicy(max_attempts=0)

    def test_fixed_backoff(self):
        policy = RetryPolicy(backoff=fixed_backoff(1.0))

        assert [policy.delay_for(n) for n in (1, 2, 3)] == [1.0, 1.0, 1.0]

    def test_exponential_backoff_is_capped(self):
        backoff = exponential_backoff(0.5, multiplier=2.0, max_seconds=3.0)

        assert [backoff(n) for n in (1, 2, 3, 4, 5)] == [0.5, 1.0, 2.0, 3.0, 3.0]


class TestConsumerSettings:

    def test_default_policy_matches_fixed_one_second(self):
        policy = ConsumerSettings().retry_policy()

        assert policy.max_attempts == 3
        assert policy.delay_for(1) == 1.0
        assert policy.dead_letter_topic("t") == "t.DLT"

    def test_exponential_strategy(self):
        config = ConsumerSettings(
            max_attempts=5,
            backoff_strategy="exponential",
            backoff_seconds=0.1,
            backoff_multiplier=3.0,
        )
        policy = config.retry_policy()

        assert policy.max_attempts == 5
        assert policy.delay_for(3) == pytest.approx(0.9)
