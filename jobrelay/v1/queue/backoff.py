"""
Exponential backoff with jitter for enqueue retries.
"""

import math
import random
from datetime import timedelta

from jobrelay.v1.queue.models import MIN_DELAY, RetryConfig

JITTER_RATIO = 0.25


def _to_ms(delta: timedelta) -> int:
    return int(delta / timedelta(milliseconds=1))


def _round_half_up(value: float) -> int:
    return math.floor(value + 0.5)


def base_delay_ms(attempt: int, config: RetryConfig) -> int:
    """
    Un-jittered delay in milliseconds after the given 1-based attempt.

    Grows as ``initial_delay * backoff_multiplier ** (attempt - 1)`` and is
    capped at ``max_delay``.
    """
    if attempt < 1:
        raise ValueError(f"attempt must be >= 1, got: {attempt}")

    max_ms = _to_ms(config.max_delay)
    try:
        raw = _to_ms(config.initial_delay) * config.backoff_multiplier ** (attempt - 1)
    except OverflowError:
        return max_ms

    if raw >= max_ms:
        return max_ms
    return _round_half_up(raw)


def calculate_delay(
    attempt: int, config: RetryConfig, rng: random.Random | None = None
) -> timedelta:
    """Calculate the wait before the next attempt with ±25% jitter."""
    rng = rng or random.Random()

    capped = base_delay_ms(attempt, config)

    # Jitter spreads retries from many clients apart
    jitter = _round_half_up(capped * JITTER_RATIO * rng.random())
    delay = capped + jitter if rng.random() < 0.5 else capped - jitter

    delay = max(_to_ms(MIN_DELAY), min(delay, _to_ms(config.max_delay)))
    return timedelta(milliseconds=delay)
