"""Simulated typing delay for assistant replies.

The jitter comes from an injectable ``random.Random`` so callers and tests
can make the delay reproducible.
"""

from __future__ import annotations

import random

BASE_MS = 800
PER_CHAR_MS = 20
JITTER_MS: tuple[int, int] = (200, 500)
CAP_MS = 3000


def typing_delay_ms(
    message_length: int,
    rng: random.Random | None = None,
    *,
    base_ms: int = BASE_MS,
    per_char_ms: int = PER_CHAR_MS,
    jitter_ms: tuple[int, int] = JITTER_MS,
    cap_ms: int = CAP_MS,
) -> int:
    """Base plus per-character delay plus uniform jitter, capped at *cap_ms*."""
    if message_length < 0:
        raise ValueError("message_length must be >= 0")
    low, high = jitter_ms
    jitter = (rng or random.Random()).uniform(low, high)
    return round(min(base_ms + message_length * per_char_ms + jitter, cap_ms))


def seeded_typing_delay_ms(message_length: int, seed: int | str, **params: object) -> int:
    """Same as :func:`typing_delay_ms` but a pure function of *seed*."""
    return typing_delay_ms(message_length, random.Random(seed), **params)  # type: ignore[arg-type]


def typing_delay_bounds(
    message_length: int,
    *,
    base_ms: int = BASE_MS,
    per_char_ms: int = PER_CHAR_MS,
    jitter_ms: tuple[int, int] = JITTER_MS,
    cap_ms: int = CAP_MS,
) -> tuple[int, int]:
    """Inclusive ``(min, max)`` any delay for *message_length* can take."""
    low, high = jitter_ms
    fixed = base_ms + message_length * per_char_ms
    return round(min(fixed + low, cap_ms)), round(min(fixed + high, cap_ms))
