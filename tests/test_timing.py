"""Tests for journey_engine.timing."""

from __future__ import annotations

import random

import pytest

from journey_engine.timing import (
    CAP_MS,
    seeded_typing_delay_ms,
    typing_delay_bounds,
    typing_delay_ms,
)


def test_seeded_delay_is_reproducible():
    assert seeded_typing_delay_ms(40, 7) == seeded_typing_delay_ms(40, 7)
    assert seeded_typing_delay_ms(40, "session-1") == seeded_typing_delay_ms(40, "session-1")


def test_delay_stays_within_bounds():
    low, high = typing_delay_bounds(10)
    assert (low, high) == (1200, 1500)
    rng = random.Random(0)
    for _ in range(50):
        assert low <= typing_delay_ms(10, rng) <= high


def test_long_messages_are_capped():
    assert typing_delay_bounds(500) == (CAP_MS, CAP_MS)
    assert typing_delay_ms(500, random.Random(1)) == CAP_MS


def test_custom_parameters():
    assert typing_delay_ms(0, random.Random(1), jitter_ms=(0, 0)) == 800
    assert typing_delay_ms(10, random.Random(1), base_ms=0, per_char_ms=1, jitter_ms=(5, 5)) == 15
    assert seeded_typing_delay_ms(1000, 3, cap_ms=1000) == 1000


def test_negative_length_rejected():
    with pytest.raises(ValueError):
        typing_delay_ms(-1)
