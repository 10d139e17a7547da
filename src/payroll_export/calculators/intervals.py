"""Interval overlap arithmetic on a circular clock."""

from __future__ import annotations

from datetime import time
from decimal import Decimal
from typing import TypeVar

N = TypeVar("N", int, float, Decimal)

MINUTES_PER_DAY = 24 * 60


def overlap_in_window(
    start: N,
    end: N,
    window_start: N,
    window_end: N,
    period: N = 24,
) -> N:
    """Length of the part of [start, end) that falls inside a fixed window.

    Units are whatever the caller uses (hours with ``period=24``, minutes with
    ``period=1440``). A query with ``end < start`` crosses midnight and is
    treated as running to ``end + period``. A window with
    ``window_start > window_end`` wraps midnight and is split into
    [window_start, period) and [0, window_end).

    Examples:
        >>> overlap_in_window(22, 2, 18, 23)
        1
        >>> overlap_in_window(22, 2, 23, 6)
        3
    """
    if window_start > window_end:
        return (
            overlap_in_window(start, end, window_start, period, period)
            + overlap_in_window(start, end, 0, window_end, period)
        )

    if end < start:
        end = end + period

    # An overnight query reaches into the next day's copy of the window
    total = 0
    for offset in (0, period):
        overlap = min(end, window_end + offset) - max(start, window_start + offset)
        if overlap > 0:
            total += overlap
    return total


def parse_clock(value: str | time) -> int:
    """Parse a wall-clock value ("HH:MM" or "HH:MM:SS") into minutes of day."""
    if isinstance(value, time):
        return value.hour * 60 + value.minute

    parts = value.strip().split(":")
    if len(parts) not in (2, 3):
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM")
    try:
        hour, minute = int(parts[0]), int(parts[1])
    except ValueError:
        raise ValueError(f"Invalid clock time {value!r}, expected HH:MM") from None
    if not (0 <= hour < 24 and 0 <= minute < 60):
        raise ValueError(f"Clock time {value!r} is out of range")
    return hour * 60 + minute


def shift_span_minutes(start_minute: int, end_minute: int) -> int:
    """Duration of a shift in minutes, wrapping past midnight when end < start."""
    total = end_minute - start_minute
    if total < 0:
        total += MINUTES_PER_DAY
    return total
