"""
Session Billing Rules

Pure arithmetic for turning a session's elapsed time into billed hours.

Billing policy: time is measured in started minutes, and every started hour
is billed in full. A session one second past an hour boundary is billed for
the next whole hour.
"""

from datetime import datetime, timedelta
from typing import Optional, Tuple

_MICROSECONDS_PER_MINUTE = 60 * 1_000_000


def _elapsed_microseconds(start_time: datetime, end_time: datetime) -> int:
    elapsed = (end_time - start_time) // timedelta(microseconds=1)
    return max(0, elapsed)


def compute_duration_minutes(start_time: datetime, end_time: datetime) -> int:
    """
    Billed duration in minutes, rounded up to the next whole minute.

    Uses integer microseconds so exact minute boundaries never round up
    due to float error. A clock that runs backwards yields 0.
    """
    elapsed = _elapsed_microseconds(start_time, end_time)
    return -(-elapsed // _MICROSECONDS_PER_MINUTE)


def compute_hours_deducted(duration_minutes: int) -> int:
    """Whole hours to deduct for a duration; any fraction counts as an hour."""
    if duration_minutes <= 0:
        return 0
    return -(-duration_minutes // 60)


def apply_deduction(hours_remaining: float, hours_deducted: float) -> float:
    """New balance after a deduction, clamped so it never goes negative."""
    return max(0, hours_remaining - hours_deducted)


def bill_session(
    start_time: datetime,
    end_time: datetime,
    hours_remaining: Optional[float] = None,
) -> Tuple[int, int, Optional[float]]:
    """
    Bill a session end in one step.

    Returns:
        (duration_minutes, hours_deducted, new_hours_remaining). The last
        element is None when no balance was given.
    """
    duration_minutes = compute_duration_minutes(start_time, end_time)
    hours_deducted = compute_hours_deducted(duration_minutes)
    new_balance = None
    if hours_remaining is not None:
        new_balance = apply_deduction(hours_remaining, hours_deducted)
    return duration_minutes, hours_deducted, new_balance


def format_duration(minutes: int) -> str:
    """Render minutes as ``"{h}h {m}m"``."""
    minutes = max(0, int(minutes))
    return f"{minutes // 60}h {minutes % 60}m"


def elapsed_label(start_time: datetime, now: datetime) -> str:
    """Live elapsed time of a running session, in floored minutes."""
    minutes = _elapsed_microseconds(start_time, now) // _MICROSECONDS_PER_MINUTE
    return format_duration(minutes)
