"""
Countdown to the next daily word.

Remaining time is always recomputed from a fixed target instant, so a slow or
late tick never accumulates drift.
"""

import math
import time
from datetime import datetime, timedelta
from typing import Callable, Iterator, Optional


def next_midnight(now: datetime) -> datetime:
    """Start of the day after ``now`` (same timezone awareness as ``now``)."""
    tomorrow = (now + timedelta(days=1)).date()
    return datetime.combine(tomorrow, datetime.min.time(), tzinfo=now.tzinfo)


def format_remaining(seconds: float) -> str:
    """Formats a duration as HH:MM:SS, truncating fractions of a second."""
    total = max(0, int(seconds))
    hours, rest = divmod(total, 3600)
    minutes, secs = divmod(rest, 60)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}"


class Countdown:
    """
    Countdown towards a fixed instant.

    Args:
        target: Instant the countdown reaches zero
        clock: Returns the current time; must match the awareness of ``target``
    """

    def __init__(self, target: datetime, clock: Optional[Callable[[], datetime]] = None):
        self.target = target
        self.clock = clock or (lambda: datetime.now(target.tzinfo))

    def remaining(self) -> timedelta:
        return max(self.target - self.clock(), timedelta(0))

    def remaining_seconds(self) -> float:
        return self.remaining().total_seconds()

    def formatted(self) -> str:
        return format_remaining(self.remaining_seconds())

    def is_finished(self) -> bool:
        return self.remaining_seconds() <= 0

    def ticks(self, sleep: Callable[[float], None] = time.sleep) -> Iterator[str]:
        """
        Yields the formatted remaining time once per displayed second.

        Ticks are aligned to the middle of each displayed second relative to
        the target, and the generator stops after yielding zero.
        """
        while True:
            remaining = self.remaining_seconds()
            shown = math.floor(remaining)
            yield format_remaining(remaining)
            if shown <= 0:
                return
            sleep(remaining - shown + 0.5)


def next_word_countdown(now: Optional[datetime] = None,
                        clock: Optional[Callable[[], datetime]] = None) -> Countdown:
    """Countdown to the next local midnight, when the daily word changes."""
    now = now or datetime.now()
    return Countdown(next_midnight(now), clock=clock)
