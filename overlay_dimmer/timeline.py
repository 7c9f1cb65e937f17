"""Linear alpha timeline used by the overlay dimmer."""
from __future__ import annotations

import time
from dataclasses import dataclass


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass
class Timeline:
    """Start alpha, start time and length of the transition in flight.

    Times are milliseconds from the dimmer's clock. The target lives on the
    dimmer because ``present`` may retarget without restarting the timeline.
    """

    start_alpha: float = 0.0
    start_time: float = 0.0
    duration_ms: int = 0

    @property
    def end_time(self) -> float:
        return self.start_time + self.duration_ms

    def restart(self, start_alpha: float, now: float, duration_ms: int) -> None:
        self.start_alpha = start_alpha
        self.start_time = now
        self.duration_ms = duration_ms

    def ends_earlier(self, now: float, duration_ms: int) -> bool:
        """True if a transition of ``duration_ms`` starting now beats the scheduled end."""
        return now + duration_ms < self.end_time

    def progress(self, now: float) -> float:
        if self.duration_ms <= 0:
            return 1.0
        return (now - self.start_time) / self.duration_ms

    def alpha_at(self, now: float, target_alpha: float) -> float:
        delta = target_alpha - self.start_alpha
        alpha = self.start_alpha + delta * self.progress(now)
        # Never run past the target in the direction of travel.
        if (delta > 0 and alpha > target_alpha) or (delta < 0 and alpha < target_alpha):
            alpha = target_alpha
        return alpha
