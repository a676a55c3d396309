"""RFC 6238 time-step counter and the wall clock that drives it."""

import time


DEFAULT_INTERVAL = 30
SECOND_IN_MILLIS = 1000
MINUTE_IN_MILLIS = 60 * SECOND_IN_MILLIS


def millis_to_seconds(time_millis: int) -> int:
    return time_millis // SECOND_IN_MILLIS


class TotpCounter:
    """
    Converts Unix time (seconds) into a TOTP time-step value.

    The value is ``floor((time - start_time) / time_step)``, so every second
    inside one interval maps to the same value and crossing an interval
    boundary increases it by exactly one.
    """

    def __init__(self, time_step: int = DEFAULT_INTERVAL, start_time: int = 0):
        """
        Args:
            time_step: Interval length in seconds (default: 30).
            start_time: Unix time (seconds) at which value 0 starts.

        Raises:
            ValueError: If time_step is not positive.
        """
        if time_step <= 0:
            raise ValueError(f"Time step must be positive: {time_step}")
        self.time_step = time_step
        self.start_time = start_time

    def value_at_time(self, time_seconds: int) -> int:
        """Return the time-step value for a Unix time in seconds."""
        return (time_seconds - self.start_time) // self.time_step

    def value_start_time(self, value: int) -> int:
        """Return the Unix time (seconds) at which the given value begins."""
        return self.start_time + value * self.time_step

    def seconds_remaining(self, time_seconds: int) -> int:
        """Return how many seconds the value at the given time stays valid."""
        return self.value_start_time(self.value_at_time(time_seconds) + 1) - time_seconds


class TotpClock:
    """Wall clock for TOTP with an optional correction in minutes."""

    def __init__(self, time_correction_minutes: int = 0):
        self.time_correction_minutes = time_correction_minutes

    def current_time_millis(self) -> int:
        """Return the corrected wall-clock time in milliseconds."""
        now = time.time_ns() // 1_000_000
        return now + self.time_correction_minutes * MINUTE_IN_MILLIS
