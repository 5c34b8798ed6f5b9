"""Timestamps as (sec, nsec) pairs.

rosbag2 stores receive times as integer nanoseconds; all conversions here stay
in integer arithmetic so long recordings do not accumulate float drift.
"""

from __future__ import annotations

from dataclasses import dataclass

from baglens.const import NSEC_PER_SEC, NSEC_PER_USEC, USEC_PER_SEC


@dataclass(frozen=True, order=True, slots=True)
class Time:
    """A point in time with nanosecond resolution.

    ``nsec`` is always normalized into ``[0, 1e9)`` so that field-wise ordering
    matches chronological ordering.
    """

    sec: int = 0
    nsec: int = 0

    def __post_init__(self) -> None:
        if not 0 <= self.nsec < NSEC_PER_SEC:
            carry, nsec = divmod(self.nsec, NSEC_PER_SEC)
            object.__setattr__(self, "sec", self.sec + carry)
            object.__setattr__(self, "nsec", nsec)

    @classmethod
    def from_nanoseconds(cls, value: int) -> Time:
        """Build a Time from integer nanoseconds."""
        sec, nsec = divmod(int(value), NSEC_PER_SEC)
        return cls(sec=sec, nsec=nsec)

    def to_nanoseconds(self) -> int:
        """Return the time as integer nanoseconds."""
        return self.sec * NSEC_PER_SEC + self.nsec

    def to_microseconds(self) -> int:
        """Return the time as integer microseconds, truncating sub-µs ticks."""
        return self.sec * USEC_PER_SEC + self.nsec // NSEC_PER_USEC

    def to_seconds(self) -> float:
        """Return the time as float seconds, for display only."""
        return self.sec + self.nsec / NSEC_PER_SEC

    def __add__(self, other: Time) -> Time:
        if not isinstance(other, Time):
            return NotImplemented
        return Time(sec=self.sec + other.sec, nsec=self.nsec + other.nsec)

    def __sub__(self, other: Time) -> Time:
        if not isinstance(other, Time):
            return NotImplemented
        return Time.from_nanoseconds(self.to_nanoseconds() - other.to_nanoseconds())


ZERO_TIME = Time(0, 0)


def add_time(left: Time, right: Time) -> Time:
    """Add two times."""
    return left + right


def clamp_time(value: Time, start: Time, end: Time) -> Time:
    """Clamp ``value`` into ``[start, end]``."""
    if value < start:
        return start
    if value > end:
        return end
    return value
