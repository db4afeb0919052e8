"""
Maximally coalesced sets of half-open integer intervals [start, end).

Touching or overlapping intervals are merged on insertion.
"""

from .interval_set import CoalescedIntervals, Interval, InvalidInterval, InvariantViolation

__all__ = ["CoalescedIntervals", "Interval", "InvalidInterval", "InvariantViolation"]
