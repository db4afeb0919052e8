"""
Coalesced interval set for half-open integer ranges.

Intervals are stored as [start, end) and kept maximally coalesced: adding an
interval that overlaps or touches stored intervals fuses them into one.

Classes:
    CoalescedIntervals: Sorted, disjoint, non-touching interval storage
    InvalidInterval: Raised when an interval with start >= end is added
    InvariantViolation: Raised when the internal ordering invariants break
"""

import hashlib
import operator
from bisect import bisect_left, bisect_right
from typing import Iterable, Iterator, Optional, Tuple

import numpy as np

from .logging_config import get_logger

logger = get_logger(__name__)

Interval = Tuple[int, int]


class InvalidInterval(ValueError):
    """An interval was given with start >= end."""

    def __init__(self, start: int, end: int):
        super().__init__(f"Interval must satisfy start < end, got [{start}, {end})")
        self.start = start
        self.end = end


class InvariantViolation(AssertionError):
    """The stored intervals are not sorted, disjoint and non-touching."""


class CoalescedIntervals:
    """
    A set of half-open intervals [start, end) kept maximally coalesced.

    Intervals that overlap or touch (the end of one equals the start of the
    next) are merged on insertion, so every contiguous covered region is
    represented by exactly one stored interval.

    Storage is two parallel lists of starts and ends. Both are strictly
    increasing, which lets every lookup use binary search.

    Example:
        >>> intervals = CoalescedIntervals()
        >>> intervals.add(0, 1)
        >>> intervals.add(2, 3)
        >>> intervals.to_list()
        [(0, 1), (2, 3)]
        >>> intervals.add(1, 2)
        >>> intervals.to_list()
        [(0, 3)]
        >>> intervals.get_interval_containing(1)
        (0, 3)
        >>> intervals.get_first_start_from(1) is None
        True
    """

    def __init__(self, it: Optional[Iterable[Interval]] = None):
        """
        Initialize a CoalescedIntervals, optionally from an iterable of intervals.

        Args:
            it: Optional iterable of (start, end) tuples to add initially

        Raises:
            InvalidInterval: If any of the initial intervals has start >= end
        """
        self._starts: list[int] = []
        self._ends: list[int] = []
        if it is not None:
            for start, end in it:
                self.add(start, end)

    def add(self, start: int, end: int) -> None:
        """
        Add the half-open interval [start, end), merging as needed.

        Every stored interval (s, e) with e >= start and s <= end is fused
        with the new one. Those intervals form one contiguous run in the
        sorted storage, which is replaced by the fused interval.

        Args:
            start: Inclusive start coordinate
            end: Exclusive end coordinate

        Raises:
            InvalidInterval: If start >= end (the set is left unchanged)
            TypeError: If a coordinate is not an integer
        """
        start = operator.index(start)
        end = operator.index(end)
        if start >= end:
            raise InvalidInterval(start, end)

        # [lo, hi) is the run of stored intervals that overlap or touch.
        lo = bisect_left(self._ends, start)
        hi = bisect_right(self._starts, end)

        if lo < hi:
            new_start = min(start, self._starts[lo])
            new_end = max(end, self._ends[hi - 1])
        else:
            new_start, new_end = start, end

        logger.debug(
            f"add [{start}, {end}): replacing {hi - lo} interval(s) with [{new_start}, {new_end})"
        )
        self._starts[lo:hi] = [new_start]
        self._ends[lo:hi] = [new_end]

    def get_interval_containing(self, point: int) -> Optional[Interval]:
        """
        Return the stored interval (s, e) with s <= point < e, or None.

        Args:
            point: Coordinate to look up

        Returns:
            The containing interval, or None if point is not covered
        """
        i = bisect_right(self._starts, point) - 1
        if i >= 0 and point < self._ends[i]:
            return (self._starts[i], self._ends[i])
        return None

    def get_first_start_from(self, point: int) -> Optional[Interval]:
        """
        Return the stored interval with the smallest start >= point, or None.

        An interval that merely contains point (start < point < end) does
        not qualify.

        Args:
            point: Lower bound for the start coordinate

        Returns:
            The first interval starting at or after point, or None
        """
        i = bisect_left(self._starts, point)
        if i < len(self._starts):
            return (self._starts[i], self._ends[i])
        return None

    def to_list(self) -> list[Interval]:
        """Return all intervals as a sorted list of (start, end) tuples."""
        return list(zip(self._starts, self._ends))

    to_vec = to_list

    def to_array(self) -> np.ndarray:
        """Return all intervals as an (n, 2) int64 array of [start, end) rows."""
        out = np.empty((len(self._starts), 2), dtype=np.int64)
        out[:, 0] = self._starts
        out[:, 1] = self._ends
        return out

    def check_invariants(self) -> None:
        """
        Verify the storage is sorted, disjoint, non-touching and non-empty.

        Raises:
            InvariantViolation: If any invariant does not hold
        """
        if len(self._starts) != len(self._ends):
            raise InvariantViolation(
                f"start/end lists differ in length: {len(self._starts)} != {len(self._ends)}"
            )
        prev_end = None
        for start, end in zip(self._starts, self._ends):
            if start >= end:
                raise InvariantViolation(f"Empty or inverted interval [{start}, {end})")
            if prev_end is not None and prev_end >= start:
                raise InvariantViolation(
                    f"Interval [{start}, {end}) overlaps or touches previous end {prev_end}"
                )
            prev_end = end

    def stable_hash(self) -> int:
        """
        Compute a stable hash of the current intervals.

        The hash only depends on the coalesced intervals, so it is independent
        of insertion order and identical across processes.
        """
        intervals_str = str(self.to_list())
        hash_bytes = hashlib.sha256(intervals_str.encode('utf-8')).digest()
        return int.from_bytes(hash_bytes[:8], 'big', signed=True)

    def __len__(self) -> int:
        """Return the number of stored intervals."""
        return len(self._starts)

    def __iter__(self) -> Iterator[Interval]:
        return iter(self.to_list())

    def __contains__(self, point: int) -> bool:
        return self.get_interval_containing(point) is not None

    def __eq__(self, other) -> bool:
        """Check if two CoalescedIntervals contain the same intervals."""
        if not isinstance(other, CoalescedIntervals):
            return NotImplemented
        return self._starts == other._starts and self._ends == other._ends

    __hash__ = None

    def __repr__(self) -> str:
        return f"CoalescedIntervals({self.to_list()})"
