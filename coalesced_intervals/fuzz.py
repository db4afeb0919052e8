"""
Randomized differential checking for CoalescedIntervals.

Each iteration inserts a random batch of intervals into a fresh set and
checks the result against a brute-force model: the set of integers covered
by the inputs. The default coordinate range [-128, 127] is small enough
for collisions, touching boundaries and full merges to be common.

Functions:
    generate_intervals: Draw a random batch of non-empty intervals
    check_vector: Check an interval list is sorted, non-empty and separated
    covered_points: Brute-force set of integers covered by intervals
    run_fuzz: Run many iterations and return a FuzzReport
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import numpy as np
from tqdm import tqdm

from .interval_set import CoalescedIntervals, Interval, InvariantViolation
from .logging_config import get_logger

logger = get_logger(__name__)

DEFAULT_LOW = -128
DEFAULT_HIGH = 127


@dataclass
class FuzzReport:
    """Counts collected over a fuzz run."""

    iterations: int = 0
    intervals_added: int = 0
    intervals_stored: int = 0
    max_stored: int = 0


def generate_intervals(
    rng: np.random.Generator,
    max_count: int = 64,
    low: int = DEFAULT_LOW,
    high: int = DEFAULT_HIGH,
) -> list[Interval]:
    """
    Draw between 0 and max_count random non-empty intervals.

    Args:
        rng: Random number generator
        max_count: Maximum number of intervals to draw
        low: Smallest coordinate that may appear
        high: Largest coordinate that may appear

    Returns:
        List of (start, end) tuples with low <= start < end <= high
    """
    if high <= low:
        raise ValueError(f"high ({high}) must be greater than low ({low})")
    if max_count < 0:
        raise ValueError(f"max_count must be non-negative, got {max_count}")

    count = int(rng.integers(0, max_count + 1))
    intervals = []
    for _ in range(count):
        start = int(rng.integers(low, high))
        end = int(rng.integers(start + 1, high + 1))
        intervals.append((start, end))
    return intervals


def check_vector(v: list[Interval]) -> None:
    """
    Check an interval list is sorted, non-empty and strictly separated.

    Raises:
        InvariantViolation: On the first interval that breaks an invariant
    """
    if v != sorted(v):
        raise InvariantViolation(f"Intervals are not sorted: {v}")
    for i, (start, end) in enumerate(v):
        if end <= start:
            raise InvariantViolation(f"Interval {i} is empty or inverted: ({start}, {end})")
        if i > 0 and start <= v[i - 1][1]:
            # Touching or overlapping neighbours should have been coalesced
            raise InvariantViolation(
                f"Interval {i} ({start}, {end}) is not separated from {v[i - 1]}"
            )


def covered_points(intervals: Iterable[Interval]) -> set[int]:
    """Return every integer covered by the given half-open intervals."""
    points = set()
    for start, end in intervals:
        points.update(range(start, end))
    return points


def _check_batch(batch: list[Interval], rng: np.random.Generator) -> CoalescedIntervals:
    coalesced = CoalescedIntervals()
    for start, end in batch:
        coalesced.add(start, end)

    coalesced.check_invariants()
    v = coalesced.to_vec()
    logger.debug(f"v: {v}")
    check_vector(v)

    expected = covered_points(batch)
    actual = covered_points(v)
    if expected != actual:
        raise InvariantViolation(
            f"Covered points differ: missing {sorted(expected - actual)}, "
            f"extra {sorted(actual - expected)}"
        )

    permuted = [batch[i] for i in rng.permutation(len(batch))]
    if CoalescedIntervals(permuted) != coalesced:
        raise InvariantViolation(f"Insertion order changed the result for {batch}")

    return coalesced


def run_fuzz(
    iterations: int = 1000,
    seed: Optional[int] = 42,
    max_count: int = 64,
    low: int = DEFAULT_LOW,
    high: int = DEFAULT_HIGH,
    show_progress: bool = True,
) -> FuzzReport:
    """
    Check CoalescedIntervals against a brute-force model on random inputs.

    For every iteration a random batch is inserted into a fresh set. The
    result must pass check_invariants and check_vector, cover exactly the
    same points as the inputs, and equal the set built from a shuffled
    copy of the batch.

    Args:
        iterations: Number of random batches to check
        seed: Seed for the random number generator (None for fresh entropy)
        max_count: Maximum number of intervals per batch
        low: Smallest coordinate that may appear
        high: Largest coordinate that may appear
        show_progress: Show a tqdm progress bar

    Returns:
        FuzzReport with counts over all iterations

    Raises:
        InvariantViolation: On the first failing batch, naming seed and iteration
    """
    rng = np.random.default_rng(seed)
    report = FuzzReport()

    logger.info(
        f"Fuzzing {iterations} iterations (seed={seed}, max_count={max_count}, range=[{low}, {high}])"
    )
    for iteration in tqdm(range(iterations), disable=not show_progress):
        batch = generate_intervals(rng, max_count=max_count, low=low, high=high)
        try:
            coalesced = _check_batch(batch, rng)
        except InvariantViolation as e:
            raise InvariantViolation(
                f"Fuzz failure at iteration {iteration} (seed={seed}): {e}\nInput: {batch}"
            ) from e

        report.iterations += 1
        report.intervals_added += len(batch)
        report.intervals_stored += len(coalesced)
        report.max_stored = max(report.max_stored, len(coalesced))

    logger.info(
        f"Fuzzing passed: {report.intervals_added} intervals added, "
        f"{report.intervals_stored} stored after coalescing"
    )
    return report
