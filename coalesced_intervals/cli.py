"""
Command-line interface for coalesced-intervals.

Usage:
    coalesced-intervals coalesce intervals.jsonl [--output out.yaml] [--contains 5] [--first-from 0]
    coalesced-intervals fuzz [--config fuzz.yaml] [--fuzz.iterations 5000 ...]
    coalesced-intervals --log-level DEBUG coalesce intervals.yaml

Log records share stdout with the printed results. coalesce logs at WARNING
unless --log-level says otherwise, so its output can be piped as is.
"""

import argparse
import sys
from typing import Optional, Sequence

from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)

# Log records and printed results both go to stdout
DEFAULT_LOG_LEVELS = {"coalesce": "WARNING", "fuzz": "INFO"}


def _format_interval(interval) -> str:
    if interval is None:
        return "none"
    return f"[{interval[0]}, {interval[1]})"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="coalesced-intervals",
        description="Coalesce half-open integer intervals [start, end).",
    )
    parser.add_argument(
        "--log-level", default=None,
        help="Logging level (default: WARNING for coalesce, INFO for fuzz). Logs share stdout with results",
    )
    subcommands = parser.add_subparsers(dest="command", required=True)

    coalesce_parser = subcommands.add_parser("coalesce", help="Coalesce intervals read from a file")
    coalesce_parser.add_argument("input", help="Interval file (.jsonl, .yaml, .yml or .json)")
    coalesce_parser.add_argument("--output", help="Write the coalesced intervals here instead of printing them")
    coalesce_parser.add_argument(
        "--contains", type=int, action="append", default=[], metavar="POINT",
        help="Print the interval containing POINT (repeatable)",
    )
    coalesce_parser.add_argument(
        "--first-from", type=int, action="append", default=[], metavar="POINT",
        help="Print the first interval starting at or after POINT (repeatable)",
    )

    fuzz_parser = subcommands.add_parser(
        "fuzz",
        help="Check the interval set against a brute-force model on random input",
        epilog="Any config value can be overridden with dot notation, e.g. --fuzz.iterations 5000",
    )
    fuzz_parser.add_argument("--config", help="Path to YAML configuration file")
    return parser


def run_coalesce(args) -> int:
    """Load intervals, coalesce them and print the result and query answers."""
    from .interval_set import CoalescedIntervals, InvalidInterval
    from .script_utils import load_intervals, save_intervals

    try:
        intervals = load_intervals(args.input)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Failed to load intervals from {args.input}: {e}")
        return 1

    coalesced = CoalescedIntervals()
    for position, (start, end) in enumerate(intervals, start=1):
        try:
            coalesced.add(start, end)
        except InvalidInterval as e:
            logger.error(f"Item {position} of {args.input}: {e}")
            return 1
    logger.info(f"Coalesced {len(intervals)} intervals into {len(coalesced)}")

    if args.output:
        try:
            save_intervals(coalesced, args.output)
        except (OSError, ValueError) as e:
            logger.error(f"Failed to write intervals to {args.output}: {e}")
            return 1
        logger.info(f"Wrote coalesced intervals to {args.output}")
    else:
        for interval in coalesced:
            print(_format_interval(interval))

    for point in args.contains:
        print(f"contains {point}: {_format_interval(coalesced.get_interval_containing(point))}")
    for point in args.first_from:
        print(f"first from {point}: {_format_interval(coalesced.get_first_start_from(point))}")
    return 0


FUZZ_INT_KEYS = ("iterations", "max_count", "low", "high")


def fuzz_settings(config, default_low: int, default_high: int) -> dict:
    """
    Read the fuzz.* keys from config and check their types.

    Raises:
        ValueError: If a count or bound is not an integer, the seed is not an
            integer or null, or show_progress is not a boolean
    """
    settings = {
        "iterations": config.get("fuzz.iterations", 1000),
        "seed": config.get("fuzz.seed", 42),
        "max_count": config.get("fuzz.max_count", 64),
        "low": config.get("fuzz.low", default_low),
        "high": config.get("fuzz.high", default_high),
        "show_progress": config.get("fuzz.show_progress", True),
    }
    for key in FUZZ_INT_KEYS:
        value = settings[key]
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"fuzz.{key} must be an integer, got {value!r}")
    seed = settings["seed"]
    if seed is not None and (isinstance(seed, bool) or not isinstance(seed, int)):
        raise ValueError(f"fuzz.seed must be an integer or null, got {seed!r}")
    if not isinstance(settings["show_progress"], bool):
        raise ValueError(f"fuzz.show_progress must be true or false, got {settings['show_progress']!r}")
    return settings


def run_fuzz_command(args, overrides: list[str]) -> int:
    """Run the fuzz harness configured from YAML and dot notation overrides."""
    from .flexible_config import load_flexible_config
    from .fuzz import DEFAULT_HIGH, DEFAULT_LOW, run_fuzz
    from .interval_set import InvariantViolation

    try:
        config = load_flexible_config(args.config, overrides)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error loading configuration: {e}")
        return 1

    try:
        report = run_fuzz(**fuzz_settings(config, DEFAULT_LOW, DEFAULT_HIGH))
    except ValueError as e:
        logger.error(f"Invalid fuzz configuration: {e}")
        return 1
    except InvariantViolation as e:
        logger.error(str(e))
        return 1

    print(
        f"iterations={report.iterations} added={report.intervals_added} "
        f"stored={report.intervals_stored} max_stored={report.max_stored}"
    )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Main entry point for the coalesced-intervals CLI."""
    parser = build_parser()
    args, unknown = parser.parse_known_args(argv)

    try:
        setup_logging(args.log_level or DEFAULT_LOG_LEVELS[args.command], force=True)
    except ValueError as e:
        parser.error(str(e))

    if args.command == "coalesce":
        if unknown:
            parser.error(f"unrecognized arguments: {' '.join(unknown)}")
        return run_coalesce(args)
    return run_fuzz_command(args, unknown)


if __name__ == "__main__":
    sys.exit(main())
