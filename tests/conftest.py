"""
Shared pytest fixtures for coalesced-intervals tests.
"""

import json
import logging

import pytest
import yaml

from coalesced_intervals import CoalescedIntervals
from coalesced_intervals.logging_config import setup_logging


@pytest.fixture
def three_abutting():
    """Intervals [0,1), [2,3), [1,2) which coalesce into [0,3) once all are added."""
    return [(0, 1), (2, 3), (1, 2)]


@pytest.fixture
def spanning_set():
    """A set holding [0,3) only."""
    intervals = CoalescedIntervals()
    intervals.add(0, 3)
    return intervals


@pytest.fixture
def scattered_set():
    """A set with three separated intervals: [-10,-5), [0,3), [10,20)."""
    return CoalescedIntervals([(10, 20), (-10, -5), (0, 3)])


@pytest.fixture
def jsonl_intervals_file(tmp_path):
    """JSONL file mixing list and mapping rows."""
    file_path = tmp_path / "intervals.jsonl"
    rows = [[5, 10], {"start": 0, "end": 5}, [20, 25]]
    with open(file_path, "w") as f:
        for row in rows:
            f.write(json.dumps(row) + "\n")
    return file_path


@pytest.fixture
def yaml_intervals_file(tmp_path):
    """YAML file with an 'intervals' list."""
    file_path = tmp_path / "intervals.yaml"
    file_path.write_text(yaml.safe_dump({"intervals": [[0, 1], [2, 3], [1, 2], [7, 9]]}))
    return file_path


@pytest.fixture
def fuzz_config_file(tmp_path):
    """Small fuzz configuration so tests stay fast."""
    file_path = tmp_path / "fuzz.yaml"
    file_path.write_text(
        yaml.safe_dump(
            {
                "fuzz": {
                    "iterations": 25,
                    "seed": 3,
                    "max_count": 16,
                    "low": -20,
                    "high": 20,
                    "show_progress": False,
                }
            }
        )
    )
    return file_path


@pytest.fixture(autouse=True)
def fresh_logging(capsys):
    """Bind the package log handler to this test's captured stdout."""
    setup_logging(logging.INFO, force=True)
    yield
