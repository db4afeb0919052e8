import json
from pathlib import Path
from typing import Any, Union

import yaml

from .interval_set import Interval

JSONL_SUFFIXES = {".jsonl"}
YAML_SUFFIXES = {".yaml", ".yml", ".json"}


def load_jsonl(filepath):
    """
    Load a JSONL (JSON Lines) file into a list of objects.

    Args:
        filepath (str): Path to the JSONL file

    Returns:
        list: One decoded object per non-empty line
    """
    data = []
    with open(filepath, 'r', encoding='utf-8') as file:
        for line in file:
            line = line.strip()
            if line:  # Skip empty lines
                data.append(json.loads(line))
    return data


def save_jsonl(data, filepath):
    """
    Save a list of objects to a JSONL (JSON Lines) file.

    Args:
        data (list): Objects to save
        filepath (str): Path to the output JSONL file
    """
    with open(filepath, 'w', encoding='utf-8') as file:
        for item in data:
            json.dump(item, file)
            file.write('\n')


def parse_interval(item: Any, position: int) -> Interval:
    """
    Convert a [start, end] pair or {"start": s, "end": e} mapping to a tuple.

    Only the shape and integer types are checked here; start < end is
    enforced when the interval is added to a set.

    Raises:
        ValueError: If the item is malformed (position is 1-based)
    """
    if isinstance(item, dict):
        if "start" not in item or "end" not in item:
            raise ValueError(f"Item {position}: mapping needs 'start' and 'end' keys, got {item}")
        start, end = item["start"], item["end"]
    elif isinstance(item, (list, tuple)) and len(item) == 2:
        start, end = item
    else:
        raise ValueError(f"Item {position}: expected [start, end] or a mapping, got {item!r}")

    for value in (start, end):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError(f"Item {position}: coordinates must be integers, got {item!r}")
    return (start, end)


def load_intervals(path: Union[str, Path]) -> list[Interval]:
    """
    Load a list of intervals from a JSONL, YAML or JSON file.

    JSONL files hold one interval per line. YAML and JSON files hold a list
    of intervals, or a mapping with an "intervals" key.

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: On an unsupported suffix or malformed content
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Could not find file: {path}")

    suffix = path.suffix.lower()
    if suffix in JSONL_SUFFIXES:
        items = load_jsonl(path)
    elif suffix in YAML_SUFFIXES:
        with open(path, 'r', encoding='utf-8') as f:
            try:
                items = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Error parsing {path}: {e}")
        if items is None:
            items = []
        if isinstance(items, dict):
            items = items.get("intervals", [])
        if not isinstance(items, list):
            raise ValueError(f"{path} must contain a list of intervals")
    else:
        raise ValueError(f"Unsupported interval file type: {path.suffix!r}")

    return [parse_interval(item, i + 1) for i, item in enumerate(items)]


def save_intervals(intervals, path: Union[str, Path]) -> None:
    """
    Save intervals in the format implied by the file suffix.

    Args:
        intervals: Iterable of (start, end) tuples
        path: Output path ending in .jsonl, .yaml, .yml or .json
    """
    path = Path(path)
    rows = [[int(start), int(end)] for start, end in intervals]

    suffix = path.suffix.lower()
    if suffix in JSONL_SUFFIXES:
        save_jsonl(rows, path)
    elif suffix == ".json":
        with open(path, 'w', encoding='utf-8') as f:
            json.dump({"intervals": rows}, f, indent=2)
    elif suffix in YAML_SUFFIXES:
        with open(path, 'w', encoding='utf-8') as f:
            yaml.safe_dump({"intervals": rows}, f, default_flow_style=None)
    else:
        raise ValueError(f"Unsupported interval file type: {path.suffix!r}")
