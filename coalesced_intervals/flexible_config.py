"""
flexible_config.py - YAML configuration with dot notation overrides.

Loads a YAML configuration file (with environment variable substitution and
'include' directives) and lets command line arguments override any nested
value using dot notation.

Usage:
    coalesced-intervals fuzz --config fuzz.yaml --fuzz.iterations 5000
    coalesced-intervals fuzz --fuzz.seed 7 --fuzz.show_progress false
"""

import os
import re
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .logging_config import get_logger

logger = get_logger(__name__)


def substitute_env_vars(content: str) -> str:
    """Substitute ${VAR} and $VAR patterns with environment variables."""
    def replace_var(match):
        var_name = match.group(1)
        env_value = os.environ.get(var_name)
        if env_value is None:
            logger.warning(f"Environment variable '{var_name}' not found, keeping placeholder")
            return match.group(0)
        return env_value

    content = re.sub(r'\$\{([^}]+)\}', replace_var, content)
    content = re.sub(r'\$(\w+)(?=\W|$)', replace_var, content)
    return content


def deep_merge_configs(base_config: Dict[Any, Any], override_config: Dict[Any, Any]) -> Dict[Any, Any]:
    """
    Deep merge two configuration dictionaries.

    Values from override_config win, nested dictionaries are merged
    recursively and lists are concatenated (base + override).
    """
    result = base_config.copy()
    for key, value in override_config.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge_configs(result[key], value)
        elif key in result and isinstance(result[key], list) and isinstance(value, list):
            result[key] = result[key] + value
        else:
            result[key] = value
    return result


def load_yaml_with_includes(file_path: Union[str, Path], visited_files: Optional[set] = None) -> Dict[Any, Any]:
    """
    Load a YAML file and resolve its 'include' directive.

    The included file is the base; the including file's values take
    precedence. Relative include paths are resolved against the directory
    of the including file.

    Args:
        file_path: Path to the YAML file to load
        visited_files: Files already on the include chain

    Returns:
        Merged configuration dictionary

    Raises:
        FileNotFoundError: If the file or an included file doesn't exist
        ValueError: On a circular include or invalid YAML
    """
    if visited_files is None:
        visited_files = set()

    file_path = Path(file_path).resolve()
    if str(file_path) in visited_files:
        raise ValueError(f"Circular include detected: {file_path}")
    visited_files.add(str(file_path))

    try:
        with open(file_path, 'r', encoding='utf-8') as f:
            content = f.read()
    except FileNotFoundError:
        raise FileNotFoundError(f"Could not find file: {file_path}")

    try:
        config = yaml.safe_load(substitute_env_vars(content)) or {}
    except yaml.YAMLError as e:
        raise ValueError(f"Error parsing YAML file {file_path}: {e}")
    if not isinstance(config, dict):
        raise ValueError(f"Top level of {file_path} must be a mapping")

    if 'include' in config:
        include_file = Path(config.pop('include'))
        if not include_file.is_absolute():
            include_file = file_path.parent / include_file
        base_config = load_yaml_with_includes(include_file, visited_files.copy())
        config = deep_merge_configs(base_config, config)

    return config


def load_yaml_config(config_path: Union[str, Path]) -> Dict[str, Any]:
    """Load YAML configuration with environment variable substitution and includes."""
    return load_yaml_with_includes(config_path) or {}


def set_nested_value_direct(dictionary: Dict[str, Any], key_path: str, value: Any) -> None:
    """
    Set a value in a nested dictionary using dot notation, with list index support.

    Missing dictionaries along the path are created. List indices must
    already exist.
    """
    keys = key_path.split('.')
    current = dictionary

    for key in keys[:-1]:
        if isinstance(current, list):
            current = current[_list_index(key, current)]
        else:
            if key not in current:
                current[key] = {}
            current = current[key]

    final_key = keys[-1]
    if isinstance(current, list):
        current[_list_index(final_key, current)] = value
    else:
        current[final_key] = value


def _list_index(key: str, current: list) -> int:
    if not key.isdigit():
        raise ValueError(f"Cannot use non-numeric key '{key}' for list access")
    idx = int(key)
    if idx >= len(current):
        raise IndexError(f"List index {idx} out of range (list has {len(current)} elements)")
    return idx


def convert_value(value: str) -> Any:
    """Convert a command line string to bool, int, float or leave it as str."""
    if value.lower() in ['true', 'false']:
        return value.lower() == 'true'

    try:
        if value.isdigit() or (value.startswith('-') and value[1:].isdigit()):
            return int(value)
        elif '.' in value:
            return float(value)
    except ValueError:
        pass

    return value


def get_nested_value(dictionary: Dict[str, Any], key_path: str, default: Any = None) -> Any:
    """Get a value from a nested dictionary using dot notation, with list index support."""
    current = dictionary
    try:
        for key in key_path.split('.'):
            if isinstance(current, list):
                if not key.isdigit():
                    return default
                current = current[int(key)]
            else:
                current = current[key]
        return current
    except (KeyError, TypeError, IndexError, ValueError):
        return default


_MISSING = object()


class FlexibleConfig(dict):
    """Dictionary with dot notation access for nested values and list indexing."""

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get a value using dot notation.

        Examples:
            config.get('fuzz.iterations', 1000)
            config.get('inputs.0.path')
        """
        return get_nested_value(self, key_path, default)

    def set(self, key_path: str, value: Any) -> None:
        """Set a value using dot notation."""
        set_nested_value_direct(self, key_path, value)

    def has(self, key_path: str) -> bool:
        """Check if a key path exists in the configuration."""
        return get_nested_value(self, key_path, _MISSING) is not _MISSING


def apply_overrides(config: FlexibleConfig, overrides: List[str]) -> None:
    """
    Apply '--key.path value' and '--flag' style overrides to config in place.

    Raises:
        ValueError: On a positional argument or an invalid key path
    """
    i = 0
    while i < len(overrides):
        arg = overrides[i]
        if not arg.startswith('--'):
            raise ValueError(f"Unexpected argument: {arg}")
        key = arg[2:]

        if i + 1 < len(overrides) and not overrides[i + 1].startswith('--'):
            value = convert_value(overrides[i + 1])
            i += 2
        else:
            value = True
            i += 1

        try:
            set_nested_value_direct(config, key, value)
        except (IndexError, TypeError) as e:
            raise ValueError(f"Error setting {key}: {e}")
        logger.info(f"Override: {key} = {value}")


def load_flexible_config(config_path: Optional[Union[str, Path]] = None, overrides: Optional[List[str]] = None) -> FlexibleConfig:
    """
    Build a FlexibleConfig from an optional YAML file and dot notation overrides.

    Args:
        config_path: Path to a YAML configuration file, or None for an empty base
        overrides: Leftover command line arguments such as ['--fuzz.seed', '7']

    Returns:
        FlexibleConfig with the overrides applied

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: On invalid YAML or overrides

    Usage:
        args, unknown = parser.parse_known_args()
        config = load_flexible_config(args.config, unknown)
        iterations = config.get('fuzz.iterations', 1000)
    """
    config = FlexibleConfig()
    if config_path:
        config.update(load_yaml_config(config_path))
        logger.info(f"Loaded configuration from: {config_path}")

    apply_overrides(config, overrides or [])
    return config
