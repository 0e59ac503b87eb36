"""Build configuration loading.

This module loads a BuildConfig from YAML or JSON files. The options may
sit at the top level or under a ``gox`` key, the way plugin options are
nested in a release configuration.
"""

import json
from pathlib import Path
from typing import Any

import yaml

from gox_release.types import BuildConfig

PLUGIN_KEY = "gox"


def load_yaml(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValueError: If the content is not a mapping.
    """
    with open(path, encoding="utf-8") as f:
        data = yaml.safe_load(f)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"Expected a YAML mapping, got {type(data).__name__}")
    return data


def load_json(path: Path) -> dict[str, Any]:
    """Load a JSON file and return its contents as a dict.

    Raises:
        FileNotFoundError: If the file does not exist.
        json.JSONDecodeError: If the file is not valid JSON.
        ValueError: If the content is not an object.
    """
    with open(path, encoding="utf-8") as f:
        data = json.load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object, got {type(data).__name__}")
    return data


def load_config_data(path: Path) -> dict[str, Any]:
    """Load raw build options from a file, unwrapping the ``gox`` key.

    Args:
        path: Path to a .yaml, .yml or .json file.

    Returns:
        Option mapping (not yet validated).

    Raises:
        ValueError: If the extension is unsupported or content is malformed.
    """
    suffix = path.suffix.lower()
    if suffix in (".yaml", ".yml"):
        data = load_yaml(path)
    elif suffix == ".json":
        data = load_json(path)
    else:
        raise ValueError(f"Unsupported file format: {suffix}")

    nested = data.get(PLUGIN_KEY)
    if isinstance(nested, dict):
        return nested
    return data


def load_build_config(path: Path) -> BuildConfig:
    """Load and validate a BuildConfig from a YAML or JSON file.

    Raises:
        pydantic.ValidationError: If data does not match the model.
        ValueError: If the file format or content is unsupported.
    """
    return BuildConfig.model_validate(load_config_data(path))


__all__ = ["load_build_config", "load_config_data", "load_json", "load_yaml"]
