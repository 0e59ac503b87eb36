"""Host package metadata.

Archive names embed the host project's package name, read from its
package descriptor: ``package.json`` first, then ``pyproject.toml``.
"""

from __future__ import annotations

import json
import tomllib
from pathlib import Path
from typing import Any

from gox_release.errors import PackageMetadataError

PACKAGE_JSON = "package.json"
PYPROJECT_TOML = "pyproject.toml"


def _name_from_package_json(path: Path) -> str | None:
    try:
        with open(path, encoding="utf-8") as f:
            data: Any = json.load(f)
    except json.JSONDecodeError as e:
        raise PackageMetadataError(f"Invalid JSON in {path}: {e}") from e
    if not isinstance(data, dict):
        raise PackageMetadataError(f"Expected a JSON object in {path}")
    return data.get("name")


def _name_from_pyproject(path: Path) -> str | None:
    try:
        with open(path, "rb") as f:
            data = tomllib.load(f)
    except tomllib.TOMLDecodeError as e:
        raise PackageMetadataError(f"Invalid TOML in {path}: {e}") from e
    project = data.get("project")
    if not isinstance(project, dict):
        return None
    return project.get("name")


def read_package_name(cwd: Path, override: str | None = None) -> str:
    """Resolve the package name used in archive file names.

    Args:
        cwd: Project root holding the package descriptor.
        override: Explicit name; skips descriptor lookup when set.

    Returns:
        The package name, verbatim.

    Raises:
        PackageMetadataError: If no descriptor provides a usable name.
    """
    if override:
        return override

    for filename, reader in (
        (PACKAGE_JSON, _name_from_package_json),
        (PYPROJECT_TOML, _name_from_pyproject),
    ):
        path = cwd / filename
        if not path.is_file():
            continue
        name = reader(path)
        if not isinstance(name, str) or not name:
            raise PackageMetadataError(f"No package name in {path}")
        return name

    raise PackageMetadataError(
        f"No {PACKAGE_JSON} or {PYPROJECT_TOML} found in {cwd}"
    )


__all__ = ["read_package_name"]
