"""Command composition for the cross-compiler and the archiver.

This module handles:
- Iterating the build matrix in arch-outer / os-inner order
- Composing the `gox` cross-compilation command
- Composing one `zip -j` command per matrix cell

Nothing here launches a process; see runner.py for execution.
"""

from __future__ import annotations

from collections.abc import Iterator

from gox_release.types import ArchiveTarget, BuildConfig

DEFAULT_OUTPUT_DIR = "pkg"
WINDOWS = "windows"
WINDOWS_SUFFIX = ".exe"


def iter_matrix(config: BuildConfig) -> Iterator[tuple[str, str]]:
    """Yield ``(arch, os)`` pairs, architecture outer, OS inner."""
    for arch in config.arch:
        for os_name in config.os:
            yield arch, os_name


def output_template(binary: str, output_dir: str = DEFAULT_OUTPUT_DIR) -> str:
    """Return the gox ``-output`` template.

    The ``{{.OS}}`` and ``{{.Arch}}`` placeholders are Go template syntax
    expanded by gox itself for each produced binary.
    """
    return f"{output_dir}/{{{{.OS}}}}-{{{{.Arch}}}}/{binary}"


def binary_path(
    binary: str,
    os_name: str,
    arch: str,
    output_dir: str = DEFAULT_OUTPUT_DIR,
) -> str:
    """Return the path gox writes the binary for one cell to.

    Args:
        binary: Executable name.
        os_name: Target operating system.
        arch: Target architecture.
        output_dir: Directory gox was told to write into.

    Returns:
        Relative path such as ``./pkg/linux-amd64/app``. Windows binaries
        carry an ``.exe`` suffix.
    """
    suffix = WINDOWS_SUFFIX if os_name == WINDOWS else ""
    return f"./{output_dir}/{os_name}-{arch}/{binary}{suffix}"


def archive_name(package_name: str, version: str, os_name: str, arch: str) -> str:
    """Return ``<package>_<version>_<os>_<arch>.zip``."""
    return f"{package_name}_{version}_{os_name}_{arch}.zip"


def compose_cross_compile_command(
    config: BuildConfig,
    tool: str = "gox",
    output_dir: str = DEFAULT_OUTPUT_DIR,
) -> list[str]:
    """Compose the cross-compilation command.

    The architecture and OS lists are each passed as ONE space-joined
    argument; gox splits them itself.

    Args:
        config: Build matrix.
        tool: Cross-compiler executable.
        output_dir: Directory for compiled binaries.

    Returns:
        Command as list of strings suitable for subprocess.
    """
    return [
        tool,
        "-arch",
        " ".join(config.arch),
        "-os",
        " ".join(config.os),
        "-output",
        output_template(config.binary, output_dir),
    ]


def plan_archives(
    config: BuildConfig,
    package_name: str,
    version: str,
    output_dir: str = DEFAULT_OUTPUT_DIR,
) -> list[ArchiveTarget]:
    """List the archive for every matrix cell, in execution order."""
    return [
        ArchiveTarget(
            os=os_name,
            arch=arch,
            source=binary_path(config.binary, os_name, arch, output_dir),
            archive_name=archive_name(package_name, version, os_name, arch),
        )
        for arch, os_name in iter_matrix(config)
    ]


def compose_archive_command(target: ArchiveTarget, tool: str = "zip") -> list[str]:
    """Compose the archive command for one cell.

    ``-j`` stores the binary without its directory path.
    """
    return [tool, "-j", target.archive_name, target.source]


__all__ = [
    "DEFAULT_OUTPUT_DIR",
    "archive_name",
    "binary_path",
    "compose_archive_command",
    "compose_cross_compile_command",
    "iter_matrix",
    "output_template",
    "plan_archives",
]
