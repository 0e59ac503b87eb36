"""Shared type definitions for gox_release.

This module contains the models and dataclasses shared across modules:
the build matrix configuration, the release context supplied by the
release workflow, and the records describing process invocations.
"""

from __future__ import annotations

import logging
import os
import shlex
import sys
from collections.abc import Iterator, Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, TextIO

from pydantic import BaseModel, ConfigDict, Field, field_validator


class BuildConfig(BaseModel):
    """Build matrix for one release.

    Attributes:
        binary: Executable name produced by the cross-compiler.
        arch: Target architectures, in declaration order.
        os: Target operating systems, in declaration order.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    binary: str = Field(min_length=1, description="Executable name")
    arch: tuple[str, ...] = Field(min_length=1, description="Target architectures")
    os: tuple[str, ...] = Field(min_length=1, description="Target operating systems")

    @field_validator("binary")
    @classmethod
    def validate_binary(cls, v: str) -> str:
        """Reject binary names that would escape the output directory."""
        if "/" in v or "\\" in v or v.strip() != v:
            raise ValueError(f"binary must be a bare file name, got '{v}'")
        return v

    @field_validator("arch", "os")
    @classmethod
    def validate_targets(cls, v: tuple[str, ...]) -> tuple[str, ...]:
        """Each target must be a single non-empty token."""
        for item in v:
            if not item or any(c.isspace() for c in item):
                raise ValueError(f"target must be a non-empty word, got '{item}'")
        return v

    def matrix_size(self) -> int:
        """Return the number of (os, arch) cells."""
        return len(self.arch) * len(self.os)


@dataclass(frozen=True)
class NextRelease:
    """The release being prepared."""

    version: str


@dataclass
class ReleaseContext:
    """Release state handed to plugin steps by the release workflow.

    The ``stdout`` and ``stderr`` sinks are shared by every process this
    package launches. They are written to and flushed but never closed.
    """

    next_release: NextRelease
    cwd: Path = field(default_factory=Path.cwd)
    env: dict[str, str] = field(default_factory=lambda: dict(os.environ))
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    logger: logging.Logger = field(
        default_factory=lambda: logging.getLogger("gox_release")
    )

    @property
    def version(self) -> str:
        return self.next_release.version


@dataclass(frozen=True)
class ProcessInvocation:
    """One external process launch."""

    command: str
    args: tuple[str, ...]
    cwd: Path
    env: Mapping[str, str] = field(default_factory=dict, repr=False, compare=False)

    @property
    def argv(self) -> list[str]:
        return [self.command, *self.args]

    @property
    def display(self) -> str:
        """Shell-quoted command line, for logs and dry runs."""
        return shlex.join(self.argv)


@dataclass(frozen=True)
class ArchiveTarget:
    """One cell of the build matrix and the archive it produces.

    Attributes:
        os: Target operating system.
        arch: Target architecture.
        source: Path of the compiled binary, relative to the working directory.
        archive_name: File name of the zip archive (no directory part).
    """

    os: str
    arch: str
    source: str
    archive_name: str


@dataclass
class PrepareResult:
    """Invocations performed (or planned) by a prepare run."""

    version: str
    package_name: str
    cross_compile: ProcessInvocation
    archives: list[ProcessInvocation] = field(default_factory=list)

    def __iter__(self) -> Iterator[ProcessInvocation]:
        yield self.cross_compile
        yield from self.archives

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "version": self.version,
            "package_name": self.package_name,
            "cross_compile": self.cross_compile.argv,
            "archives": [inv.argv for inv in self.archives],
        }


__all__ = [
    "ArchiveTarget",
    "BuildConfig",
    "NextRelease",
    "PrepareResult",
    "ProcessInvocation",
    "ReleaseContext",
]
