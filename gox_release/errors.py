"""Exception types for gox_release.

Every error carries a stable ``code`` string so that frontends can map
failures without parsing messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gox_release.types import ProcessInvocation


class GoxReleaseError(Exception):
    """Base error for gox_release operations."""

    def __init__(self, message: str, code: str = "gox_release_error") -> None:
        super().__init__(message)
        self.code = code


class ProcessExecutionError(GoxReleaseError):
    """Raised when an external process fails."""

    def __init__(
        self,
        message: str,
        invocation: ProcessInvocation,
        exit_code: int | None = None,
        code: str = "process_error",
    ) -> None:
        super().__init__(message, code=code)
        self.invocation = invocation
        self.exit_code = exit_code


class ProcessLaunchError(ProcessExecutionError):
    """Raised when an external tool cannot be started."""

    def __init__(self, message: str, invocation: ProcessInvocation) -> None:
        super().__init__(message, invocation, exit_code=None, code="launch_error")


class ProcessExitError(ProcessExecutionError):
    """Raised when an external tool exits with a non-zero status."""

    def __init__(
        self, message: str, invocation: ProcessInvocation, exit_code: int
    ) -> None:
        super().__init__(message, invocation, exit_code=exit_code, code="nonzero_exit")


class ProcessTimeoutError(ProcessExecutionError):
    """Raised when an external tool exceeds its timeout and is killed."""

    def __init__(
        self, message: str, invocation: ProcessInvocation, timeout: float
    ) -> None:
        super().__init__(message, invocation, exit_code=-1, code="timeout")
        self.timeout = timeout


class ToolNotFoundError(GoxReleaseError):
    """Raised when a required executable is not on PATH."""

    def __init__(self, tool: str) -> None:
        super().__init__(
            f"Required tool not found on PATH: {tool}", code="tool_not_found"
        )
        self.tool = tool


class PackageMetadataError(GoxReleaseError):
    """Raised when the host package name cannot be determined."""

    def __init__(self, message: str) -> None:
        super().__init__(message, code="package_metadata_error")


__all__ = [
    "GoxReleaseError",
    "PackageMetadataError",
    "ProcessExecutionError",
    "ProcessExitError",
    "ProcessLaunchError",
    "ProcessTimeoutError",
    "ToolNotFoundError",
]
