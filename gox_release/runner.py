"""Runner for external tool invocations.

This module handles:
- Launching a tool with the release context's cwd and environment
- Streaming the tool's stdout/stderr into the shared context sinks
- Mapping launch failures, non-zero exits and timeouts to errors

The context sinks are shared by every invocation of a release run, so they
are flushed after each line but never closed here.
"""

from __future__ import annotations

import contextlib
import logging
import os
import signal
import subprocess
import threading
from collections.abc import Sequence
from typing import IO, TextIO

from gox_release.errors import (
    ProcessExitError,
    ProcessLaunchError,
    ProcessTimeoutError,
)
from gox_release.types import ProcessInvocation, ReleaseContext

logger = logging.getLogger(__name__)

# Upper bound on draining output after a timed-out tool was killed
PUMP_DRAIN_TIMEOUT = 5.0


def _pump(pipe: IO[str], sink: TextIO) -> None:
    """Copy lines from a child pipe into a sink, leaving the sink open."""
    with pipe:
        for line in iter(pipe.readline, ""):
            sink.write(line)
            sink.flush()


def _kill_process_group(proc: subprocess.Popen[str]) -> None:
    """Kill the tool together with the children it started.

    The tool runs in its own session, so its process group also holds the
    compilers it spawned, which would otherwise keep the output pipes open.
    """
    if not hasattr(os, "killpg"):
        proc.kill()
        return
    with contextlib.suppress(ProcessLookupError):
        os.killpg(proc.pid, signal.SIGKILL)


def run_process(
    command: str,
    args: Sequence[str],
    context: ReleaseContext,
    timeout: float | None = None,
) -> ProcessInvocation:
    """Run an external tool to completion.

    Args:
        command: Executable name or path.
        args: Arguments, passed verbatim (no shell).
        context: Release context supplying cwd, env and output sinks.
        timeout: Seconds to wait before killing the tool (None = no limit).

    Returns:
        The ProcessInvocation that completed successfully.

    Raises:
        ProcessLaunchError: If the tool cannot be started.
        ProcessExitError: If the tool exits with a non-zero status.
        ProcessTimeoutError: If the timeout elapses.
    """
    invocation = ProcessInvocation(
        command=command,
        args=tuple(args),
        cwd=context.cwd,
        env=context.env,
    )
    logger.info("Executing: %s", invocation.display)
    logger.debug("Working directory: %s", invocation.cwd)

    try:
        proc = subprocess.Popen(
            invocation.argv,
            cwd=invocation.cwd,
            env=dict(invocation.env),
            stdin=subprocess.DEVNULL,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            encoding="utf-8",
            errors="replace",
            start_new_session=True,
        )
    except OSError as e:
        message = f"Failed to execute {command}: {e}"
        logger.error(message)
        raise ProcessLaunchError(message, invocation) from e

    # Separate readers so a full stderr pipe cannot stall stdout
    pumps = [
        threading.Thread(target=_pump, args=(proc.stdout, context.stdout), daemon=True),
        threading.Thread(target=_pump, args=(proc.stderr, context.stderr), daemon=True),
    ]
    for pump in pumps:
        pump.start()

    try:
        exit_code = proc.wait(timeout=timeout)
    except subprocess.TimeoutExpired as e:
        _kill_process_group(proc)
        proc.wait()
        for pump in pumps:
            pump.join(timeout=PUMP_DRAIN_TIMEOUT)
            if pump.is_alive():
                logger.warning("Output of %s still open after kill", command)
        message = f"{command} timed out after {timeout} seconds"
        logger.error(message)
        raise ProcessTimeoutError(message, invocation, timeout=timeout) from e

    for pump in pumps:
        pump.join()

    if exit_code != 0:
        message = f"{command} failed with exit code {exit_code}"
        logger.error("%s: %s", message, invocation.display)
        raise ProcessExitError(message, invocation, exit_code=exit_code)

    return invocation


__all__ = ["run_process"]
