"""Release plugin steps.

This module provides the release workflow entry points:
- verify_conditions(): check that the tools and package name are available
- plan(): resolve every invocation of a prepare run without running any
- prepare(): cross-compile the matrix, then zip one archive per cell

prepare() runs in two phases. The cross-compiler runs once and must succeed
before any archive is created; archives are then created one cell at a time
in arch-outer / os-inner order. The first failure aborts the run and later
cells are never attempted. With max_parallel_archives > 1 cells run on a
bounded pool, and no cell starts after a failure has been seen.
"""

from __future__ import annotations

import logging
import shutil
import threading
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait

from gox_release.commands import (
    compose_archive_command,
    compose_cross_compile_command,
    plan_archives,
)
from gox_release.config import Settings, get_settings
from gox_release.errors import ToolNotFoundError
from gox_release.package import read_package_name
from gox_release.runner import run_process
from gox_release.types import (
    ArchiveTarget,
    BuildConfig,
    PrepareResult,
    ProcessInvocation,
    ReleaseContext,
)

logger = logging.getLogger(__name__)

STAGE_CROSS_COMPILE = "Gox Cross Compilation"
STAGE_ARCHIVE = "Archive creation"


def verify_conditions(
    config: BuildConfig,
    context: ReleaseContext,
    settings: Settings | None = None,
) -> None:
    """Check that a prepare run can start.

    Raises:
        ToolNotFoundError: If the cross-compiler or archiver is not on PATH.
        PackageMetadataError: If the package name cannot be resolved.
    """
    settings = settings or get_settings()
    search_path = context.env.get("PATH")
    for tool in (settings.cross_compiler, settings.archiver):
        location = shutil.which(tool, path=search_path)
        if location is None:
            raise ToolNotFoundError(tool)
        context.logger.info("Found %s at %s", tool, location)

    read_package_name(context.cwd, settings.package_name)
    logger.debug(
        "Verified %d target(s) for %s", config.matrix_size(), config.binary
    )


def plan(
    config: BuildConfig,
    context: ReleaseContext,
    settings: Settings | None = None,
) -> PrepareResult:
    """Resolve the invocations prepare() would perform, without running them.

    Raises:
        PackageMetadataError: If the package name cannot be resolved.
    """
    settings = settings or get_settings()
    package_name = read_package_name(context.cwd, settings.package_name)

    cmd = compose_cross_compile_command(
        config, tool=settings.cross_compiler, output_dir=settings.output_dir
    )
    cross_compile = ProcessInvocation(
        command=cmd[0], args=tuple(cmd[1:]), cwd=context.cwd, env=context.env
    )

    archives = []
    for target in plan_archives(
        config, package_name, context.version, settings.output_dir
    ):
        cmd = compose_archive_command(target, tool=settings.archiver)
        archives.append(
            ProcessInvocation(
                command=cmd[0], args=tuple(cmd[1:]), cwd=context.cwd, env=context.env
            )
        )

    return PrepareResult(
        version=context.version,
        package_name=package_name,
        cross_compile=cross_compile,
        archives=archives,
    )


def _archive(
    target: ArchiveTarget, context: ReleaseContext, settings: Settings
) -> ProcessInvocation:
    cmd = compose_archive_command(target, tool=settings.archiver)
    return run_process(cmd[0], cmd[1:], context, timeout=settings.process_timeout)


def _archive_unless_stopped(
    target: ArchiveTarget,
    context: ReleaseContext,
    settings: Settings,
    stop: threading.Event,
) -> ProcessInvocation | None:
    """Archive one cell on a pool worker; skip it once any cell has failed."""
    if stop.is_set():
        return None
    try:
        return _archive(target, context, settings)
    except Exception:
        # Set before this worker can take another queued cell
        stop.set()
        raise


def _archive_parallel(
    targets: list[ArchiveTarget],
    context: ReleaseContext,
    settings: Settings,
) -> list[ProcessInvocation]:
    """Create archives on a bounded pool, stopping at the first failure.

    No cell starts once a failure has been seen: queued cells are cancelled
    or skipped, and cells already running are allowed to finish. The
    earliest failure in matrix order is raised.
    """
    stop = threading.Event()
    with ThreadPoolExecutor(max_workers=settings.max_parallel_archives) as pool:
        futures = [
            pool.submit(_archive_unless_stopped, t, context, settings, stop)
            for t in targets
        ]
        _, pending = wait(futures, return_when=FIRST_EXCEPTION)
        for future in pending:
            future.cancel()

    results: list[ProcessInvocation] = []
    for future in futures:
        if future.cancelled():
            continue
        error = future.exception()
        if error is not None:
            raise error
        invocation = future.result()
        if invocation is not None:
            results.append(invocation)
    return results


def prepare(
    config: BuildConfig,
    context: ReleaseContext,
    settings: Settings | None = None,
) -> PrepareResult:
    """Cross-compile the build matrix and archive each binary.

    Args:
        config: Build matrix.
        context: Release context (version, cwd, env, sinks, logger).
        settings: Tool and execution settings; loaded from env if omitted.

    Returns:
        PrepareResult listing the invocations that ran.

    Raises:
        PackageMetadataError: If the package name cannot be resolved.
        ProcessExecutionError: If any external tool fails. Nothing after the
            failing invocation is run.
    """
    settings = settings or get_settings()
    version = context.version
    package_name = read_package_name(context.cwd, settings.package_name)

    context.logger.info(STAGE_CROSS_COMPILE)
    cmd = compose_cross_compile_command(
        config, tool=settings.cross_compiler, output_dir=settings.output_dir
    )
    cross_compile = run_process(
        cmd[0], cmd[1:], context, timeout=settings.process_timeout
    )

    context.logger.info(STAGE_ARCHIVE)
    targets = plan_archives(config, package_name, version, settings.output_dir)
    if settings.max_parallel_archives > 1:
        archives = _archive_parallel(targets, context, settings)
    else:
        archives = [_archive(t, context, settings) for t in targets]

    logger.info("Created %d archive(s) for %s %s", len(archives), package_name, version)
    return PrepareResult(
        version=version,
        package_name=package_name,
        cross_compile=cross_compile,
        archives=archives,
    )


__all__ = [
    "STAGE_ARCHIVE",
    "STAGE_CROSS_COMPILE",
    "plan",
    "prepare",
    "verify_conditions",
]
