"""Thin CLI wrapper for gox_release.

This module provides the command-line interface using Typer.
All business logic is delegated to core modules.
"""

import json
import logging
from pathlib import Path
from typing import Annotated

import typer
import yaml
from pydantic import ValidationError
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from gox_release import __version__
from gox_release.config import Settings, get_settings, print_settings_json
from gox_release.errors import GoxReleaseError
from gox_release.io import load_config_data
from gox_release.types import BuildConfig, NextRelease, ReleaseContext

app = typer.Typer(
    name="gox-release",
    help="gox release - cross-compile Go binaries and package them per platform",
    no_args_is_help=True,
)
console = Console()
err_console = Console(stderr=True)

ConfigOption = Annotated[
    Path | None,
    typer.Option("--config", "-c", help="YAML/JSON file with binary, arch and os"),
]
BinaryOption = Annotated[
    str | None,
    typer.Option("--binary", "-b", help="Executable name"),
]
ArchOption = Annotated[
    list[str] | None,
    typer.Option("--arch", "-a", help="Target architecture (can be repeated)"),
]
OsOption = Annotated[
    list[str] | None,
    typer.Option("--os", "-o", help="Target operating system (can be repeated)"),
]
CwdOption = Annotated[
    Path | None,
    typer.Option("--cwd", help="Project directory (defaults to current directory)"),
]
PackageNameOption = Annotated[
    str | None,
    typer.Option("--package-name", help="Override the package name"),
]


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"gox-release version {__version__}")
        raise typer.Exit()


def configure_logging(level: str) -> None:
    """Route log records to stderr through rich."""
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=err_console, show_path=False)],
        force=True,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
) -> None:
    """gox release - cross-compile Go binaries and package them per platform."""
    configure_logging(get_settings().log_level)


def _build_config(
    config_path: Path | None,
    binary: str | None,
    arch: list[str] | None,
    os_list: list[str] | None,
) -> BuildConfig:
    """Merge file options with CLI options; CLI values win."""
    data = {}
    if config_path is not None:
        if not config_path.exists():
            err_console.print(
                f"[red]File not found: {escape(str(config_path))}[/red]"
            )
            raise typer.Exit(code=1)
        try:
            data = dict(load_config_data(config_path))
        except (ValueError, yaml.YAMLError, OSError) as e:
            err_console.print(f"[red]Invalid config file: {escape(str(e))}[/red]")
            raise typer.Exit(code=1) from None

    if binary is not None:
        data["binary"] = binary
    if arch:
        data["arch"] = arch
    if os_list:
        data["os"] = os_list

    try:
        return BuildConfig.model_validate(data)
    except ValidationError as e:
        err_console.print("[red]Invalid build configuration:[/red]")
        err_console.print(str(e), markup=False)
        raise typer.Exit(code=1) from None


def _settings(
    package_name: str | None = None,
    timeout: int | None = None,
    jobs: int | None = None,
) -> Settings:
    overrides: dict[str, object] = {}
    if package_name is not None:
        overrides["package_name"] = package_name
    if timeout is not None:
        overrides["process_timeout"] = timeout
    if jobs is not None:
        overrides["max_parallel_archives"] = jobs
    settings = get_settings()
    if not overrides:
        return settings
    try:
        return Settings.model_validate({**settings.model_dump(), **overrides})
    except ValidationError as e:
        err_console.print("[red]Invalid settings:[/red]")
        err_console.print(str(e), markup=False)
        raise typer.Exit(code=1) from None


def _context(version: str, cwd: Path | None) -> ReleaseContext:
    context = ReleaseContext(next_release=NextRelease(version=version))
    if cwd is not None:
        context.cwd = cwd.resolve()
    return context


@app.command()
def config(
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show effective configuration."""
    settings = get_settings()
    if json_output:
        typer.echo(print_settings_json(settings))
        return

    console.print("[bold]Effective Configuration:[/bold]")
    console.print()
    console.print("[bold]Tools:[/bold]")
    console.print(f"  Cross-compiler:      {settings.cross_compiler}")
    console.print(f"  Archiver:            {settings.archiver}")
    console.print()
    console.print("[bold]Output:[/bold]")
    console.print(f"  Output directory:    {settings.output_dir}")
    console.print(
        f"  Package name:        {settings.package_name or '(from package.json)'}"
    )
    console.print()
    console.print("[bold]Execution:[/bold]")
    timeout_display = (
        str(settings.process_timeout) if settings.process_timeout else "(none)"
    )
    console.print(f"  Process timeout:     {timeout_display}")
    console.print(f"  Parallel archives:   {settings.max_parallel_archives}")
    console.print(f"  Log level:           {settings.log_level}")


@app.command()
def verify(
    config_path: ConfigOption = None,
    binary: BinaryOption = None,
    arch: ArchOption = None,
    os_list: OsOption = None,
    cwd: CwdOption = None,
    package_name: PackageNameOption = None,
) -> None:
    """Check that the cross-compiler, archiver and package name are available."""
    from gox_release.plugin import verify_conditions

    build_config = _build_config(config_path, binary, arch, os_list)
    settings = _settings(package_name=package_name)
    context = _context("0.0.0", cwd)

    try:
        verify_conditions(build_config, context, settings)
    except GoxReleaseError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red] ({e.code})")
        raise typer.Exit(code=1) from None

    console.print(
        f"[green]✓ Ready to build {build_config.binary} "
        f"for {build_config.matrix_size()} target(s)[/green]"
    )


@app.command("plan")
def plan_cmd(
    version: Annotated[
        str, typer.Option("--version", help="Release version (used verbatim)")
    ],
    config_path: ConfigOption = None,
    binary: BinaryOption = None,
    arch: ArchOption = None,
    os_list: OsOption = None,
    cwd: CwdOption = None,
    package_name: PackageNameOption = None,
    json_output: Annotated[
        bool,
        typer.Option("--json", help="Output as JSON"),
    ] = False,
) -> None:
    """Show the commands a prepare run would execute, without running them."""
    from gox_release.plugin import plan

    build_config = _build_config(config_path, binary, arch, os_list)
    settings = _settings(package_name=package_name)
    context = _context(version, cwd)

    try:
        result = plan(build_config, context, settings)
    except GoxReleaseError as e:
        err_console.print(f"[red]Error: {escape(str(e))}[/red] ({e.code})")
        raise typer.Exit(code=1) from None

    if json_output:
        typer.echo(json.dumps(result.to_dict(), indent=2))
        return

    console.print(f"[bold]Plan for {result.package_name} {result.version}:[/bold]")
    for invocation in result:
        console.print(f"  {invocation.display}", soft_wrap=True, markup=False)


@app.command("prepare")
def prepare_cmd(
    version: Annotated[
        str, typer.Option("--version", help="Release version (used verbatim)")
    ],
    config_path: ConfigOption = None,
    binary: BinaryOption = None,
    arch: ArchOption = None,
    os_list: OsOption = None,
    cwd: CwdOption = None,
    package_name: PackageNameOption = None,
    timeout: Annotated[
        int | None,
        typer.Option("--timeout", help="Per-process timeout in seconds"),
    ] = None,
    jobs: Annotated[
        int | None,
        typer.Option("--jobs", "-j", help="Concurrent archive invocations"),
    ] = None,
) -> None:
    """Cross-compile the build matrix and create one zip archive per target."""
    from gox_release.plugin import prepare

    build_config = _build_config(config_path, binary, arch, os_list)
    settings = _settings(package_name=package_name, timeout=timeout, jobs=jobs)
    context = _context(version, cwd)

    try:
        result = prepare(build_config, context, settings)
    except GoxReleaseError as e:
        err_console.print(f"[red]✗ {escape(str(e))}[/red] ({e.code})")
        raise typer.Exit(code=1) from None

    console.print(
        f"[green]✓ Created {len(result.archives)} archive(s) "
        f"for {result.package_name} {result.version}[/green]"
    )
    for invocation in result.archives:
        # zip -j <archive> <source>
        console.print(f"    {invocation.args[1]}", markup=False)


if __name__ == "__main__":
    app()
