"""Typer CLI entrypoint for mdrcp."""

import json
from importlib.metadata import PackageNotFoundError, version as package_version
from pathlib import Path
from typing import Optional

import typer

from mdrcp import __version__
from mdrcp.deploy.runner import RunContext, run_with_options
from mdrcp.deploy.self_update import (
    FINISH_UPDATE_COMMAND,
    cleanup_stale_updater,
    finish_update,
)
from mdrcp.destinations.destination import target_hint
from mdrcp.errors import EXIT_FAILURE, EXIT_OK, DeployError, SelfUpdateError, log_error
from mdrcp.logging import configure_logging, get_logger
from mdrcp.types import (
    BuildProfile,
    Command,
    DeployCommand,
    FinishUpdateCommand,
    ProjectType,
    RunOptions,
    SummaryFormat,
)

logger = get_logger("cli")

app = typer.Typer(
    add_completion=False,
    help="Copy built Cargo executables into a deployment directory.",
    invoke_without_command=True,
    context_settings={"help_option_names": ["-h", "--help"]},
)


def version_banner() -> str:
    try:
        current = package_version("mdrcp")
    except PackageNotFoundError:
        current = __version__
    return f"{typer.style('mdrcp', bold=True)} {typer.style(f'v{current}', fg=typer.colors.BRIGHT_BLUE, bold=True)}"


def _write_error(context: RunContext, error: DeployError, profile: BuildProfile) -> None:
    context.err(f"{typer.style('Error:', fg=typer.colors.BRIGHT_RED, bold=True)} {error}")
    context.err()
    context.err(f"{typer.style('Usage:', fg=typer.colors.YELLOW, bold=True)} mdrcp [OPTIONS]")
    context.err(
        f"{typer.style('Hint:', fg=typer.colors.CYAN, bold=True)} "
        f"Run this tool in a Rust project directory to copy {profile.value} executables to "
        f"{typer.style(target_hint(context.env), bold=True)}"
    )
    context.err(f"{typer.style('More info:', fg=typer.colors.CYAN, bold=True)} mdrcp --help")


def execute(
    command: Command,
    project_dir: Optional[Path] = None,
    context: Optional[RunContext] = None,
) -> int:
    """Run a parsed command and return the process exit code."""
    context = context or RunContext()

    match command:
        case FinishUpdateCommand(source=source, dest=dest):
            try:
                finish_update(source, dest)
            except SelfUpdateError as e:
                log_error(e, logger=logger)
                context.err(f"{typer.style('Error:', fg=typer.colors.BRIGHT_RED, bold=True)} {e}")
                return EXIT_FAILURE
            return EXIT_OK

        case DeployCommand(options=options):
            cleanup_stale_updater(context.temp_dir)
            try:
                run_with_options(project_dir or Path.cwd(), options, context)
            except DeployError as e:
                log_error(e, context={"project_dir": str(project_dir or Path.cwd())}, logger=logger)
                if options.summary == SummaryFormat.TEXT:
                    _write_error(context, e, options.profile)
                else:
                    # Machine-readable modes get the error as one JSON object
                    context.err(json.dumps(e.to_dict()))
                return EXIT_FAILURE
            return EXIT_OK

    raise TypeError(f"Unsupported command: {command!r}")


def _show_version(value: bool) -> None:
    if value:
        typer.echo(version_banner())
        raise typer.Exit()


@app.callback()
def deploy(
    ctx: typer.Context,
    target: Optional[Path] = typer.Option(
        None,
        "--target",
        "-t",
        help="Copy built binaries into this directory (relative paths resolve from the project root).",
    ),
    quiet: bool = typer.Option(
        False, "--quiet", "-q", help="Suppress version banner and progress output."
    ),
    summary: SummaryFormat = typer.Option(
        SummaryFormat.TEXT, "--summary", help="Deployment summary format."
    ),
    debug: bool = typer.Option(
        False, "--debug/--release", help="Copy from target/debug instead of target/release."
    ),
    tauri: Optional[bool] = typer.Option(
        None, "--tauri/--no-tauri", help="Force or disable Tauri project mode (src-tauri/)."
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Log structured events to stderr."),
    version: bool = typer.Option(
        False, "--version", "-V", callback=_show_version, is_eager=True,
        help="Show version information.",
    ),
) -> None:
    """Copy executables from target/<profile> to the deployment directory."""
    configure_logging(verbose)
    if ctx.invoked_subcommand is not None:
        return

    if tauri is None:
        project_type = None
    else:
        project_type = ProjectType.TAURI if tauri else ProjectType.STANDARD

    options = RunOptions(
        target_override=target,
        quiet=quiet,
        summary=summary,
        profile=BuildProfile.DEBUG if debug else BuildProfile.RELEASE,
        project_type=project_type,
    )
    if not quiet and summary == SummaryFormat.TEXT:
        typer.echo(version_banner())

    raise typer.Exit(execute(DeployCommand(options)))


@app.command(FINISH_UPDATE_COMMAND, hidden=True)
def finish_update_command(source: Path, dest: Path) -> None:
    """Complete a pending self-update (started by mdrcp itself)."""
    raise typer.Exit(execute(FinishUpdateCommand(source=source, dest=dest)))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
