"""Deployment orchestration."""

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TextIO

import typer

from mdrcp.artifacts.resolver import artifact_dir, resolve_artifacts
from mdrcp.deploy.copier import copy_artifacts
from mdrcp.deploy.self_update import Spawner, spawn_detached
from mdrcp.deploy.summary import (
    build_summary,
    failure_lines,
    failure_message,
    format_deployment_summary,
    outcome_line,
    override_note_lines,
    render_json,
)
from mdrcp.destinations.destination import (
    ensure_target_dir,
    override_warnings,
    resolve_target,
)
from mdrcp.errors import (
    DeploymentFailedError,
    ManifestNotFoundError,
    NoBuiltExecutablesError,
)
from mdrcp.manifests.manifest import (
    MANIFEST_NAME,
    detect_project_type,
    load_manifest,
    read_tauri_product_name,
    rust_base_dir,
)
from mdrcp.types import (
    Copied,
    CopyOutcome,
    CurrentExecutableProvider,
    Deferred,
    DeploymentSummary,
    Environment,
    ProjectType,
    RunOptions,
    SummaryFormat,
    build_hint,
    running_executable,
)
from mdrcp.logging import get_logger

logger = get_logger(__name__)


@dataclass
class RunContext:
    """Process-level collaborators of a deployment run"""
    stdout: TextIO = field(default_factory=lambda: sys.stdout)
    stderr: TextIO = field(default_factory=lambda: sys.stderr)
    current_exe: CurrentExecutableProvider = running_executable
    env: Environment = field(default_factory=Environment.from_os)
    spawner: Spawner = spawn_detached
    temp_dir: Optional[Path] = None

    def out(self, line: str = "") -> None:
        typer.echo(line, file=self.stdout)

    def err(self, line: str = "") -> None:
        typer.echo(line, file=self.stderr)


def _print_outcome(context: RunContext, outcome: CopyOutcome) -> None:
    if isinstance(outcome, Copied):
        context.out(outcome_line("Copied", outcome.name, f"-> {outcome.destination}"))
    elif isinstance(outcome, Deferred):
        context.out(
            outcome_line(
                "Deferred", outcome.name, "(self-update will be attempted after other copies)"
            )
        )
    else:
        context.err(
            outcome_line("Failed", outcome.name, f"-> {outcome.destination}: {outcome.reason}")
        )


def run_with_options(
    project_dir: Path,
    options: RunOptions = RunOptions(),
    context: Optional[RunContext] = None,
) -> DeploymentSummary:
    """Deploy the built executables of the project in ``project_dir``.

    Configuration and destination errors are raised before anything is
    copied. Copy failures are collected and raised together as
    DeploymentFailedError once every artifact has been attempted.
    """
    context = context or RunContext()

    if options.project_type is None:
        project_type = detect_project_type(project_dir)
        auto_detected = True
    else:
        project_type = options.project_type
        auto_detected = False

    base_dir = rust_base_dir(project_dir, project_type)
    manifest_path = base_dir / MANIFEST_NAME
    if not manifest_path.exists():
        raise ManifestNotFoundError(manifest_path, tauri=project_type == ProjectType.TAURI)

    manifest = load_manifest(manifest_path)

    extra_names = []
    if project_type == ProjectType.TAURI:
        product_name = read_tauri_product_name(project_dir)
        if product_name:
            extra_names.append(product_name)

    profile = options.profile
    artifacts = resolve_artifacts(
        base_dir, manifest, profile, extra_names, context.env.system
    )
    if not artifacts:
        raise NoBuiltExecutablesError(profile.value, build_hint(profile, project_type))

    target = resolve_target(project_dir, options.target_override, context.env)
    ensure_target_dir(target.path)

    emit_text = options.summary == SummaryFormat.TEXT and not options.quiet
    produce_json = options.summary in (SummaryFormat.JSON, SummaryFormat.JSON_PRETTY)

    if emit_text and project_type == ProjectType.TAURI:
        mode = "[auto]" if auto_detected else "[--tauri]"
        context.out(
            f"{typer.style('Detected', fg=typer.colors.CYAN, bold=True)} "
            f"{project_type.value} project {mode}"
        )

    logger.info(
        {
            "event": "deploy_start",
            "project_type": project_type.value,
            "profile": profile.value,
            "target_dir": str(target.path),
            "artifacts": [a.name for a in artifacts],
        }
    )

    report = copy_artifacts(
        artifacts,
        artifact_dir(base_dir, profile),
        target.path,
        current_exe=context.current_exe(),
        spawner=context.spawner,
        on_outcome=(lambda o: _print_outcome(context, o)) if emit_text else None,
        temp_dir=context.temp_dir,
    )

    warnings = override_warnings(target)
    summary = build_summary(
        report.copied_count,
        target.path,
        target.override_used,
        report.copied,
        report.failures,
        warnings,
    )

    if report.spawned:
        # The updater finishes the copy once this process has exited
        if emit_text:
            context.out(
                f"{typer.style('Self-update:', fg=typer.colors.CYAN, bold=True)} "
                "Spawned updater process. Update will complete momentarily."
            )
        return summary

    if emit_text:
        if report.deferred is not None and report.self_update is None:
            context.err(
                f"{typer.style('Skipped self-update:', fg=typer.colors.YELLOW, bold=True)} "
                "Fix other copy failures first, then re-run."
            )
        context.out()
        context.out(
            format_deployment_summary(report.copied_count, target.path, target.override_used)
        )
        if report.failures:
            context.out()
            for line in failure_lines(report.failures):
                context.err(line)

    if target.override_used:
        if emit_text:
            for line in override_note_lines(target, warnings):
                context.out(line)
        else:
            for warning in warnings:
                context.err(f"Warning: {warning}")

    if produce_json:
        context.out(render_json(summary, pretty=options.summary == SummaryFormat.JSON_PRETTY))

    if report.failures:
        failed = len(report.failures)
        raise DeploymentFailedError(
            failure_message(failed, report.copied_count), failed, report.copied_count
        )

    return summary
