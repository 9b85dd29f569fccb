"""Deployment summary aggregation and rendering."""

import json
from pathlib import Path
from typing import Iterable, List, Optional

import typer

from mdrcp.types import DeploymentSummary, DeploymentTarget, FailedCopy

STATUS_OK = "ok"
STATUS_PARTIAL = "partial"
STATUS_FAILED = "failed"


def summary_status(copied_count: int, failure_count: int) -> str:
    if failure_count == 0:
        return STATUS_OK
    if copied_count > 0:
        return STATUS_PARTIAL
    return STATUS_FAILED


def build_summary(
    copied_count: int,
    target_dir: Path,
    override_used: bool,
    copied_binaries: Iterable[str],
    failed_binaries: Iterable[FailedCopy],
    warnings: Iterable[str] = (),
) -> DeploymentSummary:
    """Aggregate the results of one run into an immutable summary."""
    failures = tuple(failed_binaries)
    return DeploymentSummary(
        status=summary_status(copied_count, len(failures)),
        copied_count=copied_count,
        target_dir=str(target_dir),
        override_used=override_used,
        copied_binaries=tuple(copied_binaries),
        failed_binaries=failures,
        warnings=tuple(warnings),
    )


def failure_message(failed: int, copied: int) -> str:
    """Aggregate error for a run that left failures behind"""
    if copied > 0:
        return (
            f"Failed to copy {failed} of {failed + copied} executables "
            f"(copied {copied} successfully)"
        )
    return f"Failed to copy {failed} executable(s)"


def render_json(summary: DeploymentSummary, pretty: bool = False) -> str:
    if pretty:
        return json.dumps(summary.to_dict(), indent=2)
    return json.dumps(summary.to_dict())


def format_deployment_summary(count: int, target_dir: Path, override_used: bool) -> str:
    """One-line text summary, e.g. ``Deployed 2 executable(s) to ~/.local/bin``."""
    line = (
        f"{typer.style('Deployed', fg=typer.colors.GREEN, bold=True)} "
        f"{typer.style(str(count), fg=typer.colors.GREEN, bold=True)} "
        f"executable(s) to "
        f"{typer.style(str(target_dir), fg=typer.colors.BRIGHT_WHITE, bold=True)}"
    )
    if override_used:
        line = f"{line} {typer.style('[--target]', fg=typer.colors.BRIGHT_CYAN)}"
    return line


def override_note_lines(target: DeploymentTarget, warnings: List[str]) -> List[str]:
    """Explain where an explicit --target ended up."""
    def label(text: str) -> str:
        return typer.style(text, fg=typer.colors.MAGENTA, bold=True)

    lines = [
        f"{typer.style('Note:', fg=typer.colors.CYAN, bold=True)} "
        "Destination provided via --target.",
        f"{label('  Passed:')} {target.raw_override}",
        f"{label('  Resolved:')} {target.path}",
        f"{label('  Relative paths:')} Resolved against the project directory.",
    ]
    for warning in warnings:
        lines.append(
            f"{typer.style('Warning:', fg=typer.colors.YELLOW, bold=True)} {warning}"
        )
    return lines


def failure_lines(failures: Iterable[FailedCopy]) -> List[str]:
    failures = list(failures)
    if not failures:
        return []
    header = typer.style(
        f"Failed to copy {len(failures)} executable(s):",
        fg=typer.colors.BRIGHT_RED,
        bold=True,
    )
    return [header] + [
        f"  {typer.style('•', fg=typer.colors.BRIGHT_RED)} {f.error}" for f in failures
    ]


def outcome_line(verb: str, binary: str, detail: Optional[str] = None) -> str:
    colors = {
        "Copied": typer.colors.GREEN,
        "Deferred": typer.colors.CYAN,
        "Failed": typer.colors.BRIGHT_RED,
    }
    line = f"{typer.style(verb, fg=colors.get(verb), bold=True)} {binary}"
    if detail:
        line = f"{line} {detail}"
    return line
