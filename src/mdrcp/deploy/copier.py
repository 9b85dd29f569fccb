"""Copy engine: artifacts to the deployment directory."""

from pathlib import Path
from typing import Callable, Iterable, Optional

from mdrcp.deploy.self_update import (
    Spawner,
    canonical_path,
    spawn_detached,
    try_self_update,
)
from mdrcp.types import (
    Copied,
    CopyOutcome,
    CopyReport,
    Deferred,
    Failed,
    FailedCopy,
    ResolvedArtifact,
    SelfUpdateState,
)
from mdrcp.utils.fs import copy_executable
from mdrcp.logging import get_logger

logger = get_logger(__name__)

SELF_UPDATE_SKIPPED = "Self-update skipped due to other failures"

OutcomeCallback = Callable[[CopyOutcome], None]


def is_self_update_target(target_path: Path, current_exe: Optional[Path]) -> bool:
    """True when ``target_path`` is the executable that is running."""
    if current_exe is None:
        return False
    return canonical_path(current_exe) == canonical_path(target_path)


def _record_failure(
    report: CopyReport,
    name: str,
    error: str,
    on_outcome: Optional[OutcomeCallback],
    destination: Optional[Path] = None,
    reason: Optional[str] = None,
) -> None:
    outcome = Failed(name=name, error=error, destination=destination, reason=reason)
    report.failures.append(FailedCopy(binary=name, error=error))
    report.outcomes.append(outcome)
    if on_outcome:
        on_outcome(outcome)


def copy_artifacts(
    artifacts: Iterable[ResolvedArtifact],
    source_dir: Path,
    target_dir: Path,
    current_exe: Optional[Path] = None,
    spawner: Spawner = spawn_detached,
    on_outcome: Optional[OutcomeCallback] = None,
    temp_dir: Optional[Path] = None,
) -> CopyReport:
    """Copy every artifact, collecting failures instead of stopping.

    An artifact whose destination is the running executable is deferred
    until all others are attempted. It is then handed to the self-update
    protocol, unless another copy failed, in which case it is reported as
    skipped and the running binary is left untouched.
    """
    report = CopyReport()

    for artifact in artifacts:
        if not artifact.exists:
            continue

        source_path = source_dir / artifact.filename
        target_path = target_dir / artifact.filename

        if is_self_update_target(target_path, current_exe):
            deferred = Deferred(
                name=artifact.filename, source=source_path, destination=target_path
            )
            logger.info({"event": "copy_deferred", "binary": artifact.filename})
            report.deferred = deferred
            report.outcomes.append(deferred)
            if on_outcome:
                on_outcome(deferred)
            continue

        try:
            copy_executable(source_path, target_path)
        except OSError as e:
            logger.warning(
                {"event": "copy_failed", "binary": artifact.filename, "error": str(e)}
            )
            _record_failure(
                report,
                artifact.filename,
                f"Failed to copy {source_path} to {target_path}: {e}",
                on_outcome,
                destination=target_path,
                reason=str(e),
            )
            continue

        logger.info(
            {"event": "artifact_copied", "binary": artifact.filename, "dest": str(target_path)}
        )
        copied = Copied(name=artifact.filename, destination=target_path)
        report.copied.append(artifact.filename)
        report.outcomes.append(copied)
        if on_outcome:
            on_outcome(copied)

    if report.deferred is not None:
        _handle_deferred(report, current_exe, spawner, on_outcome, temp_dir)

    return report


def _handle_deferred(
    report: CopyReport,
    current_exe: Optional[Path],
    spawner: Spawner,
    on_outcome: Optional[OutcomeCallback],
    temp_dir: Optional[Path],
) -> None:
    deferred = report.deferred

    if report.failures:
        logger.warning({"event": "self_update_skipped", "binary": deferred.name})
        # Reported once by the caller as a skipped self-update
        _record_failure(report, deferred.name, SELF_UPDATE_SKIPPED, None)
        return

    result = try_self_update(
        deferred.source, deferred.destination, current_exe, spawner, temp_dir
    )
    report.self_update = result

    if result.state == SelfUpdateState.SPAWNED:
        return

    if result.state == SelfUpdateState.FAILED:
        error = (
            f"Failed to self-update {deferred.source} to {deferred.destination}: "
            f"{result.message}"
        )
        _record_failure(
            report,
            deferred.name,
            error,
            on_outcome,
            destination=deferred.destination,
            reason=result.message,
        )
        return

    _record_failure(
        report,
        deferred.name,
        f"Failed to copy {deferred.source} to {deferred.destination}: file in use",
        None,
    )
