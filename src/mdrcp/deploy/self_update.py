"""Self-replacing update of the running executable.

When a deployment would overwrite the executable that is currently running,
the copy cannot happen in-process on every platform (Windows keeps the image
locked). Instead the running binary is cloned to a well-known file in the
system temp directory and that clone is started as a detached process with
the private ``finish-update`` command. The parent then exits, releasing its
executable, while the helper retries the copy until the file can be written.
"""

import os
import subprocess
import sys
import tempfile
import time
from pathlib import Path
from typing import Callable, List, Optional

from mdrcp.errors import SelfUpdateError
from mdrcp.types import SelfUpdateResult, SelfUpdateState
from mdrcp.utils.fs import copy_executable
from mdrcp.logging import get_logger

logger = get_logger(__name__)

UPDATER_TEMP_NAME = "mdrcp_updater.exe"
FINISH_UPDATE_COMMAND = "finish-update"
UPDATE_ATTEMPTS = 10
UPDATE_RETRY_DELAY = 0.5  # seconds

Spawner = Callable[[List[str]], None]


def canonical_path(path: Path) -> Path:
    """Fully resolved path, or the path unchanged when it does not exist."""
    try:
        return path.resolve(strict=True)
    except (OSError, RuntimeError):
        return path


def updater_path(temp_dir: Optional[Path] = None) -> Path:
    """Location of the temporary updater copy"""
    return (temp_dir or Path(tempfile.gettempdir())) / UPDATER_TEMP_NAME


def spawn_detached(args: List[str]) -> None:
    """Start a process that outlives this one; never waited on."""
    kwargs = {
        "stdin": subprocess.DEVNULL,
        "stdout": subprocess.DEVNULL,
        "stderr": subprocess.DEVNULL,
        "close_fds": True,
    }
    if sys.platform == "win32":
        kwargs["creationflags"] = (
            subprocess.DETACHED_PROCESS | subprocess.CREATE_NEW_PROCESS_GROUP
        )
    else:
        kwargs["start_new_session"] = True

    process = subprocess.Popen(args, **kwargs)
    logger.debug({"event": "updater_spawned", "pid": process.pid, "args": args})


def try_self_update(
    source: Path,
    dest: Path,
    current_exe: Optional[Path],
    spawner: Spawner = spawn_detached,
    temp_dir: Optional[Path] = None,
) -> SelfUpdateResult:
    """Hand the copy of ``source`` over ``dest`` to a detached updater."""
    if current_exe is None:
        return SelfUpdateResult(SelfUpdateState.NOT_APPLICABLE)

    current = canonical_path(current_exe)
    if current != canonical_path(dest):
        return SelfUpdateResult(SelfUpdateState.NOT_APPLICABLE)

    updater = updater_path(temp_dir)
    try:
        copy_executable(current, updater)
    except OSError as e:
        logger.warning(
            {"event": "updater_copy_failed", "updater": str(updater), "error": str(e)}
        )
        return SelfUpdateResult(
            SelfUpdateState.FAILED, f"Failed to copy self to temp: {e}"
        )

    args = [str(updater), FINISH_UPDATE_COMMAND, str(source), str(dest)]
    try:
        spawner(args)
    except OSError as e:
        logger.warning({"event": "updater_spawn_failed", "error": str(e)})
        return SelfUpdateResult(
            SelfUpdateState.FAILED, f"Failed to spawn updater: {e}"
        )

    logger.info(
        {"event": "self_update_spawned", "source": str(source), "dest": str(dest)}
    )
    return SelfUpdateResult(SelfUpdateState.SPAWNED)


def finish_update(
    source: Path,
    dest: Path,
    attempts: int = UPDATE_ATTEMPTS,
    delay: float = UPDATE_RETRY_DELAY,
    sleep: Callable[[float], None] = time.sleep,
) -> None:
    """Copy ``source`` over ``dest`` once the parent process lets go of it.

    Runs inside the detached updater. Each failed attempt waits ``delay``
    seconds; SelfUpdateError is raised when all attempts fail.
    """
    last_error: Optional[OSError] = None
    for attempt in range(1, attempts + 1):
        try:
            copy_executable(source, dest)
        except OSError as e:
            last_error = e
            logger.debug(
                {"event": "finish_update_retry", "attempt": attempt, "error": str(e)}
            )
            if attempt < attempts:
                sleep(delay)
            continue

        logger.info(
            {"event": "finish_update_complete", "dest": str(dest), "attempt": attempt}
        )
        return

    raise SelfUpdateError(
        f"Failed to finish update of {dest} after {attempts} attempts: {last_error}",
        details={"source": str(source), "dest": str(dest), "attempts": attempts},
    )


def cleanup_stale_updater(temp_dir: Optional[Path] = None) -> bool:
    """Best-effort removal of an updater left by an earlier self-update."""
    updater = updater_path(temp_dir)
    if not updater.exists():
        return False
    try:
        os.remove(updater)
    except OSError as e:
        # Still running or locked; the next start will try again
        logger.debug({"event": "updater_cleanup_skipped", "error": str(e)})
        return False

    logger.debug({"event": "updater_cleaned", "path": str(updater)})
    return True
