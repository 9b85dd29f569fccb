import shutil
from pathlib import Path

from mdrcp.logging import get_logger

logger = get_logger(__name__)


def copy_executable(source: Path, dest: Path) -> Path:
    """Copy a file to exactly ``dest``, keeping its permission bits.

    Unlike ``shutil.copy2`` an existing directory at ``dest`` is an error
    (IsADirectoryError or PermissionError), never a copy into it.
    """
    shutil.copyfile(source, dest)
    shutil.copymode(source, dest)

    logger.debug({
        "event": "executable_copied",
        "source": str(source),
        "destination": str(dest)
    })

    return dest
