"""Built artifact discovery."""
from mdrcp.artifacts.platforms import exe_filename
from mdrcp.artifacts.resolver import resolve_artifacts

__all__ = [
    "exe_filename",
    "resolve_artifacts",
]
