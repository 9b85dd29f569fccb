"""Deployment directory resolution."""

from pathlib import Path
from typing import List, Optional

from mdrcp.artifacts.platforms import get_platform_mapping
from mdrcp.errors import (
    DestinationCreateError,
    DestinationNotADirectoryError,
    EmptyOverrideVariableError,
    HomeNotSetError,
    ResolutionError,
)
from mdrcp.types import DeploymentTarget, Environment
from mdrcp.logging import get_logger

logger = get_logger(__name__)

REDUNDANT_OVERRIDE_WARNING = (
    "Resolved target matches default destination; override may be redundant."
)


def target_override_from_env(env: Environment) -> Optional[Path]:
    """Destination named by MD_TARGET_DIR, if set."""
    if env.target_override is None:
        return None
    if env.target_override == "":
        raise EmptyOverrideVariableError()
    return Path(env.target_override)


def default_target_dir(env: Environment) -> Path:
    """Destination used when no --target is given."""
    custom = target_override_from_env(env)
    if custom is not None:
        return custom

    mapping = get_platform_mapping(env.system)
    if mapping.default_target is not None:
        return Path(mapping.default_target)

    if not env.home:
        raise HomeNotSetError(mapping.home_variable)
    return Path(env.home) / ".local" / "bin"


def target_hint(env: Environment) -> str:
    """Printable default destination, falling back to the platform hint"""
    try:
        return str(default_target_dir(env))
    except ResolutionError:
        return get_platform_mapping(env.system).target_hint


def resolve_target(
    project_dir: Path, target_override: Optional[Path], env: Environment
) -> DeploymentTarget:
    """Pick the destination: --target, then MD_TARGET_DIR, then the default.

    A relative --target is joined to the project directory, not the
    process working directory.
    """
    if target_override is None:
        default = default_target_dir(env)
        return DeploymentTarget(path=default, override_used=False, default_path=default)

    try:
        default = default_target_dir(env)
    except ResolutionError as e:
        logger.debug({"event": "default_target_unavailable", "error": str(e)})
        default = None

    if target_override.is_absolute():
        resolved = target_override
    else:
        resolved = project_dir / target_override

    logger.debug(
        {"event": "target_override", "passed": str(target_override), "resolved": str(resolved)}
    )
    return DeploymentTarget(
        path=resolved,
        override_used=True,
        default_path=default,
        raw_override=target_override,
    )


def ensure_target_dir(target_dir: Path) -> None:
    """Create the destination if needed; it must end up a directory."""
    if not target_dir.exists():
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise DestinationCreateError(target_dir, str(e)) from e
        logger.info({"event": "target_dir_created", "path": str(target_dir)})
    elif not target_dir.is_dir():
        raise DestinationNotADirectoryError(target_dir)


def override_warnings(target: DeploymentTarget) -> List[str]:
    """Warnings about an explicit destination"""
    if target.override_used and target.default_path is not None:
        if target.default_path == target.path:
            return [REDUNDANT_OVERRIDE_WARNING]
    return []
