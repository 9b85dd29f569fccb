"""Error types for artifact deployment."""
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from mdrcp.logging import log_with_data
from mdrcp.types import TARGET_OVERRIDE_ENV

EXIT_OK = 0
EXIT_FAILURE = 1


def log_error(
    error: Exception,
    context: Optional[Dict[str, Any]] = None,
    logger: Optional[logging.Logger] = None
) -> None:
    """Log an error with context."""
    logger = logger or logging.getLogger("mdrcp.errors")

    error_info = {
        "error_type": error.__class__.__name__,
        "error_message": str(error)
    }
    if context:
        error_info["context"] = context
    if isinstance(error, DeployError):
        error_info["code"] = error.code
        error_info["details"] = error.details

    log_with_data(logger, logging.ERROR, "Deployment error occurred", error_info)


class DeployError(Exception):
    """Base error class for deployment."""
    def __init__(
        self,
        message: str,
        code: int = EXIT_FAILURE,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.code = code
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.__class__.__name__,
            "message": str(self),
            "details": self.details
        }


class ConfigurationError(DeployError):
    """Project manifest could not provide anything to deploy."""


class ManifestNotFoundError(ConfigurationError):
    def __init__(self, manifest_path: Path, tauri: bool = False):
        if tauri:
            message = (
                f"No Cargo.toml found at {manifest_path}. "
                "Is this a valid Tauri project?"
            )
        else:
            message = (
                "No Cargo.toml found. "
                "Please run this tool in a Rust project directory"
            )
        super().__init__(message, details={"manifest": str(manifest_path)})


class ManifestReadError(ConfigurationError):
    def __init__(self, manifest_path: Path, reason: str):
        super().__init__(
            f"Failed to read Cargo.toml: {reason}",
            details={"manifest": str(manifest_path)}
        )


class ManifestParseError(ConfigurationError):
    def __init__(self, manifest_path: Path, reason: str):
        super().__init__(
            f"Failed to parse Cargo.toml: {reason}",
            details={"manifest": str(manifest_path)}
        )


class NoPackagesFoundError(ConfigurationError):
    def __init__(self):
        super().__init__("No packages or bins found in Cargo.toml")


class NoBuiltExecutablesError(ConfigurationError):
    def __init__(self, profile_label: str, build_hint: str):
        super().__init__(
            f"No built {profile_label} executables found. "
            f"Have you run '{build_hint}'?",
            details={"profile": profile_label, "hint": build_hint}
        )


class ResolutionError(DeployError):
    """Deployment directory could not be determined or prepared."""


class EmptyOverrideVariableError(ResolutionError):
    def __init__(self, variable: str = TARGET_OVERRIDE_ENV):
        super().__init__(
            f"{variable} is set but empty; provide an absolute path",
            details={"variable": variable}
        )


class HomeNotSetError(ResolutionError):
    def __init__(self, variable: str = "HOME"):
        super().__init__(
            f"{variable} is not set; cannot determine ~/.local/bin",
            details={"variable": variable}
        )


class DestinationCreateError(ResolutionError):
    def __init__(self, target_dir: Path, reason: str):
        super().__init__(
            f"Failed to create target directory {target_dir}: {reason}",
            details={"target_dir": str(target_dir)}
        )


class DestinationNotADirectoryError(ResolutionError):
    def __init__(self, target_dir: Path):
        super().__init__(
            f"Target path {target_dir} exists but is not a directory",
            details={"target_dir": str(target_dir)}
        )


class SelfUpdateError(DeployError):
    """The detached updater could not replace the destination executable."""
    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class DeploymentFailedError(DeployError):
    """One or more artifacts could not be copied."""
    def __init__(self, message: str, failed: int, copied: int):
        super().__init__(message, details={"failed": failed, "copied": copied})
