"""Core type definitions"""

import os
import platform
import sys
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, TypeAlias, Union

BuildProfile = Enum('BuildProfile', [('RELEASE', 'release'), ('DEBUG', 'debug')])
ProjectType = Enum('ProjectType', [('STANDARD', 'standard'), ('TAURI', 'Tauri')])
SummaryFormat = Enum(
    'SummaryFormat', [('TEXT', 'text'), ('JSON', 'json'), ('JSON_PRETTY', 'json-pretty')]
)
SelfUpdateState = Enum('SelfUpdateState', ['NOT_APPLICABLE', 'SPAWNED', 'FAILED'])

# Decoded Cargo.toml document
PackageManifest: TypeAlias = Dict[str, Any]

# Returns the path of the running executable, or None when it cannot be known
CurrentExecutableProvider: TypeAlias = Callable[[], Optional[Path]]

# Environment variable naming the default deployment directory
TARGET_OVERRIDE_ENV = "MD_TARGET_DIR"

BUILD_HINTS = {
    (BuildProfile.RELEASE, ProjectType.STANDARD): "cargo build --release",
    (BuildProfile.DEBUG, ProjectType.STANDARD): "cargo build",
    (BuildProfile.RELEASE, ProjectType.TAURI): "cargo tauri build",
    (BuildProfile.DEBUG, ProjectType.TAURI): "cargo tauri build --debug",
}


def build_hint(profile: BuildProfile, project_type: ProjectType) -> str:
    """Command that produces artifacts for the profile"""
    return BUILD_HINTS[(profile, project_type)]


def running_executable() -> Optional[Path]:
    """Path of the program currently executing.

    Frozen builds report the bundled binary; otherwise the console script
    that launched the interpreter is the file a deployment could overwrite.
    Windows launchers strip their own ``.exe`` suffix from ``argv[0]``, so
    the suffixed name is tried as well.
    """
    if getattr(sys, "frozen", False):
        return Path(sys.executable)
    if sys.argv and sys.argv[0]:
        candidate = Path(sys.argv[0])
        if candidate.is_file():
            return candidate
        if candidate.name:
            launcher = candidate.with_name(candidate.name + ".exe")
            if launcher.is_file():
                return launcher
    return None


@dataclass(frozen=True)
class Environment:
    """Process environment the destination resolver depends on"""
    home: Optional[str]
    target_override: Optional[str]
    system: str

    @classmethod
    def from_os(cls) -> "Environment":
        return cls(
            home=os.environ.get("HOME"),
            target_override=os.environ.get(TARGET_OVERRIDE_ENV),
            system=platform.system(),
        )


@dataclass(frozen=True)
class ResolvedArtifact:
    """Candidate binary paired with its platform filename"""
    name: str
    filename: str
    exists: bool


@dataclass(frozen=True)
class DeploymentTarget:
    """Resolved destination directory"""
    path: Path
    override_used: bool
    default_path: Optional[Path] = None
    raw_override: Optional[Path] = None


@dataclass(frozen=True)
class Copied:
    name: str
    destination: Path


@dataclass(frozen=True)
class Failed:
    name: str
    error: str
    destination: Optional[Path] = None
    reason: Optional[str] = None


@dataclass(frozen=True)
class Deferred:
    name: str
    source: Path
    destination: Path


CopyOutcome: TypeAlias = Union[Copied, Failed, Deferred]


@dataclass(frozen=True)
class FailedCopy:
    binary: str
    error: str


@dataclass(frozen=True)
class SelfUpdateResult:
    state: SelfUpdateState
    message: str = ""


@dataclass
class CopyReport:
    """Collected results of one pass of the copy engine"""
    copied: List[str] = field(default_factory=list)
    failures: List[FailedCopy] = field(default_factory=list)
    outcomes: List[CopyOutcome] = field(default_factory=list)
    deferred: Optional[Deferred] = None
    self_update: Optional[SelfUpdateResult] = None

    @property
    def copied_count(self) -> int:
        return len(self.copied)

    @property
    def spawned(self) -> bool:
        return (
            self.self_update is not None
            and self.self_update.state == SelfUpdateState.SPAWNED
        )


@dataclass(frozen=True)
class DeploymentSummary:
    """Aggregate result of a deployment run"""
    status: str
    copied_count: int
    target_dir: str
    override_used: bool
    copied_binaries: tuple[str, ...]
    failed_binaries: tuple[FailedCopy, ...]
    warnings: tuple[str, ...]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "status": self.status,
            "copied_count": self.copied_count,
            "target_dir": self.target_dir,
            "override_used": self.override_used,
            "copied_binaries": list(self.copied_binaries),
            "failed_binaries": [
                {"binary": f.binary, "error": f.error} for f in self.failed_binaries
            ],
            "warnings": list(self.warnings),
        }


@dataclass(frozen=True)
class RunOptions:
    """Options for a deployment run"""
    target_override: Optional[Path] = None
    quiet: bool = False
    summary: SummaryFormat = SummaryFormat.TEXT
    profile: BuildProfile = BuildProfile.RELEASE
    project_type: Optional[ProjectType] = None  # None = auto-detect


@dataclass(frozen=True)
class DeployCommand:
    """Normal invocation: deploy built artifacts"""
    options: RunOptions = field(default_factory=RunOptions)


@dataclass(frozen=True)
class FinishUpdateCommand:
    """Private helper invocation completing a pending self-update"""
    source: Path
    dest: Path


Command: TypeAlias = Union[DeployCommand, FinishUpdateCommand]
