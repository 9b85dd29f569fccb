"""Built artifact discovery."""

from pathlib import Path
from typing import Iterable, List, Set

from mdrcp.artifacts.platforms import exe_filename
from mdrcp.errors import NoPackagesFoundError
from mdrcp.manifests.manifest import (
    MANIFEST_NAME,
    manifest_bin_names,
    read_member_manifest,
    workspace_members,
)
from mdrcp.types import BuildProfile, PackageManifest, ResolvedArtifact
from mdrcp.logging import get_logger

logger = get_logger(__name__)

TARGET_DIR = "target"


def artifact_dir(base_dir: Path, profile: BuildProfile) -> Path:
    """Profile directory the external build writes executables into"""
    return base_dir / TARGET_DIR / profile.value


def collect_candidate_names(
    base_dir: Path, manifest: PackageManifest, extra_names: Iterable[str] = ()
) -> Set[str]:
    """Union of root, extra and workspace member candidate names."""
    candidates: Set[str] = set(manifest_bin_names(manifest))
    candidates.update(extra_names)

    for member in workspace_members(manifest):
        member_manifest = read_member_manifest(base_dir / member / MANIFEST_NAME)
        if member_manifest is None:
            continue
        candidates.update(manifest_bin_names(member_manifest))

    return candidates


def resolve_artifacts(
    base_dir: Path,
    manifest: PackageManifest,
    profile: BuildProfile,
    extra_names: Iterable[str] = (),
    system: str = None,
) -> List[ResolvedArtifact]:
    """Candidates that have a built executable in the profile directory.

    Raises NoPackagesFoundError when the manifests name nothing at all; an
    empty list means candidates exist but none has been built.
    """
    candidates = collect_candidate_names(base_dir, manifest, extra_names)
    if not candidates:
        raise NoPackagesFoundError()

    profile_dir = artifact_dir(base_dir, profile)
    resolved = []
    for name in sorted(candidates):
        filename = exe_filename(name, system)
        exists = (profile_dir / filename).exists()
        logger.debug(
            {"event": "artifact_checked", "name": name, "file": filename, "exists": exists}
        )
        if exists:
            resolved.append(ResolvedArtifact(name=name, filename=filename, exists=True))

    logger.info(
        {
            "event": "artifacts_resolved",
            "profile_dir": str(profile_dir),
            "candidates": len(candidates),
            "built": [a.name for a in resolved],
        }
    )
    return resolved
