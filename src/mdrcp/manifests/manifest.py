"""Cargo manifest and Tauri configuration reading."""

import json
import tomllib
from pathlib import Path
from typing import List, Optional

from mdrcp.errors import ManifestNotFoundError, ManifestParseError, ManifestReadError
from mdrcp.types import PackageManifest, ProjectType
from mdrcp.logging import get_logger

logger = get_logger(__name__)

MANIFEST_NAME = "Cargo.toml"
TAURI_DIR = "src-tauri"
TAURI_CONFIG_FILES = ("tauri.conf.json", "tauri.conf.json5")


def manifest_bin_names(manifest: PackageManifest) -> List[str]:
    """Extract candidate binary names from a decoded manifest.

    Each ``[[bin]]`` entry contributes its ``name``, or the file stem of its
    ``path`` when unnamed. ``package.name`` is appended unless already listed.
    """
    names: List[str] = []

    bins = manifest.get("bin")
    if isinstance(bins, list):
        for entry in bins:
            if not isinstance(entry, dict):
                continue
            name = entry.get("name")
            if isinstance(name, str):
                names.append(name)
                continue
            path = entry.get("path")
            if isinstance(path, str):
                stem = Path(path).stem
                if stem:
                    names.append(stem)

    package = manifest.get("package")
    if isinstance(package, dict):
        package_name = package.get("name")
        if isinstance(package_name, str) and package_name not in names:
            names.append(package_name)

    return names


def workspace_members(manifest: PackageManifest) -> List[str]:
    """Workspace member paths, non-string entries ignored"""
    workspace = manifest.get("workspace")
    if not isinstance(workspace, dict):
        return []
    members = workspace.get("members")
    if not isinstance(members, list):
        return []
    return [m for m in members if isinstance(m, str)]


def load_manifest(path: Path) -> PackageManifest:
    """Read and decode a Cargo.toml."""
    if not path.exists():
        raise ManifestNotFoundError(path)

    try:
        contents = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestReadError(path, str(e)) from e

    try:
        manifest = tomllib.loads(contents)
    except tomllib.TOMLDecodeError as e:
        raise ManifestParseError(path, str(e)) from e

    logger.debug({"event": "manifest_loaded", "path": str(path)})
    return manifest


def read_member_manifest(path: Path) -> Optional[PackageManifest]:
    """Decode a workspace member manifest, None if missing or invalid."""
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, tomllib.TOMLDecodeError) as e:
        logger.debug(
            {"event": "member_manifest_skipped", "path": str(path), "error": str(e)}
        )
        return None


def detect_project_type(project_dir: Path) -> ProjectType:
    """Tauri when src-tauri/ holds both a Cargo.toml and a tauri config."""
    tauri_dir = project_dir / TAURI_DIR
    has_manifest = (tauri_dir / MANIFEST_NAME).exists()
    has_config = any((tauri_dir / name).exists() for name in TAURI_CONFIG_FILES)

    if has_manifest and has_config:
        return ProjectType.TAURI
    return ProjectType.STANDARD


def rust_base_dir(project_dir: Path, project_type: ProjectType) -> Path:
    """Directory holding Cargo.toml and target/ for the project type"""
    if project_type == ProjectType.TAURI:
        return project_dir / TAURI_DIR
    return project_dir


def read_tauri_product_name(project_dir: Path) -> Optional[str]:
    """productName from the Tauri config, at the root or under ``package``."""
    for config_name in TAURI_CONFIG_FILES:
        config_path = project_dir / TAURI_DIR / config_name
        try:
            config = json.loads(config_path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError, json.JSONDecodeError):
            continue
        if not isinstance(config, dict):
            continue

        name = config.get("productName")
        if isinstance(name, str):
            return name

        package = config.get("package")
        if isinstance(package, dict) and isinstance(package.get("productName"), str):
            return package["productName"]

    return None
