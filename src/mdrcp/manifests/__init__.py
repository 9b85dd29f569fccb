"""Cargo manifest and packaging-layer reading."""
from mdrcp.manifests.manifest import (
    detect_project_type,
    load_manifest,
    manifest_bin_names,
    read_tauri_product_name,
    workspace_members,
)

__all__ = [
    "detect_project_type",
    "load_manifest",
    "manifest_bin_names",
    "read_tauri_product_name",
    "workspace_members",
]
