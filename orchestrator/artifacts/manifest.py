"""
Module 09B - Artifact Export & IO
File: manifest.py

Purpose: Manifest model for commitment export directories.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from core.schemas.versioning import EXPORT_FORMAT_VERSION, TREE_RULES_VERSION

FORMAT_VERSION = EXPORT_FORMAT_VERSION

# Manifest keys; merkle-tree.json and root.json are always written
REQUIRED_FILES = frozenset({
    "tree",
    "root",
})

OPTIONAL_FILES = frozenset({
    "csv",
    "solidity",
    "typescript",
})

ALL_ARTIFACT_FILES = REQUIRED_FILES | OPTIONAL_FILES


@dataclass
class ManifestFileEntry:
    """Entry describing a single file in the export directory."""
    path: str
    sha256: str
    size: int  # bytes

    def to_dict(self) -> dict[str, Any]:
        return {
            "path": self.path,
            "sha256": self.sha256,
            "bytes": self.size,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManifestFileEntry":
        if not isinstance(data["path"], str) or not isinstance(data["sha256"], str):
            raise TypeError("file entry path and sha256 must be strings")
        return cls(
            path=data["path"],
            sha256=data["sha256"],
            size=data.get("bytes", data.get("size", 0)),
        )


@dataclass
class CommitmentManifest:
    """
    Manifest describing one published commitment.

    Records the root and the leaf/parent rules it was built with, so a
    directory can be checked without trusting any single artifact in it.
    """
    root: str = ""
    total_leaves: int = 0
    format_version: str = FORMAT_VERSION
    tree_rules_version: str = TREE_RULES_VERSION
    files: dict[str, ManifestFileEntry] = field(default_factory=dict)
    created_at: str | None = None
    notes: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "format_version": self.format_version,
            "tree_rules_version": self.tree_rules_version,
            "root": self.root,
            "total_leaves": self.total_leaves,
            "files": {k: v.to_dict() for k, v in self.files.items()},
            "created_at": self.created_at,
            "notes": self.notes,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "CommitmentManifest":
        for name in ("root", "format_version", "tree_rules_version"):
            if not isinstance(data.get(name, ""), str):
                raise TypeError(f"{name} must be a string")
        files = {}
        for key, entry_data in data.get("files", {}).items():
            files[key] = ManifestFileEntry.from_dict(entry_data)
        return cls(
            root=data.get("root", ""),
            total_leaves=data.get("total_leaves", 0),
            format_version=data.get("format_version", FORMAT_VERSION),
            tree_rules_version=data.get("tree_rules_version", ""),
            files=files,
            created_at=data.get("created_at"),
            notes=data.get("notes", {}),
        )

    def add_file(self, key: str, path: str, sha256: str, size: int) -> None:
        """Add a file entry to the manifest."""
        self.files[key] = ManifestFileEntry(path=path, sha256=sha256, size=size)

    def has_required_files(self) -> tuple[bool, list[str]]:
        """Check if all required files are present."""
        missing = sorted(f for f in REQUIRED_FILES if f not in self.files)
        return len(missing) == 0, missing


__all__ = [
    "FORMAT_VERSION",
    "REQUIRED_FILES",
    "OPTIONAL_FILES",
    "ALL_ARTIFACT_FILES",
    "ManifestFileEntry",
    "CommitmentManifest",
]
