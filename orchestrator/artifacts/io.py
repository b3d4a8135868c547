"""
Module 09B - Artifact Export & IO
File: io.py

Purpose: Load record mappings from disk and save/load commitment export
directories.

Nothing here is called before the pipeline's self-check has passed; a
failure in this module raises ExportException and never invalidates the
in-memory commitment.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable

from core.crypto.hashing import sha256_hex
from core.schemas.canonical import dumps_canonical
from core.schemas.commitment import CommitmentExport, RootCommitment
from core.schemas.errors import (
    DuplicateIndexException,
    ExportException,
    ValidationException,
)
from core.schemas.records import (
    Record,
    parse_index_key,
    records_from_items,
    records_from_mapping,
)

from orchestrator.artifacts.bindings import (
    DEFAULT_SOLIDITY_LIBRARY,
    DEFAULT_SOLIDITY_PRAGMA,
    render_solidity_constants,
    render_typescript_constants,
)
from orchestrator.artifacts.export import (
    build_full_export,
    build_root_commitment,
    render_csv,
)
from orchestrator.artifacts.manifest import CommitmentManifest
from orchestrator.pipeline import Commitment


# File name constants
MANIFEST_FILE = "manifest.json"
TREE_FILE = "merkle-tree.json"
ROOT_FILE = "root.json"
CSV_FILE = "leaves.csv"
TYPESCRIPT_FILE = "constants.ts"


def dump_json(obj: Any) -> str:
    """Serialize object to canonical JSON string."""
    if hasattr(obj, "model_dump"):
        return dumps_canonical(obj.model_dump(mode="json", by_alias=True))
    elif hasattr(obj, "to_dict"):
        return dumps_canonical(obj.to_dict())
    return dumps_canonical(obj)


def _write_bytes(path: Path, data: bytes) -> tuple[str, int]:
    """Write bytes, return (sha256, size)."""
    try:
        path.write_bytes(data)
    except OSError as e:
        raise ExportException(f"Failed to write {path.name}: {e}", path=str(path)) from e
    return sha256_hex(data), len(data)


def _write_json_file(path: Path, obj: Any) -> tuple[str, int]:
    """Write object as JSON file, return (sha256, size)."""
    return _write_bytes(path, dump_json(obj).encode("utf-8"))


def _write_text_file(path: Path, text: str) -> tuple[str, int]:
    return _write_bytes(path, text.encode("utf-8"))


def _read_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except FileNotFoundError as e:
        raise ExportException(f"File not found: {path}", path=str(path)) from e
    except OSError as e:
        raise ExportException(f"Failed to read {path}: {e}", path=str(path)) from e


def _parse_json(data: bytes, path: Path, **kwargs: Any) -> Any:
    try:
        return json.loads(data.decode("utf-8"), **kwargs)
    except UnicodeDecodeError as e:
        raise ValidationException(f"{path.name} is not valid UTF-8", details={"path": str(path)}) from e
    except json.JSONDecodeError as e:
        raise ValidationException(
            f"{path.name} is not valid JSON: {e.msg} (line {e.lineno})",
            details={"path": str(path)},
        ) from e


# =============================================================================
# Input mapping
# =============================================================================

def _reject_duplicate_keys(pairs: list[tuple[str, Any]]) -> dict[str, Any]:
    """object_pairs_hook: a repeated key would otherwise silently win."""
    result: dict[str, Any] = {}
    duplicates: list[str] = []
    for key, value in pairs:
        if key in result:
            duplicates.append(key)
        result[key] = value
    if duplicates:
        try:
            indices = [parse_index_key(k) for k in duplicates]
        except ValidationException:
            raise ValidationException(
                f"Duplicate JSON keys: {sorted(set(duplicates))}",
            ) from None
        raise DuplicateIndexException(sorted(set(indices)))
    return result


def load_mapping_file(path: str | Path) -> list[Record]:
    """
    Load records from a JSON mapping file.

    Accepted shapes:
        {"0": "ar://...", "1": "ar://..."}
        [{"index": 0, "uri": "ar://..."}, ...]

    Returns:
        Records (sorted by index for the object form, file order for a list)

    Raises:
        ExportException: If the file cannot be read
        ValidationException: Malformed JSON, bad keys, duplicate keys
    """
    path = Path(path)
    data = _parse_json(_read_bytes(path), path, object_pairs_hook=_reject_duplicate_keys)

    if isinstance(data, dict):
        return records_from_mapping(data)
    if isinstance(data, list):
        return records_from_items(data)
    raise ValidationException(
        f"{path.name} must hold a JSON object or array, got {type(data).__name__}",
        details={"path": str(path)},
    )


# =============================================================================
# Commitment export
# =============================================================================

def solidity_file_name(library_name: str = DEFAULT_SOLIDITY_LIBRARY) -> str:
    return f"{library_name}.sol"


def save_commitment(
    commitment: Commitment,
    out_dir: str | Path,
    *,
    formats: Iterable[str] = ("json", "csv", "solidity", "typescript"),
    solidity_library: str = DEFAULT_SOLIDITY_LIBRARY,
    solidity_pragma: str = DEFAULT_SOLIDITY_PRAGMA,
) -> CommitmentManifest:
    """
    Write a verified commitment to a directory.

    merkle-tree.json and root.json are always written; "csv", "solidity" and
    "typescript" in formats add the optional artifacts. The manifest is
    written last, so a directory with a manifest is complete.

    Args:
        commitment: A Commitment returned by CommitmentPipeline.run()
        out_dir: Output directory path (created if missing)
        formats: Optional artifacts to write
        solidity_library: Library (and file) name for the Solidity binding
        solidity_pragma: Solidity version pragma

    Returns:
        The written manifest

    Raises:
        ExportException: On any I/O failure
    """
    selected = set(formats)
    out_path = Path(out_dir)
    try:
        out_path.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise ExportException(f"Cannot create output directory: {e}", path=str(out_path)) from e

    manifest = CommitmentManifest(
        root=commitment.root_hex,
        total_leaves=commitment.total_leaves,
        created_at=commitment.generated_at,
    )

    full_export = build_full_export(commitment)

    sha256, size = _write_json_file(out_path / TREE_FILE, full_export)
    manifest.add_file("tree", TREE_FILE, sha256, size)

    sha256, size = _write_json_file(out_path / ROOT_FILE, build_root_commitment(commitment))
    manifest.add_file("root", ROOT_FILE, sha256, size)

    if "csv" in selected:
        sha256, size = _write_text_file(out_path / CSV_FILE, render_csv(full_export.leaves))
        manifest.add_file("csv", CSV_FILE, sha256, size)

    if "solidity" in selected:
        sol_file = solidity_file_name(solidity_library)
        content = render_solidity_constants(
            commitment,
            library_name=solidity_library,
            pragma=solidity_pragma,
        )
        sha256, size = _write_text_file(out_path / sol_file, content)
        manifest.add_file("solidity", sol_file, sha256, size)

    if "typescript" in selected:
        sha256, size = _write_text_file(
            out_path / TYPESCRIPT_FILE,
            render_typescript_constants(commitment),
        )
        manifest.add_file("typescript", TYPESCRIPT_FILE, sha256, size)

    # Write manifest last
    _write_json_file(out_path / MANIFEST_FILE, manifest.to_dict())

    return manifest


def load_manifest(path: str | Path) -> CommitmentManifest:
    """
    Load manifest from an export directory.

    Raises:
        ExportException: If the manifest is missing or unreadable
        ValidationException: If it is not valid JSON or not a manifest
    """
    manifest_path = Path(path) / MANIFEST_FILE
    data = _parse_json(_read_bytes(manifest_path), manifest_path)
    if not isinstance(data, dict):
        raise ValidationException(f"{MANIFEST_FILE} must hold a JSON object")
    try:
        return CommitmentManifest.from_dict(data)
    except (KeyError, TypeError, AttributeError) as e:
        raise ValidationException(
            f"{MANIFEST_FILE} is malformed: {e!r}",
            details={"path": str(manifest_path)},
        ) from e


def load_commitment_export(path: str | Path) -> CommitmentExport:
    """
    Load merkle-tree.json into a CommitmentExport.

    Accepts the export directory or the merkle-tree.json path itself.

    Raises:
        ExportException: If the file is missing or unreadable
        ValidationException: If it does not match the export shape
    """
    path = Path(path)
    file_path = path / TREE_FILE if path.is_dir() else path
    data = _parse_json(_read_bytes(file_path), file_path)
    try:
        return CommitmentExport.model_validate(data)
    except ValueError as e:
        raise ValidationException(
            f"{file_path.name} does not match the export format: {e}",
            details={"path": str(file_path)},
        ) from e


def load_root_commitment(path: str | Path) -> RootCommitment:
    """Load root.json from an export directory (or the file itself)."""
    path = Path(path)
    file_path = path / ROOT_FILE if path.is_dir() else path
    data = _parse_json(_read_bytes(file_path), file_path)
    try:
        return RootCommitment.model_validate(data)
    except ValueError as e:
        raise ValidationException(
            f"{file_path.name} does not match the root format: {e}",
            details={"path": str(file_path)},
        ) from e


__all__ = [
    "MANIFEST_FILE",
    "TREE_FILE",
    "ROOT_FILE",
    "CSV_FILE",
    "TYPESCRIPT_FILE",
    "dump_json",
    "load_mapping_file",
    "solidity_file_name",
    "save_commitment",
    "load_manifest",
    "load_commitment_export",
    "load_root_commitment",
]
