"""
Module 09B - Artifact Export & IO
File: validate.py

Purpose: Independently re-verify a published commitment.

Two layers:
- validate_export_files: manifest hashes vs. files on disk
- verify_export: recompute every leaf and the root from (index, uri),
  then check every stored proof against the stored root

Both report through VerificationResult and never raise on bad content.
"""

from __future__ import annotations

import logging
from pathlib import Path

from core.crypto.hashing import from_hex32, sha256_hex, to_hex
from core.merkle.leaf_codec import encode_leaf
from core.merkle.merkle_proofs import verify_proof
from core.merkle.merkle_tree import build_merkle_root
from core.schemas.commitment import CommitmentExport
from core.schemas.errors import UriMerkleException
from core.schemas.verification import CheckResult, VerificationResult
from core.schemas.versioning import TREE_RULES_VERSION, is_compatible_format_version

from orchestrator.artifacts.io import (
    load_manifest,
    load_root_commitment,
)


logger = logging.getLogger(__name__)

# Cap on per-index details carried in a failed check
_MAX_REPORTED = 20


def validate_export_files(path: str | Path) -> VerificationResult:
    """
    Validate file hashes in an export directory against its manifest.

    Returns VerificationResult with a check for each file.
    """
    path = Path(path)
    checks: list[CheckResult] = []

    try:
        manifest = load_manifest(path)
    except UriMerkleException as e:
        return VerificationResult(
            ok=False,
            checks=[CheckResult.failed("manifest_load", e.message)],
        )

    if not is_compatible_format_version(manifest.format_version):
        checks.append(CheckResult.failed(
            "format_version",
            f"Incompatible format version: {manifest.format_version}",
        ))
    else:
        checks.append(CheckResult.passed("format_version", "Format version compatible"))

    if manifest.tree_rules_version != TREE_RULES_VERSION:
        checks.append(CheckResult.failed(
            "tree_rules_version",
            f"Built with different tree rules: {manifest.tree_rules_version!r}",
            {"expected": TREE_RULES_VERSION, "actual": manifest.tree_rules_version},
        ))
    else:
        checks.append(CheckResult.passed("tree_rules_version", "Tree rules match"))

    has_required, missing = manifest.has_required_files()
    if not has_required:
        checks.append(CheckResult.failed(
            "required_files",
            f"Missing required files: {missing}",
        ))
    else:
        checks.append(CheckResult.passed("required_files", "All required files present"))

    for key, entry in manifest.files.items():
        file_path = path / entry.path
        if not file_path.is_file():
            checks.append(CheckResult.failed(f"hash_{key}", f"{key} file not found"))
            continue
        actual_sha256 = sha256_hex(file_path.read_bytes())
        if actual_sha256 == entry.sha256:
            checks.append(CheckResult.passed(f"hash_{key}", f"{key} hash valid"))
        else:
            checks.append(CheckResult.failed(
                f"hash_{key}",
                f"{key} hash mismatch",
                {"expected": entry.sha256, "actual": actual_sha256},
            ))

    return VerificationResult.from_checks(checks)


def _check_leaves(export: CommitmentExport) -> tuple[CheckResult, list[bytes] | None]:
    """Recompute every leaf; returns the recomputed leaves in index order."""
    mismatched: list[int] = []
    recomputed: list[bytes] = []

    for entry in sorted(export.leaves, key=lambda e: e.index):
        try:
            leaf = encode_leaf(entry.index, entry.uri)
        except UriMerkleException:
            mismatched.append(entry.index)
            continue
        recomputed.append(leaf)
        if to_hex(leaf) != entry.leaf.lower():
            mismatched.append(entry.index)

    if mismatched:
        return CheckResult.failed(
            "leaf_hashes",
            f"{len(mismatched)} leaf hash(es) do not match (index, uri)",
            {"indices": mismatched[:_MAX_REPORTED]},
        ), None
    return CheckResult.passed("leaf_hashes", f"All {len(recomputed)} leaves recomputed"), recomputed


def verify_export(export: CommitmentExport) -> VerificationResult:
    """
    Re-derive a commitment from its own (index, uri) pairs.

    Checks:
    - indices are unique and totalLeaves matches
    - every leaf equals keccak256(uint256(index) || uri)
    - rebuilding the tree from those leaves gives the stored root
    - there is exactly one proof per leaf, and each verifies
    """
    checks: list[CheckResult] = []

    indices = [entry.index for entry in export.leaves]
    if len(set(indices)) != len(indices):
        checks.append(CheckResult.failed("unique_indices", "Duplicate indices in leaves"))
        return VerificationResult.from_checks(checks)
    checks.append(CheckResult.passed("unique_indices", "Indices are unique"))

    if export.total_leaves != len(export.leaves):
        checks.append(CheckResult.failed(
            "total_leaves",
            "totalLeaves does not match the number of leaves",
            {"total_leaves": export.total_leaves, "leaves": len(export.leaves)},
        ))
    else:
        checks.append(CheckResult.passed("total_leaves", f"{export.total_leaves} leaves"))

    leaf_check, recomputed = _check_leaves(export)
    checks.append(leaf_check)

    stored_root = from_hex32(export.root)

    if recomputed:
        rebuilt_root = build_merkle_root(recomputed)
        if rebuilt_root == stored_root:
            checks.append(CheckResult.passed("root", "Rebuilt root matches"))
        else:
            checks.append(CheckResult.failed(
                "root",
                "Rebuilt root does not match the stored root",
                {"expected": export.root, "actual": to_hex(rebuilt_root)},
            ))

    index_set = set(indices)
    missing = sorted(index_set - set(export.proofs))
    extra = sorted(set(export.proofs) - index_set)
    if missing or extra:
        checks.append(CheckResult.failed(
            "proof_coverage",
            "Proofs do not cover exactly the committed indices",
            {"missing": missing[:_MAX_REPORTED], "extra": extra[:_MAX_REPORTED]},
        ))
    else:
        checks.append(CheckResult.passed("proof_coverage", "One proof per index"))

    failed: list[int] = []
    for entry in export.leaves:
        siblings = export.proofs.get(entry.index)
        if siblings is None:
            continue
        if not verify_proof(
            from_hex32(entry.leaf),
            [from_hex32(s) for s in siblings],
            stored_root,
        ):
            failed.append(entry.index)
    if failed:
        logger.warning("%d stored proofs fail against the stored root", len(failed))
        checks.append(CheckResult.failed(
            "proofs",
            f"{len(failed)} proof(s) fail against the stored root",
            {"indices": sorted(failed)[:_MAX_REPORTED]},
        ))
    else:
        checks.append(CheckResult.passed("proofs", "Every stored proof verifies"))

    return VerificationResult.from_checks(checks)


def check_root_consistency(path: str | Path, export: CommitmentExport) -> list[CheckResult]:
    """
    Cross-check root.json and manifest.json against merkle-tree.json.
    """
    path = Path(path)
    checks: list[CheckResult] = []

    try:
        root_file = load_root_commitment(path)
    except UriMerkleException as e:
        return [CheckResult.failed("root_file", e.message)]

    consistent = (
        root_file.root.lower() == export.root.lower()
        and root_file.total_leaves == export.total_leaves
    )
    if consistent:
        checks.append(CheckResult.passed("root_file", "root.json matches merkle-tree.json"))
    else:
        checks.append(CheckResult.failed(
            "root_file",
            "root.json does not match merkle-tree.json",
            {"root_json": root_file.root, "tree_json": export.root},
        ))

    try:
        manifest = load_manifest(path)
    except UriMerkleException as e:
        checks.append(CheckResult.failed("manifest_root", e.message))
        return checks

    if manifest.root.lower() == export.root.lower():
        checks.append(CheckResult.passed("manifest_root", "manifest.json root matches"))
    else:
        checks.append(CheckResult.failed(
            "manifest_root",
            "manifest.json root does not match merkle-tree.json",
            {"manifest": manifest.root, "tree_json": export.root},
        ))

    return checks


__all__ = [
    "validate_export_files",
    "verify_export",
    "check_root_consistency",
]
