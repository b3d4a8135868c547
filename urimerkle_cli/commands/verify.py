"""
Module 09C - CLI Verify Command

Verify a commitment export directory offline:
- Verify file hashes (manifest)
- Recompute every leaf and the root from (index, uri)
- Verify every stored proof against the stored root

Usage:
    urimerkle verify ./merkle [--json] [--debug]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from core.schemas.errors import UriMerkleException
from core.schemas.verification import VerificationResult
from orchestrator.artifacts.io import load_commitment_export
from orchestrator.artifacts.validate import (
    check_root_consistency,
    validate_export_files,
    verify_export,
)


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class VerifySummary:
    """Summary of export verification for CLI output."""
    export_path: str = ""
    root: str = ""
    total_leaves: int = 0
    hashes_ok: bool = False
    tree_ok: bool = False
    checks: list[dict[str, Any]] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["checks"]:
            del d["checks"]
        if not d["errors"]:
            del d["errors"]
        return d

    @property
    def all_ok(self) -> bool:
        return self.hashes_ok and self.tree_ok


def build_summary(
    export_path: str,
    hash_result: VerificationResult,
    tree_result: VerificationResult,
    *,
    root: str = "",
    total_leaves: int = 0,
    debug: bool = False,
) -> VerifySummary:
    """Build a VerifySummary from verification results."""
    summary = VerifySummary(
        export_path=export_path,
        root=root,
        total_leaves=total_leaves,
        hashes_ok=hash_result.ok,
        tree_ok=tree_result.ok,
    )

    for source, result in (("hash", hash_result), ("tree", tree_result)):
        for check in result.get_failed_checks():
            summary.errors.append(f"{source.capitalize()}: {check.message}")

    if debug:
        summary.checks = [
            {
                "source": source,
                "check_id": check.check_id,
                "ok": check.ok,
                "message": check.message,
            }
            for source, result in (("hash", hash_result), ("tree", tree_result))
            for check in result.checks
        ]

    return summary


def print_summary_human(summary: VerifySummary) -> None:
    """Print summary in human-readable format."""
    print(f"export: {summary.export_path}")
    print(f"root: {summary.root}")
    print(f"total_leaves: {summary.total_leaves}")
    print(f"hashes_ok: {str(summary.hashes_ok).lower()}")
    print(f"tree_ok: {str(summary.tree_ok).lower()}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:10]:
            print(f"  ✗ {err}")

    if summary.checks:
        passed = sum(1 for c in summary.checks if c["ok"])
        failed = len(summary.checks) - passed
        print(f"\nchecks: {passed} passed, {failed} failed")
        for check in summary.checks[:20]:
            status = "✓" if check["ok"] else "✗"
            print(f"  {status} [{check['source']}] {check['check_id']}")


def print_summary_json(summary: VerifySummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def verify_cmd(args: Namespace) -> int:
    """
    Execute the verify command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    export_path = Path(args.export_path)
    output_json = args.json
    debug = args.debug

    if not export_path.is_dir():
        print(f"Error: Export directory not found: {export_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Step 1: Verify file hashes
    logger.info(f"Verifying file hashes for: {export_path}")
    hash_result = validate_export_files(export_path)

    # Step 2: Load the tree export
    try:
        export = load_commitment_export(export_path)
    except UriMerkleException as e:
        print(f"Error loading export: {e.message}", file=sys.stderr)
        # A tree file that no longer parses after a hash mismatch was tampered with
        return EXIT_RUNTIME_ERROR if hash_result.ok else EXIT_VERIFICATION_FAILED

    # Step 3: Recompute leaves, root and proofs
    logger.info("Recomputing tree from exported records...")
    tree_result = verify_export(export)
    for check in check_root_consistency(export_path, export):
        tree_result.add_check(check)

    summary = build_summary(
        str(export_path),
        hash_result,
        tree_result,
        root=export.root,
        total_leaves=export.total_leaves,
        debug=debug,
    )

    if output_json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)

    if summary.all_ok:
        logger.info("Verification passed")
        return EXIT_SUCCESS

    logger.warning("Verification failed")
    return EXIT_VERIFICATION_FAILED
