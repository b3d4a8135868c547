"""
Module 09C - CLI Prove Command

Print the inclusion proof for one index from an export directory and
re-verify it the way an on-chain verifier would: recompute the leaf from
(index, uri) and fold the proof up to the stored root.

Usage:
    urimerkle prove ./merkle 42 [--json]
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from core.crypto.hashing import from_hex32
from core.merkle.merkle_proofs import MerkleVerifier
from core.schemas.errors import UriMerkleException
from core.schemas.records import parse_index_key
from orchestrator.artifacts.io import load_commitment_export


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class ProveSummary:
    """Proof for one index, as printed by the CLI."""
    index: int = 0
    uri: str = ""
    leaf: str = ""
    root: str = ""
    proof: list[str] = field(default_factory=list)
    valid: bool = False

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def print_summary_human(summary: ProveSummary) -> None:
    """Print summary in human-readable format."""
    print(f"index: {summary.index}")
    print(f"uri: {summary.uri}")
    print(f"leaf: {summary.leaf}")
    print(f"root: {summary.root}")
    print(f"proof ({len(summary.proof)}):")
    for sibling in summary.proof:
        print(f"  - {sibling}")
    print(f"valid: {str(summary.valid).lower()}")


def prove_cmd(args: Namespace) -> int:
    """
    Execute the prove command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    export_path = Path(args.export_path)

    try:
        index = parse_index_key(args.index)
        export = load_commitment_export(export_path)
    except UriMerkleException as e:
        print(f"Error: {e.message}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    entry = export.leaf_entry(index)
    siblings = export.proof_for(index)
    if entry is None or siblings is None:
        print(f"Error: Index {index} is not part of this commitment", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    valid = MerkleVerifier.verify_record(
        entry.index,
        entry.uri,
        [from_hex32(s) for s in siblings],
        from_hex32(export.root),
    )

    summary = ProveSummary(
        index=entry.index,
        uri=entry.uri,
        leaf=entry.leaf,
        root=export.root,
        proof=list(siblings),
        valid=valid,
    )

    if args.json:
        print(json.dumps(summary.to_dict(), indent=2))
    else:
        print_summary_human(summary)

    if not valid:
        logger.warning(f"Proof for index {index} does not verify against {export.root}")
        return EXIT_VERIFICATION_FAILED
    return EXIT_SUCCESS
