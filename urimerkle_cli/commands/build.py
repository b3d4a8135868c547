"""
Module 09C - CLI Build Command

Build a verified Merkle commitment from an index -> URI mapping file and
write the export directory.

Usage:
    urimerkle build arweave-mapping.json --out ./merkle
    urimerkle build mapping.json --formats json,csv --workers 8 --json
"""

from __future__ import annotations

import json
import logging
import sys
from argparse import Namespace
from dataclasses import dataclass, field, asdict
from pathlib import Path
from typing import Any

from core.config.runtime import parse_formats
from core.schemas.errors import (
    ExportException,
    ProofVerificationException,
    UriMerkleException,
)
from orchestrator.artifacts.io import load_mapping_file, save_commitment
from orchestrator.pipeline import CommitmentPipeline

from urimerkle_cli.config import CLIConfig


logger = logging.getLogger(__name__)


# Exit codes
EXIT_SUCCESS = 0
EXIT_RUNTIME_ERROR = 1
EXIT_VERIFICATION_FAILED = 2


@dataclass
class BuildSummary:
    """Summary of a build for CLI output."""
    mapping_path: str = ""
    root: str = ""
    total_leaves: int = 0
    depth: int = 0
    generated_at: str = ""
    saved_to: str | None = None
    files: list[str] = field(default_factory=list)
    ok: bool = True
    errors: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        d = asdict(self)
        if not d["saved_to"]:
            del d["saved_to"]
        if not d["files"]:
            del d["files"]
        if not d["errors"]:
            del d["errors"]
        return d


def print_summary_human(summary: BuildSummary) -> None:
    """Print summary in human-readable format."""
    print(f"mapping: {summary.mapping_path}")
    print(f"root: {summary.root}")
    print(f"total_leaves: {summary.total_leaves}")
    print(f"depth: {summary.depth}")
    print(f"generated_at: {summary.generated_at}")
    if summary.saved_to:
        print(f"saved_to: {summary.saved_to}")
        for name in summary.files:
            print(f"  - {name}")

    if summary.errors:
        print(f"\nerrors ({len(summary.errors)}):")
        for err in summary.errors[:10]:
            print(f"  ✗ {err}")


def print_summary_json(summary: BuildSummary) -> None:
    """Print summary as JSON."""
    print(json.dumps(summary.to_dict(), indent=2))


def build_cmd(args: Namespace) -> int:
    """
    Execute the build command.

    Args:
        args: Parsed command-line arguments

    Returns:
        Exit code
    """
    mapping_path = Path(args.mapping)
    output_json = args.json

    config: CLIConfig = getattr(args, "cli_config", None) or CLIConfig()

    if args.out:
        config.output_dir = args.out
    if args.workers is not None:
        config.workers = args.workers
    if args.deterministic:
        config.deterministic_timestamps = True
    try:
        if args.formats:
            config.formats = parse_formats(args.formats)
        runtime = config.to_runtime_config()
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    if not mapping_path.exists():
        print(f"Error: Mapping file not found: {mapping_path}", file=sys.stderr)
        return EXIT_RUNTIME_ERROR

    # Load, build, prove, self-check; nothing is written unless all pass
    try:
        records = load_mapping_file(mapping_path)
        logger.info(f"Loaded {len(records)} records from {mapping_path}")
        commitment = CommitmentPipeline(runtime.commitment).run(records)
    except UriMerkleException as e:
        if isinstance(e, ProofVerificationException):
            print(f"Proof self-check failed: {e.message}", file=sys.stderr)
        else:
            print(f"Error [{e.code}]: {e.message}", file=sys.stderr)
        if output_json:
            print(json.dumps({"ok": False, "error": e.to_error_model().model_dump()}, indent=2))
        if isinstance(e, ProofVerificationException):
            return EXIT_VERIFICATION_FAILED
        return EXIT_RUNTIME_ERROR

    summary = BuildSummary(
        mapping_path=str(mapping_path),
        root=commitment.root_hex,
        total_leaves=commitment.total_leaves,
        depth=commitment.tree.depth,
        generated_at=commitment.generated_at,
    )

    try:
        manifest = save_commitment(
            commitment,
            config.output_dir,
            formats=runtime.export.formats,
            solidity_library=runtime.export.solidity_library,
            solidity_pragma=runtime.export.solidity_pragma,
        )
    except ExportException as e:
        # The commitment itself is valid; report its root so the write can be retried
        summary.ok = False
        summary.errors.append(e.message)
        if output_json:
            print_summary_json(summary)
        else:
            print_summary_human(summary)
        return EXIT_RUNTIME_ERROR

    summary.saved_to = str(Path(config.output_dir))
    summary.files = [entry.path for entry in manifest.files.values()]
    logger.info(f"Saved commitment to: {summary.saved_to}")

    if output_json:
        print_summary_json(summary)
    else:
        print_summary_human(summary)

    return EXIT_SUCCESS
