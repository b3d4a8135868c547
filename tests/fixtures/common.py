"""
Common test fixtures shared by all modules.

Provides factory functions for core urimerkle data structures:
- Record lists and index -> uri mappings
- Built commitments (with deterministic timestamps)
- Mapping files on disk

These are the foundational building blocks used by higher-level tests.
"""

import json
from pathlib import Path
from typing import Any, Optional

from core.config.runtime import CommitmentConfig
from core.schemas.records import Record
from orchestrator.pipeline import Commitment, CommitmentPipeline


FIXED_GENERATED_AT = "2026-01-27T21:35:00.000Z"


# =============================================================================
# Record Factories
# =============================================================================

def make_uri(index: int, prefix: str = "ar://") -> str:
    """Deterministic fake Arweave-style URI for an index."""
    return f"{prefix}tx{index:06d}"


def make_records(count: int = 3, start: int = 0, prefix: str = "ar://") -> list[Record]:
    """Create `count` records with consecutive indices starting at `start`."""
    return [Record.create(i, make_uri(i, prefix)) for i in range(start, start + count)]


def make_mapping(count: int = 3, start: int = 0) -> dict[str, str]:
    """Create an index -> uri mapping as it appears in a JSON file."""
    return {str(i): make_uri(i) for i in range(start, start + count)}


def make_example_records() -> list[Record]:
    """The three-record example used throughout the docs."""
    return [
        Record.create(0, "ar://a"),
        Record.create(1, "ar://b"),
        Record.create(2, "ar://c"),
    ]


# =============================================================================
# Commitment Factories
# =============================================================================

def make_config(workers: int = 1, generated_at: str = FIXED_GENERATED_AT) -> CommitmentConfig:
    """CommitmentConfig with a pinned generatedAt."""
    return CommitmentConfig(
        workers=workers,
        deterministic_timestamps=True,
        fixed_generated_at=generated_at,
    )


def make_commitment(
    records: Optional[list[Record]] = None,
    workers: int = 1,
) -> Commitment:
    """Build a verified commitment (defaults to five records)."""
    if records is None:
        records = make_records(5)
    return CommitmentPipeline(make_config(workers=workers)).run(records)


# =============================================================================
# File Factories
# =============================================================================

def write_mapping_file(path: Path, data: Any) -> Path:
    """Write a mapping (dict or list) as JSON and return the path."""
    path.write_text(json.dumps(data), encoding="utf-8")
    return path
