"""
Module 09B - Artifact Export & IO
File: export.py

Purpose: Turn a verified Commitment into the exact wire shapes downstream
consumers read. No hashing happens here; every value is copied from the
commitment as-is.
"""

from __future__ import annotations

import csv
import io
from typing import Iterable

from core.schemas.commitment import CommitmentExport, LeafEntry, RootCommitment

from orchestrator.pipeline import Commitment


CSV_HEADER = ("index", "uri", "leaf_hash")


def build_root_commitment(commitment: Commitment) -> RootCommitment:
    """
    The root file: {"root", "totalLeaves", "generatedAt"}.
    """
    return RootCommitment(
        root=commitment.root_hex,
        total_leaves=commitment.total_leaves,
        generated_at=commitment.generated_at,
    )


def build_full_export(commitment: Commitment) -> CommitmentExport:
    """
    The full tree file: root commitment plus leaves and proofs.

    Leaves are in index order; proofs are keyed by index (decimal string
    keys once serialized).
    """
    return CommitmentExport(
        root=commitment.root_hex,
        total_leaves=commitment.total_leaves,
        generated_at=commitment.generated_at,
        leaves=commitment.leaf_entries(),
        proofs=commitment.proofs_hex(),
    )


def render_csv(leaves: Iterable[LeafEntry]) -> str:
    """
    CSV audit export with header index,uri,leaf_hash.

    Quoting follows RFC 4180 via the csv module, so URIs containing commas,
    quotes or newlines round-trip through any CSV reader.
    """
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(CSV_HEADER)
    for entry in leaves:
        writer.writerow((entry.index, entry.uri, entry.leaf))
    return buf.getvalue()


def parse_csv(content: str) -> list[LeafEntry]:
    """Read a CSV audit export back into leaf entries."""
    reader = csv.reader(io.StringIO(content))
    header = next(reader, None)
    if header is None or tuple(header) != CSV_HEADER:
        raise ValueError(f"Unexpected CSV header: {header}")
    return [
        LeafEntry(index=int(index), uri=uri, leaf=leaf)
        for index, uri, leaf in reader
    ]


__all__ = [
    "CSV_HEADER",
    "build_root_commitment",
    "build_full_export",
    "render_csv",
    "parse_csv",
]
