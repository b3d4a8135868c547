"""
Module 01 - Schemas & Canonicalization
File: commitment.py

Purpose: Wire shapes of a published commitment as downstream consumers
read them (root file, full tree export, per-index lookup).

Field names on the wire are camelCase (totalLeaves, generatedAt) to match
the files consumed by the on-chain deployment scripts and front ends;
Python code uses the snake_case attribute names.
"""

from __future__ import annotations

from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StringConstraints


# 0x-prefixed 32-byte hash
Hex32 = Annotated[str, StringConstraints(pattern=r"^0x[0-9a-fA-F]{64}$")]


class LeafEntry(BaseModel):
    """One exported leaf: the record and its leaf hash."""

    model_config = ConfigDict(extra="forbid", frozen=True)

    index: int = Field(..., ge=0)
    uri: str = Field(..., min_length=1)
    leaf: Hex32


class RootCommitment(BaseModel):
    """
    The minimal artifact an on-chain deployment needs.

    Example:
        {"root": "0x…", "totalLeaves": 3, "generatedAt": "2026-01-27T21:35:00.000Z"}
    """

    model_config = ConfigDict(extra="forbid", populate_by_name=True)

    root: Hex32
    total_leaves: int = Field(..., ge=1, alias="totalLeaves")
    generated_at: str = Field(..., alias="generatedAt")

    def to_wire(self) -> dict:
        return self.model_dump(mode="json", by_alias=True)


class CommitmentExport(RootCommitment):
    """Root commitment plus every leaf and every proof."""

    leaves: list[LeafEntry]
    proofs: dict[int, list[Hex32]]

    def proof_for(self, index: int) -> list[str] | None:
        return self.proofs.get(index)

    def leaf_entry(self, index: int) -> LeafEntry | None:
        for entry in self.leaves:
            if entry.index == index:
                return entry
        return None


class IndexLookup(BaseModel):
    """What a language binding's lookup(index) returns."""

    model_config = ConfigDict(extra="forbid")

    index: int
    uri: str
    leaf: Hex32
    proof: list[Hex32]


__all__ = [
    "Hex32",
    "LeafEntry",
    "RootCommitment",
    "CommitmentExport",
    "IndexLookup",
]
