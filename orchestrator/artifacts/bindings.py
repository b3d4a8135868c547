"""
Module 09B - Artifact Export & IO
File: bindings.py

Purpose: Language-binding constant files (Solidity, TypeScript) templated
over an exported commitment.
"""

from __future__ import annotations

import json

from orchestrator.pipeline import Commitment


DEFAULT_SOLIDITY_LIBRARY = "MerkleConstants"
DEFAULT_SOLIDITY_PRAGMA = "^0.8.20"

_SOLIDITY_TEMPLATE = """\
// SPDX-License-Identifier: MIT
pragma solidity {pragma};

/**
 * @title {library}
 * @notice Merkle commitment over (index, uri) records
 * @dev Generated on {generated_at}.
 *      leaf   = keccak256(abi.encodePacked(uint256 index, string uri))
 *      parent = keccak256(abi.encodePacked(min(a, b), max(a, b)))
 *      An unpaired node is promoted to the next level unchanged.
 */
library {library} {{
    /// @notice Merkle root of all committed (index, uri) pairs
    bytes32 public constant MERKLE_ROOT = {root};

    /// @notice Number of committed records
    uint256 public constant TOTAL_LEAVES = {total};
}}
"""

_TYPESCRIPT_TEMPLATE = """\
/**
 * Merkle commitment constants
 * Generated on {generated_at}
 */

export const MERKLE_ROOT = '{root}';
export const TOTAL_LEAVES = {total};

export interface IndexData {{
  index: string;
  uri: string;
  leaf: string;
  proof: string[];
}}

const URIS: Record<string, string> = {uris};

const LEAVES: Record<string, string> = {leaves};

const PROOFS: Record<string, string[]> = {proofs};

export function lookup(index: number | bigint | string): IndexData | null {{
  const key = String(index);
  if (!Object.prototype.hasOwnProperty.call(URIS, key)) {{
    return null;
  }}
  return {{
    index: key,
    uri: URIS[key],
    leaf: LEAVES[key],
    proof: PROOFS[key],
  }};
}}
"""


def _ts_literal(obj: object) -> str:
    # JSON is a valid TS literal; ASCII escapes keep U+2028/U+2029 out of the source
    return json.dumps(obj, indent=2, ensure_ascii=True)


def render_solidity_constants(
    commitment: Commitment,
    *,
    library_name: str = DEFAULT_SOLIDITY_LIBRARY,
    pragma: str = DEFAULT_SOLIDITY_PRAGMA,
) -> str:
    """
    Render a Solidity library exposing MERKLE_ROOT and TOTAL_LEAVES.

    Raises:
        ValueError: If library_name is not a valid identifier
    """
    if not library_name.isidentifier():
        raise ValueError(f"Invalid Solidity library name: {library_name!r}")
    return _SOLIDITY_TEMPLATE.format(
        pragma=pragma,
        library=library_name,
        generated_at=commitment.generated_at,
        root=commitment.root_hex,
        total=commitment.total_leaves,
    )


def render_typescript_constants(commitment: Commitment) -> str:
    """
    Render a TypeScript module with MERKLE_ROOT, TOTAL_LEAVES and lookup().

    lookup() takes the index as number, bigint or decimal string and
    returns null for indices that were not committed.
    """
    entries = commitment.leaf_entries()
    uris = {str(e.index): e.uri for e in entries}
    leaves = {str(e.index): e.leaf for e in entries}
    proofs = {str(index): siblings for index, siblings in commitment.proofs_hex().items()}

    return _TYPESCRIPT_TEMPLATE.format(
        generated_at=commitment.generated_at,
        root=commitment.root_hex,
        total=commitment.total_leaves,
        uris=_ts_literal(uris),
        leaves=_ts_literal(leaves),
        proofs=_ts_literal(proofs),
    )


__all__ = [
    "DEFAULT_SOLIDITY_LIBRARY",
    "DEFAULT_SOLIDITY_PRAGMA",
    "render_solidity_constants",
    "render_typescript_constants",
]
