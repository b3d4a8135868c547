"""
Module 02 - Merkle Tree and Commitments
Deterministic Merkle tree construction + proof generation/verification
over (index, uri) records.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- encode_leaf: Canonical leaf hash for one record
- build_tree: Build the full tree (levels + root) from records
- generate_proof: Inclusion proof for a committed index
- verify_proof: Stateless proof verification
- self_check: Verify every proof before publication

Canonical Commitment Rules:
1. Leaf hashing: keccak256(uint256_be(index) || utf8(uri))
2. Parent hashing: keccak256(min(a, b) || max(a, b))
3. Odd node: promoted unchanged to the next level
4. Empty tree: rejected
5. Single leaf: root = leaf

Usage:
    from core.merkle import build_tree, generate_proof, verify_proof
    from core.schemas import Record

    records = [Record.create(0, "ar://a"), Record.create(1, "ar://b")]
    tree = build_tree(records)

    proof = generate_proof(tree, 1)
    assert verify_proof(proof.leaf, proof.siblings, tree.root)
"""
from .leaf_codec import (
    encode_index,
    encode_leaf,
    encode_record,
    leaf_preimage,
)

from .merkle_tree import (
    MerkleTree,
    build_levels,
    build_merkle_root,
    build_tree,
    compute_tree_depth,
    find_duplicate_indices,
    merkle_parent,
)

from .merkle_proofs import (
    MerkleProof,
    MerkleProver,
    MerkleVerifier,
    generate_all_proofs,
    generate_proof,
    self_check,
    verify_merkle_proof,
    verify_proof,
)


__all__ = [
    # Leaf codec
    "encode_index",
    "encode_leaf",
    "encode_record",
    "leaf_preimage",
    # Core types
    "MerkleTree",
    "MerkleProof",
    # Core functions
    "merkle_parent",
    "build_levels",
    "build_merkle_root",
    "build_tree",
    "compute_tree_depth",
    "find_duplicate_indices",
    "generate_proof",
    "generate_all_proofs",
    "verify_proof",
    "verify_merkle_proof",
    "self_check",
    # Convenience classes
    "MerkleProver",
    "MerkleVerifier",
]
