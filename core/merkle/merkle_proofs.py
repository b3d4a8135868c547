"""
Module 02 - Merkle Proofs
Inclusion proof generation and verification for a built MerkleTree.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- MerkleProof: Dataclass representing an inclusion proof
- generate_proof / generate_all_proofs: Proofs from a built tree
- verify_proof: Stateless verification (leaf, siblings, root) -> bool
- self_check: Verify every proof of a tree before anything is published
- MerkleProver / MerkleVerifier: Class-based convenience wrappers

Proof Rules:
- Siblings are ordered leaf-level first, root-level last
- A level where the node was promoted (no sibling) contributes nothing,
  so proofs can be shorter than depth - 1
- Verification folds siblings with the sorted-pair rule; no left/right
  flags are carried or needed
"""
from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

from core.crypto.hashing import HASH_SIZE, hash_sorted_pair, to_hex
from core.merkle.leaf_codec import encode_leaf, encode_record
from core.merkle.merkle_tree import MerkleTree, build_tree
from core.schemas.errors import (
    EncodingException,
    ProofVerificationException,
    ValidationException,
)
from core.schemas.records import Record


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MerkleProof:
    """
    An inclusion proof for a single record.

    Attributes:
        index: The record index (not the leaf position)
        leaf: The leaf hash being proven (32 bytes)
        siblings: Sibling hashes from bottom to top of tree
        root: The Merkle root this proof is against
    """
    index: int
    leaf: bytes
    siblings: tuple[bytes, ...]
    root: bytes

    def __post_init__(self) -> None:
        """Validate proof structure."""
        if self.index < 0:
            raise ValueError(f"Record index must be non-negative, got {self.index}")
        if len(self.leaf) != HASH_SIZE or len(self.root) != HASH_SIZE:
            raise ValueError("Leaf and root must be 32-byte hashes")
        if any(len(s) != HASH_SIZE for s in self.siblings):
            raise ValueError("Every sibling must be a 32-byte hash")

    def siblings_hex(self) -> list[str]:
        return [to_hex(s) for s in self.siblings]

    def to_dict(self) -> dict[str, Any]:
        return {
            "index": self.index,
            "leaf": to_hex(self.leaf),
            "proof": self.siblings_hex(),
            "root": to_hex(self.root),
        }


def generate_proof(tree: MerkleTree, index: int) -> MerkleProof:
    """
    Generate the inclusion proof for a committed index.

    Algorithm:
    1. Find the leaf position of index
    2. At each level below the root:
       - Sibling position is position ^ 1
       - If the sibling exists, append it; otherwise the node was promoted
         and this level is skipped
       - Move up: position = position // 2

    Args:
        tree: A built MerkleTree
        index: A record index that is part of the tree

    Returns:
        MerkleProof for the record

    Raises:
        UnknownIndexException: If index is not in the tree
    """
    position = tree.position_of(index)
    leaf = tree.levels[0][position]

    siblings: list[bytes] = []
    for level in tree.levels[:-1]:
        sibling_position = position ^ 1
        if sibling_position < len(level):
            siblings.append(level[sibling_position])
        position //= 2

    return MerkleProof(
        index=index,
        leaf=leaf,
        siblings=tuple(siblings),
        root=tree.root,
    )


def generate_all_proofs(tree: MerkleTree) -> dict[int, MerkleProof]:
    """Proofs for every committed index, keyed by index in ascending order."""
    return {index: generate_proof(tree, index) for index in tree.indices()}


def _is_hash(value: Any) -> bool:
    return isinstance(value, (bytes, bytearray)) and len(value) == HASH_SIZE


def verify_proof(leaf: bytes, siblings: Sequence[bytes], root: bytes) -> bool:
    """
    Verify that leaf is included under root.

    Folds siblings bottom-up with the sorted-pair parent rule and compares
    the result with root. Malformed input (non-bytes, wrong lengths) is
    reported as False, never raised.

    Args:
        leaf: The leaf hash (32 bytes)
        siblings: Sibling hashes, leaf-level first
        root: The claimed root (32 bytes)

    Returns:
        True if the proof is valid, False otherwise
    """
    if not _is_hash(leaf) or not _is_hash(root):
        return False
    if isinstance(siblings, (bytes, bytearray, str)):
        return False

    current_hash = bytes(leaf)
    for sibling in siblings:
        if not _is_hash(sibling):
            return False
        current_hash = hash_sorted_pair(current_hash, bytes(sibling))

    return current_hash == bytes(root)


def verify_merkle_proof(proof: MerkleProof) -> bool:
    """Verify a MerkleProof against its own claimed root."""
    return verify_proof(proof.leaf, proof.siblings, proof.root)


def self_check(tree: MerkleTree, proofs: Mapping[int, MerkleProof]) -> None:
    """
    Verify every record of a tree against its proof before publication.

    For each committed record the leaf is recomputed from (index, uri), and
    must equal the proof's leaf; the proof must be against the tree root and
    must verify. Proofs for indices that are not in the tree also fail.

    Raises:
        ProofVerificationException: Listing every failing index
    """
    failed: list[int] = []

    for record in tree.records:
        proof = proofs.get(record.index)
        if proof is None:
            failed.append(record.index)
            continue
        if (
            proof.leaf != encode_record(record)
            or proof.root != tree.root
            or not verify_merkle_proof(proof)
        ):
            failed.append(record.index)

    failed.extend(index for index in proofs if index not in tree)

    if failed:
        logger.error("Self-check failed for %d of %d indices", len(failed), tree.leaf_count)
        raise ProofVerificationException(failed, root=to_hex(tree.root))

    logger.debug("Self-check passed for %d proofs", len(proofs))


class MerkleProver:
    """
    Convenience class for building trees and proofs from records.

    Example:
        >>> records = [Record.create(0, "ar://a"), Record.create(1, "ar://b")]
        >>> proof = MerkleProver.prove(records, index=1)
        >>> MerkleVerifier.verify(proof)
        True
    """

    @staticmethod
    def compute_root(records: Iterable[Record]) -> bytes:
        """
        Compute the Merkle root for a record set.

        Raises:
            EmptyInputException: If records is empty
            DuplicateIndexException: If two records share an index
        """
        return build_tree(records).root

    @staticmethod
    def prove(records: Iterable[Record], index: int) -> MerkleProof:
        """
        Build the tree and return the proof for one index.

        Raises:
            UnknownIndexException: If index is not among the records
        """
        return generate_proof(build_tree(records), index)


class MerkleVerifier:
    """Convenience class for verifying Merkle proofs."""

    @staticmethod
    def verify(proof: MerkleProof) -> bool:
        return verify_merkle_proof(proof)

    @staticmethod
    def verify_record(
        index: int,
        uri: str,
        siblings: Sequence[bytes],
        root: bytes,
    ) -> bool:
        """
        Verify a raw (index, uri) pair against a root.

        The leaf is recomputed from the record, so a proof only verifies
        for the exact uri that was committed. Records that cannot be
        encoded (bad index, empty uri) verify as False.

        Returns:
            True if the proof is valid, False otherwise
        """
        try:
            leaf = encode_leaf(index, uri)
        except (ValidationException, EncodingException):
            return False
        return verify_proof(leaf, siblings, root)


__all__ = [
    "MerkleProof",
    "generate_proof",
    "generate_all_proofs",
    "verify_proof",
    "verify_merkle_proof",
    "self_check",
    "MerkleProver",
    "MerkleVerifier",
]
