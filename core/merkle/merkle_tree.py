"""
Module 02 - Merkle Tree Implementation
Deterministic Merkle tree construction over (index, uri) records.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Deterministic Merkle root computation
- The retained level structure used for proof generation
- Duplicate/empty input rejection before any hashing

Canonical Commitment Rules (Hard Contracts):
1. Leaf hashing: leaf = keccak256(uint256_be(index) || utf8(uri))
   - Implemented in core.merkle.leaf_codec.encode_leaf()
2. Parent hashing: parent = keccak256(min(a, b) || max(a, b))
   - Byte-lexicographic sorted pair; no left/right position bits
3. Odd rule: a trailing unpaired node is promoted UNCHANGED to the next
   level. It is never duplicated and never hashed with itself.
4. Empty input: rejected (EmptyInputException); there is no empty root
5. Single leaf: root = leaf

Any on-chain verifier must implement rules 1-3 bit-for-bit. Changing any of
them silently invalidates every previously published root.

Determinism Notes:
- Records are sorted by index before hashing, so the full level structure
  (and therefore the root) depends only on the record set, never on the
  order the records were supplied in.
"""
from __future__ import annotations

from collections import Counter
from dataclasses import dataclass, field
from typing import Iterable, Sequence

from core.crypto.hashing import HASH_SIZE, hash_sorted_pair
from core.merkle.leaf_codec import encode_record
from core.schemas.errors import (
    DuplicateIndexException,
    EmptyInputException,
    TreeIntegrityException,
    UnknownIndexException,
)
from core.schemas.records import Record


def merkle_parent(a: bytes, b: bytes) -> bytes:
    """
    Compute the parent hash of two child nodes.

    Parent hash is order-independent: keccak256(min(a,b) || max(a,b))

    Args:
        a: One child hash
        b: The other child hash

    Returns:
        Parent hash (32 bytes)
    """
    return hash_sorted_pair(a, b)


def _check_leaves(leaves: Sequence[bytes]) -> None:
    if len(leaves) == 0:
        raise EmptyInputException()
    for position, leaf in enumerate(leaves):
        if not isinstance(leaf, (bytes, bytearray)) or len(leaf) != HASH_SIZE:
            raise TreeIntegrityException(
                f"Leaf at position {position} is not a {HASH_SIZE}-byte hash",
                details={"position": position},
            )


def build_levels(leaves: Sequence[bytes]) -> list[list[bytes]]:
    """
    Build every level of the tree from pre-hashed leaves.

    Algorithm:
    1. Level 0 is the leaves, in the given order
    2. Pair adjacent nodes (0,1), (2,3), ... and hash each pair sorted
    3. If the level has an odd trailing node, append it unchanged
    4. Repeat until a level holds exactly one node

    Example: [a, b, c] -> [[a, b, c], [P(a,b), c], [P(P(a,b), c)]]

    Args:
        leaves: Non-empty sequence of 32-byte leaf hashes

    Returns:
        List of levels from leaves (index 0) to root (last, length 1)

    Raises:
        EmptyInputException: If leaves is empty
        TreeIntegrityException: If any leaf is not 32 bytes
    """
    _check_leaves(leaves)

    current_level: list[bytes] = [bytes(leaf) for leaf in leaves]
    levels: list[list[bytes]] = [current_level]

    while len(current_level) > 1:
        next_level: list[bytes] = [
            merkle_parent(current_level[i], current_level[i + 1])
            for i in range(0, len(current_level) - 1, 2)
        ]
        if len(current_level) % 2 == 1:
            # Promote the unpaired node as-is
            next_level.append(current_level[-1])

        levels.append(next_level)
        current_level = next_level

    return levels


def build_merkle_root(leaves: Sequence[bytes]) -> bytes:
    """
    Build a Merkle root from a sequence of leaf hashes.

    Args:
        leaves: Sequence of 32-byte leaf hashes. Order is preserved.

    Returns:
        32-byte Merkle root

    Raises:
        EmptyInputException: If leaves is empty
    """
    return build_levels(leaves)[-1][0]


def compute_tree_depth(num_leaves: int) -> int:
    """
    Compute the number of levels (leaves and root inclusive) for a leaf count.

    A single leaf has depth 1 and each pairing pass adds one level:
        1 -> 1, 2 -> 2, 3 -> 3, 4 -> 3, 5 -> 4

    Returns:
        Tree depth (0 for an empty tree)
    """
    if num_leaves <= 0:
        return 0

    depth = 1
    n = num_leaves
    while n > 1:
        n = (n + 1) // 2
        depth += 1
    return depth


def find_duplicate_indices(records: Iterable[Record]) -> list[int]:
    """Return every index that occurs more than once, sorted."""
    counts = Counter(r.index for r in records)
    return sorted(index for index, count in counts.items() if count > 1)


@dataclass(frozen=True)
class MerkleTree:
    """
    A built tree: sorted records, every level, and the root.

    Treated as immutable and read-only once built; it is safe to share
    across threads for proof generation.

    Attributes:
        records: Records sorted by index; records[i] owns levels[0][i]
        levels: Node hashes per level, leaves first, [root] last
    """
    records: tuple[Record, ...]
    levels: tuple[tuple[bytes, ...], ...]
    _positions: dict[int, int] = field(default_factory=dict, repr=False, compare=False)

    def __post_init__(self) -> None:
        if not self.levels or len(self.levels[-1]) != 1:
            raise TreeIntegrityException("Tree must end in a single root node")
        if len(self.records) != len(self.levels[0]):
            raise TreeIntegrityException(
                "Record count does not match leaf count",
                details={"records": len(self.records), "leaves": len(self.levels[0])},
            )
        if not self._positions:
            self._positions.update(
                {record.index: position for position, record in enumerate(self.records)}
            )

    @property
    def root(self) -> bytes:
        return self.levels[-1][0]

    @property
    def leaves(self) -> tuple[bytes, ...]:
        return self.levels[0]

    @property
    def leaf_count(self) -> int:
        return len(self.levels[0])

    @property
    def depth(self) -> int:
        return len(self.levels)

    def indices(self) -> list[int]:
        """Committed indices in canonical (ascending) order."""
        return [record.index for record in self.records]

    def __contains__(self, index: object) -> bool:
        return index in self._positions

    def position_of(self, index: int) -> int:
        """
        Leaf position of an index within level 0.

        Raises:
            UnknownIndexException: If index was not part of the built set
        """
        try:
            return self._positions[index]
        except KeyError:
            raise UnknownIndexException(index) from None

    def leaf_for(self, index: int) -> bytes:
        return self.levels[0][self.position_of(index)]

    def record_for(self, index: int) -> Record:
        return self.records[self.position_of(index)]


def build_tree(
    records: Iterable[Record],
    *,
    leaves: Sequence[bytes] | None = None,
) -> MerkleTree:
    """
    Build the full tree from a finalized record set.

    Steps:
    1. Reject an empty set and duplicate indices (before any hashing)
    2. Sort records by index
    3. Encode leaves (or take the precomputed ones, aligned with `records`)
    4. Build levels with the sorted-pair / promote-odd rules

    Args:
        records: The finalized records, in any order
        leaves: Optional precomputed leaf hashes, one per record in the same
            order as `records` (used by the concurrent encoder)

    Returns:
        MerkleTree

    Raises:
        EmptyInputException: If there are no records
        DuplicateIndexException: If two records share an index
        TreeIntegrityException: If precomputed leaves don't line up
    """
    record_list = list(records)
    if not record_list:
        raise EmptyInputException()

    duplicates = find_duplicate_indices(record_list)
    if duplicates:
        raise DuplicateIndexException(duplicates)

    if leaves is not None:
        if len(leaves) != len(record_list):
            raise TreeIntegrityException(
                "Precomputed leaf count does not match record count",
                details={"records": len(record_list), "leaves": len(leaves)},
            )
        pairs = sorted(zip(record_list, leaves), key=lambda pair: pair[0].index)
        sorted_records = [record for record, _ in pairs]
        leaf_hashes = [leaf for _, leaf in pairs]
    else:
        sorted_records = sorted(record_list, key=lambda r: r.index)
        leaf_hashes = [encode_record(record) for record in sorted_records]

    levels = build_levels(leaf_hashes)

    return MerkleTree(
        records=tuple(sorted_records),
        levels=tuple(tuple(level) for level in levels),
    )


__all__ = [
    "MerkleTree",
    "merkle_parent",
    "build_levels",
    "build_merkle_root",
    "build_tree",
    "compute_tree_depth",
    "find_duplicate_indices",
]
