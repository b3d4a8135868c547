"""
Module 02 - Merkle Tree Unit Tests
Tests for core/merkle/merkle_tree.py

Required behaviour:
1. Root determinism - same record set -> same root, regardless of input order
2. Odd rule - a trailing unpaired node is promoted unchanged
3. Empty input rejected, single leaf is its own root
4. Duplicate indices rejected before any leaf is hashed
5. Level structure and depth bookkeeping
"""
import random

import pytest

from core.crypto.hashing import keccak256
from core.merkle import leaf_codec
from core.merkle.leaf_codec import encode_leaf
from core.merkle.merkle_tree import (
    MerkleTree,
    build_levels,
    build_merkle_root,
    build_tree,
    compute_tree_depth,
    find_duplicate_indices,
    merkle_parent,
)
from core.schemas.errors import (
    DuplicateIndexException,
    EmptyInputException,
    TreeIntegrityException,
    UnknownIndexException,
)
from core.schemas.records import Record

from fixtures.common import make_records


def _leaf(tag: bytes) -> bytes:
    return keccak256(tag)


class TestEmptyTree:
    """Tests for empty input behavior."""

    def test_build_levels_empty_raises(self):
        """There is no empty root."""
        with pytest.raises(EmptyInputException):
            build_levels([])

    def test_build_merkle_root_empty_raises(self):
        """build_merkle_root([]) raises too."""
        with pytest.raises(EmptyInputException):
            build_merkle_root([])

    def test_build_tree_empty_raises(self):
        """build_tree over zero records raises EmptyInputException."""
        with pytest.raises(EmptyInputException):
            build_tree([])


class TestSingleLeaf:
    """Tests for single leaf tree behavior."""

    def test_single_leaf_root_equals_leaf(self):
        """Root of a single-leaf tree equals the leaf itself."""
        tree = build_tree([Record.create(9, "ar://only")])

        assert tree.root == encode_leaf(9, "ar://only")
        assert tree.depth == 1
        assert tree.leaf_count == 1


class TestWorkedExample:
    """The three-record example: [(0, ar://a), (1, ar://b), (2, ar://c)]."""

    def test_levels_and_root(self, example_records):
        """Level 1 is [P01, L2]; root is P(P01, L2)."""
        l0 = encode_leaf(0, "ar://a")
        l1 = encode_leaf(1, "ar://b")
        l2 = encode_leaf(2, "ar://c")
        p01 = keccak256(min(l0, l1) + max(l0, l1))
        root = keccak256(min(p01, l2) + max(p01, l2))

        tree = build_tree(example_records)

        assert tree.levels[0] == (l0, l1, l2)
        assert tree.levels[1] == (p01, l2)
        assert tree.levels[2] == (root,)
        assert tree.root == root

    def test_fixed_vectors(self, example_records):
        """Leaves and root match published hex values for the example."""
        tree = build_tree(example_records)

        assert [leaf.hex() for leaf in tree.levels[0]] == [
            "19f214fde2a65c556ca5b767e361b6b24b27683c99b3237998833a82391e19be",
            "aa39c35283867afe64c97e74f7125646d82612f529aca7f911f03fe4d4784a43",
            "86bd76bfe9dd7096da24672a0cb08ee5efbc7680d297711e80fa308db2814e10",
        ]
        assert tree.levels[1][0].hex() == (
            "0d391534792b64bbaec04fa546db1018924d6e6957766bf6761d4eead33a65ee"
        )
        assert tree.root.hex() == (
            "d084b62423ed59f06f8da090dcd1fb14cb2639d7eaf9637e4cd13201c13b79b3"
        )


class TestOddRule:
    """Tests for promote-unchanged behavior on odd levels."""

    def test_three_leaves_promotes_last(self):
        """The unpaired node moves up as-is, never hashed with itself."""
        a, b, c = _leaf(b"a"), _leaf(b"b"), _leaf(b"c")

        levels = build_levels([a, b, c])

        assert levels[1] == [merkle_parent(a, b), c]
        assert levels[1][1] != merkle_parent(c, c)

    def test_five_leaves(self):
        """Five leaves: [5] -> [3] -> [2] -> [1], promoting at two levels."""
        leaves = [_leaf(bytes([i])) for i in range(5)]

        levels = build_levels(leaves)

        assert [len(level) for level in levels] == [5, 3, 2, 1]
        assert levels[1][2] == leaves[4]
        assert levels[2][1] == leaves[4]
        assert levels[3][0] == merkle_parent(levels[2][0], leaves[4])

    def test_even_level_no_promotion(self):
        """Four leaves pair up fully."""
        a, b, c, d = (_leaf(t) for t in (b"a", b"b", b"c", b"d"))

        root = build_merkle_root([a, b, c, d])

        assert root == merkle_parent(merkle_parent(a, b), merkle_parent(c, d))


class TestRootDeterminism:
    """Tests for deterministic root computation."""

    def test_same_records_same_root(self):
        """Rebuilding the same record set gives the same root."""
        roots = {build_tree(make_records(7)).root for _ in range(5)}

        assert len(roots) == 1

    def test_input_order_does_not_matter(self):
        """Every permutation of the input gives the same tree."""
        records = make_records(9)
        expected = build_tree(records)

        rng = random.Random(1234)
        for _ in range(10):
            shuffled = list(records)
            rng.shuffle(shuffled)
            tree = build_tree(shuffled)
            assert tree.root == expected.root
            assert tree.levels == expected.levels

    def test_sparse_indices_sorted(self):
        """Records are laid out in ascending index order."""
        records = [
            Record.create(100, "ar://c"),
            Record.create(3, "ar://a"),
            Record.create(50, "ar://b"),
        ]

        tree = build_tree(records)

        assert tree.indices() == [3, 50, 100]
        assert tree.leaves[0] == encode_leaf(3, "ar://a")

    def test_different_uri_different_root(self):
        """Changing one uri changes the root."""
        records = make_records(4)
        altered = list(records)
        altered[2] = Record.create(2, "ar://changed")

        assert build_tree(records).root != build_tree(altered).root

    def test_sorted_pair_parent_is_order_free(self):
        """merkle_parent(a, b) == merkle_parent(b, a)."""
        a, b = _leaf(b"x"), _leaf(b"y")

        assert merkle_parent(a, b) == merkle_parent(b, a)


class TestDuplicates:
    """Tests for duplicate index rejection."""

    def test_find_duplicate_indices(self):
        """Each repeated index is reported once, sorted."""
        records = [
            Record.create(5, "ar://a"),
            Record.create(1, "ar://b"),
            Record.create(5, "ar://c"),
            Record.create(1, "ar://d"),
            Record.create(2, "ar://e"),
        ]

        assert find_duplicate_indices(records) == [1, 5]

    def test_duplicate_raises(self):
        """Two records with one index cannot be committed."""
        records = [Record.create(1, "ar://a"), Record.create(1, "ar://b")]

        with pytest.raises(DuplicateIndexException) as exc_info:
            build_tree(records)

        assert exc_info.value.indices == [1]

    def test_duplicate_detected_before_hashing(self, monkeypatch):
        """No leaf is encoded when the record set has duplicates."""
        calls = []

        def _spy(record):
            calls.append(record.index)
            return leaf_codec.encode_record(record)

        monkeypatch.setattr("core.merkle.merkle_tree.encode_record", _spy)
        records = [Record.create(0, "ar://a"), Record.create(0, "ar://b")]

        with pytest.raises(DuplicateIndexException):
            build_tree(records)

        assert calls == []


class TestPrecomputedLeaves:
    """Tests for build_tree(records, leaves=...)."""

    def test_precomputed_leaves_follow_records(self):
        """Leaves supplied alongside unsorted records are sorted with them."""
        records = [Record.create(2, "ar://c"), Record.create(0, "ar://a"), Record.create(1, "ar://b")]
        leaves = [leaf_codec.encode_record(r) for r in records]

        tree = build_tree(records, leaves=leaves)

        assert tree.root == build_tree(records).root

    def test_leaf_count_mismatch(self):
        """A leaf list of the wrong length is rejected."""
        records = make_records(3)

        with pytest.raises(TreeIntegrityException):
            build_tree(records, leaves=[_leaf(b"a")])

    def test_bad_leaf_width(self):
        """Leaves must be 32-byte hashes."""
        with pytest.raises(TreeIntegrityException):
            build_levels([b"short"])


class TestMerkleTree:
    """Tests for MerkleTree lookups."""

    def test_lookup_by_index(self):
        """Leaves and records are found by index, not position."""
        tree = build_tree([Record.create(10, "ar://x"), Record.create(20, "ar://y")])

        assert 10 in tree
        assert 15 not in tree
        assert tree.position_of(20) == 1
        assert tree.leaf_for(20) == encode_leaf(20, "ar://y")
        assert tree.record_for(10).uri == "ar://x"

    def test_unknown_index(self):
        """Looking up an index that was not committed raises."""
        tree = build_tree(make_records(2))

        with pytest.raises(UnknownIndexException):
            tree.position_of(99)

    def test_direct_construction_checks_shape(self):
        """A tree whose last level is not a single node is rejected."""
        with pytest.raises(TreeIntegrityException):
            MerkleTree(records=(), levels=((),))


class TestTreeDepth:
    """Tests for compute_tree_depth()."""

    @pytest.mark.parametrize(
        "count,depth",
        [(0, 0), (1, 1), (2, 2), (3, 3), (4, 3), (5, 4), (8, 4), (9, 5)],
    )
    def test_depth(self, count, depth):
        """Depth counts levels, leaves and root inclusive."""
        assert compute_tree_depth(count) == depth

    def test_depth_matches_built_tree(self):
        """compute_tree_depth agrees with the built tree."""
        for count in (1, 2, 3, 6, 11):
            assert build_tree(make_records(count)).depth == compute_tree_depth(count)
