"""
Module 02 - Merkle Proof Unit Tests
Tests for core/merkle/merkle_proofs.py

Tests:
- Every generated proof verifies, for a range of tree sizes
- Promoted levels are skipped, so proofs can be shorter than depth - 1
- Tampered leaf/sibling/root fails verification
- Malformed input verifies as False instead of raising
- self_check accepts a correct proof set and rejects a broken one
"""
import pytest

from core.crypto.hashing import keccak256
from core.merkle.leaf_codec import encode_leaf
from core.merkle.merkle_proofs import (
    MerkleProof,
    MerkleProver,
    MerkleVerifier,
    generate_all_proofs,
    generate_proof,
    self_check,
    verify_merkle_proof,
    verify_proof,
)
from core.merkle.merkle_tree import build_tree
from core.schemas.errors import ProofVerificationException, UnknownIndexException
from core.schemas.records import Record

from fixtures.common import make_records


def _flip(data: bytes) -> bytes:
    return bytes([data[0] ^ 0x01]) + data[1:]


class TestWorkedExampleProofs:
    """Proofs for the three-record example."""

    def test_proof_for_promoted_leaf(self, example_records):
        """Index 2 is promoted at level 0, so its proof is just [P01]."""
        tree = build_tree(example_records)
        l2 = encode_leaf(2, "ar://c")

        proof = generate_proof(tree, 2)

        assert proof.siblings == (tree.levels[1][0],)
        assert verify_proof(l2, list(proof.siblings), tree.root)

    def test_proof_for_first_leaf(self, example_records):
        """Index 0 proves with [L1, L2]."""
        tree = build_tree(example_records)
        l1 = encode_leaf(1, "ar://b")
        l2 = encode_leaf(2, "ar://c")

        proof = generate_proof(tree, 0)

        assert proof.siblings == (l1, l2)
        assert verify_merkle_proof(proof)


class TestProofRoundTrip:
    """Every proof verifies for a variety of tree sizes."""

    @pytest.mark.parametrize("count", [1, 2, 3, 4, 5, 7, 8, 13, 16, 33])
    def test_all_proofs_verify(self, count):
        """generate_proof + verify_proof succeeds for every index."""
        tree = build_tree(make_records(count))

        for index in tree.indices():
            proof = generate_proof(tree, index)
            assert proof.root == tree.root
            assert verify_proof(proof.leaf, proof.siblings, tree.root)

    def test_single_leaf_proof_is_empty(self):
        """A one-record tree has an empty proof."""
        tree = build_tree([Record.create(0, "ar://solo")])

        proof = generate_proof(tree, 0)

        assert proof.siblings == ()
        assert verify_merkle_proof(proof)

    def test_proof_length_bounded_by_depth(self):
        """No proof has more than depth - 1 siblings."""
        tree = build_tree(make_records(11))

        for proof in generate_all_proofs(tree).values():
            assert len(proof.siblings) <= tree.depth - 1

    def test_generate_all_proofs_keys(self):
        """One proof per committed index, in ascending order."""
        records = [Record.create(i, f"ar://{i}") for i in (9, 4, 1)]
        tree = build_tree(records)

        proofs = generate_all_proofs(tree)

        assert list(proofs) == [1, 4, 9]

    def test_unknown_index_raises(self):
        """Proof requested for an uncommitted index."""
        tree = build_tree(make_records(3))

        with pytest.raises(UnknownIndexException):
            generate_proof(tree, 3)


class TestTamperDetection:
    """Any modification breaks verification."""

    @pytest.fixture
    def proof(self):
        tree = build_tree(make_records(6))
        return generate_proof(tree, 2)

    def test_tampered_leaf(self, proof):
        """A different leaf does not verify."""
        assert not verify_proof(_flip(proof.leaf), proof.siblings, proof.root)

    def test_tampered_sibling(self, proof):
        """A modified sibling does not verify."""
        siblings = list(proof.siblings)
        siblings[0] = _flip(siblings[0])

        assert not verify_proof(proof.leaf, siblings, proof.root)

    def test_tampered_root(self, proof):
        """A different root does not verify."""
        assert not verify_proof(proof.leaf, proof.siblings, _flip(proof.root))

    def test_missing_sibling(self, proof):
        """Dropping a sibling does not verify."""
        assert not verify_proof(proof.leaf, proof.siblings[:-1], proof.root)

    def test_sibling_order_matters_across_levels(self):
        """Reordering siblings from different levels does not verify."""
        tree = build_tree(make_records(8))
        proof = generate_proof(tree, 0)

        reversed_siblings = list(reversed(proof.siblings))

        assert not verify_proof(proof.leaf, reversed_siblings, proof.root)

    def test_wrong_uri_via_verifier(self):
        """verify_record recomputes the leaf, so a swapped uri fails."""
        records = make_records(4)
        tree = build_tree(records)
        proof = generate_proof(tree, 1)

        assert MerkleVerifier.verify_record(1, records[1].uri, proof.siblings, tree.root)
        assert not MerkleVerifier.verify_record(1, "ar://forged", proof.siblings, tree.root)
        assert not MerkleVerifier.verify_record(2, records[1].uri, proof.siblings, tree.root)


class TestMalformedInput:
    """verify_proof reports malformed input as False."""

    def test_short_leaf(self):
        """Leaf of the wrong width."""
        root = keccak256(b"r")

        assert verify_proof(b"short", [], root) is False

    def test_short_sibling(self):
        """Sibling of the wrong width."""
        leaf = keccak256(b"l")

        assert verify_proof(leaf, [b"\x00" * 31], keccak256(b"r")) is False

    def test_siblings_as_bytes(self):
        """A bytes object is not a list of siblings."""
        leaf = keccak256(b"l")

        assert verify_proof(leaf, keccak256(b"s"), keccak256(b"r")) is False

    def test_verify_record_bad_uri(self):
        """Records that cannot be encoded verify as False."""
        root = keccak256(b"r")

        assert MerkleVerifier.verify_record(0, "", [], root) is False
        assert MerkleVerifier.verify_record(-1, "ar://x", [], root) is False


class TestMerkleProof:
    """Tests for the MerkleProof dataclass."""

    def test_rejects_bad_lengths(self):
        """Construction validates hash widths."""
        h = keccak256(b"h")

        with pytest.raises(ValueError):
            MerkleProof(index=0, leaf=b"x", siblings=(), root=h)
        with pytest.raises(ValueError):
            MerkleProof(index=0, leaf=h, siblings=(b"y",), root=h)
        with pytest.raises(ValueError):
            MerkleProof(index=-1, leaf=h, siblings=(), root=h)

    def test_to_dict_hex(self, example_records):
        """to_dict renders hashes as 0x hex."""
        tree = build_tree(example_records)
        data = generate_proof(tree, 2).to_dict()

        assert data["index"] == 2
        assert data["leaf"] == "0x" + encode_leaf(2, "ar://c").hex()
        assert data["root"] == "0x" + tree.root.hex()
        assert data["proof"] == ["0x" + tree.levels[1][0].hex()]


class TestSelfCheck:
    """Tests for self_check()."""

    def test_passes_for_generated_proofs(self):
        """A freshly generated proof set passes."""
        tree = build_tree(make_records(10))

        self_check(tree, generate_all_proofs(tree))

    def test_missing_proof_fails(self):
        """Every committed index needs a proof."""
        tree = build_tree(make_records(4))
        proofs = generate_all_proofs(tree)
        del proofs[3]

        with pytest.raises(ProofVerificationException) as exc_info:
            self_check(tree, proofs)

        assert exc_info.value.failed_indices == [3]

    def test_corrupted_proof_fails(self):
        """A proof with a flipped sibling is reported by index."""
        tree = build_tree(make_records(5))
        proofs = generate_all_proofs(tree)
        bad = proofs[1]
        proofs[1] = MerkleProof(
            index=bad.index,
            leaf=bad.leaf,
            siblings=(_flip(bad.siblings[0]),) + bad.siblings[1:],
            root=bad.root,
        )

        with pytest.raises(ProofVerificationException) as exc_info:
            self_check(tree, proofs)

        assert exc_info.value.failed_indices == [1]
        assert exc_info.value.details["root"] == "0x" + tree.root.hex()

    def test_extra_proof_fails(self):
        """A proof for an index outside the tree is a failure."""
        tree = build_tree(make_records(2))
        proofs = generate_all_proofs(tree)
        proofs[7] = proofs[0]

        with pytest.raises(ProofVerificationException) as exc_info:
            self_check(tree, proofs)

        assert 7 in exc_info.value.failed_indices


class TestProverVerifier:
    """Tests for the convenience classes."""

    def test_prove_and_verify(self):
        """MerkleProver.prove output passes MerkleVerifier.verify."""
        records = make_records(6)

        proof = MerkleProver.prove(records, index=4)

        assert MerkleVerifier.verify(proof)
        assert proof.root == MerkleProver.compute_root(records)
