"""
Module 09A - Pipeline Integration

Deterministic, in-process commitment pipeline composing the Merkle modules.

Stages (each a pure transformation over PipelineState):
1. validate  - reject empty input and duplicate indices, sort by index
2. encode    - leaf hashes, optionally across worker threads
3. build     - levels and root
4. prove     - one proof per index
5. self_check - every proof verified against the root (mandatory)

A Commitment only exists once all five stages have passed; a failing stage
re-raises its original exception and nothing downstream runs.
"""
from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping, Optional, Sequence

from core.config.runtime import CommitmentConfig
from core.crypto.hashing import to_hex
from core.merkle.leaf_codec import encode_record
from core.merkle.merkle_proofs import (
    MerkleProof,
    generate_all_proofs,
    self_check,
)
from core.merkle.merkle_tree import MerkleTree, build_tree, find_duplicate_indices
from core.schemas.canonical import format_datetime_canonical
from core.schemas.commitment import IndexLookup, LeafEntry
from core.schemas.errors import (
    DuplicateIndexException,
    EmptyInputException,
    TreeIntegrityException,
)
from core.schemas.records import Record, records_from_mapping
from core.schemas.verification import CheckResult

from orchestrator.sop_executor import PipelineState, SOPExecutor, SOPStep, make_step


logger = logging.getLogger(__name__)


# =============================================================================
# Stage functions
# =============================================================================

def encode_leaves(records: Sequence[Record], workers: int = 1) -> list[bytes]:
    """
    Encode every record's leaf, preserving input order.

    With workers > 1 the records are spread over a thread pool; results are
    collected with executor.map so they line up with `records`. The first
    encoding error propagates.
    """
    if workers <= 1 or len(records) < 2:
        return [encode_record(record) for record in records]

    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="leaf-encoder") as executor:
        return list(executor.map(encode_record, records))


# =============================================================================
# Commitment
# =============================================================================

@dataclass(frozen=True)
class Commitment:
    """
    A built and fully self-checked commitment.

    Only CommitmentPipeline.run() should construct these; holding one means
    every proof has been verified against root.
    """
    tree: MerkleTree
    proofs: dict[int, MerkleProof]
    generated_at: str

    @property
    def root(self) -> bytes:
        return self.tree.root

    @property
    def root_hex(self) -> str:
        return to_hex(self.tree.root)

    @property
    def total_leaves(self) -> int:
        return self.tree.leaf_count

    def indices(self) -> list[int]:
        return self.tree.indices()

    def leaf_entries(self) -> list[LeafEntry]:
        """Exported leaves in index order."""
        return [
            LeafEntry(index=record.index, uri=record.uri, leaf=to_hex(leaf))
            for record, leaf in zip(self.tree.records, self.tree.leaves)
        ]

    def proofs_hex(self) -> dict[int, list[str]]:
        return {index: proof.siblings_hex() for index, proof in self.proofs.items()}

    def lookup(self, index: int) -> IndexLookup:
        """
        Everything needed to verify one index on-chain.

        Raises:
            UnknownIndexException: If index is not committed
        """
        record = self.tree.record_for(index)
        proof = self.proofs[index]
        return IndexLookup(
            index=index,
            uri=record.uri,
            leaf=to_hex(proof.leaf),
            proof=proof.siblings_hex(),
        )

    def summary(self) -> dict[str, Any]:
        return {
            "root": self.root_hex,
            "total_leaves": self.total_leaves,
            "depth": self.tree.depth,
            "generated_at": self.generated_at,
        }


# =============================================================================
# Pipeline Class
# =============================================================================

class CommitmentPipeline:
    """
    Runs validate -> encode -> build -> prove -> self_check over a record set.

    Usage:
        pipeline = CommitmentPipeline(CommitmentConfig(workers=4))
        commitment = pipeline.run(records)
    """

    def __init__(self, config: Optional[CommitmentConfig] = None):
        self.config = config or CommitmentConfig()
        self._executor = SOPExecutor()

    @property
    def step_results(self) -> list[tuple[str, bool, Optional[str]]]:
        """Per-stage outcome of the most recent run."""
        return self._executor.step_results

    def _build_steps(self) -> list[SOPStep]:
        return [
            make_step("validate", self._step_validate),
            make_step("encode", self._step_encode),
            make_step("build", self._step_build),
            make_step("prove", self._step_prove),
            make_step("self_check", self._step_self_check),
        ]

    def _step_validate(self, state: PipelineState) -> PipelineState:
        """Reject empty/duplicate input before any hashing."""
        if not state.records:
            raise EmptyInputException()

        duplicates = find_duplicate_indices(state.records)
        if duplicates:
            raise DuplicateIndexException(duplicates)

        state.records = sorted(state.records, key=lambda r: r.index)
        state.add_check(CheckResult.passed(
            "records_valid",
            f"{len(state.records)} unique records",
        ))
        return state

    def _step_encode(self, state: PipelineState) -> PipelineState:
        workers = self.config.workers
        logger.info("Encoding %d leaves (workers=%d)", len(state.records), workers)
        state.leaves = encode_leaves(state.records, workers=workers)
        return state

    def _step_build(self, state: PipelineState) -> PipelineState:
        state.tree = build_tree(state.records, leaves=state.leaves)
        logger.info(
            "Built tree: %d leaves, depth %d, root %s",
            state.tree.leaf_count,
            state.tree.depth,
            to_hex(state.tree.root),
        )
        return state

    def _step_prove(self, state: PipelineState) -> PipelineState:
        if state.tree is None:
            raise TreeIntegrityException("Cannot generate proofs before the tree is built")
        state.proofs = generate_all_proofs(state.tree)
        for index, proof in state.proofs.items():
            logger.debug("Proof for index %d: %d siblings", index, len(proof.siblings))
        return state

    def _step_self_check(self, state: PipelineState) -> PipelineState:
        if state.tree is None or state.proofs is None:
            raise TreeIntegrityException("Cannot self-check before proofs are generated")
        self_check(state.tree, state.proofs)
        state.verified = True
        state.add_check(CheckResult.passed(
            "proofs_verified",
            f"All {len(state.proofs)} proofs verify against the root",
        ))
        return state

    def _generated_at(self) -> str:
        if self.config.deterministic_timestamps:
            return self.config.fixed_generated_at
        return format_datetime_canonical(datetime.now(timezone.utc))

    def run_stages(self, records: Iterable[Record]) -> PipelineState:
        """
        Run every stage and return the final state without raising.

        state.failure holds the exception of the failing stage, if any.
        """
        state = PipelineState(records=list(records))
        return self._executor.execute(self._build_steps(), state)

    def run(self, records: Iterable[Record]) -> Commitment:
        """
        Build a verified commitment.

        Raises:
            ValidationException: Empty URI, bad index, duplicate index
            EncodingException: URI bytes not valid UTF-8
            TreeIntegrityException: Empty input or a failed self-check
        """
        state = self.run_stages(records)
        if state.failure is not None:
            raise state.failure
        if not state.verified or state.tree is None or state.proofs is None:
            raise TreeIntegrityException(
                "Pipeline finished without a verified tree",
                details={"errors": state.errors},
            )

        commitment = Commitment(
            tree=state.tree,
            proofs=state.proofs,
            generated_at=self._generated_at(),
        )
        logger.info(
            "Commitment ready: root=%s totalLeaves=%d",
            commitment.root_hex,
            commitment.total_leaves,
        )
        return commitment

    def run_mapping(self, mapping: Mapping[Any, Any]) -> Commitment:
        """Build a commitment from an index -> uri mapping."""
        return self.run(records_from_mapping(mapping))


def create_pipeline(
    *,
    workers: int = 1,
    deterministic_timestamps: bool = False,
    fixed_generated_at: Optional[str] = None,
) -> CommitmentPipeline:
    """
    Convenience function to create a pipeline with common configuration.

    Args:
        workers: Leaf encoding threads
        deterministic_timestamps: Use a fixed generatedAt value
        fixed_generated_at: The fixed value (defaults to the epoch)

    Returns:
        Configured CommitmentPipeline instance
    """
    config = CommitmentConfig(
        workers=workers,
        deterministic_timestamps=deterministic_timestamps,
    )
    if fixed_generated_at is not None:
        config.fixed_generated_at = fixed_generated_at
    return CommitmentPipeline(config)


def build_commitment(
    records: Iterable[Record],
    config: Optional[CommitmentConfig] = None,
) -> Commitment:
    """One-shot helper: run the full pipeline over records."""
    return CommitmentPipeline(config).run(records)
