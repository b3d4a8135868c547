"""
Module 09A - Pipeline Integration (In-Process Runtime Wiring)

This module provides a deterministic, testable, in-process pipeline runner
that turns a finalized record set into a verified commitment.

Public API:
- CommitmentPipeline: Main pipeline runner class
- Commitment: A built and self-checked commitment
- create_pipeline / build_commitment: Convenience constructors
- encode_leaves: The (optionally concurrent) leaf encoding stage
- SOPExecutor: Stage executor for composable pipeline stages
- PipelineState: State container for pipeline execution
"""

from orchestrator.pipeline import (
    Commitment,
    CommitmentPipeline,
    build_commitment,
    create_pipeline,
    encode_leaves,
)
from orchestrator.sop_executor import (
    FunctionStep,
    PipelineState,
    SOPExecutor,
    SOPStep,
    make_step,
)


__all__ = [
    # Main pipeline
    "CommitmentPipeline",
    "Commitment",
    "encode_leaves",
    # Factory functions
    "create_pipeline",
    "build_commitment",
    # SOP executor
    "SOPExecutor",
    "SOPStep",
    "FunctionStep",
    "PipelineState",
    "make_step",
]
