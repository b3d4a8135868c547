"""
Module 09A - SOP Executor

Purpose: Keep commitment stages composable and testable with minimal abstraction.

Provides:
- SOPStep: Protocol for individual pipeline stages
- PipelineState: Dataclass holding stage outputs incrementally
- SOPExecutor: Runner that executes stages in sequence

Every stage failure is fatal: the executor stops at the first failing
stage and keeps the raised exception on the state so the caller can
re-raise it with its original type.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol

from core.merkle.merkle_proofs import MerkleProof
from core.merkle.merkle_tree import MerkleTree
from core.schemas.errors import UriMerkleException
from core.schemas.records import Record
from core.schemas.verification import CheckResult


logger = logging.getLogger(__name__)


@dataclass
class PipelineState:
    """
    Holds stage outputs incrementally as the pipeline progresses.

    Fields are Optional to allow incremental population.
    """

    # Input (sorted by index after the validate stage)
    records: list[Record] = field(default_factory=list)

    # Stage: encode
    leaves: Optional[list[bytes]] = None

    # Stage: build
    tree: Optional[MerkleTree] = None

    # Stage: prove
    proofs: Optional[dict[int, MerkleProof]] = None

    # Stage: self-check
    verified: bool = False

    # Aggregated results
    checks: list[CheckResult] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    failure: Optional[UriMerkleException] = None
    ok: bool = True

    def add_check(self, check: CheckResult) -> None:
        """Add a check result to the aggregated checks."""
        self.checks.append(check)
        if check.is_error:
            self.ok = False

    def add_error(self, error: str) -> None:
        """Add an error message and mark state as not ok."""
        self.errors.append(error)
        self.ok = False


class SOPStep(Protocol):
    """
    Protocol for a single pipeline stage.

    Each stage has a name and a run method that transforms state.
    Stages should be side-effect free except for state mutation.
    """

    @property
    def name(self) -> str:
        """Unique name for this stage."""
        ...

    def run(self, state: PipelineState) -> PipelineState:
        """
        Execute this stage, potentially modifying state.

        Args:
            state: Current pipeline state

        Returns:
            Updated pipeline state (may be the same object)
        """
        ...


@dataclass
class FunctionStep:
    """
    Adapter to create SOPStep from a plain function.

    Example:
        step = FunctionStep("encode", lambda s: do_something(s))
    """

    _name: str
    _func: Callable[[PipelineState], PipelineState]

    @property
    def name(self) -> str:
        return self._name

    def run(self, state: PipelineState) -> PipelineState:
        return self._func(state)


class SOPExecutor:
    """
    Executor that runs a sequence of SOPSteps.

    Only UriMerkleException is captured; anything else is a bug and
    propagates unchanged.
    """

    def __init__(self) -> None:
        self._step_results: list[tuple[str, bool, Optional[str]]] = []

    def execute(
        self,
        steps: list[SOPStep],
        state: PipelineState,
    ) -> PipelineState:
        """
        Execute stages in sequence, stopping at the first failure.

        Args:
            steps: List of stages to execute
            state: Initial pipeline state

        Returns:
            Final pipeline state (state.failure set if a stage raised)
        """
        self._step_results = []

        for step in steps:
            logger.debug("Running stage %s", step.name)
            try:
                state = step.run(state)
            except UriMerkleException as e:
                state.add_error(f"Stage '{step.name}' failed: {e.message}")
                state.failure = e
                self._step_results.append((step.name, False, e.message))
                break

            self._step_results.append((step.name, True, None))
            if not state.ok:
                break

        return state

    @property
    def step_results(self) -> list[tuple[str, bool, Optional[str]]]:
        """
        Get results of each stage execution.

        Returns:
            List of (step_name, success, error_message) tuples
        """
        return self._step_results.copy()

    def get_failed_steps(self) -> list[str]:
        """Get names of failed stages."""
        return [name for name, success, _ in self._step_results if not success]

    def all_steps_succeeded(self) -> bool:
        return all(success for _, success, _ in self._step_results)


def make_step(name: str, func: Callable[[PipelineState], PipelineState]) -> SOPStep:
    """
    Convenience function to create a stage from a function.

    Args:
        name: Stage name
        func: Function that takes and returns PipelineState

    Returns:
        SOPStep wrapping the function
    """
    return FunctionStep(name, func)
