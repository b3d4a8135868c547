"""
Module 01 - Schemas & Canonicalization
File: verification.py

Purpose: Check results for export verification.
Artifact validation and the `verify` CLI command collect one CheckResult per
file or invariant and report them together instead of raising on the first
mismatch.
"""

from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


CheckSeverity = Literal["info", "error"]


class CheckResult(BaseModel):
    """Outcome of one check against an export (a file hash, the root, the proofs...)."""

    model_config = ConfigDict(extra="forbid")

    check_id: str = Field(..., min_length=1, description="Stable check name, e.g. 'root' or 'hash_tree'")
    ok: bool
    severity: CheckSeverity
    message: str
    details: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_error(self) -> bool:
        return not self.ok and self.severity == "error"

    @classmethod
    def passed(
        cls,
        check_id: str,
        message: str = "Check passed",
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=True, severity="info", message=message, details=details or {})

    @classmethod
    def failed(
        cls,
        check_id: str,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> "CheckResult":
        return cls(check_id=check_id, ok=False, severity="error", message=message, details=details or {})


class VerificationResult(BaseModel):
    """
    All checks run against one export.

    ok is False as soon as any check fails.
    """

    model_config = ConfigDict(extra="forbid")

    ok: bool
    checks: list[CheckResult] = Field(default_factory=list)

    @classmethod
    def from_checks(cls, checks: list[CheckResult]) -> "VerificationResult":
        return cls(ok=all(c.ok for c in checks), checks=checks)

    def add_check(self, check: CheckResult) -> None:
        self.checks.append(check)
        if not check.ok:
            self.ok = False

    def get_failed_checks(self) -> list[CheckResult]:
        return [check for check in self.checks if not check.ok]
