"""
Module 01 - Schemas & Canonicalization
File: errors.py

Purpose: Standard error taxonomy for the commitment pipeline.
Defines both Pydantic models for structured error communication
and Python exceptions for control flow.

Propagation:
- ValidationException, EncodingException and TreeIntegrityException are
  fatal: the run aborts before any artifact is written.
- ExportException is retryable and never invalidates a commitment that
  has already been built and verified in memory.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


# =============================================================================
# Error Codes (Machine-Readable Constants)
# =============================================================================

class ErrorCodes:
    """Stable machine-readable error codes used across the pipeline."""

    # Record validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    INDEX_OUT_OF_RANGE = "INDEX_OUT_OF_RANGE"
    INVALID_URI = "INVALID_URI"
    DUPLICATE_INDEX = "DUPLICATE_INDEX"
    UNKNOWN_INDEX = "UNKNOWN_INDEX"

    # Byte encoding
    ENCODING_ERROR = "ENCODING_ERROR"
    CANONICALIZATION_ERROR = "CANONICALIZATION_ERROR"

    # Tree construction & self-check
    TREE_INTEGRITY_ERROR = "TREE_INTEGRITY_ERROR"
    EMPTY_INPUT = "EMPTY_INPUT"
    PROOF_VERIFICATION_FAILED = "PROOF_VERIFICATION_FAILED"

    # Artifact output
    EXPORT_ERROR = "EXPORT_ERROR"


# =============================================================================
# Pydantic Error Models (Structured Communication)
# =============================================================================

class UriMerkleError(BaseModel):
    """
    Base error model for structured error communication.

    Used by the CLI to report failures as JSON without re-raising.
    """

    model_config = ConfigDict(
        extra="forbid",
        frozen=False,
        validate_assignment=True,
    )

    code: str = Field(
        ...,
        description="Stable machine-readable error code",
        examples=[ErrorCodes.VALIDATION_ERROR],
    )
    message: str = Field(
        ...,
        description="Human-readable error message",
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional structured details about the error",
    )
    retryable: bool = Field(
        default=False,
        description="Whether the operation can be retried",
    )


# =============================================================================
# Python Exceptions (Control Flow)
# =============================================================================

class UriMerkleException(Exception):
    """
    Base exception for all commitment pipeline errors.

    This exception carries structured error information and can be
    converted to a UriMerkleError model.
    """

    def __init__(
        self,
        message: str,
        code: str = "URIMERKLE_ERROR",
        details: dict[str, Any] | None = None,
        retryable: bool = False,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.details = details or {}
        self.retryable = retryable

    @property
    def fatal(self) -> bool:
        """Fatal errors must abort the publish before anything is written."""
        return not self.retryable

    def to_error_model(self) -> UriMerkleError:
        """Convert this exception to a UriMerkleError model."""
        return UriMerkleError(
            code=self.code,
            message=self.message,
            details=self.details,
            retryable=self.retryable,
        )

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(code={self.code!r}, message={self.message!r})"


class ValidationException(UriMerkleException):
    """Exception raised when a record or record set is malformed."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.VALIDATION_ERROR,
        field_path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if field_path:
            full_details["field_path"] = field_path
        super().__init__(
            message=message,
            code=code,
            details=full_details,
            retryable=False,
        )


class IndexOutOfRangeException(ValidationException):
    """Exception raised when an index does not fit the fixed-width field."""

    def __init__(self, index: Any, details: dict[str, Any] | None = None) -> None:
        full_details = details or {}
        full_details["index"] = str(index)
        super().__init__(
            message=f"Index out of range for uint256 encoding: {index!r}",
            code=ErrorCodes.INDEX_OUT_OF_RANGE,
            field_path="index",
            details=full_details,
        )


class InvalidUriException(ValidationException):
    """Exception raised when a URI is empty or not a string."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        super().__init__(
            message=message,
            code=ErrorCodes.INVALID_URI,
            field_path="uri",
            details=full_details,
        )


class DuplicateIndexException(ValidationException):
    """Exception raised when two records share an index."""

    def __init__(self, indices: list[int], details: dict[str, Any] | None = None) -> None:
        full_details = details or {}
        full_details["duplicates"] = sorted(indices)
        super().__init__(
            message=f"Duplicate record indices: {sorted(indices)}",
            code=ErrorCodes.DUPLICATE_INDEX,
            field_path="index",
            details=full_details,
        )
        self.indices = sorted(indices)


class UnknownIndexException(ValidationException):
    """Exception raised when a proof is requested for an index not in the tree."""

    def __init__(self, index: int, details: dict[str, Any] | None = None) -> None:
        full_details = details or {}
        full_details["index"] = index
        super().__init__(
            message=f"Index {index} is not part of the committed record set",
            code=ErrorCodes.UNKNOWN_INDEX,
            field_path="index",
            details=full_details,
        )
        self.index = index


class EncodingException(UriMerkleException):
    """Exception raised when URI bytes are not valid UTF-8."""

    def __init__(
        self,
        message: str,
        index: int | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if index is not None:
            full_details["index"] = index
        super().__init__(
            message=message,
            code=ErrorCodes.ENCODING_ERROR,
            details=full_details,
            retryable=False,
        )


class CanonicalizationException(UriMerkleException):
    """Exception raised when canonical serialization fails."""

    def __init__(
        self,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=ErrorCodes.CANONICALIZATION_ERROR,
            details=details,
            retryable=False,
        )


class TreeIntegrityException(UriMerkleException):
    """Exception raised when the tree cannot be built or fails its self-check."""

    def __init__(
        self,
        message: str,
        code: str = ErrorCodes.TREE_INTEGRITY_ERROR,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            message=message,
            code=code,
            details=details,
            retryable=False,
        )


class EmptyInputException(TreeIntegrityException):
    """Exception raised when a tree is requested over zero records."""

    def __init__(self, message: str = "Cannot build a Merkle tree from an empty record set") -> None:
        super().__init__(message=message, code=ErrorCodes.EMPTY_INPUT)


class ProofVerificationException(TreeIntegrityException):
    """Exception raised when any generated proof fails against the computed root."""

    def __init__(
        self,
        failed_indices: list[int],
        root: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        full_details["failed_indices"] = sorted(failed_indices)
        if root is not None:
            full_details["root"] = root
        first = min(failed_indices) if failed_indices else None
        super().__init__(
            message=(
                f"{len(failed_indices)} proof verification error(s); "
                f"first failing index: {first}"
            ),
            code=ErrorCodes.PROOF_VERIFICATION_FAILED,
            details=full_details,
        )
        self.failed_indices = sorted(failed_indices)


class ExportException(UriMerkleException):
    """Exception raised when an artifact cannot be written or read."""

    def __init__(
        self,
        message: str,
        path: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        full_details = details or {}
        if path:
            full_details["path"] = path
        super().__init__(
            message=message,
            code=ErrorCodes.EXPORT_ERROR,
            details=full_details,
            retryable=True,
        )
