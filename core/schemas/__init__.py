"""
Module 01 - Schemas & Canonicalization
File: __init__.py

Purpose: Export the public API for the schemas module.
This is the main entry point for other modules to import schema definitions.
"""

# Version constants
from .versioning import (
    EXPORT_FORMAT_VERSION,
    TREE_RULES_VERSION,
    is_compatible_format_version,
    parse_format_version,
)

# Canonical serialization API
from .canonical import (
    CANONICAL_JSON_SEPARATORS,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    parse_datetime_canonical,
)

# Error models and exceptions
from .errors import (
    CanonicalizationException,
    DuplicateIndexException,
    EmptyInputException,
    EncodingException,
    ErrorCodes,
    ExportException,
    IndexOutOfRangeException,
    InvalidUriException,
    ProofVerificationException,
    TreeIntegrityException,
    UnknownIndexException,
    UriMerkleError,
    UriMerkleException,
    ValidationException,
)

# Records
from .records import (
    INDEX_WIDTH_BYTES,
    MAX_INDEX,
    Record,
    parse_index_key,
    records_from_items,
    records_from_mapping,
    uri_to_bytes,
    validate_index,
)

# Commitment wire shapes
from .commitment import (
    CommitmentExport,
    Hex32,
    IndexLookup,
    LeafEntry,
    RootCommitment,
)

# Verification results
from .verification import (
    CheckResult,
    CheckSeverity,
    VerificationResult,
)


__all__ = [
    # Versioning
    "EXPORT_FORMAT_VERSION",
    "TREE_RULES_VERSION",
    "is_compatible_format_version",
    "parse_format_version",
    # Canonical
    "CANONICAL_JSON_SEPARATORS",
    "canonical_equals",
    "canonicalize_value",
    "dumps_canonical",
    "ensure_utc",
    "format_datetime_canonical",
    "parse_datetime_canonical",
    # Errors
    "CanonicalizationException",
    "DuplicateIndexException",
    "EmptyInputException",
    "EncodingException",
    "ErrorCodes",
    "ExportException",
    "IndexOutOfRangeException",
    "InvalidUriException",
    "ProofVerificationException",
    "TreeIntegrityException",
    "UnknownIndexException",
    "UriMerkleError",
    "UriMerkleException",
    "ValidationException",
    # Records
    "INDEX_WIDTH_BYTES",
    "MAX_INDEX",
    "Record",
    "parse_index_key",
    "records_from_items",
    "records_from_mapping",
    "uri_to_bytes",
    "validate_index",
    # Commitment
    "CommitmentExport",
    "Hex32",
    "IndexLookup",
    "LeafEntry",
    "RootCommitment",
    # Verification
    "CheckResult",
    "CheckSeverity",
    "VerificationResult",
]
