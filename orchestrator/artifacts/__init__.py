"""
Module 09B - Artifact Export & IO

Provides functionality for exporting, loading, and re-verifying
commitment directories.
"""

from orchestrator.artifacts.manifest import (
    FORMAT_VERSION,
    REQUIRED_FILES,
    OPTIONAL_FILES,
    ALL_ARTIFACT_FILES,
    ManifestFileEntry,
    CommitmentManifest,
)

from orchestrator.artifacts.export import (
    CSV_HEADER,
    build_root_commitment,
    build_full_export,
    render_csv,
    parse_csv,
)

from orchestrator.artifacts.bindings import (
    DEFAULT_SOLIDITY_LIBRARY,
    DEFAULT_SOLIDITY_PRAGMA,
    render_solidity_constants,
    render_typescript_constants,
)

from orchestrator.artifacts.io import (
    MANIFEST_FILE,
    TREE_FILE,
    ROOT_FILE,
    CSV_FILE,
    TYPESCRIPT_FILE,
    dump_json,
    load_mapping_file,
    solidity_file_name,
    save_commitment,
    load_manifest,
    load_commitment_export,
    load_root_commitment,
)

from orchestrator.artifacts.validate import (
    validate_export_files,
    verify_export,
    check_root_consistency,
)

__all__ = [
    # Manifest
    "FORMAT_VERSION",
    "REQUIRED_FILES",
    "OPTIONAL_FILES",
    "ALL_ARTIFACT_FILES",
    "ManifestFileEntry",
    "CommitmentManifest",
    # Wire shapes
    "CSV_HEADER",
    "build_root_commitment",
    "build_full_export",
    "render_csv",
    "parse_csv",
    # Bindings
    "DEFAULT_SOLIDITY_LIBRARY",
    "DEFAULT_SOLIDITY_PRAGMA",
    "render_solidity_constants",
    "render_typescript_constants",
    # IO
    "MANIFEST_FILE",
    "TREE_FILE",
    "ROOT_FILE",
    "CSV_FILE",
    "TYPESCRIPT_FILE",
    "dump_json",
    "load_mapping_file",
    "solidity_file_name",
    "save_commitment",
    "load_manifest",
    "load_commitment_export",
    "load_root_commitment",
    # Validation
    "validate_export_files",
    "verify_export",
    "check_root_consistency",
]
