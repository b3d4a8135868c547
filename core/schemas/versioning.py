"""
Module 01 - Schemas & Canonicalization
File: versioning.py

Purpose: Centralize leaf/tree rule and artifact format version constants.
This file must remain tiny and have no imports from other schema files
to avoid circular dependencies.
"""

# Identifies the leaf + parent hashing rules. Changing ANY rule (index width,
# hash function, pair ordering, odd-node policy) requires a new value here,
# because every previously published root depends on the old rules.
TREE_RULES_VERSION: str = "keccak256-u256be-sortedpair-promote.v1"

# Artifact directory layout (manifest.json + files)
EXPORT_FORMAT_VERSION: str = "commitment.v1"


def parse_format_version(version: str) -> tuple[str, int]:
    """Parse format version string into (prefix, version_number)."""
    if "." not in version:
        return version, 0
    prefix, _, suffix = version.rpartition(".")
    try:
        num = int(suffix.lstrip("v"))
    except ValueError:
        num = 0
    return prefix, num


def is_compatible_format_version(version: str) -> bool:
    """Same prefix required, version must be <= current."""
    prefix, num = parse_format_version(version)
    current_prefix, current_num = parse_format_version(EXPORT_FORMAT_VERSION)
    return prefix == current_prefix and num <= current_num
