"""
Test fixtures package for urimerkle tests.

This package provides factory functions for creating test objects:
- common.py: Record, mapping and commitment factories

Usage:
    from fixtures.common import make_records, make_commitment

    def test_something():
        commitment = make_commitment(make_records(7))
"""

from .common import (
    FIXED_GENERATED_AT,
    make_uri,
    make_records,
    make_mapping,
    make_example_records,
    make_config,
    make_commitment,
    write_mapping_file,
)

__all__ = [
    "FIXED_GENERATED_AT",
    "make_uri",
    "make_records",
    "make_mapping",
    "make_example_records",
    "make_config",
    "make_commitment",
    "write_mapping_file",
]
