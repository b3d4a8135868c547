"""
Core cryptographic utilities.

Module 02 provides Keccak-256 hashing and hex helpers.
"""
from .hashing import (
    HASH_SIZE,
    keccak256,
    hash_bytes,
    hash_concat,
    hash_sorted_pair,
    sha256_hex,
    to_hex,
    from_hex,
    from_hex32,
)

__all__ = [
    "HASH_SIZE",
    "keccak256",
    "hash_bytes",
    "hash_concat",
    "hash_sorted_pair",
    "sha256_hex",
    "to_hex",
    "from_hex",
    "from_hex32",
]
