"""
Module 02 - Hashing Utilities
Keccak-256 hashing and hex helpers for Merkle commitments.

Owner: Protocol/Crypto Engineer
Module ID: M02

This module provides:
- Keccak-256 hashing for raw bytes (the EVM `keccak256` primitive)
- Sorted-pair hashing for Merkle parents
- Hex encoding/decoding with 0x prefix
- SHA-256 file digests for artifact manifests

Security/Determinism Notes:
- Keccak-256 here is the original Keccak padding used by Solidity,
  NOT the NIST SHA3-256 from hashlib. The two differ on every input.
- Always hash raw bytes exactly as specified
- All operations are deterministic
"""
from __future__ import annotations

import hashlib

from eth_utils import keccak


# Width of every node hash in the tree
HASH_SIZE: int = 32


def keccak256(data: bytes) -> bytes:
    """
    Compute Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest

    Example:
        >>> keccak256(b"").hex()
        'c5d2460186f7233c927e7db2dcc703c0e500b653ca82273b7bfad8045d85a470'
    """
    return keccak(primitive=data)


def hash_bytes(data: bytes) -> bytes:
    """
    Alias for keccak256() - compute Keccak-256 hash of raw bytes.

    Args:
        data: Raw bytes to hash

    Returns:
        32-byte Keccak-256 digest
    """
    return keccak256(data)


def hash_concat(left: bytes, right: bytes) -> bytes:
    """
    Hash the concatenation of two byte sequences, in the given order.

    Args:
        left: First operand
        right: Second operand

    Returns:
        32-byte Keccak-256 digest of left || right
    """
    return keccak256(left + right)


def hash_sorted_pair(a: bytes, b: bytes) -> bytes:
    """
    Hash two node hashes in byte-lexicographic order.

    Rule: parent = keccak256(min(a, b) || max(a, b))

    The result does not depend on which operand is "left", so a verifier
    needs no position bits. Equal inputs are simply concatenated.

    Args:
        a: One child hash
        b: The other child hash

    Returns:
        32-byte parent hash
    """
    if a <= b:
        return keccak256(a + b)
    return keccak256(b + a)


def sha256_hex(data: bytes) -> str:
    """
    Compute SHA-256 hex digest of data.

    Used only for artifact file integrity in manifests, never for tree nodes.
    """
    return hashlib.sha256(data).hexdigest()


def to_hex(data: bytes) -> str:
    """
    Convert bytes to hexadecimal string with 0x prefix.

    Args:
        data: Raw bytes

    Returns:
        Hex string with 0x prefix (e.g., "0x1234abcd")

    Example:
        >>> to_hex(bytes.fromhex("deadbeef"))
        '0xdeadbeef'
    """
    return "0x" + data.hex()


def from_hex(hex_string: str) -> bytes:
    """
    Convert hexadecimal string (with 0x prefix) to bytes.

    Args:
        hex_string: Hex string with 0x prefix

    Returns:
        Decoded bytes

    Raises:
        ValueError: If string doesn't start with 0x, has odd length,
                   or contains invalid hex characters

    Example:
        >>> from_hex("0xdeadbeef").hex()
        'deadbeef'
    """
    # Validate 0x prefix
    if not hex_string.startswith("0x"):
        raise ValueError(
            f"Hex string must start with '0x' prefix, got: {hex_string[:10]}..."
        )

    # Remove prefix
    hex_content = hex_string[2:]

    # Validate even length
    if len(hex_content) % 2 != 0:
        raise ValueError(
            f"Hex string must have even length after 0x prefix, "
            f"got length {len(hex_content)}"
        )

    # Decode (will raise ValueError for invalid hex chars)
    try:
        return bytes.fromhex(hex_content)
    except ValueError as e:
        raise ValueError(f"Invalid hex characters in string: {e}") from e


def from_hex32(hex_string: str) -> bytes:
    """
    Decode a 0x-prefixed hex string that must hold exactly one node hash.

    Raises:
        ValueError: If the string is malformed or not 32 bytes long
    """
    data = from_hex(hex_string)
    if len(data) != HASH_SIZE:
        raise ValueError(
            f"Expected a {HASH_SIZE}-byte hash, got {len(data)} bytes"
        )
    return data


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
