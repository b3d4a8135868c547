"""
Module 02 - Leaf Codec
Canonical leaf hash for one (index, uri) record.

Owner: Protocol/Crypto Engineer
Module ID: M02

Canonical Leaf Rule (Hard Contract):
    leaf = keccak256(uint256_be(index) || utf8(uri))

This is Solidity's keccak256(abi.encodePacked(uint256 index, string uri)).
There is no delimiter between the two fields; the encoding is unambiguous
only because the index field is always exactly 32 bytes wide. Any future
format revision must keep the fixed width or add an explicit delimiter.
"""
from __future__ import annotations

from typing import Any

from core.crypto.hashing import keccak256
from core.schemas.records import (
    INDEX_WIDTH_BYTES,
    Record,
    uri_to_bytes,
    validate_index,
)


def encode_index(index: Any) -> bytes:
    """
    Encode an index as the fixed-width big-endian field.

    Raises:
        IndexOutOfRangeException: If index does not fit uint256.
    """
    return validate_index(index).to_bytes(INDEX_WIDTH_BYTES, "big")


def leaf_preimage(index: Any, uri: Any) -> bytes:
    """
    Return the exact bytes that get hashed into a leaf.

    Raises:
        IndexOutOfRangeException: If index does not fit uint256.
        InvalidUriException: If uri is empty or not a string/bytes.
        EncodingException: If uri is not valid UTF-8.
    """
    index_bytes = encode_index(index)
    return index_bytes + uri_to_bytes(uri, index=index)


def encode_leaf(index: Any, uri: Any) -> bytes:
    """
    Compute the 32-byte leaf hash for one record.

    Args:
        index: Non-negative integer below 2**256
        uri: Non-empty UTF-8 string (or bytes holding valid UTF-8)

    Returns:
        32-byte Keccak-256 leaf hash

    Raises:
        IndexOutOfRangeException, InvalidUriException, EncodingException
    """
    return keccak256(leaf_preimage(index, uri))


def encode_record(record: Record) -> bytes:
    """Leaf hash of a validated Record."""
    return encode_leaf(record.index, record.uri)


__all__ = [
    "encode_index",
    "leaf_preimage",
    "encode_leaf",
    "encode_record",
]
