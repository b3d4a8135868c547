"""
Module 01 - Schemas & Canonicalization
File: records.py

Purpose: The (index, uri) record that every leaf commits to, plus the
validation rules shared by the leaf codec and the input loaders.

Invariants:
- index is a non-negative integer that fits a uint256 field
- uri is a non-empty string that encodes to UTF-8 strictly
- indices are unique across a record set (enforced by the tree builder)
"""

from __future__ import annotations

import re
from typing import Any, Iterable, Mapping

from pydantic import BaseModel, ConfigDict, Field

from .errors import (
    EncodingException,
    IndexOutOfRangeException,
    InvalidUriException,
    ValidationException,
)


# Fixed width of the index field inside a leaf preimage
INDEX_WIDTH_BYTES: int = 32
MAX_INDEX: int = 2 ** (8 * INDEX_WIDTH_BYTES) - 1

# Canonical decimal form for mapping keys: no sign, no leading zeros
_INDEX_KEY_RE = re.compile(r"0|[1-9][0-9]*")


def validate_index(index: Any) -> int:
    """
    Check that index fits the fixed-width unsigned field.

    Raises:
        IndexOutOfRangeException: If index is not an int, is a bool,
            is negative, or exceeds MAX_INDEX.
    """
    if isinstance(index, bool) or not isinstance(index, int):
        raise IndexOutOfRangeException(index, details={"type": type(index).__name__})
    if index < 0 or index > MAX_INDEX:
        raise IndexOutOfRangeException(index)
    return index


def uri_to_bytes(uri: Any, index: int | None = None) -> bytes:
    """
    Return the raw UTF-8 bytes of a URI, validating it on the way.

    Accepts str, or bytes that must already be valid UTF-8.

    Raises:
        InvalidUriException: If uri is empty or of the wrong type.
        EncodingException: If uri is not valid UTF-8 (bytes that fail to
            decode, or a str holding lone surrogates).
    """
    if isinstance(uri, (bytes, bytearray)):
        raw = bytes(uri)
        try:
            raw.decode("utf-8", errors="strict")
        except UnicodeDecodeError as e:
            raise EncodingException(
                f"URI bytes are not valid UTF-8: {e.reason}",
                index=index,
                details={"position": e.start},
            ) from e
    elif isinstance(uri, str):
        try:
            raw = uri.encode("utf-8", errors="strict")
        except UnicodeEncodeError as e:
            raise EncodingException(
                f"URI cannot be encoded as UTF-8: {e.reason}",
                index=index,
                details={"position": e.start},
            ) from e
    else:
        raise InvalidUriException(
            f"URI must be a string, got {type(uri).__name__}",
            index=index,
        )

    if not raw:
        raise InvalidUriException("URI must not be empty", index=index)
    return raw


def parse_index_key(key: Any) -> int:
    """
    Parse a mapping key into an index.

    JSON object keys are strings, so "7" is accepted; "07", "-1", "1.0"
    and " 7" are rejected to keep exactly one spelling per index.
    """
    if isinstance(key, int) and not isinstance(key, bool):
        return validate_index(key)
    if isinstance(key, str) and _INDEX_KEY_RE.fullmatch(key):
        return validate_index(int(key))
    raise ValidationException(
        f"Mapping key is not a canonical non-negative integer: {key!r}",
        field_path="index",
        details={"key": str(key)},
    )


class Record(BaseModel):
    """
    One committed (index, uri) pair.

    Construct through Record.create() to get the project's exception types
    on bad input; direct construction still enforces the same bounds through
    pydantic.
    """

    model_config = ConfigDict(extra="forbid", frozen=True)

    index: int = Field(..., ge=0, le=MAX_INDEX, strict=True)
    uri: str = Field(..., min_length=1)

    @classmethod
    def create(cls, index: Any, uri: Any) -> "Record":
        """Validate and build a record, raising ValidationException/EncodingException."""
        idx = validate_index(index)
        raw = uri_to_bytes(uri, index=idx)
        return cls(index=idx, uri=raw.decode("utf-8"))

    @property
    def uri_bytes(self) -> bytes:
        return self.uri.encode("utf-8")


def records_from_mapping(mapping: Mapping[Any, Any]) -> list[Record]:
    """
    Build records from an index -> uri mapping.

    Keys may be ints or canonical decimal strings. The result is sorted by
    index.
    """
    records = [Record.create(parse_index_key(k), v) for k, v in mapping.items()]
    records.sort(key=lambda r: r.index)
    return records


def records_from_items(items: Iterable[Mapping[str, Any]]) -> list[Record]:
    """
    Build records from a sequence of {"index": ..., "uri": ...} objects.

    Order is preserved; duplicate detection is left to the tree builder so
    that all duplicates are reported together.
    """
    records: list[Record] = []
    for position, item in enumerate(items):
        if not isinstance(item, Mapping) or "index" not in item or "uri" not in item:
            raise ValidationException(
                f"Record at position {position} must be an object with 'index' and 'uri'",
                details={"position": position},
            )
        records.append(Record.create(item["index"], item["uri"]))
    return records


__all__ = [
    "INDEX_WIDTH_BYTES",
    "MAX_INDEX",
    "Record",
    "validate_index",
    "uri_to_bytes",
    "parse_index_key",
    "records_from_mapping",
    "records_from_items",
]
