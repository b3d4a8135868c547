"""
Module 01 - Schemas & Canonicalization
File: tests/unit/test_canonical_json.py

Purpose: Unit tests for canonical JSON serialization and the commitment
wire models. These tests ensure deterministic serialization across runs.
"""

import json
import math
from datetime import datetime, timezone, timedelta
from enum import Enum

import pytest
from pydantic import ValidationError

from core.schemas import (
    CanonicalizationException,
    CommitmentExport,
    LeafEntry,
    RootCommitment,
    canonical_equals,
    canonicalize_value,
    dumps_canonical,
    ensure_utc,
    format_datetime_canonical,
    parse_datetime_canonical,
)


HASH_A = "0x" + "aa" * 32
HASH_B = "0x" + "bb" * 32


class SampleEnum(Enum):
    """Sample enum for testing."""
    OPTION_A = "option_a"


class TestDumpsCanonical:
    """Tests for dumps_canonical()."""

    def test_sorted_keys_no_whitespace(self):
        """Keys are sorted and separators are compact."""
        assert dumps_canonical({"b": 1, "a": 2}) == '{"a":2,"b":1}'

    def test_key_order_independent(self):
        """Insertion order does not change the output."""
        assert dumps_canonical({"x": 1, "y": 2}) == dumps_canonical({"y": 2, "x": 1})

    def test_none_dropped(self):
        """None-valued keys are omitted."""
        assert dumps_canonical({"a": None, "b": 1}) == '{"b":1}'

    def test_bytes_as_hex(self):
        """Bytes serialize as 0x-prefixed lowercase hex."""
        assert dumps_canonical({"h": b"\xab\x01"}) == '{"h":"0xab01"}'

    def test_int_keys_become_strings(self):
        """Integer dict keys serialize as decimal strings."""
        assert dumps_canonical({1: "a"}) == '{"1":"a"}'

    def test_enum_value(self):
        """Enums serialize by value."""
        assert dumps_canonical({"e": SampleEnum.OPTION_A}) == '{"e":"option_a"}'

    def test_non_ascii_kept(self):
        """UTF-8 text is emitted as-is."""
        assert dumps_canonical({"u": "ar://café"}) == '{"u":"ar://café"}'

    @pytest.mark.parametrize("bad", [math.nan, math.inf, -math.inf])
    def test_non_finite_float_rejected(self, bad):
        """NaN/Infinity cannot be canonicalized."""
        with pytest.raises(CanonicalizationException):
            dumps_canonical({"f": bad})

    def test_unsupported_key_type(self):
        """Tuple keys are rejected."""
        with pytest.raises(CanonicalizationException):
            canonicalize_value({(1, 2): "x"})

    def test_unsupported_value_type(self):
        """Arbitrary objects are rejected."""
        with pytest.raises(CanonicalizationException):
            dumps_canonical({"o": object()})

    def test_canonical_equals(self):
        """canonical_equals compares serialized forms."""
        assert canonical_equals({"a": 1, "b": None}, {"a": 1})
        assert not canonical_equals({"a": 1}, {"a": 2})


class TestDatetimeFormatting:
    """Tests for timestamp helpers."""

    def test_millisecond_z_format(self):
        """Matches JavaScript's toISOString shape."""
        dt = datetime(2026, 1, 27, 21, 35, 0, 123456, tzinfo=timezone.utc)

        assert format_datetime_canonical(dt) == "2026-01-27T21:35:00.123Z"

    def test_naive_treated_as_utc(self):
        """Naive datetimes are assumed to be UTC."""
        naive = datetime(2026, 1, 1, 0, 0, 0)

        assert ensure_utc(naive).tzinfo == timezone.utc

    def test_offset_converted(self):
        """Aware datetimes are converted to UTC."""
        dt = datetime(2026, 1, 1, 2, 0, 0, tzinfo=timezone(timedelta(hours=2)))

        assert format_datetime_canonical(dt) == "2026-01-01T00:00:00.000Z"

    def test_parse_round_trip(self):
        """parse_datetime_canonical accepts the Z form."""
        text = "2026-01-27T21:35:00.000Z"

        assert format_datetime_canonical(parse_datetime_canonical(text)) == text


class TestCommitmentModels:
    """Tests for the wire models."""

    def test_root_commitment_aliases(self):
        """Wire names are camelCase."""
        root = RootCommitment(root=HASH_A, total_leaves=3, generated_at="2026-01-27T21:35:00.000Z")

        assert root.to_wire() == {
            "root": HASH_A,
            "totalLeaves": 3,
            "generatedAt": "2026-01-27T21:35:00.000Z",
        }

    def test_root_commitment_from_wire(self):
        """Models load from camelCase JSON."""
        root = RootCommitment.model_validate(
            {"root": HASH_A, "totalLeaves": 1, "generatedAt": "x"}
        )

        assert root.total_leaves == 1

    def test_bad_hash_rejected(self):
        """Hashes must be 0x + 64 hex chars."""
        with pytest.raises(ValidationError):
            LeafEntry(index=0, uri="ar://a", leaf="0x1234")

    def test_zero_leaves_rejected(self):
        """A commitment always has at least one leaf."""
        with pytest.raises(ValidationError):
            RootCommitment(root=HASH_A, total_leaves=0, generated_at="x")

    def test_export_proof_keys_from_json(self):
        """Proof keys arrive as strings in JSON and load as ints."""
        data = json.loads(json.dumps({
            "root": HASH_A,
            "totalLeaves": 1,
            "generatedAt": "x",
            "leaves": [{"index": 0, "uri": "ar://a", "leaf": HASH_B}],
            "proofs": {"0": []},
        }))

        export = CommitmentExport.model_validate(data)

        assert export.proof_for(0) == []
        assert export.leaf_entry(0).leaf == HASH_B
        assert export.leaf_entry(1) is None

    def test_export_canonical_dump(self):
        """Canonical dump of an export is stable and camelCase."""
        export = CommitmentExport(
            root=HASH_A,
            total_leaves=1,
            generated_at="x",
            leaves=[LeafEntry(index=0, uri="ar://a", leaf=HASH_B)],
            proofs={0: []},
        )

        text = dumps_canonical(export)

        assert text == dumps_canonical(export)
        assert '"totalLeaves":1' in text
        assert '"proofs":{"0":[]}' in text
