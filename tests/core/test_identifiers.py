"""
Tests for identifier derivation and null references.
"""

import pytest

from protected_options.core.identifiers import (
    OPTION_TAG,
    STOP_LOSS_TAG,
    ZERO_ADDRESS,
    ZERO_ID,
    derive_id,
    id_from_bytes,
    id_to_bytes,
    is_null,
    label_id,
)
from tests.fixtures.protocol_fixtures import START_TIME, USER1, USER2


class TestDeriveId:
    """Tests for content-derived identifiers."""

    def test_format(self):
        """Identifiers are 0x-prefixed 32-byte hex strings."""
        identifier = derive_id(USER1, START_TIME, 0)

        assert identifier.startswith("0x")
        assert len(identifier) == 66
        int(identifier, 16)

    def test_deterministic(self):
        assert derive_id(USER1, START_TIME, 0) == derive_id(USER1, START_TIME, 0)

    def test_each_field_matters(self):
        """Maker, timestamp and counter all feed the identifier."""
        base = derive_id(USER1, START_TIME, 0)

        assert derive_id(USER2, START_TIME, 0) != base
        assert derive_id(USER1, START_TIME + 1, 0) != base
        assert derive_id(USER1, START_TIME, 1) != base

    def test_parts_are_length_prefixed(self):
        assert derive_id("ab", "c") != derive_id("a", "bc")

    def test_domain_tags_separate_linked_ids(self):
        position_id = derive_id(USER1, START_TIME, 0)

        assert derive_id(position_id, OPTION_TAG) != derive_id(position_id, STOP_LOSS_TAG)

    def test_label_id(self):
        assert label_id("option-1") == label_id("option-1")
        assert label_id("option-1") != label_id("option-2")


class TestIdBytes:
    """Tests for identifier <-> bytes conversion."""

    def test_round_trip(self):
        identifier = label_id("position")

        raw = id_to_bytes(identifier)

        assert len(raw) == 32
        assert id_from_bytes(raw) == identifier

    def test_zero_id(self):
        assert id_to_bytes(ZERO_ID) == bytes(32)

    def test_missing_prefix_rejected(self):
        with pytest.raises(ValueError, match="0x-prefixed"):
            id_to_bytes("ab" * 32)

    def test_wrong_length_rejected(self):
        with pytest.raises(ValueError, match="32 bytes"):
            id_to_bytes("0x" + "ab" * 31)

        with pytest.raises(ValueError, match="32 bytes"):
            id_from_bytes(bytes(31))


class TestIsNull:
    """Tests for null reference detection."""

    @pytest.mark.parametrize("reference", [None, "", "   ", ZERO_ADDRESS, ZERO_ADDRESS.upper()])
    def test_null_references(self, reference):
        assert is_null(reference) is True

    def test_account_is_not_null(self):
        assert is_null(USER1) is False

    def test_objects_are_not_null(self):
        """Oracle objects are references, never null."""
        assert is_null(object()) is False
