"""Tests for the compact binary TOON codec."""

import pytest
import struct
from decimal import Decimal
from toon_codec.codec.compact import (
    COMPACT_MAGIC,
    BinaryReader,
    BinaryWriter,
    CompactCodec,
    check_magic,
)
from toon_codec.types import DecodeError, EncodeError, ErrorType


def u32(value):
    return struct.pack("<I", value)


class TestCompactEncoding:
    """Tests for the compact encoder."""

    def setup_method(self):
        """Set up test fixtures."""
        self.codec = CompactCodec()

    def test_scalar_tags(self):
        """Test the tag byte written for each scalar."""
        assert self.codec.encode(None) == COMPACT_MAGIC + b"\x00"
        assert self.codec.encode(False) == COMPACT_MAGIC + b"\x01"
        assert self.codec.encode(True) == COMPACT_MAGIC + b"\x02"
        assert self.codec.encode(12) == COMPACT_MAGIC + b"\x03" + u32(2) + b"12"
        assert self.codec.encode("hi") == COMPACT_MAGIC + b"\x04" + u32(2) + b"hi"

    def test_array_layout(self):
        """Test array tag, element count and elements in order."""
        encoded = self.codec.encode([True, None])
        assert encoded == COMPACT_MAGIC + b"\x05" + u32(2) + b"\x02\x00"

    def test_object_layout_sorted_keys(self):
        """Test object tag, member count and sorted members."""
        encoded = self.codec.encode({"b": None, "a": True})
        expected = (COMPACT_MAGIC + b"\x06" + u32(2)
                    + u32(1) + b"a" + b"\x02"
                    + u32(1) + b"b" + b"\x00")
        assert encoded == expected

    def test_number_text_is_canonical(self):
        """Test that numbers travel as canonical decimal text."""
        assert self.codec.encode(0.1).endswith(u32(3) + b"0.1")
        assert self.codec.encode(Decimal("1.50")).endswith(u32(4) + b"1.50")
        assert self.codec.encode(-7).endswith(u32(2) + b"-7")

    def test_utf8_strings(self):
        """Test that string lengths count UTF-8 bytes."""
        encoded = self.codec.encode("é")
        assert encoded == COMPACT_MAGIC + b"\x04" + u32(2) + "é".encode("utf-8")

    def test_non_finite_number_rejected(self):
        """Test that NaN cannot be encoded."""
        with pytest.raises(EncodeError) as exc_info:
            self.codec.encode(float("nan"))
        assert exc_info.value.error_type == ErrorType.UNSUPPORTED_VALUE

    def test_oversized_length_rejected(self):
        """Test the 32-bit length limit."""
        writer = BinaryWriter()
        with pytest.raises(EncodeError) as exc_info:
            writer.write_u32(2 ** 32, "array length")
        assert exc_info.value.error_type == ErrorType.UNSUPPORTED_VALUE
        assert "Array length" in str(exc_info.value)


class TestCompactDecoding:
    """Tests for the compact decoder."""

    def setup_method(self):
        """Set up test fixtures."""
        self.codec = CompactCodec()

    def test_round_trip_document(self, sample_document):
        """Test that a mixed document survives encode and decode."""
        assert self.codec.decode(self.codec.encode(sample_document)) == sample_document

    def test_round_trip_boundary_values(self, boundary_values):
        """Test scalars and empty containers."""
        for value in boundary_values:
            assert self.codec.decode(self.codec.encode(value)) == value

    def test_integer_and_fractional_types(self):
        """Test decoded number types."""
        assert isinstance(self.codec.decode(self.codec.encode(5)), int)
        assert isinstance(self.codec.decode(self.codec.encode(5.0)), float)
        decimal_codec = CompactCodec(use_decimal=True)
        assert decimal_codec.decode(self.codec.encode(0.1)) == Decimal("0.1")

    def test_big_integer_preserved(self):
        """Test integers beyond 64 bits."""
        value = 2 ** 100 + 1
        assert self.codec.decode(self.codec.encode(value)) == value

    def test_truncation_at_every_offset(self):
        """Test that every proper prefix reports truncation."""
        encoded = self.codec.encode({"a": [1, "x", None, True], "b": {"c": 2.5}})
        for cut in range(1, len(encoded)):
            with pytest.raises(DecodeError) as exc_info:
                self.codec.decode(encoded[:cut])
            assert exc_info.value.error_type == ErrorType.TRUNCATED_BINARY, cut

    def test_invalid_magic(self):
        """Test a header that does not match."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b"JSON\x01\x00")
        assert exc_info.value.error_type == ErrorType.INVALID_MAGIC
        assert exc_info.value.offset == 0

    def test_wrong_version_byte(self):
        """Test a magic with an unknown version."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b"TOON\x02\x00")
        assert exc_info.value.error_type == ErrorType.INVALID_MAGIC

    def test_unknown_tag(self):
        """Test an out-of-range type tag."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(COMPACT_MAGIC + b"\x05" + u32(1) + b"\x09")
        assert exc_info.value.error_type == ErrorType.UNKNOWN_TAG
        assert exc_info.value.context["tag"] == 9
        assert exc_info.value.offset == 10

    def test_invalid_utf8_string(self):
        """Test a string payload that is not UTF-8."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(COMPACT_MAGIC + b"\x04" + u32(2) + b"a\xff")
        assert exc_info.value.error_type == ErrorType.INVALID_UTF8
        assert exc_info.value.offset == 11

    def test_invalid_utf8_key(self):
        """Test an object key that is not UTF-8."""
        data = COMPACT_MAGIC + b"\x06" + u32(1) + u32(1) + b"\xfe" + b"\x00"
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(data)
        assert exc_info.value.error_type == ErrorType.INVALID_UTF8

    @pytest.mark.parametrize("text", [b"abc", b"1.", b"NaN", b"01", b"", b"1e999"])
    def test_invalid_number_text(self, text):
        """Test number payloads that are not valid decimal text."""
        data = COMPACT_MAGIC + b"\x03" + u32(len(text)) + text
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(data)
        assert exc_info.value.error_type == ErrorType.INVALID_NUMBER_TEXT

    def test_trailing_bytes_rejected(self):
        """Test bytes after the root value."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(self.codec.encode(None) + b"\x00")
        assert exc_info.value.error_type == ErrorType.PARSE
        assert exc_info.value.offset == 6

    def test_decoded_keys_are_sorted(self):
        """Test that members written out of order come back sorted."""
        data = (COMPACT_MAGIC + b"\x06" + u32(2)
                + u32(1) + b"z" + b"\x00"
                + u32(1) + b"a" + b"\x00")
        assert list(self.codec.decode(data)) == ["a", "z"]


class TestBinaryPrimitives:
    """Tests for the header check and reader helpers."""

    def test_check_magic_returns_header_length(self):
        """Test a matching header."""
        assert check_magic(COMPACT_MAGIC + b"\x00", COMPACT_MAGIC) == len(COMPACT_MAGIC)

    def test_check_magic_partial_header(self):
        """Test a buffer ending inside the header."""
        with pytest.raises(DecodeError) as exc_info:
            check_magic(b"TOO", COMPACT_MAGIC)
        assert exc_info.value.error_type == ErrorType.TRUNCATED_BINARY

    def test_reader_tracks_position(self):
        """Test reading primitives in sequence."""
        reader = BinaryReader(b"\x07" + u32(3) + b"abc")
        assert reader.read_tag() == 7
        assert reader.read_str() == "abc"
        assert reader.remaining == 0

    def test_reader_truncated_length(self):
        """Test a length field cut short."""
        reader = BinaryReader(b"\x01\x00")
        with pytest.raises(DecodeError) as exc_info:
            reader.read_u32()
        assert exc_info.value.error_type == ErrorType.TRUNCATED_BINARY
        assert exc_info.value.offset == 0
