"""Tests for the TOON text codec."""

import pytest
from decimal import Decimal
from toon_codec.codec.text import TextCodec
from toon_codec.types import DecodeError, EncodeError, ErrorType


class TestTextEncoding:
    """Tests for the text printer."""

    def setup_method(self):
        """Set up test fixtures."""
        self.codec = TextCodec()

    def test_encode_scalars(self):
        """Test encoding of top-level scalars."""
        assert self.codec.encode(None) == b"null"
        assert self.codec.encode(True) == b"true"
        assert self.codec.encode(False) == b"false"
        assert self.codec.encode(42) == b"42"
        assert self.codec.encode(-3.5) == b"-3.5"
        assert self.codec.encode("hello") == b"hello"

    def test_encode_empty_containers(self):
        """Test that empty containers stay on one line."""
        assert self.codec.encode([]) == b"[]"
        assert self.codec.encode({}) == b"{}"

    def test_encode_nested_layout(self):
        """Test one element per line with sorted keys."""
        value = {"b": [1, "x"], "a": {}}
        expected = (
            "{\n"
            "  a: {},\n"
            "  b: [\n"
            "    1,\n"
            "    x\n"
            "  ]\n"
            "}"
        )
        assert self.codec.encode(value).decode("utf-8") == expected

    def test_encode_custom_indent(self):
        """Test indentation width."""
        assert TextCodec(indent=4).encode({"a": 1}) == b"{\n    a: 1\n}"
        assert TextCodec(indent=0).encode([1, 2]) == b"[\n1,\n2\n]"

    def test_keys_sorted_regardless_of_insertion_order(self):
        """Test deterministic key order."""
        first = self.codec.encode({"z": 1, "a": 2, "m": 3})
        second = self.codec.encode({"m": 3, "z": 1, "a": 2})
        assert first == second
        assert first == b"{\n  a: 2,\n  m: 3,\n  z: 1\n}"

    @pytest.mark.parametrize("text", [
        "", "true", "false", "null", "123", "-1.5", "1e5", "-",
        "a b", "x:y", "a,b", "{}", "[]", 'say "hi"', "tab\there", " lead",
    ])
    def test_strings_that_need_quotes(self, text):
        """Test strings that would otherwise be misread."""
        assert TextCodec.needs_quotes(text)
        assert TextCodec.format_string(text).startswith('"')

    @pytest.mark.parametrize("text", [
        "hello", "Alice", "e5", "nullable", "truely", "a-b", "snake_case", "café",
    ])
    def test_strings_left_bare(self, text):
        """Test that plain strings are written without quotes."""
        assert not TextCodec.needs_quotes(text)
        assert TextCodec.format_string(text) == text

    def test_escapes(self):
        """Test escaping inside quoted strings."""
        assert TextCodec.format_string('a "b"') == '"a \\"b\\""'
        assert TextCodec.format_string("line\nbreak") == '"line\\nbreak"'
        assert TextCodec.format_string("back\\ slash") == '"back\\\\ slash"'
        assert TextCodec.format_string("\r\t") == '"\\r\\t"'
        assert TextCodec.format_string("bell \x07") == '"bell \\u0007"'

    def test_quoted_keys(self):
        """Test that keys follow the string quoting rule."""
        encoded = self.codec.encode({"true": 1, "a b": 2, "": 3})
        assert encoded == b'{\n  "": 3,\n  "a b": 2,\n  "true": 1\n}'

    def test_string_true_is_distinct_from_boolean(self):
        """Test that the string 'true' is quoted and the boolean is not."""
        assert self.codec.encode("true") == b'"true"'
        assert self.codec.encode(True) == b"true"

    def test_non_finite_number_rejected(self):
        """Test that NaN and infinity cannot be encoded."""
        with pytest.raises(EncodeError) as exc_info:
            self.codec.encode([float("nan")])
        assert exc_info.value.error_type == ErrorType.UNSUPPORTED_VALUE

        with pytest.raises(EncodeError):
            self.codec.encode(float("inf"))

    def test_lone_surrogate_rejected(self):
        """Test that strings not encodable as UTF-8 are rejected."""
        with pytest.raises(EncodeError) as exc_info:
            self.codec.encode("\ud800")
        assert exc_info.value.error_type == ErrorType.UNSUPPORTED_VALUE


class TestTextDecoding:
    """Tests for the text parser."""

    def setup_method(self):
        """Set up test fixtures."""
        self.codec = TextCodec()

    def test_decode_scalars(self):
        """Test decoding of top-level scalars."""
        assert self.codec.decode(b"null") is None
        assert self.codec.decode(b"true") is True
        assert self.codec.decode(b"false") is False
        assert self.codec.decode(b"42") == 42
        assert isinstance(self.codec.decode(b"42"), int)
        assert self.codec.decode(b"-3.5") == -3.5
        assert self.codec.decode(b"hello") == "hello"

    def test_decode_numbers_as_decimal(self):
        """Test Decimal decoding of fractional numbers."""
        codec = TextCodec(use_decimal=True)
        assert codec.decode(b"0.1") == Decimal("0.1")
        assert codec.decode(b"7") == 7

    def test_decode_nested_document(self):
        """Test decoding of an indented document."""
        text = b"{\n  a: {},\n  b: [\n    1,\n    x\n  ]\n}"
        assert self.codec.decode(text) == {"a": {}, "b": [1, "x"]}

    def test_decode_json_input(self):
        """Test that JSON documents are accepted."""
        text = b'{"name": "Alice", "tags": ["a", "b"], "n": null}'
        assert self.codec.decode(text) == {"n": None, "name": "Alice", "tags": ["a", "b"]}

    def test_decoded_keys_are_sorted(self):
        """Test that decoded objects come back in sorted key order."""
        value = self.codec.decode(b"{z: 1, a: 2}")
        assert list(value) == ["a", "z"]

    def test_quoted_keyword_stays_string(self):
        """Test that quoted keywords decode as strings."""
        assert self.codec.decode(b'"true"') == "true"
        assert self.codec.decode(b'"null"') == "null"
        assert self.codec.decode(b'"123"') == "123"

    @pytest.mark.parametrize("text,expected", [
        (b"nullable", "nullable"),
        (b"truely", "truely"),
        (b"1abc", "1abc"),
        (b"1.2.3", "1.2.3"),
        (b"+1", "+1"),
        (b"01", "01"),
        (b"-", "-"),
    ])
    def test_bare_token_falls_back_to_string(self, text, expected):
        """Test that tokens which are not keywords or numbers read as strings."""
        assert self.codec.decode(text) == expected

    def test_keyword_at_boundary(self):
        """Test keywords directly followed by structural characters."""
        assert self.codec.decode(b"[true,false,null]") == [True, False, None]
        assert self.codec.decode(b"{a:true}") == {"a": True}

    def test_unicode_escapes(self):
        """Test \\u escapes, including surrogate pairs."""
        assert self.codec.decode(b'"\\u00e9"') == "é"
        assert self.codec.decode(b'"\\ud83d\\ude00"') == "\U0001F600"

    def test_unpaired_surrogate_rejected(self):
        """Test that a lone surrogate escape is a parse error."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b'"\\ud83d"')
        assert exc_info.value.error_type == ErrorType.PARSE

    def test_invalid_escape(self):
        """Test that unknown escapes are rejected."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b'"\\q"')
        assert exc_info.value.error_type == ErrorType.PARSE

    def test_unterminated_string(self):
        """Test unterminated string detection."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b'"abc')
        assert exc_info.value.error_type == ErrorType.PARSE
        assert exc_info.value.offset == 0

    @pytest.mark.parametrize("text", [
        b"{a: 1", b"[1, 2", b"{a 1}", b"[1 2]", b"{a: 1 b: 2}", b"[", b"{",
    ])
    def test_malformed_containers(self, text):
        """Test parse errors for malformed containers."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(text)
        assert exc_info.value.error_type == ErrorType.PARSE

    def test_missing_colon_reports_key(self):
        """Test that a missing colon names the key."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b"{name 1}")
        assert exc_info.value.context["key"] == "name"

    def test_trailing_content_rejected(self):
        """Test that content after the root value is an error."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b"[1] [2]")
        assert exc_info.value.error_type == ErrorType.PARSE
        assert exc_info.value.offset == 4

    def test_surrounding_whitespace_ignored(self):
        """Test whitespace around the root value."""
        assert self.codec.decode(b"  \n 5 \n") == 5

    def test_empty_input(self):
        """Test empty input detection."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b"")
        assert exc_info.value.error_type == ErrorType.EMPTY_INPUT

    def test_invalid_utf8(self):
        """Test invalid UTF-8 detection."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b'"ab\xff"')
        assert exc_info.value.error_type == ErrorType.INVALID_UTF8
        assert exc_info.value.offset == 3

    def test_round_trip_document(self, sample_document):
        """Test that a mixed document survives encode and decode."""
        assert self.codec.decode(self.codec.encode(sample_document)) == sample_document

    def test_round_trip_awkward_strings(self):
        """Test strings that exercise every quoting path."""
        value = ["", "true", "123", "-", "a b", "x:y", "{", "]", "\x00", "\x85",
                 "line\nbreak", "quote\"", "\U0001F600", "nullable", "# x"]
        assert self.codec.decode(self.codec.encode(value)) == value


class TestTextTabularBlocks:
    """Tests for reading hand-written tabular blocks."""

    def setup_method(self):
        """Set up test fixtures."""
        self.codec = TextCodec()

    def test_quoted_header_and_nested_cells(self):
        """Test quoted column names and embedded JSON cells."""
        data = (b'[\n  # "first name", tags, meta\n'
                b'  "Ann Lee", ["a", "b"], {"y": 2, "x": 1},\n'
                b'  Bob, [], {}\n]')
        assert self.codec.decode(data) == [
            {"first name": "Ann Lee", "meta": {"x": 1, "y": 2}, "tags": ["a", "b"]},
            {"first name": "Bob", "meta": {}, "tags": []},
        ]

    def test_rows_come_back_key_sorted(self):
        """Test that row objects are sorted regardless of column order."""
        decoded = self.codec.decode(b"[\n  # b, a\n  1, 2\n]")
        assert list(decoded[0]) == ["a", "b"]

    def test_decimal_cells(self):
        """Test Decimal decoding of scalar and embedded cells."""
        decoded = TextCodec(use_decimal=True).decode(b"[\n  # a, b\n  0.1, [0.2]\n]")
        assert decoded == [{"a": Decimal("0.1"), "b": [Decimal("0.2")]}]

    def test_long_integer_in_embedded_cell(self):
        """Test a digit run beyond the str conversion limit inside a cell."""
        data = b"[\n  # a\n  [" + b"7" * 5000 + b"]\n]"
        assert self.codec.decode(data) == [{"a": [(10 ** 5000 - 1) // 9 * 7]}]

    def test_decoder_reused_across_documents(self):
        """Test that one codec decodes many tabular documents."""
        for count in range(1, 4):
            rows = b",\n".join(b"  [%d]" % index for index in range(count))
            decoded = self.codec.decode(b"[\n  # a\n" + rows + b"\n]")
            assert decoded == [{"a": [index]} for index in range(count)]

    def test_header_without_line_end(self):
        """Test a header whose keys are not comma separated."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b"[\n  # a b\n  1\n]")
        assert exc_info.value.error_type == ErrorType.PARSE

    def test_missing_row_separator(self):
        """Test two rows without a comma between them."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b"[\n  # a\n  1\n  2\n]")
        assert exc_info.value.error_type == ErrorType.PARSE

    def test_malformed_embedded_cell_offset(self):
        """Test that a bad embedded cell reports where it failed."""
        with pytest.raises(DecodeError) as exc_info:
            self.codec.decode(b'[\n  # a\n  {"x" 1}\n]')
        assert exc_info.value.error_type == ErrorType.PARSE
        assert exc_info.value.offset == 15
