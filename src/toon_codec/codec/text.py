"""Indentation-based TOON text printer and recursive-descent parser."""

import json
import logging
import re
from typing import Any, Dict, List, Optional, Tuple
from ..data_type_detector import DataTypeDetector
from ..types import CodecInterface, DecodeError, EncodeError, ErrorType, ValueKind
from ..utils.embedded_json import EmbeddedJsonUtils
from ..utils.numbers import NumberUtils

KEYWORDS = ("true", "false", "null")
LITERALS = (("true", True), ("false", False), ("null", None))

NUMBER_START = frozenset("0123456789-+")
NUMBER_CHARS = frozenset("0123456789-+.eE")
QUOTE_TRIGGERS = frozenset('":,{}[]')
BOUNDARY_CHARS = frozenset(",}]:")

SIMPLE_ESCAPES = {'"': '\\"', '\\': '\\\\', '\n': '\\n', '\r': '\\r', '\t': '\\t'}
ESCAPE_VALUES = {'"': '"', '\\': '\\', 'n': '\n', 'r': '\r', 't': '\t'}

WHITESPACE = re.compile(r'\s*')
NUMBER_RUN = re.compile(r'[0-9eE.+\-]+')
UNQUOTED_RUN = re.compile(r'[^\s,}\]:]+')
UNQUOTED_KEY_RUN = re.compile(r'[^\s:]+')
STRING_CHUNK = re.compile(r'([^"\\]*)(["\\])', re.DOTALL)
HEX4 = re.compile(r'[0-9a-fA-F]{4}')
HEADER_KEY_RUN = re.compile(r'[^\s,]+')
INLINE_SPACE = re.compile(r'[ \t]*')
LINE_END = re.compile(r'[ \t]*\r?\n')


def _is_control(ch: str) -> bool:
    """Unicode general category Cc."""
    return ch < ' ' or '\x7f' <= ch <= '\x9f'


class TextCodec(CodecInterface):
    """
    Human-readable TOON layout.

    The printer emits one element per line, indented by nesting depth, with
    object keys sorted and strings quoted only when they could otherwise be
    misread. The parser is a recursive descent over a string cursor: each
    step skips whitespace, dispatches on the next character and returns the
    parsed value together with the position of the unconsumed remainder.
    An array whose first token is a '# ' header line is read as a tabular
    block of rows.
    """

    def __init__(self, indent: int = 2, use_decimal: bool = False,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the text codec.

        Args:
            indent: Spaces per nesting level when encoding
            use_decimal: Decode fractional numbers as Decimal instead of float
            logger: Optional logger instance
        """
        self.indent = indent
        self.use_decimal = use_decimal
        self.logger = logger or logging.getLogger(__name__)
        self._cell_decoder = EmbeddedJsonUtils.decoder(use_decimal)

    # Printing

    def encode(self, value: Any) -> bytes:
        """
        Encode a value as TOON text.

        Args:
            value: Value tree to encode

        Returns:
            UTF-8 encoded document
        """
        parts: List[str] = []
        self._encode_value(parts, value, 0)
        text = "".join(parts)
        try:
            return text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodeError(
                f"String is not encodable as UTF-8: {e.reason}",
                ErrorType.UNSUPPORTED_VALUE
            ) from e

    def _encode_value(self, out: List[str], value: Any, depth: int) -> None:
        kind = DataTypeDetector.detect_element_type(value)

        if kind == ValueKind.ARRAY:
            self._encode_array(out, value, depth)
        elif kind == ValueKind.OBJECT:
            self._encode_object(out, value, depth)
        else:
            out.append(self.format_scalar(value))

    def _encode_array(self, out: List[str], items: List[Any], depth: int) -> None:
        if not items:
            out.append("[]")
            return

        pad = " " * ((depth + 1) * self.indent)
        last = len(items) - 1
        out.append("[")
        for index, item in enumerate(items):
            out.append("\n")
            out.append(pad)
            self._encode_value(out, item, depth + 1)
            if index < last:
                out.append(",")
        out.append("\n")
        out.append(" " * (depth * self.indent))
        out.append("]")

    def _encode_object(self, out: List[str], data: Dict[str, Any], depth: int) -> None:
        if not data:
            out.append("{}")
            return

        pad = " " * ((depth + 1) * self.indent)
        keys = sorted(data)
        last = len(keys) - 1
        out.append("{")
        for index, key in enumerate(keys):
            out.append("\n")
            out.append(pad)
            out.append(self.format_string(key))
            out.append(": ")
            self._encode_value(out, data[key], depth + 1)
            if index < last:
                out.append(",")
        out.append("\n")
        out.append(" " * (depth * self.indent))
        out.append("}")

    @classmethod
    def format_scalar(cls, value: Any) -> str:
        """Render a null, bool, number or string as an inline literal."""
        if value is None:
            return "null"
        if isinstance(value, bool):
            return "true" if value else "false"
        if isinstance(value, str):
            return cls.format_string(value)
        try:
            return NumberUtils.to_text(value)
        except ValueError as e:
            raise EncodeError(str(e), ErrorType.UNSUPPORTED_VALUE) from e

    @staticmethod
    def needs_quotes(text: str) -> bool:
        """
        Decide whether a string must be quoted to read back as itself.

        Quoting is required for the empty string, the keywords, anything that
        looks like a number, and strings containing whitespace or structural
        punctuation.
        """
        if not text or text in KEYWORDS:
            return True
        if text[0] in NUMBER_START and all(c in NUMBER_CHARS for c in text):
            return True
        return any(c.isspace() or c in QUOTE_TRIGGERS for c in text)

    @classmethod
    def format_string(cls, text: str) -> str:
        """Render a string or key, quoting and escaping only when required."""
        if not cls.needs_quotes(text):
            return text

        escaped = []
        for ch in text:
            if ch in SIMPLE_ESCAPES:
                escaped.append(SIMPLE_ESCAPES[ch])
            elif _is_control(ch):
                escaped.append(f"\\u{ord(ch):04x}")
            else:
                escaped.append(ch)
        return '"' + "".join(escaped) + '"'

    # Parsing

    def decode(self, data: bytes) -> Any:
        """
        Decode a TOON text document.

        Args:
            data: UTF-8 encoded document

        Returns:
            Decoded value tree with sorted object keys

        Raises:
            DecodeError: If the text is empty, not UTF-8 or malformed
        """
        if not data:
            raise DecodeError("Input is empty", ErrorType.EMPTY_INPUT)

        try:
            text = bytes(data).decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"Invalid UTF-8 in TOON text: {e.reason}",
                ErrorType.INVALID_UTF8,
                offset=e.start
            ) from e

        value, pos = self.parse_value(text, 0)
        pos = self.skip_whitespace(text, pos)
        if pos < len(text):
            raise DecodeError("Unexpected trailing content after root value",
                              ErrorType.PARSE, offset=pos)
        return value

    @staticmethod
    def skip_whitespace(text: str, pos: int) -> int:
        return WHITESPACE.match(text, pos).end()

    @staticmethod
    def at_boundary(text: str, pos: int) -> bool:
        """True if a bare token may end at pos."""
        return pos >= len(text) or text[pos].isspace() or text[pos] in BOUNDARY_CHARS

    def parse_value(self, text: str, pos: int) -> Tuple[Any, int]:
        """
        Parse one value starting at pos.

        Candidates are tried in a fixed order: object, array, quoted string,
        keyword, number, and finally unquoted string.

        Returns:
            Tuple of (value, position after the value)
        """
        pos = self.skip_whitespace(text, pos)
        if pos >= len(text):
            raise DecodeError("Unexpected end of input", ErrorType.PARSE, offset=pos)

        ch = text[pos]
        if ch == "{":
            return self._parse_object(text, pos)
        if ch == "[":
            return self._parse_array(text, pos)
        if ch == '"':
            return self.parse_quoted_string(text, pos)

        for literal, value in LITERALS:
            end = pos + len(literal)
            if text.startswith(literal, pos) and self.at_boundary(text, end):
                return value, end

        if ch in NUMBER_START:
            number = self._try_parse_number(text, pos)
            if number is not None:
                return number
        return self._parse_unquoted_string(text, pos)

    def _try_parse_number(self, text: str, pos: int) -> Optional[Tuple[Any, int]]:
        """Parse a number, or return None so the caller falls back to a string."""
        end = NUMBER_RUN.match(text, pos).end()
        if not self.at_boundary(text, end):
            return None
        try:
            return NumberUtils.from_text(text[pos:end], self.use_decimal), end
        except ValueError:
            return None

    def _parse_object(self, text: str, pos: int) -> Tuple[Dict[str, Any], int]:
        pos += 1  # skip '{'
        result: Dict[str, Any] = {}

        while True:
            pos = self.skip_whitespace(text, pos)
            if pos >= len(text):
                raise DecodeError("Unexpected end of input, expected '}'",
                                  ErrorType.PARSE, offset=pos)
            if text[pos] == "}":
                return dict(sorted(result.items())), pos + 1

            key, pos = self.parse_key(text, pos)
            pos = self.skip_whitespace(text, pos)
            if not text.startswith(":", pos):
                raise DecodeError(f"Expected ':' after object key {key!r}",
                                  ErrorType.PARSE, offset=pos, context={"key": key})

            value, pos = self.parse_value(text, pos + 1)
            result[key] = value

            pos = self.skip_whitespace(text, pos)
            if text.startswith(",", pos):
                pos += 1
            elif not text.startswith("}", pos):
                raise DecodeError("Expected ',' or '}' in object",
                                  ErrorType.PARSE, offset=pos)

    def _parse_array(self, text: str, pos: int) -> Tuple[List[Any], int]:
        pos = self.skip_whitespace(text, pos + 1)  # skip '['
        if text.startswith("# ", pos):
            return self._parse_tabular_rows(text, pos)

        result: List[Any] = []
        while True:
            pos = self.skip_whitespace(text, pos)
            if pos >= len(text):
                raise DecodeError("Unexpected end of input, expected ']'",
                                  ErrorType.PARSE, offset=pos)
            if text[pos] == "]":
                return result, pos + 1

            value, pos = self.parse_value(text, pos)
            result.append(value)

            pos = self.skip_whitespace(text, pos)
            if text.startswith(",", pos):
                pos += 1
            elif not text.startswith("]", pos):
                raise DecodeError("Expected ',' or ']' in array",
                                  ErrorType.PARSE, offset=pos)

    def _parse_tabular_rows(self, text: str, pos: int) -> Tuple[List[Dict[str, Any]], int]:
        """
        Parse a tabular block whose '# ' header marker starts at pos.

        Returns:
            Tuple of (rows as objects, position after the closing bracket)
        """
        keys, pos = self._parse_tabular_header(text, pos + 2)
        rows: List[Dict[str, Any]] = []

        pos = self.skip_whitespace(text, pos)
        if text.startswith("]", pos):
            return rows, pos + 1

        while True:
            row: Dict[str, Any] = {}
            for index, key in enumerate(keys):
                if index > 0:
                    pos = self.skip_whitespace(text, pos)
                    if not text.startswith(",", pos):
                        raise DecodeError(
                            f"Expected ',' before column {key!r} in row {len(rows)}",
                            ErrorType.PARSE, offset=pos,
                            context={"key": key, "row": len(rows)}
                        )
                    pos += 1
                row[key], pos = self._parse_tabular_cell(text, pos)
            rows.append(dict(sorted(row.items())))

            pos = self.skip_whitespace(text, pos)
            if text.startswith(",", pos):
                pos += 1
            elif text.startswith("]", pos):
                return rows, pos + 1
            else:
                raise DecodeError(
                    f"Expected ',' or ']' after row {len(rows) - 1}",
                    ErrorType.PARSE, offset=pos
                )

    def _parse_tabular_header(self, text: str, pos: int) -> Tuple[List[str], int]:
        keys: List[str] = []

        while True:
            pos = INLINE_SPACE.match(text, pos).end()
            key, pos = self.parse_key(text, pos, HEADER_KEY_RUN)
            if key in keys:
                raise DecodeError(f"Duplicate column {key!r} in tabular header",
                                  ErrorType.PARSE, offset=pos, context={"key": key})
            keys.append(key)

            pos = INLINE_SPACE.match(text, pos).end()
            if text.startswith(",", pos):
                pos += 1
                continue

            line_end = LINE_END.match(text, pos)
            if line_end is None:
                raise DecodeError("Expected ',' or end of line in tabular header",
                                  ErrorType.PARSE, offset=pos)
            return keys, line_end.end()

    def _parse_tabular_cell(self, text: str, pos: int) -> Tuple[Any, int]:
        """Parse one cell: embedded JSON for containers, else a scalar."""
        pos = self.skip_whitespace(text, pos)
        if text.startswith(("[", "{"), pos):
            try:
                return self._cell_decoder.raw_decode(text, pos)
            except json.JSONDecodeError as e:
                raise DecodeError(f"Invalid embedded JSON in tabular cell: {e.msg}",
                                  ErrorType.PARSE, offset=e.pos) from e
        return self.parse_value(text, pos)

    def parse_key(self, text: str, pos: int, run: re.Pattern = UNQUOTED_KEY_RUN) -> Tuple[str, int]:
        """Parse a quoted key, or an unquoted run matched by run."""
        pos = self.skip_whitespace(text, pos)
        if text.startswith('"', pos):
            return self.parse_quoted_string(text, pos)

        match = run.match(text, pos)
        if match is None:
            raise DecodeError("Expected key", ErrorType.PARSE, offset=pos)
        return match.group(), match.end()

    def _parse_unquoted_string(self, text: str, pos: int) -> Tuple[str, int]:
        match = UNQUOTED_RUN.match(text, pos)
        if match is None:
            raise DecodeError(f"Expected value, found {text[pos]!r}",
                              ErrorType.PARSE, offset=pos)
        return match.group(), match.end()

    def parse_quoted_string(self, text: str, pos: int) -> Tuple[str, int]:
        """
        Parse a double-quoted string starting at pos.

        Args:
            text: Document text
            pos: Position of the opening quote

        Returns:
            Tuple of (string, position after the closing quote)
        """
        start = pos
        pos += 1  # skip opening quote
        chunks: List[str] = []

        while True:
            match = STRING_CHUNK.match(text, pos)
            if match is None:
                raise DecodeError("Unterminated string", ErrorType.PARSE, offset=start)

            content, terminator = match.groups()
            chunks.append(content)
            pos = match.end()

            if terminator == '"':
                return "".join(chunks), pos

            if pos >= len(text):
                raise DecodeError("Unterminated string", ErrorType.PARSE, offset=start)

            esc = text[pos]
            if esc in ESCAPE_VALUES:
                chunks.append(ESCAPE_VALUES[esc])
                pos += 1
            elif esc == "u":
                char, pos = self._parse_unicode_escape(text, pos + 1)
                chunks.append(char)
            else:
                raise DecodeError(f"Invalid escape sequence: \\{esc}",
                                  ErrorType.PARSE, offset=pos - 1)

    def _parse_unicode_escape(self, text: str, pos: int) -> Tuple[str, int]:
        """Decode the hex digits of a \\u escape, joining surrogate pairs."""
        code = self._read_hex4(text, pos)
        pos += 4

        if 0xD800 <= code <= 0xDBFF:
            if text.startswith("\\u", pos) and HEX4.match(text, pos + 2):
                low = int(text[pos + 2:pos + 6], 16)
                if 0xDC00 <= low <= 0xDFFF:
                    combined = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
                    return chr(combined), pos + 6
            raise DecodeError("Invalid unicode escape: unpaired high surrogate",
                              ErrorType.PARSE, offset=pos - 6)
        if 0xDC00 <= code <= 0xDFFF:
            raise DecodeError("Invalid unicode escape: unpaired low surrogate",
                              ErrorType.PARSE, offset=pos - 6)
        return chr(code), pos

    @staticmethod
    def _read_hex4(text: str, pos: int) -> int:
        match = HEX4.match(text, pos)
        if match is None:
            raise DecodeError("Invalid unicode escape", ErrorType.PARSE, offset=pos - 2)
        return int(match.group(), 16)
