"""Compact binary TOON codec: tag byte, little-endian u32 lengths."""

import logging
import struct
from typing import Any, Dict, Optional
from ..data_type_detector import DataTypeDetector
from ..types import CodecInterface, DecodeError, EncodeError, ErrorType, ValueKind
from ..utils.numbers import NumberUtils

COMPACT_MAGIC = b"TOON\x01"

TAG_NULL = 0
TAG_FALSE = 1
TAG_TRUE = 2
TAG_NUMBER = 3
TAG_STRING = 4
TAG_ARRAY = 5
TAG_OBJECT = 6

U32 = struct.Struct("<I")
U32_MAX = 0xFFFFFFFF


def check_magic(data: bytes, magic: bytes) -> int:
    """
    Verify a binary header and return the offset just past it.

    A buffer that stops partway through the magic is reported as truncated,
    anything else that does not start with it as an invalid header.
    """
    if data.startswith(magic):
        return len(magic)
    if magic.startswith(data):
        raise DecodeError(
            f"Input too short for header {magic!r}",
            ErrorType.TRUNCATED_BINARY,
            offset=len(data)
        )
    raise DecodeError(
        f"Invalid magic header: expected {magic!r}",
        ErrorType.INVALID_MAGIC,
        offset=0,
        context={"found": bytes(data[:len(magic)])}
    )


class BinaryWriter:
    """Growable output buffer with the length-prefixed primitives."""

    def __init__(self, header: bytes = b""):
        self.buffer = bytearray(header)

    def write_tag(self, tag: int) -> None:
        self.buffer.append(tag)

    def write_u32(self, value: int, what: str = "length") -> None:
        if value > U32_MAX:
            raise EncodeError(
                f"{what.capitalize()} {value} does not fit in an unsigned 32-bit field",
                ErrorType.UNSUPPORTED_VALUE
            )
        self.buffer += U32.pack(value)

    def write_str(self, text: str) -> None:
        try:
            raw = text.encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodeError(
                f"String is not encodable as UTF-8: {e.reason}",
                ErrorType.UNSUPPORTED_VALUE
            ) from e
        self.write_u32(len(raw), "string length")
        self.buffer += raw

    def getvalue(self) -> bytes:
        return bytes(self.buffer)


class BinaryReader:
    """Bounds-checked cursor over a binary buffer."""

    def __init__(self, data: bytes, pos: int = 0):
        self.data = data
        self.pos = pos

    @property
    def remaining(self) -> int:
        return len(self.data) - self.pos

    def _require(self, count: int, what: str) -> None:
        if self.remaining < count:
            raise DecodeError(
                f"Unexpected end of input reading {what}: "
                f"need {count} bytes, {max(self.remaining, 0)} left",
                ErrorType.TRUNCATED_BINARY,
                offset=self.pos
            )

    def read_tag(self) -> int:
        self._require(1, "type tag")
        tag = self.data[self.pos]
        self.pos += 1
        return tag

    def read_u32(self, what: str = "length") -> int:
        self._require(4, what)
        (value,) = U32.unpack_from(self.data, self.pos)
        self.pos += 4
        return value

    def read_str(self, what: str = "string") -> str:
        length = self.read_u32(f"{what} length")
        self._require(length, what)
        start = self.pos
        raw = self.data[start:start + length]
        try:
            text = raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DecodeError(
                f"Invalid UTF-8 in {what}: {e.reason}",
                ErrorType.INVALID_UTF8,
                offset=start + e.start
            ) from e
        self.pos += length
        return text


class CompactCodec(CodecInterface):
    """
    Tag-and-length binary serializer for TOON values.

    The document carries the magic header once, at the root. Every value is
    one tag byte followed by its payload; numbers travel as canonical decimal
    text so no precision is lost in transit.
    """

    def __init__(self, use_decimal: bool = False, logger: Optional[logging.Logger] = None):
        """
        Initialize the compact codec.

        Args:
            use_decimal: Decode fractional numbers as Decimal instead of float
            logger: Optional logger instance
        """
        self.use_decimal = use_decimal
        self.logger = logger or logging.getLogger(__name__)

    def encode(self, value: Any) -> bytes:
        """
        Encode a value as a compact TOON document.

        Args:
            value: Value tree to encode

        Returns:
            Magic header followed by the tagged value
        """
        writer = BinaryWriter(COMPACT_MAGIC)
        self.write_value(writer, value)
        self.logger.debug(f"Compact encode produced {len(writer.buffer)} bytes")
        return writer.getvalue()

    def write_value(self, writer: BinaryWriter, value: Any) -> None:
        """Append one tagged value to the writer."""
        kind = DataTypeDetector.detect_element_type(value)

        if kind == ValueKind.NULL:
            writer.write_tag(TAG_NULL)
        elif kind == ValueKind.BOOL:
            writer.write_tag(TAG_TRUE if value else TAG_FALSE)
        elif kind == ValueKind.NUMBER:
            writer.write_tag(TAG_NUMBER)
            writer.write_str(self._number_text(value))
        elif kind == ValueKind.STRING:
            writer.write_tag(TAG_STRING)
            writer.write_str(value)
        elif kind == ValueKind.ARRAY:
            writer.write_tag(TAG_ARRAY)
            writer.write_u32(len(value), "array length")
            for item in value:
                self.write_value(writer, item)
        else:
            writer.write_tag(TAG_OBJECT)
            writer.write_u32(len(value), "object size")
            for key in sorted(value):
                writer.write_str(key)
                self.write_value(writer, value[key])

    @staticmethod
    def _number_text(value: Any) -> str:
        try:
            return NumberUtils.to_text(value)
        except ValueError as e:
            raise EncodeError(str(e), ErrorType.UNSUPPORTED_VALUE) from e

    def decode(self, data: bytes) -> Any:
        """
        Decode a compact TOON document.

        Args:
            data: Document bytes, magic header included

        Returns:
            Decoded value tree with sorted object keys

        Raises:
            DecodeError: On a bad header, truncation, bad UTF-8, an unknown
                tag, an unparseable number or trailing bytes
        """
        reader = BinaryReader(data, check_magic(data, COMPACT_MAGIC))
        value = self.read_value(reader)

        if reader.remaining:
            raise DecodeError(
                f"Unexpected {reader.remaining} trailing bytes after root value",
                ErrorType.PARSE,
                offset=reader.pos
            )
        return value

    def read_value(self, reader: BinaryReader) -> Any:
        """Read one tagged value from the reader."""
        tag_offset = reader.pos
        tag = reader.read_tag()

        if tag == TAG_NULL:
            return None
        if tag == TAG_FALSE:
            return False
        if tag == TAG_TRUE:
            return True
        if tag == TAG_NUMBER:
            return self._read_number(reader)
        if tag == TAG_STRING:
            return reader.read_str()
        if tag == TAG_ARRAY:
            count = reader.read_u32("array length")
            return [self.read_value(reader) for _ in range(count)]
        if tag == TAG_OBJECT:
            count = reader.read_u32("object size")
            result: Dict[str, Any] = {}
            for _ in range(count):
                key = reader.read_str("object key")
                result[key] = self.read_value(reader)
            return dict(sorted(result.items()))

        raise DecodeError(
            f"Unknown type tag: {tag}",
            ErrorType.UNKNOWN_TAG,
            offset=tag_offset,
            context={"tag": tag}
        )

    def _read_number(self, reader: BinaryReader) -> Any:
        start = reader.pos
        text = reader.read_str("number")
        try:
            return NumberUtils.from_text(text, self.use_decimal)
        except ValueError as e:
            raise DecodeError(
                f"Invalid number in compact TOON: {text!r}",
                ErrorType.INVALID_NUMBER_TEXT,
                offset=start,
                context={"text": text}
            ) from e

