"""Columnar layout for top-level arrays of uniform objects."""

import logging
from typing import Any, Dict, List, Optional
from ..data_type_detector import DataTypeDetector
from ..types import DecodeError, EncodeError, EncodeOptions, ErrorType, ValueKind
from ..utils.embedded_json import EmbeddedJsonUtils
from .compact import BinaryReader, BinaryWriter, CompactCodec, TAG_NULL, TAG_STRING, check_magic
from .text import TextCodec

TABULAR_MAGIC = b"TOON-TAB\x01"


class TabularTransform:
    """
    Tabular rendering of uniform arrays of objects.

    Applies only to the top-level value. A qualifying array is written as a
    header listing the shared keys once, followed by one row of cells per
    element. Nested arrays and objects inside a cell are carried as
    single-line JSON text, since rows have no nested indentation.
    """

    def __init__(self, detector: Optional[DataTypeDetector] = None,
                 logger: Optional[logging.Logger] = None):
        """
        Initialize the tabular transform.

        Args:
            detector: Optional DataTypeDetector instance
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.detector = detector or DataTypeDetector(self.logger)

    def try_encode(self, value: Any, options: EncodeOptions) -> Optional[bytes]:
        """
        Encode value in tabular layout if it qualifies.

        Args:
            value: Top-level value
            options: Encode options; compact selects the binary rendering

        Returns:
            Encoded bytes, or None when the layout does not apply

        Raises:
            EncodeError: STRICT_VIOLATION when strict is set and the value
                is not a uniform array of objects
        """
        kind = self.detector.detect_element_type(value)

        if kind == ValueKind.ARRAY:
            if not self.detector.is_uniform_object_array(value):
                reason = self.detector.describe_non_uniformity(value)
                if options.strict:
                    raise EncodeError(
                        f"Tabular mode requires a uniform array of objects: {reason}",
                        ErrorType.STRICT_VIOLATION,
                        context={"path": "$", "reason": reason}
                    )
                self.logger.debug(f"Tabular layout declined: {reason}")
                if self.logger.isEnabledFor(logging.DEBUG):
                    self.detector.analyze_array_patterns(value)
                return None

            if options.compact:
                if self._has_ambiguous_cells(value):
                    self.logger.debug("Tabular layout declined: a string cell reads as embedded JSON")
                    return None
                return self.encode_compact(value)
            return self.encode_text(value, options.indent_width)

        if kind == ValueKind.OBJECT:
            if options.strict:
                fields = self.detector.find_non_uniform_fields(value)
                if fields:
                    raise EncodeError(
                        f"Tabular mode requires uniform arrays of objects; "
                        f"field {fields[0]!r} is not one",
                        ErrorType.STRICT_VIOLATION,
                        context={"key": fields[0], "fields": fields}
                    )
            return None

        if options.strict:
            raise EncodeError(
                f"Tabular mode only applies to arrays of objects, got {kind.value}",
                ErrorType.STRICT_VIOLATION,
                context={"path": "$"}
            )
        return None

    @staticmethod
    def column_keys(rows: List[Dict[str, Any]]) -> List[str]:
        """Header keys: the first row's keys, sorted."""
        return sorted(rows[0])

    # Text rendering

    def encode_text(self, rows: List[Dict[str, Any]], indent: int = 2) -> bytes:
        """
        Render a uniform array of objects as a tabular text block.

        Args:
            rows: Uniform array of objects
            indent: Spaces before the header and each row

        Returns:
            UTF-8 encoded document
        """
        keys = self.column_keys(rows)
        pad = " " * indent
        last = len(rows) - 1

        lines = ["[\n", pad, "# ", ", ".join(TextCodec.format_string(k) for k in keys), "\n"]
        for index, row in enumerate(rows):
            cells = [self._format_cell(row.get(key)) for key in keys]
            lines.append(pad)
            lines.append(", ".join(cells))
            if index < last:
                lines.append(",")
            lines.append("\n")
        lines.append("]")

        self.logger.debug(f"Tabular text: {len(keys)} columns, {len(rows)} rows")
        try:
            return "".join(lines).encode("utf-8")
        except UnicodeEncodeError as e:
            raise EncodeError(
                f"String is not encodable as UTF-8: {e.reason}",
                ErrorType.UNSUPPORTED_VALUE
            ) from e

    def _format_cell(self, value: Any) -> str:
        if isinstance(value, (list, tuple, dict)):
            return EmbeddedJsonUtils.dumps(value)
        return TextCodec.format_scalar(value)

    # Binary rendering

    def encode_compact(self, rows: List[Dict[str, Any]]) -> bytes:
        """
        Render a uniform array of objects in the binary tabular layout.

        Args:
            rows: Uniform array of objects

        Returns:
            Magic header, column keys, row count and tagged cells
        """
        keys = self.column_keys(rows)
        scalars = CompactCodec(logger=self.logger)
        writer = BinaryWriter(TABULAR_MAGIC)

        writer.write_u32(len(keys), "column count")
        for key in keys:
            writer.write_str(key)

        writer.write_u32(len(rows), "row count")
        for row in rows:
            for key in keys:
                value = row.get(key)
                if value is None:
                    writer.write_tag(TAG_NULL)
                elif isinstance(value, (list, tuple, dict)):
                    writer.write_tag(TAG_STRING)
                    writer.write_str(EmbeddedJsonUtils.dumps(value))
                else:
                    scalars.write_value(writer, value)

        self.logger.debug(f"Tabular compact: {len(keys)} columns, {len(rows)} rows, "
                          f"{len(writer.buffer)} bytes")
        return writer.getvalue()

    def decode_compact(self, data: bytes, use_decimal: bool = False) -> List[Dict[str, Any]]:
        """
        Decode a binary tabular document into an array of objects.

        Args:
            data: Document bytes, magic header included
            use_decimal: Decode fractional numbers as Decimal instead of float

        Returns:
            One object per row, keyed by the header's columns

        Raises:
            DecodeError: On a bad header, truncation or malformed cells
        """
        reader = BinaryReader(data, check_magic(data, TABULAR_MAGIC))
        cells = CompactCodec(use_decimal=use_decimal, logger=self.logger)

        key_count = reader.read_u32("column count")
        keys = [reader.read_str("column key") for _ in range(key_count)]
        if len(set(keys)) != len(keys):
            raise DecodeError("Duplicate column in tabular header",
                              ErrorType.PARSE, offset=reader.pos)

        row_count = reader.read_u32("row count")
        rows: List[Dict[str, Any]] = []
        for _ in range(row_count):
            row = {}
            for key in keys:
                value = cells.read_value(reader)
                if isinstance(value, str):
                    embedded = EmbeddedJsonUtils.parse_container(value, use_decimal)
                    if embedded is not None:
                        value = embedded
                row[key] = value
            rows.append(dict(sorted(row.items())))

        if reader.remaining:
            raise DecodeError(
                f"Unexpected {reader.remaining} trailing bytes after last row",
                ErrorType.PARSE,
                offset=reader.pos
            )
        return rows

    def _has_ambiguous_cells(self, rows: List[Dict[str, Any]]) -> bool:
        """True if a plain string cell would read back as embedded JSON."""
        return any(
            isinstance(value, str) and EmbeddedJsonUtils.parse_container(value) is not None
            for row in rows
            for value in row.values()
        )
