"""Main TOON codec: chooses a layout for each encode and decode call."""

import dataclasses
import logging
from typing import Any, Optional, Union
from .types import (
    DecodeError,
    DecodeOptions,
    EncodeError,
    EncodeOptions,
    ErrorType,
    Layout,
    ToonCodecInterface
)
from .codec.compact import COMPACT_MAGIC, CompactCodec
from .codec.tabular import TABULAR_MAGIC, TabularTransform
from .codec.text import TextCodec
from .data_type_detector import DataTypeDetector
from .error_handler import ErrorHandler


class ToonCodec(ToonCodecInterface):
    """
    Main implementation of the TOON codec interface.

    Encoding tries the tabular layout first when requested, then falls back
    to compact binary or indented text. Decoding honours an explicit compact
    request and otherwise sniffs the magic header to pick the decoder.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the TOON codec.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.error_handler = ErrorHandler(self.logger)
        self.detector = DataTypeDetector(self.logger)
        self.tabular = TabularTransform(self.detector, self.logger)

    def encode(self, value: Any, options: Optional[EncodeOptions] = None) -> bytes:
        """
        Encode a value into TOON bytes.

        Args:
            value: Value tree to encode
            options: Encode options (defaults to indented text)

        Returns:
            Encoded document

        Raises:
            EncodeError: STRICT_VIOLATION under strict tabular mode, or
                UNSUPPORTED_VALUE for values outside the JSON model
        """
        options = options if options is not None else EncodeOptions()

        option_validation = self.error_handler.validate_options(options)
        if not option_validation.is_valid:
            error = option_validation.errors[0]
            raise EncodeError(f"Invalid options: {error.message}", error.type,
                              context={"path": error.location})

        try:
            validation = self.error_handler.validate_value(value)
            if not validation.is_valid:
                error = validation.errors[0]
                raise EncodeError(f"{error.message} at {error.location}", error.type,
                                  context={"path": error.location})

            layout, output = self._encode_with_layout(value, options)
        except RecursionError as e:
            raise EncodeError("Value is nested too deeply to encode",
                              ErrorType.UNSUPPORTED_VALUE) from e

        self.logger.info(f"Encoded {layout.value} layout: {len(output)} bytes")
        return output

    def _encode_with_layout(self, value: Any, options: EncodeOptions):
        if options.tabular_arrays:
            result = self.tabular.try_encode(value, options)
            if result is not None:
                layout = Layout.TABULAR_COMPACT if options.compact else Layout.TABULAR_TEXT
                return layout, result
            self.logger.debug("Tabular layout not applicable, using ordinary layout")

        if options.compact:
            return Layout.COMPACT, CompactCodec(logger=self.logger).encode(value)
        codec = TextCodec(indent=options.indent_width, logger=self.logger)
        return Layout.TEXT, codec.encode(value)

    def detect_layout(self, data: bytes, compact: bool = False) -> Layout:
        """
        Pick the decoder for a document.

        Args:
            data: Document bytes
            compact: Treat the input as binary even without a recognised header

        Returns:
            TEXT, COMPACT or TABULAR_COMPACT (tabular text is recognised by
            the text parser itself)
        """
        if data.startswith(TABULAR_MAGIC):
            return Layout.TABULAR_COMPACT
        if data.startswith(COMPACT_MAGIC):
            return Layout.COMPACT
        if compact:
            if TABULAR_MAGIC.startswith(data) and not COMPACT_MAGIC.startswith(data):
                return Layout.TABULAR_COMPACT
            return Layout.COMPACT
        return Layout.TEXT

    def decode(self, data: Union[bytes, str], options: Optional[DecodeOptions] = None) -> Any:
        """
        Decode TOON bytes into a value.

        Args:
            data: Document bytes (str is accepted and encoded as UTF-8)
            options: Decode options (defaults to auto-detection)

        Returns:
            Decoded value tree with sorted object keys

        Raises:
            DecodeError: If the input is empty or malformed
        """
        options = options if options is not None else DecodeOptions()
        if isinstance(data, str):
            data = data.encode("utf-8")

        validation = self.error_handler.validate_input(data)
        if not validation.is_valid:
            error = validation.errors[0]
            raise DecodeError(error.message, error.type)

        data = bytes(data)
        layout = self.detect_layout(data, options.compact)
        self.logger.debug(f"Decoding {len(data)} bytes as {layout.value}")

        try:
            if layout == Layout.TABULAR_COMPACT:
                return self.tabular.decode_compact(data, options.use_decimal)
            if layout == Layout.COMPACT:
                return CompactCodec(options.use_decimal, self.logger).decode(data)
            return TextCodec(use_decimal=options.use_decimal, logger=self.logger).decode(data)
        except RecursionError as e:
            raise DecodeError("Document is nested too deeply to decode",
                              ErrorType.PARSE) from e


def _merge_options(options, overrides, options_type):
    if options is None:
        return options_type(**overrides)
    if overrides:
        return dataclasses.replace(options, **overrides)
    return options


def encode(value: Any, options: Optional[EncodeOptions] = None, **overrides) -> bytes:
    """
    Encode a value into TOON bytes.

    Keyword arguments override fields of options, e.g.
    ``encode(data, compact=True)``.
    """
    return ToonCodec().encode(value, _merge_options(options, overrides, EncodeOptions))


def decode(data: Union[bytes, str], options: Optional[DecodeOptions] = None, **overrides) -> Any:
    """
    Decode TOON bytes into a value.

    Keyword arguments override fields of options, e.g.
    ``decode(blob, compact=True)``.
    """
    return ToonCodec().decode(data, _merge_options(options, overrides, DecodeOptions))
