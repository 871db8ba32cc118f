"""
TOON - Lossless encoding of JSON values.

Converts JSON-like value trees to and from three interchangeable layouts:
indented text, compact length-prefixed binary, and a columnar tabular
layout for uniform arrays of objects.
"""

from .toon_codec import ToonCodec, encode, decode
from .codec import TextCodec, CompactCodec, TabularTransform
from .types import (
    DecodeError,
    DecodeOptions,
    EncodeError,
    EncodeOptions,
    ErrorType,
    Layout,
    ToonError,
)

__version__ = "1.0.0"
__all__ = [
    "ToonCodec",
    "encode",
    "decode",
    "TextCodec",
    "CompactCodec",
    "TabularTransform",
    "EncodeOptions",
    "DecodeOptions",
    "ToonError",
    "EncodeError",
    "DecodeError",
    "ErrorType",
    "Layout",
]
