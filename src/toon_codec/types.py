"""Core type definitions for the TOON codec."""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional


class ValueKind(Enum):
    """Enumeration of the kinds of value a TOON document can hold."""
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    STRING = "string"
    ARRAY = "array"
    OBJECT = "object"


class Layout(Enum):
    """Enumeration of TOON wire layouts."""
    TEXT = "text"
    COMPACT = "compact"
    TABULAR_TEXT = "tabular-text"
    TABULAR_COMPACT = "tabular-compact"


class ErrorType(Enum):
    """Enumeration of error types."""
    EMPTY_INPUT = "empty_input"
    PARSE = "parse"
    INVALID_MAGIC = "invalid_magic"
    TRUNCATED_BINARY = "truncated_binary"
    INVALID_UTF8 = "invalid_utf8"
    INVALID_NUMBER_TEXT = "invalid_number_text"
    UNKNOWN_TAG = "unknown_tag"
    STRICT_VIOLATION = "strict_violation"
    UNSUPPORTED_VALUE = "unsupported_value"


@dataclass
class EncodeOptions:
    """Options controlling how a value is encoded."""
    tabular_arrays: bool = False
    compact: bool = False
    indent: Optional[int] = 2
    strict: bool = False

    def __post_init__(self):
        """Validate options after initialization."""
        self.validate()

    def validate(self) -> None:
        """
        Check field values.

        Raises:
            ValueError: If indent is not an integer in 0..255
        """
        if self.indent is not None:
            if isinstance(self.indent, bool) or not isinstance(self.indent, int):
                raise ValueError(f"indent must be an integer, got {type(self.indent).__name__}")
            if not 0 <= self.indent <= 255:
                raise ValueError(f"indent must be between 0 and 255, got {self.indent}")

    @property
    def indent_width(self) -> int:
        """Indent width with the default applied."""
        return 2 if self.indent is None else self.indent


@dataclass
class DecodeOptions:
    """Options controlling how a document is decoded."""
    compact: bool = False
    strict: bool = False
    use_decimal: bool = False


@dataclass
class ValidationError:
    """Validation error details."""
    type: ErrorType
    message: str
    location: Optional[str] = None


@dataclass
class ValidationResult:
    """Result of input validation."""
    is_valid: bool
    errors: List[ValidationError]
    warnings: List[str]


@dataclass
class ErrorResponse:
    """Response for error handling."""
    can_recover: bool
    suggested_action: str


class ToonError(Exception):
    """Base exception for codec failures."""

    def __init__(self, message: str, error_type: ErrorType,
                 offset: Optional[int] = None,
                 context: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.error_type = error_type
        self.offset = offset
        self.context = context or {}

    def __str__(self) -> str:
        if self.offset is not None:
            return f"{self.message} (at offset {self.offset})"
        return self.message


class EncodeError(ToonError):
    """Raised when a value cannot be encoded."""


class DecodeError(ToonError):
    """Raised when a document cannot be decoded."""


# Abstract base classes for interfaces

class CodecInterface(ABC):
    """Abstract interface for a single TOON layout."""

    @abstractmethod
    def encode(self, value: Any) -> bytes:
        """Encode a value into this layout."""
        pass

    @abstractmethod
    def decode(self, data: bytes) -> Any:
        """Decode a document in this layout."""
        pass


class ToonCodecInterface(ABC):
    """Abstract interface for the layout dispatcher."""

    @abstractmethod
    def encode(self, value: Any, options: Optional[EncodeOptions] = None) -> bytes:
        """Encode a value into TOON bytes."""
        pass

    @abstractmethod
    def decode(self, data: bytes, options: Optional[DecodeOptions] = None) -> Any:
        """Decode TOON bytes into a value."""
        pass
