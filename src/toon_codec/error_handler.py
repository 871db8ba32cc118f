"""Error handling implementation for the TOON codec."""

import logging
from typing import Any, Optional
from .types import (
    EncodeOptions,
    ErrorResponse,
    ErrorType,
    ToonError,
    ValidationError,
    ValidationResult
)
from .utils.validation import ValidationUtils


SUGGESTED_ACTIONS = {
    ErrorType.EMPTY_INPUT: (
        False,
        "Provide a non-empty TOON document."
    ),
    ErrorType.PARSE: (
        False,
        "Check the document near the reported offset for a missing ':', ',' "
        "or closing bracket, or an unterminated string."
    ),
    ErrorType.INVALID_MAGIC: (
        False,
        "The input is not a compact TOON document. Drop --compact to decode it as text."
    ),
    ErrorType.TRUNCATED_BINARY: (
        False,
        "The binary document ends early. Re-encode it or check that the transfer "
        "was not cut short."
    ),
    ErrorType.INVALID_UTF8: (
        False,
        "The document contains bytes that are not valid UTF-8. Check its encoding."
    ),
    ErrorType.INVALID_NUMBER_TEXT: (
        False,
        "A numeric payload is not a valid decimal number. The document may be corrupted."
    ),
    ErrorType.UNKNOWN_TAG: (
        False,
        "The binary document contains an unrecognized type tag. It may be corrupted "
        "or written by an incompatible encoder."
    ),
    ErrorType.STRICT_VIOLATION: (
        True,
        "The input is not a uniform array of objects. Retry without --strict to fall "
        "back to the ordinary layout, or without --tabular-arrays."
    ),
    ErrorType.UNSUPPORTED_VALUE: (
        False,
        "Only null, booleans, finite numbers, strings, arrays and objects with string "
        "keys can be encoded."
    ),
}


class ErrorHandler:
    """
    Error handler for TOON codec operations.

    Validates inputs before they reach the codecs and turns codec errors into
    messages and suggestions for the calling layer.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the error handler.

        Args:
            logger: Optional logger instance for error reporting
        """
        self.logger = logger or logging.getLogger(__name__)

    def validate_input(self, data: bytes) -> ValidationResult:
        """
        Validate raw document bytes.

        Args:
            data: Document bytes to validate

        Returns:
            ValidationResult with validation details
        """
        return ValidationUtils.validate_input(data)

    def validate_value(self, value: Any) -> ValidationResult:
        """
        Validate a value tree before encoding.

        Args:
            value: Value tree to validate

        Returns:
            ValidationResult with validation details
        """
        result = ValidationUtils.validate_value(value)
        for warning in result.warnings:
            self.logger.warning(warning)
        return result

    def validate_options(self, options: Any) -> ValidationResult:
        """
        Validate encode options, including ones mutated after construction.

        Args:
            options: EncodeOptions instance

        Returns:
            ValidationResult with validation details
        """
        errors = []
        if not isinstance(options, EncodeOptions):
            errors.append(ValidationError(
                type=ErrorType.UNSUPPORTED_VALUE,
                message=f"Expected EncodeOptions, got {type(options).__name__}",
                location="options"
            ))
        else:
            try:
                options.validate()
            except ValueError as e:
                errors.append(ValidationError(
                    type=ErrorType.UNSUPPORTED_VALUE,
                    message=str(e),
                    location="indent"
                ))

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=[]
        )

    def handle_error(self, error: ToonError) -> ErrorResponse:
        """
        Map a codec error to a recovery suggestion.

        Args:
            error: ToonError raised by the codec

        Returns:
            ErrorResponse with recovery information
        """
        self.logger.debug(f"Codec error: {error.error_type.value} - {error}")

        can_recover, action = SUGGESTED_ACTIONS.get(
            error.error_type,
            (False, "Unknown error type. Please check logs and retry.")
        )
        return ErrorResponse(can_recover=can_recover, suggested_action=action)

    def format_error(self, error: ToonError, context: str) -> str:
        """
        Build a user-facing message for an error.

        Args:
            error: ToonError raised by the codec
            context: What the caller was doing, e.g. "Failed to decode TOON"

        Returns:
            Multi-line message: the error, then an indented suggestion
        """
        details = []
        if "key" in error.context:
            details.append(f"key {error.context['key']!r}")
        if "tag" in error.context:
            details.append(f"tag {error.context['tag']}")
        suffix = f" [{', '.join(details)}]" if details else ""

        response = self.handle_error(error)
        return f"{context}: {error}{suffix}\n  {response.suggested_action}"
