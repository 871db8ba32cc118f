"""Validation utilities for value trees and raw input."""

from typing import Any, List, Set
from ..types import ValidationResult, ValidationError, ErrorType
from .numbers import NumberUtils


class ValidationUtils:
    """Utility class for validating value trees before encoding."""

    @staticmethod
    def validate_input(data: bytes) -> ValidationResult:
        """
        Validate raw document bytes before decoding.

        Args:
            data: Document bytes

        Returns:
            ValidationResult with validation details
        """
        errors = []
        warnings = []

        if not isinstance(data, (bytes, bytearray, memoryview)):
            errors.append(ValidationError(
                type=ErrorType.UNSUPPORTED_VALUE,
                message=f"Input must be bytes, got {type(data).__name__}",
                location="input"
            ))
        elif len(data) == 0:
            errors.append(ValidationError(
                type=ErrorType.EMPTY_INPUT,
                message="Input is empty",
                location="input"
            ))

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    @staticmethod
    def validate_value(value: Any) -> ValidationResult:
        """
        Validate that a value tree can be represented in TOON.

        Args:
            value: Value tree to validate

        Returns:
            ValidationResult with validation details
        """
        errors = ValidationUtils._collect_value_errors(value, "$", set())
        warnings = []

        if not errors:
            max_depth = ValidationUtils._calculate_max_depth(value)
            if max_depth > 200:
                warnings.append(f"Deep nesting detected (depth: {max_depth}). "
                                "This may exceed the recursion limit.")

        return ValidationResult(
            is_valid=len(errors) == 0,
            errors=errors,
            warnings=warnings
        )

    @staticmethod
    def _collect_value_errors(value: Any, path: str, seen: Set[int]) -> List[ValidationError]:
        """Walk the tree and collect every unsupported element."""
        if value is None or isinstance(value, (bool, str)):
            return []

        if NumberUtils.is_number(value):
            try:
                NumberUtils.to_text(value)
            except ValueError as e:
                return [ValidationError(
                    type=ErrorType.UNSUPPORTED_VALUE,
                    message=str(e),
                    location=path
                )]
            return []

        if isinstance(value, (dict, list, tuple)):
            obj_id = id(value)
            if obj_id in seen:
                return [ValidationError(
                    type=ErrorType.UNSUPPORTED_VALUE,
                    message="Circular reference detected",
                    location=path
                )]
            seen.add(obj_id)

            errors = []
            try:
                if isinstance(value, dict):
                    for key, item in value.items():
                        if not isinstance(key, str):
                            errors.append(ValidationError(
                                type=ErrorType.UNSUPPORTED_VALUE,
                                message=f"Object keys must be strings, got {type(key).__name__}",
                                location=path
                            ))
                            continue
                        errors.extend(ValidationUtils._collect_value_errors(
                            item, f"{path}.{key}", seen))
                else:
                    for index, item in enumerate(value):
                        errors.extend(ValidationUtils._collect_value_errors(
                            item, f"{path}[{index}]", seen))
            finally:
                seen.remove(obj_id)
            return errors

        return [ValidationError(
            type=ErrorType.UNSUPPORTED_VALUE,
            message=f"Unsupported value type: {type(value).__name__}",
            location=path
        )]

    @staticmethod
    def _calculate_max_depth(data: Any, current_depth: int = 0) -> int:
        """Calculate maximum nesting depth."""
        if isinstance(data, dict):
            children = data.values()
        elif isinstance(data, (list, tuple)):
            children = data
        else:
            return current_depth

        max_child_depth = current_depth
        for item in children:
            child_depth = ValidationUtils._calculate_max_depth(item, current_depth + 1)
            max_child_depth = max(max_child_depth, child_depth)

        return max_child_depth

