"""Canonical decimal text for numeric values."""

import math
import re
from decimal import Decimal, InvalidOperation
from typing import Union

Number = Union[int, float, Decimal]

# JSON number grammar
NUMBER_RE = re.compile(r'-?(?:0|[1-9][0-9]*)(?:\.[0-9]+)?(?:[eE][+-]?[0-9]+)?')

# lowest value sys.set_int_max_str_digits() accepts
SHORT_INT_DIGITS = 640


class NumberUtils:
    """Utility class for converting numbers to and from canonical text."""

    @staticmethod
    def is_number(value) -> bool:
        """True for int, float and Decimal values, but not bool."""
        return isinstance(value, (int, float, Decimal)) and not isinstance(value, bool)

    @staticmethod
    def to_text(value: Number) -> str:
        """
        Render a number as canonical decimal text.

        Args:
            value: int, float or Decimal

        Returns:
            Decimal text matching the JSON number grammar

        Raises:
            ValueError: If the value is not finite
        """
        if isinstance(value, int):
            return str(Decimal(int(value)))

        if isinstance(value, float):
            if not math.isfinite(value):
                raise ValueError(f"Non-finite number cannot be encoded: {value!r}")
            text = repr(value)
        else:
            if not value.is_finite():
                raise ValueError(f"Non-finite number cannot be encoded: {value}")
            text = str(value)

        if not NUMBER_RE.fullmatch(text):
            raise ValueError(f"Number has no canonical decimal form: {text}")
        return text

    @staticmethod
    def is_valid_text(text: str) -> bool:
        """Check text against the JSON number grammar."""
        return NUMBER_RE.fullmatch(text) is not None

    @staticmethod
    def parse_integer(text: str) -> int:
        """Parse integer text of any length."""
        # int(str) refuses digit runs above sys.get_int_max_str_digits()
        if len(text) > SHORT_INT_DIGITS:
            return int(Decimal(text))
        return int(text)

    @staticmethod
    def from_text(text: str, use_decimal: bool = False) -> Number:
        """
        Parse canonical decimal text back into a Python number.

        Args:
            text: Decimal text
            use_decimal: Return Decimal instead of float for fractional values

        Returns:
            int for integer literals, otherwise float or Decimal

        Raises:
            ValueError: If the text is not a valid number
        """
        if not NumberUtils.is_valid_text(text):
            raise ValueError(f"Invalid number text: {text!r}")

        if not any(c in text for c in ".eE"):
            return NumberUtils.parse_integer(text)

        if use_decimal:
            try:
                return Decimal(text)
            except InvalidOperation as e:
                raise ValueError(f"Invalid number text: {text!r}") from e

        result = float(text)
        if not math.isfinite(result):
            raise ValueError(f"Number out of range for float: {text!r}")
        return result
