"""Single-line JSON carried inside tabular cells."""

import json
from decimal import Decimal
from typing import Any, Optional
from ..types import DecodeError, EncodeError, ErrorType
from .numbers import NumberUtils


def _reject_constant(name: str):
    raise DecodeError(f"Non-finite number {name} in embedded JSON", ErrorType.INVALID_NUMBER_TEXT)


def _sorted_object(pairs):
    return dict(sorted(dict(pairs).items()))


class EmbeddedJsonUtils:
    """Utility class for the JSON text of nested arrays and objects in table cells."""

    @classmethod
    def dumps(cls, value: Any) -> str:
        """Single-line JSON with sorted keys and canonical numbers."""
        if isinstance(value, dict):
            members = (
                json.dumps(key, ensure_ascii=False) + ":" + cls.dumps(value[key])
                for key in sorted(value)
            )
            return "{" + ",".join(members) + "}"
        if isinstance(value, (list, tuple)):
            return "[" + ",".join(cls.dumps(item) for item in value) + "]"
        if isinstance(value, str):
            return json.dumps(value, ensure_ascii=False)
        if value is None or isinstance(value, bool):
            return json.dumps(value)
        try:
            return NumberUtils.to_text(value)
        except ValueError as e:
            raise EncodeError(str(e), ErrorType.UNSUPPORTED_VALUE) from e

    @staticmethod
    def decoder(use_decimal: bool = False) -> json.JSONDecoder:
        """
        Build the decoder for embedded cells.

        Integers keep full precision, fractions become float or Decimal,
        NaN and Infinity are rejected and objects come back key-sorted.
        """
        return json.JSONDecoder(
            parse_float=Decimal if use_decimal else float,
            parse_int=NumberUtils.parse_integer,
            parse_constant=_reject_constant,
            object_pairs_hook=_sorted_object
        )

    @classmethod
    def parse_container(cls, text: str, use_decimal: bool = False) -> Optional[Any]:
        """Return the array or object a string encodes in full, or None."""
        if not text.startswith(("[", "{")):
            return None
        try:
            value, end = cls.decoder(use_decimal).raw_decode(text)
        except (json.JSONDecodeError, DecodeError):
            return None
        if end != len(text):
            return None
        return value
