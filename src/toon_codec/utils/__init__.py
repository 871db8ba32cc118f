"""Utility functions for the TOON codec."""

from .numbers import NumberUtils
from .validation import ValidationUtils
from .embedded_json import EmbeddedJsonUtils

__all__ = ["NumberUtils", "ValidationUtils", "EmbeddedJsonUtils"]
