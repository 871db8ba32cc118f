"""Value kind detection and array uniformity analysis."""

import logging
from collections import Counter
from decimal import Decimal
from typing import Any, Dict, List, Optional
from .types import ValueKind


class DataTypeDetector:
    """
    Detector for the kinds of value found in a JSON-like tree.

    Provides the element classification both encoders dispatch on, and the
    uniformity test that decides whether an array can use the tabular layout.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize the data type detector.

        Args:
            logger: Optional logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def detect_element_type(element: Any) -> ValueKind:
        """
        Detect the kind of a single element.

        Args:
            element: Element to analyze

        Returns:
            ValueKind enum indicating the element kind

        Raises:
            TypeError: If the element is not a JSON-like value
        """
        # bool before number: bool is an int subclass
        if element is None:
            return ValueKind.NULL
        elif isinstance(element, bool):
            return ValueKind.BOOL
        elif isinstance(element, (int, float, Decimal)):
            return ValueKind.NUMBER
        elif isinstance(element, str):
            return ValueKind.STRING
        elif isinstance(element, (list, tuple)):
            return ValueKind.ARRAY
        elif isinstance(element, dict):
            return ValueKind.OBJECT
        raise TypeError(f"Unsupported value type: {type(element).__name__}")

    @staticmethod
    def is_uniform_object_array(items: List[Any]) -> bool:
        """
        Check whether an array qualifies for the tabular layout.

        The array must be non-empty, its first element must be an object with
        at least one key, and every element must be an object with the same
        key set as the first.

        Args:
            items: Array to check

        Returns:
            True if every element shares the first element's key set
        """
        if not items:
            return False

        first = items[0]
        if not isinstance(first, dict) or not first:
            return False

        first_keys = set(first.keys())
        for item in items[1:]:
            if not isinstance(item, dict) or set(item.keys()) != first_keys:
                return False

        return True

    def find_non_uniform_fields(self, data: Dict[str, Any]) -> List[str]:
        """
        List the immediate fields of an object holding non-uniform arrays.

        Only the object's own values are inspected; nested objects are not
        descended into.

        Args:
            data: Object to scan

        Returns:
            Sorted list of field names whose value fails the uniformity test
        """
        fields = [
            key for key, value in data.items()
            if isinstance(value, (list, tuple)) and not self.is_uniform_object_array(value)
        ]
        return sorted(fields)

    def analyze_array_patterns(self, items: List[Any]) -> Dict[str, Any]:
        """
        Analyze element kinds and key sets in an array.

        Args:
            items: Array to analyze

        Returns:
            Dictionary with pattern analysis results
        """
        if not items:
            return {
                "is_empty": True,
                "item_kinds": {},
                "homogeneous": True,
                "distinct_key_sets": 0,
                "uniform_objects": False,
                "total_items": 0
            }

        item_kinds = Counter()
        key_sets = set()

        for item in items:
            item_kinds[self.detect_element_type(item).value] += 1
            if isinstance(item, dict):
                key_sets.add(frozenset(item.keys()))

        uniform = self.is_uniform_object_array(items)
        self.logger.debug(f"Array of {len(items)} items: kinds={dict(item_kinds)}, "
                          f"key sets={len(key_sets)}, uniform={uniform}")

        return {
            "is_empty": False,
            "item_kinds": dict(item_kinds),
            "homogeneous": len(item_kinds) == 1,
            "distinct_key_sets": len(key_sets),
            "uniform_objects": uniform,
            "total_items": len(items)
        }

    def describe_non_uniformity(self, items: List[Any]) -> str:
        """Explain in one line why an array is not a uniform object array."""
        if not items:
            return "array is empty"

        first = items[0]
        if not isinstance(first, dict):
            return f"element 0 is a {self.detect_element_type(first).value}, not an object"
        if not first:
            return "element 0 is an object with no keys"

        first_keys = set(first.keys())
        for index, item in enumerate(items[1:], start=1):
            if not isinstance(item, dict):
                return f"element {index} is a {self.detect_element_type(item).value}, not an object"
            keys = set(item.keys())
            if keys != first_keys:
                extra = sorted(keys - first_keys)
                missing = sorted(first_keys - keys)
                return (f"element {index} has a different key set "
                        f"(extra: {extra}, missing: {missing})")

        return "array is uniform"
