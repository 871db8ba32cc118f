"""Layout codecs for TOON documents."""

from .text import TextCodec
from .compact import CompactCodec
from .tabular import TabularTransform

__all__ = ["TextCodec", "CompactCodec", "TabularTransform"]
