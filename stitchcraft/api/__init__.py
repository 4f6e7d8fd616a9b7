"""Public entry points: request parsing and end-to-end pattern generation."""

from .generate import GeneratedPattern, generate_pattern
from .requests import request_from_mapping

__all__ = ["GeneratedPattern", "generate_pattern", "request_from_mapping"]
