"""Craft phrase tables, abbreviation tables and the template engine."""

from .engine import InstructionTemplateEngine, apply_abbreviations, render_template
from .registry import (
    DEFAULT_LANGUAGE,
    AbbreviationEntry,
    AbbreviationTable,
    CraftTemplates,
    TemplateKey,
    TemplateRegistry,
    default_registry,
)

__all__ = [
    "DEFAULT_LANGUAGE",
    "AbbreviationEntry",
    "AbbreviationTable",
    "CraftTemplates",
    "InstructionTemplateEngine",
    "TemplateKey",
    "TemplateRegistry",
    "apply_abbreviations",
    "default_registry",
    "render_template",
]
