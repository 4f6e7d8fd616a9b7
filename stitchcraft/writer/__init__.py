"""Markdown rendering of piece documents, the glossary and the introduction."""

from .markdown import MarkdownWriter, PieceWriter, WriterInput, render_glossary, render_introduction

__all__ = [
    "MarkdownWriter",
    "PieceWriter",
    "WriterInput",
    "render_glossary",
    "render_introduction",
]
