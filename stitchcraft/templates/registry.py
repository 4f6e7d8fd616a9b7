"""
Template registry: loads the phrase and abbreviation tables from YAML,
validates them, and exposes a read-only query API.

One phrase table per craft (``knitting.yaml``, ``crochet.yaml``) and one
shared ``abbreviations.yaml``. Every table is wrapped in MappingProxyType
after loading; nothing writes to a registry once it is built, so a single
instance can be read from any number of threads.

Instantiate TemplateRegistry directly to use a custom data directory (e.g. in
tests); ``default_registry()`` returns a shared instance built from the
packaged data.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from functools import cached_property, lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any, NamedTuple, cast

import yaml

from stitchcraft.errors import TemplateError
from stitchcraft.schemas.pattern import CraftType

_DATA_DIR = Path(__file__).parent / "data"

DEFAULT_LANGUAGE = "en"

# Every craft table must define these.
_REQUIRED_TEMPLATES: tuple[tuple[str, str], ...] = (
    ("cast_on", "default"),
    ("cast_on", "yarn_clause"),
    ("plain_row", "single_rs"),
    ("plain_row", "single_ws"),
    ("plain_row", "single_pattern"),
    ("plain_row", "multiple"),
    ("shaping_row", "decrease"),
    ("shaping_row", "increase"),
    ("shaping_row", "placeholder"),
    ("shaping_phrase", "decrease_even"),
    ("shaping_phrase", "increase_even"),
    ("armhole", "bind_off_first"),
    ("armhole", "bind_off_second"),
    ("neckline", "center"),
    ("neckline", "decrease"),
    ("raglan", "decrease"),
    ("raglan", "increase"),
    ("bind_off", "default"),
)
_REQUIRED_LABELS = (
    "right_side",
    "wrong_side",
    "pattern_title",
    "pieces_intro",
    "glossary_title",
    "cast_on",
    "total_rows",
    "final_stitch_count",
    "finished_dimensions",
    "construction_notes",
)
_REQUIRED_SECTIONS = ("start", "body", "finish")
_REQUIRED_NOTES = ("cast_on", "bind_off", "shaped_piece", "long_piece", "placeholder")
_REQUIRED_DEFAULTS = ("stitch_pattern", "foundation_chain_extra", "turning_chains")


class TemplateKey(NamedTuple):
    """
    (craft, category, variant) key of a single phrase template.

    Using a NamedTuple keeps field names explicit at construction sites.
    """

    craft: CraftType
    category: str
    variant: str = "default"


@dataclass(frozen=True)
class CraftTemplates:
    """
    Everything one craft needs to write a pattern: phrase templates, section
    names, header labels, defaults and standard notes.

    Selected once per request; callers never branch on the craft again.
    """

    craft: CraftType
    templates: MappingProxyType[tuple[str, str], str]
    labels: MappingProxyType[str, str]
    sections: MappingProxyType[str, str]
    defaults: MappingProxyType[str, Any]
    notes: MappingProxyType[str, str]

    def has(self, category: str, variant: str = "default") -> bool:
        return (category, variant) in self.templates

    def get(self, category: str, variant: str = "default") -> str:
        try:
            return self.templates[(category, variant)]
        except KeyError:
            raise TemplateError(
                f"No {self.craft.value} template for ({category!r}, {variant!r})"
            ) from None

    @property
    def has_setup_row(self) -> bool:
        return self.has("setup_row")


@dataclass(frozen=True)
class AbbreviationEntry:
    abbreviation: str
    term: str
    description: str


@dataclass(frozen=True)
class AbbreviationTable:
    """Immutable (abbreviation → definition) table for one craft and language."""

    craft: CraftType
    language: str
    entries: tuple[AbbreviationEntry, ...]

    @cached_property
    def by_term(self) -> MappingProxyType[str, AbbreviationEntry]:
        return MappingProxyType({e.term.lower(): e for e in self.entries})

    @cached_property
    def pattern(self) -> re.Pattern[str]:
        """Whole-word, case-insensitive alternation of every term, longest first."""
        terms = sorted(self.by_term, key=len, reverse=True)
        alternation = "|".join(re.escape(t) for t in terms)
        return re.compile(rf"\b(?:{alternation})\b", re.IGNORECASE)

    def abbreviation_for(self, term: str) -> str:
        return self.by_term[term.lower()].abbreviation

    def sorted_entries(self) -> list[AbbreviationEntry]:
        return sorted(self.entries, key=lambda e: e.abbreviation.lower())


class TemplateRegistry:
    """
    Read-only registry of the craft phrase tables and abbreviation tables.

    All public mapping attributes are wrapped in MappingProxyType after
    loading and are immutable for the lifetime of the registry instance.
    """

    def __init__(self, data_dir: Path = _DATA_DIR) -> None:
        self._data_dir = data_dir

        self.crafts: MappingProxyType[CraftType, CraftTemplates]
        self.abbreviations: MappingProxyType[tuple[CraftType, str], AbbreviationTable]

        self._load_all()
        self._validate()

    # ── Loading ────────────────────────────────────────────────────────────────

    def _load_yaml(self, filename: str) -> dict[str, Any]:
        path = self._data_dir / filename
        try:
            with open(path) as f:
                return cast(dict[str, Any], yaml.safe_load(f))
        except FileNotFoundError:
            raise FileNotFoundError(f"Template data file not found: {path}") from None
        except yaml.YAMLError as exc:
            raise ValueError(f"Failed to parse template data file {path}: {exc}") from exc

    def _load_all(self) -> None:
        self._load_crafts()
        self._load_abbreviations()

    def _load_crafts(self) -> None:
        result: dict[CraftType, CraftTemplates] = {}
        for craft in CraftType:
            data = self._load_yaml(f"{craft.value}.yaml")
            templates: dict[tuple[str, str], str] = {}
            for category, variants in data.get("templates", {}).items():
                for variant, text in variants.items():
                    templates[(category, variant)] = str(text)
            result[craft] = CraftTemplates(
                craft=CraftType(data["craft"]),
                templates=MappingProxyType(templates),
                labels=MappingProxyType(dict(data.get("labels", {}))),
                sections=MappingProxyType(dict(data.get("sections", {}))),
                defaults=MappingProxyType(dict(data.get("defaults", {}))),
                notes=MappingProxyType(dict(data.get("notes", {}))),
            )
        self.crafts = MappingProxyType(result)

    def _load_abbreviations(self) -> None:
        data = self._load_yaml("abbreviations.yaml")
        result: dict[tuple[CraftType, str], AbbreviationTable] = {}
        for table in data["tables"]:
            craft = CraftType(table["craft"])
            language = str(table["language"])
            result[(craft, language)] = AbbreviationTable(
                craft=craft,
                language=language,
                entries=tuple(
                    AbbreviationEntry(
                        abbreviation=str(e["abbreviation"]),
                        term=str(e["term"]),
                        description=str(e.get("description", "")).strip(),
                    )
                    for e in table["entries"]
                ),
            )
        self.abbreviations = MappingProxyType(result)

    # ── Validation ─────────────────────────────────────────────────────────────

    def _validate(self) -> None:
        """
        Run at load. Raises ValueError listing every problem found: missing
        required templates or labels, a table filed under the wrong craft,
        or duplicate abbreviation terms.
        """
        errors: list[str] = []
        for craft, table in self.crafts.items():
            self._check_craft_table(craft, table, errors)
            if (craft, DEFAULT_LANGUAGE) not in self.abbreviations:
                errors.append(f"{craft.value}: no {DEFAULT_LANGUAGE!r} abbreviation table")
        for (craft, language), table in self.abbreviations.items():
            terms = [e.term.lower() for e in table.entries]
            duplicates = sorted({t for t in terms if terms.count(t) > 1})
            if duplicates:
                errors.append(
                    f"abbreviations ({craft.value}, {language}): duplicate terms {duplicates}"
                )
        if errors:
            raise ValueError(
                "Template registry validation failed:\n" + "\n".join(f"  • {e}" for e in errors)
            )

    def _check_craft_table(self, craft: CraftType, table: CraftTemplates, errors: list[str]) -> None:
        if table.craft != craft:
            errors.append(f"{craft.value}.yaml declares craft {table.craft.value!r}")
        for category, variant in _REQUIRED_TEMPLATES:
            if not table.has(category, variant):
                errors.append(f"{craft.value}: missing template ({category}, {variant})")
        for group, required in (
            ("labels", _REQUIRED_LABELS),
            ("sections", _REQUIRED_SECTIONS),
            ("notes", _REQUIRED_NOTES),
            ("defaults", _REQUIRED_DEFAULTS),
        ):
            present = getattr(table, group)
            for key in required:
                if key not in present:
                    errors.append(f"{craft.value}: missing {group} entry {key!r}")

    # ── Query API ──────────────────────────────────────────────────────────────

    def templates_for(self, craft: CraftType | str) -> CraftTemplates:
        return self.crafts[CraftType(craft)]

    def template(self, key: TemplateKey) -> str:
        """Return the raw template text for ``key``.

        Raises TemplateError if the craft table has no such template.
        """
        return self.templates_for(key.craft).get(key.category, key.variant)

    def languages(self, craft: CraftType | str) -> tuple[str, ...]:
        craft = CraftType(craft)
        return tuple(sorted(lang for (c, lang) in self.abbreviations if c == craft))

    def abbreviation_table(
        self, craft: CraftType | str, language: str = DEFAULT_LANGUAGE
    ) -> AbbreviationTable:
        """Return the table for (craft, language).

        Raises TemplateError if no table exists; callers that want a fallback
        check ``languages()`` first.
        """
        try:
            return self.abbreviations[(CraftType(craft), language)]
        except KeyError:
            raise TemplateError(
                f"No abbreviation table for ({CraftType(craft).value}, {language!r})"
            ) from None


@lru_cache(maxsize=1)
def default_registry() -> TemplateRegistry:
    """Shared registry built from the packaged data; read-only once built."""
    return TemplateRegistry()
