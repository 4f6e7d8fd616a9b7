"""
Instruction template engine: fills craft phrase templates and applies
standard abbreviations.

An engine is bound to one craft's table when it is built, so every phrase it
renders comes from that craft's vocabulary. Knitting casts on N stitches;
crochet chains N + 1 (the extra chain is consumed by the foundation row) and
then works a foundation row of N single crochet.
"""

from __future__ import annotations

import re
from collections.abc import Mapping

from stitchcraft.errors import TemplateError
from stitchcraft.schemas.instruction import is_right_side
from stitchcraft.schemas.pattern import CraftType

from .registry import AbbreviationTable, CraftTemplates, TemplateKey, TemplateRegistry, default_registry

_PLACEHOLDER = re.compile(r"\{(\w+)\}")


def render_template(template: str, values: Mapping[str, object]) -> str:
    """Substitute ``{name}`` placeholders; a missing value is an error, never blank."""

    def _substitute(match: re.Match[str]) -> str:
        name = match.group(1)
        if name not in values:
            raise TemplateError(f"No value supplied for placeholder {{{name}}} in {template!r}")
        return str(values[name])

    return _PLACEHOLDER.sub(_substitute, template)


def apply_abbreviations(
    text: str, table: AbbreviationTable | None, enabled: bool = True
) -> str:
    """
    Rewrite full phrases as standard abbreviations.

    Longest terms are matched first, on whole words, case-insensitively, in a
    single pass (so an inserted abbreviation is never rewritten again). A
    capitalised phrase keeps its capital: "Knit all" → "K all".
    """
    if not enabled or table is None or not text:
        return text

    def _substitute(match: re.Match[str]) -> str:
        found = match.group(0)
        abbreviation = table.abbreviation_for(found)
        if found[0].isupper() and abbreviation[0].islower():
            return abbreviation[0].upper() + abbreviation[1:]
        return abbreviation

    return table.pattern.sub(_substitute, text)


class InstructionTemplateEngine:
    """Renders row phrases for a single craft."""

    def __init__(self, templates: CraftTemplates) -> None:
        self.templates = templates

    @classmethod
    def for_craft(
        cls, craft: CraftType | str, registry: TemplateRegistry | None = None
    ) -> InstructionTemplateEngine:
        registry = registry or default_registry()
        return cls(registry.templates_for(craft))

    @property
    def craft(self) -> CraftType:
        return self.templates.craft

    @property
    def default_stitch_pattern(self) -> str:
        return str(self.templates.defaults["stitch_pattern"])

    @property
    def turning_chains(self) -> int:
        return int(self.templates.defaults["turning_chains"])

    def key(self, category: str, variant: str = "default") -> TemplateKey:
        return TemplateKey(self.craft, category, variant)

    def apply_template(self, key: TemplateKey, values: Mapping[str, object]) -> str:
        """Fill the template at ``key``; the key must belong to this engine's craft."""
        if key.craft != self.craft:
            raise TemplateError(
                f"{self.craft.value} engine cannot render a {CraftType(key.craft).value} template"
            )
        return render_template(self.templates.get(key.category, key.variant), values)

    def render(self, category: str, variant: str = "default", **values: object) -> str:
        """Fill a template with the values every row template may reference."""
        row_number = values.get("rowNumber")
        common: dict[str, object] = {"turningChains": self.turning_chains}
        if isinstance(row_number, int):
            common["rowSide"] = self.side_label(row_number)
        common.update(values)
        return self.apply_template(self.key(category, variant), common)

    def side_label(self, row_number: int) -> str:
        label = "right_side" if is_right_side(row_number) else "wrong_side"
        return self.templates.labels[label]

    # ── Fixed steps ────────────────────────────────────────────────────────────

    def cast_on(self, stitch_count: int, yarn_name: str | None = None) -> str:
        clause = self.render("cast_on", "yarn_clause", yarnName=yarn_name) if yarn_name else ""
        chain_count = stitch_count + int(self.templates.defaults["foundation_chain_extra"])
        return self.render(
            "cast_on", stitchCount=stitch_count, chainCount=chain_count, yarnClause=clause
        )

    def foundation_row(self, stitch_count: int) -> str | None:
        """Row establishing the working stitches, or None for crafts without one."""
        if not self.templates.has_setup_row:
            return None
        return self.render("setup_row", stitchCount=stitch_count)

    def bind_off(self, stitch_count: int) -> str:
        return self.render("bind_off", stitchCount=stitch_count)

    # ── Plain rows ─────────────────────────────────────────────────────────────

    def plain_row(self, row_number: int, stitch_count: int, stitch_pattern: str | None = None) -> str:
        pattern = stitch_pattern or self.default_stitch_pattern
        if pattern.lower() != self.default_stitch_pattern.lower():
            variant = "single_pattern"
        else:
            variant = "single_rs" if is_right_side(row_number) else "single_ws"
        return self.render(
            "plain_row", variant, rowNumber=row_number, stitchCount=stitch_count, stitchPattern=pattern
        )

    def plain_rows(
        self, start_row: int, end_row: int, stitch_count: int, stitch_pattern: str | None = None
    ) -> str:
        return self.render(
            "plain_row",
            "multiple",
            startRow=start_row,
            endRow=end_row,
            rowCount=end_row - start_row + 1,
            stitchCount=stitch_count,
            stitchPattern=stitch_pattern or self.default_stitch_pattern,
        )

    # ── Shaping ────────────────────────────────────────────────────────────────

    def shaping_phrase(self, stitch_delta: int, row_number: int, category: str | None = None) -> str:
        """
        Working instructions for a single shaping row.

        Looks up, in order: a category-specific phrase
        (``shawl_increase_4``), a side-specific phrase (``decrease_pair_rs``),
        a side-free phrase (``decrease_pair``), and finally the generic
        "evenly across" phrase.
        """
        direction = "increase" if stitch_delta > 0 else "decrease"
        count = abs(stitch_delta)
        side = "rs" if is_right_side(row_number) else "ws"
        candidates = []
        if category:
            candidates.append(f"{category}_{direction}_{count}")
        kind = {1: "single", 2: "pair"}.get(count)
        if kind:
            candidates += [f"{direction}_{kind}_{side}", f"{direction}_{kind}"]
        for variant in candidates:
            if self.templates.has("shaping_phrase", variant):
                return self.render("shaping_phrase", variant, count=count)
        return self.render("shaping_phrase", f"{direction}_even", count=count)

    def shaping_row(
        self,
        row_number: int,
        stitch_delta: int,
        stitch_count: int,
        instructions: str,
    ) -> str:
        variant = "increase" if stitch_delta > 0 else "decrease"
        return self.render(
            "shaping_row",
            variant,
            rowNumber=row_number,
            stitchCount=stitch_count,
            shapingInstructions=instructions,
        )

    def placeholder_row(self, row_number: int, stitch_count: int, section: str) -> str:
        return self.render(
            "shaping_row", "placeholder", rowNumber=row_number, stitchCount=stitch_count, section=section
        )

    def note(self, name: str) -> str:
        return self.templates.notes[name]

    def section(self, name: str) -> str:
        return self.templates.sections[name]

    def label(self, name: str) -> str:
        return self.templates.labels[name]
