"""Tests for templates.registry — loading, validation and the read-only query API."""

import shutil
from pathlib import Path

import pytest
import yaml

import stitchcraft.templates
from stitchcraft.errors import TemplateError
from stitchcraft.schemas.pattern import CraftType
from stitchcraft.templates.registry import (
    TemplateKey,
    TemplateRegistry,
    default_registry,
)

_PACKAGED_DATA = Path(stitchcraft.templates.__file__).parent / "data"


@pytest.fixture(scope="module")
def registry():
    return TemplateRegistry()


@pytest.fixture
def data_dir(tmp_path):
    """A writable copy of the packaged tables."""
    target = tmp_path / "data"
    shutil.copytree(_PACKAGED_DATA, target)
    return target


def _edit(path, mutate):
    data = yaml.safe_load(path.read_text())
    mutate(data)
    path.write_text(yaml.safe_dump(data, sort_keys=False))


# ── Packaged data ──────────────────────────────────────────────────────────────


class TestPackagedData:
    def test_loads_both_crafts(self, registry):
        assert set(registry.crafts) == {CraftType.KNITTING, CraftType.CROCHET}

    def test_each_craft_has_english_abbreviations(self, registry):
        assert registry.languages("knitting") == ("en",)
        assert registry.languages(CraftType.CROCHET) == ("en",)

    def test_only_crochet_has_a_setup_row(self, registry):
        assert registry.templates_for("crochet").has_setup_row
        assert not registry.templates_for("knitting").has_setup_row

    def test_template_lookup(self, registry):
        text = registry.template(TemplateKey(CraftType.KNITTING, "bind_off"))
        assert text == "Bind off all {stitchCount} stitches loosely."

    def test_template_key_defaults_variant(self):
        assert TemplateKey(CraftType.CROCHET, "setup_row").variant == "default"

    def test_missing_template(self, registry):
        with pytest.raises(TemplateError, match="No knitting template for"):
            registry.template(TemplateKey(CraftType.KNITTING, "setup_row"))

    def test_template_error_is_lookup_error(self, registry):
        with pytest.raises(LookupError):
            registry.abbreviation_table("knitting", "fr")

    def test_abbreviation_table(self, registry):
        table = registry.abbreviation_table("knitting")
        assert table.abbreviation_for("Cast On") == "CO"
        assert table.abbreviation_for("knit 2 together") == "k2tog"

    def test_sorted_entries_ignore_case(self, registry):
        abbreviations = [e.abbreviation for e in registry.abbreviation_table("crochet").sorted_entries()]
        assert abbreviations == sorted(abbreviations, key=str.lower)

    def test_craft_vocabularies_do_not_overlap(self, registry):
        knitting = {e.term for e in registry.abbreviation_table("knitting").entries}
        crochet = {e.term for e in registry.abbreviation_table("crochet").entries}
        assert "cast on" in knitting and "cast on" not in crochet
        assert "chain" in crochet and "chain" not in knitting

    def test_default_registry_is_shared(self):
        assert default_registry() is default_registry()


class TestImmutability:
    def test_crafts_mapping(self, registry):
        with pytest.raises(TypeError):
            registry.crafts[CraftType.KNITTING] = None  # type: ignore[index]

    def test_templates_mapping(self, registry):
        with pytest.raises(TypeError):
            registry.templates_for("knitting").templates[("bind_off", "default")] = "x"  # type: ignore[index]

    def test_labels_mapping(self, registry):
        with pytest.raises(TypeError):
            registry.templates_for("crochet").labels["cast_on"] = "x"  # type: ignore[index]


# ── Validation at load ─────────────────────────────────────────────────────────


class TestValidation:
    def test_copy_of_packaged_data_loads(self, data_dir):
        TemplateRegistry(data_dir)

    def test_missing_required_template(self, data_dir):
        _edit(data_dir / "knitting.yaml", lambda d: d["templates"]["bind_off"].pop("default"))
        with pytest.raises(ValueError, match=r"knitting: missing template \(bind_off, default\)"):
            TemplateRegistry(data_dir)

    def test_missing_label(self, data_dir):
        _edit(data_dir / "crochet.yaml", lambda d: d["labels"].pop("glossary_title"))
        with pytest.raises(ValueError, match="crochet: missing labels entry 'glossary_title'"):
            TemplateRegistry(data_dir)

    def test_table_filed_under_wrong_craft(self, data_dir):
        _edit(data_dir / "crochet.yaml", lambda d: d.update(craft="knitting"))
        with pytest.raises(ValueError, match="crochet.yaml declares craft 'knitting'"):
            TemplateRegistry(data_dir)

    def test_duplicate_abbreviation_term(self, data_dir):
        def duplicate(data):
            entries = data["tables"][0]["entries"]
            entries.append(dict(entries[0], abbreviation="BEG"))

        _edit(data_dir / "abbreviations.yaml", duplicate)
        with pytest.raises(ValueError, match="duplicate terms"):
            TemplateRegistry(data_dir)

    def test_every_problem_is_listed(self, data_dir):
        def strip(data):
            data["sections"].pop("body")
            data["notes"].pop("placeholder")

        _edit(data_dir / "knitting.yaml", strip)
        with pytest.raises(ValueError) as exc_info:
            TemplateRegistry(data_dir)
        message = str(exc_info.value)
        assert message.startswith("Template registry validation failed:")
        assert message.count("  • ") == 2

    def test_missing_file(self, data_dir):
        (data_dir / "abbreviations.yaml").unlink()
        with pytest.raises(FileNotFoundError, match="Template data file not found"):
            TemplateRegistry(data_dir)

    def test_unparseable_yaml(self, data_dir):
        (data_dir / "knitting.yaml").write_text("templates: [unclosed\n")
        with pytest.raises(ValueError, match="Failed to parse template data file"):
            TemplateRegistry(data_dir)
