"""
Build a CalculationRequest from plain mappings (parsed JSON or YAML).

Keys may be written in snake_case (``ref_length``) or camelCase
(``refLength``). Components may be a list of mappings with a ``key`` entry
or a mapping from component key to its target. Every problem found is
collected and raised together as one ValidationError.
"""

from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from stitchcraft.errors import StitchcraftError, ValidationError
from stitchcraft.schemas.pattern import (
    CalculationRequest,
    ComponentTarget,
    CraftType,
    GarmentDefinition,
    UnitsSpec,
)
from stitchcraft.templates.registry import TemplateRegistry, default_registry
from stitchcraft.utilities.types import GaugeSpec, StitchPatternSpec, Unit


def _camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.title() for part in rest)


def _get(data: Mapping[str, Any], name: str, default: Any = None) -> Any:
    if name in data:
        return data[name]
    return data.get(_camel(name), default)


def _section(data: Mapping[str, Any], name: str, errors: list[str]) -> Mapping[str, Any]:
    value = _get(data, name, {})
    if not isinstance(value, Mapping):
        errors.append(f"{name} must be a mapping")
        return {}
    return value


def _optional_float(value: Any, label: str, errors: list[str]) -> float | None:
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        errors.append(f"{label} must be a number, got {value!r}")
        return None
    return float(value)


def _component(key: str, data: Any, errors: list[str]) -> ComponentTarget | None:
    if not isinstance(data, Mapping):
        errors.append(f"component {key!r} must be a mapping")
        return None
    attributes = _get(data, "attributes", {})
    if not isinstance(attributes, Mapping):
        errors.append(f"component {key!r}: attributes must be a mapping")
        attributes = {}
    return ComponentTarget(
        key=key,
        target_length=_optional_float(_get(data, "target_length"), f"{key} target_length", errors),
        target_width=_optional_float(_get(data, "target_width"), f"{key} target_width", errors),
        target_circumference=_optional_float(
            _get(data, "target_circumference"), f"{key} target_circumference", errors
        ),
        display_name=_get(data, "display_name"),
        attributes=MappingProxyType(dict(attributes)),
    )


def _components(raw: Any, errors: list[str]) -> tuple[ComponentTarget, ...]:
    if isinstance(raw, Mapping):
        pairs = list(raw.items())
    elif isinstance(raw, (list, tuple)):
        pairs = []
        for index, entry in enumerate(raw):
            key = _get(entry, "key") if isinstance(entry, Mapping) else None
            if not isinstance(key, str) or not key:
                errors.append(f"component {index + 1} needs a string 'key'")
                continue
            pairs.append((key, entry))
    else:
        errors.append("garment components must be a list or a mapping")
        return ()
    if not pairs:
        errors.append("garment has no components")
    built = (_component(str(key), data, errors) for key, data in pairs)
    return tuple(c for c in built if c is not None)


def request_from_mapping(
    data: Mapping[str, Any], registry: TemplateRegistry | None = None
) -> CalculationRequest:
    """
    Parse a request mapping into a CalculationRequest.

    Parameters
    ----------
    data:
        Mapping with ``craft_type``, ``units``, ``gauge``, optional
        ``stitch_pattern`` and ``garment`` (``garment_type``,
        ``measurements``, ``components``).
    registry:
        Supplies the craft's default stitch-pattern name when the request
        does not name one.

    Raises
    ------
    ValidationError
        Listing every missing or malformed field.
    """
    errors: list[str] = []

    craft: CraftType | None = None
    try:
        craft = CraftType(str(_get(data, "craft_type", "")).lower())
    except ValueError:
        errors.append(f"craft_type must be one of: {', '.join(c.value for c in CraftType)}")

    units_data = _section(data, "units", errors)
    units = UnitsSpec()
    try:
        units = UnitsSpec(
            dimension_unit=Unit.parse(_get(units_data, "dimension_unit", Unit.CM)),
            gauge_unit=Unit.parse(_get(units_data, "gauge_unit", Unit.CM)),
        )
    except StitchcraftError as exc:
        errors.append(str(exc))

    gauge_data = _section(data, "gauge", errors)
    gauge = None
    if not gauge_data:
        errors.append("Gauge is required")
    else:
        try:
            gauge = GaugeSpec(
                stitches=_get(gauge_data, "stitches"),
                rows=_get(gauge_data, "rows"),
                ref_length=_get(gauge_data, "ref_length", 10.0),
                unit=_get(gauge_data, "unit", units.gauge_unit),
            )
        except StitchcraftError as exc:
            errors.append(str(exc))
        else:
            errors.extend(gauge.validation_errors())

    pattern_data = _section(data, "stitch_pattern", errors)
    name = _get(pattern_data, "name")
    if name is None and craft is not None:
        templates = (registry or default_registry()).templates_for(craft)
        name = templates.defaults["stitch_pattern"]
    stitch_pattern = StitchPatternSpec(
        name=None if name is None else str(name),
        horizontal_repeat=_get(pattern_data, "horizontal_repeat", 1),
        vertical_repeat=_get(pattern_data, "vertical_repeat", 1),
        classification=str(_get(pattern_data, "classification", "basic")),
    )
    errors.extend(stitch_pattern.validation_errors())

    garment_data = _section(data, "garment", errors)
    garment_type = _get(garment_data, "garment_type")
    if not isinstance(garment_type, str) or not garment_type:
        errors.append("garment_type is required")
    components = _components(_get(garment_data, "components", ()), errors)
    measurements = _get(garment_data, "measurements", {})
    if not isinstance(measurements, Mapping):
        errors.append("garment measurements must be a mapping")
        measurements = {}

    if errors or craft is None or gauge is None:
        raise ValidationError(errors)
    return CalculationRequest(
        craft_type=craft,
        gauge=gauge,
        garment=GarmentDefinition(
            garment_type=str(garment_type),
            components=components,
            measurements=MappingProxyType(dict(measurements)),
        ),
        stitch_pattern=stitch_pattern,
        units=units,
    )
