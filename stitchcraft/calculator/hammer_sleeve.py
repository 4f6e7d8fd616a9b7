"""
Hammer sleeve calculator.

In a hammer sleeve the top of the sleeve cap turns sideways and becomes
part of the shoulder. The body panels get a rectangular armhole cutout that
the upright part of the cap fills, leaving a narrow shoulder strap beside
the neckline on each side.

  cap (upright)     upper arm wide, armhole depth tall
  cap (extension)   (shoulder width - neckline width) / 2 wide, 10 rows tall
  body cutout       bind off the cap width at each armhole
  shoulder strap    half the neckline width
"""

from __future__ import annotations

from dataclasses import dataclass

from stitchcraft.errors import ValidationError
from stitchcraft.utilities.conversion import (
    convert_length,
    count_to_dimension,
    raw_count,
    round_half_up,
)
from stitchcraft.utilities.types import Axis, GaugeSpec, Unit

EXTENSION_ROWS = 10

# Advisory ranges, in cm.
_MIN_EXTENSION_CM = 5.0
_MAX_EXTENSION_CM = 25.0
_MIN_UPPER_ARM_CM = 15.0
_MAX_UPPER_ARM_CM = 50.0
_MIN_ARMHOLE_CM = 15.0
_MAX_ARMHOLE_CM = 35.0


@dataclass(frozen=True)
class HammerSleeveCalculation:
    """Stitch and row counts for a hammer sleeve cap and the matching body cutout.

    Actual dimensions are in ``unit`` and rounded to 2 decimal places.
    """

    cap_width_stitches: int
    cap_rows: int
    extension_width_stitches: int
    extension_rows: int
    shoulder_strap_stitches: int
    actual_shoulder_width: float
    actual_upper_arm_width: float
    actual_armhole_depth: float
    unit: Unit
    warnings: tuple[str, ...] = ()

    @property
    def cutout_stitches(self) -> int:
        """Stitches bound off at each armhole of the body panels."""
        return self.cap_width_stitches

    @property
    def body_width_stitches(self) -> int:
        """Body panel width at chest level: two straps plus two cutouts."""
        return 2 * self.shoulder_strap_stitches + 2 * self.cutout_stitches


def _positive(value: object) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and value > 0


def calculate_hammer_sleeve(
    total_shoulder_width: float,
    upper_arm_width: float,
    armhole_depth: float,
    neckline_width: float,
    gauge: GaugeSpec,
    unit: Unit | None = None,
) -> HammerSleeveCalculation:
    """
    Size a hammer sleeve cap and the body cutout it fits into.

    Raises
    ------
    ValidationError
        With every problem found: a non-positive measurement or gauge field,
        a neckline at least as wide as the shoulders, or a shoulder
        extension narrower than 5 cm.
    """
    unit = unit if unit is not None else gauge.unit

    def cm(value: float) -> float:
        return convert_length(value, unit, Unit.CM)

    def shown(value_cm: float) -> str:
        return f"{convert_length(value_cm, Unit.CM, unit):.1f} {unit.value}"

    errors: list[str] = []
    warnings: list[str] = []
    for label, value in (
        ("Total shoulder width", total_shoulder_width),
        ("Upper arm width", upper_arm_width),
        ("Armhole depth", armhole_depth),
        ("Neckline width", neckline_width),
    ):
        if not _positive(value):
            errors.append(f"{label} must be greater than 0")
    errors.extend(gauge.validation_errors())
    if errors:
        raise ValidationError(errors)

    extension_cm = (cm(total_shoulder_width) - cm(neckline_width)) / 2
    if neckline_width >= total_shoulder_width:
        errors.append("Neckline width must be smaller than total shoulder width")
    elif extension_cm < _MIN_EXTENSION_CM:
        errors.append(
            f"Shoulder extension width ({shown(extension_cm)}) is too small. "
            f"Minimum: {shown(_MIN_EXTENSION_CM)}"
        )
    if errors:
        raise ValidationError(errors)

    if extension_cm > _MAX_EXTENSION_CM:
        warnings.append(
            f"Shoulder extension width ({shown(extension_cm)}) is quite large. "
            f"Maximum recommended: {shown(_MAX_EXTENSION_CM)}"
        )
    arm_cm, depth_cm = cm(upper_arm_width), cm(armhole_depth)
    if arm_cm < _MIN_UPPER_ARM_CM:
        warnings.append(f"Upper arm width ({shown(arm_cm)}) is quite small for an adult garment")
    elif arm_cm > _MAX_UPPER_ARM_CM:
        warnings.append(f"Upper arm width ({shown(arm_cm)}) is quite large")
    if depth_cm < _MIN_ARMHOLE_CM:
        warnings.append(f"Armhole depth ({shown(depth_cm)}) is quite shallow")
    elif depth_cm > _MAX_ARMHOLE_CM:
        warnings.append(f"Armhole depth ({shown(depth_cm)}) is quite deep")

    def stitches(length_cm: float) -> int:
        return round_half_up(raw_count(gauge, length_cm, Unit.CM, Axis.STITCHES))

    cap_width = stitches(arm_cm)
    cap_rows = round_half_up(raw_count(gauge, depth_cm, Unit.CM, Axis.ROWS))
    if cap_width < 1 or cap_rows < 1:
        raise ValidationError("Upper arm width and armhole depth must each be at least 1 stitch or row")
    extension = stitches(extension_cm)
    strap = stitches(cm(neckline_width) / 2)

    def to_length(count: int, axis: Axis) -> float:
        return count_to_dimension(gauge, count, axis, unit)

    return HammerSleeveCalculation(
        cap_width_stitches=cap_width,
        cap_rows=cap_rows,
        extension_width_stitches=extension,
        extension_rows=EXTENSION_ROWS,
        shoulder_strap_stitches=strap,
        actual_shoulder_width=to_length(2 * strap + 2 * extension, Axis.STITCHES),
        actual_upper_arm_width=to_length(cap_width, Axis.STITCHES),
        actual_armhole_depth=to_length(cap_rows, Axis.ROWS),
        unit=unit,
        warnings=tuple(warnings),
    )
