"""
Public pattern generation API.

generate_pattern() is the single entry point: it takes a calculation request
(or the plain mapping form of one) and returns both the per-component counts
and the written instructions. It wires the full pipeline:
request → PatternCalculator → PatternInstructionEngine → markdown.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from stitchcraft.calculator.pattern import PatternCalculation, PatternCalculator
from stitchcraft.orchestrator.engine import (
    InstructionOptions,
    PatternInstructionEngine,
    PatternInstructionResult,
)
from stitchcraft.schemas.pattern import CalculationRequest
from stitchcraft.templates.registry import TemplateRegistry, default_registry

from .requests import request_from_mapping


@dataclass(frozen=True)
class GeneratedPattern:
    """Counts for every component and the instructions for those that calculated."""

    calculation: PatternCalculation
    instructions: PatternInstructionResult

    @property
    def success(self) -> bool:
        return self.instructions.success

    @property
    def warnings(self) -> tuple[str, ...]:
        return (*self.calculation.warnings, *self.instructions.warnings)


def generate_pattern(
    request: CalculationRequest | Mapping[str, Any],
    options: InstructionOptions | None = None,
    registry: TemplateRegistry | None = None,
    logger: logging.Logger | None = None,
    clock: Callable[[], datetime] | None = None,
) -> GeneratedPattern:
    """
    Calculate and write a complete pattern.

    Parameters
    ----------
    request:
        A CalculationRequest, or a mapping accepted by
        :func:`~stitchcraft.api.requests.request_from_mapping`.
    options:
        Instruction preferences; defaults to ``InstructionOptions()``.
    registry:
        Template registry; defaults to the shared packaged registry.
    logger:
        Passed to the calculator and the instruction engine.
    clock:
        Source of the calculation and generation timestamps.

    Returns
    -------
    GeneratedPattern
        Components that failed to calculate appear in
        ``calculation.components`` with their errors and are left out of the
        instructions.

    Raises
    ------
    ValidationError
        If ``request`` is a mapping that cannot be parsed.
    """
    registry = registry or default_registry()
    if not isinstance(request, CalculationRequest):
        request = request_from_mapping(request, registry)

    engine = PatternInstructionEngine(registry=registry, logger=logger, clock=clock)
    calculated_at = clock() if clock is not None else None
    calculation = PatternCalculator(logger=logger).calculate(request, calculated_at)
    instructions = engine.generate(calculation.to_calculated_pattern(), options)
    return GeneratedPattern(calculation=calculation, instructions=instructions)
