"""
PatternInstructionEngine — turns a CalculatedPattern into written instructions.

Per piece, in order:

  1. Cast-on (knitting) or foundation chain (crochet) at row 0.
  2. Crochet only: the foundation row at row 1.
  3. Body rows: the ShapingScheduleProcessor when the piece has shaping,
     otherwise plain rows up to ``total_rows``.
  4. Bind-off (knitting) or fasten-off (crochet) at ``total_rows + 1`` with a
     stitch count of 0.

The craft is resolved once per call and selects the whole phrase table; no
step below that point branches on the craft. A piece that fails is reported
as a warning and left out; the call only fails when no piece succeeds.

Pieces share nothing but the read-only template registry, so with
``max_workers > 1`` they are generated on a thread pool. Output order and
content do not depend on the worker count.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from types import MappingProxyType

from stitchcraft.errors import StitchcraftError, ValidationError
from stitchcraft.schemas.instruction import (
    DetailLevel,
    DetailPolicy,
    RowInstruction,
    RowType,
    is_right_side,
)
from stitchcraft.schemas.pattern import (
    CalculatedPattern,
    CalculatedPiece,
    CraftType,
    FinishedDimensions,
)
from stitchcraft.shaping.processor import ShapingScheduleProcessor
from stitchcraft.templates.engine import InstructionTemplateEngine, apply_abbreviations
from stitchcraft.templates.registry import (
    DEFAULT_LANGUAGE,
    AbbreviationTable,
    TemplateRegistry,
    default_registry,
)
from stitchcraft.writer.markdown import (
    MarkdownWriter,
    WriterInput,
    render_glossary,
    render_introduction,
)

# Pieces longer than this get the stitch-marker note.
LONG_PIECE_ROWS = 200


@dataclass(frozen=True)
class InstructionOptions:
    """Caller preferences for instruction generation."""

    use_abbreviations: bool = True
    language: str = DEFAULT_LANGUAGE
    detail_level: DetailLevel = DetailLevel.STANDARD
    detail_policy: DetailPolicy = field(default_factory=DetailPolicy)
    include_construction_notes: bool = True
    yarn_name: str | None = None
    max_workers: int = 1

    def __post_init__(self) -> None:
        object.__setattr__(self, "detail_level", DetailLevel(self.detail_level))
        if self.max_workers < 1:
            raise ValueError(f"max_workers must be at least 1, got {self.max_workers}")


@dataclass(frozen=True)
class ConstructionSummary:
    cast_on_stitches: int
    total_rows: int
    final_stitch_count: int
    finished_dimensions: FinishedDimensions


@dataclass(frozen=True)
class PieceInstructions:
    """The written document for one piece plus its structured steps."""

    piece_key: str
    display_name: str
    markdown_instructions: str
    instruction_steps: tuple[RowInstruction, ...]
    construction_summary: ConstructionSummary
    construction_notes: tuple[str, ...] = ()
    warnings: tuple[str, ...] = ()


@dataclass(frozen=True)
class InstructionMetadata:
    total_instructions: int
    pieces_processed: int
    generated_at: datetime
    craft_type: CraftType


@dataclass(frozen=True)
class PatternInstructionResult:
    """Outcome of one generate() call.

    Attributes:
        success: True when at least one piece was generated.
        pieces: Piece key → PieceInstructions, in the pattern's piece order.
        warnings: Pattern-wide warnings, including one per failed piece.
        failed_pieces: Keys of pieces left out because they failed.
        error: Reason for overall failure, else None.
    """

    success: bool
    pattern_introduction: str = ""
    abbreviations_glossary: str | None = None
    pieces: Mapping[str, PieceInstructions] = field(default_factory=lambda: MappingProxyType({}))
    warnings: tuple[str, ...] = ()
    failed_pieces: tuple[str, ...] = ()
    metadata: InstructionMetadata | None = None
    error: str | None = None


@dataclass(frozen=True)
class _Context:
    """Everything resolved once per call and shared read-only by every piece."""

    engine: InstructionTemplateEngine
    abbreviations: AbbreviationTable | None
    options: InstructionOptions
    writer: MarkdownWriter


@dataclass(frozen=True)
class _Outcome:
    piece: CalculatedPiece
    instructions: PieceInstructions | None = None
    error: str | None = None


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PatternInstructionEngine:
    """
    Orchestrates cast-on → body → bind-off for every piece of a pattern.

    Parameters
    ----------
    registry:
        Template registry; defaults to the shared packaged registry.
    logger:
        Logger for progress and recovered failures.
    clock:
        Source of ``metadata.generated_at``; the only non-deterministic field.
    """

    def __init__(
        self,
        registry: TemplateRegistry | None = None,
        logger: logging.Logger | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._registry = registry or default_registry()
        self._logger = logger if logger is not None else logging.getLogger(__name__)
        self._clock = clock or _utc_now

    def generate(
        self, pattern: CalculatedPattern, options: InstructionOptions | None = None
    ) -> PatternInstructionResult:
        """
        Generate instructions for every piece of ``pattern``.

        Parameters
        ----------
        pattern:
            Calculated pieces in the order they should be written.
        options:
            Generation preferences; defaults to ``InstructionOptions()``.

        Returns
        -------
        PatternInstructionResult
            Always returned. ``success`` is False only when the craft cannot
            be resolved or no piece could be generated.
        """
        options = options or InstructionOptions()
        warnings: list[str] = []
        try:
            craft = CraftType(pattern.craft_type)
            context = self._context(craft, options, warnings)
        except (StitchcraftError, ValueError) as exc:
            self._logger.warning("instruction generation aborted: %s", exc)
            return PatternInstructionResult(success=False, warnings=tuple(warnings), error=str(exc))

        outcomes = self._run_pieces(pattern.pieces, context)

        pieces: dict[str, PieceInstructions] = {}
        failed: list[str] = []
        for outcome in outcomes:
            key = outcome.piece.piece_key
            if outcome.instructions is None or key in pieces:
                reason = outcome.error or "duplicate piece key"
                message = f'Failed to generate instructions for piece "{key}": {reason}'
                self._logger.warning(message)
                warnings.append(message)
                failed.append(key)
                continue
            pieces[key] = outcome.instructions
            name = outcome.piece.display_name
            warnings.extend(f"{name}: {w}" for w in outcome.instructions.warnings)

        if not pieces:
            return PatternInstructionResult(
                success=False,
                warnings=tuple(warnings),
                failed_pieces=tuple(failed),
                error="No pieces could be generated",
            )

        introduction = render_introduction(
            pattern.garment_type, [p.display_name for p in pieces.values()], context.engine
        )
        glossary = None
        if context.abbreviations is not None:
            glossary = render_glossary(context.abbreviations, context.engine.label("glossary_title"))

        metadata = InstructionMetadata(
            total_instructions=sum(len(p.instruction_steps) for p in pieces.values()),
            pieces_processed=len(pieces),
            generated_at=self._clock(),
            craft_type=craft,
        )
        self._logger.debug(
            "generated %d instructions for %d pieces", metadata.total_instructions, len(pieces)
        )
        return PatternInstructionResult(
            success=True,
            pattern_introduction=introduction,
            abbreviations_glossary=glossary,
            pieces=MappingProxyType(pieces),
            warnings=tuple(warnings),
            failed_pieces=tuple(failed),
            metadata=metadata,
        )

    # ── Setup ──────────────────────────────────────────────────────────────────

    def _context(
        self, craft: CraftType, options: InstructionOptions, warnings: list[str]
    ) -> _Context:
        engine = InstructionTemplateEngine(self._registry.templates_for(craft))
        table = None
        if options.use_abbreviations:
            language = options.language
            if language not in self._registry.languages(craft):
                message = (
                    f"No {language!r} abbreviations for {craft.value}; "
                    f"using {DEFAULT_LANGUAGE!r}"
                )
                self._logger.warning(message)
                warnings.append(message)
                language = DEFAULT_LANGUAGE
            table = self._registry.abbreviation_table(craft, language)
        return _Context(engine, table, options, MarkdownWriter(engine))

    def _run_pieces(
        self, pieces: tuple[CalculatedPiece, ...], context: _Context
    ) -> list[_Outcome]:
        def run(piece: CalculatedPiece) -> _Outcome:
            try:
                return _Outcome(piece, self._generate_piece(piece, context))
            except Exception as exc:
                return _Outcome(piece, error=str(exc))

        workers = context.options.max_workers
        if workers > 1 and len(pieces) > 1:
            with ThreadPoolExecutor(max_workers=workers) as pool:
                return list(pool.map(run, pieces))
        return [run(piece) for piece in pieces]

    # ── Per piece ──────────────────────────────────────────────────────────────

    def _generate_piece(self, piece: CalculatedPiece, context: _Context) -> PieceInstructions:
        self._logger.debug("generating instructions for %s", piece.piece_key)
        engine = context.engine
        options = context.options
        if piece.cast_on_stitches < 1:
            raise ValidationError(f"cast-on count must be at least 1, got {piece.cast_on_stitches}")
        if piece.total_rows < 1:
            raise ValidationError(f"total rows must be at least 1, got {piece.total_rows}")

        warnings: list[str] = []
        start, finish = engine.section("start"), engine.section("finish")
        cast_on = piece.cast_on_stitches
        steps = [
            RowInstruction(
                row_number=0,
                section=start,
                text=engine.cast_on(cast_on, options.yarn_name),
                stitch_count=cast_on,
                row_type=RowType.CAST_ON,
                is_right_side=True,
                notes=(engine.note("cast_on"),),
            )
        ]
        first_body_row = 1
        foundation = engine.foundation_row(cast_on)
        if foundation is not None:
            steps.append(
                RowInstruction(
                    row_number=1,
                    section=start,
                    text=foundation,
                    stitch_count=cast_on,
                    row_type=RowType.SETUP_ROW,
                    is_right_side=True,
                    notes=(engine.note("setup_row"),),
                )
            )
            first_body_row = 2

        processor = ShapingScheduleProcessor(
            engine,
            detail_level=options.detail_level,
            policy=options.detail_policy,
            stitch_pattern=piece.stitch_pattern_name,
            logger=self._logger,
        )
        if piece.shaping is not None and piece.has_shaping:
            processed = processor.process(piece.shaping, first_body_row, piece.total_rows, cast_on)
            steps.extend(processed.instructions)
            final = processed.final_stitch_count
            warnings.extend(processed.warnings)
        else:
            steps.extend(processor.plain_rows(first_body_row, piece.total_rows, cast_on))
            final = cast_on

        if final != piece.final_stitch_count:
            warnings.append(
                f"Rows end with {final} stitches but the piece declares "
                f"{piece.final_stitch_count}"
            )
        bind_off_row = piece.total_rows + 1
        steps.append(
            RowInstruction(
                row_number=bind_off_row,
                section=finish,
                text=engine.bind_off(final),
                stitch_count=0,
                row_type=RowType.BIND_OFF,
                is_right_side=is_right_side(bind_off_row),
                notes=(engine.note("bind_off"),),
                stitches_changed=-final,
            )
        )

        if context.abbreviations is not None:
            steps = [
                replace(s, text=apply_abbreviations(s.text, context.abbreviations)) for s in steps
            ]

        notes: tuple[str, ...] = ()
        if options.include_construction_notes:
            notes = (*piece.construction_notes, *self._automatic_notes(piece, engine))

        markdown = context.writer.write(WriterInput(piece, tuple(steps), notes))
        return PieceInstructions(
            piece_key=piece.piece_key,
            display_name=piece.display_name,
            markdown_instructions=markdown,
            instruction_steps=tuple(steps),
            construction_summary=ConstructionSummary(
                cast_on_stitches=cast_on,
                total_rows=piece.total_rows,
                final_stitch_count=piece.final_stitch_count,
                finished_dimensions=piece.finished_dimensions,
            ),
            construction_notes=notes,
            warnings=tuple(warnings),
        )

    @staticmethod
    def _automatic_notes(piece: CalculatedPiece, engine: InstructionTemplateEngine) -> list[str]:
        notes = []
        if piece.has_shaping:
            notes.append(engine.note("shaped_piece"))
        if piece.total_rows > LONG_PIECE_ROWS:
            notes.append(engine.note("long_piece"))
        return notes
