"""
Block data model for the habit tracker.

A block is one labeled goal tracked over a grid of days. It is laid out as
rows of four seven-day weeks, so every row holds 28 cells and a block of
``rows`` rows holds ``rows * 28`` cells. The number of cells never changes
after a block is created; toggling a cell produces a new block.

Classes:
    CellPosition: Row, week and day of a cell index
    BlockSpec: Declared shape and presentation of a block
    RowSummary: Tick/cross counts and mood of one row
    Block: Immutable snapshot of a block's cell statuses

Functions:
    apply_toggle: Toggle one cell of a status sequence
    aggregate_row: Count ticks and crosses in one row
    cell_position: Map a cell index to its row, week and day
"""

import operator
from typing import Any, Dict, List, Mapping, NamedTuple, Optional, Sequence, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .cell import CellStatus, toggle
from .mood import Mood, mood_for
from .theme import ColorTheme

DAYS_PER_WEEK = 7
WEEKS_PER_ROW = 4
CELLS_PER_ROW = DAYS_PER_WEEK * WEEKS_PER_ROW


class CellPosition(NamedTuple):
    """Zero-based location of a cell inside its block."""

    row: int
    week: int
    day: int

    @property
    def title(self) -> str:
        """Human label, numbering weeks across the whole block."""
        return f"Week {self.row * WEEKS_PER_ROW + self.week + 1}, Day {self.day + 1}"


def cell_position(index: int) -> CellPosition:
    """
    Map a cell index to its row, week-in-row and day.

    Example:
        >>> cell_position(37)
        CellPosition(row=1, week=1, day=2)
    """
    return CellPosition(
        row=index // CELLS_PER_ROW,
        week=(index % CELLS_PER_ROW) // DAYS_PER_WEEK,
        day=index % DAYS_PER_WEEK,
    )


def apply_toggle(cells: Sequence[CellStatus], index: int) -> Tuple[CellStatus, ...]:
    """
    Return a copy of ``cells`` with the cell at ``index`` toggled.

    The input sequence is left untouched so callers can keep the previous
    value around.

    Args:
        cells: Current cell statuses
        index: Position to toggle, in ``[0, len(cells))``

    Returns:
        New tuple of statuses differing from ``cells`` only at ``index``

    Raises:
        IndexError: If ``index`` is out of range; negative indices included
        TypeError: If ``index`` is not an integer
    """
    index = operator.index(index)
    if not 0 <= index < len(cells):
        raise IndexError(
            f"Cell index {index} out of range for block of {len(cells)} cells"
        )

    updated = list(cells)
    updated[index] = toggle(updated[index])
    return tuple(updated)


def aggregate_row(cells: Sequence[CellStatus]) -> Tuple[int, int]:
    """
    Count ticked and crossed cells in one row.

    Args:
        cells: Exactly one row of cell statuses

    Returns:
        Tuple of (tick_count, cross_count)

    Raises:
        ValueError: If ``cells`` is not exactly one row long
    """
    if len(cells) != CELLS_PER_ROW:
        raise ValueError(
            f"A row has {CELLS_PER_ROW} cells, got {len(cells)}"
        )

    ticks = sum(1 for cell in cells if cell == CellStatus.TICK)
    crosses = sum(1 for cell in cells if cell == CellStatus.CROSS)
    return ticks, crosses


class BlockSpec(BaseModel):
    """
    Declared shape and presentation of a tracked block.

    Attributes:
        label: Block label; also the field name in the tracker document
        rows: Number of 28-day rows
        color: Color theme used when rendering
        prefixes: Optional short label shown before each row
        badge: Optional caption shown above the block

    Example:
        >>> spec = BlockSpec(label="Spending Awareness (X)", rows=1, prefixes=["X"])
        >>> spec.size
        28
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="Block label")
    rows: int = Field(..., ge=1, description="Number of 28-day rows")
    color: ColorTheme = Field(ColorTheme.ORANGE, description="Color theme")
    prefixes: Tuple[str, ...] = Field(default=(), description="Row prefixes")
    badge: Optional[str] = Field(None, description="Caption above the block")

    @model_validator(mode="after")
    def validate_prefixes(self) -> "BlockSpec":
        if len(self.prefixes) > self.rows:
            raise ValueError(
                f"Block '{self.label}' has {self.rows} rows but "
                f"{len(self.prefixes)} prefixes"
            )
        return self

    @property
    def size(self) -> int:
        return self.rows * CELLS_PER_ROW

    def prefix_for(self, row: int) -> str:
        return self.prefixes[row] if row < len(self.prefixes) else ""

    def blank_block(self) -> "Block":
        return Block.blank(self.label, self.rows)

    def block_from(self, document: Optional[Mapping[str, Any]]) -> "Block":
        return Block.from_document(self.label, self.rows, document)


class RowSummary(BaseModel):
    """Derived counts and mood for one row of a block."""

    model_config = ConfigDict(frozen=True)

    row: int
    tick_count: int
    cross_count: int
    mood: Mood

    @classmethod
    def from_cells(cls, row: int, cells: Sequence[CellStatus]) -> "RowSummary":
        ticks, crosses = aggregate_row(cells)
        return cls(
            row=row, tick_count=ticks, cross_count=crosses, mood=mood_for(ticks, crosses)
        )


class Block(BaseModel):
    """
    Immutable snapshot of a block's cell statuses.

    Blocks are values: toggling returns a new ``Block`` and the previous one
    stays valid, which lets callers restore it after a failed write.

    Attributes:
        label: Block label
        rows: Number of 28-day rows
        cells: Cell statuses, ``rows * 28`` long

    Example:
        >>> block = Block.blank("Saving", rows=1)
        >>> block = block.apply_toggle(0)
        >>> block.cells[0]
        <CellStatus.TICK: 'tick'>
        >>> block.row_summary(0).mood
        <Mood.PLEASED: 'pleased'>
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="Block label")
    rows: int = Field(..., ge=1, description="Number of 28-day rows")
    cells: Tuple[CellStatus, ...] = Field(..., description="Cell statuses")

    @model_validator(mode="after")
    def validate_length(self) -> "Block":
        expected = self.rows * CELLS_PER_ROW
        if len(self.cells) != expected:
            raise ValueError(
                f"Block '{self.label}' expects {expected} cells, got {len(self.cells)}"
            )
        return self

    @classmethod
    def blank(cls, label: str, rows: int) -> "Block":
        """Create an all-blank block."""
        return cls(label=label, rows=rows, cells=(CellStatus.BLANK,) * (rows * CELLS_PER_ROW))

    @classmethod
    def from_document(
        cls, label: str, rows: int, document: Optional[Mapping[str, Any]]
    ) -> "Block":
        """
        Materialize a block from a tracker document.

        The document entry for ``label`` is used only when it is a list of
        exactly ``rows * 28`` valid status codes. A missing document, a
        missing entry, a length mismatch or an unknown status code all give
        an all-blank block; partial entries are never repaired.

        Args:
            label: Block label, used as the document field name
            rows: Number of rows the block is declared with
            document: Tracker document, or None when it does not exist

        Returns:
            Block instance
        """
        expected = rows * CELLS_PER_ROW
        entry = document.get(label) if document else None

        if not isinstance(entry, (list, tuple)) or len(entry) != expected:
            return cls.blank(label, rows)

        try:
            cells = tuple(CellStatus(code) for code in entry)
        except ValueError:
            return cls.blank(label, rows)

        return cls(label=label, rows=rows, cells=cells)

    @property
    def size(self) -> int:
        return len(self.cells)

    def apply_toggle(self, index: int) -> "Block":
        """
        Return a new block with the cell at ``index`` advanced one step.

        Raises:
            IndexError: If ``index`` is outside the block
        """
        return Block(label=self.label, rows=self.rows, cells=apply_toggle(self.cells, index))

    def row(self, row: int) -> Tuple[CellStatus, ...]:
        """Cells of one row."""
        if not 0 <= row < self.rows:
            raise IndexError(f"Row {row} out of range for block of {self.rows} rows")
        start = row * CELLS_PER_ROW
        return self.cells[start:start + CELLS_PER_ROW]

    def row_summary(self, row: int) -> RowSummary:
        return RowSummary.from_cells(row, self.row(row))

    def summaries(self) -> List[RowSummary]:
        return [self.row_summary(row) for row in range(self.rows)]

    def to_document_fields(self) -> Dict[str, List[str]]:
        """
        Convert the block to the fields written into the tracker document.

        Returns:
            Mapping of the block label to its list of status codes
        """
        return {self.label: [cell.value for cell in self.cells]}


# Blocks of the default financial skills tracker
DEFAULT_BLOCKS: Tuple[BlockSpec, ...] = (
    BlockSpec(
        label="Spending Awareness (X)",
        rows=1,
        color=ColorTheme.ORANGE,
        prefixes=("X",),
        badge="X: Track Daily Spending",
    ),
    BlockSpec(
        label="Spending + Budgeting (X + Y)",
        rows=2,
        color=ColorTheme.PURPLE,
        prefixes=("X", "Y"),
        badge="Y: Budget Planning",
    ),
    BlockSpec(
        label="Spending + Budgeting + Saving (X + Y + Z)",
        rows=3,
        color=ColorTheme.ORANGE,
        prefixes=("X", "Y", "Z"),
        badge="Z: Saving Habit",
    ),
)
