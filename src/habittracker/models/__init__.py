"""
Data models for the habit tracker.

This module contains the cell state machine, the block model with its row
aggregation, mood derivation, color themes and render-ready views.

Classes:
    CellStatus: Enum of the three cell statuses
    Mood: Enum of row moods
    ColorTheme: Enum of block color themes
    BlockSpec: Declared shape and presentation of a block
    Block: Immutable snapshot of a block's cell statuses
    RowSummary: Derived counts and mood of one row
    BlockView: Render-ready view of a block
"""

from .block import (
    CELLS_PER_ROW,
    DEFAULT_BLOCKS,
    Block,
    BlockSpec,
    CellPosition,
    RowSummary,
    aggregate_row,
    apply_toggle,
    cell_position,
)
from .cell import CellStatus, toggle
from .mood import Mood, emoji_key, mood_for
from .theme import STYLE_TABLE, CellStyle, ColorTheme, style_for
from .view import BlockView, CellView, RowView

__all__ = [
    "CELLS_PER_ROW",
    "DEFAULT_BLOCKS",
    "Block",
    "BlockSpec",
    "CellPosition",
    "RowSummary",
    "aggregate_row",
    "apply_toggle",
    "cell_position",
    "CellStatus",
    "toggle",
    "Mood",
    "emoji_key",
    "mood_for",
    "STYLE_TABLE",
    "CellStyle",
    "ColorTheme",
    "style_for",
    "BlockView",
    "CellView",
    "RowView",
]
