"""
Render-ready views of tracker blocks.

Views carry everything a grid renderer needs: per-cell status, title and CSS
classes, plus each row's prefix, counts and mood emoji. They are built from a
``BlockSpec`` and a ``Block`` snapshot and hold no behaviour of their own.

Classes:
    CellView: One clickable cell
    RowView: One 28-day row with its summary
    BlockView: A whole block as shown in the tracker
"""

from typing import List, Optional

from pydantic import BaseModel

from .block import CELLS_PER_ROW, Block, BlockSpec, cell_position
from .cell import CellStatus
from .theme import ColorTheme, style_for


class CellView(BaseModel):
    index: int
    status: CellStatus
    title: str
    css_class: str


class RowView(BaseModel):
    row: int
    prefix: str
    tick_count: int
    cross_count: int
    mood: str
    emoji: str
    cells: List[CellView]


class BlockView(BaseModel):
    """
    A block ready for display.

    Attributes:
        label: Block label
        badge: Caption shown above the block, if any
        color: Color theme name
        heading_class: CSS classes for the block heading
        rows: Row views in order
    """

    label: str
    badge: Optional[str] = None
    color: ColorTheme
    heading_class: str
    rows: List[RowView]

    @classmethod
    def build(cls, spec: BlockSpec, block: Block) -> "BlockView":
        """
        Build the view of ``block`` using the presentation settings of ``spec``.

        Args:
            spec: Block spec providing theme, prefixes and badge
            block: Current block snapshot

        Returns:
            BlockView instance

        Raises:
            ValueError: If the block does not match the spec's label or size
        """
        if block.label != spec.label or block.size != spec.size:
            raise ValueError(
                f"Block '{block.label}' ({block.size} cells) does not match "
                f"spec '{spec.label}' ({spec.size} cells)"
            )

        style = style_for(spec.color)
        css_by_status = {
            CellStatus.TICK: style.tick,
            CellStatus.CROSS: style.cross,
            CellStatus.BLANK: style.blank,
        }

        rows = []
        for summary in block.summaries():
            start = summary.row * CELLS_PER_ROW
            cells = [
                CellView(
                    index=start + offset,
                    status=status,
                    title=cell_position(start + offset).title,
                    css_class=css_by_status[status],
                )
                for offset, status in enumerate(block.row(summary.row))
            ]
            rows.append(
                RowView(
                    row=summary.row,
                    prefix=spec.prefix_for(summary.row),
                    tick_count=summary.tick_count,
                    cross_count=summary.cross_count,
                    mood=summary.mood.value,
                    emoji=summary.mood.emoji,
                    cells=cells,
                )
            )

        return cls(
            label=spec.label,
            badge=spec.badge,
            color=spec.color,
            heading_class=style.heading,
            rows=rows,
        )
