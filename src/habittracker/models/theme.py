"""
Color themes for rendering blocks.

Each theme maps to a fixed set of CSS classes so renderers never build class
names from color strings.
"""

from enum import Enum
from typing import Dict

from pydantic import BaseModel, ConfigDict


class ColorTheme(str, Enum):
    ORANGE = "orange"
    PURPLE = "purple"


class CellStyle(BaseModel):
    """CSS classes used for one theme."""

    model_config = ConfigDict(frozen=True)

    heading: str
    prefix: str
    tick: str
    cross: str
    blank: str


_CROSS = "bg-white text-red-500 border-red-400"
_BLANK = "bg-white text-transparent hover:bg-gray-200 border-gray-300"

STYLE_TABLE: Dict[ColorTheme, CellStyle] = {
    ColorTheme.ORANGE: CellStyle(
        heading="text-orange-700",
        prefix="text-orange-600",
        tick="bg-orange-500 text-white border-orange-600",
        cross=_CROSS,
        blank=_BLANK,
    ),
    ColorTheme.PURPLE: CellStyle(
        heading="text-purple-700",
        prefix="text-purple-600",
        tick="bg-purple-500 text-white border-purple-600",
        cross=_CROSS,
        blank=_BLANK,
    ),
}


def style_for(theme: ColorTheme) -> CellStyle:
    return STYLE_TABLE[ColorTheme(theme)]
