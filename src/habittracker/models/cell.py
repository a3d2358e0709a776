"""
Cell status model for the habit tracker.

Each tracked day is one cell holding one of three statuses. Tapping a cell
advances it through the fixed cycle blank -> tick -> cross -> blank.

Classes:
    CellStatus: Enum of the three cell statuses

Functions:
    toggle: Next status in the cycle
"""

from enum import Enum


class CellStatus(str, Enum):
    """
    Status of a single tracked day.

    The enum values are the codes stored in tracker documents.
    """

    BLANK = "blank"
    TICK = "tick"
    CROSS = "cross"


_CYCLE = (CellStatus.BLANK, CellStatus.TICK, CellStatus.CROSS)


def toggle(status: CellStatus) -> CellStatus:
    """
    Return the status that follows ``status`` in the cycle.

    Args:
        status: Current status; a plain status code string is accepted

    Returns:
        The next status

    Raises:
        ValueError: If ``status`` is not one of the three statuses

    Example:
        >>> toggle(CellStatus.BLANK)
        <CellStatus.TICK: 'tick'>
        >>> toggle(CellStatus.CROSS)
        <CellStatus.BLANK: 'blank'>
    """
    current = CellStatus(status)
    return _CYCLE[(_CYCLE.index(current) + 1) % len(_CYCLE)]
