"""
Mood derivation for tracker rows.

A row of 28 cells is summarized by a mood chosen from its tick and cross
counts. Thresholds are checked in a fixed order, crosses before ticks and
highest threshold first; the first match wins.

Classes:
    Mood: Enum of row moods with their emoji and caption

Functions:
    mood_for: Mood for a pair of counts
    emoji_key: Moods in legend order with emoji and caption
"""

from enum import Enum
from typing import Dict, List, Tuple


class Mood(str, Enum):
    """Row mood, from best to worst as shown in the emoji key."""

    NEUTRAL = "neutral"
    PLEASED = "pleased"
    HAPPY = "happy"
    AMUSED = "amused"
    CELEBRATORY = "celebratory"
    ELATED = "elated"
    CONCERNED = "concerned"
    DISCOURAGED = "discouraged"
    OVERWHELMED_WORST = "overwhelmed-worst"

    @property
    def emoji(self) -> str:
        return _EMOJI[self]

    @property
    def caption(self) -> str:
        return _CAPTIONS[self]


_EMOJI: Dict[Mood, str] = {
    Mood.NEUTRAL: "🙂",
    Mood.PLEASED: "☺️",
    Mood.HAPPY: "😁",
    Mood.AMUSED: "😆",
    Mood.CELEBRATORY: "🥳",
    Mood.ELATED: "🤩",
    Mood.CONCERNED: "😳",
    Mood.DISCOURAGED: "😔",
    Mood.OVERWHELMED_WORST: "🤯",
}

_CAPTIONS: Dict[Mood, str] = {
    Mood.NEUTRAL: "Neutral",
    Mood.PLEASED: "Great start",
    Mood.HAPPY: "You're doing great!",
    Mood.AMUSED: "Keep going, you've got this!",
    Mood.CELEBRATORY: "Congratulations!! You did it!",
    Mood.ELATED: "Absolutely crushed it!",
    Mood.CONCERNED: "Oops, a few misses.",
    Mood.DISCOURAGED: "You're going the wrong way.",
    Mood.OVERWHELMED_WORST: "Ouch, let's try again.",
}

# Evaluated top to bottom; crosses override ticks.
CROSS_THRESHOLDS: Tuple[Tuple[int, Mood], ...] = (
    (28, Mood.OVERWHELMED_WORST),
    (14, Mood.DISCOURAGED),
    (9, Mood.CONCERNED),
)

TICK_THRESHOLDS: Tuple[Tuple[int, Mood], ...] = (
    (28, Mood.ELATED),
    (20, Mood.CELEBRATORY),
    (14, Mood.AMUSED),
    (7, Mood.HAPPY),
    (1, Mood.PLEASED),
)


def mood_for(tick_count: int, cross_count: int) -> Mood:
    """
    Derive the mood for a row from its tick and cross counts.

    Cross thresholds are evaluated first, so a row that qualifies for both
    a cross mood and a tick mood always gets the cross mood.

    Args:
        tick_count: Number of ticked cells in the row
        cross_count: Number of crossed cells in the row

    Returns:
        The first matching mood, or ``Mood.NEUTRAL``

    Example:
        >>> mood_for(20, 14)
        <Mood.DISCOURAGED: 'discouraged'>
        >>> mood_for(7, 0).emoji
        '😁'
    """
    for threshold, mood in CROSS_THRESHOLDS:
        if cross_count >= threshold:
            return mood

    for threshold, mood in TICK_THRESHOLDS:
        if tick_count >= threshold:
            return mood

    return Mood.NEUTRAL


def emoji_key() -> List[Dict[str, str]]:
    """Legend entries for every mood, in display order."""
    return [
        {"mood": mood.value, "emoji": mood.emoji, "caption": mood.caption}
        for mood in Mood
    ]
