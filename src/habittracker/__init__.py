"""
HabitTracker: week-grid habit tracking with per-row mood indicators.

Users tap the cells of week grids to cycle each day through blank, tick and
cross. Every labeled block is saved per user in a document store and every
28-day row is summarized with an emoji mood derived from its tick and cross
counts.

Modules:
    models: Cell state machine, blocks, moods, themes and views
    services: Document stores, identity providers and tracker orchestration
    lambdas: AWS Lambda handler for the tracker API
    utils: Logging helpers

Version: 0.1.0
"""

__version__ = "0.1.0"

from .config import TrackerConfig
from .exceptions import (
    BlockNotLoadedError,
    DocumentStoreError,
    IdentityUnavailableError,
    NotAuthenticatedError,
    TrackerError,
    UnknownBlockError,
)
from .models import Block, BlockSpec, CellStatus, Mood, aggregate_row, apply_toggle, mood_for, toggle
from .services import (
    BlockSession,
    DynamoDBDocumentStore,
    InMemoryDocumentStore,
    TrackerService,
)

__all__ = [
    "TrackerConfig",
    "BlockNotLoadedError",
    "DocumentStoreError",
    "IdentityUnavailableError",
    "NotAuthenticatedError",
    "TrackerError",
    "UnknownBlockError",
    "Block",
    "BlockSpec",
    "CellStatus",
    "Mood",
    "aggregate_row",
    "apply_toggle",
    "mood_for",
    "toggle",
    "BlockSession",
    "DynamoDBDocumentStore",
    "InMemoryDocumentStore",
    "TrackerService",
]
