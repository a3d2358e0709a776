"""
Tracker service for the habit tracker.

This service ties identity, persistence and the block state machine
together. It resolves the user id, opens one synced ``BlockSession`` per
block of the tracker and offers the operations a front end needs: toggling a
cell, rendering every block with its row moods, and health reporting.

Classes:
    TrackerService: Orchestrates the blocks of one user's tracker
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional

from ..config import TrackerConfig
from ..exceptions import BlockNotLoadedError, IdentityUnavailableError, UnknownBlockError
from ..models.block import DEFAULT_BLOCKS, Block, BlockSpec
from ..models.view import BlockView
from ..utils.log import log_event
from .block_session import BlockSession, WriteFailureHook
from .document_store import DocumentStore
from .identity import IdentityProvider

logger = logging.getLogger(__name__)


class TrackerService:
    """
    Orchestrates the blocks of one user's tracker.

    The store and identity provider are passed in, so a service can run
    against DynamoDB and Cognito in production or an in-memory store in
    tests. ``start`` resolves the user id and opens the block sessions;
    ``close`` releases every subscription. The service is also a context
    manager that does both.

    If no identity can be obtained the service runs without persistence:
    blocks render all-blank and toggles raise ``NotAuthenticatedError``.
    If the user's stored blocks cannot be read, ``render`` and ``toggle``
    raise ``BlockNotLoadedError`` rather than show or save blank blocks.

    Attributes:
        config: Tracker configuration
        store: Document store for tracker documents
        identity: Identity provider for the user id
        specs: Blocks of this tracker, in display order
        user_id: Resolved user id, None until started or without identity

    Example:
        >>> service = TrackerService(store=InMemoryDocumentStore(),
        ...                          identity=StaticIdentityProvider("u1"))
        >>> with service:
        ...     service.toggle("Spending Awareness (X)", 0)
        ...     views = service.render()
    """

    def __init__(
        self,
        store: DocumentStore,
        identity: IdentityProvider,
        config: Optional[TrackerConfig] = None,
        specs: Optional[Iterable[BlockSpec]] = None,
        on_write_failure: Optional[WriteFailureHook] = None,
    ):
        """
        Initialize the tracker service.

        Args:
            store: Document store holding tracker documents
            identity: Provider of the user id
            config: Optional configuration, read from the environment if not provided
            specs: Optional block specs, the default tracker blocks if not provided
            on_write_failure: Optional hook passed to every block session

        Raises:
            ValueError: If two specs share a label
        """
        self.store = store
        self.identity = identity
        self.config = config or TrackerConfig.from_env()
        self.specs: List[BlockSpec] = list(specs if specs is not None else DEFAULT_BLOCKS)
        self.on_write_failure = on_write_failure
        self.user_id: Optional[str] = None

        labels = [spec.label for spec in self.specs]
        duplicates = sorted({label for label in labels if labels.count(label) > 1})
        if duplicates:
            raise ValueError(f"Duplicate block labels: {duplicates}")

        self._sessions: Dict[str, BlockSession] = {}
        self._started = False

    @property
    def is_persisting(self) -> bool:
        return self.user_id is not None

    @property
    def is_loaded(self) -> bool:
        """True when every block reflects the stored document."""
        if not self.is_persisting:
            return True
        return all(session.is_loaded for session in self._sessions.values())

    def start(self) -> "TrackerService":
        """
        Resolve the user id and open a session for every block.

        Identity failures are logged and leave the service in
        non-persisting mode. Calling ``start`` again is a no-op.

        Returns:
            The service itself
        """
        if self._started:
            return self

        try:
            self.user_id = self.identity.resolve_user_id()
        except IdentityUnavailableError as e:
            self.user_id = None
            log_event(
                logger,
                "IDENTITY_UNAVAILABLE",
                level=logging.ERROR,
                tracker_id=self.config.tracker_id,
                error=str(e),
            )

        for spec in self.specs:
            session = BlockSession(
                spec,
                self.store,
                self.config.collection_path,
                self.user_id,
                on_write_failure=self.on_write_failure,
            )
            self._sessions[spec.label] = session.open()

        self._started = True
        log_event(
            logger,
            "TRACKER_STARTED",
            tracker_id=self.config.tracker_id,
            blocks=len(self.specs),
            persisting=self.is_persisting,
        )
        return self

    def close(self) -> None:
        """Close every block session."""
        for session in self._sessions.values():
            session.close()
        self._sessions.clear()
        self._started = False

    def __enter__(self) -> "TrackerService":
        return self.start()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def session(self, label: str) -> BlockSession:
        """
        Get the session of a block.

        Raises:
            UnknownBlockError: If the tracker has no block with ``label``
            RuntimeError: If the service has not been started
        """
        if not self._started:
            raise RuntimeError("TrackerService.start() must be called first")

        try:
            return self._sessions[label]
        except KeyError:
            raise UnknownBlockError(label) from None

    def block(self, label: str) -> Block:
        return self.session(label).block

    def toggle(self, label: str, index: int) -> Block:
        """
        Toggle one cell of a block and persist the block.

        Args:
            label: Block label
            index: Cell index within the block

        Returns:
            The updated local block

        Raises:
            UnknownBlockError: If the tracker has no block with ``label``
            NotAuthenticatedError: If there is no user id
            BlockNotLoadedError: If the stored block could not be read
            IndexError: If ``index`` is outside the block
        """
        block = self.session(label).toggle(index)
        log_event(logger, "BLOCK_TOGGLED", level=logging.DEBUG, label=label, index=index)
        return block

    def render(self) -> List[BlockView]:
        """
        Views of every block in display order.

        Raises:
            BlockNotLoadedError: If a stored block could not be read
        """
        views = []
        for spec in self.specs:
            session = self.session(spec.label)
            if self.is_persisting and not session.is_loaded:
                raise BlockNotLoadedError(
                    f"Stored progress for '{spec.label}' could not be loaded."
                )
            views.append(BlockView.build(spec, session.block))
        return views

    def health_check(self) -> Dict[str, Any]:
        """
        Report the state of the service and its store.

        Returns:
            Dictionary with health check results
        """
        health_status = {
            "status": "healthy",
            "tracker_id": self.config.tracker_id,
            "persisting": self.is_persisting,
            "services": {},
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }

        store_health = self.store.health_check()
        health_status["services"]["store"] = store_health

        if store_health["status"] != "healthy":
            health_status["status"] = "unhealthy"
        elif self._started and not (self.is_persisting and self.is_loaded):
            health_status["status"] = "degraded"

        return health_status
