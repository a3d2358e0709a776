"""
Live, synced state of one tracker block.

A ``BlockSession`` holds the in-memory ``Block`` for one label of one user's
tracker document. While open it listens to the document store and replaces
the block wholesale with every snapshot it receives. Toggling updates the
block locally first and then writes the whole block back under its label.

A session that could not read the stored block refuses to toggle, so the
blank placeholder never overwrites saved progress. A failed write is logged
and the optimistic local state is kept. Callers that want to undo the change
pass an ``on_write_failure`` hook and call ``restore`` with the previous block
it receives.

Classes:
    WriteFailure: Details of a write that did not persist
    BlockSession: Synced state of one block
"""

import logging
from typing import Any, Callable, Mapping, Optional

from ..exceptions import BlockNotLoadedError, DocumentStoreError, NotAuthenticatedError
from ..models.block import Block, BlockSpec
from ..utils.log import log_event
from .document_store import DocumentStore, Subscription

logger = logging.getLogger(__name__)


class WriteFailure:
    """A toggle whose write to the document store failed."""

    def __init__(self, label: str, previous: Block, attempted: Block, error: Exception):
        self.label = label
        self.previous = previous
        self.attempted = attempted
        self.error = error

    def __repr__(self) -> str:
        return f"WriteFailure(label={self.label!r}, error={self.error!r})"


WriteFailureHook = Callable[[WriteFailure], None]


class BlockSession:
    """
    Synced in-memory state of a single block.

    Without a user id the session never touches the store: the block stays
    all-blank and ``toggle`` raises ``NotAuthenticatedError``.

    Attributes:
        spec: Shape and presentation of the block
        store: Document store holding the tracker document
        collection_path: Collection of per-user tracker documents
        user_id: Id of the document owner, or None when not signed in
        on_write_failure: Optional hook called after a failed write

    Example:
        >>> with BlockSession(spec, store, "trackers/t/users", "u1") as session:
        ...     session.toggle(0)
        ...     session.block.row_summary(0).mood
        <Mood.PLEASED: 'pleased'>
    """

    def __init__(
        self,
        spec: BlockSpec,
        store: DocumentStore,
        collection_path: str,
        user_id: Optional[str],
        on_write_failure: Optional[WriteFailureHook] = None,
    ):
        self.spec = spec
        self.store = store
        self.collection_path = collection_path
        self.user_id = user_id
        self.on_write_failure = on_write_failure

        self._block = spec.blank_block()
        self._loaded = False
        self._subscription: Optional[Subscription] = None

    @property
    def label(self) -> str:
        return self.spec.label

    @property
    def block(self) -> Block:
        """Current block snapshot."""
        return self._block

    @property
    def is_loaded(self) -> bool:
        """True once a snapshot of the stored document has been applied."""
        return self._loaded

    @property
    def is_open(self) -> bool:
        return self._subscription is not None and self._subscription.active

    def open(self) -> "BlockSession":
        """
        Start listening for snapshots of the user's tracker document.

        Does nothing when there is no user id or the session is already
        open. If the initial read fails the error is logged, the block
        stays as it is and the session remains unloaded.

        Returns:
            The session itself
        """
        if self.user_id is None or self.is_open:
            return self

        try:
            self._subscription = self.store.subscribe(
                self.collection_path, self.user_id, self._on_snapshot
            )
        except DocumentStoreError as e:
            log_event(
                logger,
                "SUBSCRIBE_FAILED",
                level=logging.ERROR,
                label=self.label,
                error=str(e),
            )

        return self

    def close(self) -> None:
        """Stop listening; snapshots delivered afterwards are ignored."""
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None

    def __enter__(self) -> "BlockSession":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _on_snapshot(self, document: Optional[Mapping[str, Any]]) -> None:
        # Whole-label replacement; no per-cell merge
        self._block = self.spec.block_from(document)
        self._loaded = True

        if document is None:
            log_event(
                logger,
                "DOCUMENT_MISSING",
                level=logging.DEBUG,
                label=self.label,
                detail="will be created on first interaction",
            )

    def toggle(self, index: int) -> Block:
        """
        Advance one cell and persist the whole block.

        The local block is replaced before the write is attempted. If the
        store rejects the write the failure is logged, handed to
        ``on_write_failure`` when set, and the local change is kept.

        Args:
            index: Cell index within the block

        Returns:
            The updated local block

        Raises:
            NotAuthenticatedError: If the session has no user id
            BlockNotLoadedError: If the stored block has not been read
            IndexError: If ``index`` is outside the block
        """
        if self.user_id is None:
            log_event(
                logger,
                "TOGGLE_REJECTED",
                level=logging.ERROR,
                label=self.label,
                reason="user not authenticated",
            )
            raise NotAuthenticatedError("User not authenticated, cannot save progress.")

        if not self._loaded:
            log_event(
                logger,
                "TOGGLE_REJECTED",
                level=logging.ERROR,
                label=self.label,
                reason="stored block not loaded",
            )
            raise BlockNotLoadedError(
                f"Stored progress for '{self.label}' could not be loaded, not saving."
            )

        previous = self._block
        updated = previous.apply_toggle(index)
        self._block = updated

        try:
            self.store.merge_write(
                self.collection_path, self.user_id, updated.to_document_fields()
            )
        except DocumentStoreError as e:
            log_event(
                logger,
                "WRITE_FAILED",
                level=logging.ERROR,
                label=self.label,
                index=index,
                error=str(e),
            )
            if self.on_write_failure is not None:
                self.on_write_failure(WriteFailure(self.label, previous, updated, e))

        return self._block

    def restore(self, block: Block) -> None:
        """
        Replace the local block, e.g. to roll back a failed toggle.

        Nothing is written to the store.

        Raises:
            ValueError: If ``block`` has a different label or size
        """
        if block.label != self.label or block.size != self.spec.size:
            raise ValueError(
                f"Cannot restore block '{block.label}' ({block.size} cells) "
                f"into session '{self.label}' ({self.spec.size} cells)"
            )
        self._block = block
