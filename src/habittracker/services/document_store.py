"""
Document store interface and in-memory implementation.

Tracker documents are addressed by a collection path and a document id,
e.g. ``("trackers/<tracker-id>/users", "<user-id>")``. A document maps block
labels to lists of status codes. Stores support two operations:

* ``subscribe``: deliver the current document immediately, then every
  change, to a callback until the returned subscription is released
* ``merge_write``: set top-level fields, creating the document if needed and
  leaving every other field in place

Classes:
    Subscription: Handle for a snapshot listener; callable to unsubscribe
    DocumentStore: Abstract base with listener bookkeeping
    InMemoryDocumentStore: Process-local store used by tests and local runs
"""

import copy
import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

from ..utils.log import log_event

logger = logging.getLogger(__name__)

Document = Dict[str, Any]
SnapshotCallback = Callable[[Optional[Document]], None]
DocumentKey = Tuple[str, str]


class Subscription:
    """
    A registered snapshot listener.

    Calling the subscription (or ``unsubscribe``) stops deliveries; any
    snapshot arriving afterwards is ignored. It can also be used as a context
    manager so the listener is released when the block exits.

    Example:
        >>> with store.subscribe("trackers/t/users", "u1", print):
        ...     store.merge_write("trackers/t/users", "u1", {"Saving": []})
    """

    def __init__(self, store: "DocumentStore", key: DocumentKey, callback: SnapshotCallback):
        self._store = store
        self.key = key
        self._callback = callback
        self.active = True

    def deliver(self, document: Optional[Document]) -> None:
        if self.active:
            self._callback(document)

    def unsubscribe(self) -> None:
        if self.active:
            self.active = False
            self._store._remove(self)

    def __call__(self) -> None:
        self.unsubscribe()

    def __enter__(self) -> "Subscription":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.unsubscribe()


class DocumentStore(ABC):
    """
    Base class for tracker document stores.

    Subclasses implement ``get_document`` and ``merge_write``; they call
    ``_publish`` whenever a document changes so subscribers see the new
    snapshot.
    """

    def __init__(self) -> None:
        self._subscriptions: Dict[DocumentKey, List[Subscription]] = {}

    @abstractmethod
    def get_document(self, collection_path: str, document_id: str) -> Optional[Document]:
        """
        Read a document.

        Returns:
            The document's fields, or None if it does not exist

        Raises:
            DocumentStoreError: If the backend cannot be read
        """

    @abstractmethod
    def merge_write(
        self, collection_path: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        """
        Set top-level ``fields`` on a document, creating it when absent.

        Fields not named in ``fields`` are left untouched.

        Raises:
            DocumentStoreError: If the write is rejected
        """

    def subscribe(
        self, collection_path: str, document_id: str, on_change: SnapshotCallback
    ) -> Subscription:
        """
        Listen for snapshots of a document.

        The current snapshot (or None) is delivered before this method
        returns; later changes are delivered as they are published.

        Args:
            collection_path: Collection containing the document
            document_id: Document id within the collection
            on_change: Callback receiving the document or None

        Returns:
            Subscription; call it to stop listening

        Raises:
            DocumentStoreError: If the initial snapshot cannot be read
        """
        document = self.get_document(collection_path, document_id)

        key = (collection_path, document_id)
        subscription = Subscription(self, key, on_change)
        self._subscriptions.setdefault(key, []).append(subscription)
        self._watch(key, document)

        log_event(
            logger,
            "SUBSCRIBED",
            level=logging.DEBUG,
            collection=collection_path,
            exists=document is not None,
        )
        subscription.deliver(document)
        return subscription

    def health_check(self) -> Dict[str, Any]:
        return {"status": "healthy", "backend": type(self).__name__}

    def subscriber_count(self, collection_path: str, document_id: str) -> int:
        return len(self._subscriptions.get((collection_path, document_id), []))

    def close(self) -> None:
        """Release every subscription held on this store."""
        for subscriptions in list(self._subscriptions.values()):
            for subscription in list(subscriptions):
                subscription.unsubscribe()

    def _publish(
        self, collection_path: str, document_id: str, document: Optional[Document]
    ) -> None:
        for subscription in list(self._subscriptions.get((collection_path, document_id), [])):
            subscription.deliver(copy.deepcopy(document))

    def _watch(self, key: DocumentKey, document: Optional[Document]) -> None:
        """Called after a subscription registers, with its initial snapshot."""

    def _remove(self, subscription: Subscription) -> None:
        subscriptions = self._subscriptions.get(subscription.key, [])
        if subscription in subscriptions:
            subscriptions.remove(subscription)
        if not subscriptions:
            self._subscriptions.pop(subscription.key, None)


class InMemoryDocumentStore(DocumentStore):
    """
    Document store kept in a process-local dictionary.

    Every subscriber of a document sees each write, which makes it a
    stand-in for a shared remote store when several sessions use the same
    instance.

    Example:
        >>> store = InMemoryDocumentStore()
        >>> store.merge_write("trackers/t/users", "u1", {"Saving": ["tick"]})
        >>> store.get_document("trackers/t/users", "u1")
        {'Saving': ['tick']}
    """

    def __init__(self) -> None:
        super().__init__()
        self._documents: Dict[DocumentKey, Document] = {}

    def get_document(self, collection_path: str, document_id: str) -> Optional[Document]:
        document = self._documents.get((collection_path, document_id))
        return copy.deepcopy(document) if document is not None else None

    def merge_write(
        self, collection_path: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        if not fields:
            raise ValueError("merge_write needs at least one field")

        document = self._documents.setdefault((collection_path, document_id), {})
        document.update(copy.deepcopy(dict(fields)))
        self._publish(collection_path, document_id, document)

    def delete_document(self, collection_path: str, document_id: str) -> None:
        """Remove a document; subscribers receive None."""
        if self._documents.pop((collection_path, document_id), None) is not None:
            self._publish(collection_path, document_id, None)
