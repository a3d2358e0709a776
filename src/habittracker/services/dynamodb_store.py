"""
DynamoDB document store for the habit tracker.

Each tracker document is one DynamoDB item keyed by ``collection_path``
(partition key) and ``document_id`` (sort key). Document fields are stored as
top-level attributes, so a merge-write is a single ``UpdateItem`` with one
``SET`` clause per field: the item is created when missing and attributes
that are not named are left alone.

DynamoDB has no push channel for item changes, so subscribers are notified
after writes made through this store and whenever ``refresh`` finds that a
watched item changed. Only watched items are remembered for that
comparison.

Classes:
    DynamoDBDocumentStore: DocumentStore backed by a DynamoDB table
"""

import copy
import logging
import os
from typing import Any, Dict, Mapping, Optional

import boto3
from botocore.exceptions import ClientError, NoCredentialsError

from ..exceptions import DocumentStoreError
from ..utils.log import log_event
from .document_store import Document, DocumentKey, DocumentStore, Subscription

logger = logging.getLogger(__name__)


class DynamoDBDocumentStore(DocumentStore):
    """
    Document store backed by a DynamoDB table.

    Attributes:
        table_name: Name of the DynamoDB table
        region: AWS region of the table
        dynamodb: Boto3 DynamoDB resource
        table: DynamoDB table resource

    Example:
        >>> store = DynamoDBDocumentStore(table_name="habit-trackers")
        >>> store.merge_write("trackers/t/users", "u1", {"Saving": ["tick"] + ["blank"] * 27})
        >>> store.get_document("trackers/t/users", "u1")["Saving"][0]
        'tick'
    """

    COLLECTION_KEY = "collection_path"
    DOCUMENT_KEY = "document_id"

    def __init__(self, table_name: Optional[str] = None, region: Optional[str] = None):
        """
        Initialize the DynamoDB document store.

        Args:
            table_name: Optional table name override, uses TRACKER_TABLE if not provided
            region: Optional region override, uses AWS_REGION if not provided

        Raises:
            ValueError: If no table name is configured or the table does not exist
            DocumentStoreError: If AWS credentials are missing or the table cannot be loaded
        """
        super().__init__()
        self.table_name = table_name or os.getenv("TRACKER_TABLE")
        self.region = region or os.getenv("AWS_REGION", "us-east-1")

        if not self.table_name:
            raise ValueError(
                "Table name must be provided either as parameter or TRACKER_TABLE environment variable"
            )

        self._last_seen: Dict[DocumentKey, Optional[Document]] = {}

        try:
            self.dynamodb = boto3.resource("dynamodb", region_name=self.region)
            self.table = self.dynamodb.Table(self.table_name)

            # Verify table exists by getting its description
            self.table.load()

        except NoCredentialsError as e:
            raise DocumentStoreError(
                "AWS credentials not found. Please configure AWS credentials."
            ) from e
        except ClientError as e:
            if e.response["Error"]["Code"] == "ResourceNotFoundException":
                raise ValueError(f"DynamoDB table '{self.table_name}' not found") from e
            raise DocumentStoreError(f"Cannot load table '{self.table_name}': {e}") from e

    def _key(self, collection_path: str, document_id: str) -> Dict[str, str]:
        return {self.COLLECTION_KEY: collection_path, self.DOCUMENT_KEY: document_id}

    def _fields_of(self, item: Optional[Dict[str, Any]]) -> Optional[Document]:
        if item is None:
            return None
        return {
            k: v for k, v in item.items() if k not in (self.COLLECTION_KEY, self.DOCUMENT_KEY)
        }

    def get_document(self, collection_path: str, document_id: str) -> Optional[Document]:
        try:
            response = self.table.get_item(
                Key=self._key(collection_path, document_id), ConsistentRead=True
            )
        except ClientError as e:
            log_event(
                logger,
                "DOCUMENT_READ_FAILED",
                level=logging.ERROR,
                collection=collection_path,
                error=str(e),
            )
            raise DocumentStoreError(f"Error reading tracker document: {e}") from e

        document = self._fields_of(response.get("Item"))
        self._remember((collection_path, document_id), document)
        return document

    def merge_write(
        self, collection_path: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        """
        Set top-level fields on the item, creating it when absent.

        Field names go through expression attribute names, so labels with
        spaces or punctuation are stored verbatim.

        Args:
            collection_path: Collection containing the document
            document_id: Document id within the collection
            fields: Fields to set

        Raises:
            ValueError: If ``fields`` is empty or names a key attribute
            DocumentStoreError: If DynamoDB rejects the update
        """
        if not fields:
            raise ValueError("merge_write needs at least one field")

        reserved = {self.COLLECTION_KEY, self.DOCUMENT_KEY} & set(fields)
        if reserved:
            raise ValueError(f"Field names {sorted(reserved)} are reserved for the item key")

        names: Dict[str, str] = {}
        values: Dict[str, Any] = {}
        clauses = []
        for position, (name, value) in enumerate(fields.items()):
            names[f"#f{position}"] = name
            values[f":v{position}"] = value
            clauses.append(f"#f{position} = :v{position}")

        try:
            response = self.table.update_item(
                Key=self._key(collection_path, document_id),
                UpdateExpression="SET " + ", ".join(clauses),
                ExpressionAttributeNames=names,
                ExpressionAttributeValues=values,
                ReturnValues="ALL_NEW",
            )
        except ClientError as e:
            log_event(
                logger,
                "DOCUMENT_WRITE_FAILED",
                level=logging.ERROR,
                collection=collection_path,
                fields=list(fields),
                error=str(e),
            )
            raise DocumentStoreError(f"Error writing tracker document: {e}") from e

        document = self._fields_of(response.get("Attributes", {}))
        self._remember((collection_path, document_id), document)
        self._publish(collection_path, document_id, document)

    def _remember(self, key: DocumentKey, document: Optional[Document]) -> None:
        if key in self._subscriptions:
            self._last_seen[key] = copy.deepcopy(document)

    def _watch(self, key: DocumentKey, document: Optional[Document]) -> None:
        self._remember(key, document)

    def _remove(self, subscription: Subscription) -> None:
        super()._remove(subscription)
        if subscription.key not in self._subscriptions:
            self._last_seen.pop(subscription.key, None)

    def refresh(self) -> int:
        """
        Re-read every watched document and deliver the ones that changed.

        Returns:
            Number of documents whose new snapshot was delivered

        Raises:
            DocumentStoreError: If a watched document cannot be read
        """
        delivered = 0
        for collection_path, document_id in list(self._subscriptions):
            previous = self._last_seen.get((collection_path, document_id))
            current = self.get_document(collection_path, document_id)
            if current != previous:
                self._publish(collection_path, document_id, current)
                delivered += 1

        return delivered

    def health_check(self) -> Dict[str, Any]:
        """
        Perform a health check on the DynamoDB table.

        Returns:
            Dictionary with health check results
        """
        try:
            table_description = self.table.meta.client.describe_table(
                TableName=self.table_name
            )

            return {
                "status": "healthy",
                "table_name": self.table_name,
                "table_status": table_description["Table"]["TableStatus"],
                "region": self.region,
            }

        except ClientError as e:
            return {
                "status": "unhealthy",
                "error": str(e),
                "table_name": self.table_name,
            }
