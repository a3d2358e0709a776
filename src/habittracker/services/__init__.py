"""
Service layer for the habit tracker.

This module contains the persistence and identity boundaries and the
services that keep tracker blocks in sync with them.

Classes:
    DocumentStore: Interface for subscribing to and merge-writing documents
    InMemoryDocumentStore: Process-local document store
    DynamoDBDocumentStore: DynamoDB-backed document store
    IdentityProvider: Interface for anonymous user identities
    StaticIdentityProvider: Provider with a fixed user id
    CognitoIdentityProvider: Cognito identity pool provider
    BlockSession: Synced state of one block
    TrackerService: Orchestrates the blocks of one user's tracker
"""

from .block_session import BlockSession, WriteFailure
from .document_store import DocumentStore, InMemoryDocumentStore, Subscription
from .dynamodb_store import DynamoDBDocumentStore
from .identity import CognitoIdentityProvider, IdentityProvider, StaticIdentityProvider
from .tracker_service import TrackerService

__all__ = [
    "BlockSession",
    "WriteFailure",
    "DocumentStore",
    "InMemoryDocumentStore",
    "Subscription",
    "DynamoDBDocumentStore",
    "CognitoIdentityProvider",
    "IdentityProvider",
    "StaticIdentityProvider",
    "TrackerService",
]
