"""
Pytest configuration and shared fixtures for habit tracker tests.

This module sets up mocked AWS services, in-memory stores and helpers for
building rows, blocks and API Gateway events.

Fixtures:
    aws_credentials: Fake AWS credentials for moto
    mock_tracker_table: Mocked DynamoDB table for tracker documents
    dynamodb_store: DynamoDBDocumentStore bound to the mocked table
    identity_pool_id: Mocked Cognito identity pool allowing guest identities
    memory_store: Fresh InMemoryDocumentStore
    failing_store: In-memory store whose writes always fail
    unreadable_store: In-memory store whose reads always fail
    tracker_config: TrackerConfig for tests
    one_row_spec: Spec of a single-row block
"""

import os
from typing import Any, Dict, List, Mapping, Optional

import boto3
import pytest
from moto import mock_aws

from habittracker.config import TrackerConfig
from habittracker.exceptions import DocumentStoreError
from habittracker.models.block import BlockSpec
from habittracker.models.cell import CellStatus
from habittracker.models.theme import ColorTheme
from habittracker.services.document_store import InMemoryDocumentStore
from habittracker.services.dynamodb_store import DynamoDBDocumentStore


# Test configuration constants
TEST_TABLE_NAME = "test-habit-trackers"
TEST_REGION = "us-east-1"
TEST_USER_ID = "us-east-1:0f1e2d3c-aaaa-bbbb-cccc-1234567890ab"
TEST_APP_ID = "test-app"
TEST_COLLECTION = f"trackers/tana-financial-tracker-{TEST_APP_ID}/users"


@pytest.fixture(scope="session")
def aws_credentials():
    """
    Set fake AWS credentials for moto.

    These are never valid against real AWS.
    """
    os.environ["AWS_ACCESS_KEY_ID"] = "testing"
    os.environ["AWS_SECRET_ACCESS_KEY"] = "testing"
    os.environ["AWS_SECURITY_TOKEN"] = "testing"
    os.environ["AWS_SESSION_TOKEN"] = "testing"
    os.environ["AWS_DEFAULT_REGION"] = TEST_REGION


@pytest.fixture
def mock_tracker_table(aws_credentials):
    """
    Create a mocked DynamoDB table for tracker documents.

    The key schema matches DynamoDBDocumentStore: collection path as the
    partition key and document id as the sort key.

    Returns:
        boto3 Table resource
    """
    with mock_aws():
        dynamodb = boto3.resource("dynamodb", region_name=TEST_REGION)

        table = dynamodb.create_table(
            TableName=TEST_TABLE_NAME,
            KeySchema=[
                {"AttributeName": "collection_path", "KeyType": "HASH"},
                {"AttributeName": "document_id", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "collection_path", "AttributeType": "S"},
                {"AttributeName": "document_id", "AttributeType": "S"},
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        table.wait_until_exists()
        yield table


@pytest.fixture
def dynamodb_store(mock_tracker_table):
    return DynamoDBDocumentStore(table_name=TEST_TABLE_NAME, region=TEST_REGION)


@pytest.fixture
def identity_pool_id(aws_credentials):
    """
    Create a mocked Cognito identity pool that allows guest identities.

    Returns:
        Identity pool id
    """
    with mock_aws():
        client = boto3.client("cognito-identity", region_name=TEST_REGION)
        pool = client.create_identity_pool(
            IdentityPoolName="habit_tracker_test",
            AllowUnauthenticatedIdentities=True,
        )
        yield pool["IdentityPoolId"]


class FailingDocumentStore(InMemoryDocumentStore):
    """In-memory store that rejects every write."""

    def __init__(self) -> None:
        super().__init__()
        self.write_attempts = 0

    def merge_write(
        self, collection_path: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        self.write_attempts += 1
        raise DocumentStoreError("Simulated write failure")


class UnreadableDocumentStore(InMemoryDocumentStore):
    """In-memory store whose reads fail while writes still land."""

    def __init__(self) -> None:
        super().__init__()
        self.write_attempts = 0

    def merge_write(
        self, collection_path: str, document_id: str, fields: Mapping[str, Any]
    ) -> None:
        self.write_attempts += 1
        super().merge_write(collection_path, document_id, fields)

    def get_document(self, collection_path: str, document_id: str) -> Optional[Dict[str, Any]]:
        raise DocumentStoreError("Simulated read failure")


@pytest.fixture
def memory_store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def failing_store() -> FailingDocumentStore:
    return FailingDocumentStore()


@pytest.fixture
def unreadable_store() -> UnreadableDocumentStore:
    return UnreadableDocumentStore()


@pytest.fixture
def tracker_config() -> TrackerConfig:
    return TrackerConfig(
        table_name=TEST_TABLE_NAME, app_id=TEST_APP_ID, region=TEST_REGION
    )


@pytest.fixture
def one_row_spec() -> BlockSpec:
    return BlockSpec(
        label="Spending Awareness (X)",
        rows=1,
        color=ColorTheme.ORANGE,
        prefixes=("X",),
        badge="X: Track Daily Spending",
    )


# Pytest configuration
def pytest_configure(config):
    config.addinivalue_line("markers", "unit: mark test as a unit test")
    config.addinivalue_line("markers", "aws: mark test as requiring mocked AWS services")


# Test utilities
def make_row(ticks: int = 0, crosses: int = 0) -> List[CellStatus]:
    """
    Build one 28-cell row with the given numbers of ticks and crosses.

    Ticks come first, then crosses, then blanks.
    """
    blanks = 28 - ticks - crosses
    assert blanks >= 0, "a row only has 28 cells"
    return (
        [CellStatus.TICK] * ticks
        + [CellStatus.CROSS] * crosses
        + [CellStatus.BLANK] * blanks
    )


def make_api_event(
    method: str,
    resource: str,
    user_id: Optional[str] = TEST_USER_ID,
    path_params: Optional[Dict[str, str]] = None,
    body: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Build an API Gateway proxy event for the tracker API.

    Args:
        method: HTTP method
        resource: Resource template, e.g. ``/blocks/{label}/toggle``
        user_id: Cognito identity id of the caller, or None
        path_params: Path parameters
        body: Raw request body
    """
    identity: Dict[str, Any] = {"sourceIp": "127.0.0.1"}
    if user_id is not None:
        identity["cognitoIdentityId"] = user_id

    return {
        "httpMethod": method,
        "resource": resource,
        "pathParameters": path_params,
        "queryStringParameters": None,
        "headers": {"Content-Type": "application/json"},
        "body": body,
        "requestContext": {"requestId": "test-request-123", "identity": identity},
    }
