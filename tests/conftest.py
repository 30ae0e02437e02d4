"""
Module: conftest.py
Description: Shared pytest fixtures for webhook relay tests.

Provides reusable test fixtures for database clients, mock data,
in-memory collaborators and common test setup/teardown operations.
Uses moto for AWS service mocking to enable fast, isolated unit tests.
"""

from datetime import datetime, timezone

import boto3
import pytest
from moto import mock_aws

from webhook_relay.config.settings import Settings
from webhook_relay.delivery.transport import Completed, Faulted, TransportResult
from webhook_relay.models.endpoint import Endpoint
from webhook_relay.models.event import Event
from webhook_relay.storage.dynamodb import DynamoDBClient

ENDPOINT_URL = "https://hooks.example.com/webhooks"


class InMemoryStore:
    """Data store double keeping events and endpoints in dictionaries."""

    def __init__(self, events=(), endpoints=()):
        self.events = {event.event_id: event for event in events}
        self.endpoints = {endpoint.endpoint_id: endpoint for endpoint in endpoints}
        self.saved = []

    async def find_event(self, event_id):
        return self.events.get(event_id)

    async def find_endpoint(self, endpoint_id):
        return self.endpoints.get(endpoint_id)

    async def save_attempt(self, event_id, record):
        self.saved.append((event_id, record))
        self.events[event_id] = self.events[event_id].model_copy(
            update={'last_attempt': record}
        )


class StubTransport:
    """Transport double returning a preset result and recording calls."""

    def __init__(self, result: TransportResult):
        self.result = result
        self.calls = []

    async def send(self, url, event_type, payload):
        self.calls.append((url, event_type, payload))
        return self.result


@pytest.fixture(autouse=True)
def aws_credentials(monkeypatch):
    """Fake AWS credentials so boto3 never reaches a real account."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")


@pytest.fixture
def test_settings():
    """
    Provide test configuration settings.

    Disables .env loading for predictable tests.
    """
    return Settings(
        _env_file=None,
        events_table_name="test-events-table",
        endpoints_table_name="test-endpoints-table",
        log_level="DEBUG",
        stage="test"
    )


@pytest.fixture
def sample_endpoint():
    return Endpoint(
        endpoint_id="end_1",
        url=ENDPOINT_URL,
        subscribed_event_types=frozenset({"order.created"})
    )


@pytest.fixture
def sample_event_model(sample_endpoint):
    """Event matching the subscription of sample_endpoint."""
    return Event(
        event_id="1",
        event_type="order.created",
        payload={"sku": "X"},
        endpoint_id=sample_endpoint.endpoint_id,
        created_at=datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc)
    )


@pytest.fixture
def memory_store(sample_event_model, sample_endpoint):
    return InMemoryStore(events=[sample_event_model], endpoints=[sample_endpoint])


@pytest.fixture
def ok_result():
    return Completed(status_code=200, headers={"content-type": "text/plain"}, body="ok")


@pytest.fixture
def error_result():
    return Completed(status_code=500, headers={"content-type": "text/plain"}, body="boom")


@pytest.fixture
def fault_result():
    return Faulted(detail="ConnectError: Connection refused")


@pytest.fixture
def aws():
    """Activate moto for the duration of a test."""
    with mock_aws():
        yield


@pytest.fixture
def mock_dynamodb_tables(aws, test_settings):
    """
    Create mock DynamoDB tables for events and endpoints.

    Same key schema as production: events keyed by event_id,
    endpoints keyed by endpoint_id.
    """
    dynamodb = boto3.resource('dynamodb', region_name='us-east-1')

    events_table = dynamodb.create_table(
        TableName=test_settings.events_table_name,
        KeySchema=[{'AttributeName': 'event_id', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'event_id', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )
    endpoints_table = dynamodb.create_table(
        TableName=test_settings.endpoints_table_name,
        KeySchema=[{'AttributeName': 'endpoint_id', 'KeyType': 'HASH'}],
        AttributeDefinitions=[{'AttributeName': 'endpoint_id', 'AttributeType': 'S'}],
        BillingMode='PAY_PER_REQUEST'
    )

    yield events_table, endpoints_table


@pytest.fixture
def db_client(test_settings, mock_dynamodb_tables):
    """DynamoDBClient bound to the mocked tables."""
    return DynamoDBClient(
        events_table_name=test_settings.events_table_name,
        endpoints_table_name=test_settings.endpoints_table_name
    )
