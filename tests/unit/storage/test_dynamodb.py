"""
Module: test_dynamodb.py
Description: Unit tests for DynamoDB client operations.

Tests DynamoDBClient event, endpoint and attempt operations with
mocked AWS services using moto. Covers success cases, error handling,
and data serialization/deserialization.
"""

import json
from unittest.mock import patch

import pytest
from botocore.exceptions import ClientError

from webhook_relay.models.attempt import (
    DeliveredAttempt,
    RejectedAttempt,
    TimedOutAttempt,
)
from webhook_relay.models.endpoint import Endpoint
from webhook_relay.models.event import Event
from webhook_relay.storage.dynamodb import DynamoDBClient


class TestDynamoDBClient:
    """Test cases for DynamoDBClient operations."""

    def test_client_initialization(self, db_client, test_settings):
        """Test DynamoDBClient initialization."""
        assert db_client.events_table_name == test_settings.events_table_name
        assert db_client.endpoints_table_name == test_settings.endpoints_table_name
        assert hasattr(db_client, 'events_table')
        assert hasattr(db_client, 'endpoints_table')

    def test_client_initialization_invalid_table_name(self, aws):
        """Test DynamoDBClient with invalid table names."""
        with pytest.raises(ValueError, match="events_table_name must be a non-empty string"):
            DynamoDBClient(events_table_name="", endpoints_table_name="endpoints")

        with pytest.raises(ValueError, match="endpoints_table_name must be a non-empty string"):
            DynamoDBClient(events_table_name="events", endpoints_table_name=None)

    @pytest.mark.asyncio
    async def test_put_event_serializes_payload(self, db_client, sample_event_model, mock_dynamodb_tables):
        """Payload is stored as a JSON string."""
        events_table, _ = mock_dynamodb_tables

        await db_client.put_event(sample_event_model)

        item = events_table.get_item(Key={'event_id': "1"})['Item']
        assert json.loads(item['payload']) == {"sku": "X"}
        assert item['endpoint_id'] == "end_1"
        assert 'last_attempt' not in item

    @pytest.mark.asyncio
    async def test_event_roundtrip(self, db_client):
        event = Event(
            event_id="evt_2",
            event_type="order.created",
            payload={"amount": 99.99, "paid": True, "note": None, "lines": [1, 2]},
            endpoint_id="end_1",
            last_attempt=RejectedAttempt(headers={"a": "b"}, status_code=503, body="later")
        )

        await db_client.put_event(event)
        retrieved = await db_client.find_event("evt_2")

        assert retrieved == event

    @pytest.mark.asyncio
    async def test_find_event_not_found(self, db_client):
        assert await db_client.find_event("missing") is None

    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [
        {'event_type': 'Order.Created'},
        {'payload': 'not json'},
        {'last_attempt': '{"code": "abc"}'},
    ])
    async def test_unreadable_event_is_treated_as_missing(self, db_client, mock_dynamodb_tables, overrides):
        events_table, _ = mock_dynamodb_tables
        item = {
            'event_id': 'bad',
            'event_type': 'order.created',
            'payload': '{}',
            'endpoint_id': 'end_1'
        }
        item.update(overrides)
        events_table.put_item(Item=item)

        assert await db_client.find_event('bad') is None

    @pytest.mark.asyncio
    async def test_find_event_invalid_id(self, db_client):
        with pytest.raises(ValueError, match="event_id must be a non-empty string"):
            await db_client.find_event("")

    @pytest.mark.asyncio
    async def test_find_event_dynamodb_error(self, db_client):
        with patch.object(db_client.events_table, 'get_item', side_effect=ClientError(
            error_response={'Error': {'Code': 'InternalServerError', 'Message': 'Test error'}},
            operation_name='GetItem'
        )):
            with pytest.raises(ClientError):
                await db_client.find_event("1")

    @pytest.mark.asyncio
    async def test_put_event_invalid_event(self, db_client):
        with pytest.raises(ValueError, match="event must be an Event instance"):
            await db_client.put_event("not an event")

    @pytest.mark.asyncio
    async def test_endpoint_roundtrip(self, db_client, sample_endpoint):
        await db_client.put_endpoint(sample_endpoint)

        assert await db_client.find_endpoint("end_1") == sample_endpoint

    @pytest.mark.asyncio
    async def test_endpoint_without_subscriptions(self, db_client):
        endpoint = Endpoint(endpoint_id="end_2", url="https://x.test")

        await db_client.put_endpoint(endpoint)

        assert (await db_client.find_endpoint("end_2")).subscribed_event_types == frozenset()

    @pytest.mark.asyncio
    async def test_endpoint_subscriptions_stored_as_list(self, db_client, mock_dynamodb_tables):
        _, endpoints_table = mock_dynamodb_tables
        endpoints_table.put_item(Item={
            'endpoint_id': 'end_3',
            'url': 'https://x.test',
            'subscribed_event_types': ['order.created', 'order.shipped']
        })

        endpoint = await db_client.find_endpoint('end_3')

        assert endpoint.subscribed_event_types == frozenset({'order.created', 'order.shipped'})

    @pytest.mark.asyncio
    async def test_find_endpoint_not_found(self, db_client):
        assert await db_client.find_endpoint("missing") is None

    @pytest.mark.asyncio
    async def test_unreadable_endpoint_is_treated_as_missing(self, db_client, mock_dynamodb_tables):
        _, endpoints_table = mock_dynamodb_tables
        endpoints_table.put_item(Item={'endpoint_id': 'end_4', 'url': 'ftp://x.test'})
        endpoints_table.put_item(Item={'endpoint_id': 'end_5'})

        assert await db_client.find_endpoint('end_4') is None
        assert await db_client.find_endpoint('end_5') is None

    @pytest.mark.asyncio
    async def test_save_attempt_writes_wire_shape(self, db_client, sample_event_model, mock_dynamodb_tables):
        events_table, _ = mock_dynamodb_tables
        await db_client.put_event(sample_event_model)

        await db_client.save_attempt("1", DeliveredAttempt(headers={"x": "y"}, status_code=200, body="ok"))

        item = events_table.get_item(Key={'event_id': "1"})['Item']
        assert json.loads(item['last_attempt']) == {"headers": {"x": "y"}, "code": 200, "body": "ok"}

    @pytest.mark.asyncio
    async def test_save_attempt_is_idempotent(self, db_client, sample_event_model):
        await db_client.put_event(sample_event_model)

        await db_client.save_attempt("1", TimedOutAttempt())
        once = await db_client.find_event("1")
        await db_client.save_attempt("1", TimedOutAttempt())
        twice = await db_client.find_event("1")

        assert once == twice
        assert twice.last_attempt.to_record() == {"error": "TIMEOUT_ERROR"}

    @pytest.mark.asyncio
    async def test_save_attempt_replaces_previous(self, db_client, sample_event_model):
        await db_client.put_event(sample_event_model)

        await db_client.save_attempt("1", TimedOutAttempt())
        await db_client.save_attempt("1", RejectedAttempt(status_code=500, body="boom"))

        retrieved = await db_client.find_event("1")
        assert retrieved.last_attempt == RejectedAttempt(status_code=500, body="boom")
        assert retrieved.payload == sample_event_model.payload

    @pytest.mark.asyncio
    async def test_save_attempt_missing_event(self, db_client):
        with pytest.raises(ClientError) as exc_info:
            await db_client.save_attempt("missing", TimedOutAttempt())

        assert exc_info.value.response['Error']['Code'] == 'ConditionalCheckFailedException'
        assert await db_client.find_event("missing") is None
