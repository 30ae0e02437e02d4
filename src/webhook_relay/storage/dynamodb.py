"""
Module: dynamodb.py
Description: DynamoDB client for webhook events and endpoints.

Provides async operations for storing and retrieving events and
endpoints in DynamoDB, and for recording delivery attempts, with
proper error handling and logging.

Key Components:
- DynamoDBClient: Main client class for DynamoDB operations
- Event storage: put_event() / find_event() with JSON payload serialization
- Endpoint storage: put_endpoint() / find_endpoint()
- Attempt recording: save_attempt() replacing last_attempt as a whole
- Error handling: ClientError logged and re-raised, never swallowed

Dependencies: boto3, botocore, datetime, json, typing
Author: Webhook Relay Team
"""

import json
from datetime import datetime
from typing import Any, Dict, Optional

import boto3
from botocore.exceptions import ClientError

from webhook_relay.models.attempt import AttemptRecord, attempt_from_record
from webhook_relay.models.endpoint import Endpoint
from webhook_relay.models.event import Event
from webhook_relay.utils.logger import get_logger

logger = get_logger(__name__)


def _log_client_error(message: str, error: ClientError, **context: Any) -> None:
    logger.error(
        message,
        error_code=error.response['Error']['Code'],
        error_message=error.response['Error']['Message'],
        **context
    )


class DynamoDBClient:
    """
    DynamoDB client for webhook delivery data.

    Events and endpoints live in separate tables keyed by event_id and
    endpoint_id respectively.

    Attributes:
        events_table_name: Name of the DynamoDB events table
        endpoints_table_name: Name of the DynamoDB endpoints table
        dynamodb: boto3 DynamoDB resource
        events_table: boto3 table resource for events
        endpoints_table: boto3 table resource for endpoints

    Example:
        >>> client = DynamoDBClient("webhook-relay-events", "webhook-relay-endpoints")
        >>> event = await client.find_event("evt_123")
        >>> await client.save_attempt("evt_123", TimedOutAttempt())
    """

    def __init__(self, events_table_name: str, endpoints_table_name: str):
        """
        Initialize DynamoDB client.

        Args:
            events_table_name: Name of the DynamoDB events table
            endpoints_table_name: Name of the DynamoDB endpoints table

        Raises:
            ValueError: If a table name is empty or invalid
        """
        if not events_table_name or not isinstance(events_table_name, str):
            raise ValueError("events_table_name must be a non-empty string")
        if not endpoints_table_name or not isinstance(endpoints_table_name, str):
            raise ValueError("endpoints_table_name must be a non-empty string")

        self.events_table_name = events_table_name
        self.endpoints_table_name = endpoints_table_name
        self.dynamodb = boto3.resource('dynamodb')
        self.events_table = self.dynamodb.Table(events_table_name)
        self.endpoints_table = self.dynamodb.Table(endpoints_table_name)

        logger.info(
            "DynamoDB client initialized",
            events_table_name=events_table_name,
            endpoints_table_name=endpoints_table_name
        )

    async def put_event(self, event: Event) -> None:
        """
        Store an event in DynamoDB.

        Payload and attempt record are stored as JSON strings so that
        numbers, booleans and nulls survive the round trip unchanged.

        Args:
            event: Event model to store

        Raises:
            ClientError: If DynamoDB operation fails
            ValueError: If event is invalid
        """
        if not isinstance(event, Event):
            raise ValueError("event must be an Event instance")

        item = {
            'event_id': event.event_id,
            'event_type': event.event_type,
            'payload': json.dumps(event.payload),
            'endpoint_id': event.endpoint_id
        }
        if event.created_at is not None:
            item['created_at'] = event.created_at.isoformat()
        if event.last_attempt is not None:
            item['last_attempt'] = json.dumps(event.last_attempt.to_record())

        try:
            self.events_table.put_item(Item=item)
        except ClientError as e:
            _log_client_error(
                "Failed to store event in DynamoDB",
                e,
                event_id=event.event_id,
                table_name=self.events_table_name
            )
            raise

        logger.info(
            "Event stored in DynamoDB",
            event_id=event.event_id,
            event_type=event.event_type,
            table_name=self.events_table_name
        )

    async def find_event(self, event_id: str) -> Optional[Event]:
        """
        Retrieve an event by ID.

        Args:
            event_id: Unique event identifier

        Returns:
            Event model if found and readable, None otherwise

        Raises:
            ClientError: If DynamoDB operation fails
            ValueError: If event_id is invalid
        """
        if not event_id or not isinstance(event_id, str):
            raise ValueError("event_id must be a non-empty string")

        try:
            response = self.events_table.get_item(
                Key={'event_id': event_id},
                ConsistentRead=True
            )
        except ClientError as e:
            _log_client_error(
                "Failed to retrieve event from DynamoDB",
                e,
                event_id=event_id,
                table_name=self.events_table_name
            )
            raise

        if 'Item' not in response:
            logger.warning(
                "Event not found in DynamoDB",
                event_id=event_id,
                table_name=self.events_table_name
            )
            return None

        # Pydantic's ValidationError and JSONDecodeError are both ValueErrors
        try:
            return self._event_from_item(response['Item'])
        except (KeyError, TypeError, ValueError) as e:
            logger.error(
                "Stored event is unreadable, treating it as missing",
                event_id=event_id,
                error=str(e),
                error_type=type(e).__name__,
                table_name=self.events_table_name
            )
            return None

    async def put_endpoint(self, endpoint: Endpoint) -> None:
        """
        Store an endpoint in DynamoDB.

        Raises:
            ClientError: If DynamoDB operation fails
            ValueError: If endpoint is invalid
        """
        if not isinstance(endpoint, Endpoint):
            raise ValueError("endpoint must be an Endpoint instance")

        item: Dict[str, Any] = {
            'endpoint_id': endpoint.endpoint_id,
            'url': endpoint.url
        }
        # DynamoDB rejects empty sets
        if endpoint.subscribed_event_types:
            item['subscribed_event_types'] = set(endpoint.subscribed_event_types)

        try:
            self.endpoints_table.put_item(Item=item)
        except ClientError as e:
            _log_client_error(
                "Failed to store endpoint in DynamoDB",
                e,
                endpoint_id=endpoint.endpoint_id,
                table_name=self.endpoints_table_name
            )
            raise

        logger.info(
            "Endpoint stored in DynamoDB",
            endpoint_id=endpoint.endpoint_id,
            table_name=self.endpoints_table_name
        )

    async def find_endpoint(self, endpoint_id: str) -> Optional[Endpoint]:
        """
        Retrieve an endpoint by ID.

        Args:
            endpoint_id: Unique endpoint identifier

        Returns:
            Endpoint model if found and readable, None otherwise

        Raises:
            ClientError: If DynamoDB operation fails
            ValueError: If endpoint_id is invalid
        """
        if not endpoint_id or not isinstance(endpoint_id, str):
            raise ValueError("endpoint_id must be a non-empty string")

        try:
            response = self.endpoints_table.get_item(Key={'endpoint_id': endpoint_id})
        except ClientError as e:
            _log_client_error(
                "Failed to retrieve endpoint from DynamoDB",
                e,
                endpoint_id=endpoint_id,
                table_name=self.endpoints_table_name
            )
            raise

        if 'Item' not in response:
            logger.warning(
                "Endpoint not found in DynamoDB",
                endpoint_id=endpoint_id,
                table_name=self.endpoints_table_name
            )
            return None

        item = response['Item']
        try:
            return Endpoint(
                endpoint_id=item['endpoint_id'],
                url=item['url'],
                # Stored either as a string set or as a plain list
                subscribed_event_types=frozenset(item.get('subscribed_event_types') or ())
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.error(
                "Stored endpoint is unreadable, treating it as missing",
                endpoint_id=endpoint_id,
                error=str(e),
                error_type=type(e).__name__,
                table_name=self.endpoints_table_name
            )
            return None

    async def save_attempt(self, event_id: str, record: AttemptRecord) -> None:
        """
        Replace the event's last attempt record.

        The attribute is overwritten as a whole, so saving the same
        record twice leaves the same state and concurrent writers simply
        race to last-write-wins. The event must still exist.

        Args:
            event_id: Event the attempt belongs to
            record: Attempt record to persist

        Raises:
            ClientError: If the event no longer exists or DynamoDB fails
            ValueError: If event_id is invalid
        """
        if not event_id or not isinstance(event_id, str):
            raise ValueError("event_id must be a non-empty string")

        try:
            self.events_table.update_item(
                Key={'event_id': event_id},
                UpdateExpression='SET last_attempt = :attempt',
                ConditionExpression='attribute_exists(event_id)',
                ExpressionAttributeValues={':attempt': json.dumps(record.to_record())}
            )
        except ClientError as e:
            _log_client_error(
                "Failed to record delivery attempt in DynamoDB",
                e,
                event_id=event_id,
                outcome=record.outcome,
                table_name=self.events_table_name
            )
            raise

        logger.info(
            "Delivery attempt recorded",
            event_id=event_id,
            outcome=record.outcome,
            table_name=self.events_table_name
        )

    @staticmethod
    def _event_from_item(item: Dict[str, Any]) -> Event:
        last_attempt = None
        if item.get('last_attempt'):
            last_attempt = attempt_from_record(json.loads(item['last_attempt']))

        return Event(
            event_id=item['event_id'],
            event_type=item['event_type'],
            payload=json.loads(item['payload']) if 'payload' in item else None,
            endpoint_id=item['endpoint_id'],
            last_attempt=last_attempt,
            created_at=datetime.fromisoformat(item['created_at']) if item.get('created_at') else None
        )
