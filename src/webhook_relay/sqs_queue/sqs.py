"""
Module: sqs.py
Description: SQS client for the webhook delivery queue.

Handles enqueueing event ids for delivery and pushing back messages
whose delivery failed, so that SQS redelivers them after the backoff
computed by the retry policy.
"""

import json
from typing import Any, Dict

import boto3
from botocore.exceptions import ClientError

from webhook_relay.utils.logger import get_logger

logger = get_logger(__name__)

# SQS limits for DelaySeconds and VisibilityTimeout
MAX_DELAY_SECONDS = 900
MAX_VISIBILITY_TIMEOUT = 43200


def build_message_body(event_id: str) -> str:
    return json.dumps({'event_id': event_id})


def parse_message_body(body: str) -> str:
    """
    Extract the event id from a delivery message body.

    Raises:
        ValueError: If the body is not a JSON object with a non-empty event_id
    """
    try:
        data: Dict[str, Any] = json.loads(body)
    except (TypeError, json.JSONDecodeError) as e:
        raise ValueError(f"message body is not valid JSON: {e}") from e

    event_id = data.get('event_id') if isinstance(data, dict) else None
    if not event_id or not isinstance(event_id, str):
        raise ValueError("message body must contain a non-empty event_id")
    return event_id


class SQSClient:
    """
    SQS client for delivery queue operations.

    Provides methods for enqueueing deliveries and for delaying the
    next receive of a message that has to be retried.
    """

    def __init__(self, queue_url: str):
        """
        Initialize SQS client.

        Args:
            queue_url: URL of the SQS queue
        """
        if not queue_url or not isinstance(queue_url, str):
            raise ValueError("queue_url must be a non-empty string")

        self.queue_url = queue_url
        self.sqs = boto3.client('sqs')

        logger.info(
            "SQS client initialized",
            queue_url=queue_url
        )

    async def enqueue(self, event_id: str, delay_seconds: int = 0) -> str:
        """
        Queue an event for delivery.

        Args:
            event_id: Unique event identifier
            delay_seconds: Optional delay before the message becomes
                available, capped at the SQS maximum of 900 seconds

        Returns:
            Message ID from SQS

        Raises:
            ClientError: If SQS operation fails
            ValueError: If parameters are invalid
        """
        if not event_id or not isinstance(event_id, str):
            raise ValueError("event_id must be a non-empty string")
        if delay_seconds < 0:
            raise ValueError("delay_seconds must not be negative")

        try:
            response = self.sqs.send_message(
                QueueUrl=self.queue_url,
                MessageBody=build_message_body(event_id),
                MessageAttributes={
                    'EventId': {
                        'StringValue': event_id,
                        'DataType': 'String'
                    }
                },
                DelaySeconds=min(int(delay_seconds), MAX_DELAY_SECONDS)
            )
        except ClientError as e:
            logger.error(
                "Failed to send message to SQS",
                event_id=event_id,
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message']
            )
            raise

        message_id = response['MessageId']
        logger.info(
            "Delivery queued",
            event_id=event_id,
            message_id=message_id,
            delay_seconds=delay_seconds,
            queue_url=self.queue_url
        )

        return message_id

    async def reschedule(self, receipt_handle: str, delay_seconds: int) -> int:
        """
        Hide a received message until the next attempt is due.

        Args:
            receipt_handle: Receipt handle of the in-flight message
            delay_seconds: Backoff before redelivery

        Returns:
            The visibility timeout applied, clamped to the SQS maximum

        Raises:
            ClientError: If SQS operation fails
        """
        if not receipt_handle or not isinstance(receipt_handle, str):
            raise ValueError("receipt_handle must be a non-empty string")

        visibility = max(0, min(int(delay_seconds), MAX_VISIBILITY_TIMEOUT))

        try:
            self.sqs.change_message_visibility(
                QueueUrl=self.queue_url,
                ReceiptHandle=receipt_handle,
                VisibilityTimeout=visibility
            )
        except ClientError as e:
            logger.error(
                "Failed to change message visibility",
                error_code=e.response['Error']['Code'],
                error_message=e.response['Error']['Message'],
                queue_url=self.queue_url
            )
            raise

        logger.debug(
            "Message visibility extended",
            visibility_timeout=visibility,
            requested_delay=delay_seconds
        )
        return visibility
