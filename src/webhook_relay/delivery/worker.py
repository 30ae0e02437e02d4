"""
Module: delivery/worker.py
Description: Webhook delivery worker and its SQS Lambda handler.

DeliveryWorker performs one delivery attempt for one event: load the
event and its endpoint, check the subscription, POST, classify the
outcome and record it. It reports back an explicit DeliveryResult; the
Lambda handler turns that result into SQS redelivery with backoff.
"""

import asyncio
from typing import Any, Dict, List, Optional

from botocore.exceptions import ClientError

from webhook_relay.config.settings import settings
from webhook_relay.delivery.classifier import classify, is_success
from webhook_relay.delivery.retry import RetryPolicy
from webhook_relay.delivery.subscription import is_subscribed
from webhook_relay.delivery.transport import WebhookTransport
from webhook_relay.models.result import DeliveryResult
from webhook_relay.sqs_queue.sqs import SQSClient, parse_message_body
from webhook_relay.storage.dynamodb import DynamoDBClient
from webhook_relay.utils.logger import get_logger
from webhook_relay.utils.metrics import MetricsClient

logger = get_logger(__name__)


class DeliveryWorker:
    """
    Delivers a single webhook event per invocation.

    Missing data and unsubscribed endpoints stop silently, 2xx responses
    succeed, everything else asks for a retry. Storage errors are not
    delivery failures and propagate to the caller.
    """

    def __init__(
        self,
        store: DynamoDBClient,
        transport: WebhookTransport,
        metrics: Optional[MetricsClient] = None
    ):
        self.store = store
        self.transport = transport
        self.metrics = metrics

    async def deliver(self, event_id: str) -> DeliveryResult:
        """
        Attempt delivery of one event.

        Args:
            event_id: Identifier of the event to deliver

        Returns:
            SUCCESS, RETRYABLE_FAILURE or STOP

        Raises:
            ClientError: If the data store fails
        """
        event = await self.store.find_event(event_id)
        if event is None:
            logger.info(
                "Event no longer exists, skipping delivery",
                event_id=event_id,
                reason="event_missing"
            )
            return DeliveryResult.STOP

        endpoint = await self.store.find_endpoint(event.endpoint_id)
        if endpoint is None:
            logger.info(
                "Endpoint no longer exists, skipping delivery",
                event_id=event_id,
                endpoint_id=event.endpoint_id,
                reason="endpoint_missing"
            )
            return DeliveryResult.STOP

        if not is_subscribed(endpoint, event.event_type):
            logger.info(
                "Endpoint not subscribed to event type, skipping delivery",
                event_id=event_id,
                endpoint_id=endpoint.endpoint_id,
                event_type=event.event_type,
                reason="not_subscribed"
            )
            return DeliveryResult.STOP

        result = await self.transport.send(endpoint.url, event.event_type, event.payload)
        record = classify(result)

        await self.store.save_attempt(event.event_id, record)

        if self.metrics is not None:
            self.metrics.record_attempt(record.outcome, endpoint.endpoint_id)

        if is_success(record):
            logger.info(
                "Webhook delivered",
                event_id=event_id,
                endpoint_id=endpoint.endpoint_id,
                status_code=record.status_code
            )
            return DeliveryResult.SUCCESS

        logger.warning(
            "Webhook delivery failed",
            event_id=event_id,
            endpoint_id=endpoint.endpoint_id,
            outcome=record.outcome,
            status_code=getattr(record, 'status_code', None)
        )
        return DeliveryResult.RETRYABLE_FAILURE


def build_worker() -> DeliveryWorker:
    """Create a worker wired from settings."""
    metrics = MetricsClient(settings.metrics_namespace) if settings.metrics_enabled else None
    return DeliveryWorker(
        store=DynamoDBClient(settings.events_table_name, settings.endpoints_table_name),
        transport=WebhookTransport(
            timeout_seconds=settings.delivery_timeout,
            user_agent=settings.user_agent
        ),
        metrics=metrics
    )


def queue_url_from_arn(arn: str) -> str:
    """Convert an SQS queue ARN into its queue URL."""
    parts = arn.split(':')
    if len(parts) != 6 or parts[2] != 'sqs':
        raise ValueError(f"not an SQS queue ARN: {arn!r}")
    _, _, _, region, account_id, name = parts
    return f"https://sqs.{region}.amazonaws.com/{account_id}/{name}"


def _log_give_up(message_id: str, event_id: str, attempt: int) -> None:
    logger.error(
        "Webhook delivery attempts exhausted, giving up",
        message_id=message_id,
        event_id=event_id,
        attempts=attempt
    )


async def process_record(
    record: Dict[str, Any],
    worker: DeliveryWorker,
    queue: SQSClient,
    policy: RetryPolicy
) -> Optional[str]:
    """
    Process one SQS record.

    Returns:
        The message id when the message must be redelivered, None when
        it can be deleted from the queue
    """
    message_id = record['messageId']

    try:
        event_id = parse_message_body(record['body'])
    except ValueError as e:
        # Retrying an unreadable message cannot help
        logger.error(
            "Discarding malformed delivery message",
            message_id=message_id,
            error=str(e)
        )
        return None

    attempt = int(record.get('attributes', {}).get('ApproximateReceiveCount', 1))

    try:
        result = await worker.deliver(event_id)
    except Exception as e:
        logger.exception(
            "Error processing delivery message",
            message_id=message_id,
            event_id=event_id,
            attempt=attempt,
            error=str(e),
            error_type=type(e).__name__
        )
        if not policy.has_attempts_remaining(attempt):
            _log_give_up(message_id, event_id, attempt)
            return None
        return message_id

    if not result.should_retry:
        return None

    if not policy.has_attempts_remaining(attempt):
        _log_give_up(message_id, event_id, attempt)
        return None

    delay = policy.next_delay(attempt)
    try:
        visibility = await queue.reschedule(record['receiptHandle'], delay)
    except ClientError as e:
        logger.warning(
            "Failed to reschedule delivery, falling back to the queue visibility timeout",
            message_id=message_id,
            event_id=event_id,
            attempt=attempt,
            error_code=e.response['Error']['Code']
        )
        return message_id

    logger.warning(
        "Webhook delivery will be retried",
        message_id=message_id,
        event_id=event_id,
        attempt=attempt,
        delay_seconds=visibility
    )
    return message_id


async def process_batch(
    records: List[Dict[str, Any]],
    worker: DeliveryWorker,
    queue: SQSClient,
    policy: RetryPolicy
) -> Dict[str, Any]:
    """Process a batch of SQS records concurrently."""
    failed_ids = await asyncio.gather(
        *(process_record(record, worker, queue, policy) for record in records)
    )
    return {
        'batchItemFailures': [
            {'itemIdentifier': message_id}
            for message_id in failed_ids
            if message_id is not None
        ]
    }


def handler(event: Dict[str, Any], context: Any) -> Dict[str, Any]:
    """
    Lambda handler for SQS delivery messages.

    Args:
        event: SQS event with batch of messages
        context: Lambda context

    Returns:
        Response with batch item failures (if any)
    """
    records = event.get('Records', [])
    if not records:
        return {'batchItemFailures': []}

    queue_url = settings.delivery_queue_url or queue_url_from_arn(records[0]['eventSourceARN'])

    logger.info("Processing delivery batch", batch_size=len(records))

    return asyncio.run(process_batch(
        records,
        build_worker(),
        SQSClient(queue_url),
        settings.retry_policy()
    ))
