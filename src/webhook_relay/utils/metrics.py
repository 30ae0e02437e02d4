"""
Module: metrics.py
Description: CloudWatch custom metrics publishing.

Publishes delivery metrics to CloudWatch so attempt outcomes
(delivered, rejected, timed out) can be graphed and alarmed on.

Key Components:
- MetricsClient: CloudWatch metrics client
- put_metric(): Publish individual metrics
- Graceful error handling for metrics failures
- Structured logging for metric operations

Dependencies: boto3, botocore, typing, logger
Author: Webhook Relay Team
"""

from typing import Optional

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from webhook_relay.utils.logger import get_logger

logger = get_logger(__name__)


class MetricsClient:
    """CloudWatch metrics client."""

    def __init__(self, namespace: str = "WebhookRelay"):
        """
        Initialize metrics client.

        Args:
            namespace: CloudWatch metrics namespace
        """
        if not namespace or not isinstance(namespace, str):
            raise ValueError("namespace must be a non-empty string")

        self.namespace = namespace
        self.cloudwatch = boto3.client('cloudwatch')

        logger.info(
            "Metrics client initialized",
            namespace=namespace
        )

    def put_metric(
        self,
        metric_name: str,
        value: float,
        unit: str = 'Count',
        dimensions: Optional[dict] = None
    ) -> None:
        """
        Publish a metric to CloudWatch.

        Args:
            metric_name: Name of the metric
            value: Metric value
            unit: Metric unit (Count, Seconds, etc.)
            dimensions: Optional metric dimensions
        """
        try:
            metric_data = {
                'MetricName': metric_name,
                'Value': value,
                'Unit': unit
            }

            if dimensions:
                metric_data['Dimensions'] = [
                    {'Name': k, 'Value': v}
                    for k, v in dimensions.items()
                ]

            self.cloudwatch.put_metric_data(
                Namespace=self.namespace,
                MetricData=[metric_data]
            )

            logger.debug(
                "Metric published to CloudWatch",
                metric_name=metric_name,
                value=value,
                unit=unit,
                dimensions=dimensions,
                namespace=self.namespace
            )

        except (BotoCoreError, ClientError) as e:
            # Don't fail delivery if metrics fail
            logger.warning(
                "Failed to publish metric",
                metric_name=metric_name,
                value=value,
                error=str(e),
                namespace=self.namespace
            )

    def record_attempt(self, outcome: str, endpoint_id: str) -> None:
        """Count one recorded delivery attempt by outcome and endpoint."""
        self.put_metric(
            'WebhookDelivery',
            1,
            dimensions={'Outcome': outcome, 'EndpointId': endpoint_id}
        )
