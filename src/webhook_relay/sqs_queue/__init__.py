"""
Package: sqs_queue
Description: SQS message queue operations for event delivery.

Provides the client used to enqueue deliveries and to delay
redelivery of messages whose delivery has to be retried.
"""
