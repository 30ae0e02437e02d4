"""
Command line entry point for running the delivery worker outside Lambda.

Usage:
    webhook-relay deliver evt_123            # one attempt
    webhook-relay deliver evt_123 --retry    # retry with backoff until done
    webhook-relay backoff --attempts 10      # print a sample backoff schedule
"""

import argparse
import asyncio
import sys
from typing import List, Optional

from webhook_relay.config.settings import settings
from webhook_relay.delivery.retry import RetryPolicy, deliver_with_retries
from webhook_relay.delivery.worker import build_worker
from webhook_relay.models.result import DeliveryResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="webhook-relay",
        description="Deliver webhook events from the command line"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    deliver = subparsers.add_parser("deliver", help="Deliver one event")
    deliver.add_argument("event_id", help="Identifier of the event to deliver")
    deliver.add_argument(
        "--retry",
        action="store_true",
        help="Keep retrying with backoff until success or the attempt ceiling"
    )

    backoff = subparsers.add_parser("backoff", help="Print a sample backoff schedule")
    backoff.add_argument(
        "--attempts",
        type=int,
        default=None,
        help="Number of attempts to show (default: the configured ceiling)"
    )

    return parser


def format_schedule(policy: RetryPolicy, attempts: int) -> List[str]:
    lines = []
    for attempt in range(1, attempts + 1):
        lines.append(f"attempt {attempt:>2}: retry in {policy.next_delay(attempt)}s")
    return lines


async def _deliver(event_id: str, retry: bool) -> DeliveryResult:
    worker = build_worker()
    if retry:
        return await deliver_with_retries(worker.deliver, event_id, settings.retry_policy())
    return await worker.deliver(event_id)


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    policy = settings.retry_policy()

    if args.command == "backoff":
        attempts = args.attempts if args.attempts is not None else policy.max_attempts
        if attempts < 1:
            print("ERROR: --attempts must be at least 1", file=sys.stderr)
            return 2
        print("\n".join(format_schedule(policy, attempts)))
        return 0

    result = asyncio.run(_deliver(args.event_id, args.retry))
    print(f"{args.event_id}: {result.value}")
    return 1 if result is DeliveryResult.RETRYABLE_FAILURE else 0


if __name__ == "__main__":
    sys.exit(main())
