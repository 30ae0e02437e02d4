"""
Module: delivery/transport.py
Description: HTTP transport for webhook delivery.

Performs exactly one POST per call under a hard deadline and returns
a structured result. Connection-level problems (DNS, refused
connections, TLS, timeouts), unusable URLs and responses whose body
cannot be decoded are returned as a Faulted result rather than raised,
so the caller can branch on the outcome.

Key Components:
- Completed / Faulted: transport result variants
- WebhookTransport: httpx based sender

Dependencies: httpx, pydantic, asyncio
"""

import asyncio
from enum import Enum
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, ConfigDict, Field

from webhook_relay.utils.logger import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "webhook_relay/1.0"


class FaultKind(str, Enum):
    CONNECTION_FAILURE = "connection_failure"


class Completed(BaseModel):
    """The endpoint returned an HTTP response, whatever its status."""

    model_config = ConfigDict(frozen=True)

    status_code: int
    headers: Dict[str, str] = Field(default_factory=dict)
    body: str = ""


class Faulted(BaseModel):
    """No HTTP response could be obtained."""

    model_config = ConfigDict(frozen=True)

    kind: FaultKind = FaultKind.CONNECTION_FAILURE
    detail: str = ""


TransportResult = Union[Completed, Faulted]


class WebhookTransport:
    """
    HTTP client for pushing webhook events to endpoints.

    The timeout bounds the whole request (connect, send and response),
    not each phase separately.
    """

    def __init__(
        self,
        timeout_seconds: float = 30,
        user_agent: str = DEFAULT_USER_AGENT,
        client: Optional[httpx.AsyncClient] = None
    ):
        """
        Initialize webhook transport.

        Args:
            timeout_seconds: Hard deadline for one delivery attempt
            user_agent: User-Agent header identifying this system
            client: Optional shared AsyncClient; one is created per call otherwise

        Raises:
            ValueError: If timeout_seconds is not positive or user_agent is empty
        """
        if not timeout_seconds or timeout_seconds <= 0:
            raise ValueError("timeout_seconds must be a positive number")
        if not user_agent or not isinstance(user_agent, str):
            raise ValueError("user_agent must be a non-empty string")

        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent
        self.timeout = httpx.Timeout(timeout_seconds)
        self._client = client

    def _headers(self) -> Dict[str, str]:
        return {
            'User-Agent': self.user_agent,
            'Content-Type': 'application/json'
        }

    async def _post(self, client: httpx.AsyncClient, url: str, body: Dict[str, Any]) -> Completed:
        response = await client.post(
            url,
            json=body,
            headers=self._headers(),
            timeout=self.timeout
        )
        return Completed(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.text
        )

    async def send(self, url: str, event_type: str, payload: Any) -> TransportResult:
        """
        POST one event to url.

        Args:
            url: Endpoint URL
            event_type: Event type name, sent as "event"
            payload: JSON-serializable payload

        Returns:
            Completed with status, headers and body, or Faulted when no
            readable response arrived before the deadline
        """
        body = {'event': event_type, 'payload': payload}

        logger.debug(
            "Sending webhook",
            url=url,
            event_type=event_type,
            timeout_seconds=self.timeout_seconds
        )

        try:
            if self._client is not None:
                return await asyncio.wait_for(
                    self._post(self._client, url, body), self.timeout_seconds
                )

            async with httpx.AsyncClient(follow_redirects=False) as client:
                return await asyncio.wait_for(
                    self._post(client, url, body), self.timeout_seconds
                )

        except asyncio.TimeoutError:
            logger.warning(
                "Webhook delivery deadline exceeded",
                url=url,
                timeout_seconds=self.timeout_seconds
            )
            return Faulted(detail=f"no response within {self.timeout_seconds}s")

        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning(
                "Webhook delivery connection error",
                url=url,
                error=str(e),
                error_type=type(e).__name__
            )
            return Faulted(detail=f"{type(e).__name__}: {e}")
