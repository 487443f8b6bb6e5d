"""Delivery of one payload to one listener endpoint, with retries.

Outcome of a single attempt:
- status < 500                      -> delivered, stop
- status >= 500 / transport failure -> retryable, back off and try again
- slower than request_timeout_sec   -> retryable, the deadline covers the body too
- malformed or unsupported URL      -> fatal, raised immediately

Backoff after failed attempt k (0-indexed) is min(base * 2**k, max).
"""

from __future__ import annotations

import asyncio
import logging

import httpx

from config.schema import CallbackSettings
from core.errors import (
    DeliveryCancelledError,
    FatalDeliveryError,
    MaxRetriesError,
    RetryableDeliveryError,
)

logger = logging.getLogger(__name__)

JSON_HEADERS = {"Content-Type": "application/json"}


def calculate_backoff(attempt: int, base_delay: float, max_delay: float) -> float:
    """Seconds to wait after failed attempt ``attempt``."""
    return min(base_delay * (2**attempt), max_delay)


async def _wait_for_stop(stop: asyncio.Event, timeout: float) -> bool:
    """Sleep up to ``timeout`` seconds; return True if ``stop`` fired first."""
    try:
        await asyncio.wait_for(stop.wait(), timeout)
    except TimeoutError:
        return False
    return True


class RequestsController:
    def __init__(self, http_client: httpx.AsyncClient, settings: CallbackSettings | None = None) -> None:
        self._client = http_client
        self._settings = settings or CallbackSettings()

    async def send_request_with_retry(
        self,
        endpoint: str,
        data: bytes,
        stop: asyncio.Event | None = None,
    ) -> None:
        """Deliver ``data`` to ``endpoint``.

        Raises:
            DeliveryCancelledError: ``stop`` fired before or between attempts.
            FatalDeliveryError: the endpoint cannot be called at all.
            MaxRetriesError: every attempt failed with a retryable error.
        """
        stop = stop or asyncio.Event()
        max_attempts = self._settings.max_attempts

        for attempt in range(max_attempts):
            if stop.is_set():
                raise DeliveryCancelledError(endpoint)
            try:
                await self._send_request(endpoint, data)
                return
            except RetryableDeliveryError:
                if attempt == max_attempts - 1:
                    break

            delay = calculate_backoff(attempt, self._settings.base_delay, self._settings.max_delay)
            logger.debug("retrying request to %s in %.3fs (attempt %d/%d)", endpoint, delay, attempt + 2, max_attempts)
            if await _wait_for_stop(stop, delay):
                raise DeliveryCancelledError(endpoint)

        raise MaxRetriesError(endpoint)

    async def _send_request(self, endpoint: str, data: bytes) -> None:
        timeout = self._settings.request_timeout_sec
        try:
            # httpx timeouts are per phase; this bounds the whole attempt.
            async with asyncio.timeout(timeout):
                response = await self._client.post(
                    endpoint,
                    content=data,
                    headers=JSON_HEADERS,
                    timeout=timeout,
                )
        except (httpx.InvalidURL, httpx.UnsupportedProtocol) as e:
            logger.error("invalid callback endpoint %s: %s", endpoint, e)
            raise FatalDeliveryError(endpoint, f"invalid endpoint {endpoint}: {e}") from e
        except httpx.TransportError as e:
            logger.warning("error sending callback to %s: %s", endpoint, e)
            raise RetryableDeliveryError(endpoint, f"error sending callback to {endpoint}: {e}") from e
        except TimeoutError as e:
            logger.warning("callback to %s did not finish within %.1fs", endpoint, timeout)
            raise RetryableDeliveryError(endpoint, f"callback to {endpoint} timed out after {timeout}s") from e

        if response.status_code >= 500:
            logger.warning("server error from %s: %d", endpoint, response.status_code)
            raise RetryableDeliveryError(endpoint, f"server error from {endpoint}: {response.status_code}")
        logger.info("Callback sent to %s with status code %d", endpoint, response.status_code)
