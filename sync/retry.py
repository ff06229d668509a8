"""
Retry with exponential backoff for calls to the commerce API.

Only server errors (5xx) and rate limiting (429) are retried. The delay
before retry n (0-based) is the server's Retry-After hint when present,
otherwise base_delay * 2**n. Everything else is raised on the first
occurrence.
"""

import asyncio
import httpx
from typing import Awaitable, Callable, Optional
from core.exceptions import (
    RemoteAPIError,
    ServerError,
    RateLimitError,
    AuthenticationError,
    ResourceNotFoundError,
    ClientRequestError,
    TransportError,
    RetryableError,
)
import logging

logger = logging.getLogger(__name__)


def retry_after_seconds(response: httpx.Response) -> Optional[float]:
    """Parse a numeric Retry-After header. HTTP-date values are ignored."""
    value = response.headers.get("Retry-After")
    if value is None:
        return None
    try:
        seconds = float(value)
    except ValueError:
        return None
    return seconds if seconds >= 0 else None


def error_for_response(response: httpx.Response) -> RemoteAPIError:
    """Map a failed response to the matching typed error"""
    status = response.status_code
    try:
        request = response.request
    except RuntimeError:
        request = None
    url = str(request.url) if request is not None else None
    body = response.text
    context = {"url": url, "method": request.method if request is not None else None}

    if status == 429:
        return RateLimitError(
            f"Rate limited by {url}",
            status_code=status,
            response_body=body,
            context=context,
            retry_after=retry_after_seconds(response)
        )
    if status >= 500:
        return ServerError(
            f"Server error {status} from {url}",
            status_code=status, response_body=body, context=context
        )
    if status in (401, 403):
        return AuthenticationError(
            f"Authentication failed for {url}",
            status_code=status, response_body=body, context=context
        )
    if status == 404:
        return ResourceNotFoundError(
            f"Resource not found: {url}",
            status_code=status, response_body=body, context=context
        )
    return ClientRequestError(
        f"Request rejected with status {status} by {url}",
        status_code=status, response_body=body, context=context
    )


class RetryPolicy:
    """
    Re-issue a request while it fails with a retryable status.

    Attributes:
        max_retries: Retries after the first attempt (default: 5)
        base_delay: Delay before the first retry in seconds (default: 1.0)
        sleep: Awaitable used to wait between attempts
    """

    def __init__(
        self,
        max_retries: int = 5,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep
    ):
        self.max_retries = max_retries
        self.base_delay = base_delay
        self.sleep = sleep

    def backoff(self, attempt: int, error: RemoteAPIError) -> float:
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return error.retry_after
        return self.base_delay * (2 ** attempt)

    async def execute(
        self,
        request_fn: Callable[[], Awaitable[httpx.Response]]
    ) -> httpx.Response:
        """
        Run request_fn until it succeeds or retries are exhausted.

        Returns:
            The first successful response

        Raises:
            ServerError, RateLimitError: after the last retry
            RemoteAPIError: on the first non-retryable failure
        """
        attempt = 0

        while True:
            try:
                response = await request_fn()
            except httpx.TransportError as e:
                raise TransportError(
                    f"Request failed before a response was received: {e}",
                    context={"attempt": attempt + 1},
                    original_exception=e
                )

            if response.is_success:
                return response

            error = error_for_response(response)

            if not isinstance(error, RetryableError) or attempt >= self.max_retries:
                if isinstance(error, RetryableError):
                    error.context["retry_count"] = attempt
                raise error

            delay = self.backoff(attempt, error)
            logger.warning(
                f"Request failed with status {response.status_code}. "
                f"Retrying in {delay}s (attempt {attempt + 1}/{self.max_retries})"
            )
            await self.sleep(delay)
            attempt += 1
