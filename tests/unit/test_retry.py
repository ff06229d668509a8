"""
Unit tests for the retry policy
"""

import httpx
import pytest
from core.exceptions import (
    ServerError,
    RateLimitError,
    AuthenticationError,
    ResourceNotFoundError,
    ClientRequestError,
    TransportError,
)
from sync.retry import RetryPolicy, error_for_response, retry_after_seconds


class ScriptedResponses:
    """Returns the given status codes one call at a time"""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.calls = 0

    async def __call__(self):
        self.calls += 1
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        if isinstance(response, httpx.Response):
            return response
        return httpx.Response(response, json={})


@pytest.fixture
def sleeps():
    return []


@pytest.fixture
def policy(sleeps):
    async def record_sleep(seconds):
        sleeps.append(seconds)

    return RetryPolicy(max_retries=3, base_delay=1.0, sleep=record_sleep)


class TestRetryPolicy:
    """Test backoff and retry decisions"""

    @pytest.mark.asyncio
    async def test_server_errors_then_success(self, policy, sleeps):
        """Two 503s then a 200 returns the 200 after 1s and 2s waits"""
        request = ScriptedResponses(503, 503, 200)

        response = await policy.execute(request)

        assert response.status_code == 200
        assert request.calls == 3
        assert sleeps == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_rate_limit_uses_retry_after(self, policy, sleeps):
        request = ScriptedResponses(
            httpx.Response(429, headers={"Retry-After": "7"}),
            200,
        )

        response = await policy.execute(request)

        assert response.status_code == 200
        assert sleeps == [7.0]

    @pytest.mark.asyncio
    async def test_rate_limit_without_hint_uses_backoff(self, policy, sleeps):
        request = ScriptedResponses(429, 429, 200)

        await policy.execute(request)

        assert sleeps == [1.0, 2.0]

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, policy, sleeps):
        request = ScriptedResponses(404, 200)

        with pytest.raises(ResourceNotFoundError) as exc_info:
            await policy.execute(request)

        assert request.calls == 1
        assert sleeps == []
        assert exc_info.value.status_code == 404

    @pytest.mark.asyncio
    async def test_authentication_failure_is_not_retried(self, policy, sleeps):
        request = ScriptedResponses(401)

        with pytest.raises(AuthenticationError):
            await policy.execute(request)

        assert sleeps == []

    @pytest.mark.asyncio
    async def test_retries_exhausted(self, policy, sleeps):
        """max_retries=3 means four attempts in total"""
        request = ScriptedResponses(500, 500, 500, 500, 200)

        with pytest.raises(ServerError) as exc_info:
            await policy.execute(request)

        assert request.calls == 4
        assert sleeps == [1.0, 2.0, 4.0]
        assert exc_info.value.context["retry_count"] == 3

    @pytest.mark.asyncio
    async def test_transport_error_is_not_retried(self, policy, sleeps):
        request = ScriptedResponses(httpx.ConnectError("connection refused"), 200)

        with pytest.raises(TransportError) as exc_info:
            await policy.execute(request)

        assert request.calls == 1
        assert isinstance(exc_info.value.original_exception, httpx.ConnectError)


class TestErrorMapping:
    """Test status code to exception mapping"""

    @pytest.mark.parametrize("status,expected", [
        (500, ServerError),
        (502, ServerError),
        (429, RateLimitError),
        (401, AuthenticationError),
        (403, AuthenticationError),
        (404, ResourceNotFoundError),
        (422, ClientRequestError),
    ])
    def test_error_for_response(self, status, expected):
        error = error_for_response(httpx.Response(status, text="nope"))

        assert isinstance(error, expected)
        assert error.status_code == status
        assert error.response_body == "nope"

    def test_retry_after_seconds(self):
        assert retry_after_seconds(httpx.Response(429, headers={"Retry-After": "2.5"})) == 2.5
        assert retry_after_seconds(httpx.Response(429)) is None
        assert retry_after_seconds(
            httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2015 07:28:00 GMT"})
        ) is None
