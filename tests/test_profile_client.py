"""Tests for the profile API client (mocked HTTP)."""

import httpx
import pytest
import respx

from skyledger.clients.profile import ProfileClient
from skyledger.models.failure import MalformedProfileError, TransientIOError
from skyledger.services.retry import RetryPolicy

BASE_URL = "https://profiles.test/api/v2/profile"
PROFILE_URL = f"{BASE_URL}/Steve"


@pytest.fixture
async def http_client():
    async with httpx.AsyncClient() as client:
        yield client


@pytest.fixture
def profile_client(http_client: httpx.AsyncClient, fast_retry: RetryPolicy) -> ProfileClient:
    return ProfileClient(http_client, base_url=BASE_URL + "/", retry_policy=fast_retry)


class TestFetchProfile:
    def test_builds_profile_url(self, profile_client: ProfileClient) -> None:
        """Trailing slashes on the base URL are normalized."""
        assert profile_client.profile_url("Steve") == PROFILE_URL

    @respx.mock
    async def test_returns_document(
        self, profile_client: ProfileClient, sample_profile: dict
    ) -> None:
        respx.get(PROFILE_URL).mock(return_value=httpx.Response(200, json=sample_profile))

        data = await profile_client.fetch_profile("Steve")

        assert data == sample_profile

    @respx.mock
    async def test_retries_server_errors(
        self, profile_client: ProfileClient, sample_profile: dict
    ) -> None:
        """A failed attempt is retried within the budget."""
        route = respx.get(PROFILE_URL).mock(
            side_effect=[
                httpx.Response(502),
                httpx.ConnectError("connection refused"),
                httpx.Response(200, json=sample_profile),
            ]
        )

        data = await profile_client.fetch_profile("Steve")

        assert data == sample_profile
        assert route.call_count == 3

    @respx.mock
    async def test_exhausted_retries_raise_transient(self, profile_client: ProfileClient) -> None:
        route = respx.get(PROFILE_URL).mock(return_value=httpx.Response(503))

        with pytest.raises(TransientIOError, match="HTTP 503"):
            await profile_client.fetch_profile("Steve")

        assert route.call_count == 3

    @respx.mock
    async def test_invalid_json_is_retried_then_transient(
        self, profile_client: ProfileClient
    ) -> None:
        route = respx.get(PROFILE_URL).mock(
            return_value=httpx.Response(200, content=b"<html>maintenance</html>")
        )

        with pytest.raises(TransientIOError):
            await profile_client.fetch_profile("Steve")

        assert route.call_count == 3

    @respx.mock
    async def test_non_object_body_is_malformed(self, profile_client: ProfileClient) -> None:
        """A JSON body that is not an object is not retried."""
        route = respx.get(PROFILE_URL).mock(return_value=httpx.Response(200, json=[1, 2]))

        with pytest.raises(MalformedProfileError):
            await profile_client.fetch_profile("Steve")

        assert route.call_count == 1
