"""
Profile API client.

Fetches the raw profile document for a player from the SkyCrypt API.
Only the fields the extractor consumes are relied upon.
"""

import json
import logging
from typing import Any

import httpx

from skyledger.models.failure import MalformedProfileError, TransientIOError
from skyledger.services.retry import RetryPolicy, retry_async

logger = logging.getLogger(__name__)

DEFAULT_PROFILE_API_URL = "https://sky.shiiyu.moe/api/v2/profile"


class ProfileClient:
    """
    Client for the profile API.

    Non-2xx responses and undecodable bodies count as failed attempts and
    are retried under the given policy.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        base_url: str = DEFAULT_PROFILE_API_URL,
        retry_policy: RetryPolicy | None = None,
    ) -> None:
        """
        Initialize the profile client.

        Args:
            client: Shared HTTP client, owned by the caller
            base_url: Profile endpoint; the player name is appended
            retry_policy: Retry budget. Defaults to RetryPolicy().
        """
        self.client = client
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy()

    def profile_url(self, player: str) -> str:
        return f"{self.base_url}/{player}"

    async def _get_json(self, url: str) -> Any:
        response = await self.client.get(url)
        response.raise_for_status()
        return response.json()

    async def fetch_profile(self, player: str) -> dict[str, Any]:
        """
        Fetch the raw profile document for a player.

        Args:
            player: Player name or UUID

        Returns:
            Decoded JSON document

        Raises:
            TransientIOError: If every attempt failed
            MalformedProfileError: If the body is valid JSON but not an object
        """
        url = self.profile_url(player)
        logger.info("Fetching profile for %s", player)

        try:
            data = await retry_async(
                lambda: self._get_json(url),
                self.retry_policy,
                description=f"Profile fetch for {player}",
                retry_on=(httpx.HTTPError, json.JSONDecodeError),
            )
        except httpx.HTTPStatusError as e:
            raise TransientIOError(
                f"Profile fetch failed: HTTP {e.response.status_code}",
                detail=str(e),
            ) from e
        except (httpx.HTTPError, json.JSONDecodeError) as e:
            raise TransientIOError(f"Profile fetch failed: {e}", detail=str(e)) from e

        if not isinstance(data, dict):
            raise MalformedProfileError(
                f"Invalid API response: expected a JSON object, got {type(data).__name__}"
            )
        return data
