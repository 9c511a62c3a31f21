"""
Telegram notification sink.

Delivery is best effort: failures are retried, then logged and reported
to the caller as False, never raised.
"""

import json
import logging
from typing import Any

import httpx

from skyledger.services.notification_formatter import truncate
from skyledger.services.retry import RetryPolicy, retry_async

logger = logging.getLogger(__name__)

TELEGRAM_API_URL = "https://api.telegram.org"

# Hard limit of the Bot API for a single text message
TELEGRAM_MAX_MESSAGE_LENGTH = 4096


class TelegramDeliveryError(Exception):
    """Telegram accepted the request but reported a failure."""

    pass


class TelegramNotifier:
    """Sends text messages to one Telegram chat."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        bot_token: str,
        chat_id: str,
        retry_policy: RetryPolicy | None = None,
        api_url: str = TELEGRAM_API_URL,
        parse_mode: str | None = None,
    ) -> None:
        self.client = client
        self.chat_id = chat_id
        self.retry_policy = retry_policy or RetryPolicy()
        self.parse_mode = parse_mode
        self._send_url = f"{api_url.rstrip('/')}/bot{bot_token}/sendMessage"

    def build_payload(self, message: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "chat_id": self.chat_id,
            "text": truncate(message, TELEGRAM_MAX_MESSAGE_LENGTH),
        }
        if self.parse_mode:
            payload["parse_mode"] = self.parse_mode
        return payload

    async def _post(self, payload: dict[str, Any]) -> dict[str, Any]:
        # httpx error messages embed the request URL, which carries the bot token
        try:
            response = await self.client.post(self._send_url, json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise TelegramDeliveryError(f"HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise TelegramDeliveryError(type(e).__name__) from e

        body = response.json()
        if not isinstance(body, dict) or not body.get("ok", False):
            description = body.get("description") if isinstance(body, dict) else None
            raise TelegramDeliveryError(description or "unknown Telegram error")
        return body

    async def send(self, message: str) -> bool:
        """
        Send a message to the configured chat.

        Returns:
            True if Telegram accepted the message, False otherwise
        """
        payload = self.build_payload(message)
        try:
            await retry_async(
                lambda: self._post(payload),
                self.retry_policy,
                description="Telegram sendMessage",
                retry_on=(json.JSONDecodeError, TelegramDeliveryError),
            )
        except (json.JSONDecodeError, TelegramDeliveryError) as e:
            logger.error("Error sending Telegram message: %s", e)
            return False

        logger.info("Sent Telegram message to chat %s", self.chat_id)
        return True
