"""Telegram Bot API client for outbound messages and update polling."""

from __future__ import annotations

from typing import Any

import httpx

from tariffimpact.logging_setup import get_logger

logger = get_logger("notify.telegram")

API_BASE = "https://api.telegram.org"
DEFAULT_TIMEOUT = 10.0
MAX_MESSAGE_LENGTH = 4096


class DeliveryError(Exception):
    """Raised when a message could not be delivered."""

    pass


def _redact(token: str, text: str) -> str:
    """Remove the bot token from text before logging it."""
    return text.replace(token, "***") if token else text


class TelegramNotifier:
    """Minimal Telegram Bot API client.

    Args:
        token: Bot token from @BotFather.
        timeout: Per-request timeout in seconds.
        client: Optional pre-built httpx client (tests pass one with a
            MockTransport).
    """

    def __init__(
        self,
        token: str,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.Client | None = None,
    ) -> None:
        if not token:
            raise ValueError("Telegram bot token is required")
        self.token = token
        self.timeout = timeout
        self._client = client or httpx.Client(timeout=timeout)

    def _url(self, method: str) -> str:
        return f"{API_BASE}/bot{self.token}/{method}"

    def _call(self, method: str, payload: dict[str, Any], timeout: float | None = None) -> Any:
        try:
            response = self._client.post(
                self._url(method),
                json=payload,
                timeout=timeout if timeout is not None else self.timeout,
            )
        except httpx.TimeoutException as e:
            raise DeliveryError(f"Telegram {method} timed out") from e
        except httpx.HTTPError as e:
            raise DeliveryError(_redact(self.token, f"Telegram {method} failed: {e}")) from e

        if response.status_code != 200:
            raise DeliveryError(
                f"Telegram {method} HTTP {response.status_code}: {response.text[:200]}"
            )

        try:
            data = response.json()
        except ValueError as e:
            raise DeliveryError(f"Telegram {method} returned invalid JSON") from e

        if not data.get("ok"):
            raise DeliveryError(f"Telegram {method} rejected: {data.get('description', 'unknown error')}")
        return data.get("result")

    def send_message(self, chat_id: str | int, text: str) -> None:
        """Send a Markdown message.

        Raises:
            DeliveryError: On timeout, network error, HTTP error or API rejection.
        """
        if len(text) > MAX_MESSAGE_LENGTH:
            text = text[: MAX_MESSAGE_LENGTH - 3] + "..."

        self._call(
            "sendMessage",
            {
                "chat_id": chat_id,
                "text": text,
                "parse_mode": "Markdown",
                "disable_web_page_preview": True,
            },
        )
        logger.info(
            "Telegram message sent to %s",
            chat_id,
            extra={"extra_fields": {"chat_id": str(chat_id), "chars": len(text)}},
        )

    def notify(self, chat_id: str | int, text: str) -> bool:
        """Send a message, returning False (and logging) instead of raising."""
        try:
            self.send_message(chat_id, text)
            return True
        except DeliveryError as e:
            logger.warning(
                "Telegram delivery to %s failed: %s",
                chat_id,
                e,
                extra={"extra_fields": {"chat_id": str(chat_id), "delivered": False}},
            )
            return False

    def get_updates(self, offset: int | None = None, poll_timeout: int = 30) -> list[dict[str, Any]]:
        """Long-poll for new updates.

        The HTTP timeout is the poll timeout plus the request timeout so the
        server-side wait never trips it.
        """
        payload: dict[str, Any] = {"timeout": poll_timeout, "allowed_updates": ["message"]}
        if offset is not None:
            payload["offset"] = offset
        result = self._call("getUpdates", payload, timeout=poll_timeout + self.timeout)
        return list(result or [])

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "TelegramNotifier":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()
