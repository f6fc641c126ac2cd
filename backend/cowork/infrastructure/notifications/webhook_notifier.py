"""
Session Webhook Notifier

Best-effort notification to an external webhook when a session ends.

Delivery is a single POST with no retry. Failures are logged and
discarded: by the time this runs the session and the subscription balance
are already committed, and nothing here may undo or fail that.
"""

import logging
from functools import lru_cache
from typing import Optional

import httpx

from cowork.config.settings import get_settings
from cowork.domain.sessions import SessionEndedEvent
from cowork.infrastructure.exceptions import NotificationError


logger = logging.getLogger(__name__)


class SessionWebhookNotifier:
    """
    Posts SessionEndedEvent payloads to the configured webhook URL.

    Args:
        url: Webhook endpoint. When None, notifications are skipped.
        timeout: Request timeout in seconds.
        transport: Optional httpx transport (tests use httpx.MockTransport).
    """

    def __init__(
        self,
        url: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.url = url
        self.timeout = timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.url)

    async def send(self, event: SessionEndedEvent) -> None:
        """
        Deliver one event.

        Raises:
            NotificationError: transport failure or non-2xx response.
        """
        try:
            async with httpx.AsyncClient(
                timeout=self.timeout,
                transport=self._transport,
            ) as client:
                response = await client.post(self.url, json=event.to_payload())
                response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise NotificationError(
                "Session webhook rejected the notification",
                url=self.url,
                status_code=e.response.status_code,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise NotificationError(
                f"Session webhook unreachable: {e}",
                url=self.url,
                original_error=e,
            ) from e

    async def notify_session_ended(self, event: SessionEndedEvent) -> bool:
        """
        Send the event, swallowing any delivery failure.

        Returns:
            True if the webhook accepted the event, False otherwise.
        """
        if not self.enabled:
            logger.debug(f"No session webhook configured, skipping session {event.session_id}")
            return False

        try:
            await self.send(event)
        except NotificationError as e:
            logger.error(f"Webhook failed for session {event.session_id}: {e.message} {e.details}")
            return False

        logger.info(f"Webhook notified for session {event.session_id}")
        return True


@lru_cache
def get_session_notifier() -> SessionWebhookNotifier:
    """Notifier configured from settings."""
    settings = get_settings()
    return SessionWebhookNotifier(
        url=settings.session_webhook_url,
        timeout=settings.session_webhook_timeout,
    )
