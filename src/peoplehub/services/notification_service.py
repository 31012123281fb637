"""Notification adapters for absence and feedback events."""

import asyncio
import logging
from typing import ClassVar

import httpx

from peoplehub.config import get_settings
from peoplehub.ports import NotificationEvent, Notifier

logger = logging.getLogger(__name__)

WEBHOOK_RETRY_DELAY = 1.0  # Base delay in seconds

USER_AGENT = "PeopleHubCore/0.1"


class LoggingNotifier:
    """Notifier that only writes events to the log."""

    async def notify(self, event: NotificationEvent) -> None:
        if event.start_date is not None:
            logger.info(
                f"Notification {event.type.value}: {event.subject_id} "
                f"for user {event.user_id} ({event.start_date} to {event.end_date})"
            )
        else:
            logger.info(f"Notification {event.type.value}: {event.subject_id} for user {event.user_id}")


class WebhookNotifier:
    """Notifier posting events as JSON to a webhook URL."""

    # Shared HTTP client for connection reuse (class-level)
    _http_client: ClassVar[httpx.AsyncClient | None] = None

    def __init__(
        self,
        url: str,
        timeout: float | None = None,
        max_retries: int | None = None,
        retry_delay: float = WEBHOOK_RETRY_DELAY,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        settings = get_settings() if timeout is None or max_retries is None else None
        self.url = url
        self.timeout = timeout if timeout is not None else settings.notification_timeout
        self.max_retries = max(
            1, max_retries if max_retries is not None else settings.notification_max_retries
        )
        self.retry_delay = retry_delay
        self._client = client

    def _get_http_client(self) -> httpx.AsyncClient:
        if self._client is not None:
            return self._client
        cls = type(self)
        if cls._http_client is None or cls._http_client.is_closed:
            cls._http_client = httpx.AsyncClient(
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                headers={"User-Agent": USER_AGENT},
            )
        return cls._http_client

    @classmethod
    async def close_client(cls) -> None:
        """Close the shared HTTP client. Call on application shutdown."""
        if cls._http_client and not cls._http_client.is_closed:
            await cls._http_client.aclose()
            cls._http_client = None

    async def notify(self, event: NotificationEvent) -> None:
        """Post the event, retrying server errors and timeouts.

        Raises:
            httpx.HTTPError: If delivery failed after all retries
        """
        client = self._get_http_client()
        payload = event.model_dump(mode="json")

        for attempt in range(self.max_retries):
            try:
                response = await client.post(self.url, json=payload, timeout=self.timeout)
                if response.status_code < 500:
                    response.raise_for_status()
                    return
                error: httpx.HTTPError = httpx.HTTPStatusError(
                    f"Webhook returned {response.status_code}",
                    request=response.request,
                    response=response,
                )
            except httpx.TimeoutException as e:
                error = e

            if attempt < self.max_retries - 1:
                delay = self.retry_delay * (2**attempt)
                logger.warning(f"Webhook delivery failed: {error}, retrying in {delay}s")
                await asyncio.sleep(delay)
            else:
                logger.error(f"Webhook delivery failed after {self.max_retries} attempts")
                raise error


async def notify_safely(notifier: Notifier | None, event: NotificationEvent) -> None:
    """Deliver a notification without letting failures reach the caller.

    Notifications are sent after commit, so a failure must never undo the
    mutation that triggered them.
    """
    if notifier is None:
        return
    try:
        await notifier.notify(event)
    except Exception as e:
        logger.warning(f"Failed to send {event.type.value} notification for {event.subject_id}: {e}")


def get_notifier() -> Notifier:
    """Build the notifier configured in settings."""
    settings = get_settings()
    if settings.notification_webhook_url:
        return WebhookNotifier(settings.notification_webhook_url)
    return LoggingNotifier()
