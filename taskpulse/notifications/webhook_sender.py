"""Webhook notification sender implementation."""

from typing import Optional
import logging

import httpx

from ..domain.models import NotificationItem

logger = logging.getLogger(__name__)


class WebhookNotificationSender:
    """Posts notifications as JSON to an HTTP webhook."""

    def __init__(
        self,
        webhook_url: str,
        *,
        api_key: Optional[str] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize webhook sender.

        Args:
            webhook_url: Target URL
            api_key: Optional API key sent as X-API-Key
            http_client: Optional HTTP client for testing
        """
        self._webhook_url = webhook_url
        self._api_key = api_key
        self._http_client = http_client

    @property
    def channel_name(self) -> str:
        """Return channel name for this sender."""
        return "webhook"

    async def send(self, notification: NotificationItem) -> bool:
        """Send notification to the webhook.

        Args:
            notification: Notification to send

        Returns:
            True if sent successfully, False otherwise
        """
        payload = self._build_payload(notification)
        headers = self._build_headers()

        client = self._http_client or httpx.AsyncClient()
        try:
            response = await client.post(
                self._webhook_url,
                json=payload,
                headers=headers,
                timeout=10.0,
            )
            return response.status_code in (200, 201, 202, 204)
        except httpx.HTTPError as e:
            logger.warning(f"Webhook delivery failed: {e}")
            return False
        finally:
            if not self._http_client:
                await client.aclose()

    def _build_payload(self, notification: NotificationItem) -> dict:
        """Build webhook payload.

        Args:
            notification: Notification to convert

        Returns:
            Webhook payload dict
        """
        payload = {
            "id": notification.id,
            "title": notification.title,
            "message": notification.message,
            "type": notification.notification_type.value,
            "timestamp": notification.created_at.isoformat(),
        }

        if notification.action_url:
            payload["action_url"] = notification.action_url

        return payload

    def _build_headers(self) -> dict:
        """Build HTTP headers.

        Returns:
            Headers dict
        """
        headers = {
            "Content-Type": "application/json",
        }
        if self._api_key:
            headers["X-API-Key"] = self._api_key
        return headers
