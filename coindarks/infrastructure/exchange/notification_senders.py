"""
Adapters: Notification senders.

Implement NotificationSender port:
    - WebhookNotificationSender: POSTs a JSON message to a webhook URL.
    - LoggingNotificationSender: writes the message to the log; used when
      no webhook is configured.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Optional

import httpx

from coindarks.domain.exchange.ports import NotificationSender

logger = logging.getLogger(__name__)


class WebhookNotificationSender(NotificationSender):
    """Delivers messages as JSON POSTs.

    Args:
        url: Webhook endpoint.
        timeout: HTTP timeout in seconds.
        client: Optional pre-built httpx client.
    """

    def __init__(
        self,
        url: str,
        timeout: float = 5.0,
        client: Optional[httpx.Client] = None,
    ) -> None:
        self._url = url
        self._client = client or httpx.Client(timeout=timeout)

    def send(self, address: str, template: str, params: dict[str, Any]) -> None:
        """POST the message; raises httpx.HTTPError on failure."""
        payload = {
            "event": template,
            "to": address,
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "params": params,
        }
        response = self._client.post(
            self._url,
            json=payload,
            headers={"X-CoinDarks-Event": template},
        )
        response.raise_for_status()

    def close(self) -> None:
        self._client.close()


class LoggingNotificationSender(NotificationSender):
    """Records messages in the application log."""

    def send(self, address: str, template: str, params: dict[str, Any]) -> None:
        logger.info(
            "Notification %s to %s for order %s",
            template,
            address,
            params.get("order_number"),
        )
