"""
Order-created outbox and its delivery relay.

The order use case publishes into the outbox after commit and returns.
The relay drains the outbox separately and hands each event to a
NotificationSender. Delivery failures stay on the relay's side: they are
logged, retried on later drains, and dropped after ``max_attempts``.
"""

import logging
import threading
from collections import deque
from dataclasses import dataclass, replace
from typing import Any

from coindarks.domain.exchange.entities import OrderCreatedEvent
from coindarks.domain.exchange.ports import NotificationSender, OrderEventPublisher

logger = logging.getLogger(__name__)

ORDER_CREATED_TEMPLATE = "order_created"


@dataclass(frozen=True)
class OutboxEntry:
    """An event waiting for delivery."""

    event: OrderCreatedEvent
    attempts: int = 0


def event_params(event: OrderCreatedEvent) -> dict[str, Any]:
    """Serialize an event into JSON-safe template parameters."""
    return {
        "order_id": str(event.order_id),
        "order_number": event.order_number,
        "user_id": event.user_id,
        "type": event.type.value,
        "asset": event.asset,
        "amount_crypto": str(event.amount_crypto),
        "amount_fiat": str(event.amount_fiat),
        "fiat_currency": event.fiat_currency,
        "occurred_at": event.occurred_at.isoformat(),
    }


class InMemoryOrderOutbox(OrderEventPublisher):
    """Thread-safe in-process outbox."""

    def __init__(self) -> None:
        self._entries: deque[OutboxEntry] = deque()
        self._lock = threading.Lock()

    def publish(self, event: OrderCreatedEvent) -> None:
        with self._lock:
            self._entries.append(OutboxEntry(event=event))

    def take_pending(self) -> list[OutboxEntry]:
        """Remove and return every waiting entry."""
        with self._lock:
            entries = list(self._entries)
            self._entries.clear()
        return entries

    def requeue(self, entry: OutboxEntry) -> None:
        with self._lock:
            self._entries.append(entry)

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class OrderNotificationRelay:
    """Delivers outbox events through a notification sender.

    Args:
        outbox: Source of pending events.
        sender: Delivery channel.
        address: Recipient handed to the sender.
        max_attempts: Deliveries tried per event before it is dropped.
    """

    def __init__(
        self,
        outbox: InMemoryOrderOutbox,
        sender: NotificationSender,
        address: str,
        max_attempts: int = 3,
    ) -> None:
        self._outbox = outbox
        self._sender = sender
        self._address = address
        self._max_attempts = max_attempts

    def deliver_pending(self) -> int:
        """Drain the outbox once.

        Returns:
            Number of events delivered on this drain.
        """
        delivered = 0
        for entry in self._outbox.take_pending():
            order_number = entry.event.order_number
            try:
                self._sender.send(
                    self._address, ORDER_CREATED_TEMPLATE, event_params(entry.event)
                )
            except Exception as exc:
                attempts = entry.attempts + 1
                if attempts < self._max_attempts:
                    logger.warning(
                        "Notification for order %s failed (%s); attempt %d/%d",
                        order_number,
                        type(exc).__name__,
                        attempts,
                        self._max_attempts,
                    )
                    self._outbox.requeue(replace(entry, attempts=attempts))
                else:
                    logger.error(
                        "Dropping notification for order %s after %d attempts",
                        order_number,
                        attempts,
                    )
                continue
            delivered += 1
        return delivered
