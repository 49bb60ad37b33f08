"""AMQP topology and publishing for notification events.

    exchange  notifications (topic, durable)
    queue     notifications (durable)
      <- notification.*
      <- email.password_reset
"""

from __future__ import annotations

import logging
from typing import Any

from django.conf import settings
from kombu import Connection
from kombu import Exchange
from kombu import Queue
from kombu import binding
from kombu.pools import producers

logger = logging.getLogger(__name__)

NOTIFICATION_CREATED = "notification.created"
PASSWORD_RESET = "email.password_reset"

RETRY_POLICY = {
    "max_retries": 3,
    "interval_start": 0,
    "interval_step": 0.5,
    "interval_max": 2,
}


class NotificationBroker:
    def __init__(
        self,
        url: str | None = None,
        exchange_name: str | None = None,
        queue_name: str | None = None,
    ):
        self.url = url or settings.NOTIFICATIONS_BROKER_URL
        self.exchange = Exchange(
            exchange_name or settings.NOTIFICATIONS_EXCHANGE,
            type="topic",
            durable=True,
        )
        self.queue = Queue(
            queue_name or settings.NOTIFICATIONS_QUEUE,
            bindings=[
                binding(self.exchange, routing_key="notification.*"),
                binding(self.exchange, routing_key=PASSWORD_RESET),
            ],
            durable=True,
        )

    def connection(self) -> Connection:
        return Connection(self.url)

    def declare(self, conn: Connection) -> None:
        """Declare exchange, queue and both bindings (idempotent)."""
        channel = conn.default_channel
        self.exchange.declare(channel=channel)
        self.queue(channel).declare()

    def publish(self, payload: dict[str, Any], routing_key: str) -> None:
        with self.connection() as conn:
            self.declare(conn)
            with producers[conn].acquire(block=True) as producer:
                producer.publish(
                    payload,
                    exchange=self.exchange,
                    routing_key=routing_key,
                    serializer="json",
                    delivery_mode=2,
                    retry=True,
                    retry_policy=RETRY_POLICY,
                )
        logger.debug("Published %s to %s", routing_key, self.exchange.name)


_broker: NotificationBroker | None = None


def get_broker() -> NotificationBroker:
    global _broker  # noqa: PLW0603
    if _broker is None:
        _broker = NotificationBroker()
    return _broker
