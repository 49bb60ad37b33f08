"""Consuming side of the notification pipeline.

A pull loop takes one message at a time off the ``notifications`` queue
(prefetch 1), handles it, and then settles it:

- handled                      -> ack
- password reset mail failed   -> requeue (retried until it goes out)
- malformed or anything else   -> reject without requeue

A dropped broker connection is re-established and consuming resumes.
"""

from __future__ import annotations

import logging
import threading
from typing import Any

from django.conf import settings
from django.db import close_old_connections
from django.db import transaction
from rest_framework import serializers

from innogram.notifications import emails
from innogram.notifications import services
from innogram.notifications.broker import NotificationBroker
from innogram.notifications.broker import get_broker
from innogram.notifications.exceptions import PasswordResetDeliveryError
from innogram.notifications.models import Notification

logger = logging.getLogger(__name__)

ACKED = "acked"
REQUEUED = "requeued"
REJECTED = "rejected"

# seconds between reconnect attempts, at most
RECONNECT_INTERVAL = 5


def _reached(processed: int, limit: int | None) -> bool:
    return limit is not None and processed >= limit


class NotificationEventSerializer(serializers.Serializer):
    userId = serializers.IntegerField(min_value=1)
    type = serializers.ChoiceField(choices=Notification.Type.choices)
    title = serializers.CharField(max_length=255)
    message = serializers.CharField(allow_blank=True)
    entityType = serializers.CharField(required=False, allow_null=True, default=None)
    entityId = serializers.JSONField(required=False, default=None)
    actorId = serializers.JSONField(required=False, default=None)
    metadata = serializers.DictField(required=False, default=dict)
    # Absent means "web on" for events queued before the flags existed.
    sendWeb = serializers.BooleanField(required=False, allow_null=True, default=None)
    sendEmail = serializers.BooleanField(required=False, default=False)


class PasswordResetEventSerializer(serializers.Serializer):
    type = serializers.ChoiceField(choices=["password_reset"])
    email = serializers.EmailField()
    username = serializers.CharField()
    resetUrl = serializers.URLField()


class NotificationConsumer:
    def __init__(self, broker: NotificationBroker | None = None, poll_timeout: float | None = None):
        self.broker = broker or get_broker()
        self.poll_timeout = (
            settings.NOTIFICATIONS_POLL_TIMEOUT if poll_timeout is None else poll_timeout
        )
        self._stop = threading.Event()

    def stop(self) -> None:
        self._stop.set()

    @property
    def stopping(self) -> bool:
        return self._stop.is_set()

    def run(self, max_messages: int | None = None) -> int:
        """Consume until stopped (or ``max_messages`` handled); return the count.

        A lost broker connection is logged and re-established, and the topology
        is redeclared before consuming resumes. Unacked messages go back to
        the queue with the dead channel.
        """
        processed = 0
        with self.broker.connection() as conn:
            # Socket failures surface as OSError whatever the transport lists.
            recoverable = conn.connection_errors + conn.channel_errors + (OSError,)
            while not self._stop.is_set() and not _reached(processed, max_messages):
                simple = self._open_queue(conn)
                try:
                    while not self._stop.is_set() and not _reached(processed, max_messages):
                        try:
                            message = simple.get(block=True, timeout=self.poll_timeout)
                        except simple.Empty:
                            continue
                        close_old_connections()
                        try:
                            self.handle_message(message)
                        finally:
                            close_old_connections()
                        processed += 1
                except recoverable:
                    logger.exception("Lost the broker connection; reconnecting")
                    conn.collect()
                else:
                    simple.close()
        logger.info("Notification consumer stopped after %d messages", processed)
        return processed

    def _open_queue(self, conn):
        conn.ensure_connection(
            errback=self._on_connection_error,
            interval_start=0,
            interval_step=1,
            interval_max=RECONNECT_INTERVAL,
        )
        self.broker.declare(conn)
        simple = conn.SimpleQueue(self.broker.queue, no_ack=False, accept=["json"])
        simple.consumer.qos(prefetch_count=1)
        logger.info("Consuming notifications from %s", self.broker.queue.name)
        return simple

    def _on_connection_error(self, exc, interval) -> None:
        logger.warning("Broker unavailable (%s); retrying in %ss", exc, interval)

    def handle_message(self, message) -> str:
        try:
            self.handle_payload(message.decode())
        except PasswordResetDeliveryError:
            logger.exception("Password reset delivery failed; requeueing")
            message.requeue()
            return REQUEUED
        except Exception:
            logger.exception("Dropping notification event")
            message.reject(requeue=False)
            return REJECTED
        message.ack()
        return ACKED

    def handle_payload(self, body: Any) -> Notification | None:
        if not isinstance(body, dict):
            msg = "Notification event must be a JSON object."
            raise serializers.ValidationError(msg)
        if body.get("type") == "password_reset":
            self.handle_password_reset(body)
            return None

        serializer = NotificationEventSerializer(data=body)
        serializer.is_valid(raise_exception=True)
        event = dict(serializer.validated_data)

        notification = None
        data = None
        if event["sendWeb"] is not False:
            with transaction.atomic():
                data = services.enrich_notification_data(event)
                notification = services.create_notification(event, data)

        if event["sendEmail"]:
            self._deliver_email(event, notification, data)
        return notification

    def _deliver_email(
        self,
        event: dict[str, Any],
        notification: Notification | None,
        data: dict[str, Any] | None,
    ) -> None:
        # Email is best effort: a failure here must not cost the web notification.
        try:
            recipient = services.get_recipient(event["userId"])
            if recipient is None:
                return
            if data is None:
                data = services.enrich_notification_data(event)
            rendered = emails.render_notification_email(event, data)
            emails.send_email(recipient.email, rendered)
            if notification is not None:
                services.mark_email_sent(notification)
        except Exception:
            logger.exception("Failed to send %s email to user %s", event["type"], event["userId"])

    def handle_password_reset(self, body: dict[str, Any]) -> None:
        serializer = PasswordResetEventSerializer(data=body)
        serializer.is_valid(raise_exception=True)
        event = serializer.validated_data
        try:
            rendered = emails.render_password_reset_email(event["username"], event["resetUrl"])
            emails.send_email(event["email"], rendered)
        except Exception as exc:
            msg = "Could not send password reset email"
            raise PasswordResetDeliveryError(msg) from exc
        logger.info("Sent password reset email for %s", event["username"])
