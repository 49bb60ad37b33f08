"""Publishing side of the notification pipeline.

Domain code (follows, likes, comments, mentions) calls the ``notify_*``
helpers. Preferences are checked here, before anything is queued: an event
nobody wants on any channel never reaches the broker. Publishing never raises
into the caller; the user action that triggered it must still succeed.
"""

from __future__ import annotations

import logging
from typing import Any

from innogram.notifications import preferences as default_preferences
from innogram.notifications.broker import NOTIFICATION_CREATED
from innogram.notifications.broker import PASSWORD_RESET
from innogram.notifications.broker import NotificationBroker
from innogram.notifications.broker import get_broker
from innogram.notifications.models import Notification

logger = logging.getLogger(__name__)

T = Notification.Type


class NotificationProducer:
    def __init__(self, broker: NotificationBroker | None = None, preferences=None):
        self._broker = broker
        self.preferences = preferences or default_preferences

    @property
    def broker(self) -> NotificationBroker:
        if self._broker is None:
            self._broker = get_broker()
        return self._broker

    def send_notification(self, payload: dict[str, Any]) -> bool:
        """Publish ``payload`` if the recipient wants it; return True when queued."""
        try:
            user_id = payload["userId"]
            notification_type = payload["type"]
            send_web = self.preferences.should_send_web(user_id, notification_type)
            send_email = self.preferences.should_send_email(user_id, notification_type)
            if not send_web and not send_email:
                logger.debug(
                    "Skipping %s for user %s: both channels disabled",
                    notification_type,
                    user_id,
                )
                return False

            self.broker.publish(
                {**payload, "sendWeb": send_web, "sendEmail": send_email},
                NOTIFICATION_CREATED,
            )
        except Exception:
            logger.exception("Failed to send notification")
            return False
        return True

    def _notify(
        self,
        user_id: int,
        notification_type: str,
        title: str,
        message: str,
        entity_type: str,
        entity_id: int,
        actor_id: int,
        **metadata: Any,
    ) -> bool:
        return self.send_notification(
            {
                "userId": user_id,
                "type": str(notification_type),
                "title": title,
                "message": message,
                "entityType": entity_type,
                "entityId": entity_id,
                "actorId": actor_id,
                "metadata": {k: v for k, v in metadata.items() if v is not None},
            },
        )

    def notify_follow_request(self, user_id: int, actor_id: int, actor_username: str) -> bool:
        return self._notify(
            user_id,
            T.FOLLOW_REQUEST,
            "New Follow Request",
            f"{actor_username} requested to follow you",
            "profile",
            actor_id,
            actor_id,
            actorUsername=actor_username,
        )

    def notify_follow_accepted(self, user_id: int, actor_id: int, actor_username: str) -> bool:
        return self._notify(
            user_id,
            T.FOLLOW_ACCEPTED,
            "Follow Request Accepted",
            f"{actor_username} accepted your follow request",
            "profile",
            actor_id,
            actor_id,
            actorUsername=actor_username,
        )

    def notify_new_follower(self, user_id: int, actor_id: int, actor_username: str) -> bool:
        # There is no NEW_FOLLOWER type; new followers ride on FOLLOW_ACCEPTED.
        return self._notify(
            user_id,
            T.FOLLOW_ACCEPTED,
            "New Follower",
            f"{actor_username} started following you",
            "profile",
            actor_id,
            actor_id,
            actorUsername=actor_username,
        )

    def notify_post_like(self, user_id: int, post_id: int, actor_id: int, actor_username: str) -> bool:
        return self._notify(
            user_id,
            T.POST_LIKE,
            "New Like on Your Post",
            f"{actor_username} liked your post",
            "post",
            post_id,
            actor_id,
            actorUsername=actor_username,
            postId=post_id,
        )

    def notify_post_comment(
        self,
        user_id: int,
        post_id: int,
        comment_id: int,
        actor_id: int,
        actor_username: str,
    ) -> bool:
        return self._notify(
            user_id,
            T.POST_COMMENT,
            "New Comment on Your Post",
            f"{actor_username} commented on your post",
            "comment",
            comment_id,
            actor_id,
            actorUsername=actor_username,
            postId=post_id,
        )

    def notify_comment_like(
        self,
        user_id: int,
        comment_id: int,
        actor_id: int,
        actor_username: str,
        post_id: int | None = None,
    ) -> bool:
        return self._notify(
            user_id,
            T.COMMENT_LIKE,
            "New Like on Your Comment",
            f"{actor_username} liked your comment",
            "comment",
            comment_id,
            actor_id,
            actorUsername=actor_username,
            postId=post_id,
        )

    def notify_comment_reply(
        self,
        user_id: int,
        comment_id: int,
        reply_id: int,
        actor_id: int,
        actor_username: str,
        post_id: int | None = None,
    ) -> bool:
        return self._notify(
            user_id,
            T.COMMENT_REPLY,
            "New Reply to Your Comment",
            f"{actor_username} replied to your comment",
            "comment",
            reply_id,
            actor_id,
            actorUsername=actor_username,
            parentCommentId=comment_id,
            postId=post_id,
        )

    def notify_mention(
        self,
        user_id: int,
        entity_type: str,
        entity_id: int,
        actor_id: int,
        actor_username: str,
        post_id: int | None = None,
    ) -> bool:
        return self._notify(
            user_id,
            T.MENTION,
            f"Mentioned in a {entity_type}",
            f"{actor_username} mentioned you in a {entity_type}",
            entity_type,
            entity_id,
            actor_id,
            actorUsername=actor_username,
            postId=post_id,
        )

    def send_password_reset_email(self, email: str, username: str, reset_url: str) -> bool:
        """Queue a password reset email, ignoring notification preferences.

        Failures are logged and reported as False, never raised, so the reset
        endpoint behaves the same whether or not the account exists.
        """
        try:
            self.broker.publish(
                {
                    "type": "password_reset",
                    "email": email,
                    "username": username,
                    "resetUrl": reset_url,
                },
                PASSWORD_RESET,
            )
        except Exception:
            logger.exception("Failed to queue password reset email")
            return False
        logger.info("Password reset email queued for user %s", username)
        return True
