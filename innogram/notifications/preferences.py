"""Per-user notification channel preferences.

Rows are created lazily with defaults the first time they are read. Lookups
never raise into the caller: a failed lookup falls back to web on, email off.
"""

from __future__ import annotations

import logging

from django.db import IntegrityError
from django.db import transaction
from rest_framework.exceptions import ValidationError

from innogram.notifications.models import Notification
from innogram.notifications.models import NotificationPreferences

logger = logging.getLogger(__name__)

PREFERENCE_FLAGS = (
    "follow_web",
    "like_web",
    "comment_web",
    "reply_web",
    "mention_web",
    "follow_email",
    "like_email",
    "comment_email",
    "reply_email",
    "mention_email",
)

# notification type -> preference group; types missing here have no group
TYPE_GROUPS: dict[str, str] = {
    Notification.Type.FOLLOW_REQUEST: "follow",
    Notification.Type.FOLLOW_ACCEPTED: "follow",
    Notification.Type.POST_LIKE: "like",
    Notification.Type.COMMENT_LIKE: "like",
    Notification.Type.POST_COMMENT: "comment",
    Notification.Type.COMMENT_REPLY: "reply",
    Notification.Type.MENTION: "mention",
}


def get_preferences(user_id: int) -> NotificationPreferences:
    prefs = NotificationPreferences.objects.filter(user_id=user_id).first()
    if prefs is not None:
        return prefs
    try:
        with transaction.atomic():
            return NotificationPreferences.objects.create(user_id=user_id)
    except IntegrityError:
        # Lost the race against a concurrent create; the row exists now.
        return NotificationPreferences.objects.get(user_id=user_id)


def update_preferences(user_id: int, **flags: bool) -> NotificationPreferences:
    unknown = sorted(set(flags) - set(PREFERENCE_FLAGS))
    if unknown:
        raise ValidationError({key: "Unknown preference." for key in unknown})

    prefs = get_preferences(user_id)
    if not flags:
        return prefs
    for key, value in flags.items():
        setattr(prefs, key, bool(value))
    prefs.save(update_fields=[*flags, "updated_at"])
    return prefs


def _channel_flag(user_id: int, notification_type: str, channel: str) -> bool:
    group = TYPE_GROUPS.get(notification_type)
    if group is None:
        return channel == "web"
    return bool(getattr(get_preferences(user_id), f"{group}_{channel}"))


def should_send_web(user_id: int, notification_type: str) -> bool:
    try:
        return _channel_flag(user_id, notification_type, "web")
    except Exception:
        logger.exception("Preference lookup failed for user %s; web defaults on", user_id)
        return True


def should_send_email(user_id: int, notification_type: str) -> bool:
    try:
        return _channel_flag(user_id, notification_type, "email")
    except Exception:
        logger.exception("Preference lookup failed for user %s; email defaults off", user_id)
        return False
