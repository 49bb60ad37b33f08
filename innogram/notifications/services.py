from __future__ import annotations

import logging
from typing import Any

from django.contrib.auth import get_user_model
from django.utils import timezone

from innogram.notifications.models import Notification
from innogram.posts.models import Post
from innogram.users.models import Profile

logger = logging.getLogger(__name__)

User = get_user_model()


def _as_int(value: Any) -> int | None:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def resolve_post_id(payload: dict[str, Any]) -> int | None:
    if payload.get("entityType") == "post":
        return _as_int(payload.get("entityId"))
    return _as_int((payload.get("metadata") or {}).get("postId"))


def enrich_notification_data(payload: dict[str, Any]) -> dict[str, Any]:
    """Build the ``data`` blob stored on a notification.

    Adds the actor's avatar (``actorAvatarUrl``) and the first thumbnail of
    the referenced post (``postImageUrl``) when they can be resolved.
    """
    data: dict[str, Any] = {
        "entityType": payload.get("entityType"),
        "entityId": payload.get("entityId"),
        "actorId": payload.get("actorId"),
        **(payload.get("metadata") or {}),
    }

    actor_id = _as_int(payload.get("actorId"))
    if actor_id is not None:
        avatar = (
            Profile.objects.filter(user_id=actor_id)
            .values_list("avatar_url", flat=True)
            .first()
        )
        if avatar:
            data["actorAvatarUrl"] = avatar

    post_id = resolve_post_id(payload)
    if post_id is not None:
        post = Post.objects.filter(pk=post_id).first()
        asset = post.first_asset() if post else None
        if asset and asset.thumbnail_path:
            data["postImageUrl"] = asset.thumbnail_path
        else:
            logger.debug("No thumbnail found for post %s", post_id)

    return data


def create_notification(payload: dict[str, Any], data: dict[str, Any] | None = None) -> Notification:
    if data is None:
        data = enrich_notification_data(payload)
    notification = Notification.objects.create(
        recipient_id=payload["userId"],
        notification_type=payload["type"],
        title=payload["title"],
        message=payload["message"],
        data=data,
    )
    logger.info(
        "Created notification %s for user %s (thumbnail=%s)",
        notification.pk,
        payload["userId"],
        "postImageUrl" in data,
    )
    return notification


def mark_email_sent(notification: Notification) -> None:
    notification.email_sent_at = timezone.now()
    notification.save(update_fields=["email_sent_at"])


def get_recipient(user_id: int):
    """Return the active recipient, or None when there is nobody to email."""
    user = User.objects.filter(pk=user_id, is_active=True).select_related("profile").first()
    if user is None or not user.email:
        logger.warning("User %s not found or has no email", user_id)
        return None
    return user


def mark_read(notification: Notification) -> bool:
    if notification.is_read:
        return False
    notification.is_read = True
    notification.read_at = timezone.now()
    notification.save(update_fields=["is_read", "read_at"])
    return True


def mark_all_read(user) -> int:
    return Notification.objects.filter(recipient=user, is_read=False).update(
        is_read=True,
        read_at=timezone.now(),
    )
