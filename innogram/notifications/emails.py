"""HTML emails for notifications, rendered from Django templates."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from django.conf import settings
from django.core.mail import EmailMultiAlternatives
from django.template.loader import render_to_string
from django.utils.html import strip_tags

from innogram.notifications.models import Notification

T = Notification.Type


@dataclass(frozen=True)
class RenderedEmail:
    subject: str
    html: str
    text: str


def _frontend(path: str) -> str:
    return f"{settings.FRONTEND_URL.rstrip('/')}{path}"


def _absolute(url: str | None) -> str | None:
    if not url or url.startswith(("http://", "https://")):
        return url
    return _frontend(url if url.startswith("/") else f"/{url}")


def _notification_copy(notification_type: str, ctx: dict[str, Any]) -> tuple[str, str, str, str | None]:
    """Return (subject, heading, button label, button path)."""
    actor = ctx["actor_username"]
    metadata = ctx["metadata"]
    post_id = metadata.get("postId")
    post_path = f"/app/post/{post_id}" if post_id is not None else "/app/feed"
    if notification_type == T.FOLLOW_REQUEST:
        return (
            f"{actor} requested to follow you",
            "New Follow Request",
            "View Profile",
            f"/app/profile/{actor}",
        )
    if notification_type == T.FOLLOW_ACCEPTED:
        return (
            f"{actor} accepted your follow request",
            "Follow Request Accepted!",
            "View Profile",
            f"/app/profile/{actor}",
        )
    if notification_type == T.POST_LIKE:
        return (
            f"{actor} liked your post",
            "New Like on Your Post",
            "View Post",
            f"/app/post/{ctx['entity_id']}",
        )
    if notification_type == T.COMMENT_LIKE:
        return (
            f"{actor} liked your comment",
            "New Like on Your Comment",
            "View Comment",
            f"/app/post/{metadata.get('postId', ctx['entity_id'])}",
        )
    if notification_type == T.POST_COMMENT:
        return (
            f"{actor} commented on your post",
            "New Comment on Your Post",
            "View Post",
            post_path,
        )
    if notification_type == T.COMMENT_REPLY:
        return (
            f"{actor} replied to your comment",
            "New Reply to Your Comment",
            "View Thread",
            post_path,
        )
    if notification_type == T.MENTION:
        entity = "a post" if ctx["entity_type"] == "post" else "a comment"
        label = "View Post" if ctx["entity_type"] == "post" else "View Comment"
        path = f"/app/post/{metadata.get('postId') or ctx['entity_id']}"
        return (f"{actor} mentioned you in {entity}", "You Were Mentioned!", label, path)
    return ("New Notification", "New Notification", "Open Innogram", "/app/feed")


def render_notification_email(payload: dict[str, Any], data: dict[str, Any]) -> RenderedEmail:
    metadata = payload.get("metadata") or {}
    ctx = {
        "actor_username": metadata.get("actorUsername") or "Someone",
        "entity_id": payload.get("entityId"),
        "entity_type": payload.get("entityType"),
        "metadata": metadata,
    }
    subject, heading, button_label, button_path = _notification_copy(payload["type"], ctx)
    html = render_to_string(
        "notifications/email/notification.html",
        {
            "subject": subject,
            "heading": heading,
            "message": payload.get("message") or subject,
            "post_image_url": _absolute(data.get("postImageUrl")),
            "button_label": button_label,
            "button_url": _frontend(button_path) if button_path else None,
            "frontend_url": settings.FRONTEND_URL,
        },
    )
    return RenderedEmail(subject=subject, html=html, text=strip_tags(html).strip())


def render_password_reset_email(username: str, reset_url: str) -> RenderedEmail:
    subject = "Reset Your Innogram Password"
    html = render_to_string(
        "notifications/email/password_reset.html",
        {
            "subject": subject,
            "username": username,
            "reset_url": reset_url,
            "expires_minutes": settings.PASSWORD_RESET_TIMEOUT // 60,
            "frontend_url": settings.FRONTEND_URL,
        },
    )
    return RenderedEmail(subject=subject, html=html, text=strip_tags(html).strip())


def send_email(to: str, email: RenderedEmail) -> None:
    message = EmailMultiAlternatives(
        subject=email.subject,
        body=email.text,
        from_email=settings.DEFAULT_FROM_EMAIL,
        to=[to],
    )
    message.attach_alternative(email.html, "text/html")
    message.send(fail_silently=False)
