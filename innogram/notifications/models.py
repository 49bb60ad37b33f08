from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _


class Notification(models.Model):
    """A web notification row.

    Written only by the notification consumer; afterwards the only mutations
    are the read flag and the email delivery stamp.
    """

    class Type(models.TextChoices):
        FOLLOW_REQUEST = "FOLLOW_REQUEST", _("Follow Request")
        FOLLOW_ACCEPTED = "FOLLOW_ACCEPTED", _("Follow Accepted")
        POST_LIKE = "POST_LIKE", _("Post Like")
        POST_COMMENT = "POST_COMMENT", _("Post Comment")
        COMMENT_LIKE = "COMMENT_LIKE", _("Comment Like")
        COMMENT_REPLY = "COMMENT_REPLY", _("Comment Reply")
        MENTION = "MENTION", _("Mention")
        SYSTEM = "SYSTEM", _("System")

    recipient = models.ForeignKey(
        settings.AUTH_USER_MODEL, on_delete=models.CASCADE, related_name="notifications"
    )
    notification_type = models.CharField(
        max_length=50, choices=Type.choices, default=Type.SYSTEM
    )
    title = models.CharField(max_length=255)
    message = models.TextField()
    # actor id, entity references, actor avatar, post thumbnail
    data = models.JSONField(default=dict, blank=True)
    is_read = models.BooleanField(default=False)
    read_at = models.DateTimeField(null=True, blank=True)
    email_sent_at = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ["-created_at", "-id"]

    def __str__(self) -> str:
        return f"{self.notification_type} -> {self.recipient_id}"


class NotificationPreferences(models.Model):
    """Per-user on/off matrix: notification group x delivery channel."""

    user = models.OneToOneField(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="notification_preferences",
    )
    follow_web = models.BooleanField(default=True)
    like_web = models.BooleanField(default=True)
    comment_web = models.BooleanField(default=True)
    reply_web = models.BooleanField(default=True)
    mention_web = models.BooleanField(default=True)
    follow_email = models.BooleanField(default=True)
    # Likes are noisy; no email unless asked for.
    like_email = models.BooleanField(default=False)
    comment_email = models.BooleanField(default=True)
    reply_email = models.BooleanField(default=True)
    mention_email = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        verbose_name_plural = "notification preferences"

    def __str__(self) -> str:
        return f"NotificationPreferences({self.user_id})"
