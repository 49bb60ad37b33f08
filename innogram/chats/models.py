from django.conf import settings
from django.db import models
from django.utils.translation import gettext_lazy as _

from innogram.assets.models import Asset
from innogram.users.models import Profile


class Chat(models.Model):
    class Type(models.TextChoices):
        PRIVATE = "private", _("Private")
        GROUP = "group", _("Group")

    chat_type = models.CharField(max_length=20, choices=Type.choices, default=Type.PRIVATE)
    name = models.CharField(max_length=255, blank=True, default="")
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    # Bumped on every new message so chat lists sort by activity.
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self) -> str:
        return self.name or f"Chat({self.pk})"

    @property
    def room(self) -> str:
        return f"chat:{self.pk}"


class ChatParticipant(models.Model):
    class Role(models.TextChoices):
        ADMIN = "admin", _("Admin")
        MEMBER = "member", _("Member")

    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name="participants")
    profile = models.ForeignKey(
        Profile,
        on_delete=models.CASCADE,
        related_name="chat_participations",
    )
    role = models.CharField(max_length=20, choices=Role.choices, default=Role.MEMBER)
    joined_at = models.DateTimeField(auto_now_add=True)
    # Null while the participant is active.
    left_at = models.DateTimeField(null=True, blank=True)
    last_read_at = models.DateTimeField(null=True, blank=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=["profile", "chat"],
                name="unique_chat_participant",
            ),
        ]

    def __str__(self) -> str:
        return f"{self.profile_id}@{self.chat_id}"


class Message(models.Model):
    chat = models.ForeignKey(Chat, on_delete=models.CASCADE, related_name="messages")
    profile = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="messages")
    content = models.TextField(blank=True, default="")
    reply_to = models.ForeignKey(
        "self",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="replies",
    )
    is_edited = models.BooleanField(default=False)
    deleted = models.BooleanField(default=False)
    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    updated_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="+",
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        indexes = [models.Index(fields=["chat", "-id"], name="message_chat_recent_idx")]

    def __str__(self) -> str:
        return f"Message({self.pk}) in chat {self.chat_id}"


class MessageAsset(models.Model):
    message = models.ForeignKey(
        Message,
        on_delete=models.CASCADE,
        related_name="message_assets",
    )
    asset = models.ForeignKey(Asset, on_delete=models.CASCADE, related_name="message_links")
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order_index"]
