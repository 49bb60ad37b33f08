from __future__ import annotations

from rest_framework import serializers

from innogram.notifications.models import Notification


class NotificationSerializer(serializers.ModelSerializer):
    """Read serializer for notifications."""

    unread = serializers.SerializerMethodField()

    class Meta:
        model = Notification
        fields = (
            "id",
            "recipient",
            "notification_type",
            "title",
            "message",
            "data",
            "is_read",
            "unread",
            "read_at",
            "email_sent_at",
            "created_at",
        )
        read_only_fields = (
            "id",
            "recipient",
            "is_read",
            "read_at",
            "email_sent_at",
            "created_at",
        )

    def get_unread(self, obj: Notification) -> bool:
        return not bool(obj.is_read)


class UnreadCountSerializer(serializers.Serializer):
    count = serializers.IntegerField()
