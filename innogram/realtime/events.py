"""Validation of inbound ``/chat`` socket events.

Each client event name maps to exactly one serializer; the gateway validates
the raw payload against it before any handler runs.
"""

from __future__ import annotations

from typing import Any

from rest_framework import serializers


class ChatRoomEventSerializer(serializers.Serializer):
    chatId = serializers.IntegerField(min_value=1)


class TypingEventSerializer(ChatRoomEventSerializer):
    isTyping = serializers.BooleanField()


class MessageCreateEventSerializer(ChatRoomEventSerializer):
    content = serializers.CharField(allow_blank=True, trim_whitespace=False, max_length=5000)
    replyToMessageId = serializers.IntegerField(min_value=1, required=False, allow_null=True)
    assetIds = serializers.ListField(
        child=serializers.IntegerField(min_value=1),
        required=False,
        default=list,
        max_length=10,
    )

    def validate(self, attrs: dict[str, Any]) -> dict[str, Any]:
        if not attrs["content"].strip() and not attrs.get("assetIds"):
            msg = "A message needs content or at least one asset."
            raise serializers.ValidationError(msg)
        return attrs


class MessageEditEventSerializer(serializers.Serializer):
    messageId = serializers.IntegerField(min_value=1)
    content = serializers.CharField(trim_whitespace=False, max_length=5000)

    def validate_content(self, value: str) -> str:
        if not value.strip():
            msg = "Content may not be blank."
            raise serializers.ValidationError(msg)
        return value


class MessageDeleteEventSerializer(serializers.Serializer):
    messageId = serializers.IntegerField(min_value=1)


EVENT_SERIALIZERS: dict[str, type[serializers.Serializer]] = {
    "chat:join": ChatRoomEventSerializer,
    "chat:leave": ChatRoomEventSerializer,
    "chat:typing": TypingEventSerializer,
    "chat:message": MessageCreateEventSerializer,
    "chat:message:edit": MessageEditEventSerializer,
    "chat:message:delete": MessageDeleteEventSerializer,
}


def validate_event(event: str, data: Any) -> dict[str, Any]:
    """Return validated data for ``event`` or raise ``ValidationError``."""
    serializer_class = EVENT_SERIALIZERS[event]
    if not isinstance(data, dict):
        msg = "Event payload must be an object."
        raise serializers.ValidationError(msg)
    serializer = serializer_class(data=data)
    serializer.is_valid(raise_exception=True)
    return dict(serializer.validated_data)
