from __future__ import annotations

from rest_framework import serializers

from innogram.assets.serializers import AssetSerializer
from innogram.chats.models import Message
from innogram.chats.models import MessageAsset
from innogram.chats.services import DEFAULT_PAGE_SIZE
from innogram.chats.services import MAX_PAGE_SIZE
from innogram.users.models import Profile


class MessageProfileSerializer(serializers.ModelSerializer):
    username = serializers.CharField(source="user.username", read_only=True)
    displayName = serializers.CharField(source="display_name", read_only=True)
    avatarUrl = serializers.SerializerMethodField()

    class Meta:
        model = Profile
        fields = ("id", "username", "displayName", "avatarUrl")

    def get_avatarUrl(self, obj: Profile) -> str | None:  # noqa: N802
        return obj.avatar_url or None


class MessageAssetSerializer(serializers.ModelSerializer):
    assetId = serializers.IntegerField(source="asset_id", read_only=True)
    orderIndex = serializers.IntegerField(source="order_index", read_only=True)
    asset = AssetSerializer(read_only=True)

    class Meta:
        model = MessageAsset
        fields = ("id", "assetId", "orderIndex", "asset")


class MessageSerializer(serializers.ModelSerializer):
    """Canonical chat message shape, shared by REST and the socket gateway."""

    chatId = serializers.IntegerField(source="chat_id", read_only=True)
    profileId = serializers.IntegerField(source="profile_id", read_only=True)
    replyToMessageId = serializers.IntegerField(
        source="reply_to_id",
        read_only=True,
        allow_null=True,
    )
    isEdited = serializers.BooleanField(source="is_edited", read_only=True)
    createdAt = serializers.DateTimeField(source="created_at", read_only=True)
    updatedAt = serializers.DateTimeField(source="updated_at", read_only=True)
    profile = MessageProfileSerializer(read_only=True)
    assets = MessageAssetSerializer(source="message_assets", many=True, read_only=True)

    class Meta:
        model = Message
        fields = (
            "id",
            "chatId",
            "content",
            "profileId",
            "profile",
            "replyToMessageId",
            "assets",
            "isEdited",
            "deleted",
            "createdAt",
            "updatedAt",
        )
        read_only_fields = ("id", "content", "deleted")


class MessagePageQuerySerializer(serializers.Serializer):
    limit = serializers.IntegerField(
        required=False,
        default=DEFAULT_PAGE_SIZE,
        min_value=1,
        max_value=MAX_PAGE_SIZE,
    )
    cursor = serializers.IntegerField(required=False, allow_null=True, default=None)


def serialize_message(message: Message) -> dict:
    return dict(MessageSerializer(message).data)
