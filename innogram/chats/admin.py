from django.contrib import admin

from innogram.chats.models import Chat
from innogram.chats.models import ChatParticipant
from innogram.chats.models import Message


class ChatParticipantInline(admin.TabularInline):
    model = ChatParticipant
    extra = 0


@admin.register(Chat)
class ChatAdmin(admin.ModelAdmin):
    list_display = ("id", "name", "chat_type", "created_at", "updated_at")
    list_filter = ("chat_type",)
    inlines = [ChatParticipantInline]


@admin.register(Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("id", "chat", "profile", "is_edited", "deleted", "created_at")
    list_filter = ("deleted", "is_edited")
    raw_id_fields = ("chat", "profile", "reply_to")
