from django.contrib import admin

from innogram.notifications.models import Notification
from innogram.notifications.models import NotificationPreferences


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = (
        "id",
        "recipient",
        "notification_type",
        "title",
        "is_read",
        "email_sent_at",
        "created_at",
    )
    list_filter = ("notification_type", "is_read")
    search_fields = ("title", "message", "recipient__username")


@admin.register(NotificationPreferences)
class NotificationPreferencesAdmin(admin.ModelAdmin):
    list_display = ("user", "updated_at")
    search_fields = ("user__username", "user__email")
