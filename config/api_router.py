from django.conf import settings
from django.urls import path
from rest_framework.routers import DefaultRouter
from rest_framework.routers import SimpleRouter

from innogram.chats.api.views import ChatMessagesView
from innogram.notifications.api.views import NotificationViewSet

router = DefaultRouter() if settings.DEBUG else SimpleRouter()

router.register("notifications", NotificationViewSet, basename="notifications")


app_name = "api"
urlpatterns = [
    path(
        "chats/<int:chat_id>/messages/",
        ChatMessagesView.as_view(),
        name="chat-messages",
    ),
    *router.urls,
]
