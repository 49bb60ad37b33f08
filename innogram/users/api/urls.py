from django.urls import path

from .views import PasswordResetConfirmView
from .views import PasswordResetView

urlpatterns = [
    path("password/reset/", PasswordResetView.as_view(), name="password_reset"),
    path(
        "password/reset/confirm/",
        PasswordResetConfirmView.as_view(),
        name="password_reset_confirm",
    ),
]
