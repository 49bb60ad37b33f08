from __future__ import annotations

import logging
from urllib.parse import urlencode

from django.conf import settings
from django.contrib.auth import get_user_model
from django.contrib.auth.password_validation import validate_password
from django.contrib.auth.tokens import default_token_generator
from django.core.exceptions import ValidationError as DjangoValidationError
from django.utils.encoding import force_bytes
from django.utils.encoding import force_str
from django.utils.http import urlsafe_base64_decode
from django.utils.http import urlsafe_base64_encode
from rest_framework.exceptions import ValidationError

from innogram.notifications.producer import NotificationProducer

logger = logging.getLogger(__name__)

User = get_user_model()


def build_password_reset_url(user) -> str:
    query = urlencode(
        {
            "uid": urlsafe_base64_encode(force_bytes(user.pk)),
            "token": default_token_generator.make_token(user),
        },
    )
    return f"{settings.FRONTEND_URL.rstrip('/')}/auth/reset-password?{query}"


def request_password_reset(email: str, producer: NotificationProducer | None = None) -> bool:
    """Queue a reset email when ``email`` belongs to an active account.

    The return value is for callers that log; the HTTP layer must not leak it.
    """
    user = User.objects.filter(email__iexact=email.strip(), is_active=True).first()
    if user is None:
        logger.info("Password reset requested for unknown or inactive email")
        return False

    producer = producer or NotificationProducer()
    return producer.send_password_reset_email(
        user.email,
        user.username,
        build_password_reset_url(user),
    )


def confirm_password_reset(uid: str, token: str, new_password: str):
    try:
        user = User.objects.get(pk=force_str(urlsafe_base64_decode(uid)))
    except (TypeError, ValueError, OverflowError, User.DoesNotExist) as exc:
        raise ValidationError({"uid": ["Invalid value."]}) from exc

    if not default_token_generator.check_token(user, token):
        raise ValidationError({"token": ["Invalid or expired token."]})

    try:
        validate_password(new_password, user)
    except DjangoValidationError as exc:
        raise ValidationError({"new_password": list(exc.messages)}) from exc

    user.set_password(new_password)
    user.save(update_fields=["password", "updated_at"])
    logger.info("Password reset completed for user %s", user.pk)
    return user
