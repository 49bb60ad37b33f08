from __future__ import annotations

from django.contrib.auth import get_user_model
from django.db.models.signals import post_save
from django.dispatch import receiver

from innogram.users.models import Profile


@receiver(post_save, sender=get_user_model())
def create_profile(sender, instance, created, **kwargs):
    """Give every new user a profile so chats and notifications can render them.

    Safe to call repeatedly; an existing profile is left untouched.
    """

    if not created:
        return

    Profile.objects.get_or_create(
        user=instance,
        defaults={"display_name": instance.name or instance.username},
    )
