from django.apps import AppConfig
from django.utils.translation import gettext_lazy as _


class UsersConfig(AppConfig):
    name = "innogram.users"
    verbose_name = _("Users and profiles")

    def ready(self):
        # Profiles are created on user post_save.
        from innogram.users import signals  # noqa: F401, PLC0415
