from django.contrib import admin
from django.contrib.auth import admin as auth_admin

from innogram.users.models import Profile
from innogram.users.models import User


@admin.register(User)
class UserAdmin(auth_admin.UserAdmin):
    list_display = ["username", "email", "name", "is_active", "is_superuser"]
    search_fields = ["username", "email", "name"]


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ["id", "user", "display_name"]
    search_fields = ["user__username", "display_name"]
