from django.contrib import admin

from innogram.assets.models import Asset


@admin.register(Asset)
class AssetAdmin(admin.ModelAdmin):
    list_display = ("id", "file_name", "file_type", "file_size", "created_by", "created_at")
    search_fields = ("file_name", "file_path")
