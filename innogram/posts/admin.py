from django.contrib import admin

from innogram.posts.models import Post
from innogram.posts.models import PostAsset


class PostAssetInline(admin.TabularInline):
    model = PostAsset
    extra = 0


@admin.register(Post)
class PostAdmin(admin.ModelAdmin):
    list_display = ("id", "profile", "deleted", "created_at")
    inlines = [PostAssetInline]
