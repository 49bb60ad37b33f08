from django.db import models

from innogram.assets.models import Asset
from innogram.users.models import Profile


class Post(models.Model):
    profile = models.ForeignKey(Profile, on_delete=models.CASCADE, related_name="posts")
    caption = models.TextField(blank=True, default="")
    deleted = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ["-created_at"]

    def __str__(self) -> str:
        return f"Post({self.pk})"

    def first_asset(self) -> Asset | None:
        link = self.post_assets.select_related("asset").order_by("order_index").first()
        return link.asset if link else None


class PostAsset(models.Model):
    post = models.ForeignKey(Post, on_delete=models.CASCADE, related_name="post_assets")
    asset = models.ForeignKey(Asset, on_delete=models.CASCADE, related_name="post_links")
    order_index = models.PositiveIntegerField(default=0)

    class Meta:
        ordering = ["order_index"]
