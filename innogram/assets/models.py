from django.conf import settings
from django.db import models


class Asset(models.Model):
    """A stored media file plus its derived renditions.

    Paths are storage names relative to ``MEDIA_ROOT`` (or the configured
    storage backend), never absolute URLs.
    """

    created_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name="assets",
    )
    file_name = models.CharField(max_length=255)
    file_path = models.CharField(max_length=500)
    thumbnail_path = models.CharField(max_length=500, blank=True, default="")
    medium_path = models.CharField(max_length=500, blank=True, default="")
    file_type = models.CharField(max_length=100)
    file_size = models.PositiveBigIntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self) -> str:
        return self.file_name

    @property
    def stored_files(self) -> list[str]:
        return [p for p in (self.file_path, self.thumbnail_path, self.medium_path) if p]
