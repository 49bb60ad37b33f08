from rest_framework import serializers

from innogram.assets.models import Asset
from innogram.assets.services import get_asset_url


class AssetSerializer(serializers.ModelSerializer):
    fileName = serializers.CharField(source="file_name", read_only=True)
    filePath = serializers.CharField(source="file_path", read_only=True)
    thumbnailPath = serializers.CharField(source="thumbnail_path", read_only=True)
    fileType = serializers.CharField(source="file_type", read_only=True)
    fileSize = serializers.IntegerField(source="file_size", read_only=True)
    url = serializers.SerializerMethodField()
    thumbnailUrl = serializers.SerializerMethodField()

    class Meta:
        model = Asset
        fields = (
            "id",
            "fileName",
            "filePath",
            "thumbnailPath",
            "fileType",
            "fileSize",
            "url",
            "thumbnailUrl",
        )

    def get_url(self, obj: Asset) -> str | None:
        return get_asset_url(obj.file_path)

    def get_thumbnailUrl(self, obj: Asset) -> str | None:  # noqa: N802
        return get_asset_url(obj.thumbnail_path)
