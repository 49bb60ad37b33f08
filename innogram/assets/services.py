from __future__ import annotations

import logging
from collections.abc import Iterable

from django.core.files.storage import default_storage

from innogram.assets.models import Asset

logger = logging.getLogger(__name__)


def create_asset(
    owner,
    *,
    file_name: str,
    file_path: str,
    file_type: str,
    file_size: int = 0,
    thumbnail_path: str = "",
    medium_path: str = "",
) -> Asset:
    return Asset.objects.create(
        created_by=owner,
        file_name=file_name,
        file_path=file_path,
        thumbnail_path=thumbnail_path,
        medium_path=medium_path,
        file_type=file_type,
        file_size=file_size,
    )


def get_asset_url(path: str | None) -> str | None:
    if not path:
        return None
    return default_storage.url(path)


def _storage_name(filename: str, folder: str) -> str:
    if not folder or filename.startswith(f"{folder}/"):
        return filename
    return f"{folder.rstrip('/')}/{filename}"


def delete_files_from_storage(filenames: Iterable[str], folder: str = "") -> int:
    """Remove files from the default storage.

    Each failure is logged and skipped; the caller has already committed the
    owning rows, so there is nothing left to roll back. Returns how many files
    were removed.
    """
    removed = 0
    for filename in filenames:
        if not filename:
            continue
        name = _storage_name(filename, folder)
        try:
            if default_storage.exists(name):
                default_storage.delete(name)
                removed += 1
        except Exception:
            logger.exception("Failed to delete stored file %s", name)
    return removed
