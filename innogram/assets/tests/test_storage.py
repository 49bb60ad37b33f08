from unittest import mock

import pytest
from django.core.files.base import ContentFile
from django.core.files.storage import default_storage

from innogram.assets import services
from innogram.assets.serializers import AssetSerializer
from innogram.assets.tasks import delete_files
from tests.factories import make_asset


def _store(name: str) -> str:
    return default_storage.save(name, ContentFile(b"jpeg bytes"))


def test_delete_files_removes_what_exists():
    kept = _store("keep/me.jpg")
    doomed = [_store("chat/a.jpg"), _store("chat/b.jpg")]

    removed = services.delete_files_from_storage([*doomed, "chat/missing.jpg", ""])

    assert removed == 2
    assert not any(default_storage.exists(name) for name in doomed)
    assert default_storage.exists(kept)


def test_delete_files_prefixes_folder_once():
    stored = _store("avatars/x.jpg")
    other = _store("avatars/y.jpg")

    removed = services.delete_files_from_storage(["x.jpg", other], folder="avatars")

    assert removed == 2
    assert not default_storage.exists(stored)


def test_delete_files_keeps_going_after_a_failure(caplog):
    storage = mock.Mock()
    storage.exists.return_value = True
    storage.delete.side_effect = [PermissionError("permission denied"), None]

    with mock.patch.object(services, "default_storage", storage):
        removed = services.delete_files_from_storage(["chat/one.jpg", "chat/two.jpg"])

    assert removed == 1
    assert storage.delete.call_args_list == [mock.call("chat/one.jpg"), mock.call("chat/two.jpg")]
    assert "Failed to delete stored file chat/one.jpg" in caplog.text


def test_delete_files_task_runs_eagerly():
    name = _store("chat/task.jpg")
    assert delete_files.delay([name]).get() == 1
    assert not default_storage.exists(name)


@pytest.mark.django_db
def test_asset_serializer_urls(user):
    asset = make_asset(user, "pic.jpg")

    data = AssetSerializer(asset).data

    assert data["fileName"] == "pic.jpg"
    assert data["url"] == "http://media.testserver/uploads/pic.jpg"
    assert data["thumbnailUrl"] == "http://media.testserver/uploads/thumb_pic.jpg"
    assert asset.stored_files == [
        "uploads/pic.jpg",
        "uploads/thumb_pic.jpg",
        "uploads/medium_pic.jpg",
    ]
