import pytest
from rest_framework.test import APIClient

from config.schema import assign_group_tag

pytestmark = pytest.mark.django_db


@pytest.mark.parametrize(
    ("path", "tag"),
    [
        ("/api/v1/auth/jwt/create/", "JWT Authentication"),
        ("/api/v1/auth/password/reset/", "Password Reset"),
        ("/api/v1/chats/{chat_id}/messages/", "Chats"),
        ("/api/v1/notifications/unread-count/", "Notifications"),
        ("/health/", None),
    ],
)
def test_assign_group_tag(path, tag):
    assert assign_group_tag(path) == tag


def test_schema_groups_every_operation(django_user_model):
    admin = django_user_model.objects.create_superuser(
        username="root",
        email="root@example.com",
        password="RootPass!123",  # noqa: S106
    )
    client = APIClient()
    client.force_authenticate(user=admin)

    r = client.get("/api/v1/schema/")

    assert r.status_code == 200  # noqa: PLR2004
    paths = r.data["paths"]
    assert "/api/v1/chats/{chat_id}/messages/" in paths
    assert paths["/api/v1/chats/{chat_id}/messages/"]["get"]["tags"] == ["Chats"]
    assert paths["/api/v1/auth/password/reset/"]["post"]["tags"] == ["Password Reset"]
    declared = {t["name"] for t in r.data["tags"]}
    assert {"Chats", "Notifications", "Password Reset"} <= declared


def test_schema_is_admin_only(user):
    client = APIClient()
    client.force_authenticate(user=user)
    assert client.get("/api/v1/schema/").status_code == 403  # noqa: PLR2004
