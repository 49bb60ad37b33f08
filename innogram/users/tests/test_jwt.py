import pytest
from rest_framework import status
from rest_framework.test import APIClient

from tests.factories import PASSWORD
from tests.factories import make_user

pytestmark = pytest.mark.django_db


def obtain_tokens(client, username: str, password: str) -> tuple[str, str]:
    r = client.post(
        "/api/v1/auth/jwt/create/",
        {"username": username, "password": password},
        format="json",
    )
    assert r.status_code == status.HTTP_200_OK, r.content
    return r.data["access"], r.data["refresh"]


def test_jwt_verify_endpoint(user):
    client = APIClient()
    access, _ = obtain_tokens(client, user.username, PASSWORD)

    r = client.post("/api/v1/auth/jwt/verify/", {"token": access}, format="json")
    assert r.status_code == status.HTTP_200_OK

    bad = access[:-2] + "ab"
    r = client.post("/api/v1/auth/jwt/verify/", {"token": bad}, format="json")
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_refresh_issues_new_access_token(user):
    client = APIClient()
    _, refresh = obtain_tokens(client, user.username, PASSWORD)

    r = client.post("/api/v1/auth/jwt/refresh/", {"refresh": refresh}, format="json")

    assert r.status_code == status.HTTP_200_OK
    assert r.data["access"]


def test_disabled_user_cannot_obtain_tokens():
    make_user("ghost", is_active=False)
    r = APIClient().post(
        "/api/v1/auth/jwt/create/",
        {"username": "ghost", "password": PASSWORD},
        format="json",
    )
    assert r.status_code == status.HTTP_401_UNAUTHORIZED


def test_profile_created_with_user(user):
    assert user.profile.username == "alice"
