from unittest import mock
from urllib.parse import parse_qs
from urllib.parse import urlparse

import pytest
from rest_framework import status
from rest_framework.test import APIClient

from innogram.users import services
from tests.factories import PASSWORD
from tests.factories import make_user

pytestmark = pytest.mark.django_db

RESET = "/api/v1/auth/password/reset/"
CONFIRM = "/api/v1/auth/password/reset/confirm/"
NEW_PASSWORD = "Fresh-Passw0rd-42"  # noqa: S105


def _reset_params(user) -> dict[str, str]:
    query = parse_qs(urlparse(services.build_password_reset_url(user)).query)
    return {"uid": query["uid"][0], "token": query["token"][0]}


def test_reset_url_points_at_frontend(user):
    url = services.build_password_reset_url(user)
    assert url.startswith("http://testserver.local/auth/reset-password?uid=")


@mock.patch("innogram.users.services.NotificationProducer")
def test_request_for_known_email_queues_mail(producer_cls, user):
    r = APIClient().post(RESET, {"email": "ALICE@example.com"}, format="json")

    assert r.status_code == status.HTTP_202_ACCEPTED
    send = producer_cls.return_value.send_password_reset_email
    send.assert_called_once()
    email, username, url = send.call_args.args
    assert (email, username) == (user.email, user.username)
    assert "token=" in url


@mock.patch("innogram.users.services.NotificationProducer")
def test_request_for_unknown_email_looks_the_same(producer_cls):
    r = APIClient().post(RESET, {"email": "nobody@example.com"}, format="json")

    assert r.status_code == status.HTTP_202_ACCEPTED
    producer_cls.return_value.send_password_reset_email.assert_not_called()


@mock.patch("innogram.users.services.NotificationProducer")
def test_request_for_disabled_account_sends_nothing(producer_cls):
    make_user("ghost", is_active=False)
    APIClient().post(RESET, {"email": "ghost@example.com"}, format="json")
    producer_cls.return_value.send_password_reset_email.assert_not_called()


def test_confirm_sets_new_password_and_allows_login(user):
    client = APIClient()
    r = client.post(CONFIRM, {**_reset_params(user), "new_password": NEW_PASSWORD}, format="json")
    assert r.status_code == status.HTTP_200_OK, r.content

    old = client.post(
        "/api/v1/auth/jwt/create/",
        {"username": user.username, "password": PASSWORD},
        format="json",
    )
    assert old.status_code == status.HTTP_401_UNAUTHORIZED
    new = client.post(
        "/api/v1/auth/jwt/create/",
        {"username": user.username, "password": NEW_PASSWORD},
        format="json",
    )
    assert new.status_code == status.HTTP_200_OK
    assert "access" in new.data


def test_token_is_single_use(user):
    params = _reset_params(user)
    client = APIClient()
    client.post(CONFIRM, {**params, "new_password": NEW_PASSWORD}, format="json")

    again = client.post(CONFIRM, {**params, "new_password": "Another-Passw0rd-7"}, format="json")

    assert again.status_code == status.HTTP_400_BAD_REQUEST
    assert "token" in again.data


def test_confirm_rejects_bad_uid(user):
    params = {**_reset_params(user), "uid": "not-base64!"}
    r = APIClient().post(CONFIRM, {**params, "new_password": NEW_PASSWORD}, format="json")
    assert r.status_code == status.HTTP_400_BAD_REQUEST
    assert "uid" in r.data
