import pytest

from tests.factories import make_chat
from tests.factories import make_user


@pytest.fixture(autouse=True)
def _media_storage(settings, tmpdir) -> None:
    settings.MEDIA_ROOT = tmpdir.strpath


@pytest.fixture
def user(db):
    return make_user("alice")


@pytest.fixture
def other_user(db):
    return make_user("bob")


@pytest.fixture
def chat(db, user, other_user):
    return make_chat(user, other_user)
