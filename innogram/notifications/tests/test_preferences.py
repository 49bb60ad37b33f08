from unittest import mock

import pytest
from rest_framework.exceptions import ValidationError

from innogram.notifications import preferences
from innogram.notifications.models import Notification
from innogram.notifications.models import NotificationPreferences

pytestmark = pytest.mark.django_db

T = Notification.Type


def test_preferences_created_lazily_with_defaults(user):
    assert not NotificationPreferences.objects.filter(user=user).exists()

    prefs = preferences.get_preferences(user.id)

    assert prefs.follow_web is True
    assert prefs.follow_email is True
    assert prefs.like_email is False
    assert preferences.get_preferences(user.id).pk == prefs.pk
    assert NotificationPreferences.objects.filter(user=user).count() == 1


def test_concurrent_create_rereads_existing_row(user):
    # Another writer commits the row between our lookup and our insert.
    existing = NotificationPreferences.objects.create(user=user, like_email=True)
    manager = NotificationPreferences.objects
    real_filter = manager.filter
    lookups = []

    def first_lookup_misses(*args, **kwargs):
        lookups.append(kwargs)
        if len(lookups) == 1:
            return manager.none()
        return real_filter(*args, **kwargs)

    with mock.patch.object(manager, "filter", side_effect=first_lookup_misses):
        prefs = preferences.get_preferences(user.id)

    assert prefs.pk == existing.pk
    assert prefs.like_email is True
    assert NotificationPreferences.objects.filter(user=user).count() == 1


def test_update_preferences(user):
    prefs = preferences.update_preferences(user.id, like_email=True, mention_web=False)
    prefs.refresh_from_db()
    assert prefs.like_email is True
    assert prefs.mention_web is False


def test_update_preferences_rejects_unknown_flags(user):
    with pytest.raises(ValidationError) as exc:
        preferences.update_preferences(user.id, push_enabled=True)
    assert "push_enabled" in exc.value.detail


@pytest.mark.parametrize(
    ("notification_type", "web", "email"),
    [
        (T.FOLLOW_REQUEST, True, True),
        (T.FOLLOW_ACCEPTED, True, True),
        (T.POST_LIKE, True, False),
        (T.COMMENT_LIKE, True, False),
        (T.POST_COMMENT, True, True),
        (T.COMMENT_REPLY, True, True),
        (T.MENTION, True, True),
        (T.SYSTEM, True, False),
    ],
)
def test_default_channels(user, notification_type, web, email):
    assert preferences.should_send_web(user.id, notification_type) is web
    assert preferences.should_send_email(user.id, notification_type) is email


def test_groups_share_a_flag(user):
    preferences.update_preferences(user.id, like_web=False)
    assert preferences.should_send_web(user.id, T.POST_LIKE) is False
    assert preferences.should_send_web(user.id, T.COMMENT_LIKE) is False
    assert preferences.should_send_web(user.id, T.POST_COMMENT) is True


def test_lookup_failure_falls_back(user, monkeypatch):
    def broken(user_id):
        msg = "database went away"
        raise RuntimeError(msg)

    monkeypatch.setattr(preferences, "get_preferences", broken)

    assert preferences.should_send_web(user.id, T.MENTION) is True
    assert preferences.should_send_email(user.id, T.MENTION) is False
