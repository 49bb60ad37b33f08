import pytest

from innogram.notifications import preferences
from innogram.notifications.broker import NOTIFICATION_CREATED
from innogram.notifications.broker import PASSWORD_RESET
from innogram.notifications.producer import NotificationProducer

from .fakes import RecordingBroker

pytestmark = pytest.mark.django_db


@pytest.fixture
def broker():
    return RecordingBroker()


@pytest.fixture
def producer(broker):
    return NotificationProducer(broker=broker)


def test_post_like_carries_channel_flags(producer, broker, user, other_user):
    assert producer.notify_post_like(user.id, 42, other_user.id, "bob") is True

    [(routing_key, payload)] = broker.published
    assert routing_key == NOTIFICATION_CREATED
    assert payload == {
        "userId": user.id,
        "type": "POST_LIKE",
        "title": "New Like on Your Post",
        "message": "bob liked your post",
        "entityType": "post",
        "entityId": 42,
        "actorId": other_user.id,
        "metadata": {"actorUsername": "bob", "postId": 42},
        "sendWeb": True,
        "sendEmail": False,
    }


def test_nothing_published_when_both_channels_off(producer, broker, user, other_user):
    preferences.update_preferences(user.id, mention_web=False, mention_email=False)

    sent = producer.notify_mention(user.id, "comment", 7, other_user.id, "bob", post_id=3)

    assert sent is False
    assert broker.published == []


def test_email_only_when_web_disabled(producer, broker, user, other_user):
    preferences.update_preferences(user.id, comment_web=False)

    producer.notify_post_comment(user.id, 3, 9, other_user.id, "bob")

    payload = broker.published[0][1]
    assert payload["sendWeb"] is False
    assert payload["sendEmail"] is True
    assert payload["entityType"] == "comment"
    assert payload["metadata"]["postId"] == 3


def test_new_follower_uses_follow_accepted(producer, broker, user, other_user):
    producer.notify_new_follower(user.id, other_user.id, "bob")
    payload = broker.published[0][1]
    assert payload["type"] == "FOLLOW_ACCEPTED"
    assert payload["title"] == "New Follower"


def test_comment_reply_drops_missing_post_id(producer, broker, user, other_user):
    producer.notify_comment_reply(user.id, 5, 6, other_user.id, "bob")
    payload = broker.published[0][1]
    assert payload["entityId"] == 6
    assert payload["metadata"] == {"actorUsername": "bob", "parentCommentId": 5}


def test_broker_failure_is_swallowed(user, other_user):
    producer = NotificationProducer(broker=RecordingBroker(fail=True))
    assert producer.notify_follow_request(user.id, other_user.id, "bob") is False


def test_password_reset_ignores_preferences(producer, broker, user):
    preferences.update_preferences(user.id, **dict.fromkeys(preferences.PREFERENCE_FLAGS, False))

    sent = producer.send_password_reset_email(user.email, user.username, "http://x/reset?t=1")

    assert sent is True
    assert broker.published == [
        (
            PASSWORD_RESET,
            {
                "type": "password_reset",
                "email": user.email,
                "username": user.username,
                "resetUrl": "http://x/reset?t=1",
            },
        ),
    ]


def test_password_reset_failure_returns_false(user):
    producer = NotificationProducer(broker=RecordingBroker(fail=True))
    assert producer.send_password_reset_email(user.email, user.username, "http://x/r") is False
