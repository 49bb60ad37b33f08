import uuid
from unittest import mock

import pytest
from kombu.simple import SimpleQueue
from rest_framework.exceptions import ValidationError

from innogram.notifications import consumer as consumer_module
from innogram.notifications.broker import NotificationBroker
from innogram.notifications.consumer import ACKED
from innogram.notifications.consumer import REJECTED
from innogram.notifications.consumer import REQUEUED
from innogram.notifications.consumer import NotificationConsumer
from innogram.notifications.models import Notification
from innogram.notifications.producer import NotificationProducer
from innogram.posts.models import Post
from innogram.posts.models import PostAsset
from tests.factories import make_asset
from tests.factories import make_user

from .fakes import RecordingBroker


def _event(recipient, actor, **overrides):
    payload = {
        "userId": recipient.id,
        "type": "FOLLOW_REQUEST",
        "title": "New Follow Request",
        "message": f"{actor.username} requested to follow you",
        "entityType": "profile",
        "entityId": actor.id,
        "actorId": actor.id,
        "metadata": {"actorUsername": actor.username},
        "sendWeb": True,
        "sendEmail": False,
    }
    payload.update(overrides)
    return payload


def _message(body):
    message = mock.Mock()
    message.decode.return_value = body
    return message


@pytest.fixture
def consumer():
    return NotificationConsumer(broker=RecordingBroker(), poll_timeout=0.05)


@pytest.mark.django_db
class TestHandleMessage:
    def test_web_only_creates_one_row_and_no_email(self, consumer, user, other_user, mailoutbox):
        message = _message(_event(user, other_user))

        assert consumer.handle_message(message) == ACKED

        message.ack.assert_called_once_with()
        notification = Notification.objects.get()
        assert notification.recipient == user
        assert notification.notification_type == "FOLLOW_REQUEST"
        assert notification.email_sent_at is None
        assert notification.data["actorAvatarUrl"] == "https://cdn.example.com/avatars/bob.png"
        assert notification.data["actorUsername"] == "bob"
        assert mailoutbox == []

    def test_web_and_email_stamps_delivery(self, consumer, user, other_user, mailoutbox):
        consumer.handle_message(_message(_event(user, other_user, sendEmail=True)))

        notification = Notification.objects.get()
        assert notification.email_sent_at is not None
        [sent] = mailoutbox
        assert sent.to == [user.email]
        assert sent.subject == "bob requested to follow you"
        assert "http://testserver.local/app/profile/bob" in sent.alternatives[0][0]

    def test_email_only_creates_no_row(self, consumer, user, other_user, mailoutbox):
        result = consumer.handle_message(
            _message(_event(user, other_user, sendWeb=False, sendEmail=True)),
        )

        assert result == ACKED
        assert not Notification.objects.exists()
        assert len(mailoutbox) == 1

    def test_missing_send_web_means_web_on(self, consumer, user, other_user):
        body = _event(user, other_user)
        del body["sendWeb"]
        del body["sendEmail"]

        consumer.handle_message(_message(body))

        assert Notification.objects.count() == 1

    def test_email_failure_keeps_web_notification(self, consumer, user, other_user):
        with mock.patch.object(
            consumer_module.emails,
            "send_email",
            side_effect=OSError("smtp down"),
        ):
            result = consumer.handle_message(
                _message(_event(user, other_user, sendEmail=True)),
            )

        assert result == ACKED
        notification = Notification.objects.get()
        assert notification.email_sent_at is None

    def test_inactive_recipient_gets_no_email(self, consumer, other_user, mailoutbox):
        dormant = make_user("dormant", is_active=False)
        consumer.handle_message(_message(_event(dormant, other_user, sendEmail=True)))
        assert Notification.objects.filter(recipient=dormant).count() == 1
        assert mailoutbox == []

    def test_post_thumbnail_is_attached(self, consumer, user, other_user):
        post = Post.objects.create(profile=user.profile, caption="sunset")
        PostAsset.objects.create(post=post, asset=make_asset(user, "sunset.jpg"), order_index=0)

        consumer.handle_message(
            _message(
                _event(
                    user,
                    other_user,
                    type="POST_LIKE",
                    title="New Like on Your Post",
                    message="bob liked your post",
                    entityType="post",
                    entityId=post.id,
                    metadata={"actorUsername": "bob", "postId": post.id},
                ),
            ),
        )

        assert Notification.objects.get().data["postImageUrl"] == "uploads/thumb_sunset.jpg"

    @pytest.mark.parametrize(
        "body",
        [
            "not an object",
            {"userId": 1},
            {"type": "UNHEARD_OF", "userId": 1, "title": "x", "message": "y"},
        ],
    )
    def test_malformed_payload_is_rejected(self, consumer, body):
        message = _message(body)

        assert consumer.handle_message(message) == REJECTED

        message.reject.assert_called_once_with(requeue=False)
        message.ack.assert_not_called()
        assert not Notification.objects.exists()

    def test_password_reset_is_sent(self, consumer, mailoutbox):
        message = _message(
            {
                "type": "password_reset",
                "email": "alice@example.com",
                "username": "alice",
                "resetUrl": "http://testserver.local/auth/reset-password?uid=MQ&token=abc",
            },
        )

        assert consumer.handle_message(message) == ACKED

        [sent] = mailoutbox
        assert sent.to == ["alice@example.com"]
        assert sent.subject == "Reset Your Innogram Password"
        assert "expires in 60 minutes" in sent.body

    def test_password_reset_failure_is_requeued(self, consumer):
        message = _message(
            {
                "type": "password_reset",
                "email": "alice@example.com",
                "username": "alice",
                "resetUrl": "http://testserver.local/auth/reset-password?uid=MQ&token=abc",
            },
        )
        with mock.patch.object(
            consumer_module.emails,
            "send_email",
            side_effect=OSError("smtp down"),
        ):
            assert consumer.handle_message(message) == REQUEUED

        message.requeue.assert_called_once_with()
        message.reject.assert_not_called()

    def test_invalid_password_reset_is_rejected(self, consumer):
        message = _message({"type": "password_reset", "email": "nope"})
        assert consumer.handle_message(message) == REJECTED


def test_handle_payload_requires_object(consumer):
    with pytest.raises(ValidationError):
        consumer.handle_payload(["a", "list"])


@pytest.mark.django_db(transaction=True)
def test_broker_round_trip(mailoutbox):
    name = f"notifications-{uuid.uuid4().hex[:8]}"
    broker = NotificationBroker(url="memory://", exchange_name=name, queue_name=name)
    alice = make_user("alice")
    bob = make_user("bob")

    producer = NotificationProducer(broker=broker)
    assert producer.notify_follow_request(alice.id, bob.id, "bob") is True
    assert producer.send_password_reset_email(alice.email, "alice", "http://testserver.local/r") is True

    processed = NotificationConsumer(broker=broker, poll_timeout=0.05).run(max_messages=2)

    assert processed == 2
    notification = Notification.objects.get(recipient=alice)
    assert notification.email_sent_at is not None
    assert {m.subject for m in mailoutbox} == {
        "bob requested to follow you",
        "Reset Your Innogram Password",
    }


@pytest.mark.django_db(transaction=True)
def test_run_reconnects_after_losing_the_broker():
    name = f"notifications-{uuid.uuid4().hex[:8]}"
    broker = NotificationBroker(url="memory://", exchange_name=name, queue_name=name)
    alice = make_user("alice")
    bob = make_user("bob")
    NotificationProducer(broker=broker).notify_follow_request(alice.id, bob.id, "bob")

    real_get = SimpleQueue.get
    attempts = []

    def drop_first_get(queue, *args, **kwargs):
        attempts.append(queue)
        if len(attempts) == 1:
            msg = "broker went away"
            raise ConnectionResetError(msg)
        return real_get(queue, *args, **kwargs)

    with mock.patch.object(SimpleQueue, "get", autospec=True, side_effect=drop_first_get):
        processed = NotificationConsumer(broker=broker, poll_timeout=0.05).run(max_messages=1)

    assert processed == 1
    assert len(attempts) == 2
    # A fresh queue consumer was opened on the re-established connection.
    assert attempts[0] is not attempts[1]
    assert Notification.objects.filter(recipient=alice).count() == 1


def test_run_stops_when_asked():
    name = f"notifications-{uuid.uuid4().hex[:8]}"
    broker = NotificationBroker(url="memory://", exchange_name=name, queue_name=name)
    consumer = NotificationConsumer(broker=broker, poll_timeout=0.01)
    consumer.stop()

    assert consumer.run() == 0
    assert consumer.stopping is True
