import pytest

from innogram.notifications import emails


def _payload(notification_type, **extra):
    payload = {
        "type": notification_type,
        "message": "",
        "entityType": "post",
        "entityId": 11,
        "metadata": {"actorUsername": "bob", "postId": 11},
    }
    payload.update(extra)
    return payload


@pytest.mark.parametrize(
    ("notification_type", "subject", "link"),
    [
        ("FOLLOW_REQUEST", "bob requested to follow you", "/app/profile/bob"),
        ("FOLLOW_ACCEPTED", "bob accepted your follow request", "/app/profile/bob"),
        ("POST_LIKE", "bob liked your post", "/app/post/11"),
        ("COMMENT_LIKE", "bob liked your comment", "/app/post/11"),
        ("POST_COMMENT", "bob commented on your post", "/app/post/11"),
        ("COMMENT_REPLY", "bob replied to your comment", "/app/post/11"),
        ("MENTION", "bob mentioned you in a post", "/app/post/11"),
        ("SYSTEM", "New Notification", "/app/feed"),
    ],
)
def test_notification_copy(notification_type, subject, link):
    rendered = emails.render_notification_email(_payload(notification_type), {})
    assert rendered.subject == subject
    assert f"http://testserver.local{link}" in rendered.html


def test_relative_thumbnail_becomes_absolute():
    rendered = emails.render_notification_email(
        _payload("POST_LIKE"),
        {"postImageUrl": "uploads/thumb.jpg"},
    )
    assert 'src="http://testserver.local/uploads/thumb.jpg"' in rendered.html


def test_unknown_actor_is_someone():
    rendered = emails.render_notification_email(_payload("POST_LIKE", metadata={}), {})
    assert rendered.subject == "Someone liked your post"


@pytest.mark.parametrize("notification_type", ["POST_COMMENT", "COMMENT_REPLY"])
def test_comment_links_fall_back_to_feed_without_post(notification_type):
    rendered = emails.render_notification_email(
        _payload(notification_type, entityType="comment", metadata={"actorUsername": "bob"}),
        {},
    )
    assert "http://testserver.local/app/feed" in rendered.html
    assert "/app/post/None" not in rendered.html
