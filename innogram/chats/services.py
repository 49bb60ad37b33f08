"""Chat message persistence.

Every function here is synchronous ORM code. The realtime gateway reaches it
through ``database_sync_to_async``; the REST endpoint calls it directly.
Failures are raised as DRF exceptions so both surfaces map them the same way:
``NotFound``, ``PermissionDenied`` and ``ValidationError``.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from django.db import transaction
from django.db.models import Max
from django.db.models import Prefetch
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError

from innogram.assets.models import Asset
from innogram.assets.tasks import delete_files
from innogram.chats.models import Chat
from innogram.chats.models import ChatParticipant
from innogram.chats.models import Message
from innogram.chats.models import MessageAsset
from innogram.users.models import Profile

if TYPE_CHECKING:
    from collections.abc import Iterable

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 50
MAX_PAGE_SIZE = 100


@dataclass(frozen=True)
class DeletedMessage:
    id: int
    chat_id: int


@dataclass(frozen=True)
class MessagePage:
    messages: list[Message]
    has_more: bool
    next_cursor: int | None


def message_queryset():
    assets = MessageAsset.objects.select_related("asset").order_by("order_index")
    return Message.objects.select_related("profile__user").prefetch_related(
        Prefetch("message_assets", queryset=assets),
    )


def is_active_participant(chat_id: int, user_id: int) -> bool:
    return ChatParticipant.objects.filter(
        chat_id=chat_id,
        profile__user_id=user_id,
        left_at__isnull=True,
    ).exists()


def _get_profile(user_id: int) -> Profile:
    profile = Profile.objects.select_related("user").filter(user_id=user_id).first()
    if profile is None:
        msg = "User profile not found"
        raise NotFound(msg)
    return profile


def _owned_assets(user_id: int, asset_ids: Iterable[int]) -> list[Asset]:
    wanted = list(dict.fromkeys(int(a) for a in asset_ids))
    if not wanted:
        return []
    found = Asset.objects.in_bulk(wanted)
    owned = [found[a] for a in wanted if a in found and found[a].created_by_id == user_id]
    if len(owned) != len(wanted):
        msg = "One or more assets not found"
        raise NotFound(msg)
    return owned


def _get_live_message(message_id: int) -> Message:
    message = (
        Message.objects.select_related("profile")
        .filter(pk=message_id, deleted=False)
        .first()
    )
    if message is None:
        msg = "Message not found"
        raise NotFound(msg)
    return message


def _ensure_author(message: Message, user_id: int, action: str) -> None:
    if message.profile.user_id != user_id:
        msg = f"You can only {action} your own messages"
        raise PermissionDenied(msg)
    if not is_active_participant(message.chat_id, user_id):
        msg = "Not a chat participant"
        raise PermissionDenied(msg)


@transaction.atomic
def create_message(
    *,
    chat_id: int,
    user_id: int,
    content: str,
    reply_to_message_id: int | None = None,
    asset_ids: Iterable[int] | None = None,
) -> Message:
    profile = _get_profile(user_id)
    participant = ChatParticipant.objects.filter(
        chat_id=chat_id,
        profile=profile,
        left_at__isnull=True,
    ).first()
    if participant is None:
        msg = "Not a chat participant"
        raise PermissionDenied(msg)

    reply_to = None
    if reply_to_message_id is not None:
        reply_to = Message.objects.filter(
            pk=reply_to_message_id,
            chat_id=chat_id,
            deleted=False,
        ).first()
        if reply_to is None:
            msg = "Reply-to message not found"
            raise NotFound(msg)

    assets = _owned_assets(user_id, asset_ids or [])
    if not (content or "").strip() and not assets:
        msg = "A message needs content or at least one asset"
        raise ValidationError(msg)

    message = Message.objects.create(
        chat_id=chat_id,
        profile=profile,
        content=content or "",
        reply_to=reply_to,
        created_by_id=user_id,
        updated_by_id=user_id,
    )
    MessageAsset.objects.bulk_create(
        [
            MessageAsset(message=message, asset=asset, order_index=index)
            for index, asset in enumerate(assets)
        ],
    )

    # QuerySet.update skips auto_now, so both stamps are explicit.
    Chat.objects.filter(pk=chat_id).update(updated_at=message.created_at)
    ChatParticipant.objects.filter(pk=participant.pk).update(
        last_read_at=message.created_at,
    )
    return message_queryset().get(pk=message.pk)


@transaction.atomic
def edit_message(*, message_id: int, user_id: int, content: str) -> Message:
    message = _get_live_message(message_id)
    _ensure_author(message, user_id, "edit")

    message.content = content
    message.is_edited = True
    message.updated_by_id = user_id
    message.save(update_fields=["content", "is_edited", "updated_by", "updated_at"])
    return message_queryset().get(pk=message.pk)


@transaction.atomic
def delete_message(*, message_id: int, user_id: int) -> DeletedMessage:
    message = _get_live_message(message_id)
    _ensure_author(message, user_id, "delete")

    message.deleted = True
    message.updated_by_id = user_id
    message.save(update_fields=["deleted", "updated_by", "updated_at"])

    filenames: list[str] = []
    for link in message.message_assets.select_related("asset"):
        filenames.extend(link.asset.stored_files)
    if filenames:
        # Storage is not transactional; only purge once the soft delete is durable.
        transaction.on_commit(lambda: delete_files.delay(filenames))
        logger.info(
            "Queued %d stored files for removal after deleting message %s",
            len(filenames),
            message.pk,
        )

    return DeletedMessage(id=message.pk, chat_id=message.chat_id)


def get_messages(
    *,
    chat_id: int,
    user_id: int,
    limit: int = DEFAULT_PAGE_SIZE,
    cursor: int | None = None,
) -> MessagePage:
    if not is_active_participant(chat_id, user_id):
        msg = "Not a chat participant"
        raise PermissionDenied(msg)

    limit = max(1, min(int(limit), MAX_PAGE_SIZE))
    qs = message_queryset().filter(chat_id=chat_id, deleted=False).order_by("-id")
    if cursor is not None:
        qs = qs.filter(id__lt=cursor)

    page = list(qs[:limit])
    next_cursor = page[-1].pk if page else None
    page.reverse()
    return MessagePage(
        messages=page,
        has_more=len(page) == limit,
        next_cursor=next_cursor,
    )


@transaction.atomic
def attach_assets(*, message_id: int, user_id: int, asset_ids: Iterable[int]) -> Message:
    message = _get_live_message(message_id)
    if message.profile.user_id != user_id:
        msg = "You can only attach assets to your own messages"
        raise PermissionDenied(msg)

    assets = _owned_assets(user_id, asset_ids)
    current = message.message_assets.aggregate(top=Max("order_index"))["top"]
    start = 0 if current is None else current + 1
    MessageAsset.objects.bulk_create(
        [
            MessageAsset(message=message, asset=asset, order_index=start + offset)
            for offset, asset in enumerate(assets)
        ],
    )
    return message_queryset().get(pk=message.pk)
