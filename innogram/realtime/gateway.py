"""Socket.IO ``/chat`` namespace.

Connection lifecycle: Connecting -> Authenticated -> (RoomMember)* ->
Disconnected. Identity is checked once, in ``on_connect``; every later handler
reads it from the Socket.IO session.

Client events carry ``:`` in their names (``chat:join``, ``chat:message:edit``),
which cannot be method names, so ``trigger_event`` routes them through
``EVENT_HANDLERS`` instead of the default ``on_<event>`` lookup.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from dataclasses import dataclass
from typing import Any
from urllib.parse import parse_qs

import socketio
from channels.db import database_sync_to_async
from rest_framework.exceptions import AuthenticationFailed
from rest_framework.exceptions import NotFound
from rest_framework.exceptions import PermissionDenied
from rest_framework.exceptions import ValidationError
from rest_framework_simplejwt.authentication import JWTAuthentication
from rest_framework_simplejwt.exceptions import TokenError
from rest_framework_simplejwt.tokens import AccessToken
from socketio.exceptions import ConnectionRefusedError

from innogram.chats import services as chat_services
from innogram.chats.api.serializers import serialize_message
from innogram.realtime.events import validate_event
from innogram.realtime.registry import SocketRegistry
from innogram.users.models import Profile

logger = logging.getLogger(__name__)

CHAT_NAMESPACE = "/chat"


def chat_room(chat_id: int) -> str:
    return f"chat:{int(chat_id)}"


@dataclass(frozen=True)
class SocketIdentity:
    user_id: int
    profile_id: int | None
    username: str
    display_name: str
    avatar_url: str | None


def extract_token(environ: dict[str, Any], auth: Any | None) -> str | None:
    """Pull the bearer token from the handshake.

    ``auth.token`` wins; a ``token`` query parameter is accepted for clients
    that cannot send an auth payload. A ``Bearer `` prefix is optional.
    """

    token: Any = None
    if isinstance(auth, dict):
        token = auth.get("token")

    if not token:
        scope: Any = environ
        if isinstance(environ, dict) and isinstance(environ.get("asgi.scope"), dict):
            scope = environ["asgi.scope"]

        query_string: str | bytes = ""
        if isinstance(scope, dict) and "query_string" in scope:
            query_string = scope.get("query_string", b"")
        elif isinstance(scope, dict) and "QUERY_STRING" in scope:
            query_string = scope.get("QUERY_STRING", "")
        if isinstance(query_string, (bytes, bytearray)):
            query_string = query_string.decode(errors="ignore")
        token = parse_qs(str(query_string)).get("token", [None])[0]

    if not isinstance(token, str):
        return None
    if token.startswith("Bearer "):
        token = token[len("Bearer ") :]
    return token.strip() or None


def token_is_expired(token: str) -> bool:
    """True when ``token`` decodes but its ``exp`` claim has passed."""
    try:
        unverified = AccessToken(token, verify=False)
    except TokenError:
        return False
    try:
        unverified.check_exp()
    except TokenError:
        return True
    return False


@database_sync_to_async
def authenticate_token(token: str) -> SocketIdentity:
    jwt_auth = JWTAuthentication()
    validated = jwt_auth.get_validated_token(token)
    user = jwt_auth.get_user(validated)
    if not user.is_active:
        msg = "User is inactive"
        raise AuthenticationFailed(msg)

    profile = Profile.objects.filter(user=user).first()
    display_name = (profile.display_name if profile else "") or user.username
    return SocketIdentity(
        user_id=int(user.id),
        profile_id=profile.id if profile else None,
        username=user.username,
        display_name=display_name,
        avatar_url=(profile.avatar_url or None) if profile else None,
    )


@database_sync_to_async
def _create_message(user_id: int, payload: dict[str, Any]) -> dict[str, Any]:
    message = chat_services.create_message(
        chat_id=payload["chatId"],
        user_id=user_id,
        content=payload["content"],
        reply_to_message_id=payload.get("replyToMessageId"),
        asset_ids=payload.get("assetIds") or [],
    )
    return serialize_message(message)


@database_sync_to_async
def _edit_message(user_id: int, payload: dict[str, Any]) -> dict[str, Any]:
    message = chat_services.edit_message(
        message_id=payload["messageId"],
        user_id=user_id,
        content=payload["content"],
    )
    return serialize_message(message)


@database_sync_to_async
def _delete_message(user_id: int, payload: dict[str, Any]) -> chat_services.DeletedMessage:
    return chat_services.delete_message(message_id=payload["messageId"], user_id=user_id)


_is_participant = database_sync_to_async(chat_services.is_active_participant)


def _first_detail(detail: Any) -> str:
    if isinstance(detail, dict):
        for key, value in detail.items():
            inner = _first_detail(value)
            return inner if key == "non_field_errors" else f"{key}: {inner}"
        return "Invalid payload"
    if isinstance(detail, list):
        return _first_detail(detail[0]) if detail else "Invalid payload"
    return str(detail)


def error_payload(exc: Exception, fallback_code: str, fallback_message: str) -> dict[str, str]:
    if isinstance(exc, ValidationError):
        return {"message": _first_detail(exc.detail), "code": "VALIDATION_ERROR"}
    if isinstance(exc, PermissionDenied):
        return {"message": str(exc.detail), "code": "FORBIDDEN"}
    if isinstance(exc, NotFound):
        return {"message": str(exc.detail), "code": "NOT_FOUND"}
    return {"message": fallback_message, "code": fallback_code}


class ChatNamespace(socketio.AsyncNamespace):
    # event -> (handler, fallback error code, fallback error message)
    EVENT_HANDLERS: dict[str, tuple[str, str, str]] = {
        "chat:join": ("handle_join", "JOIN_ERROR", "Failed to join chat"),
        "chat:leave": ("handle_leave", "LEAVE_ERROR", "Failed to leave chat"),
        "chat:typing": ("handle_typing", "TYPING_ERROR", "Failed to send typing status"),
        "chat:message": ("handle_message", "MESSAGE_CREATE_ERROR", "Failed to create message"),
        "chat:message:edit": ("handle_edit", "MESSAGE_EDIT_ERROR", "Failed to edit message"),
        "chat:message:delete": (
            "handle_delete",
            "MESSAGE_DELETE_ERROR",
            "Failed to delete message",
        ),
    }

    def __init__(self, namespace: str = CHAT_NAMESPACE, registry: SocketRegistry | None = None):
        super().__init__(namespace)
        self.registry = registry if registry is not None else SocketRegistry()

    async def trigger_event(self, event, *args):
        route = self.EVENT_HANDLERS.get(event)
        if route is None:
            # connect/disconnect, and a silent no-op for unknown events
            return await super().trigger_event(event, *args)

        handler_name, error_code, error_message = route
        sid = args[0]
        data = args[1] if len(args) > 1 else None
        try:
            payload = validate_event(event, data)
            session = await self.get_session(sid)
            return await getattr(self, handler_name)(sid, session, payload)
        except (ValidationError, PermissionDenied, NotFound) as exc:
            logger.warning("%s rejected for sid=%s: %s", event, sid, exc)
            await self.emit("error", error_payload(exc, error_code, error_message), to=sid)
        except Exception as exc:
            logger.exception("%s failed for sid=%s", event, sid)
            await self.emit("error", error_payload(exc, error_code, error_message), to=sid)
        return None

    # -- lifecycle -----------------------------------------------------------

    async def on_connect(self, sid: str, environ: dict[str, Any], auth: Any | None = None):
        token = extract_token(environ, auth)
        if not token:
            msg = "unauthorized"
            raise ConnectionRefusedError(msg)

        try:
            identity = await authenticate_token(token)
        except (TokenError, AuthenticationFailed) as exc:
            msg = "jwt_expired" if token_is_expired(token) else "unauthorized"
            raise ConnectionRefusedError(msg) from exc
        except Exception as exc:
            logger.exception("Socket.IO connect error")
            msg = "server_error"
            raise ConnectionRefusedError(msg) from exc

        session = asdict(identity)
        session["chats"] = []
        await self.save_session(sid, session)

        came_online = self.registry.add_connection(identity.user_id, sid)
        logger.info(
            "User %s connected (sid=%s, connections=%d)",
            identity.user_id,
            sid,
            len(self.registry.get_connections(identity.user_id)),
        )
        if came_online:
            await self.emit(
                "user:presence",
                {"userId": identity.user_id, "isOnline": True},
                skip_sid=sid,
            )
        for user_id in self.registry.online_users():
            if user_id != identity.user_id:
                await self.emit("user:presence", {"userId": user_id, "isOnline": True}, to=sid)

    async def on_disconnect(self, sid: str, reason: Any = None):
        user_id = self.registry.get_user_id(sid)
        if user_id is None:
            return
        went_offline = self.registry.remove_connection(user_id, sid)
        logger.info("User %s disconnected (sid=%s, reason=%s)", user_id, sid, reason)
        if went_offline:
            await self.emit("user:presence", {"userId": user_id, "isOnline": False})

    # -- client events -------------------------------------------------------

    async def handle_join(self, sid: str, session: dict[str, Any], payload: dict[str, Any]):
        chat_id = payload["chatId"]
        if not await _is_participant(chat_id, session["user_id"]):
            msg = "Not a chat participant"
            raise PermissionDenied(msg)

        await self.enter_room(sid, chat_room(chat_id))
        if chat_id not in session["chats"]:
            session["chats"].append(chat_id)
            await self.save_session(sid, session)

        await self.emit(
            "chat:user:joined",
            {
                "chatId": chat_id,
                "userId": session["user_id"],
                "username": session["username"],
                "displayName": session["display_name"],
                "avatarUrl": session["avatar_url"],
            },
            room=chat_room(chat_id),
            skip_sid=sid,
        )

    async def handle_leave(self, sid: str, session: dict[str, Any], payload: dict[str, Any]):
        chat_id = payload["chatId"]
        if chat_id not in session["chats"]:
            # Only room members may announce a departure.
            return
        await self.leave_room(sid, chat_room(chat_id))
        session["chats"].remove(chat_id)
        await self.save_session(sid, session)

        await self.emit(
            "chat:user:left",
            {
                "chatId": chat_id,
                "userId": session["user_id"],
                "username": session["username"],
            },
            room=chat_room(chat_id),
            skip_sid=sid,
        )

    async def handle_typing(self, sid: str, session: dict[str, Any], payload: dict[str, Any]):
        chat_id = payload["chatId"]
        if chat_id not in session["chats"]:
            msg = "Join the chat before sending typing updates"
            raise PermissionDenied(msg)

        await self.emit(
            "chat:typing",
            {
                "chatId": chat_id,
                "userId": session["user_id"],
                "username": session["username"],
                "isTyping": payload["isTyping"],
            },
            room=chat_room(chat_id),
            skip_sid=sid,
        )

    async def handle_message(self, sid: str, session: dict[str, Any], payload: dict[str, Any]):
        message = await _create_message(session["user_id"], payload)
        await self.broadcast_to_chat(message["chatId"], "chat:message", message)

    async def handle_edit(self, sid: str, session: dict[str, Any], payload: dict[str, Any]):
        message = await _edit_message(session["user_id"], payload)
        await self.broadcast_to_chat(
            message["chatId"],
            "chat:message:edited",
            {
                "messageId": message["id"],
                "chatId": message["chatId"],
                "content": message["content"],
                "editedAt": message["updatedAt"],
            },
        )
        logger.info("Message %s edited by user %s", message["id"], session["user_id"])

    async def handle_delete(self, sid: str, session: dict[str, Any], payload: dict[str, Any]):
        deleted = await _delete_message(session["user_id"], payload)
        await self.broadcast_to_chat(
            deleted.chat_id,
            "chat:message:deleted",
            {"messageId": deleted.id, "chatId": deleted.chat_id},
        )
        logger.info("Message %s deleted by user %s", deleted.id, session["user_id"])

    # -- server-side push ----------------------------------------------------

    async def broadcast_to_chat(self, chat_id: int, event: str, data: Any) -> None:
        await self.emit(event, data, room=chat_room(chat_id))

    async def send_to_user(self, user_id: int, event: str, data: Any) -> int:
        """Emit to every live connection of ``user_id``; return how many."""
        connections = self.registry.get_connections(user_id)
        for sid in connections:
            await self.emit(event, data, to=sid)
        return len(connections)
