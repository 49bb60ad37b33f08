"""Project-wide Socket.IO server.

Mounted by ``config.asgi`` in front of the Django ASGI app. The chat gateway
owns the ``/chat`` namespace; its socket registry lives as long as the server.

When ``REDIS_URL`` is set, emits go through Redis so rooms span several ASGI
workers. Presence stays per process either way.
"""

from __future__ import annotations

import logging

import socketio
from django.conf import settings

from innogram.realtime.gateway import CHAT_NAMESPACE
from innogram.realtime.gateway import ChatNamespace
from innogram.realtime.registry import SocketRegistry

logger = logging.getLogger(__name__)


def build_server() -> socketio.AsyncServer:
    client_manager = None
    if settings.REDIS_URL:
        client_manager = socketio.AsyncRedisManager(settings.REDIS_URL)

    return socketio.AsyncServer(
        async_mode="asgi",
        cors_allowed_origins=settings.SOCKETIO_CORS_ALLOWED_ORIGINS,
        client_manager=client_manager,
        logger=False,
        engineio_logger=False,
    )


sio = build_server()
chat_namespace = ChatNamespace(CHAT_NAMESPACE, registry=SocketRegistry())
sio.register_namespace(chat_namespace)


async def shutdown_realtime() -> None:
    stats = chat_namespace.registry.stats()
    logger.info(
        "Shutting down realtime: %d users, %d connections",
        stats["online_users"],
        stats["connections"],
    )
    chat_namespace.registry.clear()
