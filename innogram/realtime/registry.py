from __future__ import annotations

from collections import defaultdict


class SocketRegistry:
    """In-process map of user id to its live Socket.IO connection ids.

    A user is online iff it has at least one connection. Empty sets are
    dropped as soon as they empty, so ``online_users`` never reports a user
    whose last tab already closed.

    All mutations run on the ASGI server's event loop, so no locking is needed.
    Each process owns its own registry; presence is per process.
    """

    def __init__(self) -> None:
        self._user_connections: dict[int, set[str]] = defaultdict(set)
        self._connection_users: dict[str, int] = {}

    def add_connection(self, user_id: int, conn_id: str) -> bool:
        """Register ``conn_id``; return True if the user just came online."""
        first = not self._user_connections.get(user_id)
        self._user_connections[user_id].add(conn_id)
        self._connection_users[conn_id] = user_id
        return first

    def remove_connection(self, user_id: int, conn_id: str) -> bool:
        """Forget ``conn_id``; return True if the user just went offline."""
        self._connection_users.pop(conn_id, None)
        connections = self._user_connections.get(user_id)
        if connections is None:
            return False
        connections.discard(conn_id)
        if connections:
            return False
        del self._user_connections[user_id]
        return True

    def get_connections(self, user_id: int) -> list[str]:
        return sorted(self._user_connections.get(user_id, ()))

    def get_user_id(self, conn_id: str) -> int | None:
        return self._connection_users.get(conn_id)

    def is_online(self, user_id: int) -> bool:
        return bool(self._user_connections.get(user_id))

    def online_users(self) -> list[int]:
        return [uid for uid, conns in self._user_connections.items() if conns]

    def total_connections(self) -> int:
        return len(self._connection_users)

    def stats(self) -> dict[str, int]:
        return {
            "online_users": len(self.online_users()),
            "connections": self.total_connections(),
        }

    def clear(self) -> None:
        self._user_connections.clear()
        self._connection_users.clear()
