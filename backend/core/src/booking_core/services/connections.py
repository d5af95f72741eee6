"""Registry of live WebSocket connections keyed by user ID."""

import threading
from typing import Generic, TypeVar

from ..utils.logging import get_logger

logger = get_logger(__name__)

C = TypeVar("C")


class ConnectionRegistry(Generic[C]):
    """Tracks at most one live connection per user.

    Created by the application and passed to whatever needs it; there is no
    module-level instance.
    """

    def __init__(self) -> None:
        self._connections: dict[str, C] = {}
        self._lock = threading.Lock()

    def add(self, uid: str, connection: C) -> C | None:
        """Register ``connection`` for ``uid``.

        Returns:
            The connection it replaced, which the caller should close
        """
        with self._lock:
            previous = self._connections.get(uid)
            self._connections[uid] = connection
        if previous is not None and previous is not connection:
            logger.info("Replacing live connection for user %s", uid)
            return previous
        return None

    def remove(self, uid: str, connection: C | None = None) -> bool:
        """Unregister the connection of ``uid``.

        If ``connection`` is given, only remove it when it is still the one
        registered, so a replaced socket closing late cannot evict its successor.

        Returns:
            True if an entry was removed
        """
        with self._lock:
            current = self._connections.get(uid)
            if current is None:
                return False
            if connection is not None and current is not connection:
                return False
            del self._connections[uid]
            return True

    def get(self, uid: str) -> C | None:
        with self._lock:
            return self._connections.get(uid)

    def __contains__(self, uid: object) -> bool:
        with self._lock:
            return uid in self._connections

    def __len__(self) -> int:
        with self._lock:
            return len(self._connections)
