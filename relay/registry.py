from typing import Any, Dict, List, Optional
from logging_config import get_logger

logger = get_logger(__name__)


class ConnectionRegistry:
    """Maps a participant identity to its live connection.

    Holds references only; the transport owns the connection lifecycle and
    is responsible for closing it.
    """

    def __init__(self):
        # Format: {identity: connection}
        self._connections: Dict[str, Any] = {}

    def register(self, identity: str, connection: Any) -> None:
        previous = self._connections.get(identity)
        self._connections[identity] = connection
        if previous is not None and previous is not connection:
            logger.info(f"Registration for {identity} superseded by a new connection")
        else:
            logger.debug(f"Registered {identity} ({len(self._connections)} registered)")

    def lookup(self, identity: str) -> Optional[Any]:
        return self._connections.get(identity)

    def unregister(self, connection: Any) -> List[str]:
        """Remove every identity bound to this connection and return them."""
        removed = self.identities_for(connection)
        for identity in removed:
            del self._connections[identity]
            logger.info(f"User {identity} removed from active users")
        return removed

    def identities_for(self, connection: Any) -> List[str]:
        return [identity for identity, conn in self._connections.items() if conn is connection]

    def __contains__(self, identity: str) -> bool:
        return identity in self._connections

    def __len__(self) -> int:
        return len(self._connections)
