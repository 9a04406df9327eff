"""
Room membership for call sessions.

A room exists only while it has members: the first join creates the entry and
the last leave deletes it.
"""

from typing import Any, Dict, FrozenSet, Iterable, List, Set
from relay.messages import CALL_ENDED, USER_JOINED, Envelope
from relay.registry import ConnectionRegistry
from logging_config import get_logger

logger = get_logger(__name__)


class RoomMembershipManager:
    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry
        # Format: {room_id: {identity, ...}}
        self._rooms: Dict[str, Set[str]] = {}

    def join(self, room_id: str, identity: str, connection: Any) -> List[Envelope]:
        """Add identity to the room and tell the other members about it."""
        # The joining connection becomes the one peers are relayed to
        self.registry.register(identity, connection)
        members = self._rooms.setdefault(room_id, set())
        if identity in members:
            logger.debug(f"User {identity} re-joined room {room_id}")
        members.add(identity)
        logger.info(f"User {identity} joined room: {room_id} ({len(members)} members)")
        return self._envelopes(members - {identity}, USER_JOINED, {"userId": identity})

    def leave(self, room_id: str, identity: str) -> List[Envelope]:
        """Remove identity from the room and tell the remaining members the call ended."""
        members = self._rooms.get(room_id)
        if not members or identity not in members:
            logger.debug(f"Leave ignored: {identity} is not in room {room_id}")
            return []
        members.discard(identity)
        logger.info(f"User {identity} left room {room_id}")
        if not members:
            del self._rooms[room_id]
            logger.info(f"Room {room_id} is empty, discarding it")
            return []
        return self._envelopes(members, CALL_ENDED)

    def close(self, room_id: str) -> FrozenSet[str]:
        """Drop the whole room, returning who was in it."""
        members = self._rooms.pop(room_id, set())
        if members:
            logger.info(f"Room {room_id} closed with {len(members)} members")
        return frozenset(members)

    def members_of(self, room_id: str) -> FrozenSet[str]:
        return frozenset(self._rooms.get(room_id, ()))

    def rooms_of(self, identity: str) -> List[str]:
        return [room_id for room_id, members in self._rooms.items() if identity in members]

    def __contains__(self, room_id: str) -> bool:
        return room_id in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def _envelopes(self, targets: Iterable[str], event: str, data=None) -> List[Envelope]:
        envelopes = []
        for target in sorted(targets):
            if self.registry.lookup(target) is None:
                logger.debug(f"Skipping {event} for {target}: no registered connection")
                continue
            envelopes.append(Envelope(target=target, event=event, data=data))
        return envelopes
