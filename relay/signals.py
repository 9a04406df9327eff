from typing import Any, List, Optional
from relay.messages import SIGNAL_FIELDS, Envelope
from relay.registry import ConnectionRegistry
from relay.rooms import RoomMembershipManager
from logging_config import get_logger

logger = get_logger(__name__)


class SignalRelay:
    """Forwards offer/answer/ICE payloads to the other members of a room.

    Payloads are opaque and passed through untouched.
    """

    def __init__(self, rooms: RoomMembershipManager, registry: ConnectionRegistry):
        self.rooms = rooms
        self.registry = registry

    def relay(self, kind: str, room_id: str, sender: Optional[str], payload: Any) -> List[Envelope]:
        field = SIGNAL_FIELDS[kind]
        members = self.rooms.members_of(room_id)
        if sender not in members:
            logger.warning(f"Dropping {kind} for room {room_id}: sender {sender} is not a member")
            return []

        envelopes = []
        for target in sorted(members - {sender}):
            if self.registry.lookup(target) is None:
                logger.debug(f"Skipping {kind} for {target} in room {room_id}: not connected")
                continue
            envelopes.append(Envelope(target=target, event=kind, data={field: payload}))
        logger.debug(f"{kind} received for room: {room_id}, relaying to {len(envelopes)} peers")
        return envelopes
