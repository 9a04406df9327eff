from typing import List, Optional
from relay.messages import CALL_ENDED, Envelope, incoming_call_event
from relay.registry import ConnectionRegistry
from relay.rooms import RoomMembershipManager
from logging_config import get_logger

logger = get_logger(__name__)


class CallLifecycleNotifier:
    def __init__(self, rooms: RoomMembershipManager, registry: ConnectionRegistry):
        self.rooms = rooms
        self.registry = registry

    def notify_incoming_call(
        self,
        receiver_id: str,
        room_id: str,
        caller_id: str,
        caller_name: Optional[str] = None,
        caller_type: Optional[str] = None,
    ) -> List[Envelope]:
        """Invite a registered receiver to a room. Offline receivers get nothing."""
        if self.registry.lookup(receiver_id) is None:
            logger.info(f"Incoming call for {receiver_id} not delivered: receiver is offline")
            return []
        logger.info(f"Notifying {receiver_id} of incoming call from {caller_id} in room {room_id}")
        return [
            Envelope(
                target=receiver_id,
                event=incoming_call_event(receiver_id),
                data={
                    "roomId": room_id,
                    "callerId": caller_id,
                    "callerName": caller_name,
                    "callerType": caller_type,
                },
            )
        ]

    def notify_call_ended(self, room_id: str, ended_by: Optional[str] = None) -> List[Envelope]:
        """End the call for everyone in the room and discard the room."""
        members = self.rooms.close(room_id)
        logger.info(f"Call ended in room: {room_id} (ended by {ended_by})")
        envelopes = []
        for target in sorted(members):
            if target == ended_by or self.registry.lookup(target) is None:
                continue
            envelopes.append(Envelope(target=target, event=CALL_ENDED))
        return envelopes
