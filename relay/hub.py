"""
SignalingHub wires the relay components together.

One hub is built per application and handed to the WebSocket endpoint and
the call routes. All state is in memory and lost on restart.

Every mutating method is synchronous: the event loop runs each inbound message
to completion before the next one, so no locking is needed. Only ``deliver``
awaits, and it never touches the registry or room state.
"""

import json
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional

from relay.messages import (
    ANSWER,
    END_CALL,
    ICE_CANDIDATE,
    JOIN_ROOM,
    LEAVE_ROOM,
    OFFER,
    REGISTER_USER,
    REGISTERED,
    ROOM_JOINED,
    SIGNAL_FIELDS,
    Envelope,
    MalformedMessage,
)
from relay.notifier import CallLifecycleNotifier
from relay.registry import ConnectionRegistry
from relay.rooms import RoomMembershipManager
from relay.signals import SignalRelay
from logging_config import get_logger

logger = get_logger(__name__)


@dataclass
class ConnectionSession:
    """What one transport connection has told us about itself."""

    identity: Optional[str] = None
    role: Optional[str] = None


def _require(data: dict, *fields: str) -> List[Any]:
    values = []
    for field in fields:
        value = data.get(field)
        if value is None or value == "":
            raise MalformedMessage(f"Missing required field: {field}")
        if field in ("roomId", "userId"):
            if isinstance(value, bool) or not isinstance(value, (str, int)):
                raise MalformedMessage(f"Field {field} must be a string or integer")
            value = str(value)
        values.append(value)
    return values


class SignalingHub:
    def __init__(self):
        self.registry = ConnectionRegistry()
        self.rooms = RoomMembershipManager(self.registry)
        self.relay = SignalRelay(self.rooms, self.registry)
        self.notifier = CallLifecycleNotifier(self.rooms, self.registry)

    def dispatch(self, connection: Any, message: Any, session: ConnectionSession) -> List[Envelope]:
        """Apply one inbound message and return what should be sent, and to whom.

        Raises MalformedMessage before touching any state if the message is
        missing a field it needs.
        """
        if not isinstance(message, dict):
            raise MalformedMessage("Message must be a JSON object")
        event = message.get("event")
        if not isinstance(event, str):
            raise MalformedMessage("Message event must be a string")
        data = message.get("data") or {}
        if not isinstance(data, dict):
            raise MalformedMessage("Message data must be a JSON object")

        if event == REGISTER_USER:
            (user_id,) = _require(data, "userId")
            session.identity = user_id
            session.role = data.get("userType")
            self.registry.register(user_id, connection)
            logger.info(f"User registered: {user_id} ({session.role})")
            return [Envelope(target=user_id, event=REGISTERED, data={"userId": user_id})]

        if event == JOIN_ROOM:
            room_id, user_id = _require(data, "roomId", "userId")
            session.identity = user_id
            envelopes = self.rooms.join(room_id, user_id, connection)
            members = sorted(self.rooms.members_of(room_id))
            envelopes.append(Envelope(target=user_id, event=ROOM_JOINED, data={"roomId": room_id, "members": members}))
            return envelopes

        if event == LEAVE_ROOM:
            (room_id,) = _require(data, "roomId")
            identity = self._sender(data, session)
            return self.rooms.leave(room_id, identity)

        if event in SIGNAL_FIELDS:
            (room_id,) = _require(data, "roomId")
            return self.relay.relay(event, room_id, session.identity, data.get(SIGNAL_FIELDS[event]))

        if event == END_CALL:
            (room_id,) = _require(data, "roomId")
            return self.notifier.notify_call_ended(room_id, ended_by=session.identity)

        raise MalformedMessage(f"Unknown event: {event}")

    def disconnect(self, connection: Any) -> List[Envelope]:
        """Forget a dropped connection and leave every room its identities were in."""
        envelopes = []
        for identity in self.registry.unregister(connection):
            for room_id in self.rooms.rooms_of(identity):
                envelopes.extend(self.rooms.leave(room_id, identity))
        return envelopes

    async def deliver(self, envelopes: Iterable[Envelope]) -> int:
        """Send envelopes to whoever is registered for each target right now.

        Returns how many were sent. Send failures are logged and skipped; the
        transport reports the dead connection through ``disconnect``.
        """
        sent = 0
        for envelope in envelopes:
            connection = self.registry.lookup(envelope.target)
            if connection is None:
                logger.debug(f"Dropping {envelope.event} for {envelope.target}: no longer connected")
                continue
            try:
                await connection.send_text(json.dumps(envelope.to_wire()))
                sent += 1
            except Exception as e:
                logger.warning(f"Error sending {envelope.event} to {envelope.target}: {e}")
        return sent

    @staticmethod
    def _sender(data: dict, session: ConnectionSession) -> str:
        if session.identity:
            return session.identity
        (user_id,) = _require(data, "userId")
        return user_id
