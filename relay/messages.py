"""Event names and the outbound message type shared by the relay components."""

from dataclasses import dataclass
from typing import Any, Optional

# client -> server
REGISTER_USER = "register-user"
JOIN_ROOM = "join-room"
LEAVE_ROOM = "leave-room"
OFFER = "offer"
ANSWER = "answer"
ICE_CANDIDATE = "ice-candidate"
END_CALL = "end-call"

# server -> client
USER_JOINED = "user-joined"
REGISTERED = "registered"
ROOM_JOINED = "room-joined"
CALL_ENDED = "call-ended"
ERROR = "error"
INCOMING_CALL_PREFIX = "incoming-call-"

# signaling kind -> field carrying the opaque payload
SIGNAL_FIELDS = {
    OFFER: "offer",
    ANSWER: "answer",
    ICE_CANDIDATE: "candidate",
}


class MalformedMessage(ValueError):
    """Raised when an inbound message is missing a required field or has an unknown event."""


@dataclass(frozen=True)
class Envelope:
    """A message addressed to one participant identity."""

    target: str
    event: str
    data: Optional[Any] = None

    def to_wire(self) -> dict:
        message = {"event": self.event}
        if self.data is not None:
            message["data"] = self.data
        return message


def incoming_call_event(receiver_id: str) -> str:
    return f"{INCOMING_CALL_PREFIX}{receiver_id}"
