from relay.hub import SignalingHub
from relay.messages import Envelope, MalformedMessage

__all__ = ["SignalingHub", "Envelope", "MalformedMessage"]
