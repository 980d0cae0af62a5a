"""
WebSocket transport for the Sequence game.
"""

from .events import *

__all__ = ["EventType", "OutboundEventType", "ServerEvent", "parse_inbound_event", "encode_event"]
