"""Errors raised by the room session core.

Stale events and duplicate submissions are not errors; the round engine
absorbs them. Only join-time room validation reaches the requester.
"""


class HerdError(Exception):
    """Base class for all room session errors."""
    pass


class JoinRejected(HerdError):
    """A join that the requester can act on (wrong code, closed room)."""
    status_code = 400

    def __init__(self, room_code, reason):
        self.room_code = room_code
        self.reason = reason
        super().__init__(f"Join to room {room_code} rejected: {reason}")


class RoomNotFound(JoinRejected):
    status_code = 404

    def __init__(self, room_code):
        super().__init__(room_code, 'Room not found')


class RoomClosed(JoinRejected):
    status_code = 403

    def __init__(self, room_code):
        super().__init__(room_code, 'Room closed')


class StoreFailure(HerdError):
    """The durable store failed mid-event; the event was abandoned."""

    def __init__(self, room_code, event):
        self.room_code = room_code
        self.event = event
        super().__init__(f"Store failure during {event} for room {room_code}")
