import threading
from typing import Dict, Optional, Set, Tuple

from herd.models import name_key, normalize_room_code


class PresenceTracker:
    """Live connections bound to a (room, player name).

    Nothing here is persisted. Who is live in a room is recomputed from the
    bindings on each call rather than kept as counters, so a missed unbind
    can never leave a counter drifting.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._bindings: Dict[str, Tuple[str, str]] = {}  # sid -> (room code, name)

    def bind(self, sid: str, room_code, name) -> Optional[Tuple[str, str]]:
        """Bind sid; returns the binding it replaced, if any."""
        with self._lock:
            previous = self._bindings.get(sid)
            self._bindings[sid] = (normalize_room_code(room_code), str(name).strip())
        return previous

    def unbind(self, sid: str) -> Optional[Tuple[str, str]]:
        with self._lock:
            return self._bindings.pop(sid, None)

    def lookup(self, sid: str) -> Optional[Tuple[str, str]]:
        with self._lock:
            return self._bindings.get(sid)

    def active_names(self, room_code) -> Set[str]:
        """Name keys with at least one live connection in the room."""
        code = normalize_room_code(room_code)
        with self._lock:
            return {name_key(name) for room, name in self._bindings.values() if room == code}

    def connection_count(self, room_code) -> int:
        code = normalize_room_code(room_code)
        with self._lock:
            return sum(1 for room, _ in self._bindings.values() if room == code)

    def clear(self) -> None:
        with self._lock:
            self._bindings.clear()


presence = PresenceTracker()
