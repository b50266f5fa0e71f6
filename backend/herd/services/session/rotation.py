"""Per-room scratch state: the event lock and the question rotation.

Durable round fields live on the Room row. What lives here is only an
optimization and may be dropped at any time (last disconnect, restart):
losing a deck means the next round starts a fresh shuffle.
"""
import random
import threading
from contextlib import contextmanager
from typing import Dict, Iterator, List, Optional, Sequence

from herd.models import normalize_room_code

POLICY_SHUFFLE = 'shuffle'
POLICY_RANDOM = 'random'


class QuestionRotation:
    """Exhaust-then-reshuffle deck of question ids for one room."""

    def __init__(self, rng: Optional[random.Random] = None) -> None:
        self._rng = rng or random.Random()
        self._deck: List[int] = []

    @property
    def remaining(self) -> int:
        return len(self._deck)

    def next(self, catalog_ids: Sequence[int], avoid: Optional[int] = None,
             policy: str = POLICY_SHUFFLE) -> Optional[int]:
        if not catalog_ids:
            return None
        if policy == POLICY_RANDOM:
            return self._rng.choice(list(catalog_ids))

        # Questions removed from the catalog since the shuffle drop out
        known = set(catalog_ids)
        self._deck = [qid for qid in self._deck if qid in known]
        if not self._deck:
            deck = list(catalog_ids)
            self._rng.shuffle(deck)
            # Cards are drawn from the end; never open a cycle with the active question
            if len(deck) > 1 and deck[-1] == avoid:
                deck[0], deck[-1] = deck[-1], deck[0]
            self._deck = deck
        return self._deck.pop()


class RoomState:
    def __init__(self, code: str) -> None:
        self.code = code
        self.lock = threading.Lock()
        self.rotation = QuestionRotation()
        self.pending = 0  # events inside or waiting on the lock


class RoomRegistry:
    """Room code -> RoomState, created lazily and reclaimed when idle."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._rooms: Dict[str, RoomState] = {}

    @contextmanager
    def task(self, room_code) -> Iterator[RoomState]:
        """Run one event for the room; events for the same room never overlap."""
        code = normalize_room_code(room_code)
        with self._lock:
            state = self._rooms.get(code)
            if state is None:
                state = self._rooms[code] = RoomState(code)
            state.pending += 1
        try:
            with state.lock:
                yield state
        finally:
            with self._lock:
                state.pending -= 1

    def release(self, room_code) -> bool:
        """Drop the room's scratch state unless an event still holds it."""
        code = normalize_room_code(room_code)
        with self._lock:
            state = self._rooms.get(code)
            if state is None or state.pending > 0:
                return False
            del self._rooms[code]
            return True

    def __contains__(self, room_code) -> bool:
        with self._lock:
            return normalize_room_code(room_code) in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)

    def clear(self) -> None:
        with self._lock:
            self._rooms.clear()


registry = RoomRegistry()
