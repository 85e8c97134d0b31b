import logging
import random
import threading
import time
from contextlib import contextmanager
from typing import Callable, Dict, List, Optional

from flapsync.models import DEFAULT_NAME_MAX_LENGTH, Room, RoomConfig

_default_logger = logging.getLogger(__name__)


class RoomRegistry:
    """In-memory room map owned by one app instance.

    Rooms are created on first join and dropped as soon as the last player
    leaves, so an empty room is never retained.
    """

    def __init__(self, config_factory: Callable[[], RoomConfig] = RoomConfig,
                 start_delay_ms: int = 1500,
                 clock: Callable[[], float] = time.time,
                 rng: Optional[random.Random] = None,
                 name_max_length: int = DEFAULT_NAME_MAX_LENGTH,
                 logger: Optional[logging.Logger] = None):
        self.logger = logger or _default_logger
        self._rooms: Dict[str, Room] = {}
        self._lock = threading.RLock()
        self._config_factory = config_factory
        self._start_delay_ms = start_delay_ms
        self._clock = clock
        self._rng = rng or random.Random()
        self._name_max_length = name_max_length

    @contextmanager
    def guard(self):
        """Hold the registry lock across a multi-step join or leave."""
        with self._lock:
            yield self

    def get(self, room_id: str) -> Optional[Room]:
        with self._lock:
            return self._rooms.get(room_id)

    def get_or_create(self, room_id: str) -> Room:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is not None:
                return room
            room = Room(
                room_id,
                config=self._config_factory(),
                seed=self._rng.getrandbits(32),
                start_time=int(self._clock() * 1000) + self._start_delay_ms,
                name_max_length=self._name_max_length,
            )
            self._rooms[room_id] = room
        self.logger.info(f"[room-create] room={room_id} seed={room.seed} start={room.start_time}")
        return room

    def remove_if_empty(self, room_id: str) -> bool:
        with self._lock:
            room = self._rooms.get(room_id)
            if room is None or not room.is_empty():
                return False
            del self._rooms[room_id]
        self.logger.info(f"[room-reclaim] room={room_id}")
        return True

    def room_ids(self) -> List[str]:
        with self._lock:
            return list(self._rooms)

    def __contains__(self, room_id) -> bool:
        with self._lock:
            return room_id in self._rooms

    def __len__(self) -> int:
        with self._lock:
            return len(self._rooms)
