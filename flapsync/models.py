import threading
from dataclasses import dataclass, replace
from typing import Any, Dict, List, Optional

DEFAULT_NAME_MAX_LENGTH = 20


@dataclass(frozen=True)
class RoomConfig:
    """Physics and world settings shared by everyone in a room."""
    gravity: float = 1800            # px/s^2
    flap_velocity: float = -520      # px/s
    pipe_speed: float = 180          # px/s
    gap: float = 180                 # px
    spawn_interval_ms: int = 1500
    ground_y: float = 520
    world_width: float = 720
    world_height: float = 600

    def to_dict(self):
        return {
            'gravity': self.gravity,
            'flapVelocity': self.flap_velocity,
            'pipeSpeed': self.pipe_speed,
            'gap': self.gap,
            'spawnIntervalMs': self.spawn_interval_ms,
            'groundY': self.ground_y,
            'worldWidth': self.world_width,
            'worldHeight': self.world_height,
        }


@dataclass
class PlayerState:
    id: str
    name: str
    y: float
    vy: float = 0
    alive: bool = True
    score: int = 0

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'y': self.y,
            'vy': self.vy,
            'alive': self.alive,
            'score': self.score,
        }


def resolve_player_name(connection_id: str, requested: Any, max_length: int = DEFAULT_NAME_MAX_LENGTH) -> str:
    name = requested[:max_length] if isinstance(requested, str) else ''
    return name or f"Player-{connection_id[:4]}"


def _as_number(value):
    # bool is an int subclass but never a valid coordinate
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return value


def _as_bool(value):
    return value if isinstance(value, bool) else None


class Room:
    """One broadcast group: config, seed and start time fixed at creation, plus live players."""

    def __init__(self, room_id: str, config: RoomConfig, seed: int, start_time: int,
                 name_max_length: int = DEFAULT_NAME_MAX_LENGTH):
        self.id = room_id
        self.config = config
        self.seed = seed
        self.start_time = start_time
        self.name_max_length = name_max_length
        self.players: Dict[str, PlayerState] = {}
        self._lock = threading.RLock()

    def add_player(self, connection_id: str, requested_name: Any = None) -> PlayerState:
        player = PlayerState(
            id=connection_id,
            name=resolve_player_name(connection_id, requested_name, self.name_max_length),
            y=self.config.world_height / 2,
        )
        with self._lock:
            self.players[connection_id] = player
            return replace(player)

    def apply_state_update(self, connection_id: str, payload: Any) -> Optional[PlayerState]:
        """Merge the present fields of ``payload`` into the player.

        Returns a copy of the merged state, or None when the player has
        already left the room.
        """
        if not isinstance(payload, dict):
            payload = {}
        with self._lock:
            player = self.players.get(connection_id)
            if player is None:
                return None
            for field in ('y', 'vy'):
                value = _as_number(payload.get(field))
                if value is not None:
                    setattr(player, field, value)
            # score is whatever the client reports
            if payload.get('score') is not None:
                player.score = payload['score']
            alive = _as_bool(payload.get('alive'))
            if alive is not None:
                player.alive = alive
            return replace(player)

    def remove_player(self, connection_id: str) -> bool:
        """Drop the player; returns True if the room is now empty."""
        with self._lock:
            self.players.pop(connection_id, None)
            return not self.players

    def is_empty(self) -> bool:
        with self._lock:
            return not self.players

    def snapshot(self) -> List[PlayerState]:
        with self._lock:
            return [replace(p) for p in self.players.values()]

    def to_init_dict(self, you: PlayerState) -> Dict[str, Any]:
        return {
            'roomId': self.id,
            'you': you.to_dict(),
            'players': [p.to_dict() for p in self.snapshot()],
            'config': self.config.to_dict(),
            'seed': self.seed,
            'startTime': self.start_time,
        }
