import logging
import threading
from typing import Any, Dict, Optional

from flapsync.services.registry import RoomRegistry

_default_logger = logging.getLogger(__name__)

UNJOINED = 'unjoined'
JOINED = 'joined'
TERMINATED = 'terminated'

RELAY_EVENTS = ('joinRoom', 'state', 'msg')


class ConnectionSession:
    def __init__(self, sid: str):
        self.sid = sid
        self.state = UNJOINED
        self.room_id: Optional[str] = None

    def __repr__(self):
        return f"<ConnectionSession {self.sid} {self.state} room={self.room_id}>"


class RelayService:
    """Per-connection protocol: join, state relay, chat relay, disconnect.

    Transport-agnostic. Every call takes a ``transport`` bound to the calling
    connection that provides ``enter(room_id)``, ``leave(room_id)``,
    ``send(event, data)`` to the caller and ``broadcast(room_id, event, data)``
    to everyone else in the room.
    """

    def __init__(self, registry: RoomRegistry, default_room_id: str = 'lobby',
                 chat_max_length: int = 200,
                 logger: Optional[logging.Logger] = None):
        self.registry = registry
        self.logger = logger or _default_logger
        self.default_room_id = default_room_id
        self.chat_max_length = chat_max_length
        self._sessions: Dict[str, ConnectionSession] = {}
        self._sessions_lock = threading.Lock()
        self._handlers = {
            'joinRoom': self._join,
            'state': self._relay_state,
            'msg': self._relay_chat,
        }

    def session(self, sid: str) -> Optional[ConnectionSession]:
        with self._sessions_lock:
            return self._sessions.get(sid)

    def connect(self, sid: str) -> ConnectionSession:
        session = ConnectionSession(sid)
        with self._sessions_lock:
            self._sessions[sid] = session
        return session

    def dispatch(self, sid: str, event: str, payload: Any, transport) -> None:
        session = self.session(sid)
        if session is None or session.state == TERMINATED:
            self.logger.debug(f"[drop] sid={sid} event={event} no live session")
            return
        handler = self._handlers.get(event)
        if handler is None:
            self.logger.debug(f"[drop] sid={sid} unknown event={event}")
            return
        if session.state != JOINED and event != 'joinRoom':
            self.logger.debug(f"[drop] sid={sid} event={event} before join")
            return
        handler(session, payload, transport)

    def disconnect(self, sid: str, transport) -> None:
        with self._sessions_lock:
            session = self._sessions.pop(sid, None)
        if session is None:
            return
        # a join for this sid may still be waiting on the guard; TERMINATED makes it back off
        with self.registry.guard():
            if session.state == JOINED:
                self._leave(session, transport)
            session.state = TERMINATED

    # ---- transitions ----

    def _room_id_from(self, payload: Dict[str, Any]) -> str:
        room_id = payload.get('roomId')
        if isinstance(room_id, str) and room_id:
            return room_id
        return self.default_room_id

    def _join(self, session: ConnectionSession, payload: Any, transport) -> None:
        if not isinstance(payload, dict):
            payload = {}
        room_id = self._room_id_from(payload)

        with self.registry.guard():
            if session.state == TERMINATED:
                self.logger.debug(f"[drop] join after disconnect sid={session.sid}")
                return
            if session.state == JOINED:
                if session.room_id == room_id:
                    self.logger.info(f"[join-ignored] room={room_id} sid={session.sid} already joined")
                    return
                self.logger.info(f"[room-switch] sid={session.sid} {session.room_id} -> {room_id}")
                self._leave(session, transport)

            room = self.registry.get_or_create(room_id)
            you = room.add_player(session.sid, payload.get('name'))
            session.state = JOINED
            session.room_id = room_id

            transport.enter(room_id)
            transport.send('roomInit', room.to_init_dict(you))
            transport.broadcast(room_id, 'playerJoined', you.to_dict())

        self.logger.info(f"[join] room={room_id} sid={session.sid} name={you.name!r}")

    def _relay_state(self, session: ConnectionSession, payload: Any, transport) -> None:
        room_id = session.room_id
        room = self.registry.get(room_id) if room_id else None
        player = room.apply_state_update(session.sid, payload) if room else None
        if player is None:
            self.logger.debug(f"[drop] stale state sid={session.sid} room={room_id}")
            return
        t = payload.get('t') if isinstance(payload, dict) else None
        transport.broadcast(room_id, 'state', {
            'id': player.id,
            'y': player.y,
            'vy': player.vy,
            'score': player.score,
            'alive': player.alive,
            't': t,
        })

    def _relay_chat(self, session: ConnectionSession, payload: Any, transport) -> None:
        room_id = session.room_id
        if room_id is None:
            return
        # falsy payloads (None, False, 0) relay as empty text
        text = str(payload) if payload else ''
        transport.broadcast(room_id, 'msg', {
            'from': session.sid,
            'text': text[:self.chat_max_length],
        })

    def _leave(self, session: ConnectionSession, transport) -> None:
        room_id = session.room_id
        with self.registry.guard():
            room = self.registry.get(room_id)
            if room is not None:
                room.remove_player(session.sid)
                transport.broadcast(room_id, 'playerLeft', {'id': session.sid})
                self.registry.remove_if_empty(room_id)
            transport.leave(room_id)
        session.state = UNJOINED
        session.room_id = None
        self.logger.info(f"[leave] room={room_id} sid={session.sid}")
