from flask import current_app, request
from flask_socketio import emit, join_room, leave_room
from flapsync import socketio
from flapsync.services.relay import RELAY_EVENTS, RelayService


class SocketIOTransport:
    """Relay transport for the connection behind the current Socket.IO request."""

    def __init__(self, namespace: str):
        self.namespace = namespace

    def enter(self, room_id: str) -> None:
        join_room(room_id, namespace=self.namespace)

    def leave(self, room_id: str) -> None:
        leave_room(room_id, namespace=self.namespace)

    def send(self, event: str, data) -> None:
        emit(event, data, namespace=self.namespace)

    def broadcast(self, room_id: str, event: str, data) -> None:
        emit(event, data, to=room_id, include_self=False, namespace=self.namespace)


def _relay() -> RelayService:
    return current_app.extensions['flapsync']


def _get_sid() -> str:
    # type: ignore: request.sid exists in Socket.IO context
    return request.sid  # type: ignore


def _transport() -> SocketIOTransport:
    return SocketIOTransport(request.namespace)  # type: ignore


def handle_connect(auth=None):
    _relay().connect(_get_sid())


def handle_disconnect(reason=None):
    _relay().disconnect(_get_sid(), _transport())


def _make_event_handler(event: str):
    def handler(payload=None):
        _relay().dispatch(_get_sid(), event, payload, _transport())
    handler.__name__ = f"handle_{event}"
    return handler


def register_socketio_handlers(namespace: str = '/') -> None:
    """Register Socket.IO event handlers on ``namespace``.

    Every relay event funnels into ``RelayService.dispatch``; the service
    decides whether the connection is allowed to send it.
    """
    socketio.on_event('connect', handle_connect, namespace=namespace)
    socketio.on_event('disconnect', handle_disconnect, namespace=namespace)
    for event in RELAY_EVENTS:
        socketio.on_event(event, _make_event_handler(event), namespace=namespace)
