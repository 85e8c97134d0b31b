import os

basedir = os.path.abspath(os.path.dirname(__file__))


def _origins(value):
    origins = [o.strip() for o in value.split(',') if o.strip()]
    return '*' if origins == ['*'] else origins


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '3000'))
    # Comma-separated list, or '*' for any origin
    CORS_ORIGINS = _origins(os.environ.get('CORS_ORIGINS', '*'))
    # Directory holding the browser client bundle
    STATIC_DIR = os.environ.get('STATIC_DIR') or os.path.join(basedir, 'public')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    DEFAULT_ROOM_ID = os.environ.get('DEFAULT_ROOM_ID') or 'lobby'
    # Delay between room creation and the synchronized start (ms)
    ROOM_START_DELAY_MS = int(os.environ.get('ROOM_START_DELAY_MS', '1500'))
    PLAYER_NAME_MAX_LENGTH = int(os.environ.get('PLAYER_NAME_MAX_LENGTH', '20'))
    CHAT_MAX_LENGTH = int(os.environ.get('CHAT_MAX_LENGTH', '200'))
