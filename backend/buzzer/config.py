import os
import string


def _split_origins(raw):
    return [o.strip() for o in raw.split(',') if o.strip()]


class Config:
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'you-will-never-guess'
    # Room codes: uppercase letters and digits, fixed length
    ROOM_CODE_LENGTH = int(os.environ.get('ROOM_CODE_LENGTH', '6'))
    ROOM_CODE_ALPHABET = os.environ.get('ROOM_CODE_ALPHABET') or (string.ascii_uppercase + string.digits)
    # 'ledger' broadcasts the full buzz order; 'first' only announces the first buzzer
    BUZZ_BROADCAST = os.environ.get('BUZZ_BROADCAST', 'ledger')
    SOCKETIO_NAMESPACE = os.environ.get('SOCKETIO_NAMESPACE', '/')
    CORS_ALLOWED_ORIGINS = _split_origins(os.environ.get(
        'CORS_ALLOWED_ORIGINS',
        'http://localhost:5173,http://127.0.0.1:5173,http://localhost:5174,http://127.0.0.1:5174',
    ))
    LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
    HOST = os.environ.get('HOST', '0.0.0.0')
    PORT = int(os.environ.get('PORT', '5000'))
