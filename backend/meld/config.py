import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Realtime
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    # Storage (defaults to in-memory)
    REDIS_URL = os.environ.get("REDIS_URL", "")
    STATE_KEY_PREFIX = os.environ.get("STATE_KEY_PREFIX", "meld")

    # Game
    MIN_PLAYERS_TO_START = int(os.environ.get("MIN_PLAYERS_TO_START", "2"))
    MAX_NAME_LENGTH = int(os.environ.get("MAX_NAME_LENGTH", "20"))
    DEFAULT_WIN_CONDITION = os.environ.get("DEFAULT_WIN_CONDITION", "exact")

    # Logging
    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")
