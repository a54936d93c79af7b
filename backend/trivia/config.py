import os


class Config:
    SECRET_KEY = os.environ.get("SECRET_KEY", "dev")

    # CORS
    CORS_ORIGINS = os.environ.get("CORS_ORIGINS", "*")

    # Reverse proxy / IP headers
    TRUST_PROXY_HEADERS = os.environ.get("TRUST_PROXY_HEADERS", "1") == "1"

    # Socket.IO async mode (empty picks a platform default)
    SOCKETIO_ASYNC_MODE = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()

    LOG_LEVEL = os.environ.get("LOG_LEVEL", "INFO")

    # Static UI assets
    PUBLIC_DIR = os.environ.get("PUBLIC_DIR", "")

    # Append-only game history log
    HISTORY_FILE = os.environ.get("HISTORY_FILE", "rooms.json")

    # Game
    MAX_ROUNDS = int(os.environ.get("MAX_ROUNDS", "10"))
    PACING_DELAY_SEC = float(os.environ.get("PACING_DELAY_SEC", "5"))
