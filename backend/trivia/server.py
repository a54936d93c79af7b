from __future__ import annotations

import logging
import sys
from pathlib import Path
from threading import RLock

from flask import Flask, send_from_directory
from flask_cors import CORS
from flask_socketio import SocketIO
from werkzeug.middleware.proxy_fix import ProxyFix

from .config import Config
from .game.engine import RoundEngine
from .game.history import HistoryStore
from .game.players import PlayerRegistry
from .game.rooms import RoomStore
from .game.scheduler import PacingScheduler
from .realtime.handlers import Coordinator, register_socketio_handlers
from .routes.health import bp as health_bp
from .routes.history import bp as history_bp
from .routes.rooms import bp as rooms_bp


def _pick_async_mode(configured: str) -> str:
    if configured:
        return configured
    # Default choice:
    # - Windows: threading (eventlet has known compatibility issues on newer Python)
    # - Python >= 3.13: threading (safer default)
    # - Otherwise: eventlet
    if sys.platform.startswith("win") or sys.version_info >= (3, 13):
        return "threading"
    return "eventlet"


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, str(level).upper(), logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(config_class: type = Config) -> tuple[Flask, SocketIO]:
    app = Flask(__name__, static_folder=None)
    app.config.from_object(config_class)

    public_dir = Path(app.config.get("PUBLIC_DIR") or Path(__file__).resolve().parents[2] / "public")

    _configure_logging(app.config.get("LOG_LEVEL", "INFO"))

    if app.config.get("TRUST_PROXY_HEADERS", False):
        app.wsgi_app = ProxyFix(app.wsgi_app, x_for=1, x_proto=1, x_host=1, x_port=1)

    cors_origins = app.config.get("CORS_ORIGINS", "*")
    CORS(app, resources={r"/api/*": {"origins": cors_origins}})

    socketio = SocketIO(
        app,
        cors_allowed_origins=cors_origins,
        async_mode=_pick_async_mode(app.config.get("SOCKETIO_ASYNC_MODE", "")),
    )

    lock = RLock()
    players = PlayerRegistry()
    rooms = RoomStore()
    inline = bool(app.config.get("TESTING")) and not app.config.get("ENABLE_SCHEDULER_IN_TESTS")
    engine = RoundEngine(
        rooms,
        HistoryStore(app.config.get("HISTORY_FILE", "rooms.json")),
        emit=lambda sid, event, payload: socketio.emit(event, payload, to=sid),
        schedule=PacingScheduler(socketio, lock, inline=inline),
        max_rounds=int(app.config.get("MAX_ROUNDS", 10)),
        pacing_delay=float(app.config.get("PACING_DELAY_SEC", 5)),
    )
    coordinator = Coordinator(players, rooms, engine, lock)
    app.extensions["trivia"] = coordinator

    app.register_blueprint(health_bp, url_prefix="/api")
    app.register_blueprint(rooms_bp, url_prefix="/api")
    app.register_blueprint(history_bp, url_prefix="/api")

    register_socketio_handlers(socketio, coordinator)

    if public_dir.exists():
        @app.get("/")
        def index():
            return send_from_directory(public_dir, "index.html")

        @app.get("/<path:path>")
        def static_proxy(path: str):
            file_path = public_dir / path
            if file_path.exists() and file_path.is_file():
                return send_from_directory(public_dir, path)
            return "404", 404

    return app, socketio
