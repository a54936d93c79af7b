import logging
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

log = logging.getLogger("trivia")


def _wants_eventlet() -> bool:
    mode = os.environ.get("SOCKETIO_ASYNC_MODE", "").strip()
    if mode not in ("", "eventlet"):
        return False
    return not sys.platform.startswith("win") and sys.version_info < (3, 13)


def main() -> None:
    load_dotenv(Path(__file__).resolve().parents[1] / ".env")

    # Must happen before anything imports socket/threading.
    if _wants_eventlet():
        import eventlet

        eventlet.monkey_patch()

    try:
        from backend.trivia.server import create_app
    except ImportError:  # pragma: no cover
        from trivia.server import create_app

    app, socketio = create_app()

    host = os.environ.get("HOST", "0.0.0.0")
    port = int(os.environ.get("PORT", "8080"))
    debug = os.environ.get("FLASK_DEBUG", "0") == "1"

    log.info("listening on http://%s:%d", host, port)
    socketio.run(
        app,
        host=host,
        port=port,
        debug=debug,
        allow_unsafe_werkzeug=os.environ.get("ALLOW_UNSAFE_WERKZEUG", "1") == "1",
        use_reloader=False,
    )


if __name__ == "__main__":
    main()
