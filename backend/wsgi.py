"""Entry point for a WSGI server, e.g. ``gunicorn -k eventlet -w 1 backend.wsgi:app``.

Rooms live in process memory, so run a single worker.
"""
try:
    from backend.trivia.server import create_app
except ImportError:  # pragma: no cover
    from trivia.server import create_app

app, socketio = create_app()
