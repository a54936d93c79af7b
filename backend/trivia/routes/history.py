from __future__ import annotations

from flask import Blueprint, current_app, jsonify

bp = Blueprint("history", __name__)


@bp.get("/history")
def get_history():
    coordinator = current_app.extensions["trivia"]
    with coordinator.lock:
        games = coordinator.engine.history.load()
    return jsonify({"games": games})
