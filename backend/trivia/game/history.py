from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path

log = logging.getLogger(__name__)


def format_date(d: datetime) -> str:
    """``M/D/YY HH:MM``, e.g. ``3/7/25 09:05``."""
    return f"{d.month}/{d.day}/{d:%y %H:%M}"


class HistoryStore:
    """Append-only log of finished games, kept as a JSON array on disk."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def load(self) -> list[dict]:
        if not self.path.exists():
            return []
        try:
            history = json.loads(self.path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            log.warning("history file %s unreadable, starting empty: %s", self.path, exc)
            return []
        if not isinstance(history, list):
            log.warning("history file %s is not a list, starting empty", self.path)
            return []
        return history

    def append(self, record: dict) -> None:
        history = self.load()
        history.append(record)
        try:
            self.path.write_text(json.dumps(history, indent=2), encoding="utf-8")
        except OSError:
            log.exception("failed to write game history to %s", self.path)
