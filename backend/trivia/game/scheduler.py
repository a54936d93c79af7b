from __future__ import annotations

import logging
from threading import RLock
from typing import Callable

from flask_socketio import SocketIO

log = logging.getLogger(__name__)


class PacingScheduler:
    """Runs a callback after a delay on a Socket.IO background task.

    The callback runs under the same lock that serializes event handlers, so
    it never interleaves with one. With ``inline`` set (tests) callbacks run
    immediately in the caller's thread.
    """

    def __init__(self, socketio: SocketIO, lock: RLock, inline: bool = False) -> None:
        self.socketio = socketio
        self.lock = lock
        self.inline = inline

    def __call__(self, delay: float, fn: Callable[..., None], *args) -> None:
        if self.inline:
            with self.lock:
                fn(*args)
            return

        def _worker() -> None:
            if delay > 0:
                self.socketio.sleep(delay)
            with self.lock:
                try:
                    fn(*args)
                except Exception:
                    log.exception("pacing callback %s failed", getattr(fn, "__name__", fn))

        self.socketio.start_background_task(_worker)
