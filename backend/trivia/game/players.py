from __future__ import annotations

import logging
import random
import time

from .models import Player

log = logging.getLogger(__name__)

MAX_NAME_LENGTH = 16

ADJECTIVES = ["Red", "Blue", "Green", "Swift", "Bold", "Lucky", "Silent", "Tiny", "Brave"]
NOUNS = ["Sparrow", "Lion", "Otter", "Wolf", "Falcon", "Gator", "Bear", "Hawk", "Panda"]


def default_name() -> str:
    adj = random.choice(ADJECTIVES)
    noun = random.choice(NOUNS)
    num = random.randint(100, 999)
    return f"{adj}{noun}{num}"


def clean_name(raw: str | None) -> str:
    name = (raw or "").strip()
    if not name:
        name = default_name()
    return name[:MAX_NAME_LENGTH]


class PlayerRegistry:
    """Every player ever identified in this process, keyed by pid.

    Records are never deleted so a late reconnect can resume. A second index
    maps live Socket.IO connection ids back to their pid.
    """

    def __init__(self) -> None:
        self._players: dict[str, Player] = {}
        self._sid_index: dict[str, str] = {}

    def get(self, pid: str) -> Player | None:
        return self._players.get(pid)

    def by_sid(self, sid: str) -> Player | None:
        pid = self._sid_index.get(sid)
        if pid is None:
            return None
        return self._players.get(pid)

    def __len__(self) -> int:
        return len(self._players)

    def identify(self, pid: str, sid: str) -> tuple[Player, bool]:
        """Attach ``sid`` to ``pid``. Returns (player, reconnected)."""
        player = self._players.get(pid)

        if player is None:
            player = Player(pid=pid, name=default_name(), active=True, last_seen=time.time(), sid=sid)
            self._players[pid] = player
            self._sid_index[sid] = pid
            log.info("new player %s as %s", pid, player.name)
            return player, False

        # Last writer wins: the previous connection no longer speaks for this pid.
        if player.sid and player.sid != sid:
            self._sid_index.pop(player.sid, None)

        reconnected = not player.active
        player.sid = sid
        player.active = True
        player.last_seen = time.time()
        self._sid_index[sid] = pid

        if reconnected:
            log.info("player %s reconnected", pid)
        return player, reconnected

    def set_name(self, pid: str, raw: str | None) -> str | None:
        player = self._players.get(pid)
        if player is None:
            return None
        player.name = clean_name(raw)
        return player.name

    def mark_inactive(self, pid: str, sid: str | None = None) -> bool:
        player = self._players.get(pid)
        if player is None:
            return False

        # A stale connection closing after a takeover must not evict the new one.
        if sid is not None and player.sid != sid:
            self._sid_index.pop(sid, None)
            return False

        if player.sid:
            self._sid_index.pop(player.sid, None)
        player.sid = None
        player.active = False
        player.last_seen = time.time()
        return True
