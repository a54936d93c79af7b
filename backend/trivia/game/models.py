from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Literal


LobbyState = Literal["open", "playing"]
Choice = Literal["A", "B"]

CHOICES: tuple[Choice, Choice] = ("A", "B")


@dataclass(eq=False)
class Player:
    pid: str
    name: str
    room: str | None = None
    active: bool = True
    last_seen: float = 0.0
    sid: str | None = None


@dataclass(eq=False)
class Room:
    code: str
    # players[0] is always the host
    players: list[Player] = field(default_factory=list)
    lobby_state: LobbyState = "open"
    round: int = 0
    round_active: bool = False
    scores: dict[str, int] = field(default_factory=dict)
    answers: dict[str, list[str]] = field(default_factory=dict)
    result: list[str] = field(default_factory=list)
    date_started: datetime | None = None

    @property
    def host(self) -> Player | None:
        return self.players[0] if self.players else None

    def is_host(self, player: Player) -> bool:
        return self.host is player
