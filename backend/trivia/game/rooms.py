from __future__ import annotations

import logging
import random
import string

from .models import Player, Room

log = logging.getLogger(__name__)

CODE_ALPHABET = string.ascii_uppercase + string.digits
CODE_LENGTH = 4


class RoomStore:
    def __init__(self) -> None:
        self._rooms: dict[str, Room] = {}

    def generate_code(self) -> str:
        code = "".join(random.choices(CODE_ALPHABET, k=CODE_LENGTH))
        while code in self._rooms:
            code = "".join(random.choices(CODE_ALPHABET, k=CODE_LENGTH))
        return code

    def create(self, code: str, host: Player) -> Room:
        room = Room(code=code, players=[host])
        self._rooms[code] = room
        host.room = code
        return room

    def get(self, code: str | None) -> Room | None:
        if not code:
            return None
        return self._rooms.get(code)

    def list(self) -> list[Room]:
        return list(self._rooms.values())

    def __contains__(self, code: str) -> bool:
        return code in self._rooms

    def __len__(self) -> int:
        return len(self._rooms)

    def is_live(self, room: Room) -> bool:
        return self._rooms.get(room.code) is room

    def add_player(self, room: Room, player: Player) -> None:
        room.players.append(player)
        player.room = room.code

    def remove_player(self, room: Room, player: Player) -> tuple[bool, bool]:
        """Returns (was_host, destroyed).

        When the host leaves the next member becomes players[0] and with it
        the host; an emptied room is deleted from the store.
        """
        try:
            idx = room.players.index(player)
        except ValueError:
            return False, False

        del room.players[idx]
        if player.room == room.code:
            player.room = None

        if not room.players:
            self.destroy(room.code)
            return idx == 0, True

        return idx == 0, False

    def destroy(self, code: str) -> Room | None:
        room = self._rooms.pop(code, None)
        if room is None:
            return None
        for p in room.players:
            if p.room == code:
                p.room = None
        log.info("room %s closed", code)
        return room


def player_list(room: Room) -> list[dict]:
    return [
        {"pid": p.pid, "name": p.name, "active": p.active, "isHost": idx == 0}
        for idx, p in enumerate(room.players)
    ]


def settled_results(room: Room) -> list[str]:
    # The expected answer of a running round stays hidden until it closes.
    return list(room.result[: room.round])


def room_public_state(room: Room) -> dict:
    return {
        "code": room.code,
        "lobbyState": room.lobby_state,
        "round": room.round,
        "roundActive": room.round_active,
        "players": player_list(room),
        "scores": dict(room.scores),
        "result": settled_results(room),
        "dateStarted": room.date_started.isoformat() if room.date_started else None,
    }
