from __future__ import annotations

import logging
import random
from datetime import datetime
from typing import Any, Callable

from ..realtime.events import Notice
from .history import HistoryStore, format_date
from .models import CHOICES, Player, Room
from .rooms import RoomStore, player_list, settled_results

log = logging.getLogger(__name__)

Emit = Callable[[str, str, dict], None]
Schedule = Callable[..., None]


def random_choice() -> str:
    return random.choice(CHOICES)


def compute_leaderboard(room: Room) -> list[dict]:
    board = [
        {"pid": p.pid, "name": p.name, "score": room.scores.get(p.pid, 0)}
        for p in room.players
    ]
    # sorted() is stable, ties keep member order
    return sorted(board, key=lambda e: e["score"], reverse=True)


class RoundEngine:
    """Round lifecycle for playing rooms.

    open -> round active -> settling -> round active ... -> game over

    A round closes only through the barrier (every active member answered),
    never on a clock. The pacing delay between rounds is the only timer; its
    callback re-checks that the room is still live and where it was left
    before touching it.
    """

    def __init__(
        self,
        rooms: RoomStore,
        history: HistoryStore,
        emit: Emit,
        schedule: Schedule,
        max_rounds: int = 10,
        pacing_delay: float = 5.0,
    ) -> None:
        self.rooms = rooms
        self.history = history
        self._emit = emit
        self._schedule = schedule
        self.max_rounds = max_rounds
        self.pacing_delay = pacing_delay

    # -- notifications ---------------------------------------------------

    def send(self, player: Player, notice: Notice, payload: dict[str, Any] | None = None) -> None:
        # Offline players simply miss the message.
        if not player.active or not player.sid:
            return
        self._emit(player.sid, notice.value, payload or {})

    def broadcast(self, room: Room, notice: Notice, payload: dict[str, Any] | None = None) -> None:
        for p in room.players:
            self.send(p, notice, payload)

    def broadcast_player_list(self, room: Room) -> None:
        self.broadcast(
            room,
            Notice.PLAYER_LIST,
            {"players": player_list(room), "room": room.code, "lobbyState": room.lobby_state},
        )

    # -- answers ---------------------------------------------------------

    @staticmethod
    def answer_for(room: Room, pid: str) -> str | None:
        answers = room.answers.get(pid, [])
        if len(answers) > room.round:
            return answers[room.round]
        return None

    def all_answered(self, room: Room) -> bool:
        return all(self.answer_for(room, p.pid) is not None for p in room.players if p.active)

    def record_answer(self, room: Room, player: Player, choice: Any) -> bool:
        if not room.round_active:
            return False
        if choice not in CHOICES:
            return False
        if player not in room.players:
            return False
        if self.answer_for(room, player.pid) is not None:
            log.debug("room %s: duplicate answer from %s ignored", room.code, player.pid)
            return False

        room.answers.setdefault(player.pid, []).append(choice)
        return True

    def check_barrier(self, room: Room) -> bool:
        if room.round_active and self.all_answered(room):
            self.end_round(room)
            return True
        return False

    # -- lifecycle -------------------------------------------------------

    def start_game(self, room: Room) -> None:
        room.lobby_state = "playing"
        room.date_started = datetime.now()
        room.round = 0
        room.round_active = False
        room.result = []
        room.scores = {}
        room.answers = {}

        for p in room.players:
            room.scores[p.pid] = 0
            room.answers[p.pid] = []
            self.send(p, Notice.PLAYING)

        log.info("room %s is now playing with %d players", room.code, len(room.players))
        self.start_round(room)

    def start_round(self, room: Room) -> None:
        if room.round_active:
            return

        room.round_active = True
        room.result.append(random_choice())
        self.broadcast(room, Notice.ROUND_START, {"round": room.round, "choices": list(CHOICES)})

        # Nobody online to answer: the barrier already holds.
        self.check_barrier(room)

    def end_round(self, room: Room) -> None:
        if not room.round_active:
            return
        room.round_active = False

        closed = room.round
        expected = room.result[closed]

        for p in room.players:
            answers = room.answers.setdefault(p.pid, [])
            if len(answers) <= closed:
                answers.append(random_choice())
            if answers[closed] == expected:
                room.scores[p.pid] = room.scores.get(p.pid, 0) + 1

        leaderboard = compute_leaderboard(room)
        for p in room.players:
            self.send(
                p,
                Notice.LEADERBOARD_UPDATE,
                {
                    "round": closed,
                    "answers": list(room.answers[p.pid]),
                    "result": list(room.result),
                    "leaderboard": leaderboard,
                },
            )

        room.round += 1
        log.info("room %s: round %d closed, expected %s", room.code, closed, expected)

        if room.round < self.max_rounds:
            self._schedule(self.pacing_delay, self._next_round, room, room.round)
        else:
            self._schedule(self.pacing_delay, self._game_over, room, room.round)

    def end_game(self, room: Room) -> None:
        if not self.rooms.is_live(room):
            return

        leaderboard = compute_leaderboard(room)
        self.broadcast(room, Notice.GAME_OVER, {"leaderboard": leaderboard})

        self.history.append(
            {
                "code": room.code,
                "dateStarted": format_date(room.date_started) if room.date_started else None,
                "dateEnded": format_date(datetime.now()),
                "scores": dict(room.scores),
                "answers": {pid: list(a) for pid, a in room.answers.items()},
                "result": list(room.result),
            }
        )

        log.info("room %s: game over after %d rounds", room.code, room.round)
        self.rooms.destroy(room.code)

    # -- scheduled callbacks ---------------------------------------------

    def _still_expected(self, room: Room, expected_round: int) -> bool:
        if (
            not self.rooms.is_live(room)
            or room.lobby_state != "playing"
            or room.round_active
            or room.round != expected_round
        ):
            log.debug("room %s: stale pacing timer for round %d dropped", room.code, expected_round)
            return False
        return True

    def _next_round(self, room: Room, expected_round: int) -> None:
        if self._still_expected(room, expected_round):
            self.start_round(room)

    def _game_over(self, room: Room, expected_round: int) -> None:
        if self._still_expected(room, expected_round):
            self.end_game(room)

    # -- snapshots -------------------------------------------------------

    def reconnect_snapshot(self, room: Room, pid: str) -> dict:
        return {
            "room": room.code,
            "round": room.round,
            "scores": dict(room.scores),
            "answers": list(room.answers.get(pid, [])),
            "result": settled_results(room),
            "leaderboard": compute_leaderboard(room),
        }
