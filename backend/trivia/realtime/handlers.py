from __future__ import annotations

import json
import logging
from threading import RLock
from typing import Any

from flask import current_app, request
from flask_socketio import SocketIO

from ..game.engine import RoundEngine
from ..game.models import Player, Room
from ..game.players import PlayerRegistry
from ..game.rooms import RoomStore
from ..utils.ip import get_client_ip
from .events import CLIENT_INTENTS, ErrorCode, Intent, Notice, parse_intent

log = logging.getLogger(__name__)


class Coordinator:
    """Maps client intents onto the registry, room store and round engine.

    Every intent and every pacing callback runs under ``lock``, one at a time.
    Intents from a connection that has not identified are ignored.
    """

    def __init__(self, players: PlayerRegistry, rooms: RoomStore, engine: RoundEngine, lock: RLock) -> None:
        self.players = players
        self.rooms = rooms
        self.engine = engine
        self.lock = lock

    def dispatch(self, sid: str, intent: Intent, data: Any = None) -> None:
        payload = data if isinstance(data, dict) else {}

        with self.lock:
            match intent:
                case Intent.IDENTIFY:
                    self.identify(sid, payload)
                case Intent.HOST_LOBBY:
                    self.host_lobby(sid)
                case Intent.JOIN_ROOM:
                    self.join_room(sid, payload)
                case Intent.PLAY:
                    self.play(sid)
                case Intent.SEND_MSG:
                    self.send_msg(sid, payload)
                case Intent.SET_NAME:
                    self.set_name(sid, payload)
                case Intent.LEAVE_LOBBY:
                    self.leave_lobby(sid)
                case Intent.ANSWER:
                    self.answer(sid, payload)
                case Intent.DISCONNECT:
                    self.disconnect(sid)

    def _player_room(self, sid: str) -> tuple[Player | None, Room | None]:
        player = self.players.by_sid(sid)
        if player is None:
            return None, None
        return player, self.rooms.get(player.room)

    def _error(self, player: Player, notice: Notice, code: ErrorCode) -> None:
        self.engine.send(player, notice, {"error": code.value})

    # -- intents ---------------------------------------------------------

    def identify(self, sid: str, payload: dict) -> None:
        pid = str(payload.get("pid") or "").strip()
        if not pid:
            return

        # The same connection re-identifying as someone else leaves the old identity behind.
        previous = self.players.by_sid(sid)
        if previous is not None and previous.pid != pid:
            self.disconnect(sid)

        player, reconnected = self.players.identify(pid, sid)
        if not reconnected or not player.room:
            return

        room = self.rooms.get(player.room)
        if room is None:
            player.room = None
            return

        self.engine.send(player, Notice.RECONNECTED, self.engine.reconnect_snapshot(room, pid))
        self.engine.broadcast_player_list(room)

    def host_lobby(self, sid: str) -> None:
        player = self.players.by_sid(sid)
        if player is None:
            return

        if player.room:
            self._error(player, Notice.HOST_ERROR, ErrorCode.ALREADY_IN_ROOM)
            return

        code = self.rooms.generate_code()
        room = self.rooms.create(code, player)

        self.engine.send(player, Notice.HOSTED, {"room": code})
        self.engine.broadcast_player_list(room)
        log.info("player %s hosted room %s", player.pid, code)

    def join_room(self, sid: str, payload: dict) -> None:
        player = self.players.by_sid(sid)
        if player is None:
            return

        if player.room:
            self._error(player, Notice.JOIN_ERROR, ErrorCode.ALREADY_IN_ROOM)
            return

        code = str(payload.get("room") or "").strip().upper()
        room = self.rooms.get(code)
        if room is None:
            self._error(player, Notice.JOIN_ERROR, ErrorCode.ROOM_NOT_FOUND)
            return

        if room.lobby_state == "playing":
            self._error(player, Notice.JOIN_ERROR, ErrorCode.ROOM_PLAYING)
            return

        self.rooms.add_player(room, player)
        self.engine.broadcast_player_list(room)
        log.info("player %s joined room %s", player.pid, code)

    def play(self, sid: str) -> None:
        player, room = self._player_room(sid)
        if player is None or room is None:
            return

        if not room.is_host(player):
            self._error(player, Notice.PLAY_ERROR, ErrorCode.NOT_HOST)
            return

        if room.lobby_state == "playing":
            log.debug("room %s already playing, PLAY ignored", room.code)
            return

        self.engine.start_game(room)

    def send_msg(self, sid: str, payload: dict) -> None:
        player, room = self._player_room(sid)
        if player is None or room is None:
            return

        message = {"from": player.pid, "name": player.name, "payload": payload.get("payload")}
        for p in room.players:
            if p is not player:
                self.engine.send(p, Notice.RECV_MSG, message)

    def set_name(self, sid: str, payload: dict) -> None:
        player, room = self._player_room(sid)
        if player is None:
            return

        raw = payload.get("name")
        self.players.set_name(player.pid, raw if isinstance(raw, str) else "")

        if room is not None:
            self.engine.broadcast_player_list(room)

    def leave_lobby(self, sid: str) -> None:
        player, room = self._player_room(sid)
        if player is None or room is None:
            return

        if room.lobby_state == "playing":
            self._error(player, Notice.LEAVE_ERROR, ErrorCode.CANNOT_LEAVE_DURING_GAME)
            return

        was_host, destroyed = self.rooms.remove_player(room, player)
        self.engine.send(player, Notice.LEFT_ROOM)
        log.info("player %s left room %s", player.pid, room.code)

        if destroyed:
            return

        if was_host:
            self.engine.send(room.players[0], Notice.HOST_TRANSFERRED)
            log.info("host of room %s is now %s", room.code, room.players[0].pid)

        self.engine.broadcast_player_list(room)

    def answer(self, sid: str, payload: dict) -> None:
        player, room = self._player_room(sid)
        if player is None or room is None or not room.round_active:
            return

        if self.engine.record_answer(room, player, payload.get("choice")):
            self.engine.check_barrier(room)

    def disconnect(self, sid: str) -> None:
        player = self.players.by_sid(sid)
        if player is None:
            return

        if not self.players.mark_inactive(player.pid, sid):
            return

        room = self.rooms.get(player.room)
        if room is None:
            return
        log.info("player %s disconnected from room %s", player.pid, room.code)

        if room.lobby_state == "open" and not any(p.active for p in room.players):
            self.rooms.destroy(room.code)
            return

        self.engine.broadcast_player_list(room)
        self.engine.check_barrier(room)


def _parse_envelope(data: Any) -> dict | None:
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except ValueError:
            return None
    if not isinstance(data, dict):
        return None
    return data


def register_socketio_handlers(socketio: SocketIO, coordinator: Coordinator) -> None:
    @socketio.on("connect")
    def on_connect(auth=None):
        trust = current_app.config.get("TRUST_PROXY_HEADERS", False)
        log.debug("client %s connected from %s", request.sid, get_client_ip(request, trust))

    def _bind(intent: Intent):
        def _handler(data=None):
            coordinator.dispatch(request.sid, intent, data)

        _handler.__name__ = f"on_{intent.value.lower()}"
        return _handler

    for intent in CLIENT_INTENTS:
        socketio.on_event(intent.value, _bind(intent))

    # Plain envelopes: {"type": "JOIN_ROOM", "room": "ABCD"}
    @socketio.on("message")
    def on_message(data=None):
        envelope = _parse_envelope(data)
        if envelope is None:
            return

        intent = parse_intent(envelope.get("type"))
        if intent is None:
            log.debug("unknown message type from %s dropped", request.sid)
            return

        coordinator.dispatch(request.sid, intent, envelope)

    @socketio.on("disconnect")
    def on_disconnect(reason=None):
        coordinator.dispatch(request.sid, Intent.DISCONNECT)
