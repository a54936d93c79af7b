from __future__ import annotations

from enum import Enum


class Intent(str, Enum):
    """Inbound client events."""

    IDENTIFY = "IDENTIFY"
    HOST_LOBBY = "HOST_LOBBY"
    JOIN_ROOM = "JOIN_ROOM"
    PLAY = "PLAY"
    SEND_MSG = "SEND_MSG"
    SET_NAME = "SET_NAME"
    LEAVE_LOBBY = "LEAVE_LOBBY"
    ANSWER = "ANSWER"
    DISCONNECT = "DISCONNECT"


class Notice(str, Enum):
    """Outbound server events."""

    HOSTED = "HOSTED"
    HOST_ERROR = "HOST_ERROR"
    JOIN_ERROR = "JOIN_ERROR"
    PLAY_ERROR = "PLAY_ERROR"
    LEAVE_ERROR = "LEAVE_ERROR"
    PLAYER_LIST = "PLAYER_LIST"
    LEFT_ROOM = "LEFT_ROOM"
    HOST_TRANSFERRED = "HOST_TRANSFERRED"
    PLAYING = "PLAYING"
    ROUND_START = "ROUND_START"
    LEADERBOARD_UPDATE = "LEADERBOARD_UPDATE"
    GAME_OVER = "GAME_OVER"
    RECONNECTED = "RECONNECTED"
    RECV_MSG = "RECV_MSG"


class ErrorCode(str, Enum):
    ALREADY_IN_ROOM = "ALREADY_IN_ROOM"
    ROOM_NOT_FOUND = "ROOM_NOT_FOUND"
    ROOM_PLAYING = "ROOM_PLAYING"
    NOT_HOST = "NOT_HOST"
    CANNOT_LEAVE_DURING_GAME = "CANNOT_LEAVE_DURING_GAME"


# Intents a client may send; DISCONNECT only comes from the transport.
CLIENT_INTENTS = tuple(i for i in Intent if i is not Intent.DISCONNECT)


def parse_intent(raw) -> Intent | None:
    if raw is None:
        return None
    try:
        intent = Intent(str(raw).strip().upper())
    except ValueError:
        return None
    if intent is Intent.DISCONNECT:
        return None
    return intent
