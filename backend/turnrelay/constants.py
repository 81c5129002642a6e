"""Роли, коды ошибок и типы сообщений протокола."""
import string
from enum import StrEnum

CODE_ALPHABET = string.ascii_lowercase + string.digits
MAX_CODE_ATTEMPTS = 100


class Role(StrEnum):
    INITIATOR = "initiator"
    JOINER = "joiner"
    NONE = "none"


class ErrorCode(StrEnum):
    NOT_FOUND = "not_found"
    NAME_COLLISION = "name_collision"
    FORBIDDEN = "forbidden"
    BAD_REQUEST = "bad_request"
    UNAVAILABLE = "unavailable"


# Входящие команды
LIST_GAMES = "list_games"
CREATE_GAME = "create_game"
JOIN_GAME = "join_game"
MOVE = "move"
END_TURN = "end_turn"

# Исходящие сообщения
RESPONSE = "response"
GAME_STARTED = "game_started"
PLAY_YOUR_TURN = "play_your_turn"
GAME_ENDED = "game_ended"
