"""
Схемы входящих команд и сборка исходящих payload.
game_data передаётся в JSON как base64 и внутри сервера всегда bytes.
"""
import base64
import binascii
from typing import Any

from pydantic import BaseModel, StrictInt, field_validator

from .config import get_config
from .registry import Session


def encode_game_data(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def decode_game_data(value: Any) -> bytes:
    if value is None:
        return b""
    if not isinstance(value, str):
        raise ValueError("game_data must be a base64 string")
    try:
        return base64.b64decode(value, validate=True)
    except binascii.Error as e:
        raise ValueError(f"game_data is not valid base64: {e}") from e


class _GameDataCommand(BaseModel):
    game_data: bytes = b""

    @field_validator("game_data", mode="before")
    @classmethod
    def _decode(cls, v: Any) -> bytes:
        return decode_game_data(v)


def _check_player_name(v: str) -> str:
    v = v.strip()
    if not v:
        raise ValueError("player_name must not be empty")
    limit = get_config().max_name_length
    if len(v) > limit:
        raise ValueError(f"player_name is longer than {limit} characters")
    return v


class CreateGameCommand(_GameDataCommand):
    player_name: str
    difficulty: StrictInt

    normalize_player_name = field_validator("player_name")(_check_player_name)


class JoinGameCommand(BaseModel):
    game_id: str
    player_name: str

    normalize_player_name = field_validator("player_name")(_check_player_name)


class TurnCommand(_GameDataCommand):
    """move и end_turn: только снимок игры."""


def game_summary_payload(s: Session) -> dict[str, Any]:
    """Запись лобби: {id, name, created, difficulty}."""
    return {
        "id": s.code,
        "name": s.name,
        "created": s.created_at.isoformat(),
        "difficulty": s.difficulty,
    }
