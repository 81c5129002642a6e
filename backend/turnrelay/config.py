"""Конфигурация приложения."""
import os
from functools import lru_cache

MIN_CODE_LENGTH = 8


@lru_cache
def get_config():
    debug = os.environ.get("DEBUG", "0").lower() in ("1", "true", "yes")
    return type("Config", (), {
        "debug": debug,
        "log_level": os.environ.get("LOG_LEVEL", "DEBUG" if debug else "INFO").upper(),
        "allowed_origins": os.environ.get("ALLOWED_ORIGINS", "*").split(","),
        "code_length": max(MIN_CODE_LENGTH, int(os.environ.get("GAME_CODE_LENGTH", MIN_CODE_LENGTH))),
        "max_name_length": int(os.environ.get("MAX_PLAYER_NAME_LENGTH", "32")),
    })()
