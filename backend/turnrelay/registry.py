"""
Реестр сессий (in-memory): код сессии -> Session.
Единственный владелец словаря сессий, коды уникальны в пределах реестра.
"""
import logging
import secrets
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Iterator

from .constants import CODE_ALPHABET, MAX_CODE_ATTEMPTS, Role
from .errors import ForbiddenError, NameCollisionError, NotFoundError, RegistryFullError

logger = logging.getLogger(__name__)


@dataclass
class Session:
    code: str
    name: str
    difficulty: int
    initiator_name: str
    initiator_endpoint: str  # id соединения создателя
    turn_data: bytes = b""
    joiner_name: str | None = None
    joiner_endpoint: str | None = None
    turn: Role = Role.NONE  # чей ход; первым ходит присоединившийся
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def joinable(self) -> bool:
        return self.joiner_endpoint is None


def display_name(player_name: str) -> str:
    """Jack -> "Jack's Game", Chris -> "Chris' Game"."""
    if player_name.endswith("s"):
        return player_name + "' Game"
    return player_name + "'s Game"


class SessionRegistry:
    def __init__(self, code_length: int = 8):
        self._code_length = code_length
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, code: object) -> bool:
        return code in self._sessions

    def get(self, code: str) -> Session | None:
        return self._sessions.get(code)

    def joinable(self) -> Iterator[Session]:
        """Сессии без второго игрока."""
        return (s for s in list(self._sessions.values()) if s.joinable)

    def _generate_code(self) -> str:
        for _ in range(MAX_CODE_ATTEMPTS):
            code = "".join(secrets.choice(CODE_ALPHABET) for _ in range(self._code_length))
            if code not in self._sessions:
                return code
        raise RegistryFullError(f"Sorry, no free game code after {MAX_CODE_ATTEMPTS} attempts, try again later.")

    def create(self, initiator_name: str, difficulty: int, initial_data: bytes, endpoint: str) -> Session:
        session = Session(
            code=self._generate_code(),
            name=display_name(initiator_name),
            difficulty=difficulty,
            initiator_name=initiator_name,
            initiator_endpoint=endpoint,
            turn_data=bytes(initial_data),
        )
        self._sessions[session.code] = session
        return session

    def join(self, code: str, joiner_name: str, endpoint: str) -> Session:
        """
        Записать второго игрока в сессию.
        Ничего не меняет, если проверка не прошла.
        """
        session = self._sessions.get(code)
        if session is None:
            raise NotFoundError("Sorry, the game could not be found.")
        if not session.joinable:
            raise ForbiddenError("Sorry, this game already has two players.")
        if session.initiator_name == joiner_name:
            raise NameCollisionError("Sorry, you cannot use the same nickname as your opponent.")
        session.joiner_name = joiner_name
        session.joiner_endpoint = endpoint
        session.turn = Role.JOINER
        return session

    def remove(self, code: str) -> bool:
        """Удалить сессию. Повторный вызов ничего не делает и возвращает False."""
        removed = self._sessions.pop(code, None)
        if removed is None:
            logger.debug("remove: game %s already gone", code)
            return False
        return True
