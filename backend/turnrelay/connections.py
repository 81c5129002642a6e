"""Состояние соединения (код сессии + роль), хранится отдельно от WebSocket."""
from dataclasses import dataclass

from .constants import Role


@dataclass
class ConnectionState:
    session_code: str | None = None
    role: Role = Role.NONE

    @property
    def in_lobby(self) -> bool:
        return self.session_code is None

    def bind(self, session_code: str, role: Role) -> None:
        self.session_code = session_code
        self.role = role

    def reset(self) -> None:
        """Вернуть соединение в лобби."""
        self.session_code = None
        self.role = Role.NONE


class ConnectionTable:
    def __init__(self):
        self._states: dict[str, ConnectionState] = {}

    def open(self, connection_id: str) -> ConnectionState:
        state = ConnectionState()
        self._states[connection_id] = state
        return state

    def get(self, connection_id: str) -> ConnectionState:
        # Неизвестное соединение попадает в лобби
        return self._states.setdefault(connection_id, ConnectionState())

    def close(self, connection_id: str) -> ConnectionState | None:
        return self._states.pop(connection_id, None)

    def reset(self, connection_id: str) -> None:
        state = self._states.get(connection_id)
        if state is not None:
            state.reset()
