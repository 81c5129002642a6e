"""
Протокол передачи хода между двумя игроками.

Порядок фиксирован: после join первым ходит присоединившийся (move),
затем создатель (end_turn), и так далее. Содержимое game_data не
проверяется — сервер хранит последний снимок и пересылает его сопернику.

Каждый метод синхронный: чтение, изменение и сбор уведомлений выполняются
без await, поэтому команда атомарна относительно остальных. Уведомления
возвращаются в Reply.pushes; транспорт ставит ответ и уведомления в
очереди соединений в том же синхронном шаге.
"""
import logging
from dataclasses import dataclass, field
from typing import Any

from .connections import ConnectionState, ConnectionTable
from .constants import GAME_ENDED, GAME_STARTED, PLAY_YOUR_TURN, ErrorCode, Role
from .errors import ForbiddenError, NotFoundError, RelayError
from .registry import Session, SessionRegistry

logger = logging.getLogger(__name__)


@dataclass
class Result:
    ok: bool
    error: ErrorCode | None = None
    message: str = ""
    session: Session | None = None

    @classmethod
    def success(cls, session: Session | None = None) -> "Result":
        return cls(ok=True, session=session)

    @classmethod
    def failure(cls, exc: RelayError) -> "Result":
        return cls(ok=False, error=exc.code, message=exc.message)

    def payload(self) -> dict[str, Any]:
        if self.ok:
            return {"ok": True}
        return {"ok": False, "error": str(self.error), "message": self.message}


@dataclass
class Push:
    """Уведомление, инициированное сервером."""
    connection_id: str
    type: str
    session_code: str
    role: Role  # роль получателя
    game_data: bytes | None = None


@dataclass
class Reply:
    result: Result
    pushes: list[Push] = field(default_factory=list)


def _tag(connection_id: str, state: ConnectionState) -> str:
    return f"client={connection_id[:8]} game={state.session_code or 'None'} role={state.role}"


class TurnRelay:
    def __init__(self, registry: SessionRegistry, connections: ConnectionTable):
        self.registry = registry
        self.connections = connections

    def open(self, connection_id: str) -> ConnectionState:
        state = self.connections.open(connection_id)
        logger.info("<CONNECT %s: player connected", _tag(connection_id, state))
        return state

    def list_games(self) -> list[Session]:
        games = list(self.registry.joinable())
        logger.info("<LG %d joinable games", len(games))
        return games

    def create_game(self, connection_id: str, player_name: str, difficulty: int, game_data: bytes) -> Reply:
        state = self.connections.get(connection_id)
        try:
            if not state.in_lobby:
                raise ForbiddenError("Sorry, you are already in a game.")
            session = self.registry.create(player_name, difficulty, game_data, connection_id)
        except RelayError as e:
            logger.info("<CG %s: create refused: %s", _tag(connection_id, state), e.code)
            return Reply(Result.failure(e))
        state.bind(session.code, Role.INITIATOR)
        logger.info("<CG %s: created new game %r", _tag(connection_id, state), session.name)
        logger.debug("game %s: %r", session.code, session)
        return Reply(Result.success(session))

    def join_game(self, connection_id: str, code: str, player_name: str) -> Reply:
        state = self.connections.get(connection_id)
        try:
            if not state.in_lobby:
                raise ForbiddenError("Sorry, you are already in a game.")
            session = self.registry.join(code, player_name, connection_id)
        except RelayError as e:
            logger.info("<JG %s: join %s refused: %s", _tag(connection_id, state), code, e.code)
            return Reply(Result.failure(e))
        state.bind(session.code, Role.JOINER)
        logger.info("<JG %s: player joined the game", _tag(connection_id, state))
        # Создателю — игра началась, присоединившемуся — первый ход
        return Reply(
            Result.success(session),
            [
                Push(session.initiator_endpoint, GAME_STARTED, session.code, Role.INITIATOR),
                Push(connection_id, PLAY_YOUR_TURN, session.code, Role.JOINER, session.turn_data),
            ],
        )

    def move(self, connection_id: str, game_data: bytes) -> Reply:
        return self._relay_turn(connection_id, Role.JOINER, game_data, "<M")

    def end_turn(self, connection_id: str, game_data: bytes) -> Reply:
        return self._relay_turn(connection_id, Role.INITIATOR, game_data, "<ET")

    def _relay_turn(self, connection_id: str, role: Role, game_data: bytes, event: str) -> Reply:
        state = self.connections.get(connection_id)
        try:
            session = self._session_for(state, role)
        except RelayError as e:
            logger.info("%s %s: not allowed: %s", event, _tag(connection_id, state), e.message)
            return Reply(Result.failure(e))
        session.turn_data = bytes(game_data)
        session.turn = Role.INITIATOR if role is Role.JOINER else Role.JOINER
        if role is Role.INITIATOR:
            target, target_role = session.joiner_endpoint, Role.JOINER
        else:
            target, target_role = session.initiator_endpoint, Role.INITIATOR
        logger.info("%s %s: received turn data (%d bytes)", event, _tag(connection_id, state), len(game_data))
        return Reply(Result.success(session), [Push(target, PLAY_YOUR_TURN, session.code, target_role, session.turn_data)])

    def _session_for(self, state: ConnectionState, role: Role) -> Session:
        if state.role is not role or state.session_code is None:
            raise ForbiddenError(f"Sorry, only the {role} player may do this, and only inside a game.")
        session = self.registry.get(state.session_code)
        if session is None:
            raise NotFoundError("Sorry, the game could not be found.")
        if session.joiner_endpoint is None:
            raise ForbiddenError("Sorry, the game has not started yet.")
        if session.turn is not role:
            raise ForbiddenError("Sorry, it is not your turn.")
        return session

    def disconnect(self, connection_id: str) -> list[Push]:
        """
        Соединение закрыто. Сопернику — game_ended и возврат в лобби,
        сессия удаляется в любом случае.
        """
        state = self.connections.close(connection_id)
        if state is None or state.session_code is None:
            logger.info("<DISCONNECT client=%s: player disconnected", connection_id[:8])
            return []
        logger.info("<DISCONNECT %s: player disconnected", _tag(connection_id, state))
        code = state.session_code
        pushes = []
        session = self.registry.get(code)
        if session is not None:
            if state.role is Role.INITIATOR:
                opponent, opponent_role = session.joiner_endpoint, Role.JOINER
            else:
                opponent, opponent_role = session.initiator_endpoint, Role.INITIATOR
            if opponent is not None:
                pushes.append(Push(opponent, GAME_ENDED, code, opponent_role))
                self.connections.reset(opponent)
                logger.info(">EG client=%s game=%s: notified opponent of end of game", opponent[:8], code)
        self.registry.remove(code)
        logger.info("<DISCONNECT client=%s: deleted game %s", connection_id[:8], code)
        return pushes
