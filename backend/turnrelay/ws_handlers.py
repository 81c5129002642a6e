"""
Обработка сообщений WebSocket: list_games, create_game, join_game, move, end_turn.
Ответ и уведомления ставятся в очереди соединений сразу после команды,
без await между изменением состояния и постановкой в очередь.
При закрытии соединения — очистка сессии и game_ended сопернику.
"""
import json
import logging
from typing import Any

from fastapi import WebSocket
from pydantic import ValidationError
from starlette.websockets import WebSocketDisconnect

from .constants import (
    CREATE_GAME,
    END_TURN,
    JOIN_GAME,
    LIST_GAMES,
    MOVE,
    RESPONSE,
)
from .errors import BadRequestError
from .models import (
    CreateGameCommand,
    JoinGameCommand,
    TurnCommand,
    game_summary_payload,
)
from .relay import Reply, Result, TurnRelay
from .ws_manager import WSManager

logger = logging.getLogger(__name__)


def _bad_request(message: str) -> Reply:
    return Reply(Result.failure(BadRequestError(message)))


def dispatch(relay: TurnRelay, connection_id: str, data: dict[str, Any]) -> tuple[Any, Reply | None]:
    """
    Выполняет одну команду. Возвращает (payload ответа, Reply с уведомлениями).
    Reply равен None для команд без уведомлений (list_games).
    """
    t = data.get("type")
    try:
        if t == LIST_GAMES:
            return [game_summary_payload(g) for g in relay.list_games()], None
        if t == CREATE_GAME:
            cmd = CreateGameCommand.model_validate(data)
            reply = relay.create_game(connection_id, cmd.player_name, cmd.difficulty, cmd.game_data)
            if reply.result.ok:
                return game_summary_payload(reply.result.session), reply
            return reply.result.payload(), reply
        if t == JOIN_GAME:
            cmd = JoinGameCommand.model_validate(data)
            reply = relay.join_game(connection_id, cmd.game_id, cmd.player_name)
            return reply.result.payload(), reply
        if t == MOVE:
            cmd = TurnCommand.model_validate(data)
            reply = relay.move(connection_id, cmd.game_data)
            return reply.result.payload(), reply
        if t == END_TURN:
            cmd = TurnCommand.model_validate(data)
            reply = relay.end_turn(connection_id, cmd.game_data)
            return reply.result.payload(), reply
    except ValidationError as e:
        logger.info("WS: invalid %s from %s: %s", t, connection_id[:8], e.errors(include_url=False))
        reply = _bad_request(f"invalid {t} command")
        return reply.result.payload(), reply
    logger.warning("WS: unknown message type %r from %s", t, connection_id[:8])
    reply = _bad_request(f"unknown message type {t!r}")
    return reply.result.payload(), reply


def handle_ws_message(relay: TurnRelay, manager: WSManager, raw: str, connection_id: str) -> None:
    """
    Обрабатывает одно сообщение клиента. Синхронная: команда, ответ и
    уведомления проходят без переключения на другие соединения.
    """
    try:
        data = json.loads(raw)
    except (ValueError, RecursionError) as e:
        logger.warning("WS: invalid JSON from %s: %s", connection_id[:8], e)
        return
    if not isinstance(data, dict):
        logger.warning("WS: expected an object from %s, got %s", connection_id[:8], type(data).__name__)
        return
    payload, reply = dispatch(relay, connection_id, data)
    manager.send_to(
        connection_id,
        {"type": RESPONSE, "request_id": data.get("request_id"), "payload": payload},
    )
    if reply is not None:
        manager.deliver(reply.pushes)


async def ws_loop(ws: WebSocket, relay: TurnRelay, manager: WSManager) -> None:
    """Приём соединения и цикл команд до отключения клиента."""
    connection_id = None
    try:
        await ws.accept()
        connection_id = manager.connect(ws)
        relay.open(connection_id)
        while True:
            message = await ws.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(message.get("code", 1000), message.get("reason"))
            text = message.get("text")
            if text is None:
                logger.warning("WS: ignoring non-text frame from %s", connection_id[:8])
                continue
            handle_ws_message(relay, manager, text, connection_id)
    except WebSocketDisconnect as e:
        logger.info("WS: client disconnected code=%s reason=%s connection=%s", e.code, e.reason or "", connection_id)
    except Exception as e:
        logger.exception("WS: error connection=%s: %s", connection_id, e)
    finally:
        if connection_id:
            manager.disconnect(connection_id)
            manager.deliver(relay.disconnect(connection_id))
