"""
Менеджер WebSocket: подключения по connection_id, исходящие очереди.

У каждого соединения своя очередь и задача-отправитель. Ответы и
уведомления ставятся в очередь синхронно, в том же шаге, что и изменение
состояния, поэтому клиент получает их в порядке изменений.
"""
import asyncio
import logging
import uuid
from typing import Any

from fastapi import WebSocket

from .constants import PLAY_YOUR_TURN
from .models import encode_game_data
from .relay import Push

logger = logging.getLogger(__name__)


class _Outbox:
    def __init__(self, connection_id: str, ws: WebSocket):
        self.queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue()
        self.sender = asyncio.create_task(self._run(connection_id, ws))

    async def _run(self, connection_id: str, ws: WebSocket) -> None:
        while True:
            payload = await self.queue.get()
            try:
                await ws.send_json(payload)
            except Exception as e:
                # Соединение уже закрывается — его disconnect всё уберёт
                logger.warning("send_to %s: %s", connection_id[:8], e)


class WSManager:
    def __init__(self):
        self._by_id: dict[str, _Outbox] = {}

    def connect(self, ws: WebSocket) -> str:
        connection_id = uuid.uuid4().hex
        self._by_id[connection_id] = _Outbox(connection_id, ws)
        return connection_id

    def disconnect(self, connection_id: str) -> None:
        outbox = self._by_id.pop(connection_id, None)
        if outbox is not None:
            outbox.sender.cancel()

    def send_to(self, connection_id: str, payload: dict[str, Any]) -> bool:
        outbox = self._by_id.get(connection_id)
        if not outbox:
            return False
        outbox.queue.put_nowait(payload)
        return True

    def deliver(self, pushes: list[Push]) -> None:
        for push in pushes:
            payload: dict[str, Any] = {"type": push.type}
            if push.type == PLAY_YOUR_TURN:
                payload["game_data"] = encode_game_data(push.game_data or b"")
            logger.info(">%s client=%s game=%s role=%s", push.type, push.connection_id[:8], push.session_code, push.role)
            self.send_to(push.connection_id, payload)
