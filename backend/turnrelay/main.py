"""
Turn relay API и WebSocket.
"""
import logging

from fastapi import FastAPI, Request, WebSocket
from fastapi.middleware.cors import CORSMiddleware

from .config import get_config
from .connections import ConnectionTable
from .models import game_summary_payload
from .registry import SessionRegistry
from .relay import TurnRelay
from .ws_handlers import ws_loop
from .ws_manager import WSManager

config = get_config()

logging.basicConfig(
    level=config.log_level,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def create_app() -> FastAPI:
    app = FastAPI(title="Turn Relay API")
    # Реестр и соединения принадлежат приложению, не модулю
    app.state.relay = TurnRelay(SessionRegistry(code_length=config.code_length), ConnectionTable())
    app.state.manager = WSManager()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health():
        return {"status": "ok"}

    @app.get("/api/games")
    def list_games(request: Request):
        return [game_summary_payload(g) for g in request.app.state.relay.list_games()]

    @app.websocket("/ws")
    async def websocket_endpoint(ws: WebSocket):
        logger.info("WS: connection attempt from %s", ws.client)
        await ws_loop(ws, ws.app.state.relay, ws.app.state.manager)

    return app


app = create_app()
