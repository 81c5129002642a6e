import pytest
from fastapi.testclient import TestClient

from turnrelay.connections import ConnectionTable
from turnrelay.main import create_app
from turnrelay.registry import SessionRegistry
from turnrelay.relay import TurnRelay


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def registry() -> SessionRegistry:
    return SessionRegistry()


@pytest.fixture
def relay(registry: SessionRegistry) -> TurnRelay:
    return TurnRelay(registry, ConnectionTable())


@pytest.fixture
def client() -> TestClient:
    """Свежее приложение на каждый тест: реестр не разделяется между тестами."""
    with TestClient(create_app()) as c:
        yield c
