import os
import tempfile

# 앱 모듈을 임포트하기 전에 테스트용 설정을 주입
_TEST_DB_DIR = tempfile.mkdtemp(prefix="location_hub_test_")
os.environ["DATABASE_URL"] = f"sqlite+aiosqlite:///{_TEST_DB_DIR}/test.db"
os.environ["LOG_TO_FILE"] = "false"
os.environ["STATIC_DIR"] = ""

from typing import AsyncGenerator, Dict, List, Optional

import pytest
import pytest_asyncio
from httpx import AsyncClient, ASGITransport
from starlette.websockets import WebSocketState

from location_hub.database.session import Base, engine
from location_hub.main import app
from location_hub.schemas.location import LocationEvent
from location_hub.schemas.user import UserSummary
from location_hub.websockets.connection_manager import ConnectionManager
from location_hub.websockets.handlers import WebSocketMessageHandler


class FakeWebSocket:
    """send_json 호출을 기록하는 가짜 WebSocket"""

    def __init__(self, fail_on_send: bool = False):
        self.sent: List[dict] = []
        self.fail_on_send = fail_on_send
        self.application_state = WebSocketState.CONNECTED
        self.client_state = WebSocketState.CONNECTED

    async def send_json(self, data: dict):
        if self.fail_on_send:
            raise RuntimeError("connection reset")
        self.sent.append(data)

    def close(self):
        self.application_state = WebSocketState.DISCONNECTED
        self.client_state = WebSocketState.DISCONNECTED

    def of_type(self, message_type: str) -> List[dict]:
        return [message for message in self.sent if message["type"] == message_type]


class RecordingWriter:
    """제출된 위치를 순서대로 기록하는 가짜 저장기"""

    def __init__(self):
        self.events: List[LocationEvent] = []

    def submit(self, event: LocationEvent) -> bool:
        self.events.append(event)
        return True


KNOWN_USERS: Dict[str, UserSummary] = {
    "tok-valid": UserSummary(id="u1", name="Ana"),
    "tok-bob": UserSummary(id="u2", name="Bob"),
    "tok-carla": UserSummary(id="u3", name="Carla"),
}


async def fake_identity_lookup(token: Optional[str]) -> Optional[UserSummary]:
    return KNOWN_USERS.get(token)


@pytest.fixture
def connection_manager() -> ConnectionManager:
    return ConnectionManager()


@pytest.fixture
def recording_writer() -> RecordingWriter:
    return RecordingWriter()


@pytest.fixture
def handler(connection_manager, recording_writer) -> WebSocketMessageHandler:
    return WebSocketMessageHandler(
        connection_manager=connection_manager,
        identity_lookup=fake_identity_lookup,
        writer=recording_writer,
        default_room="sala1",
    )


@pytest_asyncio.fixture
async def database():
    """테스트용 테이블 초기화"""
    from location_hub import models  # noqa: F401

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)
    yield
    await engine.dispose()


@pytest_asyncio.fixture
async def client(database) -> AsyncGenerator[AsyncClient, None]:
    """테스트용 비동기 HTTP 클라이언트"""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client


@pytest.fixture
def make_connection(connection_manager):
    """가짜 WebSocket으로 연결을 등록하는 팩토리"""
    async def _make(fail_on_send: bool = False):
        return await connection_manager.register(FakeWebSocket(fail_on_send=fail_on_send))
    return _make
