import time
import uuid

import pytest
from fastapi import status
from fastapi.testclient import TestClient

from location_hub.core.config import settings
from location_hub.main import app

WS_PATH = settings.websocket_path


def register(client: TestClient, name: str) -> dict:
    response = client.post("/register", json={"name": name})
    assert response.status_code == status.HTTP_200_OK
    return response.json()


def wait_for_history(client: TestClient, token: str, expected: int, timeout: float = 3.0) -> list:
    """저장은 비동기이므로 기대 건수가 될 때까지 이력을 조회"""
    deadline = time.monotonic() + timeout
    while True:
        locations = client.get("/history", params={"token": token}).json()["locations"]
        if len(locations) >= expected or time.monotonic() > deadline:
            return locations
        time.sleep(0.05)


def roster_ids(message: dict) -> set:
    assert message["type"] == "meta"
    return {user["id"] for user in message["users"]}


@pytest.fixture
def client():
    with TestClient(app) as client:
        yield client


@pytest.fixture
def room() -> str:
    return f"room-{uuid.uuid4().hex[:8]}"


class TestFullLocationFlow:
    """전체 위치 공유 플로우 통합 테스트"""

    def test_auth_welcome_and_roster(self, client: TestClient, room: str):
        ana = register(client, "Ana")

        with client.websocket_connect(WS_PATH) as ws:
            ws.send_json({"type": "auth", "token": ana["token"], "room": room})

            assert ws.receive_json() == {"type": "welcome", "clientId": ana["id"]}
            assert ws.receive_json() == {"type": "meta", "users": [{"id": ana["id"], "name": "Ana"}]}

    def test_invalid_token_then_retry(self, client: TestClient, room: str):
        ana = register(client, "Ana")

        with client.websocket_connect(WS_PATH) as ws:
            ws.send_json({"type": "auth", "token": "tok-unknown", "room": room})
            assert ws.receive_json() == {"type": "error", "error": "invalid token"}

            # 연결은 유지되고 재시도가 가능해야 함
            ws.send_json({"type": "auth", "token": ana["token"], "room": room})
            assert ws.receive_json()["type"] == "welcome"

    def test_location_requires_auth(self, client: TestClient):
        with client.websocket_connect(WS_PATH) as ws:
            ws.send_json({"type": "location", "lat": 1, "lng": 2})
            assert ws.receive_json() == {"type": "error", "error": "not authenticated"}

    def test_garbage_frames_keep_connection_open(self, client: TestClient, room: str):
        ana = register(client, "Ana")

        with client.websocket_connect(WS_PATH) as ws:
            ws.send_text("this is not json")
            ws.send_json({"type": "dance"})
            ws.send_json({"type": "auth", "token": ana["token"], "room": room})

            assert ws.receive_json()["type"] == "welcome"

    def test_broadcast_isolation_persistence_and_departure(self, client: TestClient, room: str):
        ana = register(client, "Ana")
        bob = register(client, "Bob")
        carla = register(client, "Carla")
        other_room = f"{room}-other"

        with client.websocket_connect(WS_PATH) as ws_ana:
            ws_ana.send_json({"type": "auth", "token": ana["token"], "room": room})
            assert ws_ana.receive_json()["type"] == "welcome"
            assert roster_ids(ws_ana.receive_json()) == {ana["id"]}

            with client.websocket_connect(WS_PATH) as ws_carla:
                ws_carla.send_json({"type": "auth", "token": carla["token"], "room": other_room})
                assert ws_carla.receive_json()["type"] == "welcome"
                assert roster_ids(ws_carla.receive_json()) == {carla["id"]}

                with client.websocket_connect(WS_PATH) as ws_bob:
                    ws_bob.send_json({"type": "auth", "token": bob["token"], "room": room})
                    assert ws_bob.receive_json() == {"type": "welcome", "clientId": bob["id"]}
                    assert roster_ids(ws_bob.receive_json()) == {ana["id"], bob["id"]}
                    assert roster_ids(ws_ana.receive_json()) == {ana["id"], bob["id"]}

                    # 같은 방의 모든 멤버(본인 포함)가 위치를 받음
                    ws_ana.send_json({"type": "location", "lat": 10.5, "lng": 20.25, "ts": 1000, "accuracy": 5})
                    expected = {
                        "type": "location", "clientId": ana["id"], "name": "Ana",
                        "lat": 10.5, "lng": 20.25, "ts": 1000, "accuracy": 5,
                    }
                    assert ws_ana.receive_json() == expected
                    assert ws_bob.receive_json() == expected

                    # 다른 방의 위치는 전달되지 않음
                    ws_carla.send_json({"type": "location", "lat": -1, "lng": -1, "ts": 1500})
                    assert ws_carla.receive_json()["clientId"] == carla["id"]

                    ws_ana.send_json({"type": "location", "lat": 11, "lng": 21, "ts": 2000})
                    assert ws_ana.receive_json()["ts"] == 2000
                    assert ws_bob.receive_json()["ts"] == 2000

                    room_status = client.get(f"/rooms/{room}", params={"token": ana["token"]}).json()
                    assert room_status["online_count"] == 2

                # Bob 퇴장 후 남은 멤버에게 참가자 목록 갱신
                assert roster_ids(ws_ana.receive_json()) == {ana["id"]}

        locations = wait_for_history(client, ana["token"], expected=2)
        assert [(loc["lat"], loc["lng"], loc["accuracy"], loc["ts"]) for loc in locations] == [
            (10.5, 20.25, 5, 1000),
            (11, 21, 0, 2000),
        ]
        assert wait_for_history(client, bob["token"], expected=0) == []
