import asyncio
import json

import pytest

from family100.coordinator import QuizCoordinator
from family100.questions import QuestionCatalog
from family100.security import IdentityStore

ACCOUNTS = {
    "admin": ("admin123", "admin"),
    "host": ("host123", "host"),
    "player1": ("player123", "player"),
    "player2": ("player123", "player"),
}

QUESTIONS = [
    {"question": "Q1", "answers": [{"text": "A", "points": 10}]},
    {
        "question": "Q2",
        "answers": [
            {"text": "B", "points": 30},
            {"text": "C", "points": 20},
            {"text": "D", "points": 5},
        ],
    },
    {"question": "Q3", "answers": [{"text": "E", "points": 15}]},
]


# ---------------------------------------------------------------------------
# Mock WebSocket
# ---------------------------------------------------------------------------

class MockWebSocket:
    """Lightweight mock for fastapi.WebSocket."""

    def __init__(self, fail_sends: bool = False, yield_sends: bool = False, hang_sends: bool = False):
        self.sent_messages: list[dict] = []
        self.accepted = False
        self.closed = False
        self.close_code = None
        self.fail_sends = fail_sends
        # Yield to the loop on every send, like a real socket write.
        self.yield_sends = yield_sends
        # Never complete a send, like a client that stopped reading.
        self.hang_sends = hang_sends

    async def accept(self):
        self.accepted = True

    async def send_text(self, data: str):
        if self.fail_sends:
            raise RuntimeError("socket is gone")
        if self.hang_sends:
            await asyncio.Event().wait()
        if self.yield_sends:
            await asyncio.sleep(0)
        self.sent_messages.append(json.loads(data))

    async def close(self, code: int = 1000):
        self.closed = True
        self.close_code = code


class Client:
    """A mock socket together with the server-side connection it produced."""

    def __init__(self, coordinator: QuizCoordinator, websocket: MockWebSocket, connection):
        self.coordinator = coordinator
        self.ws = websocket
        self.connection = connection

    async def send(self, **payload):
        await self.coordinator.receive(self.connection, json.dumps(payload))

    @property
    def sent(self) -> list[dict]:
        return self.ws.sent_messages

    def types(self) -> list[str]:
        return [m["type"] for m in self.sent]

    def last(self, msg_type: str) -> dict | None:
        for msg in reversed(self.sent):
            if msg.get("type") == msg_type:
                return msg
        return None

    def clear(self):
        self.ws.sent_messages.clear()


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture(scope="session")
def accounts():
    return dict(ACCOUNTS)


@pytest.fixture(scope="session")
def identity(accounts):
    return IdentityStore(accounts)


@pytest.fixture
def catalog():
    return QuestionCatalog.from_data(QUESTIONS)


@pytest.fixture
def coordinator(identity, catalog):
    return QuizCoordinator(identity, catalog)


@pytest.fixture
def connect(coordinator):
    async def _connect(username=None, password=None, **ws_options):
        ws = MockWebSocket(**ws_options)
        connection = await coordinator.connect(ws)
        client = Client(coordinator, ws, connection)
        if username is not None:
            await client.send(type="authenticate", username=username, password=password)
        return client

    return _connect


@pytest.fixture
def seated(connect):
    """Factory for clients that are authenticated and already sit in a seat."""

    async def _seated(seat, username=None, player_name=None, team=None, **ws_options):
        if seat == "host":
            client = await connect(username or "host", ACCOUNTS[username or "host"][0], **ws_options)
            await client.send(type="identify", role="host")
        elif seat == "display":
            client = await connect(username or "admin", ACCOUNTS[username or "admin"][0], **ws_options)
            await client.send(type="register", role="display")
        else:
            client = await connect(username or "player1", ACCOUNTS[username or "player1"][0], **ws_options)
            await client.send(type="register", role="player", playerName=player_name, team=team)
        client.clear()
        return client

    return _seated
