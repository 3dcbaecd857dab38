# family100/registry.py

import asyncio
import json
import logging
import uuid
from typing import Any, Dict, List, Optional

from fastapi import WebSocket

from family100.errors import AuthorizationDenied
from family100.models import Role, Seat
from family100.security import IdentityStore, normalize_username

logger = logging.getLogger(__name__)


class Connection:
    """One live WebSocket plus what the server knows about it."""

    # Upper bound on a single send; a client that stops reading is skipped.
    send_timeout: float = 5.0

    def __init__(self, websocket: WebSocket):
        self.id = uuid.uuid4().hex[:8]
        self.websocket = websocket
        self.authenticated = False
        self.role: Optional[Role] = None
        self.username: Optional[str] = None
        self.seat: Optional[Seat] = None
        self.player_name: Optional[str] = None
        self.team: Optional[str] = None
        self.closed = False

    def __repr__(self) -> str:
        return f"<Connection {self.id} user={self.username} seat={self.seat and self.seat.value}>"

    @property
    def host_privileged(self) -> bool:
        return self.authenticated and self.role is not None and self.role.host_privileged

    async def send(self, payload: dict) -> bool:
        """Fire-and-forget send; a dead socket is logged and ignored."""
        if self.closed:
            return False
        try:
            await asyncio.wait_for(
                self.websocket.send_text(json.dumps(payload, ensure_ascii=False)),
                timeout=self.send_timeout,
            )
            return True
        except asyncio.TimeoutError:
            logger.warning(f"Send of '{payload.get('type')}' to {self} timed out after {self.send_timeout}s")
            return False
        except Exception as e:
            logger.debug(f"Dropping '{payload.get('type')}' for {self}: {e}")
            return False

    async def close(self, code: int = 1000) -> None:
        if self.closed:
            return
        self.closed = True
        try:
            await self.websocket.close(code=code)
        except Exception as e:
            logger.debug(f"Close failed for {self}: {e}")


class ConnectionRegistry:
    """
    Tracks every live connection and who sits where.

    At most one connection holds the host seat and at most one holds the
    display seat; a new registration for either replaces the previous holder
    (last registration wins). Any number of connections may hold player seats.
    """

    def __init__(self, identity: IdentityStore):
        self.identity = identity
        self.connections: Dict[str, Connection] = {}
        self.host: Optional[Connection] = None
        self.display: Optional[Connection] = None
        self.players: List[Connection] = []

    def add(self, connection: Connection) -> None:
        self.connections[connection.id] = connection

    def authenticate(self, connection: Connection, username: Any, password: Any) -> Role:
        """Check credentials and mark the connection. Raises AuthFailure."""
        role = self.identity.lookup(username, password)
        if connection.role is not None and connection.role != role:
            self.release_seat(connection)
        connection.authenticated = True
        connection.role = role
        connection.username = normalize_username(username)
        return role

    def register_host(self, connection: Connection) -> Optional[Connection]:
        """Give the connection the host seat; returns the replaced holder, if any."""
        if not connection.host_privileged:
            raise AuthorizationDenied("host seat requires a host-privileged account")
        self.release_seat(connection)
        previous, self.host = self.host, connection
        if previous is not None and previous is not connection:
            previous.seat = None
        connection.seat = Seat.HOST
        return previous

    def register_display(self, connection: Connection) -> Optional[Connection]:
        if not connection.host_privileged:
            raise AuthorizationDenied("display seat requires a host-privileged account")
        self.release_seat(connection)
        previous, self.display = self.display, connection
        if previous is not None and previous is not connection:
            previous.seat = None
        connection.seat = Seat.DISPLAY
        return previous

    def register_player(self, connection: Connection, player_name: Optional[str], team: Optional[str]) -> None:
        if not (connection.authenticated and connection.role == Role.PLAYER):
            raise AuthorizationDenied("player seat requires a player account")
        self.release_seat(connection)
        connection.player_name = player_name or connection.username
        connection.team = team
        connection.seat = Seat.PLAYER
        self.players.append(connection)

    def release_seat(self, connection: Connection) -> Optional[Seat]:
        """Free whatever seat the connection holds and return it."""
        seat = connection.seat
        if self.host is connection:
            self.host = None
        if self.display is connection:
            self.display = None
        if connection in self.players:
            self.players.remove(connection)
        connection.seat = None
        return seat

    def release(self, connection: Connection) -> Optional[Seat]:
        """Forget a closed connection entirely."""
        self.connections.pop(connection.id, None)
        return self.release_seat(connection)

    def holds(self, connection: Connection, seat: Seat) -> bool:
        if seat == Seat.HOST:
            return self.host is connection and connection.host_privileged
        if seat == Seat.DISPLAY:
            return self.display is connection and connection.host_privileged
        return connection in self.players and connection.role == Role.PLAYER

    def roster(self) -> List[dict]:
        return [{"name": p.player_name, "team": p.team} for p in self.players]
