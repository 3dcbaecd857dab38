# family100/coordinator.py
"""
Glue between the transport and the game.

Every inbound message goes through the same path: parse into a typed
message, check the connection's capability for that message type, apply the
transition, fan out the resulting events. The whole path runs under one
asyncio lock, so transitions never interleave even though sends await.
"""
import asyncio
import json
import logging
from enum import Enum
from typing import Callable, Tuple, Type

from fastapi import WebSocket
from pydantic import ValidationError

from family100.broadcast import Broadcaster
from family100.errors import AuthFailure, AuthorizationDenied, MalformedMessage
from family100.game import STRIKE_ONLY_INDEX, GameMachine
from family100.models import (
    AnswerMessage,
    AuthenticateMessage,
    IdentifyMessage,
    InboundMessage,
    RegisterMessage,
    ResetRoundMessage,
    Seat,
    SwitchTeamMessage,
    ToggleBuzzerMessage,
)
from family100.projection import (
    auth_result_event,
    error_event,
    event,
    force_reset_event,
    full_view,
    game_state_event,
    redacted_view,
    sound_event,
)
from family100.questions import QuestionCatalog
from family100.registry import Connection, ConnectionRegistry
from family100.security import IdentityStore

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008


class Requirement(Enum):
    NONE = "none"
    AUTHENTICATED = "authenticated"
    HOST_SEAT = "host_seat"
    PLAYER_SEAT = "player_seat"


class QuizCoordinator:
    def __init__(self, identity: IdentityStore, catalog: QuestionCatalog):
        self.registry = ConnectionRegistry(identity)
        self.game = GameMachine(catalog)
        self.broadcaster = Broadcaster(self.registry)
        self._lock = asyncio.Lock()
        self._handlers = {
            "authenticate": (Requirement.NONE, AuthenticateMessage, self._on_authenticate),
            "identify": (Requirement.AUTHENTICATED, IdentifyMessage, self._on_identify),
            "register": (Requirement.AUTHENTICATED, RegisterMessage, self._on_register),
            "answer": (Requirement.HOST_SEAT, AnswerMessage, self._on_answer),
            "buzz": (Requirement.PLAYER_SEAT, InboundMessage, self._on_buzz),
            "toggleBuzzer": (Requirement.HOST_SEAT, ToggleBuzzerMessage, self._on_toggle_buzzer),
            "switchTeam": (Requirement.HOST_SEAT, SwitchTeamMessage, self._on_switch_team),
            "nextQuestion": (Requirement.HOST_SEAT, InboundMessage, self._on_next_question),
            "resetRound": (Requirement.HOST_SEAT, ResetRoundMessage, self._on_reset_round),
            "showAllAnswers": (Requirement.HOST_SEAT, InboundMessage, self._on_show_all_answers),
        }

    # --- Connection lifecycle ---

    async def connect(self, websocket: WebSocket) -> Connection:
        await websocket.accept()
        connection = Connection(websocket)
        async with self._lock:
            self.registry.add(connection)
        logger.info(f"Client connected: {connection.id}")
        return connection

    async def disconnect(self, connection: Connection) -> None:
        async with self._lock:
            connection.closed = True
            seat = self.registry.release(connection)
            if seat == Seat.PLAYER:
                logger.info(f"Player {connection.player_name} disconnected")
                await self.broadcaster.publish_roster()
            elif seat is not None:
                logger.info(f"{seat.value.capitalize()} seat vacated by {connection.id}")
        logger.info(f"Client disconnected: {connection.id}")

    async def receive(self, connection: Connection, raw: str) -> None:
        """Handle one inbound frame. Never raises: bad input must not kill the socket loop."""
        try:
            async with self._lock:
                data, (requirement, model, handler) = self.parse(raw)
                # Capability is checked before the body is validated.
                if await self._authorize(connection, requirement, data["type"]):
                    await handler(connection, self.validate(model, data))
        except MalformedMessage as e:
            logger.warning(f"Ignoring malformed message from {connection.id}: {e}")
        except AuthorizationDenied as e:
            logger.debug(f"Rejected action from {connection.id}: {e}")
        except Exception as e:
            logger.error(f"Error processing message from {connection.id}: {e}", exc_info=True)

    def parse(self, raw: str) -> Tuple[dict, Tuple[Requirement, Type[InboundMessage], Callable]]:
        """Decode the frame and look up its handler entry."""
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise MalformedMessage(f"invalid JSON ({e})") from e
        if not isinstance(data, dict):
            raise MalformedMessage("payload is not a JSON object")

        msg_type = data.get("type")
        entry = self._handlers.get(msg_type) if isinstance(msg_type, str) else None
        if entry is None:
            raise MalformedMessage(f"unknown message type {msg_type!r}")
        return data, entry

    @staticmethod
    def validate(model: Type[InboundMessage], data: dict) -> InboundMessage:
        try:
            return model.model_validate(data)
        except ValidationError as e:
            raise MalformedMessage(f"invalid '{data['type']}' message: {e.error_count()} error(s)") from e

    async def _authorize(self, connection: Connection, requirement: Requirement, msg_type: str) -> bool:
        """
        Single capability check for every message type. Unauthenticated
        connections are told and disconnected; authenticated ones without the
        right seat are silently ignored.
        """
        if requirement is Requirement.NONE:
            return True
        if not connection.authenticated:
            await connection.send(error_event("Authentication required"))
            await connection.close(code=POLICY_VIOLATION)
            return False
        if requirement is Requirement.HOST_SEAT and not self.registry.holds(connection, Seat.HOST):
            raise AuthorizationDenied(f"'{msg_type}' requires the host seat")
        if requirement is Requirement.PLAYER_SEAT and not self.registry.holds(connection, Seat.PLAYER):
            raise AuthorizationDenied(f"'{msg_type}' requires a player seat")
        return True

    # --- Authentication & seats ---

    async def _on_authenticate(self, connection: Connection, message: AuthenticateMessage) -> None:
        seat_before = connection.seat
        try:
            role = self.registry.authenticate(connection, message.username, message.password)
        except AuthFailure as e:
            logger.warning(f"WebSocket authentication failed for '{message.username}'")
            await connection.send(auth_result_event(False, message=e.message))
            await connection.close(code=POLICY_VIOLATION)
            return

        logger.info(f"WebSocket authenticated: {connection.username} ({role.value})")
        await connection.send(auth_result_event(True, role=role.value))
        if seat_before == Seat.PLAYER and connection.seat is None:
            await self.broadcaster.publish_roster()

    async def _on_identify(self, connection: Connection, message: IdentifyMessage) -> None:
        if message.role != "host":
            raise AuthorizationDenied(f"identify as {message.role!r} is not supported")

        previous = self.registry.register_host(connection)
        if previous is not None and previous is not connection:
            logger.info(f"Game host {previous.id} replaced by {connection.id}")
        logger.info(f"Game host registered: {connection.username}")
        await self.broadcaster.to_one(connection, game_state_event(full_view(self.game.state)))

    async def _on_register(self, connection: Connection, message: RegisterMessage) -> None:
        if message.role == "display":
            previous = self.registry.register_display(connection)
            if previous is not None and previous is not connection:
                logger.info(f"Display host {previous.id} replaced by {connection.id}")
            logger.info(f"Display host registered: {connection.username}")
            await self.broadcaster.to_one(connection, game_state_event(redacted_view(self.game.state)))
        elif message.role == "player":
            self.registry.register_player(connection, message.player_name, message.team)
            logger.info(f"Player {connection.player_name} registered for Team {connection.team}")
            await self.broadcaster.publish_roster()
        else:
            raise AuthorizationDenied(f"register as {message.role!r} is not supported")

    # --- Host actions ---

    async def _on_answer(self, connection: Connection, message: AnswerMessage) -> None:
        game = self.game
        if message.index == STRIKE_ONLY_INDEX and not message.correct:
            if not game.strike_only():
                logger.debug("Strike ignored: no active team")
                return
            correct = False
        elif game.reveal(message.index, message.correct):
            correct = message.correct
        else:
            logger.debug(f"Reveal of answer {message.index} ignored")
            return

        if correct:
            await self.broadcaster.publish_state(game)
            await self.broadcaster.to_display(sound_event("correct"))
        else:
            await self.broadcaster.to_display(event("answer", correct=False, team=game.state.active_team))
            await self.broadcaster.publish_state(game)
            await self.broadcaster.to_display(sound_event("wrong"))
            await self.broadcaster.to_display(event("wrong", team=message.team))

    async def _on_toggle_buzzer(self, connection: Connection, message: ToggleBuzzerMessage) -> None:
        self.game.toggle_buzzer(message.enabled)
        logger.info(f"Buzzer {'enabled' if message.enabled else 'disabled'}")
        await self.broadcaster.publish_state(self.game)
        await self.broadcaster.to_all_players(event("buzzerState", enabled=message.enabled))

    async def _on_switch_team(self, connection: Connection, message: SwitchTeamMessage) -> None:
        self.game.switch_active_team(message.team)
        await self.broadcaster.publish_state(self.game)

    async def _on_next_question(self, connection: Connection, message: InboundMessage) -> None:
        self.game.advance_question()
        logger.info(f"Round {self.game.state.current_round}: question {self.game.question_index}")
        await self.broadcaster.to_display(sound_event("start"))
        await self.broadcaster.publish_state(self.game)

    async def _on_reset_round(self, connection: Connection, message: ResetRoundMessage) -> None:
        self.game.reset_round(message.reset_all)
        logger.info(f"Round reset (resetAll={message.reset_all}), now round {self.game.state.current_round}")
        await self.broadcaster.to_display(sound_event("start"))
        await self.broadcaster.to_host(force_reset_event(full_view(self.game.state)))
        await self.broadcaster.publish_state(self.game)
        await self.broadcaster.to_all_players(event("roundReset", resetAll=message.reset_all))

    async def _on_show_all_answers(self, connection: Connection, message: InboundMessage) -> None:
        self.game.reveal_all()
        await self.broadcaster.publish_state(self.game)

    # --- Player actions ---

    async def _on_buzz(self, connection: Connection, message: InboundMessage) -> None:
        if not self.game.buzz(connection.player_name, connection.team):
            logger.debug(f"Buzz from {connection.player_name} ignored")
            return

        logger.info(f"Player {connection.player_name} buzzed for Team {connection.team}")
        who = {"playerName": connection.player_name, "team": connection.team}
        await self.broadcaster.to_host(event("buzz", **who))
        await self.broadcaster.to_display(event("playerBuzzed", **who))
        await self.broadcaster.to_all_players(event("buzzLocked", **who))
        await self.broadcaster.publish_state(self.game)

    # --- Introspection ---

    def status(self) -> dict:
        registry = self.registry
        return {
            "connections": len(registry.connections),
            "hostConnected": registry.host is not None,
            "displayConnected": registry.display is not None,
            "players": len(registry.players),
            "round": self.game.state.current_round,
            "questions": len(self.game.catalog),
        }
