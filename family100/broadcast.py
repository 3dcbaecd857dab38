# family100/broadcast.py

import logging

from family100.game import GameMachine
from family100.projection import full_view, game_state_event, redacted_view, roster_event
from family100.registry import Connection, ConnectionRegistry

logger = logging.getLogger(__name__)


class Broadcaster:
    """
    Routes events to seats. Delivery is best effort: an event for an empty
    seat is dropped, nothing is queued or replayed.
    """

    def __init__(self, registry: ConnectionRegistry):
        self.registry = registry

    async def to_one(self, connection: Connection, payload: dict) -> bool:
        return await connection.send(payload)

    async def to_host(self, payload: dict) -> bool:
        host = self.registry.host
        if host is None:
            logger.debug(f"No host seated, dropping '{payload['type']}'")
            return False
        return await host.send(payload)

    async def to_display(self, payload: dict) -> bool:
        display = self.registry.display
        if display is None:
            logger.debug(f"No display seated, dropping '{payload['type']}'")
            return False
        return await display.send(payload)

    async def to_all_players(self, payload: dict) -> int:
        # Snapshot: a failed send must not mutate the list we iterate.
        delivered = 0
        for player in list(self.registry.players):
            if await player.send(payload):
                delivered += 1
        return delivered

    async def publish_state(self, game: GameMachine) -> None:
        """Full view to the host, redacted view to the display."""
        await self.to_host(game_state_event(full_view(game.state)))
        await self.to_display(game_state_event(redacted_view(game.state)))

    async def publish_roster(self) -> None:
        await self.to_display(roster_event(self.registry.roster()))
