# family100/projection.py
"""Role-specific views of the game state and the outbound event shapes."""
from typing import Any, List, Optional

from family100.models import GameState


def full_view(state: GameState) -> dict:
    """What the host sees: everything, including unrevealed answers."""
    return state.to_wire()


def redacted_view(state: GameState) -> dict:
    """
    What the display sees. An answer's text and points are only shown once it
    has been revealed *and* confirmed correct; everything else is blanked.
    """
    view = state.to_wire()
    for answer in view["answers"]:
        if not (answer["revealed"] and answer["correct"] is True):
            answer["text"] = ""
            answer["points"] = ""
    return view


def event(event_type: str, **fields: Any) -> dict:
    return {"type": event_type, **fields}


def game_state_event(view: dict) -> dict:
    return event("gameState", state=view)


def force_reset_event(view: dict) -> dict:
    return event("forceReset", state=view)


def auth_result_event(success: bool, role: Optional[str] = None, message: Optional[str] = None) -> dict:
    payload = event("authResult", success=success)
    if role is not None:
        payload["role"] = role
    if message is not None:
        payload["message"] = message
    return payload


def error_event(message: str) -> dict:
    return event("error", message=message)


def roster_event(players: List[dict]) -> dict:
    return event("playerJoined", players=players)


def sound_event(sound: str) -> dict:
    return event("playSound", sound=sound)
