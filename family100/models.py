# family100/models.py

from enum import Enum
from typing import Annotated, Any, List, Optional

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class Role(str, Enum):
    ADMIN = "admin"
    HOST = "host"
    PLAYER = "player"

    @property
    def host_privileged(self) -> bool:
        return self in (Role.ADMIN, Role.HOST)


class Seat(str, Enum):
    HOST = "host"
    DISPLAY = "display"
    PLAYER = "player"


def _coerce_team(value: Any) -> Any:
    # Clients send the team either as "1" or as 1.
    if value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(int(value)) if float(value).is_integer() else str(value)
    return value


TeamId = Annotated[Optional[str], BeforeValidator(_coerce_team)]


class WireModel(BaseModel):
    """camelCase on the wire, snake_case in Python."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        return self.model_dump(by_alias=True, mode="json")


# --- Question Catalog ---
class CatalogAnswer(BaseModel):
    text: str
    points: int = Field(ge=0)


class CatalogEntry(BaseModel):
    question: str
    answers: List[CatalogAnswer]


# --- Game State ---
class Answer(WireModel):
    text: str
    points: int
    revealed: bool = False
    correct: Optional[bool] = None


class Team(WireModel):
    points: int = 0
    strikes: int = 0


class GameState(WireModel):
    current_question: str
    answers: List[Answer]
    team1: Team = Field(default_factory=Team)
    team2: Team = Field(default_factory=Team)
    current_round: int = 1
    round_points: int = 0
    buzzer_enabled: bool = False
    active_team: TeamId = None


# --- Inbound WebSocket Messages ---
class InboundMessage(WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    type: str


class AuthenticateMessage(InboundMessage):
    # Left untyped: non-string credentials are an auth failure, not a malformed frame.
    username: Any = None
    password: Any = None


class IdentifyMessage(InboundMessage):
    role: Optional[str] = None


class RegisterMessage(InboundMessage):
    role: Optional[str] = None
    player_name: Optional[str] = None
    team: TeamId = None


class AnswerMessage(InboundMessage):
    index: int
    correct: bool = False
    team: TeamId = None


class ToggleBuzzerMessage(InboundMessage):
    enabled: bool


class SwitchTeamMessage(InboundMessage):
    team: TeamId = None


class ResetRoundMessage(InboundMessage):
    reset_all: bool = True


# --- HTTP Authentication Models ---
class UserLogin(BaseModel):
    username: Optional[str] = None
    password: Optional[str] = None
