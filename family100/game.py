# family100/game.py
"""
Authoritative game state and the transitions that mutate it.

The machine knows nothing about connections or the wire: every transition
either applies completely and returns True, or leaves the state untouched
and returns False. Callers decide what to broadcast.
"""
from dataclasses import dataclass
from typing import Optional

from family100.models import Answer, GameState, Team
from family100.questions import QuestionCatalog

STRIKE_ONLY_INDEX = -1


@dataclass
class BuzzLock:
    """First-buzz-wins latch. Lives beside the game state, never inside it."""

    player_name: Optional[str] = None
    team: Optional[str] = None
    active: bool = False

    def capture(self, player_name: Optional[str], team: Optional[str]) -> None:
        self.player_name, self.team, self.active = player_name, team, True

    def clear(self) -> None:
        self.player_name, self.team, self.active = None, None, False


class GameMachine:
    def __init__(self, catalog: QuestionCatalog, start_index: int = 0):
        self.catalog = catalog
        self.question_index = start_index % len(catalog)
        self.buzz_lock = BuzzLock()
        self.state = self._build_state(self.question_index, current_round=1, team1=Team(), team2=Team())

    def _build_state(self, index: int, current_round: int, team1: Team, team2: Team) -> GameState:
        entry = self.catalog[index]
        return GameState(
            current_question=entry.question,
            answers=[Answer(text=a.text, points=a.points) for a in entry.answers],
            team1=team1,
            team2=team2,
            current_round=current_round,
        )

    def team(self, team_id: Optional[str]) -> Optional[Team]:
        """Only "1" and "2" address a team; anything else scores nobody."""
        if team_id == "1":
            return self.state.team1
        if team_id == "2":
            return self.state.team2
        return None

    # --- Host transitions ---

    def reveal(self, index: int, correct: bool) -> bool:
        if not 0 <= index < len(self.state.answers):
            return False
        answer = self.state.answers[index]
        if answer.revealed:
            return False

        answer.revealed = True
        answer.correct = correct
        team = self.team(self.state.active_team)
        if correct:
            if team is not None:
                team.points += answer.points
            self.state.round_points += answer.points
        elif team is not None:
            team.strikes += 1
        return True

    def strike_only(self) -> bool:
        team = self.team(self.state.active_team)
        if team is None:
            return False
        team.strikes += 1
        return True

    def toggle_buzzer(self, enabled: bool) -> None:
        self.state.buzzer_enabled = enabled
        # Disabling also discards a captured buzz.
        self.buzz_lock.clear()

    def switch_active_team(self, team: Optional[str]) -> None:
        self.state.active_team = team

    def advance_question(self) -> None:
        self._start_next_round(reset_scores=False)

    def reset_round(self, reset_all: bool) -> None:
        self._start_next_round(reset_scores=reset_all)

    def reveal_all(self) -> None:
        for answer in self.state.answers:
            answer.revealed = True

    def _start_next_round(self, reset_scores: bool) -> None:
        self.question_index = self.catalog.next_index(self.question_index)
        if reset_scores:
            team1, team2 = Team(), Team()
        else:
            team1, team2 = self.state.team1.model_copy(), self.state.team2.model_copy()
        self.state = self._build_state(
            self.question_index,
            current_round=self.state.current_round + 1,
            team1=team1,
            team2=team2,
        )
        self.buzz_lock.clear()

    # --- Player transitions ---

    def buzz(self, player_name: Optional[str], team: Optional[str]) -> bool:
        if not self.state.buzzer_enabled or self.buzz_lock.active:
            return False
        self.buzz_lock.capture(player_name, team)
        self.state.active_team = team
        return True
