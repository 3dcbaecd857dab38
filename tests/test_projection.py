import itertools

import pytest

from family100.game import GameMachine
from family100.models import Answer, GameState
from family100.projection import full_view, redacted_view


def _state(answers):
    return GameState(current_question="Q", answers=answers, active_team="1", buzzer_enabled=True)


@pytest.mark.parametrize(
    "revealed,correct",
    list(itertools.product([False, True], [None, False, True])),
)
def test_display_only_sees_confirmed_correct_answers(revealed, correct):
    state = _state([Answer(text="Secret", points=25, revealed=revealed, correct=correct)])

    shown = redacted_view(state)["answers"][0]

    if revealed and correct is True:
        assert shown["text"] == "Secret"
        assert shown["points"] == 25
    else:
        assert shown["text"] == ""
        assert shown["points"] == ""
    assert shown["revealed"] == revealed


def test_redaction_keeps_everything_else():
    state = _state([Answer(text="A", points=10), Answer(text="B", points=5, revealed=True, correct=True)])
    state.team1.points = 5
    state.team2.strikes = 2
    state.current_round = 3
    state.round_points = 5

    view = redacted_view(state)

    assert view["currentQuestion"] == "Q"
    assert view["team1"] == {"points": 5, "strikes": 0}
    assert view["team2"] == {"points": 0, "strikes": 2}
    assert view["currentRound"] == 3
    assert view["roundPoints"] == 5
    assert view["buzzerEnabled"] is True
    assert view["activeTeam"] == "1"
    assert [a["text"] for a in view["answers"]] == ["", "B"]


def test_redaction_does_not_mutate_the_state():
    state = _state([Answer(text="A", points=10)])
    redacted_view(state)
    assert state.answers[0].text == "A"
    assert state.answers[0].points == 10


def test_host_view_is_complete_and_camel_cased(catalog):
    game = GameMachine(catalog)
    game.switch_active_team("2")
    game.reveal(0, False)

    view = full_view(game.state)

    assert view == {
        "currentQuestion": "Q1",
        "answers": [{"text": "A", "points": 10, "revealed": True, "correct": False}],
        "team1": {"points": 0, "strikes": 0},
        "team2": {"points": 0, "strikes": 1},
        "currentRound": 1,
        "roundPoints": 0,
        "buzzerEnabled": False,
        "activeTeam": "2",
    }


def test_reveal_all_never_leaks_unconfirmed_answers(catalog):
    game = GameMachine(catalog)
    game.advance_question()
    game.switch_active_team("1")
    game.reveal(0, True)
    game.reveal(1, False)
    game.reveal_all()

    texts = [a["text"] for a in redacted_view(game.state)["answers"]]

    assert texts == ["B", "", ""]
