import pytest

from game import CHOICES, DRAW, PAPER, PLAYER1, PLAYER2, ROCK, SCISSORS, is_valid_choice, resolve


@pytest.mark.parametrize("winner,loser", [
    (ROCK, SCISSORS),
    (SCISSORS, PAPER),
    (PAPER, ROCK),
])
def test_winning_choice_beats_losing_choice_from_either_seat(winner, loser):
    assert resolve(winner, loser) == PLAYER1
    assert resolve(loser, winner) == PLAYER2


@pytest.mark.parametrize("choice", CHOICES)
def test_equal_choices_draw(choice):
    assert resolve(choice, choice) == DRAW


def test_unknown_choice_falls_through_to_player2():
    assert resolve("lizard", ROCK) == PLAYER2
    assert resolve(ROCK, "lizard") == PLAYER2
    assert resolve("lizard", None) == PLAYER2


def test_is_valid_choice():
    assert all(is_valid_choice(choice) for choice in CHOICES)
    assert not is_valid_choice("rock")
    assert not is_valid_choice("")
    assert not is_valid_choice(None)
    assert not is_valid_choice(["石头"])
