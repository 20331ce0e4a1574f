"""Rock-paper-scissors rules."""

ROCK = "石头"
SCISSORS = "剪刀"
PAPER = "布"

CHOICES = (ROCK, SCISSORS, PAPER)

# choice -> the choice it beats
BEATS = {
    SCISSORS: PAPER,
    ROCK: SCISSORS,
    PAPER: ROCK,
}

DRAW = "draw"
PLAYER1 = "player1"
PLAYER2 = "player2"


def is_valid_choice(choice) -> bool:
    return isinstance(choice, str) and choice in BEATS


def resolve(choice1, choice2) -> str:
    """Decide a round from player 1's point of view.

    Equal choices draw. Any pair where player 1's choice does not beat player 2's
    goes to player 2, including values outside CHOICES; callers that care should
    check is_valid_choice() first.
    """
    if choice1 == choice2:
        return DRAW
    if choice1 in BEATS and BEATS[choice1] == choice2:
        return PLAYER1
    return PLAYER2
