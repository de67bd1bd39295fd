"""
Game creation and progression for Rummy.

Every function here is pure and synchronous: it takes a Game snapshot and
returns a new Game, never mutating its input and never performing I/O.
Invariant violations raise ValidationError and are left for the caller to
handle; there is no partial application.
"""

from collections.abc import Sequence
from datetime import UTC, datetime

from pydantic import ValidationError as PydanticValidationError

from game.logic.exceptions import ValidationError
from game.logic.scoring import calculate_player_totals, determine_winner
from game.logic.state import Game, GameStatus, Player, PlayerScore, Round
from game.logic.utils import generate_id
from game.logic.validation import (
    MAX_PLAYERS,
    MIN_PLAYERS,
    assert_game,
    assert_round,
    is_valid_player_name,
    is_valid_target_score,
)


def _now() -> datetime:
    return datetime.now(UTC)


def _assert_full_coverage(game: Game, scores: Sequence[PlayerScore]) -> None:
    """Require scores for exactly the game's current players, no more and no fewer."""
    player_ids = {player.id for player in game.players}
    score_player_ids = {player_score.player_id for player_score in scores}
    if player_ids != score_player_ids:
        raise ValidationError("All players must have scores for the round")


def _find_round_index(game: Game, round_id: str) -> int:
    for index, round_ in enumerate(game.rounds):
        if round_.id == round_id:
            return index
    raise ValidationError("Round not found")


def create_player(name: str) -> Player:
    return Player(id=generate_id(), name=name.strip())


def create_game(player_names: Sequence[str], target_score: int | None = None) -> Game:
    """
    Create a new active game with no rounds.

    Args:
        player_names: 2-6 names; each is trimmed before use
        target_score: Optional positive threshold that ends the game

    Returns:
        New validated Game

    Raises:
        ValidationError: If the player count is out of range or the assembled
            game fails structural validation

    """
    if not MIN_PLAYERS <= len(player_names) <= MAX_PLAYERS:
        raise ValidationError(f"Game must have between {MIN_PLAYERS} and {MAX_PLAYERS} players")

    for index, name in enumerate(player_names):
        if not is_valid_player_name(name):
            raise ValidationError(f"Invalid player at index {index}: Player must have a valid name (1-50 characters)")
    if not is_valid_target_score(target_score):
        raise ValidationError("Game target score must be a positive integer or None")

    game = Game(
        id=generate_id(),
        players=tuple(create_player(name) for name in player_names),
        target_score=target_score,
        created_at=_now(),
    )
    assert_game(game)
    return game


def add_round(game: Game, scores: Sequence[PlayerScore]) -> Game:
    """Append a new round numbered after the existing ones."""
    _assert_full_coverage(game, scores)

    new_round = Round(
        id=generate_id(),
        round_number=len(game.rounds) + 1,
        scores=tuple(scores),
        timestamp=_now(),
    )
    assert_round(new_round)
    return game.model_copy(update={"rounds": (*game.rounds, new_round)})


def edit_round(game: Game, round_id: str, scores: Sequence[PlayerScore]) -> Game:
    """Replace a round's scores in place, keeping its number and bumping its timestamp."""
    index = _find_round_index(game, round_id)
    _assert_full_coverage(game, scores)

    updated = game.rounds[index].model_copy(update={"scores": tuple(scores), "timestamp": _now()})
    assert_round(updated)

    rounds = list(game.rounds)
    rounds[index] = updated
    return game.model_copy(update={"rounds": tuple(rounds)})


def delete_round(game: Game, round_id: str) -> Game:
    """Remove a round and renumber the remaining rounds contiguously from 1."""
    _find_round_index(game, round_id)
    remaining = (round_ for round_ in game.rounds if round_.id != round_id)
    rounds = tuple(
        round_.model_copy(update={"round_number": number}) for number, round_ in enumerate(remaining, start=1)
    )
    return game.model_copy(update={"rounds": rounds})


# Coordinator-facing names
add_round_to_game = add_round
edit_round_in_game = edit_round
delete_round_from_game = delete_round


def check_game_end(game: Game) -> bool:
    """
    Return True if any player's total has reached the target score.

    Always False when no target score is set or the game is already completed.
    Reaching the target exactly counts.
    """
    if game.target_score is None or game.status == GameStatus.COMPLETED:
        return False
    return any(player.total_score >= game.target_score for player in calculate_player_totals(game))


def end_game(game: Game) -> Game:
    """
    Complete the game, stamping the winner and completion time.

    Does not consult check_game_end; manual and automatic endings both
    call this the same way.
    """
    winner = determine_winner(game)
    return game.model_copy(
        update={
            "status": GameStatus.COMPLETED,
            "winner": winner.id if winner is not None else None,
            "completed_at": _now(),
        },
    )


def create_player_score(player_id: str, score: int, is_rummy: bool = False) -> PlayerScore:  # noqa: FBT001, FBT002
    """Build a PlayerScore; a Rummy always scores 0 regardless of the score passed in."""
    try:
        return PlayerScore(player_id=player_id, score=0 if is_rummy else score, is_rummy=is_rummy)
    except PydanticValidationError as exc:
        raise ValidationError(f"Invalid player score: {exc.errors()[0]['msg']}") from exc


def get_current_round_number(game: Game) -> int:
    """Return the number the next round will get."""
    return len(game.rounds) + 1
