"""
Structural invariant checks for ledger entities.

Two families of helpers:
- is_valid_* predicates never raise; use them for soft, field-level checks.
- assert_* functions raise ValidationError on the first violation found and
  return None otherwise. They do not accumulate errors.

The persistence gateway re-runs assert_game on every load, so these checks
must accept arbitrary (possibly malformed) attribute values without
crashing on them.
"""

from collections.abc import Sequence
from datetime import datetime

from game.logic.exceptions import ValidationError
from game.logic.state import Game, GameStatus, Player, PlayerScore, Round

MIN_PLAYERS = 2
MAX_PLAYERS = 6
MAX_PLAYER_NAME_LENGTH = 50


def _is_int(value: object) -> bool:
    # bool is an int subclass but never a valid score
    return isinstance(value, int) and not isinstance(value, bool)


def _is_valid_datetime(value: object) -> bool:
    """Accept only timezone-aware datetimes so ordering comparisons are always defined."""
    return isinstance(value, datetime) and value.utcoffset() is not None


def _is_sequence(value: object) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, str)


def is_valid_player_name(name: object) -> bool:
    """Return True if name is a string of 1-50 characters after trimming."""
    if not isinstance(name, str):
        return False
    return 0 < len(name.strip()) <= MAX_PLAYER_NAME_LENGTH


def is_valid_score(score: object) -> bool:
    """Return True if score is a non-negative integer.

    Floats are rejected outright (including NaN, infinity and integral
    values such as 5.0), as are bools and non-numeric types.
    """
    return _is_int(score) and score >= 0  # type: ignore[operator]


def is_valid_target_score(target_score: object) -> bool:
    """Return True if target_score is unset or a positive integer."""
    if target_score is None:
        return True
    return _is_int(target_score) and target_score > 0  # type: ignore[operator]


def assert_player(player: Player) -> None:
    if not isinstance(player.id, str) or not player.id:
        raise ValidationError("Player must have a valid ID")
    if not is_valid_player_name(player.name):
        raise ValidationError("Player must have a valid name (1-50 characters)")
    if not is_valid_score(player.total_score):
        raise ValidationError("Player total score must be a non-negative integer")
    if not isinstance(player.is_leader, bool):
        raise ValidationError("Player is_leader must be a boolean")


def assert_player_score(player_score: PlayerScore) -> None:
    """Check the generic score invariants.

    The Rummy-implies-zero rule is not checked here; it is enforced at
    construction by game.logic.game.create_player_score.
    """
    if not isinstance(player_score.player_id, str) or not player_score.player_id:
        raise ValidationError("PlayerScore must have a valid player_id")
    if not is_valid_score(player_score.score):
        raise ValidationError("PlayerScore must have a valid non-negative integer score")
    if not isinstance(player_score.is_rummy, bool):
        raise ValidationError("PlayerScore is_rummy must be a boolean")


def assert_round(round_: Round) -> None:
    if not isinstance(round_.id, str) or not round_.id:
        raise ValidationError("Round must have a valid ID")
    if not _is_int(round_.round_number) or round_.round_number < 1:
        raise ValidationError("Round number must be a positive integer")
    if not _is_sequence(round_.scores) or len(round_.scores) == 0:
        raise ValidationError("Round must have at least one player score")

    for index, player_score in enumerate(round_.scores):
        try:
            assert_player_score(player_score)
        except ValidationError as exc:
            raise ValidationError(f"Invalid player score at index {index}: {exc}") from exc

    if not _is_valid_datetime(round_.timestamp):
        raise ValidationError("Round must have a valid timestamp")


def assert_game(game: Game) -> None:
    """Check every structural invariant of a Game aggregate, in a fixed order."""
    if not isinstance(game.id, str) or not game.id:
        raise ValidationError("Game must have a valid ID")

    if not _is_sequence(game.players) or not MIN_PLAYERS <= len(game.players) <= MAX_PLAYERS:
        raise ValidationError(f"Game must have between {MIN_PLAYERS} and {MAX_PLAYERS} players")

    for index, player in enumerate(game.players):
        try:
            assert_player(player)
        except ValidationError as exc:
            raise ValidationError(f"Invalid player at index {index}: {exc}") from exc

    lowered = [player.name.lower() for player in game.players]
    if len(set(lowered)) != len(lowered):
        raise ValidationError("All player names must be unique")

    if not _is_sequence(game.rounds):
        raise ValidationError("Game rounds must be a sequence")

    for index, round_ in enumerate(game.rounds):
        try:
            assert_round(round_)
        except ValidationError as exc:
            raise ValidationError(f"Invalid round at index {index}: {exc}") from exc

    if not is_valid_target_score(game.target_score):
        raise ValidationError("Game target score must be a positive integer or None")

    if game.status not in (GameStatus.ACTIVE, GameStatus.COMPLETED):
        raise ValidationError('Game status must be either "active" or "completed"')

    if game.status == GameStatus.COMPLETED and game.winner:
        if not any(player.id == game.winner for player in game.players):
            raise ValidationError("Game winner must be one of the players")

    if not _is_valid_datetime(game.created_at):
        raise ValidationError("Game must have a valid created_at date")

    if game.completed_at is not None:
        if not _is_valid_datetime(game.completed_at):
            raise ValidationError("Game completed_at must be a valid date or None")
        if game.completed_at < game.created_at:
            raise ValidationError("Game completed_at cannot be before created_at")


def assert_player_name_batch(names: Sequence[str]) -> None:
    """Validate the raw player names entered at game setup, before Players exist."""
    if not _is_sequence(names):
        raise ValidationError("Player names must be a list")

    if not MIN_PLAYERS <= len(names) <= MAX_PLAYERS:
        raise ValidationError(f"Must have between {MIN_PLAYERS} and {MAX_PLAYERS} players")

    for index, name in enumerate(names):
        if not is_valid_player_name(name):
            raise ValidationError(f"Invalid player name at index {index}: must be 1-50 characters")

    lowered = [name.lower().strip() for name in names]
    if len(set(lowered)) != len(lowered):
        raise ValidationError("All player names must be unique")
