"""
Game state models for the Rummy ledger.

All models are frozen; rules-engine functions return new instances via
model_copy instead of mutating. Field invariants (score ranges, player
counts, name uniqueness) are checked by game.logic.validation, not by
pydantic constraints, so a structurally-typed but invalid record can be
loaded and then rejected with a specific message.

Persisted JSON uses camelCase field names (playerId, isRummy, createdAt, ...)
to stay compatible with records written by the mobile app.
"""

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, ConfigDict, StrictBool, StrictInt, StrictStr
from pydantic.alias_generators import to_camel


class GameStatus(StrEnum):
    ACTIVE = "active"
    COMPLETED = "completed"


class LedgerModel(BaseModel):
    """Base for all persisted ledger records."""

    model_config = ConfigDict(frozen=True, alias_generator=to_camel, populate_by_name=True)


class Player(LedgerModel):
    """A participant in a game.

    total_score and is_leader are derived from the game's rounds and
    recomputed on every read (see game.logic.scoring).
    """

    id: StrictStr
    name: StrictStr
    total_score: StrictInt = 0
    is_leader: StrictBool = False


class PlayerScore(LedgerModel):
    """One player's result for one round."""

    player_id: StrictStr
    score: StrictInt
    is_rummy: StrictBool = False  # went out this round; always pairs with score 0


class Round(LedgerModel):
    """One scoring event across all players."""

    id: StrictStr
    round_number: StrictInt  # 1-based, contiguous; reassigned when an earlier round is deleted
    scores: tuple[PlayerScore, ...]
    timestamp: datetime


class Game(LedgerModel):
    """Aggregate root: owns its players and rounds exclusively."""

    id: StrictStr
    players: tuple[Player, ...]
    rounds: tuple[Round, ...] = ()
    target_score: StrictInt | None = None
    status: GameStatus = GameStatus.ACTIVE
    winner: StrictStr | None = None  # player id, only once completed
    created_at: datetime
    completed_at: datetime | None = None


class GameStats(LedgerModel):
    """Summary statistics over per-player totals."""

    total_rounds: int
    average_score: float
    highest_score: int
    lowest_score: int
    rummy_count: int
