"""Coordinator state and the actions that transform it."""

from enum import StrEnum
from typing import Literal

from pydantic import BaseModel, ConfigDict

from game.logic.state import Game


class LedgerState(BaseModel):
    """Single authoritative in-process snapshot observed by the UI layer."""

    model_config = ConfigDict(frozen=True)

    current_game: Game | None = None
    game_history: tuple[Game, ...] = ()  # most recent first
    recent_players: tuple[str, ...] = ()
    loading: bool = False
    error: str | None = None


class ActionType(StrEnum):
    """Types of coordinator state actions."""

    SET_LOADING = "set_loading"
    SET_ERROR = "set_error"
    CLEAR_ERROR = "clear_error"
    LOAD_INITIAL_DATA = "load_initial_data"
    GAME_CREATED = "game_created"
    ROUND_ADDED = "round_added"
    ROUND_EDITED = "round_edited"
    ROUND_DELETED = "round_deleted"
    GAME_ENDED = "game_ended"
    GAME_HISTORY_UPDATED = "game_history_updated"
    RECENT_PLAYERS_UPDATED = "recent_players_updated"


class LedgerAction(BaseModel):
    """Base class for all coordinator actions."""

    model_config = ConfigDict(frozen=True)

    type: ActionType


class SetLoading(LedgerAction):
    type: Literal[ActionType.SET_LOADING] = ActionType.SET_LOADING
    loading: bool


class SetError(LedgerAction):
    type: Literal[ActionType.SET_ERROR] = ActionType.SET_ERROR
    error: str


class ClearError(LedgerAction):
    type: Literal[ActionType.CLEAR_ERROR] = ActionType.CLEAR_ERROR


class LoadInitialData(LedgerAction):
    type: Literal[ActionType.LOAD_INITIAL_DATA] = ActionType.LOAD_INITIAL_DATA
    current_game: Game | None
    game_history: tuple[Game, ...]
    recent_players: tuple[str, ...]


class GameCreated(LedgerAction):
    type: Literal[ActionType.GAME_CREATED] = ActionType.GAME_CREATED
    game: Game


class RoundAdded(LedgerAction):
    type: Literal[ActionType.ROUND_ADDED] = ActionType.ROUND_ADDED
    game: Game


class RoundEdited(LedgerAction):
    type: Literal[ActionType.ROUND_EDITED] = ActionType.ROUND_EDITED
    game: Game


class RoundDeleted(LedgerAction):
    type: Literal[ActionType.ROUND_DELETED] = ActionType.ROUND_DELETED
    game: Game


class GameEnded(LedgerAction):
    """The current game completed; it moves to the front of the history."""

    type: Literal[ActionType.GAME_ENDED] = ActionType.GAME_ENDED
    game: Game


class GameHistoryUpdated(LedgerAction):
    type: Literal[ActionType.GAME_HISTORY_UPDATED] = ActionType.GAME_HISTORY_UPDATED
    game_history: tuple[Game, ...]


class RecentPlayersUpdated(LedgerAction):
    type: Literal[ActionType.RECENT_PLAYERS_UPDATED] = ActionType.RECENT_PLAYERS_UPDATED
    recent_players: tuple[str, ...]
