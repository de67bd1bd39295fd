"""Pure state transitions for the coordinator."""

from game.session.models import (
    ClearError,
    GameCreated,
    GameEnded,
    GameHistoryUpdated,
    LedgerAction,
    LedgerState,
    LoadInitialData,
    RecentPlayersUpdated,
    RoundAdded,
    RoundDeleted,
    RoundEdited,
    SetError,
    SetLoading,
)


def reduce(state: LedgerState, action: LedgerAction) -> LedgerState:  # noqa: PLR0911
    """Return the state that results from applying action; never mutates state."""
    if isinstance(action, SetLoading):
        return state.model_copy(update={"loading": action.loading})
    if isinstance(action, SetError):
        return state.model_copy(update={"error": action.error, "loading": False})
    if isinstance(action, ClearError):
        return state.model_copy(update={"error": None})
    if isinstance(action, LoadInitialData):
        return state.model_copy(
            update={
                "current_game": action.current_game,
                "game_history": action.game_history,
                "recent_players": action.recent_players,
                "loading": False,
                "error": None,
            },
        )
    if isinstance(action, (GameCreated, RoundAdded, RoundEdited, RoundDeleted)):
        return state.model_copy(update={"current_game": action.game, "error": None})
    if isinstance(action, GameEnded):
        return state.model_copy(
            update={
                "current_game": None,
                "game_history": (action.game, *state.game_history),
                "error": None,
            },
        )
    if isinstance(action, GameHistoryUpdated):
        return state.model_copy(update={"game_history": action.game_history})
    if isinstance(action, RecentPlayersUpdated):
        return state.model_copy(update={"recent_players": action.recent_players})
    return state
