from __future__ import annotations

from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING

import structlog

from game.logic.exceptions import LedgerError, ValidationError
from game.logic.game import (
    add_round_to_game,
    check_game_end,
    create_game,
    delete_round_from_game,
    edit_round_in_game,
    end_game,
)
from game.logic.state import Game, GameStatus, PlayerScore
from game.logic.validation import assert_player_name_batch
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
from game.session.reducer import reduce
from shared.logging import bind_game_context

if TYPE_CHECKING:
    from game.persistence.repository import GameRepository

logger = structlog.get_logger()

NO_ACTIVE_GAME = "No active game found"

type StateListener = Callable[[LedgerState], None]


class GameCoordinator:
    """Owns the current game and history, and orchestrates engine and gateway calls.

    Every operation takes the current snapshot, runs the pure rules engine,
    persists the result, and only then publishes the new state. Engine and
    storage errors are caught here, logged, and surfaced through
    LedgerState.error; a failed transformation is neither persisted nor
    published.

    Operations are expected to be awaited one at a time. Two overlapping
    edits against the same snapshot resolve last-writer-wins.
    """

    def __init__(self, repository: GameRepository, *, auto_end: bool = True) -> None:
        self._repository = repository
        self._auto_end = auto_end
        self._state = LedgerState()
        self._listeners: list[StateListener] = []

    @property
    def state(self) -> LedgerState:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        """Register a listener called with every published state. Return an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def dispatch(self, action: LedgerAction) -> LedgerState:
        self._state = reduce(self._state, action)
        for listener in list(self._listeners):
            listener(self._state)
        return self._state

    def clear_error(self) -> None:
        self.dispatch(ClearError())

    def _fail(self, operation: str, exc: LedgerError) -> None:
        logger.warning("ledger operation failed", operation=operation, error=str(exc))
        self.dispatch(SetError(error=str(exc)))

    async def load_initial_data(self) -> None:
        self.dispatch(SetLoading(loading=True))
        try:
            current_game = await self._repository.load_current_game()
            game_history = await self._repository.load_game_history()
            recent_players = await self._repository.load_recent_player_names()
        except LedgerError as exc:
            self._fail("load_initial_data", exc)
            return

        self.dispatch(
            LoadInitialData(
                current_game=current_game,
                game_history=tuple(game_history),
                recent_players=tuple(recent_players),
            ),
        )
        bind_game_context(current_game.id if current_game is not None else None)
        logger.info("loaded initial data", has_current_game=current_game is not None, history_size=len(game_history))

    async def create_game(self, player_names: Sequence[str], target_score: int | None = None) -> Game | None:
        """Start a new game, replacing any current one, and remember the player names."""
        try:
            assert_player_name_batch(player_names)
            game = create_game(player_names, target_score)
            await self._repository.save_player_names([player.name for player in game.players])
            recent_players = await self._repository.load_recent_player_names()
            # Written last: the current-game record only changes once the names are stored
            await self._repository.save(game)
        except LedgerError as exc:
            self._fail("create_game", exc)
            return None

        self.dispatch(GameCreated(game=game))
        self.dispatch(RecentPlayersUpdated(recent_players=tuple(recent_players)))
        bind_game_context(game.id)
        logger.info("game created", num_players=len(game.players), target_score=game.target_score)
        return game

    def _active_game(self, operation: str, completed_message: str) -> Game | None:
        game = self._state.current_game
        if game is None:
            self._fail(operation, ValidationError(NO_ACTIVE_GAME))
            return None
        if game.status == GameStatus.COMPLETED:
            self._fail(operation, ValidationError(completed_message))
            return None
        return game

    async def _commit(
        self,
        operation: str,
        transform: Callable[[Game], Game],
        action: Callable[[Game], LedgerAction],
        completed_message: str,
    ) -> Game | None:
        game = self._active_game(operation, completed_message)
        if game is None:
            return None
        try:
            updated = transform(game)
            await self._repository.save(updated)
        except LedgerError as exc:
            self._fail(operation, exc)
            return None
        self.dispatch(action(updated))
        return updated

    async def _end_if_target_reached(self, game: Game | None) -> Game | None:
        """End the game if it reached its target. If ending fails, the saved round still stands."""
        if game is None or not self._auto_end or not check_game_end(game):
            return game
        logger.info("target score reached", target_score=game.target_score)
        completed = await self.end_game()
        return completed if completed is not None else game

    async def add_round(self, scores: Sequence[PlayerScore]) -> Game | None:
        """Add a round to the current game; ends the game if the target score is reached.

        Returns the completed game when it ended, the updated active game otherwise
        (including when the automatic end failed and state.error is set), and None
        if the round itself was rejected.
        """
        updated = await self._commit(
            "add_round",
            lambda game: add_round_to_game(game, scores),
            lambda game: RoundAdded(game=game),
            "Cannot add rounds to a completed game",
        )
        return await self._end_if_target_reached(updated)

    async def edit_round(self, round_id: str, scores: Sequence[PlayerScore]) -> Game | None:
        """Replace a round's scores; ends the game if the target score is reached."""
        updated = await self._commit(
            "edit_round",
            lambda game: edit_round_in_game(game, round_id, scores),
            lambda game: RoundEdited(game=game),
            "Cannot edit rounds in a completed game",
        )
        return await self._end_if_target_reached(updated)

    async def delete_round(self, round_id: str) -> Game | None:
        return await self._commit(
            "delete_round",
            lambda game: delete_round_from_game(game, round_id),
            lambda game: RoundDeleted(game=game),
            "Cannot delete rounds from a completed game",
        )

    async def end_game(self) -> Game | None:
        """Complete the current game, move it to the history and clear the current-game record."""
        game = self._active_game("end_game", "Game is already completed")
        if game is None:
            return None
        try:
            completed = end_game(game)
            await self._repository.add_game_to_history(completed)
            await self._repository.clear_current_game()
        except LedgerError as exc:
            self._fail("end_game", exc)
            return None

        self.dispatch(GameEnded(game=completed))
        logger.info("game ended", winner=completed.winner, rounds=len(completed.rounds))
        bind_game_context(None)
        await self._refresh_history()
        return completed

    async def _refresh_history(self) -> None:
        """Replace the in-memory history with the persisted one, which is capped."""
        try:
            game_history = await self._repository.load_game_history()
        except LedgerError as exc:
            self._fail("load_game_history", exc)
            return
        self.dispatch(GameHistoryUpdated(game_history=tuple(game_history)))
