"""Key-value-store-backed implementation of the persistence gateway.

Records are JSON under fixed logical keys:
- current game: a single Game record
- game history: an array of Game records, most recent first
- recent players: an array of player-name strings, most recent first

Every load re-runs the same structural assertions the rules engine uses
(assert_game), and treats any failure exactly like a JSON parse failure:
the key is deleted and an empty result returned. A load path never lets a
parse or validation exception escape.
"""

from __future__ import annotations

import contextlib
import json
from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

import structlog
from pydantic import StrictStr, TypeAdapter

from game.logic.exceptions import DataCorruptionError, LedgerError, StorageError, ValidationError
from game.logic.state import Game
from game.logic.validation import assert_game
from game.persistence.repository import GameRepository

if TYPE_CHECKING:
    from shared.settings import StorageSettings
    from shared.storage import KeyValueStore

logger = structlog.get_logger()

DEFAULT_KEY_PREFIX = "@RummyLedger:"
DEFAULT_HISTORY_LIMIT = 100
DEFAULT_RECENT_PLAYERS_LIMIT = 50

_HISTORY_ADAPTER = TypeAdapter(list[Game])
_NAMES_ADAPTER = TypeAdapter(list[StrictStr])


@dataclass(frozen=True)
class StorageKeys:
    current_game: str
    game_history: str
    recent_players: str

    @classmethod
    def with_prefix(cls, prefix: str) -> StorageKeys:
        return cls(
            current_game=f"{prefix}currentGame",
            game_history=f"{prefix}gameHistory",
            recent_players=f"{prefix}recentPlayers",
        )


@contextlib.contextmanager
def _storage_errors(operation: str, message: str) -> Iterator[None]:
    """Reclassify raw store exceptions as StorageError naming the failed operation."""
    try:
        yield
    except LedgerError:
        raise
    except Exception as exc:
        logger.warning("storage operation failed", operation=operation, error=str(exc))
        raise StorageError(message, operation, exc) from exc


def _require_utf8(raw: str) -> None:
    # Undecodable bytes from a store surface as lone surrogates; encoding raises UnicodeEncodeError
    raw.encode("utf-8")


def _parse_game(raw: str, key: str) -> Game:
    try:
        _require_utf8(raw)
        game = Game.model_validate_json(raw)
        assert_game(game)
    except (ValueError, ValidationError) as exc:
        raise DataCorruptionError(key, exc) from exc
    return game


def _parse_history(raw: str, key: str) -> list[Game]:
    try:
        _require_utf8(raw)
        games = _HISTORY_ADAPTER.validate_json(raw)
        for game in games:
            assert_game(game)
    except (ValueError, ValidationError) as exc:
        raise DataCorruptionError(key, exc) from exc
    return games


def _parse_names(raw: str, key: str) -> list[str]:
    try:
        _require_utf8(raw)
        return _NAMES_ADAPTER.validate_json(raw)
    except ValueError as exc:
        raise DataCorruptionError(key, exc) from exc


class KeyValueGameRepository(GameRepository):
    """GameRepository over any KeyValueStore backend.

    Caps are applied on write: the history keeps the most recent
    history_limit games; the recent-names list keeps recent_players_limit
    names, deduplicated by exact match with the most recent occurrence first.
    """

    def __init__(
        self,
        store: KeyValueStore,
        *,
        key_prefix: str = DEFAULT_KEY_PREFIX,
        history_limit: int = DEFAULT_HISTORY_LIMIT,
        recent_players_limit: int = DEFAULT_RECENT_PLAYERS_LIMIT,
    ) -> None:
        self._store = store
        self._key_prefix = key_prefix
        self._keys = StorageKeys.with_prefix(key_prefix)
        self._history_limit = history_limit
        self._recent_players_limit = recent_players_limit

    @classmethod
    def from_settings(cls, store: KeyValueStore, settings: StorageSettings) -> KeyValueGameRepository:
        return cls(
            store,
            key_prefix=settings.key_prefix,
            history_limit=settings.history_limit,
            recent_players_limit=settings.recent_players_limit,
        )

    @property
    def keys(self) -> StorageKeys:
        return self._keys

    async def _discard_corrupt(self, exc: DataCorruptionError) -> None:
        logger.warning("discarding corrupt record", key=exc.key, reason=str(exc.cause))
        with _storage_errors("discard_corrupt", f"Failed to remove corrupt record: {exc.key}"):
            await self._store.remove_item(exc.key)

    # --- current game ---

    async def save(self, game: Game) -> None:
        """Serialize and write the current-game record."""
        with _storage_errors("save", "Failed to save game"):
            await self._store.set_item(self._keys.current_game, game.model_dump_json(by_alias=True))
        logger.debug("saved current game", game_id=game.id, rounds=len(game.rounds))

    async def load_current_game(self) -> Game | None:
        """Return the current game, or None if absent or corrupt (a corrupt record is deleted)."""
        with _storage_errors("load_current_game", "Failed to load current game"):
            raw = await self._store.get_item(self._keys.current_game)
        if not raw:
            return None
        try:
            return _parse_game(raw, self._keys.current_game)
        except DataCorruptionError as exc:
            await self._discard_corrupt(exc)
            return None

    async def load_game(self, game_id: str) -> Game:
        """Find a game by id in the current-game record, then in the history.

        Raises StorageError if it is in neither.
        """
        current = await self.load_current_game()
        if current is not None and current.id == game_id:
            return current

        for game in await self.load_game_history():
            if game.id == game_id:
                return game

        raise StorageError(f"Game with ID {game_id} not found", "load_game")

    async def clear_current_game(self) -> None:
        with _storage_errors("clear_current_game", "Failed to clear current game"):
            await self._store.remove_item(self._keys.current_game)

    # --- history ---

    async def load_game_history(self) -> list[Game]:
        """Return completed games, most recent first; [] if absent or corrupt.

        The list is validated as a whole: one bad entry discards the record.
        """
        with _storage_errors("load_game_history", "Failed to load game history"):
            raw = await self._store.get_item(self._keys.game_history)
        if not raw:
            return []
        try:
            return _parse_history(raw, self._keys.game_history)
        except DataCorruptionError as exc:
            await self._discard_corrupt(exc)
            return []

    async def add_game_to_history(self, game: Game) -> None:
        """Prepend a game to the history, dropping the oldest entries beyond the cap.

        An existing entry with the same id is replaced, so retrying after a
        partially failed end does not duplicate the game.
        """
        previous = [entry for entry in await self.load_game_history() if entry.id != game.id]
        history = [game, *previous][: self._history_limit]
        with _storage_errors("add_game_to_history", "Failed to add game to history"):
            await self._store.set_item(self._keys.game_history, _HISTORY_ADAPTER.dump_json(history, by_alias=True).decode())
        logger.info("added game to history", game_id=game.id, history_size=len(history))

    async def clear_game_history(self) -> None:
        with _storage_errors("clear_game_history", "Failed to clear game history"):
            await self._store.remove_item(self._keys.game_history)

    # --- recent player names ---

    async def save_player_names(self, names: Sequence[str]) -> None:
        """Merge names at the front of the recent list, deduplicating by exact match."""
        current = await self.load_recent_player_names()
        merged = list(dict.fromkeys([*names, *current]))[: self._recent_players_limit]
        with _storage_errors("save_player_names", "Failed to save player names"):
            await self._store.set_item(self._keys.recent_players, json.dumps(merged))

    async def load_recent_player_names(self) -> list[str]:
        """Return recent names, most recent first; [] if absent or not a list of strings."""
        with _storage_errors("load_recent_player_names", "Failed to load recent player names"):
            raw = await self._store.get_item(self._keys.recent_players)
        if not raw:
            return []
        try:
            return _parse_names(raw, self._keys.recent_players)
        except DataCorruptionError as exc:
            await self._discard_corrupt(exc)
            return []

    async def clear_recent_player_names(self) -> None:
        with _storage_errors("clear_recent_player_names", "Failed to clear recent player names"):
            await self._store.remove_item(self._keys.recent_players)

    async def clear_all_data(self) -> None:
        await self.clear_current_game()
        await self.clear_game_history()
        await self.clear_recent_player_names()

    # --- generic records ---

    async def save_data(self, key: str, data: Any) -> None:  # noqa: ANN401
        """Store an arbitrary JSON-serializable value under a prefixed key."""
        full_key = f"{self._key_prefix}{key}"
        with _storage_errors("save_data", f"Failed to save data for key: {full_key}"):
            await self._store.set_item(full_key, json.dumps(data))

    async def load_data(self, key: str) -> Any:  # noqa: ANN401
        """Load a value stored with save_data, or None if absent.

        Unlike the typed loaders, a malformed value raises StorageError.
        """
        full_key = f"{self._key_prefix}{key}"
        with _storage_errors("load_data", f"Failed to load data for key: {full_key}"):
            raw = await self._store.get_item(full_key)
            if not raw:
                return None
            return json.loads(raw)
