"""Abstract interface for ledger persistence."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Sequence

    from game.logic.state import Game


class GameRepository(ABC):
    """Abstract interface for the persistence gateway.

    Stores the current game, the completed-game history (most recent first)
    and the recently used player names. Load operations never raise on
    corrupt data: the record is deleted and an empty result returned.
    Store failures raise StorageError.
    """

    @abstractmethod
    async def save(self, game: Game) -> None: ...

    @abstractmethod
    async def load_current_game(self) -> Game | None: ...

    @abstractmethod
    async def load_game(self, game_id: str) -> Game: ...

    @abstractmethod
    async def clear_current_game(self) -> None: ...

    @abstractmethod
    async def load_game_history(self) -> list[Game]: ...

    @abstractmethod
    async def add_game_to_history(self, game: Game) -> None: ...

    @abstractmethod
    async def clear_game_history(self) -> None: ...

    @abstractmethod
    async def save_player_names(self, names: Sequence[str]) -> None: ...

    @abstractmethod
    async def load_recent_player_names(self) -> list[str]: ...

    @abstractmethod
    async def clear_recent_player_names(self) -> None: ...

    @abstractmethod
    async def clear_all_data(self) -> None: ...
