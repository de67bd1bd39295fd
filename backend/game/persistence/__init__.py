"""Persistence gateway: repository interface and key-value store implementation."""

from game.persistence.kv_repository import KeyValueGameRepository, StorageKeys
from game.persistence.repository import GameRepository

__all__ = [
    "GameRepository",
    "KeyValueGameRepository",
    "StorageKeys",
]
