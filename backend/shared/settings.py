"""Storage configuration via environment variables."""

from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings


class StorageSettings(BaseSettings):
    model_config = {"env_prefix": "LEDGER_"}

    # "memory" keeps everything in-process; "file" and "sqlite" survive restarts
    backend: Literal["memory", "file", "sqlite"] = "file"
    data_dir: str = Field(default="backend/data/ledger", min_length=1)
    database_path: str = Field(default="backend/data/ledger.db", min_length=1)

    # Prefix shared with the mobile app's storage keys so its records load unchanged
    key_prefix: str = "@RummyLedger:"

    history_limit: int = Field(default=100, ge=1)
    recent_players_limit: int = Field(default=50, ge=1)
