"""Tests for the frozen ledger models and their JSON shape."""

import json
from datetime import UTC, datetime

import pytest
from pydantic import ValidationError as PydanticValidationError

from game.logic.state import Game, GameStatus, PlayerScore
from game.tests.factories import make_game, make_round


class TestFrozenModels:
    def test_game_is_immutable(self):
        game = make_game()
        with pytest.raises(PydanticValidationError):
            game.status = GameStatus.COMPLETED  # type: ignore[misc]

    def test_sequences_are_tuples(self):
        game = make_game(rounds=[make_round()])
        assert isinstance(game.players, tuple)
        assert isinstance(game.rounds, tuple)
        assert isinstance(game.rounds[0].scores, tuple)


class TestJsonShape:
    def test_dumps_camel_case_fields(self):
        game = make_game(target_score=100, rounds=[make_round()])
        data = json.loads(game.model_dump_json(by_alias=True))

        assert set(data) == {"id", "players", "rounds", "targetScore", "status", "winner", "createdAt", "completedAt"}
        assert set(data["players"][0]) == {"id", "name", "totalScore", "isLeader"}
        assert set(data["rounds"][0]) == {"id", "roundNumber", "scores", "timestamp"}
        assert set(data["rounds"][0]["scores"][0]) == {"playerId", "score", "isRummy"}
        assert data["status"] == "active"
        assert data["createdAt"].startswith("2025-01-15T12:00:00")

    def test_parses_mobile_app_record(self):
        raw = json.dumps(
            {
                "id": "1700000000000-abc123def",
                "players": [
                    {"id": "a", "name": "Alice", "totalScore": 0, "isLeader": False},
                    {"id": "b", "name": "Bob", "totalScore": 0, "isLeader": False},
                ],
                "rounds": [
                    {
                        "id": "r",
                        "roundNumber": 1,
                        "scores": [
                            {"playerId": "a", "score": 0, "isRummy": True},
                            {"playerId": "b", "score": 12, "isRummy": False},
                        ],
                        "timestamp": "2024-03-01T18:30:00.000Z",
                    },
                ],
                "status": "completed",
                "winner": "a",
                "createdAt": "2024-03-01T18:00:00.000Z",
                "completedAt": "2024-03-01T19:00:00.000Z",
            },
        )

        game = Game.model_validate_json(raw)

        assert game.status == GameStatus.COMPLETED
        assert game.target_score is None
        assert game.rounds[0].timestamp == datetime(2024, 3, 1, 18, 30, tzinfo=UTC)
        assert game.rounds[0].scores[0].is_rummy is True

    def test_string_score_is_not_coerced(self):
        with pytest.raises(PydanticValidationError):
            PlayerScore.model_validate_json('{"playerId": "a", "score": "12", "isRummy": false}')

    def test_accepts_field_names_in_python(self):
        score = PlayerScore(player_id="a", score=3)
        assert score.is_rummy is False
