"""Tests for totals, leaderboard ordering, winner selection and game stats."""

import pytest

from game.logic.game import add_round
from game.logic.scoring import calculate_leaderboard, calculate_player_totals, determine_winner, get_game_stats
from game.logic.state import PlayerScore
from game.tests.factories import make_game, make_round, new_game, play_rounds, scores_for


class TestCalculatePlayerTotals:
    def test_sums_scores_across_rounds(self):
        rounds = [
            make_round("r1", 1, [PlayerScore(player_id="p1", score=10), PlayerScore(player_id="p2", score=3)]),
            make_round("r2", 2, [PlayerScore(player_id="p1", score=5), PlayerScore(player_id="p2", score=0)]),
        ]
        totals = calculate_player_totals(make_game(rounds=rounds))

        assert [(p.id, p.total_score) for p in totals] == [("p1", 15), ("p2", 3)]

    def test_keeps_player_order_and_leader_flag(self):
        game = make_game(("Alice", "Bob", "Carol"))
        game = game.model_copy(
            update={"players": (game.players[0], game.players[1].model_copy(update={"is_leader": True}), game.players[2])},
        )

        totals = calculate_player_totals(game)

        assert [p.name for p in totals] == ["Alice", "Bob", "Carol"]
        assert [p.is_leader for p in totals] == [False, True, False]

    def test_zero_without_rounds(self):
        assert [p.total_score for p in calculate_player_totals(make_game())] == [0, 0]

    def test_recomputes_over_stale_stored_totals(self):
        game = make_game(rounds=[make_round()])
        stale = game.model_copy(update={"players": tuple(p.model_copy(update={"total_score": 500}) for p in game.players)})

        assert [p.total_score for p in calculate_player_totals(stale)] == [10, 5]

    def test_rummy_rounds_add_nothing(self):
        game = new_game("Alice", "Bob")
        game = play_rounds(game, (10, 20))
        game = add_round(game, scores_for(game, 99, 7, rummy=[0]))

        assert [p.total_score for p in calculate_player_totals(game)] == [10, 27]


class TestCalculateLeaderboard:
    def test_sorted_ascending_with_single_leader(self):
        game = play_rounds(new_game("John", "Jane", "Bob"), (20, 10, 15))

        board = calculate_leaderboard(game)

        assert [(p.name, p.total_score) for p in board] == [("Jane", 10), ("Bob", 15), ("John", 20)]
        assert [p.is_leader for p in board] == [True, False, False]

    def test_ties_keep_seat_order(self):
        game = play_rounds(new_game("Alice", "Bob", "Carol", "Dave"), (30, 10, 30, 10))

        board = calculate_leaderboard(game)

        assert [p.name for p in board] == ["Bob", "Dave", "Alice", "Carol"]
        assert sum(p.is_leader for p in board) == 1
        assert board[0].name == "Bob"

    def test_all_zero_first_seat_leads(self):
        board = calculate_leaderboard(make_game(("Alice", "Bob", "Carol")))
        assert [p.name for p in board] == ["Alice", "Bob", "Carol"]
        assert board[0].is_leader is True

    @pytest.mark.parametrize(
        "rows",
        [
            [(5, 3, 9)],
            [(0, 0, 1), (4, 2, 0)],
            [(12, 12, 12), (1, 0, 2), (7, 8, 6)],
        ],
    )
    def test_always_sorted(self, rows):
        board = calculate_leaderboard(play_rounds(new_game("A", "B", "C"), *rows))
        totals = [p.total_score for p in board]
        assert totals == sorted(totals)
        assert [p.is_leader for p in board] == [True, False, False]


class TestDetermineWinner:
    def test_lowest_total_wins(self):
        game = play_rounds(new_game("Alice", "Bob"), (25, 20), (30, 25))
        winner = determine_winner(game)
        assert winner is not None
        assert winner.name == "Bob"
        assert winner.total_score == 45
        assert winner.is_leader is True

    def test_none_without_players(self):
        game = make_game().model_copy(update={"players": ()})
        assert determine_winner(game) is None


class TestGetGameStats:
    def test_stats_over_player_totals(self):
        game = new_game("Alice", "Bob", "Carol")
        game = play_rounds(game, (10, 20, 30))
        game = add_round(game, scores_for(game, 15, 0, 6, rummy=[1]))

        stats = get_game_stats(game)

        assert stats.total_rounds == 2
        assert stats.highest_score == 36
        assert stats.lowest_score == 20
        assert stats.average_score == pytest.approx((25 + 20 + 36) / 3)
        assert stats.rummy_count == 1

    def test_defaults_without_rounds(self):
        stats = get_game_stats(new_game("Alice", "Bob"))

        assert stats.total_rounds == 0
        assert stats.average_score == 0
        assert stats.highest_score == 0
        assert stats.lowest_score == 0
        assert stats.rummy_count == 0

    def test_counts_every_rummy_mark(self):
        game = new_game("Alice", "Bob")
        game = add_round(game, scores_for(game, 0, 0, rummy=[0, 1]))
        game = add_round(game, scores_for(game, 0, 12, rummy=[0]))

        assert get_game_stats(game).rummy_count == 3
