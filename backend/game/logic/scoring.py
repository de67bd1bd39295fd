"""
Score aggregation for Rummy games.

Lowest total wins. Totals are always derived from the game's rounds;
the total_score and is_leader fields stored on Player are never read back
as authoritative.
"""

from game.logic.state import Game, GameStats, Player


def calculate_player_totals(game: Game) -> list[Player]:
    """
    Return the game's players with total_score recomputed from all rounds.

    Players keep the order of game.players; is_leader is left untouched.
    Scores referencing an unknown player id are ignored.
    """
    totals = {player.id: 0 for player in game.players}
    for round_ in game.rounds:
        for player_score in round_.scores:
            if player_score.player_id in totals:
                totals[player_score.player_id] += player_score.score
    return [player.model_copy(update={"total_score": totals[player.id]}) for player in game.players]


def calculate_leaderboard(game: Game) -> list[Player]:
    """
    Return players sorted ascending by total score, with only the first marked as leader.

    Ties keep the order the players were seated in (their index in game.players).
    The tiebreak is part of the sort key rather than relying on sort stability.
    """
    totals = calculate_player_totals(game)
    ranked = sorted(enumerate(totals), key=lambda entry: (entry[1].total_score, entry[0]))
    return [player.model_copy(update={"is_leader": rank == 0}) for rank, (_, player) in enumerate(ranked)]


def determine_winner(game: Game) -> Player | None:
    """Return the player with the lowest total, or None for a game with no players."""
    if not game.players:
        return None
    return calculate_leaderboard(game)[0]


def get_game_stats(game: Game) -> GameStats:
    """
    Summarize a game.

    average/highest/lowest are computed over per-player totals, not per-round
    values. rummy_count counts individual Rummy marks across all rounds.
    """
    totals = [player.total_score for player in calculate_player_totals(game)]
    rummy_count = sum(1 for round_ in game.rounds for player_score in round_.scores if player_score.is_rummy)

    if not game.rounds or not totals:
        return GameStats(total_rounds=len(game.rounds), average_score=0, highest_score=0, lowest_score=0, rummy_count=0)

    return GameStats(
        total_rounds=len(game.rounds),
        average_score=sum(totals) / len(totals),
        highest_score=max(totals),
        lowest_score=min(totals),
        rummy_count=rummy_count,
    )
