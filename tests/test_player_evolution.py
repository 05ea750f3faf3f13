import random
from datetime import date

import pytest

from hoops_sim.app import ATTRIBUTE_LAYOUT
from hoops_sim.config import HISTORY_LIMIT, PERFORMANCE_LIMIT
from hoops_sim.evolution import (
    PlayerEvolution,
    clamp_attribute,
    count_streak,
    merge_players,
    recalculate_overall,
)
from hoops_sim.models import BoxScoreLine, InjuryDetails, Personality, Player

TODAY = date(2026, 1, 15)


def _player(value: float = 70, **overrides) -> Player:
    attributes = {category: {name: value for name in names} for category, names in ATTRIBUTE_LAYOUT.items()}
    kwargs = {
        "first_name": "Test",
        "last_name": "Player",
        "position": "SG",
        "team_id": "hbk",
        "age": 25,
        "attributes": attributes,
        "overall_rating": 70,
        "potential_rating": 80,
    }
    kwargs.update(overrides)
    return Player(**kwargs)


def _evolution(seed: int = 5, **kwargs) -> PlayerEvolution:
    return PlayerEvolution(rng=random.Random(seed), today=TODAY, **kwargs)


def _line(player: Player, **stats) -> BoxScoreLine:
    line = BoxScoreLine.for_player(player)
    for key, value in stats.items():
        setattr(line, key, value)
    return line


def _great_line(player: Player) -> BoxScoreLine:
    return _line(player, minutes=34, points=30, fgm=12, fga=18, fg3m=3, fg3a=6, ftm=3, fta=4,
                 assists=8, defensive_rebounds=7, rebounds=7, steals=2, blocks=1)


def _poor_line(player: Player) -> BoxScoreLine:
    return _line(player, minutes=30, points=2, fgm=1, fga=12, turnovers=5)


def test_clamp_attribute_respects_potential_and_floor() -> None:
    assert clamp_attribute(78, 5, 80) == 80
    assert clamp_attribute(85, 2, 80) == 85
    assert clamp_attribute(85, -2, 80) == 83
    assert clamp_attribute(26, -5, 80) == 25
    assert clamp_attribute(98, 5, 150) == 99


def test_recalculate_overall_uses_category_weights() -> None:
    player = _player(80)
    recalculate_overall(player)
    assert player.overall_rating == 80
    player.attributes = {}
    recalculate_overall(player)
    assert player.overall_rating == 75


def test_merge_players_swaps_updated_entries() -> None:
    a, b = _player(), _player()
    updated = a.copy()
    updated.fatigue = 40
    merged = merge_players([a, b], [updated])
    assert merged[0] is updated
    assert merged[1] is b


def test_post_game_works_on_copies() -> None:
    home = [_player(team_id="hbk") for _ in range(3)]
    away = [_player(team_id="msp") for _ in range(3)]
    outcome = _evolution().process_post_game(
        home, away,
        [_line(p, minutes=30, points=10) for p in home],
        [_line(p, minutes=30, points=8) for p in away],
        home_score=101, away_score=95, game_date="2026-01-15",
        home_abbreviation="HBK", away_abbreviation="MSP",
    )
    for original, updated in zip(home, outcome["home"].players):
        assert updated is not original
        assert original.fatigue == 0.0
        assert original.games_played_this_season == 0
        assert updated.games_played_this_season == 1
        assert updated.minutes_played_this_season == 30
        assert updated.fatigue > 0
    assert outcome["home"].players[0].recent_performances[-1]["opponent"] == "MSP"
    assert outcome["away"].players[0].recent_performances[-1]["won"] is False


def test_post_game_skips_players_without_box_line() -> None:
    roster = [_player(), _player()]
    result = _evolution().process_team_post_game(roster, [_line(roster[0], minutes=20)], won=True)
    assert [p.id for p in result.players] == [roster[0].id]


def test_injured_player_recovers_and_news_is_written() -> None:
    player = _player(is_injured=True, injury_details=InjuryDetails("sore_back", "Sore Back", "minor", 1))
    result = _evolution().process_team_post_game([player], [_line(player, minutes=0)], won=True)
    healed = result.players[0]
    assert not healed.is_injured
    assert healed.injury_details is None
    assert [event.event_type for event in result.news] == ["recovery"]
    assert result.summary["recoveries"][0]["injury_type"] == "Sore Back"


def test_permanent_injury_impact_lands_once_on_return() -> None:
    player = _player(is_injured=True, injury_details=InjuryDetails("acl_tear", "ACL Tear", "season_ending", 1, "", 3))
    evolution = _evolution()
    healed = evolution.process_team_post_game([player], [_line(player, minutes=0)], won=False).players[0]
    assert healed.attributes["physical"]["speed"] < 70
    assert healed.attributes["offense"]["three_point"] == 70
    speed = healed.attributes["physical"]["speed"]
    again = evolution.process_team_post_game([healed], [_line(healed, minutes=0)], won=False).players[0]
    assert again.attributes["physical"]["speed"] == speed


def test_injured_player_still_counting_down_is_not_developed() -> None:
    player = _player(is_injured=True, injury_details=InjuryDetails("calf_strain", "Calf Strain", "moderate", 5))
    result = _evolution().process_team_post_game([player], [_great_line(player)], won=True)
    updated = result.players[0]
    assert updated.is_injured
    assert updated.injury_details.games_remaining == 4
    assert updated.recent_performances == []


def test_strong_game_produces_micro_development() -> None:
    player = _player(potential_rating=90)
    result = _evolution().process_team_post_game([player], [_great_line(player)], won=True, game_date="2026-01-15")
    updated = result.players[0]
    assert updated.development_history
    assert all(entry["change"] > 0 for entry in updated.development_history)
    assert updated.attributes["offense"]["three_point"] > 70
    assert result.summary["development"][0]["player_id"] == player.id


def test_micro_development_never_passes_potential() -> None:
    player = _player(value=70, potential_rating=70)
    updated = _evolution().process_team_post_game([player], [_great_line(player)], won=True).players[0]
    for values in updated.attributes.values():
        assert all(value <= 70 for value in values.values())


def test_poor_game_produces_regression() -> None:
    player = _player()
    result = _evolution().process_team_post_game([player], [_poor_line(player)], won=False)
    updated = result.players[0]
    assert any(entry["change"] < 0 for entry in updated.development_history)
    assert "regression" in result.summary


def test_process_game_development_returns_copy() -> None:
    player = _player(potential_rating=90)
    outcome = _evolution().process_game_development(player, _great_line(player), "2026-01-15")
    assert outcome["player"] is not player
    assert outcome["development"]["type"] == "development"
    assert player.development_history == []


def test_track_performance_ignores_duplicate_games() -> None:
    player = _player()
    evolution = _evolution()
    line = _great_line(player)
    evolution.track_performance(player, line, "2026-01-15", "MSP", True)
    evolution.track_performance(player, line, "2026-01-15", "MSP", True)
    assert len(player.recent_performances) == 1
    for day in range(20):
        evolution.track_performance(player, line, f"2026-02-{day + 1:02d}", "MSP", True)
    assert len(player.recent_performances) == PERFORMANCE_LIMIT


def test_attribute_history_is_bounded() -> None:
    player = _player(potential_rating=99)
    evolution = _evolution()
    for _ in range(HISTORY_LIMIT + 25):
        evolution.apply_attribute_changes(player, {"offense.three_point": 0.01}, "2026-01-15")
    assert len(player.development_history) == HISTORY_LIMIT


def test_unknown_attribute_paths_are_ignored() -> None:
    player = _player()
    _evolution().apply_attribute_changes(player, {"offense.teleport": 5, "nonsense": 1})
    assert player.development_history == []


def _with_ratings(player: Player, ratings: list[float]) -> Player:
    player.recent_performances = [{"rating": rating} for rating in ratings]
    return player


def test_streak_detection() -> None:
    hot = PlayerEvolution.process_streaks(_with_ratings(_player(), [10, 25, 24, 30, 23]))
    assert (hot.streak_data.type, hot.streak_data.games) == ("hot", 4)
    cold = PlayerEvolution.process_streaks(_with_ratings(_player(), [5, 6, 7]))
    assert (cold.streak_data.type, cold.streak_data.games) == ("cold", 3)
    broken = _with_ratings(_player(), [25, 25, 15])
    broken.streak_data = hot.streak_data
    assert PlayerEvolution.process_streaks(broken).streak_data is None
    assert PlayerEvolution.process_streaks(_with_ratings(_player(), [30, 30])).streak_data is None


def test_streak_length_is_capped() -> None:
    player = PlayerEvolution.process_streaks(_with_ratings(_player(), [30] * 15))
    assert player.streak_data.games == 10


def test_count_streak_stops_at_first_break() -> None:
    performances = [{"rating": r} for r in (30, 5, 25, 26)]
    assert count_streak(performances, 22, above=True) == 2
    assert count_streak(performances, 8, above=False) == 0


def test_upgrade_points_from_growth() -> None:
    player = _player(potential_rating=80)
    player.development_history = [
        {"date": "2026-01-12", "change": 0.6},
        {"date": "2026-01-13", "change": 0.4},
        {"date": "2025-12-01", "change": 5.0},
        {"date": "2026-01-14", "change": -1.0},
    ]
    assert PlayerEvolution.calculate_upgrade_points_from_growth(player, "2026-01-08") == 1
    player.development_history = [{"date": "2026-01-12", "change": 0.2}]
    assert PlayerEvolution.calculate_upgrade_points_from_growth(player, "2026-01-08") == 0


def test_elite_potential_raises_weekly_upgrade_cap() -> None:
    player = _player(potential_rating=95)
    player.development_history = [{"date": "2026-01-12", "change": 3.0}]
    assert PlayerEvolution.calculate_upgrade_points_from_growth(player, "2026-01-08") == 4
    player.potential_rating = 85
    assert PlayerEvolution.calculate_upgrade_points_from_growth(player, "2026-01-08") == 3


def test_ai_upgrades_spend_points_below_potential() -> None:
    player = _player(value=70, potential_rating=72, upgrade_points=5)
    _evolution().process_ai_upgrades(player, "2026-01-15")
    assert player.upgrade_points == 0
    upgrades = [e for e in player.development_history if e.get("source") == "ai_upgrade"]
    assert len(upgrades) == 5
    for category in ("offense", "defense", "physical"):
        assert all(value <= 72 for value in player.attributes[category].values())


def test_ai_upgrade_stops_when_nothing_can_improve() -> None:
    player = _player(value=80, potential_rating=80, upgrade_points=3)
    _evolution().process_ai_upgrades(player)
    assert player.upgrade_points == 3


def test_weekly_evolution_recovers_fatigue_and_awards_points() -> None:
    player = _player(fatigue=60.0, potential_rating=85)
    player.development_history = [{"date": "2026-01-13", "change": 1.0}]
    result = _evolution().process_weekly_evolution([player], {"hbk": {"wins": 5, "losses": 1}}, "2026-01-15")
    updated = result.players[0]
    assert updated is not player
    assert updated.fatigue < 60.0
    assert updated.upgrade_points == 1
    assert result.summary["upgrade_points_awarded"][0]["points_earned"] == 1
    assert player.upgrade_points == 0


def test_weekly_evolution_ai_spends_upgrade_points() -> None:
    player = _player(potential_rating=85, upgrade_points=2)
    result = _evolution().process_weekly_evolution([player], {}, "2026-01-15", is_ai=True)
    assert result.players[0].upgrade_points == 0


def test_unhappy_player_may_request_trade() -> None:
    players = [_player(personality=Personality(morale=0), contract_years_remaining=4) for _ in range(30)]
    result = _evolution(seed=3).process_weekly_evolution(players, {}, "2026-01-15")
    requests = result.summary.get("trade_requests", [])
    assert requests
    assert any(event.event_type == "trade_request" for event in result.news)


def test_monthly_development_grows_young_players() -> None:
    player = _player(value=60, age=20, overall_rating=60, potential_rating=85)
    recalculate_overall(player)
    result = _evolution().process_monthly_development([player], current_date="2026-01-31")
    updated = result.players[0]
    assert updated is not player
    assert updated.attributes["physical"]["speed"] > 60
    assert player.attributes["physical"]["speed"] == 60


def test_monthly_development_skips_injured_players() -> None:
    player = _player(value=60, age=20, overall_rating=60, potential_rating=85, is_injured=True,
                     injury_details=InjuryDetails("calf_strain", "Calf Strain", "moderate", 5))
    updated = _evolution().process_monthly_development([player]).players[0]
    assert updated.attributes == player.attributes


def test_monthly_regression_for_veterans() -> None:
    player = _player(value=80, age=37, overall_rating=80, potential_rating=80)
    updated = _evolution().process_monthly_development([player]).players[0]
    assert updated.attributes["physical"]["speed"] < 80


def test_season_end_resets_counters_and_ages_players() -> None:
    player = _player(age=24, fatigue=55.0, games_played_this_season=60, minutes_played_this_season=1500.0,
                     contract_years_remaining=2, career_seasons=3)
    _with_ratings(player, [20, 21])
    result = _evolution().process_season_end([player], "2026-06-30")
    updated = result.players[0]
    assert updated.fatigue == 0.0
    assert updated.games_played_this_season == 0
    assert updated.minutes_played_this_season == 0.0
    assert updated.recent_performances == []
    assert updated.career_seasons == 4
    assert updated.contract_years_remaining == 1
    assert result.summary["retired"] == []


def test_old_players_retire_at_season_end() -> None:
    veteran = _player(age=45, career_seasons=20)
    youngster = _player(age=22)
    result = _evolution().process_season_end([veteran, youngster])
    assert [p.id for p in result.players] == [youngster.id]
    assert result.summary["retired"] == [veteran.full_name]
    assert [event.event_type for event in result.news] == ["retirement"]


@pytest.mark.parametrize("age", [20, 30, 34])
def test_players_under_retirement_age_never_retire(age) -> None:
    evolution = _evolution()
    assert not any(evolution.should_retire(_player(age=age), age) for _ in range(50))


def test_rest_day_recovery_skips_teams_that_played() -> None:
    rested = _player(team_id="hbk", fatigue=50.0)
    played = _player(team_id="msp", fatigue=50.0)
    updated = _evolution().process_rest_day_recovery([rested, played], ["msp"])
    assert updated[0].fatigue < 50.0
    assert updated[1] is played
    assert rested.fatigue == 50.0


def test_multi_day_rest_counts_days_without_games() -> None:
    busy = _player(team_id="hbk", fatigue=80.0)
    idle = _player(team_id="msp", fatigue=80.0)
    updated = _evolution().process_multi_day_rest_recovery([busy, idle], [["hbk"], ["hbk"], []])
    assert updated[0].fatigue > updated[1].fatigue
    assert updated[1].fatigue < 80.0
    assert _evolution().process_multi_day_rest_recovery([busy], []) == [busy]
