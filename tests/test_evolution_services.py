import random
from datetime import date

import pytest

from hoops_sim.adapters import NewsEventModel
from hoops_sim.aging import AttributeAging
from hoops_sim.app import ATTRIBUTE_LAYOUT
from hoops_sim.config import INJURY_CHANCE_CAP, INJURY_TYPES
from hoops_sim.development import (
    DEFAULT_AGE,
    DevelopmentCalculator,
    calculate_age,
    calculate_performance_rating,
    get_age_bracket,
)
from hoops_sim.engine import GameResult
from hoops_sim.fatigue import FatigueModel, find_bracket
from hoops_sim.injuries import InjuryService, get_recovery_estimate
from hoops_sim.models import BoxScoreLine, InjuryDetails, Personality, Player
from hoops_sim.morale import MoraleService, get_expected_minutes, get_morale_level
from hoops_sim.news import EvolutionNewsService, GameNewsService, format_attribute_boosts
from hoops_sim.personality import PersonalityEffects


def _player(value: float = 70, **overrides) -> Player:
    attributes = {category: {name: value for name in names} for category, names in ATTRIBUTE_LAYOUT.items()}
    kwargs = {"first_name": "Sam", "last_name": "Carter", "position": "PF", "age": 26, "attributes": attributes}
    kwargs.update(overrides)
    return Player(**kwargs)


# Injuries

def test_injury_chance_is_capped() -> None:
    player = _player(value=25, fatigue=100.0, injury_risk="H")
    chance = InjuryService().calculate_injury_chance(player, 48, 45, is_playoff=True)
    assert chance == INJURY_CHANCE_CAP

    fragile = _player(fatigue=100.0, injury_risk="H")
    fragile.attributes["physical"]["durability"] = 0
    assert InjuryService().calculate_injury_chance(fragile, 48, 40, is_playoff=True) == 0.05


def test_injury_chance_baseline_and_playoff_multiplier() -> None:
    player = _player(value=100)
    service = InjuryService()
    regular = service.calculate_injury_chance(player, 36, 25)
    assert regular == pytest.approx(0.002)
    assert service.calculate_injury_chance(player, 36, 25, is_playoff=True) == pytest.approx(regular * 1.2)
    player.injury_risk = "L"
    assert service.calculate_injury_chance(player, 36, 25) == pytest.approx(0.001)


def test_no_injury_roll_without_minutes_or_when_hurt() -> None:
    service = InjuryService(rng=random.Random(1))
    player = _player(value=25, injury_risk="H", fatigue=100.0)
    assert service.check_for_injury(player, 0, 40) is None
    player.is_injured = True
    assert service.check_for_injury(player, 40, 40) is None


def test_generated_injury_matches_its_severity_table() -> None:
    service = InjuryService(rng=random.Random(7))
    for _ in range(50):
        injury = service.generate_injury("2026-01-15")
        data = INJURY_TYPES[injury.severity]
        low, high = data["duration"]
        assert low <= injury.games_remaining <= high
        assert (injury.injury_type, injury.name) in data["injuries"]
        assert injury.permanent_impact == data["permanent_impact"]
        assert injury.occurred_date == "2026-01-15"


def test_recovery_counts_down_games() -> None:
    player = _player(is_injured=True, injury_details=InjuryDetails("calf_strain", "Calf Strain", "moderate", 2))
    service = InjuryService()
    service.process_recovery(player)
    assert service.is_injured(player)
    service.process_recovery(player)
    assert not player.is_injured
    assert player.injury_details is None


@pytest.mark.parametrize(
    "games, label",
    [(3, "day-to-day"), (10, "1-2 weeks"), (20, "2-4 weeks"), (40, "4-6 weeks"), (55, "6-8 weeks"), (70, "out for season")],
)
def test_recovery_estimates(games, label) -> None:
    assert get_recovery_estimate(games) == label


# Fatigue

def test_fatigue_brackets() -> None:
    assert find_bracket(5)["type"] == "recovery"
    assert find_bracket(8.5)["base"] == 1.0
    assert find_bracket(36)["base"] == 6.5
    assert find_bracket(55)["base"] == 6.5


def test_heavy_minutes_add_fatigue_light_minutes_recover() -> None:
    model = FatigueModel(rng=random.Random(2))
    player = _player(fatigue=20.0)
    model.update_fatigue(player, 36)
    assert player.fatigue > 20.0
    tired = player.fatigue
    model.update_fatigue(player, 4)
    assert 0.0 <= player.fatigue < tired


def test_fatigue_stays_in_bounds() -> None:
    model = FatigueModel(rng=random.Random(3))
    player = _player(fatigue=99.0, value=25)
    model.update_fatigue(player, 45)
    assert player.fatigue == 100.0
    player.fatigue = 1.0
    model.recover_weekly(player)
    assert player.fatigue == 0.0


def test_rookie_wall_multiplies_fatigue_gain() -> None:
    model = FatigueModel()
    veteran = _player(career_seasons=3, games_played_this_season=55)
    rookie = _player(career_seasons=0, games_played_this_season=55)
    model.update_fatigue(veteran, 36)
    model.update_fatigue(rookie, 36)
    assert rookie.fatigue == pytest.approx(veteran.fatigue * 1.5)
    assert not model.in_rookie_wall(_player(career_seasons=0, games_played_this_season=75))


def test_fatigue_performance_modifier() -> None:
    assert FatigueModel.performance_modifier(30) == 1.0
    assert FatigueModel.performance_modifier(50) == 1.0
    assert FatigueModel.performance_modifier(75) == pytest.approx(0.875)
    assert FatigueModel.performance_modifier(100) == pytest.approx(0.75)


# Morale

def test_expected_minutes_by_rating_and_difficulty() -> None:
    assert get_expected_minutes(_player(overall_rating=90), "hall_of_fame") == 31
    assert get_expected_minutes(_player(overall_rating=90), "hall-of-fame") == 31
    assert get_expected_minutes(_player(overall_rating=77)) == 24
    assert get_expected_minutes(_player(overall_rating=50)) == 6


def test_morale_after_win_with_expected_minutes() -> None:
    player = _player(overall_rating=77, personality=Personality(morale=70))
    MoraleService().update_after_game(player, won=True, minutes=24)
    assert player.personality.morale == 72


def test_losing_streak_and_benching_hurt_morale() -> None:
    player = _player(overall_rating=77, personality=Personality(morale=70))
    MoraleService().update_after_game(player, won=False, minutes=5, streak=-4)
    assert player.personality.morale == 64


def test_hot_head_swings_harder() -> None:
    calm = _player(overall_rating=77, personality=Personality(morale=70))
    hot = _player(overall_rating=77, personality=Personality(traits=["hot_head"], morale=70))
    service = MoraleService()
    service.update_after_game(calm, won=False, minutes=5)
    service.update_after_game(hot, won=False, minutes=5)
    assert 70 - hot.personality.morale == 2 * (70 - calm.personality.morale)


def test_morale_is_clamped() -> None:
    player = _player(personality=Personality(morale=99), overall_rating=50)
    MoraleService().update_after_game(player, won=True, minutes=40, streak=5)
    assert player.personality.morale == 100


def test_weekly_morale_contract_year_penalty() -> None:
    player = _player(contract_years_remaining=1, personality=Personality(morale=60))
    MoraleService().update_weekly(player, wins=2, losses=2)
    assert player.personality.morale == 55


def test_content_players_never_request_trades() -> None:
    service = MoraleService(rng=random.Random(1))
    assert not any(service.check_for_trade_request(_player(personality=Personality(morale=60))) for _ in range(50))


def test_team_chemistry_from_traits() -> None:
    roster = [_player(personality=Personality(traits=["leader"]))] + [_player() for _ in range(4)]
    assert MoraleService.calculate_team_chemistry(roster) == 80
    hogs = [_player(personality=Personality(traits=["ball_hog"])) for _ in range(3)]
    assert MoraleService.calculate_team_chemistry(hogs) == 51


def test_morale_levels_and_modifiers() -> None:
    assert get_morale_level(85) == "high"
    assert get_morale_level(50) == "normal"
    assert get_morale_level(30) == "low"
    assert get_morale_level(5) == "critical"
    assert MoraleService.get_performance_modifier(10) == pytest.approx(-0.05)
    assert MoraleService.get_development_modifier(90) == pytest.approx(0.05)


# Personality

def test_mentor_caps_mentees_across_roster() -> None:
    effects = PersonalityEffects(today=date(2026, 1, 1))
    mentor = _player(age=33, personality=Personality(traits=["mentor"]))
    young = [_player(age=age) for age in (19, 20, 21)]
    veteran = _player(age=29)
    assignments = effects.assign_mentors([mentor, veteran, *young])
    assert set(assignments) == {young[0].id, young[1].id}
    assert all(mentors == [mentor.id] for mentors in assignments.values())


def test_mentor_bonus_only_for_young_players() -> None:
    effects = PersonalityEffects()
    mentor = _player(age=33, personality=Personality(traits=["mentor"]))
    assert effects.get_mentor_bonus(mentor, _player(age=21)) == pytest.approx(0.15)
    assert effects.get_mentor_bonus(mentor, _player(age=27)) == 0.0
    assert effects.get_mentor_bonus(_player(age=33), _player(age=21)) == 0.0


def test_development_modifier_from_traits_and_work_ethic() -> None:
    effects = PersonalityEffects()
    grinder = _player(personality=Personality(traits=["competitor"]))
    grinder.attributes["mental"]["work_ethic"] = 90
    assert effects.get_development_modifier(grinder) == pytest.approx(0.25)
    coaster = _player(personality=Personality(traits=["mentor"]))
    coaster.attributes["mental"]["work_ethic"] = 45
    assert effects.get_development_modifier(coaster) == pytest.approx(-0.15)


def test_trait_lookups() -> None:
    effects = PersonalityEffects(rng=random.Random(1))
    hog = _player(personality=Personality(traits=["ball_hog", "hot_head"]))
    assert effects.get_usage_modifier(hog) == pytest.approx(0.1)
    assert effects.get_assist_modifier(hog) == pytest.approx(-0.1)
    assert effects.get_morale_volatility(hog) == 2.0
    assert effects.check_for_ejection(hog, technicals=2)
    assert set(effects.get_trait_effects_summary(hog)) == {"ball_hog", "hot_head"}
    quiet = _player(personality=Personality(traits=["quiet", "leader"]))
    assert effects.get_morale_stability(quiet) == pytest.approx(0.7)
    assert not effects.check_for_technical_foul(quiet)
    assert effects.calculate_leadership_effect(quiet) == {"chemistry_boost": 5, "development_boost": 0.05}


# News

def test_injury_news_mentions_player_and_estimate() -> None:
    player = _player(team_id="hbk")
    injury = InjuryDetails("acl_tear", "ACL Tear", "season_ending", 70)
    event = EvolutionNewsService(rng=random.Random(1)).create_injury_news(player, injury, "2026-01-15")
    assert event.event_type == "injury"
    assert player.full_name in event.headline
    assert "for the season" in event.body
    assert event.to_dict()["team_id"] == "hbk"


def test_news_events_carry_player_ids() -> None:
    service = EvolutionNewsService(rng=random.Random(4))
    player = _player()
    events = [
        service.create_hot_streak_news(player, 4, {"offense.three_point": 0.5}),
        service.create_cold_streak_news(player, 3),
        service.create_development_news(player, "offense.mid_range", 1.5),
        service.create_breakout_news(player, 4, 21),
        service.create_decline_news(player, 3, 36),
        service.create_trade_request_news(player),
        service.create_retirement_news(player, 14),
    ]
    assert [e.event_type for e in events] == [
        "hot_streak", "cold_streak", "development", "breakout", "decline", "trade_request", "retirement",
    ]
    assert all(e.player_id == player.id for e in events)
    assert "three point" in events[0].body


@pytest.mark.regression
def test_news_events_carry_campaign_id() -> None:
    player = _player()
    event = EvolutionNewsService(rng=random.Random(2), campaign_id="c-7").create_trade_request_news(player)
    assert event.campaign_id == "c-7"
    assert NewsEventModel.from_domain(event).dump()["campaignId"] == "c-7"
    assert EvolutionNewsService().create_trade_request_news(player).campaign_id is None


def _close_result(home_score: int, away_score: int, clutch_home: bool | None, overtime: int = 0) -> GameResult:
    clutch = None
    if clutch_home is not None:
        clutch = {"player_id": "p9", "player_name": "Ace Shooter", "shot_type": "three-pointer",
                  "is_home_team": clutch_home, "points": 3}
    return GameResult(
        home_team="Harbor Kings", away_team="Metro Sparks", home_team_id="hbk", away_team_id="msp",
        home_score=home_score, away_score=away_score, home_box=[], away_box=[], box_score={},
        quarter_scores={}, clutch_play=clutch, overtime_periods=overtime,
    )


def test_game_winner_news_names_the_winning_side() -> None:
    service = GameNewsService(rng=random.Random(3), campaign_id="c-1")
    events = service.create_game_news(_close_result(98, 100, clutch_home=False), "2026-02-10")
    assert len(events) == 1
    winner = events[0]
    assert winner.event_type == "game_winner"
    assert winner.team_id == "msp"
    assert winner.player_id == "p9"
    assert winner.campaign_id == "c-1"
    assert winner.body == (
        "Ace Shooter hit a clutch three-pointer to give the Metro Sparks a 98-100 victory over the Harbor Kings."
    )


def test_game_winner_news_needs_close_win_by_clutch_side() -> None:
    service = GameNewsService(rng=random.Random(3))
    assert service.create_game_news(_close_result(100, 98, clutch_home=False)) == []
    assert service.create_game_news(_close_result(110, 98, clutch_home=True)) == []
    assert service.create_game_news(_close_result(100, 98, clutch_home=None)) == []


def test_overtime_thriller_headline_counts_periods() -> None:
    service = GameNewsService(rng=random.Random(3))
    single = service.create_game_news(_close_result(120, 110, clutch_home=None, overtime=1))
    assert [e.headline for e in single] == ["Harbor Kings outlasts Metro Sparks in OT thriller"]
    assert single[0].team_id == "hbk"
    triple = service.create_game_news(_close_result(130, 131, clutch_home=None, overtime=3))
    assert triple[0].headline == "Metro Sparks outlasts Harbor Kings in 3OT thriller"
    assert "after 3 overtime period(s)" in triple[0].body


def test_format_attribute_boosts() -> None:
    assert format_attribute_boosts({}) == ""
    assert format_attribute_boosts({"defense.steal": 1}) == "Their +1 steal ratings have improved."


# Aging and development

def test_seasonal_aging_hits_athleticism_first() -> None:
    aging = AttributeAging()
    attributes = _player(value=80).attributes
    aged = aging.apply_seasonal_aging(attributes, 33)
    assert aged["physical"]["speed"] == pytest.approx(79.2)
    assert aged["mental"]["basketball_iq"] == 80
    assert aging.apply_seasonal_aging(attributes, 24) == attributes
    assert aging.get_most_vulnerable_attributes(33)[0] in ("speed", "acceleration", "vertical", "stamina")


def test_monthly_attribute_change_by_age() -> None:
    aging = AttributeAging()
    assert aging.calculate_attribute_change("speed", 22, 0.5, 0.0) == 0.5
    assert aging.calculate_attribute_change("speed", 27, 0.5, 0.0) == 0.0
    assert aging.calculate_attribute_change("three_point", 30, 0.5, 0.0) == 0.25
    assert aging.calculate_attribute_change("speed", 35, 0.0, 0.0) == pytest.approx(-0.4)
    assert aging.calculate_attribute_change("unknown_attr", 30, 0.5, 0.2) == pytest.approx(0.3)


def test_calculate_age_defaults_on_bad_input() -> None:
    today = date(2026, 1, 15)
    assert calculate_age("2000-06-01", today) == 25
    assert calculate_age("2000-01-15", today) == 26
    assert calculate_age("not-a-date", today) == DEFAULT_AGE
    assert calculate_age(None, today) == DEFAULT_AGE
    assert calculate_age("2030-01-01", today) == DEFAULT_AGE


def test_age_brackets() -> None:
    assert get_age_bracket(17) == "youth"
    assert get_age_bracket(25) == "rising"
    assert get_age_bracket(29) == "prime"
    assert get_age_bracket(33) == "decline"
    assert get_age_bracket(48) == "veteran"


def test_performance_rating_rewards_efficiency() -> None:
    good = BoxScoreLine("a", "A", minutes=30, points=25, fgm=10, fga=16, assists=5, defensive_rebounds=6)
    bad = BoxScoreLine("b", "B", minutes=30, points=6, fgm=3, fga=15, turnovers=4)
    assert calculate_performance_rating(good) > 16 > 8 > calculate_performance_rating(bad)


def test_no_monthly_development_at_potential() -> None:
    calculator = DevelopmentCalculator(rng=random.Random(1))
    player = _player(overall_rating=80, potential_rating=80)
    assert calculator.calculate_monthly_development(player) == 0.0
    assert not calculator.can_reach_potential(player)


def test_difficulty_scales_development() -> None:
    calculator = DevelopmentCalculator()
    player = _player(age=21, overall_rating=65, potential_rating=85)
    rookie = calculator.calculate_monthly_development(player, difficulty="rookie")
    legend = calculator.calculate_monthly_development(player, difficulty="hall_of_fame")
    assert rookie > legend > 0
    assert calculator.calculate_monthly_development(player, difficulty="unknown") == pytest.approx(
        calculator.calculate_monthly_development(player, difficulty="pro")
    )
