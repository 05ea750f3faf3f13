import copy
import random

import pytest

from hoops_sim.app import build_default_teams
from hoops_sim.aging import AttributeAging
from hoops_sim.badges import (
    BadgeDefinition,
    BadgeRegistry,
    BadgeSynergyService,
    Synergy,
    SynergyRegistry,
    default_badge_registry,
)
from hoops_sim.coaching import CoachingEngine
from hoops_sim.config import DEFENSIVE_SCHEMES, OFFENSIVE_SCHEMES
from hoops_sim.executor import ActionGraphExecutor
from hoops_sim.models import Badge, Player
from hoops_sim.plays import PLAYS, PlayCatalogService, validate_catalog


def _player(name: str, *badges: tuple[str, str], position: str = "SF") -> Player:
    return Player(first_name=name, last_name="Test", position=position, badges=[Badge(b, lvl) for b, lvl in badges])


def test_badge_registry_rejects_duplicates_and_unknown_ids() -> None:
    definition = BadgeDefinition(id="dimer", name="Dimer", category="playmaking")
    with pytest.raises(ValueError):
        BadgeRegistry([definition, definition])
    with pytest.raises(KeyError):
        default_badge_registry().get("not_a_badge")


def test_synergy_registry_validates_badges() -> None:
    badges = default_badge_registry()
    with pytest.raises(ValueError):
        SynergyRegistry([Synergy("x", "X", "dimer", "dimer", "boost", 1)], badges)
    with pytest.raises(KeyError):
        SynergyRegistry([Synergy("y", "Y", "dimer", "missing", "boost", 1)], badges)


def test_badge_level_is_validated() -> None:
    with pytest.raises(ValueError):
        Badge("dimer", "platinum")


def test_gold_synergy_development_boost() -> None:
    service = BadgeSynergyService()
    passer = _player("Pass", ("dimer", "gold"))
    shooter = _player("Shoot", ("catch_and_shoot", "gold"))
    assert service.calculate_development_boost(passer, [passer, shooter]) == pytest.approx(0.06)


def test_synergy_boost_uses_lower_badge_level() -> None:
    service = BadgeSynergyService()
    passer = _player("Pass", ("dimer", "gold"))
    shooter = _player("Shoot", ("catch_and_shoot", "bronze"))
    assert service.calculate_development_boost(passer, [passer, shooter]) == pytest.approx(0.03)


def test_development_boost_is_capped() -> None:
    service = BadgeSynergyService()
    passer = _player("Pass", ("dimer", "hof"))
    shooters = [_player(f"Shoot{i}", ("catch_and_shoot", "hof")) for i in range(4)]
    assert service.calculate_development_boost(passer, [passer, *shooters]) == pytest.approx(0.15)


def test_player_without_badges_gets_no_boost() -> None:
    service = BadgeSynergyService()
    plain = _player("Plain")
    shooter = _player("Shoot", ("catch_and_shoot", "gold"))
    assert service.calculate_development_boost(plain, [plain, shooter]) == 0.0


@pytest.mark.regression
def test_dynamic_duo_needs_two_strong_synergies() -> None:
    service = BadgeSynergyService()
    general = _player("General", ("floor_general", "gold"), ("dimer", "gold"))
    sniper = _player("Sniper", ("deadeye", "gold"), ("catch_and_shoot", "gold"))
    duos = service.get_dynamic_duos([general, sniper])
    assert len(duos) == 1
    assert duos[0]["synergy_count"] == 3
    assert service.get_dynamic_duo_boost(general, [general, sniper]) == pytest.approx(0.02)

    weak = _player("Weak", ("deadeye", "silver"), ("catch_and_shoot", "silver"))
    assert service.get_dynamic_duo_boost(general, [general, weak]) == 0.0


def test_in_game_boost_is_capped() -> None:
    service = BadgeSynergyService()
    assert service.calculate_in_game_boost(2) == pytest.approx(0.06)
    assert service.calculate_in_game_boost(10) == pytest.approx(0.12)


def test_shot_synergy_activation_needs_teammate_partner() -> None:
    service = BadgeSynergyService()
    shooter = _player("Shoot", ("catch_and_shoot", "gold"))
    passer = _player("Pass", ("dimer", "bronze"))
    boost, activated = service.shot_synergy_activations(shooter, [shooter, passer])
    assert boost == pytest.approx(0.05)
    assert activated[0]["player2"]["id"] == passer.id
    assert service.shot_synergy_activations(shooter, [shooter]) == (0.0, [])


def test_shot_badge_boost_reports_activated_badges() -> None:
    service = BadgeSynergyService()
    shooter = _player("Shoot", ("catch_and_shoot", "gold"), ("clamps", "hof"))
    boost, activated = service.shot_badge_boost(shooter, "three_pointer")
    assert boost > 0
    assert [badge["id"] for badge in activated] == ["catch_and_shoot"]


def test_default_catalog_is_valid() -> None:
    catalog = PlayCatalogService()
    assert catalog.plays
    ids = [play["id"] for play in catalog.plays]
    assert len(ids) == len(set(ids))


def test_catalog_rejects_dangling_action_reference() -> None:
    plays = copy.deepcopy(PLAYS[:1])
    first = plays[0]["actions"][0]
    outcome = next(iter(first["outcomes"].values()))
    outcome["next"] = "nowhere"
    with pytest.raises(ValueError):
        validate_catalog(plays, default_badge_registry())


def test_catalog_rejects_unknown_badge_effect() -> None:
    plays = copy.deepcopy(PLAYS[:1])
    action_id = plays[0]["actions"][0]["id"]
    plays[0]["badge_effects"] = {action_id: ["not_a_badge"]}
    with pytest.raises(KeyError):
        validate_catalog(plays, default_badge_registry())


def test_play_selection_respects_tempo() -> None:
    lineup = build_default_teams()[0].players[:5]
    catalog = PlayCatalogService(rng=random.Random(3))
    for _ in range(20):
        assert catalog.select_play(lineup, "balanced")["tempo"] == "halfcourt"


def test_catalog_lookups() -> None:
    catalog = PlayCatalogService()
    play = catalog.get_play(PLAYS[0]["id"])
    assert play is PLAYS[0]
    assert catalog.get_play("missing") is None
    assert all(p["category"] == play["category"] for p in catalog.get_plays_by_category(play["category"]))
    assert catalog.get_action(play, play["actions"][0]["id"]) is play["actions"][0]
    assert set(catalog.get_coaching_schemes()) == set(OFFENSIVE_SCHEMES)


def test_defensive_modifiers_follow_scheme_strengths() -> None:
    coaching = CoachingEngine()
    weak_spot = coaching.calculate_defensive_modifiers("man", {"category": "pick_and_roll"})
    strong_spot = coaching.calculate_defensive_modifiers("man", {"category": "isolation"})
    assert weak_spot["shot_modifier"] > strong_spot["shot_modifier"]
    press = coaching.calculate_defensive_modifiers("press", {"category": "motion"})
    assert press["turnover_modifier"] == pytest.approx(DEFENSIVE_SCHEMES["press"]["modifiers"]["turnover_boost"])


def test_unknown_defensive_scheme_falls_back_to_man() -> None:
    coaching = CoachingEngine()
    assert coaching.calculate_defensive_modifiers("mystery", {"category": "motion"}) == (
        coaching.calculate_defensive_modifiers("man", {"category": "motion"})
    )


def test_recommend_scheme_for_shooting_roster() -> None:
    roster = build_default_teams()[0].players
    for player in roster:
        player.attributes["offense"]["three_point"] = 90
        player.attributes["physical"]["speed"] = 60
    assert CoachingEngine().recommend_scheme(roster) == "three_point"
    assert CoachingEngine().recommend_scheme([]) == "balanced"


def test_scheme_effectiveness_is_bounded() -> None:
    roster = build_default_teams()[0].players
    coaching = CoachingEngine()
    for scheme in OFFENSIVE_SCHEMES:
        assert 30.0 <= coaching.calculate_scheme_effectiveness(scheme, roster) <= 100.0


def test_executor_assigns_distinct_roles_and_reports_outcome() -> None:
    teams = build_default_teams()
    offense, defense = teams[0].players[:5], teams[1].players[:5]
    executor = ActionGraphExecutor(rng=random.Random(12))
    offense_ids = {p.id for p in offense}
    for play in PLAYS:
        result = executor.execute_play(play, offense, defense, "man", {})
        assigned = list(result.role_assignments.values())
        assert set(assigned) <= offense_ids
        assert len(assigned) == len(set(assigned))
        assert result.points in (0, 1, 2, 3, 4)
        assert result.duration >= 0
        if result.shot_attempt is not None:
            assert result.shot_attempt.shooter in offense_ids


def test_chemistry_contribution_counts_synergy_pairs() -> None:
    service = BadgeSynergyService()
    passer = _player("Pass", ("dimer", "bronze"))
    shooters = [_player(f"Shoot{i}", ("catch_and_shoot", "silver")) for i in range(2)]
    plain = _player("Plain")
    assert service.calculate_chemistry_contribution([passer, shooters[0], plain]) == 2
    assert service.calculate_chemistry_contribution([passer, *shooters, plain]) == 4
    assert service.calculate_chemistry_contribution([plain]) == 0


def _spot_up_play() -> dict:
    return {
        "id": "spot_up_test",
        "name": "Spot Up",
        "category": "spot_up",
        "roles": {"shooter": ["SF"]},
        "formation": {"shooter": (0.5, 0.3)},
        "actions": [{
            "id": "catch_shoot",
            "type": "shot",
            "duration": 2.0,
            "actor": "shooter",
            "shot_type": "three_point",
            "outcomes": {
                "made": {"next": "end_made", "probability": 0.4, "points": 3},
                "missed": {"next": "rebound_battle", "probability": 0.6},
            },
        }],
    }


@pytest.mark.regression
def test_shot_badges_and_synergies_raise_make_rate() -> None:
    play = _spot_up_play()
    shooter = _player("Shoot", ("catch_and_shoot", "gold"))
    passer = _player("Pass", ("dimer", "gold"), position="PG")
    boosted = ActionGraphExecutor(rng=random.Random(4), synergies=BadgeSynergyService())
    plain = ActionGraphExecutor(rng=random.Random(4))

    result = boosted.execute_play(play, [shooter, passer], [], "man", {})
    assert [badge["id"] for badge in result.shot_badges] == ["catch_and_shoot"]
    assert result.activated_synergies[0]["player2"]["id"] == passer.id
    assert plain.execute_play(play, [shooter, passer], [], "man", {}).activated_synergies == []

    boosted = ActionGraphExecutor(rng=random.Random(4), synergies=BadgeSynergyService())
    plain = ActionGraphExecutor(rng=random.Random(4))
    made_boosted = sum(boosted.execute_play(play, [shooter, passer], [], "man", {}).points > 0 for _ in range(200))
    made_plain = sum(plain.execute_play(play, [shooter, passer], [], "man", {}).points > 0 for _ in range(200))
    assert made_boosted > made_plain


def test_shot_boost_shifts_made_probability() -> None:
    executor = ActionGraphExecutor(rng=random.Random(1))
    action = _spot_up_play()["actions"][0]
    shooter = _player("Shoot")
    base = executor.modified_outcomes(action, shooter, None)
    boosted = executor.modified_outcomes(action, shooter, None, shot_boost=0.1)
    assert boosted["made"] > base["made"]
    assert sum(boosted.values()) == pytest.approx(1.0)


def _weight_play(**overrides) -> dict:
    play = {"id": "w", "category": "isolation", "primary_positions": ["SF"], "difficulty": 50, "tags": []}
    play.update(overrides)
    return play


def _iq_lineup(iq: float) -> list[Player]:
    player = _player("Smart")
    player.attributes = {"mental": {"basketball_iq": iq}}
    return [player]


def test_play_weight_position_fit_and_iq_penalty() -> None:
    catalog = PlayCatalogService()
    lineup = _iq_lineup(50)
    assert catalog.play_weight(_weight_play(), lineup, "balanced", {}) == pytest.approx(1.0)
    assert catalog.play_weight(_weight_play(primary_positions=["C"]), lineup, "balanced", {}) == pytest.approx(0.5)
    assert catalog.play_weight(_weight_play(difficulty=80), lineup, "balanced", {}) == pytest.approx(0.7)
    assert catalog.play_weight(_weight_play(difficulty=100), _iq_lineup(20), "balanced", {}) == pytest.approx(0.5)


def test_play_weight_late_clock_and_trailing_boosts() -> None:
    catalog = PlayCatalogService()
    lineup = _iq_lineup(50)
    play = _weight_play()
    assert catalog.play_weight(play, lineup, "balanced", {"shot_clock": 6}) == pytest.approx(1.5)
    assert catalog.play_weight(play, lineup, "balanced", {"score_differential": -12}) == pytest.approx(1.3)
    assert catalog.play_weight(play, lineup, "balanced", {"score_differential": -10}) == pytest.approx(1.0)
    both = {"shot_clock": 6, "score_differential": -12}
    assert catalog.play_weight(play, lineup, "balanced", both) == pytest.approx(1.95)
    post = _weight_play(category="post_up")
    assert catalog.play_weight(post, lineup, "balanced", both) == pytest.approx(1.0)
    three = _weight_play(category="post_up", tags=["three_point"])
    assert catalog.play_weight(three, lineup, "balanced", {"score_differential": -12}) == pytest.approx(1.3)


def test_plays_by_tags_require_every_tag() -> None:
    catalog = PlayCatalogService()
    tagged = next(play for play in PLAYS if len(play.get("tags", [])) >= 2)
    found = catalog.get_plays_by_tags(tagged["tags"][:2])
    assert tagged in found
    assert all(set(tagged["tags"][:2]) <= set(play["tags"]) for play in found)
    assert catalog.get_plays_by_tags(["no_such_tag"]) == []


def test_scheme_weight_helpers() -> None:
    coaching = CoachingEngine()
    plays = [{"category": "motion"}, {"category": "isolation"}, {}]
    assert [weight for _play, weight in coaching.adjust_play_probabilities(plays, "motion")] == [2.0, 0.5, 2.0]
    assert coaching.scheme_favors_category("motion", "motion")
    assert not coaching.scheme_favors_category("motion", "isolation")
    assert not coaching.scheme_favors_category("balanced", "pick_and_roll")
    assert coaching.get_tempo_modifier("run_and_gun") == pytest.approx(1.3)
    assert coaching.get_tempo_modifier("mystery") == 1.0


def test_age_ceiling_depends_on_profile() -> None:
    aging = AttributeAging(rng=random.Random(2))
    assert aging.is_at_age_ceiling("standing_dunk", 30, 50, 90)
    assert not aging.is_at_age_ceiling("standing_dunk", 25, 50, 90)
    assert aging.is_at_age_ceiling("standing_dunk", 25, 90, 90)
    assert not aging.is_at_age_ceiling("basketball_iq", 36, 60, 80)
    assert not aging.is_at_age_ceiling("not_an_attribute", 40, 99, 50)
