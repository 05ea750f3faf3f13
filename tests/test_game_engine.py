import random

import pytest

from hoops_sim.app import build_default_teams
from hoops_sim.config import OVERTIME_LENGTH, QUARTER_LENGTH, QUARTERS
from hoops_sim.engine import GameOptions, GameSimulator, IncompleteLineupError, calculate_chemistry_modifier
from hoops_sim.executor import PlayResult, ShotAttempt
from hoops_sim.models import Team


def _sim(seed: int = 11) -> GameSimulator:
    return GameSimulator(rng=random.Random(seed))


def _teams() -> tuple[Team, Team]:
    teams = build_default_teams()
    return teams[0], teams[1]


@pytest.mark.parametrize("seed", [1, 2, 3, 4, 5])
def test_game_never_ends_tied(seed) -> None:
    home, away = _teams()
    result = _sim(seed).simulate_game(home, away)
    assert result.home_score != result.away_score
    assert result.winner in ("home", "away")


def test_final_score_matches_box_points_and_quarters() -> None:
    home, away = _teams()
    result = _sim(21).simulate_game(home, away)
    assert sum(line.points for line in result.home_box) == result.home_score
    assert sum(line.points for line in result.away_box) == result.away_score
    assert sum(result.quarter_scores["home"]) == result.home_score
    assert sum(result.quarter_scores["away"]) == result.away_score
    assert len(result.quarter_scores["home"]) == QUARTERS + result.overtime_periods


def test_box_score_counting_stats_are_consistent() -> None:
    home, away = _teams()
    result = _sim(5).simulate_game(home, away)
    for line in result.home_box + result.away_box:
        assert line.fgm <= line.fga
        assert line.fg3m <= line.fg3a <= line.fga
        assert line.fg3m <= line.fgm
        assert line.ftm <= line.fta
        assert line.minutes >= 0


def test_team_minutes_cover_five_players_for_whole_game() -> None:
    home, away = _teams()
    result = _sim(8).simulate_game(home, away)
    game_minutes = QUARTERS * QUARTER_LENGTH + result.overtime_periods * OVERTIME_LENGTH
    assert sum(line.minutes for line in result.home_box) == pytest.approx(5 * game_minutes, abs=0.01)
    assert sum(line.minutes for line in result.away_box) == pytest.approx(5 * game_minutes, abs=0.01)


def test_plus_minus_nets_to_score_margin() -> None:
    home, away = _teams()
    result = _sim(13).simulate_game(home, away)
    margin = result.home_score - result.away_score
    assert sum(line.plus_minus for line in result.home_box) == 5 * margin
    assert sum(line.plus_minus for line in result.away_box) == -5 * margin


def test_input_rosters_are_not_mutated() -> None:
    home, away = _teams()
    before = [(p.id, p.fatigue, p.overall_rating) for p in home.players]
    _sim(3).simulate_game(home, away)
    assert [(p.id, p.fatigue, p.overall_rating) for p in home.players] == before


def test_short_roster_raises_incomplete_lineup() -> None:
    home, away = _teams()
    home.players = home.players[:4]
    home.lineup_settings.starters = []
    with pytest.raises(IncompleteLineupError, match="Home lineup count") as excinfo:
        _sim().simulate_game(home, away)
    assert excinfo.value.home_size < 5
    assert excinfo.value.away_size == 5


def test_simulator_instance_runs_one_game() -> None:
    home, away = _teams()
    sim = _sim()
    sim.simulate_game(home, away)
    with pytest.raises(RuntimeError):
        sim.simulate_game(home, away)


def test_user_lineup_with_wrong_positions_falls_back_to_auto_select() -> None:
    home, away = _teams()
    centers = [p.id for p in home.players if p.position == "C"]
    guards = [p.id for p in home.players if p.position == "PG"]
    bad_lineup = centers[:1] + guards[:1] + centers[1:2] + guards[1:2] + centers[2:3]
    sim = _sim()
    sim.initialize(home, away, GameOptions(user_team_id=home.id, user_lineup=bad_lineup))
    ids = [p.id for p in sim.home.lineup]
    assert len(ids) == 5
    assert len(set(ids)) == 5
    assert ids != bad_lineup


def test_injured_starter_is_replaced() -> None:
    home, away = _teams()
    starter = home.find_player(home.lineup_settings.starter_ids()[0])
    starter.is_injured = True
    sim = _sim()
    sim.initialize(home, away, GameOptions())
    assert starter.id not in [p.id for p in sim.home.lineup]
    assert len(sim.home.lineup) == 5


def test_user_target_minutes_are_used_verbatim() -> None:
    home, away = _teams()
    targets = {p.id: (40 if i < 5 else 0) for i, p in enumerate(home.players)}
    sim = _sim()
    sim.initialize(home, away, GameOptions(user_team_id=home.id, target_minutes=targets))
    assert sim.home.target_minutes == targets


def test_resumable_game_plays_to_completion() -> None:
    home, away = _teams()
    update = _sim(31).start_game(home, away, GameOptions(is_live_game=True))
    assert update.quarter_result.quarter == 1
    assert not update.is_complete
    quarters = 1
    while not update.is_complete:
        update = _sim(31 + quarters).continue_game(update.game_state)
        quarters += 1
    assert quarters >= QUARTERS
    assert update.game_state is None
    final = update.final_result
    assert final is not None
    assert final.home_score != final.away_score
    assert sum(final.quarter_scores["home"]) == final.home_score


def test_sim_to_end_finishes_game() -> None:
    home, away = _teams()
    update = _sim(40).start_game(home, away)
    final = _sim(41).sim_to_end(update.game_state)
    assert final.is_complete
    assert final.final_result.home_score != final.final_result.away_score


def test_serialized_state_reloads_identically() -> None:
    home, away = _teams()
    state = _sim(17).start_game(home, away).game_state
    sim = _sim(18)
    sim.load_state(state)
    again = sim.serialize_state()
    state.pop("last_updated_at")
    again.pop("last_updated_at")
    assert again == state


@pytest.mark.regression
def test_future_state_version_is_rejected() -> None:
    home, away = _teams()
    state = _sim().start_game(home, away).game_state
    state["version"] = 999
    with pytest.raises(ValueError, match="Unsupported game state version 999"):
        _sim().continue_game(state)


def test_finished_state_cannot_resume() -> None:
    home, away = _teams()
    state = _sim().start_game(home, away).game_state
    state["status"] = "complete"
    with pytest.raises(RuntimeError):
        _sim().continue_game(state)


@pytest.mark.regression
def test_legacy_state_with_single_scheme_migrates() -> None:
    home, away = _teams()
    state = _sim().start_game(home, away).game_state
    for prefix in ("home", "away"):
        state.pop(f"{prefix}_offensive_scheme")
        state.pop(f"{prefix}_defensive_scheme")
    state["home_coaching_scheme"] = "motion"
    state["version"] = 3
    sim = _sim()
    sim.load_state(state)
    assert sim.home.offensive_scheme == "motion"
    assert sim.home.defensive_scheme == "man"
    assert sim.away.offensive_scheme == "balanced"


def test_adjustments_change_lineup_and_schemes() -> None:
    home, away = _teams()
    state = _sim().start_game(home, away).game_state
    bench = [p["id"] for p in state["home_players"] if p["id"] not in state["home_lineup"]][:5]
    sim = _sim()
    sim.load_state(state)
    sim.apply_adjustments({"home_lineup": bench, "offensive_style": "three_point", "defensive_style": "zone_2_3"})
    assert [p.id for p in sim.home.lineup] == bench
    assert sim.home.offensive_scheme == "three_point"
    assert sim.home.defensive_scheme == "zone_2_3"


def test_unknown_lineup_adjustment_is_ignored() -> None:
    home, away = _teams()
    state = _sim().start_game(home, away).game_state
    sim = _sim()
    sim.load_state(state)
    before = [p.id for p in sim.home.lineup]
    sim.apply_adjustments({"home_lineup": ["nobody", "else"]})
    assert [p.id for p in sim.home.lineup] == before


@pytest.mark.regression
def test_user_lineup_with_repeated_player_falls_back_to_auto_select() -> None:
    home, away = _teams()
    auto = [p.id for p in GameSimulator.select_lineup(home.players)]
    repeated = [auto[0], auto[0], *auto[2:]]
    sim = _sim()
    sim.initialize(home, away, GameOptions(user_team_id=home.id, user_lineup=repeated))
    ids = [p.id for p in sim.home.lineup]
    assert len(ids) == 5
    assert len(set(ids)) == 5


@pytest.mark.regression
def test_lineup_adjustment_with_repeated_ids_keeps_five_distinct_players() -> None:
    home, away = _teams()
    state = _sim().start_game(home, away).game_state
    bench = [p["id"] for p in state["home_players"] if p["id"] not in state["home_lineup"]][:5]
    sim = _sim()
    sim.load_state(state)
    sim.apply_adjustments({"home_lineup": [bench[0], *bench]})
    assert [p.id for p in sim.home.lineup] == bench

    before = [p.id for p in sim.home.lineup]
    sim.apply_adjustments({"home_lineup": [state["home_lineup"][0]] * 2 + state["home_lineup"][1:4]})
    assert [p.id for p in sim.home.lineup] == before


def _clutch_sim() -> GameSimulator:
    home, away = _teams()
    sim = _sim()
    sim.initialize(home, away, GameOptions())
    sim.current_quarter = QUARTERS
    sim.time_remaining = 1.0
    return sim


def _made_shot(shooter_id: str, points: int) -> PlayResult:
    shot = ShotAttempt(shooter=shooter_id, shooter_name="Shooter", shot_type="mid_range", made=True, points=points)
    return PlayResult("p", "Play", "isolation", outcome="made", points=points, shot_attempt=shot)


@pytest.mark.regression
def test_home_tying_basket_is_a_clutch_play() -> None:
    sim = _clutch_sim()
    shooter = sim.home.lineup[0]
    sim.home.score, sim.away.score = 82, 82
    sim._track_clutch(_made_shot(shooter.id, 2), sim.home, True, 80, 82, 2)
    assert sim.last_clutch_play["is_home_team"] is True
    assert sim.last_clutch_play["player_id"] == shooter.id


@pytest.mark.regression
def test_away_go_ahead_basket_is_a_clutch_play() -> None:
    sim = _clutch_sim()
    shooter = sim.away.lineup[0]
    sim.home.score, sim.away.score = 82, 85
    sim._track_clutch(_made_shot(shooter.id, 3), sim.away, False, 82, 82, 3)
    assert sim.last_clutch_play["is_home_team"] is False
    assert sim.last_clutch_play["points"] == 3


def test_garbage_time_and_early_baskets_are_not_clutch() -> None:
    sim = _clutch_sim()
    shooter = sim.home.lineup[0]
    sim.home.score, sim.away.score = 90, 78
    sim._track_clutch(_made_shot(shooter.id, 2), sim.home, True, 88, 78, 2)
    assert sim.last_clutch_play is None

    sim.home.score, sim.away.score = 82, 82
    sim.current_quarter = QUARTERS - 1
    sim._track_clutch(_made_shot(shooter.id, 2), sim.home, True, 80, 82, 2)
    assert sim.last_clutch_play is None


def test_chemistry_modifier_scales_and_caps() -> None:
    assert calculate_chemistry_modifier(80) == 0.0
    assert calculate_chemistry_modifier(100) == pytest.approx(0.0075)
    assert calculate_chemistry_modifier(120) == pytest.approx(0.015)
    assert calculate_chemistry_modifier(200) == pytest.approx(0.03)
    assert calculate_chemistry_modifier(0) == pytest.approx(-0.03)


class _FixedRoll(random.Random):
    def __init__(self, roll: int) -> None:
        super().__init__(0)
        self.roll = roll

    def randint(self, a: int, b: int) -> int:
        return self.roll


def _rebound_sim(offense_value: float, defense_value: float, roll: int) -> GameSimulator:
    sim = _clutch_sim()
    for player in sim.home.lineup:
        player.attributes["defense"]["offensive_rebound"] = offense_value
    for player in sim.away.lineup:
        player.attributes["defense"]["defensive_rebound"] = defense_value
    sim._rng = _FixedRoll(roll)
    return sim


def _offensive_board(offense_value: float, defense_value: float, roll: int) -> bool:
    sim = _rebound_sim(offense_value, defense_value, roll)
    return sim.handle_rebound(sim.home, sim.away, True)


def test_offensive_rebound_chance_is_clamped() -> None:
    # Dominant offensive rebounders still top out at 40%.
    assert _offensive_board(99, 1, 390)
    assert not _offensive_board(99, 1, 410)
    # Outmatched offensive rebounders keep a 15% floor.
    assert _offensive_board(1, 99, 140)
    assert not _offensive_board(1, 99, 160)
