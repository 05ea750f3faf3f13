import json

import pytest

from hoops_sim.adapters import (
    BoxScoreLineModel,
    box_lines_from_payload,
    camelize,
    game_state_from_payload,
    game_state_to_payload,
    player_from_payload,
    player_to_payload,
    snakify,
    team_from_payload,
    team_to_payload,
)
from hoops_sim.app import build_default_teams
from hoops_sim.models import BoxScoreLine, InjuryDetails, StreakData
from hoops_sim.store import GameStateStore


def test_save_and_load_round_trip(tmp_path) -> None:
    store = GameStateStore(tmp_path / "saved_games")
    state = {"quarter": 2, "home_score": 30, "status": "in_progress"}
    path = store.save("abc", state)
    assert path.exists()
    assert store.exists("abc")
    assert store.load("abc") == state
    assert store.last_load_error == ""


def test_second_save_keeps_a_backup(tmp_path) -> None:
    store = GameStateStore(tmp_path)
    store.save("abc", {"quarter": 1})
    store.save("abc", {"quarter": 2})
    backup = tmp_path / "game_abc.json.bak"
    assert backup.exists()
    assert json.loads(backup.read_text(encoding="utf-8"))["game_state"] == {"quarter": 1}
    assert store.load("abc") == {"quarter": 2}


def test_missing_game_loads_as_none(tmp_path) -> None:
    store = GameStateStore(tmp_path)
    assert store.load("nope") is None
    assert store.last_load_error == ""


@pytest.mark.regression
def test_rejects_future_save_version_with_clear_error(tmp_path) -> None:
    store = GameStateStore(tmp_path)
    store.path_for("abc").write_text(
        json.dumps({"save_version": 999, "game_state": {"quarter": 1}}), encoding="utf-8"
    )
    assert store.load("abc") is None
    assert store.last_load_error == "Unsupported game state version 999; app supports up to 1."


@pytest.mark.regression
def test_corrupt_save_reports_error(tmp_path) -> None:
    store = GameStateStore(tmp_path)
    store.path_for("abc").write_text("{not json", encoding="utf-8")
    assert store.load("abc") is None
    assert store.last_load_error.startswith("Failed to load game state")


def test_invalid_payload_shapes_are_ignored(tmp_path) -> None:
    store = GameStateStore(tmp_path)
    store.path_for("list").write_text("[1, 2]", encoding="utf-8")
    assert store.load("list") is None
    assert "invalid format" in store.last_load_error
    store.path_for("bad").write_text(json.dumps({"save_version": 1, "game_state": "x"}), encoding="utf-8")
    assert store.load("bad") is None
    assert "payload is invalid" in store.last_load_error


def test_delete_and_list_games(tmp_path) -> None:
    store = GameStateStore(tmp_path / "games")
    assert store.list_games() == []
    store.save("b", {})
    store.save("a", {})
    assert store.list_games() == ["a", "b"]
    assert store.delete("a")
    assert not store.delete("a")
    assert store.list_games() == ["b"]


def test_camelize_keeps_player_id_keys() -> None:
    payload = {
        "home_score": 10,
        "home_target_minutes": {"player_one": 30},
        "box_score": {"player_one": {"plus_minus": 3, "fg3m": 1}},
        "quarter_scores": {"home": [10]},
    }
    camel = camelize(payload)
    assert camel == {
        "homeScore": 10,
        "homeTargetMinutes": {"player_one": 30},
        "boxScore": {"player_one": {"plusMinus": 3, "fg3m": 1}},
        "quarterScores": {"home": [10]},
    }
    assert snakify(camel) == payload


def test_game_state_payload_round_trip() -> None:
    state = {"home_lineup": ["a", "b"], "home_target_minutes": {"a_1": 20}, "version": 4}
    assert game_state_from_payload(game_state_to_payload(state)) == state


def test_team_payload_round_trip() -> None:
    team = build_default_teams()[0]
    player = team.players[0]
    player.is_injured = True
    player.injury_details = InjuryDetails("sprained_ankle", "Sprained Ankle", "minor", 3)
    player.streak_data = StreakData("hot", 4)

    payload = team_to_payload(team)
    assert "lineupSettings" in payload
    assert "overallRating" in payload["players"][0]
    assert "threePoint" in payload["players"][0]["attributes"]["offense"]

    restored = team_from_payload(payload)
    assert restored.id == team.id
    assert [p.id for p in restored.players] == [p.id for p in team.players]
    first = restored.players[0]
    assert first.attributes == player.attributes
    assert first.injury_details.games_remaining == 3
    assert first.streak_data.type == "hot"
    assert [b.id for b in first.badges] == [b.id for b in player.badges]
    assert restored.lineup_settings.starters == team.lineup_settings.starters


def test_team_payload_accepts_roster_alias() -> None:
    team = build_default_teams()[1]
    payload = team_to_payload(team)
    payload["roster"] = payload.pop("players")
    assert len(team_from_payload(payload).players) == len(team.players)


def test_badge_tier_alias_and_player_defaults() -> None:
    player = player_from_payload({"id": "p1", "firstName": "Ana", "badges": [{"id": "dimer", "tier": "gold"}]})
    assert player.badges[0].level == "gold"
    assert player.personality.morale == 80
    assert player.injury_risk == "M"
    assert player_to_payload(player)["badges"] == [{"id": "dimer", "level": "gold"}]


def test_box_score_rows_accept_long_stat_names() -> None:
    rows = [
        {
            "playerId": "p1",
            "name": "Ana Lopez",
            "minutes": 31.5,
            "points": 18,
            "fieldGoalsMade": 7,
            "fieldGoalsAttempted": 14,
            "threePointersMade": 2,
            "tpa": 5,
            "freeThrowsMade": 2,
            "freeThrowsAttempted": 3,
            "plusMinus": 6,
        }
    ]
    line = box_lines_from_payload(rows)[0]
    assert isinstance(line, BoxScoreLine)
    assert (line.fgm, line.fga, line.fg3m, line.fg3a, line.ftm, line.fta) == (7, 14, 2, 5, 2, 3)
    assert line.minutes == 31.5
    assert line.plus_minus == 6


def test_box_score_model_keeps_fractional_minutes() -> None:
    line = BoxScoreLine("p1", "Ana Lopez", minutes=12.4, points=6)
    model = BoxScoreLineModel.from_domain(line)
    assert model.minutes == 12.4
    assert model.dump()["playerId"] == "p1"
