from __future__ import annotations

import logging
import random
import uuid
from datetime import date
from pathlib import Path
from threading import Lock
from typing import Any, Callable

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from .adapters import CamelModel, box_lines_from_payload, camelize, team_to_payload
from .app import build_default_teams
from .coaching import CoachingEngine
from .config import DEFAULT_DIFFICULTY, DIFFICULTY_SETTINGS
from .engine import GameOptions, GameResult, GameSimulator, QuarterUpdate
from .evolution import EvolutionResult, PlayerEvolution, merge_players
from .models import BoxScoreLine, LineupSettings, Team
from .news import GameNewsService
from .plays import PlayCatalogService
from .store import GameStateStore

logger = logging.getLogger(__name__)


class GameRequest(CamelModel):
    home_team_id: str
    away_team_id: str
    user_team_id: str | None = None
    user_lineup: list[str] | None = None
    target_minutes: dict[str, int] | None = None
    apply_evolution: bool = False
    is_playoff: bool = False
    game_date: str | None = None


class AdjustmentsRequest(CamelModel):
    home_lineup: list[str] | None = None
    away_lineup: list[str] | None = None
    offensive_style: str | None = None
    defensive_style: str | None = None

    def adjustments(self) -> dict[str, Any]:
        return self.model_dump(exclude_none=True)


class StartRequest(GameRequest):
    adjustments: AdjustmentsRequest | None = None


class PostGameRequest(CamelModel):
    home_team_id: str
    away_team_id: str
    home_box_score: list[dict[str, Any]]
    away_box_score: list[dict[str, Any]]
    home_score: int
    away_score: int
    is_playoff: bool = False
    game_date: str | None = None


class CalendarRequest(CamelModel):
    team_ids: list[str] | None = None
    current_date: str | None = None
    user_team_id: str | None = None


class RestDaysRequest(CamelModel):
    teams_per_day: list[list[str]]


class DifficultySelection(BaseModel):
    difficulty: str = DEFAULT_DIFFICULTY


class SimService:
    def __init__(
        self,
        data_root: str | Path | None = None,
        seed: int | None = None,
        difficulty: str = DEFAULT_DIFFICULTY,
    ) -> None:
        self.data_root = Path(data_root) if data_root is not None else Path(__file__).resolve().parents[2]
        self.store = GameStateStore(self.data_root / "saved_games")
        self.difficulty = difficulty if difficulty in DIFFICULTY_SETTINGS else DEFAULT_DIFFICULTY
        self._rng = random.Random(seed)
        self.teams: dict[str, Team] = {team.id: team for team in build_default_teams()}
        self.records: dict[str, dict[str, int]] = {team_id: {"wins": 0, "losses": 0} for team_id in self.teams}
        self.streaks: dict[str, int] = {team_id: 0 for team_id in self.teams}
        self.games: dict[str, dict[str, Any]] = {}
        self._lock = Lock()

    def _child_rng(self) -> random.Random:
        return random.Random(self._rng.getrandbits(64))

    def _simulator(self) -> GameSimulator:
        return GameSimulator(rng=self._child_rng())

    def _evolution(self, current_date: str | None = None) -> PlayerEvolution:
        today = date.fromisoformat(current_date) if current_date else None
        return PlayerEvolution(rng=self._child_rng(), difficulty=self.difficulty, today=today)

    def get_team(self, team_id: str) -> Team:
        team = self.teams.get(team_id)
        if team is None:
            raise KeyError(f"Unknown team '{team_id}'")
        return team

    def _selected_teams(self, team_ids: list[str] | None) -> list[Team]:
        if team_ids is None:
            return list(self.teams.values())
        return [self.get_team(team_id) for team_id in team_ids]

    def _options(self, payload: GameRequest) -> GameOptions:
        return GameOptions(
            user_team_id=payload.user_team_id,
            user_lineup=payload.user_lineup,
            target_minutes=payload.target_minutes,
        )

    # Teams

    def team_summaries(self) -> list[dict[str, Any]]:
        rows = []
        for team in self.teams.values():
            active = [player for player in team.players if not player.is_retired]
            rows.append({
                "id": team.id,
                "name": team.name,
                "abbreviation": team.abbreviation,
                "players": len(active),
                "average_overall": round(sum(p.overall_rating for p in active) / len(active), 1) if active else 0.0,
                "average_morale": round(team.average_morale(), 1),
                "coaching_scheme": {
                    "offensive": team.coaching_scheme.offensive,
                    "defensive": team.coaching_scheme.defensive,
                    "substitution": team.coaching_scheme.substitution,
                },
                "record": dict(self.records[team.id]),
            })
        return camelize(rows)

    # Games

    def _record_result(self, result: GameResult) -> None:
        for team_id, won in ((result.home_team_id, result.winner == "home"), (result.away_team_id, result.winner == "away")):
            if team_id not in self.records:
                continue
            self.records[team_id]["wins" if won else "losses"] += 1
            streak = self.streaks.get(team_id, 0)
            if won:
                self.streaks[team_id] = streak + 1 if streak > 0 else 1
            else:
                self.streaks[team_id] = streak - 1 if streak < 0 else -1

    def simulate(self, payload: GameRequest) -> dict[str, Any]:
        home = self.get_team(payload.home_team_id)
        away = self.get_team(payload.away_team_id)
        if home.id == away.id:
            raise ValueError("A team cannot play itself.")
        result = self._simulator().simulate_game(home, away, self._options(payload))
        return self._finish_game(result, payload.apply_evolution, payload.is_playoff, payload.game_date)

    def _finish_game(
        self, result: GameResult, apply_evolution: bool, is_playoff: bool = False, game_date: str | None = None
    ) -> dict[str, Any]:
        self._record_result(result)
        response = result.to_dict()
        response["news"] = [
            event.to_dict() for event in GameNewsService(self._child_rng()).create_game_news(result, game_date or "")
        ]
        if apply_evolution:
            response["evolution"] = self.apply_post_game(
                result.home_team_id or "",
                result.away_team_id or "",
                result.home_box,
                result.away_box,
                result.home_score,
                result.away_score,
                is_playoff,
                game_date,
            )
        return camelize(response)

    def start(self, payload: StartRequest) -> dict[str, Any]:
        home = self.get_team(payload.home_team_id)
        away = self.get_team(payload.away_team_id)
        if home.id == away.id:
            raise ValueError("A team cannot play itself.")
        options = self._options(payload)
        if payload.adjustments is not None:
            options.coaching_adjustments = payload.adjustments.adjustments()
        update = self._simulator().start_game(home, away, options)
        game_id = uuid.uuid4().hex
        self.games[game_id] = {
            "state": update.game_state,
            "apply_evolution": payload.apply_evolution,
            "is_playoff": payload.is_playoff,
            "game_date": payload.game_date,
        }
        self.store.save(game_id, update.game_state or {})
        logger.info("Started game %s: %s vs %s", game_id, home.name, away.name)
        return camelize({"game_id": game_id, **update.to_dict()})

    def _load_game(self, game_id: str) -> dict[str, Any]:
        entry = self.games.get(game_id)
        if entry is not None:
            return entry
        state = self.store.load(game_id)
        if state is None:
            if self.store.last_load_error:
                raise ValueError(self.store.last_load_error)
            raise KeyError(f"Unknown game '{game_id}'")
        entry = {"state": state, "apply_evolution": False, "is_playoff": False, "game_date": None}
        self.games[game_id] = entry
        return entry

    def advance(self, game_id: str, adjustments: dict[str, Any] | None, to_end: bool = False) -> dict[str, Any]:
        entry = self._load_game(game_id)
        simulator = self._simulator()
        if to_end:
            update: QuarterUpdate = simulator.sim_to_end(entry["state"], adjustments)
        else:
            update = simulator.continue_game(entry["state"], adjustments)

        response = camelize({
            "game_id": game_id,
            "quarter_result": update.quarter_result.to_dict(),
            "game_state": update.game_state,
            "is_complete": update.is_complete,
        })
        if update.is_complete and update.final_result is not None:
            self.games.pop(game_id, None)
            self.store.delete(game_id)
            response["finalResult"] = self._finish_game(
                update.final_result, entry["apply_evolution"], entry["is_playoff"], entry["game_date"]
            )
            return response

        entry["state"] = update.game_state
        self.store.save(game_id, update.game_state or {})
        response["finalResult"] = None
        return response

    # Evolution

    def apply_post_game(
        self,
        home_team_id: str,
        away_team_id: str,
        home_box: list[BoxScoreLine],
        away_box: list[BoxScoreLine],
        home_score: int,
        away_score: int,
        is_playoff: bool = False,
        game_date: str | None = None,
    ) -> dict[str, Any]:
        home = self.get_team(home_team_id)
        away = self.get_team(away_team_id)
        outcome = self._evolution(game_date).process_post_game(
            home.players,
            away.players,
            home_box,
            away_box,
            home_score,
            away_score,
            is_playoff=is_playoff,
            game_date=game_date,
            home_abbreviation=home.abbreviation,
            away_abbreviation=away.abbreviation,
            home_streak=self.streaks.get(home.id, 0),
            away_streak=self.streaks.get(away.id, 0),
        )
        home.players = merge_players(home.players, outcome["home"].players)
        away.players = merge_players(away.players, outcome["away"].players)
        return {"home": outcome["home"].to_dict(), "away": outcome["away"].to_dict()}

    def post_game(self, payload: PostGameRequest) -> dict[str, Any]:
        return camelize(
            self.apply_post_game(
                payload.home_team_id,
                payload.away_team_id,
                box_lines_from_payload(payload.home_box_score),
                box_lines_from_payload(payload.away_box_score),
                payload.home_score,
                payload.away_score,
                payload.is_playoff,
                payload.game_date,
            )
        )

    def _run_per_team(self, teams: list[Team], step: Callable[[Team], EvolutionResult]) -> dict[str, Any]:
        results: dict[str, Any] = {}
        for team in teams:
            outcome = step(team)
            team.players = merge_players(team.players, outcome.players)
            results[team.id] = outcome.to_dict()
        return camelize({"teams": results})

    def weekly(self, payload: CalendarRequest) -> dict[str, Any]:
        evolution = self._evolution(payload.current_date)
        return self._run_per_team(
            self._selected_teams(payload.team_ids),
            lambda team: evolution.process_weekly_evolution(
                team.players, self.records, payload.current_date, is_ai=team.id != payload.user_team_id
            ),
        )

    def monthly(self, payload: CalendarRequest) -> dict[str, Any]:
        evolution = self._evolution(payload.current_date)
        return self._run_per_team(
            self._selected_teams(payload.team_ids),
            lambda team: evolution.process_monthly_development(team.players, team.players, payload.current_date),
        )

    def season_end(self, payload: CalendarRequest) -> dict[str, Any]:
        evolution = self._evolution(payload.current_date)
        teams = self._selected_teams(payload.team_ids)
        results: dict[str, Any] = {}
        for team in teams:
            outcome = evolution.process_season_end(team.players, payload.current_date)
            self._replace_roster(team, outcome.players)
            results[team.id] = outcome.to_dict()
            self.records[team.id] = {"wins": 0, "losses": 0}
            self.streaks[team.id] = 0
        return camelize({"teams": results})

    @staticmethod
    def _replace_roster(team: Team, players: list) -> None:
        retired = {player.id for player in team.players} - {player.id for player in players}
        team.players = list(players)
        if not retired:
            return
        lineup = team.lineup_settings
        team.lineup_settings = LineupSettings(
            starters=[pid for pid in lineup.starters if pid not in retired],
            target_minutes={pid: value for pid, value in lineup.target_minutes.items() if pid not in retired},
        )
        logger.info("%s lost %d players to retirement", team.name, len(retired))

    def rest_days(self, payload: RestDaysRequest) -> dict[str, Any]:
        evolution = self._evolution()
        for team in self.teams.values():
            team.players = evolution.process_multi_day_rest_recovery(team.players, payload.teams_per_day)
        return {"ok": True, "days": len(payload.teams_per_day)}

    def set_difficulty(self, difficulty: str) -> dict[str, Any]:
        key = difficulty.lower().strip()
        if key not in DIFFICULTY_SETTINGS:
            raise ValueError(f"Unknown difficulty '{difficulty}'")
        self.difficulty = key
        return {"ok": True, "difficulty": self.difficulty}


def _call(fn: Callable[..., Any], *args: Any, **kwargs: Any) -> Any:
    try:
        return fn(*args, **kwargs)
    except KeyError as exc:
        raise HTTPException(status_code=404, detail=str(exc.args[0]) if exc.args else "Not found") from exc
    except (ValueError, RuntimeError) as exc:
        raise HTTPException(status_code=422, detail=str(exc)) from exc


service = SimService()
app = FastAPI(title="Hoops Sim API", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/api/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/api/teams")
def teams() -> list[dict[str, Any]]:
    with service._lock:
        return service.team_summaries()


@app.get("/api/teams/{team_id}")
def team_detail(team_id: str) -> dict[str, Any]:
    with service._lock:
        return team_to_payload(_call(service.get_team, team_id))


@app.get("/api/coaching/schemes")
def coaching_schemes() -> dict[str, Any]:
    coaching = CoachingEngine()
    return camelize({
        "offensive": coaching.get_schemes(),
        "defensive": coaching.get_defensive_schemes(),
    })


@app.get("/api/plays")
def plays(category: str | None = None) -> list[dict[str, Any]]:
    catalog = PlayCatalogService()
    selected = catalog.get_plays_by_category(category) if category else catalog.plays
    return camelize([
        {
            "id": play["id"],
            "name": play["name"],
            "category": play["category"],
            "tempo": play.get("tempo"),
            "difficulty": play.get("difficulty"),
            "tags": list(play.get("tags", [])),
        }
        for play in selected
    ])


@app.post("/api/difficulty")
def set_difficulty(payload: DifficultySelection) -> dict[str, Any]:
    with service._lock:
        return _call(service.set_difficulty, payload.difficulty)


@app.post("/api/games/simulate")
def simulate_game(payload: GameRequest) -> dict[str, Any]:
    with service._lock:
        return _call(service.simulate, payload)


@app.post("/api/games/start")
def start_game(payload: StartRequest) -> dict[str, Any]:
    with service._lock:
        return _call(service.start, payload)


@app.post("/api/games/{game_id}/continue")
def continue_game(game_id: str, payload: AdjustmentsRequest | None = None) -> dict[str, Any]:
    with service._lock:
        return _call(service.advance, game_id, payload.adjustments() if payload else None)


@app.post("/api/games/{game_id}/sim-to-end")
def sim_to_end(game_id: str, payload: AdjustmentsRequest | None = None) -> dict[str, Any]:
    with service._lock:
        return _call(service.advance, game_id, payload.adjustments() if payload else None, to_end=True)


@app.post("/api/evolution/post-game")
def evolution_post_game(payload: PostGameRequest) -> dict[str, Any]:
    with service._lock:
        return _call(service.post_game, payload)


@app.post("/api/evolution/weekly")
def evolution_weekly(payload: CalendarRequest) -> dict[str, Any]:
    with service._lock:
        return _call(service.weekly, payload)


@app.post("/api/evolution/monthly")
def evolution_monthly(payload: CalendarRequest) -> dict[str, Any]:
    with service._lock:
        return _call(service.monthly, payload)


@app.post("/api/evolution/season-end")
def evolution_season_end(payload: CalendarRequest) -> dict[str, Any]:
    with service._lock:
        return _call(service.season_end, payload)


@app.post("/api/evolution/rest-days")
def evolution_rest_days(payload: RestDaysRequest) -> dict[str, Any]:
    with service._lock:
        return _call(service.rest_days, payload)
