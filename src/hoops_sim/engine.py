from __future__ import annotations

import copy
import logging
import random
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from .badges import BadgeSynergyService
from .coaching import CoachingEngine
from .config import (
    ASSIST_CHANCE,
    CHEMISTRY_CAP,
    CLUTCH_MARGIN,
    CLUTCH_TIME,
    DEFAULT_DEFENSIVE_SCHEME,
    DEFAULT_OFFENSIVE_SCHEME,
    DEFAULT_SUBSTITUTION_STRATEGY,
    DEFENSIVE_REBOUND_WEIGHT,
    OFFENSIVE_REBOUND_CHANCE_RANGE,
    OVERTIME_LENGTH,
    POSITIONS,
    QUARTER_LENGTH,
    QUARTERS,
    REBOUND_POSITION_MULTIPLIERS,
    SHOT_CLOCK,
    STEAL_ON_TURNOVER_CHANCE,
    SUBSTITUTION_CHECK_INTERVAL,
)
from .executor import BALL_CARRIER_ROLES, ActionGraphExecutor, PlayExecutor, PlayResult
from .models import Badge, BoxScoreLine, Personality, Player, Team
from .plays import PlayCatalogService
from .substitution import SubstitutionEngine

logger = logging.getLogger(__name__)

STATE_VERSION = 4
POSSESSION_SECONDS = (10, 24)
BASELINE_MORALE = 80.0

CLUTCH_SHOT_NAMES: dict[str, str] = {"three_point": "three-pointer", "paint": "layup"}


class IncompleteLineupError(ValueError):
    def __init__(self, home_size: int, away_size: int, home_roster: int, away_roster: int) -> None:
        super().__init__(
            "Cannot simulate game: missing player lineup. "
            f"Home lineup count: {home_size}, Away lineup count: {away_size}. "
            f"Home players: {home_roster}, Away players: {away_roster}."
        )
        self.home_size = home_size
        self.away_size = away_size


class GamePhase(str, Enum):
    INIT = "init"
    IN_QUARTER = "in_quarter"
    BETWEEN_QUARTERS = "between_quarters"
    COMPLETE = "complete"


ALLOWED_TRANSITIONS: dict[GamePhase, set[GamePhase]] = {
    GamePhase.INIT: {GamePhase.IN_QUARTER},
    GamePhase.IN_QUARTER: {GamePhase.BETWEEN_QUARTERS, GamePhase.COMPLETE},
    GamePhase.BETWEEN_QUARTERS: {GamePhase.IN_QUARTER, GamePhase.COMPLETE},
    GamePhase.COMPLETE: set(),
}


@dataclass(slots=True)
class GameOptions:
    user_team_id: str | None = None
    user_lineup: list[str] | None = None
    generate_animation_data: bool = True
    is_live_game: bool = False
    target_minutes: dict[str, int] | None = None
    coaching_adjustments: dict[str, Any] | None = None


@dataclass(slots=True)
class TeamSide:
    """Everything the simulator tracks for one team during a game."""

    team_id: str | None
    name: str
    abbreviation: str = ""
    players: list[Player] = field(default_factory=list)
    lineup: list[Player] = field(default_factory=list)
    box: dict[str, BoxScoreLine] = field(default_factory=dict)
    score: int = 0
    offensive_scheme: str = DEFAULT_OFFENSIVE_SCHEME
    defensive_scheme: str = DEFAULT_DEFENSIVE_SCHEME
    substitution_strategy: str = DEFAULT_SUBSTITUTION_STRATEGY
    target_minutes: dict[str, int] = field(default_factory=dict)
    starter_ids: list[str] = field(default_factory=list)
    quarter_scores: list[int] = field(default_factory=list)
    synergies_activated: int = 0
    chemistry_modifier: float = 0.0

    def player(self, player_id: str | None) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def box_rows(self) -> list[dict[str, Any]]:
        return [line.to_dict(self.player(pid)) for pid, line in self.box.items()]


@dataclass(slots=True)
class QuarterResult:
    quarter: int
    home_score: int
    away_score: int
    quarter_scores: dict[str, list[int]]
    box_score: dict[str, list[dict[str, Any]]]
    play_by_play: list[dict[str, Any]]
    possessions: list[dict[str, Any]]
    quarter_start_possession: int
    quarter_end_index: int

    def to_dict(self) -> dict[str, Any]:
        return {
            "quarter": self.quarter,
            "scores": {"home": self.home_score, "away": self.away_score, "quarter_scores": self.quarter_scores},
            "animation_data": {
                "possessions": self.possessions,
                "quarter_start_possession": self.quarter_start_possession,
                "quarter_end_index": self.quarter_end_index,
            },
            "box_score": self.box_score,
            "play_by_play": self.play_by_play,
        }


@dataclass(slots=True)
class GameResult:
    home_team: str
    away_team: str
    home_team_id: str | None
    away_team_id: str | None
    home_score: int
    away_score: int
    home_box: list[BoxScoreLine]
    away_box: list[BoxScoreLine]
    box_score: dict[str, list[dict[str, Any]]]
    quarter_scores: dict[str, list[int]]
    home_team_abbreviation: str = ""
    away_team_abbreviation: str = ""
    play_by_play: list[dict[str, Any]] = field(default_factory=list)
    animation_data: dict[str, Any] = field(default_factory=dict)
    synergies_activated: dict[str, int] = field(default_factory=dict)
    clutch_play: dict[str, Any] | None = None
    overtime_periods: int = 0

    @property
    def winner(self) -> str:
        return "home" if self.home_score > self.away_score else "away"

    def to_dict(self) -> dict[str, Any]:
        return {
            "home_team": self.home_team,
            "away_team": self.away_team,
            "home_team_id": self.home_team_id,
            "away_team_id": self.away_team_id,
            "home_team_abbreviation": self.home_team_abbreviation,
            "away_team_abbreviation": self.away_team_abbreviation,
            "home_score": self.home_score,
            "away_score": self.away_score,
            "winner": self.winner,
            "box_score": self.box_score,
            "quarter_scores": self.quarter_scores,
            "play_by_play": self.play_by_play,
            "animation_data": self.animation_data,
            "synergies_activated": self.synergies_activated,
            "clutch_play": self.clutch_play,
            "overtime_periods": self.overtime_periods,
        }


@dataclass(slots=True)
class QuarterUpdate:
    quarter_result: QuarterResult
    game_state: dict[str, Any] | None
    is_complete: bool = False
    final_result: GameResult | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "quarter_result": self.quarter_result.to_dict(),
            "game_state": self.game_state,
            "is_complete": self.is_complete,
            "final_result": self.final_result.to_dict() if self.final_result else None,
        }


def calculate_chemistry_modifier(average_morale: float) -> float:
    return max(-CHEMISTRY_CAP, min(CHEMISTRY_CAP, (average_morale - BASELINE_MORALE) / BASELINE_MORALE * CHEMISTRY_CAP))


def average_morale(players: list[Player]) -> float:
    if not players:
        return BASELINE_MORALE
    return sum(p.personality.morale for p in players) / len(players)


def format_clock(time_remaining: float) -> str:
    minutes = int(time_remaining)
    seconds = int((time_remaining - minutes) * 60)
    return f"{minutes}:{seconds:02d}"


def _rebound_weight(player: Player, attribute: str, default: float) -> float:
    value = player.find_attribute(attribute)
    if not value:
        value = default
    return value * REBOUND_POSITION_MULTIPLIERS.get(player.position, 1.0)


def compact_player(player: Player) -> dict[str, Any]:
    return {
        "id": player.id,
        "first_name": player.first_name,
        "last_name": player.last_name,
        "position": player.position,
        "secondary_position": player.secondary_position,
        "overall_rating": player.overall_rating,
        "attributes": copy.deepcopy(player.attributes),
        "badges": [{"id": b.id, "level": b.level} for b in player.badges],
        "tendencies": copy.deepcopy(player.tendencies),
        "fatigue": player.fatigue,
        "is_injured": player.is_injured,
        "morale": player.personality.morale,
    }


def expand_player(data: dict[str, Any]) -> Player:
    return Player(
        id=str(data["id"]),
        first_name=data.get("first_name") or "",
        last_name=data.get("last_name") or "",
        position=data.get("position") or "SF",
        secondary_position=data.get("secondary_position"),
        overall_rating=int(data.get("overall_rating") or 70),
        attributes=copy.deepcopy(data.get("attributes") or {}),
        badges=[Badge(id=b["id"], level=b.get("level", "bronze")) for b in data.get("badges") or []],
        tendencies=copy.deepcopy(data.get("tendencies") or {}),
        fatigue=float(data.get("fatigue") or 0),
        is_injured=bool(data.get("is_injured", False)),
        personality=Personality(morale=float(data.get("morale", BASELINE_MORALE))),
    )


class GameSimulator:
    """Possession-by-possession game simulation.

    One instance owns one game. Full games run through ``simulate_game``;
    resumable games run a quarter at a time through ``start_game`` and
    ``continue_game``, handing serialized state back to the caller between
    quarters.
    """

    def __init__(
        self,
        catalog: PlayCatalogService | None = None,
        executor: PlayExecutor | None = None,
        coaching: CoachingEngine | None = None,
        substitutions: SubstitutionEngine | None = None,
        synergies: BadgeSynergyService | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self.coaching = coaching or CoachingEngine()
        self.synergies = synergies or BadgeSynergyService()
        self.catalog = catalog or PlayCatalogService(coaching=self.coaching, badges=self.synergies.badges, rng=self._rng)
        self.executor = executor or ActionGraphExecutor(
            badges=self.synergies.badges, rng=self._rng, synergies=self.synergies
        )
        self.substitutions = substitutions or SubstitutionEngine(rng=self._rng)

        self.phase = GamePhase.INIT
        self.home = TeamSide(team_id=None, name="Home")
        self.away = TeamSide(team_id=None, name="Away")
        self.current_quarter = 1
        self.time_remaining = float(QUARTER_LENGTH)
        self.possession_count = 0
        self.quarter_end_possessions: list[int] = []
        self.play_by_play: list[dict[str, Any]] = []
        self.animation_data: list[dict[str, Any]] = []
        self.last_clutch_play: dict[str, Any] | None = None
        self.generate_animation_data = True
        self.is_live_game = False
        self.user_team_id: str | None = None

    # -- lifecycle ---------------------------------------------------------

    def _transition(self, target: GamePhase) -> None:
        if target not in ALLOWED_TRANSITIONS[self.phase]:
            raise RuntimeError(f"Illegal game phase transition {self.phase.value} -> {target.value}.")
        self.phase = target

    def is_game_complete(self) -> bool:
        return self.current_quarter >= QUARTERS and self.home.score != self.away.score

    def simulate_game(self, home_team: Team, away_team: Team, options: GameOptions | None = None) -> GameResult:
        options = options or GameOptions()
        self.initialize(home_team, away_team, options)
        self.is_live_game = False
        self._require_full_lineups()

        quarter = 1
        while True:
            self._play_quarter(quarter)
            if quarter >= QUARTERS and self.home.score != self.away.score:
                self._transition(GamePhase.COMPLETE)
                break
            self._transition(GamePhase.BETWEEN_QUARTERS)
            quarter += 1

        result = self.build_final_result(include_live_data=True)
        logger.info(
            "Game complete: %s %d - %d %s (%d OT)",
            self.home.name, self.home.score, self.away.score, self.away.name, result.overtime_periods,
        )
        return result

    def start_game(self, home_team: Team, away_team: Team, options: GameOptions | None = None) -> QuarterUpdate:
        options = options or GameOptions()
        self.initialize(home_team, away_team, options)
        self.is_live_game = True
        if options.coaching_adjustments:
            self.apply_adjustments(options.coaching_adjustments)
        self._require_full_lineups()

        self._play_quarter(1)
        self._transition(GamePhase.BETWEEN_QUARTERS)
        return QuarterUpdate(quarter_result=self.build_quarter_result(1), game_state=self.serialize_state())

    def continue_game(self, game_state: dict[str, Any], adjustments: dict[str, Any] | None = None) -> QuarterUpdate:
        self.load_state(game_state)
        self.apply_adjustments(adjustments)
        return self._next_quarter()

    def sim_to_end(self, game_state: dict[str, Any], adjustments: dict[str, Any] | None = None) -> QuarterUpdate:
        update = self.continue_game(game_state, adjustments)
        while not update.is_complete:
            update = self._next_quarter()
        return update

    def _next_quarter(self) -> QuarterUpdate:
        if self.phase is not GamePhase.BETWEEN_QUARTERS:
            raise RuntimeError(f"Cannot continue a game in phase {self.phase.value}.")
        quarter = len(self.home.quarter_scores) + 1
        self.play_by_play = []
        self.animation_data = []
        self._play_quarter(quarter)

        complete = self.is_game_complete()
        self._transition(GamePhase.COMPLETE if complete else GamePhase.BETWEEN_QUARTERS)
        if complete:
            logger.info("Resumable game complete after %d periods", self.current_quarter)
        return QuarterUpdate(
            quarter_result=self.build_quarter_result(quarter),
            game_state=None if complete else self.serialize_state(),
            is_complete=complete,
            final_result=self.build_final_result() if complete else None,
        )

    def _require_full_lineups(self) -> None:
        if len(self.home.lineup) < 5 or len(self.away.lineup) < 5:
            raise IncompleteLineupError(
                len(self.home.lineup), len(self.away.lineup), len(self.home.players), len(self.away.players)
            )

    # -- initialization ----------------------------------------------------

    def initialize(self, home_team: Team, away_team: Team, options: GameOptions) -> None:
        if self.phase is not GamePhase.INIT:
            raise RuntimeError("A GameSimulator instance runs exactly one game.")
        self.generate_animation_data = options.generate_animation_data
        self.user_team_id = options.user_team_id
        self.last_clutch_play = None
        self.current_quarter = 1
        self.possession_count = 0
        self.quarter_end_possessions = []
        self.play_by_play = []
        self.animation_data = []

        self.home = self._build_side(home_team, options)
        self.away = self._build_side(away_team, options)

    def _build_side(self, team: Team, options: GameOptions) -> TeamSide:
        players = sorted((p.copy() for p in team.players), key=lambda p: p.overall_rating or 0, reverse=True)
        scheme = team.coaching_scheme
        side = TeamSide(
            team_id=team.id,
            name=team.name,
            abbreviation=team.abbreviation,
            players=players,
            offensive_scheme=scheme.offensive or DEFAULT_OFFENSIVE_SCHEME,
            defensive_scheme=scheme.defensive or DEFAULT_DEFENSIVE_SCHEME,
            substitution_strategy=scheme.substitution or DEFAULT_SUBSTITUTION_STRATEGY,
        )
        is_user_team = self.user_team_id is not None and team.id == self.user_team_id

        saved = team.lineup_settings.starter_ids()
        if is_user_team and options.user_lineup and len(options.user_lineup) >= 5:
            side.lineup = self.build_lineup_from_ids(options.user_lineup, players)
        elif not is_user_team and len(saved) >= 5:
            side.lineup = self.build_lineup_from_ids(saved, players)
        else:
            side.lineup = self.select_lineup(players)

        side.box = {p.id: BoxScoreLine.for_player(p) for p in players}
        side.starter_ids = [p.id for p in side.lineup]

        explicit = is_user_team and bool(options.target_minutes)
        if explicit:
            side.target_minutes = dict(options.target_minutes or {})
        elif team.lineup_settings.target_minutes:
            side.target_minutes = dict(team.lineup_settings.target_minutes)
        elif is_user_team:
            side.target_minutes = self.substitutions.default_target_minutes(players, side.starter_ids)
        else:
            side.target_minutes = self.substitutions.generate_ai_target_minutes(
                players, side.starter_ids, side.substitution_strategy
            )
        if not explicit:
            side.target_minutes = self.substitutions.apply_variance(side.target_minutes)

        side.chemistry_modifier = calculate_chemistry_modifier(average_morale(players))
        return side

    # -- lineups -----------------------------------------------------------

    @staticmethod
    def select_lineup(players: list[Player]) -> list[Player]:
        healthy = [p for p in players if not p.is_injured]
        pool = healthy if len(healthy) >= 5 else players
        slots: dict[str, Player] = {}
        used: set[str] = set()
        for pos in POSITIONS:
            for player in pool:
                if player.id not in used and player.plays_position(pos):
                    slots[pos] = player
                    used.add(player.id)
                    break
        for pos in POSITIONS:
            if pos in slots:
                continue
            for player in pool:
                if player.id not in used:
                    slots[pos] = player
                    used.add(player.id)
                    break
        return [slots[pos] for pos in POSITIONS if pos in slots]

    def build_lineup_from_ids(self, player_ids: list[str], players: list[Player]) -> list[Player]:
        by_id = {p.id: p for p in players}
        lineup: list[Player] = []
        used: set[str] = set()
        for index, pid in enumerate(player_ids):
            player = by_id.get(pid)
            if player is None:
                logger.warning("Lineup references unknown player %s; auto-selecting", pid)
                return self.select_lineup(players)
            if pid in player_ids[:index]:
                logger.warning("Lineup lists %s more than once; auto-selecting", player.full_name)
                return self.select_lineup(players)
            required = POSITIONS[index] if index < len(POSITIONS) else None
            if required and not player.plays_position(required):
                logger.warning("Lineup validation failed: %s cannot play %s", player.full_name, required)
                return self.select_lineup(players)
            if player.is_injured:
                replacement = self._healthy_replacement(players, used, player_ids, required)
                if replacement is not None:
                    lineup.append(replacement)
                    used.add(replacement.id)
                    continue
            lineup.append(player)
            used.add(player.id)
        if len(lineup) < 5:
            return self.select_lineup(players)
        return lineup

    @staticmethod
    def _healthy_replacement(
        players: list[Player], used: set[str], starter_ids: list[str], required: str | None
    ) -> Player | None:
        excluded = used | set(starter_ids)
        bench = [p for p in players if p.id not in excluded and not p.is_injured]
        for player in bench:
            if required is None or player.plays_position(required):
                return player
        return bench[0] if bench else None

    @staticmethod
    def rebuild_lineup(player_ids: list[str], players: list[Player]) -> list[Player]:
        by_id = {p.id: p for p in players}
        return [by_id[pid] for pid in dict.fromkeys(player_ids) if pid in by_id]

    # -- quarter loop ------------------------------------------------------

    def _play_quarter(self, quarter: int) -> None:
        self._transition(GamePhase.IN_QUARTER)
        self.current_quarter = quarter
        self.time_remaining = float(QUARTER_LENGTH if quarter <= QUARTERS else OVERTIME_LENGTH)
        home_start, away_start = self.home.score, self.away.score

        home_has_ball = self._rng.random() < 0.5
        since_rotation = 0.0
        while self.time_remaining > 0:
            duration = min(self._rng.randint(*POSSESSION_SECONDS) / 60, self.time_remaining)
            offense, defense = (self.home, self.away) if home_has_ball else (self.away, self.home)
            kept_ball = self.simulate_possession(offense, defense, home_has_ball, duration)
            self.time_remaining -= duration
            since_rotation += duration
            if not kept_ball:
                home_has_ball = not home_has_ball
            if since_rotation >= SUBSTITUTION_CHECK_INTERVAL:
                self.rotate_players()
                since_rotation = 0.0
        self.time_remaining = 0.0

        self.home.quarter_scores.append(self.home.score - home_start)
        self.away.quarter_scores.append(self.away.score - away_start)
        self.quarter_end_possessions.append(self.possession_count)

    def simulate_possession(self, offense: TeamSide, defense: TeamSide, is_home: bool, duration: float) -> bool:
        """Run one possession; returns True when the offense keeps the ball."""
        for side in (offense, defense):
            for player in side.lineup:
                if player.id in side.box:
                    side.box[player.id].minutes += duration
        self.possession_count += 1

        is_transition = self.coaching.get_transition_frequency(offense.offensive_scheme) > self._rng.random()
        context = {
            "is_transition": is_transition,
            "shot_clock": SHOT_CLOCK,
            "score_differential": offense.score - defense.score,
            "quarter": self.current_quarter,
            "time_remaining": self.time_remaining,
            "defensive_scheme": defense.defensive_scheme,
        }
        play = self.catalog.select_play(offense.lineup, offense.offensive_scheme, context)
        modifiers = self.coaching.calculate_defensive_modifiers(defense.defensive_scheme, play)
        result = self.executor.execute_play(play, offense.lineup, defense.lineup, defense.defensive_scheme, modifiers)

        offense.synergies_activated += len(result.activated_synergies)

        kept_ball = self.process_play_result(result, offense, defense, is_home)

        if self.generate_animation_data:
            self._record_play_by_play(result, is_home)
            if result.keyframes:
                self.animation_data.append({
                    "possession_id": self.possession_count,
                    "team": "home" if is_home else "away",
                    "quarter": self.current_quarter,
                    "time": self.time_remaining,
                    "play_id": result.play_id,
                    "play_name": result.play_name,
                    "duration": result.duration,
                    "keyframes": result.keyframes,
                    "home_score": self.home.score,
                    "away_score": self.away.score,
                    "box_score": {"home": self.home.box_rows(), "away": self.away.box_rows()},
                    "activated_badges": result.activated_badges + result.shot_badges,
                    "activated_synergies": result.activated_synergies,
                })
        return kept_ball

    # -- result processing -------------------------------------------------

    def _scorer_id(self, result: PlayResult, offense: TeamSide) -> str | None:
        if result.shot_attempt is not None and result.shot_attempt.shooter in offense.box:
            return result.shot_attempt.shooter
        for role in BALL_CARRIER_ROLES:
            pid = result.role_assignments.get(role)
            if pid in offense.box:
                return pid
        for player in offense.lineup:
            if player.id in offense.box:
                return player.id
        return None

    def process_play_result(self, result: PlayResult, offense: TeamSide, defense: TeamSide, is_home: bool) -> bool:
        shot = result.shot_attempt
        prev_home, prev_away = self.home.score, self.away.score
        scorer_id = self._scorer_id(result, offense)

        points = result.points if scorer_id is not None else 0
        if points:
            offense.score += points
            offense.box[scorer_id].points += points
            for player in offense.lineup:
                if player.id in offense.box:
                    offense.box[player.id].plus_minus += points
            for player in defense.lineup:
                if player.id in defense.box:
                    defense.box[player.id].plus_minus -= points
            self._track_clutch(result, offense, is_home, prev_home, prev_away, points)

        if shot is not None and shot.shooter in offense.box:
            line = offense.box[shot.shooter]
            if not shot.fouled:
                line.fga += 1
                if shot.made:
                    line.fgm += 1
                if shot.shot_type == "three_point":
                    line.fg3a += 1
                    if shot.made:
                        line.fg3m += 1
            if shot.made and self._rng.randint(1, 100) <= ASSIST_CHANCE * (1 + offense.chemistry_modifier):
                passer = self._assist_candidate(result, offense, shot.shooter)
                if passer is not None:
                    offense.box[passer].assists += 1
            if shot.fouled:
                fouler = self._matching_defender(offense.player(shot.shooter), defense)
                if fouler is not None and fouler.id in defense.box:
                    defense.box[fouler.id].fouls += 1

        if result.free_throws and scorer_id is not None:
            line = offense.box[scorer_id]
            line.fta += result.free_throws["attempted"]
            line.ftm += result.free_throws["made"]

        if result.outcome == "turnover":
            self._credit_turnover(result, offense, defense)

        kept_ball = False
        if result.outcome in ("missed", "offensive_rebound"):
            kept_ball = self.handle_rebound(offense, defense, is_home)

        if shot is not None and shot.blocked and defense.lineup:
            blocker = self.select_blocker(defense.lineup)
            if blocker.id in defense.box:
                defense.box[blocker.id].blocks += 1
        return kept_ball

    def _assist_candidate(self, result: PlayResult, offense: TeamSide, shooter_id: str) -> str | None:
        for role in BALL_CARRIER_ROLES:
            pid = result.role_assignments.get(role)
            if pid and pid != shooter_id and pid in offense.box:
                return pid
        for player in offense.lineup:
            if player.id != shooter_id and player.id in offense.box:
                return player.id
        return None

    @staticmethod
    def _matching_defender(player: Player | None, defense: TeamSide) -> Player | None:
        if not defense.lineup:
            return None
        if player is not None:
            for defender in defense.lineup:
                if defender.position == player.position:
                    return defender
        return defense.lineup[0]

    def _credit_turnover(self, result: PlayResult, offense: TeamSide, defense: TeamSide) -> None:
        handler = None
        for role in BALL_CARRIER_ROLES:
            if role in result.role_assignments:
                handler = result.role_assignments[role]
                break
        if handler in offense.box:
            offense.box[handler].turnovers += 1
        steal_chance = STEAL_ON_TURNOVER_CHANCE * (1 + defense.chemistry_modifier)
        if defense.lineup and self._rng.randint(1, 100) <= steal_chance:
            stealer = self._rng.choice(defense.lineup)
            if stealer.id in defense.box:
                defense.box[stealer.id].steals += 1

    def _track_clutch(
        self, result: PlayResult, offense: TeamSide, is_home: bool, prev_home: int, prev_away: int, points: int
    ) -> None:
        if self.time_remaining >= CLUTCH_TIME or self.current_quarter < QUARTERS:
            return
        prev_lead = (prev_home > prev_away) - (prev_home < prev_away)
        lead = (self.home.score > self.away.score) - (self.home.score < self.away.score)
        margin = abs(self.home.score - self.away.score)
        # Ties, lead changes and one-possession margins all count.
        if not (lead == 0 or lead != prev_lead or margin <= CLUTCH_MARGIN):
            return
        shot = result.shot_attempt
        if shot is None:
            return
        shooter = offense.player(shot.shooter)
        if shooter is None:
            return
        self.last_clutch_play = {
            "player_id": shooter.id,
            "player_name": shooter.full_name,
            "shot_type": CLUTCH_SHOT_NAMES.get(shot.shot_type, "jumper"),
            "is_home_team": is_home,
            "points": points,
        }

    def handle_rebound(self, offense: TeamSide, defense: TeamSide, is_home: bool) -> bool:
        off_total = sum(_rebound_weight(p, "offensive_rebound", 40) for p in offense.lineup)
        def_total = sum(_rebound_weight(p, "defensive_rebound", 50) for p in defense.lineup)
        weighted = off_total + def_total * DEFENSIVE_REBOUND_WEIGHT
        if weighted <= 0:
            weighted = 1
        low, high = OFFENSIVE_REBOUND_CHANCE_RANGE
        chance = max(low, min(high, off_total / weighted))
        is_offensive = self._rng.randint(1, 1000) <= int(chance * 1000)

        side = offense if is_offensive else defense
        attribute, default = ("offensive_rebound", 40) if is_offensive else ("defensive_rebound", 50)
        if not side.lineup:
            return is_offensive
        weights = [_rebound_weight(p, attribute, default) for p in side.lineup]
        if sum(weights) <= 0:
            rebounder = side.lineup[0]
        else:
            rebounder = self._rng.choices(side.lineup, weights=weights)[0]

        line = side.box.get(rebounder.id)
        if line is not None:
            line.rebounds += 1
            if is_offensive:
                line.offensive_rebounds += 1
            else:
                line.defensive_rebounds += 1

        if is_offensive and self.generate_animation_data:
            self.play_by_play.append({
                "possession": self.possession_count,
                "quarter": self.current_quarter,
                "time": format_clock(self.time_remaining),
                "team": "home" if is_home else "away",
                "play_name": "Offensive Rebound",
                "play_id": None,
                "outcome": "offensive_rebound",
                "points": 0,
                "description": f"{rebounder.full_name} grabs the offensive rebound",
                "home_score": self.home.score,
                "away_score": self.away.score,
            })
        return is_offensive

    def select_blocker(self, defense: list[Player]) -> Player:
        weights = [p.attribute("defense", "block", 50) or 50 for p in defense]
        if sum(weights) <= 0:
            return defense[0]
        return self._rng.choices(defense, weights=weights)[0]

    def rotate_players(self) -> None:
        for side, other in ((self.home, self.away), (self.away, self.home)):
            user_live = self.is_live_game and side.team_id is not None and side.team_id == self.user_team_id
            new_ids = self.substitutions.evaluate_substitutions(
                side.lineup,
                side.players,
                side.box,
                side.target_minutes,
                side.substitution_strategy,
                self.current_quarter,
                self.time_remaining,
                side.score - other.score,
                user_live,
            )
            if new_ids:
                side.lineup = self.rebuild_lineup(new_ids, side.players)

    def _record_play_by_play(self, result: PlayResult, is_home: bool) -> None:
        last = result.keyframes[-1] if result.keyframes else {}
        self.play_by_play.append({
            "possession": self.possession_count,
            "quarter": self.current_quarter,
            "time": format_clock(self.time_remaining),
            "team": "home" if is_home else "away",
            "play_name": result.play_name or "Play",
            "play_id": result.play_id,
            "outcome": result.outcome,
            "points": result.points,
            "description": last.get("description", ""),
            "home_score": self.home.score,
            "away_score": self.away.score,
        })

    # -- results -----------------------------------------------------------

    def _quarter_scores(self) -> dict[str, list[int]]:
        return {"home": list(self.home.quarter_scores), "away": list(self.away.quarter_scores)}

    def build_quarter_result(self, quarter: int) -> QuarterResult:
        if quarter > 1 and len(self.quarter_end_possessions) >= quarter - 1:
            start = self.quarter_end_possessions[quarter - 2] + 1
        else:
            start = 1
        return QuarterResult(
            quarter=quarter,
            home_score=self.home.score,
            away_score=self.away.score,
            quarter_scores=self._quarter_scores(),
            box_score={"home": self.home.box_rows(), "away": self.away.box_rows()},
            play_by_play=list(self.play_by_play),
            possessions=list(self.animation_data),
            quarter_start_possession=start,
            quarter_end_index=self.possession_count,
        )

    def build_final_result(self, include_live_data: bool = False) -> GameResult:
        result = GameResult(
            home_team=self.home.name,
            away_team=self.away.name,
            home_team_id=self.home.team_id,
            away_team_id=self.away.team_id,
            home_team_abbreviation=self.home.abbreviation,
            away_team_abbreviation=self.away.abbreviation,
            home_score=self.home.score,
            away_score=self.away.score,
            home_box=list(self.home.box.values()),
            away_box=list(self.away.box.values()),
            box_score={"home": self.home.box_rows(), "away": self.away.box_rows()},
            quarter_scores=self._quarter_scores(),
            synergies_activated={"home": self.home.synergies_activated, "away": self.away.synergies_activated},
            clutch_play=self.last_clutch_play,
            overtime_periods=max(0, self.current_quarter - QUARTERS),
        )
        if include_live_data and self.generate_animation_data:
            result.play_by_play = list(self.play_by_play)
            result.animation_data = {
                "possessions": list(self.animation_data),
                "total_possessions": self.possession_count,
                "quarter_end_indices": list(self.quarter_end_possessions),
            }
        return result

    # -- serialization -----------------------------------------------------

    def serialize_state(self) -> dict[str, Any]:
        state: dict[str, Any] = {
            "version": STATE_VERSION,
            "status": "in_progress",
            "current_quarter": self.current_quarter,
            "completed_quarters": list(range(1, len(self.home.quarter_scores) + 1)),
            "quarter_scores": self._quarter_scores(),
            "possession_count": self.possession_count,
            "quarter_end_possessions": list(self.quarter_end_possessions),
            "is_live_game": self.is_live_game,
            "user_team_id": self.user_team_id,
            "last_clutch_play": copy.deepcopy(self.last_clutch_play),
            "last_updated_at": datetime.now(timezone.utc).isoformat(),
        }
        for prefix, side in (("home", self.home), ("away", self.away)):
            state[f"{prefix}_score"] = side.score
            state[f"{prefix}_team_id"] = side.team_id
            state[f"{prefix}_team_name"] = side.name
            state[f"{prefix}_team_abbreviation"] = side.abbreviation
            state[f"{prefix}_box_score"] = {pid: asdict(line) for pid, line in side.box.items()}
            state[f"{prefix}_lineup"] = [p.id for p in side.lineup]
            state[f"{prefix}_players"] = [compact_player(p) for p in side.players]
            state[f"{prefix}_offensive_scheme"] = side.offensive_scheme
            state[f"{prefix}_defensive_scheme"] = side.defensive_scheme
            state[f"{prefix}_synergies_activated"] = side.synergies_activated
            state[f"{prefix}_chemistry_modifier"] = side.chemistry_modifier
            state[f"{prefix}_target_minutes"] = dict(side.target_minutes)
            state[f"{prefix}_sub_strategy"] = side.substitution_strategy
            state[f"{prefix}_starter_ids"] = list(side.starter_ids)
        return state

    def load_state(self, state: dict[str, Any]) -> None:
        version = int(state.get("version", 1) or 1)
        if version > STATE_VERSION:
            raise ValueError(f"Unsupported game state version {version}; simulator supports up to {STATE_VERSION}.")
        if state.get("status", "in_progress") != "in_progress":
            raise RuntimeError("Cannot resume a game that is not in progress.")

        legacy = "home_offensive_scheme" not in state
        if legacy:
            logger.warning("Migrating version %d game state with a single coaching scheme per team", version)

        quarter_scores = state.get("quarter_scores") or {}
        sides = []
        for prefix in ("home", "away"):
            players = [expand_player(p) for p in state.get(f"{prefix}_players") or []]
            if legacy:
                offensive = state.get(f"{prefix}_coaching_scheme") or DEFAULT_OFFENSIVE_SCHEME
                defensive = DEFAULT_DEFENSIVE_SCHEME
            else:
                offensive = state[f"{prefix}_offensive_scheme"] or DEFAULT_OFFENSIVE_SCHEME
                defensive = state.get(f"{prefix}_defensive_scheme") or DEFAULT_DEFENSIVE_SCHEME
            side = TeamSide(
                team_id=state.get(f"{prefix}_team_id"),
                name=state.get(f"{prefix}_team_name") or prefix.title(),
                abbreviation=state.get(f"{prefix}_team_abbreviation") or "",
                players=players,
                lineup=self.rebuild_lineup(state.get(f"{prefix}_lineup") or [], players),
                box={pid: BoxScoreLine(**row) for pid, row in (state.get(f"{prefix}_box_score") or {}).items()},
                score=int(state.get(f"{prefix}_score", 0)),
                offensive_scheme=offensive,
                defensive_scheme=defensive,
                substitution_strategy=state.get(f"{prefix}_sub_strategy") or DEFAULT_SUBSTITUTION_STRATEGY,
                target_minutes=dict(state.get(f"{prefix}_target_minutes") or {}),
                starter_ids=list(state.get(f"{prefix}_starter_ids") or []),
                quarter_scores=list(quarter_scores.get(prefix) or []),
                synergies_activated=int(state.get(f"{prefix}_synergies_activated", 0) or 0),
                chemistry_modifier=float(state.get(f"{prefix}_chemistry_modifier", 0.0) or 0.0),
            )
            sides.append(side)
        self.home, self.away = sides

        self.current_quarter = int(state.get("current_quarter", len(self.home.quarter_scores)) or 1)
        self.possession_count = int(state.get("possession_count", 0) or 0)
        self.quarter_end_possessions = list(state.get("quarter_end_possessions") or [])
        self.is_live_game = bool(state.get("is_live_game", False))
        self.user_team_id = state.get("user_team_id")
        self.last_clutch_play = copy.deepcopy(state.get("last_clutch_play"))
        self.generate_animation_data = True
        self.play_by_play = []
        self.animation_data = []
        self.phase = GamePhase.BETWEEN_QUARTERS

    def apply_adjustments(self, adjustments: dict[str, Any] | None) -> None:
        if not adjustments:
            return
        home_ids = adjustments.get("home_lineup") or []
        away_ids = adjustments.get("away_lineup") or []
        offensive = adjustments.get("offensive_style")
        defensive = adjustments.get("defensive_style")

        if home_ids:
            self._adjust_lineup(self.home, home_ids)
        if away_ids:
            self._adjust_lineup(self.away, away_ids)

        target = self.away if away_ids and not home_ids else self.home
        if offensive:
            target.offensive_scheme = offensive
        if defensive:
            target.defensive_scheme = defensive

    def _adjust_lineup(self, side: TeamSide, player_ids: list[str]) -> None:
        lineup = self.rebuild_lineup(player_ids, side.players)
        if len({p.id for p in lineup}) < 5:
            logger.warning("Ignoring lineup adjustment for %s: %d known players", side.name, len(lineup))
            return
        side.lineup = lineup[:5]
