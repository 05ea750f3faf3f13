from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from datetime import date, timedelta
from typing import Any

from .aging import AttributeAging
from .badges import BadgeSynergyService
from .config import (
    ATTRIBUTE_MAX,
    ATTRIBUTE_MIN,
    DEFAULT_DIFFICULTY,
    FATIGUE_WARNING_LEVEL,
    HISTORY_LIMIT,
    OVERALL_MAX,
    OVERALL_MIN,
    OVERALL_WEIGHTS,
    PERFORMANCE_LIMIT,
    RETIREMENT,
    STREAKS,
    UPGRADE_POINTS,
)
from .development import DevelopmentCalculator, calculate_performance_rating
from .fatigue import FatigueModel
from .injuries import InjuryService
from .models import BoxScoreLine, Player, StreakData
from .morale import MoraleService
from .news import EvolutionNewsService, NewsEvent
from .personality import PersonalityEffects

logger = logging.getLogger(__name__)

UPGRADEABLE_CATEGORIES = ("offense", "defense", "physical")
DEFAULT_CATEGORY_AVERAGE = 75
BREAKOUT_GAIN = 3
DECLINE_LOSS = 2
MORALE_CHANGE_REPORT = 3
WEAKNESS_PRIORITY_PCT = 60

POSITION_ATTRIBUTE_WEIGHTS: dict[str, dict[str, dict[str, float]]] = {
    "PG": {
        "offense": {
            "ball_handling": 1.0, "pass_accuracy": 1.0, "pass_vision": 0.9, "pass_iq": 0.9,
            "three_point": 0.8, "mid_range": 0.7, "layup": 0.7, "close_shot": 0.5,
            "free_throw": 0.6, "post_control": 0.2, "draw_foul": 0.6,
            "standing_dunk": 0.1, "driving_dunk": 0.4,
        },
        "defense": {
            "perimeter_defense": 1.0, "steal": 0.9, "pass_perception": 0.8,
            "help_defense_iq": 0.7, "interior_defense": 0.3, "block": 0.2,
            "offensive_rebound": 0.2, "defensive_rebound": 0.4,
        },
        "physical": {"speed": 1.0, "acceleration": 0.9, "stamina": 0.8, "vertical": 0.5, "strength": 0.4},
    },
    "SG": {
        "offense": {
            "three_point": 1.0, "mid_range": 0.9, "ball_handling": 0.7, "layup": 0.8,
            "close_shot": 0.6, "free_throw": 0.7, "pass_accuracy": 0.6, "pass_vision": 0.5,
            "pass_iq": 0.5, "draw_foul": 0.7, "driving_dunk": 0.6,
            "standing_dunk": 0.3, "post_control": 0.2,
        },
        "defense": {
            "perimeter_defense": 1.0, "steal": 0.8, "pass_perception": 0.7,
            "help_defense_iq": 0.6, "interior_defense": 0.3, "block": 0.3,
            "offensive_rebound": 0.3, "defensive_rebound": 0.5,
        },
        "physical": {"speed": 0.9, "acceleration": 0.8, "stamina": 0.8, "vertical": 0.7, "strength": 0.5},
    },
    "SF": {
        "offense": {
            "three_point": 0.8, "mid_range": 0.8, "layup": 0.8, "close_shot": 0.7,
            "ball_handling": 0.6, "pass_accuracy": 0.5, "pass_vision": 0.4, "pass_iq": 0.4,
            "free_throw": 0.6, "draw_foul": 0.7, "driving_dunk": 0.7,
            "standing_dunk": 0.5, "post_control": 0.4,
        },
        "defense": {
            "perimeter_defense": 0.8, "interior_defense": 0.6, "steal": 0.7,
            "block": 0.5, "help_defense_iq": 0.7, "pass_perception": 0.6,
            "offensive_rebound": 0.5, "defensive_rebound": 0.7,
        },
        "physical": {"speed": 0.7, "acceleration": 0.7, "stamina": 0.8, "vertical": 0.7, "strength": 0.7},
    },
    "PF": {
        "offense": {
            "post_control": 0.8, "close_shot": 0.9, "mid_range": 0.7, "layup": 0.8,
            "standing_dunk": 0.8, "driving_dunk": 0.6, "three_point": 0.5,
            "free_throw": 0.6, "draw_foul": 0.7, "ball_handling": 0.3,
            "pass_accuracy": 0.4, "pass_vision": 0.3, "pass_iq": 0.4,
        },
        "defense": {
            "interior_defense": 0.9, "block": 0.8, "defensive_rebound": 0.9,
            "offensive_rebound": 0.8, "help_defense_iq": 0.7, "perimeter_defense": 0.5,
            "steal": 0.4, "pass_perception": 0.5,
        },
        "physical": {"strength": 0.9, "vertical": 0.7, "stamina": 0.7, "speed": 0.5, "acceleration": 0.5},
    },
    "C": {
        "offense": {
            "post_control": 1.0, "close_shot": 0.9, "standing_dunk": 0.9, "layup": 0.7,
            "free_throw": 0.5, "draw_foul": 0.6, "mid_range": 0.4, "driving_dunk": 0.4,
            "three_point": 0.2, "ball_handling": 0.2, "pass_accuracy": 0.4,
            "pass_vision": 0.3, "pass_iq": 0.4,
        },
        "defense": {
            "interior_defense": 1.0, "block": 1.0, "defensive_rebound": 1.0,
            "offensive_rebound": 0.9, "help_defense_iq": 0.7, "perimeter_defense": 0.3,
            "steal": 0.3, "pass_perception": 0.4,
        },
        "physical": {"strength": 1.0, "vertical": 0.6, "stamina": 0.6, "speed": 0.3, "acceleration": 0.3},
    },
}


def get_position_attribute_weights(position: str | None) -> dict[str, dict[str, float]]:
    return POSITION_ATTRIBUTE_WEIGHTS.get(position or "SF", POSITION_ATTRIBUTE_WEIGHTS["SF"])


def clamp_attribute(current: float, change: float, potential: float) -> float:
    """Gains stop at potential; a value already above potential is never pulled down to it."""
    value = current + change
    if change > 0:
        value = min(value, max(current, min(potential, ATTRIBUTE_MAX)))
    return max(ATTRIBUTE_MIN, value)


def recalculate_overall(player: Player) -> Player:
    overall = 0.0
    for category, weight in OVERALL_WEIGHTS.items():
        values = list(player.attributes.get(category, {}).values())
        average = sum(values) / len(values) if values else DEFAULT_CATEGORY_AVERAGE
        overall += average * weight
    player.overall_rating = round(min(OVERALL_MAX, max(OVERALL_MIN, overall)))
    return player


def count_streak(performances: list[dict[str, Any]], threshold: float, above: bool) -> int:
    count = 0
    for entry in reversed(performances):
        rating = entry.get("rating", 0)
        if (rating >= threshold) if above else (rating <= threshold):
            count += 1
        else:
            break
    return count


def merge_players(roster: list[Player], updated: list[Player]) -> list[Player]:
    by_id = {player.id: player for player in updated}
    return [by_id.get(player.id, player) for player in roster]


@dataclass(slots=True)
class EvolutionResult:
    players: list[Player] = field(default_factory=list)
    summary: dict[str, list[Any]] = field(default_factory=dict)
    news: list[NewsEvent] = field(default_factory=list)

    def add(self, key: str, entry: Any) -> None:
        self.summary.setdefault(key, []).append(entry)

    def player_map(self) -> dict[str, Player]:
        return {player.id: player for player in self.players}

    def to_dict(self) -> dict[str, Any]:
        return {
            "players": [player.id for player in self.players],
            **self.summary,
            "news": [event.to_dict() for event in self.news],
        }


class PlayerEvolution:
    """Career progression between games: fatigue, injuries, morale, development, aging and retirement.

    Every pass works on deep copies; callers swap the returned players into their rosters.
    """

    def __init__(
        self,
        rng: random.Random | None = None,
        difficulty: str = DEFAULT_DIFFICULTY,
        today: date | None = None,
        synergies: BadgeSynergyService | None = None,
    ) -> None:
        self._rng = rng or random.Random()
        self.difficulty = difficulty
        self.today = today
        self.aging = AttributeAging(self._rng)
        self.development = DevelopmentCalculator(self._rng, today)
        self.fatigue = FatigueModel(self._rng)
        self.injuries = InjuryService(self._rng, self.aging)
        self.morale = MoraleService(self._rng)
        self.personality = PersonalityEffects(self._rng, today)
        self.news = EvolutionNewsService(self._rng)
        self.synergies = synergies or BadgeSynergyService()

    def _date(self, value: str | None = None) -> str:
        return value or (self.today or date.today()).isoformat()

    # Post-game

    def process_post_game(
        self,
        home_roster: list[Player],
        away_roster: list[Player],
        home_box: list[BoxScoreLine],
        away_box: list[BoxScoreLine],
        home_score: int,
        away_score: int,
        is_playoff: bool = False,
        game_date: str | None = None,
        home_abbreviation: str = "",
        away_abbreviation: str = "",
        home_streak: int = 0,
        away_streak: int = 0,
    ) -> dict[str, EvolutionResult]:
        played_on = self._date(game_date)
        home = self.process_team_post_game(
            home_roster, home_box, home_score > away_score, is_playoff, played_on, away_abbreviation, home_streak
        )
        away = self.process_team_post_game(
            away_roster, away_box, away_score > home_score, is_playoff, played_on, home_abbreviation, away_streak
        )
        return {"home": home, "away": away}

    def process_team_post_game(
        self,
        roster: list[Player],
        box_lines: list[BoxScoreLine],
        won: bool,
        is_playoff: bool = False,
        game_date: str | None = None,
        opponent: str = "",
        streak: int = 0,
    ) -> EvolutionResult:
        played_on = self._date(game_date)
        by_id = {player.id: player for player in roster}
        result = EvolutionResult()

        for line in box_lines:
            original = by_id.get(line.player_id)
            if original is None:
                continue
            player = original.copy()
            minutes = line.minutes or 0.0

            if player.is_injured:
                injury = player.injury_details
                self.injuries.process_recovery(player)
                if injury is not None and not player.is_injured:
                    result.news.append(self.news.create_recovery_news(player, injury, played_on))
                    result.add("recoveries", {"player_id": player.id, "name": player.full_name, "injury_type": injury.name})

            old_fatigue = player.fatigue
            self.fatigue.update_fatigue(player, minutes)
            if player.fatigue >= FATIGUE_WARNING_LEVEL > old_fatigue:
                result.add(
                    "fatigue_warnings", {"player_id": player.id, "name": player.full_name, "fatigue": round(player.fatigue)}
                )

            if minutes > 0 and not player.is_injured:
                age = self.development.player_age(player)
                injury = self.injuries.check_for_injury(player, minutes, age, is_playoff, played_on)
                if injury is not None:
                    player.is_injured = True
                    player.injury_details = injury
                    result.news.append(self.news.create_injury_news(player, injury, played_on))
                    result.add(
                        "injuries",
                        {
                            "player_id": player.id,
                            "name": player.full_name,
                            "injury_type": injury.name,
                            "games_out": injury.games_remaining,
                            "severity": injury.severity,
                        },
                    )

            old_morale = player.personality.morale
            self.morale.update_after_game(player, won, minutes, streak, self.difficulty)
            morale_change = player.personality.morale - old_morale
            if abs(morale_change) >= MORALE_CHANGE_REPORT:
                result.add(
                    "morale_changes",
                    {
                        "player_id": player.id,
                        "name": player.full_name,
                        "change": morale_change,
                        "new_morale": player.personality.morale,
                    },
                )

            if not player.is_injured:
                self._apply_micro_development(player, line, played_on, result)
                old_streak = player.streak_data
                self.track_performance(player, line, played_on, opponent, won)
                self.process_streaks(player)
                self._report_streak(player, old_streak, played_on, result)

            if minutes > 0:
                player.games_played_this_season += 1
            player.minutes_played_this_season += minutes
            result.players.append(player)

        logger.debug(
            "Post-game evolution for %d players: %s",
            len(result.players),
            {key: len(entries) for key, entries in result.summary.items()},
        )
        return result

    def _apply_micro_development(
        self, player: Player, line: BoxScoreLine, played_on: str, result: EvolutionResult
    ) -> dict[str, Any]:
        micro = self.development.calculate_micro_development(player, line, self.difficulty)
        changes = micro["attribute_changes"]
        if not changes:
            return micro
        self.apply_attribute_changes(player, changes, played_on)
        entry = {
            "player_id": player.id,
            "name": player.full_name,
            "performance_rating": round(micro["performance_rating"], 1),
        }
        if micro["type"] == "development":
            result.add("development", {**entry, "attributes_improved": list(changes)})
        elif micro["type"] == "regression":
            result.add("regression", {**entry, "attributes_declined": list(changes)})
        return micro

    def _report_streak(
        self, player: Player, old: StreakData | None, played_on: str, result: EvolutionResult
    ) -> None:
        new = player.streak_data
        if new is None:
            return
        if old is not None and old.type == new.type and new.games <= old.games:
            return
        entry = {"player_id": player.id, "name": player.full_name, "games": new.games}
        if new.type == "hot":
            result.add("hot_streaks", entry)
            result.news.append(self.news.create_hot_streak_news(player, new.games, game_date=played_on))
        else:
            result.add("cold_streaks", entry)
            result.news.append(self.news.create_cold_streak_news(player, new.games, played_on))

    def process_game_development(self, player: Player, line: BoxScoreLine, game_date: str | None = None) -> dict[str, Any]:
        updated = player.copy()
        if updated.is_injured:
            return {"player": updated, "news": [], "development": None}
        micro = self.development.calculate_micro_development(updated, line, self.difficulty)
        if micro["attribute_changes"]:
            self.apply_attribute_changes(updated, micro["attribute_changes"], self._date(game_date))
        recalculate_overall(updated)
        return {"player": updated, "news": [], "development": micro}

    # Attribute bookkeeping

    def apply_attribute_changes(
        self, player: Player, changes: dict[str, float], change_date: str | None = None, source: str | None = None
    ) -> Player:
        when = self._date(change_date)
        for path, change in changes.items():
            category, _, name = path.partition(".")
            values = player.attributes.get(category)
            if not name or values is None or name not in values:
                continue
            current = values[name]
            new_value = round(clamp_attribute(current, change, player.potential_rating), 2)
            values[name] = new_value
            entry = {
                "date": when,
                "category": category,
                "attribute": name,
                "change": round(change, 2),
                "old_value": current,
                "new_value": new_value,
            }
            if source:
                entry["source"] = source
            player.development_history.append(entry)
        del player.development_history[:-HISTORY_LIMIT]
        return player

    def apply_monthly_attribute_changes(self, player: Player, development: float, regression: float) -> Player:
        age = self.development.player_age(player)
        for values in player.attributes.values():
            for name, current in values.items():
                change = self.aging.calculate_attribute_change(name, age, development, regression)
                values[name] = round(clamp_attribute(current, change, player.potential_rating), 1)
        return player

    # Performance log and streaks

    def track_performance(
        self, player: Player, line: BoxScoreLine, game_date: str = "", opponent: str = "", won: bool = False
    ) -> Player:
        if game_date and opponent:
            for entry in player.recent_performances:
                if entry.get("date") == game_date and entry.get("opponent") == opponent:
                    return player
        rating = calculate_performance_rating(line)
        player.recent_performances.append({
            "rating": round(rating, 1),
            "date": game_date,
            "opponent": opponent,
            "won": won,
            "min": int(line.minutes or 0),
            "pts": line.points,
            "reb": (line.offensive_rebounds + line.defensive_rebounds) or line.rebounds,
            "ast": line.assists,
            "stl": line.steals,
            "blk": line.blocks,
            "to": line.turnovers,
            "fgm": line.fgm,
            "fga": line.fga,
            "tpm": line.fg3m,
            "tpa": line.fg3a,
            "ftm": line.ftm,
            "fta": line.fta,
        })
        del player.recent_performances[:-PERFORMANCE_LIMIT]
        return player

    @staticmethod
    def process_streaks(player: Player) -> Player:
        window = int(STREAKS["hot_streak_games"])
        performances = player.recent_performances
        if len(performances) < window:
            return player
        recent = [entry.get("rating", 0) for entry in performances[-window:]]
        cap = int(STREAKS["max_streak_length"])
        if all(rating >= STREAKS["hot_streak_threshold"] for rating in recent):
            games = count_streak(performances, STREAKS["hot_streak_threshold"], above=True)
            player.streak_data = StreakData("hot", min(games, cap))
        elif all(rating <= STREAKS["cold_streak_threshold"] for rating in recent):
            games = count_streak(performances, STREAKS["cold_streak_threshold"], above=False)
            player.streak_data = StreakData("cold", min(games, cap))
        else:
            player.streak_data = None
        return player

    # Upgrade points

    @staticmethod
    def calculate_upgrade_points_from_growth(player: Player, since_date: str) -> int:
        if not UPGRADE_POINTS["enabled"]:
            return 0
        growth = sum(
            entry.get("change", 0)
            for entry in player.development_history
            if entry.get("date") and entry["date"] >= since_date and entry.get("change", 0) > 0
        )
        if growth < UPGRADE_POINTS["min_growth_threshold"]:
            return 0
        potential = player.potential_rating
        points = int(growth * UPGRADE_POINTS["points_per_growth"] * (potential / 75))
        cap = UPGRADE_POINTS["max_weekly_points"]
        if potential >= UPGRADE_POINTS["elite_potential"]:
            cap += 1
        return min(points, cap)

    def select_ai_upgrade(self, player: Player) -> dict[str, Any] | None:
        weights = get_position_attribute_weights(player.position)
        potential = player.potential_rating
        candidates = []
        for category in UPGRADEABLE_CATEGORIES:
            values = player.attributes.get(category)
            if not values:
                continue
            average = sum(values.values()) / len(values)
            for name, value in values.items():
                if value >= potential:
                    continue
                score = weights.get(category, {}).get(name, 0.5)
                weakness = value < average - 3
                strength = value > average + 3
                prioritize_weakness = self._rng.randint(1, 100) <= WEAKNESS_PRIORITY_PCT
                if prioritize_weakness and weakness:
                    score += 0.3 + (average - value) / 30
                elif not prioritize_weakness and strength:
                    score += 0.25
                elif weakness:
                    score += 0.1
                score += self._rng.randint(0, 20) / 100
                candidates.append({"category": category, "attribute": name, "value": value, "score": score})
        if not candidates:
            return None
        return max(candidates, key=lambda c: c["score"])

    def process_ai_upgrades(self, player: Player, upgrade_date: str | None = None) -> Player:
        when = self._date(upgrade_date)
        while player.upgrade_points > 0:
            upgrade = self.select_ai_upgrade(player)
            if upgrade is None:
                break
            category, name = upgrade["category"], upgrade["attribute"]
            current = player.attributes[category][name]
            new_value = min(player.potential_rating, current + 1)
            player.attributes[category][name] = new_value
            player.development_history.append({
                "date": when,
                "category": category,
                "attribute": name,
                "change": 1,
                "old_value": current,
                "new_value": new_value,
                "source": "ai_upgrade",
            })
            player.upgrade_points -= 1
        del player.development_history[:-HISTORY_LIMIT]
        return player

    # Calendar passes

    def process_weekly_evolution(
        self,
        players: list[Player],
        team_records: dict[str, dict[str, int]] | None = None,
        current_date: str | None = None,
        is_ai: bool = False,
    ) -> EvolutionResult:
        records = team_records or {}
        today = self._date(current_date)
        week_ago = (date.fromisoformat(today) - timedelta(days=7)).isoformat()
        result = EvolutionResult()

        for original in players:
            player = original.copy()
            if player.is_injured:
                injury = player.injury_details
                self.injuries.process_recovery(player)
                if injury is not None and not player.is_injured:
                    result.news.append(self.news.create_recovery_news(player, injury, today))

            self.fatigue.recover_weekly(player)
            record = records.get(player.team_id, {})
            self.morale.update_weekly(player, record.get("wins", 0), record.get("losses", 0))
            if self.morale.check_for_trade_request(player):
                result.add("trade_requests", {"player_id": player.id, "name": player.full_name})
                result.news.append(self.news.create_trade_request_news(player, today))

            self.process_streaks(player)

            earned = self.calculate_upgrade_points_from_growth(player, week_ago)
            if earned > 0:
                player.upgrade_points = min(UPGRADE_POINTS["max_stored_points"], player.upgrade_points + earned)
                result.add(
                    "upgrade_points_awarded",
                    {
                        "player_id": player.id,
                        "name": player.full_name,
                        "points_earned": earned,
                        "total_points": player.upgrade_points,
                    },
                )
            if is_ai:
                self.process_ai_upgrades(player, today)

            recalculate_overall(player)
            result.players.append(player)

        logger.info("Weekly evolution processed %d players", len(result.players))
        return result

    def process_monthly_development(
        self, players: list[Player], full_roster: list[Player] | None = None, current_date: str | None = None
    ) -> EvolutionResult:
        roster = full_roster if full_roster is not None else players
        mentorships = self.personality.assign_mentors(roster)
        today = self._date(current_date)
        result = EvolutionResult()

        for original in players:
            player = original.copy()
            if player.is_injured:
                result.players.append(player)
                continue

            games = player.games_played_this_season
            context = {
                "avg_minutes_per_game": player.minutes_played_this_season / games if games > 0 else 0,
                "has_mentor": bool(mentorships.get(player.id)),
                "badge_synergy_boost": self.synergies.calculate_development_boost(player, roster),
                "dynamic_duo_boost": self.synergies.get_dynamic_duo_boost(player, roster),
            }
            development = self.development.calculate_monthly_development(player, context, self.difficulty)
            regression = self.development.calculate_monthly_regression(player, self.difficulty)
            development *= 1 + self.personality.get_development_modifier(player)

            if development > 0 or regression > 0:
                self.apply_monthly_attribute_changes(player, development, regression)

            old_overall = player.overall_rating
            recalculate_overall(player)
            change = player.overall_rating - old_overall
            age = self.development.player_age(player)
            if change >= BREAKOUT_GAIN:
                result.news.append(self.news.create_breakout_news(player, change, age, today))
            elif change <= -DECLINE_LOSS:
                result.news.append(self.news.create_decline_news(player, abs(change), age, today))
            result.players.append(player)

        logger.info("Monthly development processed %d players", len(result.players))
        return result

    def should_retire(self, player: Player, age: int) -> bool:
        if age < RETIREMENT["min_age"]:
            return False
        chance = RETIREMENT["base_chance"] + (age - RETIREMENT["min_age"]) * RETIREMENT["age_factor"]
        if player.overall_rating < RETIREMENT["low_rating_threshold"]:
            chance += RETIREMENT["low_rating_bonus"]
        return self._rng.randint(1, 100) / 100 <= chance

    def process_season_end(self, players: list[Player], season_date: str | None = None) -> EvolutionResult:
        today = self._date(season_date)
        result = EvolutionResult(summary={"developed": [], "regressed": [], "retired": []})

        for original in players:
            player = original.copy()
            old_overall = player.overall_rating
            # Injuries carry over and keep healing game by game next season.
            player.fatigue = 0.0
            player.career_seasons += 1

            age = self.development.player_age(player)
            player.attributes = self.aging.apply_seasonal_aging(player.attributes, age)

            if self.should_retire(player, age):
                player.is_retired = True
                result.add("retired", player.full_name)
                result.news.append(self.news.create_retirement_news(player, player.career_seasons, today))
                continue

            player.games_played_this_season = 0
            player.minutes_played_this_season = 0.0
            player.recent_performances = []
            player.streak_data = None
            player.contract_years_remaining = max(0, player.contract_years_remaining - 1)

            recalculate_overall(player)
            change = player.overall_rating - old_overall
            if change > 0:
                result.add("developed", f"{player.full_name} (+{change})")
            elif change < 0:
                result.add("regressed", f"{player.full_name} ({change})")
            result.players.append(player)

        logger.info(
            "Season end: %d active, %d retired", len(result.players), len(result.summary["retired"])
        )
        return result

    def process_rest_day_recovery(self, players: list[Player], teams_with_games: list[str] | None = None) -> list[Player]:
        playing = set(teams_with_games or [])
        updated = []
        for player in players:
            if player.team_id in playing or player.fatigue <= 0:
                updated.append(player)
                continue
            updated.append(self.fatigue.recover_rest_days(player.copy(), 1))
        return updated

    def process_multi_day_rest_recovery(self, players: list[Player], teams_per_day: list[list[str]]) -> list[Player]:
        total_days = len(teams_per_day)
        if total_days == 0:
            return players
        games: dict[str, int] = {}
        for day in teams_per_day:
            for team_id in day:
                games[team_id] = games.get(team_id, 0) + 1
        updated = []
        for player in players:
            rest_days = total_days - games.get(player.team_id, 0)
            if rest_days <= 0 or player.fatigue <= 0:
                updated.append(player)
                continue
            updated.append(self.fatigue.recover_rest_days(player.copy(), rest_days))
        return updated
