from __future__ import annotations

import random
from datetime import date
from typing import Any

from .config import AGE_BRACKETS, DEFAULT_DIFFICULTY, DEVELOPMENT, DIFFICULTY_SETTINGS, MORALE
from .models import BoxScoreLine, Player

DEFAULT_AGE = 25
MAX_REGRESSION_CATEGORIES = 2
FULL_GAME_MINUTES = 36


def calculate_age(birth_date: str | None, today: date | None = None) -> int:
    if not birth_date:
        return DEFAULT_AGE
    try:
        born = date.fromisoformat(str(birth_date)[:10])
    except ValueError:
        return DEFAULT_AGE
    today = today or date.today()
    age = today.year - born.year - ((today.month, today.day) < (born.month, born.day))
    if age < 0 or age > 50:
        return DEFAULT_AGE
    return age


def get_age_bracket(age: int) -> str:
    for name, bracket in AGE_BRACKETS.items():
        if bracket["min"] <= age <= bracket["max"]:
            return name
    if age < AGE_BRACKETS["youth"]["min"]:
        return "youth"
    return "veteran"


def get_difficulty_settings(difficulty: str = DEFAULT_DIFFICULTY) -> dict[str, Any]:
    return DIFFICULTY_SETTINGS.get(difficulty) or DIFFICULTY_SETTINGS[DEFAULT_DIFFICULTY]


def get_morale_modifier(morale: float) -> float:
    for level in MORALE["effects"].values():
        if morale >= level["threshold"]:
            return level["development_modifier"]
    return MORALE["effects"]["critical"]["development_modifier"]


def calculate_performance_rating(line: BoxScoreLine) -> float:
    """PER-like per-minute rating; average play lands near 15."""
    minutes = max(1.0, line.minutes or 1.0)
    rebounds = (line.offensive_rebounds + line.defensive_rebounds) or line.rebounds
    missed_fg = max(0, line.fga - line.fgm)
    missed_ft = max(0, line.fta - line.ftm)
    raw = (
        line.points
        + line.offensive_rebounds * 1.5
        + (rebounds - line.offensive_rebounds) * 0.8
        + line.assists * 1.5
        + line.steals * 2.0
        + line.blocks * 2.0
        + line.fg3m * 0.5
        - missed_fg * 0.7
        - missed_ft * 0.35
        - line.turnovers * 1.5
    ) / minutes * 20
    return round(raw, 2)


def get_attribute_changes_from_stats(
    line: BoxScoreLine, change: float, settings: dict[str, Any], minutes: float = 0
) -> dict[str, float]:
    """Map a box line to ``category.attribute`` deltas; thresholds are per-36 and scale with minutes."""
    thresholds = settings["stat_thresholds"]
    played = minutes if minutes > 0 else (line.minutes or FULL_GAME_MINUTES)
    scale = min(played / FULL_GAME_MINUTES, 1.0)

    rebounds = (line.offensive_rebounds + line.defensive_rebounds) or line.rebounds
    points_bar = thresholds["points"] * scale
    assists_bar = thresholds["assists"] * scale
    rebounds_bar = thresholds["rebounds"] * scale
    changes: dict[str, float] = {}

    if change > 0:
        if line.points >= points_bar:
            if line.fg3m >= thresholds["threes"] * scale:
                changes["offense.three_point"] = change
            else:
                changes["offense.mid_range"] = change * 0.5
                changes["offense.layup"] = change * 0.5
        elif line.points >= points_bar * 0.6:
            changes["offense.close_shot"] = change * 0.3

        if line.assists >= assists_bar:
            changes["offense.pass_accuracy"] = change
            changes["offense.pass_vision"] = change * 0.5
        elif line.assists >= assists_bar * 0.6:
            changes["offense.pass_accuracy"] = change * 0.3

        if rebounds >= rebounds_bar:
            changes["defense.defensive_rebound"] = change * 0.7
            changes["defense.offensive_rebound"] = change * 0.3
        elif rebounds >= rebounds_bar * 0.6:
            changes["defense.defensive_rebound"] = change * 0.3

        if line.steals >= thresholds["steals"] * scale:
            changes["defense.steal"] = change
            changes["defense.perimeter_defense"] = change * 0.3
        if line.blocks >= thresholds["blocks"] * scale:
            changes["defense.block"] = change
            changes["defense.interior_defense"] = change * 0.3
        return changes

    loss = abs(change)
    regressed = 0
    if line.points < points_bar * 0.4:
        changes["offense.mid_range"] = -loss * 0.5
        changes["offense.close_shot"] = -loss * 0.5
        regressed += 1
    if line.assists < assists_bar * 0.4 and regressed < MAX_REGRESSION_CATEGORIES:
        changes["offense.pass_accuracy"] = -loss * 0.5
        regressed += 1
    if rebounds < rebounds_bar * 0.4 and regressed < MAX_REGRESSION_CATEGORIES:
        changes["defense.defensive_rebound"] = -loss * 0.5
        regressed += 1
    if line.steals == 0 and line.blocks == 0 and regressed < MAX_REGRESSION_CATEGORIES:
        changes["defense.perimeter_defense"] = -loss * 0.3
    return changes


class DevelopmentCalculator:
    def __init__(self, rng: random.Random | None = None, today: date | None = None) -> None:
        self._rng = rng or random.Random()
        self.today = today

    def player_age(self, player: Player) -> int:
        if player.birth_date:
            return calculate_age(player.birth_date, self.today)
        if player.age is not None and 0 <= player.age <= 50:
            return player.age
        return DEFAULT_AGE

    def development_multiplier(self, age: int, difficulty: str = DEFAULT_DIFFICULTY) -> float:
        base = AGE_BRACKETS[get_age_bracket(age)]["development"]
        return base * get_difficulty_settings(difficulty).get("development_multiplier", 1.0)

    def regression_multiplier(self, age: int, difficulty: str = DEFAULT_DIFFICULTY) -> float:
        base = AGE_BRACKETS[get_age_bracket(age)]["regression"]
        return base * get_difficulty_settings(difficulty).get("regression_multiplier", 1.0)

    def calculate_monthly_development(
        self, player: Player, context: dict[str, Any] | None = None, difficulty: str = DEFAULT_DIFFICULTY
    ) -> float:
        context = context or {}
        current = player.overall_rating
        potential = player.potential_rating
        if current >= potential:
            return 0.0

        age = self.player_age(player)
        base = (potential - current) * DEVELOPMENT["base_rate"] * self.development_multiplier(age, difficulty) / 12
        work_ethic = player.attribute("mental", "work_ethic", 70)

        total = (
            base
            + base * (work_ethic / 100) * DEVELOPMENT["work_ethic_factor"]
            + base * (context.get("avg_minutes_per_game", 20) / FULL_GAME_MINUTES) * DEVELOPMENT["playing_time_factor"]
            + (base * DEVELOPMENT["mentor_factor"] if context.get("has_mentor") else 0.0)
            + context.get("badge_synergy_boost", 0.0) * base
            + context.get("dynamic_duo_boost", 0.0) * base
        )
        total *= 1 + get_morale_modifier(player.personality.morale)
        return max(0.0, total)

    def calculate_monthly_regression(self, player: Player, difficulty: str = DEFAULT_DIFFICULTY) -> float:
        multiplier = self.regression_multiplier(self.player_age(player), difficulty)
        if multiplier <= 0:
            return 0.0
        return multiplier * 0.5 / 12

    def calculate_micro_development(
        self, player: Player, line: BoxScoreLine, difficulty: str = DEFAULT_DIFFICULTY
    ) -> dict[str, Any]:
        settings = get_difficulty_settings(difficulty)
        performance = calculate_performance_rating(line)
        minutes = line.minutes or 0.0
        result: dict[str, Any] = {"performance_rating": performance, "attribute_changes": {}, "type": "none"}

        if performance >= settings["micro_dev_threshold_high"]:
            # 28 minutes is the baseline share of reps.
            factor = max(0.5, min(minutes / 28, 1.3))
            gain = self._rng.uniform(settings["micro_dev_gain_min"], settings["micro_dev_gain_max"]) * factor
            result["type"] = "development"
            result["attribute_changes"] = get_attribute_changes_from_stats(line, gain, settings, minutes)
        elif performance <= settings["micro_dev_threshold_low"] and minutes >= settings["min_minutes_for_regression"]:
            factor = max(0.6, min(minutes / 30, 1.15))
            loss = self._rng.uniform(settings["micro_dev_loss_min"], settings["micro_dev_loss_max"]) * factor
            result["type"] = "regression"
            result["attribute_changes"] = get_attribute_changes_from_stats(line, -loss, settings, minutes)
        return result

    def can_reach_potential(self, player: Player, difficulty: str = DEFAULT_DIFFICULTY) -> bool:
        age = self.player_age(player)
        return player.overall_rating < player.potential_rating and self.development_multiplier(age, difficulty) > 0
