from __future__ import annotations

import random
from typing import Any

from .config import FATIGUE, ROOKIE_WALL
from .models import Player


def athletic_average(player: Player) -> float:
    stamina = player.attribute("physical", "stamina", 70)
    durability = player.attribute("physical", "durability", 70)
    return (stamina * 0.6 + durability * 0.4) / 100


def find_bracket(minutes: float) -> dict[str, Any]:
    """First bracket whose upper bound covers the minutes; past the table means the heaviest one."""
    brackets: list[dict[str, Any]] = FATIGUE["minute_thresholds"]  # type: ignore[assignment]
    for bracket in brackets:
        if minutes <= bracket["max"]:
            return bracket
    return brackets[-1]


class FatigueModel:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def weighted_recovery(self, player: Player, base: float) -> float:
        modifier = 0.8 + athletic_average(player) * 0.4
        variance = 0.85 + self._rng.randint(0, 30) / 100
        return base * modifier * variance

    def in_rookie_wall(self, player: Player) -> bool:
        if player.career_seasons != 0:
            return False
        start = ROOKIE_WALL["game_threshold"]
        return start <= player.games_played_this_season < start + ROOKIE_WALL["duration_games"]

    def update_fatigue(self, player: Player, minutes: float) -> Player:
        current = player.fatigue
        if minutes <= 0:
            player.fatigue = max(0.0, current - self.weighted_recovery(player, FATIGUE["rest_day_recovery"]))
            return player

        bracket = find_bracket(minutes)
        if bracket["type"] == "recovery":
            player.fatigue = max(0.0, current - self.weighted_recovery(player, bracket["base"]))
            return player

        gain = bracket["base"] * (1.2 - athletic_average(player) * 0.4)
        if self.in_rookie_wall(player):
            gain *= ROOKIE_WALL["multiplier"]
        player.fatigue = min(float(FATIGUE["max"]), current + gain)
        return player

    def recover_weekly(self, player: Player) -> Player:
        player.fatigue = max(0.0, player.fatigue - self.weighted_recovery(player, FATIGUE["weekly_recovery"]))
        return player

    def recover_rest_days(self, player: Player, days: int = 1) -> Player:
        if days <= 0 or player.fatigue <= 0:
            return player
        total = sum(self.weighted_recovery(player, FATIGUE["rest_day_recovery"]) for _ in range(days))
        player.fatigue = max(0.0, player.fatigue - total)
        return player

    @staticmethod
    def performance_modifier(fatigue: float) -> float:
        start = FATIGUE["performance_penalty_start"]
        if fatigue <= start:
            return 1.0
        span = FATIGUE["max"] - start
        penalty = min(1.0, (fatigue - start) / span) * FATIGUE["max_performance_penalty"]
        return round(1.0 - penalty, 4)
