from __future__ import annotations

import random
from typing import Any

from .config import (
    DEFAULT_DIFFICULTY,
    EXPECTED_MINUTES_BY_RATING,
    EXPECTED_MINUTES_FLOOR,
    MORALE,
    PERSONALITY_TRAITS,
    STAR_EXPECTED_MINUTES,
)
from .models import Player

STAR_RATING = 85
BASE_CHEMISTRY = 70
WINNING_PCT = 0.6
LOSING_PCT = 0.3
STABILIZE_RATE = 0.1


def clamp_morale(value: float) -> int:
    return round(max(MORALE["min"], min(MORALE["max"], value)))


def get_expected_minutes(player: Player, difficulty: str = DEFAULT_DIFFICULTY) -> int:
    overall = player.overall_rating
    if overall >= STAR_RATING:
        return STAR_EXPECTED_MINUTES.get(difficulty.replace("-", "_"), STAR_EXPECTED_MINUTES[DEFAULT_DIFFICULTY])
    for rating, minutes in EXPECTED_MINUTES_BY_RATING:
        if overall >= rating:
            return minutes
    return EXPECTED_MINUTES_FLOOR


def get_morale_level(morale: float) -> str:
    for level, effect in MORALE["effects"].items():
        if morale >= effect["threshold"]:
            return level
    return "critical"


class MoraleService:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def update_after_game(
        self, player: Player, won: bool, minutes: float, streak: int = 0, difficulty: str = DEFAULT_DIFFICULTY
    ) -> Player:
        factors = MORALE["factors"]
        start = player.personality.morale
        morale = start + (factors["win"] if won else factors["loss"])

        if abs(streak) >= 3:
            morale += factors["winning_streak_bonus"] if streak > 0 else factors["losing_streak_penalty"]

        expected = get_expected_minutes(player, difficulty)
        if minutes >= expected * 1.2:
            morale += factors["playing_time_exceeded"]
        elif minutes >= expected * 0.8:
            morale += factors["playing_time_met"]
        else:
            morale += factors["playing_time_unmet"]

        if player.personality.has_trait("hot_head"):
            volatility = PERSONALITY_TRAITS["hot_head"]["morale_volatility"]
            morale = start + (morale - start) * volatility

        player.personality.morale = clamp_morale(morale)
        return player

    def update_weekly(self, player: Player, wins: int = 0, losses: int = 0) -> Player:
        morale = player.personality.morale
        if player.contract_years_remaining <= 1:
            morale += MORALE["factors"]["final_contract_year"]

        win_pct = wins / max(1, wins + losses)
        if win_pct >= WINNING_PCT:
            morale += 1
        elif win_pct <= LOSING_PCT:
            morale -= 1

        if player.personality.has_trait("team_player") or player.personality.has_trait("quiet"):
            morale += (MORALE["starting"] - morale) * STABILIZE_RATE

        player.personality.morale = clamp_morale(morale)
        return player

    def check_for_trade_request(self, player: Player) -> bool:
        morale = player.personality.morale
        threshold = MORALE["trade_request_threshold"]
        if morale >= threshold:
            return False
        chance = (threshold - morale) / 100
        return self._rng.randint(1, 100) / 100 <= chance

    @staticmethod
    def calculate_team_chemistry(roster: list[Player]) -> int:
        chemistry: float = BASE_CHEMISTRY
        leaders = ball_hogs = team_players = 0
        for player in roster:
            for trait in player.personality.traits:
                data: dict[str, Any] = PERSONALITY_TRAITS.get(trait) or {}
                chemistry += data.get("chemistry_boost", 0)
                chemistry += data.get("chemistry_penalty", 0)
            leaders += player.personality.has_trait("leader")
            ball_hogs += player.personality.has_trait("ball_hog")
            team_players += player.personality.has_trait("team_player")

        if 1 <= leaders <= 2:
            chemistry += 5
        elif leaders > 3:
            chemistry -= 5
        if ball_hogs >= 3:
            chemistry -= 10
        if team_players >= 5:
            chemistry += 5
        return clamp_morale(chemistry)

    @staticmethod
    def get_performance_modifier(morale: float) -> float:
        return MORALE["effects"][get_morale_level(morale)]["performance_modifier"]

    @staticmethod
    def get_development_modifier(morale: float) -> float:
        return MORALE["effects"][get_morale_level(morale)]["development_modifier"]
