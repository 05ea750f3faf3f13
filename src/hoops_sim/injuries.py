from __future__ import annotations

import logging
import random

from .aging import AttributeAging
from .config import (
    INJURY_BASE_CHANCE,
    INJURY_CHANCE_CAP,
    INJURY_FACTORS,
    INJURY_RISK_MULTIPLIERS,
    INJURY_TYPES,
    PLAYOFF_INJURY_MULTIPLIER,
    RECOVERY_ESTIMATES,
)
from .models import InjuryDetails, Player

logger = logging.getLogger(__name__)


def get_recovery_estimate(games: int) -> str:
    for limit, label in RECOVERY_ESTIMATES:
        if games <= limit:
            return label
    return "out for season"


class InjuryService:
    def __init__(self, rng: random.Random | None = None, aging: AttributeAging | None = None) -> None:
        self._rng = rng or random.Random()
        self.aging = aging or AttributeAging(self._rng)

    def calculate_injury_chance(self, player: Player, minutes: float, age: int, is_playoff: bool = False) -> float:
        durability = player.attribute("physical", "durability", 70)
        chance = INJURY_BASE_CHANCE
        chance += (100 - durability) / 100 * INJURY_FACTORS["durability"]
        chance += max(0, age - INJURY_FACTORS["age_start"]) * INJURY_FACTORS["age"]
        chance += player.fatigue / 100 * INJURY_FACTORS["fatigue"]
        chance += minutes / INJURY_FACTORS["minutes_baseline"] * INJURY_FACTORS["minutes"]
        chance *= INJURY_RISK_MULTIPLIERS.get(player.injury_risk, 1.0)
        if is_playoff:
            chance *= PLAYOFF_INJURY_MULTIPLIER
        return min(INJURY_CHANCE_CAP, chance)

    def check_for_injury(
        self, player: Player, minutes: float, age: int, is_playoff: bool = False, game_date: str = ""
    ) -> InjuryDetails | None:
        if player.is_injured or minutes <= 0:
            return None
        chance = self.calculate_injury_chance(player, minutes, age, is_playoff)
        if self._rng.randint(1, 10000) / 10000 > chance:
            return None
        return self.generate_injury(game_date)

    def generate_injury(self, game_date: str = "") -> InjuryDetails:
        severity = self._roll_severity()
        data = INJURY_TYPES[severity]
        injury_type, name = self._rng.choice(data["injuries"])  # type: ignore[arg-type]
        low, high = data["duration"]  # type: ignore[misc]
        return InjuryDetails(
            injury_type=injury_type,
            name=name,
            severity=severity,
            games_remaining=self._rng.randint(low, high),
            occurred_date=game_date,
            permanent_impact=int(data["permanent_impact"]),  # type: ignore[arg-type]
        )

    def _roll_severity(self) -> str:
        roll = self._rng.randint(1, 100)
        cumulative = 0
        for severity, data in INJURY_TYPES.items():
            cumulative += int(data["weight"])  # type: ignore[arg-type]
            if roll <= cumulative:
                return severity
        return "minor"

    def process_recovery(self, player: Player) -> Player:
        """Count down one game; the permanent impact lands once, when the injury clears."""
        injury = player.injury_details
        if not player.is_injured or injury is None:
            player.is_injured = False
            return player
        injury.games_remaining -= 1
        if injury.games_remaining > 0:
            return player
        if injury.permanent_impact > 0 and not injury.permanent_impact_applied:
            self.apply_permanent_impact(player, injury.permanent_impact)
            injury.permanent_impact_applied = True
        player.is_injured = False
        player.injury_details = None
        return player

    def apply_permanent_impact(self, player: Player, impact: float) -> Player:
        logger.debug("Permanent injury impact %.1f on %s", impact, player.full_name)
        player.attributes = self.aging.apply_injury_impact(player.attributes, impact)
        return player

    def is_injured(self, player: Player) -> bool:
        return player.is_injured and player.injury_details is not None and player.injury_details.games_remaining > 0
