from __future__ import annotations

import random
from datetime import date
from typing import Any

from .config import MENTEE_MAX_AGE, PERSONALITY_TRAITS
from .development import DEFAULT_AGE, calculate_age
from .models import Player

HIGH_WORK_ETHIC = 85
LOW_WORK_ETHIC = 50
EJECTION_TECHNICALS = 2


class PersonalityEffects:
    """How traits move development, in-game behaviour and team-wide modifiers."""

    def __init__(self, rng: random.Random | None = None, today: date | None = None) -> None:
        self._rng = rng or random.Random()
        self.today = today
        self.config = PERSONALITY_TRAITS

    def _trait(self, trait: str) -> dict[str, Any]:
        return self.config.get(trait) or {}  # type: ignore[return-value]

    def player_age(self, player: Player) -> int:
        if player.birth_date:
            return calculate_age(player.birth_date, self.today)
        if player.age is not None:
            return player.age
        return DEFAULT_AGE

    def get_development_modifier(self, player: Player) -> float:
        modifier = 0.0
        for trait in player.personality.traits:
            data = self._trait(trait)
            modifier += data.get("development_bonus", 0.0)
            modifier += data.get("own_development_penalty", 0.0)

        work_ethic = player.attribute("mental", "work_ethic", 70)
        if work_ethic >= HIGH_WORK_ETHIC:
            modifier += 0.15
        elif work_ethic <= LOW_WORK_ETHIC:
            modifier -= 0.10
        return modifier

    def get_mentor_bonus(self, veteran: Player, young_player: Player) -> float:
        if not veteran.personality.has_trait("mentor"):
            return 0.0
        if self.player_age(young_player) > MENTEE_MAX_AGE:
            return 0.0
        return self._trait("mentor").get("young_player_boost", 0.15)

    def find_mentors_for_player(
        self, young_player: Player, roster: list[Player], mentee_counts: dict[str, int] | None = None
    ) -> list[Player]:
        """Mentors with a free slot; pass ``mentee_counts`` across a roster pass to cap each mentor's mentees."""
        if self.player_age(young_player) > MENTEE_MAX_AGE:
            return []
        counts = mentee_counts if mentee_counts is not None else {}
        max_mentees = self._trait("mentor").get("max_mentees", 2)
        mentors = []
        for player in roster:
            if player.id == young_player.id or not player.personality.has_trait("mentor"):
                continue
            if counts.get(player.id, 0) >= max_mentees:
                continue
            counts[player.id] = counts.get(player.id, 0) + 1
            mentors.append(player)
        return mentors

    def assign_mentors(self, roster: list[Player]) -> dict[str, list[str]]:
        """Mentee id to mentor ids, youngest players served first."""
        counts: dict[str, int] = {}
        assignments: dict[str, list[str]] = {}
        for player in sorted(roster, key=self.player_age):
            mentors = self.find_mentors_for_player(player, roster, counts)
            if mentors:
                assignments[player.id] = [mentor.id for mentor in mentors]
        return assignments

    def calculate_leadership_effect(self, leader: Player) -> dict[str, float]:
        if not leader.personality.has_trait("leader"):
            return {"chemistry_boost": 0, "development_boost": 0}
        data = self._trait("leader")
        return {
            "chemistry_boost": data.get("chemistry_boost", 5),
            "development_boost": data.get("team_development", 0.05),
        }

    def check_for_technical_foul(self, player: Player) -> bool:
        if not player.personality.has_trait("hot_head"):
            return False
        return self._rng.random() <= self._trait("hot_head").get("tech_foul_chance", 0.02)

    def check_for_ejection(self, player: Player, technicals: int = 0) -> bool:
        if technicals >= EJECTION_TECHNICALS:
            return True
        if not player.personality.has_trait("hot_head"):
            return False
        return self._rng.random() <= self._trait("hot_head").get("ejection_chance", 0.005)

    def get_usage_modifier(self, player: Player) -> float:
        modifier = 0.0
        if player.personality.has_trait("ball_hog"):
            modifier += self._trait("ball_hog").get("usage_boost", 0.10)
        if player.personality.has_trait("team_player"):
            modifier -= 0.05
        return modifier

    def get_assist_modifier(self, player: Player) -> float:
        modifier = 0.0
        if player.personality.has_trait("ball_hog"):
            modifier += self._trait("ball_hog").get("assist_penalty", -0.10)
        if player.personality.has_trait("team_player"):
            modifier += self._trait("team_player").get("assist_boost", 0.10)
        return modifier

    def get_clutch_modifier(self, player: Player) -> float:
        if not player.personality.has_trait("competitor"):
            return 0.0
        return self._trait("competitor").get("clutch_boost", 5) / 100

    def get_playoff_modifier(self, player: Player) -> float:
        modifier = 0.0
        if player.personality.has_trait("competitor"):
            modifier += self._trait("competitor").get("playoff_performance", 0.05)
        if player.personality.has_trait("media_darling"):
            modifier += self._trait("media_darling").get("pressure_penalty", -0.02)
        return modifier

    def get_morale_stability(self, player: Player) -> float:
        return max((self._trait(t).get("morale_stability", 0.0) for t in player.personality.traits), default=0.0)

    def get_morale_volatility(self, player: Player) -> float:
        if player.personality.has_trait("hot_head"):
            return self._trait("hot_head").get("morale_volatility", 2.0)
        return 1.0

    def get_trait_effects_summary(self, player: Player) -> dict[str, dict[str, Any]]:
        return {trait: dict(self._trait(trait)) for trait in player.personality.traits if trait in self.config}
