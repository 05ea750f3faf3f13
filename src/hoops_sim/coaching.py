from __future__ import annotations

from typing import Any

from .config import (
    DEFAULT_DEFENSIVE_SCHEME,
    DEFAULT_OFFENSIVE_SCHEME,
    DEFAULT_TRANSITION_FREQUENCY,
    DEFENSIVE_SCHEMES,
    OFFENSIVE_SCHEMES,
    SCHEME_PLAY_WEIGHTS,
    TEMPO_MODIFIERS,
    TRANSITION_FREQUENCIES,
)
from .models import Player

FAVORED_WEIGHT = 1.5

WEAKNESS_SHOT_BONUS = 0.10
WEAKNESS_TURNOVER_SHIFT = -0.06
STRENGTH_SHOT_PENALTY = -0.07
STRENGTH_TURNOVER_SHIFT = 0.04
POST_UP_BLOCK_BONUS = 0.05


def _roster_average(roster: list[Player], category: str, attribute: str) -> float:
    values = [p.attributes[category][attribute] for p in roster if attribute in p.attributes.get(category, {})]
    if not values:
        return 50.0
    return sum(values) / len(values)


class CoachingEngine:
    def get_schemes(self) -> dict[str, dict[str, Any]]:
        return OFFENSIVE_SCHEMES

    def get_scheme(self, scheme: str) -> dict[str, Any] | None:
        return OFFENSIVE_SCHEMES.get(scheme)

    def get_scheme_play_weights(self, scheme: str) -> dict[str, float]:
        return SCHEME_PLAY_WEIGHTS.get(scheme, SCHEME_PLAY_WEIGHTS[DEFAULT_OFFENSIVE_SCHEME])

    def adjust_play_probabilities(self, plays: list[dict[str, Any]], scheme: str) -> list[tuple[dict[str, Any], float]]:
        weights = self.get_scheme_play_weights(scheme)
        return [(play, weights.get(play.get("category", "motion"), 1.0)) for play in plays]

    def scheme_favors_category(self, scheme: str, category: str) -> bool:
        return self.get_scheme_play_weights(scheme).get(category, 1.0) >= FAVORED_WEIGHT

    def get_tempo_modifier(self, scheme: str) -> float:
        return TEMPO_MODIFIERS.get(scheme, 1.0)

    def get_transition_frequency(self, scheme: str) -> float:
        return TRANSITION_FREQUENCIES.get(scheme, DEFAULT_TRANSITION_FREQUENCY)

    def get_defensive_schemes(self) -> dict[str, dict[str, Any]]:
        return DEFENSIVE_SCHEMES

    def get_defensive_scheme(self, scheme: str) -> dict[str, Any] | None:
        return DEFENSIVE_SCHEMES.get(scheme)

    def calculate_defensive_modifiers(self, scheme: str, play: dict[str, Any]) -> dict[str, float]:
        data = DEFENSIVE_SCHEMES.get(scheme) or DEFENSIVE_SCHEMES[DEFAULT_DEFENSIVE_SCHEME]
        mods = data["modifiers"]
        category = play.get("category", "motion")

        result = {
            "shot_modifier": 0.0,
            "turnover_modifier": mods.get("turnover_boost", 0.0),
            "block_modifier": mods.get("block_boost", 0.0),
            "steal_modifier": mods.get("steal_boost", 0.0),
        }

        if category in data["weaknesses"]:
            result["shot_modifier"] += WEAKNESS_SHOT_BONUS
            result["turnover_modifier"] += WEAKNESS_TURNOVER_SHIFT
        if category in data["strengths"]:
            result["shot_modifier"] += STRENGTH_SHOT_PENALTY
            result["turnover_modifier"] += STRENGTH_TURNOVER_SHIFT

        if category == "isolation":
            result["shot_modifier"] -= mods.get("iso_defense", 0.0)
        elif category in ("pick_and_roll", "motion"):
            result["shot_modifier"] -= mods.get("screen_vulnerability", 0.0)
        elif category == "post_up":
            result["shot_modifier"] -= mods.get("paint_protection", 0.0)
            result["block_modifier"] += POST_UP_BLOCK_BONUS
        elif category in ("spot_up", "three_point"):
            result["shot_modifier"] -= mods.get("corner_three_weakness", 0.0)
        elif category == "transition":
            result["shot_modifier"] -= mods.get("transition_weakness", 0.0)

        result["shot_modifier"] -= mods.get("contest_boost", 0.0)
        return result

    def recommend_scheme(self, roster: list[Player]) -> str:
        if not roster:
            return DEFAULT_OFFENSIVE_SCHEME
        top = sorted(roster, key=lambda p: p.overall_rating, reverse=True)[: min(len(roster), 8)]
        three = _roster_average(top, "offense", "three_point")
        post = _roster_average(top, "offense", "post_control")
        speed = _roster_average(top, "physical", "speed")
        iq = _roster_average(top, "mental", "basketball_iq")
        has_star = any(p.overall_rating >= 85 for p in top)

        if speed >= 80 and three >= 70:
            return "run_and_gun"
        if three >= 75:
            return "three_point"
        if post >= 75:
            return "post_centric"
        if has_star and iq < 65:
            return "iso_heavy"
        if iq >= 70:
            return "motion"
        return "balanced"

    def calculate_scheme_effectiveness(self, scheme: str, roster: list[Player]) -> float:
        ratings = [p.overall_rating for p in roster]
        avg_rating = sum(ratings) / len(ratings) if ratings else 70
        score = 50 + (avg_rating - 70) * 0.5

        if scheme == "three_point":
            score += (_roster_average(roster, "offense", "three_point") - 60) * 0.3
        elif scheme == "post_centric":
            score += (_roster_average(roster, "offense", "post_control") - 60) * 0.3
        elif scheme == "motion":
            score += (_roster_average(roster, "mental", "basketball_iq") - 60) * 0.3
        elif scheme == "run_and_gun":
            score += (_roster_average(roster, "physical", "speed") - 60) * 0.3
        elif scheme == "iso_heavy":
            score += (max(ratings, default=70) - 80) * 0.5
        return max(30.0, min(100.0, score))
