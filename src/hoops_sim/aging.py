from __future__ import annotations

import random
from typing import Any

from .config import ATTRIBUTE_MAX, ATTRIBUTE_MIN, ATTRIBUTE_PROFILES

PROFILE_BY_ATTRIBUTE: dict[str, str] = {
    attribute: name
    for name, profile in ATTRIBUTE_PROFILES.items()
    for attribute in profile["attributes"]  # type: ignore[union-attr]
}


class AttributeAging:
    """Attribute-specific aging: each attribute group peaks and declines on its own curve."""

    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def get_attribute_profile(self, attribute: str) -> dict[str, Any] | None:
        name = PROFILE_BY_ATTRIBUTE.get(attribute)
        return ATTRIBUTE_PROFILES[name] if name else None

    def calculate_attribute_change(self, attribute: str, age: int, development: float, regression: float) -> float:
        profile = self.get_attribute_profile(attribute)
        if profile is None:
            return development - regression

        peak_age = profile["peak_age"]
        decline_start = profile["decline_start"]
        can_improve = bool(profile.get("can_improve_past_peak", False))

        if age < peak_age:
            return development
        if age < decline_start:
            return development * 0.5 if can_improve else 0.0

        # Monthly slice of the yearly decline rate.
        monthly = (age - decline_start) * profile["decline_rate"] / 12
        if can_improve and development > 0:
            return max(-monthly, development * 0.3 - monthly)
        return -monthly

    def calculate_yearly_change(self, attribute: str, age: int) -> float:
        profile = self.get_attribute_profile(attribute)
        if profile is None or age < profile["decline_start"]:
            return 0.0
        return -float(profile["decline_rate"])

    def apply_seasonal_aging(self, attributes: dict[str, dict[str, float]], age: int) -> dict[str, dict[str, float]]:
        aged: dict[str, dict[str, float]] = {}
        for category, values in attributes.items():
            aged[category] = dict(values)
            for name, value in values.items():
                if self.get_attribute_profile(name) is None:
                    continue
                change = self.calculate_yearly_change(name, age)
                aged[category][name] = round(max(ATTRIBUTE_MIN, min(ATTRIBUTE_MAX, value + change)), 1)
        return aged

    def get_most_vulnerable_attributes(self, age: int) -> list[str]:
        severity: dict[str, float] = {}
        for profile in ATTRIBUTE_PROFILES.values():
            if age >= profile["decline_start"]:
                for attribute in profile["attributes"]:
                    severity[attribute] = (age - profile["decline_start"]) * profile["decline_rate"]
        return sorted(severity, key=lambda name: severity[name], reverse=True)

    def apply_injury_impact(self, attributes: dict[str, dict[str, float]], impact: float) -> dict[str, dict[str, float]]:
        affected = {category: dict(values) for category, values in attributes.items()}
        physical = affected.get("physical")
        if not physical:
            return affected
        for attribute in ATTRIBUTE_PROFILES["physical"]["attributes"]:
            if attribute in physical:
                reduction = impact * (0.8 + self._rng.random() * 0.4)
                physical[attribute] = max(ATTRIBUTE_MIN, physical[attribute] - reduction)
        return affected

    def is_at_age_ceiling(self, attribute: str, age: int, value: float, potential: float) -> bool:
        profile = self.get_attribute_profile(attribute)
        if profile is None:
            return False
        if age > profile["peak_age"] and not profile.get("can_improve_past_peak", False):
            return True
        return value >= potential
