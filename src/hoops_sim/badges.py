from __future__ import annotations

from dataclasses import dataclass, field
from itertools import combinations
from typing import Any, Iterable

from .config import BADGE_LEVELS, BADGE_SYNERGIES
from .models import Player

LEVEL_VALUES: dict[str, int] = {"bronze": 1, "silver": 2, "gold": 3, "hof": 4}
SYNERGY_BOOST_BY_MIN_LEVEL: dict[int, float] = {1: 0.03, 2: 0.05, 3: 0.06, 4: 0.08}

SHOT_EFFECT_KEYS: dict[str, tuple[str, ...]] = {
    "three_pointer": ("catch_shoot_boost", "corner_three_boost", "deep_range_boost", "contest_reduction"),
    "mid_range": ("moving_shot_boost", "contest_reduction"),
    "paint": ("contested_layup_boost", "contact_finish_boost", "floater_boost", "giant_slayer_boost"),
}

# id, name, category, effect key, bronze/silver/gold/hof values
_BADGE_TABLE: tuple[tuple[str, str, str, str, tuple[float, float, float, float]], ...] = (
    ("acrobat", "Acrobat", "finishing", "contested_layup_boost", (0.03, 0.06, 0.10, 0.15)),
    ("contact_finisher", "Contact Finisher", "finishing", "contact_finish_boost", (0.04, 0.08, 0.12, 0.18)),
    ("posterizer", "Posterizer", "finishing", "poster_dunk_boost", (0.05, 0.10, 0.15, 0.22)),
    ("slithery_finisher", "Slithery Finisher", "finishing", "avoid_contact_boost", (0.04, 0.08, 0.12, 0.18)),
    ("giant_slayer", "Giant Slayer", "finishing", "giant_slayer_boost", (0.04, 0.08, 0.12, 0.18)),
    ("pro_touch", "Pro Touch", "finishing", "layup_timing_boost", (0.03, 0.06, 0.10, 0.15)),
    ("floater_specialist", "Floater Specialist", "finishing", "floater_boost", (0.04, 0.08, 0.13, 0.18)),
    ("putback_boss", "Putback Boss", "finishing", "putback_boost", (0.05, 0.10, 0.15, 0.22)),
    ("tear_dropper", "Tear Dropper", "finishing", "floater_boost", (0.04, 0.08, 0.13, 0.18)),
    ("hook_specialist", "Hook Specialist", "finishing", "hook_shot_boost", (0.05, 0.10, 0.15, 0.22)),
    ("post_spin_technician", "Post Spin Technician", "finishing", "post_move_boost", (0.04, 0.08, 0.12, 0.18)),
    ("backdown_punisher", "Backdown Punisher", "finishing", "post_strength_boost", (0.05, 0.10, 0.15, 0.22)),
    ("fade_ace", "Fade Ace", "finishing", "post_fade_boost", (0.05, 0.10, 0.15, 0.22)),
    ("rise_up", "Rise Up", "finishing", "rise_up_dunk_boost", (0.05, 0.10, 0.15, 0.22)),
    ("physical_finisher", "Physical Finisher", "finishing", "contact_finish_boost", (0.05, 0.10, 0.15, 0.22)),
    ("float_game", "Float Game", "finishing", "floater_boost", (0.05, 0.10, 0.15, 0.22)),
    ("catch_and_shoot", "Catch and Shoot", "shooting", "catch_shoot_boost", (0.03, 0.06, 0.10, 0.15)),
    ("corner_specialist", "Corner Specialist", "shooting", "corner_three_boost", (0.04, 0.08, 0.12, 0.18)),
    ("deadeye", "Deadeye", "shooting", "contest_reduction", (0.08, 0.15, 0.22, 0.30)),
    ("deep_threes", "Deep Threes", "shooting", "deep_range_boost", (0.03, 0.06, 0.10, 0.15)),
    ("limitless_range", "Limitless Range", "shooting", "deep_range_boost", (0.05, 0.10, 0.15, 0.22)),
    ("difficult_shots", "Difficult Shots", "shooting", "moving_shot_boost", (0.03, 0.06, 0.10, 0.15)),
    ("green_machine", "Green Machine", "shooting", "hot_hand_boost", (0.02, 0.04, 0.07, 0.10)),
    ("clutch_shooter", "Clutch Shooter", "shooting", "clutch_shot_boost", (0.05, 0.10, 0.15, 0.22)),
    ("volume_shooter", "Volume Shooter", "shooting", "volume_boost", (0.02, 0.04, 0.06, 0.09)),
    ("tireless_shooter", "Tireless Shooter", "shooting", "fatigue_reduction", (0.15, 0.30, 0.45, 0.60)),
    ("ankle_breaker", "Ankle Breaker", "playmaking", "crossover_boost", (0.05, 0.10, 0.15, 0.22)),
    ("break_starter", "Break Starter", "playmaking", "outlet_pass_boost", (0.08, 0.15, 0.22, 0.30)),
    ("dimer", "Dimer", "playmaking", "assist_boost", (0.03, 0.06, 0.10, 0.15)),
    ("floor_general", "Floor General", "playmaking", "team_offense_boost", (1, 2, 3, 4)),
    ("lob_city_passer", "Lob City Passer", "playmaking", "lob_pass_boost", (0.08, 0.15, 0.22, 0.30)),
    ("needle_threader", "Needle Threader", "playmaking", "tight_pass_boost", (0.08, 0.15, 0.22, 0.30)),
    ("pick_and_roll_maestro", "Pick and Roll Maestro", "playmaking", "pnr_handler_boost", (0.05, 0.10, 0.15, 0.22)),
    ("quick_first_step", "Quick First Step", "playmaking", "first_step_boost", (0.04, 0.08, 0.12, 0.18)),
    ("space_creator", "Space Creator", "playmaking", "separation_boost", (0.04, 0.08, 0.12, 0.18)),
    ("tight_handles", "Tight Handles", "playmaking", "ball_security_boost", (0.08, 0.15, 0.22, 0.30)),
    ("clamps", "Clamps", "defense", "perimeter_def_boost", (0.04, 0.08, 0.12, 0.18)),
    ("chase_down_artist", "Chase Down Artist", "defense", "chase_down_block_boost", (0.10, 0.20, 0.30, 0.45)),
    ("interceptor", "Interceptor", "defense", "steal_chance_boost", (0.05, 0.10, 0.15, 0.22)),
    ("intimidator", "Intimidator", "defense", "contest_boost", (0.04, 0.08, 0.12, 0.18)),
    ("anchor", "Anchor", "defense", "rim_protection_boost", (0.05, 0.10, 0.15, 0.22)),
    ("pick_dodger", "Pick Dodger", "defense", "screen_nav_boost", (0.08, 0.15, 0.22, 0.30)),
    ("pick_pocket", "Pick Pocket", "defense", "on_ball_steal_boost", (0.05, 0.10, 0.15, 0.22)),
    ("post_lockdown", "Post Lockdown", "defense", "post_def_boost", (0.05, 0.10, 0.15, 0.22)),
    ("rebound_chaser", "Rebound Chaser", "defense", "rebound_range_boost", (0.05, 0.10, 0.15, 0.22)),
    ("rim_protector", "Rim Protector", "defense", "rim_protection_boost", (0.05, 0.10, 0.15, 0.22)),
    ("defensive_leader", "Defensive Leader", "defense", "team_defense_boost", (1, 2, 3, 4)),
    ("brick_wall", "Brick Wall", "physical", "screen_effect_boost", (0.08, 0.15, 0.22, 0.30)),
    ("pick_and_roller", "Pick and Roller", "physical", "roller_finishing_boost", (0.04, 0.08, 0.12, 0.18)),
    ("box", "Box", "physical", "box_out_boost", (0.05, 0.10, 0.15, 0.22)),
    ("lob_city_finisher", "Lob City Finisher", "physical", "alley_oop_finish_boost", (0.08, 0.15, 0.22, 0.30)),
    ("downhill", "Downhill", "physical", "transition_speed_boost", (0.03, 0.06, 0.10, 0.15)),
    ("tireless_defender", "Tireless Defender", "physical", "defense_stamina_reduction", (0.15, 0.30, 0.45, 0.60)),
)

# badge1, badge2, effect, magnitude
_SYNERGY_TABLE: tuple[tuple[str, str, str, float], ...] = (
    ("dimer", "catch_and_shoot", "shooting_boost", 5),
    ("lob_city_passer", "lob_city_finisher", "alley_oop_boost", 10),
    ("brick_wall", "pick_and_roller", "screen_boost", 5),
    ("anchor", "intimidator", "interior_defense_boost", 8),
    ("floor_general", "deadeye", "team_shooting_boost", 3),
    ("floor_general", "catch_and_shoot", "team_shooting_boost", 3),
    ("floor_general", "corner_specialist", "team_shooting_boost", 3),
)


@dataclass(slots=True)
class BadgeDefinition:
    id: str
    name: str
    category: str
    effects: dict[str, dict[str, float]] = field(default_factory=dict)

    def effects_for(self, level: str) -> dict[str, float]:
        return self.effects.get(level, {})


@dataclass(slots=True)
class Synergy:
    id: str
    name: str
    badge1_id: str
    badge2_id: str
    effect: str
    magnitude: float

    def involves(self, badge_id: str) -> bool:
        return badge_id in (self.badge1_id, self.badge2_id)

    def partner_of(self, badge_id: str) -> str:
        if badge_id == self.badge1_id:
            return self.badge2_id
        if badge_id == self.badge2_id:
            return self.badge1_id
        raise KeyError(f"Badge {badge_id} is not part of synergy {self.id}.")


class BadgeRegistry:
    def __init__(self, definitions: Iterable[BadgeDefinition]) -> None:
        self._by_id: dict[str, BadgeDefinition] = {}
        for definition in definitions:
            if definition.id in self._by_id:
                raise ValueError(f"Duplicate badge id {definition.id!r}.")
            unknown = set(definition.effects) - set(BADGE_LEVELS)
            if unknown:
                raise ValueError(f"Badge {definition.id!r} has effects for unknown levels {sorted(unknown)}.")
            self._by_id[definition.id] = definition

    def __contains__(self, badge_id: object) -> bool:
        return badge_id in self._by_id

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, badge_id: str) -> BadgeDefinition:
        try:
            return self._by_id[badge_id]
        except KeyError:
            raise KeyError(f"Unknown badge id {badge_id!r}.") from None

    def all(self) -> list[BadgeDefinition]:
        return list(self._by_id.values())

    def validate_ids(self, badge_ids: Iterable[str]) -> None:
        for badge_id in badge_ids:
            self.get(badge_id)


class SynergyRegistry:
    def __init__(self, synergies: Iterable[Synergy], badges: BadgeRegistry) -> None:
        self._by_id: dict[str, Synergy] = {}
        for synergy in synergies:
            if synergy.id in self._by_id:
                raise ValueError(f"Duplicate synergy id {synergy.id!r}.")
            if synergy.badge1_id == synergy.badge2_id:
                raise ValueError(f"Synergy {synergy.id!r} pairs a badge with itself.")
            badges.get(synergy.badge1_id)
            badges.get(synergy.badge2_id)
            self._by_id[synergy.id] = synergy

    def __iter__(self):
        return iter(self._by_id.values())

    def __len__(self) -> int:
        return len(self._by_id)

    def get(self, synergy_id: str) -> Synergy:
        try:
            return self._by_id[synergy_id]
        except KeyError:
            raise KeyError(f"Unknown synergy id {synergy_id!r}.") from None

    def for_badge(self, badge_id: str) -> list[Synergy]:
        return [s for s in self._by_id.values() if s.involves(badge_id)]


def default_badge_registry() -> BadgeRegistry:
    definitions = []
    for badge_id, name, category, effect_key, values in _BADGE_TABLE:
        effects = {level: {effect_key: value} for level, value in zip(BADGE_LEVELS, values)}
        definitions.append(BadgeDefinition(id=badge_id, name=name, category=category, effects=effects))
    return BadgeRegistry(definitions)


def default_synergy_registry(badges: BadgeRegistry | None = None) -> SynergyRegistry:
    badges = badges or default_badge_registry()
    synergies = []
    for badge1, badge2, effect, magnitude in _SYNERGY_TABLE:
        name = f"{badges.get(badge1).name} + {badges.get(badge2).name}"
        synergies.append(
            Synergy(
                id=f"{badge1}__{badge2}",
                name=name,
                badge1_id=badge1,
                badge2_id=badge2,
                effect=effect,
                magnitude=magnitude,
            )
        )
    return SynergyRegistry(synergies, badges)


class BadgeSynergyService:
    """Badge and teammate-synergy scoring for games and development."""

    def __init__(self, badges: BadgeRegistry | None = None, synergies: SynergyRegistry | None = None) -> None:
        self.badges = badges or default_badge_registry()
        self.synergies = synergies or default_synergy_registry(self.badges)

    def find_badge_synergies(self, player_a: Player, player_b: Player) -> list[dict[str, Any]]:
        found: list[dict[str, Any]] = []
        a_ids = player_a.badge_ids()
        b_ids = player_b.badge_ids()
        for synergy in self.synergies:
            if synergy.badge1_id in a_ids and synergy.badge2_id in b_ids:
                found.append({
                    "synergy": synergy,
                    "badge1_level": player_a.badge_level(synergy.badge1_id) or "bronze",
                    "badge2_level": player_b.badge_level(synergy.badge2_id) or "bronze",
                })
            if synergy.badge2_id in a_ids and synergy.badge1_id in b_ids:
                found.append({
                    "synergy": synergy,
                    "badge1_level": player_a.badge_level(synergy.badge2_id) or "bronze",
                    "badge2_level": player_b.badge_level(synergy.badge1_id) or "bronze",
                })
        return found

    @staticmethod
    def _single_synergy_boost(found: dict[str, Any]) -> float:
        level1 = LEVEL_VALUES.get(found.get("badge1_level", "bronze"), 1)
        level2 = LEVEL_VALUES.get(found.get("badge2_level", "bronze"), 1)
        return SYNERGY_BOOST_BY_MIN_LEVEL.get(min(level1, level2), 0.03)

    def calculate_development_boost(self, player: Player, roster: list[Player]) -> float:
        if not player.badges:
            return 0.0
        total = 0.0
        for teammate in roster:
            if teammate.id == player.id:
                continue
            for found in self.find_badge_synergies(player, teammate):
                total += self._single_synergy_boost(found)
        return min(total, float(BADGE_SYNERGIES["development_boost_max"]))

    def calculate_in_game_boost(self, active_synergies: int) -> float:
        boost = active_synergies * float(BADGE_SYNERGIES["in_game_boost"])
        return min(boost, float(BADGE_SYNERGIES["in_game_boost_max"]))

    def calculate_chemistry_contribution(self, roster: list[Player]) -> int:
        contribution = 0
        for player_a, player_b in combinations(roster, 2):
            if self.find_badge_synergies(player_a, player_b):
                contribution += int(BADGE_SYNERGIES["chemistry_contribution"])
        return contribution

    def get_roster_synergies(self, roster: list[Player]) -> list[dict[str, Any]]:
        pairs: list[dict[str, Any]] = []
        for player_a, player_b in combinations(roster, 2):
            found = self.find_badge_synergies(player_a, player_b)
            if found:
                pairs.append({"player1": player_a, "player2": player_b, "synergies": found})
        return pairs

    def get_dynamic_duos(self, roster: list[Player]) -> list[dict[str, Any]]:
        min_level = int(BADGE_SYNERGIES["dynamic_duo_min_level"])
        min_count = int(BADGE_SYNERGIES["dynamic_duo_min_synergies"])
        duos = []
        for pair in self.get_roster_synergies(roster):
            strong = [
                found for found in pair["synergies"]
                if min(LEVEL_VALUES.get(found["badge1_level"], 1), LEVEL_VALUES.get(found["badge2_level"], 1)) >= min_level
            ]
            if len(strong) >= min_count:
                duos.append({"player1": pair["player1"], "player2": pair["player2"], "synergy_count": len(strong)})
        return duos

    def get_dynamic_duo_boost(self, player: Player, roster: list[Player]) -> float:
        for duo in self.get_dynamic_duos(roster):
            if player.id in (duo["player1"].id, duo["player2"].id):
                return float(BADGE_SYNERGIES["dynamic_duo_boost"])
        return 0.0

    def shot_badge_boost(self, shooter: Player, shot_category: str) -> tuple[float, list[dict[str, Any]]]:
        keys = SHOT_EFFECT_KEYS.get(shot_category, ())
        boost = 0.0
        activated: list[dict[str, Any]] = []
        for badge in shooter.badges:
            definition = self.badges.get(badge.id)
            effects = definition.effects_for(badge.level)
            badge_boost = sum(effects.get(key, 0.0) for key in keys)
            if badge_boost > 0:
                boost += badge_boost
                activated.append({
                    "id": badge.id,
                    "name": definition.name,
                    "level": badge.level,
                    "player_id": shooter.id,
                    "player_name": shooter.full_name,
                })
        return boost, activated

    def shot_synergy_activations(self, shooter: Player, teammates: list[Player]) -> tuple[float, list[dict[str, Any]]]:
        shooter_ids = shooter.badge_ids()
        boost = 0.0
        activated: list[dict[str, Any]] = []
        for synergy in self.synergies:
            if synergy.badge1_id in shooter_ids:
                own, required = synergy.badge1_id, synergy.badge2_id
            elif synergy.badge2_id in shooter_ids:
                own, required = synergy.badge2_id, synergy.badge1_id
            else:
                continue
            for teammate in teammates:
                if teammate.id == shooter.id or required not in teammate.badge_ids():
                    continue
                boost += synergy.magnitude / 100
                activated.append({
                    "synergy_name": synergy.name,
                    "badge1": own,
                    "badge2": required,
                    "effect": synergy.effect,
                    "player1": {"id": shooter.id, "name": shooter.full_name},
                    "player2": {"id": teammate.id, "name": teammate.full_name},
                })
                break
        return boost, activated
