from __future__ import annotations

import random

from .badges import default_badge_registry
from .config import BADGE_LEVELS, DEFAULT_SUBSTITUTION_STRATEGY, PERSONALITY_TRAITS, POSITIONS
from .evolution import recalculate_overall
from .models import Badge, CoachingScheme, LineupSettings, Personality, Player, Team
from .names import NameGenerator

ROSTER_POSITIONS: tuple[str, ...] = POSITIONS * 3
SECONDARY_POSITIONS: dict[str, tuple[str, ...]] = {
    "PG": ("SG",),
    "SG": ("PG", "SF"),
    "SF": ("SG", "PF"),
    "PF": ("SF", "C"),
    "C": ("PF",),
}

# Per-position tilt on each attribute; anything unlisted gets 0.
POSITION_TILT: dict[str, dict[str, float]] = {
    "PG": {
        "ball_handling": 12, "pass_accuracy": 12, "pass_vision": 12, "pass_iq": 10, "three_point": 4,
        "speed": 10, "acceleration": 10, "steal": 6, "perimeter_defense": 4,
        "post_control": -14, "block": -14, "interior_defense": -12, "strength": -10,
        "offensive_rebound": -14, "defensive_rebound": -12, "standing_dunk": -14,
    },
    "SG": {
        "three_point": 10, "mid_range": 8, "free_throw": 6, "ball_handling": 4, "speed": 6,
        "perimeter_defense": 6, "steal": 4, "post_control": -10, "block": -10, "interior_defense": -8,
        "offensive_rebound": -10, "defensive_rebound": -8, "standing_dunk": -8,
    },
    "SF": {
        "layup": 4, "driving_dunk": 6, "mid_range": 4, "perimeter_defense": 4, "vertical": 4,
    },
    "PF": {
        "post_control": 8, "close_shot": 6, "standing_dunk": 8, "strength": 8, "interior_defense": 8,
        "offensive_rebound": 8, "defensive_rebound": 10, "block": 4,
        "ball_handling": -8, "pass_vision": -6, "speed": -6, "three_point": -6,
    },
    "C": {
        "post_control": 12, "close_shot": 10, "standing_dunk": 12, "strength": 12, "interior_defense": 12,
        "block": 12, "offensive_rebound": 12, "defensive_rebound": 14,
        "ball_handling": -14, "pass_vision": -8, "speed": -12, "acceleration": -10, "three_point": -14,
    },
}

ATTRIBUTE_LAYOUT: dict[str, tuple[str, ...]] = {
    "offense": (
        "three_point", "mid_range", "close_shot", "layup", "free_throw", "ball_handling", "pass_accuracy",
        "pass_vision", "pass_iq", "post_control", "standing_dunk", "driving_dunk", "draw_foul",
    ),
    "defense": (
        "perimeter_defense", "interior_defense", "steal", "block", "help_defense_iq", "pass_perception",
        "offensive_rebound", "defensive_rebound",
    ),
    "physical": ("speed", "acceleration", "vertical", "strength", "stamina", "durability"),
    "mental": ("basketball_iq", "clutch", "consistency", "intangibles", "work_ethic"),
}

DEFAULT_TEAMS: tuple[tuple[str, str, float], ...] = (
    ("Harbor Kings", "HBK", 0.08),
    ("Metro Sparks", "MSP", 0.04),
    ("Desert Fire", "DSF", 0.06),
    ("Pacific Tide", "PTD", 0.02),
    ("Summit Eagles", "SME", 0.0),
    ("Iron Rangers", "IRR", -0.02),
    ("Lake Vipers", "LKV", -0.04),
    ("Red Hawks", "RDH", -0.06),
)

OFFENSIVE_SCHEME_POOL = ("balanced", "motion", "iso_heavy", "post_centric", "three_point", "run_and_gun")
DEFENSIVE_SCHEME_POOL = ("man", "zone_2_3", "zone_3_2", "zone_1_3_1", "press", "trap")


def _clamp_attribute(value: float) -> int:
    return int(max(25, min(99, round(value))))


def _sample_quality(rng: random.Random, tier_plan: list[tuple[float, float, float]]) -> float:
    roll = rng.random()
    cumulative = 0.0
    for weight, low, high in tier_plan:
        cumulative += weight
        if roll <= cumulative:
            return rng.uniform(low, high)
    return rng.uniform(tier_plan[-1][1], tier_plan[-1][2])


def _make_attributes(rng: random.Random, position: str, quality: float) -> dict[str, dict[str, float]]:
    tilt = POSITION_TILT[position]
    base = 48 + quality * 40
    attributes: dict[str, dict[str, float]] = {}
    for category, names in ATTRIBUTE_LAYOUT.items():
        attributes[category] = {
            name: _clamp_attribute(base + tilt.get(name, 0) + rng.uniform(-7, 7)) for name in names
        }
    return attributes


def _make_badges(rng: random.Random, quality: float) -> list[Badge]:
    registry = default_badge_registry()
    count = int(quality * 6) + rng.randint(0, 2)
    chosen = rng.sample([definition.id for definition in registry.all()], k=count)
    top = min(len(BADGE_LEVELS) - 1, int(quality * len(BADGE_LEVELS)))
    return [Badge(id=badge_id, level=BADGE_LEVELS[rng.randint(0, top)]) for badge_id in chosen]


def _make_personality(rng: random.Random) -> Personality:
    traits = rng.sample(list(PERSONALITY_TRAITS), k=rng.choice([0, 1, 1, 2]))
    return Personality(traits=traits, morale=rng.randint(70, 90))


def _make_roster(team_id: str, team_name: str, bias: float, name_gen: NameGenerator) -> list[Player]:
    rng = random.Random(f"{team_name}:{bias:.3f}")
    # Few stars, a deep middle class and a thin end of the bench.
    tiers = [(0.08, 0.85, 1.00), (0.24, 0.65, 0.84), (0.42, 0.42, 0.64), (0.26, 0.20, 0.41)]
    roster: list[Player] = []
    for position in ROSTER_POSITIONS:
        quality = max(0.0, min(1.0, _sample_quality(rng, tiers) + bias))
        first, last = name_gen.next_name()
        player = Player(
            first_name=first,
            last_name=last,
            position=position,
            secondary_position=rng.choice(SECONDARY_POSITIONS[position]),
            team_id=team_id,
            age=rng.randint(19, 36),
            attributes=_make_attributes(rng, position, quality),
            badges=_make_badges(rng, quality),
            personality=_make_personality(rng),
            injury_risk=rng.choices(("L", "M", "H"), weights=(3, 6, 1))[0],
            contract_years_remaining=rng.randint(1, 5),
            career_seasons=rng.randint(0, 12),
        )
        recalculate_overall(player)
        player.potential_rating = min(99, player.overall_rating + max(0, 28 - player.age) + rng.randint(0, 4))
        roster.append(player)
    return roster


def build_default_teams(seed: int = 7) -> list[Team]:
    name_gen = NameGenerator(seed=seed)
    teams: list[Team] = []
    for team_name, abbreviation, bias in DEFAULT_TEAMS:
        scheme_rng = random.Random(f"scheme:{team_name}:{seed}")
        team = Team(name=team_name, id=abbreviation.lower(), abbreviation=abbreviation)
        team.players = _make_roster(team.id, team_name, bias, name_gen)
        team.coaching_scheme = CoachingScheme(
            offensive=scheme_rng.choice(OFFENSIVE_SCHEME_POOL),
            defensive=scheme_rng.choice(DEFENSIVE_SCHEME_POOL),
            substitution=DEFAULT_SUBSTITUTION_STRATEGY,
        )
        team.lineup_settings = LineupSettings(starters=[p.id for p in team.players[:5]])
        teams.append(team)
    return teams
