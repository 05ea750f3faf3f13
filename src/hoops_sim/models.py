from __future__ import annotations

import copy
from dataclasses import asdict, dataclass, field
from typing import Any, ClassVar
from uuid import uuid4

from .config import ATTRIBUTE_CATEGORIES, BADGE_LEVELS, POSITIONS


@dataclass(slots=True)
class Badge:
    id: str
    level: str = "bronze"

    def __post_init__(self) -> None:
        if self.level not in BADGE_LEVELS:
            raise ValueError(f"Badge {self.id} has unknown level {self.level!r}.")


@dataclass(slots=True)
class Personality:
    traits: list[str] = field(default_factory=list)
    morale: float = 80
    chemistry: float = 70
    media_profile: str = "normal"

    def has_trait(self, trait: str) -> bool:
        return trait in self.traits


@dataclass(slots=True)
class InjuryDetails:
    injury_type: str
    name: str
    severity: str
    games_remaining: int
    occurred_date: str = ""
    permanent_impact: int = 0
    permanent_impact_applied: bool = False


@dataclass(slots=True)
class StreakData:
    type: str
    games: int


@dataclass(slots=True)
class Player:
    first_name: str
    last_name: str
    position: str = "SF"
    secondary_position: str | None = None
    id: str = field(default_factory=lambda: uuid4().hex)
    team_id: str = ""
    birth_date: str | None = None
    age: int | None = None
    attributes: dict[str, dict[str, float]] = field(default_factory=dict)
    overall_rating: int = 70
    potential_rating: int = 75
    badges: list[Badge] = field(default_factory=list)
    tendencies: dict[str, Any] = field(default_factory=dict)
    personality: Personality = field(default_factory=Personality)
    fatigue: float = 0.0
    injury_risk: str = "M"
    is_injured: bool = False
    injury_details: InjuryDetails | None = None
    contract_years_remaining: int = 2
    development_history: list[dict[str, Any]] = field(default_factory=list)
    recent_performances: list[dict[str, Any]] = field(default_factory=list)
    streak_data: StreakData | None = None
    games_played_this_season: int = 0
    minutes_played_this_season: float = 0.0
    career_seasons: int = 0
    upgrade_points: int = 0
    is_retired: bool = False

    @property
    def full_name(self) -> str:
        return f"{self.first_name or 'Unknown'} {self.last_name or 'Player'}"

    @property
    def morale(self) -> float:
        return self.personality.morale

    def attribute(self, category: str, name: str, default: float = 70) -> float:
        value = self.attributes.get(category, {}).get(name)
        if value is None:
            return default
        return value

    def find_attribute(self, name: str) -> float | None:
        for category in ATTRIBUTE_CATEGORIES:
            value = self.attributes.get(category, {}).get(name)
            if value is not None:
                return value
        return None

    def badge_ids(self) -> list[str]:
        return [badge.id for badge in self.badges]

    def badge_level(self, badge_id: str) -> str | None:
        for badge in self.badges:
            if badge.id == badge_id:
                return badge.level
        return None

    def plays_position(self, position: str) -> bool:
        return position in (self.position, self.secondary_position)

    def copy(self) -> Player:
        return copy.deepcopy(self)


@dataclass(slots=True)
class CoachingScheme:
    offensive: str = "balanced"
    defensive: str = "man"
    substitution: str = "staggered"


@dataclass(slots=True)
class LineupSettings:
    STARTER_SLOTS: ClassVar[int] = 5

    starters: list[str | None] = field(default_factory=list)
    target_minutes: dict[str, int] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if len(self.starters) > self.STARTER_SLOTS:
            raise ValueError(f"Lineup has {len(self.starters)} starters; max is {self.STARTER_SLOTS}.")
        ids = [pid for pid in self.starters if pid]
        if len(ids) != len(set(ids)):
            raise ValueError("Lineup starters must be distinct players.")

    def starter_ids(self) -> list[str]:
        return [pid for pid in self.starters if pid]


@dataclass(slots=True)
class Team:
    name: str
    id: str = field(default_factory=lambda: uuid4().hex)
    abbreviation: str = ""
    players: list[Player] = field(default_factory=list)
    coaching_scheme: CoachingScheme = field(default_factory=CoachingScheme)
    lineup_settings: LineupSettings = field(default_factory=LineupSettings)

    def find_player(self, player_id: str) -> Player | None:
        for player in self.players:
            if player.id == player_id:
                return player
        return None

    def healthy_players(self) -> list[Player]:
        return [p for p in self.players if not p.is_injured]

    def average_morale(self) -> float:
        if not self.players:
            return 80.0
        return sum(p.personality.morale for p in self.players) / len(self.players)


@dataclass(slots=True)
class BoxScoreLine:
    player_id: str
    name: str
    position: str = "SF"
    secondary_position: str | None = None
    overall_rating: int = 70
    minutes: float = 0.0
    points: int = 0
    rebounds: int = 0
    offensive_rebounds: int = 0
    defensive_rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    fouls: int = 0
    fgm: int = 0
    fga: int = 0
    fg3m: int = 0
    fg3a: int = 0
    ftm: int = 0
    fta: int = 0
    plus_minus: int = 0

    @classmethod
    def for_player(cls, player: Player) -> BoxScoreLine:
        return cls(
            player_id=player.id,
            name=player.full_name,
            position=player.position,
            secondary_position=player.secondary_position,
            overall_rating=player.overall_rating,
        )

    def to_dict(self, player: Player | None = None) -> dict[str, Any]:
        row = asdict(self)
        row["minutes"] = round(self.minutes)
        if player is not None:
            row["fatigue"] = player.fatigue
            row["is_injured"] = player.is_injured
        return row


def is_valid_position(position: str | None) -> bool:
    return position in POSITIONS
