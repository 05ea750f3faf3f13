from __future__ import annotations

import re
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import (
    Badge,
    BoxScoreLine,
    CoachingScheme,
    InjuryDetails,
    LineupSettings,
    Personality,
    Player,
    StreakData,
    Team,
)
from .news import NewsEvent

# Children of these keys are keyed by player id and keep their keys verbatim.
ID_KEYED_SUFFIXES = ("box_score", "target_minutes", "synergies_activated_by_player")

_UPPER = re.compile(r"(?<!^)(?=[A-Z])")


def camel_key(key: str) -> str:
    if any(ch.isdigit() for ch in key):
        return key
    return to_camel(key)


def snake_key(key: str) -> str:
    return _UPPER.sub("_", key).lower()


def _convert(value: Any, convert_key, keep_keys: bool = False) -> Any:
    if isinstance(value, dict):
        out = {}
        for key, item in value.items():
            name = key if keep_keys or not isinstance(key, str) else convert_key(key)
            snake = snake_key(key) if isinstance(key, str) else key
            out[name] = _convert(item, convert_key, keep_keys=snake.endswith(ID_KEYED_SUFFIXES))
        return out
    if isinstance(value, list):
        return [_convert(item, convert_key) for item in value]
    return value


def camelize(payload: Any) -> Any:
    return _convert(payload, camel_key)


def snakify(payload: Any) -> Any:
    return _convert(payload, snake_key)


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def dump(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class BadgeModel(CamelModel):
    id: str
    level: str = Field("bronze", validation_alias=AliasChoices("level", "tier"))

    def to_domain(self) -> Badge:
        return Badge(id=self.id, level=self.level)


class PersonalityModel(CamelModel):
    traits: list[str] = []
    morale: float = 80
    chemistry: float = 70
    media_profile: str = "normal"


class InjuryDetailsModel(CamelModel):
    injury_type: str = "unknown"
    name: str = "Injury"
    severity: str = "minor"
    games_remaining: int = 0
    occurred_date: str = ""
    permanent_impact: int = 0
    permanent_impact_applied: bool = False


class StreakDataModel(CamelModel):
    type: str
    games: int


class PlayerModel(CamelModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    position: str = "SF"
    secondary_position: str | None = None
    team_id: str = ""
    birth_date: str | None = None
    age: int | None = None
    attributes: dict[str, dict[str, float]] = {}
    overall_rating: int = 70
    potential_rating: int = 75
    badges: list[BadgeModel] = []
    tendencies: dict[str, Any] = {}
    personality: PersonalityModel = Field(default_factory=PersonalityModel)
    fatigue: float = 0.0
    injury_risk: str = "M"
    is_injured: bool = False
    injury_details: InjuryDetailsModel | None = None
    contract_years_remaining: int = 2
    development_history: list[dict[str, Any]] = []
    recent_performances: list[dict[str, Any]] = []
    streak_data: StreakDataModel | None = None
    games_played_this_season: int = 0
    minutes_played_this_season: float = 0.0
    career_seasons: int = 0
    upgrade_points: int = 0
    is_retired: bool = False

    def to_domain(self) -> Player:
        data = self.model_dump()
        data["attributes"] = {
            snake_key(category): {snake_key(name): value for name, value in values.items()}
            for category, values in self.attributes.items()
        }
        data["badges"] = [badge.to_domain() for badge in self.badges]
        data["personality"] = Personality(**self.personality.model_dump())
        data["injury_details"] = InjuryDetails(**self.injury_details.model_dump()) if self.injury_details else None
        data["streak_data"] = StreakData(**self.streak_data.model_dump()) if self.streak_data else None
        return Player(**data)

    @classmethod
    def from_domain(cls, player: Player) -> PlayerModel:
        return cls(
            id=player.id,
            first_name=player.first_name,
            last_name=player.last_name,
            position=player.position,
            secondary_position=player.secondary_position,
            team_id=player.team_id,
            birth_date=player.birth_date,
            age=player.age,
            attributes=player.attributes,
            overall_rating=player.overall_rating,
            potential_rating=player.potential_rating,
            badges=[BadgeModel(id=b.id, level=b.level) for b in player.badges],
            tendencies=player.tendencies,
            personality=PersonalityModel(
                traits=list(player.personality.traits),
                morale=player.personality.morale,
                chemistry=player.personality.chemistry,
                media_profile=player.personality.media_profile,
            ),
            fatigue=player.fatigue,
            injury_risk=player.injury_risk,
            is_injured=player.is_injured,
            injury_details=(
                InjuryDetailsModel(
                    injury_type=player.injury_details.injury_type,
                    name=player.injury_details.name,
                    severity=player.injury_details.severity,
                    games_remaining=player.injury_details.games_remaining,
                    occurred_date=player.injury_details.occurred_date,
                    permanent_impact=player.injury_details.permanent_impact,
                    permanent_impact_applied=player.injury_details.permanent_impact_applied,
                )
                if player.injury_details
                else None
            ),
            contract_years_remaining=player.contract_years_remaining,
            development_history=player.development_history,
            recent_performances=player.recent_performances,
            streak_data=(
                StreakDataModel(type=player.streak_data.type, games=player.streak_data.games)
                if player.streak_data
                else None
            ),
            games_played_this_season=player.games_played_this_season,
            minutes_played_this_season=player.minutes_played_this_season,
            career_seasons=player.career_seasons,
            upgrade_points=player.upgrade_points,
            is_retired=player.is_retired,
        )

    def dump(self) -> dict[str, Any]:
        data = super().dump()
        data["attributes"] = {
            camel_key(category): {camel_key(name): value for name, value in values.items()}
            for category, values in self.attributes.items()
        }
        return data


class CoachingSchemeModel(CamelModel):
    offensive: str = "balanced"
    defensive: str = "man"
    substitution: str = "staggered"


class LineupSettingsModel(CamelModel):
    starters: list[str | None] = []
    target_minutes: dict[str, int] = {}


class TeamModel(CamelModel):
    id: str
    name: str
    abbreviation: str = ""
    players: list[PlayerModel] = Field(default_factory=list, validation_alias=AliasChoices("players", "roster"))
    coaching_scheme: CoachingSchemeModel = Field(default_factory=CoachingSchemeModel)
    lineup_settings: LineupSettingsModel = Field(default_factory=LineupSettingsModel)

    def to_domain(self) -> Team:
        return Team(
            id=self.id,
            name=self.name,
            abbreviation=self.abbreviation,
            players=[player.to_domain() for player in self.players],
            coaching_scheme=CoachingScheme(**self.coaching_scheme.model_dump()),
            lineup_settings=LineupSettings(**self.lineup_settings.model_dump()),
        )

    @classmethod
    def from_domain(cls, team: Team) -> TeamModel:
        return cls(
            id=team.id,
            name=team.name,
            abbreviation=team.abbreviation,
            players=[PlayerModel.from_domain(player) for player in team.players],
            coaching_scheme=CoachingSchemeModel(
                offensive=team.coaching_scheme.offensive,
                defensive=team.coaching_scheme.defensive,
                substitution=team.coaching_scheme.substitution,
            ),
            lineup_settings=LineupSettingsModel(
                starters=list(team.lineup_settings.starters),
                target_minutes=dict(team.lineup_settings.target_minutes),
            ),
        )

    def dump(self) -> dict[str, Any]:
        data = super().dump()
        data["players"] = [player.dump() for player in self.players]
        return data


class BoxScoreLineModel(CamelModel):
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
    fgm: int = Field(0, alias="fgm", validation_alias=AliasChoices("fgm", "fieldGoalsMade"))
    fga: int = Field(0, alias="fga", validation_alias=AliasChoices("fga", "fieldGoalsAttempted"))
    fg3m: int = Field(0, alias="fg3m", validation_alias=AliasChoices("fg3m", "threePointersMade", "tpm"))
    fg3a: int = Field(0, alias="fg3a", validation_alias=AliasChoices("fg3a", "threePointersAttempted", "tpa"))
    ftm: int = Field(0, alias="ftm", validation_alias=AliasChoices("ftm", "freeThrowsMade"))
    fta: int = Field(0, alias="fta", validation_alias=AliasChoices("fta", "freeThrowsAttempted"))
    plus_minus: int = 0

    def to_domain(self) -> BoxScoreLine:
        return BoxScoreLine(**self.model_dump())

    @classmethod
    def from_domain(cls, line: BoxScoreLine) -> BoxScoreLineModel:
        return cls.model_validate(line.to_dict() | {"minutes": line.minutes})


class NewsEventModel(CamelModel):
    event_type: str
    headline: str
    body: str
    player_id: str | None = None
    team_id: str | None = None
    game_date: str = ""
    campaign_id: str | None = None

    @classmethod
    def from_domain(cls, event: NewsEvent) -> NewsEventModel:
        return cls(**event.to_dict())


def team_from_payload(payload: dict[str, Any]) -> Team:
    return TeamModel.model_validate(payload).to_domain()


def team_to_payload(team: Team) -> dict[str, Any]:
    return TeamModel.from_domain(team).dump()


def player_from_payload(payload: dict[str, Any]) -> Player:
    return PlayerModel.model_validate(payload).to_domain()


def player_to_payload(player: Player) -> dict[str, Any]:
    return PlayerModel.from_domain(player).dump()


def box_lines_from_payload(rows: list[dict[str, Any]]) -> list[BoxScoreLine]:
    return [BoxScoreLineModel.model_validate(row).to_domain() for row in rows]


def game_state_to_payload(state: dict[str, Any]) -> dict[str, Any]:
    return camelize(state)


def game_state_from_payload(payload: dict[str, Any]) -> dict[str, Any]:
    return snakify(payload)
