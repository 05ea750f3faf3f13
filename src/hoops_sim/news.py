from __future__ import annotations

import random
from dataclasses import asdict, dataclass
from typing import Any

from .config import CLUTCH_MARGIN
from .engine import GameResult
from .injuries import get_recovery_estimate
from .models import InjuryDetails, Player


@dataclass(slots=True)
class NewsEvent:
    event_type: str
    headline: str
    body: str
    player_id: str | None = None
    team_id: str | None = None
    game_date: str = ""
    campaign_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


def format_attribute_name(attribute: str) -> str:
    return attribute.split(".")[-1].replace("_", " ").lower()


def format_attribute_boosts(boosts: dict[str, float]) -> str:
    if not boosts:
        return ""
    parts = [f"+{value:g} {format_attribute_name(name)}" for name, value in boosts.items()]
    return "Their " + ", ".join(parts) + " ratings have improved."


class EvolutionNewsService:
    def __init__(self, rng: random.Random | None = None, campaign_id: str | None = None) -> None:
        self._rng = rng or random.Random()
        self.campaign_id = campaign_id

    def _event(self, event_type: str, player: Player, headlines: list[str], body: str, game_date: str) -> NewsEvent:
        return NewsEvent(
            event_type=event_type,
            headline=self._rng.choice(headlines),
            body=body,
            player_id=player.id,
            team_id=player.team_id or None,
            game_date=game_date,
            campaign_id=self.campaign_id,
        )

    def create_injury_news(self, player: Player, injury: InjuryDetails, game_date: str = "") -> NewsEvent:
        name = player.full_name
        injury_name = injury.name or "injury"
        estimate = get_recovery_estimate(injury.games_remaining)
        if estimate == "out for season":
            estimate = "for the season"
        return self._event(
            "injury",
            player,
            [
                f"{name} suffers {injury_name}, out {estimate}",
                f"Injury report: {name} sidelined with {injury_name}",
                f"{name} to miss time with {injury_name}",
            ],
            f"{name} has been diagnosed with a {injury_name} and is expected to be out {estimate}.",
            game_date,
        )

    def create_recovery_news(self, player: Player, injury: InjuryDetails, game_date: str = "") -> NewsEvent:
        name = player.full_name
        injury_name = injury.name or "injury"
        return self._event(
            "recovery",
            player,
            [
                f"{name} cleared to return from {injury_name}",
                f"{name} back in action after recovering from {injury_name}",
                f"Good news: {name} healthy and ready to play",
            ],
            f"{name} has fully recovered and has been cleared to return to game action.",
            game_date,
        )

    def create_hot_streak_news(
        self, player: Player, games: int, boosts: dict[str, float] | None = None, game_date: str = ""
    ) -> NewsEvent:
        name = player.full_name
        return self._event(
            "hot_streak",
            player,
            [
                f"{name} is on fire!",
                f"{name} continues red-hot stretch",
                f"Unstoppable: {name} extends hot streak to {games} games",
            ],
            f"{name} has been playing at an elite level over the past {games} games. "
            f"{format_attribute_boosts(boosts or {})}".rstrip(),
            game_date,
        )

    def create_cold_streak_news(self, player: Player, games: int, game_date: str = "") -> NewsEvent:
        name = player.full_name
        return self._event(
            "cold_streak",
            player,
            [
                f"{name} struggling through slump",
                f"{name} mired in {games}-game cold stretch",
                f"Concerns mount as {name} continues to struggle",
            ],
            f"{name} has been struggling over the past {games} games and is looking to break out of the slump.",
            game_date,
        )

    def create_development_news(self, player: Player, attribute: str, increase: float, game_date: str = "") -> NewsEvent:
        name = player.full_name
        attr = format_attribute_name(attribute)
        return self._event(
            "development",
            player,
            [
                f"{name} showing improvement in {attr}",
                f"Development report: {name}'s {attr} on the rise",
                f"{name} making strides with {attr}",
            ],
            f"{name} has been working hard and showing noticeable improvement in {attr} (+{increase:g}).",
            game_date,
        )

    def create_breakout_news(self, player: Player, overall_gain: int, age: int = 22, game_date: str = "") -> NewsEvent:
        name = player.full_name
        return self._event(
            "breakout",
            player,
            [
                f"Breakout alert: {name} emerging as a star",
                f"{name} taking a major leap forward",
                f"Rising star: {name} making a name for themselves",
            ],
            f"At just {age} years old, {name} has shown tremendous growth this month, "
            f"improving their overall rating by {overall_gain} points.",
            game_date,
        )

    def create_decline_news(self, player: Player, overall_loss: int, age: int = 35, game_date: str = "") -> NewsEvent:
        name = player.full_name
        return self._event(
            "decline",
            player,
            [
                f"Father Time catching up with {name}",
                f"{name} showing signs of age",
                f"Veteran {name} slowing down",
            ],
            f"At {age} years old, {name} appears to be losing a step. "
            f"The veteran's overall rating has dropped by {overall_loss} points this month.",
            game_date,
        )

    def create_trade_request_news(self, player: Player, game_date: str = "") -> NewsEvent:
        name = player.full_name
        return self._event(
            "trade_request",
            player,
            [
                f"{name} requests trade",
                f"Unhappy {name} wants out",
                f"Trade demand: {name} asks to be moved",
            ],
            f"{name} has formally requested a trade, citing dissatisfaction with their current situation.",
            game_date,
        )

    def create_retirement_news(self, player: Player, career_seasons: int, game_date: str = "") -> NewsEvent:
        name = player.full_name
        return self._event(
            "retirement",
            player,
            [
                f"{name} announces retirement after {career_seasons} seasons",
                f"End of an era: {name} calls it a career",
                f"{name} hangs up the sneakers after {career_seasons} years",
            ],
            f"{name} has announced their retirement after a {career_seasons}-year career in the league.",
            game_date,
        )


class GameNewsService:
    """Headlines for finished games: buzzer beaters and overtime classics."""

    def __init__(self, rng: random.Random | None = None, campaign_id: str | None = None) -> None:
        self._rng = rng or random.Random()
        self.campaign_id = campaign_id

    def create_game_winner_news(
        self,
        clutch_play: dict[str, Any],
        home: tuple[str | None, str],
        away: tuple[str | None, str],
        home_score: int,
        away_score: int,
        game_date: str = "",
    ) -> NewsEvent:
        name = clutch_play["player_name"]
        shot_type = clutch_play.get("shot_type", "jumper")
        is_home = clutch_play["is_home_team"]
        (winner_id, winner), (_loser_id, loser) = (home, away) if is_home else (away, home)
        return NewsEvent(
            event_type="game_winner",
            headline=self._rng.choice([
                f"{name} hits game-winner! {winner} defeats {loser}",
                f"Clutch! {name} lifts {winner} to victory",
                f"{name}'s {shot_type} sinks {loser} at the buzzer",
            ]),
            body=f"{name} hit a clutch {shot_type} to give the {winner} a {home_score}-{away_score} victory "
            f"over the {loser}.",
            player_id=clutch_play.get("player_id"),
            team_id=winner_id,
            game_date=game_date,
            campaign_id=self.campaign_id,
        )

    def create_overtime_thriller_news(
        self,
        home: tuple[str | None, str],
        away: tuple[str | None, str],
        home_score: int,
        away_score: int,
        overtime_periods: int,
        game_date: str = "",
    ) -> NewsEvent:
        (winner_id, winner), (_loser_id, loser) = (home, away) if home_score > away_score else (away, home)
        ot_text = f"{overtime_periods}OT" if overtime_periods > 1 else "OT"
        return NewsEvent(
            event_type="general",
            headline=f"{winner} outlasts {loser} in {ot_text} thriller",
            body=f"In an instant classic, the {winner} defeated the {loser} {home_score}-{away_score} "
            f"after {overtime_periods} overtime period(s).",
            team_id=winner_id,
            game_date=game_date,
            campaign_id=self.campaign_id,
        )

    def create_game_news(self, result: GameResult, game_date: str = "") -> list[NewsEvent]:
        home = (result.home_team_id, result.home_team)
        away = (result.away_team_id, result.away_team)
        events: list[NewsEvent] = []
        clutch = result.clutch_play
        # Only a clutch basket by the winning side in a close finish counts as the game-winner.
        if clutch is not None and (clutch["is_home_team"] == (result.winner == "home")):
            if abs(result.home_score - result.away_score) <= CLUTCH_MARGIN:
                events.append(
                    self.create_game_winner_news(clutch, home, away, result.home_score, result.away_score, game_date)
                )
        if result.overtime_periods > 0:
            events.append(
                self.create_overtime_thriller_news(
                    home, away, result.home_score, result.away_score, result.overtime_periods, game_date
                )
            )
        return events
