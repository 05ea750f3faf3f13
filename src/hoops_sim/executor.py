from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Any, Protocol

from .badges import BadgeRegistry, BadgeSynergyService, default_badge_registry
from .models import Player

MAX_ACTIONS = 20

POSITIVE_OUTCOMES = {"success", "made", "finish", "open", "beat_defender", "drive", "shooter_open", "cutter_open"}
NEGATIVE_OUTCOMES = {"stolen", "turnover", "blocked", "deflected", "covered"}

BADGE_ACTION_BOOST: dict[str, float] = {"hof": 0.08, "gold": 0.05, "silver": 0.03, "bronze": 0.01}

# Catalog attribute names without a stored rating of their own.
ATTRIBUTE_ALIASES: dict[str, str] = {
    "speed_with_ball": "speed",
    "shot_iq": "basketball_iq",
    "offensive_consistency": "consistency",
    "closeout": "perimeter_defense",
    "post_hook": "post_control",
    "post_fade": "mid_range",
    "hands": "close_shot",
}

BALL_CARRIER_ROLES = ("ball_handler", "point", "passer", "point_guard")

ROLE_FITNESS: tuple[tuple[frozenset[str], tuple[tuple[str, float], ...]], ...] = (
    (frozenset(BALL_CARRIER_ROLES), (("ball_handling", 0.3), ("pass_vision", 0.2), ("speed", 0.1))),
    (frozenset({"shooter", "wing1", "wing2", "weak_wing"}), (("three_point", 0.4), ("offensive_consistency", 0.1))),
    (
        frozenset({"screener", "post", "post_player", "elbow1", "elbow2", "block1", "block2"}),
        (("post_control", 0.3), ("strength", 0.2)),
    ),
    (frozenset({"corner", "corner1", "corner2"}), (("three_point", 0.35),)),
    (frozenset({"cutter", "trailer1", "trailer2", "rim_runner"}), (("layup", 0.25), ("speed", 0.2))),
)

SHOT_NAMES: dict[str, str] = {"three_point": "three-pointer", "mid_range": "mid-range jumper", "paint": "shot at the rim"}
SHOT_CATEGORIES: dict[str, str] = {"three_point": "three_pointer", "mid_range": "mid_range", "paint": "paint"}

BLOCK_DESCRIPTIONS: dict[str, list[str]] = {
    "man": ["{name}'s shot is swatted away!", "Strong man defense leads to a block!", "{name} gets his shot rejected!"],
    "zone_2_3": ["The 2-3 zone collapses and blocks!", "Zone defense walls off the paint!", "{name} is met by the zone!"],
    "zone_3_2": ["The 3-2 zone rotates for the block!", "{name}'s shot is sent back!"],
    "zone_1_3_1": ["The 1-3-1 zone gets the block!", "Weak side help leads to a rejection!"],
    "press": ["{name}'s rushed shot is blocked!", "Press forces contested attempt that's rejected!"],
    "trap": ["Double team leads to a blocked shot!", "{name} gets trapped and blocked!"],
    "default": ["{name}'s shot is blocked!", "Great defensive play for the block!"],
}

TURNOVER_DESCRIPTIONS: dict[str, list[str]] = {
    "man": [
        "Tight man defense forces the turnover!",
        "Man-to-man pressure creates the steal!",
        "{name} coughs it up against the pressure!",
    ],
    "zone_2_3": ["The 2-3 zone reads the pass!", "Zone defense anticipates and steals!"],
    "zone_3_2": ["The 3-2 zone picks off the pass!", "Quick hands in the zone cause the turnover!"],
    "zone_1_3_1": [
        "The 1-3-1 trap forces the turnover!",
        "Aggressive trapping creates the steal!",
        "{name} is caught in the 1-3-1!",
    ],
    "press": [
        "Full court press creates the turnover!",
        "Press defense forces the bad pass!",
        "{name} can't handle the pressure!",
    ],
    "trap": ["Double team forces the turnover!", "Trap defense creates another steal!", "{name} is suffocated by the trap!"],
    "default": ["Turnover! Great defensive play!", "{name} loses the ball!"],
}

ACTION_DESCRIPTIONS: dict[str, str] = {
    "screen": "{name} sets a screen",
    "pass": "{name} passes the ball",
    "drive": "{name} drives to the basket",
    "decision": "{name} reads the defense",
    "cut": "{name} cuts to the basket",
    "setup": "{name} sets up the play",
    "post": "{name} works in the post",
    "handoff": "{name} executes a handoff",
    "reset": "Resetting the offense",
}


@dataclass(slots=True)
class ShotAttempt:
    shooter: str
    shooter_name: str
    shot_type: str = "paint"
    made: bool = False
    fouled: bool = False
    blocked: bool = False
    points: int = 0


@dataclass(slots=True)
class PlayResult:
    play_id: str
    play_name: str
    category: str
    outcome: str = "completed"
    points: int = 0
    duration: float = 0.0
    shot_attempt: ShotAttempt | None = None
    free_throws: dict[str, int] | None = None
    keyframes: list[dict[str, Any]] = field(default_factory=list)
    role_assignments: dict[str, str] = field(default_factory=dict)
    activated_badges: list[dict[str, Any]] = field(default_factory=list)
    shot_badges: list[dict[str, Any]] = field(default_factory=list)
    activated_synergies: list[dict[str, Any]] = field(default_factory=list)


class PlayExecutor(Protocol):
    def execute_play(
        self,
        play: dict[str, Any],
        offense: list[Player],
        defense: list[Player],
        defensive_scheme: str,
        modifiers: dict[str, float],
    ) -> PlayResult: ...


def player_rating(player: Player | None, attributes: list[str]) -> float:
    if player is None:
        return 70.0
    if not attributes:
        return float(player.overall_rating)
    values = []
    for name in attributes:
        value = player.find_attribute(name)
        if value is None and name in ATTRIBUTE_ALIASES:
            value = player.find_attribute(ATTRIBUTE_ALIASES[name])
        if value is not None:
            values.append(value)
    if not values:
        return 70.0
    return sum(values) / len(values)


def _fitness_attribute(player: Player, name: str) -> float:
    value = player.find_attribute(name)
    if value is None and name in ATTRIBUTE_ALIASES:
        value = player.find_attribute(ATTRIBUTE_ALIASES[name])
    return 50.0 if value is None else value


class ActionGraphExecutor:
    """Walks a play's action graph and reports what happened.

    Outcome odds start from the catalog probabilities and shift with the
    actor's attribute edge over the matched defender, the actor's badges
    for that node, and the defensive scheme modifiers.
    """

    def __init__(
        self,
        badges: BadgeRegistry | None = None,
        rng: random.Random | None = None,
        synergies: BadgeSynergyService | None = None,
    ) -> None:
        self.badges = badges or default_badge_registry()
        self.synergies = synergies
        self._rng = rng or random.Random()
        self._reset()

    def _reset(self) -> None:
        self.defensive_scheme = "man"
        self.modifiers: dict[str, float] = {}
        self.roles: dict[str, Player] = {}
        self.positions: dict[str, dict[str, Any]] = {}
        self.ball_carrier: Player | None = None
        self.elapsed = 0.0
        self.keyframes: list[dict[str, Any]] = []
        self.offense: list[Player] = []
        self.activated_badges: list[dict[str, Any]] = []
        self.shot_badges: list[dict[str, Any]] = []
        self.activated_synergies: list[dict[str, Any]] = []

    def execute_play(
        self,
        play: dict[str, Any],
        offense: list[Player],
        defense: list[Player],
        defensive_scheme: str,
        modifiers: dict[str, float],
    ) -> PlayResult:
        self._reset()
        self.defensive_scheme = defensive_scheme
        self.modifiers = modifiers
        self.offense = offense
        result = PlayResult(play_id=play["id"], play_name=play["name"], category=play["category"])

        self.assign_roles(play, offense)
        self._set_formation(play, offense)
        result.role_assignments = {role: player.id for role, player in self.roles.items()}

        actions = {action["id"]: action for action in play["actions"]}
        current = play["actions"][0]["id"] if play["actions"] else None
        steps = 0
        while current and steps < MAX_ACTIONS:
            steps += 1
            action = actions.get(current)
            if action is None:
                break
            outcome_name, outcome = self.execute_action(play, action, offense, defense, result)
            nxt = outcome.get("next", "")
            if nxt.startswith("end_"):
                self._handle_end_state(nxt, outcome, result)
                break
            if nxt == "rebound_battle":
                self._handle_rebound_battle(outcome_name, result)
                break
            if nxt == "free_throws":
                self._handle_free_throws(offense, result)
                break
            current = nxt

        result.duration = self.elapsed
        result.keyframes = self.keyframes
        result.activated_badges = self.activated_badges
        result.shot_badges = self.shot_badges
        result.activated_synergies = self.activated_synergies
        return result

    def assign_roles(self, play: dict[str, Any], offense: list[Player]) -> dict[str, Player]:
        assigned: set[str] = set()
        for role, eligible in play["roles"].items():
            candidates = [
                p for p in offense
                if p.id not in assigned and ((p.position or "SF") in eligible or p.secondary_position in eligible)
            ]
            chosen: Player | None = None
            if candidates:
                ranked = sorted(candidates, key=lambda p: self._role_fitness(p, role), reverse=True)
                chosen = self._pick_with_variance(ranked)
            else:
                for p in offense:
                    if p.id not in assigned:
                        chosen = p
                        break
            if chosen is not None:
                self.roles[role] = chosen
                assigned.add(chosen.id)

        self.ball_carrier = None
        for role in BALL_CARRIER_ROLES:
            if role in self.roles:
                self.ball_carrier = self.roles[role]
                break
        if self.ball_carrier is None and self.roles:
            self.ball_carrier = next(iter(self.roles.values()))
        return self.roles

    @staticmethod
    def _role_fitness(player: Player, role: str) -> float:
        score = float(player.overall_rating or 70)
        for roles, bonuses in ROLE_FITNESS:
            if role in roles:
                for attr, weight in bonuses:
                    score += _fitness_attribute(player, attr) * weight
        return score

    def _pick_with_variance(self, ranked: list[Player]) -> Player:
        if len(ranked) == 1:
            return ranked[0]
        roll = self._rng.randint(1, 100)
        if roll <= 70:
            return ranked[0]
        if roll <= 95:
            return ranked[1]
        return ranked[self._rng.randrange(len(ranked))]

    def _set_formation(self, play: dict[str, Any], offense: list[Player]) -> None:
        index = {p.id: i for i, p in enumerate(offense)}
        for role, player in self.roles.items():
            x, y = play["formation"].get(role, (0.5, 0.5))
            self.positions[player.id] = {
                "x": x,
                "y": y,
                "has_ball": player is self.ball_carrier,
                "lineup_index": index.get(player.id, 0),
            }
        self.keyframes.append({
            "time": 0,
            "positions": self._snapshot(),
            "ball": self._ball_position(),
            "action": "formation",
            "description": "Setting up play",
        })

    def _snapshot(self) -> dict[str, dict[str, Any]]:
        snap = {}
        for pid, pos in self.positions.items():
            snap[pid] = dict(pos, has_ball=self.ball_carrier is not None and pid == self.ball_carrier.id)
        return snap

    def _ball_position(self) -> dict[str, float]:
        if self.ball_carrier is None or self.ball_carrier.id not in self.positions:
            return {"x": 0.5, "y": 0.5}
        pos = self.positions[self.ball_carrier.id]
        return {"x": pos["x"], "y": pos["y"]}

    def _role_player(self, role: str | None) -> Player | None:
        if role is None:
            return None
        if role == "dynamic":
            return self.ball_carrier
        return self.roles.get(role)

    def execute_action(
        self,
        play: dict[str, Any],
        action: dict[str, Any],
        offense: list[Player],
        defense: list[Player],
        result: PlayResult,
    ) -> tuple[str, dict[str, Any]]:
        actor = self._role_player(action.get("actor")) or self.ball_carrier
        defender = self._matching_defender(actor, defense)

        for role, (x, y) in action.get("movement", {}).items():
            if role == "ball":
                continue
            mover = self._role_player(role)
            if mover is not None and mover.id in self.positions:
                self.positions[mover.id]["x"] = x
                self.positions[mover.id]["y"] = y

        badge_boost = self._badge_boost(play, action, actor)
        shot_boost = self._shot_boost(action, actor) if action["type"] == "shot" else 0.0
        probabilities = self.modified_outcomes(action, actor, defender, badge_boost, shot_boost)
        outcome_name = self._select_outcome(probabilities)
        outcome = action["outcomes"][outcome_name]

        self.elapsed += action.get("duration", 1.0)
        self._process_action_type(action, outcome_name, outcome, actor, result)
        self._record_keyframe(action, outcome_name, outcome, actor)
        return outcome_name, outcome

    @staticmethod
    def _matching_defender(actor: Player | None, defense: list[Player]) -> Player | None:
        if not defense:
            return None
        if actor is not None:
            for player in defense:
                if player.position == actor.position:
                    return player
        return defense[0]

    def _badge_boost(self, play: dict[str, Any], action: dict[str, Any], actor: Player | None) -> float:
        if actor is None:
            return 0.0
        relevant = play.get("badge_effects", {}).get(action["id"], [])
        boost = 0.0
        for badge in actor.badges:
            if badge.id not in relevant:
                continue
            boost += BADGE_ACTION_BOOST.get(badge.level, 0.0)
            self.activated_badges.append({
                "badge_id": badge.id,
                "level": badge.level,
                "player_id": actor.id,
                "player_name": actor.full_name,
                "action_id": action["id"],
                "time": self.elapsed,
            })
        return boost

    def _shot_boost(self, action: dict[str, Any], actor: Player | None) -> float:
        """Shooter's badge edge for the shot category plus the capped lineup synergy boost."""
        if actor is None or self.synergies is None:
            return 0.0
        category = SHOT_CATEGORIES.get(action.get("shot_type", "paint"), "paint")
        badge_boost, self.shot_badges = self.synergies.shot_badge_boost(actor, category)
        _raw, self.activated_synergies = self.synergies.shot_synergy_activations(actor, self.offense)
        return badge_boost + self.synergies.calculate_in_game_boost(len(self.activated_synergies))

    def modified_outcomes(
        self,
        action: dict[str, Any],
        actor: Player | None,
        defender: Player | None,
        badge_boost: float = 0.0,
        shot_boost: float = 0.0,
    ) -> dict[str, float]:
        attrs = action.get("attributes", {})
        off_rating = player_rating(actor, attrs.get("offense", []))
        def_rating = player_rating(defender, attrs.get("defense", [])) if defender is not None else 50.0
        advantage = (off_rating - def_rating) / 2 + badge_boost * 10

        raw: dict[str, float] = {}
        for name, outcome in action["outcomes"].items():
            p = outcome.get("probability", 0.5)
            if name in POSITIVE_OUTCOMES:
                p += advantage / 200
                if name == "made":
                    p += self.modifiers.get("shot_modifier", 0.0) + shot_boost
            elif name in NEGATIVE_OUTCOMES:
                p -= advantage / 200
                if name == "blocked":
                    p += self.modifiers.get("block_modifier", 0.0)
                elif name == "stolen":
                    p += self.modifiers.get("steal_modifier", 0.0)
                elif name == "turnover":
                    p += self.modifiers.get("turnover_modifier", 0.0)
            p += outcome.get("modifier", 0.0)
            raw[name] = max(0.05, min(0.95, p))

        total = sum(raw.values())
        if total <= 0:
            share = 1 / len(raw)
            return {name: share for name in raw}
        return {name: value / total for name, value in raw.items()}

    def _select_outcome(self, probabilities: dict[str, float]) -> str:
        roll = self._rng.random()
        cumulative = 0.0
        for name, p in probabilities.items():
            cumulative += p
            if roll <= cumulative:
                return name
        return list(probabilities)[-1]

    def _process_action_type(
        self,
        action: dict[str, Any],
        outcome_name: str,
        outcome: dict[str, Any],
        actor: Player | None,
        result: PlayResult,
    ) -> None:
        kind = action["type"]
        if kind == "pass" and outcome_name != "stolen":
            receiver = self._role_player(action.get("receiver"))
            if receiver is not None:
                self.ball_carrier = receiver
        elif kind == "handoff" and outcome_name != "turnover":
            receiver = self._role_player(action.get("receiver"))
            if receiver is not None:
                self.ball_carrier = receiver
        elif kind == "shot" and actor is not None:
            made = outcome_name == "made"
            result.shot_attempt = ShotAttempt(
                shooter=actor.id,
                shooter_name=actor.full_name,
                shot_type=action.get("shot_type", "paint"),
                made=made,
                fouled=outcome_name == "fouled",
                blocked=outcome_name == "blocked",
                points=int(outcome.get("points", 0)) if made else 0,
            )

    def _record_keyframe(
        self, action: dict[str, Any], outcome_name: str, outcome: dict[str, Any], actor: Player | None
    ) -> None:
        frame: dict[str, Any] = {
            "time": round(self.elapsed, 2),
            "positions": self._snapshot(),
            "ball": self._ball_position(),
            "action": action["id"],
            "action_type": action["type"],
            "outcome": outcome_name,
            "description": self.describe(action, outcome_name, actor),
        }
        if outcome.get("points"):
            frame["result"] = {"type": outcome_name, "points": outcome["points"]}
        if outcome_name in ("blocked", "stolen", "turnover"):
            frame["defensive_play"] = True
            frame["defensive_scheme"] = self.defensive_scheme
        self.keyframes.append(frame)

    def describe(self, action: dict[str, Any], outcome_name: str, actor: Player | None) -> str:
        name = actor.first_name if actor is not None else "Player"
        if outcome_name in ("stolen", "turnover"):
            return self._scheme_line(TURNOVER_DESCRIPTIONS, name)
        kind = action["type"]
        if kind == "shot":
            shot_name = SHOT_NAMES.get(action.get("shot_type", "paint"), "shot")
            if outcome_name == "made":
                return f"{name} makes the {shot_name}!"
            if outcome_name == "missed":
                return f"{name} misses the {shot_name}"
            if outcome_name == "blocked":
                return self._scheme_line(BLOCK_DESCRIPTIONS, name)
            if outcome_name == "fouled":
                return f"{name} is fouled on the {shot_name}"
            return f"{name} takes a {shot_name}"
        template = ACTION_DESCRIPTIONS.get(kind, "{name} executes play action")
        return template.format(name=name)

    def _scheme_line(self, table: dict[str, list[str]], name: str) -> str:
        lines = table.get(self.defensive_scheme, table["default"])
        return self._rng.choice(lines).format(name=name)

    @staticmethod
    def _handle_end_state(end_state: str, outcome: dict[str, Any], result: PlayResult) -> None:
        if end_state == "end_made":
            result.outcome = "made"
            result.points = int(outcome.get("points", 2))
        elif end_state == "end_turnover":
            result.outcome = "turnover"
            result.points = 0
        else:
            result.outcome = "completed"

    def _handle_rebound_battle(self, outcome_name: str, result: PlayResult) -> None:
        # The simulator decides who secures the ball.
        result.outcome = "missed"
        self.keyframes.append({
            "time": round(self.elapsed + 0.5, 2),
            "positions": self._snapshot(),
            "ball": {"x": 0.5, "y": 0.8},
            "action": "rebound_battle",
            "outcome": outcome_name,
            "description": "Battle for the rebound",
        })

    def _handle_free_throws(self, offense: list[Player], result: PlayResult) -> None:
        if not offense:
            result.outcome = "free_throws"
            result.points = 0
            result.free_throws = {"made": 0, "attempted": 0}
            return
        shooter = self.ball_carrier or offense[0]
        if result.shot_attempt is not None:
            shooter = next((p for p in offense if p.id == result.shot_attempt.shooter), shooter)
        pct = shooter.attribute("offense", "free_throw", 70) / 100
        made = sum(1 for _ in range(2) if self._rng.random() < pct)
        result.outcome = "free_throws"
        result.points = made
        result.free_throws = {"made": made, "attempted": 2}
        self.keyframes.append({
            "time": round(self.elapsed + 0.5, 2),
            "positions": self._snapshot(),
            "ball": {"x": 0.5, "y": 0.85},
            "action": "free_throws",
            "description": f"{shooter.first_name} makes {made} of 2 free throws",
        })
