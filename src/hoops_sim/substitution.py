from __future__ import annotations

import random
from typing import Any

from .config import (
    BENCH_MINUTE_SLOTS,
    CLOSE_GAME_MINUTES,
    CLOSE_GAME_THRESHOLD,
    DEFAULT_SUBSTITUTION_STRATEGY,
    MINUTE_TEMPLATES,
    QUARTER_LENGTH,
    STARTER_MINUTES_BUDGET,
    SUBSTITUTION_STRATEGIES,
    TEAM_MINUTES,
    TOTAL_GAME_MINUTES,
    VARIANCE_RANGE,
)
from .models import BoxScoreLine, Player

BALL_HANDLER_POSITIONS = {"PG", "SG"}
MAX_PLAYER_MINUTES = 40
VARIANCE_FLOOR_TARGET = 20
VARIANCE_FLOOR = 8


def _rating(player: Player) -> float:
    return player.overall_rating if player.overall_rating is not None else 70


def game_elapsed(quarter: int, time_remaining: float) -> float:
    return (quarter - 1) * QUARTER_LENGTH + (QUARTER_LENGTH - time_remaining)


class SubstitutionEngine:
    def __init__(self, rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()

    def strategy_display_info(self) -> list[dict[str, Any]]:
        info = []
        for key, data in SUBSTITUTION_STRATEGIES.items():
            info.append({
                "key": key,
                "name": data["name"],
                "description": data["description"],
                "type": data["type"],
                "rotation_depth": data["rotation_depth"],
                "strengths": list(data["strengths"]),
                "weaknesses": list(data["weaknesses"]),
            })
        return info

    def close_game_override(
        self, roster: list[Player], quarter: int, time_remaining: float, score_diff: int
    ) -> list[str] | None:
        if quarter < 4 or time_remaining > CLOSE_GAME_MINUTES or abs(score_diff) > CLOSE_GAME_THRESHOLD:
            return None
        healthy = sorted((p for p in roster if not p.is_injured), key=_rating, reverse=True)
        best = healthy[:5]
        if len(best) < 5:
            return None
        return [p.id for p in best]

    def evaluate_substitutions(
        self,
        lineup: list[Player],
        roster: list[Player],
        box_score: dict[str, BoxScoreLine],
        target_minutes: dict[str, int],
        strategy: str,
        quarter: int,
        time_remaining: float,
        score_diff: int,
        is_user_live: bool = False,
    ) -> list[str] | None:
        """Return the next lineup as five player ids, or None to stay put."""
        if is_user_live:
            return None
        data = SUBSTITUTION_STRATEGIES.get(strategy) or SUBSTITUTION_STRATEGIES[DEFAULT_SUBSTITUTION_STRATEGY]
        elapsed = game_elapsed(quarter, time_remaining)

        override = self.close_game_override(roster, quarter, time_remaining, score_diff)
        if override is not None:
            return override

        by_id = {p.id: p for p in roster}
        lineup_ids = [p.id for p in lineup]
        candidates = []
        for pid in lineup_ids:
            actual = box_score[pid].minutes if pid in box_score else 0.0
            pct = target_minutes[pid] / TOTAL_GAME_MINUTES if pid in target_minutes else 0.5
            delta = actual - elapsed * pct
            if delta >= float(data["pace_threshold"]):
                player = by_id.get(pid)
                candidates.append({
                    "id": pid,
                    "pace_delta": delta,
                    "position": (player.position if player else None) or "SF",
                    "secondary_position": player.secondary_position if player else None,
                })
        if not candidates:
            return None

        candidates.sort(key=lambda c: c["pace_delta"], reverse=True)
        if strategy == "staggered":
            candidates = self._staggered_constraint(candidates, lineup)
        candidates = candidates[: int(data["max_subs_per_check"])]

        bench = [p for p in roster if p.id not in lineup_ids and not p.is_injured]
        new_ids = list(lineup_ids)
        subs = 0
        for candidate in candidates:
            replacement = self._find_bench_replacement(bench, candidate, box_score, target_minutes)
            if replacement is None:
                continue
            index = new_ids.index(candidate["id"])
            new_ids[index] = replacement.id
            bench = [p for p in bench if p.id != replacement.id]
            subs += 1
        if subs == 0:
            return None
        return new_ids

    @staticmethod
    def _staggered_constraint(candidates: list[dict[str, Any]], lineup: list[Player]) -> list[dict[str, Any]]:
        positions = {p.id: p.position for p in lineup}
        kept = []
        handler_sitting = False
        for candidate in candidates:
            if positions.get(candidate["id"]) in BALL_HANDLER_POSITIONS:
                if handler_sitting:
                    continue
                handler_sitting = True
            kept.append(candidate)
        return kept

    @staticmethod
    def _find_bench_replacement(
        bench: list[Player],
        candidate: dict[str, Any],
        box_score: dict[str, BoxScoreLine],
        target_minutes: dict[str, int],
    ) -> Player | None:
        wanted = {candidate["position"], candidate["secondary_position"]} - {None}
        best: Player | None = None
        for player in bench:
            if player.position not in wanted and player.secondary_position not in wanted:
                continue
            played = box_score[player.id].minutes if player.id in box_score else 0.0
            if target_minutes.get(player.id, 0) - played <= 0:
                continue
            if best is None or _rating(player) > _rating(best):
                best = player
        return best

    def generate_ai_target_minutes(self, roster: list[Player], starter_ids: list[str], strategy: str) -> dict[str, int]:
        ranked = sorted(roster, key=_rating, reverse=True)
        template = MINUTE_TEMPLATES.get(strategy, MINUTE_TEMPLATES[DEFAULT_SUBSTITUTION_STRATEGY])
        targets: dict[str, int] = {}
        for index, player in enumerate(ranked):
            minutes = template[index] if index < len(template) else 0
            if player.id in starter_ids:
                if _rating(player) >= 90:
                    minutes += 2
                elif _rating(player) >= 80:
                    minutes += 1
            targets[player.id] = max(0, min(MAX_PLAYER_MINUTES, minutes))

        total = sum(targets.values())
        if total > 0 and total != TEAM_MINUTES:
            scale = TEAM_MINUTES / total
            for pid, minutes in targets.items():
                targets[pid] = max(0, min(MAX_PLAYER_MINUTES, round(minutes * scale)))
            self._spread_residual(targets, TEAM_MINUTES - sum(targets.values()))
        return targets

    @staticmethod
    def _spread_residual(targets: dict[str, int], residual: int) -> None:
        """Hand rounding leftovers out a minute at a time, heaviest minutes first, without breaking the cap."""
        step = 1 if residual > 0 else -1
        order = sorted(targets, key=lambda pid: targets[pid], reverse=True)
        while residual:
            open_ids = [pid for pid in order if 0 <= targets[pid] + step <= MAX_PLAYER_MINUTES]
            if not open_ids:
                break
            for pid in open_ids:
                if not residual:
                    break
                targets[pid] += step
                residual -= step

    def apply_variance(self, target_minutes: dict[str, int]) -> dict[str, int]:
        varied: dict[str, int] = {}
        for pid, minutes in target_minutes.items():
            if minutes <= 0:
                varied[pid] = 0
                continue
            value = minutes * (1 + (self._rng.random() * 2 - 1) * VARIANCE_RANGE)
            floor = VARIANCE_FLOOR if minutes >= VARIANCE_FLOOR_TARGET else 0
            varied[pid] = round(max(floor, min(MAX_PLAYER_MINUTES, value)))
        return varied

    def default_target_minutes(self, roster: list[Player], starter_ids: list[str]) -> dict[str, int]:
        targets: dict[str, int] = {}
        healthy_starters = [pid for pid in starter_ids if (p := self._find(roster, pid)) and not p.is_injured]
        per_starter = min(STARTER_MINUTES_BUDGET // len(healthy_starters), MAX_PLAYER_MINUTES) if healthy_starters else 0
        for pid in starter_ids:
            targets[pid] = per_starter if pid in healthy_starters else 0

        budget = TEAM_MINUTES - sum(targets.values())
        bench = sorted((p for p in roster if p.id not in starter_ids), key=_rating, reverse=True)
        slot = 0
        for player in bench:
            if player.is_injured or slot >= len(BENCH_MINUTE_SLOTS) or budget <= 0:
                targets[player.id] = 0
                continue
            minutes = min(BENCH_MINUTE_SLOTS[slot], budget)
            targets[player.id] = minutes
            budget -= minutes
            slot += 1
        return targets

    @staticmethod
    def _find(roster: list[Player], player_id: str) -> Player | None:
        for player in roster:
            if player.id == player_id:
                return player
        return None
