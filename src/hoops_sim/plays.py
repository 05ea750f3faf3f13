from __future__ import annotations

import random
from typing import Any

from .badges import BadgeRegistry, default_badge_registry
from .coaching import CoachingEngine
from .config import OFFENSIVE_SCHEMES
from .models import Player

TERMINALS = {"end_made", "end_turnover", "rebound_battle", "free_throws"}
TRANSITION_TEMPOS = {"transition", "fastbreak"}
LATE_CLOCK_CATEGORIES = {"isolation", "spot_up"}
LATE_CLOCK_SECONDS = 8
TRAILING_MARGIN = -10


def _out(next_action: str, probability: float | None = None, *, points: int | None = None,
         modifier: float | None = None) -> dict[str, Any]:
    outcome: dict[str, Any] = {"next": next_action}
    if probability is not None:
        outcome["probability"] = probability
    if points is not None:
        outcome["points"] = points
    if modifier is not None:
        outcome["modifier"] = modifier
    return outcome


def _shot_outcomes(points: int, *, fouled: float | None = None, blocked: float | None = None) -> dict[str, Any]:
    outcomes = {
        "made": _out("end_made", points=points),
        "missed": _out("rebound_battle"),
    }
    if fouled is not None:
        outcomes["fouled"] = _out("free_throws", fouled)
    if blocked is not None:
        outcomes["blocked"] = _out("rebound_battle", blocked)
    return outcomes


def _action(action_id: str, action_type: str, duration: float, actor: str, *,
            offense: list[str] | None = None, defense: list[str] | None = None,
            outcomes: dict[str, Any], movement: dict[str, tuple[float, float]] | None = None,
            target: str | None = None, receiver: str | None = None,
            shot_type: str | None = None) -> dict[str, Any]:
    action: dict[str, Any] = {
        "id": action_id,
        "type": action_type,
        "duration": duration,
        "actor": actor,
        "attributes": {"offense": offense or [], "defense": defense or []},
        "outcomes": outcomes,
        "movement": movement or {},
    }
    if target:
        action["target"] = target
    if receiver:
        action["receiver"] = receiver
    if shot_type:
        action["shot_type"] = shot_type
    return action


PAINT_BLOCK_CHANCE = 0.08

PLAYS: list[dict[str, Any]] = [
    {
        "id": "pick-and-roll-basic",
        "name": "Basic Pick and Roll",
        "category": "pick_and_roll",
        "difficulty": 55,
        "tempo": "halfcourt",
        "primary_positions": ["PG", "SG"],
        "tags": ["screen", "two_man_game", "versatile"],
        "formation": {
            "ball_handler": (0.5, 0.15), "screener": (0.5, 0.35), "wing1": (0.15, 0.25),
            "wing2": (0.85, 0.25), "corner": (0.85, 0.75),
        },
        "roles": {
            "ball_handler": ["PG", "SG", "SF"], "screener": ["C", "PF"], "wing1": ["SF", "SG"],
            "wing2": ["SG", "SF"], "corner": ["PF", "SF", "SG"],
        },
        "actions": [
            _action("screen_set", "screen", 1.5, "screener", target="ball_handler",
                    movement={"screener": (0.45, 0.28)},
                    offense=["strength"], defense=["perimeter_defense", "help_defense_iq"],
                    outcomes={
                        "success": _out("drive_decision", 0.7),
                        "hedge": _out("drive_decision", modifier=-0.15),
                        "switch": _out("drive_decision", 0.2),
                    }),
            _action("drive_decision", "decision", 0.5, "ball_handler",
                    movement={"ball_handler": (0.45, 0.35)},
                    offense=["pass_vision"], defense=["help_defense_iq"],
                    outcomes={
                        "drive": _out("drive_to_rim", 0.4),
                        "pull_up": _out("pull_up_jumper", 0.25),
                        "pocket_pass": _out("roll_pass", 0.35),
                    }),
            _action("drive_to_rim", "drive", 1.2, "ball_handler",
                    movement={"ball_handler": (0.5, 0.75), "screener": (0.35, 0.65)},
                    offense=["speed_with_ball", "layup", "driving_dunk"], defense=["interior_defense", "block"],
                    outcomes={
                        "finish": _out("finish_at_rim", 0.6),
                        "kick_out": _out("kick_out_three", 0.3),
                        "turnover": _out("end_turnover", 0.1),
                    }),
            _action("roll_pass", "pass", 0.8, "ball_handler", receiver="screener",
                    movement={"screener": (0.5, 0.75)},
                    offense=["pass_accuracy", "pass_iq"], defense=["pass_perception", "steal"],
                    outcomes={"success": _out("finish_at_rim", 0.75), "stolen": _out("end_turnover", 0.25)}),
            _action("finish_at_rim", "shot", 0.6, "dynamic", shot_type="paint",
                    movement={"dynamic": (0.5, 0.85)},
                    offense=["close_shot", "layup"], defense=["interior_defense", "block"],
                    outcomes=_shot_outcomes(2, fouled=0.15, blocked=PAINT_BLOCK_CHANCE)),
            _action("pull_up_jumper", "shot", 0.8, "ball_handler", shot_type="mid_range",
                    movement={"ball_handler": (0.45, 0.45)},
                    offense=["mid_range", "shot_iq"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(2)),
            _action("kick_out_three", "pass", 0.6, "ball_handler", receiver="wing2",
                    offense=["pass_accuracy"], defense=["closeout"],
                    outcomes={"success": _out("catch_and_shoot"), "stolen": _out("end_turnover", 0.1)}),
            _action("catch_and_shoot", "shot", 0.7, "wing2", shot_type="three_point",
                    offense=["three_point", "offensive_consistency"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(3)),
        ],
        "badge_effects": {
            "screen_set": ["brick_wall", "pick_dodger"],
            "drive_to_rim": ["slithery_finisher", "contact_finisher"],
            "pull_up_jumper": ["difficult_shots", "deadeye"],
            "catch_and_shoot": ["catch_and_shoot", "corner_specialist"],
        },
    },
    {
        "id": "isolation-wing",
        "name": "Wing Isolation",
        "category": "isolation",
        "difficulty": 60,
        "tempo": "halfcourt",
        "primary_positions": ["SF", "SG"],
        "tags": ["iso", "one_on_one", "scoring"],
        "formation": {
            "ball_handler": (0.25, 0.35), "post": (0.7, 0.6), "weak_wing": (0.85, 0.25),
            "corner1": (0.15, 0.75), "corner2": (0.85, 0.75),
        },
        "roles": {
            "ball_handler": ["SF", "SG", "PG"], "post": ["C", "PF"], "weak_wing": ["SG", "SF"],
            "corner1": ["PF", "SF"], "corner2": ["SG", "SF"],
        },
        "actions": [
            _action("iso_setup", "setup", 1.0, "ball_handler",
                    movement={"ball_handler": (0.25, 0.4)},
                    offense=["ball_handling"], defense=["perimeter_defense"],
                    outcomes={"attack": _out("iso_attack", 1.0)}),
            _action("iso_attack", "drive", 1.5, "ball_handler",
                    movement={"ball_handler": (0.4, 0.55)},
                    offense=["ball_handling", "speed_with_ball"], defense=["perimeter_defense", "steal"],
                    outcomes={
                        "beat_defender": _out("drive_finish", 0.45),
                        "step_back": _out("step_back_jumper", 0.3),
                        "pass_out": _out("kick_corner", 0.15),
                        "turnover": _out("end_turnover", 0.1),
                    }),
            _action("drive_finish", "shot", 1.0, "ball_handler", shot_type="paint",
                    movement={"ball_handler": (0.5, 0.8)},
                    offense=["layup", "driving_dunk", "draw_foul"],
                    defense=["interior_defense", "block", "help_defense_iq"],
                    outcomes=_shot_outcomes(2, fouled=0.2, blocked=PAINT_BLOCK_CHANCE)),
            _action("step_back_jumper", "shot", 0.8, "ball_handler", shot_type="mid_range",
                    movement={"ball_handler": (0.35, 0.45)},
                    offense=["mid_range", "shot_iq"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(2)),
            _action("kick_corner", "pass", 0.5, "ball_handler", receiver="corner1",
                    offense=["pass_accuracy"], defense=["closeout"],
                    outcomes={"success": _out("corner_three"), "stolen": _out("end_turnover", 0.1)}),
            _action("corner_three", "shot", 0.7, "corner1", shot_type="three_point",
                    offense=["three_point"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(3)),
        ],
        "badge_effects": {
            "iso_attack": ["ankle_breaker", "tight_handles"],
            "drive_finish": ["slithery_finisher", "contact_finisher"],
            "step_back_jumper": ["difficult_shots", "space_creator"],
        },
    },
    {
        "id": "post-up-low",
        "name": "Low Post Up",
        "category": "post_up",
        "difficulty": 50,
        "tempo": "halfcourt",
        "primary_positions": ["C", "PF"],
        "tags": ["post", "inside", "big_man"],
        "formation": {
            "post_player": (0.35, 0.65), "point_guard": (0.5, 0.15), "wing1": (0.15, 0.3),
            "wing2": (0.85, 0.3), "weak_side": (0.85, 0.65),
        },
        "roles": {
            "post_player": ["C", "PF"], "point_guard": ["PG", "SG"], "wing1": ["SF", "SG"],
            "wing2": ["SG", "SF"], "weak_side": ["PF", "SF"],
        },
        "actions": [
            _action("entry_pass", "pass", 1.0, "point_guard", receiver="post_player",
                    movement={"post_player": (0.35, 0.7)},
                    offense=["pass_accuracy"], defense=["pass_perception", "steal"],
                    outcomes={"success": _out("post_moves", 0.85), "stolen": _out("end_turnover", 0.15)}),
            _action("post_moves", "post", 2.0, "post_player",
                    movement={"post_player": (0.4, 0.75)},
                    offense=["post_control", "strength"], defense=["interior_defense", "strength"],
                    outcomes={
                        "hook_shot": _out("post_hook", 0.35),
                        "fade_away": _out("post_fade", 0.25),
                        "drop_step": _out("post_dunk", 0.25),
                        "kick_out": _out("kick_out_wing", 0.15),
                    }),
            _action("post_hook", "shot", 0.8, "post_player", shot_type="paint",
                    movement={"post_player": (0.45, 0.8)},
                    offense=["post_hook", "close_shot"], defense=["interior_defense", "block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
            _action("post_fade", "shot", 0.9, "post_player", shot_type="mid_range",
                    movement={"post_player": (0.3, 0.7)},
                    offense=["post_fade", "mid_range"], defense=["interior_defense"],
                    outcomes=_shot_outcomes(2)),
            _action("post_dunk", "shot", 0.6, "post_player", shot_type="paint",
                    movement={"post_player": (0.5, 0.85)},
                    offense=["standing_dunk", "strength"], defense=["interior_defense", "block"],
                    outcomes=_shot_outcomes(2, fouled=0.25, blocked=PAINT_BLOCK_CHANCE)),
            _action("kick_out_wing", "pass", 0.6, "post_player", receiver="wing2",
                    offense=["pass_accuracy", "pass_vision"], defense=["closeout"],
                    outcomes={"success": _out("wing_three"), "stolen": _out("end_turnover", 0.1)}),
            _action("wing_three", "shot", 0.7, "wing2", shot_type="three_point",
                    offense=["three_point"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(3)),
        ],
        "badge_effects": {
            "post_moves": ["post_spin_technician", "backdown_punisher"],
            "post_hook": ["hook_specialist"],
            "post_fade": ["fade_ace"],
            "post_dunk": ["posterizer", "rise_up"],
        },
    },
    {
        "id": "fast-break-3on2",
        "name": "3-on-2 Fast Break",
        "category": "transition",
        "difficulty": 40,
        "tempo": "fastbreak",
        "primary_positions": ["PG", "SG", "SF"],
        "tags": ["transition", "fast", "easy_basket"],
        "formation": {
            "ball_handler": (0.5, 0.1), "trailer1": (0.25, 0.15), "trailer2": (0.75, 0.15),
            "rim_runner": (0.5, 0.5), "safety": (0.5, 0.05),
        },
        "roles": {
            "ball_handler": ["PG", "SG", "SF"], "trailer1": ["SG", "SF"], "trailer2": ["SF", "SG"],
            "rim_runner": ["C", "PF"], "safety": ["PF", "C"],
        },
        "actions": [
            _action("push_ball", "drive", 2.0, "ball_handler",
                    movement={"ball_handler": (0.5, 0.5), "trailer1": (0.2, 0.4), "trailer2": (0.8, 0.4)},
                    offense=["speed", "ball_handling"], defense=["speed"],
                    outcomes={
                        "numbers": _out("attack_rim", 0.7),
                        "pull_up": _out("transition_three", 0.2),
                        "turnover": _out("end_turnover", 0.1),
                    }),
            _action("attack_rim", "decision", 0.5, "ball_handler",
                    movement={"ball_handler": (0.5, 0.65)},
                    offense=["pass_vision"], defense=["help_defense_iq"],
                    outcomes={
                        "finish": _out("layup_finish", 0.5),
                        "dish_left": _out("trailer_layup_left", 0.25),
                        "dish_right": _out("trailer_layup_right", 0.25),
                    }),
            _action("layup_finish", "shot", 0.8, "ball_handler", shot_type="paint",
                    movement={"ball_handler": (0.5, 0.85)},
                    offense=["layup", "speed_with_ball"], defense=["block"],
                    outcomes=_shot_outcomes(2, fouled=0.2, blocked=PAINT_BLOCK_CHANCE)),
            _action("trailer_layup_left", "pass", 0.4, "ball_handler", receiver="trailer1",
                    movement={"trailer1": (0.35, 0.75)},
                    offense=["pass_accuracy"], defense=["steal"],
                    outcomes={"success": _out("finish_trailer", 0.9), "stolen": _out("end_turnover", 0.1)}),
            _action("trailer_layup_right", "pass", 0.4, "ball_handler", receiver="trailer2",
                    movement={"trailer2": (0.65, 0.75)},
                    offense=["pass_accuracy"], defense=["steal"],
                    outcomes={"success": _out("finish_trailer", 0.9), "stolen": _out("end_turnover", 0.1)}),
            _action("finish_trailer", "shot", 0.6, "dynamic", shot_type="paint",
                    movement={"dynamic": (0.5, 0.85)},
                    offense=["layup"], defense=["block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
            _action("transition_three", "shot", 0.7, "ball_handler", shot_type="three_point",
                    movement={"ball_handler": (0.5, 0.25)},
                    offense=["three_point"], defense=["closeout"],
                    outcomes=_shot_outcomes(3)),
        ],
        "badge_effects": {
            "push_ball": ["downhill", "quick_first_step"],
            "layup_finish": ["acrobat", "pro_touch"],
            "transition_three": ["limitless_range"],
        },
    },
    {
        "id": "motion-flex",
        "name": "Flex Motion",
        "category": "motion",
        "difficulty": 70,
        "tempo": "halfcourt",
        "primary_positions": ["PG"],
        "tags": ["motion", "screens", "team_play"],
        "formation": {
            "point": (0.5, 0.15), "wing1": (0.15, 0.35), "wing2": (0.85, 0.35),
            "block1": (0.3, 0.75), "block2": (0.7, 0.75),
        },
        "roles": {
            "point": ["PG", "SG"], "wing1": ["SF", "SG"], "wing2": ["SG", "SF"],
            "block1": ["PF", "C"], "block2": ["C", "PF"],
        },
        "actions": [
            _action("flex_screen", "screen", 1.5, "block1", target="block2",
                    movement={"block2": (0.35, 0.7), "block1": (0.5, 0.8)},
                    offense=["strength"], defense=["help_defense_iq"],
                    outcomes={"cutter_open": _out("flex_cut_pass", 0.5), "screener_open": _out("down_screen", 0.5)}),
            _action("flex_cut_pass", "pass", 0.6, "wing1", receiver="block2",
                    movement={"block2": (0.4, 0.8)},
                    offense=["pass_accuracy", "pass_vision"], defense=["steal", "pass_perception"],
                    outcomes={"success": _out("flex_layup", 0.8), "stolen": _out("end_turnover", 0.2)}),
            _action("flex_layup", "shot", 0.6, "block2", shot_type="paint",
                    movement={"block2": (0.5, 0.85)},
                    offense=["layup", "close_shot"], defense=["interior_defense", "block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
            _action("down_screen", "screen", 1.2, "block2", target="wing2",
                    movement={"wing2": (0.7, 0.5), "block2": (0.75, 0.6)},
                    offense=["strength"], defense=["perimeter_defense"],
                    outcomes={"shooter_open": _out("wing_catch_shoot", 0.6), "curl_drive": _out("curl_to_rim", 0.4)}),
            _action("wing_catch_shoot", "shot", 0.7, "wing2", shot_type="three_point",
                    offense=["three_point", "offensive_consistency"], defense=["perimeter_defense", "closeout"],
                    outcomes=_shot_outcomes(3)),
            _action("curl_to_rim", "drive", 1.0, "wing2",
                    movement={"wing2": (0.55, 0.75)},
                    offense=["speed_with_ball", "layup"], defense=["help_defense_iq", "block"],
                    outcomes={"finish": _out("curl_finish", 0.7), "turnover": _out("end_turnover", 0.3)}),
            _action("curl_finish", "shot", 0.6, "wing2", shot_type="paint",
                    movement={"wing2": (0.5, 0.85)},
                    offense=["layup"], defense=["block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
        ],
        "badge_effects": {
            "flex_screen": ["brick_wall"],
            "flex_layup": ["pro_touch"],
            "wing_catch_shoot": ["catch_and_shoot"],
        },
    },
    {
        "id": "spot-up-corner",
        "name": "Corner Spot Up",
        "category": "spot_up",
        "difficulty": 45,
        "tempo": "halfcourt",
        "primary_positions": ["SG", "SF"],
        "tags": ["three_point", "catch_shoot", "spacing"],
        "formation": {
            "shooter": (0.1, 0.75), "ball_handler": (0.5, 0.2), "screener": (0.6, 0.4),
            "wing": (0.85, 0.35), "post": (0.7, 0.7),
        },
        "roles": {
            "shooter": ["SG", "SF", "PF"], "ball_handler": ["PG", "SG"], "screener": ["C", "PF"],
            "wing": ["SF", "SG"], "post": ["PF", "C"],
        },
        "actions": [
            _action("drive_and_kick", "drive", 1.5, "ball_handler",
                    movement={"ball_handler": (0.4, 0.5)},
                    offense=["speed_with_ball", "pass_vision"], defense=["perimeter_defense", "help_defense_iq"],
                    outcomes={
                        "kick_corner": _out("corner_pass", 0.6),
                        "finish": _out("floater", 0.3),
                        "turnover": _out("end_turnover", 0.1),
                    }),
            _action("corner_pass", "pass", 0.5, "ball_handler", receiver="shooter",
                    offense=["pass_accuracy"], defense=["closeout"],
                    outcomes={"success": _out("corner_three", 0.9), "stolen": _out("end_turnover", 0.1)}),
            _action("corner_three", "shot", 0.7, "shooter", shot_type="three_point",
                    offense=["three_point", "offensive_consistency"], defense=["perimeter_defense", "closeout"],
                    outcomes=_shot_outcomes(3)),
            _action("floater", "shot", 0.6, "ball_handler", shot_type="paint",
                    movement={"ball_handler": (0.45, 0.65)},
                    offense=["close_shot", "layup"], defense=["interior_defense"],
                    outcomes=_shot_outcomes(2)),
        ],
        "badge_effects": {
            "corner_three": ["corner_specialist", "catch_and_shoot"],
            "floater": ["floater_specialist", "tear_dropper"],
        },
    },
    {
        "id": "back-cut",
        "name": "Back Door Cut",
        "category": "cut",
        "difficulty": 55,
        "tempo": "halfcourt",
        "primary_positions": ["SF", "SG"],
        "tags": ["cut", "layup", "read_defense"],
        "formation": {
            "cutter": (0.15, 0.35), "passer": (0.5, 0.15), "spacer1": (0.85, 0.35),
            "spacer2": (0.25, 0.7), "spacer3": (0.75, 0.7),
        },
        "roles": {
            "cutter": ["SF", "SG", "PF"], "passer": ["PG", "SG"], "spacer1": ["SG", "SF"],
            "spacer2": ["PF", "SF"], "spacer3": ["C", "PF"],
        },
        "actions": [
            _action("setup_cut", "setup", 1.0, "cutter",
                    movement={"cutter": (0.2, 0.3)},
                    offense=["speed"], defense=["perimeter_defense"],
                    outcomes={
                        "defender_overplays": _out("back_cut", 0.6),
                        "defender_sags": _out("catch_and_attack", 0.4),
                    }),
            _action("back_cut", "cut", 1.2, "cutter",
                    movement={"cutter": (0.4, 0.75)},
                    offense=["speed", "acceleration"], defense=["help_defense_iq"],
                    outcomes={"open": _out("back_cut_pass", 0.7), "covered": _out("reset_offense", 0.3)}),
            _action("back_cut_pass", "pass", 0.5, "passer", receiver="cutter",
                    movement={"cutter": (0.5, 0.8)},
                    offense=["pass_accuracy", "pass_vision"], defense=["steal", "pass_perception"],
                    outcomes={"success": _out("cut_layup", 0.8), "stolen": _out("end_turnover", 0.2)}),
            _action("cut_layup", "shot", 0.6, "cutter", shot_type="paint",
                    movement={"cutter": (0.5, 0.85)},
                    offense=["layup", "hands"], defense=["block"],
                    outcomes=_shot_outcomes(2, fouled=0.15, blocked=PAINT_BLOCK_CHANCE)),
            _action("catch_and_attack", "pass", 0.6, "passer", receiver="cutter",
                    movement={"cutter": (0.25, 0.4)},
                    offense=["pass_accuracy"], defense=["steal"],
                    outcomes={"success": _out("wing_attack", 0.9), "stolen": _out("end_turnover", 0.1)}),
            _action("wing_attack", "drive", 1.0, "cutter",
                    movement={"cutter": (0.4, 0.6)},
                    offense=["ball_handling", "speed_with_ball"], defense=["perimeter_defense"],
                    outcomes={
                        "finish": _out("attack_layup", 0.5),
                        "pull_up": _out("wing_jumper", 0.35),
                        "turnover": _out("end_turnover", 0.15),
                    }),
            _action("attack_layup", "shot", 0.7, "cutter", shot_type="paint",
                    movement={"cutter": (0.5, 0.8)},
                    offense=["layup", "driving_dunk"], defense=["interior_defense", "block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
            _action("wing_jumper", "shot", 0.7, "cutter", shot_type="mid_range",
                    offense=["mid_range"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(2)),
            _action("reset_offense", "reset", 2.0, "passer",
                    outcomes={"new_action": _out("catch_and_attack", 1.0)}),
        ],
        "badge_effects": {
            "back_cut": ["lob_city_finisher"],
            "cut_layup": ["acrobat", "pro_touch"],
        },
    },
    {
        "id": "horns-set",
        "name": "Horns Set",
        "category": "motion",
        "difficulty": 65,
        "tempo": "halfcourt",
        "primary_positions": ["PG"],
        "tags": ["versatile", "options", "spacing"],
        "formation": {
            "point": (0.5, 0.15), "elbow1": (0.35, 0.4), "elbow2": (0.65, 0.4),
            "corner1": (0.1, 0.75), "corner2": (0.9, 0.75),
        },
        "roles": {
            "point": ["PG", "SG"], "elbow1": ["PF", "C"], "elbow2": ["C", "PF"],
            "corner1": ["SF", "SG"], "corner2": ["SG", "SF"],
        },
        "actions": [
            _action("horns_entry", "decision", 1.0, "point",
                    movement={"point": (0.5, 0.25)},
                    offense=["pass_vision"], defense=["perimeter_defense"],
                    outcomes={
                        "pnr_left": _out("horns_pnr_left", 0.4),
                        "pnr_right": _out("horns_pnr_right", 0.4),
                        "dho": _out("dribble_handoff", 0.2),
                    }),
            _action("horns_pnr_left", "screen", 1.3, "elbow1", target="point",
                    movement={"point": (0.3, 0.35), "elbow1": (0.25, 0.4)},
                    offense=["strength"], defense=["perimeter_defense", "help_defense_iq"],
                    outcomes={
                        "drive": _out("horns_drive", 0.5),
                        "pop": _out("elbow_pop", 0.3),
                        "roll": _out("elbow_roll", 0.2),
                    }),
            _action("horns_pnr_right", "screen", 1.3, "elbow2", target="point",
                    movement={"point": (0.7, 0.35), "elbow2": (0.75, 0.4)},
                    offense=["strength"], defense=["perimeter_defense", "help_defense_iq"],
                    outcomes={
                        "drive": _out("horns_drive", 0.5),
                        "pop": _out("elbow_pop", 0.3),
                        "roll": _out("elbow_roll", 0.2),
                    }),
            _action("horns_drive", "drive", 1.0, "point",
                    movement={"point": (0.5, 0.7)},
                    offense=["speed_with_ball", "layup"], defense=["help_defense_iq", "block"],
                    outcomes={
                        "finish": _out("horns_finish", 0.5),
                        "kick": _out("kick_corner_horns", 0.4),
                        "turnover": _out("end_turnover", 0.1),
                    }),
            _action("horns_finish", "shot", 0.6, "point", shot_type="paint",
                    movement={"point": (0.5, 0.85)},
                    offense=["layup", "close_shot"], defense=["interior_defense", "block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
            _action("elbow_pop", "pass", 0.6, "point", receiver="elbow1",
                    movement={"elbow1": (0.25, 0.3)},
                    offense=["pass_accuracy"], defense=["closeout"],
                    outcomes={"success": _out("elbow_three", 0.9), "stolen": _out("end_turnover", 0.1)}),
            _action("elbow_three", "shot", 0.8, "elbow1", shot_type="three_point",
                    offense=["three_point", "mid_range"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(3)),
            _action("elbow_roll", "pass", 0.6, "point", receiver="elbow1",
                    movement={"elbow1": (0.4, 0.75)},
                    offense=["pass_accuracy", "pass_vision"], defense=["pass_perception"],
                    outcomes={"success": _out("roll_finish", 0.75), "stolen": _out("end_turnover", 0.25)}),
            _action("roll_finish", "shot", 0.6, "elbow1", shot_type="paint",
                    movement={"elbow1": (0.5, 0.85)},
                    offense=["close_shot", "layup"], defense=["interior_defense", "block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
            _action("kick_corner_horns", "pass", 0.5, "point", receiver="corner1",
                    offense=["pass_accuracy"], defense=["closeout"],
                    outcomes={"success": _out("corner_shot_horns"), "stolen": _out("end_turnover", 0.1)}),
            _action("corner_shot_horns", "shot", 0.7, "corner1", shot_type="three_point",
                    offense=["three_point"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(3)),
            _action("dribble_handoff", "handoff", 1.2, "point", receiver="corner1",
                    movement={"point": (0.25, 0.5), "corner1": (0.3, 0.45)},
                    offense=["ball_handling"], defense=["perimeter_defense"],
                    outcomes={"shooter_attack": _out("dho_attack", 0.7), "turnover": _out("end_turnover", 0.3)}),
            _action("dho_attack", "drive", 1.0, "corner1",
                    movement={"corner1": (0.45, 0.6)},
                    offense=["speed_with_ball", "ball_handling"], defense=["perimeter_defense"],
                    outcomes={"pull_up": _out("dho_jumper", 0.6), "finish": _out("dho_layup", 0.4)}),
            _action("dho_jumper", "shot", 0.7, "corner1", shot_type="mid_range",
                    offense=["mid_range"], defense=["perimeter_defense"],
                    outcomes=_shot_outcomes(2)),
            _action("dho_layup", "shot", 0.6, "corner1", shot_type="paint",
                    movement={"corner1": (0.5, 0.8)},
                    offense=["layup"], defense=["block"],
                    outcomes=_shot_outcomes(2, blocked=PAINT_BLOCK_CHANCE)),
        ],
        "badge_effects": {
            "horns_pnr_left": ["brick_wall"],
            "horns_pnr_right": ["brick_wall"],
            "elbow_three": ["catch_and_shoot"],
            "corner_shot_horns": ["corner_specialist"],
        },
    },
]


def validate_catalog(plays: list[dict[str, Any]], badges: BadgeRegistry) -> None:
    seen: set[str] = set()
    for play in plays:
        if play["id"] in seen:
            raise ValueError(f"Duplicate play id {play['id']!r}.")
        seen.add(play["id"])
        action_ids = {action["id"] for action in play["actions"]}
        roles = set(play["roles"])
        for action in play["actions"]:
            for outcome_name, outcome in action["outcomes"].items():
                nxt = outcome["next"]
                if nxt not in action_ids and nxt not in TERMINALS and not nxt.startswith("end_"):
                    raise ValueError(
                        f"Play {play['id']} action {action['id']} outcome {outcome_name} points at unknown {nxt!r}."
                    )
            for role_key in ("actor", "target", "receiver"):
                role = action.get(role_key)
                if role and role != "dynamic" and role not in roles:
                    raise ValueError(f"Play {play['id']} action {action['id']} uses unknown role {role!r}.")
        for action_id, badge_ids in play.get("badge_effects", {}).items():
            if action_id not in action_ids:
                raise ValueError(f"Play {play['id']} has badge effects for unknown action {action_id!r}.")
            badges.validate_ids(badge_ids)


class PlayCatalogService:
    def __init__(
        self,
        plays: list[dict[str, Any]] | None = None,
        coaching: CoachingEngine | None = None,
        badges: BadgeRegistry | None = None,
        rng: random.Random | None = None,
    ) -> None:
        self.plays = plays if plays is not None else PLAYS
        self.coaching = coaching or CoachingEngine()
        self._rng = rng or random.Random()
        validate_catalog(self.plays, badges or default_badge_registry())

    def get_play(self, play_id: str) -> dict[str, Any] | None:
        for play in self.plays:
            if play["id"] == play_id:
                return play
        return None

    def get_plays_by_category(self, category: str) -> list[dict[str, Any]]:
        return [play for play in self.plays if play["category"] == category]

    def get_plays_by_tags(self, tags: list[str]) -> list[dict[str, Any]]:
        return [play for play in self.plays if all(tag in play.get("tags", []) for tag in tags)]

    def get_plays_by_tempo(self, tempo: str) -> list[dict[str, Any]]:
        return [play for play in self.plays if play.get("tempo") == tempo]

    def get_action(self, play: dict[str, Any], action_id: str) -> dict[str, Any] | None:
        for action in play["actions"]:
            if action["id"] == action_id:
                return action
        return None

    def get_coaching_schemes(self) -> dict[str, str]:
        return {key: str(scheme["description"]) for key, scheme in OFFENSIVE_SCHEMES.items()}

    def play_weight(self, play: dict[str, Any], lineup: list[Player], scheme: str, context: dict[str, Any]) -> float:
        weight = 1.0
        scheme_weights = self.coaching.get_scheme_play_weights(scheme)
        if play["category"] in scheme_weights:
            weight *= scheme_weights[play["category"]]

        primary = play.get("primary_positions", [])
        position_fit = any((p.position or "SF") in primary for p in lineup)
        weight *= 1.0 if position_fit else 0.5

        if lineup:
            avg_iq = sum(p.attribute("mental", "basketball_iq", 50) for p in lineup) / len(lineup)
        else:
            avg_iq = 50
        weight *= max(0.5, 1 - (play.get("difficulty", 50) - avg_iq) / 100)

        if context.get("shot_clock", 24) < LATE_CLOCK_SECONDS and play["category"] in LATE_CLOCK_CATEGORIES:
            weight *= 1.5
        if context.get("score_differential", 0) < TRAILING_MARGIN and (
            play["category"] == "isolation" or "three_point" in play.get("tags", [])
        ):
            weight *= 1.3
        return weight

    def select_play(self, lineup: list[Player], scheme: str, context: dict[str, Any] | None = None) -> dict[str, Any]:
        context = context or {}
        if context.get("is_transition"):
            candidates = [p for p in self.plays if p.get("tempo") in TRANSITION_TEMPOS]
        else:
            candidates = [p for p in self.plays if p.get("tempo") == "halfcourt"]
        if not candidates:
            candidates = list(self.plays)

        weighted = [(play, self.play_weight(play, lineup, scheme, context)) for play in candidates]
        total = sum(weight for _play, weight in weighted)
        if total <= 0:
            return weighted[0][0] if weighted else self.plays[0]

        roll = self._rng.random() * total
        cumulative = 0.0
        for play, weight in weighted:
            cumulative += weight
            if cumulative >= roll:
                return play
        return weighted[-1][0]
