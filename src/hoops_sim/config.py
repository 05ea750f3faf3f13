"""Static simulation and evolution configuration constants."""

QUARTERS = 4
QUARTER_LENGTH = 10
SHOT_CLOCK = 24
OVERTIME_LENGTH = 5
TOTAL_GAME_MINUTES = 40.0
TEAM_MINUTES = 200

POSITIONS: tuple[str, ...] = ("PG", "SG", "SF", "PF", "C")
ATTRIBUTE_CATEGORIES: tuple[str, ...] = ("offense", "defense", "physical", "mental")
BADGE_LEVELS: tuple[str, ...] = ("bronze", "silver", "gold", "hof")

ATTRIBUTE_MIN = 25
ATTRIBUTE_MAX = 99
OVERALL_MIN = 40
OVERALL_MAX = 99

AGE_BRACKETS: dict[str, dict[str, float]] = {
    "youth": {"min": 19, "max": 23, "development": 1.5, "regression": 0.0},
    "rising": {"min": 24, "max": 26, "development": 1.0, "regression": 0.0},
    "prime": {"min": 27, "max": 31, "development": 0.3, "regression": 0.1},
    "decline": {"min": 32, "max": 35, "development": 0.0, "regression": 0.5},
    "veteran": {"min": 36, "max": 45, "development": 0.0, "regression": 1.0},
}

ATTRIBUTE_PROFILES: dict[str, dict[str, object]] = {
    "physical": {
        "peak_age": 26, "decline_start": 29, "decline_rate": 0.8, "can_improve_past_peak": False,
        "attributes": ["speed", "acceleration", "vertical", "stamina"],
    },
    "strength": {
        "peak_age": 30, "decline_start": 33, "decline_rate": 0.4, "can_improve_past_peak": False,
        "attributes": ["strength"],
    },
    "shooting": {
        "peak_age": 29, "decline_start": 34, "decline_rate": 0.3, "can_improve_past_peak": True,
        "attributes": ["three_point", "mid_range", "free_throw", "close_shot"],
    },
    "mental": {
        "peak_age": 32, "decline_start": 37, "decline_rate": 0.2, "can_improve_past_peak": True,
        "attributes": ["basketball_iq", "clutch", "consistency", "intangibles"],
    },
    "skill": {
        "peak_age": 28, "decline_start": 33, "decline_rate": 0.4, "can_improve_past_peak": True,
        "attributes": ["ball_handling", "pass_accuracy", "pass_vision", "pass_iq", "post_control", "layup"],
    },
    "finishing": {
        "peak_age": 27, "decline_start": 31, "decline_rate": 0.5, "can_improve_past_peak": False,
        "attributes": ["standing_dunk", "driving_dunk", "draw_foul"],
    },
    "defense": {
        "peak_age": 28, "decline_start": 32, "decline_rate": 0.4, "can_improve_past_peak": True,
        "attributes": [
            "perimeter_defense", "interior_defense", "steal", "block", "help_defense_iq", "pass_perception",
        ],
    },
    "rebounding": {
        "peak_age": 29, "decline_start": 33, "decline_rate": 0.3, "can_improve_past_peak": True,
        "attributes": ["offensive_rebound", "defensive_rebound"],
    },
}

INJURY_BASE_CHANCE = 0.001
INJURY_CHANCE_CAP = 0.05
INJURY_RISK_MULTIPLIERS: dict[str, float] = {"L": 0.5, "M": 1.0, "H": 2.0}
PLAYOFF_INJURY_MULTIPLIER = 1.2
INJURY_FACTORS: dict[str, float] = {
    "durability": 0.005,
    "age_start": 30,
    "age": 0.0005,
    "fatigue": 0.01,
    "minutes_baseline": 36,
    "minutes": 0.001,
}
RECOVERY_ESTIMATES: tuple[tuple[int, str], ...] = (
    (5, "day-to-day"),
    (14, "1-2 weeks"),
    (28, "2-4 weeks"),
    (42, "4-6 weeks"),
    (60, "6-8 weeks"),
)

# Ordered; severity is drawn by cumulative weight.
INJURY_TYPES: dict[str, dict[str, object]] = {
    "minor": {
        "duration": (1, 5),
        "weight": 60,
        "permanent_impact": 0,
        "injuries": [
            ("sprained_ankle", "Sprained Ankle"),
            ("bruised_knee", "Bruised Knee"),
            ("sore_back", "Sore Back"),
            ("finger_sprain", "Finger Sprain"),
            ("hip_soreness", "Hip Soreness"),
            ("wrist_soreness", "Wrist Soreness"),
        ],
    },
    "moderate": {
        "duration": (6, 20),
        "weight": 30,
        "permanent_impact": 0,
        "injuries": [
            ("hamstring_strain", "Hamstring Strain"),
            ("groin_injury", "Groin Injury"),
            ("calf_strain", "Calf Strain"),
            ("shoulder_sprain", "Shoulder Sprain"),
            ("quad_strain", "Quad Strain"),
            ("ankle_sprain_grade2", "Grade 2 Ankle Sprain"),
        ],
    },
    "severe": {
        "duration": (21, 60),
        "weight": 8,
        "permanent_impact": 1,
        "injuries": [
            ("torn_meniscus", "Torn Meniscus"),
            ("broken_hand", "Broken Hand"),
            ("stress_fracture", "Stress Fracture"),
            ("concussion", "Concussion"),
            ("torn_ligament", "Torn Ligament"),
        ],
    },
    "season_ending": {
        "duration": (61, 82),
        "weight": 2,
        "permanent_impact": 3,
        "injuries": [
            ("acl_tear", "ACL Tear"),
            ("achilles_rupture", "Achilles Rupture"),
            ("broken_leg", "Broken Leg"),
            ("major_back_injury", "Major Back Injury"),
            ("patellar_tendon_tear", "Patellar Tendon Tear"),
        ],
    },
}

PERSONALITY_TRAITS: dict[str, dict[str, object]] = {
    "competitor": {"development_bonus": 0.1, "clutch_boost": 5, "playoff_performance": 0.05},
    "leader": {"chemistry_boost": 5, "team_development": 0.05, "morale_stability": 0.3},
    "mentor": {"young_player_boost": 0.15, "own_development_penalty": -0.05, "max_mentees": 2},
    "hot_head": {"morale_volatility": 2.0, "tech_foul_chance": 0.02, "ejection_chance": 0.005},
    "ball_hog": {"usage_boost": 0.1, "chemistry_penalty": -3, "assist_penalty": -0.1},
    "team_player": {"chemistry_boost": 3, "assist_boost": 0.1, "morale_stability": 0.5},
    "joker": {"chemistry_boost": 2, "morale_boost": 0.05},
    "quiet": {"morale_stability": 0.7, "media_profile_low": True},
    "media_darling": {"contract_bonus": 0.05, "pressure_penalty": -0.02},
}

MENTEE_MAX_AGE = 24

BADGE_SYNERGIES: dict[str, object] = {
    "development_boost_by_level": {"bronze": 0.03, "silver": 0.05, "gold": 0.06, "hof": 0.08},
    "development_boost_max": 0.15,
    "in_game_boost": 0.03,
    "in_game_boost_max": 0.12,
    "chemistry_contribution": 2,
    "dynamic_duo_boost": 0.02,
    "dynamic_duo_min_synergies": 2,
    "dynamic_duo_min_level": 3,
}

MORALE: dict[str, object] = {
    "starting": 80,
    "min": 0,
    "max": 100,
    "trade_request_threshold": 25,
    "factors": {
        "win": 1,
        "loss": -1,
        "winning_streak_bonus": 2,
        "losing_streak_penalty": -2,
        "playing_time_met": 1,
        "playing_time_unmet": -3,
        "playing_time_exceeded": 2,
        "final_contract_year": -5,
        "extension_offered": 10,
        "underpaid": -3,
        "star_treatment": 2,
    },
    # Checked top-down; first threshold the morale meets wins.
    "effects": {
        "high": {"threshold": 80, "development_modifier": 0.05, "performance_modifier": 0.02},
        "normal": {"threshold": 50, "development_modifier": 0.0, "performance_modifier": 0.0},
        "low": {"threshold": 25, "development_modifier": -0.05, "performance_modifier": -0.02},
        "critical": {"threshold": 0, "development_modifier": -0.1, "performance_modifier": -0.05},
    },
}

STAR_EXPECTED_MINUTES: dict[str, int] = {"rookie": 27, "pro": 28, "all_star": 29, "hall_of_fame": 31}
EXPECTED_MINUTES_BY_RATING: tuple[tuple[int, int], ...] = ((80, 28), (75, 24), (70, 18), (65, 12))
EXPECTED_MINUTES_FLOOR = 6

DEVELOPMENT: dict[str, float] = {
    "base_rate": 0.1,
    "work_ethic_factor": 0.5,
    "playing_time_factor": 0.3,
    "mentor_factor": 0.2,
    "badge_synergy_factor": 0.15,
    "max_season_gain": 5,
    "max_season_loss": 4,
    "opportunity_multiplier": 1.5,
}

DIFFICULTY_SETTINGS: dict[str, dict[str, object]] = {
    "rookie": {
        "micro_dev_threshold_high": 13,
        "micro_dev_threshold_low": 6,
        "micro_dev_gain_min": 0.15,
        "micro_dev_gain_max": 0.4,
        "micro_dev_loss_min": 0.04,
        "micro_dev_loss_max": 0.08,
        "min_minutes_for_regression": 12,
        "stat_thresholds": {"points": 12, "assists": 3, "rebounds": 5, "steals": 1, "blocks": 1, "threes": 2},
        "development_multiplier": 1.3,
        "regression_multiplier": 0.7,
    },
    "pro": {
        "micro_dev_threshold_high": 16,
        "micro_dev_threshold_low": 8,
        "micro_dev_gain_min": 0.1,
        "micro_dev_gain_max": 0.3,
        "micro_dev_loss_min": 0.05,
        "micro_dev_loss_max": 0.1,
        "min_minutes_for_regression": 10,
        "stat_thresholds": {"points": 14, "assists": 4, "rebounds": 5, "steals": 1, "blocks": 1, "threes": 2},
        "development_multiplier": 1.0,
        "regression_multiplier": 1.0,
    },
    "all_star": {
        "micro_dev_threshold_high": 19,
        "micro_dev_threshold_low": 10,
        "micro_dev_gain_min": 0.08,
        "micro_dev_gain_max": 0.25,
        "micro_dev_loss_min": 0.06,
        "micro_dev_loss_max": 0.15,
        "min_minutes_for_regression": 10,
        "stat_thresholds": {"points": 16, "assists": 5, "rebounds": 6, "steals": 2, "blocks": 2, "threes": 2},
        "development_multiplier": 0.85,
        "regression_multiplier": 1.15,
    },
    "hall_of_fame": {
        "micro_dev_threshold_high": 22,
        "micro_dev_threshold_low": 12,
        "micro_dev_gain_min": 0.05,
        "micro_dev_gain_max": 0.2,
        "micro_dev_loss_min": 0.08,
        "micro_dev_loss_max": 0.2,
        "min_minutes_for_regression": 8,
        "stat_thresholds": {"points": 18, "assists": 6, "rebounds": 7, "steals": 2, "blocks": 2, "threes": 3},
        "development_multiplier": 0.7,
        "regression_multiplier": 1.3,
    },
}
DEFAULT_DIFFICULTY = "pro"

STREAKS: dict[str, float] = {
    "hot_streak_games": 3,
    "hot_streak_threshold": 22,
    "hot_streak_bonus": 2,
    "cold_streak_games": 3,
    "cold_streak_threshold": 8,
    "cold_streak_penalty": -2,
    "max_streak_length": 10,
}

RETIREMENT: dict[str, float] = {
    "min_age": 35,
    "base_chance": 0.1,
    "age_factor": 0.1,
    "low_rating_threshold": 65,
    "low_rating_bonus": 0.15,
    "injury_history_factor": 0.05,
}

FATIGUE: dict[str, object] = {
    "minute_thresholds": [
        {"min": 0, "max": 8, "type": "recovery", "base": 6.4},
        {"min": 9, "max": 20, "type": "gain", "base": 1.0},
        {"min": 21, "max": 30, "type": "gain", "base": 3.2},
        {"min": 31, "max": 48, "type": "gain", "base": 6.5},
    ],
    "max": 100,
    "weekly_recovery": 19.5,
    "rest_day_recovery": 22.0,
    "performance_penalty_start": 50,
    "max_performance_penalty": 0.25,
}

ROOKIE_WALL: dict[str, float] = {"game_threshold": 50, "multiplier": 1.5, "duration_games": 20}

OVERALL_WEIGHTS: dict[str, float] = {"offense": 0.4, "defense": 0.25, "physical": 0.2, "mental": 0.15}

UPGRADE_POINTS: dict[str, object] = {
    "enabled": True,
    "points_per_growth": 1.5,
    "min_growth_threshold": 0.3,
    "max_weekly_points": 3,
    "elite_potential": 90,
    "max_stored_points": 99,
}

HISTORY_LIMIT = 200
PERFORMANCE_LIMIT = 10
FATIGUE_WARNING_LEVEL = 70

OFFENSIVE_SCHEMES: dict[str, dict[str, object]] = {
    "balanced": {
        "name": "Balanced",
        "description": "Balanced offense with varied play selection based on matchups",
        "pace": "medium",
        "strengths": ["versatility", "adaptability"],
        "weaknesses": ["no dominant strategy"],
    },
    "motion": {
        "name": "Motion Offense",
        "description": "Motion-heavy offense emphasizing ball movement, screens, and cuts",
        "pace": "medium",
        "strengths": ["ball movement", "open shots", "team chemistry"],
        "weaknesses": ["requires high IQ players", "takes time to develop"],
    },
    "iso_heavy": {
        "name": "Isolation Heavy",
        "description": "Isolation-focused offense maximizing star player usage",
        "pace": "slow",
        "strengths": ["star players shine", "late game execution"],
        "weaknesses": ["predictable", "role players underutilized"],
    },
    "post_centric": {
        "name": "Post Centric",
        "description": "Post-up heavy offense utilizing big men as primary scorers",
        "pace": "slow",
        "strengths": ["physical play", "rebounding", "free throws"],
        "weaknesses": ["spacing issues", "slower pace"],
    },
    "three_point": {
        "name": "Three-Point Oriented",
        "description": "Perimeter-oriented offense maximizing three-point attempts",
        "pace": "fast",
        "strengths": ["high scoring potential", "floor spacing"],
        "weaknesses": ["variance", "cold shooting nights"],
    },
    "run_and_gun": {
        "name": "Run and Gun",
        "description": "Fast-paced transition offense pushing tempo at every opportunity",
        "pace": "very_fast",
        "strengths": ["fast break points", "tiring opponents"],
        "weaknesses": ["turnovers", "defensive lapses"],
    },
}
DEFAULT_OFFENSIVE_SCHEME = "balanced"

DEFENSIVE_SCHEMES: dict[str, dict[str, object]] = {
    "man": {
        "name": "Man-to-Man",
        "modifiers": {"iso_defense": 0.10, "screen_vulnerability": -0.08, "contest_boost": 0.04, "steal_boost": 0.025},
        "weaknesses": ["pick_and_roll", "motion"],
        "strengths": ["isolation", "post_up"],
    },
    "zone_2_3": {
        "name": "2-3 Zone",
        "modifiers": {"paint_protection": 0.12, "corner_three_weakness": -0.10, "block_boost": 0.06},
        "weaknesses": ["spot_up", "corner_three"],
        "strengths": ["post_up", "drive"],
    },
    "zone_3_2": {
        "name": "3-2 Zone",
        "modifiers": {"perimeter_protection": 0.08, "high_post_weakness": -0.08},
        "weaknesses": ["high_post", "cut"],
        "strengths": ["three_point", "spot_up"],
    },
    "zone_1_3_1": {
        "name": "1-3-1 Zone",
        "modifiers": {"turnover_boost": 0.06, "skip_pass_weakness": -0.12, "steal_boost": 0.08},
        "weaknesses": ["skip_pass", "wing_three"],
        "strengths": ["isolation"],
    },
    "press": {
        "name": "Full Court Press",
        "modifiers": {"turnover_boost": 0.10, "transition_weakness": -0.17, "steal_boost": 0.06},
        "weaknesses": ["transition", "fastbreak"],
        "strengths": ["slow_offense"],
    },
    "trap": {
        "name": "Trapping Defense",
        "modifiers": {"steal_boost": 0.10, "open_shooter_weakness": -0.12, "turnover_boost": 0.05},
        "weaknesses": ["spot_up", "corner_three"],
        "strengths": ["isolation"],
    },
}
DEFAULT_DEFENSIVE_SCHEME = "man"

SCHEME_PLAY_WEIGHTS: dict[str, dict[str, float]] = {
    "balanced": {
        "pick_and_roll": 1.2, "isolation": 1.0, "post_up": 1.0, "motion": 1.0,
        "cut": 1.0, "spot_up": 1.0, "transition": 1.0,
    },
    "motion": {
        "pick_and_roll": 1.2, "isolation": 0.5, "post_up": 0.8, "motion": 2.0,
        "cut": 1.5, "spot_up": 1.0, "transition": 1.0,
    },
    "iso_heavy": {
        "pick_and_roll": 1.2, "isolation": 2.5, "post_up": 1.0, "motion": 0.5,
        "cut": 0.6, "spot_up": 0.8, "transition": 1.0,
    },
    "post_centric": {
        "pick_and_roll": 1.0, "isolation": 0.7, "post_up": 2.5, "motion": 0.8,
        "cut": 1.2, "spot_up": 0.8, "transition": 0.8,
    },
    "three_point": {
        "pick_and_roll": 1.5, "isolation": 0.8, "post_up": 0.5, "motion": 1.3,
        "cut": 1.0, "spot_up": 2.0, "transition": 1.2,
    },
    "run_and_gun": {
        "pick_and_roll": 1.3, "isolation": 1.0, "post_up": 0.5, "motion": 0.7,
        "cut": 0.8, "spot_up": 1.2, "transition": 2.5,
    },
}

TEMPO_MODIFIERS: dict[str, float] = {
    "run_and_gun": 1.3,
    "three_point": 1.1,
    "balanced": 1.0,
    "motion": 0.95,
    "iso_heavy": 0.9,
    "post_centric": 0.85,
}

TRANSITION_FREQUENCIES: dict[str, float] = {
    "run_and_gun": 0.4,
    "three_point": 0.25,
    "balanced": 0.2,
    "motion": 0.15,
    "iso_heavy": 0.15,
    "post_centric": 0.1,
}
DEFAULT_TRANSITION_FREQUENCY = 0.2

SUBSTITUTION_CHECK_INTERVAL = 2.0
VARIANCE_RANGE = 0.15
CLOSE_GAME_THRESHOLD = 6
CLOSE_GAME_MINUTES = 5.0

SUBSTITUTION_STRATEGIES: dict[str, dict[str, object]] = {
    "staggered": {
        "name": "Staggered",
        "description": "Stars rest in shifts. At least one playmaker always on floor. Max 2 subs at a time.",
        "type": "balanced",
        "rotation_depth": "8-9 players",
        "strengths": ["Continuity", "Matchup Flexibility"],
        "weaknesses": ["Star Fatigue Risk"],
        "pace_threshold": 1.5,
        "max_subs_per_check": 2,
    },
    "platoon": {
        "name": "Platoon",
        "description": "Swap groups of 2-3 players at defined intervals. Unit chemistry over individual matchups.",
        "type": "balanced",
        "rotation_depth": "8-10 players",
        "strengths": ["Unit Chemistry", "Predictable Rhythm"],
        "weaknesses": ["Transition Gaps"],
        "pace_threshold": 2.0,
        "max_subs_per_check": 3,
    },
    "tight_rotation": {
        "name": "Tight Rotation",
        "description": "Lean heavily on top 7 players. Stars play big minutes. Bench only for short rest.",
        "type": "aggressive",
        "rotation_depth": "7-8 players",
        "strengths": ["Star Maximization", "Closing Lineup"],
        "weaknesses": ["Fatigue Risk", "Thin Depth"],
        "pace_threshold": 2.5,
        "max_subs_per_check": 2,
    },
    "deep_bench": {
        "name": "Deep Bench",
        "description": "Spread minutes across 9-10 players. Everyone contributes. Fresh legs all game.",
        "type": "passive",
        "rotation_depth": "9-10 players",
        "strengths": ["Fresh Legs", "Injury Insurance"],
        "weaknesses": ["Fewer Star Minutes", "Less Continuity"],
        "pace_threshold": 1.0,
        "max_subs_per_check": 3,
    },
}
DEFAULT_SUBSTITUTION_STRATEGY = "staggered"

MINUTE_TEMPLATES: dict[str, list[int]] = {
    "staggered": [34, 32, 30, 28, 26, 18, 14, 10, 8, 0, 0, 0, 0, 0, 0],
    "tight_rotation": [36, 34, 32, 30, 28, 16, 12, 8, 4, 0, 0, 0, 0, 0, 0],
    "deep_bench": [30, 28, 26, 24, 22, 18, 16, 14, 12, 10, 0, 0, 0, 0, 0],
    "platoon": [32, 30, 28, 26, 24, 18, 16, 12, 8, 6, 0, 0, 0, 0, 0],
}

STARTER_MINUTES_BUDGET = 160
BENCH_MINUTE_SLOTS: tuple[int, ...] = (16, 12, 8, 4)

REBOUND_POSITION_MULTIPLIERS: dict[str, float] = {"C": 1.8, "PF": 1.5, "SF": 1.1, "SG": 0.8, "PG": 0.6}
DEFENSIVE_REBOUND_WEIGHT = 2.5
OFFENSIVE_REBOUND_CHANCE_RANGE = (0.15, 0.40)

ASSIST_CHANCE = 65
STEAL_ON_TURNOVER_CHANCE = 60
CHEMISTRY_CAP = 0.03
CLUTCH_TIME = 2.0
CLUTCH_MARGIN = 3
