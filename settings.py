"""
settings.py - Tunable constants for the Monster AI decision engine.

All configurable values live here so they're easy to tweak
and easy to reference from any module.
"""

VERSION = "1.0.0"

# ── Logging ───────────────────────────────────────────────
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
LOG_DATEFMT = "%H:%M:%S"
LOG_LEVEL = "INFO"

# ── Basic tier table ──────────────────────────────────────
BASIC_LOW_HP = 0.30            # below this → look for defend/heal/cure
BASIC_ATTACK_CHANCE = 0.70     # otherwise attack this often

# ── Elite tier table ──────────────────────────────────────
ELITE_SPECIAL_EVERY = 4        # every Nth turn → special/buff/status
ELITE_FINISH_HP = 0.40         # opponent below this → strongest attack
ELITE_HIGH_DEFENSE = 5         # opponent defense above this → status effects
ELITE_ATTACK_CHANCE = 0.60     # weighted roll cut points
ELITE_DEFEND_CHANCE = 0.80

# ── MiniBoss tier table ───────────────────────────────────
MINIBOSS_STRONG_EVERY = 3      # every Nth turn → strongest attack
MINIBOSS_LOW_HP = 0.30
MINIBOSS_MID_HP = 0.60
MINIBOSS_MID_ATTACK_CHANCE = 0.50

# ── Boss tier table ───────────────────────────────────────
BOSS_PHASE_A_HP = 0.70         # above → Phase A
BOSS_PHASE_C_HP = 0.30         # below → Phase C, between → Phase B
BOSS_A_SPECIAL_EVERY = 5
BOSS_A_STATUS_CHANCE = 0.70
BOSS_B_STRONG_EVERY = 3
BOSS_B_ATTACK_CHANCE = 0.60
BOSS_B_STATUS_CHANCE = 0.85
BOSS_C_STRONG_EVERY = 2
BOSS_C_STRONG_CHANCE = 0.80

# ── Pattern scoring ───────────────────────────────────────
STATUS_EFFECT_SCORE = 2        # each status effect is worth this many points

# ── Special conditions ────────────────────────────────────
ENRAGE_HEALTH_THRESHOLD = 0.25
ENRAGE_PROC_CHANCE = 0.30      # chance per turn to use a rage pattern

# ── Personality ───────────────────────────────────────────
AGGRESSIVE_MIN_HP = 0.20       # above this, Aggressive swaps defend → attack
DEFENSIVE_MAX_HP = 0.50        # below this, Defensive swaps attack → defend
CHAOTIC_SWAP_CHANCE = 0.20

# ── Traits (1–10 scale) ───────────────────────────────────
TRAIT_MIN = 1
TRAIT_MAX = 10
HEAVY_HIT_FRACTION = 0.20      # a hit bigger than this share of max HP is "heavy"

# ── Tier profiles ─────────────────────────────────────────
# Ranges are (low, high) with high exclusive, same as random.randrange.
TIER_PROFILES = {
    "BASIC": {
        "aggression": (3, 7),
        "caution": (3, 7),
        "intelligence": (2, 5),
        "opening_move_chance": 0.0,
        "phase_thresholds": (),
        "enrage_chance": 0.0,
        "personality": "BALANCED",
    },
    "ELITE": {
        "aggression": (4, 8),
        "caution": (4, 8),
        "intelligence": (4, 7),
        "opening_move_chance": 0.30,
        "phase_thresholds": (),
        "enrage_chance": 0.50,
        "personality": None,         # random among the first four
    },
    "MINI_BOSS": {
        "aggression": (6, 9),
        "caution": (4, 8),
        "intelligence": (6, 9),
        "opening_move_chance": 1.0,
        "phase_thresholds": (0.6, 0.3),
        "enrage_chance": 1.0,
        "personality": None,
    },
    "BOSS": {
        "aggression": (7, 10),
        "caution": (6, 9),
        "intelligence": (8, 10),
        "opening_move_chance": 1.0,
        "phase_thresholds": (0.7, 0.4, 0.15),
        "enrage_chance": 1.0,
        "personality": "STRATEGIC",
    },
}

# ── Catalog fallbacks ─────────────────────────────────────
GENERIC_SUBSET_SIZE = 3        # patterns handed out when a monster has none of its own

# ── Simulation ────────────────────────────────────────────
SIM_MATCHES = 20
SIM_MAX_TURNS = 60             # hard cap per match
SIM_MONSTER_HP = 120
SIM_MONSTER_ATTACK = 6
SIM_OPPONENT_HP = 100
SIM_OPPONENT_ATTACK = 9
SIM_OPPONENT_DEFENSE = 2
SIM_PLOT_FILE = "decision_distribution.png"
