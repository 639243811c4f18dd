"""
profiles.py – Tiers, personalities and per-tier AI profiles.

Tier decides which strategy table a monster uses:

  BASIC     – simple attack/defend instincts
  ELITE     – reads the opponent, cycles specials
  MINI_BOSS – opening move, health phases, enrage
  BOSS      – three macro-phases, opening move, enrage

Personality post-processes whatever the tier table picked:

  BALANCED   – no change
  AGGRESSIVE – swaps defensive picks for attacks while healthy
  DEFENSIVE  – swaps attacks for defense when hurt
  STRATEGIC  – opens with status effects on a clean opponent
  CHAOTIC    – sometimes does something else entirely

A TierProfile bundles the special-behaviour switches (opening move, phase
thresholds, enrage) and the starting AgentTraits.  Random parts are rolled
with the engine RNG so a seeded context reproduces them.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from enum import IntEnum

from settings import (
    TIER_PROFILES, TRAIT_MIN, TRAIT_MAX, ENRAGE_HEALTH_THRESHOLD,
)

logger = logging.getLogger(__name__)


# ══════════════════════════════════════════════════════════
#  Enums
# ══════════════════════════════════════════════════════════

class Tier(IntEnum):
    """Combat-strength classification of a monster."""

    BASIC = 0
    ELITE = 1
    MINI_BOSS = 2
    BOSS = 3

    @classmethod
    def coerce(cls, value) -> "Tier":
        """Return *value* as a Tier; anything unrecognised becomes BASIC."""
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, str):
                return cls[value.strip().upper().replace("-", "_").replace(" ", "_")]
            return cls(value)
        except (KeyError, ValueError, TypeError):
            logger.warning("Unknown tier %r – falling back to BASIC behaviour", value)
            return cls.BASIC


class Personality(IntEnum):
    """Behavioural archetype applied after the tier table."""

    BALANCED = 0
    AGGRESSIVE = 1
    DEFENSIVE = 2
    STRATEGIC = 3
    CHAOTIC = 4

    @classmethod
    def coerce(cls, value) -> "Personality":
        if isinstance(value, cls):
            return value
        try:
            if isinstance(value, str):
                return cls[value.strip().upper()]
            return cls(value)
        except (KeyError, ValueError, TypeError):
            logger.warning("Unknown personality %r – using BALANCED", value)
            return cls.BALANCED


# ══════════════════════════════════════════════════════════
#  Traits
# ══════════════════════════════════════════════════════════

def _clamp_trait(value: int) -> int:
    return max(TRAIT_MIN, min(TRAIT_MAX, int(value)))


@dataclass
class AgentTraits:
    """Aggression / caution / intelligence on a 1–10 scale."""

    aggression: int = 5
    caution: int = 5
    intelligence: int = 5

    def __post_init__(self):
        self.aggression = _clamp_trait(self.aggression)
        self.caution = _clamp_trait(self.caution)
        self.intelligence = _clamp_trait(self.intelligence)

    def modify(self, aggression: int = 0, caution: int = 0, intelligence: int = 0):
        self.aggression = _clamp_trait(self.aggression + aggression)
        self.caution = _clamp_trait(self.caution + caution)
        self.intelligence = _clamp_trait(self.intelligence + intelligence)

    def escalate_for_phase(self, phase: int):
        """Phase 2 sharpens aggression; phase 3 (final) goes all-in."""
        if phase == 2:
            self.aggression = _clamp_trait(self.aggression + 2)
        elif phase >= 3:
            self.aggression = TRAIT_MAX
            self.caution = _clamp_trait(self.caution - 3)

    def enrage(self):
        self.aggression = TRAIT_MAX
        self.caution = TRAIT_MIN

    def as_dict(self) -> dict:
        return {
            "aggression": self.aggression,
            "caution": self.caution,
            "intelligence": self.intelligence,
        }


# ══════════════════════════════════════════════════════════
#  Tier profile
# ══════════════════════════════════════════════════════════

@dataclass
class TierProfile:
    """Special-behaviour switches and starting traits for one monster."""

    tier: Tier = Tier.BASIC
    personality: Personality = Personality.BALANCED
    has_opening_move: bool = False
    has_phase_transitions: bool = False
    phase_thresholds: tuple[float, ...] = ()
    has_enrage_mode: bool = False
    enrage_threshold: float = ENRAGE_HEALTH_THRESHOLD
    traits: AgentTraits = field(default_factory=AgentTraits)

    def __post_init__(self):
        # Thresholds are checked highest first (0.7 → 0.4 → 0.15)
        self.phase_thresholds = tuple(sorted(self.phase_thresholds, reverse=True))


def _roll(rng: random.Random, chance: float) -> bool:
    if chance <= 0.0:
        return False
    if chance >= 1.0:
        return True
    return rng.random() < chance


def build_profile(tier, rng: random.Random | None = None,
                  personality=None) -> TierProfile:
    """Roll a TierProfile from the TIER_PROFILES table in settings.

    *personality* overrides the table's choice when given.
    """
    tier = Tier.coerce(tier)
    rng = rng or random.Random()
    row = TIER_PROFILES[tier.name]

    traits = AgentTraits(
        aggression=rng.randrange(*row["aggression"]),
        caution=rng.randrange(*row["caution"]),
        intelligence=rng.randrange(*row["intelligence"]),
    )

    if personality is not None:
        chosen = Personality.coerce(personality)
    elif row["personality"] is not None:
        chosen = Personality[row["personality"]]
    else:
        # Balanced..Strategic; Chaotic is never rolled, only assigned
        chosen = Personality(rng.randrange(0, 4))

    opening = _roll(rng, row["opening_move_chance"])
    enrage = _roll(rng, row["enrage_chance"])
    thresholds = tuple(row["phase_thresholds"])

    profile = TierProfile(
        tier=tier,
        personality=chosen,
        has_opening_move=opening,
        has_phase_transitions=bool(thresholds),
        phase_thresholds=thresholds,
        has_enrage_mode=enrage,
        traits=traits,
    )
    logger.debug(
        "Profile %s: personality=%s opening=%s phases=%s enrage=%s traits=%s",
        tier.name, chosen.name, opening, thresholds, enrage, traits.as_dict(),
    )
    return profile
