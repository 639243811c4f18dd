"""
personality_modifier.py – Personality post-processing of a chosen pattern.

Runs after the tier table.  It never edits a pattern; it either returns
the input or swaps in another pattern from the monster's eligible set:

  AGGRESSIVE – defend pick while hp > 20%        → attack/strike
  DEFENSIVE  – attack pick while hp < 50%        → defend/protect/heal
  STRATEGIC  – attack pick vs. a status-free foe → status/curse/poison/seal
  CHAOTIC    – 20% of the time                   → any *other* pattern
  BALANCED   – unchanged

Substitutes are found with a greedy first match over the eligible set; if
none is found the original pick stands.
"""

from __future__ import annotations

import logging
import random
from typing import Sequence

from entities.pattern import Pattern
from monster_ai.profiles import Personality
from monster_ai.tag_matcher import TagMatcher
from settings import AGGRESSIVE_MIN_HP, DEFENSIVE_MAX_HP, CHAOTIC_SWAP_CHANCE

logger = logging.getLogger(__name__)


class PersonalityModifier:
    """Apply a personality bias to a tier-selected pattern."""

    def __init__(self, matcher: TagMatcher | None = None):
        self.matcher = matcher or TagMatcher()

    def apply(self, personality, pattern: Pattern | None, health_ratio: float,
              opponent, eligible: Sequence[Pattern],
              rng: random.Random) -> Pattern | None:
        if pattern is None:
            return None

        personality = Personality.coerce(personality)
        if personality == Personality.AGGRESSIVE:
            result = self._aggressive(pattern, health_ratio, eligible)
        elif personality == Personality.DEFENSIVE:
            result = self._defensive(pattern, health_ratio, eligible)
        elif personality == Personality.STRATEGIC:
            result = self._strategic(pattern, opponent, eligible)
        elif personality == Personality.CHAOTIC:
            result = self._chaotic(pattern, eligible, rng)
        else:
            result = pattern

        if result is not pattern:
            logger.debug("%s swapped %s → %s", personality.name, pattern.name, result.name)
        return result

    # ── Personalities ─────────────────────────────────────

    def _substitute(self, pattern: Pattern, eligible: Sequence[Pattern],
                    *keywords: str) -> Pattern:
        found = self.matcher.find_first(eligible, keywords)
        return found if found is not None else pattern

    def _aggressive(self, pattern, health_ratio, eligible):
        if self.matcher.has_tag(pattern, "defend") and health_ratio > AGGRESSIVE_MIN_HP:
            return self._substitute(pattern, eligible, "attack", "strike")
        return pattern

    def _defensive(self, pattern, health_ratio, eligible):
        if health_ratio < DEFENSIVE_MAX_HP and self.matcher.has_tag(pattern, "attack"):
            return self._substitute(pattern, eligible, "defend", "protect", "heal")
        return pattern

    def _strategic(self, pattern, opponent, eligible):
        if opponent.status_count == 0 and self.matcher.has_tag(pattern, "attack"):
            return self._substitute(pattern, eligible, "status", "curse", "poison", "seal")
        return pattern

    def _chaotic(self, pattern, eligible, rng):
        if len(eligible) <= 1 or rng.random() >= CHAOTIC_SWAP_CHANCE:
            return pattern
        others = [p for p in eligible if p is not pattern and p != pattern]
        if not others:
            return pattern
        return others[rng.randrange(len(others))]
