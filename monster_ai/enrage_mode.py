"""
enrage_mode.py – One-way low-health rage.

Once a monster with enrage configured drops to the enrage threshold it
becomes enraged for the rest of the combat, healing does not undo it.
While enraged:

  - aggression is pinned to max and caution to min
  - each turn there is a flat chance to spend the turn on a rage pattern
    ("rage", "fury", "despair") instead of the normal tier table
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass

from settings import ENRAGE_HEALTH_THRESHOLD, ENRAGE_PROC_CHANCE

logger = logging.getLogger(__name__)

RAGE_KEYWORDS = ("rage", "fury", "despair")


@dataclass
class EnrageConfig:
    """Tunable parameters for enrage mode."""

    enabled: bool = False
    health_threshold: float = ENRAGE_HEALTH_THRESHOLD
    proc_chance: float = ENRAGE_PROC_CHANCE


class EnrageMode:
    """Decides when an agent becomes enraged and when rage patterns fire.

    Usage:
        enrage = EnrageMode(EnrageConfig(enabled=True))
        if enrage.should_activate(state.enraged, state.health_ratio):
            state.enraged = True
        if enrage.should_proc(state.enraged, rng):
            # look for a rage pattern
    """

    def __init__(self, config: EnrageConfig | None = None):
        self.cfg = config or EnrageConfig()

    def should_activate(self, already_enraged: bool, health_ratio: float) -> bool:
        if not self.cfg.enabled or already_enraged:
            return False
        return health_ratio <= self.cfg.health_threshold

    def should_proc(self, enraged: bool, rng: random.Random) -> bool:
        """Roll the per-turn rage pattern chance. Call once per decision."""
        if not enraged:
            return False
        return rng.random() < self.cfg.proc_chance
