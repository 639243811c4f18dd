"""
phase_system.py – Health-threshold phase tracking.

A monster with phase transitions moves through escalating phases as its
health drops past each configured threshold:

  thresholds (0.7, 0.4, 0.15)
    health > 0.70        → phase 0 (pre-transition)
    0.40 < health ≤ 0.70 → phase 1
    0.15 < health ≤ 0.40 → phase 2
    health ≤ 0.15        → phase 3 (final)

Phases only ever go up within a combat.  A big hit can skip phases; the
transition is still reported once, at the new phase.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass
class PhaseConfig:
    """Phase thresholds for one monster (checked highest first)."""

    thresholds: tuple[float, ...] = ()
    enabled: bool = False

    def __post_init__(self):
        self.thresholds = tuple(sorted(self.thresholds, reverse=True))


@dataclass
class PhaseTransition:
    """Produced when a monster enters a higher phase."""
    previous_phase: int
    phase: int

    @property
    def is_final(self) -> bool:
        return self.phase >= 3


class PhaseSystem:
    """Computes the phase for a health ratio and reports transitions.

    Usage:
        ps = PhaseSystem(PhaseConfig((0.7, 0.4, 0.15), enabled=True))
        transition = ps.update(state.phase, health_ratio)
        if transition:
            state.phase = transition.phase
    """

    def __init__(self, config: PhaseConfig | None = None):
        self.cfg = config or PhaseConfig()

    def phase_for(self, health_ratio: float) -> int:
        """Number of thresholds *health_ratio* has crossed."""
        return sum(1 for t in self.cfg.thresholds if health_ratio <= t)

    def update(self, current_phase: int, health_ratio: float) -> PhaseTransition | None:
        """Return a transition if health has crossed into a higher phase."""
        if not self.cfg.enabled:
            return None
        new_phase = self.phase_for(health_ratio)
        if new_phase <= current_phase:
            return None
        logger.info("Phase %d → %d (hp=%.2f)", current_phase, new_phase, health_ratio)
        return PhaseTransition(previous_phase=current_phase, phase=new_phase)
