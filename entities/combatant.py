"""
combatant.py – Turn-based fighter record read by the monster AI.

The AI engine only ever reads a Combatant (health ratio, defense, active
status effects).  The combat resolver and the tests mutate it through the
helpers below.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from entities.pattern import StatusEffect

logger = logging.getLogger(__name__)


@dataclass
class ActiveStatus:
    """A status effect currently ticking on a combatant."""
    kind: str
    magnitude: int
    remaining: int


@dataclass
class Combatant:
    """Player or monster taking part in a turn-based combat."""

    identity: str
    name: str = ""
    max_hp: int = 100
    hp: int = -1                      # -1 → start at max_hp
    attack: int = 0
    defense: int = 0
    tier: object = None               # monster_ai.profiles.Tier for monsters
    monster_type: str = ""            # catalog key, defaults to name
    status_effects: list[ActiveStatus] = field(default_factory=list)

    def __post_init__(self):
        if not self.name:
            self.name = self.identity
        if not self.monster_type:
            self.monster_type = self.name
        if self.hp < 0:
            self.hp = self.max_hp

    # ── Read-only view used by the AI ─────────────────────

    @property
    def alive(self) -> bool:
        return self.hp > 0

    @property
    def health_ratio(self) -> float:
        return self.hp / max(1, self.max_hp)

    @property
    def status_count(self) -> int:
        return len(self.status_effects)

    def has_status(self, kind: str) -> bool:
        return any(s.kind == kind for s in self.status_effects)

    # ── Mutators (combat resolver) ────────────────────────

    def take_damage(self, amount: int, ignore_defense: bool = False) -> int:
        """Apply damage after defense; defense absorbs first and is consumed."""
        amount = max(0, int(amount))
        if not ignore_defense and self.defense > 0:
            absorbed = min(self.defense, amount)
            self.defense -= absorbed
            amount -= absorbed
        old = self.hp
        self.hp = max(0, self.hp - amount)
        logger.debug("%s health reduced to %d (took %d)", self.name, self.hp, old - self.hp)
        return old - self.hp

    def heal(self, amount: int) -> int:
        old = self.hp
        self.hp = min(self.max_hp, self.hp + max(0, int(amount)))
        return self.hp - old

    def add_defense(self, amount: int):
        self.defense = max(0, self.defense + int(amount))

    def add_status(self, effect: StatusEffect):
        """Apply a status; re-applying the same kind refreshes and stacks it."""
        for active in self.status_effects:
            if active.kind == effect.kind:
                active.magnitude += effect.magnitude
                active.remaining = max(active.remaining, effect.duration)
                return
        self.status_effects.append(
            ActiveStatus(effect.kind, effect.magnitude, effect.duration)
        )

    def clear_statuses(self):
        self.status_effects.clear()

    def tick_statuses(self) -> int:
        """Advance every status by one turn. Returns damage taken from DoTs."""
        damage = 0
        for active in self.status_effects:
            if active.kind in ("poison", "bleed", "burn"):
                damage += self.take_damage(active.magnitude, ignore_defense=True)
            elif active.kind == "regeneration":
                self.heal(active.magnitude)
            active.remaining -= 1
        self.status_effects = [s for s in self.status_effects if s.remaining > 0]
        return damage

    def reset_for_combat(self):
        self.hp = self.max_hp
        self.defense = 0
        self.status_effects.clear()
