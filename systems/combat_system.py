"""
combat_system.py – Turn-based pattern resolution.

The AI only picks a Pattern; this resolver turns it into HP, defense and
status changes:

- damage per hit = caster attack + attack_bonus + additional_damage
  (caster attack only counts for patterns that deal damage at all)
- repeated ``attack_count`` times against the target's defense, unless
  the pattern ignores defense
- defense_bonus is added to the caster
- status effects land on the target
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from entities.pattern import Pattern

logger = logging.getLogger(__name__)


@dataclass
class CombatResult:
    """What one resolved pattern did, for the turn loop and stats to react."""

    pattern: Pattern | None = None
    caster: str = ""
    target: str = ""
    damage: int = 0
    hits: int = 0
    defense_gained: int = 0
    statuses_applied: list[str] = field(default_factory=list)
    target_defeated: bool = False
    skipped: bool = False


class CombatSystem:
    """Applies patterns to combatants.

    Usage:
        combat = CombatSystem()
        result = combat.resolve(pattern, monster, player)
        if result.target_defeated: ...
    """

    # ══════════════════════════════════════════════════════
    #  Pattern → target
    # ══════════════════════════════════════════════════════

    def resolve(self, pattern: Pattern | None, caster, target) -> CombatResult:
        result = CombatResult(
            pattern=pattern,
            caster=caster.identity,
            target=target.identity,
        )
        if pattern is None or not caster.alive:
            result.skipped = True
            logger.debug("%s skips the turn", caster.name)
            return result

        per_hit = pattern.attack_bonus + pattern.additional_damage
        if per_hit > 0:
            per_hit += caster.attack
            for _ in range(max(1, pattern.attack_count)):
                if not target.alive:
                    break
                result.damage += target.take_damage(per_hit, pattern.ignore_defense)
                result.hits += 1

        if pattern.defense_bonus > 0:
            caster.add_defense(pattern.defense_bonus)
            result.defense_gained = pattern.defense_bonus

        if target.alive:
            for effect in pattern.status_effects:
                target.add_status(effect)
                result.statuses_applied.append(effect.kind)

        result.target_defeated = not target.alive
        logger.debug(
            "%s uses %s on %s: %d dmg in %d hits, +%d def, statuses=%s",
            caster.name, pattern.name, target.name, result.damage, result.hits,
            result.defense_gained, result.statuses_applied,
        )
        return result

    # ══════════════════════════════════════════════════════
    #  Turn upkeep
    # ══════════════════════════════════════════════════════

    def tick_statuses(self, combatant) -> int:
        """Run damage-over-time / regeneration for one combatant."""
        if not combatant.alive:
            return 0
        damage = combatant.tick_statuses()
        if damage:
            logger.debug("%s takes %d status damage", combatant.name, damage)
        return damage
