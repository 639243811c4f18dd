"""
tier_strategy.py – Per-tier decision tables.

One stateless function per tier.  Each walks its rules top to bottom; a
rule whose lookup finds nothing falls through to the next rule, and when
every rule misses the pick is uniform-random over the available patterns.
A fresh roll ``r ∈ [0, 1)`` is drawn at every weighted decision point.

  BASIC      low HP → defend/heal/cure, 70% attack, else random
  ELITE      every 4th turn special, finish a weak opponent, status vs.
             high defense, weighted attack/defend/status
  MINI_BOSS  entrance on turn 1, strongest attack every 3rd turn, then by
             own health
  BOSS       entrance on turn 1, then macro-phase A (>70%) / B / C (<30%)
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Sequence

from entities.pattern import Pattern
from monster_ai.profiles import Tier
from monster_ai.tag_matcher import find_strongest_pattern, pick_random
from settings import (
    BASIC_LOW_HP, BASIC_ATTACK_CHANCE,
    ELITE_SPECIAL_EVERY, ELITE_FINISH_HP, ELITE_HIGH_DEFENSE,
    ELITE_ATTACK_CHANCE, ELITE_DEFEND_CHANCE,
    MINIBOSS_STRONG_EVERY, MINIBOSS_LOW_HP, MINIBOSS_MID_HP,
    MINIBOSS_MID_ATTACK_CHANCE,
    BOSS_PHASE_A_HP, BOSS_PHASE_C_HP,
    BOSS_A_SPECIAL_EVERY, BOSS_A_STATUS_CHANCE,
    BOSS_B_STRONG_EVERY, BOSS_B_ATTACK_CHANCE, BOSS_B_STATUS_CHANCE,
    BOSS_C_STRONG_EVERY, BOSS_C_STRONG_CHANCE,
)

if TYPE_CHECKING:
    from monster_ai.context import AiContext

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DecisionView:
    """Snapshot of the combat state a tier table reads."""

    turn_count: int
    health_ratio: float
    opponent_health_ratio: float
    opponent_defense: int = 0


def _tag(patterns: Sequence[Pattern], ctx: "AiContext", *keywords: str) -> Pattern | None:
    found = ctx.matcher.find_by_tags(patterns, keywords, ctx.rng)
    if found is None:
        logger.debug("No pattern tagged %s", keywords)
    return found


def _strongest_attack(patterns: Sequence[Pattern], ctx: "AiContext") -> Pattern | None:
    return find_strongest_pattern(patterns, attack_only=True, matcher=ctx.matcher)


def _fallback(patterns: Sequence[Pattern], ctx: "AiContext", tier: str) -> Pattern | None:
    logger.debug("%s rules exhausted – random pick", tier)
    return pick_random(patterns, ctx.rng)


# ══════════════════════════════════════════════════════════
#  Tier tables
# ══════════════════════════════════════════════════════════

def select_basic(view: DecisionView, patterns: Sequence[Pattern],
                 ctx: "AiContext") -> Pattern | None:
    if view.health_ratio < BASIC_LOW_HP:
        found = _tag(patterns, ctx, "defend", "heal", "cure")
        if found:
            return found

    if ctx.rng.random() < BASIC_ATTACK_CHANCE:
        found = _tag(patterns, ctx, "attack", "strike", "damage")
        if found:
            return found

    return _fallback(patterns, ctx, "BASIC")


def select_elite(view: DecisionView, patterns: Sequence[Pattern],
                 ctx: "AiContext") -> Pattern | None:
    if view.turn_count % ELITE_SPECIAL_EVERY == 0:
        found = _tag(patterns, ctx, "special", "buff", "status")
        if found:
            return found

    if view.opponent_health_ratio < ELITE_FINISH_HP:
        found = _strongest_attack(patterns, ctx)
        if found:
            return found

    if view.opponent_defense > ELITE_HIGH_DEFENSE:
        found = _tag(patterns, ctx, "curse", "poison", "bleed", "seal")
        if found:
            return found

    r = ctx.rng.random()
    if r < ELITE_ATTACK_CHANCE:
        found = _tag(patterns, ctx, "attack", "strike")
    elif r < ELITE_DEFEND_CHANCE:
        found = _tag(patterns, ctx, "defend", "protect")
    else:
        found = _tag(patterns, ctx, "status", "curse", "poison")
    if found:
        return found

    return _fallback(patterns, ctx, "ELITE")


def select_mini_boss(view: DecisionView, patterns: Sequence[Pattern],
                     ctx: "AiContext") -> Pattern | None:
    if view.turn_count == 1:
        found = _tag(patterns, ctx, "entrance", "opening", "special")
        if found:
            return found

    if view.turn_count % MINIBOSS_STRONG_EVERY == 0:
        found = _strongest_attack(patterns, ctx)
        if found:
            return found

    if view.health_ratio < MINIBOSS_LOW_HP:
        found = _tag(patterns, ctx, "defend", "heal", "protect")
    elif view.health_ratio < MINIBOSS_MID_HP:
        if ctx.rng.random() < MINIBOSS_MID_ATTACK_CHANCE:
            found = _tag(patterns, ctx, "attack")
        else:
            found = _tag(patterns, ctx, "status")
    else:
        found = _tag(patterns, ctx, "attack", "strike")
    if found:
        return found

    return _fallback(patterns, ctx, "MINI_BOSS")


def select_boss(view: DecisionView, patterns: Sequence[Pattern],
                ctx: "AiContext") -> Pattern | None:
    if view.turn_count == 1:
        found = _tag(patterns, ctx, "entrance", "opening")
        if found:
            return found
        logger.debug("Boss has no entrance pattern – using phase logic on turn 1")

    if view.health_ratio > BOSS_PHASE_A_HP:
        found = _boss_phase_a(view, patterns, ctx)
    elif view.health_ratio >= BOSS_PHASE_C_HP:
        found = _boss_phase_b(view, patterns, ctx)
    else:
        found = _boss_phase_c(view, patterns, ctx)
    if found:
        return found

    return _fallback(patterns, ctx, "BOSS")


def _boss_phase_a(view, patterns, ctx):
    """Probing: specials on a timer, otherwise mostly status effects."""
    if view.turn_count % BOSS_A_SPECIAL_EVERY == 0:
        found = _tag(patterns, ctx, "special", "buff")
        if found:
            return found
    if ctx.rng.random() < BOSS_A_STATUS_CHANCE:
        return _tag(patterns, ctx, "curse", "poison", "seal")
    return _tag(patterns, ctx, "attack")


def _boss_phase_b(view, patterns, ctx):
    """Pressure: heavy hits on a timer, weighted attack/status/defend."""
    if view.turn_count % BOSS_B_STRONG_EVERY == 0:
        found = _strongest_attack(patterns, ctx)
        if found:
            return found
    r = ctx.rng.random()
    if r < BOSS_B_ATTACK_CHANCE:
        return _tag(patterns, ctx, "attack", "strike")
    if r < BOSS_B_STATUS_CHANCE:
        return _tag(patterns, ctx, "status", "curse")
    return _tag(patterns, ctx, "defend", "protect")


def _boss_phase_c(view, patterns, ctx):
    """Last stand: strongest attack nearly every turn."""
    if view.turn_count % BOSS_C_STRONG_EVERY == 0:
        found = _strongest_attack(patterns, ctx)
        if found:
            return found
    if ctx.rng.random() < BOSS_C_STRONG_CHANCE:
        return _strongest_attack(patterns, ctx)
    return _tag(patterns, ctx, "special", "rage", "despair")


StrategyFn = Callable[[DecisionView, Sequence[Pattern], "AiContext"], "Pattern | None"]

STRATEGIES: dict[Tier, StrategyFn] = {
    Tier.BASIC: select_basic,
    Tier.ELITE: select_elite,
    Tier.MINI_BOSS: select_mini_boss,
    Tier.BOSS: select_boss,
}
