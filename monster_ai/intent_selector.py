"""
intent_selector.py – Tier dispatch, turn bookkeeping and the intent cache.

The selector is shared by every agent in a combat.  It owns:

  - the turn-count table (agent id → "this is turn N"), advanced *before*
    a tier table runs so the rules see the current turn number;
  - the intent cache (agent id → last chosen Pattern) that the UI reads
    to show "enemy intends to …".  The cache is display-only and must be
    cleaned up when combat ends.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Sequence

from entities.pattern import Pattern
from monster_ai.profiles import Tier
from monster_ai.tag_matcher import TagMatcher, find_strongest_pattern, pick_random
from monster_ai.tier_strategy import STRATEGIES, DecisionView

if TYPE_CHECKING:
    from monster_ai.context import AiContext

logger = logging.getLogger(__name__)


class IntentSelector:
    """Choose a pattern for a tier and remember it for display.

    Usage:
        selector = IntentSelector()
        pattern = selector.select(Tier.ELITE, monster, player, patterns, ctx)
        selector.get_cached_intent(monster.identity)
        selector.cleanup_all()     # combat over
    """

    def __init__(self, matcher: TagMatcher | None = None):
        self.matcher = matcher or TagMatcher()
        self._turn_counts: dict[str, int] = {}
        self._intents: dict[str, Pattern] = {}

    # ── Selection ─────────────────────────────────────────

    def select(self, tier, self_combatant, opponent,
               available_patterns: Sequence[Pattern], ctx: "AiContext",
               agent_id: str | None = None,
               turn_count: int | None = None) -> Pattern | None:
        """Run the tier table for *self_combatant*.

        The turn counter for *agent_id* advances by one first.  A caller
        that tracks turns itself passes *turn_count* and the table is
        synced to it instead.
        """
        agent_id = agent_id or self_combatant.identity
        if turn_count is None:
            turn_count = self._turn_counts.get(agent_id, 0) + 1
        self._turn_counts[agent_id] = turn_count

        if not available_patterns:
            logger.warning(
                "%s has no available patterns on turn %d – degraded mode, no decision",
                agent_id, turn_count,
            )
            return None

        tier_value = Tier.coerce(tier)
        strategy = STRATEGIES[tier_value]

        view = DecisionView(
            turn_count=turn_count,
            health_ratio=self_combatant.health_ratio,
            opponent_health_ratio=opponent.health_ratio,
            opponent_defense=opponent.defense,
        )
        patterns = list(available_patterns)
        pattern = strategy(view, patterns, ctx)
        if pattern is None:
            pattern = self._degrade(agent_id, patterns, ctx)
        logger.debug(
            "%s [%s] turn %d (hp=%.2f, opp=%.2f) → %s",
            agent_id, tier_value.name, turn_count, view.health_ratio,
            view.opponent_health_ratio, pattern.name if pattern else None,
        )
        return pattern

    def _degrade(self, agent_id, patterns, ctx) -> Pattern | None:
        logger.warning("%s tier table chose nothing – trying strongest pattern", agent_id)
        pattern = find_strongest_pattern(patterns, matcher=self.matcher)
        if pattern is None:
            logger.warning("%s has no strongest pattern – random pick", agent_id)
            pattern = pick_random(patterns, ctx.rng)
        return pattern

    # ── Turn table ────────────────────────────────────────

    def turn_count(self, agent_id: str) -> int:
        return self._turn_counts.get(agent_id, 0)

    def set_turn_count(self, agent_id: str, turn_count: int):
        self._turn_counts[agent_id] = turn_count

    # ── Intent cache ──────────────────────────────────────

    def cache_intent(self, agent_id: str, pattern: Pattern | None):
        if pattern is None:
            self._intents.pop(agent_id, None)
        else:
            self._intents[agent_id] = pattern

    def get_cached_intent(self, agent_id: str) -> Pattern | None:
        return self._intents.get(agent_id)

    def cached_agents(self) -> list[str]:
        return list(self._intents)

    def cleanup_agent(self, agent_id: str):
        """Forget everything about one agent (combat end / removed)."""
        self._intents.pop(agent_id, None)
        self._turn_counts.pop(agent_id, None)

    def cleanup_all(self):
        if self._intents or self._turn_counts:
            logger.debug("Clearing intents for %d agents", len(self._turn_counts))
        self._intents.clear()
        self._turn_counts.clear()
