"""
turn_manager.py – Agent registry and turn loop for one battle.

Turn flow:
    start_battle(player, enemies)
    loop:
        plan_turn()          PLANNING   – every living enemy decides once
        execute_turn(combat) EXECUTION  – planned patterns hit the player
        check_battle_end()   RESOLUTION – "victory" / "defeat" / None
    end_combat()

Agents are created on combat start and dropped on combat end together with
their cached intents, so nothing leaks into the next battle.
"""

from __future__ import annotations

import logging
from enum import IntEnum
from typing import Callable

from entities.pattern import Pattern
from monster_ai.context import AiContext
from monster_ai.monster_agent import MonsterAgent
from monster_ai.profiles import Tier

logger = logging.getLogger(__name__)

IntentListener = Callable[[str, "Pattern | None"], None]
PhaseListener = Callable[[str, int, int], None]


class TurnPhase(IntEnum):
    PLANNING = 0
    EXECUTION = 1
    RESOLUTION = 2


class TurnManager:
    """Owns the MonsterAgents of a battle and drives their decisions.

    Usage:
        manager = TurnManager(AiContext.seeded(catalog, seed=1))
        manager.add_intent_listener(lambda who, p: print(who, p))
        manager.start_battle(player, [slime, knight])
        while manager.check_battle_end() is None:
            manager.plan_turn()
            manager.execute_turn(combat)
        manager.end_combat()
    """

    def __init__(self, ctx: AiContext | None = None):
        self.ctx = ctx or AiContext()
        self.agents: dict[str, MonsterAgent] = {}
        self.player = None
        self.enemies: dict[str, object] = {}
        self.turn = 0
        self.phase = TurnPhase.PLANNING
        self.battle_active = False
        self._planned: dict[str, Pattern | None] = {}
        self._intent_listeners: list[IntentListener] = []
        self._phase_listeners: list[PhaseListener] = []

    # ── Listeners ─────────────────────────────────────────

    def add_intent_listener(self, listener: IntentListener):
        self._intent_listeners.append(listener)

    def add_phase_listener(self, listener: PhaseListener):
        """Called as ``listener(identity, old_phase, new_phase)``."""
        self._phase_listeners.append(listener)

    # ══════════════════════════════════════════════════════
    #  Agent lifecycle
    # ══════════════════════════════════════════════════════

    def on_combat_start(self, identity: str, tier=Tier.BASIC, personality=None,
                        profile=None, monster_type: str | None = None) -> MonsterAgent:
        """Create a fresh agent for *identity*, replacing any previous one."""
        if identity in self.agents:
            logger.debug("Replacing agent %s with fresh state", identity)
        self.ctx.selector.cleanup_agent(identity)
        agent = MonsterAgent(
            identity, tier, personality=personality, ctx=self.ctx,
            profile=profile, monster_type=monster_type,
        )
        self.agents[identity] = agent
        return agent

    def on_combat_end(self, identity: str):
        self.agents.pop(identity, None)
        self._planned.pop(identity, None)
        self.ctx.selector.cleanup_agent(identity)

    def end_combat(self):
        """Forget every agent and cached intent."""
        self.battle_active = False
        self.agents.clear()
        self.enemies.clear()
        self._planned.clear()
        self.ctx.selector.cleanup_all()
        logger.info("Combat ended after %d turns", self.turn)

    # ══════════════════════════════════════════════════════
    #  Battle flow
    # ══════════════════════════════════════════════════════

    def start_battle(self, player, enemies):
        if player is None or not enemies:
            logger.error("start_battle needs a player and at least one enemy")
            return

        self.end_combat()
        self.player = player
        for enemy in enemies:
            if enemy is None:
                continue
            self.enemies[enemy.identity] = enemy
            self.on_combat_start(
                enemy.identity, Tier.coerce(enemy.tier),
                monster_type=enemy.monster_type,
            )
        self.turn = 0
        self.phase = TurnPhase.PLANNING
        self.battle_active = True
        logger.info(
            "Battle started: %s vs %d enemies (%s)",
            player.name, len(self.enemies), ", ".join(self.enemies),
        )

    def plan_turn(self) -> dict[str, Pattern | None]:
        """Ask every living enemy for its pattern this turn."""
        if not self.battle_active:
            return {}
        self.turn += 1
        self.phase = TurnPhase.PLANNING
        self._planned = {}

        for identity, enemy in self.enemies.items():
            agent = self.agents.get(identity)
            if agent is None or not enemy.alive:
                continue
            old_phase = agent.phase
            agent.on_turn_start()
            pattern = agent.decide_action(enemy, self.player)
            self._planned[identity] = pattern

            if agent.phase != old_phase:
                for listener in self._phase_listeners:
                    listener(identity, old_phase, agent.phase)
            for listener in self._intent_listeners:
                listener(identity, pattern)

        logger.debug("Turn %d planned: %s", self.turn, {
            k: (p.name if p else None) for k, p in self._planned.items()
        })
        return dict(self._planned)

    def get_cached_intent(self, identity: str) -> Pattern | None:
        return self.ctx.selector.get_cached_intent(identity)

    def execute_turn(self, resolver) -> list:
        """Hand each planned pattern to *resolver* (``resolve(p, caster, target)``)."""
        self.phase = TurnPhase.EXECUTION
        results = []
        for identity, pattern in self._planned.items():
            enemy = self.enemies.get(identity)
            if enemy is None or not enemy.alive:
                continue
            if pattern is not None and self.player.alive:
                results.append(resolver.resolve(pattern, enemy, self.player))
            agent = self.agents.get(identity)
            if agent is not None:
                agent.on_turn_end()
        self.phase = TurnPhase.RESOLUTION
        return results

    def notify_health_changed(self, identity: str, old_hp: int, new_hp: int):
        """Forward a monster HP change to its agent (heavy-hit reactions)."""
        agent = self.agents.get(identity)
        enemy = self.enemies.get(identity)
        if agent is not None:
            agent.on_health_changed(old_hp, new_hp, enemy.max_hp if enemy else None)

    def check_battle_end(self) -> str | None:
        """"defeat" if the player is down, "victory" if every enemy is."""
        if self.player is None or not self.player.alive:
            return "defeat"
        if not any(e.alive for e in self.enemies.values()):
            return "victory"
        return None
