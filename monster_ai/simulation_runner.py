"""
simulation_runner.py – Headless monster-vs-dummy simulations.

Runs N seeded turn-based matches in which one MonsterAgent fights a
scripted opponent.  Everything goes through the real TurnManager and
CombatSystem, so the results reflect the shipped decision logic.

Usage (from CLI):
    python main.py --simulate 50 --tier BOSS --seed 7

Match i is seeded with ``seed + i``: re-running with the same seed gives
the same matches, decision for decision.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

import numpy as np

from entities.combatant import Combatant
from entities.pattern import Pattern
from monster_ai.context import AiContext
from monster_ai.profiles import Tier
from monster_ai.stats import DecisionStats
from monster_ai.turn_manager import TurnManager
from systems.combat_system import CombatSystem
from systems.pattern_catalog import DEMO_MONSTERS, default_catalog
from settings import (
    SIM_MATCHES, SIM_MAX_TURNS, SIM_MONSTER_HP, SIM_MONSTER_ATTACK,
    SIM_OPPONENT_HP, SIM_OPPONENT_ATTACK, SIM_OPPONENT_DEFENSE,
)

logger = logging.getLogger(__name__)

MONSTER_ID = "monster"
OPPONENT_ID = "player"

# The scripted opponent either strikes or guards
_OPPONENT_STRIKE = Pattern(id=0, name="Strike", intent="attack", attack_bonus=1)
_OPPONENT_GUARD = Pattern(id=0, name="Guard", intent="defend", defense_bonus=5)
_OPPONENT_GUARD_CHANCE = 0.25


# ══════════════════════════════════════════════════════════
#  Config / per-match result
# ══════════════════════════════════════════════════════════

@dataclass
class SimulationConfig:
    matches: int = SIM_MATCHES
    tier: Tier = Tier.BASIC
    personality: object = None          # None → rolled from the tier profile
    seed: int = 0
    max_turns: int = SIM_MAX_TURNS
    monster_type: str | None = None     # None → demo monster for the tier
    monster_hp: int = SIM_MONSTER_HP
    monster_attack: int = SIM_MONSTER_ATTACK
    opponent_hp: int = SIM_OPPONENT_HP
    opponent_attack: int = SIM_OPPONENT_ATTACK
    opponent_defense: int = SIM_OPPONENT_DEFENSE


@dataclass
class MatchResult:
    """Lightweight record for one simulated match."""
    match_number: int = 0
    seed: int = 0
    winner: str = ""               # "monster", "opponent" or "timeout"
    turns: int = 0
    personality: str = ""
    damage_dealt: int = 0          # monster → opponent
    damage_taken: int = 0          # opponent → monster
    monster_hp_left: int = 0
    opponent_hp_left: int = 0
    phase_transitions: int = 0
    enrage_turn: int | None = None
    pattern_counts: dict = field(default_factory=dict)


# ══════════════════════════════════════════════════════════
#  Simulation Runner
# ══════════════════════════════════════════════════════════

class SimulationRunner:
    """Run *config.matches* headless matches.

    Parameters
    ----------
    config : SimulationConfig
    catalog : PatternCatalog | None
        Defaults to the built-in demo catalog.  With *demo_catalog* False a
        None catalog is kept, and monsters fight with the fallback patterns.
    """

    def __init__(self, config: SimulationConfig | None = None, catalog=None,
                 demo_catalog: bool = True) -> None:
        self.cfg = config or SimulationConfig()
        self.cfg.tier = Tier.coerce(self.cfg.tier)
        if catalog is None and demo_catalog:
            catalog = default_catalog()
        self.catalog = catalog
        self.combat = CombatSystem()
        self.results: list[MatchResult] = []
        self.last_stats: DecisionStats | None = None

    # ── Public entry point ────────────────────────────────

    def run(self) -> list[MatchResult]:
        """Execute all matches and return their results."""
        self.results = []
        for i in range(1, max(1, self.cfg.matches) + 1):
            result = self._run_one_match(i, self.cfg.seed + i)
            self.results.append(result)
            logger.debug(
                "Match %d: winner=%s turns=%d phases=%d enrage=%s",
                i, result.winner, result.turns, result.phase_transitions,
                result.enrage_turn,
            )
        logger.info("Simulation finished: %d matches", len(self.results))
        return self.results

    # ── Single match ──────────────────────────────────────

    def _run_one_match(self, match_number: int, seed: int) -> MatchResult:
        cfg = self.cfg
        ctx = AiContext.seeded(self.catalog, seed)
        opponent_rng = random.Random(seed * 7919)

        monster_type = cfg.monster_type or DEMO_MONSTERS[cfg.tier]
        monster = Combatant(
            MONSTER_ID, name=monster_type, max_hp=cfg.monster_hp,
            attack=cfg.monster_attack, tier=cfg.tier, monster_type=monster_type,
        )
        opponent = Combatant(
            OPPONENT_ID, name="Dummy", max_hp=cfg.opponent_hp,
            attack=cfg.opponent_attack, defense=cfg.opponent_defense,
        )

        manager = TurnManager(ctx)
        manager.start_battle(opponent, [monster])
        agent = manager.agents[MONSTER_ID]
        if cfg.personality is not None:
            agent.set_personality(cfg.personality)

        stats = DecisionStats.for_agent(agent)
        manager.add_intent_listener(lambda _who, _pattern: stats.observe_agent(agent))
        manager.add_phase_listener(
            lambda _who, old, new: stats.record_phase(manager.turn, old, new)
        )

        result = MatchResult(
            match_number=match_number, seed=seed, personality=agent.personality.name,
        )
        outcome = None
        while outcome is None and manager.turn < cfg.max_turns:
            manager.plan_turn()

            # Opponent acts first, the monster answers with its planned intent
            self._opponent_turn(manager, opponent, monster, opponent_rng, result)
            outcome = manager.check_battle_end()
            if outcome is None:
                for res in manager.execute_turn(self.combat):
                    result.damage_dealt += res.damage
                self._upkeep(manager, monster, opponent)
                outcome = manager.check_battle_end()

        result.winner = {"victory": "opponent", "defeat": "monster"}.get(outcome, "timeout")
        result.turns = manager.turn
        result.monster_hp_left = monster.hp
        result.opponent_hp_left = opponent.hp
        result.phase_transitions = len(stats.phase_transitions)
        result.enrage_turn = stats.enrage_turn
        result.pattern_counts = dict(stats.pattern_counts())
        self.last_stats = stats

        manager.end_combat()
        return result

    def _opponent_turn(self, manager, opponent, monster, rng, result):
        if rng.random() < _OPPONENT_GUARD_CHANCE:
            self.combat.resolve(_OPPONENT_GUARD, opponent, monster)
            return
        old_hp = monster.hp
        res = self.combat.resolve(_OPPONENT_STRIKE, opponent, monster)
        result.damage_taken += res.damage
        if res.damage:
            manager.notify_health_changed(MONSTER_ID, old_hp, monster.hp)

    def _upkeep(self, manager, monster, opponent):
        old_hp = monster.hp
        self.combat.tick_statuses(monster)
        self.combat.tick_statuses(opponent)
        if monster.hp != old_hp:
            manager.notify_health_changed(MONSTER_ID, old_hp, monster.hp)

    # ══════════════════════════════════════════════════════
    #  Aggregates
    # ══════════════════════════════════════════════════════

    def summarize(self) -> dict:
        """Numeric summary over all finished matches."""
        n = len(self.results)
        if n == 0:
            return {"matches": 0}

        turns = np.array([r.turns for r in self.results], dtype=float)
        dealt = np.array([r.damage_dealt for r in self.results], dtype=float)
        taken = np.array([r.damage_taken for r in self.results], dtype=float)
        phases = np.array([r.phase_transitions for r in self.results], dtype=float)
        enraged = np.array([r.enrage_turn is not None for r in self.results])
        monster_wins = sum(1 for r in self.results if r.winner == "monster")
        timeouts = sum(1 for r in self.results if r.winner == "timeout")

        return {
            "matches": n,
            "monster_win_rate": monster_wins / n,
            "timeouts": timeouts,
            "turns_mean": float(turns.mean()),
            "turns_median": float(np.median(turns)),
            "turns_p90": float(np.percentile(turns, 90)),
            "damage_dealt_mean": float(dealt.mean()),
            "damage_taken_mean": float(taken.mean()),
            "phase_transitions_mean": float(phases.mean()),
            "enrage_rate": float(enraged.mean()),
        }

    def pattern_totals(self) -> dict:
        totals: dict[str, int] = {}
        for r in self.results:
            for name, count in r.pattern_counts.items():
                totals[name] = totals.get(name, 0) + count
        return totals

    # ── Summary printout ──────────────────────────────────

    def print_summary(self) -> None:
        s = self.summarize()
        n = s["matches"]
        if n == 0:
            print("\nNo matches completed.")
            return

        print(f"\n{'=' * 58}")
        print(f"  Simulation Results  ({n} matches, tier {self.cfg.tier.name})")
        print(f"{'=' * 58}")
        print(f"\n  Monster win rate      : {100 * s['monster_win_rate']:.1f}%")
        if s["timeouts"]:
            print(f"  Timeouts              : {s['timeouts']}")
        print(f"  Turns mean / median   : {s['turns_mean']:.1f} / {s['turns_median']:.0f}")
        print(f"  Turns p90             : {s['turns_p90']:.1f}")
        print(f"  Avg damage dealt      : {s['damage_dealt_mean']:.1f}")
        print(f"  Avg damage taken      : {s['damage_taken_mean']:.1f}")
        print(f"  Avg phase transitions : {s['phase_transitions_mean']:.2f}")
        print(f"  Enrage rate           : {100 * s['enrage_rate']:.1f}%")

        totals = self.pattern_totals()
        all_choices = sum(totals.values()) or 1
        print("\n  Pattern usage:")
        for name in sorted(totals, key=lambda k: totals[k], reverse=True):
            print(f"    {name:<24} {totals[name]:>5d}  ({100 * totals[name] / all_choices:.1f}%)")
        print(f"{'=' * 58}\n")
