"""
agent_state.py – Per-monster mutable decision state.

Owned by exactly one MonsterAgent.  Invariants:
  - turn_count goes up by exactly one per decision, reset only at combat start
  - phase never decreases within a combat, even if the monster heals
  - enraged and opening_move_used only ever flip False → True
  - cached_intent is overwritten every decision and cleared at combat end
"""

from __future__ import annotations

from dataclasses import dataclass, field

from entities.pattern import Pattern
from monster_ai.profiles import AgentTraits


@dataclass
class AgentState:
    turn_count: int = 0
    phase: int = 0
    enraged: bool = False
    opening_move_used: bool = False
    cached_intent: Pattern | None = None

    # Refreshed at the start of every decision
    health_ratio: float = 1.0
    opponent_health_ratio: float = 1.0
    opponent_hurt_last_turn: bool = False
    last_opponent_hp: int | None = None

    traits: AgentTraits = field(default_factory=AgentTraits)

    def observe(self, self_combatant, opponent):
        """Advance the turn and refresh the derived ratios."""
        self.turn_count += 1
        self.health_ratio = self_combatant.health_ratio
        self.opponent_health_ratio = opponent.health_ratio
        self.opponent_hurt_last_turn = (
            self.last_opponent_hp is not None and opponent.hp < self.last_opponent_hp
        )
        self.last_opponent_hp = opponent.hp

    def reset(self, traits: AgentTraits | None = None):
        self.turn_count = 0
        self.phase = 0
        self.enraged = False
        self.opening_move_used = False
        self.cached_intent = None
        self.health_ratio = 1.0
        self.opponent_health_ratio = 1.0
        self.opponent_hurt_last_turn = False
        self.last_opponent_hp = None
        if traits is not None:
            self.traits = traits

    def as_dict(self) -> dict:
        return {
            "turn_count": self.turn_count,
            "phase": self.phase,
            "enraged": self.enraged,
            "opening_move_used": self.opening_move_used,
            "intent": self.cached_intent.name if self.cached_intent else None,
            "health_ratio": round(self.health_ratio, 3),
            "opponent_health_ratio": round(self.opponent_health_ratio, 3),
            "traits": self.traits.as_dict(),
        }
