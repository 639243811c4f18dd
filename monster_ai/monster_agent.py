"""
monster_agent.py – Per-monster decision façade.

Architecture:
    monster_agent.MonsterAgent
      ├── agent_state.AgentState                  (turn / phase / enrage state)
      ├── phase_system.PhaseSystem                (health-threshold phases)
      ├── enrage_mode.EnrageMode                  (one-way low-HP rage)
      ├── intent_selector.IntentSelector          (tier tables + intent cache, shared)
      └── personality_modifier.PersonalityModifier (post-processing)

The agent is the ONLY module that writes its AgentState.  Once per combat
turn the combat loop calls ``decide_action(monster, player)``:

  1. refresh state (turn +1, health ratios, opponent-hurt flag)
  2. phase transition      → "phase"/"transition"/"change" pattern
  3. opening move (turn 1) → "entrance"/"opening" pattern
  4. enrage threshold      → enraged = True (no pattern by itself)
  5. enrage proc (30%)     → "rage"/"fury"/"despair" pattern
  6. tier table via IntentSelector
  7. personality modifier
  8. cache + return

A special condition whose pattern is missing from the catalog falls
through to the next step instead of giving up.
"""

from __future__ import annotations

import logging
from dataclasses import replace

from entities.pattern import Pattern
from monster_ai.agent_state import AgentState
from monster_ai.context import AiContext
from monster_ai.enrage_mode import EnrageConfig, EnrageMode, RAGE_KEYWORDS
from monster_ai.errors import InvalidInputError
from monster_ai.personality_modifier import PersonalityModifier
from monster_ai.phase_system import PhaseConfig, PhaseSystem
from monster_ai.profiles import Personality, Tier, TierProfile, build_profile
from settings import HEAVY_HIT_FRACTION

logger = logging.getLogger(__name__)

PHASE_KEYWORDS = ("phase", "transition", "change")
OPENING_KEYWORDS = ("entrance", "opening")


class MonsterAgent:
    """Decision maker for one monster in one combat.

    Usage:
        ctx = AiContext.seeded(catalog, seed=7)
        agent = MonsterAgent("slime-1", Tier.ELITE, ctx=ctx)
        pattern = agent.decide_action(monster, player)
    """

    def __init__(self, identity: str, tier=Tier.BASIC, personality=None,
                 ctx: AiContext | None = None, profile: TierProfile | None = None,
                 monster_type: str | None = None):
        self.identity = identity
        self.ctx = ctx or AiContext()
        self.tier = Tier.coerce(tier)
        if profile is not None:
            # Tuning writes into the profile; never share the caller's
            self.profile = replace(profile, traits=replace(profile.traits))
        else:
            self.profile = build_profile(self.tier, self.ctx.rng, personality)
        if personality is not None:
            self.profile.personality = Personality.coerce(personality)
        # Catalog key; None → use the combatant's own monster_type
        self.monster_type = monster_type

        # Traits escalate during a fight; each combat starts from these
        self._base_traits = replace(self.profile.traits)
        self.state = AgentState(traits=replace(self._base_traits))
        self._max_hp: int | None = None
        self.phases = PhaseSystem(PhaseConfig(
            thresholds=self.profile.phase_thresholds,
            enabled=self.profile.has_phase_transitions,
        ))
        self.enrage = EnrageMode(EnrageConfig(
            enabled=self.profile.has_enrage_mode,
            health_threshold=self.profile.enrage_threshold,
        ))
        self.modifier = PersonalityModifier(self.ctx.matcher)

        # How the last decision was reached:
        # phase | opening | rage | tier | personality | none
        self.last_source: str = "none"

        logger.debug(
            "MonsterAgent %s ready: tier=%s personality=%s",
            identity, self.tier.name, self.profile.personality.name,
        )

    # ── Read-only accessors ───────────────────────────────

    @property
    def personality(self) -> Personality:
        return self.profile.personality

    @property
    def turn_count(self) -> int:
        return self.state.turn_count

    @property
    def phase(self) -> int:
        return self.state.phase

    @property
    def enraged(self) -> bool:
        return self.state.enraged

    @property
    def current_intent(self) -> Pattern | None:
        return self.state.cached_intent

    def snapshot(self) -> dict:
        data = self.state.as_dict()
        data.update(
            identity=self.identity,
            tier=self.tier.name,
            personality=self.personality.name,
            last_source=self.last_source,
        )
        return data

    # ══════════════════════════════════════════════════════
    #  Decision
    # ══════════════════════════════════════════════════════

    def decide_action(self, self_combatant, opponent) -> Pattern | None:
        """Choose this turn's pattern. None means "skip the turn"."""
        try:
            self._validate(self_combatant, opponent)
        except InvalidInputError as exc:
            logger.error("%s: %s", self.identity, exc)
            self.last_source = "none"
            return self._commit(None)

        state = self.state
        state.observe(self_combatant, opponent)
        self._max_hp = self_combatant.max_hp
        self.ctx.selector.set_turn_count(self.identity, state.turn_count)
        eligible = self.ctx.patterns_for(self.monster_type or self_combatant.monster_type)

        special = self._check_special_conditions(eligible)
        if special is not None:
            return self._commit(special)

        self.last_source = "tier"
        selected = self.ctx.selector.select(
            self.tier, self_combatant, opponent, eligible, self.ctx,
            agent_id=self.identity, turn_count=state.turn_count,
        )
        tier_pick = selected
        selected = self.modifier.apply(
            self.personality, selected, state.health_ratio, opponent,
            eligible, self.ctx.rng,
        )
        if selected is not tier_pick:
            self.last_source = "personality"
        if selected is None:
            self.last_source = "none"
        return self._commit(selected)

    def _validate(self, self_combatant, opponent):
        if self_combatant is None:
            raise InvalidInputError("decide_action called without a self combatant")
        if opponent is None:
            raise InvalidInputError("decide_action called without an opponent")

    def _check_special_conditions(self, eligible) -> Pattern | None:
        state = self.state
        matcher = self.ctx.matcher

        transition = self.phases.update(state.phase, state.health_ratio)
        if transition is not None:
            state.phase = transition.phase
            state.traits.escalate_for_phase(transition.phase)
            logger.info("%s entered phase %d", self.identity, transition.phase)
            found = matcher.find_first(eligible, PHASE_KEYWORDS)
            if found is not None:
                self.last_source = "phase"
                return found

        if (self.profile.has_opening_move and not state.opening_move_used
                and state.turn_count == 1):
            state.opening_move_used = True
            found = matcher.find_first(eligible, OPENING_KEYWORDS)
            if found is not None:
                self.last_source = "opening"
                return found

        if self.enrage.should_activate(state.enraged, state.health_ratio):
            self._enter_enrage()

        if self.enrage.should_proc(state.enraged, self.ctx.rng):
            found = matcher.find_first(eligible, RAGE_KEYWORDS)
            if found is not None:
                self.last_source = "rage"
                return found

        return None

    def _commit(self, pattern: Pattern | None) -> Pattern | None:
        self.state.cached_intent = pattern
        self.ctx.selector.cache_intent(self.identity, pattern)
        if pattern is not None:
            logger.debug(
                "%s turn %d → %s (%s)",
                self.identity, self.state.turn_count, pattern.name, self.last_source,
            )
        return pattern

    def _enter_enrage(self):
        self.state.enraged = True
        self.state.traits.enrage()
        logger.info("%s is enraged!", self.identity)

    # ══════════════════════════════════════════════════════
    #  Combat-loop hooks
    # ══════════════════════════════════════════════════════

    def on_health_changed(self, old_hp: int, new_hp: int, max_hp: int | None = None):
        """Called by the combat loop after the monster's HP changes.

        A single loss above HEAVY_HIT_FRACTION of max HP nudges the traits of
        Aggressive (more aggression) and Defensive (more caution) monsters.
        """
        max_hp = max_hp or self._max_hp or old_hp
        damage = old_hp - new_hp
        if damage <= 0 or damage <= max_hp * HEAVY_HIT_FRACTION:
            return
        traits = self.state.traits
        if self.personality == Personality.AGGRESSIVE:
            traits.modify(aggression=1)
        elif self.personality == Personality.DEFENSIVE:
            traits.modify(caution=1)
        logger.debug("%s took a heavy hit (%d) – traits %s", self.identity, damage, traits.as_dict())

    def on_turn_start(self):
        logger.debug("%s turn start (turn %d)", self.identity, self.state.turn_count + 1)

    def on_turn_end(self):
        logger.debug("%s turn end", self.identity)

    # ══════════════════════════════════════════════════════
    #  Difficulty tuning
    # ══════════════════════════════════════════════════════

    def set_personality(self, personality):
        self.profile.personality = Personality.coerce(personality)
        logger.info("%s personality set to %s", self.identity, self.profile.personality.name)

    def modify_characteristics(self, aggression: int = 0, caution: int = 0,
                               intelligence: int = 0):
        self.state.traits.modify(aggression, caution, intelligence)
        self._base_traits.modify(aggression, caution, intelligence)
        logger.debug("%s traits modified → %s", self.identity, self.state.traits.as_dict())

    def force_enrage(self):
        if not self.state.enraged:
            self._enter_enrage()

    # ── Lifecycle ─────────────────────────────────────────

    def reset_for_combat(self):
        """Fresh per-combat state; tier, personality and base traits are kept."""
        self.state.reset(traits=replace(self._base_traits))
        self.last_source = "none"
        self.ctx.selector.cleanup_agent(self.identity)
