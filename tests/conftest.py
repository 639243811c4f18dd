"""
Pytest fixtures for the monster AI test suite.

Provides a scripted RNG, pattern/combatant factories, a small catalog and
ready-made contexts and agents.
"""

import random

import pytest

from entities.combatant import Combatant
from entities.pattern import Pattern, StatusEffect
from monster_ai.context import AiContext
from monster_ai.monster_agent import MonsterAgent
from monster_ai.profiles import AgentTraits, Personality, Tier, TierProfile
from systems.pattern_catalog import PatternCatalog


# =============================================================================
# RNG FIXTURES
# =============================================================================


class ScriptedRandom(random.Random):
    """random.Random whose ``random()`` returns queued values first.

    Only ``random()`` is scripted; ``randrange``/``choice`` keep using the
    seeded generator, so uniform picks stay reproducible.
    """

    def __init__(self, values=(), seed=0):
        super().__init__(seed)
        self.values = list(values)
        self.draws = 0

    def random(self):
        self.draws += 1
        if self.values:
            return self.values.pop(0)
        return super().random()

    def getrandbits(self, k):
        # Defined here so randrange keeps the getrandbits path
        return super().getrandbits(k)


@pytest.fixture
def scripted_rng():
    """Factory: scripted_rng(0.1, 0.9, ...) → ScriptedRandom."""
    def _make(*values, seed=0):
        return ScriptedRandom(values, seed=seed)
    return _make


# =============================================================================
# PATTERN FIXTURES
# =============================================================================


def make_pattern(pid, name, intent="", **kwargs):
    kwargs.setdefault("monster_type", "Goblin")
    return Pattern(id=pid, name=name, intent=intent, **kwargs)


@pytest.fixture
def pattern_factory():
    return make_pattern


@pytest.fixture
def attack():
    return make_pattern(1, "Slash", "attack", attack_bonus=5)


@pytest.fixture
def defend():
    return make_pattern(2, "Guard", "defend", defense_bonus=5)


@pytest.fixture
def heal():
    return make_pattern(3, "Mend", "heal", defense_bonus=2)


@pytest.fixture
def status():
    return make_pattern(
        4, "Venom", "status poison",
        status_effects=(StatusEffect("poison", 2, 3),),
    )


@pytest.fixture
def special():
    return make_pattern(5, "Roar", "special buff", defense_bonus=1)


@pytest.fixture
def goblin_patterns(attack, defend, heal, status, special):
    return [attack, defend, heal, status, special]


@pytest.fixture
def catalog(goblin_patterns):
    return PatternCatalog(goblin_patterns)


# =============================================================================
# COMBATANT FIXTURES
# =============================================================================


@pytest.fixture
def combatant_factory():
    def _make(identity="goblin", hp=100, max_hp=100, monster_type="Goblin", **kwargs):
        return Combatant(identity, max_hp=max_hp, hp=hp, monster_type=monster_type, **kwargs)
    return _make


@pytest.fixture
def monster(combatant_factory):
    return combatant_factory("goblin", tier=Tier.BASIC)


@pytest.fixture
def player(combatant_factory):
    return combatant_factory("player", monster_type="Player")


# =============================================================================
# CONTEXT / AGENT FIXTURES
# =============================================================================


@pytest.fixture
def make_ctx(catalog):
    """Factory: make_ctx(*rolls, catalog=...) → AiContext with a ScriptedRandom."""
    def _make(*values, catalog=catalog, case_sensitive=True):
        ctx = AiContext.seeded(catalog, seed=0, case_sensitive=case_sensitive)
        ctx.rng = ScriptedRandom(values)
        return ctx
    return _make


@pytest.fixture
def make_agent(make_ctx):
    """Factory for an agent with an explicit (non-random) profile."""
    def _make(tier=Tier.BASIC, *values, ctx=None, personality=Personality.BALANCED,
              opening=False, thresholds=(), enrage=False, identity="goblin",
              monster_type=None):
        ctx = ctx or make_ctx(*values)
        profile = TierProfile(
            tier=Tier.coerce(tier),
            personality=personality,
            has_opening_move=opening,
            has_phase_transitions=bool(thresholds),
            phase_thresholds=thresholds,
            has_enrage_mode=enrage,
            traits=AgentTraits(5, 5, 5),
        )
        return MonsterAgent(identity, tier, ctx=ctx, profile=profile,
                            monster_type=monster_type)
    return _make
