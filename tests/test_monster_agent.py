"""Tests for the MonsterAgent decision pipeline."""

import logging

import pytest

from monster_ai.context import AiContext
from monster_ai.errors import CatalogUnavailableError
from monster_ai.monster_agent import MonsterAgent
from monster_ai.profiles import AgentTraits, Personality, Tier, TierProfile
from monster_ai.turn_manager import TurnManager
from systems.pattern_catalog import FALLBACK_PATTERNS, PatternCatalog


@pytest.fixture
def entrance(pattern_factory):
    return pattern_factory(10, "Grand Entrance", "opening", defense_bonus=3)


@pytest.fixture
def phase_shift(pattern_factory):
    return pattern_factory(11, "Phase Shift", "phase transition", defense_bonus=4)


@pytest.fixture
def fury(pattern_factory):
    return pattern_factory(12, "Fury", "attack rage", attack_bonus=8)


@pytest.fixture
def boss_catalog(goblin_patterns, entrance, phase_shift, fury):
    return PatternCatalog(goblin_patterns + [entrance, phase_shift, fury])


def hp_series(agent, monster, player, values):
    """Run one decision per HP value; returns the picks."""
    picks = []
    for hp in values:
        monster.hp = hp
        picks.append(agent.decide_action(monster, player))
    return picks


class TestTurnCounting:

    def test_turn_count_equals_calls(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC)
        for n in range(1, 8):
            agent.decide_action(monster, player)
            assert agent.turn_count == n
            assert agent.ctx.selector.turn_count("goblin") == n

    def test_invalid_input_is_not_counted(self, make_agent, monster, caplog):
        agent = make_agent(Tier.BASIC)
        with caplog.at_level(logging.ERROR):
            assert agent.decide_action(monster, None) is None
            assert agent.decide_action(None, monster) is None
        assert agent.turn_count == 0
        assert "without an opponent" in caplog.text

    def test_invalid_input_clears_cached_intent(self, make_agent, monster, player, attack):
        agent = make_agent(Tier.BASIC, 0.1)
        assert agent.decide_action(monster, player) is attack
        assert agent.decide_action(monster, None) is None
        assert agent.current_intent is None
        assert agent.ctx.selector.get_cached_intent("goblin") is None
        assert agent.last_source == "none"

    def test_opponent_hurt_last_turn(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC)
        agent.decide_action(monster, player)
        assert not agent.state.opponent_hurt_last_turn
        player.hp = 80
        agent.decide_action(monster, player)
        assert agent.state.opponent_hurt_last_turn
        agent.decide_action(monster, player)
        assert not agent.state.opponent_hurt_last_turn
        player.heal(10)
        agent.decide_action(monster, player)
        assert not agent.state.opponent_hurt_last_turn


class TestSharedProfile:

    @pytest.fixture
    def profile(self):
        return TierProfile(tier=Tier.ELITE, personality=Personality.BALANCED,
                           traits=AgentTraits(5, 5, 5))

    def test_set_personality_is_per_agent(self, make_ctx, profile):
        ctx = make_ctx()
        a = MonsterAgent("a", Tier.ELITE, ctx=ctx, profile=profile)
        b = MonsterAgent("b", Tier.ELITE, ctx=ctx, profile=profile)
        a.set_personality("CHAOTIC")
        assert a.personality == Personality.CHAOTIC
        assert b.personality == Personality.BALANCED
        assert profile.personality == Personality.BALANCED

    def test_constructor_override_leaves_profile_alone(self, make_ctx, profile):
        agent = MonsterAgent("a", Tier.ELITE, personality="DEFENSIVE",
                             ctx=make_ctx(), profile=profile)
        assert agent.personality == Personality.DEFENSIVE
        assert profile.personality == Personality.BALANCED

    def test_traits_are_per_agent(self, make_ctx, profile):
        ctx = make_ctx()
        a = MonsterAgent("a", Tier.ELITE, ctx=ctx, profile=profile)
        b = MonsterAgent("b", Tier.ELITE, ctx=ctx, profile=profile)
        a.modify_characteristics(aggression=3)
        a.force_enrage()
        assert b.state.traits.as_dict() == {"aggression": 5, "caution": 5, "intelligence": 5}
        assert profile.traits.aggression == 5

    def test_restart_with_same_profile_is_fresh(self, make_ctx, profile):
        manager = TurnManager(make_ctx())
        first = manager.on_combat_start("goblin", Tier.ELITE, profile=profile)
        first.set_personality("AGGRESSIVE")
        manager.on_combat_end("goblin")
        second = manager.on_combat_start("goblin", Tier.ELITE, profile=profile)
        assert second.personality == Personality.BALANCED


class TestOpeningMove:

    def test_boss_first_turn_is_entrance(self, make_ctx, boss_catalog, monster, player,
                                         entrance):
        for seed in range(5):
            ctx = make_ctx(catalog=boss_catalog)
            ctx.rng.seed(seed)
            agent = MonsterAgent("goblin", Tier.BOSS, ctx=ctx)
            assert agent.decide_action(monster, player) is entrance
            assert agent.last_source == "opening"

    def test_opening_fires_once(self, make_agent, make_ctx, boss_catalog, monster, player,
                                entrance):
        agent = make_agent(Tier.BASIC, ctx=make_ctx(0.1, 0.1, catalog=boss_catalog),
                           opening=True)
        first, second = hp_series(agent, monster, player, [100, 100])
        assert first is entrance
        assert second is not entrance
        assert agent.state.opening_move_used

    def test_missing_opening_falls_through(self, make_agent, monster, player, attack):
        agent = make_agent(Tier.BASIC, 0.1, opening=True)
        assert agent.decide_action(monster, player) is attack
        assert agent.state.opening_move_used
        assert agent.last_source == "tier"


class TestPhases:

    def test_phase_pattern_short_circuits(self, make_agent, make_ctx, boss_catalog,
                                          monster, player, phase_shift):
        agent = make_agent(Tier.BASIC, ctx=make_ctx(0.1, 0.1, catalog=boss_catalog),
                           thresholds=(0.6, 0.3))
        picks = hp_series(agent, monster, player, [100, 50, 50])
        assert picks[1] is phase_shift
        assert agent.last_source == "tier"
        assert picks[2] is not phase_shift
        assert agent.phase == 1

    def test_missing_phase_pattern_falls_through(self, make_agent, monster, player, attack):
        agent = make_agent(Tier.BASIC, 0.1, thresholds=(0.6, 0.3))
        monster.hp = 50
        assert agent.decide_action(monster, player) is attack
        assert agent.phase == 1

    def test_big_hit_skips_phases(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC, thresholds=(0.7, 0.4, 0.15))
        hp_series(agent, monster, player, [100, 10])
        assert agent.phase == 3

    def test_phase_never_decreases(self, make_ctx, boss_catalog, monster, player):
        ctx = make_ctx(catalog=boss_catalog)
        agent = MonsterAgent("goblin", Tier.BOSS, ctx=ctx)
        phases = []
        for hp in [100, 60, 90, 35, 80, 10, 100, 50]:
            monster.hp = hp
            agent.decide_action(monster, player)
            phases.append(agent.phase)
        assert phases == sorted(phases)
        assert phases[-1] == 3

    def test_phase_escalates_traits(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC, thresholds=(0.7, 0.4, 0.15))
        hp_series(agent, monster, player, [60, 30])
        assert agent.state.traits.aggression == 7
        hp_series(agent, monster, player, [10])
        assert agent.state.traits.aggression == 10
        assert agent.state.traits.caution == 2

    def test_phase_checked_before_opening(self, make_agent, make_ctx, boss_catalog,
                                          monster, player, phase_shift):
        agent = make_agent(Tier.BASIC, ctx=make_ctx(catalog=boss_catalog),
                           opening=True, thresholds=(0.6,))
        monster.hp = 50
        assert agent.decide_action(monster, player) is phase_shift
        assert not agent.state.opening_move_used


class TestEnrage:

    def test_enrage_is_sticky(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC, 0.9, 0.9, enrage=True)
        hp_series(agent, monster, player, [20])
        assert agent.enraged
        assert agent.state.traits.aggression == 10
        assert agent.state.traits.caution == 1
        for _ in range(5):
            hp_series(agent, monster, player, [100])
            assert agent.enraged

    def test_threshold_is_inclusive(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC, enrage=True)
        hp_series(agent, monster, player, [25])
        assert agent.enraged

    def test_proc_returns_rage_pattern(self, make_agent, make_ctx, boss_catalog,
                                       monster, player, fury):
        agent = make_agent(Tier.BASIC, ctx=make_ctx(0.1, catalog=boss_catalog), enrage=True)
        monster.hp = 20
        assert agent.decide_action(monster, player) is fury
        assert agent.last_source == "rage"

    def test_proc_without_rage_pattern_falls_through(self, make_agent, monster, player,
                                                     defend, heal):
        agent = make_agent(Tier.BASIC, 0.1, enrage=True)
        monster.hp = 20
        assert agent.decide_action(monster, player) in (defend, heal)
        assert agent.last_source == "tier"

    def test_no_proc_when_roll_misses(self, make_agent, make_ctx, boss_catalog,
                                      monster, player, fury):
        agent = make_agent(Tier.BASIC, ctx=make_ctx(0.3, 0.1, catalog=boss_catalog),
                           enrage=True)
        monster.hp = 20
        assert agent.decide_action(monster, player) is not fury

    def test_not_configured(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC)
        hp_series(agent, monster, player, [5])
        assert not agent.enraged

    def test_force_enrage(self, make_agent):
        agent = make_agent(Tier.BASIC)
        agent.force_enrage()
        assert agent.enraged
        assert agent.state.traits.aggression == 10


class TestPersonalityStep:

    def test_personality_swap_is_reported(self, make_agent, make_ctx, combatant_factory,
                                          player, attack, defend):
        ctx = make_ctx(catalog=PatternCatalog([attack, defend]))
        agent = make_agent(Tier.BASIC, ctx=ctx, personality=Personality.AGGRESSIVE)
        hurt = combatant_factory("goblin", hp=25)
        assert agent.decide_action(hurt, player) is attack
        assert agent.last_source == "personality"

    def test_set_personality(self, make_agent):
        agent = make_agent(Tier.BASIC)
        agent.set_personality("chaotic")
        assert agent.personality == Personality.CHAOTIC


class TestIntentCache:

    def test_decision_is_cached(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC, 0.1)
        pick = agent.decide_action(monster, player)
        assert agent.current_intent is pick
        assert agent.ctx.selector.get_cached_intent("goblin") is pick

    def test_reset_for_combat(self, make_agent, monster, player):
        agent = make_agent(Tier.BASIC, enrage=True, opening=True, thresholds=(0.5,))
        hp_series(agent, monster, player, [100, 20, 20])
        agent.reset_for_combat()
        assert agent.turn_count == 0
        assert agent.phase == 0
        assert not agent.enraged
        assert not agent.state.opening_move_used
        assert agent.current_intent is None
        assert agent.ctx.selector.get_cached_intent("goblin") is None
        assert agent.state.traits.aggression == 5


class TestHooks:

    def test_heavy_hit_raises_aggression(self, make_agent):
        agent = make_agent(Tier.BASIC, personality=Personality.AGGRESSIVE)
        agent.on_health_changed(100, 70, 100)
        assert agent.state.traits.aggression == 6
        agent.on_health_changed(70, 60, 100)
        assert agent.state.traits.aggression == 6

    def test_heavy_hit_raises_caution(self, make_agent):
        agent = make_agent(Tier.BASIC, personality=Personality.DEFENSIVE)
        agent.on_health_changed(100, 50, 100)
        assert agent.state.traits.caution == 6
        assert agent.state.traits.aggression == 5

    def test_healing_is_ignored(self, make_agent):
        agent = make_agent(Tier.BASIC, personality=Personality.AGGRESSIVE)
        agent.on_health_changed(10, 90, 100)
        assert agent.state.traits.aggression == 5

    def test_modify_characteristics_clamps(self, make_agent):
        agent = make_agent(Tier.BASIC)
        agent.modify_characteristics(aggression=20, caution=-20, intelligence=1)
        assert agent.state.traits.as_dict() == {
            "aggression": 10, "caution": 1, "intelligence": 6,
        }

    def test_snapshot(self, make_agent, monster, player):
        agent = make_agent(Tier.ELITE, 0.1)
        agent.decide_action(monster, player)
        snap = agent.snapshot()
        assert snap["identity"] == "goblin"
        assert snap["tier"] == "ELITE"
        assert snap["turn_count"] == 1
        assert snap["intent"] == "Slash"


class TestCatalogFallbacks:

    def test_no_catalog_uses_fallback_patterns(self, monster, player, caplog):
        ctx = AiContext(catalog=None)
        agent = MonsterAgent("goblin", Tier.BASIC, ctx=ctx)
        with caplog.at_level(logging.WARNING):
            pick = agent.decide_action(monster, player)
        assert pick in FALLBACK_PATTERNS
        assert "fallback patterns" in caplog.text

    def test_broken_catalog_uses_fallback_patterns(self, monster, player, caplog):
        class BrokenCatalog:
            def query(self, monster_type):
                raise CatalogUnavailableError("offline")

            def all_patterns(self):
                raise CatalogUnavailableError("offline")

        agent = MonsterAgent("goblin", Tier.ELITE, ctx=AiContext(catalog=BrokenCatalog()))
        with caplog.at_level(logging.WARNING):
            assert agent.decide_action(monster, player) in FALLBACK_PATTERNS
        assert "unavailable" in caplog.text

    @pytest.mark.parametrize("error", [OSError("disk gone"), KeyError("Goblin")])
    def test_backend_errors_use_fallback_patterns(self, monster, player, caplog, error):
        class FlakyCatalog:
            def query(self, monster_type):
                raise error

            def all_patterns(self):
                raise error

        agent = MonsterAgent("goblin", Tier.BOSS, ctx=AiContext(catalog=FlakyCatalog()))
        with caplog.at_level(logging.WARNING):
            assert agent.decide_action(monster, player) in FALLBACK_PATTERNS
        assert "unavailable" in caplog.text

    def test_other_catalog_errors_propagate(self, monster, player):
        class BuggyCatalog:
            def query(self, monster_type):
                raise ZeroDivisionError("bug")

        agent = MonsterAgent("goblin", Tier.BASIC, ctx=AiContext(catalog=BuggyCatalog()))
        with pytest.raises(ZeroDivisionError):
            agent.decide_action(monster, player)

    def test_unknown_monster_type_uses_generic_subset(
            self, make_agent, combatant_factory, player, goblin_patterns, caplog):
        agent = make_agent(Tier.BASIC, 0.95)
        stranger = combatant_factory("bat", monster_type="Bat")
        with caplog.at_level(logging.WARNING):
            pick = agent.decide_action(stranger, player)
        assert pick in goblin_patterns[:3]
        assert "generic" in caplog.text

    def test_empty_catalog_skips_turn(self, make_agent, make_ctx, monster, player):
        agent = make_agent(Tier.BASIC, ctx=make_ctx(catalog=PatternCatalog()))
        assert agent.decide_action(monster, player) is None
        assert agent.turn_count == 1
        assert agent.current_intent is None
