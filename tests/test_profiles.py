"""Tests for tiers, personalities, traits and tier profiles."""

import logging
import random

import pytest

from monster_ai.enrage_mode import EnrageConfig, EnrageMode
from monster_ai.phase_system import PhaseConfig, PhaseSystem
from monster_ai.profiles import (
    AgentTraits, Personality, Tier, TierProfile, build_profile,
)


class TestTierCoerce:

    @pytest.mark.parametrize("value, expected", [
        (Tier.BOSS, Tier.BOSS),
        (2, Tier.MINI_BOSS),
        ("elite", Tier.ELITE),
        ("mini-boss", Tier.MINI_BOSS),
        ("Mini Boss", Tier.MINI_BOSS),
    ])
    def test_known_values(self, value, expected):
        assert Tier.coerce(value) == expected

    @pytest.mark.parametrize("value", ["dragon", 17, None, 2.5])
    def test_unknown_values_become_basic(self, value, caplog):
        with caplog.at_level(logging.WARNING):
            assert Tier.coerce(value) == Tier.BASIC
        assert "Unknown tier" in caplog.text

    def test_personality_coerce(self):
        assert Personality.coerce("strategic") == Personality.STRATEGIC
        assert Personality.coerce(4) == Personality.CHAOTIC
        assert Personality.coerce("grumpy") == Personality.BALANCED


class TestTraits:

    def test_clamped_on_creation(self):
        traits = AgentTraits(aggression=15, caution=0, intelligence=5)
        assert traits.as_dict() == {"aggression": 10, "caution": 1, "intelligence": 5}

    def test_phase_escalation(self):
        traits = AgentTraits(5, 5, 5)
        traits.escalate_for_phase(1)
        assert traits.aggression == 5
        traits.escalate_for_phase(2)
        assert traits.aggression == 7
        traits.escalate_for_phase(3)
        assert (traits.aggression, traits.caution) == (10, 2)

    def test_enrage(self):
        traits = AgentTraits(3, 9, 5)
        traits.enrage()
        assert (traits.aggression, traits.caution) == (10, 1)


class TestBuildProfile:

    def test_basic(self):
        profile = build_profile(Tier.BASIC, random.Random(1))
        assert profile.personality == Personality.BALANCED
        assert not profile.has_opening_move
        assert not profile.has_phase_transitions
        assert not profile.has_enrage_mode

    def test_boss(self):
        profile = build_profile("BOSS", random.Random(1))
        assert profile.personality == Personality.STRATEGIC
        assert profile.has_opening_move
        assert profile.has_enrage_mode
        assert profile.phase_thresholds == (0.7, 0.4, 0.15)
        assert 7 <= profile.traits.aggression <= 9

    def test_mini_boss_personality_is_never_chaotic(self):
        for seed in range(30):
            profile = build_profile(Tier.MINI_BOSS, random.Random(seed))
            assert profile.personality != Personality.CHAOTIC
            assert profile.phase_thresholds == (0.6, 0.3)

    def test_elite_rolls_vary(self):
        profiles = [build_profile(Tier.ELITE, random.Random(s)) for s in range(40)]
        assert {p.has_opening_move for p in profiles} == {True, False}
        assert {p.has_enrage_mode for p in profiles} == {True, False}

    def test_same_seed_same_profile(self):
        a = build_profile(Tier.ELITE, random.Random(9))
        b = build_profile(Tier.ELITE, random.Random(9))
        assert a == b

    def test_personality_override(self):
        profile = build_profile(Tier.BOSS, random.Random(0), personality="chaotic")
        assert profile.personality == Personality.CHAOTIC

    def test_thresholds_sorted_descending(self):
        profile = TierProfile(phase_thresholds=(0.15, 0.7, 0.4))
        assert profile.phase_thresholds == (0.7, 0.4, 0.15)


class TestPhaseSystem:

    @pytest.fixture
    def phases(self):
        return PhaseSystem(PhaseConfig((0.7, 0.4, 0.15), enabled=True))

    @pytest.mark.parametrize("ratio, phase", [
        (1.0, 0), (0.71, 0), (0.70, 1), (0.41, 1), (0.40, 2), (0.15, 3), (0.0, 3),
    ])
    def test_phase_for(self, phases, ratio, phase):
        assert phases.phase_for(ratio) == phase

    def test_update_only_reports_increases(self, phases):
        transition = phases.update(0, 0.5)
        assert (transition.previous_phase, transition.phase) == (0, 1)
        assert phases.update(1, 0.5) is None
        assert phases.update(2, 0.9) is None
        assert phases.update(1, 0.1).is_final

    def test_disabled(self):
        assert PhaseSystem(PhaseConfig((0.5,))).update(0, 0.1) is None


class TestEnrageMode:

    def test_activation(self):
        enrage = EnrageMode(EnrageConfig(enabled=True))
        assert enrage.should_activate(False, 0.25)
        assert not enrage.should_activate(False, 0.26)
        assert not enrage.should_activate(True, 0.1)

    def test_disabled(self):
        assert not EnrageMode().should_activate(False, 0.0)

    def test_proc_needs_enraged(self, scripted_rng):
        enrage = EnrageMode(EnrageConfig(enabled=True))
        rng = scripted_rng(0.0)
        assert not enrage.should_proc(False, rng)
        assert rng.draws == 0
        assert enrage.should_proc(True, rng)
        assert not enrage.should_proc(True, scripted_rng(0.3))
