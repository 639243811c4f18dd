"""
stats.py – Per-agent decision statistics.

DecisionStats collects what one MonsterAgent decided during a combat:
every chosen pattern with the step that produced it, the health curve,
phase transitions and the enrage turn.  At the end it can print a summary
and save a chart (pattern distribution + health trend) via matplotlib.
"""

import logging
from collections import Counter

logger = logging.getLogger(__name__)

import matplotlib
matplotlib.use("Agg")  # headless: charts are only ever written to disk
import matplotlib.pyplot as plt

from settings import SIM_PLOT_FILE


class DecisionStats:
    """Tracks decisions for one agent.

    Attributes tracked:
        decisions          – list[(turn, pattern name | None, source)]
        health_history     – list[(turn, health ratio)]
        phase_transitions  – list[(turn, old phase, new phase)]
        enrage_turn        – int | None
        skipped_turns      – int  (decisions that returned None)
    """

    def __init__(self, identity: str, tier: str = "", personality: str = ""):
        self.identity = identity
        self.tier = tier
        self.personality = personality

        self.decisions: list[tuple[int, str | None, str]] = []
        self.health_history: list[tuple[int, float]] = []
        self.phase_transitions: list[tuple[int, int, int]] = []
        self.enrage_turn: int | None = None
        self.skipped_turns: int = 0

    @classmethod
    def for_agent(cls, agent) -> "DecisionStats":
        return cls(agent.identity, agent.tier.name, agent.personality.name)

    # ===========================================================
    #  Recorders
    # ===========================================================

    def record_decision(self, turn: int, pattern, source: str):
        name = pattern.name if pattern is not None else None
        if name is None:
            self.skipped_turns += 1
        self.decisions.append((turn, name, source))

    def record_health(self, turn: int, health_ratio: float):
        self.health_history.append((turn, health_ratio))

    def record_phase(self, turn: int, old_phase: int, new_phase: int):
        self.phase_transitions.append((turn, old_phase, new_phase))

    def record_enrage(self, turn: int):
        if self.enrage_turn is None:
            self.enrage_turn = turn

    def observe_agent(self, agent):
        """Record the agent's latest decision straight from its snapshot."""
        snap = agent.snapshot()
        turn = snap["turn_count"]
        self.record_decision(turn, agent.current_intent, snap["last_source"])
        self.record_health(turn, snap["health_ratio"])
        if snap["enraged"]:
            self.record_enrage(turn)

    # ===========================================================
    #  Reports
    # ===========================================================

    def pattern_counts(self) -> Counter:
        return Counter(name for _, name, _ in self.decisions if name is not None)

    def source_counts(self) -> Counter:
        return Counter(source for _, _, source in self.decisions)

    def summary(self) -> dict:
        return {
            "identity": self.identity,
            "tier": self.tier,
            "personality": self.personality,
            "turns": len(self.decisions),
            "skipped_turns": self.skipped_turns,
            "patterns": dict(self.pattern_counts()),
            "sources": dict(self.source_counts()),
            "phase_transitions": list(self.phase_transitions),
            "enrage_turn": self.enrage_turn,
        }

    def print_summary(self):
        s = self.summary()
        print("\n" + "=" * 52)
        print(f"  DECISIONS – {self.identity} ({self.tier}, {self.personality})")
        print("=" * 52)
        print(f"  Turns            : {s['turns']}  (skipped {s['skipped_turns']})")
        print(f"  Enraged on turn  : {s['enrage_turn'] or '-'}")
        print(f"  Phase changes    : {s['phase_transitions'] or '-'}")
        print("-" * 52)
        for name, count in self.pattern_counts().most_common():
            print(f"  {name:<24}: {count}")
        print("-" * 52)
        for source, count in self.source_counts().most_common():
            print(f"  via {source:<20}: {count}")
        print("=" * 52 + "\n")

    def plot_distribution(self, path: str = SIM_PLOT_FILE) -> str | None:
        """Save a pattern-distribution + health-trend chart; returns the path."""
        counts = self.pattern_counts()
        if not counts:
            logger.info("No decisions recorded for %s – nothing to plot", self.identity)
            return None

        names, values = zip(*counts.most_common())
        fig, (ax_bar, ax_hp) = plt.subplots(1, 2, figsize=(11, 4))

        ax_bar.bar(names, values)
        ax_bar.set_title(f"Pattern choices – {self.identity}")
        ax_bar.set_ylabel("Times chosen")
        ax_bar.tick_params(axis="x", labelrotation=45)

        if self.health_history:
            turns, ratios = zip(*self.health_history)
            ax_hp.plot(turns, ratios, marker="o")
        for turn, _, new_phase in self.phase_transitions:
            ax_hp.axvline(turn, linestyle="--", color="orange")
            ax_hp.annotate(f"P{new_phase}", (turn, 1.0))
        if self.enrage_turn is not None:
            ax_hp.axvline(self.enrage_turn, color="red")
        ax_hp.set_ylim(0, 1.05)
        ax_hp.set_xlabel("Turn")
        ax_hp.set_ylabel("Health ratio")
        ax_hp.set_title("Health trend")
        ax_hp.grid(True)

        fig.savefig(path, dpi=100, bbox_inches="tight")
        plt.close(fig)
        logger.info("Decision chart saved to %s", path)
        return path

    def as_dict(self) -> dict:
        data = self.summary()
        data["decisions"] = list(self.decisions)
        data["health_history"] = [(t, round(r, 3)) for t, r in self.health_history]
        return data
