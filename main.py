"""
main.py - Entry point for the Monster AI decision engine.

Two modes:
- Demo battle (default): one monster vs. a dummy opponent, printing the
  monster's intent, phase and enrage state every turn.
- Simulation (--simulate N): N headless seeded matches with a summary
  and an optional decision chart.

Run:
    python main.py --tier BOSS --seed 3
    python main.py --simulate 50 --tier ELITE --personality AGGRESSIVE --plot chart.png
"""

import argparse
import logging
import sys

logger = logging.getLogger(__name__)

# ── Project imports ───────────────────────────────────────
from settings import VERSION, LOG_FORMAT, LOG_DATEFMT, LOG_LEVEL, SIM_MATCHES
from monster_ai.errors import CatalogUnavailableError
from monster_ai.profiles import Personality, Tier
from monster_ai.simulation_runner import SimulationConfig, SimulationRunner
from systems.pattern_catalog import default_catalog, load_catalog


# ══════════════════════════════════════════════════════════
#  CLI
# ══════════════════════════════════════════════════════════

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="monster-ai",
        description="Turn-based monster AI decision engine.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")
    parser.add_argument(
        "--simulate", type=int, metavar="N", default=0,
        help=f"run N headless matches (e.g. {SIM_MATCHES}) instead of one demo battle",
    )
    parser.add_argument(
        "--tier", default="BASIC", choices=[t.name for t in Tier],
        type=str.upper, help="monster tier",
    )
    parser.add_argument(
        "--personality", default=None, choices=[p.name for p in Personality],
        type=str.upper, help="force a personality (default: rolled from the tier)",
    )
    parser.add_argument("--seed", type=int, default=0, help="RNG seed")
    parser.add_argument("--catalog", metavar="PATH", help="JSON pattern catalog")
    parser.add_argument(
        "--monster-type", metavar="NAME",
        help="catalog monster type (default: the demo monster for the tier)",
    )
    parser.add_argument("--plot", metavar="PATH", help="save a decision chart")
    parser.add_argument(
        "--log-level", default=LOG_LEVEL,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"], type=str.upper,
    )
    return parser


def _load_catalog(path):
    if not path:
        return default_catalog()
    try:
        return load_catalog(path)
    except CatalogUnavailableError as exc:
        # The engine still runs on its fallback patterns
        logger.warning("Could not load catalog: %s", exc)
        return None


def run_demo(runner: SimulationRunner) -> None:
    """Play one verbose match and print the monster's decisions."""
    runner.cfg.matches = 1
    result = runner.run()[0]
    stats = runner.last_stats

    print(f"\n  {runner.cfg.tier.name} monster ({result.personality}) – seed {result.seed}")
    print("-" * 52)
    phase_turns = {turn: new for turn, _, new in stats.phase_transitions}
    for (turn, name, source), (_, ratio) in zip(stats.decisions, stats.health_history):
        marks = []
        if turn in phase_turns:
            marks.append(f"phase {phase_turns[turn]}")
        if stats.enrage_turn == turn:
            marks.append("ENRAGED")
        extra = f"  [{', '.join(marks)}]" if marks else ""
        print(f"  T{turn:<3d} hp {ratio:4.0%}  {name or '(skip)':<20} via {source}{extra}")
    print("-" * 52)
    print(f"  Winner: {result.winner} after {result.turns} turns")
    stats.print_summary()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=getattr(logging, args.log_level),
        format=LOG_FORMAT,
        datefmt=LOG_DATEFMT,
    )

    config = SimulationConfig(
        matches=max(1, args.simulate),
        tier=Tier[args.tier],
        personality=args.personality,
        seed=args.seed,
        monster_type=args.monster_type,
    )
    runner = SimulationRunner(
        config, catalog=_load_catalog(args.catalog), demo_catalog=not args.catalog,
    )

    if args.simulate > 0:
        logger.info("Simulating %d matches (tier=%s seed=%d)", args.simulate, args.tier, args.seed)
        runner.run()
        runner.print_summary()
    else:
        run_demo(runner)

    if args.plot and runner.last_stats is not None:
        runner.last_stats.plot_distribution(args.plot)
    return 0


# ── Run ───────────────────────────────────────────────────
if __name__ == "__main__":
    sys.exit(main())
