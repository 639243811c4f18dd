"""
pattern_catalog.py – In-memory pattern catalog.

The AI engine never owns patterns; it asks the catalog for the patterns a
monster type may use.  Patterns are registered per monster type (the
Pattern's own ``monster_type``) and optionally per tier.

Loading:
    catalog = load_catalog("patterns.json")      # list of pattern rows
    catalog = PatternCatalog.from_dicts(rows)
    catalog = default_catalog()                  # small built-in demo set

A catalog that cannot be read raises CatalogUnavailableError; the engine
then falls back to FALLBACK_PATTERNS (one generic attack, one defense).
"""

from __future__ import annotations

import json
import logging
import os
from collections import defaultdict

from entities.pattern import Pattern
from monster_ai.errors import CatalogUnavailableError
from monster_ai.profiles import Tier
from settings import GENERIC_SUBSET_SIZE

logger = logging.getLogger(__name__)


# Used when the catalog is missing or broken
FALLBACK_PATTERNS: tuple[Pattern, ...] = (
    Pattern(id=-1, name="Basic Attack", description="A plain attack.",
            intent="attack", attack_bonus=3),
    Pattern(id=-2, name="Basic Defense", description="Braces for impact.",
            intent="defend", defense_bonus=3),
)


class PatternCatalog:
    """Patterns indexed by monster type and tier.

    Usage:
        catalog = PatternCatalog()
        catalog.register(Pattern(1, "Bite", intent="attack", monster_type="Wolf"))
        catalog.query("Wolf")
    """

    def __init__(self, patterns=()):
        self._patterns: list[Pattern] = []
        self._by_type: dict[str, list[Pattern]] = defaultdict(list)
        self._by_tier: dict[Tier, list[Pattern]] = defaultdict(list)
        for pattern in patterns:
            self.register(pattern)

    def __len__(self) -> int:
        return len(self._patterns)

    # ── Registration ──────────────────────────────────────

    def register(self, pattern: Pattern, tier=None):
        self._patterns.append(pattern)
        if pattern.monster_type:
            self._by_type[pattern.monster_type].append(pattern)
        if tier is not None:
            self._by_tier[Tier.coerce(tier)].append(pattern)

    # ── Queries ───────────────────────────────────────────

    def all_patterns(self) -> list[Pattern]:
        return list(self._patterns)

    def query(self, monster_type: str) -> list[Pattern]:
        """Patterns for *monster_type*; a generic subset if it has none."""
        patterns = self._by_type.get(monster_type)
        if patterns:
            return list(patterns)
        return self._generic_subset("monster type %r" % monster_type)

    def query_by_tier(self, tier) -> list[Pattern]:
        tier = Tier.coerce(tier)
        patterns = self._by_tier.get(tier)
        if patterns:
            return list(patterns)
        return self._generic_subset("tier %s" % tier.name)

    def _generic_subset(self, what: str) -> list[Pattern]:
        subset = self._patterns[:GENERIC_SUBSET_SIZE]
        logger.warning(
            "No patterns registered for %s – using %d generic patterns", what, len(subset),
        )
        return subset

    # ── Construction ──────────────────────────────────────

    @classmethod
    def from_dicts(cls, rows) -> "PatternCatalog":
        """Build a catalog from JSON-style rows.

        A row may carry a ``tier`` key (name or number) next to the
        Pattern fields.
        """
        catalog = cls()
        try:
            for row in rows:
                catalog.register(Pattern.from_dict(row), tier=row.get("tier"))
        except (KeyError, TypeError, ValueError, AttributeError) as exc:
            raise CatalogUnavailableError(f"malformed pattern row: {exc!r}") from exc
        logger.info("Pattern catalog loaded: %d patterns", len(catalog))
        return catalog


def load_catalog(path: str) -> PatternCatalog:
    """Load a catalog from a JSON file holding a list of pattern rows
    (or ``{"patterns": [...]}``)."""
    if not os.path.isfile(path):
        raise CatalogUnavailableError(f"catalog file not found: {path}")
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (json.JSONDecodeError, OSError) as exc:
        raise CatalogUnavailableError(f"cannot read catalog {path}: {exc}") from exc

    if isinstance(data, dict):
        data = data.get("patterns", [])
    if not isinstance(data, list):
        raise CatalogUnavailableError(f"catalog {path} is not a list of patterns")
    return PatternCatalog.from_dicts(data)


# ══════════════════════════════════════════════════════════
#  Built-in demo catalog
# ══════════════════════════════════════════════════════════

_DEMO_ROWS = [
    # Slime (basic)
    {"id": 1, "name": "Tackle", "intent": "attack", "attack_bonus": 4,
     "monster_type": "Slime", "tier": "BASIC"},
    {"id": 2, "name": "Harden", "intent": "defend", "defense_bonus": 4,
     "monster_type": "Slime", "tier": "BASIC"},
    {"id": 3, "name": "Ooze", "intent": "heal", "defense_bonus": 2,
     "monster_type": "Slime", "tier": "BASIC"},

    # Knight (elite)
    {"id": 10, "name": "Slash", "intent": "attack strike", "attack_bonus": 6,
     "monster_type": "Knight", "tier": "ELITE"},
    {"id": 11, "name": "Shield Wall", "intent": "defend protect", "defense_bonus": 6,
     "monster_type": "Knight", "tier": "ELITE"},
    {"id": 12, "name": "Rending Cut", "intent": "attack bleed", "attack_bonus": 3,
     "status_effects": [{"kind": "bleed", "magnitude": 2, "duration": 3}],
     "monster_type": "Knight", "tier": "ELITE"},
    {"id": 13, "name": "War Cry", "intent": "special buff", "defense_bonus": 3,
     "monster_type": "Knight", "tier": "ELITE"},
    {"id": 14, "name": "Berserk Fury", "intent": "attack rage", "attack_bonus": 9,
     "monster_type": "Knight", "tier": "ELITE"},

    # Warden (mini-boss)
    {"id": 20, "name": "Grand Entrance", "intent": "opening special", "defense_bonus": 5,
     "monster_type": "Warden", "tier": "MINI_BOSS"},
    {"id": 21, "name": "Crushing Blow", "intent": "attack", "attack_bonus": 9,
     "monster_type": "Warden", "tier": "MINI_BOSS"},
    {"id": 22, "name": "Jab", "intent": "attack strike", "attack_bonus": 5,
     "monster_type": "Warden", "tier": "MINI_BOSS"},
    {"id": 23, "name": "Toxic Cloud", "intent": "status poison",
     "status_effects": [{"kind": "poison", "magnitude": 3, "duration": 3}],
     "monster_type": "Warden", "tier": "MINI_BOSS"},
    {"id": 24, "name": "Iron Stance", "intent": "defend protect", "defense_bonus": 7,
     "monster_type": "Warden", "tier": "MINI_BOSS"},
    {"id": 25, "name": "Phase Shift", "intent": "phase transition", "defense_bonus": 8,
     "monster_type": "Warden", "tier": "MINI_BOSS"},

    # Shade (boss)
    {"id": 30, "name": "Dark Entrance", "intent": "entrance", "defense_bonus": 6,
     "monster_type": "Shade", "tier": "BOSS"},
    {"id": 31, "name": "Shadow Bolt", "intent": "attack strike", "attack_bonus": 8,
     "monster_type": "Shade", "tier": "BOSS"},
    {"id": 32, "name": "Annihilate", "intent": "attack", "attack_bonus": 12,
     "ignore_defense": True, "monster_type": "Shade", "tier": "BOSS"},
    {"id": 33, "name": "Curse of Silence", "intent": "status curse seal",
     "status_effects": [{"kind": "seal", "magnitude": 1, "duration": 2}],
     "monster_type": "Shade", "tier": "BOSS"},
    {"id": 34, "name": "Veil", "intent": "defend protect", "defense_bonus": 8,
     "monster_type": "Shade", "tier": "BOSS"},
    {"id": 35, "name": "Eclipse", "intent": "phase change special buff", "defense_bonus": 10,
     "monster_type": "Shade", "tier": "BOSS"},
    {"id": 36, "name": "Despair", "intent": "attack despair", "attack_bonus": 10,
     "attack_count": 2, "monster_type": "Shade", "tier": "BOSS"},
]

# Monster type used by the demo catalog for each tier
DEMO_MONSTERS = {
    Tier.BASIC: "Slime",
    Tier.ELITE: "Knight",
    Tier.MINI_BOSS: "Warden",
    Tier.BOSS: "Shade",
}


def default_catalog() -> PatternCatalog:
    return PatternCatalog.from_dicts(_DEMO_ROWS)
