"""
context.py – Explicit engine context passed into every decision.

AiContext replaces global managers: it carries the pattern catalog handle,
the single RNG every decision draws from, the tag matcher and the shared
IntentSelector.  Seeding the RNG reproduces a whole combat's decisions.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field

from entities.pattern import Pattern
from monster_ai.errors import CatalogUnavailableError
from monster_ai.intent_selector import IntentSelector
from monster_ai.tag_matcher import TagMatcher
from settings import GENERIC_SUBSET_SIZE
from systems.pattern_catalog import FALLBACK_PATTERNS

logger = logging.getLogger(__name__)


@dataclass
class AiContext:
    """Catalog + RNG + matcher + selector shared by all agents of a combat."""

    catalog: object = None
    rng: random.Random = field(default_factory=random.Random)
    matcher: TagMatcher = field(default_factory=TagMatcher)
    selector: IntentSelector = None

    def __post_init__(self):
        if self.selector is None:
            self.selector = IntentSelector(matcher=self.matcher)

    @classmethod
    def seeded(cls, catalog, seed: int | None = None,
               case_sensitive: bool = True) -> "AiContext":
        return cls(
            catalog=catalog,
            rng=random.Random(seed),
            matcher=TagMatcher(case_sensitive=case_sensitive),
        )

    # ── Catalog access with fallbacks ─────────────────────

    def patterns_for(self, monster_type: str) -> list[Pattern]:
        """Tier/identity-specific patterns, degrading instead of failing.

        catalog.query → first GENERIC_SUBSET_SIZE catalog-wide patterns →
        hardcoded attack/defend pair when the catalog is unusable.  A
        catalog backend that raises OSError or LookupError counts as
        unusable, same as CatalogUnavailableError.
        """
        if self.catalog is None:
            logger.warning("No pattern catalog configured – using fallback patterns")
            return list(FALLBACK_PATTERNS)

        try:
            patterns = list(self.catalog.query(monster_type))
            if patterns:
                return patterns
            logger.warning(
                "Catalog has no patterns for %r – using generic subset", monster_type,
            )
            patterns = list(self.catalog.all_patterns())[:GENERIC_SUBSET_SIZE]
        except (CatalogUnavailableError, OSError, LookupError) as exc:
            logger.warning("Pattern catalog unavailable (%s) – using fallback patterns", exc)
            return list(FALLBACK_PATTERNS)

        if not patterns:
            logger.warning("Pattern catalog is empty – nothing to choose from")
        return patterns
